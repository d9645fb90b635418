#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""GLPK solver interface for LP"""

from scipy import sparse
from numpy import nan, inf, isinf
from fastcc.names import *
from typing import Tuple, List
from swiglpk import *
import logging


class GLPK_LP():
    """GLPK backend of fastcc.LP
    
    Builds the problem through the swiglpk bindings and solves it with the primal
    simplex. GLPK counts rows and columns from 1, all functions of this class take
    and return 0-based indices.
    
    Example: 
        glpk = GLPK_LP(c, A_ineq, b_ineq, A_eq, b_eq, lb, ub)
                
    Args:
        c (list of float):
            Objective coefficients (minimized).
            
        A_ineq, b_ineq (sparse.csr_matrix, list of float):
            Inequalities A_ineq * x <= b_ineq.
            
        A_eq, b_eq (sparse.csr_matrix, list of float):
            Equalities A_eq * x = b_eq.
            
        lb, ub (list of float):
            Variable bounds.
    """

    def __init__(self, c, A_ineq, b_ineq, A_eq, b_eq, lb, ub):
        self.glpk = glp_create_prob()
        # Careful with indexing! GLPK indexing starts with 1 and not with 0
        numvars = len(c)

        # add variables and set bounds
        if numvars > 0:
            glp_add_cols(self.glpk, numvars)
        for i in range(numvars):
            glp_set_col_kind(self.glpk, i + 1, GLP_CV)
            self._set_col_bnds(i, float(lb[i]), float(ub[i]))

        # set objective
        glp_set_obj_dir(self.glpk, GLP_MIN)
        for i, c_i in enumerate(c):
            glp_set_obj_coef(self.glpk, i + 1, float(c_i))

        # stack all problem rows and add constraints
        if A_ineq.shape[0] + A_eq.shape[0] > 0:
            glp_add_rows(self.glpk, A_ineq.shape[0] + A_eq.shape[0])
            eq_type = [GLP_UP] * len(b_ineq) + [GLP_FX] * len(b_eq)
            for i, t, b in zip(range(len(b_ineq + b_eq)), eq_type, b_ineq + b_eq):
                if t == GLP_UP and isinf(b):
                    t = GLP_FR
                glp_set_row_bnds(self.glpk, i + 1, t, float(b), float(b))

            A = sparse.vstack((A_ineq, A_eq), 'coo')
            ia = intArray(A.nnz + 1)
            ja = intArray(A.nnz + 1)
            ar = doubleArray(A.nnz + 1)
            for i, row, col, data in zip(range(A.nnz), A.row, A.col, A.data):
                ia[i + 1] = int(row) + 1
                ja[i + 1] = int(col) + 1
                ar[i + 1] = float(data)
            if A.nnz:
                glp_load_matrix(self.glpk, A.nnz, ia, ja, ar)

        # LP simplex parameters
        self.lp_params = glp_smcp()
        glp_init_smcp(self.lp_params)
        self.max_tlim = self.lp_params.tm_lim
        self.lp_params.tol_bnd = 1e-9
        self.lp_params.msg_lev = 0

    def _set_col_bnds(self, i, l, u):
        """Set the bounds of the variable with index i and pick the matching GLPK bound type"""
        if isinf(l) and isinf(u):
            glp_set_col_bnds(self.glpk, i + 1, GLP_FR, l, u)
        elif not isinf(l) and isinf(u):
            glp_set_col_bnds(self.glpk, i + 1, GLP_LO, l, u)
        elif isinf(l) and not isinf(u):
            glp_set_col_bnds(self.glpk, i + 1, GLP_UP, l, u)
        elif l < u:
            glp_set_col_bnds(self.glpk, i + 1, GLP_DB, l, u)
        elif l == u:
            glp_set_col_bnds(self.glpk, i + 1, GLP_FX, l, u)
        else:
            raise ValueError('Lower bound ' + str(l) + ' exceeds upper bound ' + str(u) + ' of variable ' + str(i) + '.')

    def solve(self) -> Tuple[List, float, float]:
        """Solve the LP and return (x, min_cx, status)"""
        min_cx, status, bool_tlim = self.solve_LP()
        numvars = glp_get_num_cols(self.glpk)
        if status == GLP_OPT or (status == GLP_FEAS and not bool_tlim):  # solution
            status = OPTIMAL
        elif status == GLP_FEAS:  # timeout with solution
            status = TIME_LIMIT_W_SOL
        elif bool_tlim and status == GLP_UNDEF:  # timeout without solution
            return [nan] * numvars, nan, TIME_LIMIT
        elif status in [GLP_INFEAS, GLP_NOFEAS]:  # infeasible
            return [nan] * numvars, nan, INFEASIBLE
        elif status in [GLP_UNBND, GLP_UNDEF]:  # solution unbounded
            return [nan] * numvars, -inf, UNBOUNDED
        else:
            raise Exception('Status code ' + str(status) + " not yet handeld.")
        x = self.getSolution()
        x = [round(y, 12) for y in x]  # workaround, round to 12 decimals
        min_cx = round(min_cx, 12)
        return x, min_cx, status

    def slim_solve(self) -> float:
        """Solve the LP and return only the objective value"""
        opt, status, bool_tlim = self.solve_LP()
        if status in [GLP_OPT, GLP_FEAS]:
            pass
        elif status in [GLP_UNBND, GLP_UNDEF]:  # solution unbounded (or inf or unbdd)
            opt = -inf
        elif bool_tlim or status in [GLP_INFEAS, GLP_NOFEAS]:  # infeasible or timeout
            opt = nan
        else:
            raise Exception('Status code ' + str(status) + " not yet handeld.")
        return round(opt, 12)

    def set_objective(self, c):
        """Set the objective function with a vector"""
        for i, c_i in enumerate(c):
            glp_set_obj_coef(self.glpk, i + 1, float(c_i))

    def set_objective_idx(self, C):
        """Set the objective function with index-value pairs
        
        e.g.: C=[[1, 1.0], [4,-0.2]]"""
        for c in C:
            glp_set_obj_coef(self.glpk, c[0] + 1, float(c[1]))

    def set_lb(self, lb):
        """Set the lower bounds with index-value pairs
        
        e.g.: lb=[[1, 0.0], [4,-10.0]]"""
        for i, l in lb:
            self._set_col_bnds(i, float(l), glp_get_col_ub(self.glpk, i + 1))

    def set_ub(self, ub):
        """Set the upper bounds with index-value pairs
        
        e.g.: ub=[[1, 10.0], [4, 0.0]]"""
        for i, u in ub:
            self._set_col_bnds(i, glp_get_col_lb(self.glpk, i + 1), float(u))

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        if t * 1000 > self.max_tlim:
            self.lp_params.tm_lim = self.max_tlim
        else:
            self.lp_params.tm_lim = int(t * 1000)

    def add_ineq_constraints(self, A_ineq, b_ineq):
        """Append rows A_ineq * x <= b_ineq"""
        numrows = glp_get_num_rows(self.glpk)
        self._add_rows(A_ineq)
        for j, b in enumerate(b_ineq):
            if isinf(b):
                glp_set_row_bnds(self.glpk, numrows + j + 1, GLP_FR, -inf, float(b))
            else:
                glp_set_row_bnds(self.glpk, numrows + j + 1, GLP_UP, -inf, float(b))

    def add_eq_constraints(self, A_eq, b_eq):
        """Append rows A_eq * x = b_eq"""
        numrows = glp_get_num_rows(self.glpk)
        self._add_rows(A_eq)
        for j, b in enumerate(b_eq):
            glp_set_row_bnds(self.glpk, numrows + j + 1, GLP_FX, float(b), float(b))

    def _add_rows(self, A):
        """Append the rows of a sparse matrix to the GLPK problem"""
        numrows = glp_get_num_rows(self.glpk)
        A = sparse.csr_matrix(A)
        glp_add_rows(self.glpk, A.shape[0])
        for j in range(A.shape[0]):
            row = A[j]
            col = intArray(row.nnz + 1)
            val = doubleArray(row.nnz + 1)
            for k, (i, v) in enumerate(zip(row.indices, row.data)):
                col[k + 1] = int(i) + 1
                val[k + 1] = float(v)
            glp_set_mat_row(self.glpk, numrows + j + 1, row.nnz, col, val)

    def getSolution(self) -> list:
        """Retrieve solution from GLPK backend"""
        return [glp_get_col_prim(self.glpk, i + 1) for i in range(glp_get_num_cols(self.glpk))]

    def solve_LP(self) -> Tuple[float, int, bool]:
        """Trigger GLPK solution through backend"""
        starttime = glp_time()
        prelim_status = glp_simplex(self.glpk, self.lp_params)
        # There is a GLPK bug where feasible LPs fail initialy but can complete when presolved
        # in these cases, glp_simplex returns GLP_EFAIL. We capture these cases and solve again
        # with prior resolve.
        if prelim_status == GLP_EFAIL:
            logging.debug('GLPK simplex failed, retrying with presolver.')
            self.lp_params.presolve = 1
            self.lp_params.meth = 3
            prelim_status = glp_simplex(self.glpk, self.lp_params)
            self.lp_params.presolve = 0
            self.lp_params.meth = 1
        status = glp_get_status(self.glpk)
        opt = glp_get_obj_val(self.glpk)
        timelim_reached = glp_difftime(glp_time(), starttime) * 1000 >= self.lp_params.tm_lim
        return opt, status, timelim_reached
