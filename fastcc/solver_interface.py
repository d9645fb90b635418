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
"""Unified solver interface for LPs (LP)"""

from numpy import inf
from scipy import sparse
from typing import List, Tuple
from fastcc import avail_solvers
from fastcc.names import *
import logging


class LP(object):
    """Unified LP interface
    
    Wraps the GLPK, CPLEX, Gurobi and SCIP backends behind one set of functions, so
    that flux LPs can be built from matrices and vectors and modified between solves
    without knowing which solver is installed.
    
    The problem always has the form:
        minimize    c*x
        subject to  A_ineq * x <= b_ineq,
                    A_eq * x = b_eq,
                    lb <= x <= ub
        
    Example: 
        lp = LP(c=c, A_eq=S, b_eq=[0]*S.shape[0], lb=lb, ub=ub, solver='glpk')
                
    Args:
        c (list of float): (Default: zeros)
            Objective coefficients (minimized).
            
        A_ineq, b_ineq (sparse.csr_matrix, list of float): (Default: no inequalities)
            Coefficients and right hand sides of the inequalities.
            
        A_eq, b_eq (sparse.csr_matrix, list of float): (Default: no equalities)
            Coefficients and right hand sides of the equalities. For flux LPs these
            are the stoichiometric matrix and a zero vector.
            
        lb, ub (list of float): (Default: unbounded)
            Variable bounds.
            
        solver (str): (Default: first of the installed solvers)
            'glpk', 'cplex', 'gurobi' or 'scip'

        skip_checks (bool): (Default: False)
            Skip the consistency checks of all dimensions.
        
        tlim (float): (Default: inf)
            Time limit per solve in seconds.
            
    Returns:
        (LP):
            An LP that can be solved and modified.
    """

    def __init__(self, **kwargs):
        allowed_keys = {'c', 'A_ineq', 'b_ineq', 'A_eq', 'b_eq', 'lb', 'ub', 'solver', 'skip_checks', 'tlim'}
        for key in kwargs:
            if key not in allowed_keys:
                raise Exception("Key " + key + " is not supported.")
        for key in allowed_keys:
            setattr(self, key, kwargs.get(key))
        if self.solver is None:
            if not avail_solvers:
                raise Exception('No solver available. Please ensure that one of the following '\
                                'solvers is avaialable in your Python environment: CPLEX, Gurobi, SCIP, GLPK')
            self.solver = sorted(avail_solvers)[0]
        elif self.solver not in avail_solvers:
            raise Exception("Selected solver '" + self.solver + "' is not installed / set up correctly.")
        # the number of variables is taken from the first argument that carries it
        for arg in [self.A_ineq, self.A_eq]:
            if arg is not None:
                numvars = arg.shape[1]
                break
        else:
            numvars = len(self.c) if self.c is not None else 0
        if numvars == 0:
            logging.warning('LP has no variables.')
        defaults = {
            'c': [0.0] * numvars,
            'A_ineq': sparse.csr_matrix((0, numvars)),
            'b_ineq': [],
            'A_eq': sparse.csr_matrix((0, numvars)),
            'b_eq': [],
            'lb': [-inf] * numvars,
            'ub': [inf] * numvars
        }
        for key, value in defaults.items():
            if getattr(self, key) is None:
                setattr(self, key, value)
        if not self.skip_checks:
            self._check_dimensions(numvars)
        self.A_ineq = sparse.csr_matrix(self.A_ineq, dtype=float)
        self.A_eq = sparse.csr_matrix(self.A_eq, dtype=float)
        for key in ['c', 'b_ineq', 'b_eq', 'lb', 'ub']:
            setattr(self, key, [float(v) for v in getattr(self, key)])
        args = (self.c, self.A_ineq, self.b_ineq, self.A_eq, self.b_eq, self.lb, self.ub)
        if self.solver == CPLEX:
            from fastcc.cplex_interface import Cplex_LP
            self.backend = Cplex_LP(*args)
        elif self.solver == GUROBI:
            from fastcc.gurobi_interface import Gurobi_LP
            self.backend = Gurobi_LP(*args)
        elif self.solver == SCIP:
            from fastcc.scip_interface import SCIP_LP
            self.backend = SCIP_LP(*args)
        elif self.solver == GLPK:
            from fastcc.glpk_interface import GLPK_LP
            self.backend = GLPK_LP(*args)
        self.set_time_limit(inf if self.tlim is None else self.tlim)

    def _check_dimensions(self, numvars):
        if self.A_ineq.shape[0] != len(self.b_ineq):
            raise Exception("A_ineq and b_ineq must have the same number of rows/elements")
        if self.A_eq.shape[0] != len(self.b_eq):
            raise Exception("A_eq and b_eq must have the same number of rows/elements")
        for name in ['c', 'lb', 'ub']:
            if len(getattr(self, name)) != numvars:
                raise Exception(name + " must have " + str(numvars) + " elements, one per variable")
        for name in ['A_ineq', 'A_eq']:
            if getattr(self, name).shape[1] != numvars:
                raise Exception(name + " must have " + str(numvars) + " columns, one per variable")

    def solve(self) -> Tuple[List, float, float]:
        """Solve the LP
        
        Example:
            x, min_cx, status = lp.solve()
        
        Returns:
            (Tuple[List, float, float])
            
            solution vector, objective value, status ('optimal', 'infeasible', ...)
        """
        return self.backend.solve()

    def slim_solve(self) -> float:
        """Solve the LP and return only the objective value (nan if infeasible, -inf if unbounded)"""
        return self.backend.slim_solve()

    def set_objective(self, c):
        """Replace the objective vector"""
        self.c = [float(v) for v in c]
        self.backend.set_objective(self.c)

    def set_objective_idx(self, C):
        """Change single objective coefficients with index-value pairs
        
        e.g.: C=[[1, 1.0], [4,-0.2]]. If an index occurs more than once, the first pair counts."""
        pairs = {}
        for i, v in C:
            pairs.setdefault(int(i), float(v))
        C = [[i, v] for i, v in pairs.items()]
        for i, v in C:
            self.c[i] = v
        self.backend.set_objective_idx(C)

    def set_lb(self, lb):
        """Set lower bounds with index-value pairs
        
        e.g.: lb=[[1, 0.0], [4,-10.0]]"""
        for i, l in lb:
            if l > self.ub[i]:
                raise ValueError('Lower bound ' + str(l) + ' of variable ' + str(i) + ' exceeds its upper bound.')
            self.lb[i] = float(l)
        self.backend.set_lb(lb)

    def set_ub(self, ub):
        """Set upper bounds with index-value pairs
        
        e.g.: ub=[[1, 10.0], [4, 0.0]]"""
        for i, u in ub:
            if u < self.lb[i]:
                raise ValueError('Upper bound ' + str(u) + ' of variable ' + str(i) + ' is below its lower bound.')
            self.ub[i] = float(u)
        self.backend.set_ub(ub)

    def set_time_limit(self, t):
        """Set the time limit per solve (in seconds)"""
        self.tlim = t
        self.backend.set_time_limit(t)

    def add_ineq_constraints(self, A_ineq, b_ineq):
        """Append rows A_ineq * x <= b_ineq to the LP
        
        Args:
            A_ineq (sparse.csr_matrix):
                Coefficients, one column per variable.
                
            b_ineq (list of float):
                Right hand sides.
        """
        A_ineq = sparse.csr_matrix(A_ineq, dtype=float)
        A_ineq.eliminate_zeros()
        b_ineq = [float(b) for b in b_ineq]
        self.A_ineq = sparse.vstack((self.A_ineq, A_ineq), format='csr')
        self.b_ineq += b_ineq
        self.backend.add_ineq_constraints(A_ineq, b_ineq)

    def add_eq_constraints(self, A_eq, b_eq):
        """Append rows A_eq * x = b_eq to the LP
        
        Args:
            A_eq (sparse.csr_matrix):
                Coefficients, one column per variable.
                
            b_eq (list of float):
                Right hand sides.
        """
        A_eq = sparse.csr_matrix(A_eq, dtype=float)
        A_eq.eliminate_zeros()
        b_eq = [float(b) for b in b_eq]
        self.A_eq = sparse.vstack((self.A_eq, A_eq), format='csr')
        self.b_eq += b_eq
        self.backend.add_eq_constraints(A_eq, b_eq)
