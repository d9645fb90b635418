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
"""Gurobi solver interface for LP"""

from scipy import sparse
from numpy import nan, inf, isinf, array
import gurobipy as gp
from gurobipy import GRB as grb
from fastcc.names import *
from typing import Tuple, List
import logging

gstatus = gp.StatusConstClass


class Gurobi_LP(gp.Model):
    """Gurobi backend of fastcc.LP
    
    All flux variables are kept in a single MVar, so bounds and solutions are set and
    read as vectors. Solver output is switched off.
    
    Example: 
        gurobi = Gurobi_LP(c, A_ineq, b_ineq, A_eq, b_eq, lb, ub)
    """

    def __init__(self, c, A_ineq, b_ineq, A_eq, b_eq, lb, ub):
        super().__init__()
        b_ineq = [grb.INFINITY if isinf(v) else v for v in b_ineq]
        # construct Gurobi problem. Add variables and linear constraints
        self._x = self.addMVar(len(c), lb=lb, ub=ub)
        self.setObjective(array(c) @ self._x, grb.MINIMIZE)
        if A_ineq.shape[0]:
            self.addMConstr(sparse.csr_matrix(A_ineq), self._x, grb.LESS_EQUAL, array(b_ineq))
        if A_eq.shape[0]:
            self.addMConstr(sparse.csr_matrix(A_eq), self._x, grb.EQUAL, array(b_eq))
        # set parameters
        self.params.OutputFlag = 0
        self.params.OptimalityTol = 1e-9
        self.params.FeasibilityTol = 1e-9
        self.update()

    def solve(self) -> Tuple[List, float, float]:
        """Solve the LP and return (x, min_cx, status)"""
        try:
            self.optimize()
        except gp.GurobiError as e:
            logging.error('Error code ' + str(e.errno) + ": " + str(e))
            raise
        status = self.Status
        if status in [gstatus.OPTIMAL, gstatus.SUBOPTIMAL]:  # solution
            min_cx = self.ObjVal
            status = OPTIMAL
        elif status == gstatus.TIME_LIMIT and self.SolCount == 0:  # timeout without solution
            return [nan] * self.NumVars, nan, TIME_LIMIT
        elif status == gstatus.TIME_LIMIT:
            min_cx = self.ObjVal
            status = TIME_LIMIT_W_SOL
        elif status in [gstatus.INF_OR_UNBD, gstatus.UNBOUNDED, gstatus.INFEASIBLE]:
            # solve problem again without dual reductions to tell infeasible and unbounded apart
            self.params.DualReductions = 0
            self.optimize()
            self.params.DualReductions = 1
            if self.Status == gstatus.INFEASIBLE:
                return [nan] * self.NumVars, nan, INFEASIBLE
            else:
                return [nan] * self.NumVars, -inf, UNBOUNDED
        else:
            raise Exception('Status code ' + str(status) + " not yet handeld.")
        x = self.getSolution()
        return x, min_cx, status

    def slim_solve(self) -> float:
        """Solve the LP and return only the objective value"""
        _, opt, status = self.solve()
        if status == UNBOUNDED:
            return -inf
        return opt

    def set_objective(self, c):
        self.setObjective(array(c) @ self._x, grb.MINIMIZE)
        self.update()

    def set_objective_idx(self, C):
        for i, c_i in C:
            self._x[int(i)].Obj = float(c_i)
        self.update()

    def set_lb(self, lb):
        for i, l in lb:
            self._x[int(i)].LB = -grb.INFINITY if isinf(l) else float(l)
        self.update()

    def set_ub(self, ub):
        for i, u in ub:
            self._x[int(i)].UB = grb.INFINITY if isinf(u) else float(u)
        self.update()

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        if isinf(t):
            self.params.TimeLimit = grb.INFINITY
        else:
            self.params.TimeLimit = t

    def add_ineq_constraints(self, A_ineq, b_ineq):
        """Append rows A_ineq * x <= b_ineq"""
        b_ineq = [grb.INFINITY if isinf(v) else v for v in b_ineq]
        self.addMConstr(sparse.csr_matrix(A_ineq), self._x, grb.LESS_EQUAL, array(b_ineq))
        self.update()

    def add_eq_constraints(self, A_eq, b_eq):
        """Append rows A_eq * x = b_eq"""
        self.addMConstr(sparse.csr_matrix(A_eq), self._x, grb.EQUAL, array(b_eq))
        self.update()

    def getSolution(self) -> list:
        """Retrieve solution from Gurobi backend"""
        return self._x.X.tolist()
