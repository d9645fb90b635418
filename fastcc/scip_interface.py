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
"""SCIP (SoPlex) solver interface for LP"""

from numpy import isnan, nan, inf, isinf
import pyscipopt as pso
from fastcc.names import *
from typing import Tuple, List
import logging


class SCIP_LP(pso.LP):
    """SoPlex backend of fastcc.LP
    
    Builds the LP directly on a pyscipopt.LP object. Bounds and right hand sides of
    +-inf are translated into SoPlex infinity. Time limits are not available.
    
    Example: 
        scip = SCIP_LP(c, A_ineq, b_ineq, A_eq, b_eq, lb, ub)
    """

    def __init__(self, c, A_ineq, b_ineq, A_eq, b_eq, lb, ub):
        super().__init__(sense='minimize')
        ub = [u if not isinf(u) else self.infinity() for u in ub]
        lb = [l if not isinf(l) else -self.infinity() for l in lb]
        # add variables and constraints
        self.addCols([()] * len(c), objs=c, lbs=lb, ubs=ub)
        if A_ineq.shape[0]:
            self.add_ineq_constraints(A_ineq, b_ineq)
        if A_eq.shape[0]:
            self.add_eq_constraints(A_eq, b_eq)
        self.optimize = super().solve

    def solve(self) -> Tuple[List, float, float]:
        """Solve the LP and return (x, min_cx, status)"""
        try:
            min_cx = self.optimize()  # this function was inherited from super().solve() during initialization
        except Exception:
            logging.error('Error while running SCIP.')
            raise
        status = OPTIMAL
        if self.isInfinity(-min_cx):
            min_cx = -inf
            status = UNBOUNDED
        elif self.isInfinity(min_cx):
            min_cx = nan
            status = INFEASIBLE
        if not isnan(min_cx) and not isinf(min_cx):
            x = self.getPrimal()
        else:
            x = [nan] * self.ncols()
        return x, min_cx, status

    def slim_solve(self) -> float:
        """Solve the LP and return only the objective value"""
        _, opt, _ = self.solve()
        return opt

    def set_objective(self, c):
        for i in range(len(c)):
            self.chgObj(i, c[i])

    def set_objective_idx(self, C):
        for i_v in C:
            self.chgObj(i_v[0], i_v[1])

    def set_lb(self, lb):
        for i, l in lb:
            _, ub = self.getBounds(i, i)
            self.chgBound(i, l if not isinf(l) else -self.infinity(), ub[0])

    def set_ub(self, ub):
        for i, u in ub:
            lb, _ = self.getBounds(i, i)
            self.chgBound(i, lb[0], u if not isinf(u) else self.infinity())

    def set_time_limit(self, t):
        """Time limits are not supported by the SoPlex interface"""
        if not isinf(t):
            logging.warning('SoPlex LP interface ignores time limits.')

    def add_ineq_constraints(self, A_ineq, b_ineq):
        """Append rows A_ineq * x <= b_ineq"""
        self.addRows([[(i,v) for i,v in zip(rows.indices,rows.data)] for rows in A_ineq], \
                        lhss = [-self.infinity()]*A_ineq.shape[0],\
                        rhss = [b if not isinf(b) else self.infinity() for b in b_ineq])

    def add_eq_constraints(self, A_eq, b_eq):
        """Append rows A_eq * x = b_eq"""
        self.addRows([[(i,v) for i,v in zip(rows.indices,rows.data)] for rows in A_eq], \
                        lhss = b_eq,\
                        rhss = b_eq)
