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
"""CPLEX solver interface for LP"""

from scipy import sparse
from numpy import nan, inf, isinf
from cplex import Cplex, infinity
from cplex.exceptions import CplexError
from typing import Tuple, List
import logging
import io
from fastcc.names import *


class Cplex_LP(Cplex):
    """CPLEX backend of fastcc.LP
    
    Inherits from cplex.Cplex. All output streams are redirected into buffers.
    Simplex optimality and feasibility tolerances are 1e-9.
    
    Example: 
        cplex = Cplex_LP(c, A_ineq, b_ineq, A_eq, b_eq, lb, ub)
    """

    def __init__(self, c, A_ineq, b_ineq, A_eq, b_eq, lb, ub):
        super().__init__()
        self.objective.set_sense(self.objective.sense.minimize)
        # replace numpy inf with cplex infinity
        b_ineq = [infinity if isinf(v) else v for v in b_ineq]
        lb = [-infinity if isinf(v) else v for v in lb]
        ub = [infinity if isinf(v) else v for v in ub]
        # concatenate right hand sides
        b = b_ineq + b_eq
        A = sparse.vstack((A_ineq, A_eq), format='coo')  # concatenate coefficient matrices
        sense = len(b_ineq) * 'L' + len(b_eq) * 'E'

        # construct CPLEX problem. Add variables and linear constraints
        self.variables.add(obj=c, lb=lb, ub=ub)
        self.linear_constraints.add(rhs=b, senses=sense)
        if A.nnz:
            self.linear_constraints.set_coefficients(zip(A.row.tolist(), A.col.tolist(), A.data.tolist()))

        # set parameters
        self.set_log_stream(io.StringIO())  # don't show output stream
        self.set_error_stream(io.StringIO())
        self.set_warning_stream(io.StringIO())
        self.set_results_stream(io.StringIO())
        self.parameters.simplex.tolerances.optimality.set(1e-9)
        self.parameters.simplex.tolerances.feasibility.set(1e-9)

    def solve(self) -> Tuple[List, float, float]:
        """Solve the LP and return (x, min_cx, status)"""
        try:
            super().solve()  # call parent solve function (that was overwritten in this class)
        except CplexError as exc:
            logging.error(exc)
            raise
        status = self.solution.get_status()
        numvars = self.variables.get_num()
        if status == 1:  # optimal
            min_cx = self.solution.get_objective_value()
            status = OPTIMAL
        elif status == 11 and self.solution.is_primal_feasible():  # timeout with solution
            min_cx = self.solution.get_objective_value()
            status = TIME_LIMIT_W_SOL
        elif status == 11:  # timeout without solution
            return [nan] * numvars, nan, TIME_LIMIT
        elif status == 3:  # infeasible
            return [nan] * numvars, nan, INFEASIBLE
        elif status in [2, 4]:  # unbounded, infeasible or unbounded
            return [nan] * numvars, -inf, UNBOUNDED
        else:
            logging.error(self.solution.get_status_string())
            raise Exception('Status code ' + str(status) + " not yet handeld.")
        x = self.solution.get_values()
        return x, min_cx, status

    def slim_solve(self) -> float:
        """Solve the LP and return only the objective value"""
        _, opt, status = self.solve()
        if status == UNBOUNDED:
            return -inf
        return opt

    def set_objective(self, c):
        self.objective.set_linear([[i, c_i] for i, c_i in enumerate(c)])

    def set_objective_idx(self, C):
        self.objective.set_linear([[int(c[0]), float(c[1])] for c in C])

    def set_lb(self, lb):
        self.variables.set_lower_bounds([[int(i), -infinity if isinf(l) else float(l)] for i, l in lb])

    def set_ub(self, ub):
        self.variables.set_upper_bounds([[int(i), infinity if isinf(u) else float(u)] for i, u in ub])

    def set_time_limit(self, t):
        """Set the computation time limit (in seconds)"""
        if isinf(t):
            self.parameters.timelimit.set(self.parameters.timelimit.max())
        else:
            self.parameters.timelimit.set(t)

    def add_ineq_constraints(self, A_ineq, b_ineq):
        """Append rows A_ineq * x <= b_ineq"""
        lin_expr = [[[int(i) for i in a.indices], [float(v) for v in a.data]] for a in sparse.csr_matrix(A_ineq)]
        self.linear_constraints.add(lin_expr=lin_expr,
                                    senses='L' * A_ineq.shape[0],
                                    rhs=[infinity if isinf(b) else float(b) for b in b_ineq])

    def add_eq_constraints(self, A_eq, b_eq):
        """Append rows A_eq * x = b_eq"""
        lin_expr = [[[int(i) for i in a.indices], [float(v) for v in a.data]] for a in sparse.csr_matrix(A_eq)]
        self.linear_constraints.add(lin_expr=lin_expr, senses='E' * A_eq.shape[0], rhs=[float(b) for b in b_eq])
