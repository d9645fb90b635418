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
"""Static strings used in the fastcc package

    Solvers and status codes
    
        SOLVER = 'solver'
        
        CPLEX = 'cplex'
        
        GUROBI = 'gurobi'
        
        SCIP = 'scip'
        
        GLPK = 'glpk'

        OPTIMAL = 'optimal' # from optlang interface
        
        INFEASIBLE ='infeasible' # from optlang interface
        
        TIME_LIMIT = 'time_limit' # from optlang interface
        
        UNBOUNDED = 'unbounded' # from optlang interface
        
        TIME_LIMIT_W_SOL = 'time_limit_w_sols'

    Consistency check setup

        EPSILON = 'epsilon'

        PRINT_LEVEL = 'print_level'

        MODE_FLAG = 'mode_flag'

        MAX_ITER = 'max_iter'

        SETUP = 'fc_setup'

        DEFAULT_EPSILON = 1e-4

        FLUX_TOL = 0.99

    Analysis
    
        MAXIMIZE = 'maximize'
        
        MINIMIZE = 'minimize'
"""

# Solvers and status codes
SOLVER = 'solver'
CPLEX = 'cplex'
GUROBI = 'gurobi'
SCIP = 'scip'
GLPK = 'glpk'
from optlang.interface import OPTIMAL,    \
                              INFEASIBLE, \
                              TIME_LIMIT, \
                              UNBOUNDED

TIME_LIMIT_W_SOL = 'time_limit_w_sols'

# Consistency check setup
EPSILON = 'epsilon'
PRINT_LEVEL = 'print_level'
MODE_FLAG = 'mode_flag'
MAX_ITER = 'max_iter'
SETUP = 'fc_setup'
DEFAULT_EPSILON = 1e-4
# fraction of epsilon above which a flux counts as non-zero
FLUX_TOL = 0.99

# Analysis
MAXIMIZE = 'maximize'
MINIMIZE = 'minimize'
