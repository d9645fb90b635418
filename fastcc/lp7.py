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
"""Cardinality maximization of flux carrying reactions (LP-7 of FASTCORE)"""

import numpy as np
from scipy import sparse
from fastcc.model import FluxModel
from fastcc.lptools import flux_lp, check_status
from fastcc.names import *


def lp7(K, model: FluxModel, epsilon, solver=None) -> np.ndarray:
    r"""Find a flux vector that approximately maximizes the number of reactions in K carrying flux
    
    Maximizing the number of reactions with a flux of at least epsilon is a combinatorial
    problem. LP-7 relaxes it by introducing one auxiliary variable z_i per reaction in K
    that is capped by epsilon and by the reaction flux:
    
        maximize:   \sum_{i \in K} z_i
        subject to: S v = 0,  lb <= v <= ub,
                    v_i - z_i >= 0     for all i in K,
                    0 <= z_i <= epsilon
    
    Every reaction i in K with v_i >= epsilon in the solution is truly flux consistent. Some 
    consistent reactions may be missed, but none are reported falsely.
    
    Example:
        v = lp7(model.irreversible, fmodel, 1e-4)
    
    Args:
        K (list of int):
            Indices of the reactions whose flux should be maximized. Reactions in K are
            expected to be irreversible in forward direction.
            
        model (FluxModel):
            The model that defines the flux space.
            
        epsilon (float):
            Flux threshold.
            
        solver (optional (str)):
            The solver that should be used.
            
    Returns:
        (numpy.ndarray):
            The flux vector v (without the auxiliary variables).
            
    Raises:
        cobra.exceptions.OptimizationError:
            If the LP cannot be solved to optimality.
    """
    K = np.asarray(K, dtype=int)
    numr = model.num_reacs
    numk = len(K)
    if numk == 0:
        return np.zeros(numr)
    # variables x = [v; z]
    A_eq = sparse.hstack((model.S, sparse.csr_matrix((model.shape[0], numk))), format='csr')
    # z_i - v_i <= 0
    rows = np.arange(numk)
    A_ineq = sparse.csr_matrix((np.concatenate((np.ones(numk), -np.ones(numk))),
                                (np.concatenate((rows, rows)), np.concatenate((numr + rows, K)))),
                               shape=(numk, numr + numk))
    c = [0.0] * numr + [-1.0] * numk
    aux = FluxModel(A_eq,
                    lb=np.concatenate((model.lb, np.zeros(numk))),
                    ub=np.concatenate((model.ub, np.full(numk, epsilon))),
                    c=c)
    lp = flux_lp(aux, solver=solver, A_ineq=A_ineq, b_ineq=[0.0] * numk)
    x, _, status = lp.solve()
    check_status(status, 'LP-7')
    return np.array(x[:numr], dtype=float)
