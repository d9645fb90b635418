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
"""Detection of structurally isolated pairs of reversible reactions

Two reversible reactions that share a single metabolite, which no other reaction
touches, have fluxes that cancel exactly at steady state. When both reactions carry
the weight 1 in an objective function, the objective is zero for every flux vector, 
and the LPs of the main fastcc loop cannot tell whether the pair carries flux. These
pairs are resolved in a separate pass over the reaction-metabolite incidence structure.
"""

import numpy as np
from scipy import sparse
from typing import List, Tuple
from fastcc.model import FluxModel
from fastcc.lptools import optimize
from fastcc.names import *


def blocked_pair_candidates(S, zero_revs) -> np.ndarray:
    """Find reactions of unknown status that form an isolated pair with another one
    
    A reaction j from zero_revs is a candidate if it touches exactly one metabolite and
    this metabolite participates in exactly two reactions, both of them in zero_revs.
    
    Args:
        S (sparse matrix):
            The stoichiometric matrix.
            
        zero_revs (list of int):
            Indices of reactions whose consistency is still unknown.
            
    Returns:
        (numpy.ndarray):
            Sorted indices of the candidate reactions.
    """
    S_col = sparse.csc_matrix(S)
    S_row = sparse.csr_matrix(S)
    zero_revs = np.asarray(zero_revs, dtype=int)
    zero_set = set(zero_revs.tolist())
    candidates = []
    for j in zero_revs:
        mets = S_col[:, j].nonzero()[0]
        if len(mets) != 1:
            continue
        rxns = S_row[mets[0], :].nonzero()[1]
        if len(rxns) == 2 and all(r in zero_set for r in rxns):
            candidates.append(j)
    return np.array(sorted(candidates), dtype=int)


def pair_partners(S, reactions, zero_revs) -> np.ndarray:
    """Collect all reactions of zero_revs that share a metabolite with one of the given reactions
    
    For a candidate of an isolated pair this yields the candidate itself and its partner."""
    reactions = np.asarray(reactions, dtype=int)
    if len(reactions) == 0:
        return np.array([], dtype=int)
    mets = np.unique(sparse.csc_matrix(S)[:, reactions].nonzero()[0])
    rxns = np.unique(sparse.csr_matrix(S)[mets, :].nonzero()[1])
    return np.intersect1d(rxns, np.asarray(zero_revs, dtype=int))


def resolve_blocked_pairs(min_flux, max_flux, candidates, epsilon) -> np.ndarray:
    """Identify candidates whose minimized and maximized fluxes disagree
    
    Flux values below 0.99*epsilon are set to zero first. The absolute values of the
    minimization result are then compared with those of the maximization result as sets:
    every absolute value that occurs only in the minimization result marks a resolved
    candidate. For each such value, the first candidate carrying it is returned, sorted
    by value.
    
    Args:
        min_flux, max_flux (numpy.ndarray):
            Flux vectors (all reactions) from minimizing and maximizing the flux sum over
            the candidates.
            
        candidates (list of int):
            Indices of the candidate reactions.
            
        epsilon (float):
            Flux threshold.
            
    Returns:
        (numpy.ndarray):
            Indices of the resolved candidates.
    """
    candidates = np.asarray(candidates, dtype=int)
    min_res = np.array(min_flux, dtype=float)[candidates]
    max_res = np.array(max_flux, dtype=float)[candidates]
    min_res[min_res < FLUX_TOL * epsilon] = 0.0
    max_res[max_res < FLUX_TOL * epsilon] = 0.0
    min_res = np.abs(min_res)
    max_res = np.abs(max_res)
    values, first = np.unique(min_res, return_index=True)
    return candidates[first[~np.isin(values, max_res)]]


def check_blocked_pairs(model: FluxModel, zero_revs, epsilon, solver=None) -> Tuple[np.ndarray, List]:
    """Test isolated pairs of reversible reactions for flux consistency
    
    The flux sum over all candidates (see blocked_pair_candidates) is minimized and maximized.
    Candidates for which both results disagree are consistent, and so are their partners.
    
    Example:
        consistent, fluxes = check_blocked_pairs(fmodel, zero_revs, 1e-4)
    
    Args:
        model (FluxModel):
            The model that defines the flux space.
            
        zero_revs (list of int):
            Indices of reactions whose consistency is still unknown.
            
        epsilon (float):
            Flux threshold.
            
        solver (optional (str)):
            The solver that should be used.
            
    Returns:
        (Tuple[numpy.ndarray, list]):
            Indices of reactions found to be consistent and the flux vectors computed on the way.
    """
    candidates = blocked_pair_candidates(model.S, zero_revs)
    if len(candidates) == 0:
        return np.array([], dtype=int), []
    pair_model = model.with_objective_idx(candidates)
    min_flux = optimize(pair_model, sense=MINIMIZE, solver=solver)
    max_flux = optimize(pair_model, sense=MAXIMIZE, solver=solver)
    resolved = resolve_blocked_pairs(min_flux, max_flux, candidates, epsilon)
    return pair_partners(model.S, resolved, zero_revs), [min_flux, max_flux]
