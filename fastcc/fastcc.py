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
"""The FASTCC algorithm for the flux consistency check of metabolic networks

A reaction is flux consistent if at least one steady-state flux vector within the
flux bounds lets it carry a non-zero flux. fastcc determines all consistent reactions
with a small number of LPs:

    1. A single LP-7 over all forward-irreversible reactions seeds the consistent set.
    2. In a loop, the lower bounds of consistent irreversible reactions are raised to
       epsilon and the flux sum over all undecided reactions is minimized and maximized,
       once in original and once in reversed reaction directions. Undecided reactions
       that exceed the threshold become consistent. The loop ends at a fixed point.
    3. Isolated pairs of reversible reactions, whose fluxes cancel in the objective,
       are checked in a final pass.
"""

import numpy as np
import json
import pickle
from time import time
from pandas import DataFrame
from cobra import Model
from fastcc.model import FluxModel, DirectionFlip
from fastcc.lptools import select_solver, optimize
from fastcc.lp7 import lp7
from fastcc.blocked_pairs import check_blocked_pairs
from fastcc.names import *
import logging


class ConvergenceError(RuntimeError):
    """Raised when the consistency check does not reach a fixed point within the iteration limit"""
    pass


class FastccSolution(object):
    """Container for the result of a flux consistency check
    
    Objects of this class are returned by fastcc. Instances of this class are not
    meant to be created by users.
    
    Args:
        consistent (numpy.ndarray of bool):
            One entry per reaction, True if the reaction is flux consistent.
            
        reactions (list of str):
            The reaction identifiers.
            
        epsilon (float):
            The flux threshold used in the computation.
            
        iterations (int):
            The number of passes through the main loop.
            
        history (list of numpy.ndarray):
            The indices of the consistent reactions after the seed LP and after every pass
            through the main loop.
            
        fluxes (numpy.ndarray or None):
            The n x k matrix of flux vectors computed on the way (only if requested with
            mode_flag).
            
        fc_setup (dict):
            The parameters of the computation.
    """

    def __init__(self, consistent, reactions, epsilon, iterations, history, fluxes=None, fc_setup=None):
        self.consistent = np.array(consistent, dtype=bool)
        self.reactions = list(reactions)
        self.epsilon = epsilon
        self.iterations = iterations
        self.history = history
        self.fluxes = fluxes
        self.fc_setup = fc_setup if fc_setup is not None else {}

    def consistent_reactions(self):
        """Identifiers of all flux consistent reactions"""
        return [r for r, c in zip(self.reactions, self.consistent) if c]

    def inconsistent_reactions(self):
        """Identifiers of all reactions that cannot carry flux (blocked reactions)"""
        return [r for r, c in zip(self.reactions, self.consistent) if not c]

    def to_frame(self) -> DataFrame:
        """Consistency of every reaction as a pandas DataFrame
        
        Example:
            df = solution.to_frame()
            blocked = df.index[~df['consistent']]
        """
        return DataFrame({'consistent': self.consistent}, index=self.reactions)

    def save(self, filename):
        """Save the consistency check result to a file."""
        with open(filename, 'wb') as f:
            pickle.dump(self, f)

    @classmethod
    def load(cls, filename):
        """Load a consistency check result from a file."""
        with open(filename, 'rb') as f:
            cls = pickle.load(f)
        return cls

    def __repr__(self):
        return '<FastccSolution: ' + str(int(np.sum(self.consistent))) + ' of ' + str(len(self.consistent)) + \
               ' reactions consistent (epsilon=' + str(self.epsilon) + ')>'


def fastcc(model, **kwargs) -> FastccSolution:
    """Flux consistency check with the FASTCC algorithm
    
    Determines which reactions of a metabolic network can carry a flux of at least
    0.99*epsilon in some steady state. The model itself is not modified.
    
    Example:
        sol = fastcc(model, epsilon=1e-4, print_level=1)
        blocked = sol.inconsistent_reactions()
    
    Args:
        model (cobra.Model or FluxModel):
            A metabolic model.
            
        epsilon (optional (float)): (Default: 1e-4)
            Flux threshold. Reactions whose flux reaches 0.99*epsilon count as consistent.
            
        print_level (optional (int)): (Default: 1)
            Verbosity of the log output: 0 (silent), 1 (summary), 2 (per iteration).
            
        mode_flag (optional (bool)): (Default: False)
            If True, the solution also contains the matrix of all computed flux vectors.
            
        solver (optional (str)):
            The solver that should be used: 'glpk', 'cplex', 'gurobi' or 'scip'.
            
        max_iter (optional (int)): (Default: number of reactions + 1)
            Maximum number of passes through the main loop.
            
        fc_setup (optional (dict or str)):
            All of the above parameters as a dict or as the path to a JSON file.
            
    Returns:
        (FastccSolution):
            The consistency of every reaction.
            
    Raises:
        ValueError:
            If the model or the parameters are malformed.
            
        cobra.exceptions.OptimizationError:
            If an LP cannot be solved (e.g. an empty flux space).
            
        ConvergenceError:
            If no fixed point is reached within max_iter passes.
    """
    allowed_keys = {EPSILON, PRINT_LEVEL, MODE_FLAG, SOLVER, MAX_ITER, SETUP}
    if SETUP in kwargs:
        if type(kwargs[SETUP]) is str:
            with open(kwargs[SETUP], 'r') as fs:
                kwargs = json.load(fs)
        else:
            kwargs = dict(kwargs[SETUP])
    for key in kwargs:
        if key not in allowed_keys or key == SETUP:
            raise ValueError('Argument ' + key + ' is not supported by fastcc.')

    epsilon = float(kwargs.get(EPSILON, DEFAULT_EPSILON))
    if not epsilon > 0:
        raise ValueError('Flux threshold epsilon must be positive, not ' + str(epsilon) + '.')
    print_level = int(kwargs.get(PRINT_LEVEL, 1))
    mode_flag = bool(kwargs.get(MODE_FLAG, False))
    solver = select_solver(kwargs.get(SOLVER), model)
    if isinstance(model, Model):
        model = FluxModel.from_cobra(model)
    elif not isinstance(model, FluxModel):
        raise ValueError('Model must be a cobra.Model or a FluxModel.')
    numr = model.num_reacs
    max_iter = int(kwargs.get(MAX_ITER, numr + 1))
    fc_setup = {EPSILON: epsilon, PRINT_LEVEL: print_level, MODE_FLAG: mode_flag, SOLVER: solver, MAX_ITER: max_iter}

    starttime = time()
    threshold = FLUX_TOL * epsilon
    N = np.arange(numr)
    # reactions that are irreversible in forward direction
    J = model.irreversible
    if print_level > 0:
        logging.info('Checking flux consistency of ' + str(numr) + ' reactions (epsilon=' + str(epsilon) + ').')
        logging.info('  Using ' + solver + ' for solving LPs.')
        logging.info('  |J|=' + str(len(J)) + ' irreversible reactions.')

    V = lp7(J, model, epsilon, solver)
    fluxes = [V.copy()] if mode_flag else None
    A = np.flatnonzero(np.abs(V) >= threshold)
    history = [A]
    if print_level > 1:
        logging.info('  LP-7: ' + str(len(A)) + ' consistent reactions.')

    work = None
    zero_revs = np.setdiff1d(np.setdiff1d(N, A), np.setdiff1d(J, A))
    iterations = 0
    while len(zero_revs) > 0:
        if iterations >= max_iter:
            raise ConvergenceError('No fixed point reached after ' + str(iterations) + ' iterations.')
        iterations += 1
        num_A = len(A)
        consistent_revs = np.setdiff1d(A, J)
        forced = np.setdiff1d(A, consistent_revs)
        # V[forced] still holds the LP-7 fluxes, a feasible point of the derived model
        work = model.with_lower_bounds(forced, np.minimum(np.minimum(epsilon, V[forced]), model.ub[forced]))
        work = work.with_objective_idx(zero_revs)

        v_min = optimize(work, sense=MINIMIZE, solver=solver)
        v_max = optimize(work, sense=MAXIMIZE, solver=solver)
        flagged = zero_revs[(np.abs(v_min[zero_revs]) >= threshold) | (np.abs(v_max[zero_revs]) >= threshold)]
        V[flagged] = epsilon

        flip = DirectionFlip(work, work.reversible)
        with flip as flipped:
            v_min_flip = flip.unflip_fluxes(optimize(flipped, sense=MINIMIZE, solver=solver))
            v_max_flip = flip.unflip_fluxes(optimize(flipped, sense=MAXIMIZE, solver=solver))
        flagged_flip = zero_revs[(np.abs(v_min_flip[zero_revs]) >= threshold) |
                                 (np.abs(v_max_flip[zero_revs]) >= threshold)]
        V[np.setdiff1d(flagged_flip, flagged)] = epsilon
        if mode_flag:
            fluxes += [v_min, v_max, v_min_flip, v_max_flip]

        A = np.flatnonzero(np.abs(V) >= threshold)
        history.append(A)
        zero_revs = np.setdiff1d(np.setdiff1d(N, A), np.setdiff1d(J, A))
        if print_level > 1:
            logging.info('  Iteration ' + str(iterations) + ': ' + str(len(A)) + ' consistent reactions, ' +
                         str(len(zero_revs)) + ' undecided.')
        if len(A) == num_A:
            break

    if work is not None and len(zero_revs) > 0:
        pair_revs, pair_fluxes = check_blocked_pairs(work, zero_revs, epsilon, solver)
        if len(pair_revs) > 0:
            if print_level > 1:
                logging.info('  ' + str(len(pair_revs)) + ' reactions of isolated reversible pairs are consistent.')
            A = np.union1d(A, pair_revs)
        if mode_flag:
            fluxes += pair_fluxes

    consistent = np.zeros(numr, dtype=bool)
    consistent[A] = True
    if print_level > 0:
        logging.info(str(len(A)) + ' of ' + str(numr) + ' reactions are flux consistent (' + str(iterations) +
                     ' iterations, ' + str(round(time() - starttime, 2)) + ' s).')
    if mode_flag:
        fluxes = np.column_stack(fluxes)
    return FastccSolution(consistent, model.rxns, epsilon, iterations, history, fluxes, fc_setup)


def consistent_model(model, **kwargs):
    """Remove all flux inconsistent reactions from a cobra model
    
    The consistency check is done with fastcc. The given model is not modified.
    
    Example:
        cons_model = consistent_model(model, epsilon=1e-4)
    
    Args:
        model (cobra.Model):
            A metabolic model that is an instance of the cobra.Model class.
            
        **kwargs:
            Parameters of fastcc (epsilon, print_level, solver, max_iter).
            
    Returns:
        (cobra.Model):
            A copy of the model without the inconsistent reactions.
    """
    sol = fastcc(model, **kwargs)
    cons_model = model.copy()
    cons_model.remove_reactions(sol.inconsistent_reactions(), remove_orphans=True)
    return cons_model
