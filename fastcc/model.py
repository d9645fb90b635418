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
"""Model adapter that presents a metabolic network as matrices and vectors

The consistency check works on a plain numerical view of a metabolic model: 
the stoichiometric matrix S, the flux bounds lb and ub, an objective vector c
and the reaction and metabolite identifiers. A FluxModel can be built from a
cobra.Model or from matrices directly.

The base model is never changed by the analysis. Bound tightening happens on
derived copies (with_lower_bounds, with_objective), and the reversal of reaction
directions happens inside a DirectionFlip scope that restores the original 
matrix and bounds when it is left.
"""

import numpy as np
from scipy import sparse
from typing import List, Optional
from cobra.util import create_stoichiometric_matrix


class FluxModel(object):
    """Numerical representation of a metabolic network
    
    Example:
        fmodel = FluxModel(S, lb, ub, rxns=['r1', 'r2', 'r3'])
        fmodel = FluxModel.from_cobra(model)
        
    Args:
        S (sparse.csr_matrix or array-like):
            The m x n stoichiometric matrix (metabolites x reactions).
            
        lb (list of float):
            The n lower flux bounds.
            
        ub (list of float):
            The n upper flux bounds.
            
        rxns (optional (list of str)): (Default: 'R0', 'R1', ...)
            The reaction identifiers.
            
        mets (optional (list of str)): (Default: 'M0', 'M1', ...)
            The metabolite identifiers.
            
        c (optional (list of float)): (Default: zeros)
            A linear objective vector.
            
    Returns:
        (FluxModel):
            A validated numerical model.
    """

    def __init__(self, S, lb, ub, rxns=None, mets=None, c=None):
        if S is None or lb is None or ub is None:
            raise ValueError('A flux model requires a stoichiometric matrix and lower and upper bounds.')
        S = sparse.csr_matrix(S, dtype=float)
        numm, numr = S.shape
        lb = np.array(lb, dtype=float).flatten()
        ub = np.array(ub, dtype=float).flatten()
        if rxns is None:
            rxns = ['R' + str(i) for i in range(numr)]
        if mets is None:
            mets = ['M' + str(i) for i in range(numm)]
        if c is None:
            c = np.zeros(numr)
        c = np.array(c, dtype=float).flatten()
        if not (len(lb) == numr and len(ub) == numr and len(c) == numr and len(rxns) == numr):
            raise ValueError('S, lb, ub, c and rxns must have the same number of columns/elements (' + str(numr) +
                             ' reactions).')
        if not len(mets) == numm:
            raise ValueError('S and mets must have the same number of rows/elements (' + str(numm) + ' metabolites).')
        if np.any(np.isnan(lb)) or np.any(np.isnan(ub)) or np.any(np.isnan(S.data)):
            raise ValueError('Stoichiometric matrix and flux bounds must not contain NaN.')
        if np.any(lb > ub):
            bad = [rxns[i] for i in np.flatnonzero(lb > ub)]
            raise ValueError('Lower bounds exceed upper bounds for reactions: ' + ', '.join(bad))
        self.S = S
        self.lb = lb
        self.ub = ub
        self.c = c
        self.rxns = list(rxns)
        self.mets = list(mets)

    @classmethod
    def from_cobra(cls, model) -> 'FluxModel':
        """Build a FluxModel from a cobra.Model
        
        Example:
            fmodel = FluxModel.from_cobra(model)
            
        Args:
            model (cobra.Model):
                A metabolic model that is an instance of the cobra.Model class.
                
        Returns:
            (FluxModel):
                The stoichiometric matrix, bounds, objective and identifiers of the model.
        """
        S = sparse.csr_matrix(create_stoichiometric_matrix(model, array_type='lil'))
        return cls(S,
                   lb=[r.lower_bound for r in model.reactions],
                   ub=[r.upper_bound for r in model.reactions],
                   rxns=model.reactions.list_attr('id'),
                   mets=model.metabolites.list_attr('id'),
                   c=[r.objective_coefficient for r in model.reactions])

    @property
    def shape(self):
        """The shape (number of metabolites, number of reactions) of the model"""
        return self.S.shape

    @property
    def num_reacs(self) -> int:
        return self.S.shape[1]

    @property
    def irreversible(self) -> np.ndarray:
        """Indices of reactions that are irreversible in forward direction (lb == 0)"""
        return np.flatnonzero(self.lb == 0)

    @property
    def reversible(self) -> np.ndarray:
        """Indices of reactions that may run backwards (lb < 0)"""
        return np.flatnonzero(self.lb < 0)

    def copy(self) -> 'FluxModel':
        """Return an independent copy of this model"""
        return FluxModel(self.S.copy(), self.lb.copy(), self.ub.copy(), list(self.rxns), list(self.mets),
                         self.c.copy())

    def with_objective(self, c) -> 'FluxModel':
        """Return a copy of this model with the objective vector c"""
        derived = self.copy()
        c = np.array(c, dtype=float).flatten()
        if not len(c) == self.num_reacs:
            raise ValueError('Objective vector must have one element per reaction.')
        derived.c = c
        return derived

    def with_objective_idx(self, idx, value=1.0) -> 'FluxModel':
        """Return a copy of this model whose objective is value on reactions idx and 0 elsewhere"""
        c = np.zeros(self.num_reacs)
        c[np.asarray(idx, dtype=int)] = value
        return self.with_objective(c)

    def with_lower_bounds(self, idx, value) -> 'FluxModel':
        """Return a copy of this model with the lower bounds of reactions idx set to value"""
        derived = self.copy()
        idx = np.asarray(idx, dtype=int)
        derived.lb[idx] = value
        if np.any(derived.lb > derived.ub):
            bad = [self.rxns[i] for i in np.flatnonzero(derived.lb > derived.ub)]
            raise ValueError('Lower bound ' + str(value) + ' exceeds the upper bound of reactions: ' + ', '.join(bad))
        return derived

    def __repr__(self):
        return '<FluxModel with ' + str(self.shape[0]) + ' metabolites and ' + str(self.shape[1]) + ' reactions>'


class DirectionFlip(object):
    """Scoped reversal of reaction directions
    
    Reversing a reaction negates its column in the stoichiometric matrix and maps its
    bounds (lb, ub) to (-ub, -lb). A flux vector v' of the flipped model corresponds to
    v = -v' on the flipped reactions of the original model. Flipping twice restores the
    matrix and the bounds exactly, so restore() simply applies the same transformation
    a second time.
    
    The transformation is applied in place to the given model. Use it as a context
    manager, so that the original state is restored on every exit path, including
    solver failures:
    
    Example:
        with DirectionFlip(fmodel) as flipped:
            v = optimize(flipped, c, MAXIMIZE)
    
    Args:
        model (FluxModel):
            The model that is transformed in place.
            
        reactions (optional (list of int)): (Default: model.reversible)
            Indices of the reactions that are reversed.
    """

    def __init__(self, model: FluxModel, reactions: Optional[List[int]] = None):
        self.model = model
        if reactions is None:
            reactions = model.reversible
        self.reactions = np.asarray(reactions, dtype=int)
        self.applied = False

    def _flip(self):
        d = np.ones(self.model.num_reacs)
        d[self.reactions] = -1.0
        self.model.S = sparse.csr_matrix(self.model.S @ sparse.diags(d))
        lb = self.model.lb.copy()
        ub = self.model.ub.copy()
        self.model.lb[self.reactions] = -ub[self.reactions]
        self.model.ub[self.reactions] = -lb[self.reactions]

    def apply(self) -> FluxModel:
        """Reverse the selected reactions in the model"""
        if self.applied:
            raise RuntimeError('Reaction directions are already reversed.')
        self._flip()
        self.applied = True
        return self.model

    def restore(self) -> FluxModel:
        """Restore the original reaction directions"""
        if not self.applied:
            raise RuntimeError('Reaction directions are not reversed.')
        self._flip()
        self.applied = False
        return self.model

    def unflip_fluxes(self, v) -> np.ndarray:
        """Translate a flux vector of the flipped model back to the original directions"""
        v = np.array(v, dtype=float)
        v[self.reactions] = -v[self.reactions]
        return v

    def __enter__(self) -> FluxModel:
        return self.apply()

    def __exit__(self, exit_type, exit_value, exit_traceback):
        self.restore()
