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
"""A collection of functions for the LP-based analysis of metabolic networks"""

from cobra import Configuration
from cobra.exceptions import Infeasible, Unbounded, OptimizationError
from fastcc import LP, avail_solvers
from fastcc.model import FluxModel
from re import search
from fastcc.names import *
from pandas import DataFrame
from numpy import array, nan, isnan
import logging


def select_solver(solver=None, model=None) -> str:
    """Select a solver for subsequent LP computations
    
    This function will determine the solver to be used for subsequend LP computations. If no
    argument is provided, this function will try to determine the currently selected solver from the
    COBRA configuration. If unavailable, the solver will be inferred from the packages available at
    package initialization and one of the solvers will be picked and retured in the prioritized 
    order: 'glpk', 'cplex', 'gurobi', 'scip'
    One may provide a solver or a model manually. This function then checks if the selected solver 
    is available, or else, if the solver indicated in the model is available. If yes, this function 
    returns the name of the solver as a str. If both arguments are specified, the function prefers
    'solver' over 'model'.
    
    Example:
        solver = select_solver('cplex')
    
    Args:
        solver (optional (str)):
        
            A user preferred solver, that should be checked for availability: 'glpk', 'cplex',
            'gurobi' or 'scip'.
            
        model (optional (cobra.Model)):
        
            A metabolic model that is an instance of the cobra.Model class. The function will try to
            dertermine the selected solver by accessing the field model.solver.
            
    Returns:
        (str):
        
            The selected solver name as a str (one of the following: 'glpk', 'cplex', 'gurobi', 'scip').
            
    """
    if not avail_solvers:
        raise Exception('No solver available. Please ensure that one of the following '\
                        'solvers is avaialable in your Python environment: CPLEX, Gurobi, SCIP, GLPK')
    fallback = [s for s in [GLPK, CPLEX, GUROBI, SCIP] if s in avail_solvers][0]
    # first try to use selected solver
    if solver:
        if solver in avail_solvers:
            return solver
        else:
            logging.warning('Selected solver ' + solver + ' not available. Using ' + fallback + " instead.")
    # if no solver was defined, use solver specified in model
    if hasattr(model, 'solver') and hasattr(model.solver, 'interface'):
        solver = search('(' + '|'.join(avail_solvers) + ')', model.solver.interface.__name__)
        if solver is not None:
            return solver[0]
        else:
            logging.warning('Solver specified in model (' + model.solver.interface.__name__ + ') unavailable')
    # if no solver specified in model, use solver from cobra configuration
    cobra_conf = Configuration()
    if hasattr(cobra_conf, 'solver') and hasattr(cobra_conf.solver, '__name__'):
        solver = search('(' + '|'.join(avail_solvers) + ')', cobra_conf.solver.__name__)
        if solver is not None:
            return solver[0]
        else:
            logging.warning('Solver specified in cobra config (' + cobra_conf.solver.__name__ + ') unavailable')
    # if no solver is specified in cobra, fall back to list of available solvers and return the
    # first one available.
    return fallback


def flux_lp(model: FluxModel, c=None, solver=None, **kwargs) -> LP:
    """Build the steady-state LP of a model: minimize c*v, subject to S*v = 0, lb <= v <= ub
    
    Additional keyword arguments (A_ineq, b_ineq, tlim, ...) are passed on to the LP constructor."""
    if c is None:
        c = model.c
    return LP(c=list(c),
              A_eq=model.S,
              b_eq=[0.0] * model.shape[0],
              lb=list(model.lb),
              ub=list(model.ub),
              solver=select_solver(solver),
              **kwargs)


def check_status(status, context='LP'):
    """Translate a non-optimal solver status into the corresponding cobra exception"""
    if status == OPTIMAL:
        return
    if status == INFEASIBLE:
        raise Infeasible(context + ' is infeasible.')
    if status == UNBOUNDED:
        raise Unbounded(context + ' is unbounded.')
    raise OptimizationError(context + ' could not be solved (status: ' + str(status) + ').')


def optimize(model: FluxModel, c=None, sense=MINIMIZE, solver=None):
    """Optimize a linear objective over the steady-state flux space of a model
    
    Solves min (or max) c*v, subject to S*v = 0, lb <= v <= ub. A new LP is set up
    for every call, so no solver state is carried over between calls.
    
    Example:
        v = optimize(fmodel, c, MAXIMIZE, solver='glpk')
    
    Args:
        model (FluxModel):
            The model that defines the flux space.
            
        c (optional (list of float)): (Default: model.c)
            The objective vector.
            
        sense (optional (str)): (Default: 'minimize')
            The optimization direction: 'maximize' (or 'max') or 'minimize' (or 'min').
            
        solver (optional (str)):
            The solver that should be used.
            
    Returns:
        (numpy.ndarray):
            The optimal flux vector.
            
    Raises:
        cobra.exceptions.Infeasible, cobra.exceptions.Unbounded, cobra.exceptions.OptimizationError:
            If no optimal solution is found.
    """
    if c is None:
        c = model.c
    c = array(c, dtype=float)
    if sense in [MAXIMIZE, 'max']:
        c = -c
    elif sense not in [MINIMIZE, 'min']:
        raise ValueError("Optimization sense must be 'maximize' or 'minimize', not '" + str(sense) + "'.")
    lp = flux_lp(model, c, solver)
    x, _, status = lp.solve()
    check_status(status, 'Flux optimization (' + sense + ')')
    return array(x, dtype=float)


def max_abs_flux(model: FluxModel, index, solver=None) -> float:
    """Determine the largest absolute flux that a single reaction can carry"""
    lp = flux_lp(model, [0.0] * model.num_reacs, solver)
    magnitude = 0.0
    for sig in [-1.0, 1.0]:
        lp.set_objective_idx([[int(index), sig]])
        opt = lp.slim_solve()
        if isnan(opt):
            raise Infeasible('Flux space of the model is empty.')
        magnitude = max(magnitude, abs(opt))
    return magnitude


def can_carry_flux(model: FluxModel, index, epsilon, solver=None) -> bool:
    """Check directly whether a reaction can carry a flux of at least epsilon in any direction
    
    Example:
        assert can_carry_flux(fmodel, 3, 1e-4)
    """
    return max_abs_flux(model, index, solver) >= epsilon


def fva(model, **kwargs) -> DataFrame:
    """Flux Variability Analysis (FVA)
    
    Flux Variability Analysis determines the global flux ranges of reactions by minimizing and 
    maximizing the flux through all (or selected) reactions of a given metabolic network. 
    Reactions whose ranges are [0, 0] are blocked, so FVA provides a slow but exact reference 
    for the flux consistency computed by fastcc.
    
    Example:
        flux_ranges = fva(model, solver='gurobi')
    
    Args:
        model (cobra.Model or FluxModel):
            A metabolic model.
            
        solver (optional (str)):
            The solver that should be used for FVA.
            
        reactions (optional (list of str)):
            Identifiers of the reactions that should be analyzed. (Default: all)
            
    Returns:
        (pandas.DataFrame):
            A data frame containing the minimum and maximum attainable flux rates.
    """
    allowed_keys = {SOLVER, 'reactions'}
    for key in kwargs:
        if key not in allowed_keys:
            raise ValueError('Argument ' + key + ' is not supported by fva.')
    if SOLVER not in kwargs:
        kwargs[SOLVER] = None
    solver = select_solver(kwargs[SOLVER], model)
    if not isinstance(model, FluxModel):
        model = FluxModel.from_cobra(model)
    if kwargs.get('reactions') is None:
        reaction_ids = model.rxns
    else:
        reaction_ids = list(kwargs['reactions'])
    idx = [model.rxns.index(r) for r in reaction_ids]

    lp = flux_lp(model, [0.0] * model.num_reacs, solver)
    _, _, status = lp.solve()
    if status not in [OPTIMAL, UNBOUNDED]:  # if problem not feasible or unbounded
        logging.error('FVA problem not feasible.')
        return DataFrame({"minimum": [nan] * len(idx), "maximum": [nan] * len(idx)}, index=reaction_ids)

    minimum = []
    maximum = []
    prev = idx[0] if idx else 0
    for i in idx:
        lp.set_objective_idx([[prev, 0.0]])
        lp.set_objective_idx([[i, 1.0]])
        minimum += [lp.slim_solve()]
        lp.set_objective_idx([[i, -1.0]])
        maximum += [-lp.slim_solve()]
        prev = i
    minimum = [v if abs(v) >= 1e-11 else 0.0 for v in minimum]  # cut off for very small absolute values
    maximum = [v if abs(v) >= 1e-11 else 0.0 for v in maximum]
    return DataFrame({"minimum": minimum, "maximum": maximum}, index=reaction_ids)
