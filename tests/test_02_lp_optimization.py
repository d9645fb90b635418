"""Test if basic lp-functions finish correctly (flux optimization, FVA, LP-7)."""
from cobra.exceptions import Infeasible, OptimizationError
import numpy as np
import fastcc as fc
from fastcc.names import *
import pytest


def test_optimize(curr_solver, model_linear):
    """Test minimization and maximization of a flux."""
    fmodel = fc.FluxModel.from_cobra(model_linear)
    v = fc.optimize(fmodel, [0, 1, 0], MAXIMIZE, solver=curr_solver)
    assert (np.allclose(v, [10, 10, 10]))
    v = fc.optimize(fmodel, [0, 1, 0], MINIMIZE, solver=curr_solver)
    assert (np.allclose(v, [0, 0, 0]))
    # steady state is kept
    assert (np.allclose(fmodel.S @ v, 0))


def test_optimize_objective_from_model(curr_solver, model_linear):
    """Test that the model objective is used by default."""
    fmodel = fc.FluxModel.from_cobra(model_linear).with_objective_idx([2])
    v = fc.optimize(fmodel, sense='max', solver=curr_solver)
    assert (round(v[2], 9) == 10.0)


def test_optimize_wrong_sense(model_linear):
    """Test unknown optimization sense."""
    fmodel = fc.FluxModel.from_cobra(model_linear)
    with pytest.raises(ValueError):
        fc.optimize(fmodel, [0, 1, 0], 'sideways')


def test_optimize_infeasible(curr_solver, model_infeasible):
    """Test that an empty flux space raises."""
    fmodel = fc.FluxModel.from_cobra(model_infeasible)
    with pytest.raises(Infeasible):
        fc.optimize(fmodel, [1, 0], MAXIMIZE, solver=curr_solver)
    # cobra's Infeasible is an OptimizationError
    with pytest.raises(OptimizationError):
        fc.optimize(fmodel, [1, 0], MINIMIZE, solver=curr_solver)


def test_can_carry_flux(curr_solver, model_small):
    """Test direct flux checks of single reactions."""
    fmodel = fc.FluxModel.from_cobra(model_small)
    assert (fc.can_carry_flux(fmodel, fmodel.rxns.index('R_imp'), 1e-4, curr_solver))
    assert (round(fc.max_abs_flux(fmodel, fmodel.rxns.index('R1'), curr_solver), 9) == 10.0)
    assert (not fc.can_carry_flux(fmodel, fmodel.rxns.index('R_zero'), 1e-4, curr_solver))
    assert (not fc.can_carry_flux(fmodel, fmodel.rxns.index('R_dead'), 1e-4, curr_solver))
    assert (not fc.can_carry_flux(fmodel, fmodel.rxns.index('R_dead_rev'), 1e-4, curr_solver))


def test_fva(curr_solver, model_small):
    """Test FVA on a cobra model."""
    sol = fc.fva(model_small, solver=curr_solver)
    assert (sol.shape == (9, 2))
    assert (sol.loc['R1', 'maximum'] == pytest.approx(10.0))
    assert (sol.loc['R_imp', 'minimum'] == pytest.approx(-10.0))
    assert (sol.loc['R_dead', 'maximum'] == 0.0)
    assert (sol.loc['R_dead_rev', 'minimum'] == 0.0)


def test_fva_selected_reactions(curr_solver, model_small):
    """Test FVA of selected reactions of a FluxModel."""
    fmodel = fc.FluxModel.from_cobra(model_small)
    sol = fc.fva(fmodel, solver=curr_solver, reactions=['R2', 'R_zero'])
    assert (list(sol.index) == ['R2', 'R_zero'])
    assert (sol.loc['R2', 'minimum'] == pytest.approx(-10.0))
    assert (sol.loc['R_zero', 'maximum'] == 0.0)


def test_fva_infeasible(curr_solver, model_infeasible):
    """Test infeasible FVA."""
    sol = fc.fva(model_infeasible, solver=curr_solver)
    assert (sol.shape == (2, 2))
    assert (np.isnan(sol.values[1, 1]))


def test_fva_unknown_argument(model_small):
    with pytest.raises(ValueError):
        fc.fva(model_small, constraints=['R1 <= 3'])


def test_lp7(curr_solver, model_small):
    """Test that LP-7 pushes all consistent irreversible reactions over epsilon."""
    fmodel = fc.FluxModel.from_cobra(model_small)
    eps = 1e-4
    v = fc.lp7(fmodel.irreversible, fmodel, eps, curr_solver)
    assert (len(v) == fmodel.num_reacs)
    assert (np.allclose(fmodel.S @ v, 0, atol=1e-9))
    for r in ['EX_A', 'R1', 'EX_C']:
        assert (v[fmodel.rxns.index(r)] >= 0.99 * eps)
    for r in ['R_zero', 'R_dead']:
        assert (abs(v[fmodel.rxns.index(r)]) < 1e-9)


def test_lp7_empty_set(model_small):
    """Test that an empty reaction set yields a zero flux vector without solving."""
    fmodel = fc.FluxModel.from_cobra(model_small)
    v = fc.lp7([], fmodel, 1e-4)
    assert (np.array_equal(v, np.zeros(fmodel.num_reacs)))


def test_lp7_infeasible(curr_solver, model_infeasible):
    """Test that LP-7 raises on an empty flux space."""
    fmodel = fc.FluxModel.from_cobra(model_infeasible)
    with pytest.raises(Infeasible):
        fc.lp7(fmodel.irreversible, fmodel, 1e-4, curr_solver)
