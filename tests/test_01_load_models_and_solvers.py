"""Test if models and solvers load."""
from cobra import Configuration
from scipy import sparse
import numpy as np
import fastcc as fc
from fastcc.names import *
import pytest


def test_import_fc():
    import fastcc


def test_solver_availability(curr_solver):
    """Test solver availability."""
    assert (curr_solver in fc.avail_solvers)


def test_solver_loading(curr_solver):
    """Test that solver interfaces can be loaded and solve a small LP."""
    # minimize -x1 - x2 s.t. x1 + x2 <= 3, 0 <= x <= 2
    lp = fc.LP(c=[-1, -1], A_ineq=sparse.csr_matrix([[1, 1]]), b_ineq=[3], lb=[0, 0], ub=[2, 2], solver=curr_solver)
    x, opt, status = lp.solve()
    assert (status == OPTIMAL)
    assert (round(opt, 9) == -3.0)
    assert (round(sum(x), 9) == 3.0)


def test_lp_modification(curr_solver):
    """Test bound and objective changes of an existing LP."""
    lp = fc.LP(c=[-1, -1], A_ineq=sparse.csr_matrix([[1, 1]]), b_ineq=[3], lb=[0, 0], ub=[2, 2], solver=curr_solver)
    lp.set_ub([[0, 0.5], [1, 0.5]])
    assert (round(lp.slim_solve(), 9) == -1.0)
    lp.set_objective_idx([[0, 1.0]])
    assert (round(lp.slim_solve(), 9) == -0.5)
    lp.set_lb([[0, 0.25]])
    x, _, _ = lp.solve()
    assert (round(x[0], 9) == 0.25)
    lp.add_eq_constraints(sparse.csr_matrix([[1, -1]]), [0])
    assert (round(lp.slim_solve(), 9) == 0.0)
    lp.add_ineq_constraints(sparse.csr_matrix([[-1, 0]]), [-1])
    assert (np.isnan(lp.slim_solve()))
    with pytest.raises(ValueError):
        lp.set_lb([[1, 1.0]])


def test_lp_objective_and_time_limit(curr_solver):
    """Test replacing the objective of an LP with a time limit."""
    lp = fc.LP(c=[-1, -1],
               A_eq=sparse.csr_matrix([[1, -1]]),
               b_eq=[0],
               lb=[0, 0],
               ub=[2, 2],
               solver=curr_solver,
               tlim=10,
               skip_checks=True)
    assert (round(lp.slim_solve(), 9) == -4.0)
    lp.set_objective([1, 0])
    x, opt, status = lp.solve()
    assert (status == OPTIMAL)
    assert (round(opt, 9) == 0.0)
    assert (lp.c == [1.0, 0.0])


def test_lp_dimension_check():
    """Test that inconsistent dimensions are rejected."""
    with pytest.raises(Exception):
        fc.LP(c=[1, 1], A_eq=sparse.csr_matrix([[1, -1]]), b_eq=[0, 0])
    with pytest.raises(Exception):
        fc.LP(c=[1], A_eq=sparse.csr_matrix([[1, -1]]), b_eq=[0])


def test_lp_unknown_argument():
    """Test that unsupported keys are rejected."""
    with pytest.raises(Exception):
        fc.LP(c=[1], cost=[1])


def test_load_solvers(model_linear, curr_solver):
    """Test solver choice."""

    # solver selection with no solver specified
    solver1 = fc.select_solver()
    assert (solver1 in [CPLEX, GUROBI, GLPK, SCIP])

    # solver selection with unknown solver specified
    solver1 = fc.select_solver('notasolver')
    assert (solver1 in [CPLEX, GUROBI, GLPK, SCIP])

    # with solver specified
    solver2 = fc.select_solver(curr_solver)
    assert (solver2 == curr_solver)

    # with model-specified solver
    if curr_solver != SCIP:
        model_linear.solver = curr_solver
        solver3 = fc.select_solver(None, model_linear)
        assert (solver3 == curr_solver)

    # with cobrapy-specified solver
    if curr_solver != SCIP:
        conf = Configuration()
        conf.solver = curr_solver
        solver4 = fc.select_solver()
        assert (solver4 == curr_solver)


def test_flux_model_from_cobra(model_small):
    """Test conversion of a cobra model."""
    fmodel = fc.FluxModel.from_cobra(model_small)
    assert (fmodel.shape == (len(model_small.metabolites), len(model_small.reactions)))
    assert (fmodel.rxns == [r.id for r in model_small.reactions])
    i = fmodel.rxns.index('R_imp')
    assert (fmodel.lb[i] == -10 and fmodel.ub[i] == 0)
    assert (fmodel.S[fmodel.mets.index('C'), i] == -1)
    assert (set(fmodel.rxns[j] for j in fmodel.irreversible) == {'EX_A', 'R1', 'EX_C', 'R_zero', 'R_dead'})
    assert (set(fmodel.rxns[j] for j in fmodel.reversible) == {'R2', 'R3', 'R_imp', 'R_dead_rev'})


def test_flux_model_validation():
    """Test that malformed models are rejected."""
    S = [[1, -1, 0], [0, 1, -1]]
    with pytest.raises(ValueError):
        fc.FluxModel(None, [0, 0, 0], [1, 1, 1])
    with pytest.raises(ValueError):
        fc.FluxModel(S, [0, 0], [1, 1, 1])
    with pytest.raises(ValueError):
        fc.FluxModel(S, [0, 0, 0], [1, 1, 1], rxns=['a', 'b'])
    with pytest.raises(ValueError):
        fc.FluxModel(S, [0, 0, np.nan], [1, 1, 1])
    with pytest.raises(ValueError, match='r3'):
        fc.FluxModel(S, [0, 0, 2], [1, 1, 1], rxns=['r1', 'r2', 'r3'])


def test_derived_models_leave_base_unchanged():
    """Test that derived copies do not modify the base model."""
    fmodel = fc.FluxModel([[1, -1, 0], [0, 1, -1]], [0, -5, 0], [10, 5, 10])
    derived = fmodel.with_lower_bounds([0, 2], 1e-4).with_objective_idx([1])
    assert (list(fmodel.lb) == [0, -5, 0])
    assert (list(fmodel.c) == [0, 0, 0])
    assert (list(derived.lb) == [1e-4, -5, 1e-4])
    assert (list(derived.c) == [0, 1, 0])
    with pytest.raises(ValueError):
        fmodel.with_lower_bounds([1], 6)
    with pytest.raises(ValueError):
        fmodel.with_objective([1, 0])


def test_direction_flip():
    """Test reversal of reaction directions and exact restoration."""
    fmodel = fc.FluxModel([[1, -1, 0], [0, 1, -1]], [0, -5, -2], [10, 5, 3])
    S0 = fmodel.S.toarray()
    flip = fc.DirectionFlip(fmodel)
    assert (list(flip.reactions) == [1, 2])
    flipped = flip.apply()
    assert (np.array_equal(flipped.S.toarray(), S0 * np.array([1, -1, -1])))
    assert (list(flipped.lb) == [0, -5, -3])
    assert (list(flipped.ub) == [10, 5, 2])
    assert (list(flip.unflip_fluxes([1, 2, 3])) == [1, -2, -3])
    with pytest.raises(RuntimeError):
        flip.apply()
    flip.restore()
    assert (np.array_equal(fmodel.S.toarray(), S0))
    assert (list(fmodel.lb) == [0, -5, -2])
    assert (list(fmodel.ub) == [10, 5, 3])
    with pytest.raises(RuntimeError):
        flip.restore()


def test_direction_flip_restores_on_error():
    """Test that leaving the scope with an exception restores the model."""
    fmodel = fc.FluxModel([[1, -1, 0], [0, 1, -1]], [0, -5, -2], [10, 5, 3])
    S0 = fmodel.S.toarray()
    with pytest.raises(ZeroDivisionError):
        with fc.DirectionFlip(fmodel) as flipped:
            assert (flipped.lb[2] == -3)
            1 / 0
    assert (np.array_equal(fmodel.S.toarray(), S0))
    assert (list(fmodel.lb) == [0, -5, -2])
    assert (list(fmodel.ub) == [10, 5, 3])
