import pytest
from cobra import Model, Metabolite, Reaction
from fastcc.names import *

# Initialize an empty list for solvers
solvers = [GLPK]

# Add GUROBI to the list if the gurobipy package is installed
try:
    import gurobipy
    solvers.append(GUROBI)
except ImportError:
    pass  # GUROBI is not installed

# Add CPLEX to the list if the cplex package is installed
try:
    import cplex
    solvers.append(CPLEX)
except ImportError:
    pass  # CPLEX is not installed

# Add SCIP to the list if the pyscipopt package is installed
try:
    import pyscipopt
    solvers.append(SCIP)
except ImportError:
    pass  # SCIP is not installed


@pytest.fixture(params=solvers, scope="session")
def curr_solver(request: pytest.FixtureRequest) -> str:
    """Provide session-level fixture for parametrized solver names."""
    return request.param


def build_model(model_id, reactions):
    """Build a cobra model from (id, {metabolite: coefficient}, lb, ub) tuples."""
    model = Model(model_id)
    mets = {}
    for rid, stoich, lb, ub in reactions:
        for m in stoich:
            if m not in mets:
                mets[m] = Metabolite(m, compartment='c')
        r = Reaction(rid, lower_bound=lb, upper_bound=ub)
        model.add_reactions([r])
        r.add_metabolites({mets[m]: v for m, v in stoich.items()})
    return model


@pytest.fixture
def model_linear():
    """Linear pathway: -> A -> B ->"""
    return build_model('linear', [
        ('EX_A', {'A': 1}, 0, 10),
        ('R1', {'A': -1, 'B': 1}, 0, 10),
        ('EX_B', {'B': -1}, 0, 10),
    ])


@pytest.fixture
def model_small():
    """Small network with consistent, fixed-to-zero and dead-end reactions.

    Consistent: EX_A, R1, R2, R3, EX_C, R_imp
    Inconsistent: R_zero (bounds fixed to 0), R_dead (produces D only),
    R_dead_rev (reversible, E is not balanced by any other reaction)
    """
    return build_model('small', [
        ('EX_A', {'A': 1}, 0, 10),
        ('R1', {'A': -1, 'B': 1}, 0, 10),
        ('R2', {'B': -1, 'C': 1}, -10, 10),
        ('R3', {'B': -1, 'C': 1}, -10, 10),
        ('EX_C', {'C': -1}, 0, 10),
        ('R_imp', {'C': -1}, -10, 0),
        ('R_zero', {'A': -1, 'C': 1}, 0, 0),
        ('R_dead', {'B': -1, 'D': 1}, 0, 10),
        ('R_dead_rev', {'C': -1, 'E': 1}, -10, 10),
    ])


@pytest.fixture
def model_pair():
    """Two reversible reactions that both produce X and touch no other metabolite."""
    return build_model('pair', [
        ('P1', {'X': 1}, -10, 10),
        ('P2', {'X': 1}, -10, 10),
    ])


@pytest.fixture
def model_infeasible():
    """Steady state violates the bounds: R1 must carry flux but nothing consumes B."""
    return build_model('infeasible', [
        ('EX_A', {'A': 1}, 0, 10),
        ('R1', {'A': -1, 'B': 1}, 1, 10),
    ])


@pytest.fixture
def model_pair_through():
    """Two reversible reactions that produce and consume X, nothing else touches X."""
    return build_model('pair_through', [
        ('P1', {'X': 1}, -10, 10),
        ('P2', {'X': -1}, -10, 10),
    ])


@pytest.fixture
def model_capped():
    """Pathway whose flux is capped below 1e-4 by the export of B, plus a blocked reversible branch."""
    return build_model('capped', [
        ('EX_A', {'A': 1}, 0, 10),
        ('R1', {'A': -1, 'B': 1}, 0, 10),
        ('EX_B', {'B': -1}, 0, 0.995e-4),
        ('R2', {'B': -1, 'C': 1}, -10, 10),
    ])
