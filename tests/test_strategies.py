import pytest

from kpmeta.constructive import greedy_construct
from kpmeta.oracle import BranchAndBoundOracle
from kpmeta.solution import is_feasible
from kpmeta.strategies import STRATEGIES, run_exact, run_greedy, run_probabilistic, solve_one


def test_run_greedy(example_instance):
    res = run_greedy(example_instance)
    assert res.method == "greedy"
    assert res.best_value == 7
    assert res.iterations == 0
    assert not res.proven_optimal
    assert res.instance == "example"
    assert res.elapsed_ms >= 0


def test_run_probabilistic_is_seeded(random_instance):
    a = run_probabilistic(random_instance, alpha=2.0, seed=4)
    b = run_probabilistic(random_instance, alpha=2.0, seed=4)
    assert a.method == "grasp"
    assert a.solution == b.solution
    assert is_feasible(random_instance, a.solution)


def test_run_exact_bnb_is_proven(random_instance):
    res = run_exact(random_instance, 5000, oracle=BranchAndBoundOracle())
    assert res.method == "exact_bnb"
    assert res.proven_optimal
    assert res.best_value >= greedy_construct(random_instance).value
    assert res.iterations > 0


def test_run_exact_default_oracle(example_instance):
    res = run_exact(example_instance, 2000)
    assert res.method == "exact_cpsat"
    assert res.best_value == 7
    assert res.proven_optimal
    assert res.gap_percent == 0.0


def test_run_exact_rejects_empty_budget(example_instance):
    with pytest.raises(ValueError):
        run_exact(example_instance, 0, oracle=BranchAndBoundOracle())


@pytest.mark.parametrize("method", sorted(STRATEGIES))
def test_solve_one_every_method(example_instance, method):
    res = solve_one(example_instance, method, time_limit_ms=300, seed=1)
    assert res.method == method
    assert res.best_value == 7
    assert is_feasible(example_instance, res.solution)


def test_solve_one_is_case_insensitive(example_instance):
    assert solve_one(example_instance, "GREEDY", time_limit_ms=10).method == "greedy"


def test_solve_one_unknown_method(example_instance):
    with pytest.raises(ValueError):
        solve_one(example_instance, "tabu", time_limit_ms=10)
