from __future__ import annotations

import pytest

from kpmeta.errors import InstanceError
from kpmeta.instance import Instance, Item
from kpmeta.result import SearchResult
from kpmeta.solution import Fixing, Solution, is_feasible


def test_build_exposes_items_in_order(example_instance):
    assert example_instance.n == 4
    assert example_instance.weights == (2, 3, 4, 5)
    assert example_instance.profits == (3, 4, 5, 6)
    assert example_instance.items[2] == Item(weight=4, profit=5)


@pytest.mark.parametrize("weight,profit", [(0, 1), (1, 0), (-3, 2), (True, 2), (1.5, 2)])
def test_item_rejects_bad_values(weight, profit):
    with pytest.raises(InstanceError):
        Item(weight=weight, profit=profit)


def test_instance_rejects_negative_capacity():
    with pytest.raises(InstanceError):
        Instance.build([1], [1], -1)


def test_build_rejects_length_mismatch():
    with pytest.raises(InstanceError):
        Instance.build([1, 2], [1], 3)


def test_instance_error_is_value_error():
    assert issubclass(InstanceError, ValueError)


def test_has_fitting_item():
    assert Instance.build([3, 4], [1, 1], 3).has_fitting_item()
    assert not Instance.build([3, 4], [1, 1], 2).has_fitting_item()
    assert not Instance.build([], [], 10).has_fitting_item()


def test_solution_totals_and_selection(example_instance):
    sol = Solution.from_indices(example_instance, [0, 1])
    assert sol.value == 7
    assert sol.weight == 5
    assert sol.selection(4) == (True, True, False, False)
    assert is_feasible(example_instance, sol)


def test_is_feasible_rejects_overweight_and_inconsistent(example_instance):
    assert not is_feasible(example_instance, Solution.from_indices(example_instance, [0, 2]))
    assert not is_feasible(example_instance, Solution(frozenset({0}), 100, 2))
    assert not is_feasible(example_instance, Solution(frozenset({7}), 0, 0))
    assert is_feasible(example_instance, Solution.empty())


def test_fixing_around_is_complement_of_relaxed(example_instance):
    incumbent = Solution.from_indices(example_instance, [0, 1])
    fixing = Fixing.around(example_instance, incumbent, relaxed=[1, 3])
    assert fixing.values == (True, None, False, None)
    assert fixing.free_indices() == [1, 3]
    assert fixing.fixed_in() == [0]
    assert fixing.fixed_weight(example_instance) == 2
    assert fixing.respects(Solution.from_indices(example_instance, [0, 3]))
    assert not fixing.respects(Solution.from_indices(example_instance, [1]))


def test_search_result_gap():
    res = SearchResult("lns", 7, 12.0, 3, False, known_optimal=10)
    assert res.gap_percent == pytest.approx(30.0)
    assert SearchResult("lns", 7, 12.0, 3, False).gap_percent == -1.0
    assert SearchResult("lns", 0, 12.0, 3, False, known_optimal=0).gap_percent == -1.0


def test_search_result_is_write_once():
    res = SearchResult("greedy", 7, 1.0, 0, False)
    with pytest.raises(AttributeError):
        res.best_value = 8


def test_search_result_row():
    row = SearchResult("greedy", 7, 1.23456, 0, False, known_optimal=7, instance="ex").as_row()
    assert row["instance"] == "ex"
    assert row["value"] == 7
    assert row["time_ms"] == 1.235
    assert row["gap_percent"] == 0.0
    assert row["optimal_known"] == 7
