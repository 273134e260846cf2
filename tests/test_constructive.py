from __future__ import annotations

import random

import pytest

from kpmeta.constructive import greedy_construct, probabilistic_construct, ratio_order
from kpmeta.instance import Instance
from kpmeta.solution import is_feasible


def test_greedy_example(example_instance):
    sol = greedy_construct(example_instance)
    assert sol.selected == frozenset({0, 1})
    assert sol.value == 7
    assert sol.weight == 5


def test_ratio_order_breaks_ties_by_index():
    inst = Instance.build([2, 4, 1, 3], [3, 6, 2, 3], 10)
    # ratios 1.5, 1.5, 2.0, 1.0
    assert ratio_order(inst) == [2, 0, 1, 3]


def test_greedy_is_deterministic(random_instance):
    assert greedy_construct(random_instance) == greedy_construct(random_instance)


def test_greedy_feasible(random_instance):
    sol = greedy_construct(random_instance)
    assert is_feasible(random_instance, sol)
    assert sol.value > 0


def test_greedy_skips_heavy_item_and_continues():
    # best ratio item does not fit after the first one; a later one does
    inst = Instance.build([5, 4, 1], [10, 7, 1], 6)
    sol = greedy_construct(inst)
    assert sol.selected == frozenset({0, 2})


def test_single_item_fits():
    inst = Instance.build([3], [9], 3)
    sol = greedy_construct(inst)
    assert sol.selected == frozenset({0})
    assert sol.value == 9


def test_capacity_zero_gives_empty_solutions(example_instance):
    inst = Instance.build(example_instance.weights, example_instance.profits, 0)
    for sol in (greedy_construct(inst), probabilistic_construct(inst, random.Random(3))):
        assert sol.value == 0
        assert sol.size() == 0


def test_empty_instance():
    inst = Instance.build([], [], 10)
    assert greedy_construct(inst).value == 0
    assert probabilistic_construct(inst, random.Random(0)).value == 0


@pytest.mark.parametrize("seed", range(10))
def test_probabilistic_feasible_and_maximal(random_instance, seed):
    sol = probabilistic_construct(random_instance, random.Random(seed), alpha=1.0)
    assert is_feasible(random_instance, sol)
    residual = random_instance.capacity - sol.weight
    for i, it in enumerate(random_instance.items):
        if i not in sol.selected:
            assert it.weight > residual


def test_probabilistic_reproducible_with_seed(random_instance):
    a = probabilistic_construct(random_instance, random.Random(42), alpha=2.0)
    b = probabilistic_construct(random_instance, random.Random(42), alpha=2.0)
    assert a == b


def test_probabilistic_varies_with_seed(random_instance):
    sols = {probabilistic_construct(random_instance, random.Random(s), alpha=0.0).selected for s in range(20)}
    assert len(sols) > 1


def test_probabilistic_large_alpha_matches_greedy():
    inst = Instance.build([1, 2, 3, 4], [4, 4, 3, 2], 6)
    sol = probabilistic_construct(inst, random.Random(7), alpha=60.0)
    assert sol == greedy_construct(inst)
    assert sol.value == 11


def test_probabilistic_huge_alpha_does_not_overflow(random_instance):
    sol = probabilistic_construct(random_instance, random.Random(1), alpha=5000.0)
    assert is_feasible(random_instance, sol)


def test_probabilistic_rejects_negative_alpha(example_instance):
    with pytest.raises(ValueError):
        probabilistic_construct(example_instance, random.Random(0), alpha=-0.5)
