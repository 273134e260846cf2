from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest

from kpmeta.instance import Instance
from kpmeta.io_instances import generate_uncorrelated


@pytest.fixture
def example_instance() -> Instance:
    # Greedy takes items 0 and 1 (ratios 1.5 and 1.33); 7 is also the optimum.
    return Instance.build([2, 3, 4, 5], [3, 4, 5, 6], 5, name="example", known_optimal=7)


@pytest.fixture
def random_instance() -> Instance:
    return generate_uncorrelated(30, 50, seed=1, name="rand30")
