import random

from kpmeta.lns import LNSEngine
from kpmeta.oracle import BranchAndBoundOracle
from kpmeta.solution import Solution
from kpmeta.visualization import plot_lns_trace, plot_selection


def test_plot_lns_trace(tmp_path, random_instance):
    engine = LNSEngine(random_instance, BranchAndBoundOracle(), rng=random.Random(0), max_iterations=20)
    engine.run(1000)
    path = tmp_path / "trace.png"
    plot_lns_trace(engine.trace, known_optimal=engine.best_value, save_path=str(path), show=False)
    assert path.exists()


def test_plot_empty_trace(tmp_path):
    path = tmp_path / "empty.png"
    plot_lns_trace([], save_path=str(path), show=False)
    assert path.exists()


def test_plot_selection(tmp_path, example_instance):
    path = tmp_path / "sel.png"
    plot_selection(example_instance, Solution.from_indices(example_instance, [0, 1]),
                   save_path=str(path), show=False)
    assert path.exists()
    plot_selection(example_instance, Solution.empty(), save_path=str(path), show=False)
