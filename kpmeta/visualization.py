from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from .instance import Instance
from .solution import Solution


def _finish(fig, ax, title: str, save_path: Optional[str], show: bool) -> None:
    ax.grid(True, linewidth=0.3)
    ax.set_title(title)
    ax.legend(loc="best", fontsize=9)

    if save_path:
        fig.savefig(save_path, dpi=200, bbox_inches="tight")
    if show:
        plt.show()
    else:
        plt.close(fig)


def plot_lns_trace(
    trace: Sequence[Tuple[float, int]],
    title: str = "",
    known_optimal: Optional[int] = None,
    save_path: Optional[str] = None,
    show: bool = True,
):
    """
    Incumbent value over time for one LNS run, drawn as a step curve
    (the incumbent only changes on improvements).
    """
    fig, ax = plt.subplots()

    if trace:
        ts = [t for t, _ in trace]
        vs = [v for _, v in trace]
        ax.step(ts, vs, where="post", label=f"Incumbent (best={vs[-1]})")
        ax.scatter(ts, vs, s=12, zorder=3)

    if known_optimal is not None and known_optimal > 0:
        ax.axhline(known_optimal, color="black", linestyle="--", linewidth=1.0, label=f"Optimum ({known_optimal})")

    ax.set_xlabel("Elapsed (ms)")
    ax.set_ylabel("Value")
    _finish(fig, ax, title or f"LNS | improvements={max(0, len(trace) - 1)}", save_path, show)


def plot_selection(
    inst: Instance,
    sol: Solution,
    title: str = "",
    save_path: Optional[str] = None,
    show: bool = True,
):
    """Profit vs weight of every item, selected items highlighted."""
    fig, ax = plt.subplots()

    out: List[int] = [i for i in range(inst.n) if not sol.includes(i)]
    ax.scatter([inst.items[i].weight for i in out], [inst.items[i].profit for i in out],
               s=10, alpha=0.6, label="Items")

    if sol.selected:
        picked = sorted(sol.selected)
        ax.scatter([inst.items[i].weight for i in picked], [inst.items[i].profit for i in picked],
                   s=30, edgecolors="black", label=f"Selected (|S|={sol.size()})")

    ax.set_xlabel("Weight")
    ax.set_ylabel("Profit")

    if not title:
        title = f"{inst.name} | C={inst.capacity} | value={sol.value} | weight={sol.weight}"
    _finish(fig, ax, title, save_path, show)
