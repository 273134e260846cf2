"""
Comparaison des stratégies : export CSV, tableau récapitulatif par difficulté
et graphique comparatif des valeurs moyennes par méthode.
"""

from __future__ import annotations

import csv
import os
import statistics
from collections import defaultdict
from typing import Dict, List, Optional

import matplotlib.pyplot as plt

from .instance import Instance
from .result import SearchResult

FIELDS = [
    "instance", "difficulty", "class", "n", "capacity", "total_weight", "total_profit",
    "method", "value", "time_ms", "nodes", "optimal", "optimal_known", "gap_percent",
]


def result_row(inst: Instance, res: SearchResult) -> Dict[str, object]:
    row = res.as_row()
    row.update({
        "instance": inst.name,
        "difficulty": inst.difficulty,
        "class": inst.family or "Unknown",
        "n": inst.n,
        "capacity": inst.capacity,
        "total_weight": sum(inst.weights),
        "total_profit": sum(inst.profits),
    })
    return {k: row[k] for k in FIELDS}


def write_results_csv(rows: List[Dict[str, object]], csv_path: str) -> None:
    if not rows:
        raise RuntimeError("No results produced (no instances / methods).")
    folder = os.path.dirname(csv_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=FIELDS)
        w.writeheader()
        w.writerows(rows)


def load_results_csv(csv_path: str) -> List[Dict]:
    """Charge les résultats depuis le fichier CSV."""
    results = []
    with open(csv_path, "r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            row["n"] = int(row["n"])
            row["capacity"] = int(row["capacity"])
            row["value"] = int(row["value"])
            row["time_ms"] = float(row["time_ms"])
            row["nodes"] = int(row["nodes"])
            row["optimal"] = row["optimal"].lower() == "true"
            row["optimal_known"] = int(row["optimal_known"])
            row["gap_percent"] = float(row["gap_percent"])
            results.append(row)
    return results


def summarize(results: List[Dict]) -> Dict[str, Dict[str, Dict[str, float]]]:
    """
    {difficulty: {method: {"count", "avg_value", "avg_time_ms", "optimal"}}}
    """
    grouped = defaultdict(lambda: defaultdict(list))
    for row in results:
        grouped[row["difficulty"] or "-"][row["method"]].append(row)

    summary: Dict[str, Dict[str, Dict[str, float]]] = {}
    for difficulty, by_method in grouped.items():
        summary[difficulty] = {}
        for method, rows in by_method.items():
            summary[difficulty][method] = {
                "count": len(rows),
                "avg_value": statistics.mean(r["value"] for r in rows),
                "avg_time_ms": statistics.mean(r["time_ms"] for r in rows),
                "optimal": sum(1 for r in rows if r["optimal"]),
            }
    return summary


def print_summary(results: List[Dict]) -> None:
    summary = summarize(results)
    print(f"\n{'='*70}")
    print("RAPPORT D'ANALYSE")
    print(f"{'='*70}")
    for difficulty in sorted(summary):
        print(f"\n--- Instances {difficulty.upper()} ---")
        for method in sorted(summary[difficulty]):
            s = summary[difficulty][method]
            print(f"{method:<20} : valeur moy={s['avg_value']:.0f}, temps moy={s['avg_time_ms']:.0f}ms, "
                  f"optimaux={s['optimal']}/{s['count']}")
    print()


def plot_method_comparison(results: List[Dict], save_path: Optional[str] = None, show: bool = True):
    """Graphique en barres : valeur moyenne par méthode, groupée par difficulté."""
    summary = summarize(results)
    if not summary:
        print("Aucune donnée à afficher dans le graphique.")
        return

    difficulties = sorted(summary)
    methods = sorted({m for d in summary.values() for m in d})
    width = 0.8 / max(1, len(methods))
    x = range(len(difficulties))

    fig, ax = plt.subplots(figsize=(max(8, len(difficulties) * 2.5), 6))
    for k, method in enumerate(methods):
        values = [summary[d].get(method, {}).get("avg_value", 0) for d in difficulties]
        offset = (k - (len(methods) - 1) / 2) * width
        ax.bar([i + offset for i in x], values, width, label=method, alpha=0.8)

    ax.set_xlabel("Difficulté", fontsize=12)
    ax.set_ylabel("Valeur moyenne", fontsize=12)
    ax.set_title("Comparaison des méthodes - valeur moyenne", fontsize=14, fontweight="bold")
    ax.set_xticks(list(x))
    ax.set_xticklabels(difficulties)
    ax.legend()
    ax.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()

    if save_path:
        os.makedirs(os.path.dirname(save_path) if os.path.dirname(save_path) else ".", exist_ok=True)
        fig.savefig(save_path, dpi=200, bbox_inches="tight")
    if show:
        plt.show()
    else:
        plt.close(fig)
