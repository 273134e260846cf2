from __future__ import annotations

import os
import random
import logging
import argparse
from datetime import datetime
from typing import Dict, List

from kpmeta.errors import OracleUnavailable
from kpmeta.instance import Instance
from kpmeta.io_instances import GENERATORS, read_kp, iter_kp_files
from kpmeta.lns import LNSEngine
from kpmeta.oracle import CpSatOracle
from kpmeta.strategies import STRATEGIES, solve_one
from kpmeta.solution import is_feasible
from kpmeta.comparison import (
    result_row,
    write_results_csv,
    load_results_csv,
    print_summary,
    plot_method_comparison,
)
from kpmeta.visualization import plot_lns_trace, plot_selection


DEFAULT_METHODS: List[str] = ["greedy", "grasp", "lns", "exact_cpsat"]


def _safe_stem(s: str) -> str:
    s = s.replace(" ", "_")
    s = s.replace(":", "-").replace("/", "-").replace("\\", "-")
    s = "".join(ch for ch in s if ch.isalnum() or ch in "._-")
    return s


def load_instances(file: str = None, folder: str = None, seed: int = 42,
                   generator: str = "uncorrelated") -> List[Instance]:
    if file is not None:
        return [read_kp(file)]
    if folder is not None:
        paths = iter_kp_files(folder)
        if paths:
            return [read_kp(p) for p in paths]
        print(f"No .kp files found in {folder}, using generated instances ({generator}).")
    return GENERATORS[generator](seed)


def run_batch(instances: List[Instance],
              methods: List[str],
              time_ms: float,
              seed: int,
              alpha: float,
              rho: float,
              slice_ms: float,
              csv_out: str) -> List[Dict[str, object]]:
    rows = []
    total_tasks = len(instances) * len(methods)
    current_task = 0

    print(f"\n{'='*70}")
    print(f"Batch: {len(instances)} instance(s) x {len(methods)} methode(s) = {total_tasks} tache(s)")
    print(f"Methodes: {', '.join(methods)}, Temps/run: {time_ms:.0f}ms")
    print(f"{'='*70}\n")

    for idx, inst in enumerate(instances):
        print(f"[Instance {idx+1}/{len(instances)}] {inst.name} (n={inst.n}, C={inst.capacity}, {inst.difficulty or '-'})")

        for method in methods:
            current_task += 1
            print(f"  [{current_task}/{total_tasks}] {method} ... ", end="", flush=True)

            try:
                res = solve_one(
                    inst,
                    method,
                    time_limit_ms=time_ms,
                    seed=seed,
                    alpha=alpha,
                    rho=rho,
                    slice_ms=slice_ms,
                )
            except OracleUnavailable as e:
                # skipped, no row for this pair
                print(f"FAIL ({e})")
                continue

            feas = res.solution is None or is_feasible(inst, res.solution)
            status = "OK" if feas else "FAIL"
            opt = " [OPT]" if res.proven_optimal else ""
            print(f"Done: value={res.best_value}, {res.elapsed_ms:.0f}ms, {status}{opt}")

            rows.append(result_row(inst, res))

    write_results_csv(rows, csv_out)

    print(f"\n{'='*70}")
    print(f"Termine: {len(rows)} resultat(s) -> {csv_out}")
    print(f"{'='*70}")
    return rows


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--file", type=str, default=None, help="Path to one .kp instance.")
    ap.add_argument("--folder", type=str, default=None, help="Folder containing .kp instances (searched recursively).")
    ap.add_argument("--csv", type=str, default="results.csv", help="Output CSV file.")
    ap.add_argument("--generator", type=str, default="uncorrelated", choices=sorted(GENERATORS),
                    help="Generated instance set used when no .kp file is found.")

    ap.add_argument("--algo", type=str, nargs="+", default=DEFAULT_METHODS, choices=sorted(STRATEGIES))
    ap.add_argument("--time", type=float, default=2000.0, help="Budget per run (milliseconds).")

    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--alpha", type=float, default=1.0, help="Exponent of the randomized construction.")
    ap.add_argument("--rho", type=float, default=0.15, help="LNS relaxed fraction.")
    ap.add_argument("--slice", type=float, default=100.0, help="LNS per-iteration oracle budget (milliseconds).")

    # Plot mode (single instance, LNS)
    ap.add_argument("--plot", action="store_true", help="Plot the LNS trace and selection for --file.")
    ap.add_argument("--compare-plot", type=str, default=None, help="Save the method comparison chart to this path.")
    ap.add_argument("--report", type=str, default=None, help="Summarize an existing results CSV and exit.")
    ap.add_argument("--log-level", type=str, default="WARNING")

    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Mode report
    if args.report:
        results = load_results_csv(args.report)
        print_summary(results)
        plot_method_comparison(results, save_path=args.compare_plot, show=args.compare_plot is None)
        return

    # Mode plot
    if args.plot:
        if args.file is None:
            raise SystemExit("--plot requires --file <path_to_kp>")

        inst = read_kp(args.file)
        engine = LNSEngine(
            inst,
            CpSatOracle(seed=args.seed),
            neighborhood_fraction=args.rho,
            slice_ms=args.slice,
            rng=random.Random(args.seed),
        )
        res = engine.run(args.time)

        timestamp = datetime.now().strftime("%d_%H_%M")
        plots_dir = os.path.join("results", "plots", timestamp)
        os.makedirs(plots_dir, exist_ok=True)
        base = _safe_stem(inst.name)

        trace_path = os.path.join(plots_dir, f"{base}__lns__V{res.best_value}__T{args.time:.0f}.png")
        plot_lns_trace(
            engine.trace,
            title=f"{inst.name} | lns | value={res.best_value} | it={res.iterations}",
            known_optimal=inst.known_optimal,
            save_path=trace_path,
            show=True,
        )
        sel_path = os.path.join(plots_dir, f"{base}__selection.png")
        plot_selection(inst, res.solution, save_path=sel_path, show=True)

        print(f"Saved plots -> {trace_path}, {sel_path}")
        return

    instances = load_instances(args.file, args.folder, generator=args.generator)
    if not instances:
        raise SystemExit("No instance available.")

    rows = run_batch(
        instances,
        methods=args.algo,
        time_ms=args.time,
        seed=args.seed,
        alpha=args.alpha,
        rho=args.rho,
        slice_ms=args.slice,
        csv_out=args.csv,
    )
    print_summary(rows)
    if args.compare_plot:
        plot_method_comparison(rows, save_path=args.compare_plot, show=False)
        print(f"Saved comparison -> {args.compare_plot}")

    print(f"Done. Wrote: {args.csv}")
    print(f"Instances processed: {len(instances)}")


if __name__ == "__main__":
    main()
