#!/usr/bin/env python3
"""
Benchmark Barnes-Hut force evaluation against direct summation.

Usage:
    python scripts/benchmark_barnes_hut.py [--sizes N,...] [--thetas T,...]

Examples:
    python scripts/benchmark_barnes_hut.py
    python scripts/benchmark_barnes_hut.py --sizes 500,2000 --thetas 0.3,0.5,1.0
    python scripts/benchmark_barnes_hut.py --workers 4 --output results.json
"""

from __future__ import annotations

import argparse
import json
import time
from typing import Any

import numpy as np

from nbody_sim import SimulationParameters, build_tree, compute_accelerations, spiral_galaxy
from nbody_sim.physics.force import direct_accelerations


def benchmark_step(
    n: int,
    theta: float,
    workers: int | None = None,
    exact: np.ndarray | None = None,
) -> dict[str, Any]:
    """
    Time tree build and force evaluation for one galaxy of n bodies.

    Returns:
        Dict with timing, tree shape and error against the exact result
    """
    bodies = spiral_galaxy(n, random_seed=42)
    params = SimulationParameters(theta=theta)

    start = time.perf_counter()
    tree = build_tree(bodies, params.root_bounds(bodies), params.max_depth)
    built = time.perf_counter()
    acc = compute_accelerations(tree, bodies, params, workers=workers)
    elapsed = time.perf_counter() - start

    result: dict[str, Any] = {
        "num_bodies": len(bodies),
        "theta": theta,
        "build_seconds": built - start,
        "time_seconds": elapsed,
        "tree_nodes": len(tree),
        "tree_depth": tree.depth(),
    }
    if exact is not None:
        result["relative_error"] = float(np.linalg.norm(acc - exact) / np.linalg.norm(exact))
    return result


def run_benchmarks(
    sizes: list[int],
    thetas: list[float],
    workers: int | None = None,
    max_direct: int = 3000,
) -> list[dict]:
    """Run benchmarks over every size and theta."""
    results = []

    print(f"\nBenchmarking {len(sizes)} sizes x {len(thetas)} thetas")
    print(f"Workers: {workers or 'serial'}")
    print("=" * 80)

    for n in sizes:
        print(f"\n{n} disk bodies")
        print("-" * 60)

        exact = None
        if n <= max_direct:
            bodies = spiral_galaxy(n, random_seed=42)
            start = time.perf_counter()
            exact = direct_accelerations(bodies, SimulationParameters())
            elapsed = time.perf_counter() - start
            print(f"  {'direct':12s}: {elapsed:.4f}s")
            results.append({"num_bodies": len(bodies), "theta": None, "time_seconds": elapsed})
        else:
            print(f"  {'direct':12s}: SKIPPED (O(n^2) memory too large)")

        for theta in thetas:
            result = benchmark_step(n, theta, workers=workers, exact=exact)
            line = (
                f"  theta={theta:<6g}: {result['time_seconds']:.4f}s "
                f"(build {result['build_seconds']:.4f}s, "
                f"{result['tree_nodes']} nodes, depth {result['tree_depth']})"
            )
            if "relative_error" in result:
                line += f"  err={result['relative_error']:.2e}"
            print(line)
            results.append(result)

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Barnes-Hut force evaluation")
    parser.add_argument("--sizes", default="500,2000,8000", help="Comma-separated body counts")
    parser.add_argument("--thetas", default="0.0,0.5,1.0", help="Comma-separated theta values")
    parser.add_argument("--workers", type=int, help="Thread pool size for force evaluation")
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    results = run_benchmarks(
        sizes=[int(s) for s in args.sizes.split(",")],
        thetas=[float(t) for t in args.thetas.split(",")],
        workers=args.workers,
    )

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
