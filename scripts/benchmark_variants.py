#!/usr/bin/env python3
"""
benchmark_variants.py: Time every operator under every region strategy.

Builds a random array, runs the optimized and the naive implementation of
each operator for each region strategy through ``localfilters.crosscheck``,
and prints one row per (operator, variant) pair with the best-of-N timings
and the largest discrepancy between the two.

Usage (CLI):
    python scripts/benchmark_variants.py --shape 64 64 --width 5 --repeat 3
    python scripts/benchmark_variants.py --kernel weights --dtype float32

Usage (Spyder / notebook):
    Edit the CONFIGURATION block below and run directly.
"""
from __future__ import annotations

import argparse
import sys

import numpy as np

from localfilters import CheckConfig, crosscheck

# ============================================================
# CONFIGURATION: Edit these for your run (Spyder-friendly)
# ============================================================
SHAPE      = (48, 48)        # array shape (any rank)
DTYPE      = "float64"       # source element type
WIDTH      = 3               # odd neighborhood width along every axis
KERNEL     = "box"           # "box", "mask" or "weights"
VARIANTS   = ("base", "ntuple", "ntuple_val", "map")
OPERATORS  = None            # None = all operators
REPEAT     = 3               # best-of-N timing
SEED       = 0
# ============================================================


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Time optimized vs naive local filters for each region strategy",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--shape", type=int, nargs="+", default=None,
                   help="Array shape")
    p.add_argument("--dtype", type=str, default=None,
                   help="Source element type (numpy name)")
    p.add_argument("--width", type=int, default=None,
                   help="Odd neighborhood width along every axis")
    p.add_argument("--kernel", choices=("box", "mask", "weights"), default=None,
                   help="Neighborhood kind")
    p.add_argument("--variants", nargs="+", default=None,
                   help="Region strategies to run")
    p.add_argument("--operators", nargs="+", default=None,
                   help="Operators to run (default: all)")
    p.add_argument("--repeat", type=int, default=None,
                   help="Timing repetitions (best of N)")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--quiet", "-q", action="store_true",
                   help="Only print the summary table")
    return p.parse_args(argv)


def make_source(shape, dtype, rng: np.random.Generator) -> np.ndarray:
    """Random source array: uniform [0, 1) for floats, [0, 100) for integers."""
    dtype = np.dtype(dtype)
    if dtype == np.bool_:
        return rng.random(shape) < 0.5
    if np.issubdtype(dtype, np.integer):
        return rng.integers(0, 100, size=shape).astype(dtype)
    return rng.random(shape).astype(dtype)


def make_neighborhood(kind: str, width: int, ndim: int, rng: np.random.Generator):
    if kind == "box":
        return width
    shape = (width,) * ndim
    if kind == "mask":
        # ball of radius width // 2
        grids = np.indices(shape) - width // 2
        return (grids ** 2).sum(axis=0) <= (width // 2) ** 2
    # positive weights keep the weighted mean well defined
    return rng.random(shape) + 0.1


def print_table(results) -> None:
    print(f"\n{'operator':<13s} {'variant':<11s} {'fast [s]':>10s} "
          f"{'naive [s]':>10s} {'speedup':>8s} {'max|diff|':>10s}  status")
    print("-" * 76)
    for r in results:
        speedup = r.elapsed_naive / r.elapsed_fast if r.elapsed_fast > 0 else float("inf")
        status = "OK" if r.ok else "MISMATCH"
        print(f"{r.operator:<13s} {r.variant:<11s} {r.elapsed_fast:>10.4f} "
              f"{r.elapsed_naive:>10.4f} {speedup:>8.1f} {r.max_abs_diff:>10.3g}  {status}")


def main(argv=None):
    args = parse_args(argv)

    # Resolve parameters: CLI args override editable constants
    shape = tuple(args.shape) if args.shape else tuple(SHAPE)
    dtype = args.dtype if args.dtype is not None else DTYPE
    width = args.width if args.width is not None else WIDTH
    kind = args.kernel if args.kernel is not None else KERNEL
    variants = tuple(args.variants) if args.variants else tuple(VARIANTS)
    operators = args.operators if args.operators else OPERATORS
    repeat = args.repeat if args.repeat is not None else REPEAT
    seed = args.seed if args.seed is not None else SEED
    verbose = not args.quiet

    cfg_kwargs = dict(variants=variants, repeat=repeat)
    if operators:
        cfg_kwargs["operators"] = tuple(operators)
    try:
        cfg = CheckConfig(**cfg_kwargs)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    rng = np.random.default_rng(seed)
    A = make_source(shape, dtype, rng)
    B = make_neighborhood(kind, width, len(shape), rng)

    if verbose:
        print(f"localfilters benchmark  |  shape={shape}  dtype={A.dtype}  "
              f"kernel={kind}  width={width}  repeat={repeat}")

    results = crosscheck(A, B, config=cfg, verbose=verbose)
    print_table(results)

    n_bad = sum(not r.ok for r in results)
    if n_bad:
        print(f"\n{n_bad} mismatching check(s)", file=sys.stderr)
        return 1
    print(f"\nAll {len(results)} checks agree.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
