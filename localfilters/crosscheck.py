"""
Cross-checks between the optimized operators, the naive references and
scipy.ndimage.

``crosscheck`` runs every configured operator through both the optimized
(``morphology`` / ``linear``) and the naive (``naive``) implementation for
every configured region strategy, and reports the largest discrepancy
together with the wall time of each side.

``ndimage_reference`` is a third, independent oracle: scipy's constant-mode
filters padded with a neutral value (+inf for minima, -inf for maxima, 0 for
sums) are exactly the clip-boundary filters, as long as the neighborhood is
centered (odd shape, default anchor).
"""
from __future__ import annotations

import time
from typing import Callable, List, NamedTuple, Optional, Tuple

import numpy as np
from scipy import ndimage

from . import linear, morphology, naive
from .config import CheckConfig
from .neighborhood import (
    CenteredBox,
    Kernel,
    Neighborhood,
    default_anchor,
    to_neighborhood,
)
from .numeric import is_floating


class CheckResult(NamedTuple):
    operator: str
    variant: str
    max_abs_diff: float
    ok: bool
    elapsed_fast: float    # seconds, best of ``repeat``
    elapsed_naive: float   # seconds, best of ``repeat``


_FAST = {
    "erode": morphology.erode,
    "dilate": morphology.dilate,
    "localextrema": morphology.localextrema,
    "localmean": linear.localmean,
    "convolve": linear.convolve,
    "opening": morphology.opening,
    "closing": morphology.closing,
    "top_hat": morphology.top_hat,
    "bottom_hat": morphology.bottom_hat,
}

_NAIVE = {
    "erode": naive.erode,
    "dilate": naive.dilate,
    "localextrema": naive.localextrema,
    "localmean": naive.localmean,
    "convolve": naive.convolve,
    "opening": naive.opening,
    "closing": naive.closing,
    "top_hat": naive.top_hat,
    "bottom_hat": naive.bottom_hat,
}

# Operators built only from min / max: results must be bit-identical.
_EXACT = frozenset(
    ["erode", "dilate", "localextrema", "opening", "closing", "top_hat", "bottom_hat"]
)


def applicable(operator: str, A: np.ndarray, B: Neighborhood) -> bool:
    """Whether ``operator`` accepts this source / neighborhood combination."""
    numeric_kernel = isinstance(B, Kernel) and not B.is_boolean
    if operator == "convolve":
        return numeric_kernel
    if operator in _EXACT and numeric_kernel:
        return is_floating(A.dtype)
    return True


def _timed(func: Callable, A, B, variant, repeat: int):
    best = float("inf")
    result = None
    for _ in range(repeat):
        t0 = time.perf_counter()
        result = func(A, B, variant=variant)
        best = min(best, time.perf_counter() - t0)
    return result, best


def _max_abs_diff(x: np.ndarray, y: np.ndarray) -> float:
    if x.size == 0:
        return 0.0
    x64 = x.astype(np.float64)
    y64 = y.astype(np.float64)
    with np.errstate(invalid="ignore"):
        diff = np.abs(x64 - y64)
    # equal infinities and NaN on both sides count as agreement
    diff[(x64 == y64) | (np.isnan(x64) & np.isnan(y64))] = 0.0
    diff[np.isnan(diff)] = np.inf
    return float(diff.max())


def _compare(x, y, exact: bool, rtol: float, atol: float) -> Tuple[bool, float]:
    pairs = list(zip(x, y)) if isinstance(x, tuple) else [(x, y)]
    ok = True
    worst = 0.0
    for a, b in pairs:
        if a.shape != b.shape:
            return False, float("inf")
        nan = is_floating(a.dtype) and is_floating(b.dtype)
        if exact:
            ok = ok and bool(np.array_equal(a, b, equal_nan=nan))
        else:
            ok = ok and bool(np.allclose(a, b, rtol=rtol, atol=atol, equal_nan=nan))
        worst = max(worst, _max_abs_diff(a, b))
    return ok, worst


def crosscheck(
    A: np.ndarray,
    B=3,
    config: Optional[CheckConfig] = None,
    verbose: bool = False,
) -> List[CheckResult]:
    """
    Compare optimized and naive operators on the same input.

    Parameters
    ----------
    A : ndarray
        Source array.
    B : neighborhood specification, optional
        Shared by every operator (it is also ``r`` for the top / bottom hats).
    config : CheckConfig, optional
        Operators, variants, tolerances and timing repetitions.
    verbose : bool
        Print one line per check.

    Returns
    -------
    list of CheckResult
        One entry per (operator, variant) pair that applies to ``B``.
    """
    cfg = config if config is not None else CheckConfig()
    A = np.asarray(A)
    nbhd = to_neighborhood(B, A.ndim)

    results: List[CheckResult] = []
    for op in cfg.operators:
        if not applicable(op, A, nbhd):
            if verbose:
                print(f"  {op:<13s} skipped (not defined for {nbhd!r} on {A.dtype})")
            continue
        exact = op in _EXACT
        for variant in cfg.variants:
            fast, t_fast = _timed(_FAST[op], A, nbhd, variant, cfg.repeat)
            ref, t_naive = _timed(_NAIVE[op], A, nbhd, variant, cfg.repeat)
            ok, diff = _compare(fast, ref, exact, cfg.rtol, cfg.atol)
            results.append(CheckResult(op, variant, diff, ok, t_fast, t_naive))
            if verbose:
                status = "OK" if ok else "MISMATCH"
                print(f"  {op:<13s} {variant:<11s} max|diff|={diff:<10.3g} {status:<8s} "
                      f"fast {t_fast:.4f}s  naive {t_naive:.4f}s")
    return results


def ndimage_reference(operator: str, A: np.ndarray, B=3) -> np.ndarray:
    """
    Compute ``operator`` with scipy.ndimage for comparison.

    Parameters
    ----------
    operator : {"erode", "dilate", "localmean", "convolve"}
    A : ndarray of floats
    B : neighborhood specification
        Centered box, or kernel of odd shape with its default anchor.

    Raises
    ------
    ValueError
        Unsupported operator, source type or neighborhood.
    """
    A = np.asarray(A)
    if not is_floating(A.dtype):
        raise ValueError(f"ndimage_reference: floating-point source required, got {A.dtype}")
    B = to_neighborhood(B, A.ndim)
    if isinstance(B, CenteredBox):
        ker = np.ones(B.shape, dtype=bool)
    elif (
        isinstance(B, Kernel)
        and all(n % 2 == 1 for n in B.shape)
        and tuple(B.anchor) == tuple(default_anchor(B.shape))
    ):
        ker = np.asarray(B.coefs)
    else:
        raise ValueError(f"ndimage_reference: neighborhood must be centered, got {B!r}")

    # scipy's footprint filters read A[i + m - c]; ours read A[i - (m - c)].
    flipped = ker[(slice(None, None, -1),) * ker.ndim]
    boolean = ker.dtype == np.bool_

    if operator == "erode":
        if boolean:
            return ndimage.minimum_filter(A, footprint=flipped, mode="constant", cval=np.inf)
        return ndimage.grey_erosion(A, structure=flipped, mode="constant", cval=np.inf)
    if operator == "dilate":
        if boolean:
            return ndimage.maximum_filter(A, footprint=flipped, mode="constant", cval=-np.inf)
        # grey_dilation reflects the structure itself
        return ndimage.grey_dilation(A, structure=ker, mode="constant", cval=-np.inf)
    if operator == "localmean":
        weights = ker.astype(A.dtype)
        total = ndimage.convolve(A, weights, mode="constant", cval=0.0)
        norm = ndimage.convolve(np.ones_like(A), weights, mode="constant", cval=0.0)
        return total / norm
    if operator == "convolve":
        if boolean:
            raise ValueError("ndimage_reference: convolve requires a numeric kernel")
        return ndimage.convolve(A, ker.astype(A.dtype), mode="constant", cval=0.0)
    raise ValueError(
        f"ndimage_reference: operator must be one of "
        f"['erode', 'dilate', 'localmean', 'convolve'], got {operator!r}"
    )
