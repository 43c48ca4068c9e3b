"""
Generic local-filter traversal shared by every operator.

For every output coordinate ``i`` (row-major order):

    v = initial(A[i])
    v = update(v, A[region], coefs)     # one fused fold over the region
    store(dst, i, v)

``region`` is the clipped set of source indices given by the chosen region
strategy, ``coefs`` is the matching block of kernel coefficients (``None``
for plain boxes).  An operator is nothing more than its
``initial`` / ``update`` / ``store`` triple.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

import numpy as np

from .config import DEFAULT_VARIANT
from .errors import AliasingError, OutputTypeError, ShapeMismatchError
from .neighborhood import CartesianIndex, Kernel, is_symmetric, to_neighborhood
from .region import array_limits, get_resolver

Initial = Callable[[Any], Any]
Update = Callable[[Any, np.ndarray, Optional[np.ndarray]], Any]
Store = Callable[[np.ndarray, tuple, Any], None]


def check_same_shape(name: str, reference: np.ndarray, *arrays: np.ndarray) -> None:
    """Raise ShapeMismatchError unless every array has the reference shape."""
    for arr in arrays:
        if arr.shape != reference.shape:
            raise ShapeMismatchError(
                f"{name}: array of shape {arr.shape} does not match source "
                f"shape {reference.shape}"
            )


def check_output_type(name: str, dtype, *arrays: np.ndarray) -> None:
    """
    Raise OutputTypeError unless results of type ``dtype`` can be stored in
    every array under ``same_kind`` casting.  Float results are refused by an
    integer output, for instance.
    """
    for arr in arrays:
        if not np.can_cast(dtype, arr.dtype, casting="same_kind"):
            raise OutputTypeError(
                f"{name}: cannot store {np.dtype(dtype)} results in an output of "
                f"type {arr.dtype}"
            )


def readable_source(name: str, A: np.ndarray, *outputs: np.ndarray) -> np.ndarray:
    """
    Return an array the traversal can read from while writing ``outputs``.

    An output that *is* the source gets a private snapshot of the source so
    that in-place calls match out-of-place ones.  Distinct arrays sharing
    memory with the source cannot be handled and are rejected.
    """
    for k, out in enumerate(outputs):
        for other in outputs[k + 1:]:
            if np.shares_memory(out, other):
                raise AliasingError(f"{name}: output arrays must not share memory")
    if any(out is A for out in outputs):
        return A.copy()
    for out in outputs:
        if np.shares_memory(out, A):
            raise AliasingError(
                f"{name}: output shares memory with the source but is not the "
                f"same array"
            )
    return A


def localfilter(
    dst: np.ndarray,
    A: np.ndarray,
    B,
    initial: Initial,
    update: Update,
    store: Store,
    *,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Run a local filter over every coordinate of ``A``.

    Parameters
    ----------
    dst : ndarray
        Destination, same shape as ``A``.  May be ``A`` itself.
    A : ndarray
        Source array.
    B : neighborhood specification
        Anything accepted by ``to_neighborhood``.
    initial : callable ``(a) -> v``
        Seeds the accumulator from the value at the output coordinate.
    update : callable ``(v, values, coefs) -> v``
        Folds the region values (a sub-array of ``A``) into ``v``.  ``coefs``
        has the shape of ``values`` for kernels and is ``None`` for boxes.
    store : callable ``(dst, i, v)``
        Writes the folded value for coordinate ``i``.
    variant : str
        Region strategy, one of ``localfilters.region.VARIANTS``.

    Returns
    -------
    dst : ndarray

    Examples
    --------
    Local minimum over a 3×3 box::

        localfilter(dst, A, 3,
                    lambda a: np.inf,
                    lambda v, x, c: min(v, x.min()),
                    lambda d, i, v: d.__setitem__(i, v))
    """
    A = np.asarray(A)
    check_same_shape("localfilter", A, dst)
    B = to_neighborhood(B, A.ndim)
    resolver = get_resolver(variant)
    src = readable_source("localfilter", A, dst)

    imin, imax = array_limits(A.shape)
    kernel = B if isinstance(B, Kernel) else None
    if is_symmetric(B):
        off = B.last
        def region_of(i):
            return resolver.centered(imin, imax, i, off)
    else:
        kmin, kmax = B.limits()
        def region_of(i):
            return resolver.general(imin, imax, i, kmin, kmax)

    for idx in np.ndindex(A.shape):
        i = CartesianIndex(idx)
        v = initial(src[idx])
        region = region_of(i)
        coefs = None if kernel is None else kernel.coefficients_for(i, region)
        v = update(v, src[region.slices], coefs)
        store(dst, idx, v)
    return dst


def store_value(dst: np.ndarray, i: tuple, v) -> None:
    dst[i] = v
