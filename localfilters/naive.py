"""
Naive (non-optimized) local filters used as references.

Every operator of ``morphology`` and ``linear`` is written again here as an
explicit element-by-element loop: one Python-level step per source index of
each region, no fused numpy reductions.  The region strategy is selectable
exactly as in the optimized operators, so the two can be compared for every
variant.  Results must match the optimized operators exactly for min / max
based filters, and up to summation order for means and convolutions.

Also provided is a generic element-wise ``localfilter`` where ``update``
receives one source value and one coefficient at a time, and the
``slow_erode`` / ``slow_dilate`` / ``slow_mean`` filters built on top of it.
"""
from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np

from .config import DEFAULT_VARIANT
from .engine import check_output_type, check_same_shape, readable_source
from .errors import DivisionByZeroError, UnsupportedKernelError
from .neighborhood import CartesianIndex, Kernel, to_neighborhood
from .numeric import float_dtype, is_floating, sum_dtype, type_limits
from .region import Region, array_limits, get_resolver, resolve


def _sites(
    A: np.ndarray, B, variant
) -> Iterator[Tuple[tuple, CartesianIndex, Region]]:
    """Yield ``(idx, i, region)`` for every coordinate of ``A``."""
    resolver = get_resolver(variant)
    imin, imax = array_limits(A.shape)
    for idx in np.ndindex(A.shape):
        i = CartesianIndex(idx)
        yield idx, i, resolve(resolver, imin, imax, i, B)


def _grayscale(name: str, A: np.ndarray, B: Kernel) -> Kernel:
    if not is_floating(A.dtype):
        raise UnsupportedKernelError(
            f"{name}: numeric kernels require a floating-point source, got {A.dtype}"
        )
    return Kernel(B.coefs.astype(A.dtype), anchor=B.anchor)


def _prepare(name: str, A, B, output, dtype=None):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if output is None:
        output = np.empty(A.shape, dtype=A.dtype if dtype is None else dtype)
    else:
        check_same_shape(name, A, output)
        check_output_type(name, A.dtype if dtype is None else dtype, output)
    return A, B, output


# --------------------------------------------------------------------------- #
# Generic element-wise filter
# --------------------------------------------------------------------------- #

def localfilter(dst, A, B, initial, update, store, *, variant=DEFAULT_VARIANT):
    """
    Element-wise local filter::

        for i in A:
            v = initial(A[i])
            for j in region(i):
                v = update(v, A[j], B[anchor + i - j])   # True for boxes
            store(dst, i, v)
    """
    A = np.asarray(A)
    check_same_shape("localfilter", A, dst)
    B = to_neighborhood(B, A.ndim)
    src = readable_source("localfilter", A, dst)
    ker = B.coefs if isinstance(B, Kernel) else None
    for idx, i, region in _sites(src, B, variant):
        v = initial(src[idx])
        if ker is None:
            for j in region.indices():
                v = update(v, src[j], True)
        else:
            k = i + B.anchor
            for j in region.indices():
                v = update(v, src[j], ker[k - j])
        store(dst, idx, v)
    return dst


def _store(dst, i, v):
    dst[i] = v


def slow_erode(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A, B, output = _prepare("slow_erode", A, B, output)
    tmax = type_limits(A.dtype)[1]
    if not isinstance(B, Kernel):
        update = lambda v, a, b: np.minimum(v, a)  # noqa: E731
    elif B.is_boolean:
        update = lambda v, a, b: np.minimum(v, a) if b else v  # noqa: E731
    else:
        B = _grayscale("slow_erode", A, B)
        update = lambda v, a, b: np.minimum(v, a - b)  # noqa: E731
    return localfilter(output, A, B, lambda a: tmax, update, _store, variant=variant)


def slow_dilate(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A, B, output = _prepare("slow_dilate", A, B, output)
    tmin = type_limits(A.dtype)[0]
    if not isinstance(B, Kernel):
        update = lambda v, a, b: np.maximum(v, a)  # noqa: E731
    elif B.is_boolean:
        update = lambda v, a, b: np.maximum(v, a) if b else v  # noqa: E731
    else:
        B = _grayscale("slow_dilate", A, B)
        update = lambda v, a, b: np.maximum(v, a + b)  # noqa: E731
    return localfilter(output, A, B, lambda a: tmin, update, _store, variant=variant)


def slow_mean(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if isinstance(B, Kernel) and not B.is_boolean:
        raise UnsupportedKernelError("slow_mean: only boxes and boolean kernels")
    acc = sum_dtype(A.dtype)
    A, B, output = _prepare("slow_mean", A, B, output, dtype=float_dtype(A.dtype))

    def update(v, a, b):
        return (v[0] + a, v[1] + 1) if b else v

    def store(dst, i, v):
        if v[1] == 0:
            raise DivisionByZeroError(f"slow_mean: no participating cell at index {i}")
        dst[i] = v[0] / v[1]

    return localfilter(
        output, A, B, lambda a: (acc.type(0), 0), update, store, variant=variant
    )


# --------------------------------------------------------------------------- #
# Erosion / dilation / local extrema
# --------------------------------------------------------------------------- #

def erode(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A, B, output = _prepare("erode", A, B, output)
    src = readable_source("erode", A, output)
    tmax = type_limits(A.dtype)[1]
    if isinstance(B, Kernel) and not B.is_boolean:
        B = _grayscale("erode", A, B)
    for idx, i, region in _sites(src, B, variant):
        vmin = tmax
        if not isinstance(B, Kernel):
            for j in region.indices():
                vmin = np.minimum(vmin, src[j])
        elif B.is_boolean:
            k = i + B.anchor
            for j in region.indices():
                if B.coefs[k - j]:
                    vmin = np.minimum(vmin, src[j])
        else:
            k = i + B.anchor
            for j in region.indices():
                vmin = np.minimum(vmin, src[j] - B.coefs[k - j])
        output[idx] = vmin
    return output


def dilate(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A, B, output = _prepare("dilate", A, B, output)
    src = readable_source("dilate", A, output)
    tmin = type_limits(A.dtype)[0]
    if isinstance(B, Kernel) and not B.is_boolean:
        B = _grayscale("dilate", A, B)
    for idx, i, region in _sites(src, B, variant):
        vmax = tmin
        if not isinstance(B, Kernel):
            for j in region.indices():
                vmax = np.maximum(vmax, src[j])
        elif B.is_boolean:
            k = i + B.anchor
            for j in region.indices():
                if B.coefs[k - j]:
                    vmax = np.maximum(vmax, src[j])
        else:
            k = i + B.anchor
            for j in region.indices():
                vmax = np.maximum(vmax, src[j] + B.coefs[k - j])
        output[idx] = vmax
    return output


def localextrema(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if output is None:
        amin, amax = np.empty_like(A), np.empty_like(A)
    else:
        amin, amax = output
        check_same_shape("localextrema", A, amin, amax)
        check_output_type("localextrema", A.dtype, amin, amax)
    src = readable_source("localextrema", A, amin, amax)
    tmin, tmax = type_limits(A.dtype)
    if isinstance(B, Kernel) and not B.is_boolean:
        B = _grayscale("localextrema", A, B)
    for idx, i, region in _sites(src, B, variant):
        vmin, vmax = tmax, tmin
        if not isinstance(B, Kernel):
            for j in region.indices():
                vmin = np.minimum(vmin, src[j])
                vmax = np.maximum(vmax, src[j])
        elif B.is_boolean:
            k = i + B.anchor
            for j in region.indices():
                if B.coefs[k - j]:
                    vmin = np.minimum(vmin, src[j])
                    vmax = np.maximum(vmax, src[j])
        else:
            k = i + B.anchor
            for j in region.indices():
                vmin = np.minimum(vmin, src[j] - B.coefs[k - j])
                vmax = np.maximum(vmax, src[j] + B.coefs[k - j])
        amin[idx] = vmin
        amax[idx] = vmax
    return amin, amax


# --------------------------------------------------------------------------- #
# Local mean / convolution
# --------------------------------------------------------------------------- #

def localmean(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    weighted = isinstance(B, Kernel) and not B.is_boolean
    if weighted:
        promoted = np.result_type(A.dtype, B.dtype)
        acc = sum_dtype(promoted)
        out_dtype = float_dtype(promoted)
        B = Kernel(B.coefs.astype(acc), anchor=B.anchor)
    else:
        acc = sum_dtype(A.dtype)
        out_dtype = float_dtype(A.dtype)
    A, B, output = _prepare("localmean", A, B, output, dtype=out_dtype)
    src = readable_source("localmean", A, output)
    for idx, i, region in _sites(src, B, variant):
        s1, s2 = acc.type(0), acc.type(0)
        if not isinstance(B, Kernel):
            for j in region.indices():
                s1 += src[j]
                s2 += 1
        elif B.is_boolean:
            k = i + B.anchor
            for j in region.indices():
                if B.coefs[k - j]:
                    s1 += src[j]
                    s2 += 1
        else:
            k = i + B.anchor
            for j in region.indices():
                w = B.coefs[k - j]
                s1 += w * src[j]
                s2 += w
        if s2 == 0:
            raise DivisionByZeroError(f"localmean: no participating cell at index {idx}")
        output[idx] = s1 / s2
    return output


def convolve(A, B, *, output=None, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if not isinstance(B, Kernel) or B.is_boolean:
        raise UnsupportedKernelError(f"convolve: requires a numeric kernel, got {B!r}")
    acc = sum_dtype(np.result_type(A.dtype, B.dtype))
    B = Kernel(B.coefs.astype(acc), anchor=B.anchor)
    A, B, output = _prepare("convolve", A, B, output, dtype=acc)
    src = readable_source("convolve", A, output)
    for idx, i, region in _sites(src, B, variant):
        v = acc.type(0)
        k = i + B.anchor
        for j in region.indices():
            v += acc.type(src[j]) * B.coefs[k - j]
        output[idx] = v
    return output


# --------------------------------------------------------------------------- #
# Compounds
# --------------------------------------------------------------------------- #

def opening(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    return dilate(erode(A, B, variant=variant), B, output=output, variant=variant)


def closing(A, B=3, *, output=None, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    return erode(dilate(A, B, variant=variant), B, output=output, variant=variant)


def _difference(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    if x.dtype == np.bool_:
        return x & ~y
    return x - y


def top_hat(A, r=3, s=None, *, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    if s is not None:
        A = closing(A, s, variant=variant)
    return _difference(A, opening(A, r, variant=variant))


def bottom_hat(A, r=3, s=None, *, variant=DEFAULT_VARIANT):
    A = np.asarray(A)
    if s is not None:
        A = opening(A, s, variant=variant)
    return _difference(closing(A, r, variant=variant), A)
