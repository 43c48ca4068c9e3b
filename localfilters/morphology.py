"""
Mathematical morphology: erosion, dilation and their compounds.

Erosion and dilation are local minimum and maximum filters.  With a boolean
kernel only the cells set in the mask take part.  With a numeric kernel the
coefficients act as an additive structuring function (grayscale morphology):

    erode(A, K)[i]  = min_j A[j] - K[anchor + i - j]
    dilate(A, K)[i] = max_j A[j] + K[anchor + i - j]

which is only defined for floating-point sources.

Minima and maxima are folded with ``np.minimum`` / ``np.maximum``, so a NaN
anywhere in a region makes the result at that coordinate NaN.

Opening and closing chain two passes through a workspace array; top-hat and
bottom-hat subtract an opening / closing from the source to isolate small
bright / dark features.
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .config import DEFAULT_VARIANT
from .engine import (
    check_output_type,
    check_same_shape,
    localfilter,
    readable_source,
    store_value,
)
from .errors import AliasingError, UnsupportedKernelError
from .neighborhood import Kernel, Neighborhood, to_neighborhood
from .numeric import is_floating, type_limits


# --------------------------------------------------------------------------- #
# Update rules
# --------------------------------------------------------------------------- #

def _min_box(v, values, coefs):
    return np.minimum(v, values.min()) if values.size else v


def _min_mask(v, values, mask):
    selected = values[mask]
    return np.minimum(v, selected.min()) if selected.size else v


def _min_shifted(v, values, coefs):
    return np.minimum(v, (values - coefs).min()) if values.size else v


def _max_box(v, values, coefs):
    return np.maximum(v, values.max()) if values.size else v


def _max_mask(v, values, mask):
    selected = values[mask]
    return np.maximum(v, selected.max()) if selected.size else v


def _max_shifted(v, values, coefs):
    return np.maximum(v, (values + coefs).max()) if values.size else v


def _extrema_box(v, values, coefs):
    if not values.size:
        return v
    return np.minimum(v[0], values.min()), np.maximum(v[1], values.max())


def _extrema_mask(v, values, mask):
    selected = values[mask]
    if not selected.size:
        return v
    return np.minimum(v[0], selected.min()), np.maximum(v[1], selected.max())


def _extrema_shifted(v, values, coefs):
    if not values.size:
        return v
    return (
        np.minimum(v[0], (values - coefs).min()),
        np.maximum(v[1], (values + coefs).max()),
    )


def _pick_update(B: Neighborhood, box, mask, shifted):
    if not isinstance(B, Kernel):
        return box
    if B.is_boolean:
        return mask
    return shifted


# --------------------------------------------------------------------------- #
# Shared argument handling
# --------------------------------------------------------------------------- #

def _prepare(name: str, A, B, output):
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if output is None:
        output = np.empty_like(A)
    else:
        check_same_shape(name, A, output)
        check_output_type(name, A.dtype, output)
    if isinstance(B, Kernel) and not B.is_boolean:
        B = _grayscale_kernel(name, A, B)
    return A, B, output


def _grayscale_kernel(name: str, A: np.ndarray, B: Kernel) -> Kernel:
    """Cast a numeric kernel to the source type (floating sources only)."""
    if not is_floating(A.dtype):
        raise UnsupportedKernelError(
            f"{name}: numeric kernels require a floating-point source, "
            f"got {A.dtype}; use a boolean kernel for flat morphology"
        )
    return Kernel(B.coefs.astype(A.dtype), anchor=B.anchor)


def _check_workspace(name: str, A: np.ndarray, output, workspace) -> np.ndarray:
    if workspace is None:
        return np.empty_like(A)
    check_same_shape(name, A, workspace)
    if np.shares_memory(workspace, A) or (
        output is not None and np.shares_memory(workspace, output)
    ):
        raise AliasingError(
            f"{name}: workspace must not share memory with the source or "
            f"the destination"
        )
    return workspace


def _difference(x: np.ndarray, y: np.ndarray, out: np.ndarray) -> np.ndarray:
    # Booleans have no subtraction: use the saturating difference x & ~y.
    if out.dtype == np.bool_:
        return np.greater(x, y, out=out)
    return np.subtract(x, y, out=out)


# --------------------------------------------------------------------------- #
# Erosion / dilation
# --------------------------------------------------------------------------- #

def erode(
    A: np.ndarray,
    B=3,
    *,
    output: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Local minimum of ``A`` over the neighborhood ``B``.

    Parameters
    ----------
    A : ndarray
        Source array (bool, integer or floating).
    B : neighborhood specification, optional
        Odd box width (default 3), per-axis widths, tuple of ranges, kernel
        array or neighborhood object.
    output : ndarray, optional
        Destination with the shape of ``A``.  May be ``A`` itself.
    variant : str
        Region strategy (see ``localfilters.region.VARIANTS``).

    Returns
    -------
    ndarray
        Same shape and dtype as ``A`` (or ``output``).

    Raises
    ------
    ShapeMismatchError
        ``output`` or ``B`` does not match ``A``.
    OutputTypeError
        ``output`` cannot hold ``A.dtype`` values under ``same_kind`` casting.
    UnsupportedKernelError
        Numeric kernel with a non-floating source.
    """
    A, B, output = _prepare("erode", A, B, output)
    tmax = type_limits(A.dtype)[1]
    return localfilter(
        output, A, B,
        lambda a: tmax,
        _pick_update(B, _min_box, _min_mask, _min_shifted),
        store_value,
        variant=variant,
    )


def dilate(
    A: np.ndarray,
    B=3,
    *,
    output: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Local maximum of ``A`` over the neighborhood ``B``.

    See ``erode`` for the parameters.
    """
    A, B, output = _prepare("dilate", A, B, output)
    tmin = type_limits(A.dtype)[0]
    return localfilter(
        output, A, B,
        lambda a: tmin,
        _pick_update(B, _max_box, _max_mask, _max_shifted),
        store_value,
        variant=variant,
    )


def localextrema(
    A: np.ndarray,
    B=3,
    *,
    output: Optional[Tuple[np.ndarray, np.ndarray]] = None,
    variant=DEFAULT_VARIANT,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Erosion and dilation of ``A`` computed in a single traversal.

    Parameters
    ----------
    output : (ndarray, ndarray), optional
        Destinations ``(Amin, Amax)``.  They must be distinct arrays; either
        one may be ``A`` itself.

    Returns
    -------
    Amin, Amax : ndarray
    """
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if output is None:
        amin, amax = np.empty_like(A), np.empty_like(A)
    else:
        amin, amax = output
        check_same_shape("localextrema", A, amin, amax)
        check_output_type("localextrema", A.dtype, amin, amax)
    if isinstance(B, Kernel) and not B.is_boolean:
        B = _grayscale_kernel("localextrema", A, B)
    tmin, tmax = type_limits(A.dtype)
    src = readable_source("localextrema", A, amin, amax)

    def store(dst, i, v):
        dst[i] = v[0]
        amax[i] = v[1]

    localfilter(
        amin, src, B,
        lambda a: (tmax, tmin),
        _pick_update(B, _extrema_box, _extrema_mask, _extrema_shifted),
        store,
        variant=variant,
    )
    return amin, amax


# --------------------------------------------------------------------------- #
# Opening / closing
# --------------------------------------------------------------------------- #

def opening(
    A: np.ndarray,
    B=3,
    *,
    output: Optional[np.ndarray] = None,
    workspace: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Erosion followed by dilation with the same neighborhood.

    Removes bright features smaller than ``B``; idempotent.

    Parameters
    ----------
    output : ndarray, optional
        Destination; may be ``A`` itself.
    workspace : ndarray, optional
        Buffer for the intermediate erosion.  Must have the shape of ``A``
        and must not share memory with ``A`` or ``output``.
    """
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if output is not None:
        check_same_shape("opening", A, output)
    workspace = _check_workspace("opening", A, output, workspace)
    erode(A, B, output=workspace, variant=variant)
    return dilate(workspace, B, output=output, variant=variant)


def closing(
    A: np.ndarray,
    B=3,
    *,
    output: Optional[np.ndarray] = None,
    workspace: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Dilation followed by erosion with the same neighborhood.

    Fills dark features smaller than ``B``; idempotent.  See ``opening`` for
    the ``output`` / ``workspace`` rules.
    """
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if output is not None:
        check_same_shape("closing", A, output)
    workspace = _check_workspace("closing", A, output, workspace)
    dilate(A, B, output=workspace, variant=variant)
    return erode(workspace, B, output=output, variant=variant)


# --------------------------------------------------------------------------- #
# Top-hat / bottom-hat
# --------------------------------------------------------------------------- #

def _check_hat_output(name: str, A: np.ndarray, output) -> None:
    if output is None:
        return
    check_same_shape(name, A, output)
    if np.shares_memory(output, A):
        raise AliasingError(f"{name}: output must not share memory with the source")


def top_hat(
    A: np.ndarray,
    r=3,
    s=None,
    *,
    output: Optional[np.ndarray] = None,
    workspace: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Summit detector: ``A - opening(A, r)``.

    Parameters
    ----------
    A : ndarray
    r : neighborhood specification
        Size of the features to detect.
    s : neighborhood specification, optional
        When given, ``A`` is first smoothed by ``closing(A, s)``; ``s``
        should be smaller than ``r``.  For instance ``top_hat(bitmap, 3, 1)``
        picks out thin lines or text in a bitmap.
    output : ndarray, optional
        Destination; must not share memory with ``A``.
    workspace : ndarray, optional
        Intermediate buffer; must not share memory with ``A`` or ``output``.

    Returns
    -------
    ndarray
        Same dtype as ``A``.  Boolean sources give ``A & ~opening(A, r)``.
    """
    A = np.asarray(A)
    _check_hat_output("top_hat", A, output)
    if s is not None:
        A = closing(A, s, workspace=workspace, variant=variant)
    result = opening(A, r, output=output, workspace=workspace, variant=variant)
    return _difference(A, result, out=result)


def bottom_hat(
    A: np.ndarray,
    r=3,
    s=None,
    *,
    output: Optional[np.ndarray] = None,
    workspace: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Valley detector: ``closing(A, r) - A``.

    The dual of ``top_hat``; with ``s`` given, ``A`` is first smoothed by
    ``opening(A, s)``.
    """
    A = np.asarray(A)
    _check_hat_output("bottom_hat", A, output)
    if s is not None:
        A = opening(A, s, workspace=workspace, variant=variant)
    result = closing(A, r, output=output, workspace=workspace, variant=variant)
    return _difference(result, A, out=result)
