"""
Linear local filters: local mean and convolution.

Both accumulate sums over the clipped region, so border coordinates only see
their in-bounds neighbors:

    localmean(A, B)[i] = sum_j A[j] / count_j          (box / boolean mask)
                       = sum_j w_j A[j] / sum_j w_j    (numeric kernel)
    convolve(A, K)[i]  = sum_j A[j] K[anchor + i - j]

Sums are carried out in ``numeric.sum_dtype`` of the (promoted) element type;
means are stored in its floating counterpart.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .config import DEFAULT_VARIANT
from .engine import check_output_type, check_same_shape, localfilter
from .errors import DivisionByZeroError, UnsupportedKernelError
from .neighborhood import Kernel, to_neighborhood
from .numeric import float_dtype, sum_dtype


def localmean(
    A: np.ndarray,
    B=3,
    *,
    output: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Local (possibly weighted) mean of ``A`` over the neighborhood ``B``.

    Parameters
    ----------
    A : ndarray
    B : neighborhood specification, optional
        Box (default: width 3), boolean mask or numeric weights.
    output : ndarray, optional
        Destination with the shape of ``A``; may be ``A`` itself when its
        dtype can hold the result.
    variant : str
        Region strategy.

    Returns
    -------
    ndarray
        Floating-point array: ``float_dtype(A.dtype)``, or the floating
        promotion of source and weights for a numeric kernel.

    Raises
    ------
    OutputTypeError
        ``output`` cannot hold the floating result (an integer output, say).
    DivisionByZeroError
        Some coordinate has no participating cell (empty mask over its
        region) or a zero weight sum.
    """
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)

    if isinstance(B, Kernel) and not B.is_boolean:
        promoted = np.result_type(A.dtype, B.dtype)
        acc = sum_dtype(promoted)
        out_dtype = float_dtype(promoted)
        B = Kernel(B.coefs.astype(acc), anchor=B.anchor)

        def update(v, values, weights):
            return v[0] + (weights * values).sum(dtype=acc), v[1] + weights.sum(dtype=acc)
    else:
        acc = sum_dtype(A.dtype)
        out_dtype = float_dtype(A.dtype)
        if isinstance(B, Kernel):
            def update(v, values, mask):
                selected = values[mask]
                return v[0] + selected.sum(dtype=acc), v[1] + selected.size
        else:
            def update(v, values, coefs):
                return v[0] + values.sum(dtype=acc), v[1] + values.size

    if output is None:
        output = np.empty(A.shape, dtype=out_dtype)
    else:
        check_same_shape("localmean", A, output)
        check_output_type("localmean", out_dtype, output)

    zero = acc.type(0)

    def store(dst, i, v):
        total, norm = v
        if norm == 0:
            raise DivisionByZeroError(
                f"localmean: no participating cell at index {i}"
            )
        dst[i] = total / norm

    return localfilter(
        output, A, B,
        lambda a: (zero, zero),
        update,
        store,
        variant=variant,
    )


def convolve(
    A: np.ndarray,
    B,
    *,
    output: Optional[np.ndarray] = None,
    variant=DEFAULT_VARIANT,
) -> np.ndarray:
    """
    Discrete convolution of ``A`` by a numeric kernel with clipped borders.

    Parameters
    ----------
    A : ndarray
    B : ndarray or Kernel
        Numeric (non-boolean) coefficients.
    output : ndarray, optional
    variant : str

    Returns
    -------
    ndarray
        Of type ``sum_dtype(result_type(A, B))``.

    Raises
    ------
    UnsupportedKernelError
        ``B`` is a box or a boolean kernel.
    OutputTypeError
        ``output`` cannot hold the accumulation type.

    Examples
    --------
    >>> convolve(np.array([1, 2, 3, 4, 5]), np.array([1, 1, 1]))
    array([ 3,  6,  9, 12,  9])
    """
    A = np.asarray(A)
    B = to_neighborhood(B, A.ndim)
    if not isinstance(B, Kernel) or B.is_boolean:
        raise UnsupportedKernelError(
            f"convolve: requires a numeric kernel, got {B!r}"
        )
    acc = sum_dtype(np.result_type(A.dtype, B.dtype))
    B = Kernel(B.coefs.astype(acc), anchor=B.anchor)

    if output is None:
        output = np.empty(A.shape, dtype=acc)
    else:
        check_same_shape("convolve", A, output)
        check_output_type("convolve", acc, output)

    zero = acc.type(0)

    def update(v, values, coefs):
        return v + (values * coefs).sum(dtype=acc)

    def store(dst, i, v):
        dst[i] = v

    return localfilter(
        output, A, B,
        lambda a: zero,
        update,
        store,
        variant=variant,
    )
