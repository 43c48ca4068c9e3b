"""
Numeric traits keyed on numpy dtypes.

Erosion and dilation seed their accumulators with the extreme values of the
element type; sums and means are carried out in a promoted type so that
narrow integer sources do not overflow.
"""
from __future__ import annotations

from typing import Any, Tuple

import numpy as np


def type_limits(dtype) -> Tuple[Any, Any]:
    """
    Return the ``(lowest, highest)`` sentinels of an element type.

    Parameters
    ----------
    dtype : dtype-like

    Returns
    -------
    lowest, highest : scalar
        ``False, True`` for bool, ``iinfo`` bounds for integers and
        ``-inf, +inf`` for floats.

    Raises
    ------
    TypeError
        For types without well-defined bounds (complex, object, ...).
    """
    dtype = np.dtype(dtype)
    if dtype == np.bool_:
        return np.False_, np.True_
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return dtype.type(info.min), dtype.type(info.max)
    if np.issubdtype(dtype, np.floating):
        return dtype.type(-np.inf), dtype.type(np.inf)
    raise TypeError(f"No min/max sentinels for element type {dtype}")


def sum_dtype(dtype) -> np.dtype:
    """Accumulation type for sums of elements of type ``dtype``."""
    dtype = np.dtype(dtype)
    if dtype == np.bool_:
        return np.dtype(np.int64)
    if np.issubdtype(dtype, np.integer):
        if dtype == np.uint64:
            return dtype
        return np.dtype(np.int64)
    if dtype == np.float16:
        return np.dtype(np.float32)
    return dtype


def float_dtype(dtype) -> np.dtype:
    """Floating type used to store means of elements of type ``dtype``."""
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.inexact):
        return dtype
    return np.dtype(np.float64)


def is_floating(dtype) -> bool:
    return bool(np.issubdtype(np.dtype(dtype), np.floating))
