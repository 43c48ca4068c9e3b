"""
localfilters: sliding-window reductions over N-dimensional numpy arrays.

Erosion, dilation, local extrema, local mean, convolution and the
morphological compounds (opening, closing, top-hat, bottom-hat), all with
clip-boundary semantics and all driven by one traversal engine.

Quick start:
    import numpy as np
    from localfilters import erode, localmean, convolve, top_hat

    A = np.random.default_rng(0).random((64, 64))
    Amin = erode(A, 5)                      # 5×5 box
    M = localmean(A, np.ones((3, 3), bool)) # boolean kernel
    C = convolve(A, np.array([[0, 1, 0], [1, 4, 1], [0, 1, 0]]))
    T = top_hat(A, 7, 3)                    # pre-smoothed top-hat
"""

__version__ = "0.1.0"

from .config import CheckConfig, DEFAULT_VARIANT
from .crosscheck import CheckResult, crosscheck, ndimage_reference
from .engine import localfilter
from .errors import (
    AliasingError,
    DivisionByZeroError,
    LocalFilterError,
    OutputTypeError,
    ShapeMismatchError,
    UnsupportedKernelError,
)
from .linear import convolve, localmean
from .morphology import (
    bottom_hat,
    closing,
    dilate,
    erode,
    localextrema,
    opening,
    top_hat,
)
from .neighborhood import (
    CartesianBox,
    CartesianIndex,
    CenteredBox,
    Kernel,
    to_neighborhood,
)
from .region import VARIANTS

__all__ = [
    "AliasingError",
    "CartesianBox",
    "CartesianIndex",
    "CenteredBox",
    "CheckConfig",
    "CheckResult",
    "DEFAULT_VARIANT",
    "DivisionByZeroError",
    "Kernel",
    "LocalFilterError",
    "OutputTypeError",
    "ShapeMismatchError",
    "UnsupportedKernelError",
    "VARIANTS",
    "bottom_hat",
    "closing",
    "convolve",
    "crosscheck",
    "dilate",
    "erode",
    "localextrema",
    "localfilter",
    "localmean",
    "ndimage_reference",
    "opening",
    "to_neighborhood",
    "top_hat",
    "__version__",
]
