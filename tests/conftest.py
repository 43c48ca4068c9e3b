"""
Shared fixtures for localfilters tests.

Arrays are kept small: the naive reference filters walk every region one
element at a time in pure Python.
"""
from __future__ import annotations

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(20240611)


@pytest.fixture
def image2d(rng):
    """9×10 float64 image with values in [0, 1)."""
    return rng.random((9, 10))


@pytest.fixture
def image3d(rng):
    """4×5×3 float64 volume."""
    return rng.random((4, 5, 3))


@pytest.fixture
def int_image(rng):
    """8×9 int16 image with values in [-50, 50]."""
    return rng.integers(-50, 51, size=(8, 9)).astype(np.int16)


@pytest.fixture
def mask_kernel():
    """3×3 cross-shaped boolean kernel."""
    return np.array(
        [[False, True, False],
         [True, True, True],
         [False, True, False]]
    )


@pytest.fixture
def weight_kernel():
    """Asymmetric 3×3 float kernel (exposes orientation errors)."""
    return np.array(
        [[0.1, 0.2, 0.0],
         [0.3, 1.0, 0.5],
         [0.0, 0.7, 0.4]]
    )
