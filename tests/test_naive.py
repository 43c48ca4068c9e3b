"""Tests for naive.py: element-by-element reference filters."""
import numpy as np
import pytest

from localfilters import linear, morphology, naive
from localfilters.errors import (
    DivisionByZeroError,
    OutputTypeError,
    ShapeMismatchError,
    UnsupportedKernelError,
)
from localfilters.region import VARIANTS


def _store(dst, i, v):
    dst[i] = v


# ──────────────────────────────────────────────────────────────────────
# Generic element-wise filter
# ──────────────────────────────────────────────────────────────────────

class TestElementwiseLocalFilter:
    def test_box_sum(self):
        A = np.array([1, 2, 3, 4, 5])
        dst = np.empty_like(A)
        naive.localfilter(dst, A, 3, lambda a: 0, lambda v, a, b: v + a, _store)
        assert dst.tolist() == [3, 6, 9, 12, 9]

    def test_box_coefficient_is_true(self):
        seen = set()

        def update(v, a, b):
            seen.add(b)
            return v

        A = np.zeros(4)
        naive.localfilter(np.empty_like(A), A, 3, lambda a: 0.0, update, _store)
        assert seen == {True}

    def test_kernel_coefficients_in_convolution_order(self):
        A = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        K = np.array([1.0, 10.0, 100.0])
        dst = np.empty_like(A)
        naive.localfilter(dst, A, K, lambda a: 0.0, lambda v, a, b: v + a * b, _store)
        assert dst.tolist() == [12.0, 123.0, 234.0, 345.0, 450.0]

    @pytest.mark.parametrize("variant", VARIANTS)
    def test_visits_region_in_row_major_order(self, variant):
        A = np.arange(12).reshape(3, 4)
        dst = np.empty(A.shape, dtype=object)
        naive.localfilter(
            dst, A, 3, lambda a: (), lambda v, a, b: v + (int(a),), _store, variant=variant
        )
        assert dst[0, 0] == (0, 1, 4, 5)
        assert dst[1, 1] == (0, 1, 2, 4, 5, 6, 8, 9, 10)

    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            naive.localfilter(np.empty(3), np.empty(4), 3, None, None, None)


class TestSlowFilters:
    def test_slow_erode_dilate(self):
        A = np.array([3, 1, 4, 1, 5, 9, 2, 6])
        assert naive.slow_erode(A, 3).tolist() == [1, 1, 1, 1, 1, 2, 2, 2]
        assert naive.slow_dilate(A, 3).tolist() == [3, 4, 4, 5, 9, 9, 9, 6]

    def test_slow_mask(self):
        A = np.array([5.0, 1.0, 7.0, 3.0, 9.0])
        mask = np.array([True, False, True])
        assert naive.slow_erode(A, mask).tolist() == [1.0, 5.0, 1.0, 7.0, 3.0]
        assert naive.slow_dilate(A, mask).tolist() == [1.0, 7.0, 3.0, 9.0, 3.0]

    def test_slow_grayscale(self):
        A = np.zeros(5)
        K = np.array([1.0, 2.0, 3.0])
        assert naive.slow_erode(A, K).tolist() == [-2.0, -3.0, -3.0, -3.0, -3.0]
        assert naive.slow_dilate(A, K).tolist() == [2.0, 3.0, 3.0, 3.0, 3.0]

    def test_slow_grayscale_needs_float_source(self):
        with pytest.raises(UnsupportedKernelError):
            naive.slow_erode(np.arange(5), np.array([1.0, 2.0, 3.0]))

    def test_slow_mean(self):
        A = np.array([1, 2, 3, 4, 5])
        np.testing.assert_allclose(naive.slow_mean(A, 3), [1.5, 2.0, 3.0, 4.0, 4.5])
        np.testing.assert_allclose(
            naive.slow_mean(A, np.array([True, False, True])), [2.0, 2.0, 3.0, 4.0, 4.0]
        )

    def test_slow_mean_rejects_weights(self):
        with pytest.raises(UnsupportedKernelError):
            naive.slow_mean(np.arange(5.0), np.array([1.0, 2.0, 1.0]))

    def test_slow_mean_empty_region(self):
        with pytest.raises(DivisionByZeroError):
            naive.slow_mean(np.arange(4.0), np.array([True, False, False]))

    @pytest.mark.parametrize("variant", VARIANTS)
    def test_slow_match_optimized(self, image2d, mask_kernel, variant):
        np.testing.assert_array_equal(
            naive.slow_erode(image2d, mask_kernel, variant=variant),
            morphology.erode(image2d, mask_kernel),
        )
        np.testing.assert_array_equal(
            naive.slow_dilate(image2d, [3, 5], variant=variant),
            morphology.dilate(image2d, [3, 5]),
        )
        np.testing.assert_allclose(
            naive.slow_mean(image2d, 3, variant=variant), linear.localmean(image2d, 3)
        )


# ──────────────────────────────────────────────────────────────────────
# Explicit-loop operators against the optimized ones
# ──────────────────────────────────────────────────────────────────────

NEIGHBORHOODS = [
    3,
    [1, 5],
    (range(-1, 2), range(0, 3)),
    (range(1, 3), range(-2, 0)),
]


class TestNaiveMatchesOptimized:
    @pytest.mark.parametrize("B", NEIGHBORHOODS)
    @pytest.mark.parametrize("variant", VARIANTS)
    def test_boxes(self, int_image, B, variant):
        for name in ("erode", "dilate", "opening", "closing"):
            np.testing.assert_array_equal(
                getattr(naive, name)(int_image, B, variant=variant),
                getattr(morphology, name)(int_image, B, variant=variant),
                err_msg=name,
            )
        fast = morphology.localextrema(int_image, B, variant=variant)
        slow = naive.localextrema(int_image, B, variant=variant)
        np.testing.assert_array_equal(fast[0], slow[0])
        np.testing.assert_array_equal(fast[1], slow[1])

    @pytest.mark.parametrize("variant", VARIANTS)
    def test_mask(self, image2d, mask_kernel, variant):
        for name in ("erode", "dilate", "top_hat", "bottom_hat"):
            np.testing.assert_array_equal(
                getattr(naive, name)(image2d, mask_kernel, variant=variant),
                getattr(morphology, name)(image2d, mask_kernel, variant=variant),
                err_msg=name,
            )
        np.testing.assert_allclose(
            naive.localmean(image2d, mask_kernel, variant=variant),
            linear.localmean(image2d, mask_kernel, variant=variant),
        )

    @pytest.mark.parametrize("variant", VARIANTS)
    def test_weights(self, image2d, weight_kernel, variant):
        for name in ("erode", "dilate", "opening", "closing"):
            np.testing.assert_array_equal(
                getattr(naive, name)(image2d, weight_kernel, variant=variant),
                getattr(morphology, name)(image2d, weight_kernel, variant=variant),
                err_msg=name,
            )
        np.testing.assert_allclose(
            naive.convolve(image2d, weight_kernel, variant=variant),
            linear.convolve(image2d, weight_kernel, variant=variant),
        )
        np.testing.assert_allclose(
            naive.localmean(image2d, weight_kernel, variant=variant),
            linear.localmean(image2d, weight_kernel, variant=variant),
        )

    def test_volume(self, image3d):
        for name in ("erode", "dilate", "localmean"):
            np.testing.assert_allclose(
                getattr(naive, name)(image3d, [3, 1, 3], variant="ntuple_val"),
                getattr(linear if name == "localmean" else morphology, name)(
                    image3d, [3, 1, 3]
                ),
                err_msg=name,
            )

    def test_presmoothed_hats(self, image2d):
        np.testing.assert_array_equal(
            naive.top_hat(image2d, 5, 3), morphology.top_hat(image2d, 5, 3)
        )
        np.testing.assert_array_equal(
            naive.bottom_hat(image2d, 5, 3), morphology.bottom_hat(image2d, 5, 3)
        )

    def test_boolean_hats(self):
        image = np.zeros((6, 7), dtype=bool)
        image[1, 1] = True
        image[2:5, 2:6] = True
        np.testing.assert_array_equal(naive.top_hat(image, 3), morphology.top_hat(image, 3))
        np.testing.assert_array_equal(
            naive.bottom_hat(image, 3), morphology.bottom_hat(image, 3)
        )

    def test_empty_region_sentinel(self):
        A = np.array([3, 1, 4, 1, 5], dtype=np.int16)
        assert naive.erode(A, (range(2, 4),)).tolist() == [32767, 32767, 3, 1, 1]
        with pytest.raises(DivisionByZeroError):
            naive.localmean(A, (range(2, 4),))

    @pytest.mark.parametrize("variant", VARIANTS)
    def test_non_finite(self, image2d, mask_kernel, weight_kernel, variant):
        A = image2d.copy()
        A[2, 3] = np.nan
        A[5, 5] = np.inf
        A[7, 1] = -np.inf
        for B in (3, mask_kernel, weight_kernel):
            for name in ("erode", "dilate"):
                np.testing.assert_array_equal(
                    getattr(naive, name)(A, B, variant=variant),
                    getattr(morphology, name)(A, B, variant=variant),
                    err_msg=name,
                )
            fast = morphology.localextrema(A, B, variant=variant)
            slow = naive.localextrema(A, B, variant=variant)
            np.testing.assert_array_equal(fast[0], slow[0])
            np.testing.assert_array_equal(fast[1], slow[1])

    def test_nan_in_slow_filters(self):
        A = np.array([0.5, np.nan, 0.3, 0.7])
        expected = [np.nan, np.nan, np.nan, 0.3]
        np.testing.assert_array_equal(naive.slow_erode(A, 3), expected)
        np.testing.assert_array_equal(naive.erode(A, 3), expected)
        mask = np.array([True, False, True])
        np.testing.assert_array_equal(naive.slow_dilate(A, mask), [np.nan, 0.5, np.nan, 0.3])

    def test_output_type(self, image2d):
        with pytest.raises(OutputTypeError):
            naive.erode(image2d, 3, output=np.zeros(image2d.shape, dtype=bool))
        with pytest.raises(OutputTypeError):
            naive.localmean(image2d, 3, output=np.zeros(image2d.shape, dtype=int))

    def test_convolve_rejects_boxes(self):
        with pytest.raises(UnsupportedKernelError):
            naive.convolve(np.arange(5.0), 3)

    def test_in_place(self, image2d):
        expected = naive.erode(image2d, 3)
        A = image2d.copy()
        naive.erode(A, 3, output=A)
        np.testing.assert_array_equal(A, expected)
