"""Tests for linear.py: local mean and convolution."""
import numpy as np
import pytest
from scipy import ndimage

from localfilters.errors import (
    DivisionByZeroError,
    OutputTypeError,
    ShapeMismatchError,
    UnsupportedKernelError,
)
from localfilters.linear import convolve, localmean
from localfilters.morphology import dilate, erode
from localfilters.neighborhood import Kernel
from localfilters.region import VARIANTS


# ──────────────────────────────────────────────────────────────────────
# convolve
# ──────────────────────────────────────────────────────────────────────

class TestConvolve:
    @pytest.mark.parametrize("variant", VARIANTS)
    def test_box_of_ones(self, variant):
        A = np.array([1, 2, 3, 4, 5])
        result = convolve(A, np.array([1, 1, 1]), variant=variant)
        assert result.tolist() == [3, 6, 9, 12, 9]

    def test_orientation_matches_numpy(self):
        A = np.array([1, 2, 3, 4, 5])
        K = np.array([1, 10, 100])
        result = convolve(A, K)
        assert result.tolist() == [12, 123, 234, 345, 450]
        np.testing.assert_array_equal(result, np.convolve(A, K, mode="same"))

    def test_matches_ndimage(self, image2d, weight_kernel):
        expected = ndimage.convolve(image2d, weight_kernel, mode="constant", cval=0.0)
        np.testing.assert_allclose(convolve(image2d, weight_kernel), expected, rtol=1e-12)

    def test_anchor(self):
        # anchor 0: out[i] = sum_j A[j] K[i - j], a causal filter
        A = np.array([1.0, 2.0, 3.0, 4.0])
        K = Kernel(np.array([1.0, 0.5]), anchor=(0,))
        assert convolve(A, K).tolist() == [1.0, 2.5, 4.0, 5.5]

    @pytest.mark.parametrize(
        "a_dtype, k_dtype, expected",
        [
            (np.int64, np.int64, np.int64),
            (np.int16, np.int16, np.int64),
            (np.uint8, np.float32, np.float32),
            (np.bool_, np.int8, np.int64),
            (np.float16, np.float16, np.float32),
            (np.float64, np.int32, np.float64),
        ],
    )
    def test_result_dtype(self, a_dtype, k_dtype, expected):
        A = np.ones((4, 4), dtype=a_dtype)
        K = np.ones((3, 3), dtype=k_dtype)
        result = convolve(A, K)
        assert result.dtype == expected
        assert result[1, 1] == 9
        assert result[0, 0] == 4

    def test_narrow_integers_do_not_overflow(self):
        A = np.full(5, 120, dtype=np.int8)
        result = convolve(A, np.ones(3, dtype=np.int8))
        assert result.tolist() == [240, 360, 360, 360, 240]

    @pytest.mark.parametrize("B", [3, (range(-1, 2),), np.array([True, True, False])])
    def test_rejects_boxes_and_masks(self, B):
        with pytest.raises(UnsupportedKernelError):
            convolve(np.arange(5.0), B)

    def test_output(self, image2d, weight_kernel):
        out = np.empty_like(image2d)
        result = convolve(image2d, weight_kernel, output=out)
        assert result is out
        with pytest.raises(ShapeMismatchError):
            convolve(image2d, weight_kernel, output=np.empty(3))

    def test_in_place(self, image2d, weight_kernel):
        expected = convolve(image2d, weight_kernel)
        A = image2d.copy()
        convolve(A, weight_kernel, output=A)
        np.testing.assert_array_equal(A, expected)


# ──────────────────────────────────────────────────────────────────────
# localmean
# ──────────────────────────────────────────────────────────────────────

class TestLocalMean:
    A = np.array([1, 2, 3, 4, 5])

    @pytest.mark.parametrize("variant", VARIANTS)
    def test_box_clips_borders(self, variant):
        result = localmean(self.A, 3, variant=variant)
        assert result.dtype == np.float64
        np.testing.assert_allclose(result, [1.5, 2.0, 3.0, 4.0, 4.5])

    def test_mask(self):
        result = localmean(self.A, np.array([True, False, True]))
        np.testing.assert_allclose(result, [2.0, 2.0, 3.0, 4.0, 4.0])

    def test_weights(self):
        result = localmean(self.A, np.array([1, 2, 1]))
        np.testing.assert_allclose(result, [4 / 3, 2.0, 3.0, 4.0, 14 / 3])

    def test_boolean_source(self):
        result = localmean(np.array([True, False, True, True]), 3)
        np.testing.assert_allclose(result, [0.5, 2 / 3, 2 / 3, 1.0])

    def test_float32_preserved(self, image2d):
        result = localmean(image2d.astype(np.float32), 3)
        assert result.dtype == np.float32

    def test_constant_image(self):
        A = np.full((5, 6), 7, dtype=np.uint8)
        np.testing.assert_allclose(localmean(A, [3, 5]), 7.0)

    @pytest.mark.parametrize("B", [3, [5, 3]])
    def test_between_local_extrema(self, image2d, B):
        mean = localmean(image2d, B)
        assert (mean >= erode(image2d, B) - 1e-12).all()
        assert (mean <= dilate(image2d, B) + 1e-12).all()

    def test_matches_ndimage_ratio(self, image2d):
        ones = np.ones((3, 3))
        total = ndimage.convolve(image2d, ones, mode="constant")
        count = ndimage.convolve(np.ones_like(image2d), ones, mode="constant")
        np.testing.assert_allclose(localmean(image2d, 3), total / count, rtol=1e-12)

    def test_in_place(self, image2d):
        expected = localmean(image2d, 3)
        A = image2d.copy()
        result = localmean(A, 3, output=A)
        assert result is A
        np.testing.assert_allclose(A, expected)

    def test_empty_mask_region(self):
        # only j = i + 1 takes part: the last index sees nothing
        with pytest.raises(DivisionByZeroError, match=r"\(3,\)"):
            localmean(np.arange(4.0), np.array([True, False, False]))

    def test_zero_weight_sum(self):
        with pytest.raises(DivisionByZeroError, match=r"\(1,\)"):
            localmean(np.arange(5.0), np.array([-1.0, 2.0, -1.0]))

    def test_box_away_from_origin(self):
        with pytest.raises(DivisionByZeroError):
            localmean(np.arange(5, dtype=np.int16), (range(2, 4),))

    def test_division_by_zero_is_zero_division(self):
        with pytest.raises(ZeroDivisionError):
            localmean(np.arange(4.0), np.array([True, False, False]))

    def test_output_shape(self, image2d):
        with pytest.raises(ShapeMismatchError):
            localmean(image2d, 3, output=np.empty((2, 2)))


class TestOutputType:
    def test_localmean_refuses_integer_output(self, int_image):
        out = np.zeros_like(int_image)
        with pytest.raises(OutputTypeError):
            localmean(int_image, 3, output=out)
        with pytest.raises(OutputTypeError):
            localmean(int_image, 3, output=int_image)
        assert not out.any()

    def test_convolve_refuses_narrower_kind(self, int_image, weight_kernel):
        with pytest.raises(OutputTypeError):
            convolve(int_image, weight_kernel, output=np.zeros(int_image.shape, dtype=np.int64))
        with pytest.raises(OutputTypeError):
            convolve(int_image, np.ones((3, 3), dtype=int), output=np.zeros(int_image.shape, dtype=bool))

    def test_same_kind_narrowing_allowed(self, image2d):
        out = np.empty(image2d.shape, dtype=np.float32)
        localmean(image2d, 3, output=out)
        np.testing.assert_allclose(out, localmean(image2d, 3), rtol=1e-6)
