import math

import numpy as np
import pytest

from imageaugmentor.exceptions import ConfigurationError
from imageaugmentor.services.augmentation.kernels import (
    BoxKernel,
    GaussianKernel,
    convolve_axis,
    convolve_separable,
    kernel_size_for_sigma,
    pseudo_gaussian_boxes,
)


class TestGaussianKernel:
    """Tests for the Gaussian kernel builder."""

    def test_kernel_is_symmetric_and_normalized(self):
        """Test symmetry and unit sum for size 5, sigma 1."""
        kernel = GaussianKernel(sigma=1.0, size=5)

        assert len(kernel) == 5
        assert kernel[0] == kernel[4]
        assert kernel[1] == kernel[3]
        assert sum(kernel[i] for i in range(len(kernel))) == pytest.approx(1.0)

    def test_kernel_weights_follow_gaussian(self):
        """Test the ratio between neighbouring weights."""
        kernel = GaussianKernel(sigma=1.0, size=5)

        assert kernel[2] > kernel[1] > kernel[0]
        assert kernel[2] / kernel[1] == pytest.approx(math.e)

    @pytest.mark.parametrize("sigma,expected", [(1.0, 5), (0.5, 3), (2.5, 11)])
    def test_size_derived_from_sigma(self, sigma, expected):
        """Test the default kernel size."""
        assert kernel_size_for_sigma(sigma) == expected
        assert len(GaussianKernel(sigma)) == expected

    @pytest.mark.parametrize("sigma", [0.0, -1.0])
    def test_non_positive_sigma_raises_error(self, sigma):
        """Test that sigma must be positive."""
        with pytest.raises(ConfigurationError, match="sigma"):
            GaussianKernel(sigma, 5)

    @pytest.mark.parametrize("size", [0, 4, -3])
    def test_invalid_size_raises_error(self, size):
        """Test that the kernel size must be a positive odd number."""
        with pytest.raises(ConfigurationError, match="odd"):
            GaussianKernel(1.0, size)


class TestBoxKernel:
    """Tests for box kernels and their pseudo Gaussian combination."""

    def test_box_weights_are_equal(self):
        """Test that box weights are all 1/length."""
        kernel = BoxKernel(3)

        assert np.allclose(kernel.weights, 1 / 3)
        assert kernel.radius == 1

    def test_even_box_raises_error(self):
        """Test that even box lengths are rejected."""
        with pytest.raises(ConfigurationError):
            BoxKernel(4)

    def test_pseudo_gaussian_box_sizes(self):
        """Test the box widths chosen for sigma 2 and three passes."""
        boxes = pseudo_gaussian_boxes(2.0, 3)

        assert [len(box) for box in boxes] == [3, 3, 5]

    def test_pseudo_gaussian_box_count_rounds_half_up(self):
        """Test that a halfway box count of 4.5 rounds up to five narrow boxes."""
        boxes = pseudo_gaussian_boxes(2.0, 5)

        assert [len(box) for box in boxes] == [3, 3, 3, 3, 3]

    def test_pseudo_gaussian_invalid_parameters(self):
        """Test that sigma and passes are validated."""
        with pytest.raises(ConfigurationError):
            pseudo_gaussian_boxes(0.0, 3)
        with pytest.raises(ConfigurationError):
            pseudo_gaussian_boxes(1.0, 0)


class TestConvolution:
    """Tests for the separable convolution helpers."""

    def test_impulse_spreads_along_axis(self):
        """Test a box filter on a single bright pixel."""
        array = np.zeros((1, 5, 1), dtype=np.uint8)
        array[0, 2, 0] = 100

        result = convolve_axis(array, BoxKernel(3), axis=1)

        assert result[0, :, 0].tolist() == [0, 33, 33, 33, 0]

    def test_edges_are_clamped(self):
        """Test that samples outside the image repeat the edge pixel."""
        array = np.array([[[100], [0], [0]]], dtype=np.uint8)

        result = convolve_axis(array, BoxKernel(3), axis=1)

        assert result[0, :, 0].tolist() == [66, 33, 0]

    def test_height_axis(self):
        """Test convolution along the height axis."""
        array = np.zeros((5, 1, 1), dtype=np.uint8)
        array[2, 0, 0] = 100

        result = convolve_axis(array, BoxKernel(3), axis=0)

        assert result[:, 0, 0].tolist() == [0, 33, 33, 33, 0]

    def test_separable_preserves_shape_and_dtype(self, sample_rgb_buffer):
        """Test that both passes keep the image geometry."""
        result = convolve_separable(sample_rgb_buffer.data, GaussianKernel(1.0))

        assert result.shape == sample_rgb_buffer.data.shape
        assert result.dtype == np.uint8

    def test_zero_image_stays_zero(self):
        """Test that blurring black gives black."""
        array = np.zeros((10, 10, 3), dtype=np.uint8)

        assert not convolve_separable(array, GaussianKernel(2.0)).any()
