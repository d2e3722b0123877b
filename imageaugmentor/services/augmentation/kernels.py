import math
from typing import List, Optional

import numpy as np

from imageaugmentor.exceptions import ConfigurationError


def kernel_size_for_sigma(sigma: float) -> int:
    """Odd kernel size wide enough for a Gaussian of the given spread (5 for sigma=1)."""
    return 2 * math.ceil(2 * sigma) + 1


class Kernel:
    """
    Normalized, odd-length 1-D convolution kernel.

    Weights are non-negative, sum to 1 and are centered at index len(kernel) // 2.
    """

    def __init__(self, weights: np.ndarray):
        self.weights = weights / weights.sum()

    def __getitem__(self, index: int) -> float:
        return float(self.weights[index])

    def __len__(self) -> int:
        return len(self.weights)

    @property
    def radius(self) -> int:
        return len(self.weights) // 2


class GaussianKernel(Kernel):
    """Gaussian kernel with weight[i] = exp(-(i - n/2)^2 / sigma^2), normalized to unity."""

    def __init__(self, sigma: float, size: Optional[int] = None):
        if sigma <= 0:
            raise ConfigurationError(f"Gaussian sigma must be positive, got {sigma}")
        if size is None:
            size = kernel_size_for_sigma(sigma)
        if size <= 0 or size % 2 == 0:
            raise ConfigurationError(f"Kernel size must be a positive odd number, got {size}")

        self.sigma = sigma
        offsets = np.arange(size, dtype=np.float64) - size // 2
        super().__init__(np.exp(-(offsets**2) / (sigma * sigma)))


class BoxKernel(Kernel):
    """Box kernel of odd length with equal weights."""

    def __init__(self, length: int):
        if length <= 0 or length % 2 == 0:
            raise ConfigurationError(f"Box kernel length must be a positive odd number, got {length}")
        super().__init__(np.ones(length, dtype=np.float64))


def pseudo_gaussian_boxes(sigma: float, passes: int = 3) -> List[BoxKernel]:
    """
    Chooses box widths whose successive application approximates a Gaussian blur.

    See http://blog.ivank.net/fastest-gaussian-blur.html

    Args:
        sigma: Spread of the Gaussian being approximated
        passes: Number of box filters

    Returns:
        List[BoxKernel]: One kernel per pass, narrower ones first
    """
    if sigma <= 0:
        raise ConfigurationError(f"Gaussian sigma must be positive, got {sigma}")
    if passes <= 0:
        raise ConfigurationError(f"Number of passes must be positive, got {passes}")

    sigma2 = sigma * sigma
    ideal_width = math.sqrt(12 * sigma2 / passes + 1)
    lower_width = math.floor(ideal_width)
    if lower_width % 2 == 0:
        lower_width -= 1
    upper_width = lower_width + 2

    ideal_m = (12 * sigma2 - passes * lower_width**2 - 4 * passes * lower_width - 3 * passes) / (-4 * lower_width - 4)
    # halves round up
    m = math.floor(ideal_m + 0.5)

    return [BoxKernel(lower_width if i < m else upper_width) for i in range(passes)]


def convolve_axis(array: np.ndarray, kernel: Kernel, axis: int) -> np.ndarray:
    """
    Convolves every channel of an image array with a 1-D kernel along one axis.

    Samples that fall outside of the image are clamped to the nearest edge pixel.
    Accumulation is done in float64 and the result is truncated back to the input dtype.

    Args:
        array: (height, width, channels) image array
        kernel: Odd-length kernel
        axis: 0 for the height axis, 1 for the width axis

    Returns:
        np.ndarray: New array with the same shape and dtype as the input
    """
    radius = kernel.radius
    length = array.shape[axis]

    pad = [(0, 0)] * array.ndim
    pad[axis] = (radius, radius)
    padded = np.pad(array.astype(np.float64), pad, mode="edge")

    result = np.zeros(array.shape, dtype=np.float64)
    for i, weight in enumerate(kernel.weights):
        result += weight * np.take(padded, np.arange(i, i + length), axis=axis)

    info = np.iinfo(array.dtype)
    return np.clip(result, info.min, info.max).astype(array.dtype)


def convolve_separable(array: np.ndarray, kernel: Kernel) -> np.ndarray:
    """Applies the kernel along the height axis, then along the width axis."""
    return convolve_axis(convolve_axis(array, kernel, axis=0), kernel, axis=1)
