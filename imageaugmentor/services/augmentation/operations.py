import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

import bittensor as bt
import numpy as np

from imageaugmentor.exceptions import BoundsError, ConfigurationError
from imageaugmentor.schemas import ImageSize, ScalarRange, SizeLike, SizeRange
from imageaugmentor.services.augmentation.buffer import PixelBuffer
from imageaugmentor.services.augmentation.generator import NULL_SEED, UniformGenerator
from imageaugmentor.services.augmentation.kernels import (
    GaussianKernel,
    convolve_separable,
    pseudo_gaussian_boxes,
)

LOWER_BOUND_PROB = 0.0
UPPER_BOUND_PROB = 1.0

MIN_ZOOM_FACTOR = 0.1

OperationResult = Tuple[PixelBuffer, Dict[str, Any]]


class Operation(ABC):
    """
    A probability-gated transform over a pixel buffer.

    Each operation owns its generator. On every call it draws u in [0, 1] and runs its
    transform only when u <= probability, otherwise the buffer is passed through unchanged.
    """

    NAME: str = "Operation"

    def __init__(self, probability: float = UPPER_BOUND_PROB, seed: int = NULL_SEED):
        if not LOWER_BOUND_PROB <= probability <= UPPER_BOUND_PROB:
            raise ConfigurationError(f"probability must be between 0.0 and 1.0, got {probability}")

        self.probability = probability
        self.generator = UniformGenerator(seed)

    def operate_this_time(self) -> bool:
        return self.generator.next() <= self.probability

    def perform(self, buffer: PixelBuffer) -> OperationResult:
        """
        Runs the operation against a buffer.

        Args:
            buffer: Buffer produced by the previous operation

        Returns:
            Tuple (buffer for the next operation, parameters with an "applied" flag)
        """
        if not self.operate_this_time():
            bt.logging.debug(f"{self.NAME} skipped (p={self.probability})")
            return buffer, {"applied": False}

        result, params = self.transform(buffer)
        bt.logging.debug(f"{self.NAME} applied with {params}")
        return result, {"applied": True, **params}

    @abstractmethod
    def transform(self, buffer: PixelBuffer) -> OperationResult:
        """Applies the transform unconditionally."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(probability={self.probability})"


def correlated_size(factor: float, lower: ImageSize, upper: ImageSize) -> Tuple[int, int]:
    """Interpolates height and width between two sizes using the same factor."""
    height = lower.height + int(factor * (upper.height - lower.height))
    width = lower.width + int(factor * (upper.width - lower.width))
    return height, width


def center_crop(buffer: PixelBuffer, height: int, width: int) -> Tuple[PixelBuffer, int, int]:
    """
    Copies the height x width rectangle centered on the buffer center into a new buffer.

    Returns:
        Tuple (cropped buffer, left, top)

    Raises:
        BoundsError: If the rectangle is not inside the buffer.
    """
    left = buffer.width // 2 - width // 2
    top = buffer.height // 2 - height // 2
    return PixelBuffer(buffer.region(left, top, width, height).copy()), left, top


class Resize(Operation):
    """Nearest-neighbor resize to a size drawn between lower and upper."""

    NAME = "Resize"

    def __init__(
        self,
        lower: SizeLike,
        upper: Optional[SizeLike] = None,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.size_range = SizeRange.build(lower, upper)
        if min(self.size_range.lower.as_tuple()) <= 0:
            raise ConfigurationError(f"Resize target must be positive, got {self.size_range.lower.as_tuple()}")

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        factor = self.generator.next()
        height, width = correlated_size(factor, self.size_range.lower, self.size_range.upper)
        return buffer.resized(height, width), {"factor": factor, "height": height, "width": width}


class Crop(Operation):
    """
    Crops a region of fixed size.

    With center=True the region is centered on the image center, otherwise its top-left
    corner is drawn uniformly among the positions where the region fits.
    """

    NAME = "Crop"

    def __init__(
        self,
        size: SizeLike,
        center: bool = True,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.size = ImageSize.coerce(size)
        self.center = center
        if min(self.size.as_tuple()) <= 0:
            raise ConfigurationError(f"Crop size must be positive, got {self.size.as_tuple()}")

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        height, width = self.size.as_tuple()
        if self.center:
            cropped, left, top = center_crop(buffer, height, width)
            return cropped, {"left": left, "top": top, "height": height, "width": width}

        if height > buffer.height or width > buffer.width:
            raise BoundsError(f"Crop {width}x{height} does not fit in a {buffer.width}x{buffer.height} buffer")
        left = self.generator.integer(0, buffer.width - width)
        top = self.generator.integer(0, buffer.height - height)
        cropped = PixelBuffer(buffer.region(left, top, width, height).copy())
        return cropped, {"left": left, "top": top, "height": height, "width": width}


class Zoom(Operation):
    """Scales by a factor drawn from a range, then center crops back to the original size."""

    NAME = "Zoom"

    def __init__(
        self,
        min_factor: float = 1.0,
        max_factor: float = 1.0,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.factor_range = ScalarRange.build(min_factor, max_factor)
        # factors are truncated to one decimal, anything smaller would become 0
        if self.factor_range.minimum < MIN_ZOOM_FACTOR:
            raise ConfigurationError(f"Zoom factor must be at least {MIN_ZOOM_FACTOR}, got {min_factor}")

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        factor = self.factor_range.interpolate(self.generator.next())
        # keep a single decimal place
        factor = int(factor * 10) / 10

        height, width = buffer.size
        zoomed_height, zoomed_width = math.floor(height * factor), math.floor(width * factor)
        if zoomed_height <= 0 or zoomed_width <= 0:
            raise BoundsError(f"Zoom {factor} shrinks a {width}x{height} buffer to nothing")

        zoomed = buffer.resized(zoomed_height, zoomed_width)
        cropped, left, top = center_crop(zoomed, height, width)
        return cropped, {"factor": factor, "left": left, "top": top}


class Rotate(Operation):
    """
    Rotates around the image center by an angle drawn from a range of degrees.

    The output keeps the source dimensions. Destination pixels whose source falls outside
    of the image are left black.
    """

    NAME = "Rotate"

    def __init__(
        self,
        min_degree: float,
        max_degree: float,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.degree_range = ScalarRange.build(min_degree, max_degree)

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        degree = self.degree_range.interpolate(self.generator.next())
        radians = math.radians(degree)
        cos_a, sin_a = math.cos(radians), math.sin(radians)

        height, width = buffer.size
        center_x = (width - 1) / 2
        center_y = (height - 1) / 2
        ys, xs = np.mgrid[0:height, 0:width]
        dx = xs - center_x
        dy = ys - center_y

        # inverse rotation: destination offset -> source coordinate
        src_x = np.rint(cos_a * dx + sin_a * dy + center_x).astype(np.intp)
        src_y = np.rint(-sin_a * dx + cos_a * dy + center_y).astype(np.intp)
        inside = (src_x >= 0) & (src_x < width) & (src_y >= 0) & (src_y < height)

        rotated = np.zeros_like(buffer.data)
        rotated[inside] = buffer.data[src_y[inside], src_x[inside]]
        return PixelBuffer(rotated), {"degree": degree}


class Invert(Operation):
    """Replaces every channel value with its bitwise complement."""

    NAME = "Invert"

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        np.invert(buffer.data, out=buffer.data)
        return buffer, {}


class FlipAxis(str, Enum):
    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"


class Flip(Operation):
    """Mirrors the image across its vertical (Horizontal) or horizontal (Vertical) centerline."""

    NAME = "Flip"

    def __init__(
        self,
        axis: Union[FlipAxis, str],
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        try:
            self.axis = FlipAxis(axis)
        except ValueError as e:
            raise ConfigurationError(
                f"Flip axis must be one of {[a.value for a in FlipAxis]}, got {axis!r}"
            ) from e

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        if self.axis is FlipAxis.HORIZONTAL:
            buffer.data[...] = buffer.data[:, ::-1].copy()
        else:
            buffer.data[...] = buffer.data[::-1].copy()
        return buffer, {"axis": self.axis.value}


class Blur(Operation):
    """Separable Gaussian blur, height axis first, with clamped edges."""

    NAME = "Blur"

    def __init__(
        self,
        sigma: float,
        kernel_size: Optional[int] = None,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.kernel = GaussianKernel(sigma, kernel_size)

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        blurred = convolve_separable(buffer.data, self.kernel)
        return PixelBuffer(blurred), {"sigma": self.kernel.sigma, "kernel_size": len(self.kernel)}


class RapidBlur(Operation):
    """Approximates a Gaussian blur with successive box filters."""

    NAME = "RapidBlur"

    def __init__(
        self,
        sigma: float,
        passes: int = 3,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.sigma = sigma
        self.kernels = pseudo_gaussian_boxes(sigma, passes)

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        data = buffer.data
        for kernel in self.kernels:
            data = convolve_separable(data, kernel)
        return PixelBuffer(data), {"sigma": self.sigma, "box_sizes": [len(k) for k in self.kernels]}


class RandomErase(Operation):
    """
    Overwrites a random rectangle with uniform noise.

    The mask size is drawn between the lower and upper mask sizes (both clamped to the image)
    with one factor shared by height and width. Every channel of every erased pixel gets an
    independent draw over the full channel range.
    """

    NAME = "RandomErase"

    def __init__(
        self,
        lower_mask: SizeLike,
        upper_mask: Optional[SizeLike] = None,
        probability: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ):
        super().__init__(probability, seed)
        self.mask_range = SizeRange.build(lower_mask, upper_mask)

    def transform(self, buffer: PixelBuffer) -> OperationResult:
        lower = ImageSize(
            height=min(self.mask_range.lower.height, buffer.height),
            width=min(self.mask_range.lower.width, buffer.width),
        )
        upper = ImageSize(
            height=min(self.mask_range.upper.height, buffer.height),
            width=min(self.mask_range.upper.width, buffer.width),
        )
        height, width = correlated_size(self.generator.next(), lower, upper)

        top = self.generator.integer(0, buffer.height - height)
        left = self.generator.integer(0, buffer.width - width)
        region = buffer.region(left, top, width, height)
        region[...] = self.generator.integers(
            0, buffer.max_value, (height, width, buffer.pixel_size), dtype=buffer.data.dtype
        )
        return buffer, {"left": left, "top": top, "height": height, "width": width}
