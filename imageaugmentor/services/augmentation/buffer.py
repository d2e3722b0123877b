from typing import Sequence, Tuple

import numpy as np

from imageaugmentor.exceptions import BoundsError, ConfigurationError


class PixelBuffer:
    """
    In-memory image: a (height, width, channels) grid of uint8 pixels.

    Transforms that keep the dimensions mutate the buffer in place. Transforms that change them
    build a new buffer which replaces the old one in the pipeline.
    """

    def __init__(self, data: np.ndarray):
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise ConfigurationError(f"Pixel data must have 2 or 3 dimensions, got shape {data.shape}")
        self.data = data

    @classmethod
    def blank(cls, height: int, width: int, pixel_size: int = 3, dtype=np.uint8) -> "PixelBuffer":
        """Creates a buffer filled with the default (zero) pixel value."""
        if height <= 0 or width <= 0:
            raise ConfigurationError(f"Buffer dimensions must be positive, got {height}x{width}")
        return cls(np.zeros((height, width, pixel_size), dtype=dtype))

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def pixel_size(self) -> int:
        return self.data.shape[2]

    @property
    def size(self) -> Tuple[int, int]:
        """(height, width)"""
        return self.height, self.width

    @property
    def max_value(self) -> int:
        return int(np.iinfo(self.data.dtype).max)

    def _check_bounds(self, x: int, y: int) -> None:
        if not 0 <= x < self.width:
            raise BoundsError(f"X value {x} outside of [0, {self.width})")
        if not 0 <= y < self.height:
            raise BoundsError(f"Y value {y} outside of [0, {self.height})")

    def get_pixel(self, x: int, y: int) -> Tuple[int, ...]:
        self._check_bounds(x, y)
        return tuple(int(v) for v in self.data[y, x])

    def set_pixel(self, x: int, y: int, value: Sequence[int]) -> None:
        self._check_bounds(x, y)
        if len(value) != self.pixel_size:
            raise ConfigurationError(f"Pixel value needs {self.pixel_size} channels, got {len(value)}")
        self.data[y, x] = value

    def region(self, left: int, top: int, width: int, height: int) -> np.ndarray:
        """
        Returns a view of the rectangle [left, left+width) x [top, top+height).

        Raises:
            BoundsError: If the rectangle is not entirely inside the buffer.
        """
        if left < 0 or top < 0 or left + width > self.width or top + height > self.height:
            raise BoundsError(
                f"Region {width}x{height} at ({left}, {top}) does not fit in a {self.width}x{self.height} buffer"
            )
        return self.data[top : top + height, left : left + width]

    def resized(self, new_height: int, new_width: int) -> "PixelBuffer":
        """
        Nearest-neighbor resample to new dimensions.

        Every destination coordinate maps back to floor(coordinate / scale), with
        scale = new dimension / old dimension on each axis.
        """
        if new_height <= 0 or new_width <= 0:
            raise ConfigurationError(f"Invalid height or width value: {new_height}x{new_width}")

        row_scale = new_height / self.height
        col_scale = new_width / self.width
        rows = np.minimum(np.floor(np.arange(new_height) / row_scale).astype(np.intp), self.height - 1)
        cols = np.minimum(np.floor(np.arange(new_width) / col_scale).astype(np.intp), self.width - 1)
        return PixelBuffer(self.data[rows][:, cols].copy())

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.data.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))

    def __repr__(self) -> str:
        return f"PixelBuffer(height={self.height}, width={self.width}, pixel_size={self.pixel_size})"
