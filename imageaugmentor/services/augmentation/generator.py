import itertools
import time
from typing import Tuple

import numpy as np

from imageaugmentor.exceptions import ConfigurationError

# Seed value that asks for a time-derived, non reproducible sequence
NULL_SEED = 0

# keeps generators created within the same clock tick apart
_seed_offsets = itertools.count()


def resolve_seed(seed: int = NULL_SEED) -> int:
    """Returns the seed unchanged, or one derived from the clock when it is NULL_SEED."""
    if seed < 0:
        raise ConfigurationError(f"Seed must be non-negative, got {seed}")
    if seed == NULL_SEED:
        return time.time_ns() + next(_seed_offsets)
    return seed


class UniformGenerator:
    """
    Seeded uniform scalar source.

    `next()` draws reals in [0, 1] for probability gates and interpolation factors,
    `integer()` / `integers()` draw from bounded integer ranges for coordinates, indices and noise.
    """

    def __init__(self, seed: int = NULL_SEED):
        self.seed = resolve_seed(seed)
        self._rng = np.random.default_rng(self.seed)

    def next(self) -> float:
        return float(self._rng.random())

    def uniform(self, low: float, high: float) -> float:
        """Draws a real uniformly from [low, high]."""
        return low + self.next() * (high - low)

    def integer(self, low: int, high: int) -> int:
        """Draws an integer uniformly from the closed range [low, high]."""
        return int(self._rng.integers(low, high, endpoint=True))

    def integers(self, low: int, high: int, shape: Tuple[int, ...], dtype=np.uint8) -> np.ndarray:
        """Draws an array of independent integers from the closed range [low, high]."""
        return self._rng.integers(low, high, size=shape, dtype=dtype, endpoint=True)
