import numpy as np
import pytest

from imageaugmentor.exceptions import ConfigurationError
from imageaugmentor.services.augmentation.generator import NULL_SEED, UniformGenerator, resolve_seed


class TestUniformGeneratorSeeding:
    """Tests for seed handling."""

    def test_same_seed_gives_same_sequence(self):
        """Test that two generators with the same seed draw identical values."""
        first = UniformGenerator(42)
        second = UniformGenerator(42)

        assert [first.next() for _ in range(10)] == [second.next() for _ in range(10)]

    def test_different_seeds_give_different_sequences(self):
        """Test that different seeds lead to different draws."""
        first = UniformGenerator(1)
        second = UniformGenerator(2)

        assert [first.next() for _ in range(5)] != [second.next() for _ in range(5)]

    def test_null_seed_is_time_derived(self):
        """Test that seed 0 is replaced by distinct clock-derived seeds."""
        first = UniformGenerator(NULL_SEED)
        second = UniformGenerator(NULL_SEED)

        assert first.seed != NULL_SEED
        assert first.seed != second.seed

    def test_non_zero_seed_is_kept(self):
        """Test that explicit seeds are used as-is."""
        assert resolve_seed(1234) == 1234

    def test_negative_seed_raises_error(self):
        """Test that negative seeds are rejected."""
        with pytest.raises(ConfigurationError, match="non-negative"):
            UniformGenerator(-1)


class TestUniformGeneratorDraws:
    """Tests for the value domains."""

    def test_next_is_in_unit_interval(self):
        """Test that real draws lie in [0, 1]."""
        generator = UniformGenerator(7)
        values = [generator.next() for _ in range(1000)]

        assert all(0.0 <= v <= 1.0 for v in values)

    def test_uniform_respects_bounds(self):
        """Test real draws over a custom interval."""
        generator = UniformGenerator(7)
        values = [generator.uniform(-10.0, 10.0) for _ in range(1000)]

        assert all(-10.0 <= v <= 10.0 for v in values)

    def test_integer_range_is_closed(self):
        """Test that integer draws cover both ends of the range."""
        generator = UniformGenerator(3)
        values = {generator.integer(0, 3) for _ in range(500)}

        assert values == {0, 1, 2, 3}

    def test_integer_with_equal_bounds(self):
        """Test that a degenerate range always returns its single value."""
        generator = UniformGenerator(3)

        assert all(generator.integer(5, 5) == 5 for _ in range(10))

    def test_integers_shape_and_dtype(self):
        """Test array draws used for noise."""
        generator = UniformGenerator(3)
        noise = generator.integers(0, 255, (4, 5, 3))

        assert noise.shape == (4, 5, 3)
        assert noise.dtype == np.uint8
