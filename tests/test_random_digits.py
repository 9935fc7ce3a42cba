"""Tests for exact-width random digit generation."""

import numpy as np
import pytest

from etfdist.exceptions import RngRangeError
from etfdist.random_digits import (
    MAX_WIDTH,
    check_rng_range,
    generate_random_integer,
    generate_random_integers,
    generate_random_real,
    generate_random_reals,
    integer_dtype,
)
from etfdist.rng import BitGeneratorSource, Xoroshiro128Plus


class TestRangeCheck:
    """Test the validation of random source ranges."""

    def test_full_range(self, sequence_source):
        assert check_rng_range(sequence_source([0], 32)) == 32
        assert check_rng_range(sequence_source([0], 64)) == 64

    def test_tolerated_ranges(self, sequence_source):
        """Sources never producing 0 and/or 2^K-1 are tolerated."""
        minstd = sequence_source([1], 31, min_value=1)
        minstd.max = (1 << 31) - 2
        assert check_rng_range(minstd) == 31

        no_zero = sequence_source([1], 16, min_value=1)
        assert check_rng_range(no_zero) == 16

    def test_invalid_min(self, sequence_source):
        with pytest.raises(RngRangeError):
            check_rng_range(sequence_source([2], 16, min_value=2))

    def test_invalid_max(self, sequence_source):
        source = sequence_source([0], 16)
        source.max = 1000
        with pytest.raises(RngRangeError):
            check_rng_range(source)

    def test_not_a_source(self):
        with pytest.raises(TypeError):
            check_rng_range(object())

    def test_range_error_is_value_error(self, sequence_source):
        source = sequence_source([0], 16)
        source.max = 1000
        with pytest.raises(ValueError):
            check_rng_range(source)


class TestRandomInteger:
    """Test the assembly of W-bit integers."""

    def test_concatenation_most_significant_first(self, sequence_source):
        source = sequence_source([0xAB, 0xCD], 8)
        assert generate_random_integer(source, 16) == 0xABCD
        assert source.n_calls == 2

    def test_partial_last_draw_keeps_upper_bits(self, sequence_source):
        source = sequence_source([0xAB, 0xCD], 8)
        assert generate_random_integer(source, 12) == 0xABC

    def test_truncation_keeps_upper_bits(self, sequence_source):
        source = sequence_source([0xDEADBEEF], 32)
        assert generate_random_integer(source, 16) == 0xDEAD
        assert source.n_calls == 1

    def test_exact_width(self, sequence_source):
        source = sequence_source([0xDEADBEEF], 32)
        assert generate_random_integer(source, 32) == 0xDEADBEEF

    def test_wide_integer(self):
        rng = Xoroshiro128Plus(seed=3)
        values = [generate_random_integer(rng, 100) for _ in range(100)]
        assert all(0 <= v < (1 << 100) for v in values)
        assert max(values) >= (1 << 90)

    def test_vectorized_matches_scalar(self):
        a, b = Xoroshiro128Plus(seed=7), Xoroshiro128Plus(seed=7)
        vectorized = generate_random_integers(a, 40, 100)
        scalar = [generate_random_integer(b, 40) for _ in range(100)]
        assert vectorized.dtype == np.uint64
        assert [int(v) for v in vectorized] == scalar

    def test_vectorized_concatenation_matches_scalar(self):
        a = BitGeneratorSource(np.random.MT19937(3))
        b = BitGeneratorSource(np.random.MT19937(3))
        vectorized = generate_random_integers(a, 48, 50)
        scalar = [generate_random_integer(b, 48) for _ in range(50)]
        assert [int(v) for v in vectorized] == scalar

    def test_vectorized_width_limit(self):
        with pytest.raises(ValueError):
            generate_random_integers(Xoroshiro128Plus(), 65, 10)


class TestRandomReal:
    """Test the generation of reals in [0, 1)."""

    def test_value(self, sequence_source):
        assert generate_random_real(sequence_source([0x80], 8), 8) == 0.5

    def test_never_one(self, sequence_source):
        source = sequence_source([0xFF] * 16, 8)
        assert generate_random_real(source, 8) == 255 / 256
        assert generate_random_real(source, 64) < 1.0

    def test_precision_capped_to_mantissa(self, sequence_source):
        source = sequence_source([(1 << 64) - 1], 64)
        assert generate_random_real(source, 64) == 1.0 - 2.0**-53

    def test_single_precision(self, sequence_source):
        source = sequence_source([(1 << 32) - 1], 32)
        value = generate_random_real(source, 32, dtype=np.float32)
        assert isinstance(value, np.float32)
        assert value < np.float32(1.0)

    def test_vectorized_reals(self):
        a, b = Xoroshiro128Plus(seed=11), Xoroshiro128Plus(seed=11)
        vectorized = generate_random_reals(a, 64, 20)
        scalar = [generate_random_real(b, 64) for _ in range(20)]
        np.testing.assert_array_equal(vectorized, scalar)
        assert np.all((vectorized >= 0.0) & (vectorized < 1.0))


class TestIntegerDtype:
    def test_dtypes(self):
        assert integer_dtype(8) is np.uint32
        assert integer_dtype(32) is np.uint32
        assert integer_dtype(33) is np.uint64
        assert integer_dtype(64) is np.uint64
        assert integer_dtype(MAX_WIDTH) is object

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            integer_dtype(0)
        with pytest.raises(ValueError):
            integer_dtype(MAX_WIDTH + 1)
