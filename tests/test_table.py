"""Tests for the fixed-point ETF table."""

import math

import numpy as np
import pytest

from etfdist.exceptions import EtfError, InvalidTableSize
from etfdist.partition import newton_partition_monotonic, trapezoidal_prepartition
from etfdist.table import build_table


def exp_partition(n_bits, x1=5.0):
    f = lambda x: math.exp(-x)  # noqa: E731
    df = lambda x: -math.exp(-x)  # noqa: E731
    x0 = trapezoidal_prepartition(f, 0.0, x1, 1 << n_bits)
    return newton_partition_monotonic(f, df, x0, tol=1e-10)


class TestTableSize:
    def test_wrong_number_of_breakpoints(self):
        with pytest.raises(InvalidTableSize, match="Invalid ETF table size"):
            build_table(3, 32, np.linspace(0.0, 1.0, 8), np.ones(8), np.ones(8))

    def test_wrong_number_of_extrema(self):
        with pytest.raises(InvalidTableSize):
            build_table(3, 32, np.linspace(0.0, 1.0, 9), np.ones(7), np.ones(8))

    def test_error_hierarchy(self):
        assert issubclass(InvalidTableSize, EtfError)
        assert issubclass(InvalidTableSize, ValueError)
        assert str(InvalidTableSize()) == "Invalid ETF table size"

    @pytest.mark.parametrize("width", [3, 4, 129])
    def test_invalid_width(self, width):
        with pytest.raises(ValueError):
            build_table(3, width, np.linspace(0.0, 1.0, 9), np.ones(8), np.ones(8), sign_bits=1)


class TestTableContents:
    def test_bounded_outer_switch(self):
        t = build_table(2, 16, np.linspace(0.0, 1.0, 5), np.ones(4), np.ones(4))
        assert t.outer_switch == 1 << 14
        assert t.mantissa_bits == 14
        assert t.n_intervals == 4

    def test_flat_density_has_full_fast_path(self):
        t = build_table(2, 16, np.linspace(0.0, 1.0, 5), np.ones(4), np.ones(4))
        assert all(int(r) == 1 << 14 for r in t.scaled_fratio)
        assert t.fast_path_probability == 1.0
        np.testing.assert_allclose(t.scaled_dx, 0.25 / (1 << 14))

    def test_composite_outer_switch(self):
        t = build_table(0, 8, [0.0, 1.0], [1.0], [1.0], outer_area=1.0)
        assert t.outer_switch == 128

    def test_right_to_left_outer_switch(self):
        # Breakpoints running from 0 down to -2 for a left tail.
        x = np.linspace(0.0, -2.0, 5)
        fsup = np.exp(x[:-1])
        finf = np.exp(x[1:])
        t = build_table(2, 32, x, finf, fsup, outer_area=math.exp(-2.0))
        full_scale = 1 << 30
        table_area = float(np.sum(0.5 * fsup))
        assert 0 <= t.outer_switch <= full_scale
        expected = full_scale * table_area / (table_area + math.exp(-2.0))
        assert abs(t.outer_switch - expected) <= 1.0
        np.testing.assert_allclose(t.scaled_fsup * t.outer_switch, fsup)

    def test_sign_bit_reduces_mantissa(self):
        t = build_table(2, 16, np.linspace(0.0, 1.0, 5), np.ones(4), np.ones(4), sign_bits=1)
        assert t.mantissa_bits == 13
        assert t.outer_switch == 1 << 13

    def test_small_ratio_disables_fast_path(self):
        t = build_table(1, 16, [0.0, 1.0, 2.0], [0.4, 0.9], [1.0, 1.0])
        assert int(t.scaled_fratio[0]) == 0
        assert t.scaled_dx[0] == 0.0
        assert int(t.scaled_fratio[1]) == math.floor(0.9 * (1 << 15))

    def test_origin_translation(self):
        t = build_table(1, 16, [2.0, 3.0, 4.0], [0.9, 0.8], [1.0, 0.9], sign_bits=1, origin=2.0)
        np.testing.assert_allclose(t.x, [0.0, 1.0, 2.0])
        assert t.origin == 2.0

    def test_scaled_fsup(self):
        t = build_table(1, 16, [0.0, 1.0, 2.0], [0.5, 0.25], [1.0, 0.5])
        np.testing.assert_allclose(t.scaled_fsup, np.array([1.0, 0.5]) / t.outer_switch)

    def test_read_only(self):
        t = build_table(2, 16, np.linspace(0.0, 1.0, 5), np.ones(4), np.ones(4))
        with pytest.raises(ValueError):
            t.x[0] = 1.0
        with pytest.raises(ValueError):
            t.scaled_fratio[0] = 0

    def test_wide_table_uses_python_integers(self):
        t = build_table(2, 100, np.linspace(0.0, 1.0, 5), np.ones(4), np.ones(4))
        assert t.scaled_fratio.dtype == object
        assert t.outer_switch == 1 << 98


class TestNoFalseAccept:
    """Every point of a fast-path rectangle lies under the density."""

    @pytest.mark.parametrize("width", [16, 32, 64])
    def test_fast_path_rectangles_under_density(self, width):
        p = exp_partition(4)
        t = build_table(4, width, p.x, p.finf, p.fsup, outer_area=math.exp(-5.0))
        for i in range(t.n_intervals):
            r = int(t.scaled_fratio[i])
            if r == 0:
                continue
            # Largest ordinate reachable on the fast path.
            assert (r - 1) * t.scaled_fsup[i] <= p.finf[i] * (1.0 + 1e-12)
            # Largest abscissa reachable on the fast path stays in the interval.
            assert t.x[i] + t.scaled_dx[i] * (r - 1) <= t.x[i + 1]

    def test_fast_path_probability(self):
        p = exp_partition(6)
        t = build_table(6, 32, p.x, p.finf, p.fsup)
        expected = np.mean(np.where(p.finf / p.fsup >= 0.5, p.finf / p.fsup, 0.0))
        assert t.fast_path_probability == pytest.approx(expected, rel=1e-6)
