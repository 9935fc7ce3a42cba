"""Tests for the ready-made distributions."""

import math

import numpy as np
import pytest
from scipy import integrate, stats

from etfdist.categories import Composite, RejectionComposite
from etfdist.distributions import (
    ChiSquaredOuterDistribution,
    ChiSquaredOuterPdf,
    ChiSquaredPdf,
    EtfChiSquaredDistribution,
    EtfChiSquaredLowDofDistribution,
    EtfNormalDistribution,
    NormalTailDistribution,
    WeibullPdf,
    WeibullTailDistribution,
    ZigguratNormalDistribution,
    default_normal_xtail,
    make_ziggurat_tables,
    normal_tail_area,
)
from etfdist.rng import Xoroshiro128Plus
from etfdist.sampler import EtfDistribution
from etfdist.shapes import Central


@pytest.fixture(scope="module")
def normal32():
    return EtfNormalDistribution(width=32, n_bits=7)


class TestDefaultNormalXtail:
    @pytest.mark.parametrize(
        "width, n_bits, expected",
        [
            (64, 7, 3.292145211),
            (32, 7, 3.292145211),
            (11, 7, 1.532095304),
            (12, 7, 1.859950459),
            (10, 7, 3.25),
            (12, 8, 1.533103263),
            (64, 8, 3.294526271),
            (64, 6, 3.25),
        ],
    )
    def test_values(self, width, n_bits, expected):
        assert default_normal_xtail(width, n_bits) == expected

    def test_tail_area(self):
        assert normal_tail_area(0.0) == pytest.approx(math.sqrt(math.pi / 2.0))
        expected = math.sqrt(2.0 * math.pi) * stats.norm.sf(3.25)
        assert normal_tail_area(3.25) == pytest.approx(expected, rel=1e-10)


class TestNormalTail:
    def test_samples_beyond_tail(self):
        tail = NormalTailDistribution(3.0, 64)
        rng = Xoroshiro128Plus(seed=31)
        samples = np.array([tail(rng) for _ in range(5_000)])
        assert np.all(samples >= 3.0)
        _, pvalue = stats.kstest(samples, stats.truncnorm(3.0, np.inf).cdf)
        assert pvalue > 0.001

    def test_invalid_tail(self):
        with pytest.raises(ValueError):
            NormalTailDistribution(0.0)


class TestEtfNormal:
    def test_construction(self, normal32):
        assert normal32.table.n_intervals == 128
        assert normal32.xtail == 3.292145211
        assert isinstance(normal32.shape, Central)
        assert type(normal32.category) is Composite
        assert normal32.min() == -math.inf
        assert normal32.max() == math.inf

    def test_fast_path_dominates(self, normal32):
        assert normal32.table.fast_path_probability > 0.8

    def test_moments(self, normal32):
        samples = normal32.sample(2024, 200_000)
        assert abs(np.mean(samples)) < 0.01
        assert abs(np.var(samples) - 1.0) < 0.02

    def test_ks(self, normal32):
        samples = normal32.sample(Xoroshiro128Plus(seed=32), 100_000)
        _, pvalue = stats.kstest(samples, "norm")
        assert pvalue > 0.001

    def test_tail_frequency(self, normal32):
        samples = normal32.sample(33, 200_000)
        expected = 2.0 * stats.norm.sf(normal32.xtail)
        assert np.mean(np.abs(samples) > normal32.xtail) == pytest.approx(expected, abs=5e-4)

    def test_scalar_draws(self, normal32):
        rng = Xoroshiro128Plus(seed=34)
        samples = [normal32(rng) for _ in range(5_000)]
        _, pvalue = stats.kstest(samples, "norm")
        assert pvalue > 0.001

    def test_explicit_tail_and_width(self):
        dist = EtfNormalDistribution(width=64, n_bits=6, xtail=3.25)
        assert dist.xtail == 3.25
        assert dist.table.n_intervals == 64
        samples = dist.sample(35, 50_000)
        assert abs(np.mean(samples)) < 0.02


class TestWeibull:
    def test_normalized_pdf(self):
        pdf = WeibullPdf(2.0, 1.5, 0.0)
        for x in [0.1, 0.5, 1.0, 2.5]:
            assert pdf(x) == pytest.approx(stats.weibull_min(2.0, scale=1.5).pdf(x))
        assert pdf(-1.0) == 0.0
        assert pdf.total_area() == pytest.approx(1.0)

    def test_tail_area(self):
        pdf = WeibullPdf(1.5, 2.0, 0.5, 3.0)
        area, _ = integrate.quad(pdf, 2.0, np.inf)
        assert pdf.tail_area(2.0) == pytest.approx(area, rel=1e-8)
        assert pdf.tail_area(0.5) == pytest.approx(3.0)

    def test_tail_samples(self):
        tail = WeibullTailDistribution(1.0, 1.0, 2.0, 0.0)
        rng = Xoroshiro128Plus(seed=41)
        samples = np.array([tail(rng) for _ in range(5_000)])
        assert np.all(samples >= 1.0)
        _, pvalue = stats.kstest(samples - 1.0, stats.expon(scale=2.0).cdf)
        assert pvalue > 0.001

    def test_negative_scale(self):
        tail = WeibullTailDistribution(-1.0, 1.0, -1.0, 0.0)
        rng = Xoroshiro128Plus(seed=42)
        samples = [tail(rng) for _ in range(100)]
        assert all(s <= -1.0 for s in samples)
        assert tail.min() == -math.inf
        assert tail.max() == -1.0

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            WeibullTailDistribution(0.0, 0.0, 1.0, 0.0)
        with pytest.raises(ValueError):
            WeibullTailDistribution(0.0, 1.0, 0.0, 0.0)


class TestChiSquaredPdf:
    def test_values(self):
        assert ChiSquaredPdf(4.0)(2.0) == pytest.approx(2.0 * math.exp(-1.0))
        assert ChiSquaredPdf(2.0)(0.0) == 1.0
        assert ChiSquaredPdf(4.0)(0.0) == 0.0
        assert ChiSquaredPdf(1.0)(0.0) == math.inf
        assert ChiSquaredPdf(3.0)(-1.0) == 0.0

    @pytest.mark.parametrize("k", [1.0, 2.0, 5.0])
    def test_derivative(self, k):
        pdf = ChiSquaredPdf(k)
        for x in [0.5, 2.0, 7.0]:
            h = 1e-6
            numerical = (pdf(x + h) - pdf(x - h)) / (2.0 * h)
            assert pdf.derivative(x) == pytest.approx(numerical, rel=1e-5, abs=1e-9)

    def test_invalid(self):
        with pytest.raises(ValueError):
            ChiSquaredPdf(0.0)


class TestEtfChiSquared:
    @pytest.mark.parametrize("k, xtail", [(2.0, 10.0), (5.0, 16.0)])
    def test_fit(self, k, xtail):
        dist = EtfChiSquaredDistribution(k, xtail)
        assert isinstance(dist.category, RejectionComposite)
        samples = dist.sample(Xoroshiro128Plus(seed=51), 100_000)
        assert np.all(samples >= 0.0)
        assert np.mean(samples) == pytest.approx(k, abs=0.05)
        _, pvalue = stats.kstest(samples, stats.chi2(k).cdf)
        assert pvalue > 0.001

    def test_mode_is_table_supremum(self):
        dist = EtfChiSquaredDistribution(5.0, 16.0)
        pdf = ChiSquaredPdf(5.0)
        table = dist.table
        fsup = table.scaled_fsup * table.outer_switch
        assert fsup.max() == pytest.approx(pdf(3.0))

    def test_many_degrees_of_freedom(self):
        dist = EtfChiSquaredDistribution(12.0, 28.0)
        samples = dist.sample(52, 50_000)
        assert np.mean(samples) == pytest.approx(12.0, abs=0.1)

    def test_support(self):
        dist = EtfChiSquaredDistribution(5.0, 16.0)
        assert isinstance(dist, EtfDistribution)
        assert dist.min() == 0.0
        assert dist.max() == math.inf

    def test_invalid(self):
        with pytest.raises(ValueError):
            EtfChiSquaredDistribution(1.0, 10.0)
        with pytest.raises(ValueError):
            EtfChiSquaredDistribution(6.0, 3.0)


class TestEtfChiSquaredLowDof:
    @pytest.fixture(scope="class")
    def dist(self):
        return EtfChiSquaredLowDofDistribution(1.0, 1e-4, 10.0)

    def test_is_etf_distribution(self, dist):
        assert isinstance(dist, EtfDistribution)
        assert isinstance(dist.category, RejectionComposite)
        assert dist.table.x[0] == pytest.approx(1e-4)
        assert dist.min() == 0.0
        assert dist.max() == math.inf

    def test_fit(self, dist):
        samples = dist.sample(Xoroshiro128Plus(seed=61), 100_000)
        assert np.all(samples >= 0.0)
        assert np.mean(samples) == pytest.approx(1.0, abs=0.03)
        _, pvalue = stats.kstest(samples, stats.chi2(1.0).cdf)
        assert pvalue > 0.001

    def test_envelope_dominates(self):
        k, x0, xtail = 1.0, 1e-4, 10.0
        pdf = ChiSquaredPdf(k)
        envelope = ChiSquaredOuterPdf(k, x0, xtail)
        for x in np.concatenate([np.linspace(1e-6, x0, 20), np.linspace(xtail, 40.0, 20)]):
            assert envelope(x) >= pdf(x) * (1.0 - 1e-12)

    def test_outer_distribution(self):
        outer = ChiSquaredOuterDistribution(1.0, 1e-4, 10.0)
        rng = Xoroshiro128Plus(seed=62)
        samples = np.array([outer(rng) for _ in range(2_000)])
        assert np.all((samples < 1e-4) | (samples >= 10.0))
        assert outer.total_non_normalized_area() > 0.0

    def test_invalid(self):
        with pytest.raises(ValueError):
            EtfChiSquaredLowDofDistribution(2.5, 1e-4, 10.0)
        with pytest.raises(ValueError):
            EtfChiSquaredLowDofDistribution(1.0, 10.0, 1.0)


class TestZiggurat:
    def test_tables(self):
        wn, kn, fn = make_ziggurat_tables(24)
        assert len(wn) == len(kn) == len(fn) == 128
        assert kn[1] == 0
        assert fn[0] == 1.0
        assert wn[127] * (1 << 24) == pytest.approx(3.442619855899)
        # Right edges increase from the top layer to the layer spanning [0, r].
        assert all(wn[i] < wn[i + 1] for i in range(1, 127))

    def test_fit(self):
        dist = ZigguratNormalDistribution(32)
        samples = dist.sample(Xoroshiro128Plus(seed=71), 50_000)
        assert abs(np.mean(samples)) < 0.02
        assert abs(np.var(samples) - 1.0) < 0.04
        _, pvalue = stats.kstest(samples, "norm")
        assert pvalue > 0.001

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            ZigguratNormalDistribution(8)
