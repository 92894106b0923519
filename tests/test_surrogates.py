"""
Tests for surrogate generators and empirical significance testing.
"""

import numpy as np
import pytest

from ccmsystems.surrogates import (
    generate_random_surrogates,
    generate_circular_surrogates,
    generate_iaaft_surrogates,
    get_surrogate_generator,
    empirical_p,
    compute_significance_thresholds,
)
from ccmsystems.surrogates import testing


@pytest.fixture
def series():
    t = np.arange(128)
    return np.sin(2 * np.pi * t / 16) + 0.2 * np.random.default_rng(0).normal(size=t.size)


class TestGenerators:
    """Surrogate shapes and preserved properties."""

    def test_random_preserves_values(self, series):
        surr = generate_random_surrogates(series, 5, seed=1)

        assert surr.shape == (5, series.size)
        for row in surr:
            np.testing.assert_array_equal(np.sort(row), np.sort(series))

    def test_circular_is_a_shift(self, series):
        surr = generate_circular_surrogates(series, 4, seed=2)

        for row in surr:
            shifts = [s for s in range(1, series.size)
                      if np.array_equal(row, np.roll(series, s))]
            assert shifts

    def test_iaaft_preserves_distribution_and_spectrum(self, series):
        surr = generate_iaaft_surrogates(series, 3, seed=3)

        original_amp = np.abs(np.fft.fft(series))
        for row in surr:
            np.testing.assert_allclose(np.sort(row), np.sort(series))
            amp = np.abs(np.fft.fft(row))
            assert np.corrcoef(amp, original_amp)[0, 1] > 0.9
            assert not np.array_equal(row, series)

    def test_seeded_generators_reproducible(self, series):
        for method in ('random', 'circular', 'iaaft'):
            generator = get_surrogate_generator(method)
            np.testing.assert_array_equal(generator(series, 2, seed=7),
                                          generator(series, 2, seed=7))

    def test_empty_series(self):
        assert generate_iaaft_surrogates(np.array([]), 2).shape == (2, 0)
        assert generate_circular_surrogates(np.array([]), 2).shape == (2, 0)

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown surrogate method"):
            get_surrogate_generator('twin')


class TestEmpiricalP:
    """Empirical p-values with the +1 correction."""

    def test_greater(self):
        surrogates = np.linspace(0, 0.5, 19)
        assert empirical_p(0.9, surrogates) == pytest.approx(1 / 20)
        assert empirical_p(-1.0, surrogates) == pytest.approx(1.0)

    def test_less(self):
        surrogates = np.linspace(0, 0.5, 9)
        assert empirical_p(-0.1, surrogates, tail='less') == pytest.approx(0.1)

    def test_two_sided(self):
        surrogates = np.array([-0.1, 0.0, 0.1])
        assert empirical_p(0.0, surrogates, tail='two-sided') == pytest.approx(1.0)
        assert empirical_p(5.0, surrogates, tail='two-sided') == pytest.approx(0.25)

    def test_ignores_nan(self):
        surrogates = np.array([0.1, np.nan, 0.2, np.nan])
        assert empirical_p(0.5, surrogates) == pytest.approx(1 / 3)

    def test_no_surrogates(self):
        assert np.isnan(empirical_p(0.5, np.array([np.nan])))

    def test_invalid_tail(self):
        with pytest.raises(ValueError, match="tail"):
            empirical_p(0.5, np.array([0.1]), tail='upper')


class TestSignificance:
    """Summary statistics of a surrogate test."""

    def test_thresholds(self):
        thresholds = compute_significance_thresholds(np.arange(101, dtype=float))
        assert thresholds == {'p95': pytest.approx(95.0), 'p99': pytest.approx(99.0)}

    def test_significant_result(self):
        result = testing.test_significance(0.9, np.linspace(0, 0.5, 99), alpha=0.05)

        assert result['significant'] is True
        assert result['p_value'] == pytest.approx(0.01)
        assert result['n_surrogates'] == 99
        assert result['surr_mean'] == pytest.approx(0.25)

    def test_empty_null(self):
        result = testing.test_significance(0.9, np.array([]))

        assert result['significant'] is False
        assert np.isnan(result['surr_mean'])
