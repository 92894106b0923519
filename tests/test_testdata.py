"""
Tests for synthetic coupled series.
"""

import numpy as np

from ccmsystems.testdata import (
    make_coupled_logistic_maps,
    make_coupled_series,
    make_test_cases,
    get_ground_truth,
)


class TestCoupledLogisticMaps:
    """Y forces X."""

    def test_shape_and_bounds(self):
        x, y = make_coupled_logistic_maps(300, coupling=0.05)

        assert x.shape == y.shape == (300,)
        assert x[0] == 0.1 and y[0] == 0.2
        assert np.all((x >= 0) & (x <= 1))
        assert np.all((y >= 0) & (y <= 1))

    def test_deterministic(self):
        a = make_coupled_logistic_maps(100, coupling=0.1)
        b = make_coupled_logistic_maps(100, coupling=0.1)
        np.testing.assert_array_equal(a[0], b[0])
        np.testing.assert_array_equal(a[1], b[1])

    def test_driver_ignores_coupling(self):
        _, y_weak = make_coupled_logistic_maps(50, coupling=0.0)
        _, y_strong = make_coupled_logistic_maps(50, coupling=0.3)
        np.testing.assert_array_equal(y_weak, y_strong)

    def test_empty(self):
        x, y = make_coupled_logistic_maps(0)
        assert x.size == y.size == 0


class TestCoupledSeries:
    """X drives Y with observation noise."""

    def test_structure(self):
        data = make_coupled_series(80, coupling=0.3, noise_level=0.05, seed=1)

        assert data['x_series'].shape == data['y_series'].shape == (80,)
        assert data['parameters']['coupling'] == 0.3
        assert data['parameters']['length'] == 80
        assert '0.3' in data['description']

    def test_noise_bounds(self):
        data = make_coupled_series(200, noise_level=0.05, seed=2)
        for key in ('x_series', 'y_series'):
            assert data[key].min() >= 0.001 - 0.05
            assert data[key].max() <= 0.999 + 0.05

    def test_noise_free_is_deterministic(self):
        a = make_coupled_series(60, noise_level=0.0, seed=1)
        b = make_coupled_series(60, noise_level=0.0, seed=2)
        np.testing.assert_array_equal(a['y_series'], b['y_series'])

    def test_seeded(self):
        a = make_coupled_series(60, seed=5)
        b = make_coupled_series(60, seed=5)
        np.testing.assert_array_equal(a['x_series'], b['x_series'])


class TestCases:
    """Standard cases and their ground truth."""

    def test_cases_and_truth(self):
        cases = make_test_cases(n=40, seed=0)
        truth = get_ground_truth(cases)

        assert list(cases) == ['strong', 'medium', 'weak', 'none']
        assert list(truth.columns) == ['x_causes_y', 'y_causes_x']
        assert truth['x_causes_y'].tolist() == [1, 1, 1, 0]
        assert truth['y_causes_x'].sum() == 0
