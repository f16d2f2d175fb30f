"""
Tests for posterior-predictive forecasting.

Tests cover:
- Recursive chaining (observed value for step 1, simulated values after)
- Seed reproducibility
- Shape validation
- Attaching forecasts to InferenceData
- Horizon-ordered forecast table
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from inference.data import TemperatureSeries
from simulation.forecast import ForecastSimulator, compute_path_statistics, forecast_table


@pytest.fixture
def series() -> TemperatureSeries:
    return TemperatureSeries([10.0, 10.5, 11.0, 11.2], labels=[2016, 2017, 2018, 2019])


class TestForecastSimulator:
    """Tests for ForecastSimulator."""

    def test_invalid_horizon(self) -> None:
        with pytest.raises(ValueError, match="n_new"):
            ForecastSimulator(0)

    def test_deterministic_recursion(self) -> None:
        """With sigma=0 the forecast follows the recurrence exactly."""
        sim = ForecastSimulator(3)
        y_new = sim.simulate(
            alpha=np.array([1.0]), beta=np.array([0.5]), gamma=np.array([0.1]),
            sigma=np.array([0.0]), last_value=4.0, n_obs=10,
        )
        step1 = 1.0 + 0.5 * 4.0 + 0.1 * 11
        step2 = 1.0 + 0.5 * step1 + 0.1 * 12
        step3 = 1.0 + 0.5 * step2 + 0.1 * 13
        assert_allclose(y_new[0], [step1, step2, step3])

    def test_chains_off_simulated_values(self) -> None:
        """Step k>1 uses the previous simulated value, including its noise."""
        alpha, beta, gamma, sigma = 0.5, 0.8, 0.0, 1.0
        sim = ForecastSimulator(4)
        y_new = sim.simulate(
            alpha=np.full((2, 3), alpha), beta=np.full((2, 3), beta),
            gamma=np.full((2, 3), gamma), sigma=np.full((2, 3), sigma),
            last_value=2.0, n_obs=5, random_seed=11,
        )

        rng = np.random.default_rng(11)
        previous = np.full((2, 3), 2.0)
        for k in range(4):
            expected = alpha + beta * previous + sigma * rng.standard_normal((2, 3))
            assert_allclose(y_new[..., k], expected)
            previous = expected

    def test_seed_reproducibility(self) -> None:
        sim = ForecastSimulator(5)
        kwargs = dict(
            alpha=np.zeros(100), beta=np.full(100, 0.3), gamma=np.zeros(100),
            sigma=np.ones(100), last_value=0.0, n_obs=20,
        )
        assert_array_equal(sim.simulate(**kwargs, random_seed=4), sim.simulate(**kwargs, random_seed=4))
        assert not np.allclose(sim.simulate(**kwargs, random_seed=4), sim.simulate(**kwargs, random_seed=5))

    def test_shape_mismatch(self) -> None:
        with pytest.raises(ValueError, match="gamma"):
            ForecastSimulator(2).simulate(
                alpha=np.zeros(3), beta=np.zeros(3), gamma=np.zeros(4),
                sigma=np.ones(3), last_value=0.0, n_obs=5,
            )

    def test_negative_sigma(self) -> None:
        with pytest.raises(ValueError, match="sigma"):
            ForecastSimulator(2).simulate(
                alpha=np.zeros(3), beta=np.zeros(3), gamma=np.zeros(3),
                sigma=-np.ones(3), last_value=0.0, n_obs=5,
            )

    def test_from_posterior(self, ar_posterior_idata, series) -> None:
        sim = ForecastSimulator(2)
        y_new = sim.simulate_from_posterior(ar_posterior_idata, series, random_seed=0)
        assert y_new.shape == (2, 50, 2)
        step1 = 1.0 + 0.5 * 11.2 + 0.1 * 5
        step2 = 1.0 + 0.5 * step1 + 0.1 * 6
        assert_allclose(y_new[..., 0], step1)
        assert_allclose(y_new[..., 1], step2)

    def test_from_posterior_missing_parameter(self, synthetic_idata, series) -> None:
        with pytest.raises(KeyError, match="alpha"):
            ForecastSimulator(2).simulate_from_posterior(synthetic_idata, series)

    def test_attach_predictions(self, ar_posterior_idata, series) -> None:
        sim = ForecastSimulator(3)
        y_new = sim.simulate_from_posterior(ar_posterior_idata, series)
        sim.attach(ar_posterior_idata, y_new, labels=series.future_labels(3))

        preds = ar_posterior_idata.predictions["y_new"]
        assert preds.dims == ("chain", "draw", "horizon")
        assert list(preds.coords["horizon"].values) == [2020, 2021, 2022]
        assert_allclose(preds.values, y_new)

    def test_attach_twice_replaces_forecast(self, ar_posterior_idata) -> None:
        sim = ForecastSimulator(3)
        sim.attach(ar_posterior_idata, np.zeros((2, 50, 3)))
        sim.attach(ar_posterior_idata, np.ones((2, 50, 3)), labels=[7, 8, 9])

        preds = ar_posterior_idata.predictions["y_new"]
        assert list(preds.coords["horizon"].values) == [7, 8, 9]
        assert_allclose(preds.values, 1.0)
        assert "posterior" in ar_posterior_idata

    def test_attach_wrong_shape(self, ar_posterior_idata) -> None:
        with pytest.raises(ValueError, match="y_new"):
            ForecastSimulator(3).attach(ar_posterior_idata, np.zeros((2, 50, 4)))


class TestForecastTable:
    """Tests for forecast_table."""

    def test_rows_ordered_by_horizon(self, series) -> None:
        rng = np.random.default_rng(0)
        y_new = rng.normal(size=(4, 200, 6)) + np.arange(6)
        labels = series.future_labels(6)
        table = forecast_table(y_new, labels=labels)

        assert len(table) == 6
        assert list(table.index) == [1, 2, 3, 4, 5, 6]
        assert table.index.is_monotonic_increasing
        assert list(table["label"]) == [2020, 2021, 2022, 2023, 2024, 2025]
        assert list(table.columns) == ["label", "mean", "q25", "q75", "q05", "q95"]

    def test_band_ordering(self) -> None:
        rng = np.random.default_rng(1)
        table = forecast_table(rng.normal(size=(2, 500, 3)))
        assert np.all(table["q05"] <= table["q25"])
        assert np.all(table["q25"] <= table["q75"])
        assert np.all(table["q75"] <= table["q95"])
        assert list(table["label"]) == [1, 2, 3]

    def test_statistics_pool_chains(self) -> None:
        y_new = np.arange(24, dtype=float).reshape(2, 3, 4)
        stats = compute_path_statistics(y_new)
        flat = y_new.reshape(-1, 4)
        assert_allclose(stats["mean"], flat.mean(axis=0))
        assert_allclose(stats["q95"], np.percentile(flat, 95, axis=0))

    def test_label_count_mismatch(self) -> None:
        with pytest.raises(ValueError, match="labels"):
            forecast_table(np.zeros((1, 10, 3)), labels=[1, 2])
