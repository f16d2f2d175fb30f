"""
Tests for convergence diagnostics.

Tests cover:
- Scalar flattening of vector parameters and var_names filtering
- Trace, autocorrelation, running mean and density per parameter
- Autocorrelation and divergence rate on synthetic chains
- ArviZ-based convergence table
"""

import pytest
import numpy as np
import arviz as az
from scipy import integrate
from numpy.testing import assert_allclose, assert_array_equal

from inference.diagnostics import (
    DiagnosticsComputer,
    autocorrelation,
    convergence_table,
    density,
    running_mean,
    scalar_draws,
    trace,
)


class TestScalarDraws:
    """Tests for parameter flattening and filtering."""

    def test_all_parameters(self, synthetic_idata) -> None:
        draws = scalar_draws(synthetic_idata)
        assert list(draws) == ["mu", "tau", "theta[A]", "theta[B]", "theta[C]"]
        for chains in draws.values():
            assert chains.shape == (4, 500)

    def test_filter(self, synthetic_idata) -> None:
        draws = scalar_draws(synthetic_idata, var_names=["tau"])
        assert list(draws) == ["tau"]

    def test_unknown_name_raises_error(self, synthetic_idata) -> None:
        with pytest.raises(KeyError, match="sigma"):
            scalar_draws(synthetic_idata, var_names=["sigma"])

    def test_accepts_posterior_dataset(self, synthetic_idata) -> None:
        draws = scalar_draws(synthetic_idata.posterior, var_names=["mu"])
        assert_array_equal(draws["mu"], synthetic_idata.posterior["mu"].values)

    def test_vector_slice_matches_source(self, synthetic_idata) -> None:
        draws = scalar_draws(synthetic_idata, var_names=["theta"])
        assert_array_equal(draws["theta[B]"], synthetic_idata.posterior["theta"].values[:, :, 1])


class TestPerParameterDiagnostics:
    """Tests for trace, ACF, running mean and density."""

    def test_trace_is_raw_draws(self, synthetic_idata) -> None:
        traces = trace(synthetic_idata, ["mu"])
        assert_array_equal(traces["mu"], synthetic_idata.posterior["mu"].values)

    def test_autocorrelation_white_noise(self, synthetic_idata) -> None:
        acf = autocorrelation(synthetic_idata, ["mu", "theta"], max_lag=20)
        assert set(acf) == {"mu", "theta[A]", "theta[B]", "theta[C]"}
        for values in acf.values():
            assert values.shape == (21,)
            assert values[0] == pytest.approx(1.0)
            assert np.all(np.abs(values[1:]) < 0.15)

    def test_autocorrelation_persistent_chain(self) -> None:
        rng = np.random.default_rng(1)
        x = np.zeros((2, 2000))
        for c in range(2):
            for t in range(1, 2000):
                x[c, t] = 0.9 * x[c, t - 1] + rng.standard_normal()
        idata = az.from_dict(posterior={"x": x})
        acf = autocorrelation(idata, max_lag=5)["x"]
        assert acf[1] == pytest.approx(0.9, abs=0.05)
        assert np.all(np.diff(acf) < 0)

    def test_running_mean(self) -> None:
        idata = az.from_dict(posterior={"x": np.array([[1.0, 3.0, 5.0], [2.0, 2.0, 8.0]])})
        means = running_mean(idata)["x"]
        assert_allclose(means, [[1.0, 2.0, 3.0], [2.0, 2.0, 4.0]])

    def test_running_mean_converges(self, synthetic_idata) -> None:
        means = running_mean(synthetic_idata, ["mu"])["mu"]
        assert means.shape == (4, 500)
        assert np.all(np.abs(means[:, -1] - 1.0) < 0.4)

    def test_density_integrates_to_one(self, synthetic_idata) -> None:
        kdes = density(synthetic_idata, ["mu"])
        grid, pdf = kdes["mu"]
        assert grid.shape == pdf.shape == (200,)
        assert integrate.trapezoid(pdf, grid) == pytest.approx(1.0, abs=0.05)
        assert np.all(pdf >= 0)

    def test_density_of_constant_parameter(self) -> None:
        idata = az.from_dict(posterior={"x": np.full((2, 10), 3.0)})
        grid, pdf = density(idata)["x"]
        assert_array_equal(grid, [3.0])
        assert_array_equal(pdf, [1.0])

    def test_single_chain_supported(self) -> None:
        rng = np.random.default_rng(2)
        idata = az.from_dict(posterior={"x": rng.normal(size=(1, 300))})
        assert trace(idata)["x"].shape == (1, 300)
        assert autocorrelation(idata, max_lag=3)["x"].shape == (4,)
        assert running_mean(idata)["x"].shape == (1, 300)
        assert density(idata, grid_size=50)["x"][0].shape == (50,)


class TestDiagnosticsComputer:
    """Tests for numpy autocorrelation and divergence rate."""

    def test_autocorr_constant_chain(self) -> None:
        assert_array_equal(DiagnosticsComputer.autocorr(np.ones(10), 3), np.ones(4))

    def test_autocorr_lag_capped(self) -> None:
        assert DiagnosticsComputer.autocorr(np.arange(5.0), 40).shape == (5,)

    def test_divergence_rate(self, synthetic_idata) -> None:
        assert DiagnosticsComputer.divergence_rate(synthetic_idata) == pytest.approx(10 / 2000)


class TestConvergenceTable:
    """Tests for the ArviZ convergence table."""

    def test_columns_and_rows(self, synthetic_idata) -> None:
        table = convergence_table(synthetic_idata)
        assert list(table.columns) == ["r_hat", "ess_bulk"]
        assert list(table.index) == ["mu", "tau", "theta[A]", "theta[B]", "theta[C]"]
        assert np.all(table["r_hat"] < 1.02)
        assert np.all(table["ess_bulk"] > 1000)

    def test_single_chain_rhat_is_nan(self) -> None:
        rng = np.random.default_rng(3)
        idata = az.from_dict(posterior={"x": rng.normal(size=(1, 400))})
        table = convergence_table(idata)
        assert np.isnan(table.loc["x", "r_hat"])
        assert table.loc["x", "ess_bulk"] > 100
