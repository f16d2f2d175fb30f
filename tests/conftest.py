"""Shared fixtures: synthetic posteriors that need no sampling."""

import pytest
import numpy as np
import arviz as az


@pytest.fixture
def synthetic_idata():
    """Four chains of 500 iid draws for a scalar and a 3-vector parameter."""
    rng = np.random.default_rng(0)
    n_chains, n_draws = 4, 500
    posterior = {
        "mu": rng.normal(1.0, 2.0, size=(n_chains, n_draws)),
        "tau": np.abs(rng.normal(0.0, 1.0, size=(n_chains, n_draws))),
        "theta": rng.normal(0.0, 1.0, size=(n_chains, n_draws, 3)),
    }
    diverging = np.zeros((n_chains, n_draws), dtype=bool)
    diverging[0, :10] = True
    return az.from_dict(
        posterior=posterior,
        sample_stats={"diverging": diverging},
        coords={"school": ["A", "B", "C"]},
        dims={"theta": ["school"]},
    )


@pytest.fixture
def ar_posterior_idata():
    """Fixed-value AR-trend posterior: alpha=1, beta=0.5, gamma=0.1, sigma=0."""
    shape = (2, 50)
    posterior = {
        "alpha": np.full(shape, 1.0),
        "beta": np.full(shape, 0.5),
        "gamma": np.full(shape, 0.1),
        "sigma": np.zeros(shape),
    }
    return az.from_dict(posterior=posterior)
