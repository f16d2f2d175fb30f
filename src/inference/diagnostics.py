"""
Convergence diagnostics computed from posterior chains.

Every diagnostic works per scalar parameter: vector parameters are expanded
to ``name[coord]`` labels (``theta[Choate]``, ``y_new[3]``), so the same
code handles any parameter count and any chain count. All functions take an
optional ``var_names`` filter.

- trace: raw draws, shape (chain, draw)
- autocorrelation: lag 0..max_lag, averaged over chains
- running_mean: cumulative mean along each chain
- density: Gaussian KDE of the pooled draws
- DiagnosticsComputer: single-chain autocorrelation, divergence rate (numpy)
- convergence_table: ArviZ bulk ESS and rank-normalized Rhat
"""

from typing import Dict, Iterable, Optional, Tuple
import numpy as np
from numpy.typing import NDArray
import pandas as pd
import arviz as az
from scipy import stats


def _posterior(idata):
    """Accept InferenceData or a bare posterior Dataset."""
    return getattr(idata, "posterior", idata)


def scalar_draws(
    idata,
    var_names: Optional[Iterable[str]] = None,
    group: str = "posterior",
) -> Dict[str, NDArray[np.float64]]:
    """
    Flatten posterior variables into scalar chains.

    Parameters
    ----------
    idata : arviz.InferenceData or xarray.Dataset
        Sampler output (or its posterior group).
    var_names : iterable of str, optional
        Variables to keep. If None, use all.
    group : str
        InferenceData group to read. Default "posterior".

    Returns
    -------
    draws : Dict[str, NDArray[np.float64]]
        Label -> array of shape (chain, draw), in variable order.

    Raises
    ------
    KeyError
        If a requested variable is not present.
    """
    dataset = getattr(idata, group) if group != "posterior" else _posterior(idata)
    available = list(dataset.data_vars)
    if var_names is None:
        names = available
    else:
        names = list(var_names)
        missing = [n for n in names if n not in available]
        if missing:
            raise KeyError(f"Unknown variables {missing}. Available: {available}")

    draws = {}
    for name in names:
        da = dataset[name]
        values = np.asarray(da.values, dtype=np.float64)
        extra_dims = da.dims[2:]
        if not extra_dims:
            draws[name] = values
            continue
        coords = [da.coords[d].values if d in da.coords else np.arange(values.shape[2 + k])
                  for k, d in enumerate(extra_dims)]
        for idx in np.ndindex(*values.shape[2:]):
            label = ",".join(str(coords[k][i]) for k, i in enumerate(idx))
            draws[f"{name}[{label}]"] = values[(slice(None), slice(None)) + idx]
    return draws


def trace(idata, var_names: Optional[Iterable[str]] = None) -> Dict[str, NDArray[np.float64]]:
    """Raw draws per chain for visual inspection, label -> (chain, draw)."""
    return scalar_draws(idata, var_names)


def autocorrelation(
    idata,
    var_names: Optional[Iterable[str]] = None,
    max_lag: int = 40,
) -> Dict[str, NDArray[np.float64]]:
    """
    Autocorrelation at lags 0..max_lag, averaged over chains.

    Returns
    -------
    acf : Dict[str, NDArray[np.float64]]
        Label -> array of length ``min(max_lag, draws - 1) + 1``.
    """
    if max_lag < 0:
        raise ValueError(f"max_lag must be >= 0. Got {max_lag}")
    result = {}
    for label, chains in scalar_draws(idata, var_names).items():
        per_chain = [DiagnosticsComputer.autocorr(c, max_lag) for c in chains]
        result[label] = np.mean(per_chain, axis=0)
    return result


def running_mean(
    idata,
    var_names: Optional[Iterable[str]] = None,
) -> Dict[str, NDArray[np.float64]]:
    """Cumulative mean along each chain, label -> (chain, draw)."""
    result = {}
    for label, chains in scalar_draws(idata, var_names).items():
        counts = np.arange(1, chains.shape[1] + 1)
        result[label] = np.cumsum(chains, axis=1) / counts
    return result


def density(
    idata,
    var_names: Optional[Iterable[str]] = None,
    grid_size: int = 200,
) -> Dict[str, Tuple[NDArray[np.float64], NDArray[np.float64]]]:
    """
    Marginal density estimate of the pooled draws.

    A parameter with no spread (e.g. fixed by construction) yields a
    single grid point with density 1.0.

    Returns
    -------
    kde : Dict[str, Tuple[grid, pdf]]
        Label -> (evaluation grid, density values).
    """
    if grid_size < 2:
        raise ValueError(f"grid_size must be >= 2. Got {grid_size}")
    result = {}
    for label, chains in scalar_draws(idata, var_names).items():
        pooled = chains.ravel()
        if np.ptp(pooled) == 0:
            result[label] = (np.array([pooled[0]]), np.array([1.0]))
            continue
        kde = stats.gaussian_kde(pooled)
        pad = 0.1 * np.ptp(pooled)
        grid = np.linspace(pooled.min() - pad, pooled.max() + pad, grid_size)
        result[label] = (grid, kde(grid))
    return result


def convergence_table(idata, var_names: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Per-parameter Rhat and bulk ESS via ArviZ.

    Rhat is NaN when only one chain is available.
    """
    rows = {}
    for label, chains in scalar_draws(idata, var_names).items():
        if chains.shape[0] >= 2:
            r_hat = float(az.rhat(chains))
        else:
            r_hat = np.nan
        rows[label] = {
            "r_hat": r_hat,
            "ess_bulk": float(az.ess(chains, method="bulk")),
        }
    return pd.DataFrame.from_dict(rows, orient="index", columns=["r_hat", "ess_bulk"])


class DiagnosticsComputer:
    """
    Compute convergence diagnostics from raw chains.

    Includes: single-chain autocorrelation and the divergence rate.
    """

    @staticmethod
    def autocorr(x: NDArray[np.float64], max_lag: int) -> NDArray[np.float64]:
        """
        Sample autocorrelation of one chain at lags 0..max_lag.

        A constant chain has autocorrelation 1 at every lag.
        """
        x = np.asarray(x, dtype=np.float64)
        x = x - x.mean()
        n = x.size
        if n < 2:
            return np.array([1.0])
        K = min(max_lag, n - 1)
        var = np.dot(x, x) / n
        if var == 0:
            return np.ones(K + 1)
        acf = np.empty(K + 1)
        acf[0] = 1.0
        for k in range(1, K + 1):
            acf[k] = np.dot(x[: n - k], x[k:]) / (n * var)
        return acf

    @staticmethod
    def divergence_rate(idata) -> float:
        """
        Fraction of post-warmup draws that diverged, in [0, 1].

        Divergences indicate regions of high curvature where NUTS
        struggles (the eight-schools funnel is the textbook case).
        """
        n_divergences = idata.sample_stats.diverging.sum().item()
        n_total = idata.posterior.sizes["draw"] * idata.posterior.sizes["chain"]
        return float(n_divergences / n_total)
