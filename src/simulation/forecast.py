"""
Posterior-predictive forecasts for the autoregressive-trend model.

Generated quantities of the model: for every posterior draw (α, β, γ, σ),
simulate N_new future values by applying the fitted recurrence with fresh
noise. Step 1 chains off the last observed value y_N; every later step
chains off the previous *simulated* value:

    y_new[1] = α + β y_N          + γ (N + 1) + σ ε_1
    y_new[k] = α + β y_new[k-1]   + γ (N + k) + σ ε_k,   k = 2..N_new

Key components:
- ForecastSimulator: draw-wise recursive simulation, attached to InferenceData
- forecast_table: per-horizon mean, IQR and 90% interval
"""

from typing import Dict, Optional, Sequence
import logging
import numpy as np
from numpy.typing import NDArray
import pandas as pd
import arviz as az

from inference.data import TemperatureSeries

logger = logging.getLogger(__name__)


class ForecastSimulator:
    """
    Recursive forward simulator for the AR-trend model.

    Attributes
    ----------
    n_new : int
        Number of future time steps to generate
    """

    PARAMETERS = ("alpha", "beta", "gamma", "sigma")

    def __init__(self, n_new: int) -> None:
        if n_new <= 0:
            raise ValueError(f"n_new must be positive. Got {n_new}")
        self.n_new = n_new

    def simulate(
        self,
        alpha: NDArray[np.float64],
        beta: NDArray[np.float64],
        gamma: NDArray[np.float64],
        sigma: NDArray[np.float64],
        last_value: float,
        n_obs: int,
        random_seed: Optional[int] = None,
    ) -> NDArray[np.float64]:
        """
        Simulate forecast paths, one per parameter draw.

        Parameters
        ----------
        alpha, beta, gamma, sigma : NDArray[np.float64]
            Parameter draws, all with the same shape, e.g. (chain, draw).
        last_value : float
            Last observed value y_N.
        n_obs : int
            Number of observations N; step k uses trend index N + k.
        random_seed : int, optional
            Random seed for reproducibility.

        Returns
        -------
        y_new : NDArray[np.float64]
            Forecast paths, shape ``alpha.shape + (n_new,)``.
        """
        alpha = np.asarray(alpha, dtype=np.float64)
        shape = alpha.shape
        params = [np.asarray(p, dtype=np.float64) for p in (beta, gamma, sigma)]
        for name, p in zip(self.PARAMETERS[1:], params):
            if p.shape != shape:
                raise ValueError(
                    f"{name} must have shape {shape} to match alpha. Got {p.shape}"
                )
        beta, gamma, sigma = params
        if np.any(sigma < 0):
            raise ValueError("sigma draws must be >= 0")

        rng = np.random.default_rng(random_seed)
        y_new = np.empty(shape + (self.n_new,))

        previous = np.full(shape, float(last_value))
        for k in range(self.n_new):
            t = n_obs + k + 1
            noise = rng.standard_normal(shape)
            current = alpha + beta * previous + gamma * t + sigma * noise
            y_new[..., k] = current
            previous = current

        return y_new

    def simulate_from_posterior(
        self,
        idata,
        series: TemperatureSeries,
        random_seed: Optional[int] = None,
    ) -> NDArray[np.float64]:
        """
        Simulate from every (chain, draw) of a fitted AR-trend posterior.

        Returns
        -------
        y_new : NDArray[np.float64]
            Shape (chain, draw, n_new).
        """
        posterior = idata.posterior
        missing = [p for p in self.PARAMETERS if p not in posterior]
        if missing:
            raise KeyError(f"Posterior is missing AR-trend parameters {missing}")

        draws = {p: posterior[p].values for p in self.PARAMETERS}
        return self.simulate(
            **draws,
            last_value=series.last_value,
            n_obs=series.n_obs,
            random_seed=random_seed,
        )

    def attach(
        self,
        idata,
        y_new: NDArray[np.float64],
        labels: Optional[Sequence] = None,
    ):
        """
        Add forecasts to ``idata`` as the ``predictions`` group.

        Parameters
        ----------
        idata : arviz.InferenceData
            Sampler output, modified in place. An existing
            ``predictions`` group is replaced.
        y_new : NDArray[np.float64]
            Forecast paths, shape (chain, draw, n_new).
        labels : sequence, optional
            Horizon coordinate values (e.g. years). Default 1..n_new.

        Returns
        -------
        idata : arviz.InferenceData
        """
        if y_new.ndim != 3 or y_new.shape[2] != self.n_new:
            raise ValueError(
                f"y_new must have shape (chain, draw, {self.n_new}). Got {y_new.shape}"
            )
        if labels is None:
            labels = list(range(1, self.n_new + 1))
        if len(labels) != self.n_new:
            raise ValueError(f"Expected {self.n_new} horizon labels. Got {len(labels)}")

        dataset = az.convert_to_dataset(
            {"y_new": y_new},
            coords={"horizon": list(labels)},
            dims={"y_new": ["horizon"]},
        )
        if "predictions" in idata:
            del idata.predictions
        idata.add_groups(predictions=dataset)
        logger.debug("Attached %d-step forecast to InferenceData", self.n_new)
        return idata

    def __repr__(self) -> str:
        return f"ForecastSimulator(n_new={self.n_new})"


def compute_path_statistics(y_new: NDArray[np.float64]) -> Dict[str, NDArray[np.float64]]:
    """
    Per-horizon statistics over all draws.

    Parameters
    ----------
    y_new : NDArray[np.float64]
        Forecast paths, shape (..., n_new); leading axes are pooled.

    Returns
    -------
    stats : Dict[str, NDArray]
        Each of shape (n_new,):
        - 'mean'
        - 'q05', 'q25', 'q75', 'q95': percentiles
    """
    flat = np.asarray(y_new).reshape(-1, y_new.shape[-1])
    q05, q25, q75, q95 = np.percentile(flat, [5, 25, 75, 95], axis=0)
    return {
        "mean": flat.mean(axis=0),
        "q05": q05,
        "q25": q25,
        "q75": q75,
        "q95": q95,
    }


def forecast_table(
    y_new: NDArray[np.float64],
    labels: Optional[Sequence] = None,
) -> pd.DataFrame:
    """
    Forecast table keyed by horizon step, earliest step first.

    Parameters
    ----------
    y_new : NDArray[np.float64]
        Forecast paths, shape (chain, draw, n_new) or (samples, n_new).
    labels : sequence, optional
        Calendar label of each step (e.g. year). Default 1..n_new.

    Returns
    -------
    table : pd.DataFrame
        Exactly n_new rows indexed by ``step`` (1..n_new) with columns
        ``label``, ``mean``, ``q25``, ``q75`` (interquartile range) and
        ``q05``, ``q95`` (90% interval).
    """
    y_new = np.asarray(y_new, dtype=np.float64)
    n_new = y_new.shape[-1]
    if labels is None:
        labels = list(range(1, n_new + 1))
    if len(labels) != n_new:
        raise ValueError(f"Expected {n_new} horizon labels. Got {len(labels)}")

    stats = compute_path_statistics(y_new)
    table = pd.DataFrame(
        {
            "label": list(labels),
            "mean": stats["mean"],
            "q25": stats["q25"],
            "q75": stats["q75"],
            "q05": stats["q05"],
            "q95": stats["q95"],
        },
        index=pd.RangeIndex(1, n_new + 1, name="step"),
    )
    return table
