"""
Posterior summary table: mean and equal-tailed credible interval.

Draws from all chains are pooled before reducing. Interval bounds are
percentiles of the pooled draws, widened to contain the mean when an
extremely skewed marginal puts the mean outside them, so every row has
lower <= mean <= upper.
"""

from typing import Iterable, Optional
import numpy as np
import pandas as pd

from inference.diagnostics import convergence_table, scalar_draws


def posterior_summary(
    idata,
    var_names: Optional[Iterable[str]] = None,
    prob: float = 0.95,
    include_diagnostics: bool = True,
) -> pd.DataFrame:
    """
    Summarize each scalar parameter over pooled post-warmup draws.

    Parameters
    ----------
    idata : arviz.InferenceData
        Sampler output.
    var_names : iterable of str, optional
        Variables to summarize. If None, use all posterior variables.
    prob : float
        Credible mass of the equal-tailed interval. Default 0.95
        (2.5th and 97.5th percentiles).
    include_diagnostics : bool
        Append ``r_hat`` and ``ess_bulk`` columns. Default True.

    Returns
    -------
    table : pd.DataFrame
        Indexed by parameter label, columns ``mean``, ``sd``, ``lower``,
        ``upper`` (and diagnostics), in posterior variable order.
    """
    if not (0 < prob < 1):
        raise ValueError(f"prob must be in (0, 1). Got {prob}")

    tail = 100 * (1 - prob) / 2
    rows = {}
    for label, chains in scalar_draws(idata, var_names).items():
        pooled = chains.ravel()
        mean = float(np.mean(pooled))
        lower, upper = np.percentile(pooled, [tail, 100 - tail])
        rows[label] = {
            "mean": mean,
            "sd": float(np.std(pooled, ddof=1)) if pooled.size > 1 else 0.0,
            "lower": float(min(lower, mean)),
            "upper": float(max(upper, mean)),
        }

    table = pd.DataFrame.from_dict(rows, orient="index", columns=["mean", "sd", "lower", "upper"])
    table.index.name = "parameter"

    if include_diagnostics and not table.empty:
        table = table.join(convergence_table(idata, var_names))
    return table
