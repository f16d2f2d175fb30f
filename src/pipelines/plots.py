"""Plotting helpers for diagnostics, posterior intervals and forecasts."""

from pathlib import Path
from typing import Iterable, Optional

import matplotlib

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from inference.data import TemperatureSeries
from inference.diagnostics import autocorrelation, density, running_mean, trace


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def plot_diagnostics(
    idata,
    out_path: Path,
    var_names: Optional[Iterable[str]] = None,
    max_lag: int = 40,
) -> None:
    """One row per scalar parameter: trace, ACF, running mean, density."""
    ensure_parent(out_path)
    traces = trace(idata, var_names)
    acfs = autocorrelation(idata, var_names, max_lag=max_lag)
    means = running_mean(idata, var_names)
    kdes = density(idata, var_names)

    labels = list(traces)
    fig, axes = plt.subplots(
        len(labels), 4, figsize=(14, 2.4 * len(labels)), squeeze=False,
        constrained_layout=True,
    )
    for row, label in zip(axes, labels):
        for c, chain in enumerate(traces[label]):
            row[0].plot(chain, lw=0.6, alpha=0.8, label=f"chain {c}")
            row[2].plot(means[label][c], lw=0.9)
        row[0].set_ylabel(label)
        row[0].set_title("Trace")
        row[1].stem(np.arange(acfs[label].size), acfs[label])
        row[1].set_title("Autocorrelation")
        row[2].set_title("Running mean")
        grid, pdf = kdes[label]
        row[3].plot(grid, pdf)
        row[3].set_title("Density")
        for ax in row:
            ax.grid(True, alpha=0.3)
    fig.savefig(out_path, dpi=120)
    plt.close(fig)


def plot_intervals(table: pd.DataFrame, out_path: Path) -> None:
    """Posterior means with their credible intervals."""
    ensure_parent(out_path)
    labels = list(table.index)
    pos = np.arange(len(labels))[::-1]
    fig, ax = plt.subplots(figsize=(7, 0.45 * len(labels) + 1.5), constrained_layout=True)
    ax.hlines(pos, table["lower"], table["upper"], lw=2)
    ax.plot(table["mean"], pos, "o")
    ax.set_yticks(pos)
    ax.set_yticklabels(labels)
    ax.set_title("Posterior mean and 95% credible interval")
    ax.grid(True, axis="x", alpha=0.3)
    fig.savefig(out_path, dpi=120)
    plt.close(fig)


def plot_forecast(series: TemperatureSeries, table: pd.DataFrame, out_path: Path) -> None:
    """Observed series with the forecast mean, IQR band and 90% band."""
    ensure_parent(out_path)
    if series.labels is not None and np.issubdtype(series.labels.dtype, np.integer):
        x_obs = series.labels
        x_new = table["label"].to_numpy()
    else:
        x_obs = series.time_index
        x_new = series.n_obs + table.index.to_numpy()

    fig, ax = plt.subplots(figsize=(10, 4.5), constrained_layout=True)
    ax.plot(x_obs, series.values, color="k", lw=1, label="observed")
    ax.fill_between(x_new, table["q05"], table["q95"], alpha=0.2, label="90% interval")
    ax.fill_between(x_new, table["q25"], table["q75"], alpha=0.4, label="IQR")
    ax.plot(x_new, table["mean"], lw=1.5, label="forecast mean")
    ax.set_title(f"Posterior-predictive forecast: {series.name}")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
