"""
Forecast simulation module for the autoregressive-trend model.

This module provides posterior-predictive forecasting:
- ForecastSimulator: recursive paths from posterior draws
- compute_path_statistics: mean and percentiles per horizon step
- forecast_table: horizon-ordered table (mean, IQR, 90% interval)

**Usage:**
```python
from simulation import ForecastSimulator, forecast_table

sim = ForecastSimulator(n_new=10)
y_new = sim.simulate_from_posterior(summary.idata, series, random_seed=1)
sim.attach(summary.idata, y_new, labels=series.future_labels(10))

table = forecast_table(y_new, labels=series.future_labels(10))
```
"""

from simulation.forecast import ForecastSimulator, compute_path_statistics, forecast_table

__all__ = [
    "ForecastSimulator",
    "compute_path_statistics",
    "forecast_table",
]
