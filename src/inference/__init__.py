"""
Bayesian inference module for the AR-trend and eight-schools models.

This module provides the PyMC-based inference pipeline:
1. TemperatureSeries / SchoolsData: validated observation containers
2. ARTrendModelBuilder / HierarchicalModelBuilder: model declarations
3. NUTSSampler: NUTS sampling with warmup and pathology reporting
4. Diagnostics: trace, autocorrelation, running mean, density, Rhat, ESS
5. posterior_summary: mean and 95% equal-tailed credible intervals

**Usage:**
```python
from inference import (
    ARTrendModelBuilder, NUTSSampler, SamplerConfig, TemperatureSeries,
    posterior_summary,
)

series = TemperatureSeries(values, labels=years)
model = ARTrendModelBuilder(n_obs=len(series)).build(series)

sampler = NUTSSampler(SamplerConfig(n_iter=2000, warmup=1000, chains=4))
summary = sampler.sample(model)

print(posterior_summary(summary.idata))
print(summary.issues)  # divergences, high Rhat, low ESS
```
"""

from inference.data import (
    EIGHT_SCHOOLS,
    SchoolsData,
    TemperatureSeries,
    eight_schools,
    simulate_ar_trend,
)
from inference.model_builder import (
    ARTrendModelBuilder,
    ARTrendPriorSpec,
    HierarchicalModelBuilder,
    HierarchicalPriorSpec,
)
from inference.sampler import (
    InferenceSummary,
    NUTSSampler,
    SamplerConfig,
    check_initial_logp,
)
from inference.diagnostics import (
    DiagnosticsComputer,
    autocorrelation,
    convergence_table,
    density,
    running_mean,
    scalar_draws,
    trace,
)
from inference.summary import posterior_summary

__all__ = [
    # Data
    "EIGHT_SCHOOLS",
    "SchoolsData",
    "TemperatureSeries",
    "eight_schools",
    "simulate_ar_trend",
    # Models
    "ARTrendModelBuilder",
    "ARTrendPriorSpec",
    "HierarchicalModelBuilder",
    "HierarchicalPriorSpec",
    # Sampling
    "InferenceSummary",
    "NUTSSampler",
    "SamplerConfig",
    "check_initial_logp",
    # Diagnostics
    "DiagnosticsComputer",
    "autocorrelation",
    "convergence_table",
    "density",
    "running_mean",
    "scalar_draws",
    "trace",
    # Summary
    "posterior_summary",
]
