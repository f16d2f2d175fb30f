"""
Temperature pipeline: AR-trend fit, diagnostics, summary and forecast.

    series -> ARTrendModelBuilder -> NUTSSampler -> posterior_summary
                                                 -> ForecastSimulator -> forecast_table
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

import pandas as pd

from inference.data import TemperatureSeries
from inference.model_builder import ARTrendModelBuilder, ARTrendPriorSpec
from inference.sampler import InferenceSummary, NUTSSampler, SamplerConfig
from inference.summary import posterior_summary
from simulation.forecast import ForecastSimulator, forecast_table

logger = logging.getLogger(__name__)


@dataclass
class TemperatureConfig:
    n_new: int = 10
    forecast_seed: Optional[int] = None
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    priors: ARTrendPriorSpec = field(default_factory=ARTrendPriorSpec)


@dataclass
class TemperatureResult:
    inference: InferenceSummary
    posterior: pd.DataFrame
    forecast: pd.DataFrame


def run_temperature_pipeline(
    series: TemperatureSeries,
    config: Optional[TemperatureConfig] = None,
) -> TemperatureResult:
    """
    Fit the AR-trend model to ``series`` and forecast ``n_new`` steps.

    The forecast paths are attached to ``result.inference.idata`` as the
    ``predictions`` group (variable ``y_new``, dims chain/draw/horizon).
    """
    cfg = config or TemperatureConfig()
    # validate before the (slow) sampler starts
    simulator = ForecastSimulator(cfg.n_new)

    model = ARTrendModelBuilder(series.n_obs, prior_spec=cfg.priors).build(series)
    inference = NUTSSampler(cfg.sampler).sample(model)

    posterior = posterior_summary(inference.idata, var_names=list(ARTrendModelBuilder.PARAMETERS))

    forecast_seed = cfg.forecast_seed
    if forecast_seed is None:
        forecast_seed = cfg.sampler.random_seed
    labels = series.future_labels(cfg.n_new)
    y_new = simulator.simulate_from_posterior(inference.idata, series, random_seed=forecast_seed)
    simulator.attach(inference.idata, y_new, labels=labels)
    forecast = forecast_table(y_new, labels=labels)

    logger.info("Forecast %d steps: %s .. %s", cfg.n_new, labels[0], labels[-1])
    return TemperatureResult(inference=inference, posterior=posterior, forecast=forecast)
