"""
End-to-end pipelines: data loading, fitting, summaries, forecasts and plots.

- run_temperature_pipeline: AR-trend fit + posterior-predictive forecast
- run_schools_pipeline: eight-schools fit, or prior-only run
- load_temperature_csv: CSV loader for the temperature series
- cli.main: ``bayes-ts`` command line entry point
"""

from pipelines.data import load_temperature_csv
from pipelines.schools import SchoolsConfig, SchoolsResult, run_schools_pipeline
from pipelines.temperature import TemperatureConfig, TemperatureResult, run_temperature_pipeline

__all__ = [
    "load_temperature_csv",
    "SchoolsConfig",
    "SchoolsResult",
    "run_schools_pipeline",
    "TemperatureConfig",
    "TemperatureResult",
    "run_temperature_pipeline",
]
