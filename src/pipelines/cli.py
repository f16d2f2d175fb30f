"""Command line interface for the AR-trend forecast and eight-schools pipelines."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from inference.data import TemperatureSeries, eight_schools, simulate_ar_trend
from inference.sampler import SamplerConfig
from pipelines.data import load_temperature_csv
from pipelines.plots import plot_diagnostics, plot_forecast, plot_intervals
from pipelines.schools import SchoolsConfig, run_schools_pipeline
from pipelines.temperature import TemperatureConfig, run_temperature_pipeline

logger = logging.getLogger("pipelines")


def _add_sampler_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--chains", type=int, default=4)
    parser.add_argument("--cores", type=int, default=1)
    parser.add_argument("--n-iter", type=int, default=2000, help="Total iterations per chain")
    parser.add_argument("--warmup", type=int, default=1000, help="Discarded iterations per chain")
    parser.add_argument("--target-accept", type=float, default=0.85)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out-dir", default=None, help="Directory for CSV tables and figures")
    parser.add_argument("--no-plots", action="store_true")
    parser.add_argument("--progressbar", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bayes-ts",
        description="Bayesian AR-trend forecasting and eight-schools partial pooling",
    )
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    temp = sub.add_parser("temperature", help="Fit the AR-trend model and forecast")
    source = temp.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", help="CSV file with the temperature series")
    source.add_argument("--synthetic", type=int, metavar="N", help="Simulate an N-step series")
    temp.add_argument("--value-col", default="temperature")
    temp.add_argument("--time-col", default="year")
    temp.add_argument("--n-new", type=int, default=10, help="Forecast steps")
    _add_sampler_args(temp)

    schools = sub.add_parser("schools", help="Fit the eight-schools model")
    schools.add_argument("--prior-only", action="store_true", help="Disable the likelihood")
    param = schools.add_mutually_exclusive_group()
    param.add_argument("--centered", dest="parameterization", action="store_const", const="centered")
    param.add_argument("--non-centered", dest="parameterization", action="store_const",
                       const="non_centered",
                       help="Default for --prior-only; centered otherwise")
    _add_sampler_args(schools)

    return parser


def _sampler_config(args: argparse.Namespace) -> SamplerConfig:
    return SamplerConfig(
        n_iter=args.n_iter,
        warmup=args.warmup,
        chains=args.chains,
        cores=args.cores,
        target_accept=args.target_accept,
        random_seed=args.seed,
        progressbar=args.progressbar,
    )


def _load_series(args: argparse.Namespace) -> TemperatureSeries:
    if args.csv is not None:
        return load_temperature_csv(args.csv, value_col=args.value_col, time_col=args.time_col)
    values = simulate_ar_trend(
        args.synthetic, alpha=1.0, beta=0.5, gamma=0.01, sigma=0.3, random_seed=args.seed
    )
    return TemperatureSeries(values, name="synthetic")


def run_temperature(args: argparse.Namespace) -> int:
    series = _load_series(args)
    logger.info("Loaded %r", series)
    config = TemperatureConfig(n_new=args.n_new, sampler=_sampler_config(args))
    result = run_temperature_pipeline(series, config)

    print(result.posterior.to_string(float_format="{:.4f}".format))
    print()
    print(result.forecast.to_string(float_format="{:.4f}".format))

    if args.out_dir is not None:
        out_dir = Path(args.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        result.posterior.to_csv(out_dir / "temperature_posterior.csv")
        result.forecast.to_csv(out_dir / "temperature_forecast.csv")
        _write_run_info(out_dir / "temperature_run.json", result.inference)
        if not args.no_plots:
            plot_diagnostics(result.inference.idata, out_dir / "temperature_diagnostics.png",
                             var_names=["alpha", "beta", "gamma", "sigma"])
            plot_forecast(series, result.forecast, out_dir / "temperature_forecast.png")
        logger.info("Saved outputs to %s", out_dir)
    return 0


def run_schools(args: argparse.Namespace) -> int:
    config = SchoolsConfig(
        run_estimation=not args.prior_only,
        parameterization=args.parameterization,
        sampler=_sampler_config(args),
    )
    result = run_schools_pipeline(eight_schools(), config)
    print(result.posterior.to_string(float_format="{:.3f}".format))

    if args.out_dir is not None:
        out_dir = Path(args.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        result.posterior.to_csv(out_dir / "schools_posterior.csv")
        _write_run_info(out_dir / "schools_run.json", result.inference)
        if not args.no_plots:
            plot_diagnostics(result.inference.idata, out_dir / "schools_diagnostics.png",
                             var_names=["mu", "tau"])
            plot_intervals(result.posterior, out_dir / "schools_intervals.png")
        logger.info("Saved outputs to %s", out_dir)
    return 0


def _write_run_info(path: Path, inference) -> None:
    info = {
        "draws": inference.n_draws,
        "warmup": inference.n_tune,
        "chains": inference.n_chains,
        "divergences": inference.n_divergences,
        "sampling_time_seconds": inference.sampling_time,
        "issues": inference.issues,
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(info, f, ensure_ascii=False, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    handlers = {"temperature": run_temperature, "schools": run_schools}
    try:
        return handlers[args.command](args)
    except (OSError, ValueError, RuntimeError) as exc:
        logger.error("Run failed: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
