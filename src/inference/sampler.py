"""
NUTS sampler orchestration for the autoregressive-trend and eight-schools models.

Runs PyMC's adaptive-step-size NUTS over independent chains, discards the
warmup iterations and reports sampling pathologies without failing the run.

Key diagnostics (reported, never fatal):
- Divergent transitions: any count is reported, >2% of draws is a concern
- Rhat (potential scale reduction): >1.01 indicates non-convergence
- ESS (bulk effective sample size): <100 per chain is too low for summaries

A model whose log-density is non-finite at its initial point fails
immediately with RuntimeError, before any iteration runs.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging
import time
import numpy as np
import pymc as pm

from inference.diagnostics import DiagnosticsComputer, convergence_table

logger = logging.getLogger(__name__)

RHAT_THRESHOLD = 1.01
MIN_ESS_PER_CHAIN = 100


@dataclass
class SamplerConfig:
    """
    Run configuration for one sampling invocation.

    ``n_iter`` is the total number of iterations S per chain, of which the
    first ``warmup`` (W) are used for adaptation and discarded.
    """

    n_iter: int = 2000
    warmup: int = 1000
    chains: int = 4
    cores: int = 1
    target_accept: float = 0.85
    random_seed: Optional[int] = None
    progressbar: bool = False

    def __post_init__(self) -> None:
        if self.warmup < 0:
            raise ValueError(f"warmup must be >= 0. Got {self.warmup}")
        if self.n_iter <= self.warmup:
            raise ValueError(
                f"n_iter must exceed warmup. Got n_iter={self.n_iter}, "
                f"warmup={self.warmup}"
            )
        if self.chains < 1:
            raise ValueError(f"chains must be >= 1. Got {self.chains}")
        if self.cores < 1:
            raise ValueError(f"cores must be >= 1. Got {self.cores}")
        if not (0.5 < self.target_accept < 0.99):
            raise ValueError(
                f"target_accept must be in (0.5, 0.99). Got {self.target_accept}"
            )

    @property
    def draws(self) -> int:
        """Post-warmup draws per chain (S - W)."""
        return self.n_iter - self.warmup


class InferenceSummary:
    """Posterior draws plus run metadata and reported pathologies."""

    def __init__(
        self,
        idata,  # arviz.InferenceData
        n_draws: int,
        n_tune: int,
        n_chains: int,
        sampling_time: float,
        n_divergences: int = 0,
        issues: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize inference summary.

        Parameters
        ----------
        idata : arviz.InferenceData
            Posterior inference data from PyMC
        n_draws : int
            Number of post-warmup draws per chain
        n_tune : int
            Number of warmup steps per chain
        n_chains : int
            Number of independent chains
        sampling_time : float
            Total sampling time (seconds)
        n_divergences : int
            Divergent transitions across all chains (post-warmup)
        issues : list of str, optional
            Human-readable sampling pathologies, empty if none
        """
        self.idata = idata
        self.n_draws = n_draws
        self.n_tune = n_tune
        self.n_chains = n_chains
        self.sampling_time = sampling_time
        self.n_divergences = n_divergences
        self.issues = list(issues or [])
        self.total_samples = n_draws * n_chains

    @property
    def divergence_rate(self) -> float:
        if self.total_samples == 0:
            return 0.0
        return self.n_divergences / self.total_samples

    @property
    def converged(self) -> bool:
        """True when no pathology was reported."""
        return not self.issues

    def __repr__(self) -> str:
        return (
            f"InferenceSummary(draws={self.n_draws}, tune={self.n_tune}, "
            f"chains={self.n_chains}, divergences={self.n_divergences}, "
            f"time={self.sampling_time:.1f}s)"
        )


def check_initial_logp(model: pm.Model) -> None:
    """
    Evaluate every log-density term at the model's initial point.

    Raises
    ------
    RuntimeError
        If any term is non-finite, naming the offending variables.
    """
    point_logps = model.point_logps()
    bad = [name for name, value in point_logps.items() if not np.isfinite(value)]
    if bad:
        raise RuntimeError(
            f"Log-density is not finite at the initial point for: {', '.join(bad)}. "
            f"Check priors, constraints and observed data."
        )


class NUTSSampler:
    """
    NUTS sampler for the two fixed models.

    Orchestrates PyMC MCMC sampling, checks the model before the first
    iteration, and reports convergence pathologies after sampling.
    """

    def __init__(self, config: Optional[SamplerConfig] = None) -> None:
        self.config = config or SamplerConfig()

    def sample(
        self,
        model: pm.Model,
        config: Optional[SamplerConfig] = None,
    ) -> InferenceSummary:
        """
        Run NUTS sampling on a PyMC model.

        Parameters
        ----------
        model : pm.Model
            Model from ``ARTrendModelBuilder.build`` or
            ``HierarchicalModelBuilder.build``.
        config : SamplerConfig, optional
            Overrides the sampler's configuration for this call.

        Returns
        -------
        summary : InferenceSummary
            Posterior draws (warmup discarded), timing and issues.

        Raises
        ------
        RuntimeError
            If the model's log-density is non-finite at its initial point.
        """
        cfg = config or self.config
        check_initial_logp(model)

        logger.info(
            "Sampling %d chains x %d iterations (%d warmup)",
            cfg.chains, cfg.n_iter, cfg.warmup,
        )
        start_time = time.time()

        with model:
            idata = pm.sample(
                draws=cfg.draws,
                tune=cfg.warmup,
                chains=cfg.chains,
                cores=cfg.cores,
                random_seed=cfg.random_seed,
                progressbar=cfg.progressbar,
                target_accept=cfg.target_accept,
                return_inferencedata=True,
                discard_tuned_samples=True,
                compute_convergence_checks=False,
            )

        sampling_time = time.time() - start_time

        n_divergences = int(idata.sample_stats.diverging.sum().item())
        issues = self._collect_issues(idata, n_divergences, cfg)
        for issue in issues:
            logger.warning(issue)

        summary = InferenceSummary(
            idata=idata,
            n_draws=cfg.draws,
            n_tune=cfg.warmup,
            n_chains=cfg.chains,
            sampling_time=sampling_time,
            n_divergences=n_divergences,
            issues=issues,
        )
        logger.info("Finished: %r", summary)
        return summary

    @staticmethod
    def _collect_issues(idata, n_divergences: int, cfg: SamplerConfig) -> List[str]:
        issues = []
        if n_divergences > 0:
            rate = DiagnosticsComputer.divergence_rate(idata)
            issues.append(
                f"{n_divergences} divergent transitions ({rate:.1%} of draws); "
                f"consider a higher target_accept or reparameterizing"
            )

        table = convergence_table(idata)
        if cfg.chains >= 2:
            high = table.index[table["r_hat"] > RHAT_THRESHOLD].tolist()
            if high:
                issues.append(f"r_hat > {RHAT_THRESHOLD} for: {', '.join(high)}")

        min_ess = MIN_ESS_PER_CHAIN * cfg.chains
        low = table.index[table["ess_bulk"] < min_ess].tolist()
        if low:
            issues.append(f"ess_bulk < {min_ess} for: {', '.join(low)}")

        return issues

    def __repr__(self) -> str:
        return f"NUTSSampler(config={self.config})"
