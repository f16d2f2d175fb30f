"""
Bayesian model builders: PyMC declarations of the two fixed models.

Each model is declared in four logical blocks:
- data: observed values bound with ``pm.Data`` (shapes checked first)
- parameters: named random variables with their domain constraints
- model: priors plus likelihood over the observed data
- generated quantities: forward simulation from posterior draws
  (see ``simulation.forecast`` for the autoregressive-trend model)

Autoregressive model with linear trend:
    α ~ Normal(α0, s_α)
    β ~ Normal(β0, s_β)
    γ ~ Normal(γ0, s_γ)
    σ ~ HalfNormal(s_σ)                              # σ ≥ 0
    y_i ~ Normal(α + β y_{i-1} + γ i, σ),  i = 2..N

Hierarchical partial-pooling model (eight schools):
    μ ~ Normal(0, 5)
    τ ~ HalfCauchy(0, 5)                             # τ ≥ 0
    θ_j ~ Normal(μ, τ),                  j = 1..J
    y_j ~ Normal(θ_j, σ_j)                           # only if run_estimation
"""

from typing import Optional
import logging
import numpy as np
import pymc as pm

from inference.data import SchoolsData, TemperatureSeries

logger = logging.getLogger(__name__)


class ARTrendPriorSpec:
    """Specification of priors for the autoregressive-trend model."""

    def __init__(
        self,
        alpha_loc: float = 0.0,
        alpha_scale: float = 10.0,
        beta_loc: float = 0.0,
        beta_scale: float = 1.0,
        gamma_loc: float = 0.0,
        gamma_scale: float = 1.0,
        sigma_scale: float = 5.0,
    ) -> None:
        """
        Initialize prior specification.

        Parameters
        ----------
        alpha_loc, alpha_scale : float
            Normal prior on the intercept α. Default Normal(0, 10).
        beta_loc, beta_scale : float
            Normal prior on the autoregressive coefficient β. Default Normal(0, 1).
        gamma_loc, gamma_scale : float
            Normal prior on the trend slope γ. Default Normal(0, 1).
        sigma_scale : float
            HalfNormal scale for the noise σ. Default 5.0.
        """
        for name, value in [
            ("alpha_scale", alpha_scale),
            ("beta_scale", beta_scale),
            ("gamma_scale", gamma_scale),
            ("sigma_scale", sigma_scale),
        ]:
            if value <= 0:
                raise ValueError(f"{name} must be positive. Got {value}")

        self.alpha_loc = alpha_loc
        self.alpha_scale = alpha_scale
        self.beta_loc = beta_loc
        self.beta_scale = beta_scale
        self.gamma_loc = gamma_loc
        self.gamma_scale = gamma_scale
        self.sigma_scale = sigma_scale

    def __repr__(self) -> str:
        return (
            f"ARTrendPriorSpec(α~N({self.alpha_loc}, {self.alpha_scale}), "
            f"β~N({self.beta_loc}, {self.beta_scale}), "
            f"γ~N({self.gamma_loc}, {self.gamma_scale}), "
            f"σ~HalfN({self.sigma_scale}))"
        )


class HierarchicalPriorSpec:
    """Specification of hyperpriors for the hierarchical model."""

    def __init__(
        self,
        mu_loc: float = 0.0,
        mu_scale: float = 5.0,
        tau_scale: float = 5.0,
    ) -> None:
        if mu_scale <= 0 or tau_scale <= 0:
            raise ValueError(
                f"Prior scales must be positive. Got mu_scale={mu_scale}, "
                f"tau_scale={tau_scale}"
            )
        self.mu_loc = mu_loc
        self.mu_scale = mu_scale
        self.tau_scale = tau_scale

    def __repr__(self) -> str:
        return (
            f"HierarchicalPriorSpec(μ~N({self.mu_loc}, {self.mu_scale}), "
            f"τ~HalfCauchy(0, {self.tau_scale}))"
        )


class ARTrendModelBuilder:
    """
    Autoregressive-with-trend model builder.

    Declares the data, parameters and model blocks. The generated-quantities
    block (forecast paths y_new) is ``simulation.forecast.ForecastSimulator``,
    run on the posterior draws of this model.

    Attributes
    ----------
    n_obs : int
        Declared number of observations N
    prior_spec : ARTrendPriorSpec
        Prior specification
    model : pm.Model or None
        PyMC model (None until built)
    """

    PARAMETERS = ("alpha", "beta", "gamma", "sigma")

    def __init__(
        self,
        n_obs: int,
        prior_spec: Optional[ARTrendPriorSpec] = None,
    ) -> None:
        """
        Initialize model builder.

        Parameters
        ----------
        n_obs : int
            Number of observations. At least 3 (two likelihood terms).
        prior_spec : ARTrendPriorSpec, optional
            Prior specification. If None, use defaults.
        """
        if n_obs < TemperatureSeries.MIN_LENGTH:
            raise ValueError(
                f"n_obs must be >= {TemperatureSeries.MIN_LENGTH}. Got {n_obs}"
            )
        self.n_obs = n_obs
        self.prior_spec = prior_spec or ARTrendPriorSpec()
        self.model: Optional[pm.Model] = None

    def build(self, series: TemperatureSeries) -> pm.Model:
        """
        Build the PyMC model bound to ``series``.

        Parameters
        ----------
        series : TemperatureSeries
            Observed series; its length must equal ``n_obs``.

        Returns
        -------
        model : pm.Model
            PyMC model ready for inference.

        Raises
        ------
        ValueError
            If the series length does not match the declared ``n_obs``.
        """
        if series.n_obs != self.n_obs:
            raise ValueError(
                f"Declared n_obs={self.n_obs} but series has {series.n_obs} values"
            )

        y = series.values
        t = series.time_index
        spec = self.prior_spec

        with pm.Model() as model:
            # Data: lagged values and the trend regressor for i = 2..N
            y_prev = pm.Data("y_prev", y[:-1])
            t_idx = pm.Data("t", t[1:])

            # Parameters
            alpha = pm.Normal("alpha", mu=spec.alpha_loc, sigma=spec.alpha_scale)
            beta = pm.Normal("beta", mu=spec.beta_loc, sigma=spec.beta_scale)
            gamma = pm.Normal("gamma", mu=spec.gamma_loc, sigma=spec.gamma_scale)
            sigma = pm.HalfNormal("sigma", sigma=spec.sigma_scale)

            # Likelihood
            pm.Normal(
                "y_obs",
                mu=alpha + beta * y_prev + gamma * t_idx,
                sigma=sigma,
                observed=y[1:],
            )

        logger.debug("Built AR-trend model: n_obs=%d, %r", self.n_obs, spec)
        self.model = model
        return model

    def get_model(self) -> pm.Model:
        """
        Get the built model.

        Raises
        ------
        RuntimeError
            If model has not been built yet.
        """
        if self.model is None:
            raise RuntimeError("Model has not been built. Call .build() first.")
        return self.model

    def __repr__(self) -> str:
        return f"ARTrendModelBuilder(n_obs={self.n_obs}, prior_spec={self.prior_spec})"


class HierarchicalModelBuilder:
    """
    Hierarchical partial-pooling model builder (eight schools).

    The ``run_estimation`` switch is read once when the model is built.
    With ``run_estimation=False`` the likelihood term is left out and the
    model samples from the prior; y and σ are still validated and bound.

    Attributes
    ----------
    n_groups : int
        Declared number of groups J
    run_estimation : bool
        Whether the likelihood is included
    parameterization : str
        "centered" (θ_j sampled directly) or "non_centered"
        (θ_j = μ + τ η_j with η_j ~ Normal(0, 1))
    prior_spec : HierarchicalPriorSpec
        Hyperprior specification
    model : pm.Model or None
        PyMC model (None until built)
    """

    PARAMETERIZATIONS = ("centered", "non_centered")

    def __init__(
        self,
        n_groups: int,
        run_estimation: bool = True,
        parameterization: str = "centered",
        prior_spec: Optional[HierarchicalPriorSpec] = None,
    ) -> None:
        if n_groups <= 0:
            raise ValueError(f"n_groups must be positive. Got {n_groups}")
        if parameterization not in self.PARAMETERIZATIONS:
            raise ValueError(
                f"parameterization must be one of {self.PARAMETERIZATIONS}. "
                f"Got {parameterization!r}"
            )
        self.n_groups = n_groups
        self.run_estimation = bool(run_estimation)
        self.parameterization = parameterization
        self.prior_spec = prior_spec or HierarchicalPriorSpec()
        self.model: Optional[pm.Model] = None

    def build(self, data: SchoolsData) -> pm.Model:
        """
        Build the PyMC model bound to ``data``.

        Parameters
        ----------
        data : SchoolsData
            Group estimates and standard errors; must have ``n_groups`` groups.

        Returns
        -------
        model : pm.Model
            PyMC model ready for inference.

        Raises
        ------
        ValueError
            If the data group count does not match the declared ``n_groups``.
        """
        if data.n_groups != self.n_groups:
            raise ValueError(
                f"Declared J={self.n_groups} but data has {data.n_groups} groups"
            )

        spec = self.prior_spec
        coords = {"school": list(data.names)}

        with pm.Model(coords=coords) as model:
            sigma = pm.Data("sigma", data.sigma, dims="school")

            mu = pm.Normal("mu", mu=spec.mu_loc, sigma=spec.mu_scale)
            tau = pm.HalfCauchy("tau", beta=spec.tau_scale)

            if self.parameterization == "centered":
                theta = pm.Normal("theta", mu=mu, sigma=tau, dims="school")
            else:
                eta = pm.Normal("eta", mu=0.0, sigma=1.0, dims="school")
                theta = pm.Deterministic("theta", mu + tau * eta, dims="school")

            if self.run_estimation:
                pm.Normal("y", mu=theta, sigma=sigma, observed=data.y, dims="school")

        logger.debug(
            "Built hierarchical model: J=%d, run_estimation=%s, %s",
            self.n_groups, self.run_estimation, self.parameterization,
        )
        self.model = model
        return model

    def get_model(self) -> pm.Model:
        if self.model is None:
            raise RuntimeError("Model has not been built. Call .build() first.")
        return self.model

    def __repr__(self) -> str:
        return (
            f"HierarchicalModelBuilder(n_groups={self.n_groups}, "
            f"run_estimation={self.run_estimation}, "
            f"parameterization={self.parameterization!r}, "
            f"prior_spec={self.prior_spec})"
        )
