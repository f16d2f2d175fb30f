"""
Observation containers bound to the two models.

Both containers validate shapes at construction, so a malformed dataset
fails before any model is built or any sampler is started.

- TemperatureSeries: ordered real-valued series y_1..y_N with optional
  time labels (e.g. calendar years).
- SchoolsData: per-group effect estimates y_j with standard errors σ_j.
"""

from typing import Optional, Sequence, Tuple
import numpy as np
from numpy.typing import ArrayLike, NDArray


class TemperatureSeries:
    """
    Time-ordered observation sequence for the autoregressive-trend model.

    Attributes
    ----------
    values : NDArray[np.float64]
        Observations, shape (N,). Read-only.
    labels : NDArray or None
        Time labels aligned with ``values`` (same length), e.g. years.
    name : str
        Series name used in tables and plots.
    """

    MIN_LENGTH = 3

    def __init__(
        self,
        values: ArrayLike,
        labels: Optional[ArrayLike] = None,
        name: str = "y",
    ) -> None:
        """
        Initialize and validate the series.

        Parameters
        ----------
        values : array-like
            Observed values, one per time step.
        labels : array-like, optional
            Time labels, must have the same length as ``values``.
        name : str
            Series name. Default "y".

        Raises
        ------
        ValueError
            If values are not 1-D, too short, non-finite, or labels
            do not match the number of observations.
        """
        y = np.array(values, dtype=np.float64)
        if y.ndim != 1:
            raise ValueError(f"values must be 1-D. Got shape {y.shape}")
        if y.shape[0] < self.MIN_LENGTH:
            raise ValueError(
                f"Need at least {self.MIN_LENGTH} observations. Got {y.shape[0]}"
            )
        if not np.all(np.isfinite(y)):
            raise ValueError("values must all be finite")

        if labels is not None:
            labels = np.array(labels)
            if labels.shape != y.shape:
                raise ValueError(
                    f"labels must have shape {y.shape} to match values. "
                    f"Got {labels.shape}"
                )
            labels.setflags(write=False)

        y.setflags(write=False)
        self.values = y
        self.labels = labels
        self.name = name

    @property
    def n_obs(self) -> int:
        """Number of observations N."""
        return int(self.values.shape[0])

    @property
    def time_index(self) -> NDArray[np.float64]:
        """1-based position index i = 1..N used as the trend regressor."""
        return np.arange(1, self.n_obs + 1, dtype=np.float64)

    @property
    def last_value(self) -> float:
        return float(self.values[-1])

    def future_labels(self, n_new: int) -> list:
        """
        Labels for the next ``n_new`` time steps.

        Integer labels (years) continue from the last one. Otherwise, and
        when no labels were given, horizon steps 1..n_new are returned.
        """
        if n_new < 0:
            raise ValueError(f"n_new must be non-negative. Got {n_new}")
        if self.labels is not None and np.issubdtype(self.labels.dtype, np.integer):
            last = int(self.labels[-1])
            return [last + k for k in range(1, n_new + 1)]
        return list(range(1, n_new + 1))

    def __len__(self) -> int:
        return self.n_obs

    def __repr__(self) -> str:
        return f"TemperatureSeries(name={self.name!r}, n_obs={self.n_obs})"


class SchoolsData:
    """
    Group-level estimates for the hierarchical model.

    Attributes
    ----------
    n_groups : int
        Declared number of groups J.
    y : NDArray[np.float64]
        Estimated effects, shape (J,).
    sigma : NDArray[np.float64]
        Standard errors of the estimates, shape (J,), all > 0.
    names : tuple of str
        Group names.
    """

    def __init__(
        self,
        y: ArrayLike,
        sigma: ArrayLike,
        n_groups: Optional[int] = None,
        names: Optional[Sequence[str]] = None,
    ) -> None:
        """
        Bind and validate group data.

        Parameters
        ----------
        y : array-like
            Effect estimates, one per group.
        sigma : array-like
            Standard errors, one per group.
        n_groups : int, optional
            Declared group count J. If None, taken from ``len(y)``.
        names : sequence of str, optional
            Group names. Default "group_0", "group_1", ...

        Raises
        ------
        ValueError
            If the declared count does not match either array, or sigma
            contains non-positive values.
        """
        y = np.array(y, dtype=np.float64)
        sigma = np.array(sigma, dtype=np.float64)

        if y.ndim != 1 or sigma.ndim != 1:
            raise ValueError(
                f"y and sigma must be 1-D. Got shapes {y.shape} and {sigma.shape}"
            )
        if n_groups is None:
            n_groups = y.shape[0]
        if n_groups <= 0:
            raise ValueError(f"n_groups must be positive. Got {n_groups}")
        if y.shape[0] != n_groups:
            raise ValueError(
                f"Declared J={n_groups} but got {y.shape[0]} y values"
            )
        if sigma.shape[0] != n_groups:
            raise ValueError(
                f"Declared J={n_groups} but got {sigma.shape[0]} sigma values"
            )
        if not (np.all(np.isfinite(y)) and np.all(np.isfinite(sigma))):
            raise ValueError("y and sigma must all be finite")
        if np.any(sigma <= 0):
            raise ValueError("All standard errors sigma must be > 0")

        if names is None:
            names = [f"group_{j}" for j in range(n_groups)]
        if len(names) != n_groups:
            raise ValueError(
                f"Declared J={n_groups} but got {len(names)} group names"
            )

        y.setflags(write=False)
        sigma.setflags(write=False)
        self.n_groups = int(n_groups)
        self.y = y
        self.sigma = sigma
        self.names: Tuple[str, ...] = tuple(str(n) for n in names)

    def __repr__(self) -> str:
        return f"SchoolsData(n_groups={self.n_groups})"


# Rubin (1981) SAT coaching experiments.
EIGHT_SCHOOLS = {
    "y": [28.0, 8.0, -3.0, 7.0, -1.0, 1.0, 18.0, 12.0],
    "sigma": [15.0, 10.0, 16.0, 11.0, 9.0, 11.0, 10.0, 18.0],
    "names": [
        "Choate", "Deerfield", "Phillips Andover", "Phillips Exeter",
        "Hotchkiss", "Lawrenceville", "St. Paul's", "Mt. Hermon",
    ],
}


def eight_schools() -> SchoolsData:
    """Return the classic eight-schools dataset."""
    return SchoolsData(
        y=EIGHT_SCHOOLS["y"],
        sigma=EIGHT_SCHOOLS["sigma"],
        n_groups=8,
        names=EIGHT_SCHOOLS["names"],
    )


def simulate_ar_trend(
    n_obs: int,
    alpha: float,
    beta: float,
    gamma: float,
    sigma: float,
    y0: Optional[float] = None,
    random_seed: Optional[int] = None,
) -> NDArray[np.float64]:
    """
    Simulate y_i = α + β·y_{i-1} + γ·i + σ·ε_i for i = 2..N.

    Parameters
    ----------
    n_obs : int
        Series length N.
    alpha, beta, gamma : float
        Intercept, autoregressive coefficient and trend slope.
    sigma : float
        Noise scale, must be >= 0.
    y0 : float, optional
        First value y_1. If None, drawn from Normal(α, σ).
    random_seed : int, optional
        Seed for reproducibility.

    Returns
    -------
    y : NDArray[np.float64]
        Simulated series, shape (N,).
    """
    if n_obs <= 0:
        raise ValueError(f"n_obs must be positive. Got {n_obs}")
    if sigma < 0:
        raise ValueError(f"sigma must be >= 0. Got {sigma}")

    rng = np.random.default_rng(random_seed)
    y = np.empty(n_obs)
    y[0] = rng.normal(alpha, sigma) if y0 is None else y0
    for i in range(1, n_obs):
        # position index is 1-based
        y[i] = alpha + beta * y[i - 1] + gamma * (i + 1) + sigma * rng.standard_normal()
    return y
