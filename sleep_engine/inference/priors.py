"""
Prior specification for the sleep regression.

Normal priors on intercept and slope plus an exponential prior on the
residual sd. The defaults (Normal(0, 3)) suit the logit scale of the sleep
ratio; they are parameters, not constants of the method.
"""
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from sleep_engine.config import (
    PRIOR_INTERCEPT_MU,
    PRIOR_INTERCEPT_SIGMA,
    PRIOR_SLOPE_MU,
    PRIOR_SLOPE_SIGMA,
)


@dataclass(frozen=True)
class RegressionPrior:
    """Prior specification for y ~ Normal(intercept + slope * x, sigma)."""
    intercept_mu: float = PRIOR_INTERCEPT_MU
    intercept_sigma: float = PRIOR_INTERCEPT_SIGMA
    slope_mu: float = PRIOR_SLOPE_MU
    slope_sigma: float = PRIOR_SLOPE_SIGMA

    # Rate of Exponential prior on sigma. None = autoscale to 1 / sd(y)
    sigma_rate: Optional[float] = None

    def __post_init__(self):
        if self.intercept_sigma <= 0 or self.slope_sigma <= 0:
            raise ValueError("Prior standard deviations must be positive")
        if self.sigma_rate is not None and self.sigma_rate <= 0:
            raise ValueError("sigma_rate must be positive")

    def resolve_sigma_rate(self, y: np.ndarray) -> float:
        """Exponential rate for sigma, scaled to the response when unset."""
        if self.sigma_rate is not None:
            return float(self.sigma_rate)
        sd = float(np.std(y, ddof=1)) if len(y) > 1 else 0.0
        return 1.0 / sd if sd > 0 else 1.0

    def autoscaled(self, y: np.ndarray) -> "RegressionPrior":
        """Copy with sigma_rate fixed from the response."""
        return replace(self, sigma_rate=self.resolve_sigma_rate(y))


DEFAULT_PRIOR = RegressionPrior()


def naive_prior(y: np.ndarray) -> RegressionPrior:
    """
    Prior for the untransformed hours model.
    Intercept centred on mean sleep with a wide sd; slope as the default.
    """
    y = np.asarray(y, dtype=float)
    sd = float(np.std(y, ddof=1)) if len(y) > 1 else 1.0
    return RegressionPrior(
        intercept_mu=float(np.mean(y)),
        intercept_sigma=2.5 * max(sd, 1e-6),
        slope_mu=0.0,
        slope_sigma=2.5 * max(sd, 1e-6),
    )
