"""
Sleep regression fitting.

fit_sleep_model: logit(sleep_total / 24) ~ log10(brainwt), the bounded model.
fit_naive_model: sleep_total ~ log10(brainwt) on the raw hours scale, kept
for comparison since its predictions can leave the 0-24 hour day.
"""
import warnings
from typing import Optional

import numpy as np
import pandas as pd

from sleep_engine.config import (
    ESS_THRESHOLD,
    NAIVE_RESPONSE,
    PREDICTOR,
    RESPONSE,
    RHAT_THRESHOLD,
)
from sleep_engine.inference.priors import DEFAULT_PRIOR, RegressionPrior, naive_prior
from sleep_engine.inference.sampler import PosteriorDraws, get_sampler


class ConvergenceWarning(UserWarning):
    """Sampler diagnostics suggest the draws have not converged."""


def check_convergence(
    rhat_max: Optional[float],
    ess_min: Optional[float],
    rhat_threshold: float = RHAT_THRESHOLD,
    ess_threshold: float = ESS_THRESHOLD,
) -> bool:
    """
    True when R-hat and bulk ESS are within thresholds.
    Missing diagnostics (non-MCMC backends) count as passing; NaN does not.
    """
    rhat_ok = rhat_max is None or (np.isfinite(rhat_max) and rhat_max < rhat_threshold)
    ess_ok = ess_min is None or (np.isfinite(ess_min) and ess_min > ess_threshold)
    return bool(rhat_ok and ess_ok)


def fit_model(
    obs: pd.DataFrame,
    response: str,
    predictor: str = PREDICTOR,
    prior: Optional[RegressionPrior] = None,
    sampler: str = "pymc",
    seed: Optional[int] = None,
    **sampler_kwargs,
) -> PosteriorDraws:
    """
    Fit a Bayesian simple linear regression of obs[response] on obs[predictor].

    Args:
        obs: Prepared observations (see prepare_observations)
        response: Response column
        predictor: Predictor column
        prior: Priors on intercept, slope and sigma (default Normal(0, 3))
        sampler: Backend name, "pymc" or "laplace"
        seed: Random seed for the sampler
        sampler_kwargs: Passed through to the backend (draws, tune, chains, ...)

    Non-convergence is reported with a ConvergenceWarning; the draws are
    still returned, flagged converged=False.
    """
    for col in (response, predictor):
        if col not in obs.columns:
            raise ValueError(f"Column '{col}' not found in observations")

    data = obs[[predictor, response]].dropna()
    if len(data) < 2:
        raise ValueError(f"Need at least 2 complete observations to fit, got {len(data)}")

    x = data[predictor].to_numpy(dtype=float)
    y = data[response].to_numpy(dtype=float)
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise ValueError("Non-finite values in model data (log/logit of zero or negative?)")

    prior = prior if prior is not None else DEFAULT_PRIOR
    backend = get_sampler(sampler)
    result = backend(x, y, prior, seed=seed, **sampler_kwargs)

    converged = check_convergence(result["rhat_max"], result["ess_min"])
    converged = converged and result.get("optimizer_ok", True)

    if not converged:
        reason = result.get("status") or (
            f"rhat_max={result['rhat_max']}, ess_min={result['ess_min']}"
        )
        warnings.warn(
            f"{response} ~ {predictor} ({result['method']}) may not have converged: {reason}",
            ConvergenceWarning,
            stacklevel=2,
        )

    return PosteriorDraws(
        intercept=np.asarray(result["intercept"], dtype=float),
        slope=np.asarray(result["slope"], dtype=float),
        sigma=np.asarray(result["sigma"], dtype=float),
        response=response,
        predictor=predictor,
        method=result["method"],
        n_obs=len(data),
        converged=converged,
        rhat_max=result["rhat_max"],
        ess_min=result["ess_min"],
        trace=result.get("trace"),
    )


def fit_sleep_model(
    obs: pd.DataFrame,
    prior: Optional[RegressionPrior] = None,
    sampler: str = "pymc",
    seed: Optional[int] = None,
    **sampler_kwargs,
) -> PosteriorDraws:
    """Fit logit_sleep_ratio ~ log_brainwt."""
    return fit_model(obs, RESPONSE, PREDICTOR, prior=prior, sampler=sampler,
                     seed=seed, **sampler_kwargs)


def fit_naive_model(
    obs: pd.DataFrame,
    prior: Optional[RegressionPrior] = None,
    sampler: str = "pymc",
    seed: Optional[int] = None,
    **sampler_kwargs,
) -> PosteriorDraws:
    """Fit sleep_total ~ log_brainwt with no bounding transform."""
    if prior is None:
        prior = naive_prior(obs[NAIVE_RESPONSE].to_numpy(dtype=float))
    return fit_model(obs, NAIVE_RESPONSE, PREDICTOR, prior=prior, sampler=sampler,
                     seed=seed, **sampler_kwargs)
