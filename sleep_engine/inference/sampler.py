"""
Posterior samplers for simple linear regression.

Fits y ~ Normal(intercept + slope * x, sigma) under a RegressionPrior using
either:
- Full PyMC MCMC (NUTS), diagnostics from ArviZ
- Laplace approximation via scipy (MAP + inverse Hessian), fast fallback

Both return a PosteriorDraws of the same shape (draws x parameters), so the
predictor does not care which backend produced them. Samplers are looked up
by name in SAMPLERS.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import arviz as az
import numpy as np
import pymc as pm
from scipy.optimize import minimize
from scipy.stats import norm

from sleep_engine.config import (
    LAPLACE_MAX_LOG_SIGMA_VAR,
    LAPLACE_SAMPLES,
    MCMC_CHAINS,
    MCMC_CORES,
    MCMC_SAMPLES,
    MCMC_TUNE,
    TARGET_ACCEPT,
)
from sleep_engine.inference.priors import RegressionPrior

PARAMS = ("intercept", "slope", "sigma")


@dataclass(frozen=True, eq=False)
class PosteriorDraws:
    """Flattened posterior draws (chains concatenated) for one fitted model."""
    intercept: np.ndarray
    slope: np.ndarray
    sigma: np.ndarray
    response: str
    predictor: str
    method: str
    n_obs: int
    converged: bool = True
    rhat_max: Optional[float] = None
    ess_min: Optional[float] = None
    trace: Optional[az.InferenceData] = field(default=None, repr=False)

    def __post_init__(self):
        n = len(self.intercept)
        if len(self.slope) != n or len(self.sigma) != n:
            raise ValueError("intercept, slope and sigma must hold the same number of draws")

    @property
    def n_draws(self) -> int:
        return len(self.intercept)

    def as_matrix(self) -> np.ndarray:
        """(n_draws x 3) matrix, columns in PARAMS order."""
        return np.column_stack([self.intercept, self.slope, self.sigma])


def sample_pymc(
    x: np.ndarray,
    y: np.ndarray,
    prior: RegressionPrior,
    draws: int = MCMC_SAMPLES,
    tune: int = MCMC_TUNE,
    chains: int = MCMC_CHAINS,
    cores: int = MCMC_CORES,
    target_accept: float = TARGET_ACCEPT,
    seed: Optional[int] = None,
) -> Dict:
    """
    Full PyMC MCMC inference.

    Returns a dict of flattened draws plus ArviZ diagnostics
    (max R-hat, min bulk ESS) and the InferenceData itself.
    """
    sigma_rate = prior.resolve_sigma_rate(y)

    with pm.Model():
        intercept = pm.Normal("intercept", mu=prior.intercept_mu, sigma=prior.intercept_sigma)
        slope = pm.Normal("slope", mu=prior.slope_mu, sigma=prior.slope_sigma)
        sigma = pm.Exponential("sigma", lam=sigma_rate)

        pm.Normal("obs", mu=intercept + slope * x, sigma=sigma, observed=y)

        trace = pm.sample(
            draws=draws,
            tune=tune,
            chains=chains,
            cores=cores,
            target_accept=target_accept,
            random_seed=seed,
            return_inferencedata=True,
            progressbar=False,
        )

    summary = az.summary(trace, var_names=list(PARAMS))
    post = trace.posterior

    return {
        "intercept": post["intercept"].values.flatten(),
        "slope": post["slope"].values.flatten(),
        "sigma": post["sigma"].values.flatten(),
        "rhat_max": float(summary["r_hat"].max()),
        "ess_min": float(summary["ess_bulk"].min()),
        "method": "pymc_mcmc",
        "trace": trace,
    }


def _neg_log_posterior(params: np.ndarray, x: np.ndarray, y: np.ndarray,
                       prior: RegressionPrior, sigma_rate: float) -> float:
    """
    Negative log-posterior in (intercept, slope, log_sigma).
    Includes the log-Jacobian of the sigma -> log_sigma change of variables.
    """
    intercept, slope, log_sigma = params
    sigma = np.exp(log_sigma)

    ll = np.sum(norm.logpdf(y, loc=intercept + slope * x, scale=sigma))
    lp_intercept = norm.logpdf(intercept, prior.intercept_mu, prior.intercept_sigma)
    lp_slope = norm.logpdf(slope, prior.slope_mu, prior.slope_sigma)
    lp_sigma = np.log(sigma_rate) - sigma_rate * sigma + log_sigma

    return -(ll + lp_intercept + lp_slope + lp_sigma)


def _neg_log_posterior_grad(params: np.ndarray, x: np.ndarray, y: np.ndarray,
                            prior: RegressionPrior, sigma_rate: float) -> np.ndarray:
    """Gradient of _neg_log_posterior."""
    intercept, slope, log_sigma = params
    sigma = np.exp(log_sigma)
    resid = y - (intercept + slope * x)

    d_intercept = -np.sum(resid) / sigma ** 2 + (intercept - prior.intercept_mu) / prior.intercept_sigma ** 2
    d_slope = -np.sum(resid * x) / sigma ** 2 + (slope - prior.slope_mu) / prior.slope_sigma ** 2
    d_log_sigma = len(y) - np.sum(resid ** 2) / sigma ** 2 + sigma_rate * sigma - 1.0

    return np.array([d_intercept, d_slope, d_log_sigma])


def _finite_difference_hessian(f: Callable, at: np.ndarray, args: tuple) -> np.ndarray:
    """Central-difference Hessian with scale-adaptive step sizes."""
    n_params = len(at)
    eps_vec = np.maximum(np.abs(at) * 1e-4, 1e-5)
    H = np.zeros((n_params, n_params))
    for i in range(n_params):
        for j in range(n_params):
            ei, ej = eps_vec[i], eps_vec[j]
            x_pp = at.copy(); x_pp[i] += ei; x_pp[j] += ej
            x_pm = at.copy(); x_pm[i] += ei; x_pm[j] -= ej
            x_mp = at.copy(); x_mp[i] -= ei; x_mp[j] += ej
            x_mm = at.copy(); x_mm[i] -= ei; x_mm[j] -= ej
            H[i, j] = (f(x_pp, *args) - f(x_pm, *args) - f(x_mp, *args) + f(x_mm, *args)) / (4 * ei * ej)
    return (H + H.T) / 2


def sample_laplace(
    x: np.ndarray,
    y: np.ndarray,
    prior: RegressionPrior,
    draws: int = LAPLACE_SAMPLES,
    seed: Optional[int] = None,
    **_ignored,
) -> Dict:
    """
    Approximate Bayesian inference via Laplace approximation.
    Finds the MAP estimate, approximates the posterior as a Gaussian around
    it, and draws from that Gaussian. Sigma is sampled on the log scale so
    every draw is positive.
    """
    rng = np.random.default_rng(seed)
    sigma_rate = prior.resolve_sigma_rate(y)
    args = (x, y, prior, sigma_rate)

    # OLS start point
    A = np.column_stack([np.ones_like(x), x])
    coef, *_ = np.linalg.lstsq(A, y, rcond=None)
    resid_sd = max(float(np.std(y - A @ coef)), 1e-3)
    x0 = np.array([coef[0], coef[1], np.log(resid_sd)])

    result = minimize(_neg_log_posterior, x0, args=args, jac=_neg_log_posterior_grad,
                      method="L-BFGS-B", options={"maxiter": 2000})

    # Line-search stalls right at the optimum are fine if the gradient vanished
    grad = _neg_log_posterior_grad(result.x, *args)
    at_optimum = bool(result.success) or float(np.max(np.abs(grad))) < 1e-3

    status = None if at_optimum else f"optimizer stopped: {result.message}"

    centre = result.x
    fallback_cov = np.diag([prior.intercept_sigma ** 2, prior.slope_sigma ** 2, 0.25])

    if not np.all(np.isfinite(centre)):
        centre, cov = x0, fallback_cov
        status = "MAP estimate is not finite"
    else:
        H = _finite_difference_hessian(_neg_log_posterior, centre, args)
        try:
            cov = np.linalg.inv(H)
            np.linalg.cholesky(cov)
        except np.linalg.LinAlgError:
            # Not positive definite: fall back to prior-width independent draws
            cov = fallback_cov
            status = status or "Hessian not positive definite at MAP"

    if not np.all(np.isfinite(cov)):
        cov = fallback_cov
        status = status or "posterior covariance is not finite"
    elif cov[2, 2] > LAPLACE_MAX_LOG_SIGMA_VAR:
        status = status or f"log(sigma) variance {cov[2, 2]:.3g} exceeds {LAPLACE_MAX_LOG_SIGMA_VAR}"

    samples = rng.multivariate_normal(centre, cov, size=draws)
    with np.errstate(over="ignore"):
        sigma = np.exp(samples[:, 2])

    if not (np.all(np.isfinite(samples)) and np.all(np.isfinite(sigma))):
        status = status or "non-finite posterior draws"

    return {
        "intercept": samples[:, 0],
        "slope": samples[:, 1],
        "sigma": sigma,
        "rhat_max": None,
        "ess_min": None,
        "optimizer_ok": status is None,
        "status": status,
        "method": "laplace",
        "trace": None,
    }


SAMPLERS: Dict[str, Callable[..., Dict]] = {
    "pymc": sample_pymc,
    "laplace": sample_laplace,
}


def get_sampler(name: str) -> Callable[..., Dict]:
    """Look up a sampler backend by name."""
    try:
        return SAMPLERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown sampler '{name}'. Choose one of: {', '.join(sorted(SAMPLERS))}"
        ) from None
