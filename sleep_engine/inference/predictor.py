"""
Posterior predictions on a grid of brain masses.

posterior_linpred: expected response per draw (no observation noise).
posterior_predict: a simulated new observation per draw (adds noise).

For the logit model both are mapped back to hours with 24 * inv_logit,
which keeps every prediction inside the day. The naive hours model is
returned as-is.
"""
from typing import Optional

import numpy as np

from sleep_engine.config import MAX_TREND_LINES, RESPONSE
from sleep_engine.data_prep.transforms import hours_from_logit
from sleep_engine.inference.sampler import PosteriorDraws


def _to_hours(values: np.ndarray, draws: PosteriorDraws) -> np.ndarray:
    if draws.response == RESPONSE:
        return hours_from_logit(values)
    return values


def _linear_predictor(draws: PosteriorDraws, grid) -> np.ndarray:
    x = np.asarray(grid, dtype=float)
    if x.ndim != 1:
        raise ValueError("Prediction grid must be one-dimensional")
    return draws.intercept[:, None] + draws.slope[:, None] * x[None, :]


def posterior_linpred(draws: PosteriorDraws, grid, transform: bool = True) -> np.ndarray:
    """
    (n_draws x n_grid) matrix of intercept + slope * x.
    With transform=True the values are in hours.
    """
    eta = _linear_predictor(draws, grid)
    return _to_hours(eta, draws) if transform else eta


def posterior_predict(
    draws: PosteriorDraws,
    grid,
    rng: Optional[np.random.Generator] = None,
    transform: bool = True,
) -> np.ndarray:
    """
    (n_draws x n_grid) posterior predictive draws.
    Each cell adds Normal(0, sigma_draw) noise to the linear predictor before
    the back-transform.
    """
    rng = rng if rng is not None else np.random.default_rng()
    eta = _linear_predictor(draws, grid)
    noise = rng.standard_normal(eta.shape) * draws.sigma[:, None]
    y_rep = eta + noise
    return _to_hours(y_rep, draws) if transform else y_rep


def sample_draw_rows(
    matrix: np.ndarray,
    n: int = MAX_TREND_LINES,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Random subset of at most n rows (draws), without replacement."""
    rng = rng if rng is not None else np.random.default_rng()
    n_rows = matrix.shape[0]
    if n_rows <= n:
        return matrix
    idx = rng.choice(n_rows, size=n, replace=False)
    return matrix[np.sort(idx)]
