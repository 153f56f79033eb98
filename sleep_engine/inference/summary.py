"""
Reducers over posterior draws.
Per-grid-point quantiles for the ribbon plot, per-parameter posterior
summaries, and the share of predictions that fall outside the day.
"""
from typing import Sequence

import numpy as np
import pandas as pd

from sleep_engine.config import HOURS_PER_DAY, PREDICTIVE_QUANTILES
from sleep_engine.inference.sampler import PARAMS, PosteriorDraws


def summarise_predictions(
    grid,
    matrix: np.ndarray,
    probs: Sequence[float] = PREDICTIVE_QUANTILES,
) -> pd.DataFrame:
    """
    Quantiles across draws (rows) for each grid point (column), NaNs ignored.

    Args:
        grid: log10 brain mass values, one per column of matrix
        matrix: (n_draws x n_grid) predictions
        probs: (lower, median, upper) probabilities

    Returns one row per grid point: log_brainwt, brainwt, lower, median, upper.
    """
    grid = np.asarray(grid, dtype=float)
    if matrix.ndim != 2 or matrix.shape[1] != len(grid):
        raise ValueError(
            f"Prediction matrix shape {matrix.shape} does not match grid of {len(grid)} points"
        )
    if len(probs) != 3 or not (0 <= probs[0] <= probs[1] <= probs[2] <= 1):
        raise ValueError(f"probs must be three increasing probabilities, got {probs}")

    lower, median, upper = np.nanquantile(matrix, probs, axis=0)

    return pd.DataFrame({
        "log_brainwt": grid,
        "brainwt": 10 ** grid,
        "lower": lower,
        "median": median,
        "upper": upper,
    })


def summarise_posterior(draws: PosteriorDraws) -> pd.DataFrame:
    """Mean, sd and central 95% interval for intercept, slope and sigma."""
    rows = []
    for name, values in zip(PARAMS, draws.as_matrix().T):
        rows.append({
            "parameter": name,
            "mean": float(np.mean(values)),
            "sd": float(np.std(values, ddof=1)),
            "q2.5": float(np.quantile(values, 0.025)),
            "q97.5": float(np.quantile(values, 0.975)),
        })
    return pd.DataFrame(rows).set_index("parameter")


def out_of_range_share(matrix: np.ndarray, low: float = 0.0, high: float = HOURS_PER_DAY) -> float:
    """Share of finite predictions outside the open interval (low, high)."""
    values = matrix[np.isfinite(matrix)]
    if values.size == 0:
        return 0.0
    return float(np.mean((values <= low) | (values >= high)))
