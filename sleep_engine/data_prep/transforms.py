"""
Observation filtering and derived columns.

Drops species without a brain mass, then adds log10 masses, log10 sleep,
the sleep ratio (share of the day spent asleep) and its logit. Also holds
the logit/inverse-logit helpers used to move predictions back to hours.
"""
import numpy as np
import pandas as pd
from scipy.special import expit
from scipy.special import logit as _logit

from sleep_engine.config import GRID_POINTS, HOURS_PER_DAY
from sleep_engine.etl.loader import validate_columns

# Nearest floats inside (0, 24); expit saturates to exactly 0.0 or 1.0
_HOURS_LOW = np.nextafter(0.0, 1.0)
_HOURS_HIGH = np.nextafter(HOURS_PER_DAY, 0.0)


def logit(p):
    """log(p / (1 - p))."""
    return _logit(p)


def inv_logit(x):
    """Logistic sigmoid, the inverse of logit."""
    return expit(x)


def hours_from_logit(x) -> np.ndarray:
    """
    Map logit-scale sleep ratios back to hours of sleep per day.

    Any finite input lands strictly inside (0, 24): large draws saturate
    the sigmoid, so hours are clamped one float step inside the day.
    NaN stays NaN.
    """
    hours = HOURS_PER_DAY * expit(np.asarray(x, dtype=float))
    return np.clip(hours, _HOURS_LOW, _HOURS_HIGH)


def prepare_observations(df: pd.DataFrame) -> pd.DataFrame:
    """
    Filter and transform raw msleep rows for modelling.

    Rows with missing brainwt are excluded. Remaining rows get:
    log_brainwt, log_bodywt, log_sleep_total (base 10), sleep_ratio and
    logit_sleep_ratio.
    """
    validate_columns(df)

    obs = df[df["brainwt"].notna()].copy()

    if (obs["brainwt"] <= 0).any() or (obs["bodywt"] <= 0).any():
        bad = obs.loc[(obs["brainwt"] <= 0) | (obs["bodywt"] <= 0), "name"].tolist()
        raise ValueError(f"Brain and body mass must be positive for log transform: {bad}")

    sleep = obs["sleep_total"]
    out_of_day = sleep.isna() | (sleep <= 0) | (sleep >= HOURS_PER_DAY)
    if out_of_day.any():
        bad = obs.loc[out_of_day, "name"].tolist()
        raise ValueError(f"sleep_total must lie strictly between 0 and 24 hours: {bad}")

    obs["log_brainwt"] = np.log10(obs["brainwt"])
    obs["log_bodywt"] = np.log10(obs["bodywt"])
    obs["log_sleep_total"] = np.log10(obs["sleep_total"])
    obs["sleep_ratio"] = obs["sleep_total"] / HOURS_PER_DAY
    obs["logit_sleep_ratio"] = logit(obs["sleep_ratio"].to_numpy())

    return obs.reset_index(drop=True)


def make_prediction_grid(values, n_points: int = GRID_POINTS) -> np.ndarray:
    """Evenly spaced grid from min(values) to max(values), endpoints included."""
    arr = np.asarray(values, dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        raise ValueError("Cannot build a prediction grid from no observed values")
    if n_points < 2:
        raise ValueError(f"Prediction grid needs at least 2 points, got {n_points}")
    return np.linspace(arr.min(), arr.max(), n_points)
