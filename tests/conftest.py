"""Shared fixtures for the sleep engine tests."""
import matplotlib
import numpy as np
import pandas as pd
import pytest

from sleep_engine.data_prep.transforms import prepare_observations
from sleep_engine.etl.loader import load_msleep
from sleep_engine.inference.sampler import PosteriorDraws

matplotlib.use("Agg")

TRUE_INTERCEPT = -0.5
TRUE_SLOPE = -0.3
TRUE_SIGMA = 0.1


@pytest.fixture
def true_line():
    """Parameters the synthetic observations are generated from."""
    return {"intercept": TRUE_INTERCEPT, "slope": TRUE_SLOPE, "sigma": TRUE_SIGMA}


@pytest.fixture
def raw_msleep():
    return load_msleep()


@pytest.fixture
def observations(raw_msleep):
    return prepare_observations(raw_msleep)


@pytest.fixture
def toy_species():
    """Three species, none missing brain mass."""
    return pd.DataFrame({
        "name": ["Small", "Middle", "Large"],
        "sleep_total": [3.0, 12.0, 20.0],
        "brainwt": [0.001, 0.1, 5.0],
        "bodywt": [0.02, 1.5, 2500.0],
    })


@pytest.fixture
def synthetic_observations():
    """logit_sleep_ratio generated from a known line plus small noise."""
    rng = np.random.default_rng(7)
    x = np.linspace(-3.5, 0.7, 60)
    y = TRUE_INTERCEPT + TRUE_SLOPE * x + rng.normal(0, TRUE_SIGMA, size=len(x))
    return pd.DataFrame({"log_brainwt": x, "logit_sleep_ratio": y})


@pytest.fixture
def fixed_draws():
    """Hand-built logit-scale posterior draws."""
    return PosteriorDraws(
        intercept=np.array([-0.6, -0.5, -0.4, -0.5]),
        slope=np.array([-0.35, -0.3, -0.25, -0.3]),
        sigma=np.array([0.5, 0.6, 0.7, 0.6]),
        response="logit_sleep_ratio",
        predictor="log_brainwt",
        method="fixed",
        n_obs=4,
    )
