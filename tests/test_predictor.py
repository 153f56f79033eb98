"""Tests for posterior linear predictions and predictive draws."""
import numpy as np
import pytest

from sleep_engine.data_prep.transforms import hours_from_logit
from sleep_engine.inference.predictor import posterior_linpred, posterior_predict, sample_draw_rows
from sleep_engine.inference.sampler import PosteriorDraws


def _draws(intercept, slope, sigma, response="logit_sleep_ratio"):
    return PosteriorDraws(
        intercept=np.asarray(intercept, dtype=float),
        slope=np.asarray(slope, dtype=float),
        sigma=np.asarray(sigma, dtype=float),
        response=response,
        predictor="log_brainwt",
        method="fixed",
        n_obs=0,
    )


class TestLinpred:

    def test_shape_and_values(self, fixed_draws):
        grid = np.array([-2.0, 0.0, 1.0])
        eta = posterior_linpred(fixed_draws, grid, transform=False)
        assert eta.shape == (4, 3)
        assert eta[0, 0] == pytest.approx(-0.6 + -0.35 * -2.0)

    def test_transform_is_hours(self, fixed_draws):
        grid = np.linspace(-3, 1, 5)
        eta = posterior_linpred(fixed_draws, grid, transform=False)
        hours = posterior_linpred(fixed_draws, grid)
        np.testing.assert_allclose(hours, 24 / (1 + np.exp(-eta)))

    def test_extreme_draws_stay_inside_day(self):
        draws = _draws([1e6, -1e6, 500.0, -500.0], [1e4, -1e4, 0.0, 0.0], [1.0] * 4)
        grid = np.linspace(-4, 1, 80)
        hours = posterior_linpred(draws, grid)
        assert np.all(hours > 0) and np.all(hours < 24)

    def test_rejects_2d_grid(self, fixed_draws):
        with pytest.raises(ValueError, match="one-dimensional"):
            posterior_linpred(fixed_draws, np.zeros((2, 2)))


class TestPredict:

    def test_extreme_noise_stays_inside_day(self):
        draws = _draws([0.0, 0.0], [0.0, 0.0], [1e5, 1e5])
        hours = posterior_predict(draws, np.linspace(-4, 1, 80), rng=np.random.default_rng(0))
        assert np.all(hours > 0) and np.all(hours < 24)

    def test_zero_noise_matches_linpred(self, fixed_draws):
        quiet = _draws(fixed_draws.intercept, fixed_draws.slope, np.zeros(4))
        grid = np.linspace(-3, 1, 10)
        np.testing.assert_allclose(posterior_predict(quiet, grid), posterior_linpred(quiet, grid))

    def test_noise_widens_spread(self):
        n = 4000
        draws = _draws(np.zeros(n), np.zeros(n), np.full(n, 0.8))
        grid = np.array([0.0])
        rng = np.random.default_rng(1)
        pred = posterior_predict(draws, grid, rng=rng, transform=False)
        assert pred.std() == pytest.approx(0.8, rel=0.1)
        assert posterior_linpred(draws, grid, transform=False).std() == 0

    def test_seeded(self, fixed_draws):
        grid = np.linspace(-3, 1, 10)
        a = posterior_predict(fixed_draws, grid, rng=np.random.default_rng(5))
        b = posterior_predict(fixed_draws, grid, rng=np.random.default_rng(5))
        np.testing.assert_array_equal(a, b)

    def test_naive_model_is_not_bounded(self):
        draws = _draws([30.0, -5.0], [0.0, 0.0], [0.0, 0.0], response="sleep_total")
        hours = posterior_predict(draws, np.array([0.0]))
        assert hours[0, 0] == 30.0
        assert hours[1, 0] == -5.0

    def test_uses_same_back_transform(self, fixed_draws):
        grid = np.linspace(-3, 1, 6)
        raw = posterior_predict(fixed_draws, grid, rng=np.random.default_rng(9), transform=False)
        hours = posterior_predict(fixed_draws, grid, rng=np.random.default_rng(9))
        np.testing.assert_allclose(hours, hours_from_logit(raw))


class TestSampleDrawRows:

    def test_caps_rows(self):
        matrix = np.arange(1000 * 3).reshape(1000, 3)
        picked = sample_draw_rows(matrix, n=400, rng=np.random.default_rng(0))
        assert picked.shape == (400, 3)
        assert len(np.unique(picked[:, 0])) == 400

    def test_small_matrix_untouched(self):
        matrix = np.ones((10, 2))
        assert sample_draw_rows(matrix, n=400) is matrix
