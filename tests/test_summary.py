"""Tests for the quantile reducer and posterior summaries."""
import numpy as np
import pytest

from sleep_engine.inference.summary import (
    out_of_range_share,
    summarise_posterior,
    summarise_predictions,
)


class TestSummarisePredictions:

    def test_ordering_and_columns(self):
        rng = np.random.default_rng(0)
        grid = np.linspace(-3, 1, 80)
        matrix = rng.uniform(0.5, 23.5, size=(500, 80))
        summary = summarise_predictions(grid, matrix)
        assert list(summary.columns) == ["log_brainwt", "brainwt", "lower", "median", "upper"]
        assert len(summary) == 80
        assert (summary["lower"] <= summary["median"]).all()
        assert (summary["median"] <= summary["upper"]).all()
        np.testing.assert_allclose(summary["brainwt"], 10 ** grid)

    def test_quantile_levels(self):
        column = np.arange(1001, dtype=float)[:, None]
        summary = summarise_predictions([0.0], column)
        row = summary.iloc[0]
        assert row["lower"] == pytest.approx(25.0)
        assert row["median"] == pytest.approx(500.0)
        assert row["upper"] == pytest.approx(995.0)

    def test_ignores_missing(self):
        matrix = np.array([[1.0], [np.nan], [3.0]])
        summary = summarise_predictions([0.0], matrix)
        assert summary["median"].iloc[0] == pytest.approx(2.0)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="does not match grid"):
            summarise_predictions([0.0, 1.0], np.zeros((5, 3)))

    def test_bad_probs(self):
        with pytest.raises(ValueError, match="increasing"):
            summarise_predictions([0.0], np.zeros((5, 1)), probs=(0.9, 0.5, 0.1))


class TestSummarisePosterior:

    def test_rows(self, fixed_draws):
        table = summarise_posterior(fixed_draws)
        assert list(table.index) == ["intercept", "slope", "sigma"]
        assert table.loc["intercept", "mean"] == pytest.approx(-0.5)
        assert table.loc["sigma", "q2.5"] <= table.loc["sigma", "q97.5"]


class TestOutOfRange:

    def test_share(self):
        matrix = np.array([[-1.0, 5.0], [24.0, 12.0]])
        assert out_of_range_share(matrix) == pytest.approx(0.5)

    def test_ignores_nan(self):
        assert out_of_range_share(np.array([[np.nan, 3.0]])) == 0.0
        assert out_of_range_share(np.array([[np.nan]])) == 0.0
