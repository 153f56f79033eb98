"""
The three sleep plots as PlotSpecs.

(a) scatter_spec: raw data, highlighted species labelled
(b) trend_spec:   posterior expected-sleep lines over the data
(c) ribbon_spec:  posterior predictive median with its 2.5-99.5% band

Brain mass is plotted on log10 values with ticks labelled in kg.
"""
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from sleep_engine.config import HIGHLIGHT_MAMMALS, HOURS_PER_DAY, MAX_TREND_LINES
from sleep_engine.inference.predictor import sample_draw_rows
from sleep_engine.output.plot_spec import Layer, LogAxis, PlotSpec

X_LABEL = "Brain mass (kg), log scale"
Y_LABEL = "Sleep per day (hours)"


def _data_layer(obs: pd.DataFrame, **style) -> Layer:
    base = {"color": "black", "s": 14, "alpha": 0.7}
    base.update(style)
    return Layer("point", obs["log_brainwt"], obs["sleep_total"], style=base)


def scatter_spec(obs: pd.DataFrame, highlight: Iterable[str] = HIGHLIGHT_MAMMALS) -> PlotSpec:
    """Raw scatter of sleep against brain mass, highlighted species labelled."""
    names = set(highlight)
    picked = obs[obs["name"].isin(names)]

    spec = PlotSpec(
        title="Mammal sleep and brain mass",
        x_label=X_LABEL,
        y_label=Y_LABEL,
        x_axis=LogAxis(unit="kg"),
    )
    spec.add(_data_layer(obs))
    spec.add(Layer("point", picked["log_brainwt"], picked["sleep_total"],
                   style={"color": "tab:red", "s": 30}, label="Highlighted"))
    spec.add(Layer("text", picked["log_brainwt"], picked["sleep_total"],
                   labels=picked["name"].tolist(), style={"fontsize": 8}))
    return spec


def trend_spec(
    obs: pd.DataFrame,
    grid,
    linpred_hours: np.ndarray,
    n_lines: int = MAX_TREND_LINES,
    rng: Optional[np.random.Generator] = None,
) -> PlotSpec:
    """Up to n_lines posterior mean-trend lines drawn under the data."""
    lines = sample_draw_rows(linpred_hours, n=n_lines, rng=rng)

    spec = PlotSpec(
        title="Posterior mean trend",
        subtitle=f"{len(lines)} posterior draws of expected sleep",
        x_label=X_LABEL,
        y_label=Y_LABEL,
        x_axis=LogAxis(unit="kg"),
        y_limits=(0, HOURS_PER_DAY),
    )
    spec.add(Layer("line", grid, series=lines,
                   style={"color": "tab:blue", "alpha": 0.05, "linewidth": 0.8},
                   label="Posterior draws"))
    spec.add(_data_layer(obs))
    return spec


def ribbon_spec(obs: pd.DataFrame, summary: pd.DataFrame) -> PlotSpec:
    """Posterior predictive median line over its interval ribbon."""
    spec = PlotSpec(
        title="Posterior predictive distribution",
        subtitle="Median and 2.5%-99.5% interval of simulated species",
        x_label=X_LABEL,
        y_label=Y_LABEL,
        x_axis=LogAxis(unit="kg"),
        y_limits=(0, HOURS_PER_DAY),
    )
    spec.add(Layer("ribbon", summary["log_brainwt"], y_low=summary["lower"],
                   y_high=summary["upper"], style={"color": "tab:blue", "alpha": 0.25},
                   label="Predictive interval"))
    spec.add(Layer("line", summary["log_brainwt"], summary["median"],
                   style={"color": "tab:blue", "linewidth": 1.5}, label="Median"))
    spec.add(_data_layer(obs))
    return spec
