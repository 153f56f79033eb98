"""
Matplotlib renderer for PlotSpec.
"""
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.ticker import FixedLocator, FuncFormatter

from sleep_engine.output.plot_spec import Layer, PlotSpec


class MatplotlibRenderer:
    """Draws PlotSpecs onto fresh matplotlib figures."""

    def __init__(self, figsize=(8, 5), dpi: int = 120):
        self.figsize = figsize
        self.dpi = dpi

    def render(self, spec: PlotSpec, save_path: Optional[Path] = None) -> Figure:
        """Draw spec; save to save_path (closing the figure) when given."""
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)

        for layer in spec.layers:
            self._draw_layer(ax, layer)

        if spec.x_axis is not None:
            x_values = [layer.x for layer in spec.layers if len(layer.x)]
            lo = min(float(x.min()) for x in x_values)
            hi = max(float(x.max()) for x in x_values)
            ax.xaxis.set_major_locator(FixedLocator(spec.x_axis.ticks(lo, hi)))
            ax.xaxis.set_major_formatter(FuncFormatter(lambda v, _pos: spec.x_axis.format_tick(v)))
            ax.set_xlim(lo - 0.1, hi + 0.1)

        if spec.y_limits is not None:
            ax.set_ylim(*spec.y_limits)

        ax.set_title(spec.title if spec.subtitle is None else f"{spec.title}\n{spec.subtitle}")
        ax.set_xlabel(spec.x_label)
        ax.set_ylabel(spec.y_label)
        ax.grid(True, alpha=0.3)
        if any(layer.label for layer in spec.layers):
            ax.legend(loc="best")
        fig.tight_layout()

        if save_path is not None:
            save_path = Path(save_path)
            save_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(save_path, bbox_inches="tight")
            plt.close(fig)

        return fig

    def _draw_layer(self, ax, layer: Layer) -> None:
        style = dict(layer.style)
        if layer.kind == "point":
            ax.scatter(layer.x, layer.y, label=layer.label, **style)
        elif layer.kind == "line":
            if layer.series is not None:
                # Many posterior lines: draw in one call, label once
                ax.plot(layer.x, layer.series.T, **style)
                if layer.label:
                    ax.plot([], [], label=layer.label, **style)
            else:
                ax.plot(layer.x, layer.y, label=layer.label, **style)
        elif layer.kind == "ribbon":
            ax.fill_between(layer.x, layer.y_low, layer.y_high, label=layer.label, **style)
        elif layer.kind == "text":
            for x, y, text in zip(layer.x, layer.y, layer.labels):
                ax.annotate(text, (x, y), xytext=(4, 4), textcoords="offset points", **style)
