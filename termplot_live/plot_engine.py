"""Contract of the external plot engine and the plot build order.

The engine builds a chainable plot handle from records and an aesthetic
mapping, and renders a handle to text. Nothing here draws; any object with
the right methods can be used.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .plot_config import PlotConfig

Record = Mapping[str, Any]


@runtime_checkable
class PlotHandle(Protocol):
    def with_geom(self, geom: Any) -> "PlotHandle": ...

    def with_scale(self, scale: Any) -> "PlotHandle": ...

    def with_coord(self, coord: Any) -> "PlotHandle": ...

    def with_facet(self, facet: Any) -> "PlotHandle": ...

    def with_theme(self, theme: Any) -> "PlotHandle": ...

    def with_labels(self, labels: Any) -> "PlotHandle": ...


@runtime_checkable
class PlotEngine(Protocol):
    def build(self, data: Sequence[Record], aes: Mapping[str, Any]) -> PlotHandle: ...

    def render(self, plot: PlotHandle, options: "RenderOptions") -> str: ...


@dataclass(frozen=True)
class RenderOptions:
    """Output options passed to :meth:`PlotEngine.render`."""

    width: int
    height: int
    renderer: str
    color_mode: str

    @classmethod
    def from_config(cls, config: PlotConfig) -> "RenderOptions":
        return cls(
            width=config.width,
            height=config.height,
            renderer=config.renderer,
            color_mode=config.color_mode,
        )


def build_plot(engine: PlotEngine, data: Sequence[Record], config: PlotConfig) -> PlotHandle:
    """Build a plot handle from ``data`` and ``config``.

    Stages are attached in a fixed order: aesthetic mapping, each geometry
    layer, each scale, then coordinate system, facet, theme and labels when
    present. Later stages may depend on earlier ones already being attached.
    """
    plot = engine.build(data, config.aes)
    for geom in config.geoms:
        plot = plot.with_geom(geom)
    for scale in config.scales:
        plot = plot.with_scale(scale)
    if config.coord is not None:
        plot = plot.with_coord(config.coord)
    if config.facet is not None:
        plot = plot.with_facet(config.facet)
    if config.theme is not None:
        plot = plot.with_theme(config.theme)
    if config.labs is not None:
        plot = plot.with_labels(config.labs)
    return plot
