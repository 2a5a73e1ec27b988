"""Top-level public API for the ``termplot_live`` package.

This module re-exports the controller layer that sits between a live record
stream, a terminal plot engine and raw user input, so hosts can import from a
single namespace, for example:

>>> from termplot_live import InteractionController, RenderScheduler  # doctest: +SKIP

It exposes both the high-level controllers (render scheduling, interaction)
and the lower-level building blocks they are composed of (observables, the
debouncer, viewport/brush/selection models).
"""

from .brush import BrushRect, BrushTracker, indices_in_rect
from .coerce import expression_to_float, to_float
from .debouncing import Debouncer
from .interaction import InteractionController, KeyEvent, PointerEvent
from .observable import Observable, ValueChange
from .plot_config import (
    COLOR_MODES,
    DEFAULT_OPTIONS,
    RENDERER_KINDS,
    ConfigChange,
    PlotConfig,
    PlotConfigStore,
    merge_options,
    resolve_config,
)
from .plot_data import PlotDataStore
from .plot_engine import PlotEngine, PlotHandle, RenderOptions, build_plot
from .render_scheduler import RenderScheduler
from .selection import SELECTION_MODES, SelectionMode, SelectionSet
from .viewport import Viewport, ViewportModel

__all__ = [
    "BrushRect",
    "BrushTracker",
    "COLOR_MODES",
    "ConfigChange",
    "DEFAULT_OPTIONS",
    "Debouncer",
    "InteractionController",
    "KeyEvent",
    "Observable",
    "PlotConfig",
    "PlotConfigStore",
    "PlotDataStore",
    "PlotEngine",
    "PlotHandle",
    "PointerEvent",
    "RENDERER_KINDS",
    "RenderOptions",
    "RenderScheduler",
    "SELECTION_MODES",
    "SelectionMode",
    "SelectionSet",
    "ValueChange",
    "Viewport",
    "ViewportModel",
    "build_plot",
    "expression_to_float",
    "indices_in_rect",
    "merge_options",
    "resolve_config",
    "to_float",
]
