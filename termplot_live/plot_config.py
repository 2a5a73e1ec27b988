"""Plot configuration model, default table and patch store.

Purpose
-------
``PlotConfig`` is the declarative description a render pipeline turns into a
plot: the aesthetic mapping, ordered geometry and scale layers, optional
coordinate/facet/theme/label specs, and the output size, renderer kind,
color mode, debounce interval and auto-render flag.

Defaults live in one explicit table, :data:`DEFAULT_OPTIONS`, applied once
when a configuration is resolved. Later changes go through
:func:`merge_options`, a shallow last-write-wins merge: list and mapping
values are replaced wholesale, never merged element-wise.

Values are not validated. A negative width or an unknown renderer kind is
passed through to the plot engine, whose rejection surfaces as a render
failure.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Hashable, Literal, Optional, Sequence

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

RendererKind = Literal["braille", "block", "sixel", "auto"]
ColorMode = Literal["none", "16", "256", "truecolor", "auto"]

RENDERER_KINDS: tuple[str, ...] = ("braille", "block", "sixel", "auto")
COLOR_MODES: tuple[str, ...] = ("none", "16", "256", "truecolor", "auto")

DEFAULT_OPTIONS: Dict[str, Any] = {
    "geoms": (),
    "scales": (),
    "coord": None,
    "facet": None,
    "theme": None,
    "labs": None,
    "width": 70,
    "height": 20,
    "renderer": "auto",
    "color_mode": "auto",
    "debounce_ms": 16,
    "auto_render": True,
}

# Fields the plot handle is built from; the rest only affect rendering.
PLOT_FIELDS: FrozenSet[str] = frozenset(
    {"aes", "geoms", "scales", "coord", "facet", "theme", "labs"}
)


@dataclass(frozen=True)
class PlotConfig:
    """Resolved plot configuration.

    Parameters
    ----------
    aes : Mapping
        Aesthetic mapping (``{"x": "time", "y": "value", ...}``).
    geoms, scales : sequence
        Geometry and scale layers, applied in list order.
    coord, facet, theme, labs : Any, optional
        At most one coordinate system, facet spec, (possibly partial) theme
        and label set.
    width, height : int
        Output size in terminal cells.
    renderer : {"braille", "block", "sixel", "auto"}
    color_mode : {"none", "16", "256", "truecolor", "auto"}
    debounce_ms : float
        Quiet period before an automatic render; ``0`` renders synchronously.
    auto_render : bool
        Whether data/config changes schedule renders at all.
    """

    aes: Mapping[str, Any]
    geoms: Sequence[Any] = ()
    scales: Sequence[Any] = ()
    coord: Any = None
    facet: Any = None
    theme: Any = None
    labs: Any = None
    width: int = 70
    height: int = 20
    renderer: RendererKind = "auto"
    color_mode: ColorMode = "auto"
    debounce_ms: float = 16
    auto_render: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as a shallow ``{field: value}`` dict."""
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}


_FIELD_NAMES: FrozenSet[str] = frozenset(f.name for f in dataclasses.fields(PlotConfig))


def _check_keys(options: Mapping[str, Any]) -> None:
    unknown = sorted(set(options) - _FIELD_NAMES)
    if unknown:
        raise TypeError(f"Unknown plot option(s): {', '.join(unknown)}")


def resolve_config(options: Mapping[str, Any] | PlotConfig) -> PlotConfig:
    """Build a :class:`PlotConfig` from user options over :data:`DEFAULT_OPTIONS`.

    Parameters
    ----------
    options : Mapping or PlotConfig
        User options. ``aes`` is required. A ``PlotConfig`` is returned as is.

    Returns
    -------
    PlotConfig

    Raises
    ------
    TypeError
        If ``aes`` is missing or an unknown option key is present.

    Examples
    --------
    >>> cfg = resolve_config({"aes": {"x": "x", "y": "y"}, "width": 40})
    >>> (cfg.width, cfg.height, cfg.renderer)
    (40, 20, 'auto')
    """
    if isinstance(options, PlotConfig):
        return options
    _check_keys(options)
    if "aes" not in options:
        raise TypeError("Plot options require an 'aes' mapping")
    config = {**DEFAULT_OPTIONS, **options}
    return PlotConfig(**config)


def merge_options(config: PlotConfig, patch: Mapping[str, Any]) -> PlotConfig:
    """Shallow-merge ``patch`` over ``config`` (last write wins per field)."""
    _check_keys(patch)
    return dataclasses.replace(config, **dict(patch))


@dataclass(frozen=True)
class ConfigChange:
    """Change payload emitted by :class:`PlotConfigStore`.

    ``fields`` holds the keys present in the patch, whether or not their
    value differs from the previous one.
    """

    old: PlotConfig
    new: PlotConfig
    fields: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def affects_plot(self) -> bool:
        return bool(self.fields & PLOT_FIELDS)


class PlotConfigStore:
    """Own the current :class:`PlotConfig` and apply partial patches."""

    def __init__(self, options: Mapping[str, Any] | PlotConfig) -> None:
        self._config = resolve_config(options)
        self._observers: Dict[Hashable, Callable[[ConfigChange], Any]] = {}
        self._observer_counter = 0

    @property
    def config(self) -> PlotConfig:
        return self._config

    def get_options(self) -> PlotConfig:
        """Return the current configuration."""
        return self._config

    def set_options(self, patch: Optional[Mapping[str, Any]] = None, **options: Any) -> ConfigChange:
        """Merge a partial patch over the current configuration.

        Parameters
        ----------
        patch : Mapping, optional
            Field updates. Keyword arguments are merged over ``patch``.

        Returns
        -------
        ConfigChange
            The change that was broadcast to observers.
        """
        updates = {**dict(patch or {}), **options}
        old = self._config
        self._config = merge_options(old, updates)
        change = ConfigChange(old=old, new=self._config, fields=frozenset(updates))
        logger.debug("plot options patched: %s", sorted(change.fields))
        for callback in list(self._observers.values()):
            callback(change)
        return change

    def observe(self, callback: Callable[[ConfigChange], Any]) -> Hashable:
        """Register ``callback`` for configuration patches; return its id."""
        self._observer_counter += 1
        observer_id = f"observer:{self._observer_counter}"
        self._observers[observer_id] = callback
        return observer_id

    def unobserve(self, observer_id: Hashable) -> bool:
        return self._observers.pop(observer_id, None) is not None
