"""Debounced reactive render pipeline.

Purpose
-------
``RenderScheduler`` turns arbitrary-rate data and configuration changes into
a bounded-rate sequence of render calls against an external plot engine, and
publishes the rendered text through observable fields.

Concepts and structure
----------------------
- ``PlotConfigStore`` owns the configuration; the scheduler observes it.
- ``Debouncer`` owns the single cancellable timer.
- The plot handle is a cached value, rebuilt lazily after the data or a
  plot-affecting option changed.

Every change while ``auto_render`` is on either renders synchronously
(``debounce_ms <= 0``) or re-arms the debounce timer, so a burst of changes
renders once, after the input has been quiet for ``debounce_ms``.

Important gotchas
-----------------
- ``refresh()`` renders immediately but leaves an armed timer alone; the
  timer may render the same state again later.
- A failed render keeps the last good ``rendered`` text and ``render_count``,
  resets ``is_rendering`` and re-raises. Failures inside the timer callback
  are logged by the debouncer instead, since no caller is waiting.
- Call :meth:`RenderScheduler.close` (or use the scheduler as a context
  manager) before discarding it so no timer fires afterwards.

Examples
--------
>>> scheduler = RenderScheduler(engine, {"aes": {"x": "x", "y": "y"}, "debounce_ms": 0})  # doctest: +SKIP
>>> scheduler.push_data({"x": 1, "y": 2})  # doctest: +SKIP
>>> print(scheduler.rendered.value)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from .debouncing import Debouncer
from .observable import Observable
from .plot_config import ConfigChange, PlotConfig, PlotConfigStore
from .plot_engine import PlotEngine, PlotHandle, Record, RenderOptions, build_plot

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class RenderScheduler:
    """Rebuild and render a plot whenever its data or configuration changes.

    Parameters
    ----------
    engine : PlotEngine
        External plot engine (``build`` and ``render``).
    options : Mapping or PlotConfig
        Plot options, resolved over ``DEFAULT_OPTIONS``. ``aes`` is required.
    data : sequence of mappings, optional
        Initial records.

    Notes
    -----
    Reactive fields are :class:`~termplot_live.observable.Observable`
    instances: ``rendered``, ``data``, ``is_rendering``, ``render_count`` and
    ``last_render_time``.
    """

    __slots__ = [
        "_engine", "_store", "_store_observer", "_debouncer", "_plot", "_plot_valid",
        "_plot_lock", "_input_generation",
        "_closed", "_render_info_last_log_t", "last_error",
        "rendered", "data", "is_rendering", "render_count", "last_render_time",
    ]

    def __init__(
        self,
        engine: PlotEngine,
        options: Mapping[str, Any] | PlotConfig,
        *,
        data: Optional[Iterable[Record]] = None,
    ) -> None:
        self._engine = engine
        self._store = PlotConfigStore(options)
        self._plot: Optional[PlotHandle] = None
        self._plot_valid = False
        self._plot_lock = threading.Lock()
        self._input_generation = 0
        self._closed = False
        self._render_info_last_log_t = 0.0
        self.last_error: Optional[BaseException] = None

        self.rendered: Observable[str] = Observable("", name="rendered")
        self.data: Observable[List[Record]] = Observable(list(data or ()), name="data")
        self.is_rendering: Observable[bool] = Observable(False, name="is_rendering")
        self.render_count: Observable[int] = Observable(0, name="render_count")
        self.last_render_time: Observable[Optional[float]] = Observable(None, name="last_render_time")

        self._debouncer = Debouncer(self._render_from_timer, delay_ms=max(0.0, self.config.debounce_ms))
        self._store_observer = self._store.observe(self._on_config_change)

        self._on_input_change()

    def __enter__(self) -> "RenderScheduler":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    # --- Properties ---

    @property
    def config(self) -> PlotConfig:
        """Return the current plot configuration."""
        return self._store.config

    @property
    def config_store(self) -> PlotConfigStore:
        return self._store

    @property
    def pending(self) -> bool:
        """Return True while a debounced render is scheduled."""
        return self._debouncer.pending

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def plot(self) -> Optional[PlotHandle]:
        """Return the plot handle for the current state (``None`` when empty).

        The handle is rebuilt only after the data or a plot-affecting option
        changed; otherwise the cached handle is reused. A handle built while
        another thread changed the inputs is returned to its caller but not
        cached.
        """
        with self._plot_lock:
            if self._plot_valid:
                return self._plot
            generation = self._input_generation
            records = self.data.value
            config = self.config

        plot = build_plot(self._engine, records, config) if records else None

        with self._plot_lock:
            if generation == self._input_generation:
                self._plot = plot
                self._plot_valid = True
        return plot

    # --- Data mutators ---

    def set_data(self, data: Iterable[Record]) -> None:
        """Replace all records.

        Indices held by an interaction selection refer to the previous
        sequence; clearing that selection is the caller's responsibility.
        """
        self._replace_data(list(data))

    def push_data(self, record: Record | Iterable[Record]) -> None:
        """Append one record (a mapping) or a sequence of records."""
        current = self.data.value
        if isinstance(record, Mapping):
            self._replace_data([*current, record])
        else:
            self._replace_data([*current, *record])

    def clear_data(self) -> None:
        self._replace_data([])

    # --- Configuration ---

    def get_options(self) -> PlotConfig:
        """Return the current plot configuration."""
        return self._store.get_options()

    def set_options(self, patch: Optional[Mapping[str, Any]] = None, **options: Any) -> None:
        """Shallow-merge option updates and schedule a render.

        Parameters
        ----------
        patch : Mapping, optional
            Partial options; keyword arguments are merged over it.

        Examples
        --------
        >>> scheduler.set_options(width=100, geoms=[line_geom])  # doctest: +SKIP
        """
        self._store.set_options(patch, **options)

    # --- Rendering ---

    def refresh(self) -> None:
        """Render now, regardless of ``auto_render`` and any armed timer."""
        self._render_pass(reason="refresh")

    def close(self) -> None:
        """Cancel a pending render and stop reacting to changes."""
        if self._closed:
            return
        self._closed = True
        self._debouncer.cancel()
        self._store.unobserve(self._store_observer)
        logger.debug("RenderScheduler closed")

    # --- Internal / Plumbing ---

    def _replace_data(self, records: List[Record]) -> None:
        self.data.value = records
        self._invalidate_plot()
        self._on_input_change()

    def _on_config_change(self, change: ConfigChange) -> None:
        if change.affects_plot:
            self._invalidate_plot()
        if "debounce_ms" in change.fields:
            # Negative intervals pass through the store unvalidated and act as 0.
            self._debouncer.delay_ms = max(0.0, change.new.debounce_ms)
        self._on_input_change()

    def _invalidate_plot(self) -> None:
        with self._plot_lock:
            self._input_generation += 1
            self._plot_valid = False

    def _on_input_change(self) -> None:
        if self._closed or not self.config.auto_render:
            return
        self._schedule_render()

    def _schedule_render(self) -> None:
        if self.config.debounce_ms > 0:
            self._debouncer()
            return
        self._debouncer.cancel()
        self._render_pass(reason="auto")

    def _render_from_timer(self) -> None:
        if self._closed:
            return
        self._render_pass(reason="debounced")

    @contextmanager
    def _rendering(self) -> Iterator[None]:
        self.is_rendering.value = True
        try:
            yield
        finally:
            self.is_rendering.value = False

    def _render_pass(self, *, reason: str) -> None:
        """Run one render pass.

        Empty data clears the output without calling the engine. Otherwise
        the engine renders the (cached) plot; on success the text is stored
        and ``render_count`` incremented.
        """
        try:
            plot = self.plot
            if plot is None:
                self.rendered.value = ""
                logger.debug("render(reason=%s) skipped: no data", reason)
                return

            options = RenderOptions.from_config(self.config)
            with self._rendering():
                text = self._engine.render(plot, options)
        except Exception as exc:
            self.last_error = exc
            logger.debug("render(reason=%s) failed: %r", reason, exc)
            raise

        self.last_error = None
        self.rendered.value = text
        self.render_count.value = self.render_count.value + 1
        self.last_render_time.value = time.time()
        self._log_render(reason)

    def _log_render(self, reason: str) -> None:
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info(
                "render(reason=%s) records=%d count=%d",
                reason,
                len(self.data.value),
                self.render_count.value,
            )
        logger.debug("render(reason=%s) size=%dx%d", reason, self.config.width, self.config.height)
