"""Interaction controller: hover, selection, brushing and viewport navigation.

Purpose
-------
``InteractionController`` turns pointer and keyboard input into changes of a
chart's logical interaction state. It composes three models:

- ``ViewportModel`` for zoom/pan of the data-coordinate window,
- ``BrushTracker`` for rectangular drag selection,
- ``SelectionSet`` for mode-dependent point selection.

State is exposed through observable fields (``hovered_index``,
``selected_indices``, ``viewport``, ``brush``, ``is_focused``,
``selection_mode``) and the ``on_selection_change``, ``on_viewport_change``
and ``on_brush_end`` callbacks, all invoked synchronously before the mutator
returns. A host render loop typically observes these to highlight selected
points on its next render.

Keyboard bindings
-----------------
Active only while focused, with keyboard enabled and a viewport set. Pan
steps are 10% of the current viewport size, recomputed per key press.

====================  =======================================
key                   action
====================  =======================================
``ArrowLeft/Right``   pan x by -step / +step
``ArrowUp/Down``      pan y by +step / -step (data "up")
``+`` or ``=``        zoom in x1.2
``-``                 zoom out x0.8
``0``                 reset viewport
``Escape``            clear selection and cancel brush
====================  =======================================

Recognized keys call ``event.prevent_default()``; other keys are ignored.
The zoom factors are deliberately not exact inverses of each other.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, List, Literal, Optional

from .brush import BrushRect, BrushTracker, indices_in_rect
from .coerce import to_float
from .observable import Observable
from .plot_engine import Record
from .selection import SelectionMode, SelectionSet
from .viewport import Viewport, ViewportModel

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

KEY_PAN_FRACTION = 0.1
KEY_ZOOM_IN = 1.2
KEY_ZOOM_OUT = 0.8
WHEEL_ZOOM_IN = 1.2
WHEEL_ZOOM_OUT = 0.8

PointerEventType = Literal[
    "pointer_move",
    "pointer_down",
    "pointer_up",
    "pointer_leave",
    "wheel",
]

_TOGGLE_MODIFIERS: FrozenSet[str] = frozenset({"shift", "ctrl", "meta"})


@dataclass
class KeyEvent:
    """Key press delivered to :meth:`InteractionController.handle_key_event`."""

    key: str
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass(frozen=True)
class PointerEvent:
    """Pointer input already mapped to data coordinates.

    Parameters
    ----------
    event_type : str
        One of ``pointer_move``, ``pointer_down``, ``pointer_up``,
        ``pointer_leave`` or ``wheel``.
    x, y : float
        Pointer position in data units.
    index : int, optional
        Record index under the pointer, as resolved by the host.
    delta_y : float
        Wheel delta; negative scrolls up (zoom in).
    modifiers : frozenset[str]
        Held modifier keys (``"shift"``, ``"ctrl"``, ``"meta"``, ``"alt"``).
    """

    event_type: PointerEventType
    x: float = 0.0
    y: float = 0.0
    index: Optional[int] = None
    delta_y: float = 0.0
    modifiers: FrozenSet[str] = field(default_factory=frozenset)


class InteractionController:
    """Own hover, selection, brush and viewport state for one chart.

    Parameters
    ----------
    selection_mode : {"none", "single", "multiple", "brush"}, optional
        Initial selection mode.
    enable_zoom : bool, optional
        Allow :meth:`zoom` and :meth:`pan` (and the keys/wheel that use them).
    enable_keyboard : bool, optional
        Allow :meth:`handle_key_event`.
    initial_viewport : Viewport, optional
        Starting viewport, also restored by :meth:`reset_viewport`.
    on_selection_change : callable, optional
        ``(indices) -> None`` after every selection mutation.
    on_viewport_change : callable, optional
        ``(viewport) -> None`` after every viewport change.
    on_brush_end : callable, optional
        ``(rect, indices) -> None`` when a brush completes.
    coerce : callable, optional
        Field value to ``float`` for brush hit-testing. Defaults to
        :func:`~termplot_live.coerce.to_float`; pass
        :func:`~termplot_live.coerce.expression_to_float` to also accept
        arithmetic strings.

    Examples
    --------
    >>> ctl = InteractionController(selection_mode="multiple")
    >>> ctl.select(3)
    >>> ctl.toggle_select(5)
    >>> ctl.selected_indices.value
    [3, 5]
    """

    def __init__(
        self,
        *,
        selection_mode: SelectionMode = "single",
        enable_zoom: bool = True,
        enable_keyboard: bool = True,
        initial_viewport: Optional[Viewport] = None,
        on_selection_change: Optional[Callable[[List[int]], Any]] = None,
        on_viewport_change: Optional[Callable[[Viewport], Any]] = None,
        on_brush_end: Optional[Callable[[BrushRect, List[int]], Any]] = None,
        coerce: Optional[Callable[[Any], float]] = None,
    ) -> None:
        self.enable_keyboard = bool(enable_keyboard)
        self._on_brush_end = on_brush_end
        self._coerce = coerce or to_float

        self._selection = SelectionSet(selection_mode, on_change=on_selection_change)
        self._viewport = ViewportModel(initial_viewport, enabled=enable_zoom, on_change=on_viewport_change)
        self._brush = BrushTracker()

        self.hovered_index: Observable[int] = Observable(-1, name="hovered_index")
        self.is_focused: Observable[bool] = Observable(False, name="is_focused")

    # --- Observable fields owned by the composed models ---

    @property
    def selected_indices(self) -> Observable[List[int]]:
        return self._selection.indices

    @property
    def selection_mode(self) -> Observable[SelectionMode]:
        return self._selection.mode

    @property
    def viewport(self) -> Observable[Optional[Viewport]]:
        return self._viewport.viewport

    @property
    def brush(self) -> Observable[Optional[BrushRect]]:
        return self._brush.rect

    @property
    def brushing(self) -> bool:
        """Return True while a brush drag is in progress."""
        return self._brush.active

    @property
    def enable_zoom(self) -> bool:
        return self._viewport.enabled

    @enable_zoom.setter
    def enable_zoom(self, value: bool) -> None:
        self._viewport.enabled = bool(value)

    # --- Focus and hover ---

    def focus(self) -> None:
        self.is_focused.value = True

    def blur(self) -> None:
        self.is_focused.value = False

    def set_hovered(self, index: int) -> None:
        self.hovered_index.value = index

    def clear_hover(self) -> None:
        self.hovered_index.value = -1

    # --- Selection ---

    def set_selection_mode(self, mode: SelectionMode) -> None:
        """Switch the selection mode.

        Leaving ``brush`` mode cancels an in-progress brush; switching to
        ``none`` clears the selection.
        """
        previous = self._selection.mode.value
        self._selection.set_mode(mode)
        if previous == "brush" and mode != "brush":
            self.cancel_brush()
        if mode == "none" and previous != "none":
            self.clear_selection()

    def select(self, index: int) -> None:
        self._selection.select(index)

    def toggle_select(self, index: int) -> None:
        self._selection.toggle(index)

    def set_selected(self, indices: Sequence[int]) -> None:
        self._selection.set(indices)

    def clear_selection(self) -> None:
        self._selection.clear()

    # --- Viewport ---

    def set_viewport(self, viewport: Viewport) -> None:
        self._viewport.set_viewport(viewport)

    def reset_viewport(self) -> None:
        self._viewport.reset_viewport()

    def zoom(self, factor: float, center_x: Optional[float] = None, center_y: Optional[float] = None) -> None:
        """Zoom by ``factor`` (``> 1`` zooms in) about an optional center."""
        self._viewport.zoom(factor, center_x, center_y)

    def pan(self, dx: float, dy: float) -> None:
        self._viewport.pan(dx, dy)

    # --- Brush ---

    def start_brush(self, x: float, y: float) -> None:
        """Anchor a brush at ``(x, y)``; no-op unless the mode is ``brush``."""
        if self._selection.mode.value != "brush":
            return
        self._brush.start(x, y)

    def update_brush(self, x: float, y: float) -> None:
        self._brush.update(x, y)

    def end_brush(self, data: Sequence[Record], x_field: str, y_field: str) -> List[int]:
        """Finish the brush and select the records inside it.

        Parameters
        ----------
        data : sequence of mappings
            Records to hit-test; indices refer to this sequence.
        x_field, y_field : str
            Record fields holding the data coordinates.

        Returns
        -------
        list[int]
            Indices inside the canonical rectangle (inclusive bounds). The
            selection is replaced by this list, even when it is empty. When
            no brush is in progress nothing is selected and ``[]`` is returned.
        """
        rect = self._brush.canonical()
        if rect is None:
            self.cancel_brush()
            return []

        indices = indices_in_rect(data, x_field, y_field, rect, coerce=self._coerce)
        logger.debug("brush %s hit %d of %d records", rect, len(indices), len(data))
        self._selection.set(indices)
        if self._on_brush_end is not None:
            self._on_brush_end(rect, list(indices))
        self._brush.cancel()
        return indices

    def cancel_brush(self) -> None:
        """Drop an in-progress brush without touching the selection."""
        self._brush.cancel()

    # --- Input routing ---

    def handle_key_event(self, event: KeyEvent) -> bool:
        """Apply a key binding.

        Returns
        -------
        bool
            ``True`` if the key was recognized and handled.
        """
        vp = self._viewport.current
        if not self.enable_keyboard or not self.is_focused.value or vp is None:
            return False

        x_step = vp.width * KEY_PAN_FRACTION
        y_step = vp.height * KEY_PAN_FRACTION
        key = event.key

        if key == "ArrowLeft":
            self.pan(-x_step, 0)
        elif key == "ArrowRight":
            self.pan(x_step, 0)
        elif key == "ArrowUp":
            self.pan(0, y_step)
        elif key == "ArrowDown":
            self.pan(0, -y_step)
        elif key in ("+", "="):
            self.zoom(KEY_ZOOM_IN)
        elif key == "-":
            self.zoom(KEY_ZOOM_OUT)
        elif key == "0":
            self.reset_viewport()
        elif key == "Escape":
            self.clear_selection()
            self.cancel_brush()
        else:
            return False

        event.prevent_default()
        return True

    def handle_pointer_event(
        self,
        event: PointerEvent,
        data: Sequence[Record] = (),
        x_field: str = "x",
        y_field: str = "y",
    ) -> bool:
        """Route a pointer event to hover, selection, brush or zoom.

        Parameters
        ----------
        event : PointerEvent
            Event in data coordinates.
        data : sequence of mappings, optional
            Records used to hit-test a completed brush on ``pointer_up``.
        x_field, y_field : str, optional
            Record fields holding the data coordinates.

        Returns
        -------
        bool
            ``True`` if the event changed or inspected interaction state.
        """
        kind = event.event_type
        if kind == "pointer_move":
            if self._brush.active:
                self.update_brush(event.x, event.y)
            if event.index is None:
                self.clear_hover()
            else:
                self.set_hovered(event.index)
            return True

        if kind == "pointer_down":
            if self._selection.mode.value == "brush":
                self.start_brush(event.x, event.y)
                return True
            if event.index is None:
                return False
            if event.modifiers & _TOGGLE_MODIFIERS:
                self.toggle_select(event.index)
            else:
                self.select(event.index)
            return True

        if kind == "pointer_up":
            if not self._brush.active:
                return False
            self.update_brush(event.x, event.y)
            self.end_brush(data, x_field, y_field)
            return True

        if kind == "pointer_leave":
            self.clear_hover()
            return True

        if kind == "wheel":
            if event.delta_y == 0:
                return False
            factor = WHEEL_ZOOM_IN if event.delta_y < 0 else WHEEL_ZOOM_OUT
            self.zoom(factor, event.x, event.y)
            return True

        return False
