"""Viewport model: the visible data-coordinate window of a plot.

``Viewport`` is an immutable rectangle in data units. ``ViewportModel`` owns
the current viewport (or ``None`` for "no viewport constraint"), the value it
was constructed with, and the zoom/pan operations that replace it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .observable import Observable

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Viewport:
    """Rectangular window in data coordinates.

    Parameters
    ----------
    x_min, x_max : float
        Horizontal bounds, ``x_min <= x_max``.
    y_min, y_max : float
        Vertical bounds, ``y_min <= y_max``.

    Notes
    -----
    The ordering invariant is not checked on construction; :meth:`zoomed` and
    :meth:`panned` never break it.
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> tuple[float, float]:
        return ((self.x_min + self.x_max) / 2, (self.y_min + self.y_max) / 2)

    def zoomed(self, factor: float, center_x: Optional[float] = None, center_y: Optional[float] = None) -> "Viewport":
        """Return this viewport scaled by ``1 / factor`` about a center point.

        Parameters
        ----------
        factor : float
            ``> 1`` zooms in (narrower range), ``< 1`` zooms out. Must be
            finite and non-zero; ``0`` raises ``ZeroDivisionError``.
        center_x, center_y : float, optional
            New center; defaults to this viewport's midpoint.

        Examples
        --------
        >>> Viewport(0, 10, 0, 10).zoomed(2)
        Viewport(x_min=2.5, x_max=7.5, y_min=2.5, y_max=7.5)
        """
        mid_x, mid_y = self.center
        cx = mid_x if center_x is None else center_x
        cy = mid_y if center_y is None else center_y
        half_x = self.width / factor / 2
        half_y = self.height / factor / 2
        x0, x1 = cx - half_x, cx + half_x
        y0, y1 = cy - half_y, cy + half_y
        return Viewport(
            x_min=min(x0, x1),
            x_max=max(x0, x1),
            y_min=min(y0, y1),
            y_max=max(y0, y1),
        )

    def panned(self, dx: float, dy: float) -> "Viewport":
        """Return this viewport translated by ``(dx, dy)``; size is unchanged."""
        return Viewport(
            x_min=self.x_min + dx,
            x_max=self.x_max + dx,
            y_min=self.y_min + dy,
            y_max=self.y_max + dy,
        )


class ViewportModel:
    """Own the current viewport and its initial value.

    Parameters
    ----------
    initial : Viewport, optional
        Viewport restored by :meth:`reset_viewport`. ``None`` means the plot
        has no viewport constraint until one is set.
    enabled : bool, optional
        When False, :meth:`zoom` and :meth:`pan` are silent no-ops.
    on_change : callable, optional
        Called with the new viewport after every change that notifies.
    """

    def __init__(
        self,
        initial: Optional[Viewport] = None,
        *,
        enabled: bool = True,
        on_change: Optional[Callable[[Viewport], Any]] = None,
    ) -> None:
        self._initial = initial
        self.enabled = bool(enabled)
        self._on_change = on_change
        self.viewport: Observable[Optional[Viewport]] = Observable(initial, name="viewport")

    @property
    def initial(self) -> Optional[Viewport]:
        return self._initial

    @property
    def current(self) -> Optional[Viewport]:
        return self.viewport.value

    def set_viewport(self, viewport: Viewport) -> None:
        """Replace the viewport wholesale and notify."""
        self._apply(viewport)

    def reset_viewport(self) -> None:
        """Restore the initial viewport; notify only if one was supplied."""
        self.viewport.value = self._initial
        if self._initial is not None:
            self._notify(self._initial)

    def zoom(self, factor: float, center_x: Optional[float] = None, center_y: Optional[float] = None) -> None:
        """Scale the viewport by ``1 / factor`` about a center point.

        No-op when disabled or when no viewport is set.
        """
        current = self.viewport.value
        if not self.enabled or current is None:
            return
        self._apply(current.zoomed(factor, center_x, center_y))

    def pan(self, dx: float, dy: float) -> None:
        """Translate the viewport. No-op when disabled or when no viewport is set."""
        current = self.viewport.value
        if not self.enabled or current is None:
            return
        self._apply(current.panned(dx, dy))

    def _apply(self, viewport: Viewport) -> None:
        self.viewport.value = viewport
        self._notify(viewport)

    def _notify(self, viewport: Viewport) -> None:
        logger.debug("viewport -> %s", viewport)
        if self._on_change is not None:
            self._on_change(viewport)
