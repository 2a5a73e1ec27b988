"""Rectangular brush gestures and brush hit-testing."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from .coerce import to_float
from .observable import Observable
from .plot_engine import Record

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class BrushRect:
    """Brush rectangle between two corners in data coordinates.

    While dragging, ``(x1, y1)`` is the anchor and ``(x2, y2)`` the free
    corner, in raw drag direction. :meth:`normalized` gives the canonical
    form with ``x1 <= x2`` and ``y1 <= y2``.
    """

    x1: float
    y1: float
    x2: float
    y2: float

    def normalized(self) -> "BrushRect":
        return BrushRect(
            x1=min(self.x1, self.x2),
            y1=min(self.y1, self.y2),
            x2=max(self.x1, self.x2),
            y2=max(self.y1, self.y2),
        )

    def contains(self, x: float, y: float) -> bool:
        """Closed-interval containment test (expects a canonical rect)."""
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2


def _field_value(record: Record, name: str, coerce: Callable[[Any], float]) -> float:
    if name not in record:
        return math.nan
    return coerce(record[name])


def indices_in_rect(
    data: Sequence[Record],
    x_field: str,
    y_field: str,
    rect: BrushRect,
    *,
    coerce: Callable[[Any], float] = to_float,
) -> list[int]:
    """Return positions of records whose ``(x_field, y_field)`` lie in ``rect``.

    Parameters
    ----------
    data : sequence of mappings
        Records; the result indexes into this sequence.
    x_field, y_field : str
        Field names.
    rect : BrushRect
        Canonical rectangle; bounds are inclusive on both ends.
    coerce : callable, optional
        Field value to ``float`` (``nan`` for no reading). Defaults to
        :func:`~termplot_live.coerce.to_float`, which reads ``None`` and
        blank strings as ``0``.

    Returns
    -------
    list[int]
        Matching positions in ascending order. Records lacking a field, or
        whose value coerces to ``nan``, never match.
    """
    n = len(data)
    if n == 0:
        return []
    xs = np.fromiter((_field_value(record, x_field, coerce) for record in data), dtype=np.float64, count=n)
    ys = np.fromiter((_field_value(record, y_field, coerce) for record in data), dtype=np.float64, count=n)
    mask = ~np.isnan(xs) & ~np.isnan(ys)
    mask &= (xs >= rect.x1) & (xs <= rect.x2) & (ys >= rect.y1) & (ys <= rect.y2)
    return [int(i) for i in np.flatnonzero(mask)]


class BrushTracker:
    """Track one in-progress rectangular drag.

    States: inactive, or dragging with a fixed anchor. :attr:`rect` holds the
    live (unsorted) rectangle while dragging and ``None`` otherwise.
    """

    def __init__(self) -> None:
        self._anchor: Optional[tuple[float, float]] = None
        self.rect: Observable[Optional[BrushRect]] = Observable(None, name="brush")

    @property
    def active(self) -> bool:
        return self._anchor is not None

    def start(self, x: float, y: float) -> None:
        """Anchor a new drag at ``(x, y)`` with a zero-size rectangle."""
        self._anchor = (x, y)
        self.rect.value = BrushRect(x1=x, y1=y, x2=x, y2=y)

    def update(self, x: float, y: float) -> None:
        """Move the free corner; no-op when not dragging."""
        if self._anchor is None:
            return
        ax, ay = self._anchor
        self.rect.value = BrushRect(x1=ax, y1=ay, x2=x, y2=y)

    def canonical(self) -> Optional[BrushRect]:
        """Return the live rectangle in canonical form (``None`` if inactive)."""
        current = self.rect.value
        if self._anchor is None or current is None:
            return None
        return current.normalized()

    def cancel(self) -> None:
        """Discard the anchor and the live rectangle."""
        self._anchor = None
        self.rect.value = None
