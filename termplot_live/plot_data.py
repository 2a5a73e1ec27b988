"""Streaming record buffer with time and size windows.

``PlotDataStore`` keeps the raw records pushed by a data source and exposes a
windowed view (records newer than ``time_window_ms`` and at most
``max_points`` of them) suitable for feeding a :class:`RenderScheduler`.
"""

from __future__ import annotations

import datetime as dt
import time
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Hashable, List, Optional, TYPE_CHECKING

from .observable import Observable, ValueChange
from .plot_engine import Record

if TYPE_CHECKING:
    from .render_scheduler import RenderScheduler


def _now_ms() -> float:
    return time.time() * 1000.0


def _timestamp_ms(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, dt.datetime):
        return value.timestamp() * 1000.0
    return None


class PlotDataStore:
    """Own a mutable record sequence with optional windowing.

    Parameters
    ----------
    max_points : int, optional
        Keep at most this many (most recent) records in :meth:`windowed`.
    time_window_ms : float, optional
        Keep only records whose ``time_field`` is within this many
        milliseconds of ``clock()``.
    time_field : str, optional
        Record field holding the timestamp (epoch milliseconds or ``datetime``).
    initial_data : iterable of mappings, optional
        Starting records.
    clock : callable, optional
        Returns the current time in epoch milliseconds. Defaults to wall time.

    Notes
    -----
    Records whose timestamp is missing or not numeric are never dropped by
    the time window.
    """

    def __init__(
        self,
        *,
        max_points: Optional[int] = None,
        time_window_ms: Optional[float] = None,
        time_field: str = "time",
        initial_data: Optional[Iterable[Record]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.max_points = max_points
        self.time_window_ms = time_window_ms
        self.time_field = time_field
        self._clock = clock or _now_ms

        self.data: Observable[List[Record]] = Observable(list(initial_data or ()), name="data")
        self.is_dirty: Observable[bool] = Observable(False, name="is_dirty")

    @property
    def count(self) -> int:
        return len(self.data.value)

    def windowed(self) -> List[Record]:
        """Return records inside the time window, limited to ``max_points``."""
        result = self.data.value
        if self.time_window_ms and self.time_window_ms > 0:
            result = self._within_time_window(result)
        if self.max_points and self.max_points > 0 and len(result) > self.max_points:
            result = result[-self.max_points:]
        return list(result)

    # --- Mutators ---

    def set(self, data: Iterable[Record]) -> None:
        self._replace(list(data), dirty=True)

    def push(self, record: Record | Iterable[Record]) -> None:
        """Append one record or a sequence of records.

        To keep pushes cheap the buffer is only trimmed once it grows past
        ``1.5 * max_points``; it is then cut back to ``max_points``.
        """
        new_records = [record] if isinstance(record, Mapping) else list(record)
        result = [*self.data.value, *new_records]
        if self.max_points and len(result) > self.max_points * 1.5:
            result = result[-self.max_points:]
        self._replace(result, dirty=True)

    def update_at(self, index: int, updates: Mapping[str, Any]) -> None:
        """Shallow-merge ``updates`` into the record at ``index``.

        Out-of-range indices are ignored.
        """
        current = self.data.value
        if index < 0 or index >= len(current):
            return
        result = list(current)
        result[index] = {**result[index], **updates}
        self._replace(result, dirty=True)

    def remove_where(self, predicate: Callable[[Record], bool]) -> None:
        self._replace([r for r in self.data.value if not predicate(r)], dirty=True)

    def clear(self) -> None:
        self._replace([], dirty=True)

    def mark_clean(self) -> None:
        self.is_dirty.value = False

    def apply_time_window(self) -> None:
        """Drop records older than the time window from the buffer itself."""
        if not self.time_window_ms:
            return
        self._replace(self._within_time_window(self.data.value), dirty=False)

    def apply_max_points(self) -> None:
        """Trim the buffer itself to the last ``max_points`` records."""
        current = self.data.value
        if not self.max_points or len(current) <= self.max_points:
            return
        self._replace(current[-self.max_points:], dirty=False)

    def bind(self, scheduler: "RenderScheduler") -> Hashable:
        """Feed :meth:`windowed` into ``scheduler`` now and after every change.

        Returns
        -------
        hashable
            Observer id on :attr:`data`; pass it to ``data.unobserve`` to unbind.
        """

        def _push(_change: ValueChange[List[Record]]) -> None:
            scheduler.set_data(self.windowed())

        return self.data.observe(_push, fire=True)

    # --- Internal ---

    def _replace(self, records: List[Record], *, dirty: bool) -> None:
        self.data.value = records
        if dirty:
            self.is_dirty.value = True

    def _within_time_window(self, records: List[Record]) -> List[Record]:
        cutoff = self._clock() - float(self.time_window_ms or 0)
        kept: List[Record] = []
        for record in records:
            stamp = _timestamp_ms(record.get(self.time_field))
            if stamp is None or stamp >= cutoff:
                kept.append(record)
        return kept
