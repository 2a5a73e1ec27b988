"""Ordered record-index selection with mode-dependent semantics.

Modes
-----
- ``none``: ``select`` and ``toggle`` do nothing.
- ``single``: ``select(i)`` replaces the selection with ``[i]``; ``toggle(i)``
  removes ``i`` when present, otherwise replaces the selection with ``[i]``.
- ``multiple`` and ``brush``: ``select(i)`` appends ``i`` unless already
  present; ``toggle(i)`` removes ``i`` when present, otherwise appends it.

``set`` and ``clear`` ignore the mode. Every mutation, including a clear of
an already empty selection, calls ``on_change`` with the full new sequence.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Callable, List, Literal, Optional

from .observable import Observable

SelectionMode = Literal["none", "single", "multiple", "brush"]

SELECTION_MODES: tuple[str, ...] = ("none", "single", "multiple", "brush")


def _require_mode(mode: str) -> SelectionMode:
    if mode not in SELECTION_MODES:
        raise ValueError(f"Unknown selection mode: {mode!r}")
    return mode  # type: ignore[return-value]


class SelectionSet:
    """Own the selected record indices and the active selection mode."""

    def __init__(
        self,
        mode: SelectionMode = "single",
        *,
        on_change: Optional[Callable[[List[int]], Any]] = None,
    ) -> None:
        self.mode: Observable[SelectionMode] = Observable(_require_mode(mode), name="selection_mode")
        self.indices: Observable[List[int]] = Observable([], name="selected_indices")
        self._on_change = on_change

    def __contains__(self, index: object) -> bool:
        return index in self.indices.value

    def __len__(self) -> int:
        return len(self.indices.value)

    def set_mode(self, mode: SelectionMode) -> None:
        self.mode.value = _require_mode(mode)

    def select(self, index: int) -> None:
        mode = self.mode.value
        if mode == "none":
            return
        current = self.indices.value
        if mode == "single":
            self._replace([index])
        elif index not in current:
            self._replace([*current, index])
        else:
            self._replace(current)

    def toggle(self, index: int) -> None:
        mode = self.mode.value
        if mode == "none":
            return
        current = self.indices.value
        if index in current:
            # Only the toggled index is removed, even in single mode.
            self._replace([i for i in current if i != index])
        elif mode == "single":
            self._replace([index])
        else:
            self._replace([*current, index])

    def set(self, indices: Iterable[int]) -> None:
        """Replace the selection wholesale, regardless of mode."""
        self._replace(list(indices))

    def clear(self) -> None:
        self._replace([])

    def _replace(self, indices: List[int]) -> None:
        self.indices.value = indices
        if self._on_change is not None:
            self._on_change(list(indices))
