"""Observable value containers and change payloads.

This module defines ``Observable``, the single reactive primitive used by the
render scheduler and the interaction controller, together with the immutable
``ValueChange`` payload handed to observers.

Assigning ``Observable.value`` notifies every current observer synchronously,
before the setter returns. Assignments that leave the value unchanged (same
object, or equal by ``==``) are not broadcast.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ValueChange(Generic[T]):
    """Normalized change event emitted by :class:`Observable`.

    Parameters
    ----------
    name : str
        Name of the observable field (``"selected_indices"``, ``"rendered"``...).
    old : Any
        Previous value.
    new : Any
        Updated value.

    Examples
    --------
    >>> ValueChange(name="render_count", old=0, new=1)
    ValueChange(name='render_count', old=0, new=1)
    """

    name: str
    old: T
    new: T


class Observable(Generic[T]):
    """Hold one value and broadcast replacements to observers."""

    __slots__ = ("_name", "_value", "_observers", "_observer_counter")

    def __init__(self, value: T, *, name: str = "") -> None:
        self._name = str(name)
        self._value = value
        self._observers: Dict[Hashable, Callable[[ValueChange[T]], Any]] = {}
        self._observer_counter = 0

    def __repr__(self) -> str:
        return f"Observable({self._name or '?'}={self._value!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new: T) -> None:
        old = self._value
        self._value = new
        if old is new or _safe_equal(old, new):
            return
        self._notify(old, new)

    def observe(
        self,
        callback: Callable[[ValueChange[T]], Any],
        *,
        fire: bool = False,
        observer_id: Optional[Hashable] = None,
    ) -> Hashable:
        """Register ``callback`` for value changes.

        Parameters
        ----------
        callback : callable
            Function with signature ``(change)``.
        fire : bool, optional
            If True, invoke ``callback`` once immediately with a synthetic
            change whose ``old`` and ``new`` are both the current value.
        observer_id : hashable, optional
            Identifier to register under. Re-using an id replaces the callback.

        Returns
        -------
        hashable
            The observer identifier, usable with :meth:`unobserve`.
        """
        if observer_id is None:
            self._observer_counter += 1
            observer_id = f"observer:{self._observer_counter}"
        self._observers[observer_id] = callback
        if fire:
            callback(ValueChange(name=self._name, old=self._value, new=self._value))
        return observer_id

    def unobserve(self, observer_id: Hashable) -> bool:
        """Remove an observer; return whether it was registered."""
        return self._observers.pop(observer_id, None) is not None

    def _notify(self, old: T, new: T) -> None:
        change = ValueChange(name=self._name, old=old, new=new)
        # Observers may unsubscribe themselves while being notified.
        for callback in list(self._observers.values()):
            callback(change)


def _safe_equal(a: Any, b: Any) -> bool:
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False
