"""General-purpose trailing-edge debouncing helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple
import asyncio
import logging
import threading

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class _PendingCall:
    args: Tuple[Any, ...]
    kwargs: dict[str, Any]


class Debouncer:
    """Delay a callback until calls have been quiet for ``delay_ms``.

    Every call cancels the armed timer (if any) and re-arms it with a fresh
    delay, so a burst of calls runs the callback once, ``delay_ms`` after the
    last call, with the arguments of that last call.

    Parameters
    ----------
    callback:
        Callable to execute when the timer fires.
    delay_ms:
        Quiet period in milliseconds. Must be ``>= 0``; a zero delay still
        goes through the timer (use :meth:`flush` for synchronous execution).

    Notes
    -----
    Inside a running asyncio loop the timer is ``loop.call_later``; otherwise
    a daemon ``threading.Timer`` is used. The owner must call :meth:`cancel`
    when discarding the debouncer so no callback fires against released state.
    """

    def __init__(self, callback: Callable[..., Any], *, delay_ms: float) -> None:
        self._callback = callback
        self._delay_s = 0.0
        self.delay_ms = delay_ms

        self._pending: Optional[_PendingCall] = None
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._generation = 0

    @property
    def delay_ms(self) -> float:
        return self._delay_s * 1000.0

    @delay_ms.setter
    def delay_ms(self, value: float) -> None:
        if value < 0:
            raise ValueError("delay_ms must be >= 0")
        self._delay_s = float(value) / 1000.0

    @property
    def pending(self) -> bool:
        """Return True while a timer is armed."""
        with self._lock:
            return self._timer is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._pending = _PendingCall(args=args, kwargs=dict(kwargs))
            self._cancel_locked()
            self._schedule_locked()

    def cancel(self) -> bool:
        """Disarm the timer and drop the pending call.

        Returns
        -------
        bool
            ``True`` if a timer was armed.
        """
        with self._lock:
            self._pending = None
            return self._cancel_locked()

    def flush(self) -> bool:
        """Run the pending call now, if any, and disarm the timer."""
        with self._lock:
            call = self._pending
            self._pending = None
            self._cancel_locked()
        if call is None:
            return False
        self._callback(*call.args, **call.kwargs)
        return True

    def _cancel_locked(self) -> bool:
        timer = self._timer
        self._timer = None
        if timer is None:
            return False
        timer.cancel()
        logger.debug("Debouncer timer cancelled")
        return True

    def _schedule_locked(self) -> None:
        delay_s = self._delay_s
        self._generation += 1
        generation = self._generation
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(delay_s, self._on_tick, args=(generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()
            return

        self._timer = loop.call_later(delay_s, self._on_tick, generation)

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled after it started running must not consume
            # the call armed by its replacement.
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            call = self._pending
            self._pending = None
        if call is None:
            return

        try:
            self._callback(*call.args, **call.kwargs)
        except Exception:
            logger.error("Debouncer callback failed", exc_info=True)
