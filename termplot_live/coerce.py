"""Numeric coercion of record field values.

:func:`to_float` is the coercion used by brush hit-testing. It reads plain
numeric literals only, so a record value is never evaluated. Hosts whose
records carry arithmetic such as ``"1/2"`` or ``"2*pi"`` can opt into
:func:`expression_to_float` instead.
"""

from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any

import sympy as sp

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INFINITY_RE = re.compile(r"^([+-]?)Infinity$")
_PREFIXED_INT_RE = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")

# Sums, products and quotients of numbers, pi and E. No powers, no calls.
_EXPRESSION_RE = re.compile(r"^[0-9A-Za-z+\-*/().\s]+$")
_EXPRESSION_NAMES = frozenset({"pi", "E"})
_NAME_RE = re.compile(r"(?<![\d.])[A-Za-z]+")


def to_float(obj: Any) -> float:
    """
    Convert a record field value to ``float``, or ``nan`` when it has no
    numeric reading.

    Rules:
    - ``None``: ``0.0``.
    - ``bool``: ``1.0`` / ``0.0``.
    - Real numbers (including numpy scalars): ``float(obj)``.
    - ``datetime``: epoch milliseconds; ``date``: epoch milliseconds of its
      local midnight.
    - Strings, after stripping whitespace:
        1) empty: ``0.0``
        2) decimal literals (``"3.5"``, ``"-1e3"``, ``".5"``)
        3) ``"Infinity"`` with an optional sign
        4) ``0x``/``0o``/``0b`` prefixed integers
      Anything else (``"pi"``, ``"1/2"``, ``"inf"``, ``"1_000"``) is ``nan``.
    - Anything else: ``float(obj)`` if supported.

    Never raises.
    """
    if obj is None:
        return 0.0

    if isinstance(obj, bool):
        return 1.0 if obj else 0.0

    if isinstance(obj, dt.datetime):
        return obj.timestamp() * 1000.0
    if isinstance(obj, dt.date):
        return dt.datetime(obj.year, obj.month, obj.day).timestamp() * 1000.0

    if isinstance(obj, str):
        return _literal_to_float(obj.strip())

    try:
        return float(obj)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def _literal_to_float(s: str) -> float:
    if s == "":
        return 0.0
    if _DECIMAL_RE.match(s):
        return float(s)
    m = _INFINITY_RE.match(s)
    if m:
        return -math.inf if m.group(1) == "-" else math.inf
    if _PREFIXED_INT_RE.match(s):
        return float(int(s, 0))
    return math.nan


def expression_to_float(obj: Any) -> float:
    """
    Like :func:`to_float`, but also evaluate simple arithmetic strings.

    A string with no literal reading is parsed with SymPy when it only
    combines numbers, ``pi`` and ``E`` with ``+ - * /`` and parentheses,
    and kept if it evaluates to a real number. Powers and function calls
    are rejected before parsing, so evaluation cost stays linear in the
    input length.

    Examples
    --------
    >>> expression_to_float("1/2")
    0.5
    >>> expression_to_float("9**9**9")
    nan
    """
    value = to_float(obj)
    if not isinstance(obj, str) or not math.isnan(value):
        return value

    s = obj.strip()
    if not _EXPRESSION_RE.match(s) or "**" in s or ".." in s:
        return math.nan
    if any(name not in _EXPRESSION_NAMES for name in _NAME_RE.findall(s)):
        return math.nan
    try:
        result = sp.sympify(s).evalf()
    except (sp.SympifyError, TypeError, ValueError, ZeroDivisionError):
        return math.nan
    if not result.is_real or not result.is_number:
        return math.nan
    try:
        return float(result)
    except OverflowError:
        return math.nan
