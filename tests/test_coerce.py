from __future__ import annotations

import datetime as dt
import math
import time

import numpy as np
import pytest

from termplot_live.coerce import expression_to_float, to_float


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (3, 3.0),
        (2.5, 2.5),
        (True, 1.0),
        (False, 0.0),
        (None, 0.0),
        ("", 0.0),
        ("   ", 0.0),
        (" 4.25 ", 4.25),
        ("1e3", 1000.0),
        ("-.5", -0.5),
        ("7.", 7.0),
        ("0x1F", 31.0),
        ("0b101", 5.0),
        ("-Infinity", -math.inf),
        (np.int64(7), 7.0),
        (np.float32(0.5), 0.5),
    ],
)
def test_numeric_readings(value, expected) -> None:
    assert to_float(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value",
    ["abc", "pi", "E", "1/2", "2*pi", "inf", "nan", "1_000", "1..2", "9**9**9", complex(1, 0), object(), [1]],
)
def test_values_without_literal_reading_are_nan(value) -> None:
    assert math.isnan(to_float(value))


def test_datetime_converts_to_epoch_milliseconds() -> None:
    stamp = dt.datetime(2026, 3, 1, tzinfo=dt.timezone.utc)
    assert to_float(stamp) == pytest.approx(stamp.timestamp() * 1000.0)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1/2", 0.5), ("2*pi", 2 * math.pi), ("(1 + E) / 2", (1 + math.e) / 2), ("3.5", 3.5), (None, 0.0)],
)
def test_expression_readings(value, expected) -> None:
    assert expression_to_float(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value",
    ["x + 1", "sqrt(2)", "__import__('os')", "1/0", "2^3", "1..2"],
)
def test_expressions_outside_arithmetic_are_nan(value) -> None:
    assert math.isnan(expression_to_float(value))


@pytest.mark.parametrize("value", ["9**9**9", "9**9**9**9", "(9**9)**(9**9)"])
def test_power_towers_are_rejected_without_evaluation(value: str) -> None:
    start = time.perf_counter()

    assert math.isnan(to_float(value))
    assert math.isnan(expression_to_float(value))
    assert time.perf_counter() - start < 1.0
