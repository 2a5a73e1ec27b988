from __future__ import annotations

import sys
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

_START = Path(__file__).resolve().parent
_repo_root = _START
while _repo_root != _repo_root.parent and not (_repo_root / "termplot_live" / "__init__.py").exists():
    _repo_root = _repo_root.parent

sys.path.insert(0, str(_repo_root))


class FakePlot:
    """Plot handle recording the stages attached to it."""

    def __init__(self, data: list, aes: Any, stages: tuple = ()) -> None:
        self.data = data
        self.aes = aes
        self.stages = stages

    def _with(self, kind: str, value: Any) -> "FakePlot":
        return FakePlot(self.data, self.aes, (*self.stages, (kind, value)))

    def with_geom(self, geom: Any) -> "FakePlot":
        return self._with("geom", geom)

    def with_scale(self, scale: Any) -> "FakePlot":
        return self._with("scale", scale)

    def with_coord(self, coord: Any) -> "FakePlot":
        return self._with("coord", coord)

    def with_facet(self, facet: Any) -> "FakePlot":
        return self._with("facet", facet)

    def with_theme(self, theme: Any) -> "FakePlot":
        return self._with("theme", theme)

    def with_labels(self, labels: Any) -> "FakePlot":
        return self._with("labels", labels)


class FakeEngine:
    """Plot engine that renders a one-line summary and rejects bad sizes."""

    def __init__(self) -> None:
        self.builds: list[FakePlot] = []
        self.renders: list[tuple[FakePlot, Any]] = []
        self.fail: Exception | None = None

    def build(self, data, aes) -> FakePlot:
        plot = FakePlot(list(data), aes)
        self.builds.append(plot)
        return plot

    def render(self, plot: FakePlot, options) -> str:
        self.renders.append((plot, options))
        if self.fail is not None:
            raise self.fail
        if options.width <= 0 or options.height <= 0:
            raise ValueError(f"invalid size {options.width}x{options.height}")
        return f"{len(plot.data)} records @ {options.width}x{options.height}"


class FakeThreadTimer:
    def __init__(self, interval: float, function, args=None, kwargs=None) -> None:
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_timers():
    """Replace ``threading.Timer`` in the debouncer with recorded fakes."""
    created: list[FakeThreadTimer] = []

    def _factory(*args, **kwargs) -> FakeThreadTimer:
        timer = FakeThreadTimer(*args, **kwargs)
        created.append(timer)
        return timer

    with patch("termplot_live.debouncing.threading.Timer", _factory):
        yield created
