from __future__ import annotations

import pytest

from termplot_live.viewport import Viewport, ViewportModel


def test_zoom_defaults_to_midpoint_and_narrows_range() -> None:
    model = ViewportModel(Viewport(0, 10, -4, 4))

    model.zoom(2)

    assert model.current == Viewport(2.5, 7.5, -2.0, 2.0)


def test_zoom_about_explicit_center_recenters() -> None:
    model = ViewportModel(Viewport(0, 10, 0, 10))

    model.zoom(0.5, center_x=1.0, center_y=2.0)

    assert model.current == Viewport(-9.0, 11.0, -8.0, 12.0)


def test_zoom_keeps_bounds_ordered_for_negative_factor() -> None:
    vp = Viewport(0, 10, 0, 4).zoomed(-2)

    assert vp.x_min <= vp.x_max
    assert vp.y_min <= vp.y_max
    assert (vp.width, vp.height) == (5.0, 2.0)


def test_zero_zoom_factor_is_not_guarded() -> None:
    model = ViewportModel(Viewport(0, 1, 0, 1))

    with pytest.raises(ZeroDivisionError):
        model.zoom(0)


def test_pan_translates_without_resizing() -> None:
    model = ViewportModel(Viewport(0, 10, 0, 5))

    model.pan(3, -1)

    assert model.current == Viewport(3, 13, -1, 4)
    assert (model.current.width, model.current.height) == (10, 5)


def test_zoom_and_pan_are_silent_noops_when_disabled_or_unset() -> None:
    changes: list[Viewport] = []
    unset = ViewportModel(on_change=changes.append)
    unset.zoom(2)
    unset.pan(1, 1)
    assert unset.current is None

    disabled = ViewportModel(Viewport(0, 1, 0, 1), enabled=False, on_change=changes.append)
    disabled.zoom(2)
    disabled.pan(1, 1)
    assert disabled.current == Viewport(0, 1, 0, 1)
    assert changes == []


def test_set_viewport_notifies_even_without_initial() -> None:
    changes: list[Viewport] = []
    model = ViewportModel(on_change=changes.append)

    model.set_viewport(Viewport(1, 2, 3, 4))
    model.pan(1, 0)

    assert changes == [Viewport(1, 2, 3, 4), Viewport(2, 3, 3, 4)]


def test_reset_restores_initial_and_notifies() -> None:
    changes: list[Viewport] = []
    initial = Viewport(0, 10, 0, 10)
    model = ViewportModel(initial, on_change=changes.append)

    model.zoom(4)
    model.reset_viewport()

    assert model.current == initial
    assert changes[-1] == initial


def test_reset_without_initial_clears_and_stays_silent() -> None:
    changes: list[Viewport] = []
    model = ViewportModel(on_change=changes.append)
    model.set_viewport(Viewport(0, 1, 0, 1))
    changes.clear()

    model.reset_viewport()

    assert model.current is None
    assert changes == []
