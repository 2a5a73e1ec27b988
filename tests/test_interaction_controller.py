from __future__ import annotations

from termplot_live.brush import BrushRect
from termplot_live.coerce import expression_to_float
from termplot_live.interaction import InteractionController
from termplot_live.viewport import Viewport

POINTS = [{"x": 1, "y": 1}, {"x": 5, "y": 5}, {"x": 10, "y": 10}]


def _recording_controller(**kwargs):
    events: dict[str, list] = {"selection": [], "viewport": [], "brush_end": []}
    ctl = InteractionController(
        on_selection_change=events["selection"].append,
        on_viewport_change=events["viewport"].append,
        on_brush_end=lambda rect, idx: events["brush_end"].append((rect, idx)),
        **kwargs,
    )
    return ctl, events


def test_defaults() -> None:
    ctl = InteractionController()

    assert ctl.hovered_index.value == -1
    assert ctl.selected_indices.value == []
    assert ctl.selection_mode.value == "single"
    assert ctl.viewport.value is None
    assert ctl.brush.value is None
    assert ctl.is_focused.value is False
    assert ctl.brushing is False


def test_hover_set_and_clear() -> None:
    ctl = InteractionController()
    seen: list[int] = []
    ctl.hovered_index.observe(lambda change: seen.append(change.new))

    ctl.set_hovered(2)
    ctl.clear_hover()

    assert seen == [2, -1]


def test_end_brush_replaces_selection_and_reports_canonical_rect() -> None:
    ctl, events = _recording_controller(selection_mode="brush")
    ctl.set_selected([2])
    events["selection"].clear()

    ctl.start_brush(6, 6)
    ctl.update_brush(0, 0)
    hit = ctl.end_brush(POINTS, "x", "y")

    assert hit == [0, 1]
    assert ctl.selected_indices.value == [0, 1]
    assert events["selection"] == [[0, 1]]
    assert events["brush_end"] == [(BrushRect(0, 0, 6, 6), [0, 1])]
    assert ctl.brush.value is None
    assert ctl.brushing is False


def test_end_brush_with_no_hits_still_replaces_selection() -> None:
    ctl, events = _recording_controller(selection_mode="brush")
    ctl.set_selected([0, 2])

    ctl.start_brush(20, 20)
    ctl.update_brush(30, 30)

    assert ctl.end_brush(POINTS, "x", "y") == []
    assert ctl.selected_indices.value == []
    assert events["brush_end"] == [(BrushRect(20, 20, 30, 30), [])]


def test_end_brush_without_drag_selects_nothing() -> None:
    ctl, events = _recording_controller(selection_mode="brush")
    ctl.set_selected([1])
    events["selection"].clear()

    assert ctl.end_brush(POINTS, "x", "y") == []
    assert ctl.selected_indices.value == [1]
    assert events["selection"] == []
    assert events["brush_end"] == []


def test_cancel_brush_keeps_selection() -> None:
    ctl, events = _recording_controller(selection_mode="brush")
    ctl.set_selected([1])

    ctl.start_brush(0, 0)
    ctl.update_brush(9, 9)
    ctl.cancel_brush()

    assert ctl.brush.value is None
    assert ctl.selected_indices.value == [1]
    assert events["brush_end"] == []


def test_start_brush_outside_brush_mode_is_ignored() -> None:
    ctl = InteractionController(selection_mode="multiple")

    ctl.start_brush(1, 1)
    ctl.update_brush(2, 2)

    assert ctl.brushing is False
    assert ctl.brush.value is None


def test_brush_mode_point_selection_behaves_like_multiple() -> None:
    ctl = InteractionController(selection_mode="brush")

    ctl.select(1)
    ctl.select(3)
    ctl.toggle_select(1)

    assert ctl.selected_indices.value == [3]


def test_leaving_brush_mode_cancels_drag() -> None:
    ctl = InteractionController(selection_mode="brush")
    ctl.start_brush(0, 0)

    ctl.set_selection_mode("multiple")

    assert ctl.brushing is False
    assert ctl.brush.value is None


def test_switching_to_none_clears_selection() -> None:
    ctl, events = _recording_controller(selection_mode="multiple")
    ctl.select(1)
    ctl.select(2)

    ctl.set_selection_mode("none")
    ctl.select(4)

    assert ctl.selection_mode.value == "none"
    assert ctl.selected_indices.value == []
    assert events["selection"][-1] == []


def test_viewport_callbacks_and_reset() -> None:
    initial = Viewport(0, 10, 0, 10)
    ctl, events = _recording_controller(initial_viewport=initial)

    ctl.zoom(2)
    ctl.pan(1, 0)
    ctl.reset_viewport()

    assert events["viewport"] == [Viewport(2.5, 7.5, 2.5, 7.5), Viewport(3.5, 8.5, 2.5, 7.5), initial]
    assert ctl.viewport.value == initial


def test_reset_without_initial_clears_viewport_silently() -> None:
    ctl, events = _recording_controller()
    ctl.set_viewport(Viewport(0, 1, 0, 1))
    events["viewport"].clear()

    ctl.reset_viewport()

    assert ctl.viewport.value is None
    assert events["viewport"] == []


def test_disabling_zoom_blocks_zoom_and_pan() -> None:
    initial = Viewport(0, 10, 0, 10)
    ctl, events = _recording_controller(initial_viewport=initial, enable_zoom=False)

    ctl.zoom(2)
    ctl.pan(1, 1)
    assert ctl.viewport.value == initial
    assert events["viewport"] == []

    ctl.enable_zoom = True
    ctl.pan(1, 1)
    assert ctl.viewport.value == Viewport(1, 11, 1, 11)


def test_repeated_hover_on_same_index_notifies_once() -> None:
    ctl = InteractionController()
    seen: list[int] = []
    ctl.hovered_index.observe(lambda change: seen.append(change.new))

    ctl.set_hovered(3)
    ctl.set_hovered(3)
    ctl.clear_hover()
    ctl.clear_hover()

    assert seen == [3, -1]
    assert ctl.hovered_index.value == -1


def test_end_brush_uses_configured_coercion() -> None:
    data = [{"x": "pi", "y": "1/2"}, {"x": "2", "y": "2"}]
    plain = InteractionController(selection_mode="brush")
    evaluated = InteractionController(selection_mode="brush", coerce=expression_to_float)

    for ctl in (plain, evaluated):
        ctl.start_brush(0, 0)
        ctl.update_brush(4, 4)

    assert plain.end_brush(data, "x", "y") == [1]
    assert evaluated.end_brush(data, "x", "y") == [0, 1]
