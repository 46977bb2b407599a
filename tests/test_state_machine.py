import pytest

from pagemark.core.annotations import (
    AnnotationDraft,
    AnnotationKind,
    ResizeHandle,
    StampKind,
    Viewport,
)
from pagemark.core.interaction import Dragging, MarqueeSelecting, PointerEvent, Resizing
from pagemark.core.session import ToolMode

VIEWPORT = Viewport(800, 1000)


def _click(machine, x, y, target=None, handle=None):
    event = PointerEvent(x, y, target, handle)
    machine.pointer_down(event)
    machine.pointer_up(event)


def _drag(machine, start, end, target=None, handle=None, steps=3):
    machine.pointer_down(PointerEvent(start[0], start[1], target, handle))
    for i in range(1, steps + 1):
        x = start[0] + (end[0] - start[0]) * i / steps
        y = start[1] + (end[1] - start[1]) * i / steps
        machine.pointer_move(PointerEvent(x, y))
    machine.pointer_up(PointerEvent(end[0], end[1]))


def _add(session, kind, x, y, width=0, height=0, **fields):
    return session.store.add(AnnotationDraft(kind, session.page_number, x, y, width, height, fields), VIEWPORT)


# --- Placement ---

def test_point_tool_places_point_with_current_settings(machine, session):
    session.settings.color = "red"
    session.settings.size_px = 16
    _click(machine, 400, 500)

    (ann,) = session.store.list()
    assert ann.kind is AnnotationKind.POINT
    assert (ann.x_frac, ann.y_frac) == (0.5, 0.5)
    assert (ann.color, ann.size_px) == ("red", 16)
    assert machine.is_idle


def test_stamp_tool_places_stamp(machine, session):
    machine.set_tool_mode(ToolMode.STAMP)
    machine.set_stamp_kind(StampKind.REVIEW)
    _click(machine, 80, 100)

    (ann,) = session.store.list()
    assert ann.kind is AnnotationKind.STAMP
    assert ann.stamp_kind is StampKind.REVIEW


def test_annotations_land_on_displayed_page(machine, session):
    session.set_page_geometry(2, VIEWPORT)
    _click(machine, 10, 10)
    assert session.store.list()[0].page_number == 2


def test_input_is_ignored_before_a_document_is_loaded(machine, session):
    session.reset()
    _click(machine, 400, 500)
    assert len(session.store) == 0


def test_press_on_empty_canvas_clears_selection(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100)
    machine.set_tool_mode(ToolMode.HIGHLIGHT)
    machine.select(point)

    _click(machine, 700, 900)
    assert session.selected_id is None


# --- Marquee ---

@pytest.mark.parametrize("end", [(105, 300), (300, 105), (103, 102)])
def test_marquee_at_or_below_threshold_adds_nothing(machine, session, end):
    machine.set_tool_mode(ToolMode.HIGHLIGHT)
    _drag(machine, (100, 100), end)
    assert len(session.store) == 0
    assert machine.is_idle


def test_marquee_above_threshold_adds_box(machine, session):
    machine.set_tool_mode(ToolMode.WHITEOUT)
    _drag(machine, (100, 100), (106, 106))

    (ann,) = session.store.list()
    assert ann.kind is AnnotationKind.WHITEOUT
    assert ann.w_frac * 800 == pytest.approx(6)
    assert ann.h_frac * 1000 == pytest.approx(6)


def test_marquee_normalizes_reverse_drag(machine, session):
    machine.set_tool_mode(ToolMode.HIGHLIGHT)
    machine.pointer_down(PointerEvent(300, 300))
    machine.pointer_move(PointerEvent(100, 200))
    assert isinstance(machine.state, MarqueeSelecting)
    assert machine.marquee_rect == (100, 200, 200, 100)
    machine.pointer_up(PointerEvent(100, 200))

    (ann,) = session.store.list()
    assert (ann.x_frac, ann.y_frac) == (pytest.approx(0.125), pytest.approx(0.2))
    assert (ann.w_frac, ann.h_frac) == (pytest.approx(0.25), pytest.approx(0.1))


# --- Pass-through ---

@pytest.mark.parametrize("tool", [ToolMode.POINT, ToolMode.STAMP])
def test_marker_tools_pass_through_highlights(machine, session, tool):
    highlight = _add(session, AnnotationKind.HIGHLIGHT, 100, 100, 200, 100)
    before = session.store.get(highlight)
    machine.set_tool_mode(tool)

    _click(machine, 150, 150, target=highlight)

    assert len(session.store) == 2
    assert session.store.get(highlight) == before


def test_text_tool_passes_through_whiteouts(machine, session):
    whiteout = _add(session, AnnotationKind.WHITEOUT, 100, 100, 200, 100)
    machine.set_tool_mode(ToolMode.TEXT)
    machine.pointer_down(PointerEvent(150, 150, whiteout))
    assert machine.editor is not None
    assert machine.editor.is_new


def test_highlight_tool_grabs_existing_highlight(machine, session):
    highlight = _add(session, AnnotationKind.HIGHLIGHT, 100, 100, 200, 100)
    machine.set_tool_mode(ToolMode.HIGHLIGHT)
    machine.pointer_down(PointerEvent(150, 150, highlight))
    assert isinstance(machine.state, Dragging)
    assert session.selected_id == highlight


# --- Drag ---

def test_drag_moves_annotation_and_records_one_history_entry(machine, session):
    point = _add(session, AnnotationKind.POINT, 400, 500)
    depth = session.store.undo_depth

    _drag(machine, (402, 503), (452, 553), target=point, steps=5)

    ann = session.store.get(point)
    assert ann.x_frac == pytest.approx(450 / 800)
    assert ann.y_frac == pytest.approx(550 / 1000)
    assert session.store.undo_depth == depth + 1

    assert machine.undo()
    ann = session.store.get(point)
    assert (ann.x_frac, ann.y_frac) == (0.5, 0.5)


def test_press_and_release_without_motion_records_nothing(machine, session):
    point = _add(session, AnnotationKind.POINT, 400, 500)
    depth = session.store.undo_depth
    _click(machine, 400, 500, target=point)
    assert session.store.undo_depth == depth
    assert session.selected_id == point


def test_drag_may_leave_the_page(machine, session):
    point = _add(session, AnnotationKind.POINT, 10, 10)
    _drag(machine, (10, 10), (-80, -90), target=point)
    ann = session.store.get(point)
    assert ann.x_frac == pytest.approx(-0.1)
    assert ann.y_frac == pytest.approx(-0.09)


def test_escape_abandons_drag(machine, session):
    point = _add(session, AnnotationKind.POINT, 400, 500)
    depth = session.store.undo_depth
    machine.pointer_down(PointerEvent(400, 500, point))
    machine.pointer_move(PointerEvent(600, 700))

    assert machine.key_press("Escape")
    assert machine.is_idle
    ann = session.store.get(point)
    assert (ann.x_frac, ann.y_frac) == (0.5, 0.5)
    assert session.store.undo_depth == depth


# --- Resize ---

def _image(session, x=100, y=100, width=200, height=100):
    return _add(session, AnnotationKind.IMAGE, x, y, width, height, image_bytes=b"png", mime_type="image/png")


def _pixel_rect(ann):
    return (ann.x_frac * 800, ann.y_frac * 1000, ann.w_frac * 800, ann.h_frac * 1000)


def test_resize_from_corner_keeps_opposite_edges(machine, session):
    image = _image(session)
    _drag(machine, (300, 200), (350, 260), target=image, handle=ResizeHandle.SE)

    x, y, w, h = _pixel_rect(session.store.get(image))
    assert (x, y) == (pytest.approx(100), pytest.approx(100))
    assert (w, h) == (pytest.approx(250), pytest.approx(160))


def test_resize_from_nw_moves_top_left(machine, session):
    image = _image(session)
    _drag(machine, (100, 100), (60, 80), target=image, handle=ResizeHandle.NW)

    x, y, w, h = _pixel_rect(session.store.get(image))
    assert (x, y) == (pytest.approx(60), pytest.approx(80))
    assert x + w == pytest.approx(300)
    assert y + h == pytest.approx(200)


@pytest.mark.parametrize("handle, start, end", [
    (ResizeHandle.SE, (300, 200), (-500, -500)),
    (ResizeHandle.NW, (100, 100), (900, 900)),
    (ResizeHandle.NE, (300, 100), (0, 900)),
    (ResizeHandle.SW, (100, 200), (900, 0)),
])
def test_resize_never_shrinks_below_minimum(machine, session, handle, start, end):
    image = _image(session)
    machine.pointer_down(PointerEvent(start[0], start[1], image, handle))
    assert isinstance(machine.state, Resizing)
    machine.pointer_move(PointerEvent(*end))

    _, _, w, h = _pixel_rect(session.store.get(image))
    assert w >= 20 - 1e-9
    assert h >= 20 - 1e-9
    machine.pointer_up(PointerEvent(*end))
    _, _, w, h = _pixel_rect(session.store.get(image))
    assert w == pytest.approx(20)
    assert h == pytest.approx(20)


def test_resize_is_one_undo_step(machine, session):
    image = _image(session)
    depth = session.store.undo_depth
    _drag(machine, (300, 200), (400, 300), target=image, handle=ResizeHandle.SE, steps=6)
    assert session.store.undo_depth == depth + 1
    machine.undo()
    assert _pixel_rect(session.store.get(image)) == pytest.approx((100, 100, 200, 100))


def test_handle_on_marker_starts_drag(machine, session):
    point = _add(session, AnnotationKind.POINT, 400, 500)
    machine.pointer_down(PointerEvent(400, 500, point, ResizeHandle.SE))
    assert isinstance(machine.state, Dragging)


# --- Graph mode ---

def test_graph_mode_toggles_point_membership(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100)
    assert machine.set_graph_mode(True)

    _click(machine, 100, 100, target=point)
    assert session.graph_selection == {point}
    _click(machine, 100, 100, target=point)
    assert session.graph_selection == set()


def test_graph_mode_click_on_empty_canvas_adds_nothing(machine, session):
    machine.set_graph_mode(True)
    _click(machine, 300, 300)
    assert len(session.store) == 0


def test_graph_mode_requires_point_tool(machine, session):
    machine.set_tool_mode(ToolMode.TEXT)
    assert machine.set_graph_mode(True) is False
    assert session.graph_mode is False


def test_leaving_point_tool_disables_graph_mode_but_keeps_selection(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100)
    machine.set_graph_mode(True)
    _click(machine, 100, 100, target=point)

    machine.set_tool_mode(ToolMode.HIGHLIGHT)
    assert session.graph_mode is False
    assert session.graph_selection == {point}
    assert session.visible_graph_selection == frozenset()


# --- Keyboard ---

def test_delete_removes_selected_annotation(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100)
    _click(machine, 100, 100, target=point)

    assert machine.key_press("Delete")
    assert point not in session.store
    assert session.selected_id is None


def test_backspace_without_selection_is_ignored(machine, session):
    _add(session, AnnotationKind.POINT, 100, 100)
    assert machine.key_press("Backspace") is False
    assert len(session.store) == 1


@pytest.mark.parametrize("key, shift", [("z", True), ("y", False), ("Y", False)])
def test_redo_shortcuts(machine, session, key, shift):
    _click(machine, 100, 100)
    assert machine.key_press("z", ctrl=True)
    assert len(session.store) == 0
    assert machine.key_press(key, ctrl=True, shift=shift)
    assert len(session.store) == 1


def test_history_keys_ignored_mid_gesture(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100)
    machine.pointer_down(PointerEvent(100, 100, point))
    machine.pointer_move(PointerEvent(200, 200))

    assert machine.key_press("z", ctrl=True) is False
    assert machine.key_press("Delete") is False
    assert point in session.store


def test_undo_clears_selection(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100)
    machine.select(point)
    machine.undo()
    assert session.selected_id is None


def test_delete_annotation_by_id(machine, session):
    first = _add(session, AnnotationKind.POINT, 100, 100)
    second = _add(session, AnnotationKind.POINT, 200, 100)
    machine.select(first)
    assert machine.delete_annotation(second)
    assert session.selected_id == first
    assert machine.delete_annotation("missing") is False


def test_turning_the_page_drops_the_selection(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100, color="blue")
    machine.select(point)

    session.set_page_geometry(2, VIEWPORT)

    assert session.selected_id is None
    assert machine.key_press("Delete") is False
    assert machine.set_color("red") is False
    assert session.store.get(point).color == "blue"


def test_selection_made_for_the_page_being_opened_survives(machine, session):
    session.set_page_geometry(2, VIEWPORT)
    point = _add(session, AnnotationKind.POINT, 100, 100)
    session.set_page_geometry(1, VIEWPORT)
    machine.select(point)

    session.set_page_geometry(2, VIEWPORT)

    assert session.selected_id == point


# --- Style ---

def test_color_change_restyles_selected_point(machine, session):
    point = _add(session, AnnotationKind.POINT, 100, 100, color="blue", size_px=12)
    machine.select(point)
    depth = session.store.undo_depth

    assert machine.set_color("red")
    assert session.store.get(point).color == "red"
    assert session.settings.color == "red"
    assert session.store.undo_depth == depth + 1

    assert machine.set_color("red") is False
    assert session.store.undo_depth == depth + 1


def test_unknown_color_is_rejected(machine):
    with pytest.raises(ValueError):
        machine.set_color("green")


def test_size_and_font_apply_to_selected_text(machine, session):
    text = _add(session, AnnotationKind.TEXT, 100, 100, text="hi")
    machine.select(text)
    machine.set_size(20)
    machine.set_font("Arial")
    ann = session.store.get(text)
    assert (ann.size_px, ann.font_name) == (20, "Arial")


def test_style_does_not_touch_fixed_color_kinds(machine, session):
    highlight = _add(session, AnnotationKind.HIGHLIGHT, 100, 100, 50, 50)
    machine.select(highlight)
    assert machine.set_color("red") is False
    assert session.store.get(highlight).color == "yellow"


def test_stamp_kind_restyles_selected_stamp(machine, session):
    stamp = _add(session, AnnotationKind.STAMP, 100, 100)
    machine.select(stamp)
    assert machine.set_stamp_kind(StampKind.FIX)
    assert session.store.get(stamp).stamp_kind is StampKind.FIX


def test_comments_on_boxes_and_stamps(machine, session):
    highlight = _add(session, AnnotationKind.HIGHLIGHT, 100, 100, 50, 50)
    point = _add(session, AnnotationKind.POINT, 100, 100)
    assert machine.set_comment(highlight, "check this")
    assert session.store.get(highlight).comment == "check this"
    assert machine.set_comment(point, "nope") is False
    assert machine.set_comment(highlight, "check this") is False
