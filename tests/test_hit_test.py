from pagemark.core.annotations import AnnotationDraft, AnnotationKind, ResizeHandle, Viewport
from pagemark.core.projection import hit_test, item_bounds, project
from pagemark.core.projection.hit_test import STAMP_SIZE_PX

VIEWPORT = Viewport(800, 1000)


def _add(store, kind, x, y, width=0, height=0, **fields):
    return store.add(AnnotationDraft(kind, 1, x, y, width, height, fields), VIEWPORT)


def _plan(store, selected=None):
    return project(store, 1, selected, None, frozenset())


def test_empty_canvas(store):
    _add(store, AnnotationKind.POINT, 100, 100)
    assert hit_test(_plan(store), 500, 500, VIEWPORT) == (None, None)


def test_point_is_centred_on_anchor(store):
    point = _add(store, AnnotationKind.POINT, 100, 100, size_px=12)
    assert hit_test(_plan(store), 95, 95, VIEWPORT) == (point, None)
    assert hit_test(_plan(store), 90, 90, VIEWPORT) == (None, None)


def test_stamp_is_centred_on_anchor(store):
    stamp = _add(store, AnnotationKind.STAMP, 200, 200)
    x, y, w, h = item_bounds(store.get(stamp), VIEWPORT)
    assert (w, h) == STAMP_SIZE_PX
    assert (x + w / 2, y + h / 2) == (200, 200)


def test_text_hangs_from_anchor_with_custom_measure(store):
    text = _add(store, AnnotationKind.TEXT, 100, 100, text="abc")
    plan = _plan(store)
    measure = lambda ann: (50, 20)
    assert hit_test(plan, 140, 115, VIEWPORT, measure) == (text, None)
    assert hit_test(plan, 95, 95, VIEWPORT, measure) == (None, None)


def test_topmost_box_wins(store):
    _add(store, AnnotationKind.HIGHLIGHT, 100, 100, 200, 200)
    upper = _add(store, AnnotationKind.WHITEOUT, 150, 150, 200, 200)
    assert hit_test(_plan(store), 200, 200, VIEWPORT)[0] == upper


def test_handles_of_selected_image(store):
    image = _add(store, AnnotationKind.IMAGE, 100, 100, 200, 100, image_bytes=b"", mime_type="image/png")

    assert hit_test(_plan(store), 300, 200, VIEWPORT) == (image, None)
    assert hit_test(_plan(store, image), 300, 200, VIEWPORT) == (image, ResizeHandle.SE)
    assert hit_test(_plan(store, image), 98, 102, VIEWPORT) == (image, ResizeHandle.NW)
    assert hit_test(_plan(store, image), 303, 97, VIEWPORT) == (image, ResizeHandle.NE)
    assert hit_test(_plan(store, image), 99, 201, VIEWPORT) == (image, ResizeHandle.SW)


def test_handles_sit_above_other_bodies(store):
    image = _add(store, AnnotationKind.IMAGE, 100, 100, 200, 100, image_bytes=b"", mime_type="image/png")
    _add(store, AnnotationKind.HIGHLIGHT, 250, 150, 200, 200)
    assert hit_test(_plan(store, image), 300, 200, VIEWPORT) == (image, ResizeHandle.SE)


def test_no_hits_without_viewport(store):
    _add(store, AnnotationKind.POINT, 100, 100)
    assert hit_test(_plan(store), 100, 100, Viewport()) == (None, None)
