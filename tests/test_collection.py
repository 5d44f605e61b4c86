# tests/test_collection.py

import pytest

from level_exploder.core.diagnostics import Diagnostics
from level_exploder.core.levels import Level
from level_exploder.core.sheet_layout import SheetRect
from level_exploder.revit.collection import (
    RevitLevelStore,
    _element_id_int,
    bbox_from_revit,
    level_from_revit,
    resolve_element_bbox,
)
from level_exploder.revit.views import apply_displacement, sheet_canvas


class _P(object):
    def __init__(self, x, y, z):
        self.X = x
        self.Y = y
        self.Z = z


class _UV(object):
    def __init__(self, u, v):
        self.U = u
        self.V = v


class _Identity(object):
    IsIdentity = True


class _BBox(object):
    def __init__(self, mn, mx, transform=None):
        self.Min = _P(*mn)
        self.Max = _P(*mx)
        self.Transform = transform


class _Id(object):
    def __init__(self, value):
        self.IntegerValue = value


class _StubElement(object):
    def __init__(self, bbox=None, fail=False):
        self._bbox = bbox
        self._fail = fail
        self.Id = _Id(77)

    def get_BoundingBox(self, view):
        if self._fail:
            raise RuntimeError("no geometry")
        return self._bbox


class _StubLevel(object):
    def __init__(self, name, elevation, eid):
        self.Name = name
        self.Elevation = elevation
        self.Id = _Id(eid)


def test_element_id_int_prefers_value():
    class _NewId(object):
        Value = 12

    assert _element_id_int(_NewId()) == 12
    assert _element_id_int(_Id(5)) == 5
    assert _element_id_int(None) is None


def test_bbox_from_revit_without_transform():
    box = bbox_from_revit(_BBox((0, 1, 2), (3, 4, 5)))
    assert box.to_tuple() == (0.0, 1.0, 2.0, 3.0, 4.0, 5.0)


def test_bbox_from_revit_identity_transform():
    box = bbox_from_revit(_BBox((0, 0, 0), (1, 1, 1), transform=_Identity()))
    assert box.to_tuple() == (0.0, 0.0, 0.0, 1.0, 1.0, 1.0)


def test_bbox_from_revit_none():
    assert bbox_from_revit(None) is None


def test_resolve_element_bbox_ok():
    elem = _StubElement(_BBox((-1, -1, 0), (1, 1, 3)))
    box = resolve_element_bbox(elem)
    assert box.to_tuple() == (-1.0, -1.0, 0.0, 1.0, 1.0, 3.0)


def test_resolve_element_bbox_missing_geometry_is_none():
    diag = Diagnostics()
    assert resolve_element_bbox(_StubElement(None), diag=diag) is None
    assert diag.to_dict()["num_events"] == 0


def test_resolve_element_bbox_failure_recorded_not_raised():
    diag = Diagnostics()
    box = resolve_element_bbox(
        _StubElement(fail=True),
        diag=diag,
        context={"level_name": "L1", "elem_id": 77},
    )
    assert box is None
    ev = diag.events[0]
    assert ev["severity"] == "ERROR"
    assert ev["callsite"] == "elem.get_BoundingBox(None)"
    assert ev["level_name"] == "L1"
    assert ev["elem_id"] == 77


def test_resolve_element_bbox_inverted_host_box_recorded():
    diag = Diagnostics()
    box = resolve_element_bbox(_StubElement(_BBox((5, 0, 0), (1, 1, 1))), diag=diag)
    assert box is None
    assert diag.events[0]["callsite"] == "bbox_from_revit"
    assert diag.events[0]["exc_type"] == "ValueError"


def test_level_from_revit():
    lvl = level_from_revit(_StubLevel("Level 2", 12.0, 311))
    assert lvl == Level("Level 2", 12.0, level_id=311)


def test_store_with_preset_levels_is_sorted():
    store = RevitLevelStore(None, levels=[Level("L2", 10.0), Level("L1", 0.0)])
    assert [lvl.name for lvl in store.get_ordered_levels()] == ["L1", "L2"]
    assert [lvl.name for lvl in store.levels_in_range(-1.0, 5.0)] == ["L1"]


def test_sheet_canvas_from_outline():
    class _Sheet(object):
        class Outline(object):
            Min = _UV(0.1, 0.2)
            Max = _UV(2.8, 1.9)

    canvas = sheet_canvas(_Sheet())
    assert isinstance(canvas, SheetRect)
    assert canvas.to_tuple() == pytest.approx((0.1, 0.2, 2.8, 1.9))


def test_apply_displacement_without_changes_touches_nothing():
    summary = apply_displacement(None, [], adjust_hosted=False, maintain_bounding_box=True)
    assert summary == {
        "levels": 0,
        "hosted_adjusted": 0,
        "hosted_skipped": 0,
        "adjust_hosted": False,
        "maintain_bounding_box": True,
    }


def test_level_without_host_id_collects_nothing_and_warns():
    diag = Diagnostics()
    detached = Level("Detached", 0.0)
    store = RevitLevelStore(None, diag=diag, levels=[detached])

    assert store.element_boxes_near_level(detached) == []
    warns = [ev for ev in diag.events if ev["severity"] == "WARN"]
    assert len(warns) == 1
    assert warns[0]["level_name"] == "Detached"
    assert warns[0]["callsite"] == "RevitLevelStore.element_boxes_near_level"
