# tests/test_pipeline.py

import json

import pytest

from level_exploder.config import Config
from level_exploder.core.diagnostics import Diagnostics
from level_exploder.core.errors import NoGeometryFound, OutOfRangeElevation
from level_exploder.core.levels import Level
from level_exploder.core.math_utils import BoundingBox
from level_exploder.core.sheet_layout import SheetRect
from level_exploder.pipeline import (
    BOUNDS_FROM_ELEMENTS,
    BOUNDS_FROM_FALLBACK,
    STATUS_EMPTY,
    STATUS_OK,
    plan_exploded_views,
    plan_level_displacement,
)

CANVAS = SheetRect(0.0, 0.0, 10.0, 100.0)


class _FakeStore(object):
    """In-memory level store: {level name: [BoundingBox | None, ...]}."""

    def __init__(self, levels, boxes_by_name=None, fail_on=None):
        self._levels = list(levels)
        self._boxes = boxes_by_name or {}
        self._fail_on = fail_on

    def get_ordered_levels(self):
        return list(self._levels)

    def element_boxes_near_level(self, level):
        if level.name == self._fail_on:
            raise RuntimeError("collector failed")
        return list(self._boxes.get(level.name, []))


def _box(xmin, ymin, zmin, xmax, ymax, zmax):
    return BoundingBox((xmin, ymin, zmin), (xmax, ymax, zmax))


def _store(**kwargs):
    levels = [Level("L1", 0.0, 1), Level("L2", 10.0, 2), Level("L3", 25.0, 3)]
    boxes = {
        "L1": [_box(0, 0, 0, 20, 10, 10), None],
        "L2": [_box(0, 5, 10, 15, 20, 25)],
        "L3": [_box(2, 2, 25, 18, 18, 30)],
    }
    return _FakeStore(levels, boxes, **kwargs)


def test_plan_exploded_views_builds_complete_plan():
    diag = Diagnostics()
    plan = plan_exploded_views(_store(), CANVAS, cfg=Config(), diag=diag)

    assert plan.status == STATUS_OK
    assert not plan.is_empty
    assert plan.bounds_source == BOUNDS_FROM_ELEMENTS
    assert plan.building_bounds.to_tuple() == (0.0, 0.0, 0.0, 20.0, 20.0, 30.0)

    assert [f.level.name for f in plan.frames] == ["L1", "L2", "L3"]
    assert [(f.section_box.min[2], f.section_box.max[2]) for f in plan.frames] == [
        (-1.0, 11.0),
        (9.0, 26.0),
        (24.0, 36.0),
    ]
    assert plan.frames[0].section_box.min[:2] == (-5.0, -5.0)
    assert plan.frames[0].section_box.max[:2] == (25.0, 25.0)

    assert [s.position[1] for s in plan.sheet.slots] == pytest.approx([35.0, 50.0, 65.0])
    assert plan.sheet.annotations[1].text == "Total Levels: 3"
    assert plan.combined is not None
    assert not diag.has_errors()


def test_per_level_bounds_are_kept():
    plan = plan_exploded_views(_store(), CANVAS)
    by_name = {lvl.name: box for lvl, box in plan.level_bounds}
    assert by_name["L1"].to_tuple() == (0.0, 0.0, 0.0, 20.0, 10.0, 10.0)
    assert by_name["L3"].to_tuple() == (2.0, 2.0, 25.0, 18.0, 18.0, 30.0)


def test_elements_without_geometry_are_counted():
    diag = Diagnostics()
    plan_exploded_views(_store(), CANVAS, diag=diag)
    skipped = [
        ev for ev in diag.events
        if ev["callsite"] == "_level_envelope" and ev["level_name"] == "L1"
    ]
    assert len(skipped) == 1
    assert skipped[0]["extra"]["without_geometry"] == 1


def test_unordered_store_is_resorted_and_recorded():
    levels = [Level("L3", 25.0), Level("L1", 0.0), Level("L2", 10.0)]
    boxes = {"L1": [_box(0, 0, 0, 20, 20, 30)]}
    diag = Diagnostics()
    plan = plan_exploded_views(_FakeStore(levels, boxes), CANVAS, diag=diag)

    assert [lvl.name for lvl in plan.levels] == ["L1", "L2", "L3"]
    assert any("re-sorted" in ev["message"] for ev in diag.events)


def test_level_without_geometry_is_warned_not_fatal():
    levels = [Level("L1", 0.0), Level("Roof", 40.0)]
    boxes = {"L1": [_box(0, 0, 0, 20, 20, 10)]}
    diag = Diagnostics()
    plan = plan_exploded_views(_FakeStore(levels, boxes), CANVAS, diag=diag)

    assert len(plan.frames) == 2
    warns = [ev for ev in diag.events if ev["severity"] == "WARN"]
    assert [ev["level_name"] for ev in warns] == ["Roof"]


def test_no_levels_gives_empty_plan():
    plan = plan_exploded_views(_FakeStore([]), CANVAS)
    assert plan.status == STATUS_EMPTY
    assert plan.is_empty
    assert plan.frames == []
    assert plan.sheet is None


def test_no_geometry_raises_and_records():
    diag = Diagnostics()
    store = _FakeStore([Level("L1", 0.0)], {"L1": [None, None]})

    with pytest.raises(NoGeometryFound):
        plan_exploded_views(store, CANVAS, diag=diag)
    assert diag.has_errors()


def test_no_geometry_uses_fallback_bounds():
    cfg = Config(fallback_bounds=(0, 0, 0, 30, 30, 10))
    diag = Diagnostics()
    plan = plan_exploded_views(_FakeStore([Level("L1", 0.0)]), CANVAS, cfg=cfg, diag=diag)

    assert plan.bounds_source == BOUNDS_FROM_FALLBACK
    assert plan.frames[0].section_box.to_tuple() == (-5.0, -5.0, -1.0, 35.0, 35.0, 11.0)
    assert not diag.has_errors()


def test_store_failure_is_recorded_and_reraised():
    diag = Diagnostics()
    with pytest.raises(RuntimeError):
        plan_exploded_views(_store(fail_on="L2"), CANVAS, diag=diag)

    errors = [ev for ev in diag.events if ev["severity"] == "ERROR"]
    assert errors[0]["level_name"] == "L2"
    assert errors[0]["exc_type"] == "RuntimeError"


def test_combined_view_can_be_disabled():
    plan = plan_exploded_views(_store(), CANVAS, cfg=Config(combined_enabled=False))
    assert plan.combined is None


def test_plan_to_dict_is_json_serializable():
    plan = plan_exploded_views(_store(), CANVAS)
    d = json.loads(json.dumps(plan.to_dict()))
    assert d["status"] == "ok"
    assert [row["level"] for row in d["level_bounds"]] == ["L1", "L2", "L3"]
    assert len(d["sheet"]["slots"]) == 3


def test_plan_level_displacement_converts_mm():
    levels = [Level("L1", 0.0, 1), Level("L2", 10.0, 2)]
    changes = plan_level_displacement(levels, displacement_mm=304.8)
    assert [c.new_elevation for c in changes] == pytest.approx([1.0, 11.0])


def test_plan_level_displacement_defaults_to_config():
    cfg = Config(displacement_mm=-609.6)
    changes = plan_level_displacement([Level("L1", 5.0)], cfg=cfg)
    assert changes[0].new_elevation == pytest.approx(3.0)


def test_plan_level_displacement_rejects_out_of_band_offset():
    diag = Diagnostics()
    with pytest.raises(ValueError):
        plan_level_displacement([Level("L1", 0.0)], diag=diag, displacement_mm=200000.0)
    assert diag.has_errors()


def test_plan_level_displacement_out_of_range_applies_nothing():
    diag = Diagnostics()
    levels = [Level("L1", 0.0), Level("High", 990.0)]
    with pytest.raises(OutOfRangeElevation):
        plan_level_displacement(levels, diag=diag, displacement_mm=30 * 304.8)

    errors = [ev for ev in diag.events if ev["severity"] == "ERROR"]
    assert errors[0]["level_name"] == "High"


def test_plan_level_displacement_no_levels():
    diag = Diagnostics()
    assert plan_level_displacement([], diag=diag) == []
    assert not diag.has_errors()


def test_duplicate_levels_keep_their_own_bounds():
    levels = [Level("L1", 0.0), Level("L1", 0.0)]
    boxes = {"L1": [_box(0, 0, 0, 20, 20, 10)]}
    plan = plan_exploded_views(_FakeStore(levels, boxes), CANVAS)

    assert len(plan.frames) == 2
    assert len(plan.level_bounds) == 2
    assert len(plan.to_dict()["level_bounds"]) == 2


def test_framing_failure_is_recorded_and_reraised():
    cfg = Config()
    # bypasses constructor validation
    cfg.eye_direction = (0.0, 0.0, 1.0)
    diag = Diagnostics()

    with pytest.raises(ValueError):
        plan_exploded_views(_store(), CANVAS, cfg=cfg, diag=diag)

    errors = [ev for ev in diag.events if ev["severity"] == "ERROR"]
    assert [ev["phase"] for ev in errors] == ["framing"]
    assert errors[0]["exc_type"] == "ValueError"
