# tests/test_framing.py

import pytest

from level_exploder.core.errors import NoGeometryFound
from level_exploder.core.framing import (
    COMBINED_VIEW_NAME,
    camera_orientation,
    frame_combined,
    frame_levels,
    slab_heights,
)
from level_exploder.core.levels import Level
from level_exploder.core.math_utils import BoundingBox, dot, length

BUILDING = BoundingBox((0, 0, 0), (20, 20, 30))


def _levels():
    return [Level("L1", 0.0), Level("L2", 10.0), Level("L3", 25.0)]


def test_slab_heights_use_next_level_and_default_top():
    assert slab_heights(_levels(), 10.0) == [10.0, 15.0, 10.0]


def test_frame_levels_section_boxes():
    frames = frame_levels(_levels(), BUILDING, 10.0, 5.0, pad=1.0)

    assert [f.level.name for f in frames] == ["L1", "L2", "L3"]
    assert [(f.section_box.min[2], f.section_box.max[2]) for f in frames] == [
        (-1.0, 11.0),
        (9.0, 26.0),
        (24.0, 36.0),
    ]
    for f in frames:
        assert f.section_box.min[:2] == (-5.0, -5.0)
        assert f.section_box.max[:2] == (25.0, 25.0)


def test_frame_levels_camera_is_orthonormal_and_shared():
    frames = frame_levels(_levels(), BUILDING, 10.0, 5.0)
    cam = frames[0].camera

    assert dot(cam.forward, cam.up) == pytest.approx(0.0, abs=1e-9)
    assert length(cam.forward) == pytest.approx(1.0, abs=1e-9)
    assert length(cam.up) == pytest.approx(1.0, abs=1e-9)
    assert cam.up[2] > 0
    assert all(f.camera_eye == cam.eye for f in frames)
    assert all(f.camera_forward == cam.forward for f in frames)


def test_frame_levels_camera_looks_back_at_model():
    cam = camera_orientation((-1, -1, 1), 100.0)
    assert length(cam.eye) == pytest.approx(100.0)
    # forward points from the eye towards the origin
    assert dot(cam.forward, cam.eye) == pytest.approx(-100.0)


def test_frame_levels_resorts_unordered_input():
    levels = list(reversed(_levels()))
    frames = frame_levels(levels, BUILDING, 10.0, 5.0)
    assert [f.level.name for f in frames] == ["L1", "L2", "L3"]
    assert [f.slab_height for f in frames] == [10.0, 15.0, 10.0]


def test_frame_levels_single_level_uses_default_top_height():
    frames = frame_levels([Level("Ground", 3.0)], BUILDING, 12.0, 0.0, pad=0.0)
    assert len(frames) == 1
    assert frames[0].section_box.to_tuple() == (0.0, 0.0, 3.0, 20.0, 20.0, 15.0)


def test_frame_levels_empty_is_empty_even_without_bounds():
    assert frame_levels([], None, 10.0, 5.0) == []


def test_frame_levels_without_bounds_raises():
    with pytest.raises(NoGeometryFound):
        frame_levels(_levels(), None, 10.0, 5.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"default_top_height": 0.0, "margin": 5.0},
        {"default_top_height": 10.0, "margin": -1.0},
        {"default_top_height": 10.0, "margin": 5.0, "pad": -0.5},
    ],
)
def test_frame_levels_rejects_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        frame_levels(_levels(), BUILDING, **kwargs)


def test_vertical_eye_direction_rejected():
    with pytest.raises(ValueError):
        camera_orientation((0, 0, 1), 100.0)


def test_view_name_and_to_dict():
    frame = frame_levels(_levels(), BUILDING, 10.0, 5.0)[1]
    assert frame.view_name == "Level L2 - Exploded View"
    d = frame.to_dict()
    assert d["section_box"] == (-5.0, -5.0, 9.0, 25.0, 25.0, 26.0)
    assert d["slab_height"] == 15.0


def test_frame_combined_spans_all_levels_plus_spacing():
    combined = frame_combined(_levels(), BUILDING, spacing=20.0, margin=10.0, pad=5.0)

    assert combined.view_name == COMBINED_VIEW_NAME
    assert [lvl.name for lvl in combined.levels] == ["L1", "L2", "L3"]
    # z: [0 - 5, 25 + 2 * 20 + 5]
    assert combined.section_box.to_tuple() == (-10.0, -10.0, -5.0, 30.0, 30.0, 70.0)
    assert length(combined.camera.eye) == pytest.approx(500.0)


def test_frame_combined_empty_and_missing_bounds():
    assert frame_combined([], None) is None
    with pytest.raises(NoGeometryFound):
        frame_combined(_levels(), None)
