# tests/test_displacement.py

import pytest

from level_exploder.core.displacement import (
    MAX_ELEVATION_FT,
    levels_in_range,
    plan_displacement,
    validate_elevation,
)
from level_exploder.core.errors import OutOfRangeElevation
from level_exploder.core.levels import Level


def _levels():
    return [Level("L2", 10.0, level_id=2), Level("L1", 0.0, level_id=1), Level("Roof", 40.0, level_id=3)]


def test_plan_displacement_moves_every_level():
    changes = plan_displacement(_levels(), 2.5)

    assert [c.level.name for c in changes] == ["L1", "L2", "Roof"]
    assert [c.new_elevation for c in changes] == [2.5, 12.5, 42.5]
    assert all(c.delta == pytest.approx(2.5) for c in changes)


def test_negative_displacement():
    changes = plan_displacement(_levels(), -5.0)
    assert [c.new_elevation for c in changes] == [-5.0, 5.0, 35.0]


def test_out_of_range_is_all_or_nothing():
    with pytest.raises(OutOfRangeElevation) as ei:
        plan_displacement(_levels(), MAX_ELEVATION_FT - 20.0)

    err = ei.value
    assert err.level.name == "Roof"
    assert err.elevation == pytest.approx(1020.0)
    assert "mm" in str(err)
    assert "Roof" in str(err)


def test_band_edges_are_inclusive():
    assert validate_elevation(1000.0)
    assert validate_elevation(-1000.0)
    assert not validate_elevation(1000.0001)
    changes = plan_displacement([Level("Top", 990.0)], 10.0)
    assert changes[0].new_elevation == 1000.0


def test_empty_levels_plan_nothing():
    assert plan_displacement([], 3.0) == []


def test_change_to_dict():
    change = plan_displacement([Level("L1", 0.0, level_id=7)], 1.0)[0]
    assert change.to_dict() == {
        "level": "L1",
        "level_id": 7,
        "old_elevation": 0.0,
        "new_elevation": 1.0,
        "delta": 1.0,
    }


def test_levels_in_range_inclusive_and_sorted():
    names = [lvl.name for lvl in levels_in_range(_levels(), 0.0, 10.0)]
    assert names == ["L1", "L2"]
    assert levels_in_range(_levels(), 50.0, 60.0) == []
