"""
Level elevation displacement planning.

Computes the new elevation for every selected level before anything is
written to the host. A plan is all-or-nothing: if any displaced elevation
leaves the allowed band, OutOfRangeElevation is raised and no plan is
returned.
"""

from .errors import OutOfRangeElevation
from .levels import sort_levels
from .units import feet_to_mm

MIN_ELEVATION_FT = -1000.0
MAX_ELEVATION_FT = 1000.0


class ElevationChange:
    """Planned elevation change for one level (feet)."""

    __slots__ = ("level", "old_elevation", "new_elevation")

    def __init__(self, level, old_elevation, new_elevation):
        self.level = level
        self.old_elevation = float(old_elevation)
        self.new_elevation = float(new_elevation)

    @property
    def delta(self):
        return self.new_elevation - self.old_elevation

    def to_dict(self):
        return {
            "level": self.level.name,
            "level_id": self.level.level_id,
            "old_elevation": self.old_elevation,
            "new_elevation": self.new_elevation,
            "delta": self.delta,
        }

    def __repr__(self):
        return "ElevationChange({!r}: {:.3f} -> {:.3f})".format(
            self.level.name, self.old_elevation, self.new_elevation
        )


def validate_elevation(elevation, min_elevation=MIN_ELEVATION_FT, max_elevation=MAX_ELEVATION_FT):
    """Check an elevation (feet) lies within [min_elevation, max_elevation]."""
    return min_elevation <= elevation <= max_elevation


def plan_displacement(
    levels,
    displacement,
    min_elevation=MIN_ELEVATION_FT,
    max_elevation=MAX_ELEVATION_FT,
):
    """Plan moving every level by the same displacement.

    Args:
        levels: levels to move
        displacement: offset in feet (may be negative)
        min_elevation, max_elevation: allowed band for resulting elevations (feet)

    Returns:
        list of ElevationChange ascending by current elevation ([] for no levels)

    Raises:
        OutOfRangeElevation: a resulting elevation is outside the band

    Example:
        >>> from level_exploder.core.levels import Level
        >>> [c.new_elevation for c in plan_displacement([Level("L1", 0.0)], 2.5)]
        [2.5]
    """
    changes = []
    for lvl in sort_levels(levels):
        new_elevation = lvl.elevation + float(displacement)
        if not validate_elevation(new_elevation, min_elevation, max_elevation):
            raise OutOfRangeElevation(
                "New elevation {:.2f} mm for level {!r} is outside the allowed range".format(
                    feet_to_mm(new_elevation), lvl.name
                ),
                level=lvl,
                elevation=new_elevation,
            )
        changes.append(ElevationChange(lvl, lvl.elevation, new_elevation))
    return changes


def levels_in_range(levels, min_elevation, max_elevation):
    """Levels whose elevation lies in the inclusive band, ascending."""
    return [
        lvl
        for lvl in sort_levels(levels)
        if min_elevation <= lvl.elevation <= max_elevation
    ]
