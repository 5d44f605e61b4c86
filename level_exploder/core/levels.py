"""
Level value type and ordering helpers.

Levels are read-only snapshots of host levels: name, elevation (feet above
the project datum) and an optional host identity.
"""

import math

from .errors import InvalidOrdering
from .units import format_elevation_mm


class Level:
    """Named horizontal reference elevation.

    Attributes:
        name: level name as shown in the host
        elevation: elevation in feet
        level_id: host element id (int) or None for detached levels

    Example:
        >>> lvl = Level("L2", 10.0, level_id=311)
        >>> lvl.display_elevation()
        '3048.00 mm'
    """

    __slots__ = ("_name", "_elevation", "_level_id")

    def __init__(self, name, elevation, level_id=None):
        self._name = str(name)
        self._elevation = float(elevation)
        if not math.isfinite(self._elevation):
            raise ValueError("Level {!r} elevation must be finite".format(self._name))
        self._level_id = level_id

    @property
    def name(self):
        return self._name

    @property
    def elevation(self):
        return self._elevation

    @property
    def level_id(self):
        return self._level_id

    def display_elevation(self):
        return format_elevation_mm(self._elevation)

    def with_elevation(self, elevation):
        """Copy of this level at a new elevation (same identity)."""
        return Level(self._name, elevation, level_id=self._level_id)

    def to_dict(self):
        return {
            "name": self._name,
            "elevation": self._elevation,
            "level_id": self._level_id,
        }

    def __eq__(self, other):
        if not isinstance(other, Level):
            return NotImplemented
        return (self._name, self._elevation, self._level_id) == (
            other._name,
            other._elevation,
            other._level_id,
        )

    def __hash__(self):
        return hash((self._name, self._elevation, self._level_id))

    def __repr__(self):
        return "Level(name={!r}, elevation={:.3f}, level_id={!r})".format(
            self._name, self._elevation, self._level_id
        )


def sort_levels(levels):
    """Return levels ascending by elevation.

    The sort is stable: equal elevations keep the caller's order.
    """
    return sorted(levels, key=lambda lvl: lvl.elevation)


def is_ascending(levels):
    """True if elevations never decrease along the sequence."""
    seq = list(levels)
    return all(a.elevation <= b.elevation for a, b in zip(seq, seq[1:]))


def require_ascending(levels):
    """Return levels as a list, raising InvalidOrdering if not ascending."""
    seq = list(levels)
    for i, (a, b) in enumerate(zip(seq, seq[1:])):
        if a.elevation > b.elevation:
            raise InvalidOrdering(
                "Level {!r} ({}) precedes lower level {!r} ({}) at index {}".format(
                    a.name, a.elevation, b.name, b.elevation, i + 1
                )
            )
    return seq
