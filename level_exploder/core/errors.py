# level_exploder/core/errors.py
"""
Typed failures raised by the layout engine.

Empty input is not an error: empty level/frame sequences produce empty
results. Invalid numeric parameters raise ValueError.
"""


class LevelLayoutError(Exception):
    """Base class for layout engine failures."""


class NoGeometryFound(LevelLayoutError):
    """Aggregation yielded no bounding box, so framing cannot proceed."""


class InvalidOrdering(LevelLayoutError):
    """Levels or frames are not ascending by elevation where required."""


class OutOfRangeElevation(LevelLayoutError):
    """A displaced elevation falls outside the allowed band.

    Attributes:
        level: the offending Level
        elevation: resulting elevation in feet
    """

    def __init__(self, message, level=None, elevation=None):
        super().__init__(message)
        self.level = level
        self.elevation = elevation
