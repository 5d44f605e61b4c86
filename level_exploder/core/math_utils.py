"""
Mathematical utilities for the level exploder.

Provides 3D vector helpers and the axis-aligned BoundingBox used for
element envelopes and section boxes. Points and vectors are plain
(x, y, z) tuples of floats.
"""

import math


def _as_point(p):
    pt = (float(p[0]), float(p[1]), float(p[2]))
    if not all(math.isfinite(c) for c in pt):
        raise ValueError("point coordinates must be finite: {}".format(pt))
    return pt


def vec_add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vec_sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_scale(a, s):
    return (a[0] * s, a[1] * s, a[2] * s)


def vec_neg(a):
    return (-a[0], -a[1], -a[2])


def dot(a, b):
    """Dot product of two 3D vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a, b):
    """Cross product a x b.

    Example:
        >>> cross((1, 0, 0), (0, 1, 0))
        (0, 0, 1)
    """
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(a):
    return math.sqrt(dot(a, a))


def normalize(a):
    """Return unit vector along a.

    Raises:
        ValueError: if a has zero length
    """
    n = length(a)
    if n == 0.0:
        raise ValueError("cannot normalize zero-length vector")
    return (a[0] / n, a[1] / n, a[2] / n)


class BoundingBox:
    """Axis-aligned 3D bounding box in model coordinates (feet).

    Immutable: expand() and the aggregation helpers return new boxes.

    Attributes:
        min: (x, y, z) lower corner
        max: (x, y, z) upper corner

    Example:
        >>> b = BoundingBox((0, 0, 0), (20, 20, 10))
        >>> b.width()
        20.0
        >>> b.expand(5, 5, 0).min
        (-5.0, -5.0, 0.0)
    """

    __slots__ = ("_min", "_max")

    def __init__(self, min_pt, max_pt):
        mn = _as_point(min_pt)
        mx = _as_point(max_pt)
        for axis, lo, hi in zip("xyz", mn, mx):
            if lo > hi:
                raise ValueError(
                    "BoundingBox min.{0}={1} exceeds max.{0}={2}".format(axis, lo, hi)
                )
        self._min = mn
        self._max = mx

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    @classmethod
    def from_points(cls, points):
        """Smallest box containing every point. Raises ValueError on no points."""
        pts = [_as_point(p) for p in points]
        if not pts:
            raise ValueError("from_points requires at least one point")
        return cls(
            (min(p[0] for p in pts), min(p[1] for p in pts), min(p[2] for p in pts)),
            (max(p[0] for p in pts), max(p[1] for p in pts), max(p[2] for p in pts)),
        )

    def width(self):
        """Extent along X."""
        return self._max[0] - self._min[0]

    def depth(self):
        """Extent along Y."""
        return self._max[1] - self._min[1]

    def height(self):
        """Extent along Z."""
        return self._max[2] - self._min[2]

    def center(self):
        return (
            (self._min[0] + self._max[0]) / 2.0,
            (self._min[1] + self._max[1]) / 2.0,
            (self._min[2] + self._max[2]) / 2.0,
        )

    def contains_point(self, p):
        """Check if point is inside box (inclusive)."""
        return all(lo <= v <= hi for lo, v, hi in zip(self._min, p, self._max))

    def expand(self, dx, dy, dz):
        """Return new box grown by (dx, dy, dz) on each side.

        Negative margins shrink the box; ValueError if that inverts an axis.
        """
        return expand(self, dx, dy, dz)

    def to_tuple(self):
        return self._min + self._max

    def __eq__(self, other):
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return self._min == other._min and self._max == other._max

    def __hash__(self):
        return hash((self._min, self._max))

    def __repr__(self):
        return "BoundingBox(min=({:.3f}, {:.3f}, {:.3f}), max=({:.3f}, {:.3f}, {:.3f}))".format(
            *(self._min + self._max)
        )


def aggregate(boxes):
    """Merge bounding boxes into one envelope.

    Args:
        boxes: iterable of BoundingBox (callers drop elements without geometry)

    Returns:
        BoundingBox covering every input, or None when boxes is empty

    Commentary:
        ✔ Pure min/max reduction, so order and grouping never change the result
        ✔ None is the "empty" envelope; framing turns it into NoGeometryFound

    Example:
        >>> aggregate([]) is None
        True
        >>> aggregate([BoundingBox((0, 0, 0), (1, 1, 1)),
        ...            BoundingBox((-1, 2, 0), (0, 3, 4))]).to_tuple()
        (-1.0, 0.0, 0.0, 1.0, 3.0, 4.0)
    """
    min_x = min_y = min_z = float("inf")
    max_x = max_y = max_z = float("-inf")
    found = 0

    for b in boxes:
        mn = b.min
        mx = b.max
        min_x = min(min_x, mn[0])
        min_y = min(min_y, mn[1])
        min_z = min(min_z, mn[2])
        max_x = max(max_x, mx[0])
        max_y = max(max_y, mx[1])
        max_z = max(max_z, mx[2])
        found += 1

    if found == 0:
        return None

    return BoundingBox((min_x, min_y, min_z), (max_x, max_y, max_z))


def expand(box, dx, dy, dz):
    """Grow box by dx/dy/dz on both sides of each axis."""
    mn = box.min
    mx = box.max
    return BoundingBox(
        (mn[0] - dx, mn[1] - dy, mn[2] - dz),
        (mx[0] + dx, mx[1] + dy, mx[2] + dz),
    )
