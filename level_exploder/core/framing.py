"""
Per-level framing for exploded isometric views.

Given levels ordered by elevation and the building envelope, computes one
section box per level (the slice between that level and the next) plus a
single isometric camera shared by every frame in the run. A combined
overview frame spanning all levels is also available.
"""

from .errors import NoGeometryFound
from .levels import sort_levels
from .math_utils import BoundingBox, cross, normalize, vec_neg, vec_scale

NOMINAL_UP = (0.0, 0.0, 1.0)

DEFAULT_EYE_DIRECTION = (-1.0, -1.0, 1.0)
DEFAULT_LEVEL_EYE_DISTANCE = 100.0
DEFAULT_COMBINED_EYE_DIRECTION = (1.0, 1.0, 1.0)
DEFAULT_COMBINED_EYE_DISTANCE = 500.0

COMBINED_VIEW_NAME = "Combined Exploded View"


class CameraOrientation:
    """Isometric camera: eye position plus orthonormal forward/up pair.

    Attributes:
        eye: eye position (unit eye direction scaled by distance)
        forward: unit view direction (towards the model)
        up: unit up vector, orthogonal to forward
    """

    __slots__ = ("eye", "forward", "up")

    def __init__(self, eye, forward, up):
        self.eye = tuple(eye)
        self.forward = tuple(forward)
        self.up = tuple(up)

    def to_dict(self):
        return {"eye": self.eye, "forward": self.forward, "up": self.up}

    def __repr__(self):
        return f"CameraOrientation(eye={self.eye}, forward={self.forward}, up={self.up})"


class LevelFrame:
    """Section box and camera for one level's exploded view.

    Attributes:
        level: Level being framed
        section_box: BoundingBox clipping the view
        camera: CameraOrientation (shared across a framing run)
        slab_height: vertical distance to the next level (or the default top height)
    """

    def __init__(self, level, section_box, camera, slab_height):
        self.level = level
        self.section_box = section_box
        self.camera = camera
        self.slab_height = float(slab_height)

    @property
    def camera_eye(self):
        return self.camera.eye

    @property
    def camera_forward(self):
        return self.camera.forward

    @property
    def camera_up(self):
        return self.camera.up

    @property
    def view_name(self):
        return "Level {} - Exploded View".format(self.level.name)

    def to_dict(self):
        return {
            "level": self.level.to_dict(),
            "view_name": self.view_name,
            "section_box": self.section_box.to_tuple(),
            "camera": self.camera.to_dict(),
            "slab_height": self.slab_height,
        }

    def __repr__(self):
        return f"LevelFrame(level={self.level.name!r}, section_box={self.section_box!r})"


class CombinedFrame:
    """Overview frame spanning every level of a framing run."""

    def __init__(self, levels, section_box, camera):
        self.levels = list(levels)
        self.section_box = section_box
        self.camera = camera

    @property
    def view_name(self):
        return COMBINED_VIEW_NAME

    def to_dict(self):
        return {
            "view_name": self.view_name,
            "levels": [lvl.name for lvl in self.levels],
            "section_box": self.section_box.to_tuple(),
            "camera": self.camera.to_dict(),
        }


def slab_heights(levels, default_top_height):
    """Vertical extent framed for each level.

    Args:
        levels: levels ascending by elevation
        default_top_height: height used for the topmost level (> 0)

    Returns:
        list of floats, one per level

    Example:
        >>> from level_exploder.core.levels import Level
        >>> slab_heights([Level("L1", 0), Level("L2", 10), Level("L3", 25)], 10.0)
        [10.0, 15.0, 10.0]
    """
    seq = list(levels)
    heights = []
    for i, lvl in enumerate(seq):
        if i + 1 < len(seq):
            heights.append(seq[i + 1].elevation - lvl.elevation)
        else:
            heights.append(float(default_top_height))
    return heights


def camera_orientation(eye_direction=DEFAULT_EYE_DIRECTION, distance=DEFAULT_LEVEL_EYE_DISTANCE):
    """Compute an isometric camera looking back along eye_direction.

    forward = normalize(-eye); up is the nominal Z-up re-orthogonalized
    against forward via forward x (up x forward), so forward . up == 0.

    Raises:
        ValueError: if eye_direction is zero or vertical (up is undefined)

    Example:
        >>> cam = camera_orientation((-1, -1, 1), 100.0)
        >>> round(cam.up[2], 6)
        0.816497
    """
    eye_unit = normalize(eye_direction)
    forward = normalize(vec_neg(eye_unit))
    try:
        up = normalize(cross(forward, cross(NOMINAL_UP, forward)))
    except ValueError as e:
        raise ValueError("eye_direction must not be vertical: {}".format(eye_direction)) from e
    return CameraOrientation(vec_scale(eye_unit, float(distance)), forward, up)


def frame_levels(
    levels,
    building_bounds,
    default_top_height,
    margin,
    pad=1.0,
    eye_direction=DEFAULT_EYE_DIRECTION,
    eye_distance=DEFAULT_LEVEL_EYE_DISTANCE,
):
    """Frame every level for an exploded view.

    Args:
        levels: levels to frame (re-sorted ascending by elevation)
        building_bounds: BoundingBox envelope of the building, or None
        default_top_height: slab height of the topmost level (> 0)
        margin: horizontal margin added around building_bounds (>= 0)
        pad: vertical pad below the level and above the slab (>= 0)
        eye_direction: camera eye direction (shared by all frames)
        eye_distance: camera eye distance

    Returns:
        list of LevelFrame ascending by elevation ([] for no levels)

    Raises:
        NoGeometryFound: building_bounds is None and there are levels to frame
        ValueError: invalid numeric parameters

    Commentary:
        ✔ Section box x/y = building envelope grown by margin
        ✔ Section box z = [elevation - pad, elevation + slab_height + pad]
        ✔ Camera computed once; identical across the returned frames
    """
    ordered = sort_levels(levels)
    if not ordered:
        return []

    if building_bounds is None:
        raise NoGeometryFound(
            "No bounding geometry for {} level(s); supply a fallback envelope".format(len(ordered))
        )
    if default_top_height <= 0:
        raise ValueError("default_top_height must be positive")
    if margin < 0:
        raise ValueError("margin must be non-negative")
    if pad < 0:
        raise ValueError("pad must be non-negative")

    camera = camera_orientation(eye_direction, eye_distance)
    mn = building_bounds.min
    mx = building_bounds.max

    frames = []
    for lvl, slab in zip(ordered, slab_heights(ordered, default_top_height)):
        section_box = BoundingBox(
            (mn[0] - margin, mn[1] - margin, lvl.elevation - pad),
            (mx[0] + margin, mx[1] + margin, lvl.elevation + slab + pad),
        )
        frames.append(LevelFrame(lvl, section_box, camera, slab))
    return frames


def frame_combined(
    levels,
    building_bounds,
    spacing=0.0,
    margin=10.0,
    pad=5.0,
    eye_direction=DEFAULT_COMBINED_EYE_DIRECTION,
    eye_distance=DEFAULT_COMBINED_EYE_DISTANCE,
):
    """Frame all levels in one overview view.

    The vertical extent runs from the lowest elevation to the highest plus
    the total explode spacing ((n - 1) * spacing), padded on both ends.

    Returns:
        CombinedFrame, or None when levels is empty

    Raises:
        NoGeometryFound: building_bounds is None and there are levels to frame
    """
    ordered = sort_levels(levels)
    if not ordered:
        return None

    if building_bounds is None:
        raise NoGeometryFound("No bounding geometry for combined exploded view")
    if margin < 0 or pad < 0 or spacing < 0:
        raise ValueError("spacing, margin and pad must be non-negative")

    total_height = (len(ordered) - 1) * spacing
    min_elevation = ordered[0].elevation
    max_elevation = ordered[-1].elevation
    mn = building_bounds.min
    mx = building_bounds.max

    section_box = BoundingBox(
        (mn[0] - margin, mn[1] - margin, min_elevation - pad),
        (mx[0] + margin, mx[1] + margin, max_elevation + total_height + pad),
    )
    return CombinedFrame(ordered, section_box, camera_orientation(eye_direction, eye_distance))
