"""
Host-independent geometry and layout for the level exploder.

Modules:
- math_utils: BoundingBox, aggregate/expand, vector helpers
- levels: Level value and elevation ordering
- framing: LevelFramer (section boxes, camera orientations)
- sheet_layout: SheetLayoutPlanner (viewport slots, sheet annotations)
- displacement: elevation displacement plans
- errors: LevelLayoutError hierarchy
- units: millimetre/foot conversion
- diagnostics: Diagnostics recorder
"""

from .errors import InvalidOrdering, LevelLayoutError, NoGeometryFound, OutOfRangeElevation
from .framing import CameraOrientation, CombinedFrame, LevelFrame, frame_combined, frame_levels
from .levels import Level, sort_levels
from .math_utils import BoundingBox, aggregate, expand
from .sheet_layout import SheetPlan, SheetRect, SheetSlot, SheetText, layout, plan_sheet

__all__ = [
    "BoundingBox",
    "aggregate",
    "expand",
    "Level",
    "sort_levels",
    "CameraOrientation",
    "LevelFrame",
    "CombinedFrame",
    "frame_levels",
    "frame_combined",
    "SheetRect",
    "SheetSlot",
    "SheetText",
    "SheetPlan",
    "layout",
    "plan_sheet",
    "LevelLayoutError",
    "NoGeometryFound",
    "InvalidOrdering",
    "OutOfRangeElevation",
]
