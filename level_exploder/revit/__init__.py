"""
Revit-specific integrations for the level exploder.

Modules:
- safe_api: safe_call wrapper for host calls
- collection: level snapshots, element bounding boxes, RevitLevelStore
- views: exploded views, summary sheet, level displacement
"""

from .safe_api import safe_call
from .collection import RevitLevelStore, level_from_revit, pick_levels, resolve_element_bbox
from .views import apply_displacement, run_exploded_views

__all__ = [
    "safe_call",
    "RevitLevelStore",
    "level_from_revit",
    "pick_levels",
    "resolve_element_bbox",
    "run_exploded_views",
    "apply_displacement",
]
