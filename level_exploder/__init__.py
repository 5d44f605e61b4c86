"""
Level Exploder: exploded isometric level views for Revit.

Computes, for each level of a building, a section box and camera for an
isometric "exploded" view, and lays the views out on one summary sheet.
Also plans validated elevation displacement of selected levels. The
geometry and layout math is host-independent; only revit/ touches the API.

Modules:
- config: Configuration for framing, sheet layout and displacement
- core.math_utils: BoundingBox, vector helpers, bounds aggregation
- core.framing: Per-level section boxes and camera orientations
- core.sheet_layout: Viewport slot and annotation placement on the sheet
- core.displacement: Elevation displacement planning and range checks
- core.diagnostics: Structured, bounded event recorder
- revit: Level/element collection, view and sheet creation
- pipeline: plan_exploded_views / plan_level_displacement
"""

__version__ = "1.0.0"

from .config import Config

__all__ = ["Config"]
