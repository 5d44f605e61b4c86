"""
Revit element and level collection for the level exploder.

Implements the level store protocol consumed by the pipeline on top of a
Revit Document. Autodesk imports are deferred to call time so the module
(and the stub-friendly helpers) import cleanly outside the host.
"""

from ..core.displacement import levels_in_range
from ..core.levels import Level, sort_levels
from ..core.math_utils import BoundingBox
from .safe_api import safe_call


def _element_id_int(element_id):
    """Integer value of a Revit ElementId (Value on 2024+, IntegerValue before)."""
    if element_id is None:
        return None
    for attr in ("Value", "IntegerValue"):
        v = getattr(element_id, attr, None)
        if v is not None:
            return int(v)
    return None


def bbox_from_revit(bbox):
    """Convert a Revit BoundingBoxXYZ to a world-space BoundingBox.

    When the host box carries a Transform, all eight corners are mapped
    through it and re-boxed.

    Returns:
        BoundingBox, or None for a missing host box
    """
    if bbox is None:
        return None

    mn = bbox.Min
    mx = bbox.Max
    transform = getattr(bbox, "Transform", None)

    if transform is None or getattr(transform, "IsIdentity", False):
        return BoundingBox((mn.X, mn.Y, mn.Z), (mx.X, mx.Y, mx.Z))

    from Autodesk.Revit.DB import XYZ

    corners = [
        XYZ(x, y, z)
        for x in (mn.X, mx.X)
        for y in (mn.Y, mx.Y)
        for z in (mn.Z, mx.Z)
    ]
    world = [transform.OfPoint(p) for p in corners]
    return BoundingBox.from_points([(p.X, p.Y, p.Z) for p in world])


def resolve_element_bbox(elem, diag=None, context=None):
    """Resolve an element's model bounding box.

    Semantics:
        - Uses the model (view-independent) box: elem.get_BoundingBox(None)
        - Returns None when the element has no 3D extent or the call fails

    Notes:
        - Never raises (uses safe_call). If diag is provided, failures are
          recorded as recoverable errors.
    """
    ctx = context or {}
    bbox = safe_call(
        diag,
        phase="collection",
        callsite="elem.get_BoundingBox(None)",
        fn=lambda: elem.get_BoundingBox(None),
        default=None,
        context=ctx,
        policy="default",
    )
    if bbox is None:
        return None

    return safe_call(
        diag,
        phase="collection",
        callsite="bbox_from_revit",
        fn=lambda: bbox_from_revit(bbox),
        default=None,
        context=ctx,
        policy="default",
    )


def level_from_revit(level):
    """Snapshot a Revit Level as a Level value."""
    return Level(level.Name, level.Elevation, level_id=_element_id_int(level.Id))


def _level_selection_filter():
    from Autodesk.Revit.DB import Level as RevitLevel
    from Autodesk.Revit.UI.Selection import ISelectionFilter

    class LevelSelectionFilter(ISelectionFilter):
        """Allows picking levels only."""

        def AllowElement(self, elem):
            return isinstance(elem, RevitLevel)

        def AllowReference(self, ref, point):
            return True

    return LevelSelectionFilter()


def pick_levels(uidoc, prompt="Select levels. Press ESC to cancel or ENTER to finish.", diag=None):
    """Let the user pick levels in the active view.

    Returns:
        list of Level ascending by elevation ([] when the user cancels)
    """
    from Autodesk.Revit.DB import Level as RevitLevel
    from Autodesk.Revit.Exceptions import OperationCanceledException
    from Autodesk.Revit.UI.Selection import ObjectType

    doc = uidoc.Document
    try:
        refs = uidoc.Selection.PickObjects(ObjectType.Element, _level_selection_filter(), prompt)
    except OperationCanceledException:
        if diag is not None:
            diag.info(phase="selection", callsite="pick_levels", message="Level pick cancelled")
        return []

    picked = [doc.GetElement(r) for r in refs]
    return sort_levels(level_from_revit(e) for e in picked if isinstance(e, RevitLevel))


class RevitLevelStore:
    """Level store backed by a Revit Document.

    Args:
        doc: Revit Document
        cfg: Config (level_categories drives the element scan)
        diag: Diagnostics (optional)
        levels: optional subset of Level values (e.g. from pick_levels);
            None means every level in the project
    """

    def __init__(self, doc, cfg=None, diag=None, levels=None):
        if cfg is None:
            from ..config import Config

            cfg = Config()
        self.doc = doc
        self.cfg = cfg
        self.diag = diag
        self._levels = list(levels) if levels is not None else None
        self._filter = None

    def get_ordered_levels(self):
        if self._levels is not None:
            return sort_levels(self._levels)

        from Autodesk.Revit.DB import FilteredElementCollector, Level as RevitLevel

        collector = (
            FilteredElementCollector(self.doc)
            .OfClass(RevitLevel)
            .WhereElementIsNotElementType()
        )
        return sort_levels(level_from_revit(lvl) for lvl in collector)

    def levels_in_range(self, min_elevation, max_elevation):
        """Project levels within the inclusive elevation band (feet)."""
        return levels_in_range(self.get_ordered_levels(), min_elevation, max_elevation)

    def _category_filter(self):
        """LogicalOrFilter over cfg.level_categories, built on first use and reused.

        Raises:
            ValueError: none of the configured categories exists in this host
        """
        if self._filter is None:
            self._filter = self._build_category_filter()
        return self._filter

    def _build_category_filter(self):
        from Autodesk.Revit.DB import (
            BuiltInCategory,
            ElementCategoryFilter,
            ElementFilter,
            LogicalOrFilter,
        )
        from System.Collections.Generic import List

        filters = List[ElementFilter]()
        for name in self.cfg.level_categories:
            bic = getattr(BuiltInCategory, name, None)
            if bic is None:
                if self.diag is not None:
                    self.diag.debug_dedupe(
                        dedupe_key="unknown_category:" + name,
                        phase="collection",
                        callsite="RevitLevelStore._category_filter",
                        message="Unknown BuiltInCategory; skipped",
                        extra={"category": name},
                    )
                continue
            filters.Add(ElementCategoryFilter(bic))

        if filters.Count == 0:
            raise ValueError(
                "No known BuiltInCategory in level_categories: {}".format(list(self.cfg.level_categories))
            )
        return LogicalOrFilter(filters)

    def element_boxes_near_level(self, level):
        """Model bounding boxes of the configured categories hosted on level.

        Elements without 3D extent yield None entries. A level without a host
        id (not read from this document) yields [] and a warning.
        """
        if level.level_id is None:
            if self.diag is not None:
                self.diag.warn(
                    phase="collection",
                    callsite="RevitLevelStore.element_boxes_near_level",
                    message="Level has no host element id; no elements collected",
                    level_name=level.name,
                )
            return []

        from Autodesk.Revit.DB import ElementId, ElementLevelFilter, FilteredElementCollector

        collector = (
            FilteredElementCollector(self.doc)
            .WhereElementIsNotElementType()
            .WherePasses(ElementLevelFilter(ElementId(level.level_id)))
            .WherePasses(self._category_filter())
        )

        boxes = []
        for elem in collector:
            boxes.append(
                resolve_element_bbox(
                    elem,
                    diag=self.diag,
                    context={"level_name": level.name, "elem_id": _element_id_int(elem.Id)},
                )
            )
        return boxes
