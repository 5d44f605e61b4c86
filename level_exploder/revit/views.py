"""
Materialize layout plans in Revit.

Creates the exploded 3D views, the summary sheet and its viewports, and
applies level displacement plans. Every host mutation runs inside a
Transaction / TransactionGroup; any failure rolls the whole batch back,
is recorded in diagnostics and is re-raised.
"""

from ..core.sheet_layout import ALIGN_CENTER, SheetRect
from .collection import _element_id_int
from .safe_api import safe_call

TG_EXPLODED_VIEWS = "Create Exploded Views"
TX_SHEET = "Create Sheet"
TX_VIEWS = "Create Level Views"
TX_DISPLACE = "Displace Levels"


def _xyz(p):
    from Autodesk.Revit.DB import XYZ

    return XYZ(p[0], p[1], p[2])


def sheet_canvas(sheet):
    """Sheet outline (BoundingBoxUV) as a SheetRect."""
    outline = sheet.Outline
    return SheetRect(outline.Min.U, outline.Min.V, outline.Max.U, outline.Max.V)


def _three_d_view_family_type(doc):
    from Autodesk.Revit.DB import FilteredElementCollector, ViewFamily, ViewFamilyType

    for vft in FilteredElementCollector(doc).OfClass(ViewFamilyType):
        if vft.ViewFamily == ViewFamily.ThreeDimensional:
            return vft
    return None


def create_sheet(doc, cfg):
    """Create the summary sheet on the first title block family.

    Raises:
        RuntimeError: the project has no title block family
    """
    from Autodesk.Revit.DB import BuiltInCategory, FamilySymbol, FilteredElementCollector, ViewSheet

    title_block = (
        FilteredElementCollector(doc)
        .OfClass(FamilySymbol)
        .OfCategory(BuiltInCategory.OST_TitleBlocks)
        .FirstElement()
    )
    if title_block is None:
        raise RuntimeError("No title block family found in project")

    if not title_block.IsActive:
        title_block.Activate()

    sheet = ViewSheet.Create(doc, title_block.Id)
    sheet.Name = cfg.sheet_name
    sheet.SheetNumber = cfg.sheet_number
    return sheet


def _create_framed_view(doc, vft_id, name, section_box, camera, cfg):
    from Autodesk.Revit.DB import (
        BoundingBoxXYZ,
        DisplayStyle,
        View3D,
        ViewDetailLevel,
        ViewOrientation3D,
    )

    view = View3D.CreateIsometric(doc, vft_id)
    view.Name = name
    view.Scale = cfg.view_scale
    view.DisplayStyle = DisplayStyle.Shading
    view.DetailLevel = ViewDetailLevel.Fine
    view.AreAnnotationCategoriesHidden = True

    box = BoundingBoxXYZ()
    box.Min = _xyz(section_box.min)
    box.Max = _xyz(section_box.max)
    view.IsSectionBoxActive = True
    view.SetSectionBox(box)

    # ViewOrientation3D(eyePosition, upDirection, forwardDirection)
    view.SetOrientation(ViewOrientation3D(_xyz(camera.eye), _xyz(camera.up), _xyz(camera.forward)))
    return view


def _set_view_title(view, title, diag=None):
    from Autodesk.Revit.DB import BuiltInParameter

    param = view.get_Parameter(BuiltInParameter.VIEW_DESCRIPTION)
    if param is None or param.IsReadOnly:
        if diag is not None:
            diag.warn(
                phase="sheet",
                callsite="_set_view_title",
                message="Title on Sheet parameter unavailable; viewport keeps the view name",
                view_id=_element_id_int(view.Id),
                extra={"title": title},
            )
        return False
    param.Set(title)
    return True


def _place_annotations(doc, sheet, annotations, diag=None):
    from Autodesk.Revit.DB import (
        FilteredElementCollector,
        HorizontalTextAlignment,
        TextNote,
        TextNoteOptions,
        TextNoteType,
    )

    text_type = FilteredElementCollector(doc).OfClass(TextNoteType).FirstElement()
    if text_type is None:
        if diag is not None:
            diag.warn(
                phase="sheet",
                callsite="_place_annotations",
                message="No text note type in project; sheet annotations skipped",
                extra={"annotations": [a.text for a in annotations]},
            )
        return 0

    placed = 0
    for note in annotations:
        options = TextNoteOptions(text_type.Id)
        if note.alignment == ALIGN_CENTER:
            options.HorizontalAlignment = HorizontalTextAlignment.Center
        else:
            options.HorizontalAlignment = HorizontalTextAlignment.Left
        TextNote.Create(doc, sheet.Id, _xyz(note.position), note.text, options)
        placed += 1
    return placed


def _materialize(doc, plan, sheet, cfg, diag):
    from Autodesk.Revit.DB import Viewport

    vft = _three_d_view_family_type(doc)
    if vft is None:
        raise RuntimeError("No 3D view family type found in project")

    views = {}
    for frame in plan.frames:
        views[frame.view_name] = _create_framed_view(
            doc, vft.Id, frame.view_name, frame.section_box, frame.camera, cfg
        )

    if plan.combined is not None:
        _create_framed_view(
            doc,
            vft.Id,
            plan.combined.view_name,
            plan.combined.section_box,
            plan.combined.camera,
            cfg,
        )

    viewports = 0
    for slot in plan.sheet.slots:
        view = views[slot.frame.view_name]
        Viewport.Create(doc, sheet.Id, view.Id, _xyz(slot.position))
        _set_view_title(view, slot.title, diag=diag)
        viewports += 1

    notes = _place_annotations(doc, sheet, plan.sheet.annotations, diag=diag)
    return {"views": len(views), "viewports": viewports, "annotations": notes}


def run_exploded_views(doc, store, cfg=None, diag=None):
    """Plan and build exploded views plus their summary sheet.

    The sheet is created first (its outline is the layout canvas), then the
    pure plan is computed, then views, viewports and annotations are
    created. All of it sits in one TransactionGroup: either everything is
    assimilated or everything is rolled back.

    Returns:
        (LayoutPlan, summary dict)
    """
    from Autodesk.Revit.DB import Transaction, TransactionGroup

    from ..config import Config
    from ..core.diagnostics import Diagnostics
    from ..pipeline import plan_exploded_views

    if cfg is None:
        cfg = Config()
    if diag is None:
        diag = Diagnostics()

    t = None
    group = TransactionGroup(doc, TG_EXPLODED_VIEWS)
    group.Start()
    try:
        t = Transaction(doc, TX_SHEET)
        t.Start()
        sheet = create_sheet(doc, cfg)
        t.Commit()

        plan = plan_exploded_views(store, sheet_canvas(sheet), cfg=cfg, diag=diag)
        if plan.is_empty:
            group.RollBack()
            return plan, {"views": 0, "viewports": 0, "annotations": 0}

        t = Transaction(doc, TX_VIEWS)
        t.Start()
        summary = _materialize(doc, plan, sheet, cfg, diag)
        t.Commit()

        group.Assimilate()
        return plan, summary
    except Exception as e:
        if t is not None and t.HasStarted() and not t.HasEnded():
            t.RollBack()
        if group.HasStarted() and not group.HasEnded():
            group.RollBack()
        diag.error(
            phase="materialize",
            callsite="run_exploded_views",
            message="Exploded views rolled back",
            exc=e,
            extra={"sheet_number": cfg.sheet_number},
        )
        raise


def _adjust_hosted_elements(doc, host_level, delta, diag=None, level_name=None):
    """Shift the free host offset of elements referencing host_level.

    Returns:
        (adjusted, skipped) counts; skipped elements are recorded once per level
    """
    from Autodesk.Revit.DB import BuiltInParameter, ElementLevelFilter, FilteredElementCollector

    collector = (
        FilteredElementCollector(doc)
        .WhereElementIsNotElementType()
        .WherePasses(ElementLevelFilter(host_level.Id))
    )

    adjusted = 0
    skipped = 0
    for elem in collector:
        level_param = elem.get_Parameter(BuiltInParameter.INSTANCE_REFERENCE_LEVEL_PARAM)
        if level_param is None or not level_param.HasValue:
            continue

        offset_param = elem.get_Parameter(BuiltInParameter.INSTANCE_FREE_HOST_OFFSET_PARAM)
        if offset_param is None or not offset_param.HasValue or offset_param.IsReadOnly:
            continue

        ok = safe_call(
            diag,
            phase="displacement",
            callsite="offset_param.Set",
            fn=lambda: offset_param.Set(offset_param.AsDouble() + delta),
            default=False,
            context={"level_name": level_name, "elem_id": _element_id_int(elem.Id)},
            policy="default",
        )
        if ok:
            adjusted += 1
        else:
            skipped += 1
            if diag is not None:
                diag.debug_dedupe(
                    dedupe_key="hosted_offset_skipped:{}".format(level_name),
                    phase="displacement",
                    callsite="_adjust_hosted_elements",
                    message="Hosted element offset could not be updated; element left in place",
                    level_name=level_name,
                    elem_id=_element_id_int(elem.Id),
                )
    return adjusted, skipped


def apply_displacement(doc, changes, adjust_hosted=True, maintain_bounding_box=True, diag=None):
    """Write planned level elevations to the host in one transaction.

    Args:
        doc: Revit Document
        changes: ElevationChange list from plan_level_displacement
        adjust_hosted: also shift free host offsets of elements on each level
        maintain_bounding_box: host-side setting, reported back unchanged
        diag: Diagnostics (optional)

    Returns:
        summary dict with counts
    """
    summary = {
        "levels": 0,
        "hosted_adjusted": 0,
        "hosted_skipped": 0,
        "adjust_hosted": bool(adjust_hosted),
        "maintain_bounding_box": bool(maintain_bounding_box),
    }
    if not changes:
        return summary

    from Autodesk.Revit.DB import ElementId, Transaction

    t = Transaction(doc, TX_DISPLACE)
    t.Start()
    try:
        for change in changes:
            host_level = doc.GetElement(ElementId(change.level.level_id))
            if host_level is None:
                raise RuntimeError("Level {!r} no longer exists".format(change.level.name))
            host_level.Elevation = change.new_elevation
            summary["levels"] += 1

            if adjust_hosted:
                adjusted, skipped = _adjust_hosted_elements(
                    doc, host_level, change.delta, diag=diag, level_name=change.level.name
                )
                summary["hosted_adjusted"] += adjusted
                summary["hosted_skipped"] += skipped
        t.Commit()
    except Exception as e:
        t.RollBack()
        if diag is not None:
            diag.error(
                phase="displacement",
                callsite="apply_displacement",
                message="Level displacement rolled back",
                exc=e,
                extra={"levels": [c.level.name for c in changes]},
            )
        raise

    return summary
