"""
Level Exploder Pipeline - orchestration.

Turns a level store into a complete, host-independent LayoutPlan:

1. Query levels (ascending by elevation)
2. Aggregate element bounds per level, then into one building envelope
3. Frame each level (section box + shared isometric camera)
4. Frame the combined overview (optional)
5. Lay the level frames out on the summary sheet

Nothing is written to the host here. The plan is either complete or an
exception is raised, so the caller's transaction applies all of it or none.
"""

# ────────────────────────────────────────────────────────────────────────────
# LEVEL STORE PROTOCOL (duck-typed)
#
#   store.get_ordered_levels() -> sequence[Level]
#   store.element_boxes_near_level(level) -> sequence[BoundingBox | None]
#
# None entries are elements without 3D extent; they are skipped and counted.
# A level without any geometry is not fatal on its own: only an empty
# building envelope is (NoGeometryFound, unless cfg.fallback_bounds is set).
# ────────────────────────────────────────────────────────────────────────────

from .config import Config
from .core.diagnostics import Diagnostics
from .core.displacement import plan_displacement
from .core.errors import NoGeometryFound, OutOfRangeElevation
from .core.framing import frame_combined, frame_levels
from .core.levels import is_ascending, sort_levels
from .core.math_utils import aggregate
from .core.sheet_layout import plan_sheet
from .core.units import mm_to_feet
from .revit.safe_api import safe_call

STATUS_OK = "ok"
STATUS_EMPTY = "empty"

BOUNDS_FROM_ELEMENTS = "elements"
BOUNDS_FROM_FALLBACK = "fallback"


class LayoutPlan:
    """Complete exploded-view layout, ready for the host to materialize.

    Attributes:
        status: "ok" | "empty"
        levels: levels ascending by elevation
        level_bounds: list of (Level, BoundingBox | None), one pair per level
        building_bounds: envelope used for framing (None when empty)
        bounds_source: "elements" | "fallback" | None
        frames: list of LevelFrame
        combined: CombinedFrame | None
        sheet: SheetPlan | None
    """

    def __init__(
        self,
        status,
        levels=None,
        level_bounds=None,
        building_bounds=None,
        bounds_source=None,
        frames=None,
        combined=None,
        sheet=None,
    ):
        self.status = status
        self.levels = list(levels or [])
        self.level_bounds = list(level_bounds or [])
        self.building_bounds = building_bounds
        self.bounds_source = bounds_source
        self.frames = list(frames or [])
        self.combined = combined
        self.sheet = sheet

    @property
    def is_empty(self):
        return self.status == STATUS_EMPTY

    def to_dict(self):
        return {
            "status": self.status,
            "levels": [lvl.to_dict() for lvl in self.levels],
            "level_bounds": [
                {"level": lvl.name, "bounds": b.to_tuple() if b is not None else None}
                for lvl, b in self.level_bounds
            ],
            "building_bounds": self.building_bounds.to_tuple() if self.building_bounds is not None else None,
            "bounds_source": self.bounds_source,
            "frames": [f.to_dict() for f in self.frames],
            "combined": self.combined.to_dict() if self.combined is not None else None,
            "sheet": self.sheet.to_dict() if self.sheet is not None else None,
        }


def _level_envelope(store, level, diag):
    boxes = safe_call(
        diag,
        phase="collection",
        callsite="store.element_boxes_near_level",
        fn=lambda: list(store.element_boxes_near_level(level)),
        default=None,
        context={"level_name": level.name},
        policy="raise",
    )

    valid = [b for b in boxes if b is not None]
    skipped = len(boxes) - len(valid)
    envelope = aggregate(valid)

    if envelope is None:
        diag.warn(
            phase="bounds",
            callsite="_level_envelope",
            message="No element geometry found for level",
            level_name=level.name,
            extra={"elements": len(boxes), "without_geometry": skipped},
        )
    elif skipped:
        diag.debug(
            phase="bounds",
            callsite="_level_envelope",
            message="Skipped elements without 3D extent (aggregated)",
            level_name=level.name,
            extra={"elements": len(boxes), "without_geometry": skipped},
        )
    return envelope


def plan_exploded_views(store, canvas, cfg=None, diag=None):
    """Build the exploded-view layout for every level in store.

    Args:
        store: level store (see protocol above)
        canvas: SheetRect of the target sheet outline
        cfg: Config (default: Config())
        diag: Diagnostics (default: a fresh recorder)

    Returns:
        LayoutPlan (status "empty" when the store has no levels)

    Raises:
        NoGeometryFound: no element geometry on any level and no fallback_bounds
        Any store exception (recorded in diag, then re-raised)
    """
    if cfg is None:
        cfg = Config()
    if diag is None:
        diag = Diagnostics()

    raw_levels = safe_call(
        diag,
        phase="collection",
        callsite="store.get_ordered_levels",
        fn=lambda: list(store.get_ordered_levels()),
        default=None,
        policy="raise",
    )

    if not raw_levels:
        diag.info(
            phase="plan",
            callsite="plan_exploded_views",
            message="No levels supplied; nothing to lay out",
        )
        return LayoutPlan(STATUS_EMPTY)

    if not is_ascending(raw_levels):
        diag.info(
            phase="plan",
            callsite="plan_exploded_views",
            message="Levels were not ascending by elevation; re-sorted",
            extra={"names": [lvl.name for lvl in raw_levels]},
        )
    levels = sort_levels(raw_levels)

    # 1) Bounds: per level, then building envelope
    level_bounds = []
    for lvl in levels:
        level_bounds.append((lvl, _level_envelope(store, lvl, diag)))

    building_bounds = aggregate(b for _, b in level_bounds if b is not None)
    bounds_source = BOUNDS_FROM_ELEMENTS

    if building_bounds is None:
        building_bounds = cfg.fallback_bounding_box()
        bounds_source = BOUNDS_FROM_FALLBACK
        if building_bounds is None:
            err = NoGeometryFound(
                "No element geometry found on {} level(s) and no fallback_bounds configured".format(
                    len(levels)
                )
            )
            diag.error(
                phase="bounds",
                callsite="plan_exploded_views",
                message="Cannot frame levels without geometry",
                exc=err,
                extra={"levels": [lvl.name for lvl in levels]},
            )
            raise err
        diag.warn(
            phase="bounds",
            callsite="plan_exploded_views",
            message="No element geometry found; using configured fallback bounds",
            extra={"fallback_bounds": building_bounds.to_tuple()},
        )

    # 2) Framing
    try:
        frames = frame_levels(
            levels,
            building_bounds,
            cfg.default_top_height_ft,
            cfg.section_margin_ft,
            pad=cfg.section_pad_ft,
            eye_direction=cfg.eye_direction,
            eye_distance=cfg.level_eye_distance_ft,
        )

        combined = None
        if cfg.combined_enabled:
            combined = frame_combined(
                levels,
                building_bounds,
                spacing=cfg.explode_spacing_ft,
                margin=cfg.combined_margin_ft,
                pad=cfg.combined_pad_ft,
                eye_direction=cfg.combined_eye_direction,
                eye_distance=cfg.combined_eye_distance_ft,
            )
    except ValueError as e:
        diag.error(
            phase="framing",
            callsite="plan_exploded_views",
            message="Cannot frame levels with current settings",
            exc=e,
            extra={
                "eye_direction": list(cfg.eye_direction),
                "combined_eye_direction": list(cfg.combined_eye_direction),
            },
        )
        raise

    # 3) Sheet
    sheet = plan_sheet(frames, canvas, cfg)

    diag.info(
        phase="plan",
        callsite="plan_exploded_views",
        message="Exploded-view layout planned",
        extra={
            "levels": len(levels),
            "frames": len(frames),
            "combined": combined is not None,
            "bounds_source": bounds_source,
        },
    )

    return LayoutPlan(
        STATUS_OK,
        levels=levels,
        level_bounds=level_bounds,
        building_bounds=building_bounds,
        bounds_source=bounds_source,
        frames=frames,
        combined=combined,
        sheet=sheet,
    )


def plan_level_displacement(levels, cfg=None, diag=None, displacement_mm=None):
    """Plan displacing levels by a millimetre offset.

    Args:
        levels: levels to move
        cfg: Config (default: Config())
        diag: Diagnostics (optional)
        displacement_mm: offset in mm (default: cfg.displacement_mm)

    Returns:
        list of ElevationChange ([] for no levels)

    Raises:
        ValueError: displacement outside cfg's displacement band
        OutOfRangeElevation: a resulting elevation is outside cfg's elevation band
    """
    if cfg is None:
        cfg = Config()
    if diag is None:
        diag = Diagnostics()

    if displacement_mm is None:
        displacement_mm = cfg.displacement_mm

    if not cfg.displacement_in_range(displacement_mm):
        err = ValueError(
            "Displacement {} mm is outside [{}, {}] mm".format(
                displacement_mm, cfg.min_displacement_mm, cfg.max_displacement_mm
            )
        )
        diag.error(
            phase="displacement",
            callsite="plan_level_displacement",
            message="Displacement rejected",
            exc=err,
        )
        raise err

    levels = list(levels)
    if not levels:
        diag.info(
            phase="displacement",
            callsite="plan_level_displacement",
            message="No levels selected; nothing to displace",
        )
        return []

    try:
        changes = plan_displacement(
            levels,
            mm_to_feet(displacement_mm),
            min_elevation=cfg.min_elevation_ft,
            max_elevation=cfg.max_elevation_ft,
        )
    except OutOfRangeElevation as e:
        diag.error(
            phase="displacement",
            callsite="plan_level_displacement",
            message="Displacement would move a level out of range; nothing applied",
            exc=e,
            level_name=e.level.name if e.level is not None else None,
            extra={"displacement_mm": float(displacement_mm)},
        )
        raise

    diag.info(
        phase="displacement",
        callsite="plan_level_displacement",
        message="Displacement planned",
        extra={"levels": len(changes), "displacement_mm": float(displacement_mm)},
    )
    return changes
