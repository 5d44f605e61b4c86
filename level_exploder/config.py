"""
Configuration for the level exploder.

Defines the Config class with every parameter for framing, sheet layout and
elevation displacement. Config is injected into pipeline and host-bridge
calls; nothing reads process-wide settings.
"""

import math

from .core.units import mm_to_feet

DEFAULT_LEVEL_CATEGORIES = (
    "OST_Walls",
    "OST_Floors",
    "OST_Ceilings",
    "OST_Doors",
    "OST_Windows",
    "OST_Columns",
    "OST_StructuralFraming",
)


class Config:
    """Configuration for exploded level views and level displacement.

    Attributes:
        default_top_height_ft (float): Slab height of the topmost level (default: 10.0)
        section_margin_ft (float): Horizontal margin around the building envelope (default: 5.0)
        section_pad_ft (float): Vertical pad below each level and above its slab (default: 1.0)
        eye_direction (tuple): Per-level camera eye direction (default: (-1, -1, 1))
        level_eye_distance_ft (float): Per-level camera eye distance (default: 100.0)
        combined_enabled (bool): Also frame a combined overview view (default: True)
        combined_eye_direction (tuple): Overview camera eye direction (default: (1, 1, 1))
        combined_eye_distance_ft (float): Overview camera eye distance (default: 500.0)
        combined_margin_ft (float): Overview horizontal margin (default: 10.0)
        combined_pad_ft (float): Overview vertical pad (default: 5.0)
        explode_spacing_ft (float): Per-level explode spacing for the overview (default: 0.0)
        view_scale (int): Scale assigned to generated views (default: 200)
        sheet_top_margin_fraction (float): Slot band offset from sheet bottom (default: 0.2)
        sheet_usable_fraction (float): Slot band height fraction (default: 0.6)
        sheet_name, sheet_number, sheet_title (str): Sheet identity and heading
        sheet_text_inset_ft (float): Inset of sheet annotations from the outline (default: 0.3)
        displacement_mm (float): Default level displacement in millimetres (default: 0.0)
        adjust_hosted (bool): Shift hosted element offsets with their level (default: True)
        maintain_bounding_box (bool): Passed through to the host displacement call (default: True)
        min_elevation_ft, max_elevation_ft (float): Allowed elevation band (default: ±1000)
        min_displacement_mm, max_displacement_mm (float): Allowed displacement band (default: ±100000)
        fallback_bounds (tuple|None): (xmin, ymin, zmin, xmax, ymax, zmax) used when no
            element geometry is found; None makes that condition fatal
        level_categories (tuple): Built-in category names scanned for level geometry

    Commentary:
        ✔ Camera distances are defaults, not invariants (per-level 100, overview 500)
        ✔ from_dict() resets an out-of-band stored displacement to 0.0 instead of failing
        ⚠ fallback_bounds hides empty models; leave None unless a placeholder view is wanted

    Example:
        >>> cfg = Config()
        >>> cfg.default_top_height_ft
        10.0
        >>> cfg.displacement_ft
        0.0
    """

    def __init__(
        self,
        default_top_height_ft=10.0,
        section_margin_ft=5.0,
        section_pad_ft=1.0,
        eye_direction=(-1.0, -1.0, 1.0),
        level_eye_distance_ft=100.0,
        # Combined overview view
        combined_enabled=True,
        combined_eye_direction=(1.0, 1.0, 1.0),
        combined_eye_distance_ft=500.0,
        combined_margin_ft=10.0,
        combined_pad_ft=5.0,
        explode_spacing_ft=0.0,
        view_scale=200,
        # Sheet
        sheet_top_margin_fraction=0.2,
        sheet_usable_fraction=0.6,
        sheet_name="Exploded Views",
        sheet_number="EX-01",
        sheet_title="Building Levels - Exploded Views",
        sheet_text_inset_ft=0.3,
        # Displacement
        displacement_mm=0.0,
        adjust_hosted=True,
        maintain_bounding_box=True,
        min_elevation_ft=-1000.0,
        max_elevation_ft=1000.0,
        min_displacement_mm=-100000.0,
        max_displacement_mm=100000.0,
        # Geometry collection
        fallback_bounds=None,
        level_categories=DEFAULT_LEVEL_CATEGORIES,
    ):
        self.default_top_height_ft = float(default_top_height_ft)
        self.section_margin_ft = float(section_margin_ft)
        self.section_pad_ft = float(section_pad_ft)
        self.eye_direction = tuple(float(c) for c in eye_direction)
        self.level_eye_distance_ft = float(level_eye_distance_ft)

        self.combined_enabled = bool(combined_enabled)
        self.combined_eye_direction = tuple(float(c) for c in combined_eye_direction)
        self.combined_eye_distance_ft = float(combined_eye_distance_ft)
        self.combined_margin_ft = float(combined_margin_ft)
        self.combined_pad_ft = float(combined_pad_ft)
        self.explode_spacing_ft = float(explode_spacing_ft)
        self.view_scale = int(view_scale)

        self.sheet_top_margin_fraction = float(sheet_top_margin_fraction)
        self.sheet_usable_fraction = float(sheet_usable_fraction)
        self.sheet_name = str(sheet_name)
        self.sheet_number = str(sheet_number)
        self.sheet_title = str(sheet_title)
        self.sheet_text_inset_ft = float(sheet_text_inset_ft)

        self.displacement_mm = float(displacement_mm)
        self.adjust_hosted = bool(adjust_hosted)
        self.maintain_bounding_box = bool(maintain_bounding_box)
        self.min_elevation_ft = float(min_elevation_ft)
        self.max_elevation_ft = float(max_elevation_ft)
        self.min_displacement_mm = float(min_displacement_mm)
        self.max_displacement_mm = float(max_displacement_mm)

        if fallback_bounds is None:
            self.fallback_bounds = None
        else:
            self.fallback_bounds = tuple(float(c) for c in fallback_bounds)
        self.level_categories = tuple(str(c) for c in level_categories)

        # Validate
        if len(self.eye_direction) != 3 or len(self.combined_eye_direction) != 3:
            raise ValueError("eye directions must have three components")
        for name, d in (
            ("eye_direction", self.eye_direction),
            ("combined_eye_direction", self.combined_eye_direction),
        ):
            # no horizontal component: zero or vertical
            if d[0] == 0.0 and d[1] == 0.0:
                raise ValueError("{} must not be zero or vertical: {}".format(name, d))
        if self.default_top_height_ft <= 0:
            raise ValueError("default_top_height_ft must be positive")
        if self.section_margin_ft < 0 or self.section_pad_ft < 0:
            raise ValueError("section_margin_ft and section_pad_ft must be non-negative")
        if self.level_eye_distance_ft <= 0 or self.combined_eye_distance_ft <= 0:
            raise ValueError("eye distances must be positive")
        if self.combined_margin_ft < 0 or self.combined_pad_ft < 0:
            raise ValueError("combined_margin_ft and combined_pad_ft must be non-negative")
        if self.explode_spacing_ft < 0:
            raise ValueError("explode_spacing_ft must be non-negative")
        if self.view_scale <= 0:
            raise ValueError("view_scale must be positive")
        if self.sheet_top_margin_fraction < 0 or self.sheet_usable_fraction <= 0:
            raise ValueError("sheet fractions must be non-negative (usable > 0)")
        if self.sheet_top_margin_fraction + self.sheet_usable_fraction > 1.0:
            raise ValueError("sheet_top_margin_fraction + sheet_usable_fraction must not exceed 1.0")
        if self.sheet_text_inset_ft < 0:
            raise ValueError("sheet_text_inset_ft must be non-negative")
        if self.min_elevation_ft > self.max_elevation_ft:
            raise ValueError("min_elevation_ft must not exceed max_elevation_ft")
        if self.min_displacement_mm > self.max_displacement_mm:
            raise ValueError("min_displacement_mm must not exceed max_displacement_mm")
        if not self.displacement_in_range(self.displacement_mm):
            raise ValueError("displacement_mm must lie within the allowed displacement band")
        if self.fallback_bounds is not None:
            if len(self.fallback_bounds) != 6:
                raise ValueError("fallback_bounds must be (xmin, ymin, zmin, xmax, ymax, zmax)")
            if not all(math.isfinite(c) for c in self.fallback_bounds):
                raise ValueError("fallback_bounds must be finite")
            lo, hi = self.fallback_bounds[:3], self.fallback_bounds[3:]
            if any(a > b for a, b in zip(lo, hi)):
                raise ValueError("fallback_bounds min must not exceed max")

    def displacement_in_range(self, value_mm):
        """Check a displacement (mm) lies in the allowed band."""
        return self.min_displacement_mm <= float(value_mm) <= self.max_displacement_mm

    @property
    def displacement_ft(self):
        """Default displacement in feet (converted from millimetres).

        Returns:
            float: e.g. 304.8 mm = 1.0 ft
        """
        return mm_to_feet(self.displacement_mm)

    def fallback_bounding_box(self):
        """fallback_bounds as a BoundingBox, or None."""
        if self.fallback_bounds is None:
            return None
        from .core.math_utils import BoundingBox

        return BoundingBox(self.fallback_bounds[:3], self.fallback_bounds[3:])

    def __repr__(self):
        return (
            f"Config(default_top_height_ft={self.default_top_height_ft}, "
            f"section_margin_ft={self.section_margin_ft}, "
            f"section_pad_ft={self.section_pad_ft}, "
            f"eye_direction={self.eye_direction}, "
            f"level_eye_distance_ft={self.level_eye_distance_ft}, "
            f"combined_enabled={self.combined_enabled}, "
            f"sheet={self.sheet_number!r}, "
            f"displacement_mm={self.displacement_mm}, "
            f"adjust_hosted={self.adjust_hosted}, "
            f"maintain_bounding_box={self.maintain_bounding_box})"
        )

    def to_dict(self):
        """Export configuration as dictionary for JSON serialization."""
        return {
            "default_top_height_ft": self.default_top_height_ft,
            "section_margin_ft": self.section_margin_ft,
            "section_pad_ft": self.section_pad_ft,
            "eye_direction": list(self.eye_direction),
            "level_eye_distance_ft": self.level_eye_distance_ft,
            # Combined overview
            "combined_enabled": self.combined_enabled,
            "combined_eye_direction": list(self.combined_eye_direction),
            "combined_eye_distance_ft": self.combined_eye_distance_ft,
            "combined_margin_ft": self.combined_margin_ft,
            "combined_pad_ft": self.combined_pad_ft,
            "explode_spacing_ft": self.explode_spacing_ft,
            "view_scale": self.view_scale,
            # Sheet
            "sheet_top_margin_fraction": self.sheet_top_margin_fraction,
            "sheet_usable_fraction": self.sheet_usable_fraction,
            "sheet_name": self.sheet_name,
            "sheet_number": self.sheet_number,
            "sheet_title": self.sheet_title,
            "sheet_text_inset_ft": self.sheet_text_inset_ft,
            # Displacement
            "displacement_mm": self.displacement_mm,
            "adjust_hosted": self.adjust_hosted,
            "maintain_bounding_box": self.maintain_bounding_box,
            "min_elevation_ft": self.min_elevation_ft,
            "max_elevation_ft": self.max_elevation_ft,
            "min_displacement_mm": self.min_displacement_mm,
            "max_displacement_mm": self.max_displacement_mm,
            # Geometry collection
            "fallback_bounds": list(self.fallback_bounds) if self.fallback_bounds is not None else None,
            "level_categories": list(self.level_categories),
        }

    @classmethod
    def from_dict(cls, d):
        """Create Config from dictionary (e.g., from JSON).

        A stored displacement outside the allowed band is reset to 0.0.
        """
        min_disp = d.get("min_displacement_mm", -100000.0)
        max_disp = d.get("max_displacement_mm", 100000.0)
        displacement_mm = d.get("displacement_mm", 0.0)
        if displacement_mm is None or not (min_disp <= float(displacement_mm) <= max_disp):
            displacement_mm = 0.0

        return cls(
            default_top_height_ft=d.get("default_top_height_ft", 10.0),
            section_margin_ft=d.get("section_margin_ft", 5.0),
            section_pad_ft=d.get("section_pad_ft", 1.0),
            eye_direction=d.get("eye_direction", (-1.0, -1.0, 1.0)),
            level_eye_distance_ft=d.get("level_eye_distance_ft", 100.0),
            # Combined overview
            combined_enabled=d.get("combined_enabled", True),
            combined_eye_direction=d.get("combined_eye_direction", (1.0, 1.0, 1.0)),
            combined_eye_distance_ft=d.get("combined_eye_distance_ft", 500.0),
            combined_margin_ft=d.get("combined_margin_ft", 10.0),
            combined_pad_ft=d.get("combined_pad_ft", 5.0),
            explode_spacing_ft=d.get("explode_spacing_ft", 0.0),
            view_scale=d.get("view_scale", 200),
            # Sheet
            sheet_top_margin_fraction=d.get("sheet_top_margin_fraction", 0.2),
            sheet_usable_fraction=d.get("sheet_usable_fraction", 0.6),
            sheet_name=d.get("sheet_name", "Exploded Views"),
            sheet_number=d.get("sheet_number", "EX-01"),
            sheet_title=d.get("sheet_title", "Building Levels - Exploded Views"),
            sheet_text_inset_ft=d.get("sheet_text_inset_ft", 0.3),
            # Displacement
            displacement_mm=displacement_mm,
            adjust_hosted=d.get("adjust_hosted", True),
            maintain_bounding_box=d.get("maintain_bounding_box", True),
            min_elevation_ft=d.get("min_elevation_ft", -1000.0),
            max_elevation_ft=d.get("max_elevation_ft", 1000.0),
            min_displacement_mm=min_disp,
            max_displacement_mm=max_disp,
            # Geometry collection
            fallback_bounds=d.get("fallback_bounds", None),
            level_categories=d.get("level_categories", DEFAULT_LEVEL_CATEGORIES),
        )
