"""
Sheet layout for exploded level views.

Places one viewport slot per framed level in a single centered column on a
fixed sheet canvas, plus the sheet's title and level-count annotations.

Layout contract (single column):
    height  = canvas.height()
    start   = canvas.min_v + height * top_margin_fraction
    band    = height * usable_fraction
    spacing = band / (N + 1)
    slot i  -> (canvas.center_u(), start + (i + 1) * spacing, 0)

The (N + 1) divisor leaves one spacing of blank band below the first slot
and above the last. Many levels pack tightly rather than wrapping into a
second column.
"""

from .errors import InvalidOrdering
from .levels import is_ascending

DEFAULT_TOP_MARGIN_FRACTION = 0.2
DEFAULT_USABLE_FRACTION = 0.6
DEFAULT_SHEET_TITLE = "Building Levels - Exploded Views"
DEFAULT_TEXT_INSET = 0.3

ALIGN_CENTER = "center"
ALIGN_LEFT = "left"


class SheetRect:
    """Sheet canvas outline in sheet UV coordinates (feet).

    Example:
        >>> r = SheetRect(0.0, 0.0, 3.0, 2.0)
        >>> r.center_u()
        1.5
    """

    def __init__(self, min_u, min_v, max_u, max_v):
        self.min_u = float(min_u)
        self.min_v = float(min_v)
        self.max_u = float(max_u)
        self.max_v = float(max_v)
        if self.min_u > self.max_u or self.min_v > self.max_v:
            raise ValueError("SheetRect min must not exceed max")

    def width(self):
        return self.max_u - self.min_u

    def height(self):
        return self.max_v - self.min_v

    def center_u(self):
        return (self.min_u + self.max_u) / 2.0

    def to_tuple(self):
        return (self.min_u, self.min_v, self.max_u, self.max_v)

    def __repr__(self):
        return f"SheetRect({self.min_u:.3f}, {self.min_v:.3f}, {self.max_u:.3f}, {self.max_v:.3f})"


class SheetSlot:
    """Viewport placement for one level frame."""

    def __init__(self, frame, position, title):
        self.frame = frame
        self.position = tuple(position)
        self.title = title

    def to_dict(self):
        return {
            "view_name": self.frame.view_name,
            "position": self.position,
            "title": self.title,
        }

    def __repr__(self):
        return f"SheetSlot(title={self.title!r}, position={self.position})"


class SheetText:
    """Free text placed on the sheet (title block annotations)."""

    def __init__(self, text, position, alignment=ALIGN_LEFT):
        self.text = text
        self.position = tuple(position)
        self.alignment = alignment

    def to_dict(self):
        return {"text": self.text, "position": self.position, "alignment": self.alignment}


class SheetPlan:
    """Everything needed to build the summary sheet."""

    def __init__(self, slots, annotations, sheet_name, sheet_number):
        self.slots = list(slots)
        self.annotations = list(annotations)
        self.sheet_name = sheet_name
        self.sheet_number = sheet_number

    def to_dict(self):
        return {
            "sheet_name": self.sheet_name,
            "sheet_number": self.sheet_number,
            "slots": [s.to_dict() for s in self.slots],
            "annotations": [a.to_dict() for a in self.annotations],
        }


def slot_title(level):
    """Viewport title for a level, e.g. 'Level L2'."""
    return "Level {}".format(level.name)


def _validate_fractions(top_margin_fraction, usable_fraction):
    if top_margin_fraction < 0:
        raise ValueError("top_margin_fraction must be non-negative")
    if usable_fraction <= 0:
        raise ValueError("usable_fraction must be positive")
    if top_margin_fraction + usable_fraction > 1.0:
        raise ValueError("top_margin_fraction + usable_fraction must not exceed 1.0")


def layout(
    frames,
    canvas,
    top_margin_fraction=DEFAULT_TOP_MARGIN_FRACTION,
    usable_fraction=DEFAULT_USABLE_FRACTION,
    resort=True,
):
    """Assign each frame a slot on the sheet.

    Args:
        frames: LevelFrame sequence, ascending by level elevation
        canvas: SheetRect
        top_margin_fraction: offset of the band from canvas.min_v, as a fraction of height
        usable_fraction: band height as a fraction of canvas height
        resort: True sorts frames by elevation; False requires ascending input

    Returns:
        list of SheetSlot in elevation order ([] when frames is empty)

    Raises:
        InvalidOrdering: resort is False and frames are not ascending
        ValueError: invalid fractions

    Example:
        >>> layout([], SheetRect(0, 0, 10, 100))
        []
    """
    _validate_fractions(top_margin_fraction, usable_fraction)

    seq = list(frames)
    if not seq:
        return []

    if resort:
        seq = sorted(seq, key=lambda f: f.level.elevation)
    elif not is_ascending([f.level for f in seq]):
        raise InvalidOrdering("frames must be ascending by level elevation")

    height = canvas.height()
    band_start = canvas.min_v + height * top_margin_fraction
    band = height * usable_fraction
    spacing = band / (len(seq) + 1)
    u = canvas.center_u()

    slots = []
    for i, frame in enumerate(seq):
        v = band_start + (i + 1) * spacing
        slots.append(SheetSlot(frame, (u, v, 0.0), slot_title(frame.level)))
    return slots


def sheet_annotations(canvas, view_count, title=DEFAULT_SHEET_TITLE, inset=DEFAULT_TEXT_INSET):
    """Title and summary text for the sheet.

    Returns:
        [centered title near the top edge, left-aligned 'Total Levels: N' near bottom-left]
    """
    return [
        SheetText(title, (canvas.center_u(), canvas.max_v - inset, 0.0), ALIGN_CENTER),
        SheetText(
            "Total Levels: {}".format(int(view_count)),
            (canvas.min_u + inset, canvas.min_v + inset, 0.0),
            ALIGN_LEFT,
        ),
    ]


def plan_sheet(frames, canvas, cfg):
    """Lay out frames and annotations using sheet settings from cfg (Config)."""
    slots = layout(
        frames,
        canvas,
        top_margin_fraction=cfg.sheet_top_margin_fraction,
        usable_fraction=cfg.sheet_usable_fraction,
    )
    annotations = sheet_annotations(
        canvas,
        len(slots),
        title=cfg.sheet_title,
        inset=cfg.sheet_text_inset_ft,
    )
    return SheetPlan(slots, annotations, cfg.sheet_name, cfg.sheet_number)
