"""
Length unit conversion.

The host stores lengths in feet; users enter displacements in millimetres.
"""

MM_PER_FOOT = 304.8


def mm_to_feet(value_mm):
    """Convert millimetres to feet.

    Example:
        >>> mm_to_feet(304.8)
        1.0
    """
    return float(value_mm) / MM_PER_FOOT


def feet_to_mm(value_ft):
    """Convert feet to millimetres."""
    return float(value_ft) * MM_PER_FOOT


def format_elevation_mm(elevation_ft):
    """Format an elevation in feet for display, e.g. '3048.00 mm'."""
    return "{:.2f} mm".format(feet_to_mm(elevation_ft))
