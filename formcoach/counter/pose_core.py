from __future__ import annotations
import math
from typing import Iterable, Literal, Tuple

Rule = Literal["min", "max"]

# Utility math

def angle_3pt(a: Tuple[float, float], b: Tuple[float, float], c: Tuple[float, float]) -> float:
    """Return angle ABC in degrees with B as vertex, folded into [0, 180]."""
    try:
        ang = math.degrees(
            math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
        )
        ang = abs(ang)
        if ang > 180:
            ang = 360 - ang
        return ang
    except (TypeError, ValueError, IndexError):
        return 0.0


def combine_angles(angles: Iterable[float], rule: Rule = "min") -> float:
    """Fold left/right angles into one value (min tracks the more flexed side)."""
    values = list(angles)
    if not values:
        return 0.0
    return min(values) if rule == "min" else max(values)
