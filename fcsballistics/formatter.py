"""
Range table text output.

Each row is ``distance<TAB>time<TAB>penetration`` followed by a newline.
"""

import math
from typing import List, Optional

from .penetration import round_half_away
from .range_table import RangeRow


INFINITY_GLYPH = '∞'


def format_distance(distance: float) -> str:
    return f"{distance:.3f}"


def format_time(time: float) -> str:
    """
    Time of flight to one decimal, ties away from zero.
    Whole seconds print without a decimal point: 0 -> '0', 3.45 -> '3.5'.
    """
    rounded = round_half_away(time * 10.0) / 10.0
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:.1f}"


def format_penetration(pen: float) -> str:
    """Integer millimetres (truncated); inf and NaN print as '∞'."""
    if math.isinf(pen) or math.isnan(pen):
        return INFINITY_GLYPH
    return str(int(pen))


def render_table(rows: Optional[List[RangeRow]]) -> str:
    """
    Tab-separated table of already-truncated rows.

    A sweep of fewer than two rows truncates to nothing, so it renders as
    the empty string.
    """
    if not rows:
        return ''
    return ''.join(
        f"{format_distance(r.distance)}\t{format_time(r.time)}\t"
        f"{format_penetration(r.penetration)}\n"
        for r in rows
    )
