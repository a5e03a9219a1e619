"""
Range Table Builder
===================
Sweeps the launch angle upward from 0, integrates one shot per angle and
records (distance, time of flight, penetration) for each. The sweep ends
at the sensitivity-derived sample bound or as soon as a shot reaches
MAX_RANGE.

Rows are produced in angle order. Past the range peak, steeper shots land
closer again; truncate_rows() cuts the table at the first such decrease.
"""

from dataclasses import dataclass
from typing import List, Optional

from .atmosphere import DensityTable
from .integrator import MAX_RANGE, simulate_euler, sweep_angles
from .penetration import penetration
from .projectile import ProjectileRecord, ShellFamily


@dataclass
class RangeRow:
    """One line of a range table."""
    distance: float       # m
    time: float           # s, unrounded
    penetration: float    # mm, may be inf / NaN


def sweep_rows(record: ProjectileRecord, sensitivity: float,
               atmosphere: DensityTable) -> List[RangeRow]:
    """All sweep rows in angle order, before truncation."""
    rows = []
    drag_factor = record.drag_factor
    last_distance = 0.0

    for angle in sweep_angles(sensitivity):
        if last_distance >= MAX_RANGE:
            break
        impact = simulate_euler(record.speed, angle, drag_factor, atmosphere)
        last_distance = impact.distance
        rows.append(RangeRow(
            distance=impact.distance,
            time=impact.time,
            penetration=penetration(record, impact.impact_speed, impact.distance),
        ))

    return rows


def truncate_rows(rows: List[RangeRow]) -> List[RangeRow]:
    """
    Keep rows up to the first one whose successor lands closer.

    A row is only emitted when a successor exists, so the final sweep row
    never appears and a single row yields an empty table.
    """
    kept = []
    for row, successor in zip(rows, rows[1:]):
        if successor.distance < row.distance:
            break
        kept.append(row)
    return kept


def build_range_table(record: ProjectileRecord, sensitivity: float,
                      atmosphere: DensityTable) -> Optional[List[RangeRow]]:
    """
    Truncated range table for one projectile.

    Returns None when there is nothing to simulate: skip-listed families,
    a sensitivity that is not positive (NaN included), or a record that is
    not simulatable.
    """
    if record.family is ShellFamily.SKIP or not sensitivity > 0.0:
        return None
    if not record.simulatable:
        return None
    return truncate_rows(sweep_rows(record, sensitivity, atmosphere))
