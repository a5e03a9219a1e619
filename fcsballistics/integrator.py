"""
Numerical Integration Engine
=============================
Fixed-step forward Euler integration of a 2D point mass under gravity and
velocity-squared drag, run from the muzzle until the projectile crosses
back through the firing height.

The velocity update is sequential: the horizontal component is updated
first, and the vertical update evaluates its drag direction against the
already-updated horizontal component. Every downstream range table depends
on this ordering, so it must not be rearranged.

Also provides the launch-angle sweep used to build range tables.
"""

import math
from dataclasses import dataclass
from typing import Iterator

from .atmosphere import DensityTable, GRAVITY


DT = 0.01                      # s
MAX_RANGE = 4500.0             # m   sweep stops once a shot reaches this
MAX_SCAN_ANGLE_DEG = 60.0      # deg upper bound of the sweep
SCROLL_FACTOR = 2.8            # angle step (mrad) = SCROLL_FACTOR * sensitivity²


@dataclass
class ImpactResult:
    """Ground-crossing state of one simulated shot."""
    distance: float    # m, interpolated at height 0
    time: float        # s, interpolated at height 0
    vx: float          # m/s, last horizontal velocity
    vy: float          # m/s, last vertical velocity

    @property
    def impact_speed(self) -> float:
        return math.sqrt(self.vx * self.vx + self.vy * self.vy)


def simulate_euler(speed: float, angle: float, drag_factor: float,
                   atmosphere: DensityTable, dt: float = DT) -> ImpactResult:
    """
    Integrate one shot fired at ``angle`` radians above horizontal.

    drag deceleration = rho * |v|² / 2 * drag_factor
    where drag_factor = Cx * A / m (see ProjectileRecord.drag_factor).
    """
    vx = speed * math.cos(angle)
    vy = speed * math.sin(angle)
    if not (math.isfinite(vx) and math.isfinite(vy) and 0.0 <= drag_factor < math.inf):
        # Would never come back down; report a NaN impact instead
        return ImpactResult(distance=math.nan, time=math.nan, vx=vx, vy=vy)

    x = y = t = 0.0
    x0 = y0 = t0 = 0.0
    density = atmosphere.density

    while y >= 0.0:
        v_sq = vx * vx + vy * vy
        accel = density(y) * v_sq / 2.0 * drag_factor

        if v_sq > 0.0:
            vx += -accel * (vx / math.sqrt(v_sq)) * dt

        v_new = math.sqrt(vx * vx + vy * vy)
        if v_new > 0.0:
            vy += (-GRAVITY - accel * (vy / v_new)) * dt
        else:
            vy += -GRAVITY * dt

        x0, y0, t0 = x, y, t
        x += vx * dt
        y += vy * dt
        t += dt

    # Linear interpolation to height 0 between the last two samples
    frac = -y0 / (y - y0)
    distance = x0 + (x - x0) * frac
    time = t0 + (t - t0) * frac
    return ImpactResult(distance=distance, time=time, vx=vx, vy=vy)


def scroll_step(sensitivity: float) -> float:
    """Angular step of the sweep in milliradians."""
    return SCROLL_FACTOR * sensitivity * sensitivity


def max_samples(sensitivity: float) -> int:
    """Upper bound on the number of sweep angles for this sensitivity."""
    step = scroll_step(sensitivity)
    if not (sensitivity > 0.0 and step > 0.0):
        return 0
    count = math.radians(MAX_SCAN_ANGLE_DEG) * 1000.0 / step
    if not math.isfinite(count):
        return 0
    return int(math.floor(count))


def sweep_angles(sensitivity: float) -> Iterator[float]:
    """Launch angles (radians) of the sweep, in increasing order."""
    step = scroll_step(sensitivity)
    for i in range(max_samples(sensitivity)):
        yield step * i / 1000.0
