"""
Armor Penetration Models
========================
Empirical penetration (mm of rolled homogeneous armor) at impact, selected
by shell family:

  - AP / APHE    DeMarre formula on full mass and caliber; APHE rounds are
                 penalised by their explosive filler fraction.
  - SUBCALIBER   DeMarre formula on a blended effective mass and the core
                 caliber.
  - FIN-STABILIZED SABOT
                 no formula: the supplied distance -> penetration curve is
                 interpolated at the impact distance.
  - everything else  0 mm.

DeMarre:
    pen = K * (V / 1900)^speedPow * m^massPow / (cal_dm)^caliberPow * 100
with cal_dm the caliber in decimetres (metres * 10).

Degenerate inputs (zero caliber, zero mass) produce inf / NaN rather than
raising; the formatter renders those as '∞'.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence, Tuple

import numpy as np

from .projectile import ProjectileRecord, ShellFamily


DEMARRE_REF_SPEED = 1900.0     # m/s

# Defaults applied when the record carries 0
DEFAULT_K           = 0.9
DEFAULT_SPEED_POW   = 1.43
DEFAULT_MASS_POW    = 0.71
DEFAULT_CALIBER_POW = 1.07

# APHE filler penalty: (explosive mass / total mass, multiplier)
PEN_BY_EXPLOSIVE = np.array([
    [0.0065, 1.0],
    [0.016,  0.93],
    [0.02,   0.9],
    [0.03,   0.85],
    [0.04,   0.75],
])

# APCR/APDS carrier blending: (core mass / total mass, carrier weight)
PEN_BY_SUBCALIBER = np.array([
    [0.0,  0.25],
    [0.15, 0.4],
    [0.3,  0.5],
    [0.4,  0.75],
])


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero. inf/NaN pass through."""
    if not math.isfinite(value):
        return value
    return float(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def interpolate_table(table: np.ndarray, k: float) -> float:
    """
    Piecewise-linear lookup over a (threshold, value) table.

    Below the first threshold the first value is returned, above the last
    threshold the last value; in between values are linearly interpolated.
    """
    return float(np.interp(k, table[:, 0], table[:, 1]))


def interpolate_armor_power(curve: Sequence[Tuple[float, float]], distance: float) -> float:
    """
    Interpolate a sorted (distance, penetration) curve at ``distance``.

    Intervals are half-open [d0, d1); outside every interval, and for an
    empty curve, the result is 0.
    """
    for (d0, p0), (d1, p1) in zip(curve, curve[1:]):
        if d0 <= distance < d1:
            return p0 + (distance - d0) / (d1 - d0) * (p1 - p0)
    return 0.0


def _non_zero_or(value: float, default: float) -> float:
    return default if value == 0.0 else value


def demarre_params(record: ProjectileRecord) -> Tuple[float, float, float, float]:
    """(K, speedPow, massPow, caliberPow) with defaults applied."""
    return (
        _non_zero_or(record.demarre_k, DEFAULT_K),
        _non_zero_or(record.demarre_speed_pow, DEFAULT_SPEED_POW),
        _non_zero_or(record.demarre_mass_pow, DEFAULT_MASS_POW),
        _non_zero_or(record.demarre_caliber_pow, DEFAULT_CALIBER_POW),
    )


def demarre(impact_speed: float, mass: float, caliber: float,
            params: Tuple[float, float, float, float]) -> float:
    """Unrounded DeMarre penetration (mm); caliber in metres."""
    k, speed_pow, mass_pow, caliber_pow = params
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        pen = (np.float64(k)
               * np.power(np.float64(impact_speed) / DEMARRE_REF_SPEED, speed_pow)
               * np.power(np.float64(mass), mass_pow)
               / np.power(np.float64(caliber) * 10.0, caliber_pow)
               * 100.0)
    return float(pen)


def aphe_penalty(explosive_fraction: float) -> float:
    return interpolate_table(PEN_BY_EXPLOSIVE, explosive_fraction)


def _fraction(part: float, whole: float) -> float:
    if whole == 0.0:
        return math.nan if part == 0.0 else math.copysign(math.inf, part)
    return part / whole


def penetration(record: ProjectileRecord, impact_speed: float, distance: float) -> float:
    """
    Rounded penetration (mm) for one impact.

    ``impact_speed`` drives the DeMarre families; ``distance`` drives the
    fin-stabilized sabot curve.
    """
    family = record.family

    if family in (ShellFamily.AP, ShellFamily.APHE):
        pen = demarre(impact_speed, record.mass, record.caliber, demarre_params(record))
        if family is ShellFamily.APHE:
            pen *= aphe_penalty(_fraction(record.explosive_mass, record.mass))
        return round_half_away(pen)

    if family is ShellFamily.SUBCALIBER:
        core = record.damage_mass
        carrier_weight = interpolate_table(PEN_BY_SUBCALIBER, _fraction(core, record.mass))
        effective_mass = (record.mass - core) * carrier_weight + core
        pen = demarre(impact_speed, effective_mass, record.damage_caliber,
                      demarre_params(record))
        return round_half_away(pen)

    if family is ShellFamily.FIN_STABILIZED_SABOT:
        return round_half_away(interpolate_armor_power(record.armor_power, distance))

    return 0.0
