"""
Projectile Record & Shell Families
==================================
Defines the ProjectileRecord dataclass consumed by the range-table builder
and the closed set of shell families that select a penetration model:

  - AP                    solid / capped kinetic rounds
  - APHE                  explosive-filled AP (filler penalty applies)
  - SUBCALIBER            APCR / APDS composite-core rounds
  - FIN_STABILIZED_SABOT  APFSDS, penetration from an external curve
  - SKIP                  guided missiles and rockets (no table at all)
  - OTHER                 everything else (HE, HEAT, smoke, ...), 0 mm

The family is resolved once from the normalized type tag when the record
is created.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


# ── Type tag sets (normalized tags, see data_file.normalize_shell_type) ───
SKIP_TYPES = frozenset({'sam', 'atgm', 'rocket', 'aam'})
APHE_TYPES = frozenset({'aphe', 'aphebc', 'ac', 'sapcbc', 'sap', 'sapi'})
AP_TYPES = frozenset({'i', 't', 'ap', 'apc', 'apbc', 'apcbc'}) | APHE_TYPES
SUBCALIBER_TYPES = frozenset({'apcr', 'apds'})
FIN_STABILIZED_TYPES = frozenset({'apds_fs'})


class ShellFamily(Enum):
    AP = 'ap'
    APHE = 'aphe'
    SUBCALIBER = 'subcaliber'
    FIN_STABILIZED_SABOT = 'fin_stabilized_sabot'
    SKIP = 'skip'
    OTHER = 'other'

    @classmethod
    def from_type(cls, shell_type: str) -> 'ShellFamily':
        """Resolve a normalized type tag; the first matching family wins."""
        if shell_type in SKIP_TYPES:
            return cls.SKIP
        if shell_type in APHE_TYPES:
            return cls.APHE
        if shell_type in AP_TYPES:
            return cls.AP
        if shell_type in SUBCALIBER_TYPES:
            return cls.SUBCALIBER
        if shell_type in FIN_STABILIZED_TYPES:
            return cls.FIN_STABILIZED_SABOT
        return cls.OTHER


def is_skipped(shell_type: str) -> bool:
    """True for tags that never produce a range table (missiles, rockets)."""
    return shell_type in SKIP_TYPES


@dataclass
class ProjectileRecord:
    """
    Physics inputs for one projectile.

    Numeric fields are already defaulted to 0 by the reader when missing.
    DeMarre fields equal to 0 mean "use the default" at compute time.
    """
    shell_type: str = 'ap'             # normalized type tag
    mass: float = 0.0                  # kg
    caliber: float = 0.0               # m  (ballistic caliber)
    speed: float = 0.0                 # m/s  muzzle velocity
    cx: float = 0.0                    # drag coefficient
    explosive_mass: float = 0.0        # kg  filler
    damage_mass: float = 0.0           # kg  sub-caliber core
    damage_caliber: float = 0.0        # m   sub-caliber core
    demarre_k: float = 0.0
    demarre_speed_pow: float = 0.0
    demarre_mass_pow: float = 0.0
    demarre_caliber_pow: float = 0.0
    # (distance m, penetration mm) pairs, sorted by distance
    armor_power: Tuple[Tuple[float, float], ...] = ()
    output_name: str = ''              # diagnostics / file name only
    family: ShellFamily = field(init=False)

    def __post_init__(self):
        self.armor_power = tuple((float(d), float(p)) for d, p in self.armor_power)
        self.family = ShellFamily.from_type(self.shell_type)

    @property
    def area(self) -> float:
        """Reference cross-section (m²)."""
        return self.caliber * self.caliber / 4.0 * math.pi

    @property
    def drag_factor(self) -> float:
        """Cx * A / m, the per-projectile constant of the drag deceleration."""
        if self.mass <= 0.0:
            return 0.0
        return self.cx * self.area / self.mass

    @property
    def simulatable(self) -> bool:
        """
        A record needs finite positive mass and muzzle speed, and a finite
        non-negative drag factor, to be integrated.
        """
        return (0.0 < self.mass < math.inf and 0.0 < self.speed < math.inf
                and 0.0 <= self.drag_factor < math.inf)
