"""
Barometric Air Density Model
============================
Air density as a function of altitude above the firing point, from the
troposphere barometric formula:

    rho(h) = rho0 * (1 - L*h / T_std) ** E

    rho0 = P_atm * M_air / (R * T_ground)       (ideal gas at the ground)
    E    = g * M_air / (R * L) - 1               (density exponent)

The power evaluation is the most expensive term in the trajectory inner
loop, so a DensityTable precomputes it on a dense altitude grid once and
serves linearly interpolated lookups. Above the table ceiling the closed
form is evaluated directly.
"""

import numpy as np


# ── Atmosphere Constants ───────────────────────────────────────────────────
GRAVITY              = 9.80665     # m/s²
SEA_LEVEL_PRESSURE   = 101325.0    # Pa
GROUND_TEMP_C        = 15.0        # °C
MOLAR_MASS_AIR       = 0.0289652   # kg/mol
GAS_CONSTANT         = 8.31446     # J/(mol·K)
LAPSE_RATE           = 0.0065      # K/m
STANDARD_TEMP        = 288.15      # K

GROUND_TEMP_K = GROUND_TEMP_C + 273.15
GROUND_DENSITY = SEA_LEVEL_PRESSURE * MOLAR_MASS_AIR / GAS_CONSTANT / GROUND_TEMP_K
DENSITY_EXPONENT = GRAVITY * MOLAR_MASS_AIR / GAS_CONSTANT / LAPSE_RATE - 1.0

# Default lookup grid
DEFAULT_STEP    = 0.1     # m
DEFAULT_CEILING = 500.0   # m


def barometric_density(altitude: float) -> float:
    """
    Closed-form air density (kg/m³) at a given altitude (m).

    Above ~44 km the temperature term goes non-positive; density is 0 there.
    """
    base = 1.0 - LAPSE_RATE * altitude / STANDARD_TEMP
    if base <= 0.0:
        return 0.0
    return GROUND_DENSITY * base ** DENSITY_EXPONENT


def barometric_density_array(altitudes: np.ndarray) -> np.ndarray:
    """Vectorised barometric_density(); 0 where the base goes non-positive."""
    base = 1.0 - LAPSE_RATE * np.asarray(altitudes, dtype=float) / STANDARD_TEMP
    with np.errstate(invalid='ignore'):
        return np.where(base > 0.0,
                        GROUND_DENSITY * np.power(np.clip(base, 0.0, None), DENSITY_EXPONENT),
                        0.0)


class DensityTable:
    """
    Precomputed, read-only density lookup.

    Build one per process and pass it to every simulation; it holds no
    mutable state after construction and is safe to share across threads.
    """

    def __init__(self, step: float = DEFAULT_STEP, ceiling: float = DEFAULT_CEILING):
        """
        Parameters
        ----------
        step : float
            Altitude spacing of the table (m).
        ceiling : float
            Highest tabulated altitude (m); lookups at or above it use the
            closed-form formula.
        """
        if step <= 0.0 or ceiling <= 0.0:
            raise ValueError(
                f"Density table needs a positive step and ceiling, "
                f"got step={step}, ceiling={ceiling}"
            )

        self.step = float(step)
        self.ceiling = float(ceiling)

        size = int(round(self.ceiling / self.step)) + 1
        values = barometric_density_array(np.arange(size) * self.step)

        # Plain tuple of floats for fastest scalar indexing in the hot loop
        self._values = tuple(values.tolist())
        self._inv_step = 1.0 / self.step
        self._last_index = size - 1

    def __len__(self) -> int:
        return len(self._values)

    def density(self, altitude: float) -> float:
        """Air density (kg/m³) at ``altitude`` metres above the firing point."""
        if altitude <= 0.0:
            return self._values[0]

        idx_f = altitude * self._inv_step
        if not idx_f < self._last_index:
            # Rare: only steep, fast trajectories climb this high. Also
            # catches inf and NaN before the int conversion.
            return barometric_density(altitude)

        idx = int(idx_f)
        frac = idx_f - idx
        lo = self._values[idx]
        return lo + frac * (self._values[idx + 1] - lo)


def density_profile(alt_array: np.ndarray, table: DensityTable = None) -> dict:
    """
    Density over an array of altitudes, for plotting.
    Returns dict with keys: 'altitude', 'density', and 'table' when a
    DensityTable is supplied.
    """
    profile = {
        'altitude': alt_array,
        'density': barometric_density_array(alt_array),
    }
    if table is not None:
        profile['table'] = np.array([table.density(h) for h in alt_array])
    return profile


if __name__ == "__main__":
    table = DensityTable()
    print("Barometric Density Table")
    print("=" * 44)
    print(f"{'Alt (m)':>10} {'Table':>12} {'Formula':>12}")
    print("-" * 44)
    for h in [0, 10, 100.05, 250, 499.95, 1000, 5000]:
        print(f"{h:>10.2f} {table.density(h):>12.6f} {barometric_density(h):>12.6f}")
