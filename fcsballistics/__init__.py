"""
Ballistic Range Table Generator
===============================
Computes, for tank and autocannon projectiles, the table of ground-impact
distance, time of flight and armor penetration across a sweep of launch
angles:
  - Barometric air density (precomputed lookup table)
  - Fixed-step Euler integration with velocity-squared drag
  - DeMarre penetration for AP, APHE and sub-caliber rounds
  - Supplied penetration curves for fin-stabilized sabot rounds

Results are memoized in a thread-safe, bit-exact cache so a batch of
vehicles sharing the same shells simulates each shell once.
"""

from .atmosphere import (
    DensityTable, barometric_density, barometric_density_array, density_profile,
)
from .projectile import ProjectileRecord, ShellFamily, is_skipped
from .integrator import simulate_euler, sweep_angles, ImpactResult
from .penetration import penetration, interpolate_table, interpolate_armor_power
from .range_table import RangeRow, build_range_table, truncate_rows
from .formatter import render_table, format_time, format_penetration
from .cache import BallisticCache, CacheKey, make_cache_key, compute_ballistic
from .data_file import parse_data_file, parse_data_text
from .batch import BatchConfig, BatchStats, run_batch
from .validation import compare_tables, validate_directory

__version__ = "1.0.0"
__all__ = [
    'DensityTable', 'barometric_density', 'barometric_density_array', 'density_profile',
    'ProjectileRecord', 'ShellFamily', 'is_skipped',
    'simulate_euler', 'sweep_angles', 'ImpactResult',
    'penetration', 'interpolate_table', 'interpolate_armor_power',
    'RangeRow', 'build_range_table', 'truncate_rows',
    'render_table', 'format_time', 'format_penetration',
    'BallisticCache', 'CacheKey', 'make_cache_key', 'compute_ballistic',
    'parse_data_file', 'parse_data_text',
    'BatchConfig', 'BatchStats', 'run_batch',
    'compare_tables', 'validate_directory',
]
