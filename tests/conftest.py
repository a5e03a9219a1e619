"""
Shared fixtures: one density table per session and a few real shells.
Run: python -m pytest tests/ -v
"""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fcsballistics.atmosphere import DensityTable
from fcsballistics.projectile import ProjectileRecord


# 105mm M735 APFSDS, (distance m, penetration mm)
M735_CURVE = (
    (0.0, 292.4), (100.0, 290.6), (500.0, 284.0), (1000.0, 275.0),
    (1500.0, 265.9), (2000.0, 256.5), (2500.0, 246.7), (3000.0, 236.7),
    (4000.0, 215.5), (10000.0, 50.0),
)


@pytest.fixture(scope='session')
def atmosphere():
    return DensityTable()


@pytest.fixture
def m735():
    return ProjectileRecord(
        shell_type='apds_fs',
        mass=3.719457,
        caliber=0.035,
        speed=1501.14,
        cx=0.2925,
        damage_caliber=0.03175,
        armor_power=M735_CURVE,
        output_name='m735',
    )


@pytest.fixture
def pzgr39():
    """75mm PzGr 39 APCBC with DeMarre fields left at 0."""
    return ProjectileRecord(
        shell_type='apcbc',
        mass=6.8,
        caliber=0.075,
        speed=740.0,
        cx=0.4,
        explosive_mass=0.017,
        output_name='pzgr_39',
    )
