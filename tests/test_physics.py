"""
Unit Tests for the physics core: density model, integrator, penetration.
Run: python -m pytest tests/ -v
"""

import math

import numpy as np
import pytest

from fcsballistics.atmosphere import (
    DensityTable, barometric_density, density_profile, GROUND_DENSITY,
)
from fcsballistics.integrator import (
    simulate_euler, sweep_angles, max_samples, scroll_step,
)
from fcsballistics.penetration import (
    PEN_BY_EXPLOSIVE, PEN_BY_SUBCALIBER, aphe_penalty, demarre_params,
    interpolate_armor_power, interpolate_table, penetration, round_half_away,
)
from fcsballistics.projectile import ProjectileRecord, ShellFamily, is_skipped

from conftest import M735_CURVE


def hand_demarre(v, mass, caliber, k=0.9, sp=1.43, mp=0.71, cp=1.07):
    return k * (v / 1900.0) ** sp * mass ** mp / (caliber * 10.0) ** cp * 100.0


class TestAtmosphere:
    """Density table against the closed-form barometric formula."""

    def test_ground_density(self):
        assert abs(GROUND_DENSITY - 1.225) < 0.001
        assert barometric_density(0.0) == GROUND_DENSITY

    def test_table_size(self, atmosphere):
        assert len(atmosphere) == 5001

    def test_grid_points_match_formula(self, atmosphere):
        for h in [0.0, 0.1, 10.0, 123.4, 499.9]:
            assert atmosphere.density(h) == pytest.approx(barometric_density(h), rel=1e-12)

    def test_interpolates_between_entries(self, atmosphere):
        expected = 0.5 * (barometric_density(100.0) + barometric_density(100.1))
        assert atmosphere.density(100.05) == pytest.approx(expected, rel=1e-12)

    def test_below_ground_uses_first_entry(self, atmosphere):
        assert atmosphere.density(-5.0) == atmosphere.density(0.0)

    def test_above_ceiling_uses_formula(self, atmosphere):
        assert atmosphere.density(500.0) == barometric_density(500.0)
        assert atmosphere.density(2500.0) == barometric_density(2500.0)

    def test_density_decreases_with_altitude(self, atmosphere):
        values = [atmosphere.density(h) for h in [0.0, 100.0, 499.0, 1000.0, 5000.0]]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_formula_limit_is_zero(self):
        assert barometric_density(60000.0) == 0.0

    def test_invalid_table(self):
        with pytest.raises(ValueError):
            DensityTable(step=0.0)
        with pytest.raises(ValueError):
            DensityTable(ceiling=-1.0)

    def test_profile(self, atmosphere):
        alts = np.linspace(0.0, 1000.0, 11)
        profile = density_profile(alts, atmosphere)
        assert profile['density'].shape == (11,)
        assert np.allclose(profile['density'], profile['table'], rtol=1e-9)

    def test_profile_is_vectorised_formula(self):
        alts = np.array([0.0, 123.4, 2500.0, 60000.0])
        profile = density_profile(alts)
        expected = [barometric_density(h) for h in alts]
        assert np.allclose(profile['density'], expected, rtol=1e-12, atol=0.0)
        assert profile['density'][-1] == 0.0
        assert 'table' not in profile

    def test_non_finite_altitude(self, atmosphere):
        assert atmosphere.density(math.inf) == 0.0
        assert math.isnan(atmosphere.density(math.nan))


class TestIntegrator:
    """Euler integration of single shots."""

    def test_vacuum_range(self, atmosphere):
        v, angle, g = 100.0, 0.5, 9.80665
        r = simulate_euler(v, angle, 0.0, atmosphere)
        analytic = v * v * math.sin(2 * angle) / g
        assert r.distance == pytest.approx(analytic, rel=0.005)
        assert r.time == pytest.approx(2 * v * math.sin(angle) / g, rel=0.005)
        assert r.impact_speed == pytest.approx(v, rel=0.005)

    def test_flat_shot_lands_immediately(self, atmosphere, m735):
        r = simulate_euler(m735.speed, 0.0, m735.drag_factor, atmosphere)
        assert r.distance == 0.0
        assert r.time == 0.0
        assert r.vy < 0.0

    def test_drag_reduces_range(self, atmosphere, m735):
        vacuum = simulate_euler(m735.speed, 0.01, 0.0, atmosphere)
        dragged = simulate_euler(m735.speed, 0.01, m735.drag_factor, atmosphere)
        assert dragged.distance < vacuum.distance
        assert dragged.impact_speed < m735.speed

    def test_deterministic(self, atmosphere, pzgr39):
        a = simulate_euler(pzgr39.speed, 0.03, pzgr39.drag_factor, atmosphere)
        b = simulate_euler(pzgr39.speed, 0.03, pzgr39.drag_factor, atmosphere)
        assert a == b

    def test_zero_speed_does_not_raise(self, atmosphere):
        r = simulate_euler(0.0, 0.0, 1e-3, atmosphere)
        assert r.distance == 0.0

    def test_sweep_bounds(self):
        assert max_samples(0.5) == 1495
        assert max_samples(0.0) == 0
        assert max_samples(-1.0) == 0
        angles = list(sweep_angles(0.5))
        assert len(angles) == 1495
        assert angles[0] == 0.0
        assert angles[1] == pytest.approx(scroll_step(0.5) / 1000.0)
        assert angles[-1] < math.radians(60.0)

    def test_finer_sensitivity_more_samples(self):
        assert max_samples(0.25) > max_samples(0.5) > max_samples(1.0)

    @pytest.mark.parametrize('s', [math.nan, math.inf, -math.inf, 1e-200])
    def test_degenerate_sensitivity_has_no_samples(self, s):
        assert max_samples(s) == 0
        assert list(sweep_angles(s)) == []

    def test_infinite_speed_returns_nan_impact(self, atmosphere, pzgr39):
        r = simulate_euler(math.inf, 0.05, pzgr39.drag_factor, atmosphere)
        assert math.isnan(r.distance)
        assert math.isnan(r.time)

    def test_negative_drag_returns_nan_impact(self, atmosphere):
        r = simulate_euler(800.0, 0.05, -1e-3, atmosphere)
        assert math.isnan(r.distance)


class TestShellFamily:

    @pytest.mark.parametrize('tag', ['sam', 'atgm', 'rocket', 'aam'])
    def test_skip_tags(self, tag):
        assert is_skipped(tag)
        assert ShellFamily.from_type(tag) is ShellFamily.SKIP

    @pytest.mark.parametrize('tag', ['apcbc', 'apds_fs', 'he', 'apcr'])
    def test_non_skip_tags(self, tag):
        assert not is_skipped(tag)

    def test_dispatch(self):
        assert ShellFamily.from_type('apcbc') is ShellFamily.AP
        assert ShellFamily.from_type('t') is ShellFamily.AP
        assert ShellFamily.from_type('aphebc') is ShellFamily.APHE
        assert ShellFamily.from_type('sapi') is ShellFamily.APHE
        assert ShellFamily.from_type('apds') is ShellFamily.SUBCALIBER
        assert ShellFamily.from_type('apds_fs') is ShellFamily.FIN_STABILIZED_SABOT
        assert ShellFamily.from_type('heat') is ShellFamily.OTHER

    def test_record_resolves_family(self, m735):
        assert m735.family is ShellFamily.FIN_STABILIZED_SABOT

    def test_drag_factor(self, pzgr39):
        area = math.pi * 0.075 ** 2 / 4.0
        assert pzgr39.drag_factor == pytest.approx(0.4 * area / 6.8)
        assert ProjectileRecord(cx=0.3, caliber=0.1).drag_factor == 0.0


class TestPenetration:

    def test_rounding(self):
        assert round_half_away(0.5) == 1.0
        assert round_half_away(1.5) == 2.0
        assert round_half_away(2.5) == 3.0
        assert round_half_away(-0.5) == -1.0
        assert round_half_away(2.4999) == 2.0
        assert math.isinf(round_half_away(math.inf))
        assert math.isnan(round_half_away(math.nan))

    def test_explosive_table_edges(self):
        assert interpolate_table(PEN_BY_EXPLOSIVE, 0.001) == 1.0
        assert interpolate_table(PEN_BY_EXPLOSIVE, 0.05) == 0.75
        assert interpolate_table(PEN_BY_EXPLOSIVE, 0.04) == 0.75

    def test_explosive_table_between(self):
        k = 0.01
        expected = 1.0 + (0.93 - 1.0) / (0.016 - 0.0065) * (k - 0.0065)
        assert interpolate_table(PEN_BY_EXPLOSIVE, k) == pytest.approx(expected, abs=1e-12)

    def test_subcaliber_table(self):
        assert interpolate_table(PEN_BY_SUBCALIBER, 0.0) == 0.25
        assert interpolate_table(PEN_BY_SUBCALIBER, 0.4) == 0.75
        assert interpolate_table(PEN_BY_SUBCALIBER, 0.5) == 0.75
        assert interpolate_table(PEN_BY_SUBCALIBER, 0.225) == pytest.approx(0.45)

    def test_armor_power_curve(self):
        assert interpolate_armor_power((), 100.0) == 0.0
        assert interpolate_armor_power(M735_CURVE, -1.0) == 0.0
        assert interpolate_armor_power(M735_CURVE, 10000.0) == 0.0
        assert interpolate_armor_power(M735_CURVE, 0.0) == 292.4
        assert interpolate_armor_power(M735_CURVE, 750.0) == pytest.approx(279.5)

    def test_demarre_defaults(self, pzgr39):
        assert demarre_params(pzgr39) == (0.9, 1.43, 0.71, 1.07)
        pzgr39.demarre_k = 1.0
        assert demarre_params(pzgr39)[0] == 1.0

    def test_ap_formula(self, pzgr39):
        expected = round_half_away(hand_demarre(600.0, 6.8, 0.075))
        assert penetration(pzgr39, 600.0, 1000.0) == expected
        assert 85.0 < expected < 100.0

    def test_aphe_penalty(self):
        rec = ProjectileRecord(shell_type='aphe', mass=6.8, caliber=0.075,
                               speed=740.0, cx=0.4, explosive_mass=0.1)
        ratio = 0.1 / 6.8
        raw = hand_demarre(600.0, 6.8, 0.075) * aphe_penalty(ratio)
        assert 0.93 < aphe_penalty(ratio) < 1.0
        assert penetration(rec, 600.0, 0.0) == round_half_away(raw)

    def test_subcaliber_formula(self):
        rec = ProjectileRecord(shell_type='apcr', mass=4.0, caliber=0.075, speed=990.0,
                               cx=0.3, damage_mass=1.0, damage_caliber=0.028)
        kc = interpolate_table(PEN_BY_SUBCALIBER, 0.25)
        effective = (4.0 - 1.0) * kc + 1.0
        expected = round_half_away(hand_demarre(900.0, effective, 0.028))
        assert penetration(rec, 900.0, 0.0) == expected

    def test_missing_core_caliber_is_infinite(self):
        rec = ProjectileRecord(shell_type='apds', mass=4.0, caliber=0.075,
                               speed=1200.0, cx=0.3, damage_mass=1.0)
        assert math.isinf(penetration(rec, 1000.0, 0.0))

    def test_fin_stabilized_uses_curve(self, m735):
        assert penetration(m735, 1.0, 750.0) == round_half_away(279.5)

    def test_other_family_is_zero(self):
        rec = ProjectileRecord(shell_type='he', mass=10.0, caliber=0.1, speed=800.0)
        assert penetration(rec, 800.0, 100.0) == 0.0
