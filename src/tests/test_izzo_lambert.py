"""
===============================================================================
LAMBERT TARGETER - Izzo Solver Test Suite
===============================================================================
Tests for the Izzo time-of-flight function and the Izzo Lambert solver:
reference time of flight, continuity through the parabola, monotonicity,
the elliptical / hyperbolic / retrograde / near-pi reference transfers and
the iteration-budget failure path.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from core.config import IzzoSettings
from core.constants import AU, DEG2RAD, EARTH_MU, JULIAN_DAY, PI
from core.exceptions import ConvergenceError, DomainError
from core.special_functions import arcsine_ratio
from guidance.izzo_lambert import normalized_time_of_flight, solve_izzo
from guidance.izzo_time_of_flight import compute_time_of_flight_izzo, scaled_anomalies
from guidance.transfer_geometry import build_transfer_geometry


# Canonical Earth units of the elliptical reference case
DISTANCE_UNIT = 6.378136e6
TIME_UNIT = 806.78

# Solar gravitational parameter used by the heliocentric reference cases
KEPTOOLBOX_SUN_MU = 1.32712428e20


def _geometry_parameters(r1, r2, long_way=None):
    geometry = build_transfer_geometry(r1, r2, long_way=long_way)
    return (geometry.normalized_semi_perimeter, geometry.normalized_chord,
            geometry.is_long_way, geometry.normalized_minimum_energy_semi_major_axis)


# =============================================================================
# Test: time-of-flight function
# =============================================================================

class TestIzzoTimeOfFlight:
    """Tests for the normalized time-of-flight function T(x)."""

    def test_reference_value(self):
        """Elliptical reference point x = -0.5 of the Mengali-Quarta example."""
        tof = compute_time_of_flight_izzo(-0.5, 2.36603, 1.73205, False, 1.18301)
        assert_allclose(tof, 9.759646, rtol=1e-7)

    @pytest.mark.parametrize("long_way", [False, True])
    def test_continuity_at_parabola(self, long_way):
        """Elliptic and hyperbolic sides meet at x = 1."""
        s, c, am = 2.36603, 1.73205, 1.183015
        t_below = compute_time_of_flight_izzo(1.0 - 1e-9, s, c, long_way, am)
        t_at = compute_time_of_flight_izzo(1.0, s, c, long_way, am)
        t_above = compute_time_of_flight_izzo(1.0 + 1e-9, s, c, long_way, am)

        assert_allclose(t_below, t_at, rtol=1e-8)
        assert_allclose(t_above, t_at, rtol=1e-8)

    @pytest.mark.parametrize("long_way", [False, True])
    def test_parabolic_time(self, long_way):
        """At x = 1 the time equals Euler's parabolic value."""
        s, c = 2.36603, 1.73205
        am = 0.5 * s
        sign = -1.0 if long_way else 1.0
        expected = 4.0 / 3.0 * (am ** 1.5 - sign * (0.5 * (s - c)) ** 1.5)

        t_parabola = compute_time_of_flight_izzo(1.0, s, c, long_way, am)
        assert_allclose(t_parabola, expected, rtol=1e-13)

    @pytest.mark.parametrize("r2, long_way", [
        ([0.0, 1.3, 0.0], False),
        ([0.0, 1.3, 0.0], True),
        ([-1.0, 0.2, 0.4], False),
        ([-2.5, -0.1, 0.0], True),
    ])
    def test_monotonic_decrease(self, r2, long_way):
        """T(x) strictly decreases over the whole single-revolution domain."""
        s, c, lw, am = _geometry_parameters([1.0, 0.0, 0.0], r2, long_way=long_way)
        xs = np.concatenate([np.linspace(-0.999, 0.9, 300),
                             np.linspace(0.9, 1.1, 101)[1:],
                             np.linspace(1.1, 20.0, 300)[1:]])
        times = np.array([compute_time_of_flight_izzo(x, s, c, lw, am) for x in xs])

        assert np.all(times > 0.0)
        assert np.all(np.diff(times) < 0.0)

    def test_long_way_is_slower(self):
        """For the same x the long way always takes longer."""
        s, c, _, am = _geometry_parameters([1.0, 0.0, 0.0], [0.0, 1.3, 0.0])
        for x in (-0.7, 0.0, 0.5, 1.0, 3.0):
            short = compute_time_of_flight_izzo(x, s, c, False, am)
            long = compute_time_of_flight_izzo(x, s, c, True, am)
            assert long > short

    @pytest.mark.parametrize("x", [-0.99, 0.0, 0.5, 2.0])
    def test_scaled_anomaly_b_near_pi(self, x):
        """B keeps its digits 1e-4 deg short of pi, where s - c cancels."""
        angle = PI - 1e-4 * DEG2RAD
        r1 = np.array([7000e3, 0.0, 0.0])
        r2 = 9000e3 * np.array([np.cos(angle), np.sin(angle), 0.0])
        geometry = build_transfer_geometry(r1, r2)
        s = geometry.normalized_semi_perimeter
        a_min = geometry.normalized_minimum_energy_semi_major_axis

        delta = np.arctan2(r2[1], -r2[0])
        s_minus_c = geometry.normalized_arrival_radius * np.sin(0.5 * delta) ** 2 / s
        expected = (2.0 * np.sqrt(0.5 * s_minus_c)
                    * arcsine_ratio(s_minus_c * (1.0 - x * x) / (2.0 * a_min)))

        _, b_term = scaled_anomalies(x, s, geometry.normalized_chord, False, a_min,
                                     geometry.normalized_semi_perimeter_minus_chord)
        assert_allclose(b_term, expected, rtol=1e-8)

    @pytest.mark.parametrize("x", [-1.0, -1.5, np.nan, np.inf])
    def test_outside_domain_raises(self, x):
        with pytest.raises(DomainError):
            compute_time_of_flight_izzo(x, 2.36603, 1.73205, False, 1.18301)


# =============================================================================
# Test: reference transfers
# =============================================================================

class TestIzzoReferenceTransfers:
    """Izzo solver against published reference transfers."""

    def test_elliptical_transfer(self):
        """Earth elliptical transfer (Mengali-Quarta Example 6.1)."""
        r1 = np.array([2.0 * DISTANCE_UNIT, 0.0, 0.0])
        r2 = np.array([2.0 * DISTANCE_UNIT, 2.0 * np.sqrt(3.0) * DISTANCE_UNIT, 0.0])
        geometry = build_transfer_geometry(r1, r2)

        solution = solve_izzo(geometry, 5.0 * TIME_UNIT, 398600.4418e9)

        assert_allclose(solution.departure_velocity[:2], [2735.8, 6594.3], rtol=1e-6)
        assert_allclose(solution.arrival_velocity[:2], [-1367.9, 4225.03], rtol=1e-6)
        assert abs(solution.departure_velocity[2]) < 1e-6
        assert abs(solution.arrival_velocity[2]) < 1e-6
        assert solution.method == 'izzo'
        assert -1.0 < solution.x_parameter < 1.0

    def test_hyperbolic_transfer(self):
        """Earth-centred hyperbolic transfer (Noomen)."""
        r1 = np.array([0.02 * AU, 0.0, 0.0])
        r2 = np.array([0.0, -0.03 * AU, 0.0])
        geometry = build_transfer_geometry(r1, r2)

        solution = solve_izzo(geometry, 100.0 * JULIAN_DAY, 398600.4418e9)

        assert_allclose(solution.departure_velocity[:2], [-745.457, 156.743], rtol=1e-5)
        assert_allclose(solution.arrival_velocity[:2], [104.495, -693.209], rtol=1e-5)
        assert solution.x_parameter > 1.0

    def test_retrograde_transfer(self):
        """Heliocentric retrograde transfer, checked against keptoolbox."""
        r1 = np.array([-131798187443.90068, -72114797019.4148, 2343782.3918863535])
        r2 = np.array([202564770723.92966, -42405023055.01754, -5861543784.413235])
        geometry = build_transfer_geometry(r1, r2, retrograde=True)

        solution = solve_izzo(geometry, 300.0 * JULIAN_DAY, KEPTOOLBOX_SUN_MU)

        assert_allclose(solution.departure_velocity,
                        [-14157.8507230353, 28751.266655828, 1395.46037631136], rtol=1e-9)
        assert_allclose(solution.arrival_velocity,
                        [-6609.91626743654, -22363.5220239692, -716.519714631494], rtol=1e-9)

    def test_near_pi_transfer(self):
        """Heliocentric 179.999 deg transfer, checked against keptoolbox."""
        angle = 179.999 * DEG2RAD
        r1 = np.array([AU, 0.0, 0.0])
        r2 = 1.5 * AU * np.array([np.cos(angle), np.sin(angle), 0.0])
        geometry = build_transfer_geometry(r1, r2)

        solution = solve_izzo(geometry, 300.0 * JULIAN_DAY, KEPTOOLBOX_SUN_MU)

        assert_allclose(solution.departure_velocity[:2],
                        [3160.36638344209, 32627.4771454454], rtol=1e-9)
        assert_allclose(solution.arrival_velocity[:2],
                        [3159.89183582648, -21751.7065841264], rtol=1e-9)
        assert abs(solution.departure_velocity[2]) < 1e-9
        assert abs(solution.arrival_velocity[2]) < 1e-9

    def test_converged_x_reproduces_time_of_flight(self):
        """The returned x satisfies T(x) = T* to solver precision."""
        r1 = np.array([7000e3, 0.0, 0.0])
        r2 = np.array([-3000e3, 9000e3, 1000e3])
        geometry = build_transfer_geometry(r1, r2)
        tof = 4000.0

        solution = solve_izzo(geometry, tof, EARTH_MU)
        t_solution = compute_time_of_flight_izzo(
            solution.x_parameter,
            geometry.normalized_semi_perimeter,
            geometry.normalized_chord,
            geometry.is_long_way,
            geometry.normalized_minimum_energy_semi_major_axis,
        )
        assert_allclose(t_solution, normalized_time_of_flight(geometry, tof, EARTH_MU), rtol=1e-10)
        assert solution.iterations <= 20


# =============================================================================
# Test: iteration budget
# =============================================================================

class TestIzzoIterationBudget:
    """The fixed iteration budget is honoured and reported."""

    def test_exhausted_budget_raises(self):
        """A single secant step cannot reach the residual tolerance."""
        geometry = build_transfer_geometry([7000e3, 0.0, 0.0], [0.0, 9000e3, 0.0])
        with pytest.raises(ConvergenceError) as excinfo:
            solve_izzo(geometry, 3000.0, EARTH_MU, IzzoSettings(max_iterations=1))
        assert excinfo.value.iterations == 1

    def test_loose_residual_accepts_budget_exhaustion(self):
        """With a loose residual tolerance the last iterate is accepted."""
        geometry = build_transfer_geometry([7000e3, 0.0, 0.0], [0.0, 9000e3, 0.0])
        settings = IzzoSettings(max_iterations=3, residual_tolerance=1.0)

        solution = solve_izzo(geometry, 3000.0, EARTH_MU, settings)
        assert solution.iterations == 3

    def test_minimum_energy_time_gives_zero_x(self):
        """Targeting T(0) converges onto the minimum-energy ellipse."""
        geometry = build_transfer_geometry([7000e3, 0.0, 0.0], [0.0, 9000e3, 0.0])
        t_min = compute_time_of_flight_izzo(
            0.0,
            geometry.normalized_semi_perimeter,
            geometry.normalized_chord,
            geometry.is_long_way,
            geometry.normalized_minimum_energy_semi_major_axis,
        )
        tof = t_min * np.sqrt(7000e3 ** 3 / EARTH_MU)

        solution = solve_izzo(geometry, tof, EARTH_MU)
        assert abs(solution.x_parameter) < 1e-9
