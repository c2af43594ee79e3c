"""
===============================================================================
LAMBERT TARGETER - Velocity Reconstruction
===============================================================================
Converts a solved shape parameter x plus the transfer geometry into inertial
departure and arrival velocities. Shared by the Izzo and Gooding solvers,
which both solve for the same x.

Working in units of |r1| (length) and sqrt(|r1|^3 / mu) (time), the
semi-latus rectum follows from

    eta^2 = 2 a sin^2(psi) / s       (psi = (alpha - beta) / 2)
    p     = r2 sin^2(theta / 2) / (a_min eta^2)

and the departure components from Izzo's relation

    v_r1 = (2 lambda a_min - (lambda + x eta)) / (eta sqrt(a_min))
    v_t1 = sqrt(p)

with lambda = sqrt(r2) cos(theta / 2) / s. Angular momentum conservation
and the Lagrange coefficients then give the arrival components

    v_t2 = v_t1 / r2
    v_r2 = -v_r1 + (v_t1 - v_t2) / tan(theta / 2)

Two rewrites keep this finite everywhere:

* 2 a sin^2(psi) is written as (A - B)^2 c1(u)^2 / 4 with the scaled
  anomalies A, B and the Stumpff-like c1, removing the 0 * inf at x = 1.
* The velocities are assembled from radial/transverse components in the
  transfer plane instead of v2 = (r2 - f r1) / g, so nothing divides by the
  Lagrange coefficient g, which vanishes as theta approaches pi.

The scaled anomaly B is fed s - c as s q^2 from the geometry. Forming s - c
by subtraction leaves only a few correct digits within arcseconds of pi,
and the arrival position is very sensitive to v1 there.
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from core.special_functions import stumpff_c1
from guidance.izzo_time_of_flight import scaled_anomalies
from guidance.transfer_geometry import TransferGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LambertSolution:
    """
    Result of a single Lambert solve.

    Attributes:
        method: Solver that produced the result ('izzo' or 'gooding').
        x_parameter: Converged shape parameter x.
        iterations: Root-finder iterations consumed.
        departure_velocity: v1 (3,) in m/s, same frame as the positions.
        arrival_velocity: v2 (3,) in m/s.
    """
    method: str
    x_parameter: float
    iterations: int
    departure_velocity: np.ndarray
    arrival_velocity: np.ndarray

    @property
    def velocities(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.departure_velocity, self.arrival_velocity


def reconstruct_velocities(
    geometry: TransferGeometry, x: float, mu: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Departure and arrival velocities for shape parameter x.

    Args:
        geometry: Transfer geometry from build_transfer_geometry.
        x: Solved shape parameter (x > -1).
        mu: Gravitational parameter (m^3/s^2).

    Returns:
        (v1, v2): Velocity vectors (m/s) in the frame of the positions.
    """
    r2 = geometry.normalized_arrival_radius
    c = geometry.normalized_chord
    s = geometry.normalized_semi_perimeter
    a_min = geometry.normalized_minimum_energy_semi_major_axis
    half_theta = 0.5 * geometry.transfer_angle

    a_term, b_term = scaled_anomalies(x, s, c, geometry.is_long_way, a_min,
                                      geometry.normalized_semi_perimeter_minus_chord)
    diff = a_term - b_term
    u = diff * diff * (1.0 - x * x) / (4.0 * a_min)
    eta2 = diff * diff * stumpff_c1(u) ** 2 / (2.0 * s)
    eta = np.sqrt(eta2)

    p = r2 * np.sin(half_theta) ** 2 / (a_min * eta2)
    lam = np.sqrt(r2) * np.cos(half_theta) / s

    v_r1 = (2.0 * lam * a_min - (lam + x * eta)) / (eta * np.sqrt(a_min))
    v_t1 = np.sqrt(p)
    v_t2 = v_t1 / r2
    v_r2 = -v_r1 + (v_t1 - v_t2) / np.tan(half_theta)

    r1_hat = geometry.departure_position / geometry.departure_radius
    r2_hat = geometry.arrival_position / geometry.arrival_radius
    t1_hat = np.cross(geometry.plane_normal, r1_hat)
    t2_hat = np.cross(geometry.plane_normal, r2_hat)

    velocity_unit = np.sqrt(mu / geometry.departure_radius)
    v1 = velocity_unit * (v_r1 * r1_hat + v_t1 * t1_hat)
    v2 = velocity_unit * (v_r2 * r2_hat + v_t2 * t2_hat)

    logger.debug("Reconstructed velocities: p=%.6e (norm), v_r1=%.6e, v_t1=%.6e", p, v_r1, v_t1)
    return v1, v2
