"""
===============================================================================
LAMBERT TARGETER - Izzo Lambert Solver
===============================================================================
Inverts the Izzo time-of-flight function T(x) for the zero-revolution case.

The iteration is a secant (regula falsi) method on

    xi = log(1 + x)    versus    y = log T(x) - log T*

In these coordinates the curve is close to a straight line over the whole
domain x > -1: near x -> -1 the time grows like (1 + x)^-1.5, and for large
hyperbolic x it decays like a power of x. The secant therefore converges in a
handful of steps from a fixed starting pair, and every iterate automatically
satisfies x > -1.

The starting pair is chosen from the minimum-energy time T_m = T(0):

    T* > T_m  ->  x in (-1, 0), start from (0, -0.5233)
    T* <= T_m ->  x > 0,        start from (0, +0.5233)

The iteration runs within a fixed budget of steps. If the budget is exhausted
before the step size drops below tolerance, the relative time-of-flight
residual decides between accepting the iterate and raising ConvergenceError.
===============================================================================
"""

import logging
from typing import Optional

import numpy as np

from core.config import IzzoSettings
from core.exceptions import ConvergenceError, DomainError
from guidance.izzo_time_of_flight import compute_time_of_flight_izzo
from guidance.transfer_geometry import TransferGeometry, validate_transfer_inputs
from guidance.velocity_reconstruction import LambertSolution, reconstruct_velocities

logger = logging.getLogger(__name__)

# Offset of the second starting point from the minimum-energy solution x = 0
STARTER_OFFSET = 0.5233


def normalized_time_of_flight(geometry: TransferGeometry, time_of_flight: float, mu: float) -> float:
    """Time of flight in units of sqrt(|r1|^3 / mu)."""
    return time_of_flight * np.sqrt(mu / geometry.departure_radius ** 3)


def solve_izzo(
    geometry: TransferGeometry,
    time_of_flight: float,
    mu: float,
    settings: Optional[IzzoSettings] = None,
) -> LambertSolution:
    """
    Solve the zero-revolution Lambert problem with Izzo's method.

    Args:
        geometry: Transfer geometry (fixes the long/short way and plane).
        time_of_flight: Transfer time in seconds (> 0).
        mu: Gravitational parameter (m^3/s^2, > 0).
        settings: Iteration controls; defaults to IzzoSettings().

    Returns:
        LambertSolution with method 'izzo'.

    Raises:
        InputError: If time_of_flight or mu is invalid.
        ConvergenceError: If the iteration budget is exhausted and the
            time-of-flight residual is still above tolerance.
    """
    validate_transfer_inputs(time_of_flight, mu)
    if settings is None:
        settings = IzzoSettings()

    s = geometry.normalized_semi_perimeter
    c = geometry.normalized_chord
    a_min = geometry.normalized_minimum_energy_semi_major_axis
    s_minus_c = geometry.normalized_semi_perimeter_minus_chord
    long_way = geometry.is_long_way

    target = normalized_time_of_flight(geometry, time_of_flight, mu)
    log_target = np.log(target)

    def _residual(x: float) -> float:
        t = compute_time_of_flight_izzo(x, s, c, long_way, a_min, s_minus_c)
        return np.log(t) - log_target

    # Minimum-energy transfer at x = 0 picks the side of the root
    y1 = _residual(0.0)
    x_start = -STARTER_OFFSET if y1 < 0.0 else STARTER_OFFSET
    xi1, xi2 = 0.0, np.log1p(x_start)
    y2 = _residual(x_start)

    converged = False
    iterations = 0
    for iteration in range(1, settings.max_iterations + 1):
        if y1 == y2:
            break
        xi_new = (xi1 * y2 - y1 * xi2) / (y2 - y1)
        try:
            y_new = _residual(np.expm1(xi_new))
        except DomainError as exc:
            raise ConvergenceError(
                f"Izzo iteration left the domain at step {iteration}",
                iterations=iteration,
                last_value=float(np.expm1(xi2)),
            ) from exc
        if not np.isfinite(y_new):
            raise ConvergenceError(
                f"Izzo iteration produced a non-finite residual at step {iteration}",
                iterations=iteration,
                last_value=float(np.expm1(xi2)),
            )

        step = abs(xi2 - xi_new)
        xi1, y1 = xi2, y2
        xi2, y2 = xi_new, y_new
        iterations = iteration
        if step < settings.tolerance:
            converged = True
            break

    x = float(np.expm1(xi2))
    relative_residual = abs(np.expm1(y2))

    if not converged and relative_residual > settings.residual_tolerance:
        logger.warning(
            "Izzo Lambert solver did not converge in %d iterations (x=%.6f, dT/T=%.3e).",
            iterations, x, relative_residual,
        )
        raise ConvergenceError(
            f"Izzo solver did not converge in {iterations} iterations "
            f"(relative time-of-flight error {relative_residual:.3e})",
            iterations=iterations,
            last_value=x,
        )

    logger.debug("Izzo Lambert converged: x=%.12f after %d iterations", x, iterations)

    v1, v2 = reconstruct_velocities(geometry, x, mu)
    return LambertSolution(
        method='izzo',
        x_parameter=x,
        iterations=iterations,
        departure_velocity=v1,
        arrival_velocity=v2,
    )
