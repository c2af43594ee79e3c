"""
===============================================================================
LAMBERT TARGETER - Gooding Lambert Solver
===============================================================================
Gooding's formulation of Lambert's problem: the Lancaster-Blanchard time
equation in the shape parameter x, split into two auxiliary "Lambert
functions" and inverted with Newton-Raphson.

Normalization
-------------
With the Lambert parameter q = sqrt(r1 r2)/s cos(theta/2) and the
normalized time T* = sqrt(8 mu / s^3) * tof, the time equation is

    E = x^2 - 1,  y = sqrt|E|,  z = sqrt(1 + q^2 E)
    f = y (z - q x),  g = x z - q E
    d = atan2(f, g)   (ellipse)      d = log(f + g)   (hyperbola)

    T(x) = 2 (x - q z - d / y) / E
    T'(x) = (3 T x - 4 + 4 q^3 x / z) / (1 - x^2)

Both expressions are 0/0 at the parabola x = 1. For sqrt(0.6) < x < sqrt(1.4)
Battin's hypergeometric series is used instead:

    eta = z - q x,   S1 = (1 - q - x eta) / 2,   Q = 4/3 2F1(3, 1; 5/2; S1)
    T = eta^3 Q + 4 q eta

Lambert functions
-----------------
F(x) = T* - T(x) with F'(x) = -T'(x), split at the parabola into a
negative branch (-1 < x <= 1, ellipse) and a positive branch (x >= 1,
hyperbola). The two meet at x = 1.

Starter
-------
Gooding's starter: the bilinear elliptic estimate (constants 1.7, 0.5,
0.03) when T* exceeds the minimum-energy time T0, and the first-order
estimate T0 (T0 - T*) / (4 T*) otherwise. The higher-order hyperbolic
corrections of the full starter are not applied, so the iteration is known
to diverge for a class of geometries (long way, transfer angle near 2*pi,
short time of flight). Those cases raise ConvergenceError.
===============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

import numpy as np

from core.config import GoodingSettings
from core.exceptions import ConvergenceError, DomainError
from core.special_functions import battin_series, battin_series_derivative
from guidance.transfer_geometry import TransferGeometry, validate_transfer_inputs
from guidance.velocity_reconstruction import LambertSolution, reconstruct_velocities

logger = logging.getLogger(__name__)

# Battin series window around the parabola x = 1
SERIES_LOWER_BOUND = np.sqrt(0.6)
SERIES_UPPER_BOUND = np.sqrt(1.4)

# Starter constants (Gooding 1990)
_C0 = 1.7
_C1 = 0.5
_C2 = 0.03


class LambertBranch(Enum):
    """Branch of the Gooding Lambert function containing x."""
    NEGATIVE = -1   # -1 < x < 1, elliptic side
    POSITIVE = 1    # x >= 1, hyperbolic side


@dataclass(frozen=True)
class GoodingFunctionState:
    """Parameters of the Gooding Lambert functions."""
    q_parameter: float
    normalized_time_of_flight: float


# =============================================================================
# TIME EQUATION
# =============================================================================

def _in_series_window(x: float) -> bool:
    return SERIES_LOWER_BOUND < x < SERIES_UPPER_BOUND


def _time_of_flight(q: float, x: float) -> float:
    e = x * x - 1.0
    z = np.sqrt(1.0 + q * q * e)
    if _in_series_window(x):
        eta = z - q * x
        s1 = 0.5 * (1.0 - q - x * eta)
        return eta ** 3 * battin_series(s1) + 4.0 * q * eta

    y = np.sqrt(abs(e))
    f = y * (z - q * x)
    g = x * z - q * e
    if e < 0.0:
        d = np.arctan2(f, g)
    else:
        d = np.log(f + g)
    return 2.0 * (x - q * z - d / y) / e


def _time_of_flight_derivative(q: float, x: float) -> float:
    e = x * x - 1.0
    z = np.sqrt(1.0 + q * q * e)
    if _in_series_window(x):
        eta = z - q * x
        eta_prime = q * q * x / z - q
        s1 = 0.5 * (1.0 - q - x * eta)
        s1_prime = -0.5 * (eta + x * eta_prime)
        return (3.0 * eta * eta * eta_prime * battin_series(s1)
                + eta ** 3 * battin_series_derivative(s1) * s1_prime
                + 4.0 * q * eta_prime)

    t = _time_of_flight(q, x)
    return (3.0 * t * x - 4.0 + 4.0 * q ** 3 * x / z) / (1.0 - x * x)


# =============================================================================
# LAMBERT FUNCTIONS
# =============================================================================

def classify_lambert_branch(x: float) -> LambertBranch:
    """
    Branch of the Lambert function for shape parameter x.

    Raises:
        DomainError: If x <= -1 or x is not finite.
    """
    if not np.isfinite(x) or x <= -1.0:
        raise DomainError(f"Gooding shape parameter must satisfy x > -1, got {x}")
    return LambertBranch.POSITIVE if x >= 1.0 else LambertBranch.NEGATIVE


def _check_negative(x: float) -> None:
    if not np.isfinite(x) or not -1.0 < x <= 1.0:
        raise DomainError(f"Negative Lambert function requires -1 < x <= 1, got {x}")


def _check_positive(x: float) -> None:
    if not np.isfinite(x) or x < 1.0:
        raise DomainError(f"Positive Lambert function requires x >= 1, got {x}")


def lambert_function_positive_gooding(x: float, state: GoodingFunctionState) -> float:
    """Residual F(x) = T* - T(x) on the hyperbolic side (x >= 1)."""
    _check_positive(x)
    return state.normalized_time_of_flight - _time_of_flight(state.q_parameter, x)


def lambert_function_negative_gooding(x: float, state: GoodingFunctionState) -> float:
    """Residual F(x) = T* - T(x) on the elliptic side (-1 < x <= 1)."""
    _check_negative(x)
    return state.normalized_time_of_flight - _time_of_flight(state.q_parameter, x)


def lambert_first_derivative_positive_gooding(x: float, state: GoodingFunctionState) -> float:
    """dF/dx on the hyperbolic side (x >= 1)."""
    _check_positive(x)
    return -_time_of_flight_derivative(state.q_parameter, x)


def lambert_first_derivative_negative_gooding(x: float, state: GoodingFunctionState) -> float:
    """dF/dx on the elliptic side (-1 < x <= 1)."""
    _check_negative(x)
    return -_time_of_flight_derivative(state.q_parameter, x)


_FUNCTIONS: Dict[LambertBranch, Callable[[float, GoodingFunctionState], float]] = {
    LambertBranch.POSITIVE: lambert_function_positive_gooding,
    LambertBranch.NEGATIVE: lambert_function_negative_gooding,
}

_DERIVATIVES: Dict[LambertBranch, Callable[[float, GoodingFunctionState], float]] = {
    LambertBranch.POSITIVE: lambert_first_derivative_positive_gooding,
    LambertBranch.NEGATIVE: lambert_first_derivative_negative_gooding,
}


def compute_lambert_function_gooding(x: float, state: GoodingFunctionState) -> float:
    """Lambert function F(x), dispatched on the branch containing x."""
    return _FUNCTIONS[classify_lambert_branch(x)](x, state)


def compute_first_derivative_lambert_function_gooding(
    x: float, state: GoodingFunctionState
) -> float:
    """Lambert function derivative F'(x), dispatched on the branch containing x."""
    return _DERIVATIVES[classify_lambert_branch(x)](x, state)


# =============================================================================
# SOLVER
# =============================================================================

def minimum_energy_time(q: float) -> float:
    """Normalized time T0 = T(x = 0) of the minimum-energy transfer."""
    return 2.0 * (np.arccos(q) + q * np.sqrt(1.0 - q * q))


def gooding_starter(q: float, normalized_time: float) -> float:
    """
    Initial guess for x from Gooding's starter.

    Args:
        q: Lambert parameter in [-1, 1].
        normalized_time: Target T* = sqrt(8 mu / s^3) * tof.

    Returns:
        Starting shape parameter x0 (> -1).
    """
    t0 = minimum_energy_time(q)
    t_diff = normalized_time - t0
    if t_diff > 0.0:
        # Elliptic side, bilinear approximation in x
        thr2 = np.arctan2(1.0 - q * q, 2.0 * q) / np.pi
        x = -t_diff / (t_diff + 4.0)
        w = x + _C0 * np.sqrt(2.0 * (1.0 - thr2))
        if w < 0.0:
            x = x - (-w) ** (1.0 / 16.0) * (x + np.sqrt(t_diff / (t_diff + 1.5 * t0)))
        w = 4.0 / (4.0 + t_diff)
        return x * (1.0 + x * (_C1 * w - _C2 * x * np.sqrt(w)))
    return t0 * (t0 - normalized_time) / (4.0 * normalized_time)


def solve_gooding(
    geometry: TransferGeometry,
    time_of_flight: float,
    mu: float,
    settings: Optional[GoodingSettings] = None,
) -> LambertSolution:
    """
    Solve the zero-revolution Lambert problem with Gooding's method.

    Args:
        geometry: Transfer geometry (fixes the long/short way and plane).
        time_of_flight: Transfer time in seconds (> 0).
        mu: Gravitational parameter (m^3/s^2, > 0).
        settings: Iteration controls; defaults to GoodingSettings().

    Returns:
        LambertSolution with method 'gooding'.

    Raises:
        InputError: If time_of_flight or mu is invalid.
        ConvergenceError: If Newton-Raphson exceeds its iteration cap or an
            iterate leaves the domain x > -1.
    """
    validate_transfer_inputs(time_of_flight, mu)
    if settings is None:
        settings = GoodingSettings()

    target = np.sqrt(8.0 * mu / geometry.semi_perimeter ** 3) * time_of_flight
    state = GoodingFunctionState(
        q_parameter=geometry.q_parameter,
        normalized_time_of_flight=target,
    )
    tolerance = settings.tolerance * max(1.0, target)

    x = gooding_starter(state.q_parameter, target)
    iterations = 0
    try:
        while True:
            residual = compute_lambert_function_gooding(x, state)
            if abs(residual) <= tolerance:
                break
            if iterations >= settings.max_iterations:
                logger.warning(
                    "Gooding Lambert solver did not converge in %d iterations (x=%.6f, F=%.3e).",
                    iterations, x, residual,
                )
                raise ConvergenceError(
                    f"Gooding solver did not converge in {iterations} iterations "
                    f"(residual {residual:.3e})",
                    iterations=iterations,
                    last_value=x,
                )
            x = x - residual / compute_first_derivative_lambert_function_gooding(x, state)
            iterations += 1
    except DomainError as exc:
        logger.warning(
            "Gooding Lambert solver left the domain after %d iterations (x=%.6f).",
            iterations, x,
        )
        raise ConvergenceError(
            f"Gooding iterate x={x} left the valid domain after {iterations} iterations",
            iterations=iterations,
            last_value=x,
        ) from exc

    logger.debug("Gooding Lambert converged: x=%.12f after %d iterations", x, iterations)

    v1, v2 = reconstruct_velocities(geometry, x, mu)
    return LambertSolution(
        method='gooding',
        x_parameter=float(x),
        iterations=iterations,
        departure_velocity=v1,
        arrival_velocity=v2,
    )
