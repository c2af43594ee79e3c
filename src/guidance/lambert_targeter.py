"""
===============================================================================
LAMBERT TARGETER - Solver Entry Points
===============================================================================
Thin orchestration over the two Lambert algorithms: validate the inputs,
build the transfer geometry once, run the selected solver and hand back the
velocities. Izzo and Gooding share inputs and outputs, so a caller may run
both on the same problem and compare the results.

Every call is independent and holds no state, so the functions can be used
freely from a thread or process pool (e.g. porkchop grids).
===============================================================================
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from core.config import GoodingSettings, IzzoSettings, LambertSettings
from core.exceptions import InputError
from guidance.gooding_lambert import solve_gooding
from guidance.izzo_lambert import solve_izzo
from guidance.transfer_geometry import build_transfer_geometry, validate_transfer_inputs
from guidance.velocity_reconstruction import LambertSolution

logger = logging.getLogger(__name__)

_SOLVERS = {
    'izzo': solve_izzo,
    'gooding': solve_gooding,
}

METHODS = tuple(_SOLVERS)


def _method_settings(method: str, settings) -> Optional[Union[IzzoSettings, GoodingSettings]]:
    if isinstance(settings, LambertSettings):
        return getattr(settings, method)
    return settings


def solve_lambert_problem(
    r1: np.ndarray,
    r2: np.ndarray,
    time_of_flight: float,
    mu: float,
    method: str = 'izzo',
    long_way: Optional[bool] = None,
    retrograde: bool = False,
    settings=None,
) -> LambertSolution:
    """
    Solve a zero-revolution Lambert problem.

    Args:
        r1: Departure position (3,) in meters.
        r2: Arrival position (3,) in meters.
        time_of_flight: Transfer time in seconds (> 0).
        mu: Gravitational parameter of the central body (m^3/s^2, > 0).
        method: 'izzo' or 'gooding'.
        long_way: Force the long (True) or short (False) way; inferred from
                  the sense of motion if None.
        retrograde: Motion is clockwise about +z.
        settings: LambertSettings, or the settings of the chosen method.

    Returns:
        LambertSolution with the shape parameter, iteration count and
        velocities.

    Raises:
        InputError: Invalid positions, time of flight, mu or method.
        GeometryError: Collinear positions.
        ConvergenceError: The chosen solver did not converge.
    """
    try:
        solver = _SOLVERS[method.lower()]
    except (AttributeError, KeyError):
        raise InputError(f"Unknown Lambert method: {method!r}. Valid: {list(METHODS)}") from None

    validate_transfer_inputs(time_of_flight, mu)
    geometry = build_transfer_geometry(r1, r2, long_way=long_way, retrograde=retrograde)
    return solver(geometry, float(time_of_flight), float(mu),
                  _method_settings(method.lower(), settings))


def solve_lambert_problem_izzo(
    r1: np.ndarray,
    r2: np.ndarray,
    time_of_flight: float,
    mu: float,
    long_way: Optional[bool] = None,
    retrograde: bool = False,
    settings: Optional[IzzoSettings] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Departure and arrival velocities from Izzo's method."""
    solution = solve_lambert_problem(r1, r2, time_of_flight, mu, method='izzo',
                                     long_way=long_way, retrograde=retrograde,
                                     settings=settings)
    return solution.velocities


def solve_lambert_problem_gooding(
    r1: np.ndarray,
    r2: np.ndarray,
    time_of_flight: float,
    mu: float,
    long_way: Optional[bool] = None,
    retrograde: bool = False,
    settings: Optional[GoodingSettings] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Departure and arrival velocities from Gooding's method."""
    solution = solve_lambert_problem(r1, r2, time_of_flight, mu, method='gooding',
                                     long_way=long_way, retrograde=retrograde,
                                     settings=settings)
    return solution.velocities
