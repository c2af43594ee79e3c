"""
===============================================================================
LAMBERT TARGETER - Izzo Time-of-Flight Function
===============================================================================
Normalized time of flight as a function of the shape parameter x, following
Izzo's geometric formulation (Lagrange's equation written in x).

With a = a_min / (1 - x^2) the Lagrange equation reads

    ellipse  (|x| < 1):  T = a^1.5 [(alpha - sin alpha) - (beta - sin beta)]
    hyperbola (x > 1):   T = (-a)^1.5 [(sinh alpha - alpha) - (sinh beta - beta)]

    alpha = 2 acos(x)                     (2 acosh(x) for the hyperbola)
    beta  = 2 asin(sqrt((s - c) / 2a))    (2 asinh(...) for the hyperbola)

with beta negated for the long way. Both expressions are 0 * inf at the
parabola x = 1. Rewriting them with the scaled anomalies

    A = sqrt|a| * alpha,    B = sqrt|a| * beta

gives a single expression that is smooth through x = 1:

    T = A^3 c3(A^2 (1 - x^2) / a_min) - B^3 c3(B^2 (1 - x^2) / a_min)

where c3 is the Stumpff function. A and B themselves are finite everywhere
on x > -1 (see scaled_anomalies).

Near theta = pi the difference s - c cancels to a few digits, so the solvers
pass it in precomputed as s q^2 from the transfer geometry.
===============================================================================
"""

from typing import Optional, Tuple

import numpy as np

from core.exceptions import DomainError
from core.special_functions import arcsine_ratio, stumpff_c3


def _acos_ratio(x: float) -> float:
    """acos(x)/sqrt(1 - x^2), continued as acosh(x)/sqrt(x^2 - 1) for x > 1."""
    w = 1.0 - x * x
    if x >= 0.0:
        # acos(x) = asin(sqrt(1 - x^2)) on [0, 1]
        return arcsine_ratio(w)
    return np.arccos(x) / np.sqrt(w)


def scaled_anomalies(
    x: float,
    s: float,
    c: float,
    is_long_way: bool,
    a_min: float,
    s_minus_c: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Scaled anomalies A = sqrt|a| * alpha and B = sqrt|a| * beta.

    Args:
        x: Shape parameter, x > -1.
        s: Semi-perimeter.
        c: Chord.
        is_long_way: Negates B for transfers beyond pi.
        a_min: Minimum-energy semi-major axis.
        s_minus_c: s - c computed without cancellation, e.g.
                   TransferGeometry.normalized_semi_perimeter_minus_chord.
                   Taken as s - c if None.

    Returns:
        (A, B) in the same length units as sqrt(s).
    """
    w = 1.0 - x * x
    a_term = 2.0 * np.sqrt(a_min) * _acos_ratio(x)
    if s_minus_c is None:
        s_minus_c = s - c
    s_minus_c = max(s_minus_c, 0.0)
    b_term = 2.0 * np.sqrt(0.5 * s_minus_c) * arcsine_ratio(s_minus_c * w / (2.0 * a_min))
    if is_long_way:
        b_term = -b_term
    return a_term, b_term


def compute_time_of_flight_izzo(
    x: float,
    s: float,
    c: float,
    is_long_way: bool,
    a_min: float,
    s_minus_c: Optional[float] = None,
) -> float:
    """
    Izzo normalized time of flight T(x).

    Args:
        x: Shape parameter (x > -1).
        s: Semi-perimeter (normalized).
        c: Chord (normalized).
        is_long_way: True for transfer angles beyond pi.
        a_min: Minimum-energy semi-major axis (normalized).
        s_minus_c: Optional s - c, passed through to scaled_anomalies.

    Returns:
        Normalized time of flight, in units of sqrt(L^3 / mu) for the length
        unit L of the inputs.

    Raises:
        DomainError: If x <= -1 or x is not finite.
    """
    if not np.isfinite(x) or x <= -1.0:
        raise DomainError(f"Izzo shape parameter must satisfy x > -1, got {x}")

    w = 1.0 - x * x
    a_term, b_term = scaled_anomalies(x, s, c, is_long_way, a_min, s_minus_c)
    return (a_term ** 3 * stumpff_c3(a_term * a_term * w / a_min)
            - b_term ** 3 * stumpff_c3(b_term * b_term * w / a_min))
