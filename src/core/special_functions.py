"""
===============================================================================
LAMBERT TARGETER - Special Functions
===============================================================================
Stumpff and hypergeometric helpers shared by the time-of-flight equations and
the velocity reconstruction.

All of these are evaluated in forms that stay finite and accurate through the
parabolic point (argument zero), where the closed-form expressions become 0/0:

    stumpff_c1(psi) = sin(sqrt(psi)) / sqrt(psi)         = 0F1(; 3/2; -psi/4)
    stumpff_c3(psi) = (sqrt(psi) - sin(sqrt(psi))) / psi^(3/2)
    arcsine_ratio(z) = asin(sqrt(z)) / sqrt(z)           = 2F1(1/2, 1/2; 3/2; z)

with the hyperbolic (sinh / asinh) continuation for negative arguments.
===============================================================================
"""

import numpy as np
from scipy.special import hyp0f1, hyp2f1

from core.exceptions import DomainError

# Below this |psi| the c3 closed form loses more than ~2 digits
_C3_SERIES_LIMIT = 0.1
_C3_SERIES_TERMS = 7

# Outside this |z| the closed forms for the arcsine ratio are well conditioned
_ARCSINE_SERIES_LIMIT = 0.5


def stumpff_c1(psi: float) -> float:
    """
    Stumpff-like function c1(psi) = sin(sqrt(psi))/sqrt(psi).

    For psi < 0 this is sinh(sqrt(-psi))/sqrt(-psi); c1(0) = 1.
    """
    return float(hyp0f1(1.5, -0.25 * psi))


def stumpff_c3(psi: float) -> float:
    """
    Stumpff function c3(psi).

    c3(psi) = (sqrt(psi) - sin(sqrt(psi))) / psi^(3/2)       if psi > 0
            = (sinh(sqrt(-psi)) - sqrt(-psi)) / (-psi)^(3/2)  if psi < 0
            = sum_k (-psi)^k / (2k + 3)!                      near psi = 0
    """
    if abs(psi) < _C3_SERIES_LIMIT:
        term = 1.0 / 6.0
        total = term
        for k in range(1, _C3_SERIES_TERMS):
            term *= -psi / ((2 * k + 2) * (2 * k + 3))
            total += term
        return total
    elif psi > 0.0:
        sqrt_psi = np.sqrt(psi)
        return (sqrt_psi - np.sin(sqrt_psi)) / (psi * sqrt_psi)
    else:
        sqrt_neg_psi = np.sqrt(-psi)
        return (np.sinh(sqrt_neg_psi) - sqrt_neg_psi) / ((-psi) * sqrt_neg_psi)


def arcsine_ratio(z: float) -> float:
    """
    asin(sqrt(z))/sqrt(z) for 0 < z <= 1, asinh(sqrt(-z))/sqrt(-z) for z < 0.

    The value at z = 0 is 1.

    Raises:
        DomainError: If z > 1, where the ratio has no real value.
    """
    if z > 1.0:
        raise DomainError(f"arcsine_ratio argument must be <= 1, got {z}")
    if abs(z) < _ARCSINE_SERIES_LIMIT:
        return float(hyp2f1(0.5, 0.5, 1.5, z))
    elif z > 0.0:
        sqrt_z = np.sqrt(z)
        return np.arcsin(sqrt_z) / sqrt_z
    else:
        sqrt_neg_z = np.sqrt(-z)
        return np.arcsinh(sqrt_neg_z) / sqrt_neg_z


def battin_series(s1: float) -> float:
    """Battin's Q(S1) = 4/3 * 2F1(3, 1; 5/2; S1)."""
    return 4.0 / 3.0 * float(hyp2f1(3.0, 1.0, 2.5, s1))


def battin_series_derivative(s1: float) -> float:
    """dQ/dS1 = 4/3 * 6/5 * 2F1(4, 2; 7/2; S1)."""
    return 1.6 * float(hyp2f1(4.0, 2.0, 3.5, s1))
