"""
===============================================================================
LAMBERT TARGETER - Physical and Astronomical Constants
===============================================================================
Central repository for the physical constants used by the Lambert solvers and
the command-line driver. SI units throughout (meters, seconds, radians).

These values come from IAU 2012 / IERS standards where applicable.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# TIME AND DISTANCE
# =============================================================================
AU = 1.495978707e11                    # Astronomical Unit in meters
JULIAN_DAY = 86400.0                   # s

# =============================================================================
# GRAVITATIONAL PARAMETERS
# =============================================================================
EARTH_MU = 3.986004418e14              # m^3/s^2
MOON_MU = 4.9048695e12                 # m^3/s^2
MARS_MU = 4.282837e13                  # m^3/s^2
JUPITER_MU = 1.26686534e17             # m^3/s^2
SUN_MU = 1.32712440018e20              # m^3/s^2

# Central bodies selectable by name from the config file and the CLI
BODY_MU = {
    'earth': EARTH_MU,
    'moon': MOON_MU,
    'mars': MARS_MU,
    'jupiter': JUPITER_MU,
    'sun': SUN_MU,
}


def get_body_mu(body_name: str) -> float:
    """
    Gravitational parameter of a named central body (case-insensitive).

    Raises:
        ValueError: If body_name is not in BODY_MU.
    """
    try:
        return BODY_MU[str(body_name).strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown body: {body_name!r}. Valid: {sorted(BODY_MU)}") from None
