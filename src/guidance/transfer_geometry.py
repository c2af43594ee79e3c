"""
===============================================================================
LAMBERT TARGETER - Transfer Geometry
===============================================================================
Builds the immutable geometric description of a zero-revolution transfer
from two position vectors: radii, chord, semi-perimeter, transfer angle and
the orientation of the transfer plane.

Direction of motion
-------------------
The plane normal of r1 x r2 is compared with the reference +z axis:

    prograde  : long way if (r1 x r2)_z < 0
    retrograde: long way if (r1 x r2)_z > 0

An explicit long_way argument overrides this inference; the resulting sense
of motion is then reported back in is_retrograde. For a long-way transfer the
angle becomes 2*pi - theta and the plane normal is flipped, so that
plane_normal always points along the transfer angular momentum.

Both solvers use the same reduction: lengths scaled by |r1|, and the Lambert
parameter

    q = sqrt(r1 * r2) / s * cos(theta / 2)

which is negative for the long way.
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.constants import RAD2DEG, TWO_PI
from core.exceptions import GeometryError, InputError

logger = logging.getLogger(__name__)

# Relative thresholds for the degenerate configurations
COINCIDENT_TOLERANCE = 1e-12
COLLINEAR_TOLERANCE = 1e-12


@dataclass(frozen=True)
class TransferGeometry:
    """
    Geometry of a single-revolution Lambert transfer.

    Attributes:
        departure_position: r1 (3,) in meters.
        arrival_position: r2 (3,) in meters.
        departure_radius: |r1| (m).
        arrival_radius: |r2| (m).
        chord: |r2 - r1| (m).
        semi_perimeter: (|r1| + |r2| + chord) / 2 (m).
        transfer_angle: Swept angle in (0, 2*pi) (rad).
        is_long_way: True if the transfer angle exceeds pi.
        is_retrograde: True if motion is clockwise about +z.
        plane_normal: Unit vector along the transfer angular momentum.
    """
    departure_position: np.ndarray
    arrival_position: np.ndarray
    departure_radius: float
    arrival_radius: float
    chord: float
    semi_perimeter: float
    transfer_angle: float
    is_long_way: bool
    is_retrograde: bool
    plane_normal: np.ndarray

    @property
    def minimum_energy_semi_major_axis(self) -> float:
        return 0.5 * self.semi_perimeter

    @property
    def q_parameter(self) -> float:
        """Lambert parameter q (lambda in Izzo's notation), in [-1, 1]."""
        return (np.sqrt(self.departure_radius * self.arrival_radius)
                / self.semi_perimeter * np.cos(0.5 * self.transfer_angle))

    # Lengths in units of |r1|

    @property
    def normalized_arrival_radius(self) -> float:
        return self.arrival_radius / self.departure_radius

    @property
    def normalized_chord(self) -> float:
        return self.chord / self.departure_radius

    @property
    def normalized_semi_perimeter(self) -> float:
        return self.semi_perimeter / self.departure_radius

    @property
    def normalized_minimum_energy_semi_major_axis(self) -> float:
        return 0.5 * self.normalized_semi_perimeter

    @property
    def normalized_semi_perimeter_minus_chord(self) -> float:
        """
        (s - c) / |r1| evaluated as s q^2.

        s (s - c) = r1 r2 cos^2(theta/2), so this keeps full precision near
        theta = pi where s and c agree to almost every digit.
        """
        return self.normalized_semi_perimeter * self.q_parameter ** 2


def _as_position(vector, name: str) -> np.ndarray:
    try:
        position = np.array(vector, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{name} must be a numeric 3-vector") from exc
    if position.shape != (3,):
        raise InputError(f"{name} must have 3 components, got {position.shape[0]}")
    if not np.all(np.isfinite(position)):
        raise InputError(f"{name} must be finite, got {position}")
    if np.linalg.norm(position) == 0.0:
        raise InputError(f"{name} must be non-zero")
    return position


def validate_transfer_inputs(time_of_flight: float, mu: float) -> None:
    """
    Check the scalar inputs of a Lambert problem.

    Raises:
        InputError: If time_of_flight or mu is non-finite or not positive.
    """
    for name, value in (('Time of flight', time_of_flight),
                        ('Gravitational parameter', mu)):
        try:
            value = float(value)
        except (TypeError, ValueError) as exc:
            raise InputError(f"{name} must be a real number, got {value!r}") from exc
        if not np.isfinite(value) or value <= 0.0:
            raise InputError(f"{name} must be positive and finite, got {value}")


def build_transfer_geometry(
    r1: np.ndarray,
    r2: np.ndarray,
    long_way: Optional[bool] = None,
    retrograde: bool = False,
) -> TransferGeometry:
    """
    Build the transfer geometry for positions r1 and r2.

    Args:
        r1: Departure position (3,) in meters.
        r2: Arrival position (3,) in meters.
        long_way: Force the long (True) or short (False) way. If None, the
                  way is inferred from the sense of motion.
        retrograde: Sense of motion about +z used for the inference.

    Returns:
        TransferGeometry.

    Raises:
        InputError: If a position is invalid or the positions coincide.
        GeometryError: If the positions are collinear.
    """
    r1 = _as_position(r1, 'Departure position')
    r2 = _as_position(r2, 'Arrival position')

    r1_mag = float(np.linalg.norm(r1))
    r2_mag = float(np.linalg.norm(r2))
    chord = float(np.linalg.norm(r2 - r1))

    if chord <= COINCIDENT_TOLERANCE * max(r1_mag, r2_mag):
        raise InputError("Departure and arrival positions coincide")

    cross = np.cross(r1, r2)
    cross_mag = float(np.linalg.norm(cross))
    if cross_mag <= COLLINEAR_TOLERANCE * r1_mag * r2_mag:
        raise GeometryError(
            "Lambert solver: degenerate geometry, positions are collinear "
            "and the transfer plane is undefined."
        )

    # Smallest angle between the vectors, in (0, pi)
    theta = float(np.arctan2(cross_mag, np.dot(r1, r2)))

    if long_way is None:
        if retrograde:
            long_way = cross[2] > 0.0
        else:
            long_way = cross[2] < 0.0
    else:
        long_way = bool(long_way)
        retrograde = (cross[2] > 0.0) == long_way

    plane_normal = cross / cross_mag
    if long_way:
        theta = TWO_PI - theta
        plane_normal = -plane_normal

    semi_perimeter = 0.5 * (r1_mag + r2_mag + chord)

    logger.debug(
        "Transfer geometry: theta=%.6f deg, chord=%.6e m, s=%.6e m, long_way=%s",
        theta * RAD2DEG, chord, semi_perimeter, long_way,
    )

    return TransferGeometry(
        departure_position=r1,
        arrival_position=r2,
        departure_radius=r1_mag,
        arrival_radius=r2_mag,
        chord=chord,
        semi_perimeter=semi_perimeter,
        transfer_angle=theta,
        is_long_way=bool(long_way),
        is_retrograde=bool(retrograde),
        plane_normal=plane_normal,
    )
