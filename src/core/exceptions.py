"""
===============================================================================
LAMBERT TARGETER - Error Taxonomy
===============================================================================
Every failure raised by the solvers derives from LambertError, so callers can
catch the whole family in one clause. Input-style failures also derive from
ValueError and iteration failures from RuntimeError, which keeps the usual
`except ValueError` call sites working.

    LambertError
    +-- InputError        bad positions, time of flight or mu
    +-- GeometryError     collinear positions (0 or 180 deg transfer)
    +-- DomainError       shape parameter outside a Lambert function branch
    +-- ConvergenceError  root finder failed to converge
===============================================================================
"""


class LambertError(Exception):
    """Base class for all Lambert solver failures."""


class InputError(LambertError, ValueError):
    """Raised for non-finite, zero or otherwise invalid inputs."""


class GeometryError(LambertError, ValueError):
    """Raised when the transfer plane is undefined (collinear positions)."""


class DomainError(LambertError, ValueError):
    """Raised when a shape parameter lies outside the valid branch."""


class ConvergenceError(LambertError, RuntimeError):
    """
    Raised when an iterative solver does not reach its tolerance.

    Attributes:
        iterations: Number of iterations performed before giving up.
        last_value: Last iterate of the shape parameter, if any.
    """

    def __init__(self, message: str, iterations: int = 0, last_value: float = None):
        super().__init__(message)
        self.iterations = iterations
        self.last_value = last_value
