"""
Conic section classification of two-body orbits.
"""
import math
from enum import Enum

from twobody.constants import ECCENTRICITY_TOL


class Conic(Enum):
    """
    The conic section an orbit belongs to.

    Downstream algorithms (anomaly conversions, propagation) select their
    regime-specific formulas by checking an orbit's ``conic`` tag.
    ``INVALID`` marks the NaN sentinel orbit returned by failed computations.
    """
    CIRCULAR = "Circular"
    ELLIPTICAL = "Elliptical"
    PARABOLIC = "Parabolic"
    HYPERBOLIC = "Hyperbolic"
    INVALID = "Invalid"

    def __str__(self) -> str:
        return self.value


def classify(e: float, valid: bool = True, tol: float = ECCENTRICITY_TOL) -> Conic:
    """
    Classify an orbit by its eccentricity.

    The validity check takes precedence: an orbit whose state is not fully
    valid (or whose eccentricity is NaN) is ``Conic.INVALID`` regardless of e.

    Exactly parabolic (or circular) orbits are rare in floating point, so
    both boundaries use an absolute tolerance:

        - CIRCULAR:   e < tol
        - PARABOLIC:  |e - 1| < tol
        - ELLIPTICAL: tol <= e < 1 - tol
        - HYPERBOLIC: e > 1 + tol (including e = inf)

    Args:
        e: Eccentricity (dimensionless, >= 0)
        valid: Whether the orbit's defining fields are all well-formed
        tol: Absolute tolerance on the circular and parabolic boundaries

    Returns:
        The Conic tag.

    Raises:
        ValueError: If e is negative.
    """
    e = float(e)
    if not valid or math.isnan(e):
        return Conic.INVALID
    if e < 0.0:
        raise ValueError(f"Eccentricity must be non-negative, got {e}")
    if e < tol:
        return Conic.CIRCULAR
    if abs(e - 1.0) < tol:
        return Conic.PARABOLIC
    if e < 1.0:
        return Conic.ELLIPTICAL
    return Conic.HYPERBOLIC
