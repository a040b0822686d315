"""
Classical orbital elements representation.
"""
from typing import NamedTuple


class OrbitalElements(NamedTuple):
    """
    Classical Keplerian orbital elements of a two-body orbit.

    All angular quantities are in radians and wrapped into [0, 2*pi), except
    the inclination which lies in [0, pi].

    Attributes:
        e: Eccentricity (dimensionless, >= 0)
        a: Semi-major axis (km). Negative for hyperbolic orbits, infinite for parabolic orbits.
        i: Inclination relative to the frame's fundamental plane (radians)
        Omega: Right ascension of the ascending node (radians)
        omega: Argument of periapsis (radians)
        nu: True anomaly (radians)

    Note:
        - Equatorial orbits have Omega = 0 and the node line along the frame x axis
        - Circular orbits have omega = 0 and nu measured from the node line
    """
    e: float  # eccentricity
    a: float  # semi-major axis (km)
    i: float  # inclination (rad)
    Omega: float  # right ascension of ascending node (rad)
    omega: float  # argument of periapsis (rad)
    nu: float  # true anomaly (rad)
