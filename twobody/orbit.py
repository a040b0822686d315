"""
The Orbit aggregate: one two-body state held in three equivalent representations.
"""
import logging
from typing import NamedTuple, Optional, Tuple

import jax.numpy as jnp
import numpy as np

from twobody.bodies import CelestialBody, check_precision
from twobody.cartesian_state import CartesianState
from twobody.conic import Conic, classify
from twobody.config import ConversionConfig, DEFAULT_CONVERSION_CONFIG
from twobody.constants import DISTANCE_UNITS, TIME_UNITS, ANGLE_UNITS, VELOCITY_UNITS
from twobody.frames import AstrodynamicsFrame, INERTIAL
from twobody.orbital_elements import OrbitalElements
from twobody.astrodynamics import cartesian_to_keplerian, keplerian_to_cartesian, wrap_angle
from twobody.units import convert, velocity_units

logger = logging.getLogger(__name__)

# Fields whose NaN-ness decides validity
_DEFINING_FIELDS = ('r_i', 'v_i', 'e', 'a', 'i', 'Omega', 'omega', 'nu')


def _as_vector(x, name: str, dtype) -> jnp.ndarray:
    x = jnp.asarray(x, dtype=dtype)
    if x.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {x.shape}")
    return x


def _resolve_dtype(dtype, *values):
    if dtype is None:
        dtype = jnp.result_type(*[jnp.asarray(v) for v in values])
        if not jnp.issubdtype(dtype, jnp.floating):
            dtype = jnp.float64
    return check_precision(dtype)


class Orbit(NamedTuple):
    """
    A two-body orbit about a single CelestialBody.

    The same physical state is available as an inertial Cartesian state, a
    perifocal Cartesian state and classical Keplerian elements. Orbits are
    immutable; construct them with :meth:`Orbit.from_cartesian`,
    :meth:`Orbit.from_elements` or :func:`invalid_orbit`, which derive every
    representation eagerly so they cannot drift apart.

    All stored quantities use canonical units (km, km/s, rad). Use the
    ``get_*`` methods to obtain them in other units.

    Attributes:
        inertial: Position and velocity in ``frame``
        perifocal: Position and velocity in the perifocal frame
        elements: Classical orbital elements
        body: The central body (not owned by the orbit)
        conic: Conic section tag, fixed at construction
        frame: Reference frame of the inertial state
    """
    inertial: CartesianState
    perifocal: CartesianState
    elements: OrbitalElements
    body: CelestialBody
    conic: Conic
    frame: AstrodynamicsFrame = INERTIAL

    @classmethod
    def from_cartesian(cls, r, v, body: CelestialBody,
                       distance_units: str = DISTANCE_UNITS, time_units: str = TIME_UNITS,
                       frame: AstrodynamicsFrame = INERTIAL, dtype=None,
                       config: ConversionConfig = DEFAULT_CONVERSION_CONFIG) -> 'Orbit':
        """
        Create an orbit from a Cartesian state. The Cartesian state is the source of truth.

        Args:
            r: Position vector [x, y, z] in distance_units
            v: Velocity vector [vx, vy, vz] in distance_units/time_units
            body: Central body
            distance_units: Units of r (default 'km')
            time_units: Time units of v (default 's')
            frame: Reference frame r and v are expressed in
            dtype: Floating point type of the orbit. Defaults to the promoted type of r and v.
            config: Tolerances used for degenerate geometry

        Returns:
            Orbit with derived perifocal state and orbital elements. A radial
            state (|r x v| <= equatorial_tol * |r| * |v|, including r = 0 or
            v = 0) has no orbital plane and returns the Invalid sentinel.

        Raises:
            ValueError: If units are invalid, r, v are not 3-vectors, or dtype
                is not float32 or float64.

        Examples:
            >>> from twobody import Earth
            >>> orbit = Orbit.from_cartesian([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], Earth)
            >>> orbit.conic
            <Conic.ELLIPTICAL: 'Elliptical'>
        """
        dtype = _resolve_dtype(dtype, r, v)
        r = _as_vector(convert(jnp.asarray(r, dtype=dtype), distance_units, DISTANCE_UNITS), 'r', dtype)
        v = _as_vector(convert(jnp.asarray(v, dtype=dtype), velocity_units(distance_units, time_units),
                               VELOCITY_UNITS), 'v', dtype)
        mu = jnp.asarray(body.mu, dtype=dtype)

        h = float(jnp.linalg.norm(jnp.cross(r, v)))
        if h <= config.equatorial_tol * float(jnp.linalg.norm(r)) * float(jnp.linalg.norm(v)):
            logger.warning("Radial state r=%s, v=%s has no angular momentum; returning an invalid orbit.", r, v)
            return invalid_orbit(body, frame=frame, dtype=dtype)

        elements, perifocal = cartesian_to_keplerian(r, v, mu, config.eccentricity_tol, config.equatorial_tol)
        return cls._build(CartesianState(r=r, v=v), perifocal, elements, body, frame, config)

    @classmethod
    def from_elements(cls, e: float, a: float, i: float, Omega: float, omega: float, nu: float,
                      body: CelestialBody, p: Optional[float] = None,
                      distance_units: str = DISTANCE_UNITS, angle_units: str = ANGLE_UNITS,
                      frame: AstrodynamicsFrame = INERTIAL, dtype=None,
                      config: ConversionConfig = DEFAULT_CONVERSION_CONFIG) -> 'Orbit':
        """
        Create an orbit from classical orbital elements. The elements are the source of truth.

        Args:
            e: Eccentricity
            a: Semi-major axis in distance_units (negative for hyperbolic orbits).
                Ignored for parabolic orbits.
            i: Inclination in angle_units
            Omega: Right ascension of the ascending node in angle_units
            omega: Argument of periapsis in angle_units
            nu: True anomaly in angle_units
            body: Central body
            p: Semi-parameter in distance_units. Required for parabolic orbits,
                otherwise computed as a * (1 - e**2) when omitted.
            distance_units: Units of a and p (default 'km')
            angle_units: Units of the angles (default 'rad')
            frame: Reference frame of the derived inertial state
            dtype: Floating point type of the orbit (default float64)
            config: Tolerances used for classification

        Returns:
            Orbit with derived inertial and perifocal states. If nu lies beyond
            the asymptotes of a hyperbolic orbit the state is non-physical and the
            Invalid sentinel is returned.

        Raises:
            ValueError: If e is negative, units are invalid, or p is missing for
                a parabolic orbit.
        """
        dtype = _resolve_dtype(dtype if dtype is not None else jnp.float64)
        if float(e) < 0.0:
            raise ValueError(f"Eccentricity must be non-negative, got {e}")

        conic = classify(e, tol=config.eccentricity_tol)
        if p is None:
            if conic == Conic.PARABOLIC:
                raise ValueError("The semi-parameter p is required for parabolic orbits.")
            p_km = float(convert(a, distance_units, DISTANCE_UNITS)) * (1.0 - float(e)**2)
        else:
            p_km = float(convert(p, distance_units, DISTANCE_UNITS))
        if p_km <= 0.0:
            raise ValueError(f"Semi-parameter must be positive, got {p_km} km. "
                             "Hyperbolic orbits need a negative semi-major axis.")

        if conic == Conic.PARABOLIC:
            a_km = jnp.inf
        else:
            a_km = float(convert(a, distance_units, DISTANCE_UNITS))

        angles = [convert(float(x), angle_units, ANGLE_UNITS) for x in (i, Omega, omega, nu)]
        elements = OrbitalElements(*[jnp.asarray(x, dtype=dtype) for x in [e, a_km] + angles])
        elements = elements._replace(Omega=wrap_angle(elements.Omega), omega=wrap_angle(elements.omega),
                                     nu=wrap_angle(elements.nu))

        if 1.0 + float(e) * float(jnp.cos(elements.nu)) <= 0.0:
            logger.warning("True anomaly %.6f rad is beyond the asymptote of a hyperbola with e=%.6f; "
                           "returning an invalid orbit.", float(elements.nu), float(e))
            return invalid_orbit(body, frame=frame, dtype=dtype)

        mu = jnp.asarray(body.mu, dtype=dtype)
        inertial, perifocal = keplerian_to_cartesian(elements, jnp.asarray(p_km, dtype=dtype), mu)
        return cls._build(inertial, perifocal, elements, body, frame, config)

    @classmethod
    def _build(cls, inertial, perifocal, elements, body, frame, config) -> 'Orbit':
        orbit = cls(inertial=inertial, perifocal=perifocal, elements=elements,
                    body=body, conic=Conic.INVALID, frame=frame)
        conic = classify(orbit.e, valid=is_valid(orbit), tol=config.eccentricity_tol)
        logger.debug("Constructed %s orbit about %s", conic, body)
        return orbit._replace(conic=conic)

    # Read-only accessors in canonical units

    @property
    def r_i(self) -> jnp.ndarray:
        return self.inertial.r

    @property
    def v_i(self) -> jnp.ndarray:
        return self.inertial.v

    @property
    def r_p(self) -> jnp.ndarray:
        return self.perifocal.r

    @property
    def v_p(self) -> jnp.ndarray:
        return self.perifocal.v

    @property
    def e(self):
        return self.elements.e

    @property
    def a(self):
        return self.elements.a

    @property
    def i(self):
        return self.elements.i

    @property
    def Omega(self):
        return self.elements.Omega

    @property
    def omega(self):
        return self.elements.omega

    @property
    def nu(self):
        return self.elements.nu

    @property
    def dtype(self):
        return self.inertial.r.dtype

    @property
    def angular_momentum(self) -> jnp.ndarray:
        """Specific angular momentum vector h = r x v (km^2/s)."""
        return jnp.cross(self.r_i, self.v_i)

    @property
    def semi_parameter(self):
        """Semi-latus rectum p = h^2 / mu (km)."""
        h = jnp.linalg.norm(self.angular_momentum)
        return h**2 / jnp.asarray(self.body.mu, dtype=self.dtype)

    @property
    def specific_energy(self):
        """Specific orbital energy v^2/2 - mu/r (km^2/s^2)."""
        mu = jnp.asarray(self.body.mu, dtype=self.dtype)
        return 0.5 * jnp.dot(self.v_i, self.v_i) - mu / jnp.linalg.norm(self.r_i)

    @property
    def period(self):
        """Orbital period (s). Infinite for parabolic and hyperbolic orbits."""
        if self.conic in (Conic.CIRCULAR, Conic.ELLIPTICAL):
            mu = jnp.asarray(self.body.mu, dtype=self.dtype)
            return 2.0 * jnp.pi * jnp.sqrt(self.a**3 / mu)
        if self.conic == Conic.INVALID:
            return jnp.asarray(jnp.nan, dtype=self.dtype)
        return jnp.asarray(jnp.inf, dtype=self.dtype)

    # Unit-aware getters

    def get_inertial_state(self, distance_units: str = DISTANCE_UNITS,
                           time_units: str = TIME_UNITS) -> CartesianState:
        """Inertial position and velocity in distance_units and distance_units/time_units."""
        return _convert_state(self.inertial, distance_units, time_units)

    def get_perifocal_state(self, distance_units: str = DISTANCE_UNITS,
                            time_units: str = TIME_UNITS) -> CartesianState:
        """Perifocal position and velocity in distance_units and distance_units/time_units."""
        return _convert_state(self.perifocal, distance_units, time_units)

    def get_elements(self, distance_units: str = DISTANCE_UNITS,
                     angle_units: str = ANGLE_UNITS) -> OrbitalElements:
        """
        Orbital elements with the semi-major axis in distance_units and angles in angle_units.

        Examples:
            >>> orbit.get_elements(angle_units='deg').i
        """
        el = self.elements
        return OrbitalElements(
            e=el.e,
            a=convert(el.a, DISTANCE_UNITS, distance_units),
            i=convert(el.i, ANGLE_UNITS, angle_units),
            Omega=convert(el.Omega, ANGLE_UNITS, angle_units),
            omega=convert(el.omega, ANGLE_UNITS, angle_units),
            nu=convert(el.nu, ANGLE_UNITS, angle_units),
        )

    # Precision

    def astype(self, dtype) -> 'Orbit':
        """
        Return this orbit with every stored quantity, and its body, cast to dtype.

        Values are cast directly rather than recomputed, so a widening cast
        reproduces the narrower values exactly.
        """
        dtype = _resolve_dtype(dtype)

        def cast(x):
            return jnp.asarray(x, dtype=dtype)

        return self._replace(
            inertial=CartesianState(*map(cast, self.inertial)),
            perifocal=CartesianState(*map(cast, self.perifocal)),
            elements=OrbitalElements(*map(cast, self.elements)),
            body=self.body.astype(dtype),
        )

    # Comparison

    def __eq__(self, other) -> bool:
        """
        Orbits are equal when body, conic, frame and dtype match and every stored
        array is exactly equal. NaN compares equal to NaN, so two Invalid
        sentinels about the same body are equal.
        """
        if not isinstance(other, Orbit):
            return NotImplemented
        if (self.body, self.conic, self.frame, self.dtype) != (other.body, other.conic, other.frame, other.dtype):
            return False
        return all(np.array_equal(np.asarray(x), np.asarray(y), equal_nan=True)
                   for x, y in zip(_arrays(self), _arrays(other)))

    def __ne__(self, other) -> bool:
        equal = self.__eq__(other)
        return equal if equal is NotImplemented else not equal

    __hash__ = None

    def __repr__(self) -> str:
        return (f"Orbit(conic={self.conic}, body={self.body}, frame={self.frame.name}, "
                f"e={float(self.e):.6g}, a={float(self.a):.6g} km, dtype={self.dtype})")


def _arrays(orbit: Orbit):
    return (*orbit.inertial, *orbit.perifocal, *orbit.elements)


def _convert_state(state: CartesianState, distance_units: str, time_units: str) -> CartesianState:
    return CartesianState(
        r=convert(state.r, DISTANCE_UNITS, distance_units),
        v=convert(state.v, VELOCITY_UNITS, velocity_units(distance_units, time_units)),
    )


def invalid_orbit(body: CelestialBody, frame: AstrodynamicsFrame = INERTIAL, dtype=jnp.float64) -> Orbit:
    """
    The Invalid sentinel orbit.

    Every vector and scalar is NaN; only the body (and frame) are retained.
    Algorithms that must return an Orbit, such as a propagator that fails to
    converge, return this instead of raising.

    Args:
        body: Central body to attach
        frame: Reference frame of the sentinel
        dtype: Floating point type of the NaN fields

    Returns:
        Orbit tagged Conic.INVALID
    """
    dtype = _resolve_dtype(dtype)
    nan_vec = jnp.full(3, jnp.nan, dtype=dtype)
    nan = jnp.asarray(jnp.nan, dtype=dtype)
    return Orbit(
        inertial=CartesianState(r=nan_vec, v=nan_vec),
        perifocal=CartesianState(r=nan_vec, v=nan_vec),
        elements=OrbitalElements(e=nan, a=nan, i=nan, Omega=nan, omega=nan, nu=nan),
        body=body,
        conic=Conic.INVALID,
        frame=frame,
    )


def _nan_flags(orbit: Orbit) -> np.ndarray:
    return np.concatenate([np.isnan(np.asarray(getattr(orbit, name))).ravel() for name in _DEFINING_FIELDS])


def is_invalid(orbit: Orbit) -> bool:
    """
    True if the orbit is the Invalid sentinel, i.e. every one of r_i, v_i, e, a,
    i, Omega, omega and nu is NaN.

    A partially NaN orbit is not reported as invalid (and is not valid either).
    """
    return bool(np.all(_nan_flags(orbit)))


def is_valid(orbit: Orbit) -> bool:
    """
    True if none of r_i, v_i, e, a, i, Omega, omega and nu is NaN.

    The semi-major axis of a parabolic orbit is infinite, which is valid.
    """
    return not bool(np.any(_nan_flags(orbit)))


def promote_orbits(first: Orbit, second: Orbit) -> Tuple[Orbit, Orbit]:
    """
    Cast two orbits to a common floating point type, the wider of the two.

    Examples:
        >>> o32, o64 = promote_orbits(orbit.astype(jnp.float32), orbit)
        >>> o32.dtype
        dtype('float64')
    """
    dtype = jnp.promote_types(first.dtype, second.dtype)
    return first.astype(dtype), second.astype(dtype)
