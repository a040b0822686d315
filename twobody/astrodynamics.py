"""
Conversions between the Cartesian, perifocal and Keplerian views of a two-body state.

All functions are pure and JAX-compatible. They operate in canonical units
(km, km/s, rad, km^3/s^2) and preserve the floating point type of their inputs.
"""
import jax.numpy as jnp
from jax import jit
from typing import Tuple

from .cartesian_state import CartesianState
from .orbital_elements import OrbitalElements
from .constants import TWO_PI, ECCENTRICITY_TOL, EQUATORIAL_TOL


def wrap_angle(x: jnp.ndarray) -> jnp.ndarray:
    """Wrap an angle into [0, 2*pi)."""
    x = jnp.mod(x, TWO_PI)
    # mod of a tiny negative number rounds to exactly 2*pi
    return jnp.where(x >= TWO_PI, x - TWO_PI, x)


def _signed_angle(u: jnp.ndarray, w: jnp.ndarray, axis: jnp.ndarray) -> jnp.ndarray:
    """Angle from u to w, measured positive about axis, in [0, 2*pi)."""
    return wrap_angle(jnp.arctan2(jnp.dot(axis, jnp.cross(u, w)), jnp.dot(u, w)))


@jit
def perifocal_state(e: float, nu: float, p: float, mu: float) -> CartesianState:
    """
    Position and velocity in the perifocal frame.

    The perifocal x axis points to periapsis (or to the reference direction for
    circular orbits), and the z axis is along the angular momentum.

    Args:
        e: Eccentricity
        nu: True anomaly (rad)
        p: Semi-parameter (km)
        mu: Gravitational parameter (km^3/s^2)

    Returns:
        CartesianState in the perifocal frame
    """
    cos_nu = jnp.cos(nu)
    sin_nu = jnp.sin(nu)
    zero = jnp.zeros_like(nu)

    r_mag = p / (1.0 + e * cos_nu)
    v_scale = jnp.sqrt(mu / p)

    r_p = jnp.array([r_mag * cos_nu, r_mag * sin_nu, zero])
    v_p = jnp.array([-v_scale * sin_nu, v_scale * (e + cos_nu), zero])

    return CartesianState(r=r_p, v=v_p)


@jit
def perifocal_to_inertial_matrix(i: float, Omega: float, omega: float) -> jnp.ndarray:
    """
    Rotation matrix taking perifocal vectors to the inertial frame.

    This is the 3-1-3 sequence R3(-Omega) R1(-i) R3(-omega). Its transpose maps
    inertial vectors into the perifocal frame.
    """
    cos_O = jnp.cos(Omega)
    sin_O = jnp.sin(Omega)
    cos_w = jnp.cos(omega)
    sin_w = jnp.sin(omega)
    cos_i = jnp.cos(i)
    sin_i = jnp.sin(i)

    return jnp.array([
        [cos_O * cos_w - sin_O * sin_w * cos_i, -cos_O * sin_w - sin_O * cos_w * cos_i, sin_O * sin_i],
        [sin_O * cos_w + cos_O * sin_w * cos_i, -sin_O * sin_w + cos_O * cos_w * cos_i, -cos_O * sin_i],
        [sin_w * sin_i, cos_w * sin_i, cos_i],
    ])


@jit
def cartesian_to_keplerian(r: jnp.ndarray, v: jnp.ndarray, mu: float,
                           eccentricity_tol: float = ECCENTRICITY_TOL,
                           equatorial_tol: float = EQUATORIAL_TOL) -> Tuple[OrbitalElements, CartesianState]:
    """
    Convert an inertial Cartesian state to classical orbital elements.

    Degenerate geometries do not produce NaN:
        - Equatorial orbits (|n| < equatorial_tol * |h|): Omega = 0 and the
          node line is taken along the frame x axis.
        - Circular orbits (e < eccentricity_tol): omega = 0 and nu is measured
          from the node line (argument of latitude, or true longitude when
          the orbit is also equatorial).

    Parabolic orbits (|e - 1| < eccentricity_tol) have an infinite semi-major axis.
    A NaN input state yields NaN in every output. Radial states (h = 0) have
    no orbital plane and are not representable; Orbit.from_cartesian rejects
    them before calling this function.

    Args:
        r: Position vector (km)
        v: Velocity vector (km/s)
        mu: Gravitational parameter (km^3/s^2)
        eccentricity_tol: Circular/parabolic boundary tolerance
        equatorial_tol: Relative tolerance on the node vector magnitude

    Returns:
        (elements, perifocal_state)
    """
    r_mag = jnp.linalg.norm(r)
    v_mag = jnp.linalg.norm(v)
    r_dot_v = jnp.dot(r, v)

    # Specific angular momentum
    h_vec = jnp.cross(r, v)
    h = jnp.linalg.norm(h_vec)
    h_hat = h_vec / h

    # Node vector k x h
    n_vec = jnp.array([-h_vec[1], h_vec[0], jnp.zeros_like(h)])
    n = jnp.linalg.norm(n_vec)

    # Eccentricity vector and magnitude
    e_vec = ((v_mag**2 - mu / r_mag) * r - r_dot_v * v) / mu
    e = jnp.linalg.norm(e_vec)

    # Semi-parameter and semi-major axis
    p = h**2 / mu
    energy = 0.5 * v_mag**2 - mu / r_mag
    parabolic = jnp.abs(e - 1.0) < eccentricity_tol
    a = jnp.where(parabolic, jnp.inf, -mu / (2.0 * energy))

    # atan2 keeps near-equatorial inclinations accurate where arccos(h_z / h) is not
    i = jnp.arctan2(n, h_vec[2])

    equatorial = n < equatorial_tol * h
    circular = e < eccentricity_tol

    x_hat = jnp.zeros_like(r).at[0].set(1.0)
    node_hat = jnp.where(equatorial, x_hat, n_vec / n)
    periapsis_hat = jnp.where(circular, node_hat, e_vec / e)

    Omega = jnp.where(equatorial, 0.0, wrap_angle(jnp.arctan2(n_vec[1], n_vec[0])))
    omega = jnp.where(circular, 0.0, _signed_angle(node_hat, periapsis_hat, h_hat))
    nu = _signed_angle(periapsis_hat, r, h_hat)

    elements = OrbitalElements(e=e, a=a, i=i, Omega=Omega, omega=omega, nu=nu)
    return elements, perifocal_state(e, nu, p, mu)


@jit
def keplerian_to_cartesian(elements: OrbitalElements, p: float, mu: float) -> Tuple[CartesianState, CartesianState]:
    """
    Convert classical orbital elements to inertial and perifocal Cartesian states.

    The semi-parameter is passed explicitly so parabolic orbits, whose
    semi-major axis is infinite, are handled by the same formulas.

    Args:
        elements: Orbital elements (angles in radians)
        p: Semi-parameter (km)
        mu: Gravitational parameter (km^3/s^2)

    Returns:
        (inertial_state, perifocal_state)
    """
    perifocal = perifocal_state(elements.e, elements.nu, p, mu)
    Q = perifocal_to_inertial_matrix(elements.i, elements.Omega, elements.omega)
    inertial = CartesianState(r=Q @ perifocal.r, v=Q @ perifocal.v)
    return inertial, perifocal
