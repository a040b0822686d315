"""
Closed-form two-body propagation.

propagate_kepler advances an Orbit along its conic by solving Kepler's equation
in the form appropriate to the orbit's conic tag. It never raises on numerical
failure: if an anomaly solver does not converge, or the input is not a valid
orbit, the Invalid sentinel is returned so batch callers can filter failures.
"""
import logging
import math
from functools import partial
from typing import Tuple

import jax
import jax.numpy as jnp
from jax import jit

from twobody.config import KeplerConfig, DEFAULT_KEPLER_CONFIG
from twobody.conic import Conic
from twobody.constants import TIME_UNITS, TWO_PI
from twobody.orbit import Orbit, invalid_orbit, is_valid
from twobody.units import convert

logger = logging.getLogger(__name__)


def _effective_tol(tol, M):
    # Never ask for more accuracy than the floating point type can deliver.
    eps = jnp.finfo(M.dtype).eps
    return jnp.maximum(tol, 16.0 * eps) * (1.0 + jnp.abs(M))


@partial(jit, static_argnames=('max_iter',))
def _solve_kepler_elliptic(M, e, tol, max_iter):
    E0 = jnp.where(e < 0.8, M, jnp.pi * jnp.ones_like(M))

    def body_fn(E, _):
        # Newton-Raphson iteration
        f = E - e * jnp.sin(E) - M
        fp = 1.0 - e * jnp.cos(E)
        return E - f / fp, None

    # Fixed number of iterations using scan (compatible with reverse-mode AD)
    E, _ = jax.lax.scan(body_fn, E0, None, length=max_iter)
    residual = E - e * jnp.sin(E) - M
    return E, jnp.abs(residual) < _effective_tol(tol, M)


@partial(jit, static_argnames=('max_iter',))
def _solve_kepler_hyperbolic(M, e, tol, max_iter):
    F0 = jnp.sign(M) * jnp.log(2.0 * jnp.abs(M) / e + 1.8)

    def body_fn(F, _):
        f = e * jnp.sinh(F) - F - M
        fp = e * jnp.cosh(F) - 1.0
        return F - f / fp, None

    F, _ = jax.lax.scan(body_fn, F0, None, length=max_iter)
    residual = e * jnp.sinh(F) - F - M
    return F, jnp.abs(residual) < _effective_tol(tol, M)


def solve_kepler(M: float, e: float, config: KeplerConfig = DEFAULT_KEPLER_CONFIG) -> Tuple[jnp.ndarray, bool]:
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly E.

    Uses Newton-Raphson iteration with a fixed iteration count (jax.lax.scan)
    and reports whether the final residual is within tolerance.

    Args:
        M: Mean anomaly (rad)
        e: Eccentricity, 0 <= e < 1
        config: Solver tolerance and iteration count

    Returns:
        (E, converged)
    """
    M = jnp.asarray(M, dtype=jnp.result_type(M, float))
    E, converged = _solve_kepler_elliptic(M, jnp.asarray(e, dtype=M.dtype), config.tol, config.max_iter)
    return E, bool(converged)


def solve_kepler_hyperbolic(M: float, e: float,
                            config: KeplerConfig = DEFAULT_KEPLER_CONFIG) -> Tuple[jnp.ndarray, bool]:
    """
    Solve the hyperbolic Kepler equation M = e*sinh(F) - F for the hyperbolic anomaly F.

    Args:
        M: Hyperbolic mean anomaly (rad)
        e: Eccentricity, e > 1
        config: Solver tolerance and iteration count

    Returns:
        (F, converged)
    """
    M = jnp.asarray(M, dtype=jnp.result_type(M, float))
    F, converged = _solve_kepler_hyperbolic(M, jnp.asarray(e, dtype=M.dtype), config.tol, config.max_iter)
    return F, bool(converged)


@jit
def solve_barker(M: float) -> jnp.ndarray:
    """
    Solve Barker's equation M = D + D**3 / 3 for D = tan(nu / 2).

    The cubic has exactly one real root, given in closed form. The parabolic
    mean anomaly is M = 2 * sqrt(mu / p**3) * (t - t_periapsis).
    """
    B = 1.5 * jnp.abs(M)
    s = jnp.cbrt(B + jnp.sqrt(1.0 + B**2))
    return jnp.sign(M) * (s - 1.0 / s)


def _propagate_anomaly(orbit: Orbit, dt: float, config: KeplerConfig):
    """True anomaly after dt seconds, and whether the anomaly solver converged."""
    e = orbit.e
    nu = orbit.nu
    mu = jnp.asarray(orbit.body.mu, dtype=orbit.dtype)

    if orbit.conic == Conic.CIRCULAR:
        n = jnp.sqrt(mu / orbit.a**3)
        return nu + n * dt, True

    if orbit.conic == Conic.ELLIPTICAL:
        n = jnp.sqrt(mu / orbit.a**3)
        E0 = 2.0 * jnp.arctan2(jnp.sqrt(1.0 - e) * jnp.sin(nu / 2.0), jnp.sqrt(1.0 + e) * jnp.cos(nu / 2.0))
        M = jnp.mod(E0 - e * jnp.sin(E0) + n * dt, TWO_PI)
        E, converged = solve_kepler(M, e, config)
        return 2.0 * jnp.arctan2(jnp.sqrt(1.0 + e) * jnp.sin(E / 2.0), jnp.sqrt(1.0 - e) * jnp.cos(E / 2.0)), converged

    if orbit.conic == Conic.HYPERBOLIC:
        n = jnp.sqrt(mu / (-orbit.a)**3)
        F0 = 2.0 * jnp.arctanh(jnp.sqrt((e - 1.0) / (e + 1.0)) * jnp.tan(nu / 2.0))
        M = e * jnp.sinh(F0) - F0 + n * dt
        F, converged = solve_kepler_hyperbolic(M, e, config)
        return 2.0 * jnp.arctan(jnp.sqrt((e + 1.0) / (e - 1.0)) * jnp.tanh(F / 2.0)), converged

    if orbit.conic == Conic.PARABOLIC:
        p = orbit.semi_parameter
        D0 = jnp.tan(nu / 2.0)
        M = D0 + D0**3 / 3.0 + 2.0 * jnp.sqrt(mu / p**3) * dt
        return 2.0 * jnp.arctan(solve_barker(M)), True

    raise ValueError(f"Cannot propagate an orbit with conic {orbit.conic}")


def propagate_kepler(orbit: Orbit, duration: float, time_units: str = TIME_UNITS,
                     config: KeplerConfig = DEFAULT_KEPLER_CONFIG) -> Orbit:
    """
    Propagate a two-body orbit by ``duration`` using Kepler's equation.

    Only the true anomaly changes; e, a, i, Omega and omega are carried over and
    the Cartesian states are rebuilt from them. The regime-specific anomaly
    relation is selected from ``orbit.conic``.

    Args:
        orbit: Initial orbit
        duration: Time of flight in time_units (may be negative)
        time_units: Units of duration (default 's')
        config: Kepler solver settings

    Returns:
        The propagated Orbit, or ``invalid_orbit(orbit.body)`` if the input is
        not a valid orbit, the duration is not finite, or the anomaly solver
        does not converge.

    Raises:
        ValueError: If time_units is invalid or not a time unit.

    Examples:
        >>> later = propagate_kepler(orbit, 90.0, time_units='min')
    """
    dt = float(convert(duration, time_units, TIME_UNITS))

    if orbit.conic == Conic.INVALID or not is_valid(orbit) or not math.isfinite(dt):
        logger.warning("Cannot propagate %r by %s s; returning an invalid orbit.", orbit, dt)
        return invalid_orbit(orbit.body, frame=orbit.frame, dtype=orbit.dtype)

    nu, converged = _propagate_anomaly(orbit, dt, config)
    if not converged:
        logger.warning("Kepler's equation did not converge propagating %r by %s s; "
                       "returning an invalid orbit.", orbit, dt)
        return invalid_orbit(orbit.body, frame=orbit.frame, dtype=orbit.dtype)

    return Orbit.from_elements(orbit.e, orbit.a, orbit.i, orbit.Omega, orbit.omega, nu, orbit.body,
                               p=orbit.semi_parameter, frame=orbit.frame, dtype=orbit.dtype)
