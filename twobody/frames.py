"""
Reference frames and transformations between them.

A :class:`Transform` converts an :class:`~twobody.orbit.Orbit` from one
:class:`AstrodynamicsFrame` to another. It is composed of two independent
sub-transformations: one for position vectors and one for velocity vectors.
They generally differ, since the velocity seen in a rotating frame picks up an
omega x r term that a pure rotation of the position does not have.

Position sub-transformations are called as ``f(r)``. Velocity
sub-transformations are called as ``f(v, r)`` where ``r`` is the position in
the sub-transformation's source frame. Every sub-transformation provides
``inverse()``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import jax.numpy as jnp
import pydantic
from pydantic import ConfigDict

logger = logging.getLogger(__name__)


class AstrodynamicsFrame(pydantic.BaseModel):
    """
    A named coordinate frame.

    Frames compare equal when their names (and descriptions) match. Create new
    frames as needed, e.g. ``AstrodynamicsFrame(name='EarthFixed')``.

    Attributes:
        name: Name identifying the frame
        description: Optional free-form description
    """
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ''

    def __str__(self) -> str:
        return self.name


INERTIAL = AstrodynamicsFrame(name='Inertial', description='Body-centered inertial frame')
PERIFOCAL = AstrodynamicsFrame(name='Perifocal', description='Orbital plane frame with x toward periapsis')


@dataclass(frozen=True, eq=False)
class IdentityMap:
    """A sub-transformation that returns its input unchanged."""

    def __call__(self, x, r=None):
        return x

    def inverse(self) -> IdentityMap:
        return self


@dataclass(frozen=True, eq=False)
class LinearMap:
    """
    Multiply vectors by a fixed 3x3 matrix.

    Usable as a position or a velocity sub-transformation. When used for
    velocities the position argument is ignored.
    """
    matrix: Any

    def __post_init__(self):
        matrix = jnp.asarray(self.matrix)
        if matrix.shape != (3, 3):
            raise ValueError(f"LinearMap matrix must be 3x3, got shape {matrix.shape}")
        object.__setattr__(self, 'matrix', matrix)

    def __call__(self, x, r=None):
        return self.matrix @ x

    def inverse(self) -> LinearMap:
        return LinearMap(jnp.linalg.inv(self.matrix))


@dataclass(frozen=True, eq=False)
class RotatingVelocityMap:
    """
    Velocity sub-transformation into a frame rotating relative to the source frame.

        v' = M (v - w x r)

    where M is the rotation matrix from the source to the destination frame and
    w is the angular velocity of the destination frame, expressed in the
    source frame (rad/s).

    Attributes:
        matrix: 3x3 rotation matrix applied to the input vectors. M for the
            forward map, M^-1 for an inverted map.
        angular_velocity: Angular velocity vector of the rotating frame,
            expressed in the non-rotating frame (rad/s)
        inverted: If True, map back to the non-rotating frame,
            v = M^-1 v' + w x (M^-1 r')
    """
    matrix: Any
    angular_velocity: Any
    inverted: bool = field(default=False)

    def __post_init__(self):
        matrix = jnp.asarray(self.matrix)
        angular_velocity = jnp.asarray(self.angular_velocity)
        if matrix.shape != (3, 3):
            raise ValueError(f"RotatingVelocityMap matrix must be 3x3, got shape {matrix.shape}")
        if angular_velocity.shape != (3,):
            raise ValueError(f"angular_velocity must be a 3-vector, got shape {angular_velocity.shape}")
        object.__setattr__(self, 'matrix', matrix)
        object.__setattr__(self, 'angular_velocity', angular_velocity)

    def __call__(self, v, r):
        if self.inverted:
            return self.matrix @ v + jnp.cross(self.angular_velocity, self.matrix @ r)
        return self.matrix @ (v - jnp.cross(self.angular_velocity, r))

    def inverse(self) -> RotatingVelocityMap:
        return RotatingVelocityMap(jnp.linalg.inv(self.matrix), self.angular_velocity, inverted=not self.inverted)


@dataclass(frozen=True, eq=False)
class Transform:
    """
    A transformation of orbits from ``from_frame`` to ``to_frame``.

    Applying a transform recomputes the orbital elements from the transformed
    Cartesian state, since inclination and RAAN are measured against the
    destination frame's fundamental plane.

    Attributes:
        position_transform: Callable f(r) -> r'
        velocity_transform: Callable f(v, r) -> v'
        from_frame: Frame of the input orbits
        to_frame: Frame of the output orbits

    Examples:
        >>> ecliptic = AstrodynamicsFrame(name='Ecliptic')
        >>> tf = rotation_transform(R, INERTIAL, ecliptic)
        >>> orbit_ecl = tf(orbit)
        >>> orbit_back = tf.inverse()(orbit_ecl)
    """
    position_transform: Any
    velocity_transform: Any
    from_frame: AstrodynamicsFrame
    to_frame: AstrodynamicsFrame

    def apply_state(self, r, v):
        """Transform a raw position/velocity pair expressed in ``from_frame``."""
        return self.position_transform(r), self.velocity_transform(v, r)

    def __call__(self, orbit):
        """
        Express ``orbit`` in ``to_frame``.

        The Invalid sentinel maps to the Invalid sentinel in the destination frame.

        Raises:
            ValueError: If the orbit is not expressed in ``from_frame``.
        """
        from twobody.orbit import Orbit, invalid_orbit, is_invalid

        if orbit.frame != self.from_frame:
            raise ValueError(f"Transform from '{self.from_frame}' cannot be applied to an orbit "
                             f"in frame '{orbit.frame}'.")

        if is_invalid(orbit):
            return invalid_orbit(orbit.body, frame=self.to_frame, dtype=orbit.dtype)

        r, v = self.apply_state(orbit.r_i, orbit.v_i)
        logger.debug("Transforming orbit from %s to %s", self.from_frame, self.to_frame)
        return Orbit.from_cartesian(jnp.asarray(r, dtype=orbit.dtype), jnp.asarray(v, dtype=orbit.dtype),
                                    orbit.body, frame=self.to_frame, dtype=orbit.dtype)

    def inverse(self) -> Transform:
        """The transform from ``to_frame`` back to ``from_frame``."""
        return Transform(self.position_transform.inverse(), self.velocity_transform.inverse(),
                         self.to_frame, self.from_frame)


def rotation_transform(matrix, from_frame: AstrodynamicsFrame, to_frame: AstrodynamicsFrame) -> Transform:
    """A transform between two frames related by a fixed rotation matrix (from -> to)."""
    rotation = LinearMap(matrix)
    return Transform(rotation, rotation, from_frame, to_frame)


def rotating_frame_transform(matrix, angular_velocity, from_frame: AstrodynamicsFrame,
                             to_frame: AstrodynamicsFrame) -> Transform:
    """
    A transform into a frame that, at this instant, is rotated by ``matrix`` and
    spins with ``angular_velocity`` (rad/s, expressed in ``from_frame``).
    """
    return Transform(LinearMap(matrix), RotatingVelocityMap(matrix, angular_velocity), from_frame, to_frame)


def perifocal_transform(orbit) -> Transform:
    """
    The rotation from the orbit's frame into its own perifocal frame.

    Applying it to ``orbit`` gives an orbit whose inertial state equals the
    original orbit's perifocal state.
    """
    from twobody.astrodynamics import perifocal_to_inertial_matrix

    Q = perifocal_to_inertial_matrix(orbit.i, orbit.Omega, orbit.omega)
    return rotation_transform(Q.T, orbit.frame, PERIFOCAL)
