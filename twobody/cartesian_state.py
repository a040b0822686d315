"""
Cartesian state representation.
"""
from typing import NamedTuple
import jax.numpy as jnp


class CartesianState(NamedTuple):
    """
    Position and velocity of the orbiting body relative to the central body.

    An Orbit holds two of these: ``inertial``, expressed in the orbit's frame,
    and ``perifocal``, expressed in the orbital plane with x toward periapsis
    and z along the angular momentum. Values are stored in canonical units;
    use ``Orbit.get_inertial_state`` or ``Orbit.get_perifocal_state`` for
    other units.

    Attributes:
        r: Position vector (km), shape (3,)
        v: Velocity vector (km/s), shape (3,)
    """
    r: jnp.ndarray
    v: jnp.ndarray
