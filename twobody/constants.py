"""
Physical constants and canonical units for twobody.

All quantities stored internally use the canonical units defined here.
"""

import jax.numpy as jnp

# Newtonian constant of gravitation (CODATA 2018)
G_SI = 6.67430e-11  # m^3/(kg*s^2)
G = G_SI * 1.0e-9  # km^3/(kg*s^2)

# Canonical units of every stored quantity
DISTANCE_UNITS = 'km'
TIME_UNITS = 's'
VELOCITY_UNITS = 'km/s'
ANGLE_UNITS = 'rad'
MASS_UNITS = 'kg'
MU_UNITS = 'km**3/s**2'

TWO_PI = 2.0 * jnp.pi

# Numeric tolerances
ECCENTRICITY_TOL = 1.0e-8  # circular and parabolic boundaries
EQUATORIAL_TOL = 1.0e-10  # |n| / |h| below which the orbit is equatorial
KEPLER_TOL = 1.0e-10
KEPLER_MAX_ITER = 50
