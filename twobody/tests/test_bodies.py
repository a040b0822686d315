"""Tests for CelestialBody construction and the solar system catalog."""
import math
import unittest

import jax.numpy as jnp
import numpy as np
from pydantic import ValidationError

from twobody import G, CelestialBody, Earth, Moon, Luna, Sun, solar_system_bodies


class TestCelestialBody(unittest.TestCase):

    def test_mu_from_mass(self):
        """mu is G * mass to machine precision."""
        mass = 5.97216787e24
        body = CelestialBody.from_mass(mass, 6371.0)
        self.assertEqual(body.mu, G * mass)
        self.assertAlmostEqual(body.mass / mass, 1.0, places=14)

    def test_mu_stored_directly(self):
        """The radius/mu constructor reproduces mu exactly."""
        body = CelestialBody(radius=6378.137, mu=398600.4418)
        self.assertEqual(body.mu, 398600.4418)
        self.assertEqual(body.radius, 6378.137)

    def test_constructors_equivalent(self):
        """Building from mass or from mu gives the same body."""
        from_mass = CelestialBody.from_mass(7.342e22, 1737.4)
        from_mu = CelestialBody(radius=1737.4, mu=G * 7.342e22)
        self.assertEqual(from_mass, from_mu)

    def test_earth_mu(self):
        self.assertAlmostEqual(Earth.mu, 398600.4, delta=1.0)
        self.assertEqual(Earth.radius, 6371.0)
        self.assertEqual(Earth.name, 'Earth')

    def test_moon_luna_alias(self):
        """Moon and Luna are the same value."""
        self.assertIs(Moon, Luna)
        self.assertEqual(Moon.radius, Luna.radius)
        self.assertEqual(Moon.mu, Luna.mu)
        self.assertEqual(Moon, Luna)

    def test_catalog(self):
        names = ['Sun', 'Mercury', 'Venus', 'Earth', 'Moon', 'Luna', 'Mars',
                 'Jupiter', 'Saturn', 'Uranus', 'Neptune', 'Pluto']
        self.assertEqual(sorted(solar_system_bodies), sorted(names))
        unique = {id(body) for body in solar_system_bodies.values()}
        self.assertEqual(len(unique), 11)
        for body in solar_system_bodies.values():
            self.assertGreater(body.mu, 0.0)
            self.assertGreater(body.radius, 0.0)

    def test_immutable(self):
        with self.assertRaises(ValidationError):
            Earth.mu = 1.0

    def test_non_positive_values_rejected(self):
        with self.assertRaises(ValidationError):
            CelestialBody(radius=-1.0, mu=1.0)
        with self.assertRaises(ValidationError):
            CelestialBody(radius=1.0, mu=0.0)

    def test_astype(self):
        """Converting precision preserves physical values to rounding."""
        sun32 = Sun.astype(np.float32)
        self.assertEqual(sun32.precision, 'float32')
        self.assertEqual(sun32.mu, float(np.float32(Sun.mu)))
        self.assertAlmostEqual(sun32.mu / Sun.mu, 1.0, places=6)

        sun64 = sun32.astype('float64')
        self.assertEqual(sun64.precision, 'float64')
        self.assertEqual(sun64.mu, sun32.mu)

    def test_precision_on_construction(self):
        body = CelestialBody.from_mass(5.97216787e24, 6371.0, precision='float32')
        self.assertEqual(body.precision, 'float32')
        self.assertEqual(body.mu, float(np.float32(G * 5.97216787e24)))

    def test_invalid_precision(self):
        with self.assertRaises(ValidationError):
            CelestialBody(radius=1.0, mu=1.0, precision='int32')
        with self.assertRaises(ValidationError):
            CelestialBody(radius=1.0, mu=1.0, precision='float16')
        with self.assertRaises(ValidationError):
            CelestialBody(radius=1.0, mu=1.0, precision='not_a_type')

    def test_narrow_precision_rejected(self):
        """float16 cannot represent the mu of most bodies, so it is not accepted."""
        for dtype in (np.float16, jnp.bfloat16, 'int64'):
            with self.assertRaises(ValueError):
                Earth.astype(dtype)
            with self.assertRaises(ValueError):
                Sun.astype(dtype)

    def test_non_finite_values_rejected(self):
        with self.assertRaises(ValidationError):
            CelestialBody(radius=1.0, mu=math.inf)
        with self.assertRaises(ValidationError):
            CelestialBody(radius=math.nan, mu=1.0)
        with self.assertRaises(ValidationError):
            CelestialBody(radius=1.0, mu=1.0e40, precision='float32')

    def test_units(self):
        """Inputs and outputs can use any compatible units."""
        body = CelestialBody.from_mass(5.97216787e24, 6371.0e3, distance_units='m')
        self.assertAlmostEqual(body.radius, 6371.0, places=9)
        self.assertAlmostEqual(body.get_radius('m'), 6371.0e3, places=6)
        self.assertAlmostEqual(body.get_mu('m**3/s**2') / (Earth.mu * 1e9), 1.0, places=12)

        body = CelestialBody.from_mu(6371.0e3, 3.986004418e14, distance_units='m', mu_units='m**3/s**2')
        self.assertAlmostEqual(body.mu, 398600.4418, places=6)

    def test_incompatible_units(self):
        with self.assertRaises(ValueError):
            CelestialBody.from_mass(5.97216787e24, 6371.0, distance_units='s')
        with self.assertRaises(ValueError):
            CelestialBody.from_mass(5.97216787e24, 6371.0, mass_units='not_a_unit')


if __name__ == '__main__':
    unittest.main()
