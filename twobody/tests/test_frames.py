"""Tests for reference frames and frame transforms."""
import math
import unittest

import jax.numpy as jnp
import numpy as np

from twobody import (
    Orbit, Earth, Conic, INERTIAL, PERIFOCAL,
    AstrodynamicsFrame, IdentityMap, LinearMap, RotatingVelocityMap, Transform,
    rotation_transform, rotating_frame_transform, perifocal_transform,
    invalid_orbit, is_invalid, is_valid,
)

ROTATED = AstrodynamicsFrame(name='Rotated')


def rot_x(theta):
    c, s = math.cos(theta), math.sin(theta)
    return jnp.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rot_z(theta):
    c, s = math.cos(theta), math.sin(theta)
    return jnp.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


class TestFrames(unittest.TestCase):

    def test_frame_equality(self):
        self.assertEqual(AstrodynamicsFrame(name='Rotated'), ROTATED)
        self.assertNotEqual(INERTIAL, PERIFOCAL)
        self.assertEqual(str(INERTIAL), 'Inertial')

    def test_default_frame(self):
        orbit = Orbit.from_cartesian([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], Earth)
        self.assertEqual(orbit.frame, INERTIAL)


class TestTransform(unittest.TestCase):

    def setUp(self):
        self.equatorial = Orbit.from_cartesian([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], Earth)
        self.inclined = Orbit.from_cartesian([-6045.0, -3490.0, 2500.0], [-3.457, 6.618, 2.533], Earth)

    def test_identity(self):
        tf = Transform(IdentityMap(), IdentityMap(), INERTIAL, ROTATED)
        out = tf(self.inclined)
        self.assertEqual(out.frame, ROTATED)
        np.testing.assert_allclose(out.r_i, self.inclined.r_i)
        np.testing.assert_allclose(out.v_i, self.inclined.v_i)
        np.testing.assert_allclose(out.i, self.inclined.i)

    def test_rotation_about_pole(self):
        """Rotating about z changes position and RAAN but not inclination or shape."""
        tf = rotation_transform(rot_z(0.7), INERTIAL, ROTATED)
        out = tf(self.inclined)
        np.testing.assert_allclose(out.r_i, rot_z(0.7) @ self.inclined.r_i, rtol=1e-12)
        np.testing.assert_allclose(out.v_i, rot_z(0.7) @ self.inclined.v_i, rtol=1e-12)
        np.testing.assert_allclose(out.e, self.inclined.e, rtol=1e-10)
        np.testing.assert_allclose(out.a, self.inclined.a, rtol=1e-10)
        np.testing.assert_allclose(out.i, self.inclined.i, rtol=1e-10)
        expected_raan = (float(self.inclined.Omega) + 0.7) % (2.0 * math.pi)
        self.assertAlmostEqual(float(out.Omega), expected_raan, places=9)

    def test_elements_recomputed(self):
        """Tilting the fundamental plane changes the inclination of an equatorial orbit."""
        tf = rotation_transform(rot_x(math.pi / 2.0), INERTIAL, ROTATED)
        out = tf(self.equatorial)
        self.assertAlmostEqual(float(self.equatorial.i), 0.0, places=12)
        self.assertAlmostEqual(float(out.i), math.pi / 2.0, places=12)
        self.assertAlmostEqual(float(out.e), float(self.equatorial.e), places=12)
        self.assertEqual(out.conic, Conic.ELLIPTICAL)

    def test_inverse_roundtrip(self):
        tf = rotation_transform(rot_x(0.3) @ rot_z(1.1), INERTIAL, ROTATED)
        inv = tf.inverse()
        self.assertEqual(inv.from_frame, ROTATED)
        self.assertEqual(inv.to_frame, INERTIAL)

        back = inv(tf(self.inclined))
        self.assertEqual(back.frame, INERTIAL)
        np.testing.assert_allclose(back.r_i, self.inclined.r_i, rtol=1e-10)
        np.testing.assert_allclose(back.v_i, self.inclined.v_i, rtol=1e-10)
        np.testing.assert_allclose(back.nu, self.inclined.nu, rtol=1e-10)

    def test_frame_mismatch(self):
        tf = rotation_transform(rot_z(0.1), ROTATED, INERTIAL)
        with self.assertRaises(ValueError):
            tf(self.inclined)

    def test_invalid_orbit_stays_invalid(self):
        """The invalid sentinel survives any transform and its inverse."""
        tf = rotating_frame_transform(rot_z(0.4), [0.0, 0.0, 7.292e-5], INERTIAL, ROTATED)
        orbit = invalid_orbit(Earth)
        out = tf(orbit)
        self.assertTrue(is_invalid(out))
        self.assertEqual(out.conic, Conic.INVALID)
        self.assertEqual(out.frame, ROTATED)
        self.assertIs(out.body, Earth)

        back = tf.inverse()(out)
        self.assertTrue(is_invalid(back))
        self.assertEqual(back.frame, INERTIAL)

    def test_perifocal_transform(self):
        """Rotating into the perifocal frame gives the orbit's perifocal state."""
        for orbit in (self.inclined, self.equatorial):
            out = perifocal_transform(orbit)(orbit)
            self.assertEqual(out.frame, PERIFOCAL)
            np.testing.assert_allclose(out.r_i, orbit.r_p, rtol=1e-9, atol=1e-6)
            np.testing.assert_allclose(out.v_i, orbit.v_p, rtol=1e-9, atol=1e-9)
            self.assertAlmostEqual(float(out.i), 0.0, places=9)
            self.assertTrue(is_valid(out))

    def test_precision_preserved(self):
        orbit = self.inclined.astype(jnp.float32)
        out = rotation_transform(rot_z(0.2), INERTIAL, ROTATED)(orbit)
        self.assertEqual(out.dtype, np.dtype('float32'))


class TestSubTransformations(unittest.TestCase):

    def test_linear_map(self):
        m = LinearMap(rot_z(math.pi / 2.0))
        np.testing.assert_allclose(m(jnp.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0], atol=1e-15)
        np.testing.assert_allclose(m.inverse()(jnp.array([0.0, 1.0, 0.0])), [1.0, 0.0, 0.0], atol=1e-15)

    def test_linear_map_shape(self):
        with self.assertRaises(ValueError):
            LinearMap(jnp.eye(2))

    def test_rotating_velocity(self):
        """The velocity map of a rotating frame differs from the position map by -w x r."""
        w = jnp.array([0.0, 0.0, 1.0e-3])
        r = jnp.array([7000.0, 0.0, 0.0])
        v = jnp.array([0.0, 7.5, 0.0])

        vmap = RotatingVelocityMap(jnp.eye(3), w)
        np.testing.assert_allclose(vmap(v, r), [0.0, 7.5 - 7.0, 0.0], rtol=1e-12)
        np.testing.assert_allclose(vmap.inverse()(vmap(v, r), r), v, rtol=1e-12)

    def test_rotating_velocity_inverse_matrix(self):
        """The inverse map stores the inverted rotation and inverting twice restores the original."""
        w = jnp.array([0.0, 0.0, 7.292e-5])
        r = jnp.array([-6045.0, -3490.0, 2500.0])
        v = jnp.array([-3.457, 6.618, 2.533])

        vmap = RotatingVelocityMap(rot_x(0.3) @ rot_z(0.4), w)
        inv = vmap.inverse()
        self.assertTrue(inv.inverted)
        np.testing.assert_allclose(inv.matrix, vmap.matrix.T, atol=1e-15)

        again = inv.inverse()
        self.assertFalse(again.inverted)
        np.testing.assert_allclose(again(v, r), vmap(v, r), rtol=1e-12)

        r_rot = vmap.matrix @ r
        np.testing.assert_allclose(inv(vmap(v, r), r_rot), v, rtol=1e-12)

    def test_rotating_frame_transform_roundtrip(self):
        orbit = Orbit.from_cartesian([-6045.0, -3490.0, 2500.0], [-3.457, 6.618, 2.533], Earth)
        tf = rotating_frame_transform(rot_z(0.4), [0.0, 0.0, 7.292e-5], INERTIAL, ROTATED)

        out = tf(orbit)
        expected_v = rot_z(0.4) @ (orbit.v_i - jnp.cross(jnp.array([0.0, 0.0, 7.292e-5]), orbit.r_i))
        np.testing.assert_allclose(out.v_i, expected_v, rtol=1e-12)

        back = tf.inverse()(out)
        np.testing.assert_allclose(back.r_i, orbit.r_i, rtol=1e-10)
        np.testing.assert_allclose(back.v_i, orbit.v_i, rtol=1e-10)

    def test_rotating_velocity_map_shape(self):
        with self.assertRaises(ValueError):
            RotatingVelocityMap(jnp.eye(3), [0.0, 1.0])


if __name__ == '__main__':
    unittest.main()
