import math
import unittest
import numpy as np
from utils import *
from quaternion import Quaternion
from color import RGB, GRAYSCALE, color_space_of


class TestVectors(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(1234)
        self.samples = [vec(rng.uniform(-10, 10, 3)) for _ in range(20)]

    def test_normalize_unit_length(self):
        for v in self.samples:
            self.assertAlmostEqual(magnitude(normalize(v)), 1.0)
        np.testing.assert_allclose(normalize(vec([0, 3, 4])), vec([0, 0.6, 0.8]))

    def test_normalize_zero_raises(self):
        with self.assertRaises(ZeroDivisionError):
            normalize(vec([0, 0, 0]))

    def test_cross_orthogonal(self):
        for a, b in zip(self.samples, self.samples[1:]):
            c = cross(a, b)
            self.assertAlmostEqual(dot(c, a), 0.0, places=9)
            self.assertAlmostEqual(dot(c, b), 0.0, places=9)
        np.testing.assert_array_equal(cross(vec([1, 0, 0]), vec([0, 1, 0])), vec([0, 0, 1]))

    def test_operators(self):
        a = vec([1, 2, 3])
        b = vec([-1, 0.5, 2])
        np.testing.assert_array_equal(a + b, vec([0, 2.5, 5]))
        np.testing.assert_array_equal(a - b, vec([2, 1.5, 1]))
        np.testing.assert_array_equal(-a, vec([-1, -2, -3]))
        np.testing.assert_array_equal(2.0 * a, a * 2.0)
        self.assertEqual(dot(a, b), 6.0)
        self.assertEqual(magnitude(vec([2, 3, 6])), 7.0)
        np.testing.assert_array_equal(vec_splat(2.5), vec([2.5, 2.5, 2.5]))

    def test_reflect(self):
        np.testing.assert_array_equal(reflect(vec([0, 0, -1]), vec([0, 0, 1])), vec([0, 0, 1]))
        # normal is normalized before use
        np.testing.assert_allclose(reflect(vec([1, -1, 0]), vec([0, 5, 0])), vec([1, 1, 0]))

    def test_refract(self):
        # straight through with matching indices
        np.testing.assert_allclose(refract(vec([0, 0, -1]), vec([0, 0, 1]), 1.0), vec([0, 0, -1]))
        # grazing ray going into a less dense medium is totally reflected
        np.testing.assert_array_equal(refract(vec([1, 0, 0]), vec([0, 0, 1]), 1.5), vec([0, 0, 0]))

    def test_lerp(self):
        a = vec([0, 0, 0])
        b = vec([4, -8, 2])
        np.testing.assert_allclose(lerp(a, b, 0.25), vec([1, -2, 0.5]))
        np.testing.assert_allclose(lerp(a, b, 1.0), b)

    def test_packed_rgb(self):
        self.assertEqual(to_packed_rgb(vec([1, 0.5, -1])), 0xFF7F00)
        self.assertEqual(to_packed_rgb(vec([2, 1, 0])), 0xFFFF00)
        self.assertEqual(to_packed_rgb(vec([0, 0, 1])), 0x0000FF)


class TestQuaternion(unittest.TestCase):

    def test_magnitude(self):
        self.assertEqual(Quaternion(1, 2, 2, 4).magnitude(), 5.0)

    def test_identity(self):
        q = Quaternion(0.3, -1.2, 4.0, 0.5)
        one = Quaternion(1, 0, 0, 0)
        self.assertEqual(q * one, q)
        self.assertEqual(one * q, q)

    def test_not_commutative(self):
        i = Quaternion(0, 1, 0, 0)
        j = Quaternion(0, 0, 1, 0)
        self.assertEqual(i * j, Quaternion(0, 0, 0, 1))
        self.assertEqual(j * i, Quaternion(0, 0, 0, -1))
        self.assertEqual(i * i, Quaternion(-1, 0, 0, 0))

    def test_hamilton_product(self):
        a1, b1, c1, d1 = 1.5, -2.0, 0.25, 3.0
        a2, b2, c2, d2 = -0.5, 1.0, 2.0, -1.25
        q = Quaternion(a1, b1, c1, d1) * Quaternion(a2, b2, c2, d2)
        self.assertAlmostEqual(q.s, a1*a2 - b1*b2 - c1*c2 - d1*d2)
        np.testing.assert_allclose(q.v, vec([
            a1*b2 + b1*a2 + c1*d2 - d1*c2,
            a1*c2 - b1*d2 + c1*a2 + d1*b2,
            a1*d2 + b1*c2 - c1*b2 + d1*a2,
        ]))

    def test_add_and_scale(self):
        q = Quaternion(1, 2, 3, 4) + Quaternion(0.5, -2, 1, 0)
        self.assertEqual(q, Quaternion(1.5, 0, 4, 4))
        self.assertEqual(2.0 * q, Quaternion(3, 0, 8, 8))
        self.assertEqual(np.float64(2.0) * q, Quaternion(3, 0, 8, 8))
        self.assertAlmostEqual((2.0 * q).magnitude(), 2.0 * q.magnitude())


class TestColorSpaces(unittest.TestCase):

    def test_rgb(self):
        np.testing.assert_array_equal(RGB.zero(), vec([0, 0, 0]))
        np.testing.assert_array_equal(RGB.white(), vec([1, 1, 1]))
        c = RGB.add(RGB.scale(vec([1, 0.5, 0]), 0.5), RGB.white())
        np.testing.assert_allclose(c, vec([1.5, 1.25, 1.0]))

    def test_grayscale(self):
        self.assertEqual(GRAYSCALE.zero(), 0.0)
        self.assertEqual(GRAYSCALE.white(), 1.0)
        c = GRAYSCALE.add(GRAYSCALE.scale(0.5, -2.0), 0.25)
        self.assertEqual(c, -0.75)
        self.assertIsInstance(c, float)

    def test_color_space_of(self):
        self.assertIs(color_space_of(vec([1, 0, 0])), RGB)
        self.assertIs(color_space_of(0.8), GRAYSCALE)
        self.assertIs(color_space_of(1), GRAYSCALE)
        with self.assertRaises(TypeError):
            color_space_of("red")
        with self.assertRaises(TypeError):
            color_space_of(vec([1, 0]))

    def test_pickle_keeps_identity(self):
        import pickle
        self.assertIs(pickle.loads(pickle.dumps(RGB)), RGB)
        self.assertIs(pickle.loads(pickle.dumps(GRAYSCALE)), GRAYSCALE)


class TestImageOutput(unittest.TestCase):

    def test_to_uint8_truncates(self):
        img = np.array([[-0.5, 0.5, 1.0, 2.0]])
        np.testing.assert_array_equal(to_uint8(img), np.array([[0, 127, 255, 255]], np.uint8))

    def test_ascii(self):
        img = np.array([[0.0, 0.5, 1.0], [1.5, -1.0, 0.3]])
        self.assertEqual(to_ascii(img), " =@\n@ :")

    def test_ascii_uses_red_channel(self):
        img = np.zeros((1, 2, 3))
        img[0, 1, 0] = 1.0
        img[0, 0, 2] = 1.0
        self.assertEqual(to_ascii(img), " @")

    def test_save_image(self):
        import os
        import tempfile
        from PIL import Image
        img = np.zeros((2, 3, 3))
        img[1, 2] = vec([1, 0.5, 0])
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out.png")
            save_image(img, path)
            with Image.open(path) as im:
                self.assertEqual(im.size, (3, 2))
                self.assertEqual(im.mode, "RGB")
                self.assertEqual(im.getpixel((2, 1)), (255, 127, 0))
            gray_path = os.path.join(tmp, "gray.png")
            save_image(np.full((2, 2), 0.5), gray_path)
            with Image.open(gray_path) as im:
                self.assertEqual(im.mode, "L")
                self.assertEqual(im.getpixel((0, 0)), 127)


if __name__ == '__main__':
    unittest.main()
