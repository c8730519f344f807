import math
import unittest
import numpy as np
from raymarch import *
from color import RGB, GRAYSCALE
from geometry import Julia, Sphere, SceneObject, MAX_ITERS
from quaternion import Quaternion
from utils import normalize, magnitude, dot, cross, vec, to_uint8

JULIA_C = Quaternion(-0.450, -0.447, 0.181, 0.306)


def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


class ConstantDistance(SceneObject):
    """Never gets close enough to hit, counts how often it is asked."""

    def __init__(self, d):
        self.d = d
        self.calls = 0

    def distance_to(self, point, t):
        self.calls += 1
        return self.d

    def get_color(self, t):
        return 1.0


class TestSphere(unittest.TestCase):

    def test_distance(self):
        sphere = Sphere(vec([0, 0, 0]), 1.0, 1.0)
        self.assertEqual(sphere.distance_to(vec([0, 0, 5]), 0.0), 4.0)
        self.assertEqual(sphere.distance_to(vec([0, 0.5, 0]), 0.0), -0.5)
        offset = Sphere(vec([1, 2, 0]), 0.5, 1.0)
        self.assertAlmostEqual(offset.distance_to(vec([1, 2, 3]), 0.0), 2.5)

    def test_x_tiling(self):
        sphere = Sphere(vec([0, 0, 0]), 1.0, 1.0)
        # x wraps every 5 units
        self.assertAlmostEqual(sphere.distance_to(vec([5, 0, 0]), 0.0), -1.0)
        self.assertAlmostEqual(sphere.distance_to(vec([7, 0, 0]), 0.0), 1.0)
        # truncated remainder, -3 stays -3 instead of folding to 2
        self.assertAlmostEqual(sphere.distance_to(vec([-3, 0, 0]), 0.0), 2.0)
        self.assertAlmostEqual(sphere.distance_to(vec([-8, 0, 0]), 0.0), 2.0)

    def test_color_ignores_t(self):
        red = vec([1, 0, 0])
        sphere = Sphere(vec([0, 0, 0]), 1.0, red)
        self.assertIs(sphere.get_color(0.0), red)
        self.assertIs(sphere.get_color(12.5), red)

    def test_normal(self):
        sphere = Sphere(vec([0, 0, 0]), 1.0, 1.0)
        np.testing.assert_allclose(sphere.normal(vec([0, 0, 1]), 0.0), vec([0, 0, 1]), atol=1e-6)
        np.testing.assert_allclose(sphere.normal(vec([0.6, 0.8, 0]), 0.0), vec([0.6, 0.8, 0]), atol=1e-6)
        np.testing.assert_allclose(sphere.normal(vec([0, -2, 0]), 0.0), vec([0, -1, 0]), atol=1e-6)

    def test_abstract_object(self):
        with self.assertRaises(NotImplementedError):
            SceneObject().distance_to(vec([0, 0, 0]), 0.0)
        with self.assertRaises(NotImplementedError):
            SceneObject().get_color(0.0)


class TestJulia(unittest.TestCase):

    def setUp(self):
        self.julia = Julia(JULIA_C, vec([1, 0, 0]))

    def test_distance_single_escape(self):
        # far enough away that z escapes after the first iteration
        p = vec([3, 3, 3])
        z1 = Quaternion(3, 3, 3, 0) * Quaternion(3, 3, 3, 0) + JULIA_C
        dz1 = 2.0 * Quaternion(3, 3, 3, 0).magnitude()
        self.assertGreater(z1.magnitude(), 4.0)
        expected = 0.2 * z1.magnitude() * math.log(z1.magnitude()) / dz1
        self.assertAlmostEqual(self.julia.distance_to(p, 0.0), expected)

    def test_distance_grows_away_from_set(self):
        near = self.julia.distance_to(vec([1.5, 1.5, 1.5]), 0.0)
        far = self.julia.distance_to(vec([3, 3, 3]), 0.0)
        farther = self.julia.distance_to(vec([6, 6, 6]), 0.0)
        self.assertGreater(near, 0.0)
        self.assertLess(near, far)
        self.assertLess(far, farther)

    def test_t_is_fourth_component(self):
        p = vec([1.5, 1.5, 1.5])
        self.assertNotEqual(self.julia.distance_to(p, 0.0), self.julia.distance_to(p, 0.7))

    def test_collapsed_derivative(self):
        # z0 = 0 makes every derivative update zero
        self.assertEqual(self.julia.distance_to(vec([0, 0, 0]), 0.0), math.inf)

    def test_bounded_iterations(self):
        # a point inside the set never escapes, the estimate is still finite
        inside = Julia(Quaternion(0.25, 0, 0, 0), 1.0)
        d = inside.distance_to(vec([0.3, 0, 0]), 0.0)
        self.assertTrue(math.isfinite(d))
        self.assertLess(d, 0.0)
        self.assertEqual(MAX_ITERS, 20)

    def test_color(self):
        self.assertIs(self.julia.get_color(3.0), self.julia.color)


class TestCastRay(unittest.TestCase):

    def setUp(self):
        self.sphere = Sphere(vec([0, 0, 0]), 1.0, 1.0)

    def test_hit(self):
        res = cast_ray(self.sphere, vec([0, 0, 5]), vec([0, 0, -1]), vec([10, 10, 10]), 0.0)
        self.assertIsNotNone(res)
        self.assertAlmostEqual(res.len, 4.0)
        np.testing.assert_allclose(res.hit_point, vec([0, 0, 1]), atol=1e-9)

    def test_direction_normalized(self):
        res = cast_ray(self.sphere, vec([0, 0, 5]), vec([0, 0, -7]), vec([10, 10, 10]), 0.0)
        self.assertIsNotNone(res)
        self.assertAlmostEqual(res.len, 4.0)

    def test_off_axis_hit(self):
        origin = vec([2, 3, 4])
        res = cast_ray(self.sphere, origin, -origin, vec([10, 10, 10]), 0.0)
        self.assertIsNotNone(res)
        self.assertAlmostEqual(res.len, math.sqrt(29) - 1, places=4)
        self.assertAlmostEqual(magnitude(res.hit_point), 1.0, places=4)

    def test_miss_backplane(self):
        res = cast_ray(self.sphere, vec([0, 0, 5]), vec([0, 0, 1]), vec([3, 3, 3]), 0.0)
        self.assertIsNone(res)

    def test_miss_past_object(self):
        res = cast_ray(self.sphere, vec([0, 2, 5]), vec([0, 0, -1]), vec([10, 10, 10]), 0.0)
        self.assertIsNone(res)

    def test_miss_max_steps(self):
        obj = ConstantDistance(1e-3)
        res = cast_ray(obj, vec([0, 0, 0]), vec([1, 0, 0]), vec([1e9, 1e9, 1e9]), 0.0)
        self.assertIsNone(res)
        self.assertEqual(obj.calls, MAX_STEPS + 1)

    def test_hit_beats_backplane(self):
        # starts on the surface, outside the culling box
        res = cast_ray(self.sphere, vec([0, 0, 1]), vec([0, 0, -1]), vec([0.5, 0.5, 0.5]), 0.0)
        self.assertIsNotNone(res)
        self.assertEqual(res.len, 0.0)

    def test_julia_hit(self):
        julia = Julia(JULIA_C, vec([1, 0, 0]))
        res = cast_ray(julia, vec([2, 4, 4]), vec([-2, -4, -4]), vec([3, 3, 3]), 0.0)
        self.assertIsNotNone(res)
        self.assertGreater(res.len, 0.0)
        self.assertLess(res.len, 6.0)


class TestRayMarcherConfig(unittest.TestCase):

    def test_defaults(self):
        cfg = RayMarcherConfig()
        self.assertEqual((cfg.width, cfg.height), (10, 10))
        np.testing.assert_array_equal(cfg.camera_pos, vec([2, 4, 4]))
        np.testing.assert_array_equal(cfg.look_at, vec([0, 0, 0]))
        np.testing.assert_array_equal(cfg.light_pos, cfg.camera_pos)
        np.testing.assert_array_equal(cfg.background_color, vec([0, 0, 0]))
        np.testing.assert_array_equal(cfg.specular_color, vec([1, 1, 1]))
        np.testing.assert_array_equal(cfg.backplane_positions, vec([3, 3, 3]))
        self.assertEqual(cfg.camera_zoom, 3.0)
        self.assertEqual(cfg.anti_aliasing_level, 4)
        self.assertEqual(cfg.specular_shininess, 50.0)
        self.assertIs(cfg.colors, RGB)

    def test_grayscale_defaults(self):
        cfg = RayMarcherConfig(colors=GRAYSCALE)
        self.assertEqual(cfg.background_color, 0.0)
        self.assertEqual(cfg.specular_color, 1.0)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            RayMarcherConfig(width=0)
        with self.assertRaises(ValueError):
            RayMarcherConfig(height=-2)
        with self.assertRaises(ValueError):
            RayMarcherConfig(anti_aliasing_level=0)

    def test_color_mismatch(self):
        with self.assertRaises(TypeError):
            RayMarcher(Sphere(vec([0, 0, 0]), 1.0, 0.5), RayMarcherConfig())
        with self.assertRaises(TypeError):
            RayMarcher(Sphere(vec([0, 0, 0]), 1.0, vec([1, 1, 1])), RayMarcherConfig(colors=GRAYSCALE))


class TestCamera(unittest.TestCase):

    def setUp(self):
        self.marcher = RayMarcher(Sphere(vec([0, 0, 0]), 1.0, 1.0), RayMarcherConfig(colors=GRAYSCALE))

    def test_center_ray(self):
        d = self.marcher.camera_ray_direction(5, 5)
        assert_direction_matches(d, vec([-2, -4, -4]))

    def test_unit_length(self):
        for x, y in [(0, 0), (9.5, 3.25), (10, 10), (2, 7)]:
            self.assertAlmostEqual(magnitude(self.marcher.camera_ray_direction(x, y)), 1.0)

    def test_orientation(self):
        look = normalize(vec([-2, -4, -4]))
        right = normalize(cross(vec([0, -1, 0]), look))
        # x is mirrored, small pixel x is towards the right vector
        left_edge = self.marcher.camera_ray_direction(0, 5)
        right_edge = self.marcher.camera_ray_direction(10, 5)
        self.assertGreater(dot(left_edge - right_edge, right), 0.0)
        # small pixel y is towards world up
        top = self.marcher.camera_ray_direction(5, 0)
        bottom = self.marcher.camera_ray_direction(5, 10)
        self.assertGreater(top[1], bottom[1])

    def test_zoom_narrows_view(self):
        zoomed = RayMarcher(self.marcher.object, RayMarcherConfig(colors=GRAYSCALE, camera_zoom=6.0))
        look = normalize(vec([-2, -4, -4]))
        self.assertGreater(dot(zoomed.camera_ray_direction(0, 0), look),
                           dot(self.marcher.camera_ray_direction(0, 0), look))


class TestShading(unittest.TestCase):

    def gray_marcher(self, **kwargs):
        return RayMarcher(Sphere(vec([0, 0, 0]), 1.0, 1.0), RayMarcherConfig(colors=GRAYSCALE, **kwargs))

    def test_head_on_lighting(self):
        # light at the camera, looking straight at the sphere: full diffuse plus full specular
        marcher = self.gray_marcher()
        d = marcher.camera_ray_direction(5, 5)
        c = marcher.trace_with_lighting(marcher.config.camera_pos, d, 0.0)
        self.assertAlmostEqual(c, 2.0, places=5)

    def test_miss_returns_background(self):
        marcher = self.gray_marcher(background_color=0.25)
        d = marcher.camera_ray_direction(0, 0)
        self.assertEqual(marcher.trace_with_lighting(marcher.config.camera_pos, d, 0.0), 0.25)
        self.assertAlmostEqual(marcher.get_pixel_color(0, 0, 0.0), 0.25)

    def test_diffuse_not_clamped(self):
        # light behind the sphere, no specular, the diffuse term goes negative
        marcher = self.gray_marcher(light_pos=vec([-2, -4, -4]), anti_aliasing_level=1)
        c = marcher.get_pixel_color(5, 5, 0.0)
        self.assertAlmostEqual(c, -1.0, places=5)

    def test_single_sample_matches_trace(self):
        marcher = self.gray_marcher(anti_aliasing_level=1)
        for x, y in [(5, 5), (4, 6), (0, 0)]:
            d = marcher.camera_ray_direction(x, y)
            self.assertEqual(marcher.get_pixel_color(x, y, 0.0),
                             marcher.trace_with_lighting(marcher.config.camera_pos, d, 0.0))

    def test_supersampling_averages(self):
        marcher = self.gray_marcher(anti_aliasing_level=2)
        cam = marcher.config.camera_pos
        samples = [marcher.trace_with_lighting(cam, marcher.camera_ray_direction(4 + sx, 4 + sy), 0.0)
                   for sx in (0.0, 0.5) for sy in (0.0, 0.5)]
        self.assertAlmostEqual(marcher.get_pixel_color(4, 4, 0.0), sum(samples) / 4)

    def test_rgb_matches_grayscale(self):
        gray = self.gray_marcher(anti_aliasing_level=2)
        rgb = RayMarcher(Sphere(vec([0, 0, 0]), 1.0, vec([1, 1, 1])),
                         RayMarcherConfig(anti_aliasing_level=2))
        for x, y in [(5, 5), (3, 6), (6, 3)]:
            g = gray.get_pixel_color(x, y, 0.0)
            np.testing.assert_allclose(rgb.get_pixel_color(x, y, 0.0), vec([g, g, g]))

    def test_object_color_tints_diffuse(self):
        marcher = RayMarcher(Sphere(vec([0, 0, 0]), 1.0, vec([1, 0, 0])),
                             RayMarcherConfig(anti_aliasing_level=1, specular_color=vec([0, 0, 0])))
        c = marcher.get_pixel_color(5, 5, 0.0)
        np.testing.assert_allclose(c, vec([1, 0, 0]), atol=1e-5)


class TestRenderImage(unittest.TestCase):

    def test_shapes(self):
        gray = RayMarcher(Sphere(vec([0, 0, 0]), 1.0, 1.0),
                          RayMarcherConfig(width=4, height=3, anti_aliasing_level=1, colors=GRAYSCALE))
        self.assertEqual(render_image(gray).shape, (3, 4))
        rgb = RayMarcher(Sphere(vec([0, 0, 0]), 1.0, vec([0, 1, 0])),
                         RayMarcherConfig(width=4, height=3, anti_aliasing_level=1))
        img = render_image(rgb)
        self.assertEqual(img.shape, (3, 4, 3))
        np.testing.assert_array_equal(img[1, 2], rgb.get_pixel_color(2, 1, 0.0))

    def test_julia_deterministic(self):
        julia = Julia(JULIA_C, vec([1, 0, 0]))
        marcher = RayMarcher(julia, RayMarcherConfig(width=4, height=3, anti_aliasing_level=1))
        first = render_image(marcher, 0.0)
        second = render_image(marcher, 0.0)
        np.testing.assert_array_equal(first, second)
        self.assertEqual(to_uint8(first).tobytes(), to_uint8(second).tobytes())

    def test_parallel_matches_serial(self):
        marcher = RayMarcher(Sphere(vec([0, 0, 0]), 1.0, 0.8),
                             RayMarcherConfig(width=8, height=6, anti_aliasing_level=1, colors=GRAYSCALE))
        serial = render_image(marcher)
        parallel = render_image(marcher, processes=2)
        np.testing.assert_array_equal(serial, parallel)


if __name__ == '__main__':
    unittest.main()
