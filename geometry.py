import math
from utils import vec, magnitude, normalize
from quaternion import Quaternion

# Julia set iteration
MAX_ITERS = 20
ESCAPE_RADIUS = 4.0
# empirical correction of the distance estimate for quaternion Julia sets
DISTANCE_SCALE = 0.2

# step used for finite-difference normals
NORMAL_EPSILON = 1e-7

# period of the sphere's tiling along x
SPHERE_TILE = 5.0


class SceneObject:
    """An implicit surface described by a distance estimator.

    t is the varied parameter passed through from the renderer, usually used as
    the 4th dimension of the object for animation.
    """

    def distance_to(self, point, t):
        """Return a lower bound on the distance from point to the surface."""
        raise NotImplementedError

    def get_color(self, t):
        """Return the surface color of the object."""
        raise NotImplementedError

    def normal(self, p, t):
        """Estimate the unit surface normal at p from the gradient of the distance field.

        Uses central differences on each axis. Subclasses with a closed-form normal
        can override this.
        """
        e = NORMAL_EPSILON
        x, y, z = p[0], p[1], p[2]
        n = vec([
            self.distance_to(vec([x + e, y, z]), t) - self.distance_to(vec([x - e, y, z]), t),
            self.distance_to(vec([x, y + e, z]), t) - self.distance_to(vec([x, y - e, z]), t),
            self.distance_to(vec([x, y, z + e]), t) - self.distance_to(vec([x, y, z - e]), t),
        ])
        return normalize(n)


class Julia(SceneObject):

    def __init__(self, c, color):
        """Create a quaternion Julia set.

        Parameters:
          c : Quaternion -- the fixed parameter of the iteration z <- z^2 + c
          color : the flat surface color, in any ColorSpace
        """
        self.c = c
        self.color = color

    def distance_to(self, point, t):
        z = Quaternion(point[0], point[1], point[2], t)
        dz = Quaternion(1, 0, 0, 0)

        for _ in range(MAX_ITERS):
            # the derivative uses the previous iterate
            dz = 2.0 * z * dz
            z = z * z + self.c
            if z.magnitude() > ESCAPE_RADIUS:
                break

        z_mag = z.magnitude()
        dz_mag = dz.magnitude()
        if dz_mag == 0.0:
            # the derivative collapsed, nothing is known about the surface nearby
            return math.inf
        if z_mag == 0.0:
            return 0.0
        return DISTANCE_SCALE * z_mag * math.log(z_mag) / dz_mag

    def get_color(self, t):
        return self.color


class Sphere(SceneObject):

    def __init__(self, center, radius, color):
        """Create a sphere repeated every SPHERE_TILE units along x.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- the sphere's radius
          color : the flat surface color, in any ColorSpace
        """
        self.center = center
        self.radius = radius
        self.color = color

    def distance_to(self, point, t):
        # fmod truncates toward zero, so negative x is not folded onto positive x
        p = vec([math.fmod(point[0], SPHERE_TILE), point[1], point[2]])
        return magnitude(p - self.center) - self.radius

    def get_color(self, t):
        return self.color
