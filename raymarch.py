import multiprocessing as mp
import numpy as np
from color import RGB, color_space_of
from utils import vec, dot, cross, normalize, reflect

"""
Core implementation of the ray marcher.
"""

MAX_STEPS = 200 # max distance evaluations per ray
HIT_THRESHOLD = 1e-4 # distance below which a ray counts as a hit
NORMAL_BACKOFF = 1e-7 # pull-back along the ray before estimating normals

# reference vector used to build the camera's right axis
WORLD_DOWN = vec([0, -1, 0])


class RayResult:

    def __init__(self, len, hit_point):
        """Create the result of a ray that hit the scene.

        Parameters:
          len : float -- distance travelled along the (normalized) ray
          hit_point : (3,) -- where the ray intersected the scene
        """
        self.len = len
        self.hit_point = hit_point

    def __repr__(self):
        return f"RayResult(len={self.len}, hit_point={self.hit_point})"


def cast_ray(obj, point, direction, backplanes, t):
    """Sphere-trace a ray against a scene object.

    Parameters:
      obj : SceneObject -- the object to intersect
      point : (3,) -- origin of the ray
      direction : (3,) -- direction of the ray, does not need to be normalized
      backplanes : (3,) -- if the ray leaves the box bounded by +/- backplanes
        it is assumed to be a miss
      t : float -- the varied parameter passed to the object
    Return:
      RayResult if the ray hit the object, None if it missed, hit a backplane
      or ran out of steps
    """
    direction = normalize(direction)
    current_point = point
    ray_len = 0.0
    steps = 0

    while True:
        radius = obj.distance_to(current_point, t)
        ray_len += radius
        steps += 1
        current_point = point + ray_len * direction

        # checked before the culling tests so a hit is kept even out of bounds
        if radius < HIT_THRESHOLD:
            return RayResult(ray_len, current_point)

        if steps > MAX_STEPS:
            return None

        if (abs(current_point[0]) > backplanes[0]
                or abs(current_point[1]) > backplanes[1]
                or abs(current_point[2]) > backplanes[2]):
            return None


class RayMarcherConfig:

    def __init__(self, width=10, height=10, camera_pos=vec([2, 4, 4]), look_at=vec([0, 0, 0]),
                 light_pos=vec([2, 4, 4]), background_color=None, camera_zoom=3.0,
                 anti_aliasing_level=4, backplane_positions=vec([3, 3, 3]),
                 specular_shininess=50.0, specular_color=None, colors=RGB):
        """Create the render settings for a RayMarcher.

        Parameters:
          width, height : int -- size of the rendered image in pixels
          camera_pos : (3,) -- camera position
          look_at : (3,) -- point the camera looks towards
          light_pos : (3,) -- position of the Phong point light
          background_color -- color of rays that miss (defaults to colors.zero())
          camera_zoom : float -- distance from the camera to the image plane
          anti_aliasing_level : int -- side of the subpixel grid, 4 means 16 rays per pixel
          backplane_positions : (3,) -- culling box; rays leaving it are misses
          specular_shininess : float -- Phong shininess exponent
          specular_color -- color of specular highlights (defaults to colors.white())
          colors : ColorSpace -- the kind of color being rendered
        """
        if width < 1 or height < 1:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        if anti_aliasing_level < 1:
            raise ValueError(f"anti_aliasing_level must be at least 1, got {anti_aliasing_level}")

        self.width = width
        self.height = height
        self.camera_pos = camera_pos
        self.look_at = look_at
        self.light_pos = light_pos
        self.background_color = background_color if background_color is not None else colors.zero()
        self.camera_zoom = camera_zoom
        self.anti_aliasing_level = anti_aliasing_level
        self.backplane_positions = backplane_positions
        self.specular_shininess = specular_shininess
        self.specular_color = specular_color if specular_color is not None else colors.white()
        self.colors = colors


class RayMarcher:

    def __init__(self, object, config):
        """Pair a scene object with the configuration to render it under.

        The object's colors must live in config.colors.
        """
        object_colors = color_space_of(object.get_color(0.0))
        if object_colors is not config.colors:
            raise TypeError(f"object colors are {object_colors!r} but config renders {config.colors!r}")
        self.object = object
        self.config = config

    def get_pixel_color(self, x, y, t):
        """Compute the color of pixel (x, y).

        Sends one ray per subpixel of an anti_aliasing_level x anti_aliasing_level
        grid and averages the results. t is the varied parameter, used for animation.
        """
        cfg = self.config
        colors = cfg.colors
        aa_level = cfg.anti_aliasing_level
        subpixel_size = 1.0 / aa_level

        pixel_sum = colors.zero()
        for subpixel_x in range(aa_level):
            for subpixel_y in range(aa_level):
                ray_dir = self.camera_ray_direction(
                    x + subpixel_x * subpixel_size,
                    y + subpixel_y * subpixel_size,
                )
                pixel_sum = colors.add(pixel_sum, self.trace_with_lighting(cfg.camera_pos, ray_dir, t))
        return colors.scale(pixel_sum, 1.0 / (aa_level * aa_level))

    def trace_with_lighting(self, point, direction, t):
        """Trace one ray and return its Phong-shaded color, or the background on a miss."""
        cfg = self.config
        res = cast_ray(self.object, point, direction, cfg.backplane_positions, t)
        if res is None:
            return cfg.background_color

        light_vec = normalize(cfg.light_pos - res.hit_point)
        norm_point = res.hit_point - NORMAL_BACKOFF * direction
        norm = self.object.normal(norm_point, t)
        # not clamped, faces turned away from the light go negative
        s_dot_n = dot(norm, light_vec)

        reflect_vec = normalize(reflect(-light_vec, norm))
        view_vec = normalize(cfg.camera_pos - res.hit_point)
        r_dot_v = dot(reflect_vec, view_vec)
        specular_term = r_dot_v ** cfg.specular_shininess if r_dot_v > 0.0 else 0.0

        colors = cfg.colors
        return colors.add(
            colors.scale(self.object.get_color(t), s_dot_n),
            colors.scale(cfg.specular_color, specular_term),
        )

    def camera_ray_direction(self, x, y):
        """Return the unit direction of the camera ray through pixel coordinates (x, y).

        x is mirrored so that the image is not flipped for the default camera.
        """
        cfg = self.config
        u = -(x / cfg.width * 2.0 - 1.0)
        v = y / cfg.height * 2.0 - 1.0

        look_dir = normalize(cfg.look_at - cfg.camera_pos)
        right_vec = normalize(cross(WORLD_DOWN, look_dir))
        down_vec = normalize(cross(look_dir, right_vec))

        zoomed_cam_pos = cfg.camera_pos + cfg.camera_zoom * look_dir
        pix_pos = zoomed_cam_pos + u * right_vec + v * down_vec
        return normalize(pix_pos - cfg.camera_pos)


def _render_rows(args):
    """Render rows [y_start, y_end). Called by the multiprocessing pool."""
    marcher, t, y_start, y_end = args
    width = marcher.config.width
    rows = [[marcher.get_pixel_color(x, y, t) for x in range(width)]
            for y in range(y_start, y_end)]
    return y_start, y_end, rows


def render_image(marcher, t=0.0, processes=None, verbose=False):
    """Render every pixel of a RayMarcher's image.

    Parameters:
      marcher : RayMarcher -- what to render
      t : float -- the varied parameter
      processes : int -- number of worker processes; None or 1 renders serially
      verbose : bool -- print progress
    Return:
      (height, width, 3) array for RGB colors, (height, width) for grayscale
    """
    cfg = marcher.config
    nx, ny = cfg.width, cfg.height
    output_image = np.zeros((ny, nx) + np.shape(cfg.colors.zero()), np.float64)

    if processes is None or processes <= 1:
        for i in range(ny):
            if verbose:
                print(f"rendering row {i+1}/{ny}...")
            for j in range(nx):
                output_image[i, j] = marcher.get_pixel_color(j, i, t)
        return output_image

    # a few chunks per worker for load balancing
    rows_per_chunk = max(1, ny // (processes * 4))
    chunks = [(marcher, t, y_start, min(y_start + rows_per_chunk, ny))
              for y_start in range(0, ny, rows_per_chunk)]

    with mp.Pool(processes) as pool:
        for y_start, y_end, rows in pool.imap_unordered(_render_rows, chunks):
            output_image[y_start:y_end] = rows
            if verbose:
                print(f"rendered rows {y_start+1}-{y_end}/{ny}")
    return output_image
