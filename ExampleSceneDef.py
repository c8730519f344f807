import raymarch
from color import GRAYSCALE
from geometry import Julia, Sphere
from quaternion import Quaternion
from utils import *


class ExampleSceneDef(object):
    def __init__(self, marcher, t=0.0):
        self.marcher = marcher
        self.t = t

    def render(self, output_path=None, processes=None, verbose=False):
        """Render the scene, writing it to output_path if given, and return the pixels."""
        pix = raymarch.render_image(self.marcher, self.t, processes=processes, verbose=verbose)
        if output_path is not None:
            save_image(pix, output_path)
        return pix

    def render_ascii(self, processes=None):
        return to_ascii(self.render(processes=processes))


def JuliaExample(width=200, height=100, t=0.0):
    """The red quaternion Julia set, viewed slightly from above."""
    config = raymarch.RayMarcherConfig(
        width=width,
        height=height,
        camera_zoom=3.0,
        anti_aliasing_level=2,
        camera_pos=vec([2.0, 2.5, 2.5]),
        specular_shininess=20.0,
    )
    julia = Julia(Quaternion(-0.450, -0.447, 0.181, 0.306), vec([1, 0, 0]))
    return ExampleSceneDef(marcher=raymarch.RayMarcher(julia, config), t=t)


def DefaultJuliaExample(width=10, height=10, t=0.0):
    """The same Julia set rendered with every config setting left at its default."""
    julia = Julia(Quaternion(-0.450, -0.447, 0.181, 0.306), vec([1, 0, 0]))
    return ExampleSceneDef(marcher=raymarch.RayMarcher(julia, raymarch.RayMarcherConfig(width=width, height=height)), t=t)


def SphereTileExample(width=80, height=40):
    """A grayscale unit sphere, repeated along x, seen from the side."""
    config = raymarch.RayMarcherConfig(
        width=width,
        height=height,
        camera_pos=vec([0, 1, 6]),
        light_pos=vec([4, 4, 6]),
        backplane_positions=vec([20, 20, 20]),
        anti_aliasing_level=2,
        colors=GRAYSCALE,
    )
    sphere = Sphere(vec([0, 0, 0]), 1.0, 0.8)
    return ExampleSceneDef(marcher=raymarch.RayMarcher(sphere, config))
