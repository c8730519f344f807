import numpy as np
from utils import vec

"""
Color spaces: the operations a value has to support to be used as a pixel color.

Shading code never looks at the concrete color type. It only calls zero, white,
scale and add on a ColorSpace, so the same lighting formula works for RGB vectors
and for plain grayscale floats.
"""


class ColorSpace:

    def zero(self):
        """The additive identity, also used as the default background."""
        raise NotImplementedError

    def white(self):
        """Full intensity, the default specular highlight color."""
        raise NotImplementedError

    def scale(self, c, s):
        """Multiply color c by the scalar s."""
        return c * s

    def add(self, a, b):
        """Sum two colors."""
        return a + b


class RGBColorSpace(ColorSpace):
    """Colors are (3,) float arrays of red, green and blue."""

    def zero(self):
        return vec([0, 0, 0])

    def white(self):
        return vec([1, 1, 1])

    def __repr__(self):
        return "RGB"

    def __reduce__(self):
        # unpickle to the module-level instance
        return "RGB"


class GrayscaleColorSpace(ColorSpace):
    """Colors are single float intensities."""

    def zero(self):
        return 0.0

    def white(self):
        return 1.0

    def scale(self, c, s):
        return float(c * s)

    def add(self, a, b):
        return float(a + b)

    def __repr__(self):
        return "GRAYSCALE"

    def __reduce__(self):
        return "GRAYSCALE"


RGB = RGBColorSpace()
GRAYSCALE = GrayscaleColorSpace()


def color_space_of(color):
    """Return the ColorSpace that a sample color value belongs to."""
    if isinstance(color, np.ndarray) and color.shape == (3,):
        return RGB
    if isinstance(color, (int, float)) and not isinstance(color, bool):
        return GRAYSCALE
    raise TypeError(f"unsupported color value: {color!r}")
