import math
import numpy as np
from PIL import Image

ASCII_GRADIENT = " .:-=+*#%@"

def vec(list):
    """Handy shorthand to make a double-precision float array."""
    return np.array(list, dtype=np.float64)

def vec_splat(n):
    """Make a vector with all three components equal to n."""
    return vec([n, n, n])

def dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]

def cross(a, b):
    """Cross product of two 3D vectors.

    Written out by hand; np.cross is very slow for single vectors.
    """
    return vec([
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    ])

def magnitude(v):
    """The Euclidean norm of v."""
    return math.sqrt(dot(v, v))

def normalize(v):
    """Return a unit vector in the direction of the vector v.

    Raises ZeroDivisionError if v has zero length.
    """
    length = magnitude(v)
    if length == 0.0:
        raise ZeroDivisionError("cannot normalize a zero-length vector")
    return v / length

def reflect(v, n):
    """Reflect v about the normal n (n does not need to be unit length)."""
    n = normalize(n)
    return v - 2.0 * dot(v, n) * n

def refract(v, n, eta):
    """Simulate Snell's law refraction of v through a surface with normal n.

    eta is the relative index of refraction, ri1 / ri2. Returns the zero
    vector on total internal reflection.
    """
    cos_i = dot(v, n)
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    if k < 0.0:
        return vec([0, 0, 0])
    return eta * v - (eta * cos_i + math.sqrt(k)) * n

def lerp(a, b, t):
    """Linearly interpolate between a and b."""
    return a + t * (b - a)

def to_color_byte(val):
    return int(min(max(val, 0.0), 1.0) * 255.0)

def to_packed_rgb(v):
    """Pack an RGB vector into a 0x00RRGGBB integer, each channel clamped to [0,1]."""
    return (to_color_byte(v[0]) << 16) | (to_color_byte(v[1]) << 8) | to_color_byte(v[2])

def to_uint8(img):
    """Clamp a float image to [0,1] and scale to 8 bits (truncating)."""
    return (np.clip(img, 0.0, 1.0) * 255.0).astype(np.uint8)

def save_image(img, output_path):
    """Write an (h, w, 3) RGB or (h, w) grayscale float image to a file."""
    # uint8 arrays map to mode "L" for 2D and "RGB" for (h, w, 3)
    Image.fromarray(to_uint8(img)).save(output_path)
    print(f"Image saved to {output_path}")

def to_ascii(img, gradient=ASCII_GRADIENT):
    """Render a float image as text, one line per row.

    RGB images use their first channel as the intensity.
    """
    if img.ndim == 3:
        img = img[:, :, 0]
    gray = np.clip(img, 0.0, 1.0)
    idx = np.floor(gray * (len(gradient) - 1)).astype(np.int64)
    return "\n".join("".join(gradient[i] for i in row) for row in idx)
