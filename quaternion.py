import math
from utils import vec, dot, cross

"""
Quaternions, the 4-dimensional number system used as the Julia set iteration state.
"""


class Quaternion:

    # makes numpy scalars defer to __rmul__ instead of broadcasting
    __array_ufunc__ = None

    def __init__(self, r, i, j, k):
        """Create the quaternion r + i*I + j*J + k*K.

        The scalar part is stored as s and the imaginary part as the vector v.
        """
        self.s = float(r)
        self.v = vec([i, j, k])

    @classmethod
    def from_parts(cls, s, v):
        """Create a quaternion from a scalar part and a (3,) vector part."""
        q = cls.__new__(cls)
        q.s = float(s)
        q.v = v
        return q

    def magnitude(self):
        """The 4D Euclidean norm."""
        return math.sqrt(self.s * self.s + dot(self.v, self.v))

    def __add__(self, other):
        return Quaternion.from_parts(self.s + other.s, self.v + other.v)

    def __mul__(self, other):
        if isinstance(other, Quaternion):
            # Hamilton product
            return Quaternion.from_parts(
                self.s * other.s - dot(self.v, other.v),
                self.s * other.v + other.s * self.v + cross(self.v, other.v),
            )
        return NotImplemented

    def __rmul__(self, scalar):
        if isinstance(scalar, (int, float)):
            return Quaternion.from_parts(scalar * self.s, scalar * self.v)
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, Quaternion):
            return NotImplemented
        return self.s == other.s and bool((self.v == other.v).all())

    def __repr__(self):
        return f"Quaternion({self.s}, {self.v[0]}, {self.v[1]}, {self.v[2]})"
