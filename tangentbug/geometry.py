# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
from typing import Iterable, TypeVar
from math import sqrt, atan2, cos, sin
import builtins


class DegenerateDirection(ArithmeticError):
    """Raised when a direction is requested from a zero-length vector"""


T = TypeVar("T")


def promote(*values) -> type:
    """Pick float whenever a float takes part, otherwise keep the first type"""
    if any(isinstance(v, float) for v in values):
        return float
    return builtins.type(values[0])


class Point(tuple[T, T]):
    _type: type[T]

    @property
    def x(self) -> T:
        return self[0]

    @property
    def y(self) -> T:
        return self[1]

    def zip(self, other: T | tuple[T]):
        if isinstance(other, Iterable):
            assert len(self) == len(other), "dimension mismatch"
            other = Point(*other)
        else:
            other = Point(other)
        return zip(self, other)

    def __new__(cls, *args, type: type[T] = None):
        if len(args) == 1:
            args = args * 2
        elif len(args) != 2:
            raise ValueError(f"invalid arguments: {args}")
        if type is None:
            type = promote(*args)
        ret = tuple.__new__(cls, tuple(map(type, args)))
        setattr(ret, "_type", type)
        return ret

    @staticmethod
    def Angular(angle: float, length: float = 1.0) -> "Point[float]":
        """Vector of the given length pointing at the given heading (radians)"""
        return Point(cos(angle) * length, sin(angle) * length, type=float)

    def __binary(self, other, op) -> "Point":
        pairs = list(self.zip(other))
        values = [op(s, o) for s, o in pairs]
        return self.__class__(*values, type=promote(*values))

    def __add__(self, other: tuple[T, T]):
        return self.__binary(other, lambda s, o: s + o)

    def __sub__(self, other: tuple[T, T]):
        return self.__binary(other, lambda s, o: s - o)

    def __mul__(self, other: T | tuple[T, T]):
        return self.__binary(other, lambda s, o: s * o)

    __rmul__ = __mul__

    def __truediv__(self, other: T | tuple[T, T]):
        return self.__class__(*[(s / o) for s, o in self.zip(other)], type=float)

    def __neg__(self):
        return self.__class__(-self.x, -self.y, type=self._type)

    def __matmul__(self, other: tuple[T, T]) -> T:
        """Dot product"""
        return sum(s * o for s, o in self.zip(other))

    def cross(self, other: tuple[T, T]) -> T:
        """Z component of the 3-D cross product, i.e. x1 * y2 - y1 * x2"""
        x, y = other
        return self.x * y - self.y * x

    @property
    def norm(self):
        return sqrt(sum(v**2 for v in self))

    @property
    def angle(self):
        return atan2(self.y, self.x)

    @property
    def unit(self) -> "Point[float]":
        n = self.norm
        if n == 0:
            raise DegenerateDirection(f"cannot normalize zero vector ({self})")
        return self / n

    def __str__(self):
        if self._type is int:
            return f"{self.x}, {self.y}"
        elif self._type is float:
            return f"{self.x:.4f}, {self.y:.4f}"
        else:
            return f"{self.x}, {self.y}"
