# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
import numpy as np
from math import pi
from functools import cached_property
from dataclasses import dataclass
from typing import Iterable

from .geometry import Point

# Rim vertices of a rendered circle, the last one closes the loop
POINTS_PER_CIRCLE = 50

Triangulation = tuple[tuple[int, int, int], ...]


class Obstacle:
    """
    Static obstacle on the plane.
    Points exactly on the boundary are considered outside.
    """

    def contains(self, p: Point[float]) -> bool:
        raise NotImplementedError

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        """
        Vectorized containment test.
        `points` has shape (N, 2), the result is a boolean array of shape (N,).
        """
        raise NotImplementedError

    def boundary_vertices(self) -> tuple[Point[float], ...]:
        """Vertices of the triangle mesh used to draw the obstacle"""
        return self.mesh[0]

    def boundary_triangulation(self) -> Triangulation:
        """Index triples into boundary_vertices()"""
        return self.mesh[1]

    @cached_property
    def mesh(self) -> tuple[tuple[Point[float], ...], Triangulation]:
        raise NotImplementedError

    @staticmethod
    def construct(desc: dict) -> "Obstacle":
        """
        Build an obstacle from a scenario descriptor, e.g.
        {"type": "circle", "center": [0, 0.5], "radius": 0.3}
        """
        if not isinstance(desc, dict):
            raise ValueError(f"invalid obstacle descriptor: {desc!r}")
        kind = str(desc.get("type", "")).lower()
        try:
            match kind:
                case "circle":
                    return Circle(point(desc["center"]), float(desc["radius"]))
                case "polygon":
                    return Polygon(*map(point, desc["vertices"]))
                case "triangle":
                    return Triangle(*map(point, desc["vertices"]))
        except KeyError as e:
            raise ValueError(f"{kind} obstacle is missing {e}") from e
        raise ValueError(f"unknown obstacle type {kind!r}")


def point(v: Iterable[float]) -> Point[float]:
    v = tuple(v)
    if len(v) != 2:
        raise ValueError(f"expected a 2-D coordinate, got {v!r}")
    return Point(*v, type=float)


@dataclass(frozen=True, eq=False)
class Circle(Obstacle):
    center: Point[float]
    radius: float

    def __post_init__(self):
        object.__setattr__(self, "center", Point(*self.center, type=float))
        if self.radius <= 0:
            raise ValueError(f"circle radius must be positive, got {self.radius}")

    def contains(self, p: Point[float]) -> bool:
        return (p - self.center).norm < self.radius

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        dx = points[..., 0] - self.center.x
        dy = points[..., 1] - self.center.y
        return np.sqrt(dx * dx + dy * dy) < self.radius

    @cached_property
    def mesh(self):
        n = POINTS_PER_CIRCLE
        step = 2 * pi / (n - 1)
        rim = (self.center + Point.Angular(i * step, self.radius) for i in range(n))
        vertices = (self.center, *rim)
        # Triangle fan around the center vertex
        triangles = [(0, i + 1, i + 2) for i in range(n - 1)]
        triangles.append((0, n, 1))
        return vertices, tuple(triangles)


class Polygon(Obstacle):
    """
    Convex polygon, vertices may be given in either winding order.
    """

    def __init__(self, *vertices: Point[float]):
        if len(vertices) < 3:
            raise ValueError(f"polygon needs at least 3 vertices, got {len(vertices)}")
        self.vertices = tuple(Point(*v, type=float) for v in vertices)
        rolled = self.vertices[1:] + self.vertices[:1]
        self.edges = tuple(b - a for a, b in zip(self.vertices, rolled))

    def contains(self, p: Point[float]) -> bool:
        signs = [e.cross(p - a) for a, e in zip(self.vertices, self.edges)]
        return all(s < 0 for s in signs) or all(s > 0 for s in signs)

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        px, py = points[..., 0], points[..., 1]
        pos = np.ones(px.shape, dtype=bool)
        neg = np.ones(px.shape, dtype=bool)
        for a, e in zip(self.vertices, self.edges):
            c = e.x * (py - a.y) - e.y * (px - a.x)
            pos &= c > 0
            neg &= c < 0
        return pos | neg

    @cached_property
    def mesh(self):
        n = len(self.vertices)
        return self.vertices, tuple((0, i, i + 1) for i in range(1, n - 1))

    def __repr__(self):
        return f"{self.__class__.__name__}({', '.join(map(str, self.vertices))})"


class Triangle(Polygon):
    def __init__(self, *vertices: Point[float]):
        if len(vertices) != 3:
            raise ValueError(f"triangle needs 3 vertices, got {len(vertices)}")
        super().__init__(*vertices)
