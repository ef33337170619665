# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
import numpy as np
from functools import cached_property
from dataclasses import dataclass
from typing import Iterable, Iterator

from .geometry import Point
from .obstacles import Obstacle, Triangulation


@dataclass(frozen=True, eq=False)
class ObstacleWorld:
    """
    Ordered, immutable collection of obstacles.
    Built once per scenario, never modified afterwards.
    """

    obstacles: tuple[Obstacle, ...] = ()
    name: str = "Unnamed World"

    def __post_init__(self):
        object.__setattr__(self, "obstacles", tuple(self.obstacles))

    @staticmethod
    def construct(descriptors: Iterable[dict], name: str | None = None):
        obstacles = tuple(map(Obstacle.construct, descriptors or ()))
        if name is None:
            return ObstacleWorld(obstacles)
        return ObstacleWorld(obstacles, name=name)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self.obstacles)

    def __len__(self):
        return len(self.obstacles)

    def contains_any(self, p: Point[float]) -> bool:
        return any(o.contains(p) for o in self.obstacles)

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        """
        Vectorized contains_any() over an array of points of shape (..., 2)
        """
        points = np.asarray(points, dtype=np.float64)
        hit = np.zeros(points.shape[:-1], dtype=bool)
        for o in self.obstacles:
            hit |= o.contains_points(points)
        return hit

    @cached_property
    def mesh(self) -> tuple[tuple[Point[float], ...], Triangulation]:
        """
        Concatenated triangle mesh of all obstacles, in member order.
        Indices of each member are offset by the vertices preceding it.
        """
        vertices: list[Point[float]] = []
        triangles: list[tuple[int, int, int]] = []
        for o in self.obstacles:
            offset = len(vertices)
            vertices.extend(o.boundary_vertices())
            triangles.extend(
                (a + offset, b + offset, c + offset)
                for a, b, c in o.boundary_triangulation()
            )
        return tuple(vertices), tuple(triangles)
