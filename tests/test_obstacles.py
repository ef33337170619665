from __future__ import annotations

import numpy as np
import pytest

from tangentbug.geometry import Point
from tangentbug.obstacles import Obstacle, Circle, Polygon, Triangle, POINTS_PER_CIRCLE


def test_circle_boundary_is_outside() -> None:
    c = Circle(Point(0, 0), 1.0)
    assert c.contains(Point(0.0, 0.0))
    assert c.contains(Point(0.5, 0.5))
    assert not c.contains(Point(1.0, 0.0))
    assert not c.contains(Point(0.0, -1.5))


def test_polygon_either_winding() -> None:
    ccw = Triangle((0, 0), (1, 0), (0, 1))
    cw = Triangle((0, 0), (0, 1), (1, 0))
    for t in (ccw, cw):
        assert t.contains(Point(0.2, 0.2))
        # On an edge
        assert not t.contains(Point(0.5, 0.0))
        assert not t.contains(Point(1.0, 1.0))


def test_vectorized_containment_matches_scalar() -> None:
    xs, ys = np.meshgrid(np.linspace(-1, 1, 21), np.linspace(-1, 1, 21))
    points = np.stack([xs, ys], axis=-1)
    for o in (
        Circle(Point(0.1, -0.2), 0.45),
        Polygon((-0.5, -0.5), (0.6, -0.4), (0.7, 0.3), (-0.2, 0.6)),
    ):
        expected = np.array(
            [[o.contains(Point(*p, type=float)) for p in row] for row in points]
        )
        assert (o.contains_points(points) == expected).all()


def test_circle_mesh_is_a_closed_fan() -> None:
    c = Circle(Point(0, 0.5), 0.3)
    vertices = c.boundary_vertices()
    triangles = c.boundary_triangulation()
    assert len(vertices) == POINTS_PER_CIRCLE + 1
    assert vertices[0] == (0.0, 0.5)
    assert len(triangles) == POINTS_PER_CIRCLE
    assert triangles[0] == (0, 1, 2)
    assert triangles[-1] == (0, POINTS_PER_CIRCLE, 1)
    for v in vertices[1:]:
        assert (v - c.center).norm == pytest.approx(0.3)


def test_polygon_mesh() -> None:
    p = Polygon((0, 0), (1, 0), (1, 1), (0, 1))
    assert len(p.boundary_vertices()) == 4
    assert p.boundary_triangulation() == ((0, 1, 2), (0, 2, 3))


def test_construct_from_descriptors() -> None:
    c = Obstacle.construct({"type": "circle", "center": [0, 0.5], "radius": 0.3})
    assert isinstance(c, Circle)
    assert c.center == (0.0, 0.5)
    t = Obstacle.construct(
        {"type": "triangle", "vertices": [[1, -1], [0.3, -0.4], [1, 0]]}
    )
    assert isinstance(t, Triangle)
    p = Obstacle.construct(
        {"type": "polygon", "vertices": [[0, 0], [1, 0], [1, 1], [0, 1]]}
    )
    assert isinstance(p, Polygon)


@pytest.mark.parametrize(
    "desc",
    [
        {"type": "hexagon", "center": [0, 0]},
        {"type": "circle", "center": [0, 0]},
        {"type": "circle", "center": [0, 0], "radius": -1},
        {"type": "triangle", "vertices": [[0, 0], [1, 0]]},
        {"type": "polygon", "vertices": [[0, 0], [1, 0]]},
        {"type": "circle", "center": [0, 0, 0], "radius": 1},
        "circle",
    ],
)
def test_invalid_descriptors(desc) -> None:
    with pytest.raises(ValueError):
        Obstacle.construct(desc)
