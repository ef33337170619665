from __future__ import annotations

import numpy as np
import pytest

from tangentbug.geometry import Point
from tangentbug.obstacles import Circle
from tangentbug.world import ObstacleWorld
from tangentbug.sensing import probe, raycast, boundary_scan

STEP = 0.0025


def test_raycast_hits_within_one_step() -> None:
    world = ObstacleWorld([Circle(Point(0.5, 0.0), 0.2)])
    hit = raycast(Point(0.0, 0.0), Point(1.0, 0.0), 1.0, world, STEP)
    assert hit is not None
    assert world.contains_any(hit)
    assert hit.y == pytest.approx(0.0)
    assert 0.3 - 1e-9 <= hit.x <= 0.3 + STEP + 1e-9


def test_raycast_out_of_range() -> None:
    world = ObstacleWorld([Circle(Point(0.5, 0.0), 0.2)])
    assert raycast(Point(0.0, 0.0), Point(1.0, 0.0), 0.25, world, STEP) is None
    # Pointing away from the obstacle
    assert raycast(Point(0.0, 0.0), Point(-1.0, 0.0), 1.0, world, STEP) is None


def test_probe_reports_last_sample_on_miss() -> None:
    world = ObstacleWorld()
    hit, points = probe(Point(0.0, 0.0), [[0.0, 1.0], [-1.0, 0.0]], 0.1, world, 0.01)
    assert not hit.any()
    assert points.shape == (2, 2)
    assert np.allclose(points, [[0.0, 0.1], [-0.1, 0.0]], atol=0.01 + 1e-9)


def test_probe_too_short_for_a_sample() -> None:
    hit, points = probe(Point(0.3, 0.4), [[1.0, 0.0]], 0.001, ObstacleWorld(), 0.01)
    assert not hit.any()
    assert points.tolist() == [[0.3, 0.4]]


def test_scan_of_empty_world() -> None:
    assert boundary_scan(
        Point(0.0, 0.0), 0.1, ObstacleWorld(), ray_step=STEP, angle_step=0.01
    ) == []


@pytest.mark.parametrize("side", [1.0, -1.0])
def test_scan_tangents_are_symmetric(side: float) -> None:
    """
    A disc straight ahead yields one pair of tangent points, mirrored across
    the line of sight. The disc at +x straddles the start angle of the sweep.
    """
    world = ObstacleWorld([Circle(Point(0.5 * side, 0.0), 0.2)])
    angle_step = 0.01
    points = boundary_scan(
        Point(0.0, 0.0), 1.0, world, ray_step=STEP, angle_step=angle_step
    )
    assert len(points) == 2
    (x1, y1), (x2, y2) = points
    assert y1 * y2 < 0
    assert abs(y1 + y2) <= 2 * angle_step * 1.0 + STEP
    assert x1 * side > 0 and x2 * side > 0
    for p in points:
        assert not world.contains_any(p)
        assert p.norm == pytest.approx(1.0, abs=STEP + 1e-9)


def test_goal_ray_joins_the_sweep() -> None:
    """
    An obstacle only the goal ray can see (it fits between two sweep rays)
    still yields a pair of tangent points, one on each side of that ray.
    """
    goal = Point.Angular(4.715)
    world = ObstacleWorld([Circle(goal * 0.05, 0.0002)])
    origin = Point(0.0, 0.0)
    assert raycast(origin, goal, 0.1, world, STEP) is not None
    kw = dict(ray_step=STEP, angle_step=0.01)
    assert boundary_scan(origin, 0.1, world, **kw) == []
    points = boundary_scan(origin, 0.1, world, toward=goal, **kw)
    assert len(points) == 2
    (a, b) = points
    assert goal.cross(a) < 0 < goal.cross(b)
    for p in points:
        assert not world.contains_any(p)


def test_silhouette_across_the_start_angle() -> None:
    # Only the ray at angle 0 hits, its entry point is found when the sweep closes
    world = ObstacleWorld([Circle(Point(0.05, 0.0), 0.0001)])
    points = boundary_scan(
        Point(0.0, 0.0), 0.1, world, ray_step=STEP, angle_step=0.01
    )
    assert len(points) == 2
    leaving, entering = points
    assert leaving.y > 0 > entering.y
