# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
"""
Local sensing primitives.

Both primitives march along rays in fixed steps and test every sample against
the world, so a reported hit can lie up to one step beyond the true obstacle
boundary. Tie-breaks in the navigation heuristic depend on this bias.
"""
import numpy as np
from math import pi, floor, atan2

from .geometry import Point
from .world import ObstacleWorld


def probe(
    origin: Point[float],
    directions: np.ndarray,
    max_radius: float,
    world: ObstacleWorld,
    step: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    March along each direction of an (M, 2) array of unit vectors.

    Returns (hit, points): `hit` is a boolean array of shape (M,) and `points`
    holds, for each ray, its first sample inside an obstacle, or its last
    sample if none is. Rays too short to take a single sample report a miss at
    the origin.
    """
    directions = np.asarray(directions, dtype=np.float64).reshape(-1, 2)
    n = floor(max_radius / step)
    o = np.asarray(origin, dtype=np.float64)
    if n <= 0:
        m = len(directions)
        return np.zeros(m, dtype=bool), np.tile(o, (m, 1))
    t = step * np.arange(1, n + 1)
    # samples[i, k] = origin + directions[i] * step * (k + 1)
    samples = o + directions[:, None, :] * t[None, :, None]
    inside = world.contains_points(samples)
    hit = inside.any(axis=1)
    idx = np.where(hit, inside.argmax(axis=1), n - 1)
    return hit, samples[np.arange(len(directions)), idx]


def raycast(
    origin: Point[float],
    direction: Point[float],
    max_radius: float,
    world: ObstacleWorld,
    step: float,
) -> Point[float] | None:
    """
    First sampled point along `direction` (unit vector) that lies inside any
    obstacle, within `max_radius` of the origin. None if the ray is clear.
    """
    hit, points = probe(origin, [direction], max_radius, world, step)
    if not hit[0]:
        return None
    return Point(*points[0], type=float)


def boundary_scan(
    origin: Point[float],
    vision_radius: float,
    world: ObstacleWorld,
    *,
    ray_step: float,
    angle_step: float,
    toward: Point[float] | None = None,
) -> list[Point[float]]:
    """
    Sweep rays counter-clockwise from angle 0 and collect the tangent points
    bounding every obstacle silhouette seen within the vision radius.

    An entry point is the probe point of the last clear ray before a
    silhouette, an exit point is the probe point of the first clear ray after
    it. Points are returned in the order they are discovered, the transition
    across angle 0 (if any) closes the sweep.

    `toward` (unit vector) is swept as well, in angular order. Passing the
    goal direction makes any obstacle that blocks the goal ray show up in the
    scan, however thin its silhouette.
    """
    angles = np.arange(0.0, 2 * pi, angle_step)
    directions = np.stack([np.cos(angles), np.sin(angles)], axis=-1)
    if toward is not None:
        a = atan2(toward[1], toward[0]) % (2 * pi)
        k = int(np.searchsorted(angles, a))
        extra = np.asarray(toward, dtype=np.float64)
        directions = np.insert(directions, k, extra, axis=0)
    hit, points = probe(origin, directions, vision_radius, world, ray_step)
    tangents = list[Point[float]]()
    n = len(directions)
    for k in range(1, n + 1):
        prev, curr = bool(hit[k - 1]), bool(hit[k % n])
        if curr and not prev:
            tangents.append(Point(*points[k - 1], type=float))
        elif prev and not curr:
            tangents.append(Point(*points[k % n], type=float))
    return tangents
