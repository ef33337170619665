from __future__ import annotations

import pytest

from tangentbug import navigation
from tangentbug.geometry import Point
from tangentbug.obstacles import Circle, Polygon
from tangentbug.world import ObstacleWorld
from tangentbug.navigation import Mode, TangentBug
from tangentbug.driver import Driver


def test_unobstructed_run() -> None:
    bug = TangentBug(world=ObstacleWorld(), src=(0, 1), dst=(0, -1))
    snapshots = list(Driver(bug))
    assert snapshots[0].tick == 0
    assert snapshots[0].position == (0.0, 1.0)
    assert snapshots[-1].position == bug.dst
    assert bug.finished
    assert 199 <= bug.ticks <= 201
    assert [s.tick for s in snapshots] == list(range(bug.ticks + 1))


def test_detour_around_a_disc() -> None:
    world = ObstacleWorld([Circle(Point(0.0, 0.5), 0.3)])
    bug = TangentBug(
        world=world,
        src=(0, 1),
        dst=(0, -1),
        vision_radius=0.1,
        step_length=0.01,
        ray_step=0.0025,
        angle_step=0.01,
    )
    snapshots = list(Driver(bug, max_ticks=400))
    assert bug.finished
    assert snapshots[-1].position == (0.0, -1.0)
    for s in snapshots:
        assert not world.contains_any(s.position)
    # Passing the equator of the disc means going around it
    beside = next(s for s in snapshots if s.position.y < 0.5)
    assert abs(beside.position.x) > 0.29


def test_tick_budget() -> None:
    bug = TangentBug(world=ObstacleWorld(), src=(0, 1), dst=(0, -1))
    with pytest.raises(Driver.Abort) as e:
        Driver(bug, max_ticks=10).run()
    assert bug.ticks == 10
    assert "exceeded" in e.value.reason


@pytest.mark.parametrize("max_stalls", [None, 3])
def test_stalls_abort_the_run(monkeypatch, max_stalls) -> None:
    monkeypatch.setattr(
        navigation, "raycast", lambda origin, *_: origin + Point(0.0, -0.05)
    )
    monkeypatch.setattr(navigation, "boundary_scan", lambda *_, **__: [])
    bug = TangentBug(world=ObstacleWorld(), src=(0, 0), dst=(0, -1))
    with pytest.raises(Driver.Abort) as e:
        Driver(bug, max_stalls=max_stalls).run()
    assert "stalled" in e.value.reason
    assert bug.ticks == (max_stalls or 1)
    assert bug.state.position == (0.0, 0.0)


def test_run_returns_final_snapshot() -> None:
    bug = TangentBug(world=ObstacleWorld(), src=(0, -0.995), dst=(0, -1))
    final = Driver(bug).run()
    assert final.tick == 1
    assert final.position == (0.0, -1.0)


def test_boundary_following_along_a_wall() -> None:
    """
    A wall wider than the vision radius forces the robot away from the goal,
    so it has to follow the boundary and later leave it.
    """
    wall = Polygon((-0.6, 0.45), (0.6, 0.45), (0.6, 0.5), (-0.6, 0.5))
    world = ObstacleWorld([wall])
    bug = TangentBug(
        world=world,
        src=(0.05, 1),
        dst=(0.05, -1),
        vision_radius=0.1,
        step_length=0.01,
        ray_step=0.0025,
        angle_step=0.01,
    )
    snapshots = list(Driver(bug, max_ticks=3000))
    assert bug.finished
    assert snapshots[-1].position == (0.05, -1.0)
    for s in snapshots:
        assert not world.contains_any(s.position)
    modes = [s.mode for s in snapshots]
    assert Mode.FOLLOW_BOUNDARY in modes
    first = modes.index(Mode.FOLLOW_BOUNDARY)
    assert Mode.DIRECT in modes[first:]
    # Boundary following ends once the robot is past the wall
    last = len(modes) - 1 - modes[::-1].index(Mode.FOLLOW_BOUNDARY)
    assert snapshots[last].position.y < 0.5
    assert modes[-1] is Mode.DIRECT
