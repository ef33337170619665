# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
import sys
from enum import Enum
from math import inf
from dataclasses import dataclass, field
from typing import Iterable

from .geometry import Point, DegenerateDirection
from .world import ObstacleWorld
from .sensing import raycast, boundary_scan


class Mode(Enum):
    DIRECT = 0
    FOLLOW_BOUNDARY = 1


@dataclass
class RobotState:
    position: Point[float]
    goal_direction: Point[float]
    distance_to_goal: float
    mode: Mode = Mode.DIRECT
    last_distance_to_goal: float = inf
    # Goal distance of the point chosen by the latest boundary scan (dreach)
    reach_distance: float = inf
    # Goal distance of the point pursued when boundary following began (dfollowed)
    followed_distance: float = inf
    last_direction: Point[float] | None = None
    point_being_pursued: Point[float] | None = None


@dataclass(frozen=True)
class TickResult:
    still_running: bool
    stalled: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the robot, sampled after each tick"""

    tick: int
    position: Point[float]
    mode: Mode
    pursuing: Point[float] | None
    vision_radius: float


def select_follow_point(
    position: Point[float],
    goal: Point[float],
    candidates: Iterable[Point[float]],
    last_direction: Point[float] | None = None,
    epsilon: float = 0.01,
) -> tuple[Point[float], float] | None:
    """
    Pick the candidate minimizing |p - position| + |goal - p|.

    With `last_direction` given, candidates that would reverse the motion
    (dot product below -epsilon) are rejected. The first minimum in candidate
    order wins. Returns (point, |goal - point|), or None if nothing is left.
    """
    best: tuple[Point[float], float] | None = None
    cost = inf
    for p in candidates:
        offset = p - position
        if last_direction is not None:
            try:
                if offset.unit @ last_direction < -epsilon:
                    continue
            except DegenerateDirection:
                continue
        reach = (goal - p).norm
        c = offset.norm + reach
        if c < cost:
            best, cost = (p, reach), c
    return best


@dataclass
class TangentBug:
    """
    Tangent Bug navigation state machine.
    Each call to tick() evaluates the control law once and moves the robot by
    at most one step.
    """

    world: ObstacleWorld
    src: Point[float]
    dst: Point[float]
    vision_radius: float = 0.1
    step_length: float = 0.01
    ray_step: float | None = None
    angle_step: float = 0.01
    epsilon: float = 0.01
    debug: bool = False

    state: RobotState = field(init=False)
    ticks: int = field(init=False, default=0)
    finished: bool = field(init=False, default=False)

    def __post_init__(self):
        self.src = Point(*self.src, type=float)
        self.dst = Point(*self.dst, type=float)
        if self.ray_step is None:
            self.ray_step = self.step_length / 4
        d = (self.dst - self.src).norm
        heading = self.heading(self.src) if d > 0 else Point(0.0, 0.0)
        self.state = RobotState(
            position=self.src,
            goal_direction=heading,
            distance_to_goal=d,
            last_direction=heading,
            point_being_pursued=self.src,
        )

    @staticmethod
    def from_scenario(scenario, **kwargs) -> "TangentBug":
        return TangentBug(
            world=scenario.world,
            src=scenario.src,
            dst=scenario.dst,
            vision_radius=scenario.vision_radius,
            step_length=scenario.step_length,
            ray_step=scenario.ray_step,
            angle_step=scenario.angle_step,
            **kwargs,
        )

    def heading(self, pos: Point[float]) -> Point[float]:
        return (self.dst - pos).unit

    def log(self, *args):
        if self.debug:
            print(f"[tick {self.ticks}]", *args, file=sys.stderr)

    @property
    def snapshot(self) -> Snapshot:
        s = self.state
        return Snapshot(
            tick=self.ticks,
            position=s.position,
            mode=s.mode,
            pursuing=s.point_being_pursued,
            vision_radius=self.vision_radius,
        )

    def tick(self) -> TickResult:
        if self.finished:
            return TickResult(still_running=False)
        self.ticks += 1
        s = self.state
        s.last_distance_to_goal = s.distance_to_goal
        # Close enough, snap onto the goal
        if s.distance_to_goal <= self.step_length:
            s.position = s.point_being_pursued = self.dst
            s.distance_to_goal = 0.0
            self.finished = True
            self.log("goal reached")
            return TickResult(still_running=False)
        match s.mode:
            case Mode.DIRECT if self.line_of_sight(s):
                s.point_being_pursued = s.position + s.goal_direction * self.vision_radius
                s.position = s.position + s.goal_direction * self.step_length
            case _:
                if not self.follow_boundary(s):
                    self.log(f"stalled at {s.position} ({s.mode.name})")
                    return TickResult(still_running=True, stalled=True)
        s.distance_to_goal = (self.dst - s.position).norm
        if s.distance_to_goal > 0:
            s.goal_direction = self.heading(s.position)
        self.switch_mode(s)
        return TickResult(still_running=True)

    def line_of_sight(self, s: RobotState) -> bool:
        hit = raycast(
            s.position, s.goal_direction, self.vision_radius, self.world, self.ray_step
        )
        return hit is None

    def follow_boundary(self, s: RobotState) -> bool:
        """
        Move one step toward the most promising tangent point.
        Returns False if no tangent point is usable (the robot stays put).
        """
        candidates = boundary_scan(
            s.position,
            self.vision_radius,
            self.world,
            ray_step=self.ray_step,
            angle_step=self.angle_step,
            toward=s.goal_direction,
        )
        # Points behind the robot are only rejected while following a boundary
        if s.mode is Mode.FOLLOW_BOUNDARY:
            last_direction = s.last_direction
        else:
            last_direction = None
        choice = select_follow_point(
            s.position, self.dst, candidates, last_direction, self.epsilon
        )
        if choice is None:
            return False
        p, s.reach_distance = choice
        motion = (p - s.position).unit
        s.position = s.position + motion * self.step_length
        s.point_being_pursued = p
        try:
            s.last_direction = (p - s.position).unit
        except DegenerateDirection:
            s.last_direction = motion
        return True

    def switch_mode(self, s: RobotState):
        match s.mode:
            case Mode.DIRECT if s.distance_to_goal > s.last_distance_to_goal:
                s.mode = Mode.FOLLOW_BOUNDARY
                s.followed_distance = (self.dst - s.point_being_pursued).norm
                self.log(f"following boundary, dfollowed={s.followed_distance:.4f}")
            case Mode.FOLLOW_BOUNDARY if s.reach_distance < s.followed_distance:
                s.mode = Mode.DIRECT
                self.log(f"leaving boundary, dreach={s.reach_distance:.4f}")
