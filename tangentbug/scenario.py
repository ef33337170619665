# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
from .arguments import register_arguments, Argument
from .util import tuple_of
from .geometry import Point
from pathlib import Path


def point(s: str) -> Point[float]:
    return Point(*tuple_of(float)(s), type=float)


register_arguments(
    scenario=Argument(
        positional=True,
        type=Path,
        help="Path to the scenario description (YAML)",
    ),
    src=Argument(type=point, required=False, help="Robot starting location (x,y)"),
    dst=Argument(type=point, required=False, help="Goal location (x,y)"),
    vision_radius=Argument(
        "-r",
        type=float,
        required=False,
        help="Sensing range of the robot",
    ),
    step_length=Argument(
        type=float, required=False, help="Distance travelled by the robot per tick"
    ),
    ray_step=Argument(
        type=float,
        required=False,
        help="Sampling resolution of ray casts (default: step length / 4)",
    ),
    angle_step=Argument(
        type=float,
        required=False,
        help="Angular resolution of the boundary scan, in radians",
    ),
)

# ==============================================================================
# End argument injection
# ==============================================================================
from yaml import safe_load
from dataclasses import dataclass, field

from .util import ownAttributes
from .obstacles import point as coordinate
from .world import ObstacleWorld


@ownAttributes
@dataclass(frozen=False)
class Scenario:
    world: ObstacleWorld
    src: Point[float] | None = None
    dst: Point[float] | None = None
    name: str = "Unnamed Scenario"

    # Rendering only
    robot_radius: float = 0.02
    goal_radius: float = 0.02

    vision_radius: float = 0.1
    step_length: float = 0.01
    ray_step: float | None = None
    angle_step: float = 0.01

    # Snapshot of ALL arguments (not just the ones used in __init__)
    meta: dict = field(default_factory=dict)

    def __post_init__(self):
        self.meta["scenario"] = self
        if self.src is None or self.dst is None:
            raise ValueError(f"{self.name}: both src and dst must be specified")
        self.src = coordinate(self.src)
        self.dst = coordinate(self.dst)
        if self.ray_step is None:
            self.ray_step = self.step_length / 4
        for k in ("vision_radius", "step_length", "ray_step", "angle_step"):
            v = getattr(self, k)
            if not v > 0:
                raise ValueError(f"{self.name}: {k} must be positive, got {v}")
        for k in ("src", "dst"):
            p = getattr(self, k)
            if self.world.contains_any(p):
                raise ValueError(f"{self.name}: {k} ({p}) lies inside an obstacle")

    @staticmethod
    def load(path: Path | str, **overrides) -> "Scenario":
        """
        Load a scenario description, values in `overrides` that are not None
        take precedence over the file.
        """
        path = Path(path)
        if path.suffix == "":
            path = path.with_suffix(".yaml")
        if not path.is_file():
            raise FileNotFoundError(f"{path} not found")
        with path.open("r") as f:
            desc = safe_load(f.read()) or {}
        if not isinstance(desc, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        world = ObstacleWorld.construct(desc.pop("obstacles", None), name=path.stem)
        desc.setdefault("name", path.stem)
        desc.update({k: v for k, v in overrides.items() if v is not None})
        desc.pop("world", None)
        return Scenario(world=world, **desc)

    @staticmethod
    def create(*, scenario: Path, **kwargs) -> dict:
        meta = kwargs
        Scenario.load(scenario, **kwargs, meta=meta)
        return meta
