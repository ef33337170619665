# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
import cv2
from enum import Enum

from .arguments import register_arguments, Argument
from .util import tuple_of


class FontFamily(Enum):
    SIMPLEX = cv2.FONT_HERSHEY_SIMPLEX
    PLAIN = cv2.FONT_HERSHEY_PLAIN
    DUPLEX = cv2.FONT_HERSHEY_DUPLEX
    COMPLEX = cv2.FONT_HERSHEY_COMPLEX

    @classmethod
    def id(cls, name: str):
        k = name.upper()
        if k in cls.__members__:
            return cls[k].value
        else:
            raise ValueError(f"Unsupported font family {name}")


register_arguments(
    visualize=Argument(
        "-v",
        action="store_true",
        help="Enable visualization",
    ),
    no_wait=Argument(
        action="store_true",
        help="Do not wait for key stroke after simulation is complete, effective only with the -v flag",
    ),
    size=Argument(
        type=int,
        required=False,
        help="Edge length of the (square) frame, in pixels",
    ),
    extent=Argument(
        type=tuple_of(float),
        required=False,
        help="Visible region of the plane (x0,y0,x1,y1)",
    ),
    line_color=Argument(
        type=tuple_of(float),
        required=False,
        help="Color of the trajectory line (b,g,r)",
    ),
    font_family=Argument(
        type=FontFamily.id,
        required=False,
        help="Font family for text rendering",
    ),
)

# ==============================================================================
# End argument injection
# ==============================================================================
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .util import ownAttributes
from .geometry import Point
from .navigation import Snapshot, Mode
from .scenario import Scenario

# Colors (b,g,r)
BACKGROUND = (255, 0, 0)
VISION = (0, 255, 255)
OBSTACLE = (0, 0, 0)
GOAL = (0, 255, 0)
PURSUED = (128, 128, 128)
ROBOT = (0, 0, 255)


@ownAttributes
@dataclass(frozen=False)
class Visualization:
    scenario: Scenario
    debug: bool = False

    visualize: bool = False
    no_wait: bool = False
    size: int = 960
    extent: tuple[float, float, float, float] = (-1.0, -1.0, 1.0, 1.0)
    line_color: tuple[float, float, float] = (255, 255, 255)
    font_family: int = FontFamily.DUPLEX.value

    def __post_init__(self):
        if len(self.extent) != 4:
            raise ValueError(f"extent needs 4 values (x0,y0,x1,y1), got {self.extent}")
        x0, y0, x1, y1 = self.extent
        if not (x1 > x0 and y1 > y0):
            raise ValueError(f"empty extent {self.extent}")
        # Pixels per world unit, the frame is square so the larger span wins
        self.k = self.size / max(x1 - x0, y1 - y0)

    @property
    def handle(self):
        return self.scenario.name

    def pixel_pos(self, p: Point[float]) -> Point[int]:
        """
        Get location on the frame given the world coordinates, +y pointing up
        """
        x0, _, _, y1 = self.extent
        return Point(round((p.x - x0) * self.k), round((y1 - p.y) * self.k), type=int)

    def px(self, d: float):
        return max(int(round(d * self.k)), 1)

    @property
    def line_width(self):
        return max(self.size // 480, 1)

    @property
    def blank(self) -> np.ndarray:
        img = np.empty((self.size, self.size, 3), dtype=np.uint8)
        img[:, :] = BACKGROUND
        return img

    def disk(self, img: np.ndarray, center: Point[float], radius: float, color):
        cv2.circle(img, self.pixel_pos(center), self.px(radius), color, cv2.FILLED)

    def obstacles(self, img: np.ndarray, color=OBSTACLE):
        vertices, triangles = self.scenario.world.mesh
        pts = np.array([self.pixel_pos(v) for v in vertices], dtype=np.int32)
        for tri in triangles:
            cv2.fillConvexPoly(img, pts[list(tri)], color)

    def trajectory(self, img: np.ndarray, trj: Iterable[Point[float]]):
        pts = np.array([self.pixel_pos(p) for p in trj], dtype=np.int32)
        if len(pts) > 1:
            cv2.polylines(
                img, [pts], False, self.line_color, self.line_width, cv2.LINE_AA
            )

    def caption(self, img: np.ndarray, text: str, fg=(255, 255, 255)):
        a = self.px(0.04)
        kw = dict(
            img=img,
            text=text,
            org=(a, img.shape[0] - a),
            fontFace=self.font_family,
            fontScale=self.size / 960,
            lineType=cv2.LINE_AA,
        )
        cv2.putText(**kw, color=(0, 0, 0), thickness=3 * self.line_width)
        cv2.putText(**kw, color=fg, thickness=self.line_width)

    def frame(
        self,
        snapshot: Snapshot | None,
        trj: Iterable[Point[float]] = (),
        caption: str | None = None,
    ) -> np.ndarray:
        """
        Render one frame. Layers from bottom to top: background, vision disk,
        obstacles, goal, trajectory, pursued point, robot.
        """
        sc = self.scenario
        img = self.blank
        if snapshot is not None:
            self.disk(img, snapshot.position, snapshot.vision_radius, VISION)
        self.obstacles(img)
        self.disk(img, sc.dst, sc.goal_radius, GOAL)
        self.trajectory(img, trj)
        if snapshot is not None:
            if snapshot.pursuing is not None:
                self.disk(img, snapshot.pursuing, sc.robot_radius, PURSUED)
            self.disk(img, snapshot.position, sc.robot_radius, ROBOT)
            if caption is None:
                caption = f"Tick {snapshot.tick} ({describe(snapshot.mode)})"
        if caption:
            self.caption(img, caption)
        return img

    def failure(self, img: np.ndarray, p: Point[float]):
        """Mark the location where a run was aborted"""
        pos = self.pixel_pos(p)
        size = self.px(0.06)
        cv2.drawMarker(img, pos, (0, 0, 0), cv2.MARKER_TILTED_CROSS, size, 3 * self.line_width)
        cv2.drawMarker(img, pos, (255, 255, 255), cv2.MARKER_TILTED_CROSS, size, self.line_width)

    def show(self, img: np.ndarray):
        cv2.imshow(self.handle, img)
        return self.handle

    def saveImg(self, path: Path | str, img: np.ndarray):
        cv2.imwrite(str(path), img)


def describe(mode: Mode) -> str:
    match mode:
        case Mode.DIRECT:
            return "moving to goal"
        case Mode.FOLLOW_BOUNDARY:
            return "following boundary"
    raise RuntimeError(f"Invalid mode {mode}")
