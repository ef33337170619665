# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
import builtins, sys, cv2
from contextlib import ExitStack
from dataclasses import dataclass, field
from yaml import safe_dump

from tangentbug.util import ownAttributes, repeat, dup
from tangentbug.arguments import auto_parse
from tangentbug.geometry import Point
from tangentbug.scenario import Scenario
from tangentbug.navigation import TangentBug
from tangentbug.driver import Driver
from tangentbug.output import Output
from tangentbug.visualization import Visualization
from tangentbug.video import Video


def quote(text: str) -> str:
    """Render text as a single-line YAML string"""
    return safe_dump(str(text), default_style='"', width=float("inf")).strip()


@ownAttributes
@dataclass(frozen=False)
class __Simulation__:
    scenario: Scenario
    debug: bool = False

    max_ticks: int | None = None
    max_stalls: int | None = None
    fps: int = 60
    record: bool = False

    # Snapshot of ALL arguments, handed over to Output and Visualization
    meta: dict = field(default_factory=dict)

    out: Output = field(init=False)
    vis: Visualization = field(init=False)
    bug: TangentBug = field(init=False)
    driver: Driver = field(init=False)

    def __post_init__(self):
        meta = self.meta or self.scenario.meta
        meta.setdefault("scenario", self.scenario)
        self.out = Output(**meta)
        self.vis = Visualization(**meta)
        if self.record and not self.out.enabled:
            raise ValueError("--record requires --prefix")
        self.bug = TangentBug.from_scenario(self.scenario, debug=self.debug)
        self.driver = Driver(self.bug, self.max_ticks, self.max_stalls)

    @classmethod
    def run(cls, sim: "__Simulation__" = None, /, **kwargs) -> bool:
        """
        Run the simulation, returns True if the goal was reached
        """
        if sim is None:
            sim = cls(**kwargs)
        elif len(kwargs) > 0:
            raise TypeError("Cannot specify both sim and kwargs")
        vis, sc = sim.vis, sim.scenario
        trj_list = sim.out(suffix="txt")
        sim_img = sim.out(suffix="png")
        video = Video.create(sim.out(suffix="mp4") if sim.record else None, sim.fps)
        trj = list[Point[float]]()
        travel: float = 0.0
        snapshot = None
        reached = False

        def render(caption: str | None = None):
            img = vis.frame(snapshot, trj, caption)
            if vis.visualize:
                vis.show(img)
                key = cv2.waitKey(1)
                if key == 27 or key == ord("q"):  # ESC or 'q'
                    raise KeyboardInterrupt
            if video is not None:
                video.write(img)

        def failure(reason: str):
            print("# abort :", quote(reason))
            img = vis.frame(snapshot, trj, f"Aborted at tick {sim.bug.ticks}")
            vis.failure(img, sim.bug.state.position)
            return img

        img = None
        print = builtins.print
        with ExitStack() as stack:
            if trj_list is not None:
                print = dup(stack.enter_context(open(trj_list, "w")))
            try:
                for snapshot in sim.driver:
                    p = snapshot.position
                    if trj:
                        travel += (p - trj[-1]).norm
                    trj.append(p)
                    print(p.x, p.y, snapshot.mode.name, sep=", ")
                    if vis.visualize or video is not None:
                        render()
                reached = True
                print("# src   :", f"[{sc.src}]")
                print("# dst   :", f"[{sc.dst}]")
                print("# ticks :", sim.bug.ticks)
                print("# travel:", travel)
            except KeyboardInterrupt:
                img = failure("user aborted")
            except Driver.Abort as e:
                img = failure(e.reason)
            except Exception as e:
                import traceback

                img = failure(str(e))
                traceback.print_exception(e, file=sys.stderr)

        if img is None:
            img = vis.frame(snapshot, trj, f"Goal reached in {sim.bug.ticks} ticks")
        if video is not None:
            video.write(img)
            video.release()
        if sim_img is not None:
            vis.saveImg(sim_img, img)
        if vis.visualize and not vis.no_wait:
            try:
                vis.show(img)
                for key in repeat(cv2.waitKey, 10):
                    if key > 0:
                        break
            except KeyboardInterrupt:
                pass
            cv2.destroyAllWindows()

        return reached


@auto_parse()
class Simulation(__Simulation__):
    """
    Exported for convenience, parses the command line on construction.
    """
