# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
from .arguments import register_arguments, Argument

register_arguments(
    max_ticks=Argument(
        "-M",
        type=int,
        required=False,
        help="Max number of ticks before aborting the simulation",
    ),
    max_stalls=Argument(
        type=int,
        required=False,
        help="Consecutive stalled ticks tolerated before aborting (default 1)",
    ),
)

# ==============================================================================
# End argument injection
# ==============================================================================
from dataclasses import dataclass

from .navigation import TangentBug, Snapshot


@dataclass
class Driver:
    """
    Owns the simulation clock: calls TangentBug.tick() once per frame and
    decides when a run has failed.
    """

    bug: TangentBug
    max_ticks: int | None = None
    max_stalls: int | None = None

    def __post_init__(self):
        if self.max_stalls is None:
            # A stalled tick leaves the state untouched, so it would repeat forever
            self.max_stalls = 1

    class Abort(Exception):
        def __init__(self, reason: str):
            super().__init__(reason)
            self.reason = reason

    class Session:
        started: bool = False

        def __init__(self, driver: "Driver"):
            self.driver = driver
            self.stalls = 0

        def __iter__(self):
            return self

        def __next__(self) -> Snapshot:
            bug = self.driver.bug
            if not self.started:
                self.started = True
                return bug.snapshot
            if bug.finished:
                raise StopIteration
            limit = self.driver.max_ticks
            if limit is not None and bug.ticks >= limit:
                raise Driver.Abort(f"exceeded {limit} ticks at {bug.state.position}")
            result = bug.tick()
            if result.stalled:
                self.stalls += 1
                if self.stalls >= self.driver.max_stalls:
                    raise Driver.Abort(
                        f"stalled {self.stalls} tick(s) at {bug.state.position}"
                    )
            else:
                self.stalls = 0
            return bug.snapshot

    def __iter__(self):
        """
        Run the simulation, yielding the initial snapshot followed by one
        snapshot per tick. Stops after the tick that reaches the goal.
        """
        return Driver.Session(self)

    def run(self) -> Snapshot:
        """Run to completion, returning the final snapshot"""
        snapshot = None
        for snapshot in self:
            pass
        return snapshot
