#!/usr/bin/env python3
# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
"""
Run every scenario under every variant, one process per run.

    python3 batch.py [--save] [--jobs N] < sweep.yaml

sweep.yaml:

    scenarios:
      - scenarios/two-circles.yaml
      - scenarios/triangle.yaml
    variants:            # optional, CLI options per variant
      default: {}
      far-sight: {vision_radius: 0.3}
"""
from os import cpu_count
from sys import stdin, stdout, stderr, executable, exit
from yaml import safe_load as parse, YAMLError
from typing import Iterable, Any
from pathlib import Path
from argparse import ArgumentParser
from multiprocessing import Pool
from subprocess import Popen, PIPE
from time import time
from tqdm import tqdm


def cmdlineFlag(s: str) -> str:
    import re

    return re.sub(r"([a-z])([A-Z])", r"\1-\2", s).lower().replace("_", "-")


def kw2cmdline(**kwargs):
    for k, v in kwargs.items():
        if type(v) is bool:
            if v:
                yield f"--{cmdlineFlag(k)}"
        elif isinstance(v, (list, tuple)):
            yield f"--{cmdlineFlag(k)}={','.join(map(str, v))}"
        else:
            yield f"--{cmdlineFlag(k)}={v}"


class Python:
    def __init__(self, module: str):
        self.module = module
        self.arguments = tuple[str]()

    def __str__(self):
        return " ".join((Path(executable).name, *self.arguments))

    def __repr__(self):
        return str(self)

    def __call__(self, *args, **kwargs):
        args = self.arguments = "-m", self.module, *args, *kw2cmdline(**kwargs)
        self.proc = Popen((executable,) + args, stdout=PIPE)
        self.stdout = self.proc.stdout
        self.pid = self.proc.pid
        return self

    def wait(self):
        return self.proc.wait()


def parse_outputs(stream: Iterable[bytes]) -> dict:
    """Collect the `# key: value` lines of a run as one YAML document"""
    data = []
    for line in stream:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        line = line.strip()
        if line.startswith("#"):
            data.append(line[1:].strip())
    try:
        meta = parse("\n".join(data)) or {}
    except YAMLError as e:
        return {"abort": f"unreadable run output: {e}"}
    if not isinstance(meta, dict):
        return {"abort": f"unreadable run output: {meta!r}"}
    return meta


def format_message(desc: tuple[str, str], dt: float, meta: dict) -> str:
    scenario, variant = desc
    msg = [
        scenario.ljust(16),
        variant.ljust(10),
        f"{dt:.2f} s".rjust(8),
    ]
    if "ticks" in meta:
        msg.append(f"ticks {str(meta['ticks']).rjust(6)}")
    else:
        msg.append(f"ticks {'---'.rjust(6)}")
    if "travel" in meta:
        msg.append(f"travel {meta['travel']:.3f}".ljust(13))
    if "abort" in meta:
        msg.append(f"aborted: {meta['abort']}")
    return " | ".join(msg)


def exec(scenario: str, variant: str, kw: dict[str, Any]):
    desc = Path(scenario).stem, variant
    t0 = time()
    proc = Python("simulation")(scenario, **kw)
    try:
        meta = parse_outputs(proc.stdout)
        proc.wait()
    except KeyboardInterrupt:
        proc.proc.terminate()
        proc.wait()
        exit(1)
    return desc, time() - t0, meta


def unpack_exec(args):
    return exec(*args)


def combinations(
    scenarios: list[str],
    variants: dict[str, dict] | None,
    save: bool = False,
    **kw: Any,
):
    if not scenarios:
        raise ValueError("Missing scenarios in batch configuration")
    if not variants:
        variants = {"default": {}}
    for scenario in scenarios:
        for name, options in variants.items():
            local_kw = dict(kw, **(options or {}))
            if save:
                local_kw["prefix"] = f"results/{Path(scenario).stem}-{name}/"
                local_kw["force"] = True
            yield scenario, name, local_kw


ProgOpts = dict(
    leave=False,
    dynamic_ncols=True,
    file=stdout,
)


def runBatch(tasks: list[tuple[str, str, dict]], jobs: int, META: dict | None = None):
    if META is None:
        META = {}
    progress = tqdm(total=len(tasks), desc="Tangent Bug", **ProgOpts)
    with Pool(max(1, jobs)) as pool:
        try:
            for desc, dt, meta in pool.imap_unordered(unpack_exec, tasks):
                META["-".join(desc)] = meta
                progress.write(format_message(desc, dt, meta))
                progress.update(1)
        except KeyboardInterrupt:
            pool.terminate()
            pool.join()
            exit(1)
    progress.clear()
    return META


if __name__ == "__main__":
    parser = ArgumentParser(prog="python3 batch.py")
    parser.add_argument("--save", action="store_true", help="Keep outputs in results/")
    parser.add_argument("--jobs", "-j", type=int, default=cpu_count() or 1)
    parser.add_argument("--max-ticks", type=int, default=10000)
    args = parser.parse_args()
    config = parse(stdin)
    if not isinstance(config, dict):
        print("Batch configuration must be a mapping", file=stderr)
        exit(1)
    tasks = list(
        combinations(
            config.get("scenarios"),
            config.get("variants"),
            save=args.save,
            max_ticks=args.max_ticks,
        )
    )
    META = runBatch(tasks, args.jobs)
    if args.save:
        meta_path = Path("results/meta.yaml")
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        with meta_path.open("w") as f:
            from yaml import dump

            dump(META, f)
