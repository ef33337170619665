# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
"""
Command line options are declared next to the code that consumes them.
Each module calls register_arguments() at import time. parse() reads the
command line, loads the scenario it names and returns the keyword arguments
of a simulation run.
"""
from argparse import ArgumentParser
import sys
from sys import version_info
from typing import Any, Sequence, TypeVar
from functools import wraps

T = TypeVar("T")
major, minor, *_ = version_info


class Argument:
    """
    A command line option, stored under the name it is registered with.

    `flags` are short spellings ("-M"). The long flag is derived from the
    registered name unless `long` overrides it. Positional arguments have no
    flags at all.
    """

    def __init__(
        self, *flags: str, long: str | None = None, positional=False, **options: Any
    ):
        if positional and (flags or long):
            raise ValueError("Positional arguments take no flags")
        self.flags = flags
        self.long = long
        self.positional = positional
        self.options = options

    def add_to(self, parser: ArgumentParser, name: str):
        if self.positional:
            parser.add_argument(name, **self.options)
        else:
            long = f"--{(self.long or name).replace('_', '-')}"
            parser.add_argument(*self.flags, long, dest=name, **self.options)


class Registry:
    def __init__(self, prog: str = f"python{major}.{minor} -m simulation"):
        self.parser = ArgumentParser(
            prog=prog, description="Tangent Bug navigation among static obstacles"
        )
        self.arguments: dict[str, Argument] = {}

    def register(self, **kw: Argument) -> dict[str, Argument]:
        for name, arg in kw.items():
            if name in self.arguments:
                raise ValueError(f"Argument {name} is already registered")
            arg.add_to(self.parser, name)
            self.arguments[name] = arg
        return kw

    # No arguments shall be registered once parse() is called
    def parse(self, argv: Sequence[str] | None = None) -> dict:
        from .scenario import Scenario

        if "debug" not in self.arguments:
            # Debug flag always comes last
            self.register(
                debug=Argument(
                    action="store_true",
                    help="Print parsed arguments and trace mode switches",
                ),
            )
        ns = vars(self.parser.parse_args(argv))
        # Options left out on the command line fall back to scenario defaults
        kwargs = {k: ns[k] for k in self.arguments if ns.get(k) is not None}
        if kwargs.get("debug"):
            l = max(len(k) for k in kwargs)
            for k, v in kwargs.items():
                print(f"{k.rjust(l)} = {repr(v)}", file=sys.stderr)
        return Scenario.create(**kwargs)


registry = Registry()


def register_arguments(**kw: Argument):
    return registry.register(**kw)


def parse(argv: Sequence[str] | None = None) -> dict:
    return registry.parse(argv)


def auto_parse(**extra_kwargs):
    """Parse the command line whenever the decorated class is instantiated"""

    def decorator(cls: T) -> T:
        init = cls.__init__

        @wraps(init)
        def wrapper(self, **kwargs):
            kw = parse()
            kw.update(kwargs, **extra_kwargs)
            return init(self, **kw)

        cls.__init__ = wrapper
        return cls

    return decorator
