# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
from .arguments import register_arguments, Argument

register_arguments(
    prefix=Argument(
        type=str,
        required=False,
        help="Path prefix for trajectory, image and video outputs. "
        "If not specified, no output will be generated.",
    ),
    overwrite=Argument(
        "-f",
        long="force",
        action="store_true",
        help="Overwrite existing output files",
    ),
)

# ==============================================================================
# End argument injection
# ==============================================================================
from pathlib import Path
from dataclasses import dataclass, field
from .util import ownAttributes


@ownAttributes
@dataclass(frozen=False)
class Output:
    """
    Resolves output file names from --prefix.

    "var/run/" writes var/run/<stem>.<suffix>,
    "var/run"  writes var/run-<stem>.<suffix>.
    """

    prefix: str | None = None
    overwrite: bool = False

    directory: Path | None = field(init=False)
    stem_prefix: str | None = field(init=False)

    def __post_init__(self):
        prefix = self.prefix
        if prefix is None:
            self.directory = self.stem_prefix = None
            return
        if prefix.endswith("/"):
            self.directory, self.stem_prefix = Path(prefix), ""
        else:
            self.directory, self.stem_prefix = Path(prefix).parent, Path(prefix).name
        if self.directory.is_file():
            raise FileExistsError(f"Prefix {self.directory} is a file")
        self.directory.mkdir(parents=True, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return self.directory is not None

    def __call__(self, stem: str | None = None, suffix: str | None = None) -> Path | None:
        if not self.enabled:
            return None
        name = "-".join(filter(None, (self.stem_prefix, stem))) or self.directory.name
        if suffix:
            if suffix.startswith("."):
                raise ValueError("suffix should not start with '.'")
            name = f"{name}.{suffix}"
        path = self.directory / name
        if path.exists():
            if not self.overwrite:
                raise FileExistsError(path)
            path.unlink()
        return path
