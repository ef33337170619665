# ==============================================================================
# Author : Yuxuan Zhang (robotics@z-yx.cc)
# License: MIT
# ==============================================================================
from .arguments import register_arguments, Argument

register_arguments(
    fps=Argument(
        type=int,
        required=False,
        help="Frame rate of the recorded video (default: 60)",
    ),
    record=Argument(
        action="store_true",
        help="Record every tick into <prefix>.mp4, requires --prefix and ffmpeg",
    ),
)

# ==============================================================================
# End argument injection
# ==============================================================================
from pathlib import Path
from subprocess import Popen, PIPE
import numpy as np


def start(*args):
    return Popen(tuple(map(str, args)), stdin=PIPE, stdout=None, stderr=PIPE)


def FFMPEG(w: int, h: int, fps: int, outfile: Path):
    if outfile.exists():
        raise FileExistsError(outfile)
    return start(
        "ffmpeg",
        *("-loglevel", "error"),
        *("-f", "rawvideo"),
        *("-pix_fmt", "bgr24"),
        *("-s", f"{w}x{h}"),
        *("-r", fps),
        *("-i", "pipe:"),
        *("-c:v", "libx264"),
        *("-pix_fmt", "yuv420p"),
        outfile,
    )


class Video:
    proc: Popen | None = None
    frame_shape: tuple[int, int] | None = None

    def __init__(self, outfile: Path, fps: int = 60):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.outfile = outfile
        self.fps = fps

    def write(self, img: np.ndarray):
        h, w, *_ = img.shape
        if self.frame_shape is None:
            self.frame_shape = (w, h)
        elif (w, h) != self.frame_shape:
            raise ValueError(f"Frame shape mismatch: {self.frame_shape} != {(w, h)}")
        if img.dtype != np.uint8:
            raise ValueError(f"Unsupported image dtype {img.dtype}")
        if len(img.shape) != 3 or img.shape[-1] != 3:
            raise ValueError(f"Unsupported image shape {img.shape}")
        if self.proc is None:
            self.proc = FFMPEG(w, h, self.fps, self.outfile)
        self.proc.stdin.write(np.ascontiguousarray(img).tobytes())

    def release(self):
        if self.proc is None:
            return
        proc, self.proc = self.proc, None
        self.frame_shape = None
        proc.stdin.close()
        err = proc.stderr.read()
        if proc.wait() != 0:
            raise RuntimeError(
                f"ffmpeg exited with {proc.returncode}: {err.decode(errors='replace')}"
            )

    @classmethod
    def create(cls, outfile: Path | None, *args, **kwargs):
        if outfile is None:
            return None
        else:
            return cls(outfile, *args, **kwargs)
