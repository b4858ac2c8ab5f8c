"""Frame sinks: H.264 video through an ffmpeg pipe, or numbered PNG files."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Callable, Protocol

import numpy as np
from PIL import Image

from multitrack_visualizer.display.canvas import FrameBuffer
from multitrack_visualizer.errors import ConfigError, EncodeError
from multitrack_visualizer.project.schema import WindowConfig

logger = logging.getLogger(__name__)


class FrameSink(Protocol):
    position: float

    def write_frame(self, frame: FrameBuffer) -> None: ...

    def flush(self) -> None: ...


def upscale(pixels: np.ndarray, scale: int) -> np.ndarray:
    """Nearest-neighbour upscale by an integer factor."""
    if scale == 1:
        return pixels
    return np.repeat(np.repeat(pixels, scale, axis=0), scale, axis=1)


def build_ffmpeg_command(path: str | Path, window: WindowConfig, ffmpeg: str = "ffmpeg") -> list[str]:
    return [
        ffmpeg,
        "-y",
        "-loglevel",
        "error",
        "-nostats",
        "-f",
        "rawvideo",
        "-vcodec",
        "rawvideo",
        "-s",
        f"{window.output_width}x{window.output_height}",
        "-pix_fmt",
        "rgb24",
        "-r",
        str(window.frame_rate),
        "-i",
        "-",
        "-an",
        # yuv420p needs even dimensions
        "-vf",
        "pad=ceil(iw/2)*2:ceil(ih/2)*2",
        "-vcodec",
        "libx264",
        "-preset",
        "medium",
        "-crf",
        "23",
        "-pix_fmt",
        "yuv420p",
        "-movflags",
        "+faststart",
        str(path),
    ]


class FrameEncoder:
    def __init__(
        self,
        path: str | Path,
        window: WindowConfig,
        ffmpeg: str = "ffmpeg",
        popen: Callable[..., Any] = subprocess.Popen,
    ) -> None:
        self.path = Path(path)
        self.window = window
        self.position = 0.0
        self.frame_duration = window.frame_duration
        self.frames_written = 0
        self._closed = False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        command = build_ffmpeg_command(self.path, window, ffmpeg)
        # read back once ffmpeg has exited
        self._stderr = tempfile.TemporaryFile()
        try:
            self._process = popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr,
            )
        except FileNotFoundError as exc:
            self._stderr.close()
            raise ConfigError(f"Could not start ffmpeg ({ffmpeg}): {exc}") from exc
        logger.info(
            "encoding %dx%d @ %d fps to %s",
            window.output_width,
            window.output_height,
            window.frame_rate,
            self.path,
        )

    def resize_frame(self, frame: FrameBuffer) -> np.ndarray:
        return upscale(frame.pixels, self.window.scale)

    def write_frame(self, frame: FrameBuffer) -> None:
        if self._closed:
            raise EncodeError("cannot write to a flushed encoder")
        pixels = self.resize_frame(frame)
        expected = (self.window.output_height, self.window.output_width, 3)
        if pixels.shape != expected:
            raise EncodeError(f"frame shape {pixels.shape} does not match output {expected}")
        try:
            self._process.stdin.write(np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())
        except OSError as exc:
            raise EncodeError(f"ffmpeg stopped accepting frames: {exc}") from exc
        self.frames_written += 1
        self.position += self.frame_duration

    def flush(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._process.stdin.close()
        except OSError as exc:
            logger.warning("closing ffmpeg input failed: %s", exc)
        returncode = self._process.wait()
        self._stderr.seek(0)
        stderr = self._stderr.read()
        self._stderr.close()
        if returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-2000:]
            raise EncodeError(f"ffmpeg exited with code {returncode}: {tail}")
        logger.info("wrote %d frames (%.2f s) to %s", self.frames_written, self.position, self.path)


class PngFrameWriter:
    def __init__(self, folder: str | Path, window: WindowConfig) -> None:
        self.folder = Path(folder)
        self.window = window
        self.position = 0.0
        self.frame_duration = window.frame_duration
        self.frames_written = 0
        clear_output_folder(self.folder)

    def write_frame(self, frame: FrameBuffer) -> None:
        pixels = upscale(frame.pixels, self.window.scale)
        target = self.folder / f"frame_{self.frames_written:06d}.png"
        Image.fromarray(pixels).save(target)
        self.frames_written += 1
        self.position += self.frame_duration

    def flush(self) -> None:
        logger.info("wrote %d PNG frames to %s", self.frames_written, self.folder)


def clear_output_folder(folder: Path) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    for stale in folder.glob("*.png"):
        stale.unlink()
