"""Sequential frame loop shared by audio and MIDI songs."""

from __future__ import annotations

import logging
from typing import Protocol

from multitrack_visualizer.display.canvas import FrameBuffer
from multitrack_visualizer.errors import EndOfStream, RenderError
from multitrack_visualizer.video.encoder import FrameSink

logger = logging.getLogger(__name__)

PROGRESS_LOG_SECONDS = 10


class Renderable(Protocol):
    def render_next_frame(self, frame: FrameBuffer, sink: FrameSink) -> None: ...

    def progress(self) -> tuple[int, int]: ...

    def close(self) -> None: ...


def render(song: Renderable, sink: FrameSink, frame: FrameBuffer, frame_rate: int) -> int:
    """Render until ``EndOfStream``; the sink is flushed exactly once either way."""
    frames = 0
    log_every = max(frame_rate * PROGRESS_LOG_SECONDS, 1)
    try:
        while True:
            try:
                song.render_next_frame(frame, sink)
            except EndOfStream:
                break
            frames += 1
            if frames % log_every == 0:
                done, total = song.progress()
                percent = (100.0 * done / total) if total else 0.0
                logger.info("rendered %d frames (%.0f%%)", frames, percent)
    except BaseException:
        _flush_after_failure(sink)
        raise
    else:
        sink.flush()
    finally:
        song.close()
    return frames


def _flush_after_failure(sink: FrameSink) -> None:
    try:
        sink.flush()
    except RenderError as exc:
        logger.error("flushing output after a failed render also failed: %s", exc)
