"""Multi-channel audio song: one waveform panel per channel per frame."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from multitrack_visualizer.audio.sample_decoder import SampleDecoder
from multitrack_visualizer.audio.stream import ChannelStream
from multitrack_visualizer.display.canvas import BLACK, Colour, FrameBuffer
from multitrack_visualizer.display.waveform import grid_layout, render_channel_panel
from multitrack_visualizer.errors import ConfigError
from multitrack_visualizer.lyrics import LyricTimeline
from multitrack_visualizer.project.schema import ChannelConfig, SongConfig, WindowConfig
from multitrack_visualizer.video.encoder import FrameSink

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Channel:
    name: str
    file: str
    colour: Colour = (0, 0, 0)
    use_alignment: bool = True
    stream: ChannelStream | None = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: ChannelConfig) -> Channel:
        return cls(
            name=config.name,
            file=config.file,
            colour=tuple(config.colour),
            use_alignment=config.use_alignment,
        )

    def load_track(self) -> None:
        self.stream = ChannelStream(SampleDecoder.open(self.file), name=self.name)

    def get_frame_samples(self, frame_rate: int) -> np.ndarray:
        if self.stream is None:
            raise RuntimeError(f"track for channel '{self.name}' is not loaded")
        return self.stream.get_frame_samples(self.stream.min_samples_required(frame_rate))


class Song:
    def __init__(
        self,
        channels: list[Channel],
        window: WindowConfig,
        video_file_out: str,
        use_gradients: bool = True,
        lyrics: LyricTimeline | None = None,
    ) -> None:
        if not channels:
            raise ValueError("a song needs at least one channel")
        self.channels = channels
        self.window = window
        self.video_file_out = video_file_out
        self.use_gradients = use_gradients
        self.lyrics = lyrics

    @classmethod
    def from_config(cls, config: SongConfig, window: WindowConfig) -> Song:
        channels = [Channel.from_config(item) for item in config.channels]
        logger.info("%-16s %s", "Channel Name", "Filename")
        for channel in channels:
            display_name = channel.name if len(channel.name) <= 16 else f"{channel.name[:13]}..."
            logger.info("%-16s %s", display_name, channel.file)
        try:
            for channel in channels:
                channel.load_track()
            lyrics = LyricTimeline.from_lrc(config.lyrics_file) if config.lyrics_file else None
        except ConfigError:
            for channel in channels:
                if channel.stream is not None:
                    channel.stream.close()
            raise
        return cls(
            channels=channels,
            window=window,
            video_file_out=config.video_file_out,
            use_gradients=config.use_gradients,
            lyrics=lyrics,
        )

    @property
    def playhead_secs(self) -> float:
        stream = self.channels[0].stream
        if stream is None or stream.sample_rate <= 0:
            return 0.0
        return stream.played_samples / stream.sample_rate

    def progress(self) -> tuple[int, int]:
        stream = self.channels[0].stream
        if stream is None:
            return 0, 0
        return stream.played_samples, stream.total_samples

    def render_next_frame(self, frame: FrameBuffer, sink: FrameSink) -> None:
        """Draw every channel's next frame of samples and hand the frame to ``sink``.

        Propagates ``EndOfStream`` as soon as any channel runs out.
        """
        cells = grid_layout(len(self.channels), frame.width, frame.height)
        for channel, cell in zip(self.channels, cells):
            raw = channel.get_frame_samples(self.window.frame_rate)
            render_channel_panel(
                frame,
                cell,
                channel.name,
                channel.colour,
                raw,
                use_alignment=channel.use_alignment,
                use_gradient=self.use_gradients,
            )
        if self.lyrics is not None:
            self._draw_lyric(frame)
        sink.write_frame(frame)

    def _draw_lyric(self, frame: FrameBuffer) -> None:
        line = self.lyrics.find_line(self.playhead_secs) if self.lyrics else None
        if not line:
            return
        x = max((frame.width - frame.text_width(line)) // 2, 0)
        y = frame.height - 16
        frame.text(x + 1, y + 1, line, BLACK)
        frame.text(x, y, line)

    def close(self) -> None:
        for channel in self.channels:
            if channel.stream is not None:
                channel.stream.close()
