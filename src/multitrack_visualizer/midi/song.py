"""MIDI song: a scrolling piano roll, one lane per visible track."""

from __future__ import annotations

import logging

from multitrack_visualizer.display.canvas import FrameBuffer
from multitrack_visualizer.display.piano_roll import draw_lane
from multitrack_visualizer.display.waveform import Cell
from multitrack_visualizer.errors import ConfigError, EndOfStream
from multitrack_visualizer.midi.timeline import MidiChannel, MidiTimeline, notes_in_window
from multitrack_visualizer.project.schema import MidiSongConfig, WindowConfig
from multitrack_visualizer.video.encoder import FrameSink

logger = logging.getLogger(__name__)


class MidiSong:
    def __init__(
        self,
        timeline: MidiTimeline,
        channels: list[MidiChannel],
        window: WindowConfig,
        video_file_out: str,
        use_gradients: bool = True,
    ) -> None:
        if not channels:
            raise ConfigError("the MIDI file has no visible tracks with notes")
        self.timeline = timeline
        self.channels_vec = channels
        self.window = window
        self.video_file_out = video_file_out
        self.use_gradients = use_gradients
        # length of the visible window; the timeline scrolls in from the right
        self.seconds_per_frame = window.duration_secs
        self.playhead_secs = -window.duration_secs / 2.0

    @classmethod
    def from_config(cls, config: MidiSongConfig, window: WindowConfig) -> MidiSong:
        timeline = MidiTimeline.from_file(config.midi_file)
        channels = timeline.select_channels(config.channels)
        logger.info("rendering %d MIDI lanes: %s", len(channels), ", ".join(c.name or "?" for c in channels))
        return cls(
            timeline=timeline,
            channels=channels,
            window=window,
            video_file_out=config.video_file_out,
            use_gradients=config.use_gradients,
        )

    def duration_secs(self) -> float:
        return self.timeline.duration_secs()

    def progress(self) -> tuple[int, int]:
        half = self.seconds_per_frame / 2.0
        done = int((self.playhead_secs + half) * 1000)
        total = int((self.duration_secs() + half) * 1000)
        return max(done, 0), total

    def render_next_frame(self, frame: FrameBuffer, sink: FrameSink) -> None:
        if self.playhead_secs >= self.duration_secs():
            raise EndOfStream("playhead passed the end of the song")

        lane_height = frame.height // len(self.channels_vec)
        window = self.timeline.tick_window(self.playhead_secs, self.seconds_per_frame)
        for row, channel in enumerate(self.channels_vec):
            lane = Cell(x=0, y=lane_height * row, width=frame.width, height=lane_height)
            draw_lane(
                frame,
                lane,
                channel.name,
                channel.colour,
                notes_in_window(channel, window),
                window,
                channel.note_min,
                channel.note_max,
                use_gradient=self.use_gradients,
            )

        sink.write_frame(frame)
        self.playhead_secs += self.window.frame_duration

    def close(self) -> None:
        pass
