"""MIDI note timeline: ingestion into per-track channels and tick windowing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import mido

from multitrack_visualizer.display.canvas import Colour
from multitrack_visualizer.errors import ConfigError
from multitrack_visualizer.project.schema import MidiChannelConfig

logger = logging.getLogger(__name__)

DEFAULT_TEMPO = 500_000  # 120 bpm
DEFAULT_COLOUR: Colour = (24, 24, 24)


@dataclass(slots=True)
class MidiNote:
    tick_on: int
    tick_off: int  # 0 while the note is still hanging
    pitch: int

    @property
    def is_open(self) -> bool:
        return self.tick_off == 0


@dataclass(slots=True, frozen=True)
class NoteSpan:
    """A note as seen through one window; open notes sustain past its right edge."""

    tick_on: int
    tick_off: int
    pitch: int
    sustaining: bool = False


@dataclass(slots=True)
class MidiChannel:
    name: str = ""
    note_min: int = 127
    note_max: int = 0
    colour: Colour = DEFAULT_COLOUR
    notes: list[MidiNote] = field(default_factory=list)
    last_tick: int = 0

    def add_note(self, pitch: int, tick: int) -> None:
        self.note_min = min(self.note_min, pitch)
        self.note_max = max(self.note_max, pitch)
        self.last_tick = tick
        self.notes.append(MidiNote(tick_on=tick, tick_off=0, pitch=pitch))

    def end_note(self, pitch: int, tick: int) -> bool:
        """Close the earliest hanging note with this pitch."""
        self.last_tick = tick
        for note in self.notes:
            if note.pitch == pitch and note.is_open:
                note.tick_off = tick
                return True
        return False


@dataclass(slots=True, frozen=True)
class TickWindow:
    start: int
    end: int
    raw_start: int
    raw_end: int

    @property
    def mid(self) -> float:
        return (self.raw_start + self.raw_end) / 2.0


class MidiTimeline:
    def __init__(self, ppq: int) -> None:
        if ppq <= 0:
            raise ConfigError("SMPTE timecode MIDI files are not supported")
        self.ppq = ppq
        self.tempo = DEFAULT_TEMPO
        self.duration_ticks = 0
        self.channels: dict[int, MidiChannel] = {}

    @classmethod
    def from_file(cls, path: str | Path) -> MidiTimeline:
        try:
            midi = mido.MidiFile(str(path))
        except (OSError, EOFError, ValueError, KeyError) as exc:
            raise ConfigError(f"Could not load MIDI file {path}: {exc}") from exc
        return cls.from_midi(midi)

    @classmethod
    def from_midi(cls, midi: mido.MidiFile) -> MidiTimeline:
        timeline = cls(midi.ticks_per_beat)
        for index, track in enumerate(midi.tracks):
            tick = 0
            for message in track:
                tick += message.time
                if message.type == "set_tempo":
                    timeline.set_tempo(message.tempo)
                elif message.type == "track_name":
                    timeline.update_name(index, message.name)
                elif message.type == "note_on" and message.velocity > 0:
                    timeline.add_note(index, message.note, tick)
                elif message.type in ("note_on", "note_off"):
                    timeline.end_note(index, message.note, tick)
        logger.info(
            "MIDI info: duration %.3f s, %d ticks, %d tracks with events",
            timeline.duration_secs(),
            timeline.duration_ticks,
            len(timeline.channels),
        )
        return timeline

    @property
    def us_per_tick(self) -> float:
        return self.tempo / self.ppq

    def set_tempo(self, tempo: int) -> None:
        self.tempo = tempo

    def update_name(self, index: int, name: str) -> None:
        channel = self.channels.get(index)
        if channel is None:
            self.channels[index] = MidiChannel(name=name)
        elif not channel.name:
            channel.name = name

    def add_note(self, index: int, pitch: int, tick: int) -> None:
        self.channels.setdefault(index, MidiChannel()).add_note(pitch, tick)

    def end_note(self, index: int, pitch: int, tick: int) -> None:
        channel = self.channels.get(index)
        if channel is None or not channel.end_note(pitch, tick):
            logger.debug("note off without a hanging note: track=%d pitch=%d tick=%d", index, pitch, tick)
        self.duration_ticks = max(self.duration_ticks, tick)

    def duration_secs(self) -> float:
        return self.duration_ticks * (self.us_per_tick / 1_000_000.0)

    def seconds_to_ticks(self, seconds: float) -> float:
        return (seconds * 1_000_000.0) / self.us_per_tick

    def tick_window(self, playhead_secs: float, window_secs: float) -> TickWindow:
        raw_start = self.seconds_to_ticks(playhead_secs)
        raw_end = self.seconds_to_ticks(playhead_secs + window_secs)
        return TickWindow(
            start=int(min(max(raw_start, 0.0), self.duration_ticks)),
            end=int(min(max(raw_end, 0.0), self.duration_ticks)),
            raw_start=int(raw_start),
            raw_end=int(raw_end),
        )

    def select_channels(self, config: dict[str, MidiChannelConfig]) -> list[MidiChannel]:
        """Channels with notes that are not hidden, in a total display order.

        Configured channels come first by ``(order, name)``; the rest follow by name.
        """
        selected: list[MidiChannel] = []
        for channel in self.channels.values():
            if not channel.notes:
                continue
            channel_config = config.get(channel.name)
            if channel_config is not None:
                if not channel_config.visible:
                    continue
                channel.colour = tuple(channel_config.colour)
            selected.append(channel)
        selected.sort(key=lambda channel: channel_sort_key(channel, config))
        return selected


def channel_sort_key(channel: MidiChannel, config: dict[str, MidiChannelConfig]) -> tuple[int, int, str]:
    channel_config = config.get(channel.name)
    if channel_config is None:
        return (1, 0, channel.name)
    return (0, channel_config.order, channel.name)


def notes_in_window(channel: MidiChannel, window: TickWindow) -> list[NoteSpan]:
    spans: list[NoteSpan] = []
    for note in channel.notes:
        if note.tick_on > window.end:
            continue
        if note.is_open:
            spans.append(NoteSpan(note.tick_on, max(window.raw_end, note.tick_on), note.pitch, sustaining=True))
        elif note.tick_off >= window.start:
            spans.append(NoteSpan(note.tick_on, note.tick_off, note.pitch))
    return spans
