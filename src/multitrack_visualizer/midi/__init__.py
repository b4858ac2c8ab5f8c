"""MIDI note timeline exports."""

from multitrack_visualizer.midi.timeline import (
    MidiChannel,
    MidiNote,
    MidiTimeline,
    NoteSpan,
    TickWindow,
    channel_sort_key,
    notes_in_window,
)

__all__ = [
    "MidiChannel",
    "MidiNote",
    "MidiTimeline",
    "NoteSpan",
    "TickWindow",
    "channel_sort_key",
    "notes_in_window",
]
