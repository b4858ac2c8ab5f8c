"""Config schema and loader exports."""

from multitrack_visualizer.project.loader import load_midi_config, load_song_config, load_window
from multitrack_visualizer.project.schema import (
    RGB,
    WINDOW_PRESETS,
    ChannelConfig,
    MidiChannelConfig,
    MidiSongConfig,
    SongConfig,
    WindowConfig,
)

__all__ = [
    "RGB",
    "WINDOW_PRESETS",
    "ChannelConfig",
    "MidiChannelConfig",
    "MidiSongConfig",
    "SongConfig",
    "WindowConfig",
    "load_midi_config",
    "load_song_config",
    "load_window",
]
