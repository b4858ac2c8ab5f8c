"""Render audio waveforms and MIDI piano rolls to video, one frame at a time."""

__version__ = "0.1.0"
