"""Error hierarchy shared by the decode, render and encode stages."""

from __future__ import annotations


class VisualizerError(Exception):
    pass


class ConfigError(VisualizerError):
    """Setup problem that means the job cannot run at all."""


class RenderError(VisualizerError):
    pass


class DecodeError(RenderError):
    pass


class EncodeError(RenderError):
    pass


class UnsupportedSampleFormat(RenderError):
    pass


class EndOfStream(VisualizerError):
    """Normal termination: the source ran out or the song duration passed."""


class CorruptPacketError(ValueError):
    """A single packet could not be decoded; the stream itself is still usable."""
