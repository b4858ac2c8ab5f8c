"""Audio decoding and per-frame sample streaming."""

from multitrack_visualizer.audio.codecs import AudioBuffer, SampleFormat, make_decoder, normalize_to_u8
from multitrack_visualizer.audio.formats import Packet, TrackInfo, probe
from multitrack_visualizer.audio.sample_decoder import SampleDecoder
from multitrack_visualizer.audio.song import Channel, Song
from multitrack_visualizer.audio.stream import ChannelStream

__all__ = [
    "AudioBuffer",
    "Channel",
    "ChannelStream",
    "Packet",
    "SampleDecoder",
    "SampleFormat",
    "Song",
    "TrackInfo",
    "make_decoder",
    "normalize_to_u8",
    "probe",
]
