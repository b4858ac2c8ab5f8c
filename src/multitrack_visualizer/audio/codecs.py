"""Packet decoders and 8-bit amplitude normalization."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

import numpy as np

from multitrack_visualizer.audio.formats import Packet, TrackInfo
from multitrack_visualizer.errors import ConfigError, CorruptPacketError, UnsupportedSampleFormat


class SampleFormat(str, Enum):
    U8 = "u8"
    S16 = "s16"
    S24 = "s24"
    S32 = "s32"
    F32 = "f32"
    F64 = "f64"


# Right shift that maps a signed format onto a signed byte.
_SIGNED_SHIFT: dict[SampleFormat, int] = {
    SampleFormat.S16: 8,
    SampleFormat.S24: 16,
    SampleFormat.S32: 24,
}


@dataclass(slots=True)
class AudioBuffer:
    sample_format: SampleFormat
    samples: np.ndarray  # shape (frames, channels)

    def chan(self, index: int) -> np.ndarray:
        return self.samples[:, index]


class Decoder(Protocol):
    def decode(self, packet: Packet) -> AudioBuffer: ...


class PcmBytesDecoder:
    """Little-endian interleaved integer PCM as produced by ``WaveReader``."""

    def __init__(self, sample_format: SampleFormat, channels: int, sample_width: int) -> None:
        self.sample_format = sample_format
        self.channels = channels
        self.sample_width = sample_width

    def decode(self, packet: Packet) -> AudioBuffer:
        data = packet.data
        if not isinstance(data, (bytes, bytearray)):
            raise CorruptPacketError("expected raw PCM bytes")
        frame_size = self.channels * self.sample_width
        if frame_size <= 0 or len(data) % frame_size:
            raise CorruptPacketError(f"packet of {len(data)} bytes is not a whole number of frames")

        if self.sample_format is SampleFormat.U8:
            flat = np.frombuffer(data, dtype=np.uint8)
        elif self.sample_format is SampleFormat.S16:
            flat = np.frombuffer(data, dtype="<i2")
        elif self.sample_format is SampleFormat.S24:
            flat = _unpack_s24(data)
        elif self.sample_format is SampleFormat.S32:
            flat = np.frombuffer(data, dtype="<i4")
        else:
            raise UnsupportedSampleFormat(f"{self.sample_format.value} is not a PCM byte format")
        return AudioBuffer(self.sample_format, flat.reshape(-1, self.channels))


class ArrayDecoder:
    """Packets that the reader has already decoded into ``(frames, channels)`` arrays."""

    def __init__(self, sample_format: SampleFormat, channels: int) -> None:
        self.sample_format = sample_format
        self.channels = channels

    def decode(self, packet: Packet) -> AudioBuffer:
        data = packet.data
        if not isinstance(data, np.ndarray) or data.ndim != 2 or data.shape[1] != self.channels:
            raise CorruptPacketError("packet does not hold a (frames, channels) sample array")
        return AudioBuffer(self.sample_format, data)


def _unpack_s24(data: bytes) -> np.ndarray:
    raw = np.frombuffer(data, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
    value = raw[:, 0] | (raw[:, 1] << 8) | (raw[:, 2] << 16)
    # sign-extend bit 23
    return np.where(value & 0x800000, value - 0x1000000, value).astype(np.int32)


def _pcm(sample_format: SampleFormat) -> Callable[[TrackInfo], Decoder]:
    return lambda track: PcmBytesDecoder(sample_format, track.channels, track.sample_width)


def _array(sample_format: SampleFormat) -> Callable[[TrackInfo], Decoder]:
    return lambda track: ArrayDecoder(sample_format, track.channels)


CODECS: dict[str, Callable[[TrackInfo], Decoder]] = {
    # WaveReader
    "pcm_u8": _pcm(SampleFormat.U8),
    "pcm_s16le": _pcm(SampleFormat.S16),
    "pcm_s24le": _pcm(SampleFormat.S24),
    "pcm_s32le": _pcm(SampleFormat.S32),
    # SoundFileReader; libsndfile widens 8/24-bit input to the read dtype
    "pcm_s8": _array(SampleFormat.S16),
    "pcm_u8_wide": _array(SampleFormat.S16),
    "pcm_16": _array(SampleFormat.S16),
    "pcm_24": _array(SampleFormat.S32),
    "pcm_32": _array(SampleFormat.S32),
    "alac_16": _array(SampleFormat.S16),
    "alac_24": _array(SampleFormat.S32),
    "float": _array(SampleFormat.F32),
    "double": _array(SampleFormat.F64),
    "vorbis": _array(SampleFormat.F32),
    "opus": _array(SampleFormat.F32),
    "mp3": _array(SampleFormat.F32),
}


def make_decoder(track: TrackInfo) -> Decoder:
    factory = CODECS.get(track.codec)
    if factory is None:
        raise ConfigError(f"{track.codec or 'unknown'} is an unsupported codec")
    return factory(track)


def normalize_to_u8(buffer: AudioBuffer) -> np.ndarray:
    """First channel of ``buffer`` as unsigned bytes centred on 128."""
    samples = buffer.chan(0)
    fmt = buffer.sample_format
    if fmt is SampleFormat.U8:
        return samples.astype(np.uint8)
    if fmt in (SampleFormat.F32, SampleFormat.F64):
        scaled = np.nan_to_num(samples.astype(np.float64) * 128.0 + 128.0, nan=0.0)
        return np.clip(scaled, 0.0, 255.0).astype(np.uint8)
    shift = _SIGNED_SHIFT.get(fmt)
    if shift is None:
        raise UnsupportedSampleFormat(f"format not supported: {fmt}")
    wide = samples.astype(np.int64)
    # integer division truncating toward zero, not floor
    quotient = np.sign(wide) * (np.abs(wide) >> shift)
    return np.clip(quotient + 128, 0, 255).astype(np.uint8)
