"""Container readers that split an audio file into track-tagged packets."""

from __future__ import annotations

import logging
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import numpy as np
import soundfile

from multitrack_visualizer.errors import ConfigError

logger = logging.getLogger(__name__)

PACKET_FRAMES = 1152
CODEC_NULL = ""

_WAVE_CODECS = {1: "pcm_u8", 2: "pcm_s16le", 3: "pcm_s24le", 4: "pcm_s32le"}


@dataclass(slots=True)
class TrackInfo:
    track_id: int
    codec: str
    sample_rate: int
    channels: int
    n_frames: int | None
    sample_width: int = 0


@dataclass(slots=True)
class Packet:
    track_id: int
    data: bytes | np.ndarray
    frames: int


class FormatReader(Protocol):
    name: str

    def tracks(self) -> list[TrackInfo]: ...

    def next_packet(self) -> Packet: ...

    def close(self) -> None: ...


class WaveReader:
    """Integer PCM RIFF/WAVE files through the stdlib ``wave`` module."""

    name = "wave"
    extensions = ("wav", "wave")

    def __init__(self, path: Path, packet_frames: int = PACKET_FRAMES) -> None:
        self._wav = wave.open(str(path), "rb")
        self._packet_frames = packet_frames
        width = self._wav.getsampwidth()
        self._track = TrackInfo(
            track_id=0,
            codec=_WAVE_CODECS.get(width, CODEC_NULL),
            sample_rate=self._wav.getframerate(),
            channels=self._wav.getnchannels(),
            n_frames=self._wav.getnframes(),
            sample_width=width,
        )

    @staticmethod
    def sniff(header: bytes) -> bool:
        return header[:4] == b"RIFF" and header[8:12] == b"WAVE"

    def tracks(self) -> list[TrackInfo]:
        return [self._track]

    def next_packet(self) -> Packet:
        data = self._wav.readframes(self._packet_frames)
        if not data:
            raise EOFError("end of wave data")
        frame_size = self._track.sample_width * self._track.channels
        return Packet(track_id=self._track.track_id, data=data, frames=len(data) // frame_size)

    def close(self) -> None:
        self._wav.close()


# subtype -> (read dtype, codec name)
SOUNDFILE_SUBTYPES: dict[str, tuple[str, str]] = {
    "PCM_S8": ("int16", "pcm_s8"),
    "PCM_U8": ("int16", "pcm_u8_wide"),
    "PCM_16": ("int16", "pcm_16"),
    "PCM_24": ("int32", "pcm_24"),
    "PCM_32": ("int32", "pcm_32"),
    "FLOAT": ("float32", "float"),
    "DOUBLE": ("float64", "double"),
    "VORBIS": ("float32", "vorbis"),
    "OPUS": ("float32", "opus"),
    "MPEG_LAYER_III": ("float32", "mp3"),
    "ALAC_16": ("int16", "alac_16"),
    "ALAC_24": ("int32", "alac_24"),
}


class SoundFileReader:
    """Anything libsndfile can read (FLAC, OGG, float WAV, AIFF, MP3 ...)."""

    name = "soundfile"
    extensions = ("flac", "ogg", "oga", "opus", "aiff", "aif", "mp3", "wav", "w64", "caf")

    def __init__(self, path: Path, packet_frames: int = PACKET_FRAMES) -> None:
        self._file = soundfile.SoundFile(str(path))
        self._packet_frames = packet_frames
        dtype, codec = SOUNDFILE_SUBTYPES.get(self._file.subtype, ("float32", CODEC_NULL))
        self._dtype = dtype
        self._track = TrackInfo(
            track_id=0,
            codec=codec,
            sample_rate=self._file.samplerate,
            channels=self._file.channels,
            n_frames=self._file.frames if self._file.seekable() else None,
        )

    @staticmethod
    def sniff(header: bytes) -> bool:
        return bool(header)

    def tracks(self) -> list[TrackInfo]:
        return [self._track]

    def next_packet(self) -> Packet:
        data = self._file.read(self._packet_frames, dtype=self._dtype, always_2d=True)
        if len(data) == 0:
            raise EOFError("end of sound file")
        return Packet(track_id=self._track.track_id, data=data, frames=len(data))

    def close(self) -> None:
        self._file.close()


READERS: tuple[type[WaveReader] | type[SoundFileReader], ...] = (WaveReader, SoundFileReader)


def probe(path: str | Path) -> FormatReader:
    """Open ``path`` with the first reader whose sniff and open both succeed.

    Readers that claim the file's extension are tried before the rest.
    """
    file_path = Path(path)
    try:
        with file_path.open("rb") as handle:
            header = handle.read(64)
    except OSError as exc:
        raise ConfigError(f"Could not load track \"{file_path}\" - Error: {exc}") from exc

    hint = file_path.suffix.lower().lstrip(".")
    ordered = sorted(READERS, key=lambda reader: hint not in reader.extensions)
    for reader in ordered:
        if not reader.sniff(header):
            continue
        try:
            opened = reader(file_path)
        except (wave.Error, soundfile.LibsndfileError, EOFError, RuntimeError) as exc:
            logger.debug("%s reader rejected %s: %s", reader.name, file_path, exc)
            continue
        logger.debug("probed %s as %s", file_path, opened.name)
        return opened
    raise ConfigError(f"Could not load track \"{file_path}\" - Error: Unsupported format")
