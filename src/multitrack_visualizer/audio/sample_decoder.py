"""Probe a media file and bind its first decodable track to a decoder."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from multitrack_visualizer.audio.codecs import AudioBuffer, Decoder, make_decoder
from multitrack_visualizer.audio.formats import CODEC_NULL, FormatReader, Packet, TrackInfo, probe
from multitrack_visualizer.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SampleDecoder:
    path: Path
    reader: FormatReader
    track: TrackInfo
    decoder: Decoder

    @classmethod
    def open(cls, path: str | Path) -> SampleDecoder:
        file_path = Path(path)
        reader = probe(file_path)
        try:
            track = next((t for t in reader.tracks() if t.codec != CODEC_NULL), None)
            if track is None:
                raise ConfigError(f"Could not load track \"{file_path}\" - Error: No supported audio tracks")
            if track.n_frames is None:
                raise ConfigError(f"Could not load track \"{file_path}\" - Error: unknown track length")
            try:
                decoder = make_decoder(track)
            except ConfigError as exc:
                raise ConfigError(f"Could not load track \"{file_path}\" - Error: {exc}") from exc
        except ConfigError:
            reader.close()
            raise
        logger.debug(
            "opened %s: codec=%s rate=%d channels=%d frames=%d",
            file_path,
            track.codec,
            track.sample_rate,
            track.channels,
            track.n_frames,
        )
        return cls(path=file_path, reader=reader, track=track, decoder=decoder)

    @property
    def sample_rate(self) -> int:
        return self.track.sample_rate

    @property
    def total_samples(self) -> int:
        return self.track.n_frames or 0

    def next_packet(self) -> Packet:
        return self.reader.next_packet()

    def decode(self, packet: Packet) -> AudioBuffer:
        return self.decoder.decode(packet)

    def close(self) -> None:
        self.reader.close()
