"""Per-channel sample backlog that hands out exactly one frame of samples per call."""

from __future__ import annotations

import logging
from typing import Protocol

import numpy as np

from multitrack_visualizer.audio.codecs import AudioBuffer, normalize_to_u8
from multitrack_visualizer.audio.formats import Packet, TrackInfo
from multitrack_visualizer.errors import CorruptPacketError, DecodeError, EndOfStream

logger = logging.getLogger(__name__)

MAX_UNPRODUCTIVE_ATTEMPTS = 100


class PacketSource(Protocol):
    track: TrackInfo

    @property
    def sample_rate(self) -> int: ...

    @property
    def total_samples(self) -> int: ...

    def next_packet(self) -> Packet: ...

    def decode(self, packet: Packet) -> AudioBuffer: ...

    def close(self) -> None: ...


class ChannelStream:
    def __init__(self, source: PacketSource, name: str = "") -> None:
        self._source = source
        self.name = name or "channel"
        self.buffer = bytearray()
        self.played_samples = 0
        self.total_samples = source.total_samples
        self.finished = False

    @property
    def sample_rate(self) -> int:
        return self._source.sample_rate

    def min_samples_required(self, frame_rate: int) -> int:
        # Integer division: the fractional remainder per frame is dropped.
        return self.sample_rate // frame_rate

    def get_frame_samples(self, min_required: int) -> np.ndarray:
        """Return exactly ``min_required`` samples from the front of the backlog.

        Raises ``EndOfStream`` once the source runs dry near its known length,
        and ``DecodeError`` for unrecoverable reader/decoder failures or after
        ``MAX_UNPRODUCTIVE_ATTEMPTS`` packets that added nothing to the backlog.
        """
        if min_required <= 0:
            raise ValueError("min_required must be positive")
        if self.finished:
            raise EndOfStream(self.name)

        attempts_left = MAX_UNPRODUCTIVE_ATTEMPTS
        while len(self.buffer) < min_required:
            if attempts_left <= 0:
                raise DecodeError(
                    f"Error rendering \"{self.name}\": no usable audio after "
                    f"{MAX_UNPRODUCTIVE_ATTEMPTS} attempts"
                )

            try:
                packet = self._source.next_packet()
            except (OSError, EOFError) as exc:
                if self.played_samples >= self.total_samples - min_required:
                    self.finished = True
                    raise EndOfStream(self.name) from None
                if attempts_left == MAX_UNPRODUCTIVE_ATTEMPTS and isinstance(exc, EOFError):
                    logger.warning(
                        "%s ended at %d of %d declared samples, retrying",
                        self.name,
                        self.played_samples + len(self.buffer),
                        self.total_samples,
                    )
                attempts_left -= 1
                logger.debug("transient read error in %s, retrying: %s", self.name, exc)
                continue
            except Exception as exc:
                raise DecodeError(f"Error rendering \"{self.name}\": {exc}") from exc

            if packet.track_id != self._source.track.track_id:
                attempts_left -= 1
                logger.warning("Error rendering \"%s\": Track doesn't match, skipping...", self.name)
                continue

            try:
                decoded = self._source.decode(packet)
            except (OSError, CorruptPacketError) as exc:
                attempts_left -= 1
                logger.debug("dropping undecodable packet in %s: %s", self.name, exc)
                continue
            except Exception as exc:
                raise DecodeError(f"Error rendering \"{self.name}\": {exc}") from exc

            samples = normalize_to_u8(decoded)
            if samples.size == 0:
                attempts_left -= 1
                continue
            self.buffer.extend(samples.tobytes())

        frame = np.frombuffer(bytes(self.buffer[:min_required]), dtype=np.uint8)
        del self.buffer[:min_required]
        self.played_samples = min(self.played_samples + min_required, self.total_samples)
        return frame

    def close(self) -> None:
        self._source.close()
