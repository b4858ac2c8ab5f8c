import numpy as np
import pytest

from multitrack_visualizer.audio.codecs import (
    ArrayDecoder,
    AudioBuffer,
    PcmBytesDecoder,
    SampleFormat,
    make_decoder,
    normalize_to_u8,
)
from multitrack_visualizer.audio.formats import Packet, TrackInfo
from multitrack_visualizer.errors import ConfigError, CorruptPacketError, UnsupportedSampleFormat


def _mono(sample_format: SampleFormat, values: list, dtype: str) -> AudioBuffer:
    return AudioBuffer(sample_format, np.asarray(values, dtype=dtype).reshape(-1, 1))


def test_s16_truncates_toward_zero() -> None:
    buffer = _mono(SampleFormat.S16, [0, 256, -256, 255, -255, 32767, -32768], "int16")
    assert normalize_to_u8(buffer).tolist() == [128, 129, 127, 128, 128, 255, 0]


def test_s24_and_s32_shift_to_a_signed_byte() -> None:
    s24 = _mono(SampleFormat.S24, [1 << 16, -(1 << 16), (1 << 23) - 1, -(1 << 23)], "int32")
    s32 = _mono(SampleFormat.S32, [1 << 24, -(1 << 24), 2**31 - 1, -(2**31)], "int32")
    assert normalize_to_u8(s24).tolist() == [129, 127, 255, 0]
    assert normalize_to_u8(s32).tolist() == [129, 127, 255, 0]


def test_float_scales_and_saturates() -> None:
    f32 = _mono(SampleFormat.F32, [0.0, 0.5, -0.5, 1.0, -1.0, 4.0, -4.0], "float32")
    f64 = _mono(SampleFormat.F64, [0.0, 0.25], "float64")
    assert normalize_to_u8(f32).tolist() == [128, 192, 64, 255, 0, 255, 0]
    assert normalize_to_u8(f64).tolist() == [128, 160]


def test_silence_maps_to_midpoint_for_every_format() -> None:
    for sample_format, dtype in (
        (SampleFormat.S16, "int16"),
        (SampleFormat.S24, "int32"),
        (SampleFormat.S32, "int32"),
        (SampleFormat.F32, "float32"),
        (SampleFormat.F64, "float64"),
    ):
        assert normalize_to_u8(_mono(sample_format, [0, 0, 0], dtype)).tolist() == [128, 128, 128]
    assert normalize_to_u8(_mono(SampleFormat.U8, [128, 7], "uint8")).tolist() == [128, 7]


def test_only_first_channel_is_used() -> None:
    samples = np.array([[256, -32768], [512, 32767]], dtype=np.int16)
    assert normalize_to_u8(AudioBuffer(SampleFormat.S16, samples)).tolist() == [129, 130]


def test_unknown_sample_format_is_rejected() -> None:
    with pytest.raises(UnsupportedSampleFormat):
        normalize_to_u8(AudioBuffer("s12", np.zeros((2, 1))))  # type: ignore[arg-type]


def test_pcm_decoder_unpacks_signed_24_bit() -> None:
    decoder = PcmBytesDecoder(SampleFormat.S24, channels=1, sample_width=3)
    data = b"\xff\xff\xff" + b"\xff\xff\x7f" + b"\x01\x00\x00" + b"\x00\x00\x80"
    buffer = decoder.decode(Packet(track_id=0, data=data, frames=4))
    assert buffer.chan(0).tolist() == [-1, 8388607, 1, -8388608]


def test_pcm_decoder_interleaves_channels() -> None:
    decoder = PcmBytesDecoder(SampleFormat.S16, channels=2, sample_width=2)
    data = np.array([1, -1, 2, -2], dtype="<i2").tobytes()
    buffer = decoder.decode(Packet(track_id=0, data=data, frames=2))
    assert buffer.samples.shape == (2, 2)
    assert buffer.chan(1).tolist() == [-1, -2]


def test_pcm_decoder_rejects_partial_frames() -> None:
    decoder = PcmBytesDecoder(SampleFormat.S16, channels=1, sample_width=2)
    with pytest.raises(CorruptPacketError):
        decoder.decode(Packet(track_id=0, data=b"\x00\x01\x02", frames=1))


def test_array_decoder_checks_channel_count() -> None:
    decoder = ArrayDecoder(SampleFormat.F32, channels=2)
    with pytest.raises(CorruptPacketError):
        decoder.decode(Packet(track_id=0, data=np.zeros((4, 1), dtype=np.float32), frames=4))


def test_make_decoder_rejects_unknown_codec() -> None:
    track = TrackInfo(track_id=0, codec="dts", sample_rate=48000, channels=2, n_frames=10)
    with pytest.raises(ConfigError, match="dts is an unsupported codec"):
        make_decoder(track)
