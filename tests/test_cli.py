import json
import wave
from pathlib import Path

import numpy as np
import pytest

from multitrack_visualizer import cli
from multitrack_visualizer.errors import DecodeError


def _write_test_wav(path: Path, sample_rate: int = 8_000, duration_sec: float = 1.0) -> None:
    samples = (8000 * np.sin(np.linspace(0, 200, int(sample_rate * duration_sec)))).astype("<i2")
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.tobytes())


def _write_project(folder: Path) -> tuple[Path, Path]:
    _write_test_wav(folder / "bass.wav")
    song = folder / "song.json"
    song.write_text(json.dumps({"channels": [{"name": "Bass", "file": "bass.wav", "colour": [0, 40, 90]}]}))
    window = folder / "window.json"
    window.write_text(json.dumps({"width": 48, "height": 27, "scale": 2, "frame_rate": 10}))
    return song, window


def test_png_render_exits_cleanly(tmp_path: Path) -> None:
    song, window = _write_project(tmp_path)
    frames = tmp_path / "frames"

    code = cli.main(["--song", str(song), "--window", str(window), "--png-dir", str(frames)])

    assert code == 0
    assert len(list(frames.glob("frame_*.png"))) == 10


def test_missing_default_song_is_exit_code_one(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli.main(["--window-preset", "16x9"]) == 1


def test_missing_window_is_exit_code_one(tmp_path: Path) -> None:
    song, _window = _write_project(tmp_path)
    assert cli.main(["--song", str(song), "--window", str(tmp_path / "nope.json")]) == 1


def test_unknown_preset_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--window-preset", "4x3"])
    assert excinfo.value.code == 2


def test_render_failure_is_exit_code_two(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    song, window = _write_project(tmp_path)

    def failing_render(*args: object, **kwargs: object) -> int:
        raise DecodeError("Error rendering \"Bass\": bad data")

    monkeypatch.setattr(cli, "render", failing_render)
    code = cli.main(["--song", str(song), "--window", str(window), "--png-dir", str(tmp_path / "frames")])
    assert code == 2
