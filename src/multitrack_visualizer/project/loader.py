"""Config file loading with fatal-error conversion."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from multitrack_visualizer.errors import ConfigError
from multitrack_visualizer.project.schema import (
    WINDOW_PRESETS,
    MidiSongConfig,
    SongConfig,
    WindowConfig,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_song_config(path: str | Path) -> SongConfig:
    config_path = Path(path)
    config = _load_model(config_path, SongConfig)
    base = config_path.parent
    for channel in config.channels:
        channel.file = str(_resolve(base, channel.file))
    if config.lyrics_file:
        config.lyrics_file = str(_resolve(base, config.lyrics_file))
    logger.info("loaded song with %d channels from %s", len(config.channels), config_path)
    return config


def load_midi_config(path: str | Path) -> MidiSongConfig:
    config_path = Path(path)
    config = _load_model(config_path, MidiSongConfig)
    config.midi_file = str(_resolve(config_path.parent, config.midi_file))
    return config


def load_window(path: str | Path | None = None, preset: str | None = None) -> WindowConfig:
    if preset is not None:
        window = WINDOW_PRESETS.get(preset)
        if window is None:
            choices = ", ".join(f"'{name}'" for name in WINDOW_PRESETS)
            raise ConfigError(f"window preset '{preset}' does not exist - use one of {choices}")
        return window
    if path is None:
        raise ConfigError("either a window file or a window preset is required")
    return _load_model(Path(path), WindowConfig)


def _load_model(path: Path, model: type[ModelT]) -> ModelT:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"could not open {path}: {exc}") from exc
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {path}:\n{exc}") from exc


def _resolve(base: Path, value: str) -> Path:
    candidate = Path(value).expanduser()
    if candidate.is_absolute():
        return candidate
    return base / candidate
