"""JSON config schemas for songs, MIDI songs and the output window."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

Component = Annotated[int, Field(ge=0, le=255)]
RGB = tuple[Component, Component, Component]

DEFAULT_VIDEO_OUT = "output.mp4"


class ChannelConfig(BaseModel):
    name: str
    file: str
    colour: RGB = (0, 0, 0)
    use_alignment: bool = True


class SongConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    channels: list[ChannelConfig] = Field(min_length=1)
    video_file_out: str = DEFAULT_VIDEO_OUT
    use_gradients: bool = True
    lyrics_file: str | None = None


class MidiChannelConfig(BaseModel):
    order: int = 0
    colour: RGB = (0, 0, 0)
    visible: bool = True


class MidiSongConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    midi_file: str
    channels: dict[str, MidiChannelConfig] = Field(default_factory=dict)
    video_file_out: str = DEFAULT_VIDEO_OUT
    use_gradients: bool = True


class WindowConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    scale: int = Field(default=1, ge=1)
    frame_rate: int = Field(gt=0)
    duration_secs: float = Field(default=5.0, gt=0.0)

    @property
    def output_width(self) -> int:
        return self.width * self.scale

    @property
    def output_height(self) -> int:
        return self.height * self.scale

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.frame_rate


WINDOW_PRESETS: dict[str, WindowConfig] = {
    "16x9": WindowConfig(width=480, height=270, scale=4, frame_rate=60, duration_secs=5.0),
    "9x16": WindowConfig(width=216, height=384, scale=5, frame_rate=30, duration_secs=3.0),
    "9x18": WindowConfig(width=216, height=432, scale=5, frame_rate=30, duration_secs=3.0),
}
