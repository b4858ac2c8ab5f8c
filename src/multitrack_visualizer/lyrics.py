"""LRC lyric timeline used for the optional caption overlay."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from multitrack_visualizer.errors import ConfigError

_LRC_LINE = re.compile(r"^\[(\d\d):(\d\d\.\d\d)\](.*)$")
OPEN_END = 999_999.0


@dataclass(slots=True)
class LyricLine:
    time_start: float
    time_end: float
    text: str


class LyricTimeline:
    def __init__(self, lines: list[LyricLine]) -> None:
        self.lines = lines

    @classmethod
    def from_lrc(cls, path: str | Path) -> LyricTimeline:
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Could not load lyrics file {path}: {exc}") from exc
        return cls.parse(content)

    @classmethod
    def parse(cls, content: str) -> LyricTimeline:
        lines: list[LyricLine] = []
        for raw in content.splitlines():
            match = _LRC_LINE.match(raw.strip())
            if match is None:
                continue
            minutes, seconds, lyric = match.groups()
            time = int(minutes) * 60 + float(seconds)
            # a timestamp, blank or not, ends the line still showing
            if lines and lines[-1].time_end == OPEN_END:
                lines[-1].time_end = time
            if not lyric.strip():
                continue
            lines.append(LyricLine(time_start=time, time_end=OPEN_END, text=lyric.strip().upper()))
        return cls(lines)

    def find_line(self, time: float) -> str | None:
        for line in self.lines:
            if line.time_start <= time <= line.time_end:
                return line.text
        return None
