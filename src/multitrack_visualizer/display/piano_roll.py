"""Scrolling piano-roll lane drawing for MIDI channels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from multitrack_visualizer.display.canvas import BLACK, WHITE, Colour, FrameBuffer
from multitrack_visualizer.display.waveform import Cell, draw_panel_background
from multitrack_visualizer.midi.timeline import NoteSpan, TickWindow

EMPHASIS_TICKS = 20.0
PLAYING_BOOST = 1.0
PITCH_MARGIN = 4.0


@dataclass(slots=True, frozen=True)
class NoteRect:
    x1: int
    y1: int
    x2: int
    y2: int


def lerp_range(value: float, v_min: float, v_max: float, m_min: float, m_max: float) -> float:
    if v_max == v_min:
        return (m_min + m_max) / 2.0
    return ((value - v_min) / (v_max - v_min)) * (m_max - m_min) + m_min


def emphasis_scale(span: NoteSpan, mid: float) -> float:
    """Outline growth for notes that start just before the window centre."""
    distance = mid - span.tick_on
    if distance < 0:
        distance = EMPHASIS_TICKS
    scale = max(1.0 - distance / EMPHASIS_TICKS, 0.0)
    if span.tick_on < mid < span.tick_off:
        scale += PLAYING_BOOST
    return scale


def note_rect(span: NoteSpan, window: TickWindow, lane: Cell, note_min: int, note_max: int) -> NoteRect:
    x_min = float(lane.x)
    x_max = float(lane.x + lane.width - 1)
    y_min = float(lane.y)
    y_max = float(lane.y + lane.height - 1)

    x1 = math.floor(lerp_range(span.tick_on, window.raw_start, window.raw_end, x_min, x_max))
    x2 = math.floor(lerp_range(span.tick_off, window.raw_start, window.raw_end, x_min, x_max))
    # higher pitch -> smaller y
    y = math.floor(lerp_range(span.pitch, note_min, note_max, y_max - PITCH_MARGIN, y_min + PITCH_MARGIN))

    scale = emphasis_scale(span, window.mid)
    return NoteRect(
        x1=int(_clamp(x1 - scale, x_min, x_max - 1.0)),
        y1=int(_clamp(y - scale, y_min, y_max - 1.0)),
        x2=int(_clamp(x2 + scale, x_min, x_max - 1.0)),
        y2=int(_clamp(y + scale + 1.0, y_min, y_max - 1.0)),
    )


def draw_lane(
    frame: FrameBuffer,
    lane: Cell,
    name: str,
    colour: Colour,
    spans: Sequence[NoteSpan],
    window: TickWindow,
    note_min: int,
    note_max: int,
    use_gradient: bool = True,
) -> None:
    draw_panel_background(frame, lane, colour, use_gradient)
    for span in spans:
        rect = note_rect(span, window, lane, note_min, note_max)
        frame.rect(rect.x1 + 1, rect.y1 + 1, rect.x2 + 1, rect.y2 + 1, BLACK)
        frame.rect(rect.x1, rect.y1, rect.x2, rect.y2, WHITE)
    frame.text(lane.x + 5, lane.y + 5, name, BLACK)
    frame.text(lane.x + 4, lane.y + 4, name, WHITE)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)
