"""Waveform panel rendering: phase alignment, lerp resampling and line drawing."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from multitrack_visualizer.display.canvas import BLACK, WHITE, Colour, FrameBuffer

ALIGNMENT_EDGE = 8
ALIGNMENT_SCAN_DIVISOR = 15
PARALLEL_MIN_COLUMNS = 1024
_CHUNK_COLUMNS = 512

_RESAMPLE_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="waveform-resample")


@dataclass(slots=True, frozen=True)
class Cell:
    x: int
    y: int
    width: int
    height: int


def grid_layout(count: int, width: int, height: int) -> list[Cell]:
    """Row-major cells for ``count`` panels; remainder pixels are left unused."""
    if count <= 0:
        return []
    cols = min(2, count) if width >= height else 1
    rows = -(-count // cols)
    cell_width = width // cols
    cell_height = height // rows
    return [
        Cell(
            x=(index % cols) * cell_width,
            y=(index // cols) * cell_height,
            width=cell_width,
            height=cell_height,
        )
        for index in range(count)
    ]


def alignment_scan_length(raw_len: int) -> int:
    return raw_len // ALIGNMENT_SCAN_DIVISOR


def find_alignment_offset(raw: np.ndarray, scan_len: int | None = None) -> int:
    """First index in the scan window where the signal falls by at least ``ALIGNMENT_EDGE``."""
    if scan_len is None:
        scan_len = alignment_scan_length(len(raw))
    scan_len = min(scan_len, len(raw) - 1)
    if scan_len <= 0:
        return 0
    window = np.asarray(raw[: scan_len + 1], dtype=np.int16)
    drops = window[:-1] - window[1:]
    hits = np.flatnonzero(drops >= ALIGNMENT_EDGE)
    return int(hits[0]) if hits.size else 0


def resample_lerp(
    raw: np.ndarray,
    width: int,
    start: int = 0,
    span: int | None = None,
) -> np.ndarray:
    """Linearly interpolate ``raw[start:start + span]`` onto ``width`` columns."""
    if width <= 0:
        return np.zeros(0, dtype=np.uint8)
    if len(raw) == 0:
        raise ValueError("cannot resample an empty frame")
    if span is None:
        span = len(raw) - start
    if span <= 0 or start < 0 or start + span > len(raw):
        raise ValueError(f"window [{start}, {start + span}) is outside {len(raw)} samples")

    values = np.asarray(raw, dtype=np.float64)
    columns = np.arange(width)
    if width < PARALLEL_MIN_COLUMNS:
        return _lerp_columns(values, columns, width, start, span)

    chunks = [columns[i : i + _CHUNK_COLUMNS] for i in range(0, width, _CHUNK_COLUMNS)]
    parts = _RESAMPLE_EXECUTOR.map(lambda chunk: _lerp_columns(values, chunk, width, start, span), chunks)
    return np.concatenate(list(parts))


def _lerp_columns(values: np.ndarray, columns: np.ndarray, width: int, start: int, span: int) -> np.ndarray:
    # multiply before dividing so column == sample index exactly when width == span
    position = columns * float(span) / width
    low = np.floor(position).astype(np.int64)
    high = np.minimum(np.ceil(position).astype(np.int64), len(values) - 1 - start)
    t = position - low
    mixed = (1.0 - t) * values[start + low] + t * values[start + high]
    return mixed.astype(np.uint8)


def draw_waveform(frame: FrameBuffer, cell: Cell, samples: np.ndarray, colour: Colour = WHITE) -> None:
    """Connect consecutive columns with vertical runs, always filled top to bottom."""
    rows = samples.astype(np.int64) * cell.height // 256
    for x in range(1, len(rows)):
        x_position = cell.x + x
        y_low, y_high = int(rows[x - 1]), int(rows[x])
        if y_low > y_high:
            y_low, y_high = y_high, y_low
        frame.rect(x_position - 1, cell.y + y_low, x_position, cell.y + y_high, colour)
        frame.pixel(x_position - 1, cell.y + y_high, colour)


def draw_panel_background(frame: FrameBuffer, cell: Cell, colour: Colour, use_gradient: bool) -> None:
    frame.rect(cell.x, cell.y, cell.x + cell.width, cell.y + cell.height, BLACK)
    x2 = cell.x + cell.width - 1
    y2 = cell.y + cell.height - 1
    if use_gradient:
        frame.rect_gradient(cell.x, cell.y, x2, y2, colour)
    else:
        frame.rect(cell.x, cell.y, x2, y2, colour)


def render_channel_panel(
    frame: FrameBuffer,
    cell: Cell,
    name: str,
    colour: Colour,
    raw: np.ndarray,
    use_alignment: bool = True,
    use_gradient: bool = True,
) -> np.ndarray:
    draw_panel_background(frame, cell, colour, use_gradient)
    frame.text(cell.x + 4, cell.y + 4, name)

    scan_len = alignment_scan_length(len(raw))
    start = find_alignment_offset(raw, scan_len) if use_alignment else 0
    samples = resample_lerp(raw, cell.width, start, len(raw) - scan_len)
    draw_waveform(frame, cell, samples)
    return samples
