import numpy as np
import pytest

from multitrack_visualizer.display.canvas import BLACK, WHITE, FrameBuffer
from multitrack_visualizer.display.waveform import (
    PARALLEL_MIN_COLUMNS,
    Cell,
    draw_panel_background,
    draw_waveform,
    find_alignment_offset,
    grid_layout,
    render_channel_panel,
    resample_lerp,
)


def test_grid_uses_two_columns_on_landscape_frames() -> None:
    cells = grid_layout(4, 480, 270)
    assert [(cell.x, cell.y) for cell in cells] == [(0, 0), (240, 0), (0, 135), (240, 135)]
    assert {(cell.width, cell.height) for cell in cells} == {(240, 135)}


def test_grid_stacks_on_portrait_frames() -> None:
    cells = grid_layout(3, 216, 384)
    assert [(cell.x, cell.y, cell.width, cell.height) for cell in cells] == [
        (0, 0, 216, 128),
        (0, 128, 216, 128),
        (0, 256, 216, 128),
    ]


def test_grid_single_channel_and_odd_count() -> None:
    assert grid_layout(1, 480, 270) == [Cell(0, 0, 480, 270)]
    assert grid_layout(0, 480, 270) == []
    odd = grid_layout(3, 480, 270)
    assert odd[2] == Cell(0, 135, 240, 135)


def test_alignment_finds_first_falling_edge() -> None:
    raw = np.full(300, 128, dtype=np.uint8)
    raw[10] = 140
    raw[11] = 130
    raw[15] = 200
    raw[16] = 100
    assert find_alignment_offset(raw) == 10


def test_alignment_ignores_small_drops_and_late_edges() -> None:
    raw = np.full(300, 128, dtype=np.uint8)
    raw[10] = 135  # drop of 7
    raw[250] = 255  # outside the first fifteenth
    assert find_alignment_offset(raw) == 0


def test_resample_is_identity_when_width_matches() -> None:
    raw = np.random.default_rng(7).integers(0, 256, size=100, dtype=np.uint8)
    assert np.array_equal(resample_lerp(raw, 100), raw)


def test_wide_resample_is_identity_too() -> None:
    width = PARALLEL_MIN_COLUMNS * 2
    raw = np.random.default_rng(11).integers(0, 256, size=width, dtype=np.uint8)
    assert np.array_equal(resample_lerp(raw, width), raw)


def test_resample_interpolates_between_samples() -> None:
    raw = np.array([0, 100, 200, 200], dtype=np.uint8)
    assert resample_lerp(raw, 8).tolist() == [0, 50, 100, 150, 200, 200, 200, 200]
    assert resample_lerp(raw, 4, start=1, span=2).tolist() == [100, 150, 200, 200]


def test_resample_rejects_bad_windows() -> None:
    with pytest.raises(ValueError):
        resample_lerp(np.zeros(0, dtype=np.uint8), 10)
    with pytest.raises(ValueError):
        resample_lerp(np.zeros(10, dtype=np.uint8), 10, start=5, span=6)
    assert len(resample_lerp(np.zeros(10, dtype=np.uint8), 0)) == 0


def test_flat_signal_draws_a_horizontal_line() -> None:
    frame = FrameBuffer(20, 100)
    draw_waveform(frame, Cell(0, 0, 20, 100), np.full(20, 128, dtype=np.uint8))
    assert all(tuple(frame.pixels[50, x]) == WHITE for x in range(19))
    assert not frame.pixels[49].any()
    assert not frame.pixels[51].any()


def test_rising_edge_fills_the_column() -> None:
    frame = FrameBuffer(4, 256)
    draw_waveform(frame, Cell(0, 0, 4, 256), np.array([0, 0, 255, 255], dtype=np.uint8))
    assert all(tuple(frame.pixels[y, 1]) == WHITE for y in range(0, 256))


def test_panel_background_leaves_a_black_border() -> None:
    frame = FrameBuffer(10, 10)
    frame.clear((9, 9, 9))
    draw_panel_background(frame, Cell(0, 0, 10, 10), (200, 10, 10), use_gradient=False)
    assert tuple(frame.pixels[0, 0]) == (200, 10, 10)
    assert tuple(frame.pixels[8, 8]) == (200, 10, 10)
    assert tuple(frame.pixels[9, 9]) == BLACK
    assert tuple(frame.pixels[0, 9]) == BLACK


def test_render_channel_panel_returns_one_sample_per_column() -> None:
    frame = FrameBuffer(64, 32)
    raw = (128 + 60 * np.sin(np.linspace(0, 20, 800))).astype(np.uint8)
    samples = render_channel_panel(frame, Cell(0, 0, 64, 32), "Bass", (0, 0, 80), raw)
    assert samples.shape == (64,)
    assert frame.pixels.any()
