from multitrack_visualizer.display.canvas import BLACK, WHITE, FrameBuffer


def test_rect_is_half_open_and_clipped() -> None:
    frame = FrameBuffer(8, 6)
    frame.rect(-5, -5, 3, 2, (255, 0, 0))
    assert tuple(frame.pixels[1, 2]) == (255, 0, 0)
    assert tuple(frame.pixels[2, 0]) == BLACK
    assert tuple(frame.pixels[0, 3]) == BLACK

    frame.rect(6, 4, 100, 100, WHITE)
    assert tuple(frame.pixels[5, 7]) == WHITE
    frame.rect(3, 3, 3, 5, WHITE)
    assert tuple(frame.pixels[3, 3]) == BLACK


def test_pixel_outside_frame_is_ignored() -> None:
    frame = FrameBuffer(4, 4)
    frame.pixel(-1, 0, WHITE)
    frame.pixel(4, 4, WHITE)
    frame.pixel(1, 2, WHITE)
    assert frame.pixels.sum() == 255 * 3


def test_gradient_darkens_one_component_every_third_row() -> None:
    frame = FrameBuffer(2, 12)
    frame.rect_gradient(0, 0, 2, 12, (10, 10, 10))
    assert tuple(frame.pixels[0, 0]) == (10, 10, 10)
    assert tuple(frame.pixels[2, 1]) == (10, 10, 10)
    assert tuple(frame.pixels[3, 0]) == (9, 10, 10)
    assert tuple(frame.pixels[6, 0]) == (9, 9, 10)
    assert tuple(frame.pixels[9, 0]) == (9, 9, 9)


def test_gradient_floors_at_zero() -> None:
    frame = FrameBuffer(1, 30)
    frame.rect_gradient(0, 0, 1, 30, (1, 0, 0))
    assert frame.pixels[:, :, 1:].sum() == 0
    assert tuple(frame.pixels[29, 0]) == BLACK


def test_text_draws_inside_the_frame_only() -> None:
    frame = FrameBuffer(80, 20)
    frame.text(2, 2, "Bass")
    assert frame.pixels.any()
    frame.clear()
    frame.text(500, 500, "Bass")
    frame.text(-500, 2, "Bass")
    assert not frame.pixels.any()


def test_text_width_skips_unprintable_characters() -> None:
    frame = FrameBuffer(10, 10)
    assert frame.text_width("AB\x00\n") == frame.text_width("AB")
    assert frame.text_width("ABCD") > frame.text_width("A")
