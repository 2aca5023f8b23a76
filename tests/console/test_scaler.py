import numpy as np
import pytest

from glyphterm.config import ScalingMode
from glyphterm.console.mesh import GridMeshBuilder
from glyphterm.console.scaler import ViewportScaler, round_nearest

CELL = (8.0, 8.0)


def pixel_perfect(scaler, screen=(1920, 1080), content=(640.0, 400.0)):
    scaler.set_viewport_size(*screen)
    scaler.recalculate(content, CELL, ScalingMode.PIXEL_PERFECT)
    return scaler


def test_new_viewport_resets_gutters_to_half_the_desired_gutter():
    scaler = ViewportScaler(desired_gutter=8.0)
    scaler.set_viewport_size(800, 600)
    scaler.recalculate((640.0, 400.0), CELL, ScalingMode.STRETCH)
    assert scaler.x_gutter != 4.0

    scaler.set_viewport_size(1024, 768)

    assert scaler.physical_size == (1024.0, 768.0)
    assert scaler.x_gutter == 4.0
    assert scaler.y_gutter == 4.0


def test_pixel_perfect_picks_largest_whole_scale(scaler):
    pixel_perfect(scaler)

    assert scaler.pixel_perfect
    assert scaler.scale_factor == 2
    assert scaler.step(80, 50, CELL) == (16.0, 16.0)
    assert scaler.x_gutter == 1920 - 1280
    assert scaler.y_gutter == 1080 - 800


def test_pixel_perfect_never_scales_below_one(scaler):
    pixel_perfect(scaler, screen=(320, 200))

    assert scaler.scale_factor == 1
    assert scaler.step(80, 50, CELL) == CELL


def test_pixel_perfect_content_is_centred(scaler):
    pixel_perfect(scaler)

    assert scaler.top_left() == (-640.0, -400.0)
    assert scaler.available_size() == (1280.0, 800.0)


@pytest.mark.parametrize("screen", [(1920, 1080), (1921, 1083), (2560, 1440), (700, 500)])
def test_pixel_perfect_grid_fills_available_size_exactly(scaler, screen):
    pixel_perfect(scaler, screen=screen)

    step = scaler.step(80, 50, CELL)
    left, top = scaler.top_left()
    available = scaler.available_size()

    assert (80 * step[0], 50 * step[1]) == available
    assert (left + 80 * step[0]) - left == available[0]
    assert (top + 50 * step[1]) - top == available[1]


def test_pixel_perfect_top_left_is_whole_pixels(scaler):
    # 5x5 content at scale 3 is 15px wide: the exact corner would be -7.5
    scaler.set_viewport_size(16, 16)
    scaler.recalculate((5.0, 5.0), (5.0, 5.0), ScalingMode.PIXEL_PERFECT)

    left, top = scaler.top_left()

    assert scaler.scale_factor == 3
    assert left == int(left)
    assert top == int(top)


def test_stretch_wide_window_letterboxes_left_and_right(scaler):
    scaler.set_viewport_size(1280, 720)
    scaler.recalculate((640.0, 400.0), CELL, ScalingMode.STRETCH)

    # 720 * 1.6 = 1152 wide content
    assert not scaler.pixel_perfect
    assert scaler.scale_factor == 1
    assert scaler.x_gutter == pytest.approx(128.0)
    assert scaler.y_gutter == 0.0

    step_x, step_y = scaler.step(80, 50, CELL)
    assert step_x == pytest.approx(step_y, abs=0.01)
    assert step_x == pytest.approx((1280 - scaler.x_gutter) / 80)


def test_stretch_tall_window_letterboxes_top_and_bottom():
    scaler = ViewportScaler(desired_gutter=2.0)
    scaler.set_viewport_size(800, 1000)
    scaler.recalculate((640.0, 400.0), CELL, ScalingMode.STRETCH)

    # 800 / 1.6 = 500 tall content
    assert scaler.y_gutter == pytest.approx(500.0)
    assert scaler.x_gutter == 2.0
    assert scaler.available_size() == pytest.approx((798.0, 500.0))


def test_resize_terminals_mode_scales_like_stretch(scaler):
    scaler.set_viewport_size(1280, 720)
    scaler.recalculate((640.0, 400.0), CELL, ScalingMode.RESIZE_TERMINALS)

    assert not scaler.pixel_perfect
    assert scaler.x_gutter == pytest.approx(128.0)


@pytest.mark.parametrize("mode", list(ScalingMode))
def test_recalculate_is_idempotent(scaler, mode):
    scaler.set_viewport_size(1366, 768)
    scaler.recalculate((640.0, 400.0), CELL, mode)
    first = (scaler.x_gutter, scaler.y_gutter, scaler.scale_factor, scaler.top_left())

    scaler.recalculate((640.0, 400.0), CELL, mode)

    assert (scaler.x_gutter, scaler.y_gutter, scaler.scale_factor, scaler.top_left()) == first


def test_switching_mode_recomputes_everything(scaler):
    pixel_perfect(scaler)
    scaler.recalculate((640.0, 400.0), CELL, ScalingMode.STRETCH)

    assert not scaler.pixel_perfect
    assert scaler.scale_factor == 1
    # 1920 / 1.6 = 1200 > 1080, so bars go left and right
    assert scaler.x_gutter == pytest.approx(1920 - 1080 * 1.6)


def test_inverse_map_round_trips_every_interior_cell(scaler):
    pixel_perfect(scaler)

    for row in range(1, 49):
        for col in range(1, 79):
            pos = scaler.cell_center(col, row, 80, 50, CELL)
            assert scaler.inverse_map(pos, 80, 50, CELL) == (col, row)


def test_inverse_map_corners(scaler):
    pixel_perfect(scaler)

    assert scaler.inverse_map((-640.0, -400.0), 80, 50, CELL) == (0, 0)
    assert scaler.inverse_map((639.9, 399.9), 80, 50, CELL) == (79, 49)
    # Row grows downward
    assert scaler.inverse_map((0.0, -399.0), 80, 50, CELL) == (40, 0)
    assert scaler.inverse_map((0.0, 399.0), 80, 50, CELL) == (40, 49)


def test_inverse_map_clamps_outside_grid(scaler):
    pixel_perfect(scaler)

    assert scaler.inverse_map((-5000.0, 5000.0), 80, 50, CELL) == (0, 49)
    assert scaler.inverse_map((5000.0, -5000.0), 80, 50, CELL) == (79, 0)


def test_inverse_map_uses_the_given_cell_size(scaler):
    """A 16px font at scale 1 must not be mapped as if it were 8px."""
    scaler.set_viewport_size(640, 400)
    scaler.recalculate((640.0, 400.0), (16.0, 16.0), ScalingMode.PIXEL_PERFECT)

    assert scaler.inverse_map((-300.0, -180.0), 40, 25, (16.0, 16.0)) == (1, 1)


def test_round_nearest_rounds_halves_up():
    assert round_nearest(-7.5) == -7.0
    assert round_nearest(7.5) == 8.0
    assert round_nearest(2.49) == 2.0


def test_inverse_map_agrees_with_mesh_edges_on_odd_layout(atlas):
    """17px window, 3x3 cells of 5px: top_left rounds from -7.5 to -7."""
    scaler = ViewportScaler(desired_gutter=0.0)
    scaler.set_viewport_size(17, 17)
    scaler.recalculate((15.0, 15.0), (5.0, 5.0), ScalingMode.PIXEL_PERFECT)
    xs, ys = GridMeshBuilder(atlas, (5.0, 5.0)).edges(3, 3, scaler)

    assert xs.tolist() == [-7.0, -2.0, 3.0, 8.0]

    # Every half pixel inside the content lands in the cell drawn there
    for i in range(30):
        p = -7.0 + i * 0.5
        expected = int(np.searchsorted(xs, p, side="right")) - 1
        assert scaler.inverse_map((p, p), 3, 3, (5.0, 5.0)) == (expected, expected)

    assert scaler.inverse_map((-2.5, 2.5), 3, 3, (5.0, 5.0)) == (0, 1)
