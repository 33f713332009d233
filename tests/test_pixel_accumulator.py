import numpy as np
import pytest

from PolarizeTool.HSV import HSV, RGBA
from PolarizeTool.PixelAccumulator import PixelAccumulator


def test_new_accumulator_is_empty():
    p = PixelAccumulator()
    assert p.shape == ()
    assert p.max_intensity == 0
    assert p.max_index == 0
    assert p.sum_intensity == 0


def test_white_then_black():
    p = PixelAccumulator()
    p.add_sample(0, 255)
    p.add_sample(1, 0)
    p.add_sample(2, 0)
    c = p.finalize(3)
    assert c.h == pytest.approx(0.0)
    assert c.s == pytest.approx(2 / 3)
    assert c.v == pytest.approx(1 / 3)


@pytest.mark.parametrize("k", [0, 1, 2])
def test_partial_totals(k):
    # sample k is white, the others black; read after k + 1 samples
    p = PixelAccumulator()
    for i in range(k + 1):
        p.add_sample(i, 255 if i == k else 0)
    c = p.finalize(k + 1)
    assert c.h == pytest.approx(k / (k + 1))
    assert c.s == pytest.approx(1 - 1 / (k + 1))
    assert c.v == pytest.approx(1 / (k + 1))


def test_tie_keeps_first_sample():
    p = PixelAccumulator()
    p.add_sample(0, 200)
    p.add_sample(1, 200)
    assert p.max_index == 0
    assert p.max_intensity == 200


def test_tie_ignores_arrival_order():
    p = PixelAccumulator()
    p.add_sample(3, 200)
    p.add_sample(1, 200)
    p.add_sample(2, 200)
    assert p.max_index == 1


def test_brighter_sample_wins_over_lower_index():
    p = PixelAccumulator()
    p.add_sample(4, 201)
    p.add_sample(0, 200)
    assert p.max_index == 4
    assert p.max_intensity == 201
    assert p.sum_intensity == 401


def test_add_color_uses_luminance():
    p = PixelAccumulator()
    p.add_color(0, RGBA.from_8bit(255, 0, 0))
    assert p.max_intensity == 76


@pytest.mark.parametrize("total", [0, -1])
def test_finalize_rejects_empty_total(total):
    with pytest.raises(ValueError):
        PixelAccumulator().finalize(total)


def test_finalize_needs_single_pixel():
    with pytest.raises(ValueError):
        PixelAccumulator((2, 2)).finalize(1)


def test_block_and_views_share_memory():
    grid = PixelAccumulator((2, 3))
    grid.view((1, slice(0, 3))).add_sample(2, np.array([10, 20, 30], dtype=np.uint8))
    grid.view((0, 1)).add_sample(5, 99)

    np.testing.assert_array_equal(grid.max_intensity, [[0, 99, 0], [10, 20, 30]])
    np.testing.assert_array_equal(grid.max_index, [[0, 5, 0], [2, 2, 2]])
    assert grid.view((1, 2)).finalize(1) == HSV(h=2.0, s=0.0, v=30 / 255)


def test_finalize_array_shape():
    grid = PixelAccumulator((4, 5))
    grid.add_sample(0, 255)
    hsv = grid.finalize_array(1)
    assert hsv.shape == (4, 5, 3)
    np.testing.assert_allclose(hsv[..., 2], 1.0)
    np.testing.assert_allclose(hsv[..., 1], 0.0)
