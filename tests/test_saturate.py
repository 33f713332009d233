import math

import numpy as np
import pytest

from PolarizeTool.Frame import Frame
from PolarizeTool.HSV import HSV, to_hsv
from PolarizeTool.PolarimetricImage import PolarimetricImage
from PolarizeTool.Saturate import Saturate, squash


@pytest.fixture
def accumulated():
    rng = np.random.default_rng(11)
    pol = PolarimetricImage()
    for i in range(6):
        pol.add_sample(i, Frame(pixels=rng.integers(0, 256, size=(5, 7), dtype=np.uint8)))
    pol.freeze()
    return pol


@pytest.mark.parametrize("t", [-20.0, -1.5, 0.0, 0.3, 1.0, 4.0, 20.0])
def test_squash_is_shifted_sigmoid(t):
    assert squash(t) == pytest.approx(2 / (1 + math.exp(-t)) - 1)


def test_squash_bounds():
    assert squash(0) == 0
    assert squash(1e6) == pytest.approx(1.0)
    assert squash(-1e6) == pytest.approx(-1.0)
    np.testing.assert_allclose(squash(np.array([0.0, 1e6])), [0.0, 1.0])


def test_zero_coefficient_removes_saturation(accumulated):
    img = Saturate(accumulated, 0)
    b = img.bounds()
    for y in range(b.min_y, b.max_y):
        for x in range(b.min_x, b.max_x):
            assert img.at(x, y).s == 0
    np.testing.assert_array_equal(img.hsv_array()[..., 1], 0.0)


def test_hue_and_value_unchanged(accumulated):
    img = Saturate(accumulated, 10)
    for x, y in [(0, 0), (3, 2), (6, 4)]:
        src = accumulated.at(x, y)
        out = img.at(x, y)
        assert out.h == src.h
        assert out.v == src.v
        assert out.s == pytest.approx(squash(10 * src.s))


def test_large_coefficient_saturates():
    pol = PolarimetricImage()
    pol.add_sample(0, Frame(pixels=np.array([[255, 10]], dtype=np.uint8)))
    pol.add_sample(1, Frame(pixels=np.array([[250, 10]], dtype=np.uint8)))
    img = Saturate(pol, 1e4)
    assert img.at(0, 0).s == pytest.approx(1.0)
    assert img.at(1, 0).s == 0


def test_source_not_modified(accumulated):
    before = accumulated.hsv_array()
    img = Saturate(accumulated, 5)
    img.hsv_array()
    img.at(1, 1)
    np.testing.assert_array_equal(accumulated.hsv_array(), before)


def test_same_bounds(accumulated):
    assert Saturate(accumulated, 2).bounds() == accumulated.bounds()


def test_array_matches_at(accumulated):
    img = Saturate(accumulated, 3)
    hsv = img.hsv_array()
    for y in range(5):
        for x in range(7):
            c = img.at(x, y)
            np.testing.assert_allclose(hsv[y, x], (c.h, c.s, c.v))


def test_rgb_source():
    frame = Frame(pixels=np.array([[[255, 0, 0], [255, 128, 128]]], dtype=np.uint8))
    img = Saturate(frame, 0.5)
    c = img.at(1, 0)
    assert c.s == pytest.approx(squash(0.5 * to_hsv(frame.at(1, 0)).s))

    hsv = img.hsv_array()
    assert hsv.shape == (1, 2, 3)
    np.testing.assert_allclose(hsv[0, 1], (c.h, c.s, c.v))


def test_nested_views():
    pol = PolarimetricImage()
    pol.add_sample(0, Frame(pixels=np.array([[255]], dtype=np.uint8)))
    pol.add_sample(1, Frame(pixels=np.array([[0]], dtype=np.uint8)))
    img = Saturate(Saturate(pol, 1), 0)
    assert img.at(0, 0) == HSV(h=0.0, s=0.0, v=0.5)
