import numpy as np
import PIL.Image
import pytest

from PolarizeTool.Frame import Frame
from PolarizeTool.PolarimetricImage import PolarimetricImage
from PolarizeTool.Render import render_rgb, save_image
from PolarizeTool.Saturate import Saturate


class PixelsOnly:
    """Image source without a bulk path."""

    def __init__(self, source):
        self.source = source

    def bounds(self):
        return self.source.bounds()

    def at(self, x, y):
        return self.source.at(x, y)


@pytest.fixture
def accumulated():
    rng = np.random.default_rng(21)
    pol = PolarimetricImage()
    for i in range(4):
        pol.add_sample(i, Frame(pixels=rng.integers(0, 256, size=(9, 13), dtype=np.uint8)))
    pol.freeze()
    return pol


def test_render_frame_reproduces_pixels():
    rng = np.random.default_rng(22)
    pixels = rng.integers(0, 256, size=(5, 6, 3), dtype=np.uint8)
    np.testing.assert_array_equal(render_rgb(Frame(pixels=pixels), workers=3), pixels)


@pytest.mark.parametrize("workers", [1, 4])
def test_bulk_and_per_pixel_paths_agree(accumulated, workers):
    img = Saturate(accumulated, 2)
    bulk = render_rgb(img)
    per_pixel = render_rgb(PixelsOnly(img), workers=workers)
    assert bulk.shape == per_pixel.shape == (9, 13, 3)
    assert bulk.dtype == np.uint8
    assert np.abs(bulk.astype(int) - per_pixel.astype(int)).max() <= 1


def test_zero_saturation_renders_gray(accumulated):
    rgb = render_rgb(Saturate(accumulated, 0))
    np.testing.assert_array_equal(rgb[..., 0], rgb[..., 1])
    np.testing.assert_array_equal(rgb[..., 1], rgb[..., 2])


@pytest.mark.parametrize("name, fmt", [("out.png", "PNG"), ("out.jpg", "JPEG"), ("OUT.JPEG", "JPEG")])
def test_save_image(tmp_path, accumulated, name, fmt):
    path = tmp_path / name
    save_image(str(path), Saturate(accumulated, 1))
    with PIL.Image.open(path) as image:
        assert image.format == fmt
        assert image.size == (13, 9)
        assert image.mode == "RGB"


def test_save_png_is_lossless(tmp_path, accumulated):
    path = tmp_path / "out.png"
    save_image(str(path), accumulated)
    with PIL.Image.open(path) as image:
        np.testing.assert_array_equal(np.asarray(image), render_rgb(accumulated))


def test_save_rejects_unknown_format(tmp_path, accumulated):
    with pytest.raises(ValueError):
        save_image(str(tmp_path / "out.gif"), accumulated)
