from typing import Optional, Tuple

import numpy as np
import PIL.Image
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .HSV import RGBA, luminance_array
from .Rectangle import Rectangle

# Pillow modes whose pixels map straight onto a numpy array.
_NATIVE_MODES = ("L", "LA", "RGB", "RGBA", "I;16")


class Frame(BaseModel):
    """
    Image source backed by a numpy pixel array.

    A frame covers the rectangle that starts at ``origin`` and has the
    array's shape.  It is the form every sample takes before it is merged
    into a ``PolarimetricImage``.

    Attributes
    ----------
    pixels : np.ndarray
        ``(rows, cols)`` for grayscale or ``(rows, cols, channels)`` with
        1 to 4 channels.  Channels beyond the third (alpha) are ignored and
        one or two channels are read as gray.  Dtype is ``uint8``,
        ``uint16`` or float in ``[0, 1]``.
    origin : tuple of int
        ``(x, y)`` of the top-left pixel.  Default is ``(0, 0)``.

    Examples
    --------
    >>> frame = Frame(pixels=np.zeros((480, 640), dtype=np.uint8))
    >>> frame.bounds().dx, frame.bounds().dy
    (640, 480)
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    pixels: np.ndarray
    origin: Tuple[int, int] = Field(default=(0, 0))

    @field_validator("pixels")
    @classmethod
    def validate_pixels(cls, v: np.ndarray):
        if v.ndim not in (2, 3) or (v.ndim == 3 and not 1 <= v.shape[2] <= 4):
            raise ValueError(f"Unsupported pixel array shape: {v.shape}")
        if v.dtype not in (np.uint8, np.uint16) and v.dtype.kind != "f":
            raise ValueError(f"Unsupported pixel dtype: {v.dtype}")
        return v

    @classmethod
    def from_pil(cls, image: PIL.Image.Image, origin=(0, 0)) -> "Frame":
        """
        Wrap a decoded Pillow image.

        Palette, CMYK, YCbCr and other modes are converted to RGB first.
        """
        if image.mode not in _NATIVE_MODES:
            image = image.convert("RGB")
        return cls(pixels=np.asarray(image), origin=origin)

    @classmethod
    def from_source(cls, source) -> "Frame":
        """
        Sample any object with ``bounds()`` and ``at(x, y)`` into a frame.
        """
        b = source.bounds()
        pixels = np.zeros((b.dy, b.dx, 3), dtype=np.uint16)
        for y in range(b.min_y, b.max_y):
            for x in range(b.min_x, b.max_x):
                pixels[y - b.min_y, x - b.min_x] = source.at(x, y).rgba()[:3]
        return cls(pixels=pixels, origin=(b.min_x, b.min_y))

    def bounds(self) -> Rectangle:
        rows, cols = self.pixels.shape[:2]
        return Rectangle.from_shape(rows, cols, self.origin)

    def at(self, x: int, y: int) -> RGBA:
        if not self.bounds().contains(x, y):
            return RGBA()
        ox, oy = self.origin
        r, g, b = self._rgb16(self.pixels[y - oy:y - oy + 1, x - ox:x - ox + 1])[0, 0]
        return RGBA(r=int(r), g=int(g), b=int(b))

    def rgb16(self, rect: Optional[Rectangle] = None) -> np.ndarray:
        """
        16-bit RGB pixels of *rect* (clipped to the frame), shape
        ``(rows, cols, 3)``.
        """
        return self._rgb16(self._block(rect))

    def luminance(self, rect: Optional[Rectangle] = None) -> np.ndarray:
        """
        8-bit perceptual gray levels of *rect* (clipped to the frame).

        Returns
        -------
        np.ndarray
            ``uint8`` array of shape ``(rows, cols)``.
        """
        block = self._block(rect)
        if block.dtype == np.uint8 and self._is_gray(block):
            return np.array(block if block.ndim == 2 else block[..., 0])
        return luminance_array(self._rgb16(block))

    def _block(self, rect: Optional[Rectangle]) -> np.ndarray:
        b = self.bounds()
        r = b if rect is None else b.intersect(rect)
        ox, oy = self.origin
        return self.pixels[r.min_y - oy:r.max_y - oy, r.min_x - ox:r.max_x - ox]

    @staticmethod
    def _is_gray(block: np.ndarray) -> bool:
        return block.ndim == 2 or block.shape[2] < 3

    @classmethod
    def _rgb16(cls, block: np.ndarray) -> np.ndarray:
        if cls._is_gray(block):
            gray = block if block.ndim == 2 else block[..., 0]
            block = np.repeat(gray[..., np.newaxis], 3, axis=-1)
        else:
            block = block[..., :3]

        if block.dtype == np.uint8:
            return block.astype(np.uint16) * 257
        if block.dtype == np.uint16:
            return block
        return np.rint(np.clip(block, 0.0, 1.0) * 0xFFFF).astype(np.uint16)


def as_frame(source) -> Frame:
    """
    Coerce a sample to a ``Frame``.

    Accepts a ``Frame``, a Pillow image, a numpy array (placed at the
    origin) or any object with ``bounds()`` and ``at(x, y)``.

    Raises
    ------
    TypeError
        If *source* is none of the above.
    """
    if isinstance(source, Frame):
        return source
    if isinstance(source, PIL.Image.Image):
        return Frame.from_pil(source)
    if isinstance(source, np.ndarray):
        return Frame(pixels=source)
    if hasattr(source, "bounds") and hasattr(source, "at"):
        return Frame.from_source(source)
    raise TypeError(f"Not an image source: {type(source)!r}")
