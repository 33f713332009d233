"""
HSV color model.

Every color in the package exposes ``rgba()`` returning four 16-bit
channels, the common currency between frames, the accumulator and the
renderer.  ``HSV`` is the canonical representation of an accumulated pixel;
``RGBA`` is what frames hand out.  Both are fully opaque: input alpha is
ignored and output alpha is always ``MAX_CHANNEL``.

The scalar functions convert one color at a time.  The ``*_array``
functions apply the same formulas to whole images and are used on the
render path.
"""

import math
from typing import Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

# Hue of a color with zero saturation.
NO_HUE = -1.0

MAX_CHANNEL = 0xFFFF

_GRAY_WEIGHTS = (19595, 38470, 7471)


class RGBA(BaseModel):
    """
    Opaque additive color with 16-bit channels.

    Examples
    --------
    >>> RGBA.from_8bit(255, 128, 0).rgba()
    (65535, 32896, 0, 65535)
    """
    model_config = ConfigDict(frozen=True)

    r: int = Field(default=0, ge=0, le=MAX_CHANNEL)
    g: int = Field(default=0, ge=0, le=MAX_CHANNEL)
    b: int = Field(default=0, ge=0, le=MAX_CHANNEL)
    a: int = Field(default=MAX_CHANNEL, ge=0, le=MAX_CHANNEL)

    @classmethod
    def from_8bit(cls, r: int, g: int, b: int) -> "RGBA":
        return cls(r=r * 257, g=g * 257, b=b * 257)

    def rgba(self) -> Tuple[int, int, int, int]:
        return self.r, self.g, self.b, self.a


class HSV(BaseModel):
    """
    Fully opaque HSV color.

    Attributes
    ----------
    h : float
        Hue in ``[0, 1]``, or ``NO_HUE`` when ``s`` is zero.
    s : float
        Saturation in ``[0, 1]``.
    v : float
        Value in ``[0, 1]``.
    """
    model_config = ConfigDict(frozen=True)

    h: float = 0.0
    s: float = 0.0
    v: float = 0.0

    def rgba(self) -> Tuple[int, int, int, int]:
        return to_rgb(self).rgba()


def _channels(color) -> Tuple[int, int, int]:
    if hasattr(color, "rgba"):
        r, g, b, _ = color.rgba()
    else:
        r, g, b = tuple(color)[:3]
    return r, g, b


def _quantize(f: float) -> int:
    return min(max(int(round(f * MAX_CHANNEL)), 0), MAX_CHANNEL)


def to_hsv(color) -> HSV:
    """
    Convert a color to ``HSV``.

    Parameters
    ----------
    color : HSV, RGBA, object with ``rgba()``, or sequence of int
        ``HSV`` values are returned unchanged.  Sequences are read as
        16-bit ``(r, g, b[, a])`` channels.

    Returns
    -------
    HSV
        ``h`` is ``NO_HUE`` for grays.
    """
    if isinstance(color, HSV):
        return color
    ir, ig, ib = _channels(color)
    r = ir / MAX_CHANNEL
    g = ig / MAX_CHANNEL
    b = ib / MAX_CHANNEL

    mx = max(r, g, b)
    mn = min(r, g, b)
    d = mx - mn

    v = mx
    s = d / mx if mx != 0 else 0.0
    if s == 0:
        return HSV(h=NO_HUE, s=0.0, v=v)

    if r == mx:
        h = (g - b) / d
    elif g == mx:
        h = 2 + (b - r) / d
    else:
        h = 4 + (r - g) / d
    h /= 6
    if h < 0:
        h += 1
    return HSV(h=h, s=s, v=v)


def to_rgb(c: HSV) -> RGBA:
    """
    Convert an ``HSV`` color back to 16-bit ``RGBA``.

    Channels are rounded to the nearest 16-bit level, so
    ``to_rgb(to_hsv(x)) == x`` for every opaque 16-bit color.
    """
    if c.s == 0:
        vi = _quantize(c.v)
        return RGBA(r=vi, g=vi, b=vi)

    h = 0.0 if c.h == 1 else c.h
    h *= 6
    i = math.floor(h)
    f = h - i
    i %= 6
    aa = c.v * (1 - c.s)
    bb = c.v * (1 - c.s * f)
    cc = c.v * (1 - c.s * (1 - f))
    r, g, b = (
        (c.v, cc, aa),
        (bb, c.v, aa),
        (aa, c.v, cc),
        (aa, bb, c.v),
        (cc, aa, c.v),
        (c.v, aa, bb),
    )[i]
    return RGBA(r=_quantize(r), g=_quantize(g), b=_quantize(b))


def luminance(color) -> int:
    """
    Reduce a color to an 8-bit perceptual gray level.

    Uses the ITU-R 601 weights on 16-bit channels, so a gray input keeps
    its own level: ``luminance(RGBA.from_8bit(k, k, k)) == k``.
    """
    r, g, b = _channels(color)
    wr, wg, wb = _GRAY_WEIGHTS
    return (wr * r + wg * g + wb * b + (1 << 15)) >> 24


def luminance_array(rgb16: np.ndarray) -> np.ndarray:
    """
    Vectorized ``luminance``.

    Parameters
    ----------
    rgb16 : np.ndarray
        Integer array of shape ``(..., 3)`` holding 16-bit channels.

    Returns
    -------
    np.ndarray
        ``uint8`` array of shape ``(...)``.
    """
    rgb = np.asarray(rgb16, dtype=np.int64)
    wr, wg, wb = _GRAY_WEIGHTS
    y = (wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2] + (1 << 15)) >> 24
    return y.astype(np.uint8)


def rgb_to_hsv_array(rgb: np.ndarray) -> np.ndarray:
    """
    Vectorized ``to_hsv`` on float channels in ``[0, 1]``.

    Parameters
    ----------
    rgb : np.ndarray
        Shape ``(..., 3)``.

    Returns
    -------
    np.ndarray
        ``float64`` array of shape ``(..., 3)`` holding ``h, s, v``.
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    d = mx - mn

    s = np.divide(d, mx, out=np.zeros_like(mx), where=mx != 0)
    safe_d = np.where(d == 0, 1.0, d)
    h = np.select(
        [r == mx, g == mx],
        [(g - b) / safe_d, 2 + (b - r) / safe_d],
        default=4 + (r - g) / safe_d,
    ) / 6
    h = np.where(h < 0, h + 1, h)
    h = np.where(s == 0, NO_HUE, h)
    return np.stack([h, s, mx], axis=-1)


def hsv_to_rgb_array(hsv: np.ndarray) -> np.ndarray:
    """
    Vectorized ``to_rgb``, without quantization.

    Parameters
    ----------
    hsv : np.ndarray
        Shape ``(..., 3)`` holding ``h, s, v``.

    Returns
    -------
    np.ndarray
        ``float64`` array of shape ``(..., 3)`` with channels in ``[0, 1]``.
    """
    hsv = np.asarray(hsv, dtype=np.float64)
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]

    h = np.where(h == 1, 0.0, h) * 6
    i = np.floor(h)
    f = h - i
    i = i.astype(np.int64) % 6
    aa = v * (1 - s)
    bb = v * (1 - s * f)
    cc = v * (1 - s * (1 - f))

    r = np.choose(i, [v, bb, aa, aa, cc, v])
    g = np.choose(i, [cc, v, v, bb, aa, aa])
    b = np.choose(i, [aa, aa, cc, v, v, bb])

    gray = s == 0
    rgb = np.stack([np.where(gray, v, r),
                    np.where(gray, v, g),
                    np.where(gray, v, b)], axis=-1)
    return rgb
