import numpy as np

from .Frame import Frame
from .HSV import HSV, rgb_to_hsv_array, to_hsv
from .Rectangle import Rectangle


def squash(t):
    """
    Sigmoid mapping the real line onto ``(-1, 1)``.

    Equal to ``2 / (1 + exp(-t)) - 1``; written as ``tanh(t / 2)`` so large
    negative inputs do not overflow.  Accepts scalars or arrays.
    """
    return np.tanh(np.asarray(t, dtype=np.float64) / 2)


class Saturate:
    """
    Read-only view of *source* with its saturation rescaled.

    Every pixel is converted to HSV and its saturation replaced with
    ``squash(coefficient * s)``; hue and value pass through.  Nothing is
    cached and the source is never written, so any number of threads may
    read the view once the source has stopped changing.

    Parameters
    ----------
    source : image source
        Anything with ``bounds()`` and ``at(x, y)``.
    coefficient : float
        ``0`` removes all saturation; large values push every non-gray
        pixel towards full saturation.
    """

    def __init__(self, source, coefficient: float):
        self.source = source
        self.coefficient = float(coefficient)

    def bounds(self) -> Rectangle:
        return self.source.bounds()

    def at(self, x: int, y: int) -> HSV:
        c = to_hsv(self.source.at(x, y))
        return c.model_copy(update={"s": float(squash(self.coefficient * c.s))})

    def hsv_array(self) -> np.ndarray:
        """
        Apply the transform to the whole source at once.

        Uses ``source.hsv_array()`` when available, otherwise samples the
        source pixel by pixel.
        """
        if hasattr(self.source, "hsv_array"):
            hsv = np.array(self.source.hsv_array(), dtype=np.float64)
        else:
            hsv = rgb_to_hsv_array(Frame.from_source(self.source).rgb16() / 0xFFFF)
        hsv[..., 1] = squash(self.coefficient * hsv[..., 1])
        return hsv
