### PixelAccumulator Class ###
# File : PixelAccumulator.py

import numpy as np

from .HSV import HSV, luminance


class PixelAccumulator:
    """
    Running per-pixel statistics over a stream of samples.

    Tracks the brightest luminance seen, the index of the sample that
    produced it, and the sum of all luminances.  The state arrays are 0-d
    for a single pixel, or any shape for a block of pixels fed the same
    samples.  ``view()`` returns an accumulator that shares memory with a
    slice of this one, which is how ``PolarimetricImage`` addresses rows
    and pixels of its grid.

    Not thread-safe: callers serialize access (see ``PolarimetricImage``).

    Parameters
    ----------
    shape : tuple of int, optional
        Shape of the pixel block.  Default is ``()``, a single pixel.

    Attributes
    ----------
    max_intensity : np.ndarray
        ``uint8`` highest luminance seen so far.
    max_index : np.ndarray
        ``int64`` sample index that produced ``max_intensity``.
    sum_intensity : np.ndarray
        ``float64`` sum of luminances seen so far.

    Examples
    --------
    >>> p = PixelAccumulator()
    >>> p.add_sample(0, 255)
    >>> p.add_sample(1, 0)
    >>> p.finalize(2)
    HSV(h=0.0, s=0.5, v=0.5)
    """

    def __init__(self, shape=()):
        self.max_intensity = np.zeros(shape, dtype=np.uint8)
        self.max_index = np.zeros(shape, dtype=np.int64)
        self.sum_intensity = np.zeros(shape, dtype=np.float64)

    @classmethod
    def _from_arrays(cls, max_intensity, max_index, sum_intensity):
        p = cls.__new__(cls)
        p.max_intensity = max_intensity
        p.max_index = max_index
        p.sum_intensity = sum_intensity
        return p

    @property
    def shape(self):
        return self.max_intensity.shape

    def view(self, key) -> "PixelAccumulator":
        """
        Accumulator over ``self[key]`` sharing this one's memory.

        *key* must be a basic numpy index (ints and slices) so the result
        is a view, not a copy.  Integer keys that select a single pixel
        give 0-d arrays.
        """
        if not isinstance(key, tuple):
            key = (key,)
        key = key + (Ellipsis,)
        return self._from_arrays(self.max_intensity[key],
                                 self.max_index[key],
                                 self.sum_intensity[key])

    def add_sample(self, index: int, luminance) -> None:
        """
        Merge one sample's luminance.

        A strictly brighter sample replaces the maximum.  An equally bright
        sample replaces it only if its index is lower, so the result is the
        same as adding samples one by one in index order, whatever order
        they actually arrive in.

        Parameters
        ----------
        index : int
            Position of the sample in the rotation sequence.
        luminance : int or np.ndarray
            8-bit gray level(s), broadcastable to ``shape``.
        """
        lum = np.asarray(luminance, dtype=np.uint8)
        brighter = (lum > self.max_intensity) | (
            (lum == self.max_intensity) & (index < self.max_index))
        self.max_intensity[...] = np.where(brighter, lum, self.max_intensity)
        self.max_index[...] = np.where(brighter, index, self.max_index)
        self.sum_intensity += lum

    def add_color(self, index: int, color) -> None:
        self.add_sample(index, luminance(color))

    def finalize_array(self, total_samples: int) -> np.ndarray:
        """
        Finalize every pixel of the block.

        Parameters
        ----------
        total_samples : int
            Number of samples merged so far.  Must be >= 1.

        Returns
        -------
        np.ndarray
            ``float64`` array of shape ``shape + (3,)`` holding ``h, s, v``:
            ``h`` is the brightest sample's index over *total_samples*,
            ``s`` the gap between peak and mean brightness, ``v`` the mean.

        Raises
        ------
        ValueError
            If *total_samples* is less than 1.
        """
        if total_samples < 1:
            raise ValueError(f"Cannot finalize over {total_samples} samples")
        max_v = self.max_intensity / 255.0
        avg_v = self.sum_intensity / (255.0 * total_samples)
        h = self.max_index / total_samples
        return np.stack([h, np.abs(max_v - avg_v), avg_v], axis=-1)

    def finalize(self, total_samples: int) -> HSV:
        """Finalize a single pixel; see ``finalize_array``."""
        if self.shape != ():
            raise ValueError(f"finalize() needs a single pixel, got shape {self.shape}")
        h, s, v = self.finalize_array(total_samples)
        return HSV(h=float(h), s=float(s), v=float(v))
