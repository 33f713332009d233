### PolarimetricImage Class ###
# File : PolarimetricImage.py

import logging
import threading
from typing import Optional

import numpy as np

from .Frame import as_frame
from .HSV import HSV
from .PixelAccumulator import PixelAccumulator
from .Rectangle import Rectangle

logger = logging.getLogger(__name__)


class PolarimetricImage:
    """
    Shared accumulator that turns a polarizer rotation sequence into an
    HSV image.

    Producers call ``add_sample`` concurrently, one call per frame.  The
    grid is sized by the first frame added; later frames only touch the
    part of the grid they overlap.  Once every producer has been joined,
    ``freeze()`` seals the accumulator and the image can be read pixel by
    pixel with ``at`` or all at once with ``hsv_array``.

    Each pixel reads as:

    * ``h`` -- index of the brightest sample over the number of samples,
    * ``s`` -- peak brightness minus mean brightness,
    * ``v`` -- mean brightness.

    Hue is only meaningful if callers number samples densely over
    ``[0, N)`` in physical rotation order.  Duplicate indices are not
    rejected.

    Parameters
    ----------
    max_row_locks : int or None, optional
        ``None`` gives every row its own lock.  An integer stripes rows over
        that many locks, bounding lock overhead for very tall images.

    Examples
    --------
    >>> pimg = PolarimetricImage()
    >>> for i, frame in enumerate(frames):
    ...     pimg.add_sample(i, frame)
    >>> pimg.freeze()
    >>> pimg.at(0, 0)
    HSV(h=0.25, s=0.4, v=0.5)
    """

    def __init__(self, max_row_locks: Optional[int] = None):
        if max_row_locks is not None and max_row_locks < 1:
            raise ValueError("max_row_locks must be >= 1")
        self._max_row_locks = max_row_locks

        self._rect: Optional[Rectangle] = None
        self._pixels: Optional[PixelAccumulator] = None
        self._row_locks = []
        self._init_lock = threading.Lock()

        self._samples = 0
        self._count_lock = threading.Lock()
        self._frozen = False

    @property
    def samples(self) -> int:
        """Number of samples merged so far."""
        return self._samples

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _init_grid(self, rect: Rectangle):
        # Double-checked so only the very first caller allocates.
        if self._rect is not None:
            return
        with self._init_lock:
            if self._rect is not None:
                return
            n_locks = rect.dy if self._max_row_locks is None else min(rect.dy, self._max_row_locks)
            self._pixels = PixelAccumulator((rect.dy, rect.dx))
            self._row_locks = [threading.Lock() for _ in range(max(n_locks, 1))]
            logger.debug("allocated %dx%d grid with %d row locks",
                         rect.dx, rect.dy, len(self._row_locks))
            self._rect = rect

    def _row_lock(self, y: int) -> threading.Lock:
        return self._row_locks[(y - self._rect.min_y) % len(self._row_locks)]

    def add_sample(self, index: int, frame) -> None:
        """
        Merge one frame of the rotation sequence.

        Safe to call from many threads at once.  Each row of the overlap is
        updated under that row's lock; the sample counter has its own lock.
        No reference to *frame* is kept.

        Parameters
        ----------
        index : int
            Position of the frame in the rotation sequence, ``>= 0``.
        frame : Frame, PIL.Image.Image, np.ndarray or image source
            Anything ``as_frame`` accepts.

        Raises
        ------
        ValueError
            If *index* is negative.
        RuntimeError
            If the accumulator is frozen.
        """
        if self._frozen:
            raise RuntimeError("Cannot add samples to a frozen PolarimetricImage")
        if index < 0:
            raise ValueError(f"Sample index must be >= 0, got {index}")

        frame = as_frame(frame)
        self._init_grid(frame.bounds())

        b = frame.bounds().intersect(self._rect)
        lum = frame.luminance(b)
        x0 = b.min_x - self._rect.min_x
        x1 = b.max_x - self._rect.min_x
        for y in range(b.min_y, b.max_y):
            row = y - self._rect.min_y
            with self._row_lock(y):
                self._pixels.view((row, slice(x0, x1))).add_sample(index, lum[y - b.min_y])

        with self._count_lock:
            self._samples += 1

    def freeze(self) -> None:
        """
        Seal the accumulator once every producer has finished.

        Further ``add_sample`` calls raise ``RuntimeError``.
        """
        self._frozen = True

    def bounds(self) -> Rectangle:
        """
        Rectangle of the first frame added.

        Raises
        ------
        RuntimeError
            If no sample has been added yet.
        """
        if self._rect is None:
            raise RuntimeError("PolarimetricImage has no samples")
        return self._rect

    def at(self, x: int, y: int) -> HSV:
        """
        Finalized color of one pixel.

        Points outside ``bounds()`` read as ``HSV(h=0, s=0, v=0)``.  Reads
        take no locks: callers must join every producer first.
        """
        r = self.bounds()
        if not r.contains(x, y):
            return HSV()
        return self._pixels.view((y - r.min_y, x - r.min_x)).finalize(self._samples)

    def hsv_array(self) -> np.ndarray:
        """
        Finalize the whole grid.

        Returns
        -------
        np.ndarray
            ``float64`` array of shape ``(rows, cols, 3)`` holding
            ``h, s, v`` per pixel.
        """
        self.bounds()
        return self._pixels.finalize_array(self._samples)
