import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import PIL.Image

from .HSV import hsv_to_rgb_array

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}


def render_rgb(source, workers=None) -> np.ndarray:
    """
    Copy an image source into an 8-bit RGB array.

    Sources with ``hsv_array()`` (``PolarimetricImage``, ``Saturate``) are
    converted in one vectorized pass.  Any other source is read pixel by
    pixel with ``at(x, y)``, rows interleaved across *workers* threads.

    Parameters
    ----------
    source : image source
        Anything with ``bounds()`` and ``at(x, y)``.
    workers : int or None, optional
        Threads for the per-pixel path.  Defaults to the CPU count.

    Returns
    -------
    np.ndarray
        ``uint8`` array of shape ``(rows, cols, 3)``.
    """
    if hasattr(source, "hsv_array"):
        rgb16 = np.rint(np.clip(hsv_to_rgb_array(source.hsv_array()), 0.0, 1.0) * 0xFFFF)
        return (rgb16.astype(np.uint32) >> 8).astype(np.uint8)

    b = source.bounds()
    out = np.zeros((b.dy, b.dx, 3), dtype=np.uint8)
    workers = workers or os.cpu_count() or 1

    def work(i):
        for y in range(b.min_y + i, b.max_y, workers):
            for x in range(b.min_x, b.max_x):
                r, g, bl, _ = source.at(x, y).rgba()
                out[y - b.min_y, x - b.min_x] = (r >> 8, g >> 8, bl >> 8)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        # list() re-raises the first worker error
        list(executor.map(work, range(workers)))
    return out


def save_image(filename: str, source, workers=None) -> None:
    """
    Render *source* and write it as JPEG or PNG, chosen by extension.

    Raises
    ------
    ValueError
        If the extension is not ``.jpg``, ``.jpeg`` or ``.png``.
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in IMAGE_FORMATS:
        raise ValueError(f"Unsupported output format: {filename}")

    rgb = render_rgb(source, workers)
    PIL.Image.fromarray(rgb).save(filename, format=IMAGE_FORMATS[ext])
    logger.debug("wrote %dx%d image to %r", rgb.shape[1], rgb.shape[0], filename)
