import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from .FrameFactory import FrameFactory
from .PolarimetricImage import PolarimetricImage
from .PolarizeConfig import PolarizeConfig
from .Render import save_image
from .Saturate import Saturate

logger = logging.getLogger(__name__)


def accumulate(filenames, numcpu=1, max_row_locks=None, progress_cb=None):
    """
    Load frames on a pool of worker threads and merge them into a
    ``PolarimetricImage``.

    Frame ``k`` of *filenames* becomes sample ``k``.  Each worker decodes
    one frame at a time, so at most *numcpu* decoded frames are held in
    memory.  The first frame that fails to load aborts the run: frames not
    yet started are cancelled and the error is re-raised once the running
    ones finish.

    Parameters
    ----------
    filenames : sequence of str
        Frame paths in rotation order.
    numcpu : int, optional
        Number of worker threads.  Default is ``1``.
    max_row_locks : int or None, optional
        Passed to ``PolarimetricImage``.
    progress_cb : callable or None, optional
        Invoked as ``progress_cb(phase='loading', current=int, total=int)``
        after each frame is merged.

    Returns
    -------
    PolarimetricImage
        Frozen accumulator holding every frame.

    Raises
    ------
    ValueError
        If *filenames* is empty, or a file is not a supported image.
    RuntimeError
        If a frame cannot be decoded.
    """
    if not filenames:
        raise ValueError("No frames to accumulate")

    pimg = PolarimetricImage(max_row_locks=max_row_locks)
    total = len(filenames)

    def work(index, filename):
        logger.info("processing %r", filename)
        pimg.add_sample(index, FrameFactory.create_from_file(filename))

    with ThreadPoolExecutor(max_workers=numcpu) as executor:
        futures = [executor.submit(work, i, f) for i, f in enumerate(filenames)]
        try:
            for current, future in enumerate(as_completed(futures), 1):
                future.result()
                if progress_cb:
                    progress_cb(phase="loading", current=current, total=total)
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    pimg.freeze()
    return pimg


def polarize(config: PolarizeConfig) -> Saturate:
    """
    Build the polarimetric image described by *config* and save it.

    Returns
    -------
    Saturate
        The saturated view that was written to ``config.out``.

    Raises
    ------
    ValueError
        If *config* resolves to no frames.
    RuntimeError
        If a frame cannot be decoded.
    """
    frames = config.frames()
    if not frames:
        raise ValueError(f"No image files found in {config.directory}")

    pimg = accumulate(frames, config.numcpu, config.max_row_locks, config.progress_cb)
    img = Saturate(pimg, config.saturation)

    logger.info("writing to %r", config.out)
    if config.progress_cb:
        config.progress_cb(phase="writing", current=0, total=1)
    save_image(config.out, img, config.numcpu)
    if config.progress_cb:
        config.progress_cb(phase="writing", current=1, total=1)
    return img
