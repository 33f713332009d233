import os

import PIL.Image

from .Frame import Frame

FRAME_EXTENSIONS = (".jpg", ".jpeg", ".png")


class FrameFactory:
    """
    Factory for loading polarizer frames from disk.

    Decodes JPEG and PNG files with Pillow and returns a ``Frame``
    regardless of the file's color mode or bit depth.

    Methods
    -------
    create_from_file(filename)
        Load and return a ``Frame``.
    is_valid_image_file(filename)
        Return ``True`` if *filename* has a supported extension.

    Examples
    --------
    >>> frame = FrameFactory.create_from_file("/data/rotation/000.jpg")
    >>> frame.bounds().dx
    4000
    """

    @staticmethod
    def create_from_file(filename: str) -> Frame:
        """
        Load an image file as a ``Frame``.

        Parameters
        ----------
        filename : str
            Path to a ``.jpg``, ``.jpeg`` or ``.png`` file.

        Returns
        -------
        Frame
            Frame at the origin holding the decoded pixels.

        Raises
        ------
        ValueError
            If *filename* fails ``is_valid_image_file()``.
        RuntimeError
            If Pillow cannot open or decode the file.
        """
        if not FrameFactory.is_valid_image_file(filename):
            raise ValueError(f"Invalid image file: {filename}")

        try:
            with PIL.Image.open(filename) as image:
                image.load()
                return Frame.from_pil(image)
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Failed to decode image: {filename}") from e

    @staticmethod
    def is_valid_image_file(filename: str) -> bool:
        return os.path.splitext(filename)[1].lower() in FRAME_EXTENSIONS
