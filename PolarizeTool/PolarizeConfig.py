### PolarizeConfig Class ###
# File : PolarizeConfig.py

import os
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .FrameFactory import FrameFactory
from .Render import IMAGE_FORMATS


class PolarizeConfig(BaseModel):
    """
    Configuration for one polarimetric image run.

    Pass an instance of this class to ``polarize()``.

    Parameters
    ----------
    filenames : list of str, optional
        Frames in rotation order.  Frame ``k`` becomes sample ``k``.
    directory : str or None, optional
        Directory of frames, added after *filenames* in sorted order.
        Files failing ``FrameFactory.is_valid_image_file`` are skipped.
        At least one of *filenames* and *directory* must be given.
    out : str, optional
        Output image path, ``.jpg``, ``.jpeg`` or ``.png``.
        Default is ``'out.jpg'``.
    saturation : float, optional
        Saturation coefficient passed to ``Saturate``.  Default is ``1.0``.
    numcpu : int, optional
        Number of worker threads.  Each worker holds one decoded frame, so
        memory use grows with this value.  Must be >= 1.  Default is the
        CPU count.
    max_row_locks : int or None, optional
        Lock striping passed to ``PolarimetricImage``.  Must be >= 1.
        Default is ``None`` (one lock per row).
    progress_cb : callable or None, optional
        Called as ``progress_cb(phase, current, total)`` where *phase* is
        ``'loading'`` (after each frame is merged) or ``'writing'``.
        Default is ``None``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    filenames: List[str] = Field(default_factory=list)
    directory: Optional[str] = None
    out: str = "out.jpg"
    saturation: float = 1.0
    numcpu: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    max_row_locks: Optional[int] = Field(default=None, ge=1)

    progress_cb: Optional[Callable] = None

    @field_validator("out")
    @classmethod
    def validate_out(cls, v):
        if os.path.splitext(v)[1].lower() not in IMAGE_FORMATS:
            raise ValueError(f"Output must be a png or jpeg file: {v}")
        return v

    @model_validator(mode="after")
    def validate_inputs(self):
        if not self.filenames and self.directory is None:
            raise ValueError("No input frames given")
        return self

    def frames(self) -> List[str]:
        """
        Resolved frame paths in sample-index order.
        """
        frames = list(self.filenames)
        if self.directory is not None:
            for f in sorted(os.listdir(self.directory)):
                if FrameFactory.is_valid_image_file(f):
                    frames.append(os.path.join(self.directory, f))
        return frames
