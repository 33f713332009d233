# PolarizeTool/__init__.py

from .Rectangle import Rectangle
from .HSV import HSV, RGBA, NO_HUE, to_hsv, to_rgb, luminance
from .Frame import Frame, as_frame
from .FrameFactory import FrameFactory
from .PixelAccumulator import PixelAccumulator
from .PolarimetricImage import PolarimetricImage
from .Saturate import Saturate, squash
from .Render import render_rgb, save_image
from .PolarizeConfig import PolarizeConfig
from .Polarize import accumulate, polarize

__all__ = [
    "Rectangle", "HSV", "RGBA", "NO_HUE", "to_hsv", "to_rgb", "luminance",
    "Frame", "as_frame", "FrameFactory", "PixelAccumulator",
    "PolarimetricImage", "Saturate", "squash", "render_rgb", "save_image",
    "PolarizeConfig", "accumulate", "polarize"
]
