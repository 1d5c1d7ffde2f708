"""
Image transformations. Every processor is a callable returning a new image, the functions
are shortcuts for single use.
"""
__title__ = "Image processors"

from .center import CenterImage, center_image
from .crop import Crop, crop
from .regrid import Regrid, regrid
from .shift import Shift, shifted
from .smooth import Smooth, smooth

__all__ = [
    "CenterImage",
    "center_image",
    "Crop",
    "crop",
    "Regrid",
    "regrid",
    "Shift",
    "shifted",
    "Smooth",
    "smooth",
]
