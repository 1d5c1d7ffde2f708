import logging
from typing import Any, Optional

from vlbistats.images.image import Image
from vlbistats.images.processor import ImageProcessor

log = logging.getLogger(__name__)


class Crop(ImageProcessor):
    """Crop an image to a window centred on the origin."""

    __module__ = "vlbistats.images.processors"

    def __init__(self, width: float, height: Optional[float] = None, **kwargs: Any):
        """Init a new crop step.

        Args:
            width: Width of window in radians.
            height: Height of window in radians, defaults to width.
        """
        ImageProcessor.__init__(self, **kwargs)
        self.width = width
        self.height = width if height is None else height

    def __call__(self, image: Image) -> Image:
        if image.data is None or image.grid is None:
            log.warning("No data found in image.")
            return image
        return image.crop(self.width, self.height)


def crop(image: Image, width: float, height: Optional[float] = None) -> Image:
    """Returns the pixels of image within a centred window of given size."""
    return Crop(width, height)(image)


__all__ = ["Crop", "crop"]
