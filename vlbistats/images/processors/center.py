import logging
from typing import Any

from vlbistats.images.image import Image
from vlbistats.images.processor import ImageProcessor
from vlbistats.images.processors.shift import Shift

log = logging.getLogger(__name__)


class CenterImage(ImageProcessor):
    """Shift an image so that the centroid of Stokes I lies at the origin."""

    __module__ = "vlbistats.images.processors"

    def __init__(self, **kwargs: Any):
        ImageProcessor.__init__(self, **kwargs)

    def __call__(self, image: Image) -> Image:
        """Center an image.

        Args:
            image: Image to center.

        Returns:
            Centered image.
        """
        if image.data is None or image.grid is None:
            log.warning("No data found in image.")
            return image

        x0, y0 = image.centroid()
        return Shift(-x0, -y0)(image)


def center_image(image: Image) -> Image:
    """Returns copy of image with its centroid moved to the origin."""
    return CenterImage()(image)


__all__ = ["CenterImage", "center_image"]
