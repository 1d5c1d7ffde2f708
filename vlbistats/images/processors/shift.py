import logging
from typing import Any

import scipy.ndimage

from vlbistats.images.image import Image
from vlbistats.images.processor import ImageProcessor

log = logging.getLogger(__name__)


class Shift(ImageProcessor):
    """
    Translate an image by a physical offset.

    The new image fulfils ``new(x, y) = old(x - dx, y - dy)``, i.e. a feature at the origin ends up at
    ``(dx, dy)``. Sub-pixel offsets are handled by spline interpolation, pixels shifted in from outside
    the field of view are set to ``cval``.
    """

    __module__ = "vlbistats.images.processors"

    def __init__(self, dx: float, dy: float, order: int = 3, cval: float = 0.0, **kwargs: Any):
        """Init a new shift step.

        Args:
            dx: Offset along x in radians.
            dy: Offset along y in radians.
            order: Order of the spline interpolation.
            cval: Value for pixels shifted in from outside.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.dx = dx
        self.dy = dy
        self.order = order
        self.cval = cval

    def __call__(self, image: Image) -> Image:
        """Shift an image.

        Args:
            image: Image to shift.

        Returns:
            Shifted image.
        """

        output_image = image.copy()
        if output_image.data is None or output_image.grid is None:
            log.warning("No data found in image.")
            return image

        # offset in pixels
        px, py = output_image.grid.pixel_sizes
        offset = (self.dy / py, self.dx / px)
        if output_image.is_polarized:
            offset = (0.0,) + offset

        output_image.data = scipy.ndimage.shift(
            output_image.data, offset, order=self.order, mode="constant", cval=self.cval
        )

        return output_image


def shifted(image: Image, dx: float, dy: float) -> Image:
    """Returns copy of image translated by (dx, dy) radians."""
    return Shift(dx, dy)(image)


__all__ = ["Shift", "shifted"]
