import logging
from typing import Any, Optional

import scipy.ndimage

from vlbistats.images.image import Image
from vlbistats.images.processor import ImageProcessor

log = logging.getLogger(__name__)


class Smooth(ImageProcessor):
    """smooth an image with a circular Gaussian kernel."""

    __module__ = "vlbistats.images.processors"

    def __init__(
        self,
        sigma: float,
        order: int = 0,
        mode: str = "constant",
        cval: float = 0.0,
        truncate: float = 4.0,
        **kwargs: Any,
    ):
        """Init a new smoothing step.

        Args:
            sigma: Standard deviation for Gaussian kernel in radians.
            order: Derivative order of the filter, 0 for plain smoothing.
            mode: Boundary handling of scipy.ndimage.gaussian_filter, by default flux leaving the field is lost.
            cval: Brightness assumed outside the field of view for constant mode.
            truncate: Kernel radius in units of sigma.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.sigma = sigma
        self.order = order
        self.mode = mode
        self.cval = cval
        self.truncate = truncate

    def __call__(self, image: Image) -> Image:
        """Smooth an image.

        Args:
            image: Image to smooth.

        Returns:
            Smoothed image.
        """

        output_image = image.copy()
        if output_image.data is None or output_image.grid is None:
            log.warning("No data found in image.")
            return image

        # nothing to do?
        if self.sigma <= 0:
            return output_image

        # kernel width in pixels, never smooth across Stokes planes
        dx, dy = output_image.grid.pixel_sizes
        sigma = (self.sigma / dy, self.sigma / dx)
        if output_image.is_polarized:
            sigma = (0.0,) + sigma

        output_image.data = scipy.ndimage.gaussian_filter(
            output_image.data, sigma, order=self.order, mode=self.mode, cval=self.cval, truncate=self.truncate
        )

        return output_image


def smooth(image: Image, sigma: float, mode: Optional[str] = None) -> Image:
    """Convolve image with a Gaussian kernel of standard deviation sigma (radians)."""
    return Smooth(sigma)(image) if mode is None else Smooth(sigma, mode=mode)(image)


__all__ = ["Smooth", "smooth"]
