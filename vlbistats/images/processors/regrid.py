import logging
from typing import Any

import numpy as np
from scipy.interpolate import RegularGridInterpolator

from vlbistats.images.grid import Grid
from vlbistats.images.image import Image
from vlbistats.images.processor import ImageProcessor

log = logging.getLogger(__name__)


class Regrid(ImageProcessor):
    """
    Resample an image onto a new grid.

    Surface brightness (flux per solid angle) is interpolated linearly between pixel centres and multiplied by
    the pixel area of the new grid, so the total flux is conserved as long as the new grid samples the source
    well. Everything outside the original field of view is zero.
    """

    __module__ = "vlbistats.images.processors"

    def __init__(self, grid: Grid, method: str = "linear", **kwargs: Any):
        """Init a new regrid step.

        Args:
            grid: Grid to resample onto.
            method: Interpolation method for scipy's RegularGridInterpolator.
        """
        ImageProcessor.__init__(self, **kwargs)

        # store
        self.grid = grid
        self.method = method

    def __call__(self, image: Image) -> Image:
        """Regrid an image.

        Args:
            image: Image to regrid.

        Returns:
            Image on new grid.
        """

        if image.data is None or image.grid is None:
            log.warning("No data found in image.")
            return image

        # same grid? just copy
        if image.grid == self.grid:
            return image.copy()

        # sample surface brightness
        source = image.grid
        planes = image.data if image.is_polarized else image.data[np.newaxis]
        yy, xx = np.meshgrid(self.grid.y, self.grid.x, indexing="ij")
        points = np.stack([yy.ravel(), xx.ravel()], axis=-1)
        resampled = []
        for plane in planes:
            interpolator = RegularGridInterpolator(
                (source.y, source.x),
                plane / source.pixel_area,
                method=self.method,
                bounds_error=False,
                fill_value=0.0,
            )
            resampled.append(interpolator(points).reshape(self.grid.shape) * self.grid.pixel_area)

        data = np.stack(resampled) if image.is_polarized else resampled[0]
        return image.with_data(data, grid=self.grid)


def regrid(image: Image, grid: Grid) -> Image:
    """Returns copy of image resampled onto given grid."""
    return Regrid(grid)(image)


__all__ = ["Regrid", "regrid"]
