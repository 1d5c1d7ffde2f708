from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.interpolate import RegularGridInterpolator

from vlbistats.images.image import Image
from vlbistats.models.model import SkyModel


class InterpolatedImage(SkyModel):
    """Continuous representation of an intensity-only pixel image.

    Surface brightness is interpolated between pixel centres and vanishes outside the image.
    """

    __module__ = "vlbistats.models"

    def __init__(self, image: Image, method: str = "linear"):
        """Create a new continuous image.

        Args:
            image: Intensity-only image, for polarized images pass image.stokes("I").
            method: Interpolation method for scipy's RegularGridInterpolator.
        """
        data = image.safe_data
        if data.ndim != 2:
            raise ValueError("Can only interpolate single-plane images.")
        grid = image.safe_grid
        self.grid = grid
        self._interpolator = RegularGridInterpolator(
            (grid.y, grid.x), data / grid.pixel_area, method=method, bounds_error=False, fill_value=0.0
        )

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        points = np.stack([y.ravel(), x.ravel()], axis=-1)
        return self._interpolator(points).reshape(x.shape)


__all__ = ["InterpolatedImage"]
