from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any, List, Optional, Tuple

import numpy as np
import scipy.ndimage
from numpy.typing import NDArray

from vlbistats.images.grid import Grid
from vlbistats.images.image import Image

"""Number of Gauss-Hermite nodes per axis for evaluating smoothed models at single points."""
QUADRATURE_ORDER = 12


class SkyModel(metaclass=ABCMeta):
    """Base class for continuous intensity models.

    Models are immutable. Combining (``+``), scaling (``*``) and modifying (:meth:`modify`) always creates
    new models.
    """

    __module__ = "vlbistats.models"

    # let numpy scalars defer to __rmul__
    __array_ufunc__ = None

    @abstractmethod
    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        """Surface brightness (flux per steradian) at the given positions.

        Args:
            x: X positions in radians.
            y: Y positions in radians, same shape as x.

        Returns:
            Intensities with same shape as x and y.
        """
        ...

    def intensitymap(self, grid: Grid) -> Image:
        """Render model onto a grid by sampling at the pixel centres.

        Args:
            grid: Grid to render on.

        Returns:
            Image with flux per pixel.
        """
        xx, yy = grid.meshgrid()
        return Image(data=self.intensity_point(xx, yy) * grid.pixel_area, grid=grid)

    def __add__(self, other: SkyModel) -> SkyModel:
        if not isinstance(other, SkyModel):
            return NotImplemented
        left = self.models if isinstance(self, CompositeModel) else [self]
        right = other.models if isinstance(other, CompositeModel) else [other]
        return CompositeModel(left + right)

    def __mul__(self, scale: float) -> SkyModel:
        if isinstance(scale, SkyModel):
            return NotImplemented
        return ScaledModel(self, float(scale))

    __rmul__ = __mul__

    def modify(
        self,
        stretch: Optional[Tuple[float, float]] = None,
        rotate: float = 0.0,
        shift: Tuple[float, float] = (0.0, 0.0),
    ) -> SkyModel:
        """Stretch, then rotate, then shift the model. Total flux is conserved.

        Args:
            stretch: Scale factors along x and y.
            rotate: Rotation angle in radians, measured east of north.
            shift: Offset in radians.

        Returns:
            Modified model.
        """
        return ModifiedModel(self, stretch=(1.0, 1.0) if stretch is None else stretch, rotate=rotate, shift=shift)

    def shifted(self, dx: float, dy: float) -> SkyModel:
        return self.modify(shift=(dx, dy))

    def smoothed(self, sigma: float) -> SkyModel:
        """Model convolved with a circular Gaussian of given standard deviation."""
        return SmoothedModel(self, sigma)


class CompositeModel(SkyModel):
    """Sum of several models."""

    __module__ = "vlbistats.models"

    def __init__(self, models: List[SkyModel]):
        self.models = list(models)

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        return sum((m.intensity_point(x, y) for m in self.models), np.zeros(np.shape(x)))

    def intensitymap(self, grid: Grid) -> Image:
        # components might not be point-evaluable, so render each of them
        data = sum((m.intensitymap(grid).safe_data for m in self.models), np.zeros(grid.shape))
        return Image(data=data, grid=grid)


class ScaledModel(SkyModel):
    __module__ = "vlbistats.models"

    def __init__(self, model: SkyModel, scale: float):
        self.model = model
        self.scale = scale

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        return self.scale * self.model.intensity_point(x, y)

    def intensitymap(self, grid: Grid) -> Image:
        return Image(data=self.scale * self.model.intensitymap(grid).safe_data, grid=grid)


class ModifiedModel(SkyModel):
    """Model transformed by a stretch, a rotation and a shift, applied in that order."""

    __module__ = "vlbistats.models"

    def __init__(
        self, model: SkyModel, stretch: Tuple[float, float], rotate: float, shift: Tuple[float, float]
    ):
        self.model = model
        self.stretch = (float(stretch[0]), float(stretch[1]))
        self.rotate = float(rotate)
        self.shift = (float(shift[0]), float(shift[1]))

    def to_model_frame(self, x: NDArray[Any], y: NDArray[Any]) -> Tuple[NDArray[Any], NDArray[Any]]:
        """Transforms sky coordinates into the frame of the wrapped model."""
        xs = np.asarray(x) - self.shift[0]
        ys = np.asarray(y) - self.shift[1]

        # a feature at position angle φ in the model ends up at φ + rotate on the sky
        c, s = np.cos(self.rotate), np.sin(self.rotate)
        xr = c * xs + s * ys
        yr = c * ys - s * xs
        return xr / self.stretch[0], yr / self.stretch[1]

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        xm, ym = self.to_model_frame(x, y)
        return self.model.intensity_point(xm, ym) / (self.stretch[0] * self.stretch[1])


class SmoothedModel(SkyModel):
    """Model convolved with a circular Gaussian kernel.

    On a grid the convolution is a Gaussian filter of the rendered model. Single points are evaluated with a
    Gauss-Hermite quadrature over the kernel, which requires the wrapped model to be point-evaluable.
    """

    __module__ = "vlbistats.models"

    def __init__(self, model: SkyModel, sigma: float):
        self.model = model
        self.sigma = float(sigma)

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if self.sigma <= 0:
            return self.model.intensity_point(x, y)

        # E[f(x + X)] for X ~ N(0, σ²) in both axes
        nodes, weights = np.polynomial.hermite.hermgauss(QUADRATURE_ORDER)
        offsets = np.sqrt(2.0) * self.sigma * nodes
        weights = weights / np.sqrt(np.pi)
        result = np.zeros(x.shape)
        for ox, wx in zip(offsets, weights):
            for oy, wy in zip(offsets, weights):
                result += wx * wy * self.model.intensity_point(x - ox, y - oy)
        return result

    def modify(
        self,
        stretch: Optional[Tuple[float, float]] = None,
        rotate: float = 0.0,
        shift: Tuple[float, float] = (0.0, 0.0),
    ) -> SkyModel:
        # circular kernels commute with rotations and shifts, an isotropic stretch scales them
        if stretch is None or stretch[0] == stretch[1]:
            scale = 1.0 if stretch is None else abs(float(stretch[0]))
            return SmoothedModel(self.model.modify(stretch=stretch, rotate=rotate, shift=shift), self.sigma * scale)
        return SkyModel.modify(self, stretch=stretch, rotate=rotate, shift=shift)

    def intensitymap(self, grid: Grid) -> Image:
        data = self.model.intensitymap(grid).safe_data
        if self.sigma > 0:
            dx, dy = grid.pixel_sizes
            data = scipy.ndimage.gaussian_filter(data, (self.sigma / dy, self.sigma / dx), mode="constant")
        return Image(data=data, grid=grid)


__all__ = ["SkyModel", "CompositeModel", "ScaledModel", "ModifiedModel", "SmoothedModel"]
