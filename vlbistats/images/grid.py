from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np
from numpy.typing import NDArray

from vlbistats.utils.units import uas2rad


@dataclass(frozen=True)
class Grid:
    """Regular pixel grid over a field of view, centred on the origin.

    Pixel ``[iy, ix]`` of an image on this grid covers the pixel centred at ``(x[ix], y[iy])``. All angles are
    in radians.
    """

    __module__ = "vlbistats.images"

    fov_x: float
    fov_y: float
    nx: int
    ny: int

    def __post_init__(self) -> None:
        if self.nx < 1 or self.ny < 1:
            raise ValueError("Grid needs at least one pixel per axis.")
        if not (self.fov_x > 0 and self.fov_y > 0):
            raise ValueError("Field of view must be positive.")

        # store canonical types, dataclass is frozen
        object.__setattr__(self, "fov_x", float(self.fov_x))
        object.__setattr__(self, "fov_y", float(self.fov_y))
        object.__setattr__(self, "nx", int(self.nx))
        object.__setattr__(self, "ny", int(self.ny))

    @classmethod
    def from_uas(cls, fov_x: float, fov_y: float, nx: int, ny: int) -> Grid:
        """Create grid with field of view given in μas."""
        return cls(uas2rad(fov_x), uas2rad(fov_y), nx, ny)

    @classmethod
    def from_pixel_sizes(cls, dx: float, dy: float, nx: int, ny: int) -> Grid:
        return cls(dx * nx, dy * ny, nx, ny)

    @property
    def shape(self) -> Tuple[int, int]:
        """Shape of a single image plane on this grid, i.e. (ny, nx)."""
        return self.ny, self.nx

    @property
    def fov(self) -> Tuple[float, float]:
        return self.fov_x, self.fov_y

    @property
    def pixel_sizes(self) -> Tuple[float, float]:
        return self.fov_x / self.nx, self.fov_y / self.ny

    @property
    def pixel_area(self) -> float:
        dx, dy = self.pixel_sizes
        return dx * dy

    @property
    def x(self) -> NDArray[Any]:
        """Pixel centres along x."""
        dx = self.fov_x / self.nx
        return -self.fov_x / 2.0 + dx / 2.0 + dx * np.arange(self.nx)

    @property
    def y(self) -> NDArray[Any]:
        """Pixel centres along y."""
        dy = self.fov_y / self.ny
        return -self.fov_y / 2.0 + dy / 2.0 + dy * np.arange(self.ny)

    def meshgrid(self) -> Tuple[NDArray[Any], NDArray[Any]]:
        """Returns X and Y coordinates of all pixels, both of shape (ny, nx)."""
        return np.meshgrid(self.x, self.y)

    def polar(self) -> Tuple[NDArray[Any], NDArray[Any]]:
        """Returns radius and position angle of all pixels.

        The angle is measured east of north, i.e. θ = atan2(-x, y).
        """
        xx, yy = self.meshgrid()
        return np.hypot(xx, yy), np.arctan2(-xx, yy)

    def box_mask(self, x_range: Tuple[float, float], y_range: Tuple[float, float]) -> NDArray[Any]:
        """Boolean mask of all pixels whose centres lie within the closed box."""
        xx, yy = self.meshgrid()
        return (xx >= x_range[0]) & (xx <= x_range[1]) & (yy >= y_range[0]) & (yy <= y_range[1])


__all__ = ["Grid"]
