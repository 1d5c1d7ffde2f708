"""
Geometric primitives for template fitting. All primitives are defined in dimensionless coordinates with a
characteristic size of one and unit total flux; physical sizes, orientations and positions come from
:meth:`vlbistats.models.SkyModel.modify`.

Position angles follow the convention θ = atan2(-x, y), i.e. they are measured east of north.
"""
from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.special import erf

from vlbistats.models.model import SkyModel


class Gaussian(SkyModel):
    """Circular Gaussian with unit standard deviation."""

    __module__ = "vlbistats.models"

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        r2 = np.square(x) + np.square(y)
        return np.exp(-r2 / 2.0) / (2.0 * np.pi)


class GaussDisk(SkyModel):
    """Flat disk of unit radius whose edge falls off like a Gaussian of width alpha."""

    __module__ = "vlbistats.models"

    def __init__(self, alpha: float):
        self.alpha = float(alpha)
        self._norm = np.pi + 2.0 * np.pi * (self.alpha**2 + self.alpha * np.sqrt(np.pi / 2.0))

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        r = np.hypot(x, y)
        edge = np.exp(-np.square(np.maximum(r - 1.0, 0.0)) / (2.0 * self.alpha**2))
        return edge / self._norm


class RadialGaussian:
    """Radial profile of a ring of unit radius, exp(-(r-1)²/(2α²))."""

    def __init__(self, alpha: float):
        self.alpha = float(alpha)

    def __call__(self, r: NDArray[Any]) -> NDArray[Any]:
        return np.exp(-np.square(r - 1.0) / (2.0 * self.alpha**2))

    def radial_integral(self) -> float:
        """Integral of r·f(r) from 0 to infinity."""
        a = self.alpha
        return float(
            a**2 * np.exp(-1.0 / (2.0 * a**2)) + np.sqrt(np.pi / 2.0) * a * (1.0 + erf(1.0 / (np.sqrt(2.0) * a)))
        )


class AzimuthalCosine:
    """Azimuthal brightness profile 1 - Σ sₙ cos(n(θ - ξₙ)), n = 1..N."""

    def __init__(self, s: Sequence[float], xi: Sequence[float]):
        if len(s) != len(xi):
            raise ValueError("Need same number of amplitudes and phases.")
        self.s = tuple(float(v) for v in s)
        self.xi = tuple(float(v) for v in xi)

    def __call__(self, theta: NDArray[Any]) -> NDArray[Any]:
        result = np.ones(np.shape(theta))
        for n, (s, xi) in enumerate(zip(self.s, self.xi), 1):
            result -= s * np.cos(n * (theta - xi))
        return result


class RingTemplate(SkyModel):
    """Ring of unit radius with a radial and an azimuthal profile."""

    __module__ = "vlbistats.models"

    def __init__(self, radial: RadialGaussian, azimuthal: AzimuthalCosine):
        self.radial = radial
        self.azimuthal = azimuthal

        # cosine terms integrate to zero over the full circle
        self._norm = 2.0 * np.pi * radial.radial_integral()

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        r = np.hypot(x, y)
        theta = np.arctan2(-np.asarray(x), np.asarray(y))
        return self.radial(r) * self.azimuthal(theta) / self._norm


class Constant(SkyModel):
    """Uniform brightness with unit flux over a square of given side length."""

    __module__ = "vlbistats.models"

    def __init__(self, scale: float):
        self.scale = float(scale)

    def intensity_point(self, x: NDArray[Any], y: NDArray[Any]) -> NDArray[Any]:
        return np.full(np.shape(x), 1.0 / self.scale**2)


__all__ = ["Gaussian", "GaussDisk", "RadialGaussian", "AzimuthalCosine", "RingTemplate", "Constant"]
