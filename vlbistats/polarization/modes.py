"""
Azimuthal mode decomposition of linear and circular polarization.

For a mode m the coefficient is

    β_m = Σ P(r, θ) exp(i m θ) / Σ I(r, θ)

with both sums over the annulus rmin <= r <= rmax, P = Q + iU for linear and P = V for circular polarization,
and θ = atan2(-x, y) measured east of north.
"""
import logging
from typing import Iterable, Tuple

import numpy as np
from numpy.typing import NDArray

from vlbistats.images.image import Image
from vlbistats.utils.exceptions import InvalidImageError
from vlbistats.utils.units import uas2rad

log = logging.getLogger(__name__)

"""Default outer radius of the annulus."""
RMAX = uas2rad(60.0)


def _modes(image: Image, pol: NDArray, modes: Iterable[int], rmin: float, rmax: float) -> Tuple[complex, ...]:
    if rmin < 0 or rmax <= rmin:
        raise ValueError("Need 0 <= rmin < rmax.")

    # annulus
    r, theta = image.safe_grid.polar()
    mask = (r >= rmin) & (r <= rmax)
    intensity = float(np.sum(image.stokes_data("I")[mask]))
    if intensity == 0:
        log.warning("No total intensity within annulus, modes are undefined.")
        return tuple(complex(np.nan, np.nan) for _ in modes)

    # project polarization onto modes
    pol = pol[mask]
    theta = theta[mask]
    return tuple(complex(np.sum(pol * np.exp(1j * m * theta)) / intensity) for m in modes)


def lpmodes(image: Image, modes: Iterable[int], rmin: float = 0.0, rmax: float = RMAX) -> Tuple[complex, ...]:
    """Azimuthal modes of the linear polarization.

    Args:
        image: Polarized image, centred on the origin.
        modes: Modes to compute.
        rmin: Inner radius of annulus in radians.
        rmax: Outer radius of annulus in radians.

    Returns:
        Complex coefficients β_m for the requested modes, in same order.

    Raises:
        InvalidImageError: If the image is not polarized.
    """
    if not image.is_polarized:
        raise InvalidImageError("Linear polarization modes need a polarized image.")
    return _modes(image, image.linearpol, modes, rmin, rmax)


def cpmodes(image: Image, modes: Iterable[int], rmin: float = 0.0, rmax: float = RMAX) -> Tuple[complex, ...]:
    """Azimuthal modes of the circular polarization, see :func:`lpmodes`."""
    if not image.is_polarized:
        raise InvalidImageError("Circular polarization modes need a polarized image.")
    return _modes(image, image.stokes_data("V").astype(complex), modes, rmin, rmax)


__all__ = ["lpmodes", "cpmodes"]
