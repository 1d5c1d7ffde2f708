"""
Net and average polarization fractions and the electric vector position angle.

Net fractions compare the total polarized flux to the total intensity, so opposing polarization directions
cancel. Average fractions are the flux-weighted mean of the per-pixel fractions, i.e. the total of the
polarized intensity magnitudes divided by the total intensity.
"""
import logging
from typing import Sequence, Union

import numpy as np

from vlbistats.images.image import Image, StokesFlux
from vlbistats.utils.exceptions import InvalidImageError

log = logging.getLogger(__name__)


def _require_polarized(image: Image) -> None:
    if not image.is_polarized:
        raise InvalidImageError("Polarized image with Stokes I, Q, U and V required.")


def _ratio(numerator: float, intensity: float) -> float:
    if intensity == 0:
        log.warning("Image has no total intensity, fraction is undefined.")
        return float("nan")
    return float(numerator / intensity)


def evpa(stokes: Union[StokesFlux, Sequence[float]]) -> float:
    """Electric vector position angle ½·atan2(U, Q) in radians for a single set of Stokes parameters."""
    _, q, u, _ = stokes
    return float(0.5 * np.arctan2(u, q))


def netevpa(image: Image) -> float:
    """EVPA of the integrated Stokes parameters of the image."""
    _require_polarized(image)
    return evpa(image.flux())  # type: ignore


def mnet(image: Image) -> float:
    """Net fractional linear polarization, |ΣQ + iΣU| / ΣI."""
    _require_polarized(image)
    flux = image.flux()
    return _ratio(np.hypot(flux.Q, flux.U), flux.I)  # type: ignore


def mavg(image: Image) -> float:
    """Average fractional linear polarization, Σ|Q + iU| / ΣI."""
    _require_polarized(image)
    return _ratio(np.sum(np.abs(image.linearpol)), np.sum(image.stokes_data("I")))


def vnet(image: Image) -> float:
    """Net fractional circular polarization, ΣV / ΣI. Keeps the sign."""
    _require_polarized(image)
    flux = image.flux()
    return _ratio(flux.V, flux.I)  # type: ignore


def vavg(image: Image) -> float:
    """Average fractional circular polarization, Σ|V| / ΣI."""
    _require_polarized(image)
    return _ratio(np.sum(np.abs(image.stokes_data("V"))), np.sum(image.stokes_data("I")))


__all__ = ["evpa", "netevpa", "mnet", "mavg", "vnet", "vavg"]
