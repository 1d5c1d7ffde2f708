import logging
from typing import Dict

from vlbistats.divergences.nxcorr import nxcorr_arrays
from vlbistats.images.image import Image
from vlbistats.utils.exceptions import InvalidImageError

log = logging.getLogger(__name__)


def _check_grids(x: Image, y: Image) -> None:
    if x.safe_grid != y.safe_grid:
        raise InvalidImageError("Images must share the same grid, regrid one of them first.")


def polnxcorr(x: Image, y: Image) -> Dict[str, float]:
    """Normalized cross correlations of linear (complex Q + iU) and circular polarization.

    Args:
        x: First polarized image.
        y: Second polarized image on the same grid.

    Returns:
        Dict with keys LP and V.

    Raises:
        InvalidImageError: If an image is not polarized or the grids differ.
    """
    if not x.is_polarized or not y.is_polarized:
        raise InvalidImageError("Polarization cross correlation needs two polarized images.")
    _check_grids(x, y)
    return {
        "LP": nxcorr_arrays(x.linearpol, y.linearpol),
        "V": nxcorr_arrays(x.stokes_data("V"), y.stokes_data("V")),
    }


def nxcorr(x: Image, y: Image) -> Dict[str, float]:
    """Normalized cross correlations of two images on the same grid.

    Returns:
        Dict with key I and, if both images are polarized, LP and V.
    """
    _check_grids(x, y)
    result = {"I": nxcorr_arrays(x.stokes_data("I"), y.stokes_data("I"))}
    if x.is_polarized and y.is_polarized:
        result.update(polnxcorr(x, y))
    return result


__all__ = ["nxcorr", "polnxcorr"]
