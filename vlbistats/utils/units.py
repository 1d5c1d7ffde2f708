from typing import Any

import astropy.units as u
import numpy as np


def _convert(value: Any, from_unit: u.UnitBase, to_unit: u.UnitBase) -> Any:
    converted = (np.asarray(value, dtype=float) * from_unit).to_value(to_unit)
    return float(converted) if np.ndim(converted) == 0 else converted


def uas2rad(value: Any) -> Any:
    """Converts microarcseconds to radians.

    Args:
        value: Scalar or array in μas.

    Returns:
        Same value in radians, float for scalar input.
    """
    return _convert(value, u.uas, u.rad)


def rad2uas(value: Any) -> Any:
    """Converts radians to microarcseconds."""
    return _convert(value, u.rad, u.uas)


def deg2rad(value: Any) -> Any:
    """Converts degrees (e.g. a FITS CDELT) to radians."""
    return _convert(value, u.deg, u.rad)


def rad2deg(value: Any) -> Any:
    return _convert(value, u.rad, u.deg)


def fwhm2sigma(fwhm: float) -> float:
    """Standard deviation of a Gaussian with given full width at half maximum."""
    return fwhm / (2.0 * np.sqrt(2.0 * np.log(2.0)))


__all__ = ["uas2rad", "rad2uas", "deg2rad", "rad2deg", "fwhm2sigma"]
