from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from typing import Any, Callable, Dict, Union

import numpy as np
from numpy.typing import NDArray

from vlbistats.images.grid import Grid
from vlbistats.images.image import Image
from vlbistats.images.processors.regrid import regrid
from vlbistats.models.model import SkyModel
from vlbistats.object import create_object, get_class
from vlbistats.utils.exceptions import DegenerateImageError

log = logging.getLogger(__name__)


class Divergence(metaclass=ABCMeta):
    """Base class for divergences between a fixed reference image and candidate models or images.

    The reference is clamped at zero and both reference and candidate are normalized to unit total flux
    before comparison. Lower values indicate a better match.
    """

    __module__ = "vlbistats.divergences"

    """Value returned for candidates without any flux."""
    PENALTY = 1e10

    def __init__(self, reference: Image, strict: bool = False):
        """Init a new divergence.

        Args:
            reference: Reference image, for polarized images only Stokes I is used.
            strict: If True, raise an exception for a reference without positive flux instead of logging it.

        Raises:
            DegenerateImageError: If strict is set and reference contains no positive flux.
        """
        intensity = reference.stokes("I")
        self.grid: Grid = intensity.safe_grid

        # clamp and normalize
        data = np.maximum(intensity.safe_data, 0.0)
        total = float(np.sum(data))
        self.degenerate = not total > 0
        if self.degenerate:
            if strict:
                raise DegenerateImageError("Reference image contains no positive flux.")
            log.warning("Reference image contains no positive flux, divergence will be uninformative.")
            self.reference = data
        else:
            self.reference = data / total

    def __call__(self, candidate: Union[SkyModel, Image]) -> float:
        """Evaluate divergence for a candidate.

        Args:
            candidate: Model, which gets rendered onto the reference grid, or image, which gets resampled if
                necessary.

        Returns:
            Divergence.
        """
        data = self._sample(candidate)
        total = float(np.sum(data))
        if not np.isfinite(total) or total <= 0:
            return self.PENALTY
        return float(self._divergence(self.reference, data / total))

    def _sample(self, candidate: Union[SkyModel, Image]) -> NDArray[Any]:
        if isinstance(candidate, SkyModel):
            return candidate.intensitymap(self.grid).safe_data
        image = candidate.stokes("I")
        if image.safe_grid != self.grid:
            image = regrid(image, self.grid)
        return image.safe_data

    @abstractmethod
    def _divergence(self, reference: NDArray[Any], candidate: NDArray[Any]) -> float:
        """Actually compare two normalized images on the same grid."""
        ...


def get_divergence(divergence: Union[str, Dict[str, Any], Callable[[Image], Divergence]], reference: Image) -> Divergence:
    """Creates a divergence against a reference image.

    Args:
        divergence: Divergence class, factory, dotted class name or config dict with a class key.
        reference: Reference image.

    Returns:
        Divergence.
    """
    if isinstance(divergence, Divergence):
        raise TypeError("Need divergence class, not an instance bound to another reference.")
    if isinstance(divergence, dict):
        get_class(divergence, Divergence)
        return create_object(divergence, reference)
    if isinstance(divergence, str):
        return get_class(divergence, Divergence)(reference)
    return divergence(reference)


__all__ = ["Divergence", "get_divergence"]
