from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from vlbistats.images.grid import Grid
from vlbistats.models.model import SkyModel
from vlbistats.optimize.parameters import Parameters, flatten_parameters

log = logging.getLogger(__name__)


class Template(metaclass=ABCMeta):
    """A parametric family of models with declared bounds and an initial guess heuristic.

    Positions and sizes are in radians, all other parameters are dimensionless. Every template declares the
    same parameters, in the same order, in its bounds and in its initial guess.
    """

    __module__ = "vlbistats.templates"

    """Name used for selecting this template."""
    name: str = ""

    @abstractmethod
    def lower(self, grid: Grid) -> Parameters:
        """Lower bounds of all parameters for fitting an image on the given grid."""
        ...

    @abstractmethod
    def upper(self, grid: Grid) -> Parameters:
        """Upper bounds of all parameters for fitting an image on the given grid."""
        ...

    @abstractmethod
    def _initial_guess(self, grid: Grid, centroid: Tuple[float, float]) -> Parameters: ...

    @abstractmethod
    def model(self, params: Parameters, grid: Grid) -> SkyModel:
        """Create model for given parameters.

        Args:
            params: Template parameters.
            grid: Grid of the image to fit, used for the background component.

        Returns:
            Model.
        """
        ...

    def initial_guess(self, grid: Grid, centroid: Tuple[float, float]) -> Parameters:
        """Initial parameters, using the image centroid as seed for the position.

        The centroid is clipped into the bounds of the position parameters.

        Args:
            grid: Grid of the image to fit.
            centroid: Centroid of the image.

        Returns:
            Initial guess.
        """
        lower, upper = self.lower(grid), self.upper(grid)
        cx = float(np.clip(centroid[0], lower["x0"], upper["x0"]))
        cy = float(np.clip(centroid[1], lower["y0"], upper["y0"]))
        if (cx, cy) != tuple(centroid):
            log.debug("Centroid (%g, %g) outside of bounds, clipping it.", *centroid)
        return self._initial_guess(grid, (cx, cy))

    def model_factory(self, grid: Grid) -> Callable[[Parameters], SkyModel]:
        """Returns function creating models on the given grid from parameters only."""
        return partial(self._model_from_params, grid=grid)

    def _model_from_params(self, params: Parameters, grid: Grid) -> SkyModel:
        return self.model(params, grid)

    def postprocess(self, params: Parameters) -> Parameters:
        """Canonicalize best-fit parameters, default is to leave them alone."""
        return dict(params)

    @property
    @abstractmethod
    def shape(self) -> Dict[str, Optional[int]]:
        """Length of every tuple-valued parameter, None for scalars."""
        ...

    @property
    def names(self) -> List[str]:
        return list(self.shape.keys())

    def keys(self) -> List[str]:
        """Names of flattened parameters, e.g. s_1, s_2 for a two-component s."""
        keys: List[str] = []
        for name, length in self.shape.items():
            keys.extend([name] if length is None else [f"{name}_{i}" for i in range(1, length + 1)])
        return keys

    @staticmethod
    def flatten(params: Parameters) -> Dict[str, float]:
        """Flattens tuple-valued parameters into indexed scalars."""
        return flatten_parameters(params)


__all__ = ["Template"]
