from typing import Dict, Optional, Tuple

from vlbistats.images.grid import Grid
from vlbistats.models import Constant, Gaussian, SkyModel
from vlbistats.optimize.parameters import Parameters
from vlbistats.templates.template import Template


def _gauss(sigma: float, x: float, y: float) -> SkyModel:
    return Gaussian().modify(stretch=(sigma, sigma), shift=(x, y))


class DualGaussian(Template):
    """Two circular Gaussians plus a constant background.

    The first Gaussian (sigma1 at x0, y0) has unit flux, the second one (sigma2 at x1, y1) has flux f2, the
    background has flux f0. After fitting, the components are ordered so that the one with the smaller x is
    reported first.
    """

    __module__ = "vlbistats.templates"

    name = "gaussian"

    @property
    def shape(self) -> Dict[str, Optional[int]]:
        return {name: None for name in ("sigma1", "x0", "y0", "sigma2", "x1", "y1", "f2", "f0")}

    def lower(self, grid: Grid) -> Parameters:
        sigma_min = 2 * min(grid.pixel_sizes)
        return {
            "sigma1": sigma_min,
            "x0": -grid.fov_x / 2,
            "y0": -grid.fov_y / 2,
            "sigma2": sigma_min,
            "x1": -grid.fov_x / 2,
            "y1": -grid.fov_y / 2,
            "f2": 0.0,
            "f0": 1e-6,
        }

    def upper(self, grid: Grid) -> Parameters:
        sigma_max = max(grid.fov) / 3
        return {
            "sigma1": sigma_max,
            "x0": grid.fov_x / 2,
            "y0": grid.fov_y / 2,
            "sigma2": sigma_max,
            "x1": grid.fov_x / 2,
            "y1": grid.fov_y / 2,
            "f2": 6.0,
            "f0": 10.0,
        }

    def _initial_guess(self, grid: Grid, centroid: Tuple[float, float]) -> Parameters:
        sigma = (2 * min(grid.pixel_sizes) + max(grid.fov) / 3) / 2
        return {
            "sigma1": sigma,
            "x0": centroid[0],
            "y0": centroid[1],
            "sigma2": sigma,
            "x1": centroid[0],
            "y1": centroid[1],
            "f2": 0.5,
            "f0": 1e-3,
        }

    def model(self, params: Parameters, grid: Grid) -> SkyModel:
        p = {k: float(v) for k, v in params.items()}  # type: ignore
        return (
            _gauss(p["sigma1"], p["x0"], p["y0"])
            + p["f2"] * _gauss(p["sigma2"], p["x1"], p["y1"])
            + p["f0"] * Constant(grid.fov_x)
        )

    def postprocess(self, params: Parameters) -> Parameters:
        """Swap both components, if the first one lies at larger x.

        Fluxes are relative to the first component, so on a swap f2 is inverted and f0 is divided by the old f2.
        The swapped model only differs in total flux, which all divergences normalize away. Without a second
        component (f2 = 0) its position is meaningless, so nothing is swapped.
        """
        p = dict(params)
        if p["x0"] <= p["x1"] or p["f2"] == 0:  # type: ignore
            return p
        return {
            "sigma1": p["sigma2"],
            "x0": p["x1"],
            "y0": p["y1"],
            "sigma2": p["sigma1"],
            "x1": p["x0"],
            "y1": p["y0"],
            "f2": 1.0 / p["f2"],  # type: ignore
            "f0": p["f0"] / p["f2"],  # type: ignore
        }


__all__ = ["DualGaussian"]
