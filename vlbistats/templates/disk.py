from typing import Dict, Optional, Tuple

import numpy as np

from vlbistats.images.grid import Grid
from vlbistats.models import Constant, GaussDisk, SkyModel
from vlbistats.optimize.parameters import Parameters
from vlbistats.templates.template import Template
from vlbistats.utils.units import uas2rad


class Disk(Template):
    """Flat disk of radius r0 with a Gaussian edge of width sigma.

    The disk is stretched by (r0, r0(1+τ)), rotated by ξτ and shifted by (x0, y0). A constant background of
    relative flux f0 is added.
    """

    __module__ = "vlbistats.templates"

    name = "disk"

    @property
    def shape(self) -> Dict[str, Optional[int]]:
        return {name: None for name in ("r0", "sigma", "tau", "xitau", "x0", "y0", "f0")}

    def lower(self, grid: Grid) -> Parameters:
        return {
            "r0": uas2rad(10.0),
            "sigma": uas2rad(1.0),
            "tau": 0.001,
            "xitau": 0.0,
            "x0": -uas2rad(15.0),
            "y0": -uas2rad(15.0),
            "f0": 1e-6,
        }

    def upper(self, grid: Grid) -> Parameters:
        return {
            "r0": uas2rad(40.0),
            "sigma": uas2rad(40.0),
            "tau": 1.0,
            "xitau": np.pi,
            "x0": uas2rad(15.0),
            "y0": uas2rad(15.0),
            "f0": 10.0,
        }

    def _initial_guess(self, grid: Grid, centroid: Tuple[float, float]) -> Parameters:
        return {
            "r0": uas2rad(20.0),
            "sigma": uas2rad(4.0),
            "tau": 0.01,
            "xitau": 0.1,
            "x0": centroid[0],
            "y0": centroid[1],
            "f0": 1e-3,
        }

    def model(self, params: Parameters, grid: Grid) -> SkyModel:
        r0 = float(params["r0"])  # type: ignore
        disk = GaussDisk(float(params["sigma"]) / r0)  # type: ignore
        return disk.modify(
            stretch=(r0, r0 * (1 + float(params["tau"]))),  # type: ignore
            rotate=float(params["xitau"]),  # type: ignore
            shift=(float(params["x0"]), float(params["y0"])),  # type: ignore
        ) + float(params["f0"]) * Constant(grid.fov_x)  # type: ignore


__all__ = ["Disk"]
