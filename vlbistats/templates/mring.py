from typing import Dict, Optional, Tuple

import numpy as np

from vlbistats.images.grid import Grid
from vlbistats.models import AzimuthalCosine, Constant, RadialGaussian, RingTemplate, SkyModel
from vlbistats.optimize.parameters import Parameters
from vlbistats.templates.template import Template
from vlbistats.utils.units import uas2rad


class MRing(Template):
    r"""Ring with a radial Gaussian profile and an azimuthal cosine expansion of order N.

    The model is

    .. math::

        I(r, θ) ∝ \exp\left(-\frac{(r - 1)^2}{2 (σ/r_0)^2}\right)
                  \left(1 - \sum_{n=1}^{N} s_n \cos(n(θ - ξ_n))\right)

    in coordinates stretched by (r0, r0(1+τ)), rotated by ξτ and shifted by (x0, y0), plus a constant
    background of relative flux f0. Here θ = atan2(-x, y) is measured east of north.

    Parameters:
        - ``r0``: Radius of the ring.
        - ``sigma``: Standard deviation of the radial profile.
        - ``s``: Tuple of coefficients of the azimuthal expansion.
        - ``xi``: Tuple of phases of the azimuthal expansion.
        - ``tau``: Ellipticity, the ring is stretched by 1+tau along the axis given by xitau.
        - ``xitau``: Position angle of the stretch.
        - ``x0``, ``y0``: Centre of the ring.
        - ``f0``: Flux of the constant background relative to the ring.
    """

    __module__ = "vlbistats.templates"

    name = "mring"

    def __init__(self, order: int = 1):
        """Create new ring template.

        Args:
            order: Number of azimuthal cosine terms.
        """
        if order < 1:
            raise ValueError("Order of ring template must be at least 1.")
        self.order = order

    @property
    def shape(self) -> Dict[str, Optional[int]]:
        return {
            "r0": None,
            "sigma": None,
            "s": self.order,
            "xi": self.order,
            "tau": None,
            "xitau": None,
            "x0": None,
            "y0": None,
            "f0": None,
        }

    def lower(self, grid: Grid) -> Parameters:
        n = self.order
        return {
            "r0": uas2rad(10.0),
            "sigma": uas2rad(0.5),
            "s": (0.001,) * n,
            "xi": (0.0,) * n,
            "tau": 0.0,
            "xitau": 0.0,
            "x0": -uas2rad(20.0),
            "y0": -uas2rad(20.0),
            "f0": 1e-6,
        }

    def upper(self, grid: Grid) -> Parameters:
        n = self.order
        return {
            "r0": uas2rad(30.0),
            "sigma": uas2rad(15.0),
            "s": (0.999,) * n,
            "xi": (2 * np.pi,) * n,
            "tau": 1.0,
            "xitau": np.pi,
            "x0": uas2rad(20.0),
            "y0": uas2rad(20.0),
            "f0": 10.0,
        }

    def _initial_guess(self, grid: Grid, centroid: Tuple[float, float]) -> Parameters:
        n = self.order
        return {
            "r0": uas2rad(16.0),
            "sigma": uas2rad(4.0),
            "s": (0.2,) * n,
            "xi": (np.pi,) * n,
            "tau": 0.01,
            "xitau": 0.5 * np.pi,
            "x0": centroid[0],
            "y0": centroid[1],
            "f0": 0.1,
        }

    def model(self, params: Parameters, grid: Grid) -> SkyModel:
        r0 = params["r0"]
        tau = params["tau"]
        xitau = params["xitau"]

        # phases are defined on the sky, so undo the rotation
        phases = tuple(xi - xitau for xi in params["xi"])  # type: ignore
        ring = RingTemplate(RadialGaussian(params["sigma"] / r0), AzimuthalCosine(params["s"], phases))  # type: ignore
        return ring.modify(
            stretch=(r0, r0 * (1 + tau)),  # type: ignore
            rotate=xitau,  # type: ignore
            shift=(params["x0"], params["y0"]),  # type: ignore
        ) + params["f0"] * Constant(grid.fov_x)


__all__ = ["MRing"]
