from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from vlbistats.divergences import NxCorr, get_divergence
from vlbistats.fitting.centertemplate import DivergenceType
from vlbistats.images.grid import Grid
from vlbistats.images.image import Image
from vlbistats.images.processors.regrid import regrid
from vlbistats.images.processors.shift import shifted
from vlbistats.images.processors.smooth import smooth
from vlbistats.models.interpolated import InterpolatedImage
from vlbistats.models.model import SkyModel
from vlbistats.optimize.parameters import Parameters
from vlbistats.optimize.problem import F_TOL, TemplateProblem
from vlbistats.polarization.nxcorr import nxcorr
from vlbistats.utils.units import uas2rad

log = logging.getLogger(__name__)


"""Search range for the offset between the two images."""
MAX_OFFSET = uas2rad(20.0)

"""Search range for the blurring kernel."""
SIGMA_RANGE = (uas2rad(0.01), uas2rad(30.0))

"""Initial blurring kernel."""
SIGMA_GUESS = uas2rad(10.0)


class _ShiftedSmoothed:
    """Model factory for shifted and blurred versions of an image."""

    def __init__(self, image: Image):
        self.model = InterpolatedImage(image)

    def __call__(self, params: Parameters) -> SkyModel:
        return self.model.shifted(params["x"], params["y"]).smoothed(params["sigma"])  # type: ignore


def match_center_and_res(
    target: Image,
    input: Image,
    divergence: DivergenceType = NxCorr,
    grid: Optional[Grid] = None,
    max_iters: int = 8_000,
    seed: Optional[int] = None,
    f_tol: float = F_TOL,
) -> Tuple[Image, Dict[str, float]]:
    """Finds offset and Gaussian blur that make an input image look most like a target image.

    Only total intensity is used for the fit. If both images are polarized, the normalized cross correlations
    of total intensity, linear and circular polarization between target and matched input are reported as
    nxI, nxP and nxV.

    Args:
        target: Image to match.
        input: Image to shift and blur, usually the one with higher resolution.
        divergence: Divergence to minimize.
        grid: If given, comparison is done on this grid.
        max_iters: Maximum number of divergence evaluations.
        seed: Seed for the optimizer.
        f_tol: Convergence tolerance.

    Returns:
        Tuple of the input blurred by sigma and shifted by (x, y) on its own grid, and a dict with x, y, sigma
        and divmin.
    """

    # comparison is done on target grid, or on given one
    reference = target.stokes("I")
    if grid is not None:
        reference = regrid(reference, grid)

    problem = TemplateProblem(
        get_divergence(divergence, reference),
        _ShiftedSmoothed(input.stokes("I")),
        {"x": -MAX_OFFSET, "y": -MAX_OFFSET, "sigma": SIGMA_RANGE[0]},
        {"x": MAX_OFFSET, "y": MAX_OFFSET, "sigma": SIGMA_RANGE[1]},
    )
    log.info("Matching center and resolution...")
    fit = problem.solve({"x": 0.0, "y": 0.0, "sigma": SIGMA_GUESS}, max_iters, f_tol=f_tol, seed=seed)
    x, y, sigma = float(fit.params["x"]), float(fit.params["y"]), float(fit.params["sigma"])  # type: ignore
    log.info("Found offset (%.3g, %.3g) and blur %.3g with divergence %.5g.", x, y, sigma, fit.divergence)

    # blur first, then shift
    matched = shifted(smooth(input, sigma), x, y)
    params = {"x": x, "y": y, "sigma": sigma, "divmin": fit.divergence}

    # similarity in all Stokes parameters
    if target.is_polarized and input.is_polarized:
        comparison = reference.safe_grid
        nx = nxcorr(regrid(target, comparison), regrid(matched, comparison))
        params.update(nxI=nx["I"], nxP=nx["LP"], nxV=nx["V"])

    return matched, params


__all__ = ["match_center_and_res"]
