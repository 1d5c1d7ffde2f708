from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple, Union

from vlbistats.divergences import Divergence, LeastSquares, get_divergence
from vlbistats.images.grid import Grid
from vlbistats.images.image import Image
from vlbistats.images.processors.regrid import regrid
from vlbistats.images.processors.shift import shifted
from vlbistats.models.model import SkyModel
from vlbistats.optimize.parameters import Parameters
from vlbistats.optimize.problem import F_TOL, FitResult, TemplateProblem
from vlbistats.templates import MRing, Template, get_template

log = logging.getLogger(__name__)

"""A divergence is given as class (or factory) taking the reference image, or by class name."""
DivergenceType = Union[str, Dict[str, Any], Callable[[Image], Divergence]]


def find_template(
    image: Image,
    template: Union[str, Template, Dict[str, Any]],
    grid: Optional[Grid] = None,
    divergence: DivergenceType = LeastSquares,
    max_iters: int = 10_000,
    seed: Optional[int] = None,
    f_tol: float = F_TOL,
) -> FitResult:
    """Fits a template to the total intensity of an image.

    Args:
        image: Image to fit, for polarized images only Stokes I is used.
        template: Template, its name or a config dict with a class key.
        grid: If given, the image is resampled onto this grid before fitting.
        divergence: Divergence to minimize.
        max_iters: Maximum number of divergence evaluations.
        seed: Seed for the optimizer.
        f_tol: Convergence tolerance.

    Returns:
        Fit result with canonicalized parameters and best model.

    Raises:
        BoundsViolationError: If the initial guess does not fit into the template bounds.
    """
    template = get_template(template)

    # fit only total intensity, on the requested grid
    intensity = image.stokes("I")
    if grid is not None:
        intensity = regrid(intensity, grid)
    fit_grid = intensity.safe_grid

    # set up problem, the centroid seeds the position
    centroid = intensity.centroid()
    problem = TemplateProblem(
        get_divergence(divergence, intensity),
        template.model_factory(fit_grid),
        template.lower(fit_grid),
        template.upper(fit_grid),
    )
    log.info("Fitting %s template, seeded at centroid (%.3g, %.3g)...", template.name, *centroid)
    fit = problem.solve(template.initial_guess(fit_grid, centroid), max_iters, f_tol=f_tol, seed=seed)

    # canonical parameters and the model for them
    fit.params = template.postprocess(fit.params)
    fit.model = template.model(fit.params, fit_grid)
    log.info("Finished fit after %d evaluations with divergence %.5g.", fit.evaluations, fit.divergence)
    return fit


def center_template(
    image: Image,
    template: Union[str, Template, Dict[str, Any]],
    grid: Optional[Grid] = None,
    divergence: DivergenceType = LeastSquares,
    max_iters: int = 10_000,
    seed: Optional[int] = None,
    f_tol: float = F_TOL,
) -> Tuple[Image, Parameters, SkyModel]:
    """Centers an image on the best-fit position of a template.

    The fit is done as in :func:`find_template`, afterwards the full image, including all Stokes parameters
    and on its original grid, is shifted by (-x0, -y0).

    Returns:
        Tuple of centered image, best-fit parameters and best-fit model.
    """
    fit = find_template(
        image, template, grid=grid, divergence=divergence, max_iters=max_iters, seed=seed, f_tol=f_tol
    )
    centered = shifted(image, -fit.params["x0"], -fit.params["y0"])  # type: ignore
    return centered, fit.params, fit.model  # type: ignore


def center_ring(image: Image, order: int = 1, **kwargs: Any) -> Tuple[Image, Parameters, SkyModel]:
    """Centers an image using a ring template of given order, see :func:`center_template`."""
    return center_template(image, MRing(order), **kwargs)


__all__ = ["find_template", "center_template", "center_ring"]
