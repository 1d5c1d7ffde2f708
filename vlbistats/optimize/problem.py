from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import numpy as np
from scipy.optimize import differential_evolution

from vlbistats.divergences.divergence import Divergence
from vlbistats.models.model import SkyModel
from vlbistats.optimize.parameters import ParameterSpace, Parameters, ParameterValue
from vlbistats.utils.exceptions import OptimizationNonConvergenceError

log = logging.getLogger(__name__)

"""Default relative tolerance on the spread of objective values in the population."""
F_TOL = 1e-5

"""Objective value used for non-finite evaluations."""
PENALTY = 1e10


@dataclass
class FitResult:
    """Result of an optimization.

    Attributes:
        params: Best parameters.
        model: Best model, if a model factory was used.
        divergence: Objective value at the best parameters.
        converged: Whether the tolerance criterion was reached within the evaluation budget.
        evaluations: Number of objective evaluations.
        message: Message from the optimizer.
    """

    params: Parameters
    divergence: float
    converged: bool
    evaluations: int
    model: Optional[SkyModel] = None
    message: str = field(default="")

    def raise_for_convergence(self) -> None:
        """Raises OptimizationNonConvergenceError, if optimization did not converge."""
        if not self.converged:
            raise OptimizationNonConvergenceError(
                f"Optimizer did not converge ({self.message}), best divergence {self.divergence:.4g}.",
                divergence=self.divergence,
            )


def optimize(
    objective: Callable[[Parameters], float],
    lower: Mapping[str, ParameterValue],
    upper: Mapping[str, ParameterValue],
    initial_guess: Mapping[str, ParameterValue],
    max_evaluations: int = 10_000,
    f_tol: float = F_TOL,
    seed: Optional[int] = None,
    popsize: int = 15,
) -> FitResult:
    """Minimize an objective over a box using differential evolution.

    The initial guess is injected into the initial population, the number of generations is derived from the
    evaluation budget, and no gradient-based polishing is done afterwards, so the budget is never exceeded by
    more than one generation.

    Args:
        objective: Function taking a parameter dict and returning a scalar.
        lower: Lower bounds.
        upper: Upper bounds.
        initial_guess: Initial parameters, must lie within the bounds.
        max_evaluations: Maximum number of objective evaluations.
        f_tol: Relative tolerance on the spread of objective values in the population.
        seed: Seed for the random number generator.
        popsize: Population size as multiple of the number of scalar parameters.

    Returns:
        Best parameters found.

    Raises:
        BoundsViolationError: If initial guess does not fit the bounds.
    """

    # check initial guess before doing anything expensive
    space = ParameterSpace(lower, upper)
    space.check(initial_guess)

    # budget in generations
    population = popsize * space.size
    max_generations = max(1, max_evaluations // population - 1)

    def func(vector: np.ndarray) -> float:
        value = objective(space.from_vector(vector))
        return float(value) if np.isfinite(value) else PENALTY

    # fixed coordinates (lower == upper) stay at their value
    bounds = list(space.bounds)

    log.debug("Optimizing %d parameters with %d generations of %d members.", space.size, max_generations, population)
    result = differential_evolution(
        func,
        bounds,
        maxiter=max_generations,
        popsize=popsize,
        tol=f_tol,
        seed=seed,
        polish=False,
        x0=space.to_vector(initial_guess),
    )

    fit = FitResult(
        params=space.from_vector(np.clip(result.x, space.lower, space.upper)),
        divergence=float(result.fun),
        converged=bool(result.success),
        evaluations=int(result.nfev),
        message=str(result.message),
    )
    if not fit.converged:
        log.warning("Optimizer stopped without convergence after %d evaluations: %s", fit.evaluations, fit.message)
    return fit


class TemplateProblem:
    """Fit of a parametrized model to a reference image by minimizing a divergence."""

    def __init__(
        self,
        divergence: Divergence,
        model_factory: Callable[[Parameters], SkyModel],
        lower: Mapping[str, ParameterValue],
        upper: Mapping[str, ParameterValue],
    ):
        """Create a new problem.

        Args:
            divergence: Divergence against the reference image.
            model_factory: Function creating a model from parameters.
            lower: Lower bounds.
            upper: Upper bounds.
        """
        self.divergence = divergence
        self.model_factory = model_factory
        self.lower = dict(lower)
        self.upper = dict(upper)

    def __call__(self, params: Parameters) -> float:
        """Objective function."""
        return self.divergence(self.model_factory(params))

    def solve(
        self,
        initial_guess: Mapping[str, ParameterValue],
        max_evaluations: int = 10_000,
        f_tol: float = F_TOL,
        seed: Optional[int] = None,
    ) -> FitResult:
        """Solve problem.

        Args:
            initial_guess: Initial parameters.
            max_evaluations: Maximum number of divergence evaluations.
            f_tol: Tolerance for convergence.
            seed: Seed for random number generator.

        Returns:
            Fit result including the best model.
        """
        fit = optimize(self, self.lower, self.upper, initial_guess, max_evaluations, f_tol=f_tol, seed=seed)
        fit.model = self.model_factory(fit.params)
        return fit


__all__ = ["FitResult", "optimize", "TemplateProblem", "F_TOL"]
