from __future__ import annotations

from typing import Optional


class SummaryStatsError(Exception):
    """Base class for all exceptions"""

    def __init__(self, message: Optional[str] = None):
        self.message = message

    def __str__(self) -> str:
        msg = f"<{self.__class__.__name__}>"
        if self.message is not None:
            msg += f" {self.message}"
        return msg


#######################################


class InvalidImageError(SummaryStatsError):
    """Image layout does not fit the requested operation, e.g. asking for Stokes V of an intensity-only image."""

    pass


class BoundsViolationError(SummaryStatsError):
    """Initial guess is missing parameters or lies outside of the declared box."""

    def __init__(self, message: Optional[str] = None, parameter: Optional[str] = None):
        SummaryStatsError.__init__(self, message)
        self.parameter = parameter


class DegenerateImageError(SummaryStatsError):
    """Reference image has no positive flux, so any divergence against it is uninformative."""

    pass


class OptimizationNonConvergenceError(SummaryStatsError):
    """Optimizer used up its evaluation budget before reaching the tolerance.

    This is a soft error: fits always return their best result and only raise this on request,
    see :meth:`vlbistats.optimize.FitResult.raise_for_convergence`.
    """

    def __init__(self, message: Optional[str] = None, divergence: Optional[float] = None):
        SummaryStatsError.__init__(self, message)
        self.divergence = divergence


__all__ = [
    "SummaryStatsError",
    "InvalidImageError",
    "BoundsViolationError",
    "DegenerateImageError",
    "OptimizationNonConvergenceError",
]
