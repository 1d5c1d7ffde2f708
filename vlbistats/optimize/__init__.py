"""
Global optimization of parametrized templates.
"""
__title__ = "Optimization"

from .parameters import ParameterSpace, Parameters, ParameterValue, flatten_parameters
from .problem import FitResult, optimize, TemplateProblem, F_TOL

__all__ = [
    "ParameterSpace",
    "Parameters",
    "ParameterValue",
    "flatten_parameters",
    "FitResult",
    "optimize",
    "TemplateProblem",
    "F_TOL",
]
