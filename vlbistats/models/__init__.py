"""
Continuous intensity models that templates are built from.
"""
__title__ = "Sky models"

from .model import SkyModel, CompositeModel, ScaledModel, ModifiedModel, SmoothedModel
from .geometric import Gaussian, GaussDisk, RadialGaussian, AzimuthalCosine, RingTemplate, Constant
from .interpolated import InterpolatedImage

__all__ = [
    "SkyModel",
    "CompositeModel",
    "ScaledModel",
    "ModifiedModel",
    "SmoothedModel",
    "Gaussian",
    "GaussDisk",
    "RadialGaussian",
    "AzimuthalCosine",
    "RingTemplate",
    "Constant",
    "InterpolatedImage",
]
