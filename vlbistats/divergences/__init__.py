"""
Divergences for comparing candidate models to a reference image.
"""
__title__ = "Divergences"

from .divergence import Divergence, get_divergence
from .leastsquares import LeastSquares
from .nxcorr import NxCorr, nxcorr_arrays

__all__ = ["Divergence", "get_divergence", "LeastSquares", "NxCorr", "nxcorr_arrays"]
