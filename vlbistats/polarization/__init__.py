"""
Polarimetric summary statistics. All functions need images with all four Stokes parameters.
"""
__title__ = "Polarization"

from .fractions import evpa, netevpa, mnet, mavg, vnet, vavg
from .modes import lpmodes, cpmodes
from .nxcorr import nxcorr, polnxcorr

__all__ = ["evpa", "netevpa", "mnet", "mavg", "vnet", "vavg", "lpmodes", "cpmodes", "nxcorr", "polnxcorr"]
