"""
Summary statistics for reconstructed VLBI images: ring fitting, resolution matching and polarimetric
quantities.
"""
__title__ = "vlbistats"

from .images import Grid, Image, load_image, save_image
from .images.processors import center_image
from .fitting import center_template, center_ring, find_template, match_center_and_res
from .polarization import evpa, netevpa, mnet, mavg, vnet, vavg, lpmodes, cpmodes, nxcorr, polnxcorr
from .summary import summary_ringparams, record_keys

__all__ = [
    "Grid",
    "Image",
    "load_image",
    "save_image",
    "center_image",
    "center_template",
    "center_ring",
    "find_template",
    "match_center_and_res",
    "evpa",
    "netevpa",
    "mnet",
    "mavg",
    "vnet",
    "vavg",
    "lpmodes",
    "cpmodes",
    "nxcorr",
    "polnxcorr",
    "summary_ringparams",
    "record_keys",
]
