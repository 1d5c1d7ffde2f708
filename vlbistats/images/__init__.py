"""
Some info about :class:`vlbistats.images.Image` and :class:`vlbistats.images.Grid`.
"""
__title__ = "Images"

from .grid import Grid
from .image import Image, StokesFlux, STOKES, load_image, save_image
from .processor import ImageProcessor
