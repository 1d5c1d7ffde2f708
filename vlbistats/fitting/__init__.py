"""
Fitting templates to images, for centering them and for matching one image to another.
"""
__title__ = "Fitting"

from .centertemplate import center_template, center_ring, find_template
from .matchres import match_center_and_res

__all__ = ["center_template", "center_ring", "find_template", "match_center_and_res"]
