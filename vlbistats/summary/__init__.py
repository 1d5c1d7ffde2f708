"""
Summary statistics of ring-like images, one flat record per image.
"""
__title__ = "Summary"

from .ringparams import summary_ringparams, record_keys

__all__ = ["summary_ringparams", "record_keys"]
