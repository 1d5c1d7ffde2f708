from typing import Any

import numpy as np
from numpy.typing import NDArray

from vlbistats.divergences.divergence import Divergence


class LeastSquares(Divergence):
    """Sum of squared pixel differences between normalized images."""

    __module__ = "vlbistats.divergences"

    def _divergence(self, reference: NDArray[Any], candidate: NDArray[Any]) -> float:
        return float(np.sum(np.square(candidate - reference)))


__all__ = ["LeastSquares"]
