from typing import Any

import numpy as np
from numpy.typing import NDArray

from vlbistats.divergences.divergence import Divergence


def nxcorr_arrays(a: NDArray[Any], b: NDArray[Any]) -> float:
    """Normalized cross-correlation <a, b> / sqrt(<a, a> <b, b>) of two arrays.

    For complex arrays the real part of <a, conj(b)> is used. Returns 0 if either array vanishes.
    """
    norm = np.sqrt(np.sum(np.abs(a) ** 2) * np.sum(np.abs(b) ** 2))
    if norm == 0:
        return 0.0
    return float(np.real(np.sum(a * np.conj(b))) / norm)


class NxCorr(Divergence):
    """One minus the normalized cross-correlation, invariant to the overall flux scale."""

    __module__ = "vlbistats.divergences"

    def _divergence(self, reference: NDArray[Any], candidate: NDArray[Any]) -> float:
        return 1.0 - nxcorr_arrays(candidate, reference)


__all__ = ["NxCorr", "nxcorr_arrays"]
