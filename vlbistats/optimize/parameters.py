from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from vlbistats.utils.exceptions import BoundsViolationError

"""A parameter value, either a scalar or a fixed-length tuple of scalars."""
ParameterValue = Union[float, Tuple[float, ...]]

"""Ordered mapping of parameter names to values."""
Parameters = Dict[str, ParameterValue]


class ParameterSpace:
    """Box-bounded parameter space, where tuple-valued parameters are flattened into independent scalars.

    The order of the parameters is taken from the lower bounds.
    """

    def __init__(self, lower: Mapping[str, ParameterValue], upper: Mapping[str, ParameterValue]):
        """Create new parameter space.

        Args:
            lower: Lower bounds for all parameters.
            upper: Upper bounds for all parameters, same names and shapes as lower.

        Raises:
            ValueError: If lower and upper do not match or lower > upper anywhere.
        """
        if list(lower.keys()) != list(upper.keys()):
            raise ValueError("Lower and upper bounds must define the same parameters in the same order.")

        # layout of flat vector, None for scalars, length for tuples
        self._layout: List[Tuple[str, Optional[int]]] = []
        for name, value in lower.items():
            length = self._length(value)
            if length != self._length(upper[name]):
                raise ValueError(f"Lower and upper bounds for {name} have different shapes.")
            self._layout.append((name, length))

        self.lower = self.to_vector(lower)
        self.upper = self.to_vector(upper)
        if np.any(self.lower > self.upper):
            raise ValueError("Lower bounds must not exceed upper bounds.")

    @staticmethod
    def _length(value: ParameterValue) -> Optional[int]:
        return len(value) if isinstance(value, (tuple, list, np.ndarray)) else None

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self._layout]

    @property
    def size(self) -> int:
        """Number of scalar coordinates."""
        return sum(1 if length is None else length for _, length in self._layout)

    @property
    def bounds(self) -> List[Tuple[float, float]]:
        """Bounds of all scalar coordinates as (lower, upper) pairs."""
        return [(float(lo), float(hi)) for lo, hi in zip(self.lower, self.upper)]

    def to_vector(self, params: Mapping[str, ParameterValue]) -> NDArray[Any]:
        """Flatten parameters into a vector."""
        values: List[float] = []
        for name, length in self._layout:
            value = params[name]
            if length is None:
                values.append(float(value))  # type: ignore
            else:
                values.extend(float(v) for v in value)  # type: ignore
        return np.array(values, dtype=float)

    def from_vector(self, vector: Sequence[float]) -> Parameters:
        """Build parameters from a flat vector."""
        params: Parameters = {}
        i = 0
        for name, length in self._layout:
            if length is None:
                params[name] = float(vector[i])
                i += 1
            else:
                params[name] = tuple(float(v) for v in vector[i : i + length])
                i += length
        return params

    def check(self, params: Mapping[str, ParameterValue]) -> None:
        """Checks that parameters define exactly this space's parameters and lie within the bounds.

        Args:
            params: Parameters to check.

        Raises:
            BoundsViolationError: If a parameter is missing, unknown, of wrong shape or out of bounds.
        """
        missing = set(self.names) - set(params.keys())
        extra = set(params.keys()) - set(self.names)
        if missing or extra:
            raise BoundsViolationError(
                f"Parameters do not match bounds (missing: {sorted(missing)}, unknown: {sorted(extra)})."
            )

        i = 0
        for name, length in self._layout:
            if self._length(params[name]) != length:
                raise BoundsViolationError(f"Parameter {name} has wrong shape.", parameter=name)
            values = [params[name]] if length is None else list(params[name])  # type: ignore
            for value in values:
                lo, hi = self.lower[i], self.upper[i]
                if not lo <= float(value) <= hi:
                    raise BoundsViolationError(
                        f"Parameter {name}={value} outside of bounds [{lo}, {hi}].", parameter=name
                    )
                i += 1

    def contains(self, params: Mapping[str, ParameterValue]) -> bool:
        try:
            self.check(params)
            return True
        except BoundsViolationError:
            return False


def flatten_parameters(params: Mapping[str, ParameterValue]) -> Dict[str, float]:
    """Flattens tuple-valued parameters into indexed scalars, e.g. s -> s_1, s_2.

    Args:
        params: Parameters to flatten.

    Returns:
        Flat dict with scalar values in the same order.
    """
    flat: Dict[str, float] = {}
    for name, value in params.items():
        if isinstance(value, (tuple, list, np.ndarray)):
            for i, v in enumerate(value, 1):
                flat[f"{name}_{i}"] = float(v)
        else:
            flat[name] = float(value)
    return flat


__all__ = ["ParameterSpace", "Parameters", "ParameterValue", "flatten_parameters"]
