"""Three-component vector value type used for positions, velocities and
accelerations.

:class:`Vector3` carries no unit; callers keep units consistent (metres,
metres per second, metres per second squared, or model units).
"""
import math
from typing import NamedTuple

import numpy as np


class Vector3(NamedTuple):
    """Immutable 3-D vector with component-wise arithmetic."""

    x: float
    y: float
    z: float

    # numpy scalars defer to __rmul__ instead of broadcasting over the tuple
    __array_ufunc__ = None

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_iterable(cls, values) -> "Vector3":
        """Build a vector from up to three components, padding with zeros."""
        comps = [float(v) for v in np.asarray(values, dtype=float).reshape(-1)]
        if len(comps) > 3:
            raise ValueError(f"expected at most 3 components, got {len(comps)}")
        comps += [0.0] * (3 - len(comps))
        return cls(*comps)

    # tuple defines + and * as concatenation/repetition, so both are replaced
    def __add__(self, other):
        return Vector3(self.x + other[0], self.y + other[1], self.z + other[2])

    def __sub__(self, other):
        return Vector3(self.x - other[0], self.y - other[1], self.z - other[2])

    def __mul__(self, k):
        return Vector3(self.x * k, self.y * k, self.z * k)

    __rmul__ = __mul__

    def __truediv__(self, k):
        return Vector3(self.x / k, self.y / k, self.z / k)

    def __neg__(self):
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other) -> float:
        return self.x * other[0] + self.y * other[1] + self.z * other[2]

    def cross(self, other) -> "Vector3":
        return Vector3(
            self.y * other[2] - self.z * other[1],
            self.z * other[0] - self.x * other[2],
            self.x * other[1] - self.y * other[0],
        )

    def squared_magnitude(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def magnitude(self) -> float:
        return math.sqrt(self.squared_magnitude())

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)
