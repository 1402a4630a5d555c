from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


GRAMS_PER_KILOGRAM = 1000.0

def grams_to_kilograms(grams: float) -> float:
    """Convert grams to kilograms."""
    return grams / GRAMS_PER_KILOGRAM

def round_half_away(value: float) -> float:
    """Round to the nearest integer like C's round(): halves go away from zero."""
    return math.copysign(math.floor(abs(value) + 0.5), value)

def frozen_array(values: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Copy values into a new float64 array that cannot be modified in-place.

    Used for every array stored on a result record so that results never
    alias the caller's inputs.
    """
    array = np.array(values, dtype=np.float64)
    array.flags.writeable = False
    return array

def skew(r: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Skew-symmetric cross-product matrix S(r), such that S(r) @ v == r x v.
    """
    x, y, z = r
    return np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0],
    ])
