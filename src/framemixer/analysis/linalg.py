from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import scipy as sp

if TYPE_CHECKING:
    import numpy.typing as npt


def singular_value_tolerance(
    singular_values: npt.NDArray[np.float64],
    shape: tuple[int, int],
    epsilon: float | None = None,
) -> float:
    """
    Threshold below which a singular value is treated as zero.

    tol = eps * max(rows, cols) * max|sigma|

    Args:
        singular_values: Singular values of the matrix.
        shape: Shape of the decomposed matrix.
        epsilon: Error scale, defaults to the machine epsilon of the value type.

    Returns:
        The absolute tolerance.
    """
    if epsilon is None:
        epsilon = float(np.finfo(singular_values.dtype).eps)
    if singular_values.size == 0:
        return 0.0
    return epsilon * max(shape) * float(np.max(np.abs(singular_values)))


def inverse_singular_values(
    singular_values: npt.NDArray[np.float64],
    shape: tuple[int, int],
    epsilon: float | None = None,
) -> npt.NDArray[np.float64]:
    """
    Invert singular values one by one, zeroing those within tolerance of zero.
    """
    tolerance = singular_value_tolerance(singular_values, shape, epsilon)
    keep = np.abs(singular_values) > tolerance

    inverted = np.zeros_like(singular_values)
    inverted[keep] = 1.0 / singular_values[keep]
    return inverted


def pseudo_inverse(
    a: npt.ArrayLike,
    epsilon: float | None = None,
) -> npt.NDArray[np.float64]:
    """
    Moore-Penrose pseudo-inverse of a (possibly non-square) matrix.

    A = U S V^T  ->  A+ = V S+ U^T

    Args:
        a: Matrix of shape (m, n); tall and wide matrices are both fine.
        epsilon: Error scale for the singular value cut-off,
                 defaults to machine epsilon.

    Returns:
        The (n, m) pseudo-inverse.
    """
    a = np.asarray(a, dtype=np.float64)
    u, s, vt = sp.linalg.svd(a, full_matrices=False)

    s_inv = inverse_singular_values(s, a.shape, epsilon)
    return (vt.T * s_inv) @ u.T


def is_invertible(a: npt.ArrayLike, epsilon: float | None = None) -> tuple[bool, float]:
    """
    Check a square matrix for numerical singularity with the pseudo-inverse tolerance.

    Returns:
        (invertible, smallest singular value)
    """
    a = np.asarray(a, dtype=np.float64)
    s = sp.linalg.svd(a, compute_uv=False)
    if s.size == 0:
        return False, 0.0
    tolerance = singular_value_tolerance(s, a.shape, epsilon)
    smallest = float(np.min(np.abs(s)))
    return bool(np.max(np.abs(s)) > 0.0 and smallest > tolerance), smallest
