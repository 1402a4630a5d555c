"""
Mass Properties
===============
Total mass, centre of gravity and inertia tensor of a frame.

The frame is decomposed into point masses (motors, ESCs, arms and any
dimensionless payload) and solid boxes (dimensioned payload such as a
battery). Boxes are integrated numerically on a 1 mm grid, so their cost
grows with the cube of their size in millimetres.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Iterable

import numpy as np
import numba as nb

from framemixer.config import CELL_SIZE, CELLS_PER_METRE
from framemixer.errors import MassPropertiesError
from framemixer.model.frame import FrameConfig, MassObject
from framemixer.utils import frozen_array, grams_to_kilograms, skew

if TYPE_CHECKING:
    import numpy.typing as npt
    from framemixer.analysis.geometry import FrameGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InertiaResult:
    """
    Aggregated mass properties.

    Attributes:
        total_mass: Total mass [kg].
        cg_offset: Centre of gravity relative to the frame origin [m].
        J: Inertia tensor about the centre of gravity [kg·m²].
        object_count: Number of mass objects aggregated.
    """
    total_mass: float
    cg_offset: npt.NDArray[np.float64]
    J: npt.NDArray[np.float64]
    object_count: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "cg_offset", frozen_array(self.cg_offset))
        object.__setattr__(self, "J", frozen_array(self.J))

    @property
    def j_roll(self) -> float:
        return float(self.J[0, 0])

    @property
    def j_pitch(self) -> float:
        return float(self.J[1, 1])

    @property
    def j_yaw(self) -> float:
        return float(self.J[2, 2])


# ==========================================
# OBJECT LIST
# ==========================================
def build_mass_objects(config: FrameConfig, geometry: FrameGeometry) -> list[MassObject]:
    """
    Synthesize the implicit motor, ESC and arm point masses and append the payload.

    Args:
        config: The frame description (masses in grams).
        geometry: Resolved motor geometry of the same frame.

    Returns:
        Motor, ESC and arm objects per motor in declaration order, then the
        payload objects unchanged.
    """
    mot_x, mot_y = geometry.motor_positions(config.dist_motor)
    esc_x, esc_y = geometry.esc_positions(config.dist_esc)
    arm_x, arm_y = geometry.arm_positions(config.dist_motor)

    objects: list[MassObject] = []
    for i in range(geometry.n):
        objects.append(MassObject(config.mass_motor, (float(mot_x[i]), float(mot_y[i]), 0.0), label=f"motor{i + 1}"))
        objects.append(MassObject(config.mass_esc, (float(esc_x[i]), float(esc_y[i]), 0.0), label=f"esc{i + 1}"))
        objects.append(MassObject(config.mass_arm, (float(arm_x[i]), float(arm_y[i]), 0.0), label=f"arm{i + 1}"))

    objects.extend(config.payload)
    return objects


# ==========================================
# INERTIA CONTRIBUTIONS
# ==========================================
def point_inertia(mass: float, r: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Inertia of a point mass at offset r from the reference point.

    J = -m S(r)² = m (|r|² I - r rᵀ)

    Args:
        mass: Mass [kg].
        r: Position relative to the reference point [m].
    """
    s = skew(np.asarray(r, dtype=np.float64))
    return -mass * (s @ s)


@nb.jit(cache=True, fastmath=True)
def _cuboid_cell_sums(
    cell_mass: float,
    ox: float, oy: float, oz: float,
    dx: float, dy: float, dz: float,
    sx: float, sy: float, sz: float,
    nx: int, ny: int, nz: int,
    cell_size: float,
) -> tuple[float, float, float, float, float, float]:
    """
    Accumulate point inertia of a grid of equal cells.

    Cell (i, j, k) sits at ``o - (d/2 + idx * cell_size) * s`` on every axis.

    Returns:
        Jxx, Jyy, Jzz, Jxy, Jxz, Jyz
    """
    jxx = 0.0
    jyy = 0.0
    jzz = 0.0
    jxy = 0.0
    jxz = 0.0
    jyz = 0.0
    for i in range(nx):
        rx = ox - (dx / 2.0 + i * cell_size) * sx
        for j in range(ny):
            ry = oy - (dy / 2.0 + j * cell_size) * sy
            for k in range(nz):
                rz = oz - (dz / 2.0 + k * cell_size) * sz
                jxx += cell_mass * (ry * ry + rz * rz)
                jyy += cell_mass * (rx * rx + rz * rz)
                jzz += cell_mass * (rx * rx + ry * ry)
                jxy -= cell_mass * rx * ry
                jxz -= cell_mass * rx * rz
                jyz -= cell_mass * ry * rz
    return jxx, jyy, jzz, jxy, jxz, jyz


def cell_counts(dims: Iterable[float]) -> tuple[int, int, int]:
    """Number of whole 1 mm cells along each axis."""
    nx, ny, nz = (int(math.floor(d * CELLS_PER_METRE)) for d in dims)
    return nx, ny, nz


def cuboid_inertia(
    mass: float,
    offset: npt.ArrayLike,
    dims: npt.ArrayLike,
    cg: npt.ArrayLike,
) -> npt.NDArray[np.float64]:
    """
    Inertia of a solid box about the centre of gravity, by 1 mm cell decomposition.

    Cells extend from the declared offset towards the frame origin on each
    axis (a negative offset extends in the positive direction).

    Args:
        mass: Mass of the box [kg].
        offset: Declared offset of the box [m].
        dims: Box edge lengths [m].
        cg: Centre of gravity of the whole frame [m].

    Raises:
        MassPropertiesError: If a dimension is smaller than one cell.

    Returns:
        The 3x3 inertia contribution.
    """
    offset = np.asarray(offset, dtype=np.float64)
    dims = np.asarray(dims, dtype=np.float64)
    cg = np.asarray(cg, dtype=np.float64)

    nx, ny, nz = cell_counts(dims)
    n_cells = nx * ny * nz
    if min(nx, ny, nz) <= 0:
        raise MassPropertiesError(f"box dimensions {dims.tolist()} are smaller than one cell")

    sign = np.where(offset < 0.0, -1.0, 1.0)
    o = offset - cg

    logger.debug(f"Integrating box of {mass} kg over {nx}x{ny}x{nz} cells")
    jxx, jyy, jzz, jxy, jxz, jyz = _cuboid_cell_sums(
        mass / n_cells,
        o[0], o[1], o[2],
        dims[0], dims[1], dims[2],
        sign[0], sign[1], sign[2],
        nx, ny, nz,
        CELL_SIZE,
    )
    return np.array([
        [jxx, jxy, jxz],
        [jxy, jyy, jyz],
        [jxz, jyz, jzz],
    ])


# ==========================================
# AGGREGATION
# ==========================================
def compute_mass_properties(objects: list[MassObject]) -> InertiaResult:
    """
    Total mass, centre of gravity and inertia tensor of a set of objects.

    Args:
        objects: Mass objects, masses in grams. Boxes thinner than one
            cell on any axis are counted as point masses at their offset.

    Raises:
        MassPropertiesError: If the total mass is not positive.

    Returns:
        The aggregated mass properties in SI units.
    """
    masses = np.array([grams_to_kilograms(obj.mass) for obj in objects], dtype=np.float64)
    positions = np.array([obj.offset for obj in objects], dtype=np.float64).reshape(-1, 3)

    total_mass = float(np.sum(masses))
    if not total_mass > 0.0:
        raise MassPropertiesError(
            f"total mass of {len(objects)} objects is {total_mass} kg, centre of gravity is undefined"
        )

    cg = (masses @ positions) / total_mass

    J = np.zeros((3, 3), dtype=np.float64)
    for obj, mass, position in zip(objects, masses, positions):
        if obj.is_extended and min(cell_counts(obj.dims)) > 0:
            J += cuboid_inertia(mass, position, obj.dims, cg)
        else:
            if obj.is_extended:
                logger.warning(
                    f"Object '{obj.label}' with dimensions {list(obj.dims)} is thinner than one cell, "
                    f"treating it as a point mass"
                )
            J += point_inertia(mass, position - cg)

    logger.debug(f"Mass properties: mass={total_mass} kg, cg={cg}, J=\n{J}")
    return InertiaResult(total_mass=total_mass, cg_offset=cg, J=J, object_count=len(objects))


def frame_mass_properties(config: FrameConfig, geometry: FrameGeometry) -> InertiaResult:
    """Mass properties of a complete frame, implicit components included."""
    return compute_mass_properties(build_mass_objects(config, geometry))
