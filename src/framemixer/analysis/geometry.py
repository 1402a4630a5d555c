"""
Motor Geometry
==============
Maps a frame topology (or explicit custom coordinates) to per-motor
positions in the frame plane.

Standard topologies produce unit-circle points; scale factors from the
craft description are applied by the consumers through the helpers on
``FrameGeometry``. Custom topologies keep the raw declared coordinates.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt

from framemixer.errors import GeometryError
from framemixer.model.frame import FrameConfig, Topology
from framemixer.utils import frozen_array

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameGeometry:
    """
    Resolved motor placement, one (x, y) pair per motor in declaration order.
    """
    topology: Topology
    x: npt.NDArray[np.float64]
    y: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", frozen_array(self.x))
        object.__setattr__(self, "y", frozen_array(self.y))

    @property
    def n(self) -> int:
        return len(self.x)

    def motor_positions(self, dist_motor: float) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Motor (x, y) in metres; custom coordinates are already metres."""
        if self.topology.is_custom:
            return self.x.copy(), self.y.copy()
        return self.x * dist_motor, self.y * dist_motor

    def esc_positions(self, dist_esc: float) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        ESC (x, y) in metres.

        Standard frames scale the unit-circle point; custom frames scale the
        unit direction of the raw motor position.
        """
        if not self.topology.is_custom:
            return self.x * dist_esc, self.y * dist_esc

        norm = np.hypot(self.x, self.y)
        if np.any(norm == 0.0):
            idx = int(np.flatnonzero(norm == 0.0)[0])
            raise GeometryError(f"custom motor #{idx + 1} is at the frame origin, ESC direction is undefined")
        return self.x / norm * dist_esc, self.y / norm * dist_esc

    def arm_positions(self, dist_motor: float) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Arm centre of mass, halfway between the origin and the motor."""
        x, y = self.motor_positions(dist_motor)
        return x / 2.0, y / 2.0

    def plot(self, ports: npt.NDArray[np.int64] | None = None) -> None:
        """
        Plot the motor layout, forward (x) pointing up.
        """
        plt.rcParams["figure.constrained_layout.use"] = True
        plt.figure(figsize=(5, 5))

        # Body x forward is drawn up, body y right is drawn right
        plt.plot([0.0, 0.0], [0.0, 1.2 * max(1.0, float(np.max(np.abs(self.x))))], 'k--', lw=1)
        plt.scatter(self.y, self.x, s=200, c='r', zorder=3)

        labels = ports if ports is not None else np.arange(1, self.n + 1)
        for label, x, y in zip(labels, self.x, self.y):
            plt.annotate(str(label), (y, x), ha='center', va='center', color='white', zorder=4)

        plt.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
        plt.axis('equal')

        plt.title(f"{self.topology} motor layout")
        plt.xlabel("y (right)")
        plt.ylabel("x (forward)")
        plt.show()


def resolve_geometry(config: FrameConfig) -> FrameGeometry:
    """
    Resolve the motor positions of a frame.

    Args:
        config: The frame description.

    Raises:
        GeometryError: If the motor count does not match a standard topology,
            or a custom frame has no motors or a motor without placement.

    Returns:
        The resolved geometry.
    """
    topology = config.topology
    layout = topology.layout

    if layout is not None:
        if config.n != layout.motor_count:
            raise GeometryError(
                f"topology '{topology}' needs {layout.motor_count} motors, {config.n} declared",
                craft_id=config.craft_id,
            )
        angles = layout.angles()
        geometry = FrameGeometry(topology=topology, x=np.cos(angles), y=np.sin(angles))

    elif topology.is_custom:
        if config.n <= 0:
            raise GeometryError("custom topology declares no motors", craft_id=config.craft_id)

        missing = [i + 1 for i, m in enumerate(config.motors) if m.position is None]
        if missing:
            raise GeometryError(
                f"custom topology is missing motor placement for motor(s) {missing}",
                craft_id=config.craft_id,
            )
        placement = np.array([m.position for m in config.motors], dtype=np.float64)
        geometry = FrameGeometry(topology=topology, x=placement[:, 0], y=placement[:, 1])

    else:
        raise GeometryError(f"topology '{topology}' has no geometry", craft_id=config.craft_id)

    logger.debug(f"Resolved {topology} geometry: x={geometry.x}, y={geometry.y}")
    return geometry
