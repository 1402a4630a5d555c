"""
Frame Description (Data Model)
==============================
Immutable records describing a multi-rotor frame as declared in a craft file.

Classes:
    Topology: The closed set of supported motor arrangements.
    TopologyLayout: Canonical point-set parameters of a standard topology.
    MotorRecord: One motor output as declared by the user.
    MassObject: A point mass or a rectangular solid attached to the frame.
    FrameConfig: The complete, validated frame description.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, Optional, Tuple, TYPE_CHECKING

import numpy as np

from framemixer.config import (
    DEFAULT_DIST_ESC,
    DEFAULT_DIST_MOTOR,
    DEFAULT_MASS_ARM,
    DEFAULT_MASS_ESC,
    DEFAULT_MASS_MOTOR,
)
from framemixer.errors import GeometryError

if TYPE_CHECKING:
    import numpy.typing as npt


# ------------------------------------------------------------------------------
# Topologies
# ------------------------------------------------------------------------------
class Topology(StrEnum):
    QUAD_PLUS = "quad_plus"
    QUAD_X = "quad_x"
    HEX_PLUS = "hex_plus"
    HEX_X = "hex_x"
    OCTO_PLUS = "octo_plus"
    OCTO_X = "octo_x"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, name: str) -> Topology:
        """Look up a topology by its (case-insensitive) tag."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise GeometryError(f"unknown frame topology '{name}'") from None

    @property
    def layout(self) -> Optional[TopologyLayout]:
        """Canonical layout, or None for custom frames."""
        return TOPOLOGY_LAYOUTS.get(self)

    @property
    def is_custom(self) -> bool:
        return self is Topology.CUSTOM

    @property
    def default_config_id(self) -> int:
        """Frame id known to the ground station motor mix table."""
        return DEFAULT_CONFIG_IDS[self]


@dataclass(frozen=True)
class TopologyLayout:
    """
    Evenly spaced unit-circle layout.

    Motor k sits at ``phase + k * 360 / motor_count`` degrees, counter-clockwise
    from the forward (x) axis.
    """
    motor_count: int
    phase: float  # degrees

    @property
    def spacing(self) -> float:
        return 360.0 / self.motor_count

    def angles(self) -> npt.NDArray[np.float64]:
        """Motor angles in radians."""
        return np.deg2rad(self.phase + self.spacing * np.arange(self.motor_count))


TOPOLOGY_LAYOUTS: Dict[Topology, TopologyLayout] = {
    Topology.QUAD_PLUS: TopologyLayout(motor_count=4, phase=0.0),
    Topology.QUAD_X: TopologyLayout(motor_count=4, phase=-45.0),
    Topology.HEX_PLUS: TopologyLayout(motor_count=6, phase=0.0),
    Topology.HEX_X: TopologyLayout(motor_count=6, phase=-30.0),
    Topology.OCTO_PLUS: TopologyLayout(motor_count=8, phase=0.0),
    Topology.OCTO_X: TopologyLayout(motor_count=8, phase=-22.5),
}

# Default config ids for predefined frame types (ground station mix table)
DEFAULT_CONFIG_IDS: Dict[Topology, int] = {
    Topology.QUAD_PLUS: 4,
    Topology.QUAD_X: 5,
    Topology.HEX_PLUS: 10,
    Topology.HEX_X: 11,
    Topology.OCTO_PLUS: 30,
    Topology.OCTO_X: 31,
    Topology.CUSTOM: 0,
}


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class MotorRecord:
    """A motor output: physical port, propeller direction, optional raw placement."""
    port: int
    rotation: int  # +1 / -1
    position: Optional[Tuple[float, float]] = None  # custom frames only


@dataclass(frozen=True)
class MassObject:
    """
    A mass attached to the frame.

    Mass is in grams, offset and dimensions in metres relative to the frame
    origin. Objects with all three dimensions set are integrated as solid
    boxes, everything else is a point mass.
    """
    mass: float
    offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    dims: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    label: str = "object"

    @property
    def is_extended(self) -> bool:
        return all(d != 0.0 for d in self.dims)


@dataclass(frozen=True)
class FrameConfig:
    """
    Validated description of one craft.

    Masses are in grams, distances in metres.
    """
    craft_id: str
    topology: Topology
    motors: Tuple[MotorRecord, ...]
    config_id: Optional[int] = None  # None selects the topology default

    mass_motor: float = DEFAULT_MASS_MOTOR
    mass_esc: float = DEFAULT_MASS_ESC
    mass_arm: float = DEFAULT_MASS_ARM
    dist_motor: float = DEFAULT_DIST_MOTOR
    dist_esc: float = DEFAULT_DIST_ESC

    payload: Tuple[MassObject, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples
        object.__setattr__(self, "motors", tuple(self.motors))
        object.__setattr__(self, "payload", tuple(self.payload))
        if self.config_id is None:
            object.__setattr__(self, "config_id", self.topology.default_config_id)

    @property
    def n(self) -> int:
        """Number of motors."""
        return len(self.motors)

    @property
    def ports(self) -> npt.NDArray[np.int64]:
        return np.array([m.port for m in self.motors], dtype=np.int64)

    @property
    def rotations(self) -> npt.NDArray[np.float64]:
        return np.array([m.rotation for m in self.motors], dtype=np.float64)

    def find_port(self, port: int) -> int:
        """Index of the first motor wired to `port`, or -1."""
        for i, motor in enumerate(self.motors):
            if motor.port == port:
                return i
        return -1

    def describe(self) -> str:
        """Multi-line dump of the declared craft data (debug output)."""
        lines = [
            f"craft: {self.craft_id} ({self.topology}, configId {self.config_id})",
            f"ports: {self.ports.tolist()}",
            f"rotation: {self.rotations.astype(int).tolist()}",
            f"distMot: {self.dist_motor}",
            f"distEsc: {self.dist_esc}",
            f"massMot: {self.mass_motor}",
            f"massEsc: {self.mass_esc}",
            f"massArm: {self.mass_arm}",
        ]
        if self.topology.is_custom:
            lines.append(f"geometry: {[m.position for m in self.motors]}")
        for obj in self.payload:
            lines.append(f"{obj.label}: mass={obj.mass} offset={obj.offset} dims={obj.dims}")
        return "\n".join(lines)
