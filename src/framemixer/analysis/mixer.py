"""
Mixer Synthesis
===============
Builds the motor mixing tables that map throttle, roll, pitch and yaw
commands to per-motor outputs.

Each control axis is a minimum-norm distribution of motor output that
produces a unit response on that axis and no response on the constrained
ones, found with the Moore-Penrose pseudo-inverse. The three attitude
columns are then corrected with the true torque matrix so that commanding
one axis produces no torque about the others.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

from framemixer.analysis.linalg import is_invertible, pseudo_inverse
from framemixer.errors import MixerError
from framemixer.utils import frozen_array

if TYPE_CHECKING:
    import numpy.typing as npt
    from framemixer.analysis.geometry import FrameGeometry
    from framemixer.model.frame import FrameConfig

logger = logging.getLogger(__name__)

# Column order of Mt and PID
THROTTLE, ROLL, PITCH, YAW = range(4)


@dataclass(frozen=True)
class MixerResult:
    """
    Mixer matrices of one frame.

    Attributes:
        roll, pitch, yaw, throttle: Per-axis motor distributions (n,).
        pd: Attitude columns [ROLL | PITCH | YAW] (n, 3).
        m: Torque generation matrix [-y; x; propDir] (3, n).
        mt: Throttle and decoupled attitude columns (n, 4), order T, R, P, Y.
        pid: mt normalized per column to ±100 (n, 4).
        motor_x, motor_y: Motor positions relative to the CG [m].
        prop_dir: Rotation signs in mixer convention.
    """
    roll: npt.NDArray[np.float64]
    pitch: npt.NDArray[np.float64]
    yaw: npt.NDArray[np.float64]
    throttle: npt.NDArray[np.float64]
    pd: npt.NDArray[np.float64]
    m: npt.NDArray[np.float64]
    mt: npt.NDArray[np.float64]
    pid: npt.NDArray[np.float64]
    motor_x: npt.NDArray[np.float64]
    motor_y: npt.NDArray[np.float64]
    prop_dir: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        for name in self.__dataclass_fields__:
            object.__setattr__(self, name, frozen_array(getattr(self, name)))

    @property
    def n(self) -> int:
        return len(self.throttle)


def solve_axis(a: npt.NDArray[np.float64], target: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Minimum-norm motor distribution x with a @ x ≈ target.

    Args:
        a: Constraint rows (k, n).
        target: Desired response (k,).

    Returns:
        Motor distribution (n,).
    """
    return pseudo_inverse(a) @ np.asarray(target, dtype=np.float64)


def normalize_columns(mt: npt.NDArray[np.float64], scale: float = 100.0) -> npt.NDArray[np.float64]:
    """
    Scale each column so that its largest magnitude equals `scale`.

    All-zero columns are left at zero.
    """
    peak = np.max(np.abs(mt), axis=0)
    out = np.zeros_like(mt)
    nonzero = peak > 0.0
    out[:, nonzero] = mt[:, nonzero] / peak[nonzero] * scale
    return out


def synthesize_mixer(
    config: FrameConfig,
    geometry: FrameGeometry,
    cg_offset: npt.ArrayLike,
) -> MixerResult:
    """
    Synthesize the mixing matrices of a frame.

    Args:
        config: The frame description (rotation signs, motor distance).
        geometry: Resolved motor geometry.
        cg_offset: Centre of gravity [m]; control axes pass through it.

    Raises:
        MixerError: If the attitude columns cannot be decoupled because
            (M · PD) is singular.

    Returns:
        The mixer matrices.
    """
    n = geometry.n
    cg = np.asarray(cg_offset, dtype=np.float64)

    x, y = geometry.motor_positions(config.dist_motor)
    x = x - cg[0]
    y = y - cg[1]

    # Declared rotation sense is opposite to the mixer convention
    p = -config.rotations
    ones = np.ones(n)

    roll = solve_axis(np.vstack((x, ones, -y)), [0.0, 0.0, 1.0])
    pitch = solve_axis(np.vstack((-y, ones, x)), [0.0, 0.0, 1.0])
    yaw = solve_axis(np.vstack((x, y, p)), [0.0, 0.0, 1.0])
    throttle = solve_axis(np.vstack((x, y, p, ones)), [0.0, 0.0, 0.0, float(n)])

    pd = np.column_stack((roll, pitch, yaw))
    m = np.vstack((-y, x, p))

    mpd = m @ pd
    invertible, smallest = is_invertible(mpd)
    if not invertible:
        raise MixerError(
            f"torque matrix M·PD is singular (smallest singular value {smallest:.3e}); "
            f"motor geometry or rotation directions are degenerate",
            craft_id=config.craft_id,
        )

    mt = np.column_stack((throttle, pd @ np.linalg.inv(mpd)))
    pid = normalize_columns(mt)

    logger.debug(f"PD =\n{pd}\nM =\n{m}\nMt =\n{mt}\nPID =\n{pid}")
    return MixerResult(
        roll=roll,
        pitch=pitch,
        yaw=yaw,
        throttle=throttle,
        pd=pd,
        m=m,
        mt=mt,
        pid=pid,
        motor_x=x,
        motor_y=y,
        prop_dir=p,
    )
