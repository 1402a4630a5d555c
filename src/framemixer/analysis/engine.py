"""
Frame Synthesis Engine
======================
Single entry point of the numerical core.

Why is this file needed?
------------------------
1. Orchestration: Geometry feeds both the mass model and the mixer; the
   mixer additionally needs the centre of gravity.
2. Result bundle: Callers (CLI, renderers, tests) receive one immutable
   object instead of juggling intermediate matrices.

Note: This module should be pure Python/NumPy and should NOT do any file I/O.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging

from framemixer.analysis.geometry import FrameGeometry, resolve_geometry
from framemixer.analysis.mass_properties import InertiaResult, frame_mass_properties
from framemixer.analysis.mixer import MixerResult, synthesize_mixer
from framemixer.model.frame import FrameConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """Everything computed for one frame."""
    config: FrameConfig
    geometry: FrameGeometry
    inertia: InertiaResult
    mixer: MixerResult


def solve_frame(config: FrameConfig) -> FrameResult:
    """
    Compute geometry, mass properties and mixer matrices of a frame.

    Args:
        config: Validated frame description.

    Raises:
        GeometryError: Unresolvable motor geometry.
        MassPropertiesError: Non-positive total mass.
        MixerError: Degenerate mixer system.

    Returns:
        The result bundle.
    """
    logger.info(f"Solving craft '{config.craft_id}' ({config.topology}, {config.n} motors)")

    geometry = resolve_geometry(config)
    inertia = frame_mass_properties(config, geometry)
    logger.info(
        f"Mass {inertia.total_mass:.4f} kg from {inertia.object_count} objects, "
        f"CG offset {inertia.cg_offset.tolist()}"
    )

    mixer = synthesize_mixer(config, geometry, inertia.cg_offset)
    logger.info(f"Mixer synthesized for {mixer.n} motors")

    return FrameResult(config=config, geometry=geometry, inertia=inertia, mixer=mixer)
