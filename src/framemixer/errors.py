"""
Error types raised while turning a craft description into mixer tables.

Every failure is fatal for the run; the ``stage`` attribute tells the caller
which part of the pipeline rejected the frame.
"""
from __future__ import annotations


class FrameError(ValueError):
    """Base class for all frame configuration and synthesis errors."""
    stage: str = "frame"

    def __init__(self, message: str, craft_id: str | None = None) -> None:
        self.craft_id = craft_id
        if craft_id:
            message = f"craft '{craft_id}': {message}"
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class ConfigurationError(FrameError):
    """The craft description is malformed or incomplete."""
    stage = "ingestion"


class GeometryError(FrameError):
    """Motor geometry cannot be resolved for the declared topology."""
    stage = "geometry"


class MassPropertiesError(FrameError):
    """The declared masses do not describe a physical body."""
    stage = "mass"


class MixerError(FrameError):
    """The mixer system is degenerate and cannot be decoupled."""
    stage = "mixer"
