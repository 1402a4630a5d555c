"""
Output Renderers
================
Serialize a solved frame into the two text formats consumed downstream.

Classes:
    ParamRenderer: C-style ``#define`` parameter table for the firmware.
    MixRenderer: INI-style ``.mix`` file for the ground station motor mix
        configurator.

Per-port tables always cover every physical port; ports not used by the
frame are written as zero.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import TYPE_CHECKING, TextIO

import numpy as np

from framemixer.config import APP_VERSION, NUM_PORTS
from framemixer.post.port_order import encode_port_order, format_word, word_to_float
from framemixer.utils import round_half_away

if TYPE_CHECKING:
    import numpy.typing as npt
    from framemixer.analysis.engine import FrameResult
    from framemixer.model.frame import FrameConfig

logger = logging.getLogger(__name__)


def as_float32(value: float) -> float:
    """Value as stored in a single precision firmware parameter."""
    return float(np.float32(value))


# ==========================================
# ABSTRACT RENDERER
# ==========================================
class Renderer(ABC):
    """
    Abstract base class for output formats.
    """
    NAME: str = "renderer"
    EXTENSION: str = ".txt"

    def __init__(self, pid: bool = False, version: str = APP_VERSION) -> None:
        """
        Args:
            pid: Emit the percentage PID table instead of Mt, M and J.
            version: Tool version written into the header.
        """
        self.pid = pid
        self.version = version

    def render(self, result: FrameResult) -> str:
        """Render the complete output file as a string."""
        parts = [self.preamble(result), self.header(result)]

        if self.pid:
            parts.append(self.mixer_table("PID", result.mixer.pid, result.config))
        else:
            parts.append(self.mixer_table("Mt", result.mixer.mt, result.config))
            parts.append(self.torque_table("M", result.mixer.m, result.config))
            parts.append(self.inertia_table("J", result.inertia.J))

        parts.append(self.postamble(result))
        return "".join(parts)

    def write(self, result: FrameResult, stream: TextIO) -> None:
        logger.debug(f"Writing {self.NAME} output for craft '{result.config.craft_id}'")
        stream.write(self.render(result))

    def header(self, result: FrameResult) -> str:
        inertia = result.inertia
        cg = inertia.cg_offset
        return (
            f"Tool_Version={self.version}\n"
            f"Craft={result.config.craft_id}\n"
            f"Motors={result.config.n}\n"
            f"Mass={inertia.total_mass:f} Kg ({inertia.object_count} objects)\n"
            f"CG_Offset={cg[0]:f}, {cg[1]:f}, {cg[2]:f}\n"
        )

    def preamble(self, result: FrameResult) -> str:
        return ""

    def postamble(self, result: FrameResult) -> str:
        return ""

    @abstractmethod
    def mixer_table(self, name: str, matrix: npt.NDArray[np.float64], config: FrameConfig) -> str:
        """Per-motor table with columns T, R, P, Y (Mt or PID)."""
        pass

    @abstractmethod
    def torque_table(self, name: str, matrix: npt.NDArray[np.float64], config: FrameConfig) -> str:
        """Torque matrix with rows R, P, Y (M)."""
        pass

    @abstractmethod
    def inertia_table(self, name: str, matrix: npt.NDArray[np.float64]) -> str:
        """Diagonal of the inertia tensor."""
        pass


def format_matrix(name: str, matrix: npt.NDArray[np.float64]) -> str:
    """Human-readable matrix dump."""
    lines = [f"{name} = ["]
    for row in np.atleast_2d(matrix):
        lines.append("\t" + "".join(f"{v:+12.7f}  " for v in row))
    lines.append("];")
    return "\n".join(lines) + "\n"


# ==========================================
# FIRMWARE PARAMETERS (#define)
# ==========================================
class ParamRenderer(Renderer):
    """
    ``#define`` constants for the firmware default parameter tables.
    """
    NAME = "param"
    EXTENSION = ".param"

    def mixer_table(self, name: str, matrix: npt.NDArray[np.float64], config: FrameConfig) -> str:
        lines = [format_matrix(name, matrix)]
        for port in range(1, NUM_PORTS + 1):
            t = r = p = y = 0.0
            j = config.find_port(port)
            if j >= 0:
                t, r, p, y = (as_float32(v) for v in matrix[j, :4])
            lines.append(f"#define DEFAULT_MOT_PWRD_{port:02d}_T\t{t:+f}\n")
            lines.append(f"#define DEFAULT_MOT_PWRD_{port:02d}_P\t{p:+f}\n")
            lines.append(f"#define DEFAULT_MOT_PWRD_{port:02d}_R\t{r:+f}\n")
            lines.append(f"#define DEFAULT_MOT_PWRD_{port:02d}_Y\t{y:+f}\n")
        lines.append("\n")
        return "".join(lines)

    def torque_table(self, name: str, matrix: npt.NDArray[np.float64], config: FrameConfig) -> str:
        lines = [format_matrix(name, matrix)]
        for port in range(1, NUM_PORTS + 1):
            r = p = y = 0.0
            j = config.find_port(port)
            if j >= 0:
                r, p, y = (as_float32(v) for v in matrix[:3, j])
            lines.append(f"#define DEFAULT_QUATOS_MM_P{port:02d}\t{p:+f}\n")
            lines.append(f"#define DEFAULT_QUATOS_MM_R{port:02d}\t{r:+f}\n")
            lines.append(f"#define DEFAULT_QUATOS_MM_Y{port:02d}\t{y:+f}\n")
        lines.append("\n")
        return "".join(lines)

    def inertia_table(self, name: str, matrix: npt.NDArray[np.float64]) -> str:
        return (
            format_matrix(name, matrix)
            + f"#define DEFAULT_QUATOS_J_ROLL\t{matrix[0, 0]:g}\n"
            + f"#define DEFAULT_QUATOS_J_PITCH\t{matrix[1, 1]:g}\n"
            + f"#define DEFAULT_QUATOS_J_YAW\t{matrix[2, 2]:g}\n"
            + "\n"
        )

    def postamble(self, result: FrameResult) -> str:
        words = encode_port_order(result.config.config_id, result.config.ports)
        for word in words:
            if np.isnan(word_to_float(word)):
                logger.warning(
                    f"Craft '{result.config.craft_id}': port order word 0x{word:08x} is a NaN pattern, "
                    f"the firmware cannot recover it from the printed value"
                )
        out = f"#define DEFAULT_MOT_FRAME\t{format_word(words[0])}\n"
        if len(words) > 1:
            out += f"#define DEFAULT_MOT_FRAME_H\t{format_word(words[1])}\n"
        return out


# ==========================================
# GROUND STATION MIX FILE (INI)
# ==========================================
class MixRenderer(Renderer):
    """
    INI file for the ground station motor mix configurator.
    """
    NAME = "mix"
    EXTENSION = ".mix"

    MIXER_SECTIONS = ("Throttle", "Roll", "Pitch", "Yaw")
    TORQUE_SECTIONS = ("MM_Roll", "MM_Pitch", "MM_Yaw")

    @staticmethod
    def format_value(value: float) -> str:
        """Single precision value rounded to 4 decimals, shortest form."""
        scaled = float(np.float32(value) * np.float32(10000.0))
        return f"{round_half_away(scaled) / 10000.0:g}"

    def preamble(self, result: FrameResult) -> str:
        ports = "".join(f"{p}," for p in result.config.ports)
        return (
            "[META]\n"
            f"ConfigId={result.config.config_id}\n"
            f"PortOrder={ports}\n"
        )

    def _sections(
        self,
        titles: tuple[str, ...],
        config: FrameConfig,
        lookup,
    ) -> str:
        lines = ["\n"]  # blank line after the info section
        for axis, title in enumerate(titles):
            lines.append(f"[{title}]\n")
            for port in range(1, NUM_PORTS + 1):
                value = 0.0
                j = config.find_port(port)
                if j >= 0:
                    value = lookup(axis, j)
                lines.append(f"Motor{port}={self.format_value(value)}\n")
            lines.append("\n")
        return "".join(lines)

    def mixer_table(self, name: str, matrix: npt.NDArray[np.float64], config: FrameConfig) -> str:
        return self._sections(self.MIXER_SECTIONS, config, lambda axis, j: matrix[j, axis])

    def torque_table(self, name: str, matrix: npt.NDArray[np.float64], config: FrameConfig) -> str:
        return self._sections(self.TORQUE_SECTIONS, config, lambda axis, j: matrix[axis, j])

    def inertia_table(self, name: str, matrix: npt.NDArray[np.float64]) -> str:
        return (
            "[QUATOS]\n"
            f"J_ROLL={matrix[0, 0]:g}\n"
            f"J_PITCH={matrix[1, 1]:g}\n"
            f"J_YAW={matrix[2, 2]:g}\n"
            "\n"
        )


RENDERERS: dict[str, type[Renderer]] = {
    ParamRenderer.NAME: ParamRenderer,
    MixRenderer.NAME: MixRenderer,
}
