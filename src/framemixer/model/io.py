"""
Craft File Reader (XML)
Turns a craft description file into a validated FrameConfig.

Element, attribute and topology names are matched case-insensitively.
"""
from __future__ import annotations

from collections import Counter
import logging
from typing import Callable, Iterator, Optional, TypeVar
import xml.etree.ElementTree as ET

from framemixer.config import NUM_PORTS
from framemixer.errors import ConfigurationError, GeometryError
from framemixer.model.frame import FrameConfig, MassObject, MotorRecord, Topology

# Get module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _name(element: ET.Element) -> str:
    return element.tag.lower()

def _children(element: Optional[ET.Element], name: str) -> Iterator[ET.Element]:
    if element is None:
        return iter(())
    return (child for child in element if _name(child) == name)

def _child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    return next(_children(element, name), None)

def _attr(element: ET.Element, name: str) -> Optional[str]:
    for key, value in element.attrib.items():
        if key.lower() == name.lower():
            return value
    return None


class CraftReader:
    """
    Reader for ``<quatos_configuration>`` craft files.

    A file may hold several ``<craft>`` elements; one is selected by id.
    """

    @staticmethod
    def read(filepath: str, craft_id: Optional[str] = None) -> FrameConfig:
        logger.info(f"Reading craft file: {filepath}")
        with open(filepath, "r", encoding="utf-8") as f:
            text = f.read()
        return CraftReader.parse_string(text, craft_id=craft_id, source=filepath)

    @staticmethod
    def parse_string(text: str, craft_id: Optional[str] = None, source: str = "<string>") -> FrameConfig:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            msg = f"parsing XML '{source}' failed: {e}"
            logger.error(msg)
            raise ConfigurationError(msg) from e

        crafts = [el for el in root.iter() if _name(el) == "craft"]
        craft = CraftReader._select_craft(crafts, craft_id)
        if craft is None:
            if craft_id:
                raise ConfigurationError(f"craft '{craft_id}' not found in '{source}'")
            raise ConfigurationError(f"no craft found in '{source}'")

        config = CraftReader._parse_craft(craft)
        logger.debug(f"Parsed craft data:\n{config.describe()}")
        return config

    # --- CRAFT HELPERS ---

    @staticmethod
    def _select_craft(crafts: list[ET.Element], craft_id: Optional[str]) -> Optional[ET.Element]:
        for craft in crafts:
            cid = _attr(craft, "id")
            if cid is None:
                continue
            if not craft_id or cid == craft_id:
                return craft
        return None

    @staticmethod
    def _parse_craft(craft: ET.Element) -> FrameConfig:
        craft_id = _attr(craft, "id") or ""

        config_type = _attr(craft, "config")
        if config_type is None:
            raise ConfigurationError("missing config type", craft_id=craft_id)
        try:
            topology = Topology.parse(config_type)
        except GeometryError as e:
            raise GeometryError(f"invalid config type '{config_type}'", craft_id=craft_id) from e

        if topology.is_custom:
            n = CraftReader._number(_attr(craft, "motors"), int, "motors attribute", craft_id, default=0)
            if n <= 0:
                raise GeometryError("custom type has missing/incorrect motors attribute", craft_id=craft_id)
        else:
            n = topology.layout.motor_count

        raw_config_id = _attr(craft, "configId")
        config_id = None
        if raw_config_id is not None and raw_config_id.strip():
            config_id = CraftReader._number(raw_config_id, int, "configId attribute", craft_id)

        motors = CraftReader._parse_motors(craft, topology, n, craft_id)
        CraftReader._check_ports(motors, craft_id)

        kwargs = {}
        distance = _child(craft, "distance")
        for tag, key in (("motor", "dist_motor"), ("esc", "dist_esc")):
            el = _child(distance, tag)
            if el is not None:
                kwargs[key] = CraftReader._number(el.text, float, f"distance->{tag}", craft_id)

        mass = _child(craft, "mass")
        for tag, key in (("motor", "mass_motor"), ("esc", "mass_esc"), ("arm", "mass_arm")):
            el = _child(mass, tag)
            if el is not None:
                kwargs[key] = CraftReader._number(el.text, float, f"mass->{tag}", craft_id)

        payload = [
            CraftReader._parse_cube(cube, k, craft_id)
            for k, cube in enumerate(_children(mass, "cube"), start=1)
        ]

        return FrameConfig(
            craft_id=craft_id,
            topology=topology,
            motors=tuple(motors),
            config_id=config_id,
            payload=tuple(payload),
            **kwargs,
        )

    @staticmethod
    def _parse_motors(craft: ET.Element, topology: Topology, n: int, craft_id: str) -> list[MotorRecord]:
        geometry = _child(craft, "geometry")
        if geometry is not None:
            entries = list(_children(geometry, "motor"))
            motors = [CraftReader._parse_geometry_motor(el, topology, craft_id) for el in entries]
            section = "geometry"
        elif topology.is_custom:
            raise GeometryError("custom type has no geometry section", craft_id=craft_id)
        else:
            entries = list(_children(_child(craft, "ports"), "port"))
            motors = [
                MotorRecord(
                    port=CraftReader._number(el.text, int, "port", craft_id),
                    rotation=CraftReader._rotation(el, craft_id),
                )
                for el in entries
            ]
            section = "ports"

        if len(motors) != n:
            raise ConfigurationError(f"{section} section lists {len(motors)} motors, {n} expected", craft_id=craft_id)
        return motors

    @staticmethod
    def _parse_geometry_motor(el: ET.Element, topology: Topology, craft_id: str) -> MotorRecord:
        rotation = CraftReader._rotation(el, craft_id)

        port = CraftReader._number(_attr(el, "port"), int, "geometry->motor port attribute", craft_id, default=0)
        if port == 0:
            raise ConfigurationError("has missing/incorrect geometry->motor port attribute", craft_id=craft_id)

        position = None
        if topology.is_custom:
            coords = (el.text or "").split(",")
            if len(coords) != 2:
                raise ConfigurationError(f"geometry->motor position '{el.text}' is not 'x,y'", craft_id=craft_id)
            position = (
                CraftReader._number(coords[0], float, "geometry->motor x", craft_id),
                CraftReader._number(coords[1], float, "geometry->motor y", craft_id),
            )
        return MotorRecord(port=port, rotation=rotation, position=position)

    @staticmethod
    def _parse_cube(el: ET.Element, index: int, craft_id: str) -> MassObject:
        def read(name: str) -> float:
            return CraftReader._number(_attr(el, name), float, f"cube {name}", craft_id, default=0.0)

        return MassObject(
            mass=CraftReader._number(el.text, float, "cube mass", craft_id),
            offset=(read("offsetx"), read("offsety"), read("offsetz")),
            dims=(read("dimx"), read("dimy"), read("dimz")),
            label=f"cube{index}",
        )

    # --- VALUE HELPERS ---

    @staticmethod
    def _rotation(el: ET.Element, craft_id: str) -> int:
        raw = _attr(el, "rotation")
        if raw is None:
            raise ConfigurationError(f"{_name(el)} is missing rotation attribute", craft_id=craft_id)
        rotation = CraftReader._number(raw, int, "rotation attribute", craft_id)
        if rotation not in (1, -1):
            raise ConfigurationError(f"rotation must be 1 or -1, got {rotation}", craft_id=craft_id)
        return rotation

    @staticmethod
    def _number(
        raw: Optional[str],
        cast: Callable[[str], T],
        what: str,
        craft_id: str,
        default: Optional[T] = None,
    ) -> T:
        if raw is None or not raw.strip():
            if default is not None:
                return default
            raise ConfigurationError(f"{what} is missing", craft_id=craft_id)
        try:
            return cast(raw.strip())
        except ValueError:
            raise ConfigurationError(f"{what} '{raw.strip()}' is not a valid number", craft_id=craft_id) from None

    @staticmethod
    def _check_ports(motors: list[MotorRecord], craft_id: str) -> None:
        """Warn about port assignments that leave outputs unmapped or overwritten."""
        for motor in motors:
            if not 1 <= motor.port <= NUM_PORTS:
                logger.warning(f"Craft '{craft_id}': port {motor.port} is outside 1..{NUM_PORTS}")
        for port, count in Counter(m.port for m in motors).items():
            if count > 1:
                logger.warning(f"Craft '{craft_id}': port {port} is assigned to {count} motors")
