"""
Configuration & Constants
=========================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Defaults: Craft files may omit masses and distances; the values used in
   their place live here and nowhere else.
2. Hardware: The number of motor output ports on the flight controller
   bounds every per-port table the renderers emit.
3. Versioning: The version written into every generated file is resolved
   from the installed package metadata.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    EXAMPLE_CRAFTS_PATH (str): Absolute path to the bundled example craft file.
    APP_VERSION (str): Version string stamped into the generated output.
"""
import logging
import os
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to a resource shipped next to the source tree.
    """
    # config.py is in src/framemixer/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


try:
    APP_VERSION = version("framemixer")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# Flight controller hardware
NUM_PORTS: int = 16

# Craft defaults (grams / metres)
DEFAULT_MASS_ARM: float = 80.0
DEFAULT_MASS_MOTOR: float = 100.0
DEFAULT_MASS_ESC: float = 20.0
DEFAULT_DIST_MOTOR: float = 0.25
DEFAULT_DIST_ESC: float = 0.1

# Edge length of one cell used to integrate extended bodies [m]
CELL_SIZE: float = 0.001
CELLS_PER_METRE: int = 1000

# Global paths
ASSETS_PATH: str = get_resource_path("assets")
EXAMPLE_CRAFTS_PATH: str = os.path.join(ASSETS_PATH, "crafts.xml")

if not os.path.exists(ASSETS_PATH):
    logger.debug(f"Assets path not found at {ASSETS_PATH}")
