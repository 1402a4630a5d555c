"""
Command Line Tool
=================
Reads a craft file, solves the frame and writes the requested table.

Why is this file needed?
------------------------
It acts as the composition root. It:
1. Parses the command line and sets up logging.
2. Reads the craft description (model layer).
3. Runs the synthesis engine (analysis layer).
4. Hands the result to the selected renderer (post layer).

Usage:
    $ framemixer crafts.xml -c myQuad            # firmware #define table
    $ framemixer crafts.xml -c myQuad -m -o      # writes myQuad.mix
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from framemixer.analysis.engine import solve_frame
from framemixer.config import APP_VERSION
from framemixer.errors import FrameError
from framemixer.logging_config import setup_logging
from framemixer.model.io import CraftReader
from framemixer.post.renderers import RENDERERS, MixRenderer, ParamRenderer, Renderer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="framemixer",
        description=(
            "Compute mass properties and motor mixing tables for a multi-rotor frame. "
            "Default output is C-style #define code for the firmware; "
            "-m produces an INI-format .mix file for the ground station motor mix configurator."
        ),
    )
    parser.add_argument("xml_file", help="Craft description file")
    parser.add_argument("-c", "--craft-id", default=None,
                        help="Craft to compute (default: first craft in the file)")
    parser.add_argument("-p", "--pid", action="store_true",
                        help="Emit the percentage PID table instead of Mt, M and J")
    parser.add_argument("-m", "--mix", action="store_true",
                        help="Emit an INI .mix file")
    parser.add_argument("-o", "--output", nargs="?", const="", default=None,
                        help="Write to a file; without a name, <craft_id>.mix or <craft_id>.param is used")
    parser.add_argument("-d", "--debug", action="store_true",
                        help="Debug logging, including a dump of the parsed craft data")
    parser.add_argument("--log-file", default=None,
                        help="Also write the log to this file")
    parser.add_argument("--plot", action="store_true",
                        help="Show the motor layout")
    parser.add_argument("-v", "--version", action="version", version=APP_VERSION)
    return parser


def output_path(requested: str, craft_id: str, renderer: Renderer) -> str:
    """Resolve the -o argument to a file name."""
    if requested:
        return requested
    if not craft_id:
        raise FrameError("cannot determine output file name, craft has no id")
    return f"{craft_id}{renderer.EXTENSION}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Use -d to see everything including intermediate matrices
    setup_logging(level=logging.DEBUG if args.debug else logging.WARNING, log_file=args.log_file)

    renderer: Renderer = RENDERERS[MixRenderer.NAME if args.mix else ParamRenderer.NAME](pid=args.pid)

    try:
        config = CraftReader.read(args.xml_file, craft_id=args.craft_id)
        result = solve_frame(config)

        if args.output is None:
            renderer.write(result, sys.stdout)
        else:
            path = output_path(args.output, config.craft_id, renderer)
            with open(path, "w", encoding="utf-8") as f:
                renderer.write(result, f)
            logger.info(f"Output written to: {path}")

    except FrameError as e:
        logger.error(f"{e}, aborting")
        return 1
    except OSError as e:
        logger.error(f"{e}, aborting")
        return 1

    if args.plot:
        result.geometry.plot(ports=config.ports)

    return 0


if __name__ == "__main__":
    sys.exit(main())
