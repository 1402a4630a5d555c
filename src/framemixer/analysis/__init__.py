"""
The ANALYSIS layer turns a FrameConfig into geometry, mass properties and
mixer matrices. Pure numpy/scipy; no file I/O.
"""
from framemixer.analysis.engine import FrameResult, solve_frame

__all__ = ["FrameResult", "solve_frame"]
