"""User interface package for the laser mirrors puzzle."""

from .main import LaserPuzzleApp, headless_summary, main, run
from .toolkit import LaserPuzzleUI

__all__ = [
    "LaserPuzzleApp",
    "LaserPuzzleUI",
    "headless_summary",
    "main",
    "run",
]
