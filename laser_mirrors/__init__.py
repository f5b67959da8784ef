"""Laser Mirrors package."""

from .config import PuzzleConfig
from .game import (
    ChargeStateMachine,
    LaserPuzzle,
    Reflector,
    ReflectorRegistry,
    StaticTargetProvider,
    TargetGeometry,
    trace_beam,
)
from .ui import LaserPuzzleUI

__all__ = [
    "ChargeStateMachine",
    "LaserPuzzle",
    "LaserPuzzleUI",
    "PuzzleConfig",
    "Reflector",
    "ReflectorRegistry",
    "StaticTargetProvider",
    "TargetGeometry",
    "trace_beam",
]
