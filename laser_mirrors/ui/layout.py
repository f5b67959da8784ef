"""Layout constants for the laser mirrors UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..game import TargetGeometry

# Window metrics
DEFAULT_WINDOW_SIZE: Tuple[int, int] = (900, 700)
MIN_PLAY_SIZE: Tuple[int, int] = (160, 160)
STATUS_BAR_HEIGHT: int = 72
STATUS_BAR_PADDING: int = 18

# Interaction metrics
PICK_RADIUS: float = 14.0
BEAM_WIDTH: int = 3
MIRROR_WIDTH: int = 5
EMITTER_RADIUS: int = 8

# Target placement relative to the play area
TARGET_POSITION: Tuple[float, float] = (0.8, 0.8)
TARGET_RADIUS_RATIO: float = 0.045
TARGET_MIN_RADIUS: float = 14.0
TARGET_GLOW_WIDTH: int = 14

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (12, 14, 26)
STATUS_BACKGROUND_COLOR: Tuple[int, int, int] = (32, 36, 60)
TEXT_COLOR: Tuple[int, int, int] = (232, 236, 244)
BEAM_COLOR: Tuple[int, int, int] = (255, 94, 0)
EMITTER_COLOR: Tuple[int, int, int] = (130, 210, 255)
MIRROR_COLOR: Tuple[int, int, int] = (220, 226, 240)
MIRROR_SELECTED_COLOR: Tuple[int, int, int] = (120, 200, 255)
TARGET_IDLE_COLOR: Tuple[int, int, int] = (60, 120, 90)
TARGET_CHARGED_COLOR: Tuple[int, int, int] = (140, 255, 180)
WIN_COLOR: Tuple[int, int, int] = (255, 220, 110)


@dataclass(frozen=True)
class ScreenGeometry:
    """Pixel rectangles for the major UI regions."""

    play: Tuple[int, int, int, int]
    status: Tuple[int, int, int, int]
    window: Tuple[int, int]

    @property
    def play_size(self) -> Tuple[int, int]:
        return self.play[2], self.play[3]


def compute_geometry(window_width: int, window_height: int) -> ScreenGeometry:
    """Split the window into the play area and the status bar below it.

    The play area starts at the window origin so pointer positions map onto
    simulation coordinates unchanged.
    """

    play_width = max(window_width, MIN_PLAY_SIZE[0])
    play_height = max(window_height - STATUS_BAR_HEIGHT, MIN_PLAY_SIZE[1])
    status_rect = (0, play_height, play_width, STATUS_BAR_HEIGHT)
    return ScreenGeometry(
        play=(0, 0, play_width, play_height),
        status=status_rect,
        window=(play_width, play_height + STATUS_BAR_HEIGHT),
    )


def target_circle(play_width: Optional[float], play_height: Optional[float]) -> Optional[TargetGeometry]:
    """Target placement for a play area, or ``None`` before it is measured."""

    if not play_width or not play_height:
        return None
    radius = max(TARGET_MIN_RADIUS, min(play_width, play_height) * TARGET_RADIUS_RATIO)
    return TargetGeometry(
        x=play_width * TARGET_POSITION[0],
        y=play_height * TARGET_POSITION[1],
        radius=radius,
    )


def blend(start: Tuple[int, int, int], end: Tuple[int, int, int], amount: float) -> Tuple[int, int, int]:
    amount = max(0.0, min(1.0, amount))
    return tuple(int(round(a + (b - a) * amount)) for a, b in zip(start, end))  # type: ignore[return-value]
