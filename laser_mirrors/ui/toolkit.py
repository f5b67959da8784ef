"""Input routing and drawing for a :class:`LaserPuzzle` on a pygame surface.

Nothing here reads the display directly, so the widget works on an
off-screen surface under the SDL ``dummy`` drivers.
"""

from __future__ import annotations

import os
from typing import Iterable, Optional, Tuple

from ..game import FrameState, LaserPuzzle
from ..geometry import point_segment_distance
from . import layout


# Imported on first use so callers can pick SDL drivers beforehand.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


class LaserPuzzleUI:
    """Routes pygame input into a puzzle and draws its latest frame."""

    def __init__(
        self,
        puzzle: LaserPuzzle,
        *,
        surface=None,
        use_display: bool = False,
        pick_radius: float = layout.PICK_RADIUS,
    ) -> None:
        pygame = ensure_pygame()
        self.puzzle = puzzle
        self.pick_radius = pick_radius
        size = (int(puzzle.width), int(puzzle.height))
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        self.surface = surface or pygame.Surface(size)
        self.dragging: Optional[int] = None
        self.drag_offset: Tuple[float, float] = (0.0, 0.0)
        self.selected: Optional[int] = None

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._begin_drag(event.pos)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 3:
                self._rotate_at(event.pos)
            elif event.type == pygame.MOUSEMOTION:
                self._drag_to(event.pos)
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.dragging = None
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_r:
                if self.selected is not None:
                    self.puzzle.rotate(self.selected)
            elif event.type == pygame.VIDEORESIZE:
                self.resize(event.size)

    def reflector_at(self, pos: Tuple[float, float]) -> Optional[int]:
        """Id of the mirror closest to ``pos`` within the pick radius."""

        best: Optional[Tuple[float, int]] = None
        for reflector in self.puzzle.reflectors:
            segment_a, segment_b = reflector.endpoints()
            distance = point_segment_distance(pos, segment_a, segment_b)
            if distance > self.pick_radius:
                continue
            if best is None or distance < best[0]:
                best = (distance, reflector.reflector_id)
        return best[1] if best else None

    def resize(self, size: Tuple[int, int]) -> None:
        pygame = ensure_pygame()
        width, height = int(size[0]), int(size[1])
        self.puzzle.resize(width, height)
        if self.screen is not None:
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.surface = pygame.Surface((width, height))

    def _begin_drag(self, pos: Tuple[int, int]) -> None:
        reflector_id = self.reflector_at(pos)
        self.selected = reflector_id
        if reflector_id is None:
            self.dragging = None
            return
        reflector = self.puzzle.registry.get(reflector_id)
        self.dragging = reflector_id
        self.drag_offset = (reflector.x - pos[0], reflector.y - pos[1])

    def _drag_to(self, pos: Tuple[int, int]) -> None:
        if self.dragging is None:
            return
        self.puzzle.translate(
            self.dragging,
            pos[0] + self.drag_offset[0],
            pos[1] + self.drag_offset[1],
        )

    def _rotate_at(self, pos: Tuple[int, int]) -> None:
        reflector_id = self.reflector_at(pos)
        if reflector_id is None:
            return
        self.selected = reflector_id
        self.puzzle.rotate(reflector_id)

    # ------------------------------------------------------------------
    # Rendering helpers
    def target_color(self, frame: FrameState) -> Tuple[int, int, int]:
        if frame.completed:
            return layout.TARGET_CHARGED_COLOR
        if not frame.charging:
            return layout.TARGET_IDLE_COLOR
        return layout.blend(layout.TARGET_IDLE_COLOR, layout.TARGET_CHARGED_COLOR, frame.progress)

    def render(self, frame: Optional[FrameState] = None):
        pygame = ensure_pygame()
        frame = frame or self.puzzle.frame_state
        self.surface.fill(layout.BACKGROUND_COLOR)
        self._draw_target(frame)
        self._draw_mirrors()
        self._draw_beam(frame)
        self._draw_emitter()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _draw_target(self, frame: FrameState) -> None:
        pygame = ensure_pygame()
        target = self.puzzle.current_target()
        if target is None:
            return
        center = (int(round(target.x)), int(round(target.y)))
        radius = int(round(target.radius))
        color = self.target_color(frame)
        if frame.charging or frame.completed:
            glow_radius = radius + int(layout.TARGET_GLOW_WIDTH * max(frame.progress, 0.1))
            glow = layout.blend(layout.BACKGROUND_COLOR, color, 0.45)
            pygame.draw.circle(self.surface, glow, center, glow_radius)
        pygame.draw.circle(self.surface, color, center, radius)

    def _draw_mirrors(self) -> None:
        pygame = ensure_pygame()
        for reflector in self.puzzle.reflectors:
            color = (
                layout.MIRROR_SELECTED_COLOR
                if reflector.reflector_id == self.selected
                else layout.MIRROR_COLOR
            )
            start, end = reflector.endpoints()
            pygame.draw.line(self.surface, color, start, end, layout.MIRROR_WIDTH)

    def _draw_beam(self, frame: FrameState) -> None:
        pygame = ensure_pygame()
        if len(frame.path) < 2:
            return
        pygame.draw.lines(self.surface, layout.BEAM_COLOR, False, frame.path, layout.BEAM_WIDTH)

    def _draw_emitter(self) -> None:
        pygame = ensure_pygame()
        x, y = self.puzzle.emitter_origin
        pygame.draw.circle(
            self.surface,
            layout.EMITTER_COLOR,
            (int(round(x)), int(round(y))),
            layout.EMITTER_RADIUS,
        )


__all__ = ["LaserPuzzleUI", "ensure_pygame"]
