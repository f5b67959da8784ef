"""Interactive window for the laser mirrors puzzle using pygame."""

from __future__ import annotations

import argparse
import json
import logging
import time
from typing import List, Optional, Sequence, Tuple

import pygame

from ..config import (
    CHARGE_MS_ENV_VAR,
    MAX_BOUNCES_ENV_VAR,
    MIN_HIT_DISTANCE_ENV_VAR,
    RAY_LENGTH_ENV_VAR,
    TARGET_TOLERANCE_ENV_VAR,
    PuzzleConfig,
)
from ..game import FrameState, LaserPuzzle, TargetGeometry
from . import layout
from .toolkit import LaserPuzzleUI

logger = logging.getLogger(__name__)

ENV_VARS = (
    MAX_BOUNCES_ENV_VAR,
    RAY_LENGTH_ENV_VAR,
    MIN_HIT_DISTANCE_ENV_VAR,
    TARGET_TOLERANCE_ENV_VAR,
    CHARGE_MS_ENV_VAR,
)


class LaserPuzzleApp:
    """Pygame driven application for the mirror puzzle."""

    fps = 60
    win_banner_duration = 3.0

    def __init__(
        self,
        screen_size: Tuple[int, int] = layout.DEFAULT_WINDOW_SIZE,
        *,
        config: Optional[PuzzleConfig] = None,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Laser Mirrors")
        self.geometry = layout.compute_geometry(*screen_size)
        self.screen = pygame.display.set_mode(self.geometry.window, pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("segoeui", 20)
        self.bold_font = pygame.font.SysFont("segoeui", 30, bold=True)

        self.play_size: Optional[Tuple[int, int]] = None
        play_width, play_height = self.geometry.play_size
        self.puzzle = LaserPuzzle(
            play_width,
            play_height,
            target_provider=self.current_target,
            config=config or PuzzleConfig.from_env(),
        )
        self.play_size = self.geometry.play_size
        self.puzzle.recompute()
        self.ui = LaserPuzzleUI(self.puzzle, surface=self.screen)

        self.wins = 0
        self.won_at: Optional[float] = None
        self.puzzle.on_complete(self._on_charge_complete)

    def current_target(self) -> Optional[TargetGeometry]:
        if self.play_size is None:
            return None
        return layout.target_circle(*self.play_size)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> bool:
        """Dispatch one event; return ``False`` when the app should quit."""

        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            return False
        if event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            self.reset()
        elif event.type == pygame.VIDEORESIZE:
            self._handle_resize(event.size)
        else:
            self.ui.process_events([event])
        return True

    def reset(self) -> None:
        self.won_at = None
        self.ui.selected = None
        self.ui.dragging = None
        self.puzzle.reset()

    def _handle_resize(self, size: Tuple[int, int]) -> None:
        self.geometry = layout.compute_geometry(*size)
        self.screen = pygame.display.set_mode(self.geometry.window, pygame.RESIZABLE)
        self.ui.surface = self.screen
        self.play_size = self.geometry.play_size
        self.puzzle.resize(*self.play_size)

    def _on_charge_complete(self) -> None:
        self.wins += 1
        self.won_at = time.perf_counter()
        logger.info("target charged, win #%d", self.wins)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def draw(self, frame: FrameState) -> None:
        self.ui.render(frame)
        self._draw_status_bar(frame)
        if self.won_at is not None:
            if time.perf_counter() - self.won_at <= self.win_banner_duration:
                self._draw_win_banner()
        pygame.display.flip()

    def _draw_status_bar(self, frame: FrameState) -> None:
        rect = pygame.Rect(*self.geometry.status)
        pygame.draw.rect(self.screen, layout.STATUS_BACKGROUND_COLOR, rect)
        if frame.charging:
            text = f"Charging {int(frame.progress * 100)}%"
        elif frame.contact:
            text = "Target lit"
        else:
            text = "Drag mirrors, right click or R to rotate, Space to reset"
        label = self.font.render(text, True, layout.TEXT_COLOR)
        label_rect = label.get_rect()
        label_rect.midleft = (rect.x + layout.STATUS_BAR_PADDING, rect.centery)
        self.screen.blit(label, label_rect)

        bar_width = rect.width // 3
        bar = pygame.Rect(
            rect.right - bar_width - layout.STATUS_BAR_PADDING,
            rect.centery - 8,
            bar_width,
            16,
        )
        pygame.draw.rect(self.screen, layout.BACKGROUND_COLOR, bar, border_radius=8)
        filled = bar.copy()
        filled.width = int(bar.width * frame.progress)
        if filled.width:
            pygame.draw.rect(self.screen, layout.TARGET_CHARGED_COLOR, filled, border_radius=8)

    def _draw_win_banner(self) -> None:
        label = self.bold_font.render("Target charged!", True, layout.WIN_COLOR)
        label_rect = label.get_rect()
        play = pygame.Rect(*self.geometry.play)
        label_rect.center = play.center
        self.screen.blit(label, label_rect)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        running = True
        while running:
            for event in pygame.event.get():
                if not self.handle_event(event):
                    running = False
                    break
            frame = self.puzzle.tick()
            self.draw(frame)
            self.clock.tick(self.fps)
        pygame.quit()


def _parse_size(value: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got {value!r}") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Window size must be positive: {value!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Laser Mirrors launcher")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print the resolved simulation settings and exit without launching the UI.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Trace the starting layout and print it as JSON instead of opening a window.",
    )
    parser.add_argument(
        "--size",
        type=_parse_size,
        default=layout.DEFAULT_WINDOW_SIZE,
        help="Window size as WIDTHxHEIGHT (default: %(default)s).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log simulation events.")
    return parser


def describe_config(config: PuzzleConfig) -> str:
    lines: List[str] = ["Laser Mirrors settings"]
    for name, value in config.as_dict().items():
        lines.append(f"  {name}: {value}")
    lines.append("Override with: " + ", ".join(ENV_VARS))
    return "\n".join(lines)


def headless_summary(size: Tuple[int, int], config: PuzzleConfig) -> dict:
    geometry = layout.compute_geometry(*size)
    play_width, play_height = geometry.play_size
    target = layout.target_circle(play_width, play_height)
    puzzle = LaserPuzzle(
        play_width,
        play_height,
        target_provider=lambda: target,
        config=config,
    )
    return puzzle.summary()


def run(size: Tuple[int, int] = layout.DEFAULT_WINDOW_SIZE, config: Optional[PuzzleConfig] = None) -> None:
    """Entry point helper that instantiates and runs the UI."""

    app = LaserPuzzleApp(size, config=config)
    app.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = PuzzleConfig.from_env()

    if args.info:
        print(describe_config(config))
        return 0
    if args.trace:
        print(json.dumps(headless_summary(args.size, config), indent=2))
        return 0

    run(args.size, config)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    raise SystemExit(main())
