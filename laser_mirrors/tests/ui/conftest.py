"""Shared pytest fixtures for UI tests.

The tests force pygame into a deterministic headless configuration by using
the SDL ``dummy`` video and audio drivers.
"""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from laser_mirrors.game import LaserPuzzle, StaticTargetProvider, TargetGeometry, default_layout


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture(scope="session")
def pygame_module():
    import pygame

    pygame.display.init()
    pygame.font.init()
    try:
        yield pygame
    finally:
        pygame.quit()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def target_provider() -> StaticTargetProvider:
    return StaticTargetProvider(TargetGeometry(320.0, 420.0, 20.0))


@pytest.fixture
def puzzle(clock, target_provider) -> LaserPuzzle:
    return LaserPuzzle(400, 600, default_layout(400, 600), target_provider, clock=clock)
