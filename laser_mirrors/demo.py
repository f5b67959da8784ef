"""Simple command line demo for the mirror puzzle logic."""

from .config import PuzzleConfig
from .game import LaserPuzzle, StaticTargetProvider
from .ui.layout import target_circle

DEMO_AREA = (800, 600)


def main() -> None:
    width, height = DEMO_AREA
    target = StaticTargetProvider(target_circle(width, height))
    puzzle = LaserPuzzle(width, height, target_provider=target, config=PuzzleConfig.from_env())

    print("=== Laser Mirrors Demo ===")
    print(f"Starting layout ends at the {puzzle.trace.end.value}")

    # Park the first mirror under the emitter, level with the target, and
    # turn it until the beam heads right.
    puzzle.translate(0, width / 2, target.target.y)
    for _ in range(3):
        puzzle.rotate(0)

    summary = puzzle.summary()
    print(f"After moving mirror 0 the beam ends at the {summary['end']}")
    print("Beam path:")
    for x, y in summary["path"]:
        print(f"  ({x:.1f}, {y:.1f})")
    print(f"Charging: {puzzle.frame_state.charging}")


if __name__ == "__main__":
    main()
