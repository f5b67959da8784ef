"""Core simulation for the mirror puzzle."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, PuzzleConfig
from .geometry import (
    Hit,
    Point,
    closest_approach,
    direction_angle,
    mirror_endpoints,
    reflect,
    segment_intersect,
    wall_crossing,
)

logger = logging.getLogger(__name__)

# The emitter always fires straight down.
EMITTER_ANGLE = math.pi / 2
ROTATION_STEP = math.pi / 4
ROTATIONS_PER_TURN = 8


@dataclass
class Reflector:
    """Movable mirror treated as a zero-width segment."""

    reflector_id: int
    x: float
    y: float
    angle: float = 0.0
    half_length: float = DEFAULT_CONFIG.mirror_half_length
    turns: int = 0

    @property
    def center(self) -> Point:
        return (self.x, self.y)

    @property
    def orientation(self) -> float:
        """Accumulated orientation, growing by one step per rotation."""

        return self.angle + self.turns * ROTATION_STEP

    @property
    def effective_angle(self) -> float:
        # Full turns are dropped so that eight rotations restore the exact
        # floating point geometry.
        return self.angle + (self.turns % ROTATIONS_PER_TURN) * ROTATION_STEP

    def endpoints(self) -> Tuple[Point, Point]:
        return mirror_endpoints(self.center, self.effective_angle, self.half_length)


ReflectorListener = Callable[[Reflector], None]


class ReflectorRegistry:
    """Fixed set of reflectors addressed by id."""

    def __init__(self, reflectors: Iterable[Reflector]):
        self._reflectors: Dict[int, Reflector] = {}
        for reflector in reflectors:
            if reflector.reflector_id in self._reflectors:
                raise ValueError(f"Duplicate reflector id: {reflector.reflector_id}")
            self._reflectors[reflector.reflector_id] = replace(reflector)
        self._listeners: List[ReflectorListener] = []

    def __len__(self) -> int:
        return len(self._reflectors)

    def __iter__(self) -> Iterator[Reflector]:
        return iter(self.snapshot())

    def __contains__(self, reflector_id: object) -> bool:
        return reflector_id in self._reflectors

    def ids(self) -> List[int]:
        return list(self._reflectors)

    def get(self, reflector_id: int) -> Reflector:
        try:
            return replace(self._reflectors[reflector_id])
        except KeyError as exc:
            raise KeyError(f"Unknown reflector: {reflector_id}") from exc

    def subscribe(self, listener: ReflectorListener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> Tuple[Reflector, ...]:
        """Copies of every reflector, taken at one point in time."""

        return tuple(replace(reflector) for reflector in self._reflectors.values())

    def translate(self, reflector_id: int, x: float, y: float) -> Reflector:
        reflector = self._lookup(reflector_id)
        reflector.x = float(x)
        reflector.y = float(y)
        self._notify(reflector)
        return replace(reflector)

    def rotate(self, reflector_id: int) -> Reflector:
        reflector = self._lookup(reflector_id)
        reflector.turns += 1
        self._notify(reflector)
        return replace(reflector)

    def restore(self, reflectors: Iterable[Reflector]) -> None:
        """Overwrite state from ``reflectors`` without notifying listeners."""

        for source in reflectors:
            reflector = self._lookup(source.reflector_id)
            reflector.x = source.x
            reflector.y = source.y
            reflector.angle = source.angle
            reflector.turns = source.turns

    def _lookup(self, reflector_id: int) -> Reflector:
        try:
            return self._reflectors[reflector_id]
        except KeyError as exc:
            raise KeyError(f"Unknown reflector: {reflector_id}") from exc

    def _notify(self, reflector: Reflector) -> None:
        for listener in list(self._listeners):
            listener(replace(reflector))


@dataclass(frozen=True)
class TargetGeometry:
    """Circle the beam has to reach."""

    x: float
    y: float
    radius: float

    @property
    def center(self) -> Point:
        return (self.x, self.y)


# Returns ``None`` while the target has not been measured yet.
TargetProvider = Callable[[], Optional[TargetGeometry]]


class StaticTargetProvider:
    """Target provider backed by a fixed, replaceable geometry."""

    def __init__(self, target: Optional[TargetGeometry] = None):
        self.target = target

    def __call__(self) -> Optional[TargetGeometry]:
        return self.target


class TraceEnd(Enum):
    TARGET = "target"
    WALL = "wall"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Contact:
    point: Point
    distance: float


@dataclass
class TraceResult:
    """Ordered beam path produced by :func:`trace_beam`."""

    path: List[Point]
    end: TraceEnd
    bounces: int = 0
    hit_reflectors: List[int] = field(default_factory=list)
    ray_angles: List[float] = field(default_factory=list)

    @property
    def contact(self) -> bool:
        return self.end is TraceEnd.TARGET

    @property
    def directions(self) -> List[float]:
        return [
            direction_angle(start, end)
            for start, end in zip(self.path, self.path[1:])
        ]


def detect_contact(
    origin: Point,
    angle: float,
    target: TargetGeometry,
    config: PuzzleConfig = DEFAULT_CONFIG,
) -> Optional[Contact]:
    """Check whether the ray passes within tolerance of the target.

    The contact terminates at the target center rather than the tangent point.
    """

    t, distance = closest_approach(origin, angle, target.center)
    if distance > target.radius + config.target_tolerance:
        return None
    if not 0.0 < t <= config.ray_length:
        return None
    return Contact(point=target.center, distance=t)


def nearest_reflector_hit(
    origin: Point,
    angle: float,
    reflectors: Sequence[Reflector],
    config: PuzzleConfig = DEFAULT_CONFIG,
) -> Optional[Tuple[Reflector, Hit]]:
    nearest: Optional[Tuple[Reflector, Hit]] = None
    for reflector in reflectors:
        segment_a, segment_b = reflector.endpoints()
        hit = segment_intersect(
            origin,
            angle,
            segment_a,
            segment_b,
            ray_length=config.ray_length,
            min_distance=config.min_hit_distance,
            epsilon=config.parallel_epsilon,
        )
        if hit is None:
            continue
        if nearest is None or hit.distance < nearest[1].distance:
            nearest = (reflector, hit)
    return nearest


def trace_beam(
    origin: Point,
    angle: float,
    reflectors: Sequence[Reflector],
    target: Optional[TargetGeometry],
    width: float,
    height: float,
    config: PuzzleConfig = DEFAULT_CONFIG,
) -> TraceResult:
    """Follow the beam from ``origin`` until it reaches the target or leaves.

    Every reflector hit consumes one bounce. Once ``config.max_bounces`` is
    spent the next reflector absorbs the beam.
    """

    path: List[Point] = [origin]
    ray_angles: List[float] = []
    hit_reflectors: List[int] = []
    bounces = 0
    current, heading = origin, angle

    while True:
        ray_angles.append(heading)
        nearest = nearest_reflector_hit(current, heading, reflectors, config)
        contact = (
            detect_contact(current, heading, target, config)
            if target is not None
            else None
        )

        if contact is not None and (
            nearest is None or contact.distance < nearest[1].distance
        ):
            path.append(contact.point)
            return TraceResult(path, TraceEnd.TARGET, bounces, hit_reflectors, ray_angles)

        if nearest is not None:
            reflector, hit = nearest
            path.append(hit.point)
            hit_reflectors.append(reflector.reflector_id)
            if bounces >= config.max_bounces:
                return TraceResult(
                    path, TraceEnd.EXHAUSTED, bounces, hit_reflectors, ray_angles
                )
            bounces += 1
            current = hit.point
            heading = reflect(heading, reflector.effective_angle)
            continue

        exit_point = wall_crossing(current, heading, width, height)
        if exit_point is not None:
            path.append(exit_point)
        return TraceResult(path, TraceEnd.WALL, bounces, hit_reflectors, ray_angles)


class ChargeState(Enum):
    IDLE = "idle"
    CHARGING = "charging"


@dataclass(frozen=True)
class ChargeStatus:
    state: ChargeState
    progress: float
    completed: bool = False

    @property
    def charging(self) -> bool:
        return self.state is ChargeState.CHARGING


IDLE_STATUS = ChargeStatus(ChargeState.IDLE, 0.0)


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


class ChargeStateMachine:
    """Tracks how long the beam has been resting on the target.

    Losing contact discharges immediately. Once the charge is full the
    completion listeners fire once and the machine goes back to idle, so a
    later recompute with contact starts a fresh cycle.
    """

    def __init__(
        self,
        duration_ms: float = DEFAULT_CONFIG.charge_duration_ms,
        *,
        clock: Optional[Callable[[], float]] = None,
    ):
        if not duration_ms > 0:
            raise ValueError(f"Charge duration must be positive: {duration_ms}")
        self.duration_ms = float(duration_ms)
        self.clock = clock or monotonic_ms
        self.state = ChargeState.IDLE
        self.started_at: Optional[float] = None
        self.completions = 0
        self._listeners: List[Callable[[], None]] = []

    def on_complete(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    @property
    def charging(self) -> bool:
        return self.state is ChargeState.CHARGING

    def progress(self, now: Optional[float] = None) -> float:
        if self.state is ChargeState.IDLE or self.started_at is None:
            return 0.0
        elapsed = self._now(now) - self.started_at
        return max(0.0, min(1.0, elapsed / self.duration_ms))

    def status(self, now: Optional[float] = None) -> ChargeStatus:
        if self.state is ChargeState.IDLE:
            return IDLE_STATUS
        return ChargeStatus(self.state, self.progress(now))

    def update(self, contact: bool, now: Optional[float] = None) -> ChargeStatus:
        """Apply the outcome of a fresh trace."""

        now = self._now(now)
        if not contact:
            if self.state is ChargeState.CHARGING:
                logger.info("charge lost at %.2f", self.progress(now))
            self._go_idle()
            return IDLE_STATUS
        if self.state is ChargeState.IDLE:
            self.state = ChargeState.CHARGING
            self.started_at = now
            logger.info("charging started")
        return self._advance(now)

    def tick(self, now: Optional[float] = None) -> ChargeStatus:
        """Advance the charge from the clock alone."""

        if self.state is ChargeState.IDLE:
            return IDLE_STATUS
        return self._advance(self._now(now))

    def reset(self) -> None:
        self._go_idle()

    def _advance(self, now: float) -> ChargeStatus:
        progress = self.progress(now)
        if progress < 1.0:
            return ChargeStatus(ChargeState.CHARGING, progress)
        self._go_idle()
        self.completions += 1
        logger.info("charge completed (%d so far)", self.completions)
        for listener in list(self._listeners):
            listener()
        return ChargeStatus(ChargeState.IDLE, 1.0, completed=True)

    def _go_idle(self) -> None:
        self.state = ChargeState.IDLE
        self.started_at = None

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else float(now)


@dataclass(frozen=True)
class FrameState:
    """What the renderer needs for one frame."""

    path: Tuple[Point, ...]
    contact: bool
    charging: bool
    progress: float
    completed: bool = False


def default_layout(
    width: float, height: float, config: PuzzleConfig = DEFAULT_CONFIG
) -> List[Reflector]:
    """Starting mirrors, placed clear of the initial beam."""

    spots = ((0.25, 0.3), (0.75, 0.3), (0.25, 0.7))
    return [
        Reflector(
            reflector_id=index,
            x=width * fx,
            y=height * fy,
            angle=0.0,
            half_length=config.mirror_half_length,
        )
        for index, (fx, fy) in enumerate(spots)
    ]


def _check_area(width: float, height: float) -> None:
    if not (width > 0 and height > 0):
        raise ValueError(f"Play area must be positive, got {width}x{height}")


class LaserPuzzle:
    """Simulation context tying reflectors, target and charge together.

    Each mutation recomputes the beam before returning, so readers of
    :attr:`frame_state` always see the current layout.
    """

    def __init__(
        self,
        width: float,
        height: float,
        reflectors: Optional[Iterable[Reflector]] = None,
        target_provider: Optional[TargetProvider] = None,
        *,
        config: Optional[PuzzleConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = (config or DEFAULT_CONFIG).validate()
        _check_area(width, height)
        self.width = float(width)
        self.height = float(height)
        if reflectors is None:
            reflectors = default_layout(self.width, self.height, self.config)
        self._initial_layout = tuple(replace(reflector) for reflector in reflectors)
        self.registry = ReflectorRegistry(self._initial_layout)
        self.registry.subscribe(self._on_reflector_changed)
        self.target_provider: TargetProvider = target_provider or StaticTargetProvider()
        self.charge = ChargeStateMachine(self.config.charge_duration_ms, clock=clock)
        self._subscribers: List[Callable[[FrameState], None]] = []
        self.trace: TraceResult = TraceResult([self.emitter_origin], TraceEnd.WALL)
        self.charge_status: ChargeStatus = IDLE_STATUS
        self.recompute()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def translate(self, reflector_id: int, x: float, y: float) -> TraceResult:
        self.registry.translate(reflector_id, x, y)
        return self.trace

    def rotate(self, reflector_id: int) -> TraceResult:
        self.registry.rotate(reflector_id)
        return self.trace

    def resize(self, width: float, height: float) -> TraceResult:
        _check_area(width, height)
        self.width = float(width)
        self.height = float(height)
        return self.recompute()

    def reset(self) -> TraceResult:
        """Put every reflector back where it started and discharge."""

        self.registry.restore(self._initial_layout)
        self.charge.reset()
        logger.info("puzzle reset")
        return self.recompute()

    def on_complete(self, listener: Callable[[], None]) -> None:
        self.charge.on_complete(listener)

    def subscribe(self, callback: Callable[[FrameState], None]) -> None:
        self._subscribers.append(callback)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    @property
    def emitter_origin(self) -> Point:
        return (self.width / 2, self.config.emitter_offset)

    @property
    def reflectors(self) -> Tuple[Reflector, ...]:
        return self.registry.snapshot()

    def current_target(self) -> Optional[TargetGeometry]:
        target = self.target_provider()
        if target is None:
            logger.debug("target geometry unavailable, skipping contact test")
        return target

    def recompute(self, now: Optional[float] = None) -> TraceResult:
        self.trace = trace_beam(
            self.emitter_origin,
            EMITTER_ANGLE,
            self.registry.snapshot(),
            self.current_target(),
            self.width,
            self.height,
            self.config,
        )
        self.charge_status = self.charge.update(self.trace.contact, now)
        logger.debug(
            "beam traced: end=%s points=%d bounces=%d",
            self.trace.end.value,
            len(self.trace.path),
            self.trace.bounces,
        )
        self._publish()
        return self.trace

    def tick(self, now: Optional[float] = None) -> FrameState:
        """Advance the charge timer for a new frame."""

        self.charge_status = self.charge.tick(now)
        frame = self.frame_state
        self._publish(frame)
        return frame

    @property
    def frame_state(self) -> FrameState:
        return FrameState(
            path=tuple(self.trace.path),
            contact=self.trace.contact,
            charging=self.charge_status.charging,
            progress=self.charge_status.progress,
            completed=self.charge_status.completed,
        )

    def summary(self) -> Dict[str, object]:
        target = self.target_provider()
        return {
            "area": [self.width, self.height],
            "emitter": list(self.emitter_origin),
            "path": [[x, y] for x, y in self.trace.path],
            "end": self.trace.end.value,
            "bounces": self.trace.bounces,
            "hit_reflectors": list(self.trace.hit_reflectors),
            "charge": {
                "state": self.charge_status.state.value,
                "progress": self.charge_status.progress,
            },
            "reflectors": [
                {
                    "id": reflector.reflector_id,
                    "center": [reflector.x, reflector.y],
                    "orientation": reflector.orientation,
                    "half_length": reflector.half_length,
                }
                for reflector in self.registry.snapshot()
            ],
            "target": (
                {"center": [target.x, target.y], "radius": target.radius}
                if target is not None
                else None
            ),
        }

    def _on_reflector_changed(self, reflector: Reflector) -> None:
        logger.debug(
            "reflector %s at (%.1f, %.1f) orientation %.3f",
            reflector.reflector_id,
            reflector.x,
            reflector.y,
            reflector.orientation,
        )
        self.recompute()

    def _publish(self, frame: Optional[FrameState] = None) -> None:
        if not self._subscribers:
            return
        frame = frame or self.frame_state
        for callback in list(self._subscribers):
            callback(frame)


__all__ = [
    "ChargeState",
    "ChargeStateMachine",
    "ChargeStatus",
    "Contact",
    "EMITTER_ANGLE",
    "FrameState",
    "LaserPuzzle",
    "ROTATION_STEP",
    "Reflector",
    "ReflectorRegistry",
    "StaticTargetProvider",
    "TargetGeometry",
    "TargetProvider",
    "TraceEnd",
    "TraceResult",
    "default_layout",
    "detect_contact",
    "monotonic_ms",
    "nearest_reflector_hit",
    "trace_beam",
]
