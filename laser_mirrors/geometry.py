"""Plane geometry helpers used by the beam tracer.

Angles are in radians in screen coordinates: ``x`` grows to the right and
``y`` grows downward, so an angle of ``pi / 2`` points straight down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]

# Components smaller than this are treated as exactly zero.
AXIS_SNAP = 1e-12


@dataclass(frozen=True)
class Hit:
    """Intersection of a ray with a segment."""

    point: Point
    distance: float


def direction_vector(angle: float) -> Point:
    dx = math.cos(angle)
    dy = math.sin(angle)
    if abs(dx) < AXIS_SNAP:
        dx = 0.0
    if abs(dy) < AXIS_SNAP:
        dy = 0.0
    return dx, dy


def direction_angle(start: Point, end: Point) -> float:
    return math.atan2(end[1] - start[1], end[0] - start[0])


def mirror_endpoints(center: Point, angle: float, half_length: float) -> Tuple[Point, Point]:
    dx, dy = direction_vector(angle)
    cx, cy = center
    return (
        (cx - dx * half_length, cy - dy * half_length),
        (cx + dx * half_length, cy + dy * half_length),
    )


def segment_intersect(
    origin: Point,
    angle: float,
    segment_a: Point,
    segment_b: Point,
    *,
    ray_length: float,
    min_distance: float,
    epsilon: float,
) -> Optional[Hit]:
    """Intersect a ray with the segment ``segment_a``-``segment_b``.

    The ray is treated as a segment of ``ray_length`` starting at ``origin``.
    Hits closer than ``min_distance`` are dropped so a beam leaving a mirror
    does not immediately hit the same mirror again.
    """

    dx, dy = direction_vector(angle)
    rx, ry = dx * ray_length, dy * ray_length
    sx, sy = segment_b[0] - segment_a[0], segment_b[1] - segment_a[1]

    det = rx * sy - ry * sx
    if abs(det) < epsilon:
        return None

    qx, qy = segment_a[0] - origin[0], segment_a[1] - origin[1]
    t = (qx * sy - qy * sx) / det
    u = (qx * ry - qy * rx) / det
    if not (0.0 <= t <= 1.0 and 0.0 <= u <= 1.0):
        return None

    distance = t * ray_length
    if distance <= min_distance:
        return None
    point = (origin[0] + t * rx, origin[1] + t * ry)
    return Hit(point=point, distance=distance)


def reflect(incident_angle: float, mirror_angle: float) -> float:
    normal = mirror_angle + math.pi / 2
    return 2 * normal - incident_angle


def closest_approach(origin: Point, angle: float, center: Point) -> Tuple[float, float]:
    """Return ``(t, distance)`` for the point of the ray nearest to ``center``.

    ``t`` is the signed distance along the ray of the projected center.
    """

    dx, dy = direction_vector(angle)
    ox, oy = center[0] - origin[0], center[1] - origin[1]
    t = ox * dx + oy * dy
    px, py = origin[0] + t * dx, origin[1] + t * dy
    return t, math.hypot(center[0] - px, center[1] - py)


def wall_crossing(origin: Point, angle: float, width: float, height: float) -> Optional[Point]:
    """First point where the ray leaves the ``width`` x ``height`` area."""

    dx, dy = direction_vector(angle)
    x, y = origin
    best: Optional[Tuple[float, Point]] = None

    candidates = []
    if dx > 0:
        candidates.append(((width - x) / dx, "x", width))
    elif dx < 0:
        candidates.append(((0.0 - x) / dx, "x", 0.0))
    if dy > 0:
        candidates.append(((height - y) / dy, "y", height))
    elif dy < 0:
        candidates.append(((0.0 - y) / dy, "y", 0.0))

    for t, axis, wall in candidates:
        if t <= 0:
            continue
        if axis == "x":
            point = (wall, y + t * dy)
        else:
            point = (x + t * dx, wall)
        if best is None or t < best[0]:
            best = (t, point)
    return best[1] if best else None


def point_segment_distance(point: Point, segment_a: Point, segment_b: Point) -> float:
    sx, sy = segment_b[0] - segment_a[0], segment_b[1] - segment_a[1]
    px, py = point[0] - segment_a[0], point[1] - segment_a[1]
    length_sq = sx * sx + sy * sy
    if length_sq == 0:
        return math.hypot(px, py)
    t = max(0.0, min(1.0, (px * sx + py * sy) / length_sq))
    return math.hypot(px - t * sx, py - t * sy)


__all__ = [
    "Hit",
    "Point",
    "closest_approach",
    "direction_angle",
    "direction_vector",
    "mirror_endpoints",
    "point_segment_distance",
    "reflect",
    "segment_intersect",
    "wall_crossing",
]
