import math

import pytest

from laser_mirrors.geometry import (
    closest_approach,
    direction_vector,
    mirror_endpoints,
    point_segment_distance,
    reflect,
    segment_intersect,
    wall_crossing,
)

RAY = {"ray_length": 2000.0, "min_distance": 5.0, "epsilon": 1e-9}


def test_direction_vector_snaps_axis_components():
    assert direction_vector(math.pi / 2) == (0.0, 1.0)
    assert direction_vector(math.pi) == (-1.0, 0.0)


def test_mirror_endpoints_follow_angle():
    start, end = mirror_endpoints((10.0, 20.0), 0.0, 5.0)
    assert start == (5.0, 20.0)
    assert end == (15.0, 20.0)

    start, end = mirror_endpoints((0.0, 0.0), math.pi / 4, math.sqrt(2))
    assert start == pytest.approx((-1.0, -1.0))
    assert end == pytest.approx((1.0, 1.0))


def test_segment_intersect_finds_hit_below_origin():
    hit = segment_intersect((0.0, 0.0), math.pi / 2, (-10.0, 50.0), (10.0, 50.0), **RAY)

    assert hit is not None
    assert hit.point == pytest.approx((0.0, 50.0))
    assert hit.distance == pytest.approx(50.0)


@pytest.mark.parametrize(
    "segment",
    [
        ((-10.0, -50.0), (10.0, -50.0)),  # behind the origin
        ((20.0, 50.0), (40.0, 50.0)),  # off to the side
        ((-10.0, 3.0), (10.0, 3.0)),  # closer than the minimum distance
        ((-10.0, 3000.0), (10.0, 3000.0)),  # past the ray length
        ((0.0, 50.0), (0.0, 50.0)),  # zero length
    ],
)
def test_segment_intersect_rejects_invalid_hits(segment):
    assert segment_intersect((0.0, 0.0), math.pi / 2, segment[0], segment[1], **RAY) is None


def test_segment_intersect_parallel_is_no_hit():
    assert segment_intersect((0.0, 0.0), 0.0, (10.0, 0.0), (90.0, 0.0), **RAY) is None
    assert segment_intersect((0.0, 0.0), 0.0, (10.0, 5.0), (90.0, 5.0), **RAY) is None


def test_reflect_orthogonal_cases():
    # Horizontal mirror, beam travelling straight down.
    assert reflect(math.pi / 2, 0.0) == pytest.approx(math.pi / 2)
    # Vertical mirror, beam travelling right.
    assert reflect(0.0, math.pi / 2) == pytest.approx(2 * math.pi)


def test_reflect_oblique_case_uses_surface_normal():
    mirror = math.radians(30)
    incident = math.radians(80)

    outgoing = reflect(incident, mirror)

    assert outgoing == pytest.approx(2 * (mirror + math.pi / 2) - incident)
    assert outgoing == pytest.approx(2 * mirror - incident + math.pi)


def test_reflect_diagonal_mirror_turns_vertical_beam_horizontal():
    dx, dy = direction_vector(reflect(math.pi / 2, math.pi / 4))

    assert dy == 0.0
    assert abs(dx) == pytest.approx(1.0)


def test_closest_approach_projects_center():
    t, distance = closest_approach((0.0, 0.0), 0.0, (30.0, 4.0))

    assert t == pytest.approx(30.0)
    assert distance == pytest.approx(4.0)


def test_wall_crossing_hits_exact_floor():
    assert wall_crossing((200.0, 20.0), math.pi / 2, 400.0, 600.0) == (200.0, 600.0)


def test_wall_crossing_picks_nearest_wall():
    assert wall_crossing((0.0, 0.0), math.pi / 4, 100.0, 50.0) == pytest.approx((50.0, 50.0))
    assert wall_crossing((80.0, 30.0), math.pi, 100.0, 50.0) == (0.0, 30.0)


def test_wall_crossing_none_when_heading_away_from_area():
    assert wall_crossing((-10.0, 10.0), math.pi, 100.0, 50.0) is None


def test_point_segment_distance():
    assert point_segment_distance((5.0, 5.0), (0.0, 0.0), (10.0, 0.0)) == pytest.approx(5.0)
    assert point_segment_distance((15.0, 0.0), (0.0, 0.0), (10.0, 0.0)) == pytest.approx(5.0)
    assert point_segment_distance((3.0, 4.0), (0.0, 0.0), (0.0, 0.0)) == pytest.approx(5.0)
