"""Tests for shared/geometry.py and shared/transforms.py pure functions."""
import math
import pytest
from shared.types import Vertex
from shared.ids import with_ids, ensure_ids
from shared.geometry import (
    GeometryError, PolygonValidationError,
    left_norm, right_norm, off_pt, line_isect, project_onto_line,
    point_segment_distance, segment_distance, segments_cross, segment_isect,
    normalize_angle, wrap_angle, are_parallel, are_perpendicular,
    poly_area, signed_area, is_ccw, ensure_ccw, centroid, recenter_vertices,
    is_self_intersecting, validate_polygon, point_in_polygon,
    remove_collinear_vertices, offset_polygon,
)
from shared.transforms import (
    ViewTransform, rotate_point, local_to_world, world_to_local,
    screen_to_world, world_to_screen, snap_angle_to_increment, pointer_angle,
)

from conftest import flat

SQ = [(0, 0), (4, 0), (4, 3), (0, 3)]


# --- normals & lines ---

def test_left_norm_horizontal():
    n = left_norm((0, 0), (1, 0))
    assert abs(n[0] - 0.0) < 1e-12
    assert abs(n[1] - 1.0) < 1e-12


def test_right_norm_is_outward_for_ccw_bottom_edge():
    assert right_norm((0, 0), (4, 0)) == pytest.approx((0.0, -1.0))


def test_left_norm_zero_length_raises():
    with pytest.raises(GeometryError, match="Zero-length"):
        left_norm((1, 1), (1, 1))


def test_off_pt():
    p = off_pt((3, 4), (0, 1), 2.0)
    assert abs(p[0] - 3.0) < 1e-12
    assert abs(p[1] - 6.0) < 1e-12


def test_line_isect_perpendicular():
    p = line_isect((0, 1), (1, 0), (2, 0), (0, 1))
    assert abs(p[0] - 2.0) < 1e-10
    assert abs(p[1] - 1.0) < 1e-10


def test_line_isect_parallel_raises():
    with pytest.raises(GeometryError, match="Parallel"):
        line_isect((0, 0), (1, 0), (0, 1), (1, 0))


def test_project_onto_line_beyond_segment():
    assert project_onto_line((10, 5), (0, 0), (2, 0)) == pytest.approx((10, 0))


class TestSegments:
    def test_point_segment_distance_clamps_to_end(self):
        d, c = point_segment_distance((5, 1), (0, 0), (4, 0))
        assert c == pytest.approx((4, 0))
        assert d == pytest.approx(math.hypot(1, 1))

    def test_segment_distance_parallel(self):
        assert segment_distance((0, 0), (4, 0), (1, 2), (3, 2)) == pytest.approx(2.0)

    def test_segments_cross(self):
        assert segments_cross((0, 0), (2, 2), (0, 2), (2, 0))

    def test_touching_is_not_crossing(self):
        assert not segments_cross((0, 0), (2, 0), (2, 0), (2, 2))

    def test_segment_isect(self):
        assert segment_isect((0, 0), (2, 2), (0, 2), (2, 0)) == pytest.approx((1, 1))
        assert segment_isect((0, 0), (1, 0), (0, 1), (1, 1)) is None


# --- angles ---

class TestAngles:
    def test_normalize_range(self):
        assert normalize_angle(-math.pi / 2) == pytest.approx(3 * math.pi / 2)
        assert normalize_angle(2 * math.pi) == pytest.approx(0.0)

    def test_wrap_range(self):
        assert wrap_angle(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
        assert wrap_angle(math.pi) == pytest.approx(math.pi)

    def test_parallel_includes_antiparallel(self):
        assert are_parallel((0, 0), (1, 0), (5, 5), (3, 5))
        assert not are_parallel((0, 0), (1, 0), (0, 0), (0, 1))

    def test_perpendicular(self):
        assert are_perpendicular((0, 0), (1, 0), (0, 0), (0, 1))


# --- polygons ---

class TestPolygons:
    def test_area_and_winding(self):
        assert poly_area(SQ) == pytest.approx(12.0)
        assert signed_area(SQ) > 0
        assert is_ccw(SQ)
        assert not is_ccw(list(reversed(SQ)))

    def test_ensure_ccw_reverses_clockwise_keeping_ids(self):
        cw = with_ids(list(reversed(SQ)))
        ccw = ensure_ccw(cw)
        assert is_ccw([v.xy for v in ccw])
        assert {v.id for v in ccw} == {v.id for v in cw}

    def test_ensure_ccw_idempotent(self):
        once = ensure_ccw(with_ids(list(reversed(SQ))))
        assert ensure_ccw(once) == once

    def test_recenter_idempotent(self):
        centered, c = recenter_vertices(with_ids(SQ))
        assert c == pytest.approx((2.0, 1.5))
        again, c2 = recenter_vertices(centered)
        assert c2 == pytest.approx((0.0, 0.0))
        assert flat(v.xy for v in again) == pytest.approx(flat(v.xy for v in centered))

    def test_centroid_empty(self):
        assert centroid([]) == (0.0, 0.0)

    def test_self_intersection(self):
        assert is_self_intersecting([(0, 0), (4, 3), (4, 0), (0, 3)])
        assert not is_self_intersecting(SQ)

    def test_validate_polygon(self):
        with pytest.raises(PolygonValidationError, match="at least 3"):
            validate_polygon([(0, 0), (1, 1)])
        with pytest.raises(PolygonValidationError, match="self-intersecting"):
            validate_polygon([(0, 0), (4, 3), (4, 0), (0, 3)])
        validate_polygon(SQ)

    def test_point_in_polygon(self):
        assert point_in_polygon((1, 1), SQ)
        assert not point_in_polygon((5, 1), SQ)

    def test_remove_collinear(self):
        vs = with_ids([(0, 0), (2, 0), (4, 0), (4, 3), (0, 3)])
        assert [v.xy for v in remove_collinear_vertices(vs)] == [(0, 0), (4, 0), (4, 3), (0, 3)]

    def test_offset_square(self):
        out = offset_polygon(SQ, 1.0)
        assert flat(out) == pytest.approx(flat([(-1, -1), (5, -1), (5, 4), (-1, 4)]))


def test_ensure_ids_replaces_duplicates():
    vs = ensure_ids([Vertex("a", 0, 0), Vertex("a", 1, 0), Vertex("", 1, 1)])
    assert vs[0].id == "a"
    assert len({v.id for v in vs}) == 3


# --- transforms ---

class TestTransforms:
    def test_rotate_about_center(self):
        assert rotate_point((2, 1), math.pi / 2, (1, 1)) == pytest.approx((1, 2))

    def test_local_world_round_trip(self):
        p = (12.5, -3.0)
        w = local_to_world(p, (100, 50), 0.7, 1.5)
        assert world_to_local(w, (100, 50), 0.7, 1.5) == pytest.approx(p)

    def test_screen_round_trip(self):
        view = ViewTransform((30, -10), 2.0)
        assert world_to_screen((5, 5), view) == pytest.approx((40, 0))
        assert screen_to_world((40, 0), view) == pytest.approx((5, 5))

    def test_snap_angle_only_within_threshold(self):
        assert snap_angle_to_increment(math.radians(44)) == pytest.approx(math.radians(45))
        assert snap_angle_to_increment(math.radians(37)) == pytest.approx(math.radians(37))

    def test_pointer_angle_normalized(self):
        assert pointer_angle((0, 0), (0, -1)) == pytest.approx(3 * math.pi / 2)
        assert pointer_angle((0, 0), (100, 3), snap=True) == pytest.approx(0.0)
