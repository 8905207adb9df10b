"""Tests for walls/generate.py and walls/classify.py."""
import pytest
from shared.types import Vertex
from shared.ids import with_ids
from shared.geometry import distance
from walls.constants import DEFAULT_WALL_HEIGHT, DEFAULT_WALL_TYPE
from walls.generate import generate_walls, wall_quad, wall_length, validate_wall_indices
from walls.classify import (
    find_segment_overlap, split_edge_at_overlaps, wall_segments,
    classify_wall_type, classify_walls,
)

from conftest import flat

SQ_LOCAL = [(-200, -150), (200, -150), (200, 150), (-200, 150)]


def _on_line(p, a, b):
    """Perpendicular distance of p from the infinite line a-b."""
    L = distance(a, b)
    return abs((b[0] - a[0]) * (a[1] - p[1]) - (a[0] - p[0]) * (b[1] - a[1])) / L


class TestGenerateWalls:
    def test_one_wall_per_vertex(self):
        walls = generate_walls(with_ids(SQ_LOCAL), 15)
        assert len(walls) == 4
        assert [w.vertex_index for w in walls] == [0, 1, 2, 3]

    def test_defaults(self):
        w = generate_walls(with_ids(SQ_LOCAL), 15)[0]
        assert w.thickness == 15
        assert w.wall_type == DEFAULT_WALL_TYPE
        assert w.height == DEFAULT_WALL_HEIGHT
        assert w.apertures == []

    def test_square_corners(self):
        w = generate_walls(with_ids(SQ_LOCAL), 15)[0]
        assert w.normal == pytest.approx((0, -1))
        assert w.start_corner == pytest.approx((-215, -165))
        assert w.end_corner == pytest.approx((215, -165))

    def test_corners_lie_on_both_offset_lines(self, l_room):
        vs = [v.xy for v in l_room.vertices]
        n = len(vs)
        for i, w in enumerate(l_room.walls):
            prev = l_room.walls[i - 1]
            a, b = vs[i], vs[(i + 1) % n]
            pa, pb = vs[i - 1], vs[i]
            own = (a[0] + w.normal[0] * w.thickness, a[1] + w.normal[1] * w.thickness)
            own2 = (b[0] + w.normal[0] * w.thickness, b[1] + w.normal[1] * w.thickness)
            pr = (pa[0] + prev.normal[0] * prev.thickness, pa[1] + prev.normal[1] * prev.thickness)
            pr2 = (pb[0] + prev.normal[0] * prev.thickness, pb[1] + prev.normal[1] * prev.thickness)
            assert _on_line(w.start_corner, own, own2) < 1e-9
            assert _on_line(w.start_corner, pr, pr2) < 1e-9

    def test_mixed_thickness_miter(self):
        vs = with_ids(SQ_LOCAL)
        walls = generate_walls(vs, 15)
        walls[1] = walls[1]._replace(thickness=30)
        out = generate_walls(vs, 15, walls, vs)
        assert out[1].thickness == 30
        assert out[0].end_corner == pytest.approx((230, -165))
        assert out[1].start_corner == pytest.approx((230, -165))

    def test_collinear_neighbours_fall_back_to_offset_endpoint(self):
        vs = with_ids([(0, 0), (100, 0), (200, 0), (200, 100), (0, 100)])
        walls = generate_walls(vs, 10)
        assert walls[0].end_corner == pytest.approx((100, -10))
        assert walls[1].start_corner == pytest.approx((100, -10))

    def test_vertex_move_keeps_properties_by_index(self, square_with_door):
        room = square_with_door
        walls = [w._replace(wall_type="exterior") for w in room.walls]
        moved = list(room.vertices)
        moved[2] = moved[2].moved_to((250, 180))
        out = generate_walls(moved, 15, walls, room.vertices)
        assert [w.wall_type for w in out] == ["exterior"] * 4
        assert out[0].apertures[0].id == "d1"

    def test_unmatched_edges_get_defaults(self):
        old = with_ids(SQ_LOCAL)
        walls = [w._replace(thickness=30) for w in generate_walls(old, 15)]
        new = with_ids([(-100, -100), (100, -100), (0, 100)])
        out = generate_walls(new, 15, walls, old)
        assert [w.thickness for w in out] == [15, 15, 15]

    def test_split_wall_keeps_aperture_on_containing_half(self, square_with_door):
        room = square_with_door
        vs = list(room.vertices)
        split = vs[:1] + [Vertex("new", 100, -150)] + vs[1:]
        out = generate_walls(split, 15, room.walls, vs)
        assert len(out) == 5
        assert [a.id for a in out[0].apertures] == ["d1"]
        assert out[0].apertures[0].distance == pytest.approx(0.5)
        assert out[1].apertures == []

    def test_stable_id_match_after_insertion_elsewhere(self, square_room):
        vs = list(square_room.vertices)
        walls = list(square_room.walls)
        walls[2] = walls[2]._replace(wall_type="interior_structural")
        inserted = vs[:1] + [Vertex("mid", 0, -150)] + vs[1:]
        out = generate_walls(inserted, 15, walls, vs)
        assert out[3].wall_type == "interior_structural"


class TestWallUtilities:
    def test_wall_quad_and_length(self, square_room):
        quad = wall_quad(square_room.vertices, square_room.walls, 0)
        assert quad[0] == pytest.approx((-200, -150))
        assert quad[3] == pytest.approx((-215, -165))
        assert wall_length(square_room.vertices, 0) == pytest.approx(400)

    def test_validate_wall_indices(self, square_room):
        walls = [w._replace(vertex_index=7) for w in square_room.walls]
        assert [w.vertex_index for w in validate_wall_indices(walls)] == [0, 1, 2, 3]


class TestOverlap:
    def test_collinear_overlap(self):
        ov = find_segment_overlap((0, 0), (100, 0), (150, 0), (50, 0))
        assert flat(ov) == pytest.approx([50, 0, 100, 0])

    def test_parallel_offset_is_not_overlap(self):
        assert find_segment_overlap((0, 0), (100, 0), (0, 10), (100, 10)) is None

    def test_split_edge(self):
        segs = split_edge_at_overlaps((0, 0), (100, 0), [((30, 0), (60, 0))])
        assert [s.shared for s in segs] == [False, True, False]
        assert segs[1].start == pytest.approx((30, 0))

    def test_wall_segments_no_others(self):
        segs = wall_segments((0, 0), (100, 0), [])
        assert len(segs) == 1 and not segs[0].shared


class TestClassify:
    def test_reverse_endpoint_match_is_interior(self):
        other = [[(100, 0), (0, 0), (0, -50)]]
        assert classify_wall_type((0, 0), (100, 0), other) == "interior_division"

    def test_within_tolerance(self):
        other = [[(103, 2), (-2, 1), (0, -50)]]
        assert classify_wall_type((0, 0), (100, 0), other) == "interior_division"

    def test_half_overlap_is_interior(self):
        other = [[(40, 0), (100, 0), (100, -50)]]
        assert classify_wall_type((0, 0), (100, 0), other) == "interior_division"

    def test_short_overlap_is_exterior(self):
        other = [[(80, 0), (100, 0), (100, -50)]]
        assert classify_wall_type((0, 0), (100, 0), other) == "exterior"

    def test_user_types_survive(self, square_room):
        walls = list(square_room.walls)
        walls[0] = walls[0]._replace(wall_type="adiabatic")
        ring = [v.xy for v in square_room.vertices]
        out = classify_walls(walls, ring, [])
        assert out[0].wall_type == "adiabatic"
        assert [w.wall_type for w in out[1:]] == ["exterior"] * 3

    def test_ring_mismatch_leaves_walls(self, square_room):
        out = classify_walls(square_room.walls, [(0, 0), (1, 0), (1, 1)], [])
        assert out == list(square_room.walls)
