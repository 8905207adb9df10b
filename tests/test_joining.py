"""Tests for assembly/joining.py: room-to-room snapping on centerlines."""
import math
import pytest
from floorplan.apertures import add_aperture
from floorplan.config import JoinConfig
from assembly.joining import (
    JoinSegment, room_segments, is_opposite, find_closest_segment_pair,
    snap_mode, align_rotation, snap_room_to_rooms,
)
from conftest import SQUARE, door, facing_pair, flat, make_room, rect


def seg(p1, p2, room_id="r", wall=0):
    return JoinSegment(p1, p2, room_id, wall)


# ============================================================
# Segments
# ============================================================

class TestSegments:
    def test_room_segments_are_world_centerline(self, square_room):
        segs = room_segments(square_room)
        assert len(segs) == 4
        assert segs[1].p1 == pytest.approx((407.5, -7.5))
        assert segs[1].p2 == pytest.approx((407.5, 307.5))
        assert [s.wall_index for s in segs] == [0, 1, 2, 3]

    def test_offset_applied(self, square_room):
        assert room_segments(square_room, (10, -5))[0].p1 == pytest.approx((2.5, -12.5))

    def test_opposite(self):
        a = seg((0, 0), (100, 0))
        assert is_opposite(a, seg((100, 10), (0, 10)), math.radians(10))
        assert not is_opposite(a, seg((0, 10), (100, 10)), math.radians(10))
        assert is_opposite(a, seg((100, 10), (0, 20)), math.radians(10))

    def test_align_rotation_prefers_smaller_turn(self):
        m = seg((0, 0), (100, math.tan(math.radians(5)) * 100))
        s = seg((100, 50), (0, 50))
        assert align_rotation(m, s) == pytest.approx(math.radians(-5))


class TestPairing:
    def test_opposite_beats_closer_non_opposite(self):
        moving = [seg((0, 0), (100, 0), "m", 0)]
        stationary = [seg((0, 2), (100, 2), "s", 0), seg((100, 40), (0, 40), "s", 1)]
        pair = find_closest_segment_pair(moving, stationary)
        assert pair.stationary.wall_index == 1
        assert pair.opposite

    def test_closer_opposite_wins(self):
        moving = [seg((0, 0), (100, 0), "m", 0)]
        stationary = [seg((100, 40), (0, 40), "s", 0), seg((100, 10), (0, 10), "s", 1)]
        assert find_closest_segment_pair(moving, stationary).stationary.wall_index == 1

    def test_vertex_fallback_beyond_segment_threshold(self):
        cfg = JoinConfig(segment_threshold=5, vertex_threshold=30)
        moving = [seg((0, 0), (100, 0), "m")]
        stationary = [seg((110, 10), (200, 10), "s")]
        pair = find_closest_segment_pair(moving, stationary, cfg)
        assert pair is not None
        assert snap_mode(pair, cfg) == "vertex-only"

    def test_nothing_close(self):
        moving = [seg((0, 0), (100, 0), "m")]
        assert find_closest_segment_pair(moving, [seg((500, 500), (600, 500), "s")]) is None

    def test_modes(self):
        m = seg((0, 0), (100, 0), "m")
        pair = find_closest_segment_pair([m], [seg((105, 10), (5, 10), "s")])
        assert snap_mode(pair) == "edge-vertex"
        pair = find_closest_segment_pair([m], [seg((130, 10), (130, 100), "s")])
        assert snap_mode(pair) == "none"

    def test_closest_endpoints(self):
        pair = find_closest_segment_pair([seg((0, 0), (100, 0), "m")],
                                         [seg((112, 10), (10, 10), "s")])
        assert pair.closest_endpoints() == ((0, 0), (10, 10))


# ============================================================
# snap_room_to_rooms
# ============================================================

class TestSnapRoomToRooms:
    def test_facing_walls_edge_only(self):
        a, b = facing_pair(gap=10, dy=100)
        result = snap_room_to_rooms(b, (0, 0), [a, b])
        assert result.snapped
        assert result.mode == "edge-only"
        assert result.rotation == pytest.approx(0.0, abs=1e-9)
        assert result.translation == pytest.approx((-10, 0))
        assert result.moving_room_id == "B"
        assert result.stationary_room_id == "A"

    def test_close_corners_edge_vertex(self):
        a = make_room(SQUARE, "A")
        b = make_room(rect(425, 20, 400, 320), "B")
        result = snap_room_to_rooms(b, (0, 0), [a])
        assert result.mode == "edge-vertex"
        assert result.translation == pytest.approx((-10, -20))

    def test_too_far_is_unsnapped(self):
        a, b = facing_pair(gap=110)
        result = snap_room_to_rooms(b, (0, 0), [a])
        assert not result.snapped
        assert result.mode == "none"
        assert result.translation == (0, 0)

    def test_offset_brings_rooms_into_range(self):
        a, b = facing_pair(gap=110)
        result = snap_room_to_rooms(b, (-100, 0), [a])
        assert result.mode == "edge-only"
        assert result.translation == pytest.approx((-110, 0))

    def test_rotated_room_is_aligned(self):
        a, b = facing_pair(gap=10, dy=100)
        b = b._replace(rotation=math.radians(5))
        result = snap_room_to_rooms(b, (0, 0), [a])
        assert result.mode in ("edge-vertex", "edge-only")
        assert result.rotation == pytest.approx(math.radians(-5))

    def test_no_other_rooms(self, square_room):
        result = snap_room_to_rooms(square_room, (3, 4), [square_room])
        assert not result.snapped
        assert result.translation == (3, 4)

    def test_visualize_only_does_not_move(self):
        a, b = facing_pair(gap=10, dy=100)
        result = snap_room_to_rooms(b, (0, 0), [a], visualize_only=True)
        assert result.snapped
        assert result.rotation == 0.0
        assert result.translation == (0, 0)
        info = result.debug_info
        assert flat(info.closest_moving_segment) == pytest.approx([425, 400, 425, 100])
        assert flat(info.closest_stationary_segment) == pytest.approx([400, 0, 400, 300])
        assert info.closest_moving_vertex is None

    def test_door_pair_takes_priority(self):
        a, b = facing_pair(gap=10, dy=20)
        a = add_aperture(a, 1, door("da", 1.0))
        b = add_aperture(b, 3, door("db", 1.18))
        result = snap_room_to_rooms(b, (0, 0), [a])
        assert result.is_door_snap
        assert result.mode == "edge-vertex"
        assert result.translation == pytest.approx((-10, -12))

    def test_distant_doors_ignored(self):
        a, b = facing_pair(gap=10, dy=100)
        a = add_aperture(a, 1, door("da", 0.1))
        b = add_aperture(b, 3, door("db", 0.1))
        result = snap_room_to_rooms(b, (0, 0), [a])
        assert not result.is_door_snap
        assert result.mode == "edge-only"
