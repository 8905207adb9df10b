"""Room-to-room snapping on wall centerlines.

The moving room's centerline segments (with the proposed offset applied) are
paired with every stationary room's segments. Opposite-facing pairs within the
segment threshold always beat any other pair. The winning pair decides the
snap mode:

  edge-vertex  opposite walls, an endpoint pair within the vertex threshold:
               rotate to align, then make the closest endpoints coincide
  edge-only    opposite walls, no close endpoints: rotate to align, then slide
               the segment midpoint onto the stationary line
  vertex-only  no qualifying edge, close endpoints: translate only
  none

Doors on the winning wall pair take priority: a moving-door/stationary-door
pair within the door threshold forces edge-vertex on the door centers.
"""
import logging
import math
from typing import NamedTuple

from shared.types import Point, Room, SnapMode
from shared.geometry import distance, edge_angle, project_onto_line, segment_distance, wrap_angle
from shared.transforms import rotate_point, room_world_point
from floorplan.apertures import doors_on_wall, door_center_world
from floorplan.centerline import calculate_centerline
from floorplan.config import JoinConfig
from assembly.constants import OPPOSITE_SCORE, OPPOSITE_SCORE_RANGE, OTHER_SCORE_RANGE

console_logger = logging.getLogger(__name__)


class JoinSegment(NamedTuple):
    """World-space centerline segment tagged with its room and wall."""
    p1: Point
    p2: Point
    room_id: str
    wall_index: int


class SegmentPair(NamedTuple):
    moving: JoinSegment
    stationary: JoinSegment
    distance: float
    vertex_distances: tuple[float, float, float, float]   # p1p1, p1p2, p2p1, p2p2
    opposite: bool

    @property
    def min_vertex_distance(self) -> float:
        return min(self.vertex_distances)

    def closest_endpoints(self) -> tuple[Point, Point]:
        """(moving endpoint, stationary endpoint) of the closest endpoint pair."""
        k = self.vertex_distances.index(self.min_vertex_distance)
        m = self.moving.p1 if k < 2 else self.moving.p2
        s = self.stationary.p1 if k % 2 == 0 else self.stationary.p2
        return m, s


class DebugInfo(NamedTuple):
    closest_moving_segment: tuple[Point, Point] | None = None
    closest_stationary_segment: tuple[Point, Point] | None = None
    closest_moving_vertex: Point | None = None
    closest_stationary_vertex: Point | None = None


class SnapResult(NamedTuple):
    """Rigid transform for the moving room.

    translation is the full delta to add to the room's drag-start position;
    rotation is the delta to add to its drag-start rotation.
    """
    rotation: float
    translation: Point
    snapped: bool
    mode: SnapMode = "none"
    is_door_snap: bool = False
    moving_room_id: str | None = None
    stationary_room_id: str | None = None
    moving_segment_world: tuple[Point, Point] | None = None
    stationary_segment_world: tuple[Point, Point] | None = None
    debug_info: DebugInfo | None = None


# ============================================================
# Segments & pairing
# ============================================================

def room_segments(room: Room, offset: Point = (0.0, 0.0)) -> list[JoinSegment]:
    """Centerline segments in world space, each mapped to its wall index."""
    cl = calculate_centerline(room)
    pts = [room_world_point(room, v.xy) for v in cl.vertices]
    pts = [(p[0]+offset[0], p[1]+offset[1]) for p in pts]
    n = len(pts)
    if n < 2 or not cl.edge_metadata:
        return []
    return [JoinSegment(pts[k], pts[(k+1)%n], room.id, cl.wall_index(room, k)) for k in range(n)]


def is_opposite(a: JoinSegment, b: JoinSegment, tol: float) -> bool:
    """Directions differ by 180 degrees within tol."""
    d = abs(wrap_angle(edge_angle(a.p1, a.p2)-edge_angle(b.p1, b.p2)))
    return abs(d-math.pi) <= tol


def _pair(m: JoinSegment, s: JoinSegment, cfg: JoinConfig) -> SegmentPair:
    vd = (distance(m.p1, s.p1), distance(m.p1, s.p2), distance(m.p2, s.p1), distance(m.p2, s.p2))
    return SegmentPair(m, s, segment_distance(m.p1, m.p2, s.p1, s.p2), vd,
                       is_opposite(m, s, cfg.angle_tolerance))


def find_closest_segment_pair(moving: list[JoinSegment], stationary: list[JoinSegment],
                              cfg: JoinConfig = JoinConfig()) -> SegmentPair | None:
    """Best-scoring pair within the segment threshold, else the closest
    vertex-only pair within the vertex threshold, else None.
    """
    best, best_score = None, -math.inf
    vertex_best, vertex_min = None, cfg.vertex_threshold
    T = cfg.segment_threshold
    for m in moving:
        for s in stationary:
            pair = _pair(m, s, cfg)
            if pair.min_vertex_distance < vertex_min:
                vertex_best, vertex_min = pair, pair.min_vertex_distance
            if pair.distance >= T:
                continue
            closeness = (T-pair.distance)/T
            score = (OPPOSITE_SCORE+closeness*OPPOSITE_SCORE_RANGE if pair.opposite
                     else closeness*OTHER_SCORE_RANGE)
            if score > best_score:
                best, best_score = pair, score
    return best or vertex_best


def snap_mode(pair: SegmentPair, cfg: JoinConfig = JoinConfig()) -> SnapMode:
    close_vertex = pair.min_vertex_distance < cfg.vertex_threshold
    if pair.opposite and pair.distance < cfg.segment_threshold:
        return "edge-vertex" if close_vertex else "edge-only"
    return "vertex-only" if close_vertex else "none"


def align_rotation(moving: JoinSegment, stationary: JoinSegment) -> float:
    """Smaller of the parallel and anti-parallel alignment rotations."""
    am = edge_angle(moving.p1, moving.p2); ast = edge_angle(stationary.p1, stationary.p2)
    parallel = wrap_angle(ast-am); anti = wrap_angle(ast+math.pi-am)
    return parallel if abs(parallel) < abs(anti) else anti


# ============================================================
# Doors
# ============================================================

def _door_centers(room: Room, wall_index: int, offset: Point) -> list[Point]:
    out = []
    for door in doors_on_wall(room, wall_index):
        c = door_center_world(room, wall_index, door, offset)
        if c is not None:
            out.append(c)
    return out


def closest_door_pair(pair: SegmentPair, moving: Room, stationary: Room, offset: Point,
                      cfg: JoinConfig = JoinConfig()) -> tuple[Point, Point] | None:
    """Closest moving/stationary door-center pair on the winning walls within the door threshold."""
    md = _door_centers(moving, pair.moving.wall_index, offset)
    sd = _door_centers(stationary, pair.stationary.wall_index, (0.0, 0.0))
    best, best_d = None, cfg.door_threshold
    for m in md:
        for s in sd:
            d = distance(m, s)
            if d < best_d:
                best, best_d = (m, s), d
    return best


# ============================================================
# Transform
# ============================================================

def compute_transform(mode: SnapMode, pair: SegmentPair, center: Point, offset: Point,
                      door_centers: tuple[Point, Point] | None = None) -> tuple[float, Point]:
    """(rotation, translation) for a snap mode. center is the moving room's
    world centroid with the offset applied.
    """
    def moved(delta_from: Point, delta_to: Point) -> Point:
        return (offset[0]+delta_to[0]-delta_from[0], offset[1]+delta_to[1]-delta_from[1])

    if mode == "edge-vertex":
        rot = align_rotation(pair.moving, pair.stationary)
        if door_centers is not None:
            return rot, moved(rotate_point(door_centers[0], rot, center), door_centers[1])
        r1 = rotate_point(pair.moving.p1, rot, center); r2 = rotate_point(pair.moving.p2, rot, center)
        cands = [(distance(r, s), r, s) for r in (r1, r2) for s in (pair.stationary.p1, pair.stationary.p2)]
        _, r, s = min(cands, key=lambda c: c[0])
        return rot, moved(r, s)
    if mode == "edge-only":
        rot = align_rotation(pair.moving, pair.stationary)
        r1 = rotate_point(pair.moving.p1, rot, center); r2 = rotate_point(pair.moving.p2, rot, center)
        mid = ((r1[0]+r2[0])/2, (r1[1]+r2[1])/2)
        return rot, moved(mid, project_onto_line(mid, pair.stationary.p1, pair.stationary.p2))
    if mode == "vertex-only":
        m, s = door_centers if door_centers is not None else pair.closest_endpoints()
        return 0.0, moved(m, s)
    return 0.0, offset


def _wall_edge_world(room: Room, i: int, offset: Point) -> tuple[Point, Point] | None:
    n = len(room.vertices)
    if not 0 <= i < n:
        return None
    a = room_world_point(room, room.vertices[i].xy); b = room_world_point(room, room.vertices[(i+1)%n].xy)
    return (a[0]+offset[0], a[1]+offset[1]), (b[0]+offset[0], b[1]+offset[1])


# ============================================================
# Entry point
# ============================================================

def snap_room_to_rooms(moving: Room, offset: Point, rooms: list[Room],
                       visualize_only: bool = False,
                       cfg: JoinConfig = JoinConfig()) -> SnapResult:
    """Best snap of *moving* (displaced by offset) against all other rooms.

    With visualize_only the result carries the matched geometry for preview
    but no rotation and translation == offset.
    """
    unsnapped = SnapResult(0.0, offset, False)
    moving_segs = room_segments(moving, offset)
    by_id = {r.id: r for r in rooms if r.id != moving.id}
    stationary_segs = [s for r in by_id.values() for s in room_segments(r)]
    if not moving_segs or not stationary_segs:
        return unsnapped
    pair = find_closest_segment_pair(moving_segs, stationary_segs, cfg)
    if pair is None:
        return unsnapped

    mode = snap_mode(pair, cfg)
    doors = closest_door_pair(pair, moving, by_id[pair.stationary.room_id], offset, cfg)
    if doors is not None:
        mode = "edge-vertex"
        console_logger.debug(f"Door snap at {distance(*doors):.1f}")
    if mode == "none":
        return unsnapped

    common = dict(
        snapped=True, mode=mode, is_door_snap=doors is not None,
        moving_room_id=moving.id, stationary_room_id=pair.stationary.room_id,
        moving_segment_world=(pair.moving.p1, pair.moving.p2),
        stationary_segment_world=(pair.stationary.p1, pair.stationary.p2),
    )
    if visualize_only:
        if doors is not None:
            mv, sv = doors
        elif pair.min_vertex_distance < cfg.vertex_threshold:
            mv, sv = pair.closest_endpoints()
        else:
            mv = sv = None
        debug = DebugInfo(
            _wall_edge_world(moving, pair.moving.wall_index, offset) or common["moving_segment_world"],
            _wall_edge_world(by_id[pair.stationary.room_id], pair.stationary.wall_index, (0.0, 0.0))
            or common["stationary_segment_world"],
            mv, sv,
        )
        return SnapResult(0.0, offset, debug_info=debug, **common)

    center = (moving.position[0]+offset[0], moving.position[1]+offset[1])
    rot, trans = compute_transform(mode, pair, center, offset, doors)
    console_logger.debug(f"Snap {mode} to {pair.stationary.room_id}: rot={math.degrees(rot):.2f} deg")
    return SnapResult(rot, trans, **common)
