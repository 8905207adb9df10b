"""Pointer snapping for drawing and editing.

Drawing priority (existing rooms present): inner-boundary intersections >
inner-boundary vertices > inner-boundary edges > orthogonal > grid.
Outside drawing: centerline vertices > centerline edges > orthogonal > grid.
"""
from typing import Literal, NamedTuple

from shared.types import Point, Room
from shared.geometry import distance, point_segment_distance
from shared.transforms import room_world_point
from floorplan.config import FloorplanConfig
from floorplan.constants import GUIDE_LINE_EXTENT

SnapKind = Literal[
    "intersection", "vertex", "edge", "perpendicular", "vertical", "horizontal",
    "grid", "none",
]


class SnapHit(NamedTuple):
    point: Point
    kind: SnapKind
    guide: tuple[Point, Point] | None = None


# ============================================================
# Grid & orthogonal
# ============================================================

def snap_to_grid(p: Point, grid: float) -> Point:
    return (round(p[0]/grid)*grid, round(p[1]/grid)*grid)


def _vertical(p: Point, v: Point) -> SnapHit:
    return SnapHit((v[0], p[1]), "vertical",
                   ((v[0], v[1]-GUIDE_LINE_EXTENT), (v[0], v[1]+GUIDE_LINE_EXTENT)))


def _horizontal(p: Point, v: Point) -> SnapHit:
    return SnapHit((p[0], v[1]), "horizontal",
                   ((v[0]-GUIDE_LINE_EXTENT, v[1]), (v[0]+GUIDE_LINE_EXTENT, v[1])))


def snap_orthogonal(p: Point, drawn: list[Point], zoom: float,
                    threshold_px: float = 30.0) -> SnapHit | None:
    """Perpendicular-to-last-edge, then vertical/horizontal alignment with the
    last vertex, then with earlier vertices. Threshold is in screen pixels.
    """
    if not drawn:
        return None
    th = threshold_px/zoom
    last = drawn[-1]
    if len(drawn) >= 2:
        prev = drawn[-2]
        L = distance(prev, last)
        if L > 1e-3:
            px = -(last[1]-prev[1])/L; py = (last[0]-prev[0])/L
            k = (p[0]-last[0])*px+(p[1]-last[1])*py
            q = (last[0]+px*k, last[1]+py*k)
            if distance(p, q) < th:
                return SnapHit(q, "perpendicular",
                               ((last[0]+px*GUIDE_LINE_EXTENT, last[1]+py*GUIDE_LINE_EXTENT),
                                (last[0]-px*GUIDE_LINE_EXTENT, last[1]-py*GUIDE_LINE_EXTENT)))
    if abs(p[0]-last[0]) < th:
        return _vertical(p, last)
    if abs(p[1]-last[1]) < th:
        return _horizontal(p, last)
    for v in drawn[:-1]:
        if abs(p[0]-v[0]) < th:
            return _vertical(p, v)
        if abs(p[1]-v[1]) < th:
            return _horizontal(p, v)
    return None


# ============================================================
# Existing-room geometry
# ============================================================

def _world_ring(room: Room, ring) -> list[Point]:
    return [room_world_point(room, v.xy) for v in ring]


def inner_boundary_world(room: Room) -> list[Point]:
    """Inner boundary in world space; the room polygon until envelopes exist."""
    ring = room.inner_boundary_vertices
    if not ring or len(ring) < 3:
        ring = room.vertices
    return _world_ring(room, ring)


def _extended_isect(a: Point, b: Point, ext: float, c: Point, d: Point) -> Point | None:
    """Intersection of a→b extended by ext on both ends with segment c→d."""
    dx1 = b[0]-a[0]; dy1 = b[1]-a[1]; L = distance(a, b)
    dx2 = d[0]-c[0]; dy2 = d[1]-c[1]
    det = dx1*dy2-dy1*dx2
    if L < 1e-3 or abs(det) < 1e-4:
        return None
    t = ((c[0]-a[0])*dy2-(c[1]-a[1])*dx2)/det
    u = ((c[0]-a[0])*dy1-(c[1]-a[1])*dx1)/det
    e = ext/L
    if not (0.0 <= u <= 1.0 and -e <= t <= 1+e):
        return None
    return (a[0]+t*dx1, a[1]+t*dy1)


def snap_to_boundary_intersections(p: Point, last: Point, rooms: list[Room],
                                   extension: float, threshold: float) -> SnapHit | None:
    """Closest crossing of the edge last→p (extended) with any inner boundary."""
    best, best_d = None, threshold
    for room in rooms:
        ring = inner_boundary_world(room)
        for j in range(len(ring)):
            q = _extended_isect(last, p, extension, ring[j], ring[(j+1)%len(ring)])
            if q is not None and distance(p, q) < best_d:
                best, best_d = q, distance(p, q)
    return SnapHit(best, "intersection") if best is not None else None


def _snap_to_ring_vertex(p: Point, rings: list[list[Point]], threshold: float) -> SnapHit | None:
    best, best_d = None, threshold
    for ring in rings:
        for v in ring:
            d = distance(p, v)
            if d < best_d:
                best, best_d = v, d
    return SnapHit(best, "vertex") if best is not None else None


def _snap_to_ring_edge(p: Point, rings: list[list[Point]], threshold: float) -> SnapHit | None:
    best, best_d = None, threshold
    for ring in rings:
        for j in range(len(ring)):
            d, c = point_segment_distance(p, ring[j], ring[(j+1)%len(ring)])
            if d < best_d:
                best, best_d = c, d
    return SnapHit(best, "edge") if best is not None else None


def snap_to_centerline(p: Point, rooms: list[Room], threshold: float,
                       exclude_room_id: str | None = None) -> SnapHit | None:
    """Centerline vertex, else centerline edge, within threshold."""
    rings = [_world_ring(r, r.centerline_vertices) for r in rooms
             if r.id != exclude_room_id and r.centerline_vertices]
    return _snap_to_ring_vertex(p, rings, threshold) or _snap_to_ring_edge(p, rings, threshold)


# ============================================================
# Priority
# ============================================================

def snap_point(p: Point, drawn: list[Point], rooms: list[Room], zoom: float,
               config: FloorplanConfig, drawing: bool = True) -> SnapHit:
    """Apply the snap priority chain. Always returns a hit (kind "none" if unsnapped)."""
    hit = None
    if rooms and drawing:
        if drawn:
            hit = snap_to_boundary_intersections(p, drawn[-1], rooms, config.edge_extension,
                                                 config.boundary_snap_threshold)
        if hit is None:
            rings = [inner_boundary_world(r) for r in rooms]
            hit = (_snap_to_ring_vertex(p, rings, config.boundary_snap_threshold)
                   or _snap_to_ring_edge(p, rings, config.boundary_snap_threshold))
    elif rooms:
        hit = snap_to_centerline(p, rooms, config.centerline_snap_threshold)
    if hit is None and config.orthogonal_snap and drawn:
        hit = snap_orthogonal(p, drawn, zoom, config.ortho_snap_px)
    if hit is None and config.snap_to_grid:
        hit = SnapHit(snap_to_grid(p, config.grid_size), "grid")
    return hit or SnapHit(p, "none")
