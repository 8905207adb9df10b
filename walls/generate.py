"""Wall generation: one mitered wall per polygon edge.

Each wall's outer face is its edge offset along the outward (right-hand)
normal by the wall's own thickness. Outer corners come from intersecting
neighbouring outer lines, so walls of different thickness still meet.

When prior walls are supplied, each new edge is resolved to a prior wall so
that user-set thickness, type, height and apertures survive edits.
"""
import logging

from shared.types import Point, Vertex, Wall, Aperture
from shared.geometry import (
    GeometryError, distance, right_norm, off_pt, line_isect, point_segment_distance,
)
from floorplan.apertures import aperture_span, aperture_at
from walls.constants import (
    DEFAULT_WALL_HEIGHT, DEFAULT_WALL_TYPE, MATCH_TOLERANCE, MITER_PARALLEL_TOL,
)

console_logger = logging.getLogger(__name__)


# ============================================================
# Matching prior walls
# ============================================================

def _close(p: Point, q: Point, tol: float = MATCH_TOLERANCE) -> bool:
    return distance(p, q) <= tol


def _split_apertures(apertures: list[Aperture], old_a: Point, old_b: Point,
                     a: Point, b: Point) -> list[Aperture]:
    """Re-anchor apertures of a split old edge onto the sub-edge a→b.

    Apertures not wholly inside the sub-edge stay behind.
    """
    old_len = distance(old_a, old_b); new_len = distance(a, b)
    shift = distance(old_a, a)
    out = []
    for ap in apertures:
        s, e = aperture_span(ap, old_len)
        s -= shift; e -= shift
        if s >= -MATCH_TOLERANCE and e <= new_len+MATCH_TOLERANCE:
            out.append(aperture_at(ap, max(0.0, s), new_len))
    return out


def _match_existing(i: int, vertices: list[Vertex], existing: list[Wall],
                    old: list[Vertex] | None) -> tuple[Wall | None, list[Aperture]]:
    """Resolve edge i to a prior wall. Returns (wall, apertures to keep)."""
    n = len(vertices)
    va = vertices[i]; vb = vertices[(i+1)%n]
    # (a) same vertex count: pure vertex movement
    if len(existing) == n and (old is None or len(old) == n):
        return existing[i], list(existing[i].apertures)
    if not old:
        return None, []
    m = len(old)
    # (b) same endpoints, by stable ID then by position
    for j in range(min(m, len(existing))):
        oa = old[j]; ob = old[(j+1)%m]
        if oa.id == va.id and ob.id == vb.id:
            return existing[j], list(existing[j].apertures)
    for j in range(min(m, len(existing))):
        oa = old[j]; ob = old[(j+1)%m]
        if _close(oa.xy, va.xy) and _close(ob.xy, vb.xy):
            return existing[j], list(existing[j].apertures)
    # (c) wall split: both new endpoints on one old edge
    for j in range(min(m, len(existing))):
        oa = old[j].xy; ob = old[(j+1)%m].xy
        if (point_segment_distance(va.xy, oa, ob)[0] <= MATCH_TOLERANCE
                and point_segment_distance(vb.xy, oa, ob)[0] <= MATCH_TOLERANCE
                and distance(oa, va.xy) <= distance(oa, vb.xy)):
            return existing[j], _split_apertures(existing[j].apertures, oa, ob, va.xy, vb.xy)
    return None, []


# ============================================================
# Generation
# ============================================================

def _outer_line(a: Point, b: Point, t: float) -> tuple[Point, Point, Point] | None:
    """(normal, outer start, outer end) or None for a zero-length edge."""
    try:
        n = right_norm(a, b)
    except GeometryError:
        return None
    return n, off_pt(a, n, t), off_pt(b, n, t)


def _miter(l1, l2, fallback: Point) -> Point:
    """Intersection of two outer lines; fallback when parallel or degenerate."""
    if l1 is None or l2 is None:
        return fallback
    _, s1, e1 = l1; _, s2, e2 = l2
    d1 = (e1[0]-s1[0], e1[1]-s1[1]); d2 = (e2[0]-s2[0], e2[1]-s2[1])
    L = distance(s1, e1)*distance(s2, e2)
    try:
        return line_isect(s1, d1, s2, d2, MITER_PARALLEL_TOL*L)
    except GeometryError:
        return fallback


def generate_walls(vertices: list[Vertex], default_thickness: float,
                   existing_walls: list[Wall] | None = None,
                   old_vertices: list[Vertex] | None = None) -> list[Wall]:
    """Derive one mitered wall per edge of a CCW vertex ring.

    existing_walls/old_vertices, when given, are matched per edge to keep
    thickness, type, height and apertures. Unmatched edges get
    default_thickness, interior_division, 2.7 m and no apertures.
    """
    n = len(vertices)
    if n < 2:
        return []
    existing = list(existing_walls or [])
    props = []
    for i in range(n):
        prior, aps = _match_existing(i, vertices, existing, old_vertices) if existing else (None, [])
        if prior is None:
            props.append((default_thickness, DEFAULT_WALL_TYPE, DEFAULT_WALL_HEIGHT, []))
        else:
            props.append((prior.thickness, prior.wall_type, prior.height, aps))

    lines = [_outer_line(vertices[i].xy, vertices[(i+1)%n].xy, props[i][0]) for i in range(n)]
    walls = []
    for i in range(n):
        a = vertices[i].xy; b = vertices[(i+1)%n].xy
        line = lines[i]
        if line is None:
            normal, s_fb, e_fb = (0.0, 0.0), a, b
        else:
            normal, s_fb, e_fb = line
        start = _miter(lines[i-1], line, s_fb)
        end = _miter(line, lines[(i+1)%n], e_fb)
        t, wt, h, aps = props[i]
        walls.append(Wall(i, t, wt, h, aps, normal, start, end))
    return walls


# ============================================================
# Utilities
# ============================================================

def wall_quad(vertices: list[Vertex], walls: list[Wall], i: int) -> list[Point]:
    """Renderable wall polygon [inner_start, inner_end, end_corner, start_corner]."""
    n = len(vertices)
    w = walls[i]
    return [vertices[i].xy, vertices[(i+1)%n].xy, w.end_corner, w.start_corner]


def wall_length(vertices: list[Vertex], i: int) -> float:
    return distance(vertices[i].xy, vertices[(i+1)%len(vertices)].xy)


def validate_wall_indices(walls: list[Wall]) -> list[Wall]:
    """Force walls[i].vertex_index == i, warning on any drift."""
    out = []
    for i, w in enumerate(walls):
        if w.vertex_index != i:
            console_logger.warning(f"Wall {i} had vertex_index {w.vertex_index}; re-indexed")
            w = w._replace(vertex_index=i)
        out.append(w)
    return out
