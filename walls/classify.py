"""Automatic exterior / interior wall classification across joined rooms.

Rings passed here are world-space point lists; edge i of a room's ring
corresponds to walls[i].
"""
import logging
import math
from typing import NamedTuple

from shared.types import Point, Wall, WallType
from shared.geometry import distance
from walls.constants import (
    CLASSIFY_TOLERANCE, OVERLAP_TOLERANCE, OVERLAP_PARALLEL_TOL, SPLIT_MERGE_TOLERANCE,
)

console_logger = logging.getLogger(__name__)

# Only these types are relabelled; anything else was chosen by the user.
AUTO_WALL_TYPES = ("exterior", "interior_division")


class WallSegment(NamedTuple):
    """Run of a wall edge, shared with another room or not."""
    start: Point
    end: Point
    shared: bool


# ============================================================
# Collinear overlap
# ============================================================

def find_segment_overlap(a1: Point, a2: Point, b1: Point, b2: Point,
                         tol: float = OVERLAP_TOLERANCE) -> tuple[Point, Point] | None:
    """Overlap of two collinear segments, expressed on a1→a2, or None."""
    dx1 = a2[0]-a1[0]; dy1 = a2[1]-a1[1]
    dx2 = b2[0]-b1[0]; dy2 = b2[1]-b1[1]
    L1 = math.hypot(dx1, dy1); L2 = math.hypot(dx2, dy2)
    if L1 == 0 or L2 == 0:
        return None
    if abs(dx1*dy2-dy1*dx2)/(L1*L2) > OVERLAP_PARALLEL_TOL:
        return None
    ux = dx1/L1; uy = dy1/L1
    # perpendicular offset of b1 from line a
    if abs((b1[0]-a1[0])*uy-(b1[1]-a1[1])*ux) > tol:
        return None
    t1 = (b1[0]-a1[0])*ux+(b1[1]-a1[1])*uy
    t2 = (b2[0]-a1[0])*ux+(b2[1]-a1[1])*uy
    lo = max(0.0, min(t1, t2)); hi = min(L1, max(t1, t2))
    if hi-lo < tol:
        return None
    return (a1[0]+lo*ux, a1[1]+lo*uy), (a1[0]+hi*ux, a1[1]+hi*uy)


def split_edge_at_overlaps(a: Point, b: Point,
                           overlaps: list[tuple[Point, Point]]) -> list[WallSegment]:
    """Cut edge a→b at overlap boundaries, flagging shared runs."""
    if not overlaps:
        return [WallSegment(a, b, False)]
    L = distance(a, b)
    if L == 0:
        return []
    ux = (b[0]-a[0])/L; uy = (b[1]-a[1])/L
    def t_of(p):
        return (p[0]-a[0])*ux+(p[1]-a[1])*uy
    ranges = [tuple(sorted((t_of(s), t_of(e)))) for s, e in overlaps]
    cuts = sorted([0.0, L]+[t for r in ranges for t in r])
    ts = []
    for t in cuts:
        if not ts or t-ts[-1] > SPLIT_MERGE_TOLERANCE:
            ts.append(t)
    out = []
    for t0, t1 in zip(ts, ts[1:]):
        mid = (t0+t1)/2
        shared = any(lo <= mid <= hi for lo, hi in ranges)
        out.append(WallSegment((a[0]+t0*ux, a[1]+t0*uy), (a[0]+t1*ux, a[1]+t1*uy), shared))
    return out


def wall_segments(a: Point, b: Point, other_rings: list[list[Point]]) -> list[WallSegment]:
    """Split edge a→b into runs shared with any other ring, and exterior runs."""
    overlaps = []
    for ring in other_rings:
        for j in range(len(ring)):
            ov = find_segment_overlap(a, b, ring[j], ring[(j+1)%len(ring)])
            if ov is not None:
                overlaps.append(ov)
    return split_edge_at_overlaps(a, b, overlaps)


# ============================================================
# Classification
# ============================================================

def classify_wall_type(a: Point, b: Point, other_rings: list[list[Point]],
                       tol: float = CLASSIFY_TOLERANCE) -> WallType:
    """interior_division if edge a→b is shared with another ring, else exterior.

    Shared means matching endpoints within tol in either direction, or
    collinear overlap covering at least half the edge.
    """
    for ring in other_rings:
        m = len(ring)
        for j in range(m):
            c, d = ring[j], ring[(j+1)%m]
            if ((distance(a, c) <= tol and distance(b, d) <= tol)
                    or (distance(a, d) <= tol and distance(b, c) <= tol)):
                return "interior_division"
    L = distance(a, b)
    if L > 0:
        shared = sum(distance(s.start, s.end) for s in wall_segments(a, b, other_rings) if s.shared)
        if shared >= L/2:
            return "interior_division"
    return "exterior"


def classify_walls(walls: list[Wall], ring: list[Point],
                   other_rings: list[list[Point]]) -> list[Wall]:
    """Relabel automatic wall types from the room's ring against all others."""
    if len(ring) != len(walls):
        console_logger.warning(
            f"Ring has {len(ring)} edges but room has {len(walls)} walls; classification skipped")
        return list(walls)
    out = []
    n = len(ring)
    for i, w in enumerate(walls):
        if w.wall_type in AUTO_WALL_TYPES:
            w = w._replace(wall_type=classify_wall_type(ring[i], ring[(i+1)%n], other_rings))
        out.append(w)
    return out
