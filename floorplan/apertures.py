"""Aperture placement along walls: spans, collisions, door centers, room edits.

An aperture's position is always a distance from one named wall end, so it
survives changes to the wall's length. Spans below are in centimeters from the
wall start; aperture records themselves are in meters.
"""
import logging
from typing import NamedTuple

from shared.types import Aperture, AnchorVertex, Point, Room
from shared.geometry import distance, right_norm, lerp, off_pt
from shared.transforms import room_world_point
from floorplan.constants import (
    CM_PER_M, APERTURE_OVERLAP_TOLERANCE, APERTURE_SEARCH_STEP,
)

console_logger = logging.getLogger(__name__)

FALLBACK_DOOR_WALL_THICKNESS = 20.0  # cm, when the wall record is missing


class ApertureValidation(NamedTuple):
    valid: bool
    reason: str | None = None              # "too_wide" | "out_of_bounds" | "collision"
    suggested_distance: float | None = None  # m
    suggested_anchor: AnchorVertex | None = None


# ============================================================
# Spans
# ============================================================
def edge_length(room: Room, i: int) -> float:
    """Local length of edge i (cm)."""
    n = len(room.vertices)
    return distance(room.vertices[i].xy, room.vertices[(i+1)%n].xy)

def aperture_span(ap: Aperture, wall_len: float) -> tuple[float, float]:
    """(start, end) of the aperture in cm from the wall start."""
    w = ap.width*CM_PER_M; d = ap.distance*CM_PER_M
    if ap.anchor_vertex == "start":
        return (d, d+w)
    return (wall_len-d-w, wall_len-d)

def aperture_at(ap: Aperture, start_cm: float, wall_len: float) -> Aperture:
    """Re-anchor *ap* so it starts start_cm from the wall start.

    Distance is stored from whichever end is nearer.
    """
    end_gap = wall_len-(start_cm+ap.width*CM_PER_M)
    if start_cm <= end_gap:
        return ap._replace(anchor_vertex="start", distance=max(0.0, start_cm)/CM_PER_M)
    return ap._replace(anchor_vertex="end", distance=max(0.0, end_gap)/CM_PER_M)

def apertures_overlap(a: tuple[float, float], b: tuple[float, float],
                      tol: float = APERTURE_OVERLAP_TOLERANCE) -> bool:
    """Spans overlap by more than tol cm."""
    return a[0] < b[1]-tol and b[0] < a[1]-tol

def aperture_fits_on_wall(ap: Aperture, wall_len: float) -> bool:
    return ap.width*CM_PER_M <= wall_len

def _collides(ap: Aperture, span: tuple[float, float], others: list[Aperture], wall_len: float) -> bool:
    return any(o.id != ap.id and apertures_overlap(span, aperture_span(o, wall_len)) for o in others)

def find_nearest_valid_position(ap: Aperture, wall_len: float, others: list[Aperture],
                                step: float = APERTURE_SEARCH_STEP) -> Aperture | None:
    """Closest collision-free placement, searching outward in step-cm increments."""
    w = ap.width*CM_PER_M
    if w > wall_len:
        return None
    hi = wall_len-w
    start = min(max(aperture_span(ap, wall_len)[0], 0.0), hi)
    k = 0
    while k*step <= wall_len:
        for s in (start+k*step, start-k*step):
            if 0.0 <= s <= hi and not _collides(ap, (s, s+w), others, wall_len):
                return aperture_at(ap, s, wall_len)
        k += 1
    # the end stops are not always on the step grid
    for s in (0.0, hi):
        if not _collides(ap, (s, s+w), others, wall_len):
            return aperture_at(ap, s, wall_len)
    return None

def validate_aperture_position(ap: Aperture, wall_len: float,
                               others: list[Aperture]) -> ApertureValidation:
    """Check that *ap* fits, lies within the wall and does not collide."""
    if not aperture_fits_on_wall(ap, wall_len):
        return ApertureValidation(False, "too_wide")
    span = aperture_span(ap, wall_len)
    reason = None
    if span[0] < -APERTURE_OVERLAP_TOLERANCE or span[1] > wall_len+APERTURE_OVERLAP_TOLERANCE:
        reason = "out_of_bounds"
    elif _collides(ap, span, others, wall_len):
        reason = "collision"
    if reason is None:
        return ApertureValidation(True)
    s = find_nearest_valid_position(ap, wall_len, others)
    if s is None:
        return ApertureValidation(False, reason)
    return ApertureValidation(False, reason, s.distance, s.anchor_vertex)

# ============================================================
# Doors
# ============================================================
def doors_on_wall(room: Room, i: int) -> list[Aperture]:
    if i < 0 or i >= len(room.walls):
        return []
    return [a for a in room.walls[i].apertures if a.type == "door"]

def door_center_world(room: Room, wall_index: int, ap: Aperture,
                      offset: Point = (0.0, 0.0)) -> Point | None:
    """Door center on the wall centerline, in world space plus offset.

    None for degenerate rooms or walls.
    """
    n = len(room.vertices)
    if n < 3 or not 0 <= wall_index < n:
        return None
    a = room.vertices[wall_index].xy; b = room.vertices[(wall_index+1)%n].xy
    L = distance(a, b)
    if L < 1e-3:
        return None
    s, e = aperture_span(ap, L)
    inner = lerp(a, b, (s+e)/2/L)
    t = room.walls[wall_index].thickness if wall_index < len(room.walls) else FALLBACK_DOOR_WALL_THICKNESS
    w = room_world_point(room, off_pt(inner, right_norm(a, b), t/2))
    return (w[0]+offset[0], w[1]+offset[1])

# ============================================================
# Room edits (pure; each returns a new Room)
# ============================================================
def _with_apertures(room: Room, i: int, aps: list[Aperture]) -> Room:
    walls = list(room.walls)
    walls[i] = walls[i]._replace(apertures=aps)
    return room._replace(walls=walls)

def find_aperture(room: Room, ap_id: str) -> tuple[int, Aperture] | None:
    for i, w in enumerate(room.walls):
        for a in w.apertures:
            if a.id == ap_id:
                return i, a
    return None

def add_aperture(room: Room, wall_index: int, ap: Aperture) -> Room | None:
    if not 0 <= wall_index < len(room.walls):
        console_logger.warning(f"Wall {wall_index} not found in room {room.id}")
        return None
    return _with_apertures(room, wall_index, list(room.walls[wall_index].apertures)+[ap])

def update_aperture(room: Room, wall_index: int, ap_id: str, **changes) -> Room | None:
    if not 0 <= wall_index < len(room.walls):
        console_logger.warning(f"Wall {wall_index} not found in room {room.id}")
        return None
    aps = list(room.walls[wall_index].apertures)
    for k, a in enumerate(aps):
        if a.id == ap_id:
            aps[k] = a._replace(**changes)
            return _with_apertures(room, wall_index, aps)
    console_logger.warning(f"Aperture {ap_id} not found on wall {wall_index}")
    return None

def delete_aperture(room: Room, wall_index: int, ap_id: str) -> Room | None:
    if not 0 <= wall_index < len(room.walls):
        console_logger.warning(f"Wall {wall_index} not found in room {room.id}")
        return None
    aps = room.walls[wall_index].apertures
    if not any(a.id == ap_id for a in aps):
        console_logger.warning(f"Aperture {ap_id} not found on wall {wall_index}")
        return None
    return _with_apertures(room, wall_index, [a for a in aps if a.id != ap_id])

def move_aperture(source: Room, source_wall: int, target: Room, target_wall: int,
                  ap_id: str, new_distance: float, new_anchor: AnchorVertex,
                  ) -> tuple[Room, Room] | None:
    """Move an aperture to another wall, in the same room or across rooms.

    Returns (new source, new target); both are the same room when
    source.id == target.id. None when anything is missing, leaving both
    rooms untouched.
    """
    if not 0 <= source_wall < len(source.walls):
        console_logger.warning(f"Source wall {source_wall} not found in room {source.id}")
        return None
    ap = next((a for a in source.walls[source_wall].apertures if a.id == ap_id), None)
    if ap is None:
        console_logger.warning(f"Aperture {ap_id} not found on source wall {source_wall}")
        return None
    same = source.id == target.id
    if not 0 <= target_wall < len((source if same else target).walls):
        console_logger.warning(f"Target wall {target_wall} not found")
        return None
    moved = ap._replace(distance=new_distance, anchor_vertex=new_anchor)
    src = _with_apertures(source, source_wall,
                          [a for a in source.walls[source_wall].apertures if a.id != ap_id])
    tgt = src if same else target
    tgt = _with_apertures(tgt, target_wall, list(tgt.walls[target_wall].apertures)+[moved])
    return (tgt, tgt) if same else (src, tgt)
