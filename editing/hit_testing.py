"""Pointer-press hit testing: which vertex, edge, handle or room is under the cursor.

Thresholds are screen pixels and are divided by zoom before comparison with
world distances. Priority is vertex > edge > rotation handle > room, so the
most specific target wins when several overlap.
"""
import logging
from typing import Literal, NamedTuple

from shared.types import Point, Room
from shared.geometry import distance, point_segment_distance, point_in_polygon
from shared.transforms import room_world_point
from floorplan.constants import VERTEX_HIT_PX, EDGE_HIT_PX, ROTATION_HANDLE_HIT_PX
from assembly.room_drag import (
    RoomDragMachine, RotationDragMachine, ROTATION_HANDLE_DISTANCE, rotation_handle_position,
)
from editing.vertex_edit import VertexDragMachine

console_logger = logging.getLogger(__name__)

HitKind = Literal["vertex", "edge", "rotation", "room"]

PRIORITY = {"vertex": 0, "edge": 1, "rotation": 2, "room": 3}


class Hit(NamedTuple):
    kind: HitKind
    room_id: str
    index: int = -1                  # vertex index, or edge start index
    distance: float = 0.0            # cm from the pointer


def _world_ring(room: Room) -> list[Point]:
    return [room_world_point(room, v.xy) for v in room.vertices]


def hit_test_room_vertices(world: Point, room: Room, zoom: float = 1.0,
                           threshold_px: float = VERTEX_HIT_PX) -> tuple[int, float] | None:
    """Nearest vertex within the threshold as (index, distance), or None."""
    limit = threshold_px/zoom
    best = None
    for i, p in enumerate(_world_ring(room)):
        d = distance(world, p)
        if d <= limit and (best is None or d < best[1]):
            best = (i, d)
    return best


def hit_test_room_edges(world: Point, room: Room, zoom: float = 1.0,
                        threshold_px: float = EDGE_HIT_PX) -> tuple[int, float] | None:
    """Nearest edge within the threshold as (start index, distance), or None."""
    limit = threshold_px/zoom
    ring = _world_ring(room)
    n = len(ring)
    best = None
    for i in range(n):
        d, _ = point_segment_distance(world, ring[i], ring[(i+1)%n])
        if d <= limit and (best is None or d < best[1]):
            best = (i, d)
    return best


def hit_test_room(world: Point, room: Room) -> bool:
    return point_in_polygon(world, _world_ring(room))


def hit_test_rotation_handle(world: Point, room: Room, zoom: float = 1.0,
                             handle_distance: float = ROTATION_HANDLE_DISTANCE,
                             threshold_px: float = ROTATION_HANDLE_HIT_PX) -> float | None:
    """Distance to the handle when within the threshold, else None."""
    d = distance(world, rotation_handle_position(room, handle_distance))
    return d if d <= threshold_px/zoom else None


def rooms_at_point(world: Point, rooms: list[Room]) -> list[Room]:
    return [r for r in rooms if hit_test_room(world, r)]


def hit_test(world: Point, room: Room, zoom: float = 1.0,
             rotation_handle: bool = False) -> Hit | None:
    """Most specific hit on one room. The rotation handle is only tested
    when it is shown (assembly mode)."""
    v = hit_test_room_vertices(world, room, zoom)
    if v is not None:
        return Hit("vertex", room.id, v[0], v[1])
    e = hit_test_room_edges(world, room, zoom)
    if e is not None:
        return Hit("edge", room.id, e[0], e[1])
    if rotation_handle:
        d = hit_test_rotation_handle(world, room, zoom)
        if d is not None:
            return Hit("rotation", room.id, -1, d)
    if hit_test_room(world, room):
        return Hit("room", room.id)
    return None


def find_best_hit(world: Point, rooms: list[Room], zoom: float = 1.0,
                  rotation_handle: bool = False) -> Hit | None:
    """Best hit across rooms: highest priority kind, then nearest.
    Equal hits go to the room listed first."""
    best = None
    for room in rooms:
        hit = hit_test(world, room, zoom, rotation_handle)
        if hit is None:
            continue
        if best is None or (PRIORITY[hit.kind], hit.distance) < (PRIORITY[best.kind], best.distance):
            best = hit
    return best


def start_drag(hit: Hit | None, world: Point, screen: Point,
               vertex_drag: VertexDragMachine | None = None,
               room_drag: RoomDragMachine | None = None,
               rotation_drag: RotationDragMachine | None = None) -> bool:
    """Arm the machine that handles this hit. False when nothing was armed."""
    if hit is None:
        return False
    if hit.kind in ("vertex", "edge") and vertex_drag is not None:
        vertex_drag.start(hit.kind, hit.room_id, hit.index, world, screen)
    elif hit.kind == "rotation" and rotation_drag is not None:
        rotation_drag.start(hit.room_id, world, screen)
    elif hit.kind == "room" and room_drag is not None:
        room_drag.start(hit.room_id, world, screen)
    else:
        console_logger.debug(f"No drag handler for {hit.kind} hit on room {hit.room_id}")
        return False
    return True
