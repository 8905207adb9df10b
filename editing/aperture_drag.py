"""Aperture drag along a wall, or onto another wall in any room.

The grab offset (cm along the wall between the pointer and the aperture's
start) is kept for the whole drag so the aperture does not jump under the
cursor. Positions are always stored from the nearer wall end.
"""
import logging

from shared.types import Point, Room
from shared.geometry import distance
from shared.transforms import room_local_point
from floorplan.apertures import aperture_at, aperture_span, edge_length, find_aperture, move_aperture
from floorplan.config import FloorplanConfig
from floorplan.constants import CM_PER_M
from editing.drag import DragMachine, freeze
from assembly.store import RoomStore

console_logger = logging.getLogger(__name__)


def along_wall(room: Room, wall_index: int, world: Point) -> float:
    """Pointer position projected onto a wall, in cm from the wall start (unclamped)."""
    n = len(room.vertices)
    a = room.vertices[wall_index].xy; b = room.vertices[(wall_index+1)%n].xy
    L = distance(a, b)
    if L == 0:
        return 0.0
    p = room_local_point(room, world)
    return ((p[0]-a[0])*(b[0]-a[0])+(p[1]-a[1])*(b[1]-a[1]))/L


class ApertureDragMachine(DragMachine):
    def __init__(self, store: RoomStore, config: FloorplanConfig | None = None):
        self.config = config or store.config
        super().__init__(self.config.edit_drag_threshold)
        self.store = store
        self.aperture_id: str | None = None
        self.grab_offset = 0.0       # cm
        self.room_id: str | None = None
        self.wall_index = -1

    def start(self, room_id: str, aperture_id: str, world: Point, screen: Point) -> bool:
        room = self.store.get_room(room_id)
        found = find_aperture(room, aperture_id)
        if found is None:
            console_logger.warning(f"Aperture {aperture_id} not found in room {room_id}")
            return False
        i, ap = found
        start_cm = aperture_span(ap, edge_length(room, i))[0]
        self.grab_offset = along_wall(room, i, world)-start_cm
        self.aperture_id, self.room_id, self.wall_index = aperture_id, room_id, i
        self.arm(freeze("aperture", room, world, screen, i))
        return True

    def move(self, world: Point, screen: Point, target_room_id: str | None = None,
             target_wall: int | None = None) -> Room | None:
        """Slide the aperture under the pointer; a target wall moves it there first."""
        if not self.activate(screen):
            return None
        room_id = target_room_id or self.room_id
        wall = self.wall_index if target_wall is None else target_wall
        target = self.store.get_room(room_id)
        if not 0 <= wall < len(target.walls):
            return None
        source = self.store.get_room(self.room_id)
        found = find_aperture(source, self.aperture_id)
        if found is None:
            return None
        _, ap = found
        L = edge_length(target, wall)
        w = ap.width*CM_PER_M
        if w > L:
            return None
        start_cm = min(max(along_wall(target, wall, world)-self.grab_offset, 0.0), L-w)
        placed = aperture_at(ap, start_cm, L)
        moved = move_aperture(source, self.wall_index, target, wall, ap.id,
                              placed.distance, placed.anchor_vertex)
        if moved is None:
            return None
        src, tgt = moved
        if src.id != tgt.id:
            self.store.replace_room(src)
        self.store.replace_room(tgt)
        self.room_id, self.wall_index = tgt.id, wall
        return tgt

    def end(self) -> Room | None:
        st = self.finish()
        if st is None or self.room_id is None:
            return None
        room = self.store.get_room(self.room_id)
        if self.store.history is not None:
            self.store.history("Moved aperture")
        return room
