"""Whole-room and rotation-handle drags in assembly mode.

During a room drag only translation is applied live; the snap preview is
computed with visualize_only so nothing else moves. The committing snap runs
once, at drag end.
"""
import logging
import math

from shared.types import Point, Room
from shared.transforms import pointer_angle
from floorplan.config import FloorplanConfig
from floorplan.snapping import snap_to_grid
from editing.drag import DragMachine, freeze
from assembly.joining import SnapResult, snap_room_to_rooms
from assembly.store import RoomStore

console_logger = logging.getLogger(__name__)

ROTATION_HANDLE_DISTANCE = 80.0      # cm from the room center

EDGE_MODES = ("edge-vertex", "edge-only")


def rotation_handle_position(room: Room, handle_distance: float = ROTATION_HANDLE_DISTANCE) -> Point:
    return (room.position[0]+math.cos(room.rotation)*handle_distance,
            room.position[1]+math.sin(room.rotation)*handle_distance)


class RoomDragMachine(DragMachine):
    def __init__(self, store: RoomStore, config: FloorplanConfig | None = None):
        self.config = config or store.config
        super().__init__(self.config.assembly_drag_threshold)
        self.store = store
        self.preview: SnapResult | None = None

    def start(self, room_id: str, world: Point, screen: Point) -> None:
        self.preview = None
        self.arm(freeze("room", self.store.get_room(room_id), world, screen))

    def _frozen_room(self) -> Room:
        st = self.state
        return self.store.get_room(st.room_id)._replace(
            vertices=st.vertices, walls=st.walls, position=st.position, rotation=st.rotation)

    def move(self, world: Point, screen: Point) -> SnapResult | None:
        """Translate live; return the snap preview (None while armed)."""
        if not self.activate(screen):
            return None
        st = self.state
        d = st.delta(world)
        self.store.update_room(st.room_id, position=(st.position[0]+d[0], st.position[1]+d[1]))
        if self.config.room_joining:
            self.preview = snap_room_to_rooms(self._frozen_room(), d, self._others_of(st.room_id),
                                              visualize_only=True, cfg=self.config.join)
        return self.preview

    async def end(self, world: Point) -> Room | None:
        """Apply the final snap (or grid snap), persist original_vertices,
        then recalculate envelopes."""
        st = self.state if self.active else None
        if st is None:
            self.finish()
            return None
        d = st.delta(world)
        frozen = self._frozen_room()
        self.finish()
        self.preview = None
        rotation = st.rotation
        if self.config.room_joining:
            snap = snap_room_to_rooms(frozen, d, self._others_of(st.room_id), cfg=self.config.join)
            position = (st.position[0]+snap.translation[0], st.position[1]+snap.translation[1])
            if snap.snapped and snap.mode in EDGE_MODES:
                rotation = st.rotation+snap.rotation
            if snap.snapped:
                console_logger.info(f"Room {st.room_id} snapped ({snap.mode}) to {snap.stationary_room_id}")
        else:
            position = (st.position[0]+d[0], st.position[1]+d[1])
            if self.config.snap_to_grid:
                position = snap_to_grid(position, self.config.grid_size)
        room = self.store.get_room(st.room_id)
        self.store.replace_room(room._replace(position=position, rotation=rotation,
                                              original_vertices=list(room.vertices)),
                                "Moved room")
        await self.store.recalculate_all_envelopes()
        return self.store.get_room(st.room_id)

    def _others_of(self, room_id: str) -> list[Room]:
        return [r for r in self.store.all_rooms() if r.id != room_id]


class RotationDragMachine(DragMachine):
    """Rotation handle: the room's rotation follows the pointer angle about its center."""

    def __init__(self, store: RoomStore, config: FloorplanConfig | None = None):
        self.config = config or store.config
        super().__init__(self.config.assembly_drag_threshold)
        self.store = store

    def start(self, room_id: str, world: Point, screen: Point) -> None:
        self.arm(freeze("rotation", self.store.get_room(room_id), world, screen))

    def angle_for(self, world: Point) -> float:
        return pointer_angle(self.state.position, world, self.config.rotation_snap,
                             self.config.rotation_increment, self.config.rotation_snap_threshold)

    def move(self, world: Point, screen: Point) -> Room | None:
        if not self.activate(screen):
            return None
        return self.store.update_room(self.state.room_id, rotation=self.angle_for(world))

    async def end(self) -> Room | None:
        st = self.finish()
        if st is None:
            return None
        room = self.store.get_room(st.room_id)
        self.store.replace_room(room._replace(original_vertices=list(room.vertices)), "Rotated room")
        await self.store.recalculate_all_envelopes()
        return self.store.get_room(st.room_id)
