"""Drawing state machine: clicks become a polygon, the polygon becomes a room.

States: idle → drawing → closing → idle, or drawing → cancelled → idle.
A rejected close (too few vertices, self-intersection) keeps the machine in
drawing so the user can continue.
"""
import logging
from typing import Callable, Literal

from shared.types import Point, Room
from shared.ids import new_id, with_ids
from shared.geometry import (
    PolygonValidationError, distance, ensure_ccw, recenter_vertices, validate_polygon,
)
from walls.generate import generate_walls
from floorplan.centerline import centerline_vertices
from floorplan.config import FloorplanConfig
from floorplan.constants import MIN_VERTICES
from floorplan.snapping import SnapHit, snap_point

console_logger = logging.getLogger(__name__)

DrawingPhase = Literal["idle", "drawing", "closing", "cancelled"]


def create_room_from_polygon(points: list[Point], name: str, thickness: float,
                             room_id: str | None = None) -> Room:
    """Validate, force CCW winding, recenter, and derive walls and centerline.

    Raises PolygonValidationError for fewer than 3 vertices or a
    self-intersecting ring.
    """
    validate_polygon(points, MIN_VERTICES)
    verts, c = recenter_vertices(ensure_ccw(with_ids(points)))
    room = Room(
        id=room_id or new_id("room"), name=name, vertices=verts,
        walls=generate_walls(verts, thickness), position=c, rotation=0.0,
        scale=1.0, wall_thickness=thickness, constraints=[],
        original_vertices=list(verts),
    )
    return room._replace(centerline_vertices=centerline_vertices(room))


class DrawingStateMachine:
    """Turns world-space clicks into a candidate polygon and closes it into a Room."""

    def __init__(self, config: FloorplanConfig | None = None,
                 on_room_created: Callable[[Room], object] | None = None):
        self.config = config or FloorplanConfig()
        self.on_room_created = on_room_created
        self.phase: DrawingPhase = "idle"
        self.points: list[Point] = []
        self._count = 0

    def start(self) -> None:
        self.phase = "drawing"
        self.points = []

    def preview(self, world: Point, zoom: float = 1.0, rooms: list[Room] = ()) -> SnapHit:
        """Snapped cursor position for the next click, without committing it.

        Before the first click the cursor snaps to existing centerlines, so a
        new room can start on a wall another room already has.
        """
        return snap_point(world, self.points, list(rooms), zoom, self.config,
                          drawing=self.phase == "drawing")

    def click(self, world: Point, zoom: float = 1.0, rooms: list[Room] = ()) -> Room | None:
        """Append a snapped vertex, or close the polygon near vertex 0.

        Returns the new Room when this click closed the polygon.
        """
        p = self.preview(world, zoom, rooms).point
        if self.phase != "drawing":
            self.start()
        if (len(self.points) >= MIN_VERTICES
                and distance(p, self.points[0]) <= self.config.close_threshold/zoom):
            return self.close()
        self.points.append(p)
        return None

    def close(self, name: str | None = None) -> Room | None:
        """Try to close the current polygon. None if validation failed."""
        if self.phase != "drawing":
            return None
        self.phase = "closing"
        try:
            room = create_room_from_polygon(
                self.points, name or f"Room {self._count+1}", self.config.default_wall_thickness)
        except PolygonValidationError as e:
            console_logger.warning(f"Cannot close polygon: {e}")
            self.phase = "drawing"
            return None
        self._count += 1
        console_logger.info(f"Created room {room.id} with {len(room.vertices)} vertices")
        if self.on_room_created is not None:
            self.on_room_created(room)
        self.phase = "idle"
        self.points = []
        return room

    def cancel(self) -> None:
        if self.phase == "drawing":
            self.phase = "cancelled"
            console_logger.debug(f"Drawing cancelled with {len(self.points)} vertices")
        self.points = []
        self.phase = "idle"
