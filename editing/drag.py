"""Common drag lifecycle: idle → armed → dragging → committed.

A press arms the machine with a frozen snapshot of the room. The drag only
activates once the pointer has moved a pixel threshold in screen space, so a
plain click never edits anything. Every frame is computed from the frozen
snapshot, never from the live room, so solver or envelope writes made during
the drag cannot make it drift.
"""
import logging
from typing import Literal, NamedTuple

from shared.types import Point, Room, Vertex, Wall
from shared.geometry import recenter_vertices, distance
from shared.transforms import local_to_world, world_to_local, rotate_point

console_logger = logging.getLogger(__name__)

DragKind = Literal["vertex", "edge", "wall", "aperture", "room", "rotation"]
DragPhase = Literal["idle", "armed", "dragging", "committed"]


class DragState(NamedTuple):
    """Start-of-drag snapshot."""
    kind: DragKind
    room_id: str
    start_world: Point
    start_screen: Point
    vertices: list[Vertex]
    walls: list[Wall]
    position: Point
    rotation: float
    scale: float
    target: int = -1                 # vertex, edge or wall index

    def delta(self, world: Point) -> Point:
        return (world[0]-self.start_world[0], world[1]-self.start_world[1])

    def to_world(self, p: Point) -> Point:
        return local_to_world(p, self.position, self.rotation, self.scale)

    def to_local(self, p: Point) -> Point:
        return world_to_local(p, self.position, self.rotation, self.scale)


def freeze(kind: DragKind, room: Room, world: Point, screen: Point, target: int = -1) -> DragState:
    return DragState(kind, room.id, world, screen, list(room.vertices), list(room.walls),
                     room.position, room.rotation, room.scale, target)


def recenter_in_place(vertices: list[Vertex], position: Point, rotation: float,
                      scale: float = 1.0) -> tuple[list[Vertex], Point]:
    """Recenter a local ring and move position so world coordinates are unchanged."""
    centered, c = recenter_vertices(vertices)
    off = rotate_point((c[0]*scale, c[1]*scale), rotation)
    return centered, (position[0]+off[0], position[1]+off[1])


class DragMachine:
    """Phase bookkeeping shared by every drag kind."""

    def __init__(self, threshold: float):
        self.threshold = threshold
        self.phase: DragPhase = "idle"
        self.state: DragState | None = None
        self.generation = 0

    @property
    def active(self) -> bool:
        return self.phase == "dragging"

    def arm(self, state: DragState) -> None:
        self.state = state
        self.phase = "armed"

    def activate(self, screen: Point) -> bool:
        """Move armed → dragging once the pointer passes the threshold."""
        if self.phase == "armed" and distance(screen, self.state.start_screen) >= self.threshold:
            self.phase = "dragging"
            console_logger.debug(f"{self.state.kind} drag started on {self.state.room_id}")
        return self.phase == "dragging"

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation and self.phase == "dragging"

    def finish(self) -> DragState | None:
        """Close the drag. Returns the snapshot if the drag had activated."""
        state = self.state if self.phase == "dragging" else None
        self.phase = "committed" if state is not None else "idle"
        self.state = None
        self.generation += 1
        return state

    def reset(self) -> None:
        self.phase = "idle"
        self.state = None
        self.generation += 1
