"""Vertex, edge and wall drags plus vertex insertion and deletion.

Edge and wall drags are the same operation: both endpoints of one edge move
by the pointer delta. Each frame is written through the store; a frame with
enabled constraints is re-solved with the dragged vertex pinned, and a solve
that finishes after a newer frame was issued is dropped.
"""
import logging

from shared.types import Point, Room, Vertex
from shared.ids import new_id
from shared.geometry import point_segment_distance
from shared.transforms import room_local_point
from walls.generate import generate_walls, validate_wall_indices
from floorplan.config import FloorplanConfig
from floorplan.constants import MIN_VERTICES
from floorplan.snapping import snap_to_grid
from constraints.adapter import solve_room, Solver
from constraints.solver import SolverError
from editing.drag import DragKind, DragMachine, freeze, recenter_in_place
from assembly.store import RoomStore

console_logger = logging.getLogger(__name__)


# ============================================================
# Insertion / deletion
# ============================================================

def find_closest_edge_index(room: Room, world: Point) -> int:
    """Edge whose segment is nearest to a world point (local-space test)."""
    p = room_local_point(room, world)
    vs = room.vertices
    n = len(vs)
    best, best_d = 0, float("inf")
    for i in range(n):
        d, _ = point_segment_distance(p, vs[i].xy, vs[(i+1)%n].xy)
        if d < best_d:
            best, best_d = i, d
    return best


def add_vertex_to_edge(room: Room, edge_index: int, world: Point) -> Room:
    """Insert a fresh vertex on edge_index at the projection of world.

    Walls are matched so both halves keep the split wall's properties.
    """
    vs = room.vertices
    n = len(vs)
    _, q = point_segment_distance(room_local_point(room, world), vs[edge_index].xy,
                                  vs[(edge_index+1)%n].xy)
    inserted = vs[:edge_index+1]+[Vertex(new_id(), q[0], q[1])]+vs[edge_index+1:]
    verts, position = recenter_in_place(inserted, room.position, room.rotation, room.scale)
    walls = validate_wall_indices(
        generate_walls(verts, room.wall_thickness, room.walls, _shifted(vs, verts, inserted)))
    return room._replace(vertices=verts, walls=walls, position=position,
                         original_vertices=list(verts))


def _shifted(old: list[Vertex], centered: list[Vertex], uncentered: list[Vertex]) -> list[Vertex]:
    """Old ring expressed in the recentered frame, for wall matching."""
    dx = centered[0].x-uncentered[0].x; dy = centered[0].y-uncentered[0].y
    return [v.moved_to((v.x+dx, v.y+dy)) for v in old]


def delete_vertex(room: Room, index: int) -> Room | None:
    """Remove a vertex; None (room unchanged) when only 3 remain."""
    n = len(room.vertices)
    if n <= MIN_VERTICES:
        console_logger.warning(f"Room {room.id} needs at least {MIN_VERTICES} vertices; delete rejected")
        return None
    if not 0 <= index < n:
        console_logger.warning(f"Vertex {index} not found in room {room.id}")
        return None
    remaining = room.vertices[:index]+room.vertices[index+1:]
    verts, position = recenter_in_place(remaining, room.position, room.rotation, room.scale)
    walls = validate_wall_indices(generate_walls(verts, room.wall_thickness, room.walls,
                                                 _shifted(room.vertices, verts, remaining)))
    constraints = [c for c in room.constraints if room.vertices[index].id not in c.vertex_ids]
    return room._replace(vertices=verts, walls=walls, position=position,
                         original_vertices=list(verts), constraints=constraints)


# ============================================================
# Drags
# ============================================================

class VertexDragMachine(DragMachine):
    """Drags one vertex, or both ends of an edge/wall."""

    def __init__(self, store: RoomStore, config: FloorplanConfig | None = None,
                 solver_factory=None):
        self.config = config or store.config
        super().__init__(self.config.edit_drag_threshold)
        self.store = store
        self.solver_factory = solver_factory

    def start(self, kind: DragKind, room_id: str, index: int, world: Point, screen: Point) -> None:
        """Arm a vertex (index = vertex) or edge/wall (index = edge start) drag."""
        self.arm(freeze(kind, self.store.get_room(room_id), world, screen, index))

    def frame(self, world: Point) -> Room:
        """Unsolved geometry for the pointer at world, from the frozen snapshot."""
        st = self.state
        n = len(st.vertices)
        i = st.target
        moved = [i] if st.kind == "vertex" else [i, (i+1)%n]
        d = st.delta(world)
        first = st.to_world(st.vertices[i].xy)
        target = (first[0]+d[0], first[1]+d[1])
        if self.config.snap_to_grid:
            target = snap_to_grid(target, self.config.grid_size)
        # the snapped delta applies to every moved vertex so edges stay rigid
        d = (target[0]-first[0], target[1]-first[1])
        verts = list(st.vertices)
        for k in moved:
            w = st.to_world(st.vertices[k].xy)
            verts[k] = st.vertices[k].moved_to(st.to_local((w[0]+d[0], w[1]+d[1])))
        centered, position = recenter_in_place(verts, st.position, st.rotation, st.scale)
        live = self.store.get_room(st.room_id)
        walls = generate_walls(centered, live.wall_thickness, st.walls,
                               _shifted(st.vertices, centered, verts))
        return live._replace(vertices=centered, walls=walls, position=position)

    async def move(self, world: Point, screen: Point) -> Room | None:
        """Apply one pointer move. Returns the committed room, or None when the
        drag is not active or this frame was superseded."""
        if not self.activate(screen):
            return None
        room = self.frame(world)
        if not any(c.enabled for c in room.constraints):
            return self.store.replace_room(room)
        gen = self.next_generation()
        solved = await self._solve(room)
        if not self.is_current(gen):
            console_logger.debug(f"Discarding stale solve (generation {gen})")
            return None
        return self.store.replace_room(solved)

    async def _solve(self, room: Room) -> Room:
        solver: Solver | None = self.solver_factory() if self.solver_factory else None
        try:
            solved = await solve_room(room, solver, fixed_index=self.state.target)
        except SolverError as e:
            console_logger.warning(f"Solve failed during drag, using unsolved geometry: {e}")
            return room
        return solved._replace(walls=generate_walls(solved.vertices, room.wall_thickness,
                                                    room.walls, room.vertices))

    async def end(self) -> Room | None:
        """Commit, persist the new original_vertices, then recalculate envelopes."""
        st = self.finish()
        if st is None:
            return None
        room = self.store.get_room(st.room_id)
        self.store.replace_room(room._replace(original_vertices=list(room.vertices)),
                               f"Moved {st.kind}")
        await self.store.recalculate_all_envelopes()
        return self.store.get_room(st.room_id)
