"""Room collection with a single mutation entry point.

Every write goes through RoomStore.update_room (or helpers built on it), which
replaces the room record and bumps a mutation counter. Each room remembers the
counter value of its last write; async actions note it when they take their
snapshot and drop their result if the room was written in the meantime.
"""
import logging
from typing import Callable

from shared.types import Aperture, AnchorVertex, Constraint, Room
from shared.ids import new_id, ensure_ids
from floorplan.apertures import (
    add_aperture, update_aperture, delete_aperture, move_aperture,
)
from floorplan.centerline import centerline_vertices
from walls.generate import generate_walls
from floorplan.config import FloorplanConfig
from constraints.adapter import calculate_dof, is_over_constrained, solve_room, Solver
from constraints.solver import SolverError
from assembly.constants import DUPLICATE_OFFSET
from assembly.envelope import (
    EnvelopeCalculator, apply_envelope_result, isolated_envelopes, recalculate_envelopes,
)

console_logger = logging.getLogger(__name__)

GEOMETRY_FIELDS = ("vertices", "walls", "wall_thickness")


class RoomNotFoundError(KeyError):
    pass


class RoomStore:
    def __init__(self, config: FloorplanConfig | None = None,
                 history: Callable[[str], object] | None = None,
                 solver_factory: Callable[[], Solver] | None = None,
                 envelope_calculator: EnvelopeCalculator | None = None):
        self.config = config or FloorplanConfig()
        self.history = history
        self.solver_factory = solver_factory
        self.envelope_calculator = envelope_calculator or isolated_envelopes
        self.rooms: dict[str, Room] = {}
        self.mutations = 0
        self.revisions: dict[str, int] = {}
        self.calculating_envelopes = False

    def _commit(self, room: Room, label: str | None = None) -> Room:
        self.rooms[room.id] = room
        self.mutations += 1
        self.revisions[room.id] = self.mutations
        if label and self.history is not None:
            self.history(label)
        return room

    def revision(self, room_id: str) -> int | None:
        """Mutation count at the room's last write; None once deleted."""
        return self.revisions.get(room_id)

    def _solver(self) -> Solver | None:
        return self.solver_factory() if self.solver_factory is not None else None

    # --- rooms ---

    def get_room(self, room_id: str) -> Room:
        try:
            return self.rooms[room_id]
        except KeyError:
            raise RoomNotFoundError(room_id) from None

    def all_rooms(self) -> list[Room]:
        return list(self.rooms.values())

    def create_room(self, room: Room) -> Room:
        """Add a room record; missing or duplicated vertex IDs are replaced."""
        room = room._replace(vertices=ensure_ids(room.vertices))
        if not room.centerline_vertices:
            room = room._replace(centerline_vertices=centerline_vertices(room))
        console_logger.info(f"Added room {room.id} ({room.name})")
        return self._commit(room, "Created room")

    def update_room(self, room_id: str, label: str | None = None, **changes) -> Room:
        """Replace fields of one room. The centerline follows geometry changes."""
        room = self.get_room(room_id)._replace(**changes)
        if any(k in changes for k in GEOMETRY_FIELDS) and "centerline_vertices" not in changes:
            room = room._replace(centerline_vertices=centerline_vertices(room))
        return self._commit(room, label)

    def replace_room(self, room: Room, label: str | None = None) -> Room:
        """Write a whole room record produced elsewhere (drag frame, drag commit)."""
        self.get_room(room.id)
        return self._commit(room._replace(centerline_vertices=centerline_vertices(room)), label)

    def delete_room(self, room_id: str) -> None:
        self.get_room(room_id)
        del self.rooms[room_id]
        del self.revisions[room_id]
        self.mutations += 1
        if self.history is not None:
            self.history("Deleted room")

    def duplicate_room(self, room_id: str) -> Room:
        src = self.get_room(room_id)
        copy = src._replace(
            id=new_id("room"), name=f"{src.name} (copy)",
            position=(src.position[0]+DUPLICATE_OFFSET, src.position[1]+DUPLICATE_OFFSET),
            walls=[w._replace(apertures=[a._replace(id=new_id("ap")) for a in w.apertures])
                   for w in src.walls],
            constraints=[c._replace(id=new_id("c")) for c in src.constraints],
            envelope_vertices=None, inner_boundary_vertices=None,
        )
        return self._commit(copy, "Duplicated room")

    # --- apertures ---

    def add_aperture(self, room_id: str, wall_index: int, ap: Aperture) -> Room | None:
        room = add_aperture(self.get_room(room_id), wall_index, ap)
        return None if room is None else self._commit(room, f"Added {ap.type}")

    def update_aperture(self, room_id: str, wall_index: int, ap_id: str, **changes) -> Room | None:
        room = update_aperture(self.get_room(room_id), wall_index, ap_id, **changes)
        return None if room is None else self._commit(room, "Updated aperture")

    def delete_aperture(self, room_id: str, wall_index: int, ap_id: str) -> Room | None:
        room = delete_aperture(self.get_room(room_id), wall_index, ap_id)
        return None if room is None else self._commit(room, "Deleted aperture")

    def move_aperture(self, source_id: str, source_wall: int, target_id: str, target_wall: int,
                      ap_id: str, new_distance: float, new_anchor: AnchorVertex) -> bool:
        moved = move_aperture(self.get_room(source_id), source_wall, self.get_room(target_id),
                              target_wall, ap_id, new_distance, new_anchor)
        if moved is None:
            return False
        src, tgt = moved
        self._commit(src)
        self._commit(tgt, "Moved aperture")
        return True

    # --- constraints ---

    async def _solve_and_commit(self, room: Room, label: str,
                                reset_original: bool = True) -> Room | None:
        """Commit the unsolved change, solve it, then write the solved
        geometry unless the room was written while the solver ran.

        Returns the live room, or None if it was deleted meanwhile.
        """
        room = self._commit(room, label)
        revision = self.revision(room.id)
        try:
            solved = await solve_room(room, self._solver())
        except SolverError as e:
            console_logger.warning(f"Constraint solve failed for {room.id}, keeping unsolved change: {e}")
            return self.rooms.get(room.id)
        if self.revision(room.id) != revision:
            console_logger.debug(f"Room {room.id} changed during solve; solved geometry dropped")
            return self.rooms.get(room.id)
        if solved is not room:
            final = solved._replace(walls=generate_walls(solved.vertices, room.wall_thickness,
                                                         room.walls, room.vertices))
            if reset_original:
                final = final._replace(original_vertices=list(solved.vertices))
            self._commit(final._replace(centerline_vertices=centerline_vertices(final)))
        await self.recalculate_all_envelopes()
        return self.rooms.get(room.id)

    async def add_constraint(self, room_id: str, constraint: Constraint,
                             auto_solve: bool = True) -> Room | None:
        room = self.get_room(room_id)
        updated = room._replace(constraints=list(room.constraints)+[constraint])
        if not auto_solve:
            return self._commit(updated, "Added constraint")
        return await self._solve_and_commit(updated, "Added constraint")

    def remove_constraint(self, room_id: str, constraint_id: str) -> Room:
        room = self.get_room(room_id)
        return self._commit(
            room._replace(constraints=[c for c in room.constraints if c.id != constraint_id]),
            "Removed constraint")

    async def toggle_constraint(self, room_id: str, constraint_id: str) -> Room | None:
        room = self.get_room(room_id)
        updated = room._replace(constraints=[
            c._replace(enabled=not c.enabled) if c.id == constraint_id else c
            for c in room.constraints])
        return await self._solve_and_commit(updated, "Toggled constraint", reset_original=False)

    async def solve_room_constraints(self, room_id: str) -> Room | None:
        return await self._solve_and_commit(self.get_room(room_id), "Solved constraints")

    def clear_constraints(self, room_id: str) -> Room:
        return self.update_room(room_id, "Cleared all constraints", constraints=[], primitives=None)

    def room_dof(self, room_id: str) -> int | None:
        room = self.rooms.get(room_id)
        return None if room is None else calculate_dof(room)

    def is_room_over_constrained(self, room_id: str) -> bool:
        room = self.rooms.get(room_id)
        return room is not None and is_over_constrained(room)

    # --- envelopes ---

    async def recalculate_all_envelopes(self, calculator: EnvelopeCalculator | None = None) -> None:
        """Recalculate from the current snapshot, then fold results into the
        live rooms. A result is dropped when its room was deleted or written
        while the calculator ran."""
        snapshot = self.all_rooms()
        revisions = {room.id: self.revision(room.id) for room in snapshot}
        self.calculating_envelopes = True
        try:
            results = await recalculate_envelopes(
                snapshot, calculator or self.envelope_calculator, self.config.miter_limit,
                self.config.interior_wall_thickness, self.config.exterior_wall_thickness)
        finally:
            self.calculating_envelopes = False
        for room in snapshot:
            result = results.get(room.id)
            live = self.rooms.get(room.id)
            if result is None or live is None:
                continue
            if self.revision(room.id) != revisions[room.id]:
                console_logger.debug(f"Room {room.id} changed during recalculation; result dropped")
                continue
            self._commit(apply_envelope_result(live, result))
        console_logger.info(f"Envelopes recalculated for {len(results)} rooms")
