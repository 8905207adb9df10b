"""Envelope recalculation pipeline.

An envelope calculator is an awaited collaborator:

    async calculator(rooms, miter_limit, interior_thickness, exterior_thickness)
        -> dict[room_id, EnvelopeResult]

Results are in room-local coordinates. A calculator that merges rooms may
insert vertices where rooms meet; it reports them as updated_vertices and the
room's original_vertices keep the hand-drawn shape so a later separation can
restore it.
"""
import logging
from typing import Awaitable, Callable, NamedTuple

from shared.types import Room, Vertex, Wall
from shared.ids import ensure_ids
from shared.geometry import offset_polygon
from shared.transforms import room_world_point
from walls.generate import generate_walls
from walls.classify import classify_walls
from floorplan.centerline import calculate_centerline
from floorplan.constants import INTERIOR_WALL_THICKNESS, EXTERIOR_WALL_THICKNESS, MITER_LIMIT

console_logger = logging.getLogger(__name__)


class EnvelopeResult(NamedTuple):
    envelope: list[Vertex]
    inner_boundary: list[Vertex]
    debug_centerline: list[Vertex]
    debug_contracted: list[Vertex]
    walls: list[Wall]
    updated_vertices: list[Vertex] | None = None


EnvelopeCalculator = Callable[[list[Room], float, float, float], Awaitable[dict[str, EnvelopeResult]]]


def apply_envelope_result(room: Room, result: EnvelopeResult) -> Room:
    """Fold one calculator result into the current room snapshot."""
    updated = room._replace(
        envelope_vertices=list(result.envelope),
        inner_boundary_vertices=list(result.inner_boundary),
        walls=list(result.walls),
    )
    if result.updated_vertices:
        console_logger.info(
            f"Room {room.id}: vertices updated {len(room.vertices)} -> {len(result.updated_vertices)}")
        verts = ensure_ids(list(result.updated_vertices))
        updated = updated._replace(
            vertices=verts,
            original_vertices=room.original_vertices or list(room.vertices),
            walls=generate_walls(verts, room.wall_thickness, list(result.walls), room.vertices),
        )
    elif room.original_vertices and len(room.vertices) > len(room.original_vertices):
        console_logger.info(
            f"Room {room.id}: resetting to original vertices "
            f"({len(room.vertices)} -> {len(room.original_vertices)})")
        verts = list(room.original_vertices)
        updated = updated._replace(
            vertices=verts,
            walls=generate_walls(verts, room.wall_thickness, list(result.walls), room.vertices),
        )
    return updated._replace(centerline_vertices=calculate_centerline(updated).vertices)


async def recalculate_envelopes(rooms: list[Room], calculator: EnvelopeCalculator,
                                miter_limit: float = MITER_LIMIT,
                                interior_thickness: float = INTERIOR_WALL_THICKNESS,
                                exterior_thickness: float = EXTERIOR_WALL_THICKNESS,
                                ) -> dict[str, EnvelopeResult]:
    """Await the calculator on a snapshot of the room list."""
    console_logger.debug(f"Recalculating envelopes for {len(rooms)} rooms")
    return await calculator(list(rooms), miter_limit, interior_thickness, exterior_thickness)


# ============================================================
# Default calculator: rooms treated independently
# ============================================================

def _world_centerline(room: Room) -> list:
    return [room_world_point(room, v.xy) for v in calculate_centerline(room).vertices]


def isolated_envelope(room: Room, others: list[Room]) -> EnvelopeResult:
    """Envelope of one room with no boolean union against its neighbours.

    The envelope is the mitered outer wall ring; walls whose centerlines
    coincide with another room's are relabelled interior_division.
    """
    pts = [v.xy for v in room.vertices]
    if len(room.walls) == len(pts):
        outer = [w.start_corner for w in room.walls]
    else:
        outer = offset_polygon(pts, room.wall_thickness)
    envelope = [Vertex(f"env-{v.id}", p[0], p[1]) for v, p in zip(room.vertices, outer)]
    centerline = calculate_centerline(room).vertices
    walls = classify_walls(room.walls, _world_centerline(room), [_world_centerline(o) for o in others])
    return EnvelopeResult(envelope, list(room.vertices), centerline, list(room.vertices), walls)


async def isolated_envelopes(rooms: list[Room], miter_limit: float = MITER_LIMIT,
                             interior_thickness: float = INTERIOR_WALL_THICKNESS,
                             exterior_thickness: float = EXTERIOR_WALL_THICKNESS,
                             ) -> dict[str, EnvelopeResult]:
    return {r.id: isolated_envelope(r, [o for o in rooms if o.id != r.id]) for r in rooms}
