"""Room ↔ solver primitive graph, constraint factories and degrees of freedom.

Point primitives are keyed by vertex ID, so solved coordinates always land on
the right vertex whatever order the solver returns them in. Edges are keyed
``line{i}`` for edge i (vertex i → i+1); edge count always equals vertex count,
so edge-index addressing stays valid while vertex IDs carry identity.
"""
import inspect
import logging
from typing import Protocol

from shared.types import Constraint, Room
from shared.ids import new_id
from shared.geometry import distance
from constraints.constants import DEFAULT_DISTANCE, DEFAULT_ANGLE, MAX_ITERATIONS, TOLERANCE
from constraints.solver import LeastSquaresSolver, SolverError

console_logger = logging.getLogger(__name__)


class Solver(Protocol):
    def push_primitives(self, primitives: list[dict]) -> None: ...
    def solve(self, max_iterations: int, tolerance: float): ...
    def get_primitives(self) -> list[dict]: ...


# ============================================================
# Factories
# ============================================================

def _vertex_constraint(room: Room, kind, i: int, j: int, value=None) -> Constraint:
    return Constraint(new_id("c"), kind, [room.vertices[i].id, room.vertices[j].id], [i, j], value)

def create_distance_constraint(room: Room, i: int, j: int, value: float | None = None) -> Constraint:
    """Distance between vertices i and j; the current distance when value is None."""
    if value is None:
        value = distance(room.vertices[i].xy, room.vertices[j].xy)
    return _vertex_constraint(room, "distance", i, j, value)

def create_horizontal_constraint(room: Room, i: int, j: int) -> Constraint:
    return _vertex_constraint(room, "horizontal", i, j)

def create_vertical_constraint(room: Room, i: int, j: int) -> Constraint:
    return _vertex_constraint(room, "vertical", i, j)

def create_parallel_constraint(edge1: int, edge2: int) -> Constraint:
    return Constraint(new_id("c"), "parallel", [], [edge1, edge2])

def create_perpendicular_constraint(edge1: int, edge2: int) -> Constraint:
    return Constraint(new_id("c"), "perpendicular", [], [edge1, edge2])

def create_angle_constraint(edge1: int, edge2: int, angle: float = DEFAULT_ANGLE) -> Constraint:
    return Constraint(new_id("c"), "angle", [], [edge1, edge2], angle)

def create_equal_length_constraint(edge1: int, edge2: int) -> Constraint:
    return Constraint(new_id("c"), "equal", [], [edge1, edge2])


# ============================================================
# Room -> primitives
# ============================================================

def _vertex_ids(room: Room, c: Constraint) -> tuple[str, str] | None:
    """Endpoint IDs of a vertex constraint; legacy index records resolve by position."""
    if len(c.vertex_ids) == 2 and all(room.vertex_by_id(v) is not None for v in c.vertex_ids):
        return c.vertex_ids[0], c.vertex_ids[1]
    n = len(room.vertices)
    if len(c.indices) >= 2 and all(0 <= i < n for i in c.indices[:2]):
        return room.vertices[c.indices[0]].id, room.vertices[c.indices[1]].id
    return None

def constraint_to_primitive(room: Room, c: Constraint) -> dict | None:
    if c.type in ("distance", "horizontal", "vertical"):
        ids = _vertex_ids(room, c)
        if ids is None:
            return None
        prim = {"id": c.id, "type": c.type, "p1_id": ids[0], "p2_id": ids[1]}
        if c.type == "distance":
            prim["distance"] = c.value if c.value is not None else DEFAULT_DISTANCE
        return prim
    n = len(room.vertices)
    if len(c.indices) < 2 or not all(0 <= i < n for i in c.indices[:2]):
        return None
    prim = {"id": c.id, "type": "equal_length" if c.type == "equal" else c.type,
            "line1_id": f"line{c.indices[0]}", "line2_id": f"line{c.indices[1]}"}
    if c.type == "angle":
        prim["angle"] = c.value if c.value is not None else DEFAULT_ANGLE
    return prim

def room_to_primitives(room: Room, fixed_index: int = 0) -> list[dict]:
    """Points (vertex fixed_index pinned), one line per edge, one primitive per enabled constraint."""
    vs = room.vertices
    n = len(vs)
    prims = [{"id": v.id, "type": "point", "x": v.x, "y": v.y, "fixed": i == fixed_index}
             for i, v in enumerate(vs)]
    prims += [{"id": f"line{i}", "type": "line", "p1_id": vs[i].id, "p2_id": vs[(i+1)%n].id}
              for i in range(n)]
    for c in room.constraints:
        if not c.enabled:
            continue
        prim = constraint_to_primitive(room, c)
        if prim is None:
            console_logger.warning(f"Constraint {c.id} ({c.type}) references missing geometry; skipped")
            continue
        prims.append(prim)
    return prims


def primitives_to_room(primitives: list[dict], room: Room) -> Room:
    """Copy solved point coordinates back by vertex ID.

    Vertices absent from the solved set keep their position. Walls are left
    alone: IDs and order are unchanged, only coordinates move.
    """
    solved = {p["id"]: (p["x"], p["y"]) for p in primitives if p.get("type") == "point"}
    verts = [v.moved_to(solved[v.id]) if v.id in solved else v for v in room.vertices]
    return room._replace(vertices=verts, primitives=list(primitives))


# ============================================================
# Solve
# ============================================================

async def solve_room(room: Room, solver: Solver | None = None, fixed_index: int = 0,
                     max_iterations: int = MAX_ITERATIONS, tolerance: float = TOLERANCE) -> Room:
    """Solve the room's enabled constraints. Returns the room unchanged when
    there are none. Any solver failure surfaces as SolverError.
    """
    if not any(c.enabled for c in room.constraints):
        return room
    solver = solver if solver is not None else LeastSquaresSolver()
    try:
        solver.push_primitives(room_to_primitives(room, fixed_index))
        pending = solver.solve(max_iterations, tolerance)
        if inspect.isawaitable(pending):
            await pending
        solved = solver.get_primitives()
    except SolverError:
        raise
    except Exception as e:
        raise SolverError(f"Solver failed for room {room.id}: {e}") from e
    return primitives_to_room(solved, room)


# ============================================================
# Degrees of freedom
# ============================================================

def calculate_dof(room: Room) -> int:
    """(n-1)*2 - enabled constraints; the first vertex is implicitly fixed."""
    return (len(room.vertices)-1)*2 - sum(1 for c in room.constraints if c.enabled)

def is_over_constrained(room: Room) -> bool:
    return calculate_dof(room) < 0

def is_under_constrained(room: Room) -> bool:
    return calculate_dof(room) > 0

def is_fully_constrained(room: Room) -> bool:
    return calculate_dof(room) == 0
