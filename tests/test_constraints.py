"""Tests for constraints/: factories, primitive graph, solver and DOF."""
import math
import pytest
from shared.types import Constraint, Room
from shared.ids import with_ids
from shared.geometry import distance
from walls.generate import generate_walls
from constraints.adapter import (
    create_distance_constraint, create_horizontal_constraint, create_vertical_constraint,
    create_parallel_constraint, create_perpendicular_constraint, create_angle_constraint,
    create_equal_length_constraint, constraint_to_primitive, room_to_primitives,
    primitives_to_room, solve_room, calculate_dof, is_over_constrained,
    is_under_constrained, is_fully_constrained,
)
from constraints.solver import LeastSquaresSolver, SolverError

SKEWED = [(0, 0), (300, 12), (320, 250), (-10, 240)]


@pytest.fixture
def skewed():
    vs = with_ids(SKEWED)
    return Room("sk", "skewed", vs, generate_walls(vs, 15))


class TestFactories:
    def test_distance_defaults_to_current(self, square_room):
        c = create_distance_constraint(square_room, 0, 1)
        assert c.type == "distance"
        assert c.value == pytest.approx(400)
        assert c.vertex_ids == [square_room.vertices[0].id, square_room.vertices[1].id]
        assert c.indices == [0, 1]
        assert c.enabled

    def test_vertex_kinds(self, square_room):
        assert create_horizontal_constraint(square_room, 0, 1).type == "horizontal"
        assert create_vertical_constraint(square_room, 1, 2).value is None

    def test_edge_kinds(self):
        assert create_parallel_constraint(0, 2).indices == [0, 2]
        assert create_perpendicular_constraint(0, 1).type == "perpendicular"
        assert create_angle_constraint(0, 1).value == pytest.approx(math.pi / 2)
        assert create_equal_length_constraint(1, 3).type == "equal"
        assert create_parallel_constraint(0, 2).vertex_ids == []

    def test_ids_unique(self, square_room):
        a = create_horizontal_constraint(square_room, 0, 1)
        b = create_horizontal_constraint(square_room, 0, 1)
        assert a.id != b.id


class TestPrimitives:
    def test_graph_shape(self, square_room):
        room = square_room._replace(constraints=[create_horizontal_constraint(square_room, 0, 1)])
        prims = room_to_primitives(room)
        points = [p for p in prims if p["type"] == "point"]
        lines = [p for p in prims if p["type"] == "line"]
        assert [p["id"] for p in points] == [v.id for v in square_room.vertices]
        assert [p["fixed"] for p in points] == [True, False, False, False]
        assert [p["id"] for p in lines] == ["line0", "line1", "line2", "line3"]
        assert lines[3]["p2_id"] == square_room.vertices[0].id
        assert prims[-1]["type"] == "horizontal"

    def test_disabled_constraints_skipped(self, square_room):
        c = create_horizontal_constraint(square_room, 0, 1)._replace(enabled=False)
        prims = room_to_primitives(square_room._replace(constraints=[c]))
        assert all(p["type"] in ("point", "line") for p in prims)

    def test_fixed_index(self, square_room):
        prims = room_to_primitives(square_room, fixed_index=2)
        assert [p["fixed"] for p in prims if p["type"] == "point"] == [False, False, True, False]

    def test_equal_maps_to_equal_length(self, square_room):
        prim = constraint_to_primitive(square_room, create_equal_length_constraint(0, 2))
        assert prim == {"id": prim["id"], "type": "equal_length",
                        "line1_id": "line0", "line2_id": "line2"}

    def test_legacy_index_constraint_resolves(self, square_room):
        legacy = Constraint("old", "distance", [], [1, 2], 250.0)
        prim = constraint_to_primitive(square_room, legacy)
        assert prim["p1_id"] == square_room.vertices[1].id
        assert prim["distance"] == 250.0

    def test_missing_vertex_skipped(self, square_room):
        dangling = Constraint("gone", "horizontal", ["v-missing", "v-other"], [7, 8])
        assert constraint_to_primitive(square_room, dangling) is None
        prims = room_to_primitives(square_room._replace(constraints=[dangling]))
        assert len(prims) == 8

    def test_round_trip_by_id(self, square_room):
        prims = room_to_primitives(square_room)
        back = primitives_to_room(list(reversed(prims)), square_room)
        assert back.vertices == square_room.vertices
        assert back.primitives is not None


class TestSolver:
    def test_horizontal(self, skewed):
        c = create_horizontal_constraint(skewed, 0, 1)
        solver = LeastSquaresSolver()
        solver.push_primitives(room_to_primitives(skewed._replace(constraints=[c])))
        solver.solve()
        pts = {p["id"]: (p["x"], p["y"]) for p in solver.get_primitives() if p["type"] == "point"}
        v0, v1 = skewed.vertices[0].id, skewed.vertices[1].id
        assert pts[v0] == (0, 0)
        assert abs(pts[v1][1] - pts[v0][1]) < 0.01

    def test_unsatisfiable_raises(self, square_room):
        c1 = create_distance_constraint(square_room, 0, 1, 100)
        c2 = create_distance_constraint(square_room, 0, 1, 300)
        solver = LeastSquaresSolver()
        solver.push_primitives(room_to_primitives(square_room._replace(constraints=[c1, c2])))
        with pytest.raises(SolverError, match="not satisfied"):
            solver.solve()

    def test_unknown_primitive_raises(self, square_room):
        solver = LeastSquaresSolver()
        solver.push_primitives(room_to_primitives(square_room)
                               + [{"id": "x", "type": "tangent", "line1_id": "line0", "line2_id": "line1"}])
        with pytest.raises(SolverError):
            solver.solve()

    @pytest.mark.asyncio
    async def test_solve_room_distance(self, skewed):
        room = skewed._replace(constraints=[create_distance_constraint(skewed, 0, 1, 350)])
        solved = await solve_room(room)
        assert distance(solved.vertices[0].xy, solved.vertices[1].xy) == pytest.approx(350, abs=0.05)
        assert [v.id for v in solved.vertices] == [v.id for v in skewed.vertices]
        assert solved.vertices[0].xy == (0, 0)

    @pytest.mark.asyncio
    async def test_perpendicular_and_parallel(self, skewed):
        room = skewed._replace(constraints=[
            create_perpendicular_constraint(0, 1), create_parallel_constraint(0, 2)])
        solved = await solve_room(room)
        p = [v.xy for v in solved.vertices]
        u = (p[1][0] - p[0][0], p[1][1] - p[0][1])
        v = (p[2][0] - p[1][0], p[2][1] - p[1][1])
        w = (p[3][0] - p[2][0], p[3][1] - p[2][1])
        assert abs(u[0] * v[0] + u[1] * v[1]) / (math.hypot(*u) * math.hypot(*v)) < 0.01
        assert abs(u[0] * w[1] - u[1] * w[0]) / (math.hypot(*u) * math.hypot(*w)) < 0.01

    @pytest.mark.asyncio
    async def test_no_enabled_constraints_is_noop(self, square_room):
        assert await solve_room(square_room) is square_room

    @pytest.mark.asyncio
    async def test_foreign_solver_errors_are_wrapped(self, square_room):
        class Broken:
            def push_primitives(self, primitives):
                raise ValueError("bad graph")

        room = square_room._replace(constraints=[create_horizontal_constraint(square_room, 0, 1)])
        with pytest.raises(SolverError, match="bad graph"):
            await solve_room(room, Broken())


class TestDOF:
    def test_counts_enabled_only(self, square_room):
        cs = [create_horizontal_constraint(square_room, 0, 1),
              create_vertical_constraint(square_room, 1, 2)._replace(enabled=False)]
        room = square_room._replace(constraints=cs)
        assert calculate_dof(room) == 5
        assert is_under_constrained(room)

    def test_full_and_over(self, square_room):
        cs = [create_horizontal_constraint(square_room, 0, 1) for _ in range(6)]
        assert is_fully_constrained(square_room._replace(constraints=cs))
        assert is_over_constrained(square_room._replace(constraints=cs + cs[:1]))
