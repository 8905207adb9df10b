"""Shared type definitions for the floor-plan geometry engine.

Plan coordinates are centimeters. Aperture sizes and wall heights are meters,
matching the plain records the editor persists.
"""
from typing import Literal, NamedTuple, get_args

Point = tuple[float, float]

WallType = Literal[
    "exterior", "neighbor_same_block", "neighbor_other_block",
    "interior_division", "interior_structural", "interior_partition",
    "terrain_contact", "adiabatic",
]
WALL_TYPES: tuple[str, ...] = get_args(WallType)

ApertureType = Literal["door", "window"]
AnchorVertex = Literal["start", "end"]

ConstraintType = Literal[
    "distance", "horizontal", "vertical",
    "parallel", "perpendicular", "angle", "equal",
]
CONSTRAINT_TYPES: tuple[str, ...] = get_args(ConstraintType)
VERTEX_CONSTRAINT_TYPES = ("distance", "horizontal", "vertical")
EDGE_CONSTRAINT_TYPES = ("parallel", "perpendicular", "angle", "equal")

SnapMode = Literal["edge-vertex", "edge-only", "vertex-only", "none"]


class Vertex(NamedTuple):
    """Identified 2D point. ``id`` survives every edit and is the join key."""
    id: str
    x: float
    y: float

    @property
    def xy(self) -> Point:
        return (self.x, self.y)

    def moved_to(self, p: Point) -> "Vertex":
        return self._replace(x=p[0], y=p[1])


class Aperture(NamedTuple):
    """Door or window, positioned as a distance from one named wall end."""
    id: str
    type: ApertureType
    width: float                           # m
    distance: float                        # m, from anchor_vertex end
    anchor_vertex: AnchorVertex = "start"
    height: float = 2.1                    # m
    sill_height: float = 0.0               # m
    flip_horizontal: bool = False
    flip_vertical: bool = False


class Wall(NamedTuple):
    """Mitered wall for edge vertex_index -> vertex_index+1."""
    vertex_index: int
    thickness: float                 # cm
    wall_type: WallType
    height: float                    # m
    apertures: list[Aperture]
    normal: Point                    # outward unit normal
    start_corner: Point              # mitered outer corner at edge start
    end_corner: Point                # mitered outer corner at edge end


class Constraint(NamedTuple):
    """User-authored geometric constraint.

    Vertex types (distance, horizontal, vertical) use ``vertex_ids``.
    Edge types (parallel, perpendicular, angle, equal) use ``indices`` as
    edge indices into the vertex ring.
    """
    id: str
    type: ConstraintType
    vertex_ids: list[str]
    indices: list[int]
    value: float | None = None
    enabled: bool = True


class Room(NamedTuple):
    """Closed CCW polygon in local space plus its world transform."""
    id: str
    name: str
    vertices: list[Vertex]
    walls: list[Wall]
    position: Point = (0.0, 0.0)
    rotation: float = 0.0            # radians
    scale: float = 1.0
    wall_thickness: float = 15.0     # cm
    constraints: list[Constraint] = []       # replaced via _replace, never mutated
    original_vertices: list[Vertex] | None = None
    centerline_vertices: list[Vertex] | None = None
    envelope_vertices: list[Vertex] | None = None
    inner_boundary_vertices: list[Vertex] | None = None
    primitives: list[dict] | None = None

    def vertex_by_id(self, vid: str) -> Vertex | None:
        for v in self.vertices:
            if v.id == vid:
                return v
        return None

    def index_of(self, vid: str) -> int:
        """Index of vertex *vid* in the ring, or -1."""
        for i, v in enumerate(self.vertices):
            if v.id == vid:
                return i
        return -1
