"""Editor configuration, round-trippable as a plain nested record."""
from typing import NamedTuple, Any

from floorplan.constants import (
    GRID_SIZE, INTERIOR_WALL_THICKNESS, EXTERIOR_WALL_THICKNESS, MITER_LIMIT,
    EDIT_DRAG_THRESHOLD, ROTATION_INCREMENT, ROTATION_SNAP_THRESHOLD,
    CLOSE_THRESHOLD, ORTHO_SNAP_PX, BOUNDARY_SNAP_THRESHOLD, EDGE_EXTENSION,
    CENTERLINE_SNAP_THRESHOLD,
)
from walls.constants import DEFAULT_WALL_THICKNESS
from assembly.constants import (
    SEGMENT_THRESHOLD, VERTEX_THRESHOLD, DOOR_THRESHOLD, ANGLE_TOLERANCE,
    ASSEMBLY_DRAG_THRESHOLD,
)


class JoinConfig(NamedTuple):
    """Room-joining thresholds (cm, radians)."""
    segment_threshold: float = SEGMENT_THRESHOLD
    vertex_threshold: float = VERTEX_THRESHOLD
    door_threshold: float = DOOR_THRESHOLD
    angle_tolerance: float = ANGLE_TOLERANCE


class FloorplanConfig(NamedTuple):
    grid_size: float = GRID_SIZE
    snap_to_grid: bool = True
    orthogonal_snap: bool = True
    default_wall_thickness: float = DEFAULT_WALL_THICKNESS
    interior_wall_thickness: float = INTERIOR_WALL_THICKNESS
    exterior_wall_thickness: float = EXTERIOR_WALL_THICKNESS
    miter_limit: float = MITER_LIMIT
    room_joining: bool = True
    edit_drag_threshold: float = EDIT_DRAG_THRESHOLD
    assembly_drag_threshold: float = ASSEMBLY_DRAG_THRESHOLD
    rotation_snap: bool = True
    rotation_increment: float = ROTATION_INCREMENT
    rotation_snap_threshold: float = ROTATION_SNAP_THRESHOLD
    close_threshold: float = CLOSE_THRESHOLD
    ortho_snap_px: float = ORTHO_SNAP_PX
    boundary_snap_threshold: float = BOUNDARY_SNAP_THRESHOLD
    edge_extension: float = EDGE_EXTENSION
    centerline_snap_threshold: float = CENTERLINE_SNAP_THRESHOLD
    join: JoinConfig = JoinConfig()

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "FloorplanConfig":
        """Build from a plain dict; unknown keys are ignored."""
        fields = {k: v for k, v in data.items() if k in cls._fields and k != "join"}
        join = data.get("join") or {}
        fields["join"] = JoinConfig(**{k: v for k, v in join.items() if k in JoinConfig._fields})
        return cls(**fields)

    def to_mapping(self) -> dict[str, Any]:
        d = self._asdict()
        d["join"] = self.join._asdict()
        return d
