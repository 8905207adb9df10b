"""Shared types, geometry primitives, coordinate transforms and IDs."""

from .types import (
    Point, Vertex, Aperture, Wall, Constraint, Room,
    WallType, ApertureType, AnchorVertex, ConstraintType, SnapMode,
    WALL_TYPES, CONSTRAINT_TYPES, VERTEX_CONSTRAINT_TYPES, EDGE_CONSTRAINT_TYPES,
)
from .geometry import (
    GeometryError, PolygonValidationError,
    distance, left_norm, right_norm, off_pt, line_isect, lerp,
    project_onto_line, point_segment_distance, segment_distance,
    segments_cross, segment_isect,
    normalize_angle, wrap_angle, edge_angle, are_parallel, are_perpendicular,
    poly_area, signed_area, is_ccw, ensure_ccw, centroid, recenter_vertices,
    is_self_intersecting, validate_polygon, point_in_polygon,
    remove_collinear_vertices, offset_polygon,
)
from .transforms import (
    ViewTransform, rotate_point, local_to_world, world_to_local,
    screen_to_world, world_to_screen, room_world_point, room_local_point,
    room_world_vertices, snap_angle_to_increment, pointer_angle,
)
from .ids import new_id, with_ids, ensure_ids
