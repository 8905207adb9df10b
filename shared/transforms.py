"""Local/world/screen affine transforms and rotation helpers.

World = position + R(rotation) · (scale · local).
Screen = world · zoom + pan.
"""
import math
from typing import NamedTuple

from .types import Point, Room, Vertex
from .geometry import normalize_angle


class ViewTransform(NamedTuple):
    """Canvas pan (screen px) and zoom (px per cm)."""
    pan: Point = (0.0, 0.0)
    zoom: float = 1.0


def rotate_point(p: Point, angle: float, center: Point = (0.0, 0.0)) -> Point:
    """Rotate p by angle (radians, CCW) around center."""
    c = math.cos(angle); s = math.sin(angle)
    dx = p[0]-center[0]; dy = p[1]-center[1]
    return (center[0]+dx*c-dy*s, center[1]+dx*s+dy*c)


def local_to_world(p: Point, position: Point, rotation: float, scale: float = 1.0) -> Point:
    """Scale, then rotate, then translate."""
    x, y = rotate_point((p[0]*scale, p[1]*scale), rotation)
    return (x+position[0], y+position[1])


def world_to_local(p: Point, position: Point, rotation: float, scale: float = 1.0) -> Point:
    """Inverse of local_to_world."""
    x, y = rotate_point((p[0]-position[0], p[1]-position[1]), -rotation)
    return (x/scale, y/scale)


def screen_to_world(p: Point, view: ViewTransform) -> Point:
    return ((p[0]-view.pan[0])/view.zoom, (p[1]-view.pan[1])/view.zoom)


def world_to_screen(p: Point, view: ViewTransform) -> Point:
    return (p[0]*view.zoom+view.pan[0], p[1]*view.zoom+view.pan[1])


def room_world_point(room: Room, p: Point) -> Point:
    return local_to_world(p, room.position, room.rotation, room.scale)


def room_local_point(room: Room, p: Point) -> Point:
    return world_to_local(p, room.position, room.rotation, room.scale)


def room_world_vertices(room: Room, vertices: list[Vertex] | None = None) -> list[Vertex]:
    """Room vertices (or the given local ring) in world space, IDs kept."""
    ring = room.vertices if vertices is None else vertices
    return [v.moved_to(room_world_point(room, v.xy)) for v in ring]


def snap_angle_to_increment(angle: float, increment: float = math.pi/12,
                            threshold: float = math.pi/36) -> float:
    """Snap to the nearest multiple of increment when within threshold."""
    nearest = round(angle/increment)*increment
    return nearest if abs(angle-nearest) <= threshold else angle


def pointer_angle(center: Point, pointer: Point, snap: bool = False,
                  increment: float = math.pi/12, threshold: float = math.pi/36) -> float:
    """Angle from center to pointer in [0, 2π), optionally snapped."""
    a = math.atan2(pointer[1]-center[1], pointer[0]-center[0])
    if snap:
        a = snap_angle_to_increment(a, increment, threshold)
    return normalize_angle(a)
