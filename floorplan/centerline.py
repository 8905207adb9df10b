"""Wall centerline ring for a room, with edge→vertex-ID metadata.

Centerline segment k runs from vertices[k] to vertices[k+1] of the result and
belongs to the room edge whose endpoint IDs are edge_metadata[k]. Metadata
always comes from room.vertices, so segment k maps back to exactly one wall
even when degenerate edges were skipped.
"""
from typing import NamedTuple

from shared.types import Room, Vertex
from shared.geometry import GeometryError, distance, right_norm, off_pt, line_isect


class EdgeMetadata(NamedTuple):
    start_vertex_id: str
    end_vertex_id: str


class Centerline(NamedTuple):
    vertices: list[Vertex]
    edge_metadata: list[EdgeMetadata]

    def wall_index(self, room: Room, k: int) -> int:
        """Index into room.walls for centerline segment k, or -1."""
        return room.index_of(self.edge_metadata[k].start_vertex_id)


def _half_thickness(room: Room, i: int) -> float:
    if i < len(room.walls):
        return room.walls[i].thickness/2
    return room.wall_thickness/2


def calculate_centerline(room: Room) -> Centerline:
    """Offset each edge outward by half its wall thickness and miter the offsets.

    Zero-length edges are skipped. Parallel neighbouring offsets fall back to
    the midpoint of the two adjacent offset endpoints.
    """
    vs = room.vertices
    n = len(vs)
    if n < 3:
        return Centerline(list(vs), [])
    lines = []
    for i in range(n):
        a, b = vs[i], vs[(i+1)%n]
        if distance(a.xy, b.xy) == 0:
            continue
        nrm = right_norm(a.xy, b.xy); h = _half_thickness(room, i)
        lines.append((off_pt(a.xy, nrm, h), off_pt(b.xy, nrm, h), EdgeMetadata(a.id, b.id)))
    ring = []
    for k in range(len(lines)):
        s1, e1, _ = lines[k-1]; s2, e2, meta = lines[k]
        try:
            p = line_isect(s1, (e1[0]-s1[0], e1[1]-s1[1]), s2, (e2[0]-s2[0], e2[1]-s2[1]), 1e-10)
        except GeometryError:
            p = ((e1[0]+s2[0])/2, (e1[1]+s2[1])/2)
        ring.append(Vertex(f"cl-{meta.start_vertex_id}", p[0], p[1]))
    return Centerline(ring, [meta for _, _, meta in lines])


def centerline_vertices(room: Room) -> list[Vertex]:
    return calculate_centerline(room).vertices
