"""Stable identifier helpers."""
import uuid

from .types import Point, Vertex


def new_id(prefix: str = "v") -> str:
    """Short random identifier, e.g. ``v-3f9c2a1b7e04``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def with_ids(points: list[Point]) -> list[Vertex]:
    """Wrap raw points as vertices with fresh IDs."""
    return [Vertex(new_id(), float(p[0]), float(p[1])) for p in points]


def ensure_ids(vertices: list[Vertex]) -> list[Vertex]:
    """Fill in missing or duplicated vertex IDs, keeping the first occurrence."""
    seen: set[str] = set()
    out = []
    for v in vertices:
        if not v.id or v.id in seen:
            v = v._replace(id=new_id())
        seen.add(v.id)
        out.append(v)
    return out
