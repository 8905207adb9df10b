"""Pure geometry functions: lines, segments, polygons, angles."""
import math
from .types import Point, Vertex

# ============================================================
# Error Types
# ============================================================
class GeometryError(ValueError):
    """Raised for impossible geometry operations."""

class PolygonValidationError(GeometryError):
    """Raised when a polygon cannot become (or stay) a room."""

# ============================================================
# Vectors & Lines
# ============================================================
def distance(p: Point, q: Point) -> float:
    return math.hypot(q[0]-p[0], q[1]-p[1])

def left_norm(p1: Point, p2: Point) -> Point:
    """Unit normal vector to the left of the direction p1 → p2 (CCW perpendicular)."""
    dx = p2[0]-p1[0]; dy = p2[1]-p1[1]; Ln = math.sqrt(dx**2+dy**2)
    if Ln == 0:
        raise GeometryError("Zero-length edge has no normal")
    return (-dy/Ln, dx/Ln)

def right_norm(p1: Point, p2: Point) -> Point:
    """Unit normal to the right of p1 → p2. Outward for a CCW polygon edge."""
    n = left_norm(p1, p2)
    return (-n[0], -n[1])

def off_pt(p: Point, n: Point, d: float) -> Point:
    """Offset point p by distance d along unit direction n."""
    return (p[0]+d*n[0], p[1]+d*n[1])

def line_isect(p1: Point, d1: Point, p2: Point, d2: Point, tol: float = 1e-12) -> Point:
    """Intersection of two lines (p1+t*d1) and (p2+s*d2). Raises GeometryError if parallel."""
    det = d1[0]*d2[1]-d1[1]*d2[0]
    if abs(det) < tol:
        raise GeometryError(f"Parallel lines: det={det:.2e}")
    t = ((p2[0]-p1[0])*d2[1]-(p2[1]-p1[1])*d2[0])/det
    return (p1[0]+t*d1[0], p1[1]+t*d1[1])

def lerp(a: Point, b: Point, t: float) -> Point:
    """Linear interpolation between two points."""
    return (a[0] + t * (b[0] - a[0]), a[1] + t * (b[1] - a[1]))

def project_onto_line(p: Point, a: Point, b: Point) -> Point:
    """Orthogonal projection of p onto the infinite line through a and b."""
    dx = b[0]-a[0]; dy = b[1]-a[1]; L2 = dx*dx+dy*dy
    if L2 == 0:
        return a
    t = ((p[0]-a[0])*dx+(p[1]-a[1])*dy)/L2
    return (a[0]+t*dx, a[1]+t*dy)

def point_segment_distance(p: Point, a: Point, b: Point) -> tuple[float, Point]:
    """Distance from p to segment ab, and the closest point on the segment."""
    dx = b[0]-a[0]; dy = b[1]-a[1]; L2 = dx*dx+dy*dy
    if L2 == 0:
        return distance(p, a), a
    t = max(0.0, min(1.0, ((p[0]-a[0])*dx+(p[1]-a[1])*dy)/L2))
    c = (a[0]+t*dx, a[1]+t*dy)
    return distance(p, c), c

def segment_distance(a1: Point, a2: Point, b1: Point, b2: Point) -> float:
    """Minimum of the four endpoint-to-segment distances."""
    return min(point_segment_distance(a1, b1, b2)[0], point_segment_distance(a2, b1, b2)[0],
               point_segment_distance(b1, a1, a2)[0], point_segment_distance(b2, a1, a2)[0])

def _orient(p1: Point, p2: Point, p3: Point) -> float:
    return (p3[0]-p1[0])*(p2[1]-p1[1])-(p2[0]-p1[0])*(p3[1]-p1[1])

def segments_cross(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """True if segments p1p2 and p3p4 properly cross (touching does not count)."""
    d1 = _orient(p3, p4, p1); d2 = _orient(p3, p4, p2)
    d3 = _orient(p1, p2, p3); d4 = _orient(p1, p2, p4)
    return ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4))

def segment_isect(p1: Point, p2: Point, p3: Point, p4: Point) -> Point | None:
    """Intersection point of two closed segments, or None."""
    d1 = (p2[0]-p1[0], p2[1]-p1[1]); d2 = (p4[0]-p3[0], p4[1]-p3[1])
    det = d1[0]*d2[1]-d1[1]*d2[0]
    if abs(det) < 1e-10:
        return None
    t = ((p3[0]-p1[0])*d2[1]-(p3[1]-p1[1])*d2[0])/det
    s = ((p3[0]-p1[0])*d1[1]-(p3[1]-p1[1])*d1[0])/det
    if -1e-9 <= t <= 1+1e-9 and -1e-9 <= s <= 1+1e-9:
        return (p1[0]+t*d1[0], p1[1]+t*d1[1])
    return None

# ============================================================
# Angles
# ============================================================
def normalize_angle(a: float) -> float:
    """Map an angle to [0, 2π)."""
    a = math.fmod(a, 2*math.pi)
    if a < 0:
        a += 2*math.pi
    return 0.0 if a >= 2*math.pi else a

def wrap_angle(a: float) -> float:
    """Map an angle to (-π, π]."""
    a = normalize_angle(a)
    return a - 2*math.pi if a > math.pi else a

def edge_angle(p1: Point, p2: Point) -> float:
    return math.atan2(p2[1]-p1[1], p2[0]-p1[0])

def are_parallel(a1: Point, a2: Point, b1: Point, b2: Point,
                 tol: float = math.radians(5)) -> bool:
    """Edges point the same or opposite way, within tol radians."""
    d = abs(wrap_angle(edge_angle(a1, a2)-edge_angle(b1, b2)))
    return d <= tol or abs(d-math.pi) <= tol

def are_perpendicular(a1: Point, a2: Point, b1: Point, b2: Point,
                      tol: float = math.radians(5)) -> bool:
    d = abs(wrap_angle(edge_angle(a1, a2)-edge_angle(b1, b2)))
    return abs(d-math.pi/2) <= tol

# ============================================================
# Polygon Utilities
# ============================================================
def poly_area(verts: list[Point]) -> float:
    """Polygon area via the shoelace formula. Works for either winding order."""
    return abs(signed_area(verts))

def signed_area(verts: list[Point]) -> float:
    """Shoelace area, positive for CCW (y up)."""
    n = len(verts); a = 0
    for i in range(n):
        j = (i+1)%n; a += verts[i][0]*verts[j][1]-verts[j][0]*verts[i][1]
    return a/2

def is_ccw(verts: list[Point]) -> bool:
    """Counter-clockwise test. Fewer than 3 points count as CCW."""
    if len(verts) < 3:
        return True
    s = 0.0
    for i in range(len(verts)):
        x1, y1 = verts[i]; x2, y2 = verts[(i+1)%len(verts)]
        s += (x2-x1)*(y2+y1)
    return s < 0

def ensure_ccw(vertices: list[Vertex]) -> list[Vertex]:
    """Return the ring in CCW order. Reverses (keeping IDs) only when clockwise."""
    if is_ccw([v.xy for v in vertices]):
        return list(vertices)
    return list(reversed(vertices))

def centroid(verts: list[Point]) -> Point:
    """Vertex average, (0, 0) for an empty list."""
    if not verts:
        return (0.0, 0.0)
    n = len(verts)
    return (sum(p[0] for p in verts)/n, sum(p[1] for p in verts)/n)

def recenter_vertices(vertices: list[Vertex]) -> tuple[list[Vertex], Point]:
    """Shift a ring so its vertex average is the origin.

    Returns (centered vertices, local offset that was removed).
    """
    c = centroid([v.xy for v in vertices])
    return [v.moved_to((v.x-c[0], v.y-c[1])) for v in vertices], c

def is_self_intersecting(verts: list[Point]) -> bool:
    """True if any two non-adjacent edges properly cross. Triangles never do."""
    n = len(verts)
    if n < 4:
        return False
    for i in range(n):
        a1, a2 = verts[i], verts[(i+1)%n]
        for j in range(i+2, n):
            if j == (i+n-1)%n:
                continue
            if segments_cross(a1, a2, verts[j], verts[(j+1)%n]):
                return True
    return False

def validate_polygon(verts: list[Point], min_vertices: int = 3) -> None:
    """Raise PolygonValidationError unless verts form a simple polygon."""
    if len(verts) < min_vertices:
        raise PolygonValidationError(f"Polygon needs at least {min_vertices} vertices, got {len(verts)}")
    if is_self_intersecting(verts):
        raise PolygonValidationError("Polygon is self-intersecting")

def point_in_polygon(p: Point, poly: list[Point]) -> bool:
    """Ray-casting inside test."""
    inside = False; n = len(poly); j = n-1
    for i in range(n):
        xi, yi = poly[i]; xj, yj = poly[j]
        if (yi > p[1]) != (yj > p[1]) and p[0] < (xj-xi)*(p[1]-yi)/(yj-yi)+xi:
            inside = not inside
        j = i
    return inside

def remove_collinear_vertices(vertices: list[Vertex], tol: float = 0.01) -> list[Vertex]:
    """Drop vertices that do not change direction.

    Returns the input unchanged if fewer than 3 vertices would remain.
    """
    n = len(vertices)
    if n < 3:
        return list(vertices)
    out = []
    for i in range(n):
        prev, cur, nxt = vertices[i-1], vertices[i], vertices[(i+1)%n]
        v1 = (cur.x-prev.x, cur.y-prev.y); v2 = (nxt.x-cur.x, nxt.y-cur.y)
        L1 = math.hypot(*v1); L2 = math.hypot(*v2)
        if L1 == 0 or L2 == 0:
            continue
        if abs(v1[0]*v2[1]-v1[1]*v2[0])/(L1*L2) > tol:
            out.append(cur)
    return out if len(out) >= 3 else list(vertices)

def offset_polygon(verts: list[Point], d: float, tol: float = 1e-10) -> list[Point]:
    """Offset a CCW ring outward by d with mitered corners.

    Zero-length edges are skipped; parallel neighbours fall back to the
    average of the two offset endpoints.
    """
    lines = []
    n = len(verts)
    for i in range(n):
        a, b = verts[i], verts[(i+1)%n]
        if distance(a, b) < 1e-9:
            continue
        nrm = right_norm(a, b)
        lines.append((off_pt(a, nrm, d), off_pt(b, nrm, d)))
    out = []
    for i in range(len(lines)):
        s1, e1 = lines[i-1]; s2, e2 = lines[i]
        try:
            out.append(line_isect(s1, (e1[0]-s1[0], e1[1]-s1[1]), s2, (e2[0]-s2[0], e2[1]-s2[1]), tol))
        except GeometryError:
            out.append(((e1[0]+s2[0])/2, (e1[1]+s2[1])/2))
    return out
