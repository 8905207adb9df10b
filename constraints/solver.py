"""
Least-squares constraint solver over the point/line primitive graph.

Free parameters are the coordinates of every non-fixed point. Each constraint
primitive contributes one residual; a weak pull toward the starting
coordinates keeps under-constrained points from wandering.
"""

import logging
import math
import numpy as np
from scipy.optimize import least_squares

from constraints.constants import MAX_ITERATIONS, TOLERANCE, DEFAULT_DISTANCE, DEFAULT_ANGLE

console_logger = logging.getLogger(__name__)

ANCHOR_WEIGHT = 1e-6                 # pull toward the start coordinates, per cm


class SolverError(RuntimeError):
    pass


def _wrap(a):
    return (a + math.pi) % (2 * math.pi) - math.pi


class LeastSquaresSolver:
    """Push primitives, solve, read them back."""

    def __init__(self):
        self._primitives: list[dict] = []
        self._free: list[str] = []

    def push_primitives(self, primitives: list[dict]) -> None:
        self._primitives = [dict(p) for p in primitives]
        self._free = [p["id"] for p in self._primitives if p["type"] == "point" and not p.get("fixed")]

    # --- pack / unpack ---

    def _points(self) -> dict[str, np.ndarray]:
        return {p["id"]: np.array([p["x"], p["y"]], dtype=float)
                for p in self._primitives if p["type"] == "point"}

    def pack(self, points):
        return np.array([c for pid in self._free for c in points[pid]], dtype=float)

    def unpack(self, x, points):
        coords = dict(points)
        for k, pid in enumerate(self._free):
            coords[pid] = np.array([x[2 * k], x[2 * k + 1]])
        return coords

    # --- residuals ---

    def _line(self, coords, lines, line_id):
        p1, p2 = lines[line_id]
        return coords[p2] - coords[p1]

    def constraint_residuals(self, coords) -> np.ndarray:
        lines = {p["id"]: (p["p1_id"], p["p2_id"]) for p in self._primitives if p["type"] == "line"}
        res = []
        for p in self._primitives:
            t = p["type"]
            if t in ("point", "line"):
                continue
            if t in ("distance", "horizontal", "vertical"):
                d = coords[p["p2_id"]] - coords[p["p1_id"]]
                if t == "distance":
                    res.append(np.linalg.norm(d) - p.get("distance", DEFAULT_DISTANCE))
                elif t == "horizontal":
                    res.append(d[1])
                else:
                    res.append(d[0])
                continue
            u = self._line(coords, lines, p["line1_id"])
            v = self._line(coords, lines, p["line2_id"])
            lu = np.linalg.norm(u); lv = np.linalg.norm(v)
            if t == "equal_length":
                res.append(lu - lv)
                continue
            if lu < 1e-9 or lv < 1e-9:
                res.append(0.0)
                continue
            cross = (u[0] * v[1] - u[1] * v[0]) / (lu * lv)
            dot = (u[0] * v[0] + u[1] * v[1]) / (lu * lv)
            if t == "parallel":
                res.append(cross)
            elif t == "perpendicular":
                res.append(dot)
            elif t == "angle":
                res.append(_wrap(math.atan2(cross, dot) - p.get("angle", DEFAULT_ANGLE)))
            else:
                raise SolverError(f"Unknown constraint primitive type {t!r}")
        return np.array(res, dtype=float)

    def solve(self, max_iterations: int = MAX_ITERATIONS, tolerance: float = TOLERANCE) -> None:
        """Adjust free points in place. Raises SolverError when the constraint
        residual norm stays above tolerance."""
        points = self._points()
        if not self._free:
            return
        x0 = self.pack(points)

        def residuals(x):
            coords = self.unpack(x, points)
            return np.concatenate([self.constraint_residuals(coords), ANCHOR_WEIGHT * (x - x0)])

        try:
            result = least_squares(residuals, x0, method="trf", max_nfev=max_iterations)
        except ValueError as e:
            raise SolverError(f"Solver rejected the primitive set: {e}") from e
        coords = self.unpack(result.x, points)
        norm = float(np.linalg.norm(self.constraint_residuals(coords)))
        if not np.isfinite(norm) or norm > tolerance:
            raise SolverError(f"Constraints not satisfied (residual {norm:.4f} > {tolerance})")
        console_logger.debug(f"Solved {len(self._free)} points in {result.nfev} evaluations, residual {norm:.2e}")
        for p in self._primitives:
            if p["type"] == "point" and p["id"] in coords:
                p["x"], p["y"] = float(coords[p["id"]][0]), float(coords[p["id"]][1])

    def get_primitives(self) -> list[dict]:
        return [dict(p) for p in self._primitives]
