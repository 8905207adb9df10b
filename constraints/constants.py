"""Constraint defaults and solver bounds."""
import math

DEFAULT_DISTANCE = 100.0             # cm
DEFAULT_ANGLE = math.pi / 2          # rad
MAX_ITERATIONS = 1000
TOLERANCE = 0.1                      # residual norm accepted as solved
