"""Wall generation and classification constants.

Lengths in centimeters unless noted.
"""

DEFAULT_WALL_THICKNESS = 15.0        # cm, new rooms and unmatched walls
DEFAULT_WALL_HEIGHT = 2.7            # m
DEFAULT_WALL_TYPE = "interior_division"

MATCH_TOLERANCE = 0.01               # cm, endpoint equality when matching old walls
MITER_PARALLEL_TOL = 1e-4            # |sin| between offset lines treated as parallel
CLASSIFY_TOLERANCE = 5.0             # cm, envelope edge equality across rooms
OVERLAP_TOLERANCE = 2.0              # cm, collinear overlap detection
OVERLAP_PARALLEL_TOL = 0.01          # |sin| for collinear overlap detection
SPLIT_MERGE_TOLERANCE = 0.1          # cm, split points closer than this merge
