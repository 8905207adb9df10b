"""Drawing, snapping and aperture constants.

Lengths in centimeters unless noted. Pixel values are screen-space and are
divided by the current zoom before comparison with world distances.
"""
import math

CM_PER_M = 100.0                     # aperture records are in meters

# Grid
GRID_SIZE = 50.0                     # cm

# Drawing
MIN_VERTICES = 3
CLOSE_THRESHOLD = 10.0               # px, click this close to vertex 0 closes the polygon
ORTHO_SNAP_PX = 30.0                 # px, orthogonal alignment capture distance
GUIDE_LINE_EXTENT = 1000.0           # cm, half-length of reported guide lines
BOUNDARY_SNAP_THRESHOLD = 15.0       # cm, inner-boundary vertex/edge/intersection capture
EDGE_EXTENSION = 40.0                # cm, boundary edges extended past their ends for intersections
CENTERLINE_SNAP_THRESHOLD = 15.0     # cm, centerline vertex/edge capture outside drawing

# Wall thickness defaults
INTERIOR_WALL_THICKNESS = 15.0       # cm
EXTERIOR_WALL_THICKNESS = 30.0       # cm
MITER_LIMIT = 2.0

# Editing
EDIT_DRAG_THRESHOLD = 5.0            # px, vertex/edge/wall/aperture drags
VERTEX_HIT_PX = 20.0                 # px, pointer press picks a vertex
EDGE_HIT_PX = 8.0                    # px, pointer press picks an edge
ROTATION_HANDLE_HIT_PX = 15.0        # px, pointer press picks the rotation handle
ROTATION_INCREMENT = math.pi / 12    # 15 deg
ROTATION_SNAP_THRESHOLD = math.pi / 36  # 5 deg

# Apertures
APERTURE_OVERLAP_TOLERANCE = 1.0     # cm
APERTURE_SEARCH_STEP = 5.0           # cm
DEFAULT_DOOR_WIDTH = 0.9             # m
DEFAULT_WINDOW_WIDTH = 1.2           # m
DEFAULT_DOOR_HEIGHT = 2.1            # m
DEFAULT_WINDOW_HEIGHT = 1.2          # m
DEFAULT_SILL_HEIGHT = 0.9            # m
