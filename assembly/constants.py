"""Room-joining and assembly-mode constants.

Distances are world units (cm) compared against centerline geometry.
"""
import math

SEGMENT_THRESHOLD = 50.0             # max centerline segment gap for edge snapping
VERTEX_THRESHOLD = 30.0              # max endpoint gap for vertex snapping
DOOR_THRESHOLD = 30.0                # max door-center gap for door-to-door snapping
ANGLE_TOLERANCE = math.radians(10)   # walls within this of 180 deg count as opposite

OPPOSITE_SCORE = 1000.0              # base score, beats any non-opposite pair
OPPOSITE_SCORE_RANGE = 100.0
OTHER_SCORE_RANGE = 10.0

ASSEMBLY_DRAG_THRESHOLD = 3.0        # px, whole-room and rotation drags
DUPLICATE_OFFSET = 100.0             # cm, duplicated room shift in x and y
