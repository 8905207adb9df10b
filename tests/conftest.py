"""Shared test fixtures for floor-plan geometry tests."""
import pytest
from shared.types import Aperture
from floorplan.config import FloorplanConfig
from floorplan.drawing import create_room_from_polygon
from floorplan.apertures import add_aperture
from assembly.store import RoomStore

SQUARE = [(0, 0), (400, 0), (400, 300), (0, 300)]
L_SHAPE = [(0, 0), (400, 0), (400, 200), (200, 200), (200, 400), (0, 400)]


def flat(points):
    """Flatten a point sequence so pytest.approx can compare it."""
    return [c for p in points for c in p]


def rect(x0, y0, w, h):
    return [(x0, y0), (x0 + w, y0), (x0 + w, y0 + h), (x0, y0 + h)]


def make_room(points, room_id, thickness=15.0, name=None):
    return create_room_from_polygon(points, name or room_id, thickness, room_id=room_id)


def facing_pair(gap=10.0, dy=100.0, thickness=15.0):
    """Room A (400x300 at the origin) and room B to its right.

    A's right wall and B's left wall run opposite ways; their centerlines are
    `gap` apart and B is shifted up by dy.
    """
    a = make_room(SQUARE, "A", thickness)
    x0 = 400 + thickness + gap
    b = make_room(rect(x0, dy, 400, 300), "B", thickness)
    return a, b


def door(ap_id, distance, width=0.9, anchor="start"):
    return Aperture(ap_id, "door", width, distance, anchor)


@pytest.fixture
def config():
    return FloorplanConfig()


@pytest.fixture
def square_room():
    return make_room(SQUARE, "sq")


@pytest.fixture
def l_room():
    return make_room(L_SHAPE, "ell")


@pytest.fixture
def store():
    return RoomStore()


@pytest.fixture
def square_with_door(square_room):
    """Square with a 0.9 m door 0.5 m from the start of wall 0 (span 50..140 cm)."""
    return add_aperture(square_room, 0, door("d1", 0.5))
