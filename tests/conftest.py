import math

import pytest

from formcoach.counter import session
from formcoach.counter.exercises import LEFT_BODY_LINE, LEFT_ELBOW, RIGHT_BODY_LINE, RIGHT_ELBOW
from formcoach.counter.landmarks import NUM_LANDMARKS, Frame


def build_frame(ts, placements):
    """Build a frame whose listed triples measure the given angles.

    ``placements`` is a list of ((a, b, c), degrees). Vertices that are not yet
    placed get a default spot, ``a`` sits one step to the right of the vertex
    unless already placed, and ``c`` is rotated from ``a`` by the angle.
    """
    pts = {}
    for (a, b, c), deg in placements:
        if b not in pts:
            pts[b] = (0.2 + 0.015 * int(b), 0.5)
        if a not in pts:
            pts[a] = (pts[b][0] + 0.1, pts[b][1])
        base = math.atan2(pts[a][1] - pts[b][1], pts[a][0] - pts[b][0])
        rad = base + math.radians(deg)
        pts[c] = (pts[b][0] + 0.1 * math.cos(rad), pts[b][1] + 0.1 * math.sin(rad))
    points = [pts.get(i, (0.01 * i, 0.9)) for i in range(NUM_LANDMARKS)]
    return Frame.from_points(points, ts=ts)


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def elbow_frame():
    """Both elbows at the same angle, optionally with a body-line angle on both sides."""
    def _make(angle, ts=0.0, body=None):
        placements = [(LEFT_ELBOW, angle), (RIGHT_ELBOW, angle)]
        if body is not None:
            placements += [(LEFT_BODY_LINE, body), (RIGHT_BODY_LINE, body)]
        return build_frame(ts, placements)
    return _make


@pytest.fixture(autouse=True)
def fresh_manager():
    session._ACTIVE = None
    yield
    session._ACTIVE = None


@pytest.fixture
def frame_payload():
    """JSON frame message for the websocket, with the given {triple: angle} placements."""
    def _make(angles, ts):
        frame = build_frame(ts, list(angles.items()))
        return {
            "type": "frame",
            "ts": ts,
            "landmarks": [{"x": lm.x, "y": lm.y} for lm in frame.landmarks],
        }
    return _make
