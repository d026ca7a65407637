from types import SimpleNamespace

import pytest

from formcoach.counter.landmarks import NUM_LANDMARKS, Frame, PoseLandmark


def test_from_points_keeps_order_and_ts():
    pts = [(i / 100, i / 50) for i in range(NUM_LANDMARKS)]
    frame = Frame.from_points(pts, ts=1.5)
    assert frame.ts == 1.5
    assert frame.point(PoseLandmark.LEFT_ELBOW) == (0.13, 0.26)
    assert frame[PoseLandmark.RIGHT_ANKLE].visibility is None


def test_wrong_landmark_count_rejected():
    with pytest.raises(ValueError):
        Frame.from_points([(0, 0)] * 10, ts=0.0)


def test_visibility_length_must_match():
    with pytest.raises(ValueError):
        Frame.from_points([(0, 0)] * NUM_LANDMARKS, ts=0.0, visibility=[0.9] * 5)


def test_from_mediapipe_results():
    lm = [SimpleNamespace(x=0.1 * (i % 10), y=0.2, visibility=0.8) for i in range(NUM_LANDMARKS)]
    frame = Frame.from_mediapipe(SimpleNamespace(landmark=lm), ts=3.0)
    assert frame is not None
    assert frame[PoseLandmark.NOSE].visibility == 0.8
    assert frame.point(PoseLandmark.LEFT_SHOULDER) == pytest.approx((0.1, 0.2))


def test_from_mediapipe_no_person():
    assert Frame.from_mediapipe(None, ts=3.0) is None


def test_frame_angle(make_frame):
    triple = (PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST)
    frame = make_frame(0.0, [(triple, 72.0)])
    assert frame.angle(triple) == pytest.approx(72.0)
