import sys

import pytest

pytest.importorskip("cv2")

from formcoach.counter.pipeline import PosePipeline
from formcoach.counter.session import RepSessionManager


def test_pose_backend_failure_reaches_on_error(monkeypatch):
    # a None entry makes the import fail
    monkeypatch.setitem(sys.modules, "mediapipe", None)
    errors = []
    pipeline = PosePipeline(RepSessionManager(), on_error=errors.append)
    pipeline.run()
    assert len(errors) == 1
    assert "mediapipe" in errors[0]
