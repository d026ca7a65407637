import pytest

from formcoach.common.events import SessionPhase
from formcoach.counter.session import RepSessionManager


class Clock:
    def __init__(self, t=1000.0):
        self.t = t

    def __call__(self):
        return self.t


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def events():
    return []


@pytest.fixture
def manager(clock, events):
    m = RepSessionManager(clock=clock, empty_accuracy=100.0)
    m.set_event_sink(events.append)
    return m


def curl(manager, elbow_frame, start_ts):
    manager.handle_frame(elbow_frame(170, ts=start_ts))
    return manager.handle_frame(elbow_frame(30, ts=start_ts + 0.5))


def test_frames_ignored_until_active(manager, elbow_frame):
    rendered = []
    manager.set_frame_sink(lambda frame, snap: rendered.append(snap))
    manager.select_exercise("bicep_curl")
    assert curl(manager, elbow_frame, 0.0) is None
    assert manager.snapshot().rep_count == 0
    assert rendered == [None, None]


def test_frames_ignored_without_exercise(manager, elbow_frame):
    manager.start(countdown_s=0)
    assert curl(manager, elbow_frame, 0.0) is None


def test_countdown_then_active(manager, clock):
    manager.select_exercise("squats")
    snap = manager.start(countdown_s=3)
    assert snap.phase is SessionPhase.COUNTDOWN
    assert snap.countdown == 3
    manager.tick()
    manager.tick()
    assert manager.phase is SessionPhase.COUNTDOWN
    clock.t = 1003.0
    manager.tick()
    assert manager.phase is SessionPhase.ACTIVE
    assert manager.started_at == 1003.0


def test_counts_and_publishes(manager, events, elbow_frame):
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    snap = curl(manager, elbow_frame, 0.0)
    assert snap.rep_count == 1
    assert snap.good_rep_count == 1
    assert snap.stage == "flexed"

    kinds = [e["type"] for e in events]
    assert "snapshot" in kinds
    rep = [e for e in events if e["type"] == "rep"]
    assert len(rep) == 1
    assert rep[0]["good"] is True


def test_no_detection_frame_is_noop(manager, elbow_frame):
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    curl(manager, elbow_frame, 0.0)
    before = manager.snapshot()
    after = manager.handle_frame(None)
    assert (after.rep_count, after.good_rep_count, after.stage) == (
        before.rep_count, before.good_rep_count, before.stage)


def test_switching_exercise_resets_state(manager, elbow_frame):
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    curl(manager, elbow_frame, 0.0)
    assert manager.state.last_accepted_at is not None

    snap = manager.select_exercise("pushups")
    assert (snap.rep_count, snap.good_rep_count, snap.stage) == (0, 0, "ready")
    assert manager.state.form_flags == frozenset()
    assert manager.state.last_accepted_at is None
    assert manager.phase is SessionPhase.ACTIVE


def test_reset_clears_cooldown(manager, elbow_frame):
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    curl(manager, elbow_frame, 0.0)
    manager.reset()
    assert manager.phase is SessionPhase.INACTIVE
    manager.start(countdown_s=0)
    # would be inside the 350 ms cooldown of the previous rep
    snap = curl(manager, elbow_frame, 0.1)
    assert snap.rep_count == 1


def test_unknown_exercise_never_fails(manager, elbow_frame):
    manager.select_exercise("moonwalk")
    manager.start(countdown_s=0)
    snap = curl(manager, elbow_frame, 0.0)
    assert snap.rep_count == 0
    assert snap.exercise == "moonwalk"


def test_end_is_idempotent(manager, clock, elbow_frame):
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    curl(manager, elbow_frame, 0.0)
    manager.handle_frame(elbow_frame(170, ts=1.0))
    manager.handle_frame(elbow_frame(45, ts=2.0))
    clock.t = 1060.0
    first = manager.end()
    clock.t = 1100.0
    second = manager.end()
    assert first == second
    assert first.total_reps == 2
    assert first.good_reps == 1
    assert first.form_accuracy == pytest.approx(50.0)
    assert first.duration_s == pytest.approx(60.0)
    # frames after the end are inert
    assert manager.handle_frame(elbow_frame(170, ts=3.0)) is None


def test_start_while_active_is_ignored(manager, elbow_frame):
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    curl(manager, elbow_frame, 0.0)
    snap = manager.start(countdown_s=0)
    assert snap.rep_count == 1


def test_sink_errors_do_not_break_counting(manager, elbow_frame):
    def boom(ev):
        raise RuntimeError("ui went away")

    manager.set_event_sink(boom)
    manager.set_frame_sink(lambda frame, snap: boom(None))
    manager.select_exercise("bicep_curl")
    manager.start(countdown_s=0)
    assert curl(manager, elbow_frame, 0.0).rep_count == 1
