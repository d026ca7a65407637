from formcoach.counter.cooldown import accept
from formcoach.counter.state import SessionState


def test_first_rep_always_accepted():
    assert accept(SessionState(), now=0.0, cooldown_ms=350)


def test_rejects_inside_cooldown():
    st = SessionState(last_accepted_at=10.0)
    assert not accept(st, now=10.2, cooldown_ms=350)


def test_interval_must_exceed_cooldown():
    st = SessionState(last_accepted_at=10.0)
    assert not accept(st, now=10.25, cooldown_ms=250)
    assert accept(st, now=10.26, cooldown_ms=250)
