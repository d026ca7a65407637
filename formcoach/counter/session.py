from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from formcoach import config
from formcoach.common.events import EventType, MetricsSnapshot, RepEvent, SessionEvent, SessionPhase
from formcoach.counter.exercises import get_config
from formcoach.counter.landmarks import Frame
from formcoach.counter.processors import Processor, get_processor, identity
from formcoach.counter.state import SessionState, initial_state
from formcoach.counter.summary import WorkoutSummary, summarize

logger = logging.getLogger(__name__)

FrameSink = Callable[[Optional[Frame], Optional[MetricsSnapshot]], None]


@dataclass
class SessionStatus:
    exercise: Optional[str]
    phase: SessionPhase
    rep_count: int
    good_rep_count: int


class RepSessionManager:
    """Owns the session state for the selected exercise and routes frames to its processor.

    Lifecycle: INACTIVE -> COUNTDOWN -> ACTIVE -> ENDED, and reset() back to
    INACTIVE from anywhere. Every update builds the complete next state before
    it is swapped in, so sinks only ever see whole snapshots.
    """

    def __init__(self, clock: Callable[[], float] = time.time, empty_accuracy: Optional[float] = None):
        self.clock = clock
        self.empty_accuracy = empty_accuracy
        self.exercise: Optional[str] = None
        self.phase = SessionPhase.INACTIVE
        self.state: SessionState = initial_state()
        self.countdown_remaining = 0
        self.started_at: Optional[float] = None
        self.ended_at: Optional[float] = None
        self._processor: Processor = identity
        self._lock = threading.Lock()
        self._event_sink: Optional[Callable[[dict], None]] = None
        self._frame_sink: Optional[FrameSink] = None

    def set_event_sink(self, sink: Optional[Callable[[dict], None]]):
        self._event_sink = sink

    def set_frame_sink(self, sink: Optional[FrameSink]):
        """Rendering collaborator; receives every frame, with a snapshot when one was produced."""
        self._frame_sink = sink

    def _emit(self, payload: dict):
        if self._event_sink is None:
            return
        try:
            self._event_sink(payload)
        except Exception:
            logger.exception("event sink failed on %s", payload.get("type"))

    def _session_event(self, kind: EventType):
        self._emit(SessionEvent(kind, self.exercise, self.clock(), self.state.rep_count).to_event())

    # ---- control channel ----

    def select_exercise(self, exercise: Optional[str]) -> MetricsSnapshot:
        with self._lock:
            self.exercise = exercise
            self.state = initial_state()
            self._processor = get_processor(exercise)
            snap = self._snapshot_locked()
        if exercise is not None and get_config(exercise) is None:
            logger.warning("unknown exercise %r; frames will not change the metrics", exercise)
        self._session_event(EventType.EXERCISE_SELECTED)
        self._emit(snap.to_event())
        return snap

    def start(self, countdown_s: Optional[int] = None) -> MetricsSnapshot:
        countdown = config.COUNTDOWN_S if countdown_s is None else countdown_s
        with self._lock:
            if self.phase in (SessionPhase.COUNTDOWN, SessionPhase.ACTIVE):
                logger.info("start ignored: session already %s", self.phase.value)
                return self._snapshot_locked()
            self.state = initial_state()
            self.started_at = None
            self.ended_at = None
            if countdown <= 0:
                self._activate_locked()
            else:
                self.phase = SessionPhase.COUNTDOWN
                self.countdown_remaining = int(countdown)
            snap = self._snapshot_locked()
        self._session_event(EventType.SESSION_STARTED if snap.phase is SessionPhase.ACTIVE else EventType.SESSION_COUNTDOWN)
        self._emit(snap.to_event())
        return snap

    def _activate_locked(self):
        self.phase = SessionPhase.ACTIVE
        self.countdown_remaining = 0
        self.started_at = self.clock()

    def tick(self) -> Optional[MetricsSnapshot]:
        """One-second ticker: drives the countdown and the plank hold timer."""
        activated = False
        with self._lock:
            if self.phase is SessionPhase.COUNTDOWN:
                self.countdown_remaining -= 1
                if self.countdown_remaining <= 0:
                    self._activate_locked()
                    activated = True
            elif self.phase is SessionPhase.ACTIVE and self.state.is_holding:
                self.state = self.state.evolve(hold_timer=self.state.hold_timer + 1)
            else:
                return None
            snap = self._snapshot_locked()
        if activated:
            self._session_event(EventType.SESSION_STARTED)
        self._emit(snap.to_event())
        return snap

    def end(self) -> WorkoutSummary:
        ended_now = False
        with self._lock:
            if self.phase in (SessionPhase.COUNTDOWN, SessionPhase.ACTIVE):
                self.phase = SessionPhase.ENDED
                self.countdown_remaining = 0
                self.ended_at = self.clock()
                ended_now = True
            summary = summarize(self.exercise, self.state, self.started_at, self.ended_at, self.empty_accuracy)
        if ended_now:
            self._session_event(EventType.SESSION_ENDED)
        return summary

    def reset(self) -> MetricsSnapshot:
        with self._lock:
            self.phase = SessionPhase.INACTIVE
            self.state = initial_state()
            self.countdown_remaining = 0
            self.started_at = None
            self.ended_at = None
            snap = self._snapshot_locked()
        self._session_event(EventType.SESSION_RESET)
        self._emit(snap.to_event())
        return snap

    # ---- frame path ----

    def handle_frame(self, frame: Optional[Frame]) -> Optional[MetricsSnapshot]:
        """Process one pose-source tick; ``None`` means nobody was detected."""
        snap = None
        rep = None
        with self._lock:
            if self.phase is SessionPhase.ACTIVE and self.exercise is not None:
                prev = self.state
                nxt = self._processor(frame, prev)
                self.state = nxt
                snap = self._snapshot_locked()
                if nxt.rep_count > prev.rep_count:
                    rep = RepEvent(
                        exercise=self.exercise,
                        ts=frame.ts if frame is not None else self.clock(),
                        rep_count=nxt.rep_count,
                        good_rep_count=nxt.good_rep_count,
                        good=nxt.good_rep_count > prev.good_rep_count,
                        feedback=list(nxt.feedback),
                    )
        if self._frame_sink is not None:
            try:
                self._frame_sink(frame, snap)
            except Exception:
                logger.exception("frame sink failed")
        if snap is not None:
            self._emit(snap.to_event())
        if rep is not None:
            self._emit(rep.to_event())
        return snap

    # ---- readers ----

    def _snapshot_locked(self) -> MetricsSnapshot:
        st = self.state
        return MetricsSnapshot(
            exercise=self.exercise,
            phase=self.phase,
            stage=st.stage.value,
            rep_count=st.rep_count,
            good_rep_count=st.good_rep_count,
            feedback=list(st.feedback),
            hold_timer=st.hold_timer,
            is_holding=st.is_holding,
            countdown=self.countdown_remaining,
        )

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                exercise=self.exercise,
                phase=self.phase,
                rep_count=self.state.rep_count,
                good_rep_count=self.state.good_rep_count,
            )

    def summary(self) -> WorkoutSummary:
        with self._lock:
            ended = self.ended_at if self.ended_at is not None else self.clock()
            return summarize(self.exercise, self.state, self.started_at, ended, self.empty_accuracy)


# Global manager factory (so tools and the server share one session)
_ACTIVE: Optional[RepSessionManager] = None

def ACTIVE_MANAGER() -> RepSessionManager:
    global _ACTIVE
    if _ACTIVE is None:
        _ACTIVE = RepSessionManager()
    return _ACTIVE
