from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional

class EventType(str, Enum):
    SESSION_COUNTDOWN = "session_countdown"
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    SESSION_RESET = "session_reset"
    EXERCISE_SELECTED = "exercise_selected"
    SNAPSHOT = "snapshot"
    REP = "rep"
    TRACE = "trace"

class SessionPhase(str, Enum):
    INACTIVE = "inactive"
    COUNTDOWN = "countdown"
    ACTIVE = "active"
    ENDED = "ended"

@dataclass
class MetricsSnapshot:
    exercise: Optional[str]
    phase: SessionPhase
    stage: str
    rep_count: int
    good_rep_count: int
    feedback: List[str] = field(default_factory=list)
    hold_timer: int = 0
    is_holding: bool = False
    countdown: int = 0

    def to_event(self) -> dict:
        payload = asdict(self)
        payload["phase"] = self.phase.value
        payload["type"] = EventType.SNAPSHOT.value
        return payload

@dataclass
class SessionEvent:
    type: EventType
    exercise: Optional[str]
    ts: float
    rep_count: int = 0

    def to_event(self) -> dict:
        return {"type": self.type.value, "exercise": self.exercise, "ts": self.ts, "rep_count": self.rep_count}

@dataclass
class RepEvent:
    exercise: str
    ts: float
    rep_count: int
    good_rep_count: int
    good: bool
    feedback: List[str] = field(default_factory=list)
    type: EventType = EventType.REP

    def to_event(self) -> dict:
        payload = asdict(self)
        payload["type"] = self.type.value
        return payload
