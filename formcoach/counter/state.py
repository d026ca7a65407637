from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class Stage(str, Enum):
    READY = "ready"        # not engaged yet
    EXTENDED = "extended"  # at the rest extreme
    FLEXED = "flexed"      # at the working extreme


class FormFlag(str, Enum):
    FULLY_RETURNED = "fully_returned"
    DEPTH_OK = "depth_ok"
    POSTURE_OK = "posture_ok"


@dataclass(frozen=True)
class SessionState:
    """Per-exercise session record. Processors return new values via ``evolve``."""
    stage: Stage = Stage.READY
    rep_count: int = 0
    good_rep_count: int = 0
    form_flags: FrozenSet[FormFlag] = field(default_factory=frozenset)
    feedback: Tuple[str, ...] = ()
    hold_timer: int = 0
    is_holding: bool = False
    last_accepted_at: Optional[float] = None

    def evolve(self, **changes) -> "SessionState":
        return replace(self, **changes)


def initial_state() -> SessionState:
    return SessionState()
