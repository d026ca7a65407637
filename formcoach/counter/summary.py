from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from formcoach import config
from formcoach.counter.exercises import HoldConfig, get_config
from formcoach.counter.state import SessionState


@dataclass
class WorkoutSummary:
    exercise: Optional[str]
    total_reps: int
    good_reps: int
    form_accuracy: float  # percent
    duration_s: float
    hold_seconds: int
    timed: bool


def form_accuracy(good_reps: int, total_reps: int, empty_value: Optional[float] = None) -> float:
    """Percent of good reps; ``empty_value`` (configurable) when nothing was counted."""
    if total_reps <= 0:
        return config.EMPTY_FORM_ACCURACY if empty_value is None else empty_value
    return good_reps / total_reps * 100.0


def summarize(
    exercise: Optional[str],
    state: SessionState,
    started_at: Optional[float],
    ended_at: Optional[float],
    empty_accuracy: Optional[float] = None,
) -> WorkoutSummary:
    duration = 0.0
    if started_at is not None and ended_at is not None:
        duration = max(0.0, ended_at - started_at)
    return WorkoutSummary(
        exercise=exercise,
        total_reps=state.rep_count,
        good_reps=state.good_rep_count,
        form_accuracy=form_accuracy(state.good_rep_count, state.rep_count, empty_accuracy),
        duration_s=duration,
        hold_seconds=state.hold_timer,
        timed=isinstance(get_config(exercise), HoldConfig),
    )
