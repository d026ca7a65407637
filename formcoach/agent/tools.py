from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, Field
from langchain_core.tools import tool
from formcoach.counter.session import RepSessionManager, ACTIVE_MANAGER

# Shared enums
Exercise = Literal[
    "bicep_curl", "squats", "pushups", "lunges", "overhead_press",
    "lateral_raises", "pullups", "glute_bridges", "crunches", "plank",
]


class SelectArgs(BaseModel):
    exercise: Optional[Exercise] = Field(..., description="Exercise to track; null clears the selection")


class StartArgs(BaseModel):
    countdown_s: Optional[int] = Field(None, description="Seconds of countdown before tracking starts")


@tool("select_exercise", args_schema=SelectArgs)
def select_exercise(exercise: Optional[Exercise]) -> str:
    """Choose the exercise to track (resets the current counts)."""
    mgr: RepSessionManager = ACTIVE_MANAGER()
    snap = mgr.select_exercise(exercise)
    return f"exercise={snap.exercise}; phase={snap.phase.value}"


@tool("start_workout", args_schema=StartArgs)
def start_workout(countdown_s: Optional[int] = None) -> str:
    """Start the workout session for the selected exercise, after an optional countdown."""
    mgr: RepSessionManager = ACTIVE_MANAGER()
    snap = mgr.start(countdown_s=countdown_s)
    return f"phase={snap.phase.value}; countdown={snap.countdown}"


@tool("end_workout")
def end_workout() -> str:
    """End the workout session and report the summary."""
    mgr: RepSessionManager = ACTIVE_MANAGER()
    s = mgr.end()
    return (
        f"exercise={s.exercise}; total_reps={s.total_reps}; good_reps={s.good_reps}; "
        f"form_accuracy={s.form_accuracy:.0f}%; duration_s={s.duration_s:.0f}; hold_s={s.hold_seconds}"
    )


@tool("reset_workout")
def reset_workout() -> str:
    """Reset the session and zero all counts."""
    mgr: RepSessionManager = ACTIVE_MANAGER()
    snap = mgr.reset()
    return f"phase={snap.phase.value}; reps={snap.rep_count}"


@tool("workout_status")
def workout_status() -> str:
    """Return the current exercise, phase and counts."""
    mgr: RepSessionManager = ACTIVE_MANAGER()
    st = mgr.status()
    return f"exercise={st.exercise}; phase={st.phase.value}; reps={st.rep_count}; good_reps={st.good_rep_count}"


TOOLS = [select_exercise, start_workout, end_workout, reset_workout, workout_status]
