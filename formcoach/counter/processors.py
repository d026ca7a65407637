"""
Per-exercise frame processors.

Every processor is a pure transform ``(frame, state) -> state``. Repetition
exercises share one Schmitt-trigger machine driven by a RepConfig; the plank
uses the hold processor. A ``None`` frame (nobody detected) leaves the state
untouched.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from formcoach.counter.cooldown import accept
from formcoach.counter.exercises import HoldConfig, RepConfig, get_config
from formcoach.counter.landmarks import Frame
from formcoach.counter.state import FormFlag, SessionState, Stage

logger = logging.getLogger(__name__)

Processor = Callable[[Optional[Frame], SessionState], SessionState]


def step_repetition(cfg: RepConfig, frame: Optional[Frame], state: SessionState) -> SessionState:
    if frame is None:
        return state

    angle = cfg.measure(frame)
    stage = state.stage
    flags = set(state.form_flags)
    feedback: List[str] = []

    posture_ok = True
    if cfg.posture is not None:
        posture_ok = cfg.posture.band.contains(cfg.posture.band.measure(frame))

    rep_count = state.rep_count
    good_rep_count = state.good_rep_count
    last_accepted_at = state.last_accepted_at

    if cfg.past_rest(angle):
        if stage is not Stage.EXTENDED:
            # new cycle
            flags.clear()
            if cfg.posture is not None and posture_ok:
                flags.add(FormFlag.POSTURE_OK)
        stage = Stage.EXTENDED
        flags.add(FormFlag.FULLY_RETURNED)

    if not posture_ok:
        flags.discard(FormFlag.POSTURE_OK)
        feedback.append(cfg.posture.cue)

    if stage is Stage.EXTENDED and cfg.past_peak(angle) and posture_ok:
        stage = Stage.FLEXED
        if cfg.past_strict_peak(angle):
            flags.add(FormFlag.DEPTH_OK)
        else:
            feedback.append(cfg.depth_cue)

        if accept(state, frame.ts, cfg.cooldown_ms):
            rep_count += 1
            if cfg.required_flags <= flags:
                good_rep_count += 1
                feedback = [cfg.good_cue]
            else:
                feedback += [c for c in cfg.missing_cues(flags) if c not in feedback]
            logger.debug("%s rep %d (good=%d, angle=%.1f)", cfg.exercise, rep_count, good_rep_count, angle)
            flags.clear()
            last_accepted_at = frame.ts

    return state.evolve(
        stage=stage,
        rep_count=rep_count,
        good_rep_count=good_rep_count,
        form_flags=frozenset(flags),
        feedback=tuple(feedback),
        last_accepted_at=last_accepted_at,
    )


def step_hold(cfg: HoldConfig, frame: Optional[Frame], state: SessionState) -> SessionState:
    """Update the holding flag; the timer itself is advanced by the session ticker."""
    if frame is None:
        return state
    holding = cfg.band.contains(cfg.band.measure(frame))
    return state.evolve(
        is_holding=holding,
        feedback=(cfg.hold_cue if holding else cfg.correct_cue,),
    )


def identity(frame: Optional[Frame], state: SessionState) -> SessionState:
    return state


def get_processor(exercise: Optional[str]) -> Processor:
    cfg = get_config(exercise)
    if isinstance(cfg, RepConfig):
        return lambda frame, state: step_repetition(cfg, frame, state)
    if isinstance(cfg, HoldConfig):
        return lambda frame, state: step_hold(cfg, frame, state)
    return identity
