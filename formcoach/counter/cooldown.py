from __future__ import annotations
import logging

from formcoach.counter.state import SessionState

logger = logging.getLogger(__name__)


def accept(state: SessionState, now: float, cooldown_ms: float) -> bool:
    """Return True when a candidate rep at ``now`` (seconds) clears the cooldown.

    Wall-clock based, so a slow or bursty frame source counts the same way as
    a steady one. The first rep of a session is always accepted.
    """
    if state.last_accepted_at is None:
        return True
    elapsed_ms = (now - state.last_accepted_at) * 1000.0
    if elapsed_ms > cooldown_ms:
        return True
    logger.debug("rep suppressed by cooldown (%.0f ms < %.0f ms)", elapsed_ms, cooldown_ms)
    return False
