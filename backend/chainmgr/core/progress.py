"""Progress Rules — terminal progress by chain status and front-signal blending.

Invariants:
    - terminal_progress returns a value only for failed and finished statuses
    - blend_front_progress always returns 0–99: 100 is reserved for RUNNING chains
    - A chain with no fronts yet reports PERCENTAGE_IN_PROGRESS

Design Decisions:
    - Two tiers: terminal states never query live fronts, every other state does
    - A healthy probe outranks a stale DB status (front may be up before its row is updated)
"""

from typing import NamedTuple

from chainmgr.core.domain_types import (
    ChainStatus, FrontStatus,
    PERCENTAGE_FAILED, PERCENTAGE_FINISH, PERCENTAGE_IN_PROGRESS,
)

_TERMINAL_PROGRESS = {
    ChainStatus.DEPLOY_FAILED: PERCENTAGE_FAILED,
    ChainStatus.UPGRADE_FAILED: PERCENTAGE_FAILED,
    ChainStatus.RUNNING: PERCENTAGE_FINISH,
}

_STATUS_SCORE = {
    FrontStatus.INITIALIZED: 0.0,
    FrontStatus.STARTING: 0.5,
    FrontStatus.RUNNING: 1.0,
    FrontStatus.STOPPED: 0.0,
    FrontStatus.FAILED: 0.0,
}

_MAX_IN_PROGRESS = PERCENTAGE_FINISH - 1


class FrontSignal(NamedTuple):
    """Startup signal of one front: persisted status plus live probe result."""
    status: FrontStatus
    healthy: bool


def terminal_progress(status: ChainStatus) -> int | None:
    """Fixed progress for failed/finished chains, None when live data is needed."""
    return _TERMINAL_PROGRESS.get(status)


def blend_front_progress(signals: list[FrontSignal]) -> int:
    """Blend per-front startup signals into one percentage."""
    if not signals:
        return PERCENTAGE_IN_PROGRESS
    total = sum(
        1.0 if s.healthy else _STATUS_SCORE.get(s.status, 0.0)
        for s in signals
    )
    span = _MAX_IN_PROGRESS - PERCENTAGE_IN_PROGRESS
    value = PERCENTAGE_IN_PROGRESS + round(span * total / len(signals))
    return max(0, min(_MAX_IN_PROGRESS, value))
