"""Reset Group List Task — periodic reconciliation of group node counts and the front/group cache.

Invariants:
    - A pass does nothing while the deletion guard is held (rows may vanish mid-scan)
    - Only chains where ChainTracker.run_task() is True are reconciled
    - request_reset() wakes the loop early; it never runs a pass inline
    - A failing pass is logged and the loop keeps going

Design Decisions:
    - asyncio.Event as the wakeup signal: the loop sleeps for the interval or until
      a teardown asks for a recompute, whichever comes first
    - Each pass runs in one transaction: node counts for a chain are updated together
"""

import asyncio
import contextlib
import logging

from chainmgr.core.deletion_guard import DeletionGuard, deletion_guard
from chainmgr.infrastructure.database import DatabaseSessionManager
from chainmgr.models.chain import Chain
from chainmgr.services.chain_progress import ChainTracker
from chainmgr.services.chain_registry import ChainRegistry
from chainmgr.services.front_group_map_service import (
    FrontGroupMapCache, front_group_map_cache,
)
from chainmgr.services.group_service import GroupService
from chainmgr.services.node_service import NodeService

logger = logging.getLogger(__name__)


class ResetGroupListTask:
    """Background loop keeping groups and the cache in line with node rows."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        interval_seconds: float,
        cache: FrontGroupMapCache = front_group_map_cache,
        guard: DeletionGuard = deletion_guard,
    ):
        self._db_manager = db_manager
        self._interval = interval_seconds
        self._cache = cache
        self._guard = guard
        self._wakeup = asyncio.Event()
        self._running = False
        self._task: asyncio.Task | None = None

    def request_reset(self) -> None:
        """Ask for a pass as soon as possible."""
        self._wakeup.set()

    async def reset_group_list(self) -> int:
        """Run one reconciliation pass; returns the number of chains reconciled."""
        if self._guard.is_active():
            logger.info("Chain deletion in progress, skip reset group list")
            return 0
        reconciled = 0
        async with self._db_manager.transaction() as db:
            tracker = ChainTracker(db, guard=self._guard)
            for chain in await ChainRegistry(db).list_chains():
                if not tracker.run_task(chain):
                    continue
                await self._reset_chain(db, chain)
                reconciled += 1
        return reconciled

    async def _reset_chain(self, db, chain: Chain) -> None:
        counts = await NodeService(db).count_by_group(chain.chain_id)
        groups = GroupService(db)
        for group in await groups.list_by_chain(chain.chain_id):
            actual = counts.get(group.group_id, 0)
            if group.node_count != actual:
                logger.info(
                    f"Group:[{group.group_id}] of chain:[{chain.chain_id}] "
                    f"node count {group.node_count} -> {actual}",
                    extra={"chain_id": chain.chain_id, "group_id": group.group_id},
                )
                await groups.update_group_node_count(
                    chain.chain_id, group.group_id, actual,
                )
        self._cache.clear_map_list(chain.chain_id)
        await self._cache.get_map_list(db, chain.chain_id)

    async def run(self) -> None:
        logger.info("Reset group list task started")
        while self._running:
            try:
                await self.reset_group_list()
            except Exception as e:
                logger.error(f"Error in reset group list task: {e}", exc_info=True)
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), timeout=self._interval)
            self._wakeup.clear()

    def start(self) -> None:
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        self._running = False
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Reset group list task stopped")
