"""Chain Remover — deletes a chain, every descendant row, and its generated files.

Invariants:
    - Unknown chain_id is a logged no-op: returns False, guard never taken
    - The deletion guard is held for the whole teardown and released on every path
    - Row deletion is one transaction: chain, groups, fronts, mappings, nodes, contracts
    - Cache invalidation and the reset signal happen only after the commit
    - File deletion is best-effort: the database is authoritative once committed

Design Decisions:
    - Existence check in its own short session, so a no-op never touches the guard
    - Reset signal injected (GroupListResetSignal): tests observe it without a running loop
"""

import logging
from typing import Protocol

from chainmgr.core.collaborator_protocols import ChainPaths
from chainmgr.core.deletion_guard import DeletionGuard, deletion_guard
from chainmgr.infrastructure.database import DatabaseSessionManager
from chainmgr.services.chain_registry import ChainRegistry
from chainmgr.services.contract_service import ContractService
from chainmgr.services.front_group_map_service import (
    FrontGroupMapCache, FrontGroupMapService, front_group_map_cache,
)
from chainmgr.services.front_service import FrontService
from chainmgr.services.group_service import GroupService
from chainmgr.services.node_service import NodeService

logger = logging.getLogger(__name__)


class GroupListResetSignal(Protocol):
    """Wakes the background reset-group-list task."""
    def request_reset(self) -> None: ...


class ChainRemover:
    """Tears a chain down in reverse dependency order."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        paths: ChainPaths,
        reset_signal: GroupListResetSignal | None = None,
        cache: FrontGroupMapCache = front_group_map_cache,
        guard: DeletionGuard = deletion_guard,
    ):
        self._db_manager = db_manager
        self._paths = paths
        self._reset_signal = reset_signal
        self._cache = cache
        self._guard = guard

    async def remove_chain(self, chain_id: int) -> bool:
        """Remove a chain; True if it existed."""
        async with self._db_manager.session() as db:
            chain = await ChainRegistry(db).get(chain_id)
            chain_name = chain.chain_name if chain else None
        if chain_name is None:
            logger.warning(
                f"Chain id:[{chain_id}] not exists when delete",
                extra={"chain_id": chain_id},
            )
            return False

        with self._guard.hold():
            async with self._db_manager.transaction() as db:
                counts = await _delete_rows(db, chain_id, self._cache)
            logger.info(
                f"Deleted chain:[{chain_id}] rows {counts}",
                extra={"chain_id": chain_id, "chain_name": chain_name},
            )

            self._cache.clear_map_list(chain_id)
            if self._reset_signal is not None:
                self._reset_signal.request_reset()

            logger.info(
                f"Delete chain:[{chain_id}] config files",
                extra={"chain_id": chain_id, "chain_name": chain_name},
            )
            try:
                await self._paths.delete_chain(chain_name)
            except OSError as e:
                logger.error(
                    f"Delete chain:[{chain_id}:{chain_name}] files error: {e}",
                    exc_info=True,
                    extra={"chain_id": chain_id, "chain_name": chain_name},
                )
        return True


async def _delete_rows(db, chain_id: int, cache: FrontGroupMapCache) -> dict[str, int]:
    return {
        "chain": await ChainRegistry(db).delete(chain_id),
        "group": await GroupService(db).remove_by_chain_id(chain_id),
        "front": await FrontService(db).remove_by_chain_id(chain_id),
        "front_group_map": await FrontGroupMapService(db, cache).remove_by_chain_id(chain_id),
        "node": await NodeService(db).delete_by_chain_id(chain_id),
        "contract": await ContractService(db).delete_by_chain_id(chain_id),
    }
