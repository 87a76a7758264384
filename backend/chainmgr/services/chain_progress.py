"""Chain Tracker — deploy progress and the reset-task eligibility rule.

Invariants:
    - progress() never probes fronts for failed or finished chains
    - progress() always returns 0–100
    - run_task() is False for every chain while any teardown holds the deletion guard
    - MANUALLY deployed chains are always eligible; API chains only while RUNNING
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.core.collaborator_protocols import FrontHealthProbe
from chainmgr.core.deletion_guard import DeletionGuard, deletion_guard
from chainmgr.core.domain_types import ChainStatus, DeployType
from chainmgr.core.progress import terminal_progress
from chainmgr.models.chain import Chain
from chainmgr.services.front_service import FrontService

logger = logging.getLogger(__name__)


class ChainTracker:
    """Reads chain state for progress reporting and background scheduling."""

    def __init__(
        self,
        db: AsyncSession,
        health_probe: FrontHealthProbe | None = None,
        guard: DeletionGuard = deletion_guard,
    ):
        self.db = db
        self.health_probe = health_probe
        self.guard = guard

    async def progress(self, chain: Chain) -> int:
        fixed = terminal_progress(ChainStatus(chain.chain_status))
        if fixed is not None:
            return fixed
        return await FrontService(self.db, self.health_probe).front_progress(chain.chain_id)

    def run_task(self, chain: Chain | None) -> bool:
        """Whether a periodic reconciliation pass may act on this chain now."""
        if self.guard.is_active():
            return False
        if chain is None:
            logger.error("Run task, chain not exists")
            return False
        if chain.deploy_type == DeployType.MANUALLY.value:
            logger.info(
                f"Chain:[{chain.chain_id}] deployed manually, run task",
                extra={"chain_id": chain.chain_id},
            )
            return True
        if chain.chain_status == ChainStatus.RUNNING.value:
            return True
        logger.warning(
            f"Chain:[{chain.chain_id}] is not running, cancel reset group task",
            extra={"chain_id": chain.chain_id},
        )
        return False
