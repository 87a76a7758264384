"""Front Registry — owns tb_front rows and the live front progress aggregate.

Invariants:
    - insert() flushes so front_id is available for the FrontGroupMap row
    - front_progress() probes every front of the chain concurrently and never raises
      for an unreachable front (unreachable == not healthy)
    - Never commits: the caller owns the transaction

Design Decisions:
    - Health probe injected (FrontHealthProbe): None means "DB status only",
      used by callers that must not touch the network
"""

import asyncio
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.core.collaborator_protocols import FrontHealthProbe
from chainmgr.core.domain_types import FrontStatus
from chainmgr.core.progress import FrontSignal, blend_front_progress
from chainmgr.models.front import Front

logger = logging.getLogger(__name__)


class FrontService:
    """Persistence for fronts plus startup-progress aggregation."""

    def __init__(self, db: AsyncSession, health_probe: FrontHealthProbe | None = None):
        self.db = db
        self.health_probe = health_probe

    async def insert(self, front: Front) -> Front:
        self.db.add(front)
        await self.db.flush()
        logger.info(
            f"Inserted front:[{front.front_id}] {front.front_ip}:{front.front_port}",
            extra={"chain_id": front.chain_id, "front_id": front.front_id},
        )
        return front

    async def list_by_chain(self, chain_id: int) -> list[Front]:
        result = await self.db.execute(
            select(Front).where(Front.chain_id == chain_id)
            .order_by(Front.front_id),
        )
        return list(result.scalars().all())

    async def remove_by_chain_id(self, chain_id: int) -> int:
        result = await self.db.execute(
            delete(Front).where(Front.chain_id == chain_id),
        )
        return result.rowcount

    async def front_progress(self, chain_id: int) -> int:
        """0–99 startup progress blended from all fronts of the chain."""
        fronts = await self.list_by_chain(chain_id)
        healthy = await asyncio.gather(*(self._probe(f) for f in fronts))
        signals = [
            FrontSignal(_front_status(f), ok) for f, ok in zip(fronts, healthy)
        ]
        return blend_front_progress(signals)

    async def _probe(self, front: Front) -> bool:
        if self.health_probe is None:
            return False
        try:
            return await self.health_probe.is_healthy(front.front_ip, front.front_port)
        except Exception as e:
            logger.warning(
                f"Probe front:[{front.front_id}] failed: {e}",
                extra={"chain_id": front.chain_id, "front_id": front.front_id},
            )
            return False


def _front_status(front: Front) -> FrontStatus:
    try:
        return FrontStatus(front.front_status)
    except ValueError:
        logger.warning(f"Unknown front status:[{front.front_status}]")
        return FrontStatus.INITIALIZED
