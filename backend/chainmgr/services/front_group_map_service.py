"""FrontGroupMap Registry and Cache — front-to-group associations.

Invariants:
    - new_front_group() is insert-if-absent on (chain_id, front_id, group_id)
    - Every mapping change clears the cache entry of that chain before returning
    - The cache is keyed by chain_id: invalidating one chain never touches another

Design Decisions:
    - FrontGroupMapCache is a module-level singleton: the only cross-request
      mutable structure besides the database (single-process uvicorn)
    - Cache entries are immutable tuples; a miss reloads the whole chain with one JOIN
"""

import logging
import threading
from typing import NamedTuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.models.front import Front
from chainmgr.models.front_group_map import FrontGroupMap

logger = logging.getLogger(__name__)


class FrontGroup(NamedTuple):
    """Cached view of one mapping joined with its front endpoint."""
    chain_id: int
    group_id: int
    front_id: int
    front_ip: str
    front_port: int
    front_status: str


class FrontGroupMapCache:
    """Process-wide mirror of front/group associations, per chain."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_chain: dict[int, tuple[FrontGroup, ...]] = {}

    def peek(self, chain_id: int) -> tuple[FrontGroup, ...] | None:
        with self._lock:
            return self._by_chain.get(chain_id)

    async def get_map_list(
        self, db: AsyncSession, chain_id: int,
    ) -> tuple[FrontGroup, ...]:
        cached = self.peek(chain_id)
        if cached is not None:
            return cached
        loaded = await _load_front_groups(db, chain_id)
        with self._lock:
            self._by_chain[chain_id] = loaded
        return loaded

    def clear_map_list(self, chain_id: int) -> None:
        with self._lock:
            self._by_chain.pop(chain_id, None)
        logger.debug(f"Cleared front group cache of chain:[{chain_id}]")


async def _load_front_groups(
    db: AsyncSession, chain_id: int,
) -> tuple[FrontGroup, ...]:
    result = await db.execute(
        select(
            FrontGroupMap.chain_id, FrontGroupMap.group_id, Front.front_id,
            Front.front_ip, Front.front_port, Front.front_status,
        )
        .join(Front, Front.front_id == FrontGroupMap.front_id)
        .where(FrontGroupMap.chain_id == chain_id)
        .order_by(FrontGroupMap.group_id, Front.front_id),
    )
    return tuple(FrontGroup(*row) for row in result.all())


# Singleton (shared by registries, orchestrators and the reset task)
front_group_map_cache = FrontGroupMapCache()


class FrontGroupMapService:
    """Persistence for front/group associations; keeps the cache coherent."""

    def __init__(
        self, db: AsyncSession, cache: FrontGroupMapCache = front_group_map_cache,
    ):
        self.db = db
        self.cache = cache

    async def get(
        self, chain_id: int, front_id: int, group_id: int,
    ) -> FrontGroupMap | None:
        result = await self.db.execute(
            select(FrontGroupMap)
            .where(FrontGroupMap.chain_id == chain_id)
            .where(FrontGroupMap.front_id == front_id)
            .where(FrontGroupMap.group_id == group_id),
        )
        return result.scalar_one_or_none()

    async def new_front_group(
        self, chain_id: int, front_id: int, group_id: int,
    ) -> FrontGroupMap:
        existing = await self.get(chain_id, front_id, group_id)
        if existing is not None:
            return existing
        mapping = FrontGroupMap(
            chain_id=chain_id, front_id=front_id, group_id=group_id,
        )
        self.db.add(mapping)
        await self.db.flush()
        self.cache.clear_map_list(chain_id)
        return mapping

    async def list_by_chain(self, chain_id: int) -> list[FrontGroupMap]:
        result = await self.db.execute(
            select(FrontGroupMap).where(FrontGroupMap.chain_id == chain_id),
        )
        return list(result.scalars().all())

    async def remove_by_chain_id(self, chain_id: int) -> int:
        result = await self.db.execute(
            delete(FrontGroupMap).where(FrontGroupMap.chain_id == chain_id),
        )
        self.cache.clear_map_list(chain_id)
        return result.rowcount
