"""Group Registry — owns tb_group rows scoped by chain.

Invariants:
    - save_group() is insert-if-absent: an existing (group_id, chain_id) row is returned untouched
    - node_count only changes through update_group_node_count()
    - Never commits: the caller owns the transaction
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.core.domain_types import GroupType
from chainmgr.models.group import Group

logger = logging.getLogger(__name__)


class GroupService:
    """Persistence for chain groups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_group(self, chain_id: int, group_id: int) -> Group | None:
        return await self.db.get(Group, {"group_id": group_id, "chain_id": chain_id})

    async def list_by_chain(self, chain_id: int) -> list[Group]:
        result = await self.db.execute(
            select(Group).where(Group.chain_id == chain_id)
            .order_by(Group.group_id),
        )
        return list(result.scalars().all())

    async def save_group(
        self,
        group_id: int,
        chain_id: int,
        node_count: int,
        description: str,
        group_type: GroupType,
    ) -> Group:
        """Insert the group unless it already exists for this chain."""
        group = await self.get_group(chain_id, group_id)
        if group is not None:
            return group
        group = Group(
            group_id=group_id,
            chain_id=chain_id,
            group_name=str(group_id),
            node_count=node_count,
            description=description,
            group_type=group_type.value,
        )
        self.db.add(group)
        await self.db.flush()
        logger.info(
            f"Saved group:[{group_id}] of chain:[{chain_id}]",
            extra={"chain_id": chain_id, "group_id": group_id},
        )
        return group

    async def update_group_node_count(
        self, chain_id: int, group_id: int, node_count: int,
    ) -> bool:
        result = await self.db.execute(
            update(Group)
            .where(Group.chain_id == chain_id)
            .where(Group.group_id == group_id)
            .values(node_count=node_count),
        )
        return result.rowcount == 1

    async def remove_by_chain_id(self, chain_id: int) -> int:
        result = await self.db.execute(
            delete(Group).where(Group.chain_id == chain_id),
        )
        return result.rowcount
