"""Node Registry — owns tb_node rows scoped by (chain, group).

Invariants:
    - Node names are derived with naming.node_name, never stored from input
    - Never commits: the caller owns the transaction
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.core.domain_types import DataStatus
from chainmgr.core.naming import node_name
from chainmgr.models.node import Node


class NodeService:
    """Persistence for chain member nodes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(
        self,
        chain_id: int,
        node_id: str,
        group_id: int,
        node_ip: str,
        p2p_port: int,
        node_active: DataStatus = DataStatus.INVALID,
    ) -> Node:
        name = node_name(chain_id, group_id, node_id)
        node = Node(
            chain_id=chain_id,
            node_id=node_id,
            group_id=group_id,
            node_name=name,
            node_ip=node_ip,
            p2p_port=p2p_port,
            description=name,
            node_active=node_active.value,
        )
        self.db.add(node)
        await self.db.flush()
        return node

    async def list_by_chain(self, chain_id: int) -> list[Node]:
        result = await self.db.execute(
            select(Node).where(Node.chain_id == chain_id),
        )
        return list(result.scalars().all())

    async def count_by_group(self, chain_id: int) -> dict[int, int]:
        """Number of node rows per group of a chain."""
        result = await self.db.execute(
            select(Node.group_id, func.count())
            .where(Node.chain_id == chain_id)
            .group_by(Node.group_id),
        )
        return {group_id: count for group_id, count in result.all()}

    async def delete_by_chain_id(self, chain_id: int) -> int:
        result = await self.db.execute(
            delete(Node).where(Node.chain_id == chain_id),
        )
        return result.rowcount
