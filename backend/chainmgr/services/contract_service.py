"""Contract Registry — contract artifacts of a chain (only the chain-scoped operations).

Invariants:
    - Never commits: the caller owns the transaction
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.models.contract import Contract


class ContractService:
    """Persistence for contract artifacts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_by_chain(self, chain_id: int) -> list[Contract]:
        result = await self.db.execute(
            select(Contract).where(Contract.chain_id == chain_id),
        )
        return list(result.scalars().all())

    async def delete_by_chain_id(self, chain_id: int) -> int:
        result = await self.db.execute(
            delete(Contract).where(Contract.chain_id == chain_id),
        )
        return result.rowcount
