"""Chain Registry — owns tb_chain rows: existence, uniqueness, insert and status.

Invariants:
    - chain_id and chain_name are each globally unique (checked before insert)
    - insert() and update_status() verify the affected-row count, never assume it
    - new_chain() registers MANUALLY deployed chains only; API chains come from ChainDeployer
    - Never commits: the caller owns the transaction

Design Decisions:
    - Core-style SQL statements (insert/update/delete) where a row count is the contract;
      ORM get() for primary-key reads
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chainmgr.core.domain_types import ChainStatus, DeployType, EncryptType
from chainmgr.core.errors import (
    ChainIdExistsError, ChainNameExistsError, InsertChainError,
)
from chainmgr.models.chain import Chain
from chainmgr.schemas.chain import ChainInfo

logger = logging.getLogger(__name__)


class ChainRegistry:
    """Persistence and uniqueness rules for chains."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, chain_id: int) -> Chain | None:
        return await self.db.get(Chain, chain_id)

    async def get_by_name(self, chain_name: str) -> Chain | None:
        result = await self.db.execute(
            select(Chain).where(Chain.chain_name == chain_name),
        )
        return result.scalar_one_or_none()

    async def count_by_name(self, chain_name: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Chain)
            .where(Chain.chain_name == chain_name),
        )
        return result.scalar_one()

    async def list_chains(self) -> list[Chain]:
        result = await self.db.execute(
            select(Chain).order_by(Chain.chain_id),
        )
        return list(result.scalars().all())

    async def check_unused(self, chain_id: int, chain_name: str) -> None:
        """Raise if either the id or the name is already taken."""
        logger.info(f"Check chain id:[{chain_id}] exists", extra={"chain_id": chain_id})
        if await self.get(chain_id) is not None:
            raise ChainIdExistsError(chain_id)
        logger.info(
            f"Check chain name:[{chain_name}] exists",
            extra={"chain_name": chain_name},
        )
        if await self.count_by_name(chain_name) > 0:
            raise ChainNameExistsError(chain_name)

    async def new_chain(self, info: ChainInfo) -> Chain:
        """Register a chain deployed outside this service."""
        logger.debug(f"start new_chain chain_info:{info.model_dump()}")
        await self.check_unused(info.chain_id, info.chain_name)
        return await self.insert(
            info.chain_id, info.chain_name, info.chain_desc, info.version,
            info.encrypt_type, ChainStatus.RUNNING,
            info.consensus_type, info.storage_type, DeployType.MANUALLY,
        )

    async def insert(
        self,
        chain_id: int,
        chain_name: str,
        chain_desc: str | None,
        version: str,
        encrypt_type: EncryptType,
        status: ChainStatus,
        consensus_type: str | None,
        storage_type: str | None,
        deploy_type: DeployType,
    ) -> Chain:
        """Insert one chain row and return it; InsertChainError unless exactly one row."""
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            insert(Chain).values(
                chain_id=chain_id,
                chain_name=chain_name,
                chain_desc=chain_desc,
                version=version,
                encrypt_type=int(encrypt_type),
                chain_status=status.value,
                consensus_type=consensus_type,
                storage_type=storage_type,
                deploy_type=deploy_type.value,
                remark="",
                create_time=now,
                modify_time=now,
            ),
        )
        if result.rowcount != 1:
            logger.warning(
                f"Insert chain:[{chain_id}] affected {result.rowcount} rows",
                extra={"chain_id": chain_id},
            )
            raise InsertChainError(chain_id)
        chain = await self.get(chain_id)
        if chain is None:
            raise InsertChainError(chain_id)
        return chain

    async def update_status(
        self, chain_id: int, status: ChainStatus, remark: str = "",
    ) -> bool:
        """Set chain status/remark; True iff exactly one row changed."""
        logger.info(
            f"Update chain:[{chain_id}] status to:[{status.value}]",
            extra={"chain_id": chain_id},
        )
        result = await self.db.execute(
            update(Chain)
            .where(Chain.chain_id == chain_id)
            .values(
                chain_status=status.value,
                remark=remark,
                modify_time=datetime.now(timezone.utc),
            ),
        )
        return result.rowcount == 1

    async def delete(self, chain_id: int) -> int:
        result = await self.db.execute(
            delete(Chain).where(Chain.chain_id == chain_id),
        )
        return result.rowcount
