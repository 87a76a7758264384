"""Contract ORM — contract artifacts (source, ABI, bytecode) deployed to a chain's group.

Invariants:
    - Always scoped by chain_id; purged when the chain is removed
    - contract_address is NULL until the contract is deployed
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from chainmgr.db.base import Base


class Contract(Base):
    """Contract artifact — scoped by (chain_id, group_id)."""
    __tablename__ = "tb_contract"

    contract_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    chain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tb_chain.chain_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    group_id: Mapped[int] = mapped_column(Integer, nullable=False)
    contract_name: Mapped[str] = mapped_column(String(120), nullable=False)
    contract_path: Mapped[str] = mapped_column(String(255), nullable=False, default="/")
    contract_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    contract_abi: Mapped[str | None] = mapped_column(Text, nullable=True)
    bytecode_bin: Mapped[str | None] = mapped_column(Text, nullable=True)
    contract_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    create_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
