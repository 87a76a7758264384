"""Group ORM — a logical subset of a chain's member nodes.

Invariants:
    - Primary key is (group_id, chain_id): group ids are only unique within a chain
    - node_count is maintained by the deploy orchestrator and the reset-group-list task
    - API-deployed chains always have the DEFAULT_GROUP_ID row

Design Decisions:
    - group_type records where the row came from (deploy vs synced from a front)
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from chainmgr.core.domain_types import DataStatus, GroupType
from chainmgr.db.base import Base


class Group(Base):
    """Group entity — scoped by chain_id."""
    __tablename__ = "tb_group"

    group_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False,
    )
    chain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tb_chain.chain_id", ondelete="CASCADE"),
        primary_key=True,
    )
    group_name: Mapped[str] = mapped_column(String(64), nullable=False)
    node_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    group_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=GroupType.DEPLOY.value,
    )
    group_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DataStatus.NORMAL.value,
    )
    create_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    modify_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
