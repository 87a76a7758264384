"""Node ORM — a network-identity-bearing ledger participant.

Invariants:
    - Primary key is (node_id, chain_id, group_id): one node may serve several groups
    - node_name == naming.node_name(chain_id, group_id, node_id)
    - node_active starts INVALID until the reset-group-list task sees it

Design Decisions:
    - node_id is the hex public key from conf/node.nodeid (128 chars, SM keys too)
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from chainmgr.core.domain_types import DataStatus
from chainmgr.db.base import Base


class Node(Base):
    """Node entity — scoped by (chain_id, group_id)."""
    __tablename__ = "tb_node"

    node_id: Mapped[str] = mapped_column(String(250), primary_key=True)
    chain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tb_chain.chain_id", ondelete="CASCADE"),
        primary_key=True,
    )
    group_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False,
    )
    node_name: Mapped[str] = mapped_column(String(255), nullable=False)
    node_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    p2p_port: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    node_active: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DataStatus.INVALID.value,
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
