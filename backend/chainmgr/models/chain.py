"""Chain ORM — the aggregate root of one managed ledger deployment.

Invariants:
    - chain_id is an externally chosen int primary key (not autoincrement)
    - chain_name is globally unique
    - deploy_type never changes after insert; it gates automated lifecycle management
    - chain_status holds a ChainStatus value

Design Decisions:
    - Descendant tables reference chain_id with ON DELETE CASCADE, but registries
      still delete them explicitly (SQLite test DBs do not enforce FKs)
    - No ORM relationships: descendants are always queried by chain_id
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from chainmgr.core.domain_types import ChainStatus, DeployType, EncryptType
from chainmgr.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Chain(Base):
    """Chain aggregate root — owns groups, fronts, nodes, mappings and contracts."""
    __tablename__ = "tb_chain"

    chain_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False,
    )
    chain_name: Mapped[str] = mapped_column(
        String(120), nullable=False, unique=True,
    )
    chain_desc: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    version: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    encrypt_type: Mapped[int] = mapped_column(
        Integer, nullable=False, default=EncryptType.ECDSA.value,
    )
    chain_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ChainStatus.INITIALIZED.value,
    )
    consensus_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    storage_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    deploy_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DeployType.API.value,
    )
    remark: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    create_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    modify_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now,
    )
