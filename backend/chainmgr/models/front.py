"""Front ORM — the per-node management/service endpoint provisioned for a chain.

Invariants:
    - One front per generated node directory per deploy run
    - front_port == default_front_port + host_index
    - container_name == naming.container_name(root_on_host, chain_name, host_index)
    - front_status holds a FrontStatus value

Design Decisions:
    - SSH and docker coordinates copied onto every front: start/stop/upgrade
      flows reach a host without joining back to the deploy request
    - chain_name denormalized: host-side paths are built from it
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from chainmgr.core.domain_types import FrontStatus
from chainmgr.db.base import Base


class Front(Base):
    """Front entity — scoped by chain_id."""
    __tablename__ = "tb_front"

    front_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    chain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tb_chain.chain_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    node_id: Mapped[str] = mapped_column(String(250), nullable=False)
    front_ip: Mapped[str] = mapped_column(String(64), nullable=False)
    front_port: Mapped[int] = mapped_column(Integer, nullable=False)
    jsonrpc_port: Mapped[int] = mapped_column(Integer, nullable=False)
    p2p_port: Mapped[int] = mapped_column(Integer, nullable=False)
    channel_port: Mapped[int] = mapped_column(Integer, nullable=False)
    chain_name: Mapped[str] = mapped_column(String(120), nullable=False)
    ext_company_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ext_org_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ext_host_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    agency: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    front_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FrontStatus.INITIALIZED.value,
    )
    version: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    container_name: Mapped[str] = mapped_column(String(255), nullable=False)
    host_index: Mapped[int] = mapped_column(Integer, nullable=False)
    ssh_user: Mapped[str] = mapped_column(String(64), nullable=False)
    ssh_port: Mapped[int] = mapped_column(Integer, nullable=False)
    docker_port: Mapped[int] = mapped_column(Integer, nullable=False)
    root_on_host: Mapped[str] = mapped_column(String(255), nullable=False)
    node_root_on_host: Mapped[str] = mapped_column(String(255), nullable=False)
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
