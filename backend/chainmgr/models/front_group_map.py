"""FrontGroupMap ORM — which group(s) a front serves.

Invariants:
    - (chain_id, front_id, group_id) is unique
    - Inserted only after both the front row and the group row exist
    - Every change must invalidate FrontGroupMapCache for the chain

Design Decisions:
    - Surrogate map_id primary key: the triple is enforced by a unique constraint
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chainmgr.db.base import Base


class FrontGroupMap(Base):
    """Front-to-group association — scoped by chain_id."""
    __tablename__ = "tb_front_group_map"
    __table_args__ = (
        UniqueConstraint(
            "chain_id", "front_id", "group_id", name="uq_front_group_map",
        ),
    )

    map_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    chain_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tb_chain.chain_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    front_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tb_front.front_id", ondelete="CASCADE"),
        nullable=False,
    )
    group_id: Mapped[int] = mapped_column(Integer, nullable=False)
    create_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
