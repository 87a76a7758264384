"""ORM Models — SQLAlchemy declarative models for all chain manager entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Chain is the aggregate root; all entities scoped by chain_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from chainmgr.models.chain import Chain  # noqa: F401
from chainmgr.models.group import Group  # noqa: F401
from chainmgr.models.node import Node  # noqa: F401
from chainmgr.models.front import Front  # noqa: F401
from chainmgr.models.front_group_map import FrontGroupMap  # noqa: F401
from chainmgr.models.contract import Contract  # noqa: F401
