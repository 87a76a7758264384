"""Domain Types — lifecycle enums and well-known constants.

Invariants:
    - DEFAULT_GROUP_ID is the single group every API-deployed chain starts with
    - ChainStatus/FrontStatus values are the strings persisted in status columns
    - Progress values are bounded 0–100

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - EncryptType is an IntEnum: the front config renderer needs its numeric id
"""

from enum import Enum, IntEnum


# ─── Constants ───────────────────────────────────────────────────

DEFAULT_GROUP_ID = 1
DEFAULT_GROUP_NAME = "deploy"
MIN_CHAIN_NODES = 2

PERCENTAGE_FAILED = 0
PERCENTAGE_IN_PROGRESS = 10
PERCENTAGE_FINISH = 100


# ─── Enums ───────────────────────────────────────────────────────

class ChainStatus(str, Enum):
    """Chain lifecycle states — maps to tb_chain.chain_status."""
    INITIALIZED = "initialized"
    DEPLOYING = "deploying"
    DEPLOY_FAILED = "deploy_failed"
    RUNNING = "running"
    UPGRADING = "upgrading"
    UPGRADE_FAILED = "upgrade_failed"
    RESTARTING = "restarting"


class DeployType(str, Enum):
    """Who manages the chain lifecycle. Immutable after creation."""
    API = "api"
    MANUALLY = "manually"


class EncryptType(IntEnum):
    """Crypto suite selector passed to build_chain and the front config."""
    ECDSA = 0
    SM2 = 1


class DockerImageType(str, Enum):
    """Image provisioning policy: MANUAL means the image must already be on the host."""
    PULL = "pull"
    MANUAL = "manual"


class FrontStatus(str, Enum):
    """Front (per-node service endpoint) lifecycle states."""
    INITIALIZED = "initialized"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


class GroupType(str, Enum):
    """Origin of a group row."""
    DEPLOY = "deploy"
    SYNC = "sync"


class DataStatus(str, Enum):
    """Validity of a synced node row."""
    NORMAL = "normal"
    INVALID = "invalid"
