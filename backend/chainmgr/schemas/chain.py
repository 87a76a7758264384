"""Chain Schemas — manual chain registration and chain read models.

Invariants:
    - ChainInfo registers a chain whose lifecycle is managed outside this service
    - ChainResponse never exposes host credentials
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chainmgr.core.domain_types import EncryptType


class ChainInfo(BaseModel):
    """Register an existing, manually deployed chain."""
    chain_id: int = Field(gt=0)
    chain_name: str = Field(pattern=r"^[A-Za-z0-9_\-]{1,64}$")
    chain_desc: str | None = Field(None, max_length=1024)
    version: str = ""
    encrypt_type: EncryptType = EncryptType.ECDSA
    consensus_type: str | None = None
    storage_type: str | None = None


class ChainResponse(BaseModel):
    """Public-facing chain data."""
    model_config = ConfigDict(from_attributes=True)

    chain_id: int
    chain_name: str
    chain_desc: str | None
    version: str
    encrypt_type: int
    chain_status: str
    consensus_type: str | None
    storage_type: str | None
    deploy_type: str
    remark: str
    create_time: datetime
    modify_time: datetime


class ProgressResponse(BaseModel):
    chain_id: int
    chain_status: str
    progress: int = Field(ge=0, le=100)
