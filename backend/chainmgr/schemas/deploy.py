"""Deploy Schemas — the multi-host deploy request.

Invariants:
    - chain_name is a safe directory name (it becomes a path segment locally and on hosts)
    - Every host asks for at least one node; the >= 2 total rule is a business rule
      enforced by the deployer, not here
    - ip must be a valid IPv4/IPv6 address

Design Decisions:
    - Host defaults mirror a stock docker host (root user, port 22, daemon on 3000)
"""

from ipaddress import ip_address

from pydantic import BaseModel, Field, field_validator

from chainmgr.core.domain_types import DockerImageType, EncryptType


class DeployHost(BaseModel):
    """One target host and how many nodes to put on it."""
    ip: str
    num: int = Field(ge=1, le=64)
    ssh_user: str = Field("root", min_length=1, max_length=64)
    ssh_port: int = Field(22, ge=1, le=65535)
    docker_demon_port: int = Field(3000, ge=1, le=65535)
    root_dir_on_host: str = Field("/opt/fisco", pattern=r"^/")
    ext_company_id: int = 0
    ext_org_id: int = 0
    ext_host_id: int = 0

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v: str) -> str:
        v = v.strip()
        ip_address(v)
        return v


class ReqDeploy(BaseModel):
    """Deploy a new chain across one or more hosts."""
    chain_id: int = Field(gt=0)
    chain_name: str = Field(pattern=r"^[A-Za-z0-9_\-]{1,64}$")
    version: str = Field(min_length=1, max_length=64)
    encrypt_type: EncryptType = EncryptType.ECDSA
    consensus_type: str = "pbft"
    storage_type: str = "rocksdb"
    description: str | None = Field(None, max_length=1024)
    docker_image_type: DockerImageType = DockerImageType.PULL
    deploy_host_list: list[DeployHost] = Field(min_length=1)

    def total_node_count(self) -> int:
        return sum(host.num for host in self.deploy_host_list)
