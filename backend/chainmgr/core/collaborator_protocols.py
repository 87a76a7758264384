"""Boundary Protocols — contracts between the orchestrators and host-side collaborators.

Invariants:
    - Orchestrators NEVER import concrete adapters — only these Protocols
    - Every boundary method is async because implementations do IO
    - Failures surface as exceptions (OSError for filesystem, typed errors otherwise);
      boolean checks return False instead of raising

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - NodeConfig lives here: it is the value crossing the reader boundary
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from chainmgr.core.domain_types import EncryptType


@dataclass(frozen=True)
class NodeConfig:
    """Identity and ports of one generated node directory."""
    node_id: str
    host_index: int
    jsonrpc_port: int
    p2p_port: int
    channel_port: int


class HostChecker(Protocol):
    """SSH reachability of a target host."""
    async def check_connect(self, ip: str, ssh_user: str, ssh_port: int) -> bool: ...


class ImageChecker(Protocol):
    """Presence of the node image for a version on a host's docker daemon."""
    async def image_exists(
        self, ip: str, docker_port: int, ssh_user: str, ssh_port: int, version: str,
    ) -> bool: ...


class BuildChainRunner(Protocol):
    """Runs the chain-building procedure once for the whole topology."""
    async def build_chain(
        self, encrypt_type: EncryptType, ip_conf: list[str], chain_name: str,
    ) -> None: ...


class ChainPaths(Protocol):
    """Local layout of generated chain files."""
    def chain_root(self, chain_name: str) -> Path: ...
    async def list_host_node_dirs(self, chain_name: str, ip: str) -> list[Path]: ...
    async def delete_chain(self, chain_name: str) -> None: ...


class NodeConfigReader(Protocol):
    """Parses a generated node directory."""
    async def read(self, node_dir: Path, encrypt_type: EncryptType) -> NodeConfig: ...


class FrontConfigRenderer(Protocol):
    """Writes the front service config into a node directory."""
    async def render(
        self, node_dir: Path, encrypt_type: int, channel_port: int, front_port: int,
    ) -> None: ...


class FrontHealthProbe(Protocol):
    """Live readiness of a front endpoint."""
    async def is_healthy(self, ip: str, port: int) -> bool: ...
