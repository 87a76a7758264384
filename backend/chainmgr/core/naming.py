"""Deterministic Naming — node names, container names and host-side paths.

Invariants:
    - Every function is a pure function of its arguments (no lookups, no clock reads)
    - node_name depends only on (chain_id, group_id, node_id)
    - container_name depends only on (root_on_host, chain_name, host_index)
    - Host-side paths are POSIX regardless of the manager's own OS

Design Decisions:
    - posixpath over pathlib: remote hosts are Linux, the manager may not be
    - Timestamp for deleted-tmp directories passed in by the caller, keeping this module pure
"""

import posixpath
from datetime import datetime

DELETED_TMP_DIR = "deleted-tmp"
NODE_DIR_PREFIX = "node"


def node_name(chain_id: int, group_id: int, node_id: str) -> str:
    """Display name of a node, reproducible without a lookup."""
    return f"{chain_id}_{group_id}_{node_id}"


def container_name(root_on_host: str, chain_name: str, host_index: int) -> str:
    """Docker container name of a node: root dir, chain name and host index."""
    root = root_on_host.strip("/").replace("/", "_")
    return f"{root}-{chain_name}-{NODE_DIR_PREFIX}{host_index}"


def chain_root_on_host(root_on_host: str, chain_name: str) -> str:
    return posixpath.join(root_on_host, chain_name)


def node_root_on_host(chain_root: str, host_index: int) -> str:
    return posixpath.join(chain_root, f"{NODE_DIR_PREFIX}{host_index}")


def deleted_root_on_host(root_on_host: str) -> str:
    return posixpath.join(root_on_host, DELETED_TMP_DIR)


def chain_deleted_root_on_host(
    root_on_host: str, chain_name: str, moved_at: datetime,
) -> str:
    """Where a removed chain is parked on its host, e.g. /opt/fisco/deleted-tmp/alpha-20260101_120000."""
    stamp = moved_at.strftime("%Y%m%d_%H%M%S")
    return posixpath.join(
        deleted_root_on_host(root_on_host), f"{chain_name}-{stamp}",
    )


def ip_config_line(ip: str, num: int, ext_org_id: int, group_id: int) -> str:
    """One build_chain ipconf line: '<ip>:<count> <agency> <groups>'."""
    return f"{ip}:{num} {ext_org_id} {group_id}"


def front_port(base_port: int, host_index: int) -> int:
    """Front service port: base port plus the node's index on its host."""
    return base_port + host_index


def front_description(chain_id: int, ip: str, host_index: int) -> str:
    return f"front of chain:[{chain_id}] on host:[{ip}:{host_index}]"


def parse_host_index(dir_name: str) -> int | None:
    """Host index from a generated node directory name ('node3' -> 3)."""
    if not dir_name.startswith(NODE_DIR_PREFIX):
        return None
    suffix = dir_name[len(NODE_DIR_PREFIX):]
    return int(suffix) if suffix.isdigit() else None
