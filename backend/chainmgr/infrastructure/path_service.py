"""Path Service — local layout of build_chain output.

Layout:
    <nodes_root>/<chain_name>/                chain root (build_chain -o)
    <nodes_root>/<chain_name>/<ip>/node<N>/   one generated node directory
    <nodes_root>/ipconf/<chain_name>_ipconf   ipconf file handed to build_chain

Invariants:
    - list_host_node_dirs() returns node<N> directories sorted by N
    - list_host_node_dirs() raises OSError when the host directory is missing
    - delete_chain() is a no-op for a chain that has no files

Design Decisions:
    - Blocking filesystem calls run in asyncio.to_thread
"""

import asyncio
import logging
import shutil
from pathlib import Path

from chainmgr.core.naming import parse_host_index

logger = logging.getLogger(__name__)


class PathService:
    """Resolves and removes generated chain directories."""

    def __init__(self, nodes_root: str):
        self._nodes_root = Path(nodes_root)

    def chain_root(self, chain_name: str) -> Path:
        return self._nodes_root / chain_name

    def host_root(self, chain_name: str, ip: str) -> Path:
        return self.chain_root(chain_name) / ip

    def ip_conf_path(self, chain_name: str) -> Path:
        return self._nodes_root / "ipconf" / f"{chain_name}_ipconf"

    async def list_host_node_dirs(self, chain_name: str, ip: str) -> list[Path]:
        return await asyncio.to_thread(self._list_host_node_dirs, chain_name, ip)

    async def delete_chain(self, chain_name: str) -> None:
        await asyncio.to_thread(self._delete_chain, chain_name)

    def _list_host_node_dirs(self, chain_name: str, ip: str) -> list[Path]:
        indexed = []
        for entry in self.host_root(chain_name, ip).iterdir():
            index = parse_host_index(entry.name)
            if entry.is_dir() and index is not None:
                indexed.append((index, entry))
        return [path for _, path in sorted(indexed)]

    def _delete_chain(self, chain_name: str) -> None:
        root = self.chain_root(chain_name)
        if root.exists():
            shutil.rmtree(root)
            logger.info(f"Deleted chain dir {root}", extra={"chain_name": chain_name})
        self.ip_conf_path(chain_name).unlink(missing_ok=True)
