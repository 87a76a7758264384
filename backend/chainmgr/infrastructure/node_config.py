"""Node Config Reader — parses one build_chain node directory.

Reads:
    node<N>/config.ini           [rpc] jsonrpc_listen_port, channel_listen_port; [p2p] listen_port
    node<N>/conf/node.nodeid     hex node id (conf/gmnode.nodeid for SM2 chains)

Invariants:
    - host_index comes from the directory name (node3 -> 3)
    - Any missing file, section or port raises NodeConfigError naming the directory
"""

import asyncio
import configparser
from pathlib import Path

from chainmgr.core.collaborator_protocols import NodeConfig
from chainmgr.core.domain_types import EncryptType
from chainmgr.core.errors import NodeConfigError
from chainmgr.core.naming import parse_host_index


class NodeConfigFileReader:
    """Reads NodeConfig from generated files."""

    async def read(self, node_dir: Path, encrypt_type: EncryptType) -> NodeConfig:
        return await asyncio.to_thread(read_node_config, node_dir, encrypt_type)


def read_node_config(node_dir: Path, encrypt_type: EncryptType) -> NodeConfig:
    host_index = parse_host_index(node_dir.name)
    if host_index is None:
        raise NodeConfigError(str(node_dir), "not a node<N> directory")

    node_id_file = "gmnode.nodeid" if encrypt_type == EncryptType.SM2 else "node.nodeid"
    try:
        node_id = (node_dir / "conf" / node_id_file).read_text().strip()
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        with open(node_dir / "config.ini") as f:
            parser.read_file(f)
        return NodeConfig(
            node_id=node_id,
            host_index=host_index,
            jsonrpc_port=parser.getint("rpc", "jsonrpc_listen_port"),
            p2p_port=parser.getint("p2p", "listen_port"),
            channel_port=parser.getint("rpc", "channel_listen_port"),
        )
    except (OSError, configparser.Error, ValueError) as e:
        raise NodeConfigError(str(node_dir), str(e)) from e
