"""Front Config Renderer — writes application.yml for the front next to its node.

Invariants:
    - Output file is <node_dir>/application.yml, overwritten on each render
    - The front always reaches its node over the local channel port
    - OSError propagates: the deployer turns it into FrontConfigRenderError
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

FRONT_CONFIG_FILE = "application.yml"


def build_front_config(encrypt_type: int, channel_port: int, front_port: int) -> dict[str, Any]:
    return {
        "server": {
            "port": front_port,
            "servlet": {"context-path": "/WeBASE-Front"},
        },
        "sdk": {
            "encryptType": encrypt_type,
            "ip": "127.0.0.1",
            "channelPort": channel_port,
            "certPath": "sdk",
        },
        "constant": {
            "keyServer": "",
            "nodePath": "/data",
        },
        "logging": {
            "config": "classpath:log4j2.xml",
        },
    }


class FrontYamlRenderer:
    """Renders the front's Spring Boot config as YAML."""

    async def render(
        self, node_dir: Path, encrypt_type: int, channel_port: int, front_port: int,
    ) -> None:
        await asyncio.to_thread(
            self._write, node_dir, build_front_config(encrypt_type, channel_port, front_port),
        )

    def _write(self, node_dir: Path, config: dict[str, Any]) -> None:
        target = node_dir / FRONT_CONFIG_FILE
        with open(target, "w") as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Wrote front config {target}")
