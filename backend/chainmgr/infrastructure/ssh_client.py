"""SSH Client — host reachability and remote directory moves over paramiko.

Invariants:
    - check_connect() never raises: any SSH/socket failure means "not reachable"
    - Remote commands raise RemoteCommandError on a non-zero exit status
    - Every SSHClient is closed after use (no pooled connections)

Design Decisions:
    - paramiko runs in asyncio.to_thread: it is blocking and must not stall the event loop
    - Key-file auth only: the manager's private key is installed on every target host
    - AutoAddPolicy: target hosts are operator-provided, first contact is expected
"""

import asyncio
import logging
import shlex
from datetime import datetime
from pathlib import Path

import paramiko

from chainmgr.core import naming
from chainmgr.core.errors import RemoteCommandError

logger = logging.getLogger(__name__)


class SshHostChecker:
    """Blocking paramiko operations exposed as coroutines."""

    def __init__(self, private_key_path: str, timeout_seconds: float = 10):
        self._key_path = str(Path(private_key_path).expanduser())
        self._timeout = timeout_seconds

    async def check_connect(self, ip: str, ssh_user: str, ssh_port: int) -> bool:
        return await asyncio.to_thread(self._check_connect, ip, ssh_user, ssh_port)

    async def exec_on_remote(
        self, ip: str, command: str, ssh_user: str, ssh_port: int,
    ) -> str:
        return await asyncio.to_thread(self._exec, ip, command, ssh_user, ssh_port)

    async def create_dir_on_remote(
        self, ip: str, remote_dir: str, ssh_user: str, ssh_port: int,
    ) -> None:
        await self.exec_on_remote(
            ip, f"mkdir -p {shlex.quote(remote_dir)}", ssh_user, ssh_port,
        )

    async def mv_dir_on_remote(
        self, ip: str, src: str, dst: str, ssh_user: str, ssh_port: int,
    ) -> None:
        command = (
            f"if [ -d {shlex.quote(src)} ]; then "
            f"mv -fv {shlex.quote(src)} {shlex.quote(dst)}; fi"
        )
        await self.exec_on_remote(ip, command, ssh_user, ssh_port)

    async def move_chain_on_remote(
        self,
        ip: str,
        root_on_host: str,
        chain_name: str,
        ssh_user: str,
        ssh_port: int,
        moved_at: datetime | None = None,
    ) -> str:
        """Park a chain directory under <root>/deleted-tmp; returns the new path."""
        await self.create_dir_on_remote(
            ip, naming.deleted_root_on_host(root_on_host), ssh_user, ssh_port,
        )
        src = naming.chain_root_on_host(root_on_host, chain_name)
        dst = naming.chain_deleted_root_on_host(
            root_on_host, chain_name, moved_at or datetime.now(),
        )
        await self.mv_dir_on_remote(ip, src, dst, ssh_user, ssh_port)
        logger.info(f"Moved chain dir {src} -> {dst}", extra={"host": ip})
        return dst

    def _client(self, ip: str, ssh_user: str, ssh_port: int) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                ip, port=ssh_port, username=ssh_user, key_filename=self._key_path,
                timeout=self._timeout, banner_timeout=self._timeout,
                auth_timeout=self._timeout,
            )
        except (paramiko.SSHException, OSError):
            # a failed connect can leave the transport thread running
            client.close()
            raise
        return client

    def _check_connect(self, ip: str, ssh_user: str, ssh_port: int) -> bool:
        try:
            client = self._client(ip, ssh_user, ssh_port)
        except (paramiko.SSHException, OSError) as e:
            logger.warning(
                f"SSH connect to {ssh_user}@{ip}:{ssh_port} failed: {e}",
                extra={"host": ip},
            )
            return False
        client.close()
        return True

    def _exec(self, ip: str, command: str, ssh_user: str, ssh_port: int) -> str:
        client = self._client(ip, ssh_user, ssh_port)
        try:
            _, stdout, stderr = client.exec_command(command, timeout=self._timeout)
            exit_status = stdout.channel.recv_exit_status()
            output = stdout.read().decode(errors="replace")
            if exit_status != 0:
                detail = stderr.read().decode(errors="replace").strip()
                raise RemoteCommandError(ip, command, detail or f"exit {exit_status}")
            return output
        finally:
            client.close()
