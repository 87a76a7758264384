"""Build Chain Shell — runs build_chain.sh once for the whole multi-host topology.

Invariants:
    - The ipconf file holds one '<ip>:<count> <agency> <groups>' line per host
    - A chain root that already exists is never overwritten (ChainRootExistsError)
    - Builds run one at a time per shell instance: the free-root check and the run
      are one critical section
    - Non-zero exit or timeout raises BuildChainError; partial output is left for
      the deployer's compensating delete

Design Decisions:
    - asyncio.create_subprocess_exec, no shell: arguments are never interpolated
    - '-d' generates docker-mode node dirs; '-g' switches to SM crypto
"""

import asyncio
import logging

from chainmgr.core.domain_types import EncryptType
from chainmgr.core.errors import BuildChainError, ChainRootExistsError, ErrorContext
from chainmgr.infrastructure.path_service import PathService

logger = logging.getLogger(__name__)

_STDERR_TAIL = 2000


class BuildChainShell:
    """Invokes the build_chain script."""

    def __init__(self, script_path: str, paths: PathService, timeout_seconds: int = 600):
        self._script = script_path
        self._paths = paths
        self._timeout = timeout_seconds
        self._lock = asyncio.Lock()

    def command(self, encrypt_type: EncryptType, chain_name: str) -> list[str]:
        args = [
            "bash", "-e", self._script,
            "-f", str(self._paths.ip_conf_path(chain_name)),
            "-o", str(self._paths.chain_root(chain_name)),
            "-d",
        ]
        if encrypt_type == EncryptType.SM2:
            args.append("-g")
        return args

    async def build_chain(
        self, encrypt_type: EncryptType, ip_conf: list[str], chain_name: str,
    ) -> None:
        async with self._lock:
            await self._build_chain(encrypt_type, ip_conf, chain_name)

    async def _build_chain(
        self, encrypt_type: EncryptType, ip_conf: list[str], chain_name: str,
    ) -> None:
        ctx = ErrorContext(chain_name=chain_name)
        chain_root = self._paths.chain_root(chain_name)
        if chain_root.exists():
            raise ChainRootExistsError(chain_name, str(chain_root), ctx)

        ip_conf_file = self._paths.ip_conf_path(chain_name)
        ip_conf_file.parent.mkdir(parents=True, exist_ok=True)
        ip_conf_file.write_text("\n".join(ip_conf) + "\n")

        args = self.command(encrypt_type, chain_name)
        logger.info(f"Exec build chain: {' '.join(args)}", extra={"chain_name": chain_name})
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise BuildChainError(f"timed out after {self._timeout}s", ctx)

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace")[-_STDERR_TAIL:].strip()
            logger.error(
                f"Build chain exit {proc.returncode}: {detail}",
                extra={"chain_name": chain_name},
            )
            raise BuildChainError(f"exit code {proc.returncode}", ctx)
