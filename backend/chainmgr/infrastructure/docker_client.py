"""Docker Image Check — asks a host's docker daemon whether a node image exists.

Invariants:
    - image_exists() never raises: daemon errors are logged and reported as "missing"
    - Clients are created per call and always closed

Design Decisions:
    - Docker SDK against tcp://<ip>:<docker_port>, in asyncio.to_thread (the SDK blocks)
    - Short connect timeout: fail fast on unreachable daemons
    - ssh_user/ssh_port accepted for the HostChecker-style signature; the daemon is
      reached directly over TCP
"""

import asyncio
import logging

from docker import DockerClient
from docker.errors import DockerException, ImageNotFound
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)


class DockerImageChecker:
    """Image lookups on remote docker daemons."""

    def __init__(self, repository: str, timeout_seconds: int = 5):
        self._repository = repository
        self._timeout = timeout_seconds

    def image_name(self, version: str) -> str:
        return f"{self._repository}:{version}"

    async def image_exists(
        self, ip: str, docker_port: int, ssh_user: str, ssh_port: int, version: str,
    ) -> bool:
        return await asyncio.to_thread(self._image_exists, ip, docker_port, version)

    def _image_exists(self, ip: str, docker_port: int, version: str) -> bool:
        image = self.image_name(version)
        try:
            client = DockerClient(
                base_url=f"tcp://{ip}:{docker_port}", timeout=self._timeout,
            )
        except DockerException as e:
            logger.error(f"Connect docker daemon {ip}:{docker_port} failed: {e}", extra={"host": ip})
            return False
        try:
            client.images.get(image)
            return True
        except ImageNotFound:
            logger.info(f"Image {image} not found on {ip}", extra={"host": ip})
            return False
        except (DockerException, RequestException) as e:
            logger.error(f"Inspect image {image} on {ip} failed: {e}", extra={"host": ip})
            return False
        finally:
            client.close()
