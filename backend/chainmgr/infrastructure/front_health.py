"""Front Health Probe — live readiness of a front over HTTP.

Invariants:
    - is_healthy() is True only for a 2xx response within the timeout
    - Network errors mean "not healthy", never an exception
"""

import logging

import httpx

logger = logging.getLogger(__name__)


class HttpFrontHealthProbe:
    """GET http://<ip>:<port><path>."""

    def __init__(
        self,
        path: str,
        timeout_seconds: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._path = path
        self._timeout = timeout_seconds
        self._transport = transport

    async def is_healthy(self, ip: str, port: int) -> bool:
        url = f"http://{ip}:{port}{self._path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug(f"Front {url} not reachable: {e}", extra={"host": ip})
            return False
        return response.is_success
