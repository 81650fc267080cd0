"""
services/ip_service.py

Responsibility: Determines the host machine's current external IPv4 address
by asking a fixed, ordered list of lookup services.
Does NOT: parse DNS records, interact with Cloudflare, or read config files.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from exceptions import NetworkError, NoIpAvailableError
from validation import is_ipv4

logger = logging.getLogger(__name__)

# Tried in this order; the first valid answer wins.
IP_CHECK_SERVICES: tuple[str, ...] = (
    "https://api.ipify.org?format=json",
    "https://ifconfig.me/all.json",
    "https://api.myip.com",
)

# NOTE: Each service names the field differently: ipify and myip use "ip",
# ifconfig.me uses "ip_addr".
_IP_FIELDS = ("ip", "ip_addr", "IP")

class IpService:
    """
    Fetches the host machine's current public IPv4 address.

    Uses an injected httpx.AsyncClient so the service is fully testable
    without real network calls (use respx.mock in tests). Services are
    queried one at a time; a failing service is logged and skipped.

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        services: Sequence[str] = IP_CHECK_SERVICES,
    ) -> None:
        """
        Initialises the service with a shared HTTP client.

        Args:
            http_client: The httpx.AsyncClient shared for the whole run.
            services: Lookup URLs in priority order.
        """
        self._client = http_client
        self._services = tuple(services)

    async def resolve_external_ip(self) -> str:
        """
        Returns the first valid IPv4 address reported by a lookup service.

        Returns:
            The external IP address, e.g. "1.2.3.4".

        Raises:
            NoIpAvailableError: If every service failed or returned an
                                unusable answer.
        """
        for service_url in self._services:
            try:
                ip = await self._query(service_url)
            except NetworkError as exc:
                logger.warning("Failed to get IP from %s: %s", service_url, exc)
                continue

            logger.info("Current external IP: %s (from %s)", ip, service_url)
            return ip

        raise NoIpAvailableError("Unable to determine external IP from any service")

    async def _query(self, service_url: str) -> str:
        """
        Asks one service for the IP.

        Raises:
            NetworkError: On transport errors, non-200 status, a body that is
                          not a JSON object, or a missing/invalid IP field.
        """
        try:
            response = await self._client.get(service_url)
        except httpx.RequestError as exc:
            raise NetworkError(f"request failed: {exc}") from exc

        if response.status_code != 200:
            raise NetworkError(f"unexpected status {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(f"invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise NetworkError("response is not a JSON object")

        ip = next((data[field] for field in _IP_FIELDS if data.get(field)), None)
        if not is_ipv4(ip):
            raise NetworkError(f"no valid IPv4 address in response: {ip!r}")

        return ip
