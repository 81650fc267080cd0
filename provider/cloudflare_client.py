"""
provider/cloudflare_client.py

Responsibility: Implements the DNSProvider protocol using the Cloudflare REST API.
All Cloudflare HTTP calls are concentrated here; no other file may call the
Cloudflare API directly.
Does NOT: read configuration, compare IPs, or touch the state file.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import (
    ProviderApiError,
    RecordNotFoundError,
    UpdateFailedError,
    ZoneNotFoundError,
)
from provider.dns_provider import DnsRecord

logger = logging.getLogger(__name__)

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"

# Used only when the existing record carries no TTL
DEFAULT_TTL = 3600


class CloudflareClient:
    """
    Implements DNSProvider for the Cloudflare DNS REST API (v4).

    All outbound Cloudflare requests go through the injected httpx.AsyncClient,
    making this class fully testable without real network calls (use respx.mock).

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; timeout and lifetime are
          owned by the caller
        - DNSProvider: this class satisfies the protocol contract
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_token: str,
        base_url: str = CLOUDFLARE_API_URL,
    ) -> None:
        """
        Initialises the client with an HTTP client and a Cloudflare API token.

        Args:
            http_client: An httpx.AsyncClient shared for the whole run.
            api_token: A Cloudflare API token with Zone:Read and DNS:Edit
                       permissions.
            base_url: API root; overridable for tests.
        """
        self._client = http_client
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    # ---------------------------------------------------------------------------
    # Generic request executor
    # ---------------------------------------------------------------------------

    async def call(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Sends an authenticated request to the Cloudflare API.

        Args:
            method: HTTP verb ("GET", "PUT", "POST").
            path: Path below the API root, e.g. "/zones".
            body: Optional JSON request body.
            params: Optional query-string parameters.

        Returns:
            The parsed JSON response body, or an empty dict for an empty body.

        Raises:
            ProviderApiError: If the request cannot be sent, the status is
                              outside 200-299, or a 2xx body is not JSON.
        """
        url = f"{self._base_url}{path}"
        logger.debug("%s %s params=%s body=%s", method.upper(), url, params, body)

        try:
            response = await self._client.request(
                method.upper(), url, headers=self._headers, params=params, json=body
            )
        except httpx.RequestError as exc:
            raise ProviderApiError(
                None, f"Network error calling {method.upper()} {url}: {exc}"
            ) from exc

        result = self._parse_body(response)

        if not 200 <= response.status_code < 300:
            raise ProviderApiError(response.status_code, self._error_message(result, response.text))

        if result is None and response.text.strip():
            raise ProviderApiError(
                response.status_code, f"Invalid JSON in response: {response.text[:200]}"
            )

        return result or {}

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def resolve_zone_id(self, domain: str) -> str:
        """
        Looks up the zone ID for a domain by exact name.

        Args:
            domain: The zone name, e.g. "example.com".

        Returns:
            The ID of the first matching zone in Cloudflare's order.

        Raises:
            ZoneNotFoundError: If the account has no zone with that name.
            ProviderApiError: If the API call fails or the result is malformed.
        """
        logger.info("Looking up Zone ID for domain: %s", domain)
        data = await self.call("GET", "/zones", params={"name": domain})

        zone_id = self._first_id(data, "zone")
        if zone_id is None:
            raise ZoneNotFoundError(f"Domain {domain} not found in Cloudflare account")

        logger.info("Found Zone ID: %s", zone_id)
        return zone_id

    async def resolve_record_id(self, zone_id: str, record_name: str, record_type: str) -> str:
        """
        Looks up a DNS record ID by fully-qualified name and type.

        Args:
            zone_id: The Cloudflare zone ID.
            record_name: The fully-qualified DNS name.
            record_type: The record type, e.g. "A".

        Returns:
            The ID of the first matching record in Cloudflare's order.

        Raises:
            RecordNotFoundError: If no record matches.
            ProviderApiError: If the API call fails or the result is malformed.
        """
        logger.info("Looking up DNS Record ID for: %s (%s)", record_name, record_type)
        data = await self.call(
            "GET",
            f"/zones/{zone_id}/dns_records",
            params={"type": record_type, "name": record_name},
        )

        record_id = self._first_id(data, "DNS record")
        if record_id is None:
            raise RecordNotFoundError(
                f"DNS record {record_name} ({record_type}) not found in Cloudflare"
            )

        logger.info("Found DNS Record ID: %s", record_id)
        return record_id

    async def get_record_content(self, zone_id: str, record_id: str) -> str | None:
        """
        Returns the record's current content, or None if it cannot be read.

        Only used to log what DNS currently points at; failures here must
        never abort a run.
        """
        try:
            data = await self.call("GET", f"/zones/{zone_id}/dns_records/{record_id}")
        except ProviderApiError as exc:
            logger.warning("Error getting current DNS record: %s", exc)
            return None

        raw = data.get("result")
        if not isinstance(raw, dict):
            return None
        return raw.get("content")

    async def update_record(
        self,
        zone_id: str,
        record_id: str,
        record_name: str,
        record_type: str,
        new_ip: str,
    ) -> DnsRecord:
        """
        Points an existing record at a new IP address.

        The record is read first so its TTL and proxy flag survive the PUT.

        Args:
            zone_id: The Cloudflare zone ID.
            record_id: The Cloudflare record ID.
            record_name: The fully-qualified DNS name to write.
            record_type: The record type to write, e.g. "A".
            new_ip: The new IPv4 address.

        Returns:
            The updated DnsRecord as confirmed by Cloudflare.

        Raises:
            UpdateFailedError: If Cloudflare answers 2xx with success=false.
            ProviderApiError: If any API call fails.
        """
        path = f"/zones/{zone_id}/dns_records/{record_id}"

        existing = (await self.call("GET", path)).get("result") or {}
        if not isinstance(existing, dict):
            raise ProviderApiError(
                None, f"Unexpected DNS record shape from Cloudflare: {existing!r:.200}"
            )

        ttl = existing.get("ttl")
        payload: dict[str, Any] = {
            "type": record_type,
            "name": record_name,
            "content": new_ip,
            "ttl": DEFAULT_TTL if ttl is None else ttl,
            "proxied": bool(existing.get("proxied") or False),
        }

        data = await self.call("PUT", path, payload)

        # NOTE: Cloudflare wraps all responses in {"success": bool, "result": ...}
        if not data.get("success"):
            raise UpdateFailedError(
                None,
                f"Failed to update DNS record {record_name}: "
                f"{self._error_message(data, str(data.get('errors', [])))}",
            )

        logger.info("Successfully updated DNS record %s to %s", record_name, new_ip)

        raw = data.get("result")
        if isinstance(raw, dict) and raw.get("id"):
            return self._parse_record(raw)
        return DnsRecord(
            id=record_id,
            name=record_name,
            content=new_ip,
            type=record_type,
            ttl=payload["ttl"],
            proxied=payload["proxied"],
        )

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any] | None:
        """
        Decodes a JSON object body; returns None for empty or non-JSON bodies.
        """
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    @staticmethod
    def _first_id(data: dict[str, Any], kind: str) -> str | None:
        """
        Returns the "id" of the first item in a list response, or None if empty.

        Raises:
            ProviderApiError: If "result" is not a list of objects with an id.
        """
        items = data.get("result") or []
        if not isinstance(items, list):
            raise ProviderApiError(
                None, f"Unexpected {kind} list shape from Cloudflare: {items!r:.200}"
            )
        if not items:
            return None

        first = items[0]
        if not isinstance(first, dict) or not first.get("id"):
            raise ProviderApiError(
                None, f"Cloudflare returned a {kind} without an id: {first!r:.200}"
            )
        return str(first["id"])

    @staticmethod
    def _error_message(body: dict[str, Any] | None, fallback: str) -> str:
        """
        Joins the messages of Cloudflare's "errors" list, or returns `fallback`.
        """
        errors = (body or {}).get("errors")
        if isinstance(errors, list):
            messages = [
                str(e["message"]) for e in errors if isinstance(e, dict) and e.get("message")
            ]
            if messages:
                return ", ".join(messages)
        return fallback

    @staticmethod
    def _parse_record(raw: dict[str, Any]) -> DnsRecord:
        """
        Converts a raw Cloudflare API record dict into a typed DnsRecord.

        Args:
            raw: A single record object from the Cloudflare API response.

        Returns:
            A DnsRecord populated from the raw dict.
        """
        return DnsRecord(
            id=raw["id"],
            name=raw.get("name", ""),
            content=raw.get("content", ""),
            type=raw.get("type", "A"),
            ttl=raw.get("ttl", DEFAULT_TTL),
            proxied=raw.get("proxied", False),
        )
