"""
provider/dns_provider.py

Responsibility: Defines the DNSProvider Protocol and the DnsRecord and
RecordTarget value objects.
Does NOT: make HTTP calls, read the state file, or implement any provider logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Record name that addresses the zone apex (the bare domain)
APEX_RECORD_NAME = "@"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


def record_fqdn(record_name: str, domain: str) -> str:
    """
    Builds the fully-qualified record name.

    Args:
        record_name: Subdomain label, or "@" for the apex record.
        domain: The bare domain, e.g. "example.com".

    Returns:
        "example.com" for "@", otherwise "<record_name>.example.com".
    """
    if record_name == APEX_RECORD_NAME:
        return domain
    return f"{record_name}.{domain}"


@dataclass
class DnsRecord:
    """
    Represents a single DNS record as returned by a DNSProvider.
    """

    # Provider-assigned unique identifier for the record
    id: str

    # Fully-qualified DNS name, e.g. "home.example.com"
    name: str

    # Current content; an IPv4 address for A records
    content: str

    # Record type, e.g. "A"
    type: str

    # TTL in seconds; 1 means "automatic" on Cloudflare
    ttl: int

    # Whether the record is proxied through the provider's CDN
    proxied: bool


@dataclass(frozen=True)
class RecordTarget:
    """
    The one record this updater manages, plus whatever identifiers are known.

    zone_id and record_id start as configured (possibly None) and are filled
    in by ReconcileService.resolve_identifiers().
    """

    domain: str
    record_name: str
    record_type: str
    zone_id: str | None = None
    record_id: str | None = None

    @property
    def fqdn(self) -> str:
        return record_fqdn(self.record_name, self.domain)

    @property
    def is_resolved(self) -> bool:
        return bool(self.zone_id and self.record_id)


# ---------------------------------------------------------------------------
# Abstract interface
# ---------------------------------------------------------------------------


@runtime_checkable
class DNSProvider(Protocol):
    """
    Abstract protocol for the DNS operations the updater needs.

    ReconcileService depends on this abstraction, never on CloudflareClient
    directly, so tests can substitute an AsyncMock.
    """

    async def resolve_zone_id(self, domain: str) -> str:
        """
        Returns the identifier of the zone named exactly `domain`.

        Raises:
            ZoneNotFoundError: If no zone matches.
            ProviderApiError: If the API call fails.
        """
        ...

    async def resolve_record_id(self, zone_id: str, record_name: str, record_type: str) -> str:
        """
        Returns the identifier of the record matching FQDN and type.

        Raises:
            RecordNotFoundError: If no record matches.
            ProviderApiError: If the API call fails.
        """
        ...

    async def get_record_content(self, zone_id: str, record_id: str) -> str | None:
        """
        Returns the record's current content, or None on any error.
        """
        ...

    async def update_record(
        self,
        zone_id: str,
        record_id: str,
        record_name: str,
        record_type: str,
        new_ip: str,
    ) -> DnsRecord:
        """
        Points the record at `new_ip`, preserving its TTL and proxy flag.

        Raises:
            UpdateFailedError: If the provider reports success=false.
            ProviderApiError: If the API call fails.
        """
        ...
