"""
services/reconcile_service.py

Responsibility: Orchestrates one updater run: resolves the zone and record
identifiers, compares the current external IP with the stored baseline, and
updates DNS plus the baseline only when they differ.
Does NOT: make HTTP calls directly, parse configuration, or set up logging.
"""

from __future__ import annotations

import dataclasses
import enum
import logging

from exceptions import ResolutionError, UpdaterError
from provider.dns_provider import DNSProvider, RecordTarget
from repositories.state_repository import StateRepository
from services.ip_service import IpService

logger = logging.getLogger(__name__)

# Outcomes returned by check_and_update()
INITIALIZED = "initialized"
UNCHANGED = "unchanged"
UPDATED = "updated"


class ResolutionState(enum.Enum):
    """Progress of zone/record identifier resolution within one run."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FATAL = "fatal"


class ReconcileService:
    """
    Keeps one DNS record pointed at the host's external IP.

    The stored baseline only advances after the provider accepted the new
    address, so a failed update is retried on the next scheduled run.

    Collaborators:
        - DNSProvider: abstract interface satisfied by CloudflareClient
        - IpService: provides the current external IP
        - StateRepository: reads/writes the baseline IP
    """

    def __init__(
        self,
        dns_provider: DNSProvider,
        ip_service: IpService,
        state: StateRepository,
        target: RecordTarget,
    ) -> None:
        """
        Initialises the service with all required collaborators.

        Args:
            dns_provider: Any DNSProvider implementation (e.g. CloudflareClient).
            ip_service: Provides the current external IP of the host machine.
            state: Persists the baseline IP between runs.
            target: The managed record; identifiers may still be unset.
        """
        self._provider = dns_provider
        self._ip_service = ip_service
        self._state = state
        self._target = target
        self._resolution = (
            ResolutionState.RESOLVED if target.is_resolved else ResolutionState.UNRESOLVED
        )

    @property
    def resolution_state(self) -> ResolutionState:
        return self._resolution

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def resolve_identifiers(self) -> RecordTarget:
        """
        Fills in the zone and record IDs that were not configured.

        Idempotent: once resolved, later calls return immediately without
        touching the provider.

        Returns:
            The fully-resolved RecordTarget.

        Raises:
            ResolutionError: If the zone or record does not exist, or if an
                             earlier attempt in this run already failed.
            ProviderApiError: If a lookup call fails.
        """
        if self._resolution is ResolutionState.RESOLVED:
            return self._target
        if self._resolution is ResolutionState.FATAL:
            raise ResolutionError("Zone/record resolution already failed for this run")

        self._resolution = ResolutionState.RESOLVING
        try:
            zone_id = self._target.zone_id or await self._provider.resolve_zone_id(
                self._target.domain
            )
            record_id = self._target.record_id or await self._provider.resolve_record_id(
                zone_id, self._target.fqdn, self._target.record_type
            )
        except UpdaterError:
            self._resolution = ResolutionState.FATAL
            raise

        self._target = dataclasses.replace(self._target, zone_id=zone_id, record_id=record_id)
        self._resolution = ResolutionState.RESOLVED
        return self._target

    async def check_and_update(self) -> str:
        """
        Runs one check: fetch IP, compare with the baseline, update if changed.

        Returns:
            "initialized": no baseline existed; the current IP was saved
            "unchanged":   the IP matches the baseline; nothing was done
            "updated":     DNS was updated and the baseline advanced

        Raises:
            NoIpAvailableError: If the external IP cannot be determined.
            ResolutionError: If identifiers are needed but cannot be resolved.
            ProviderApiError: If the DNS update fails; the baseline is kept.
            StateIoError: If the new baseline cannot be written.
        """
        current_ip = await self._ip_service.resolve_external_ip()
        last_ip = self._state.load_last_ip()

        if last_ip is None:
            logger.info("No previous IP found. Saving current IP: %s", current_ip)
            self._state.save_ip(current_ip)
            return INITIALIZED

        if last_ip == current_ip:
            logger.info("IP unchanged (%s) - no update needed", current_ip)
            return UNCHANGED

        logger.info("IP changed from %s to %s", last_ip, current_ip)
        target = await self.resolve_identifiers()

        dns_content = await self._provider.get_record_content(target.zone_id, target.record_id)
        if dns_content is not None:
            logger.info("%s currently points at %s", target.fqdn, dns_content)

        logger.info("Updating Cloudflare DNS...")
        await self._provider.update_record(
            target.zone_id,
            target.record_id,
            target.fqdn,
            target.record_type,
            current_ip,
        )

        # Only advance the baseline once the provider accepted the change
        self._state.save_ip(current_ip)
        logger.info("Update complete!")
        return UPDATED
