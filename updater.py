"""
updater.py

Responsibility: Command-line entry point. Parses arguments, loads settings,
wires the collaborators for a single run and maps errors to exit codes.
Does NOT: contain DNS business logic, IP lookup logic, or state file I/O.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence

import httpx

from config import Settings, load_settings, resolve_config_path
from exceptions import ConfigError, UpdaterError
from logger import configure_logging
from provider.cloudflare_client import CloudflareClient
from provider.dns_provider import RecordTarget
from repositories.state_repository import StateRepository
from services.ip_service import IpService
from services.reconcile_service import ReconcileService

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
Cloudflare IP Updater

Checks your external IP address and updates a Cloudflare DNS record when it
changes. Designed to run once per invocation from a systemd timer or cron.
"""

_EPILOG = """\
Configuration:
  Read from /etc/cloudflare-ip-updater/config (KEY=VALUE per line), or from the
  file named by --config or CLOUDFLARE_IP_UPDATER_CONFIG. Any key missing from
  the file is taken from the environment variable of the same name.

  Required settings:
    CLOUDFLARE_API_TOKEN       Your Cloudflare API token
    DOMAIN                     Your domain name (e.g. example.com)

  Optional settings (zone and record IDs are auto-detected if not provided):
    CLOUDFLARE_ZONE_ID         Your Cloudflare Zone ID
    CLOUDFLARE_DNS_RECORD_ID   Your DNS Record ID
    DNS_RECORD_NAME            @ for the root record, or a subdomain (default: @)
    DNS_RECORD_TYPE            DNS record type (default: A)
    IP_STORAGE_FILE            Last-known IP file
                               (default: /var/lib/cloudflare-ip-updater/last_ip.txt)
    HTTP_TIMEOUT               Seconds per HTTP request (default: 10)
    LOG_LEVEL                  DEBUG, INFO, WARNING or ERROR (default: INFO)
    LOG_FILE                   Also append log lines to this file

  Set DEBUG=1 in the environment to include tracebacks in error output.

Service management:
  sudo systemctl enable --now cloudflare-ip-updater.timer
  sudo journalctl -u cloudflare-ip-updater.service

To get a Cloudflare API token:
  1. Go to https://dash.cloudflare.com/profile/api-tokens
  2. Click "Create Token"
  3. Use the "Edit zone DNS" template, or a custom token with
     Zone:Zone:Read and Zone:DNS:Edit permissions
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudflare-ip-updater",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="configuration file (default: /etc/cloudflare-ip-updater/config)",
    )
    return parser


async def run(settings: Settings, http_client: httpx.AsyncClient | None = None) -> str:
    """
    Performs one full updater run with the given settings.

    Args:
        settings: Validated settings for this run.
        http_client: Optional client to use instead of creating one; the
                     caller keeps ownership of a client passed in.

    Returns:
        The check outcome ("initialized", "unchanged" or "updated").

    Raises:
        UpdaterError: On any fatal error.
    """
    state = StateRepository(settings.ip_storage_file)
    state.ensure_directory()

    if http_client is None:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            return await _run_with_client(settings, state, client)
    return await _run_with_client(settings, state, http_client)


def _target_from_settings(settings: Settings) -> RecordTarget:
    return RecordTarget(
        domain=settings.domain,
        record_name=settings.dns_record_name,
        record_type=settings.dns_record_type,
        zone_id=settings.zone_id,
        record_id=settings.dns_record_id,
    )


async def _run_with_client(
    settings: Settings,
    state: StateRepository,
    http_client: httpx.AsyncClient,
) -> str:
    cloudflare_client = CloudflareClient(http_client=http_client, api_token=settings.api_token)
    ip_service = IpService(http_client=http_client)
    service = ReconcileService(cloudflare_client, ip_service, state, _target_from_settings(settings))

    # Identifiers are resolved up front so a bad domain or record name fails
    # every run, not only the runs where the IP changed.
    await service.resolve_identifiers()
    return await service.check_and_update()


def main(argv: Sequence[str] | None = None) -> int:
    """
    Console-script entry point.

    Returns:
        0 on success, 1 on any fatal error. --help exits 0 via argparse
        before any network or state operation.
    """
    args = build_parser().parse_args(argv)

    configure_logging()
    try:
        settings = load_settings(resolve_config_path(args.config))
        try:
            configure_logging(settings.log_level, settings.log_file)
        except OSError as exc:
            raise ConfigError(f"Could not open LOG_FILE {settings.log_file}: {exc}") from exc
        asyncio.run(run(settings))
    except UpdaterError as exc:
        if os.environ.get("DEBUG"):
            logger.exception("Error: %s", exc)
        else:
            logger.error("Error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
