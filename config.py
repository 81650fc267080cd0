"""
config.py

Responsibility: Reads the KEY=VALUE configuration file via python-dotenv
(with environment variable fallback) and validates it into an immutable Settings object.
Does NOT: make HTTP calls, touch the state file, or configure logging.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import dotenv_values

from exceptions import ConfigError
from provider.dns_provider import APEX_RECORD_NAME

logger = logging.getLogger(__name__)

CONFIG_FILE = "/etc/cloudflare-ip-updater/config"
IP_STORAGE_FILE = "/var/lib/cloudflare-ip-updater/last_ip.txt"

# Environment variable that overrides CONFIG_FILE when --config is not given
CONFIG_PATH_ENV = "CLOUDFLARE_IP_UPDATER_CONFIG"

DEFAULT_RECORD_TYPE = "A"
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    """
    Validated, immutable configuration for a single updater run.

    Built once at process entry by load_settings() and handed to each
    component; nothing reads configuration from anywhere else.
    """

    # Cloudflare API token with Zone:Read and DNS:Edit permissions
    api_token: str

    # Domain whose zone holds the managed record, e.g. "example.com"
    domain: str

    # Provider identifiers; None means "look it up by name"
    zone_id: str | None = None
    dns_record_id: str | None = None

    # Subdomain label, or "@" for the apex record
    dns_record_name: str = APEX_RECORD_NAME
    dns_record_type: str = DEFAULT_RECORD_TYPE

    # Plain-text file holding the last IP written to DNS
    ip_storage_file: str = IP_STORAGE_FILE

    # Per-request timeout in seconds for every outbound HTTP call
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    log_level: str = "INFO"
    log_file: str | None = None


def resolve_config_path(cli_path: str | None = None, environ: Mapping[str, str] | None = None) -> str:
    """
    Returns the configuration file path: --config, then env override, then default.
    """
    env = os.environ if environ is None else environ
    return cli_path or env.get(CONFIG_PATH_ENV) or CONFIG_FILE


def load_settings(path: str = CONFIG_FILE, environ: Mapping[str, str] | None = None) -> Settings:
    """
    Loads and validates settings from the configuration file.

    Each key falls back to the environment variable of the same name when
    the file does not set it. Empty values are treated as unset.

    Args:
        path: Path of the KEY=VALUE configuration file.
        environ: Environment mapping; defaults to os.environ.

    Returns:
        A validated Settings instance.

    Raises:
        ConfigError: If the file is missing or unreadable, if
                     CLOUDFLARE_API_TOKEN or DOMAIN is not set, or if
                     HTTP_TIMEOUT is not a positive number.
    """
    env = os.environ if environ is None else environ

    if not os.path.exists(path):
        raise ConfigError(f"Configuration file not found: {path}")

    # NOTE: dotenv_values() only returns the parsed pairs; it never writes to
    # os.environ, so the environment fallback below stays explicit.
    try:
        file_values = dotenv_values(path, interpolate=False, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read configuration file {path}: {exc}") from exc

    def _get(key: str, default: str | None = None) -> str | None:
        value = file_values.get(key) or env.get(key) or ""
        value = value.strip()
        return value or default

    api_token = _get("CLOUDFLARE_API_TOKEN")
    if not api_token:
        raise ConfigError(f"CLOUDFLARE_API_TOKEN must be set in {path}")

    domain = _get("DOMAIN")
    if not domain:
        raise ConfigError(f"DOMAIN must be set in {path}")

    raw_timeout = _get("HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
    try:
        http_timeout = float(raw_timeout)
    except ValueError as exc:
        raise ConfigError(f"HTTP_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from exc
    if not http_timeout > 0:
        raise ConfigError(f"HTTP_TIMEOUT must be positive, got {raw_timeout!r}")

    settings = Settings(
        api_token=api_token,
        domain=domain,
        zone_id=_get("CLOUDFLARE_ZONE_ID"),
        dns_record_id=_get("CLOUDFLARE_DNS_RECORD_ID"),
        dns_record_name=_get("DNS_RECORD_NAME", APEX_RECORD_NAME),
        dns_record_type=_get("DNS_RECORD_TYPE", DEFAULT_RECORD_TYPE).upper(),
        ip_storage_file=_get("IP_STORAGE_FILE", IP_STORAGE_FILE),
        http_timeout=http_timeout,
        log_level=_get("LOG_LEVEL", "INFO").upper(),
        log_file=_get("LOG_FILE"),
    )
    logger.debug("Loaded settings from %s for domain %s", path, settings.domain)
    return settings
