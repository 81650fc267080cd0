"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class UpdaterError(Exception):
    """
    Base class for every error the updater raises on purpose.

    updater.main() catches this type, logs the message and exits non-zero.
    """


class ConfigError(UpdaterError):
    """
    Raised by config.load_settings() when the configuration file is missing
    or a required setting (API token, domain) is absent or invalid.
    """


class NetworkError(UpdaterError):
    """
    Raised when a single IP lookup service cannot be used.

    IpService catches this and moves on to the next service; it only
    escapes as NoIpAvailableError once every service has failed.
    """


class NoIpAvailableError(UpdaterError):
    """
    Raised by IpService when no lookup service returned a valid IPv4 address.
    """


class ProviderApiError(UpdaterError):
    """
    Raised by CloudflareClient when an API call fails.

    Carries the HTTP status (None for transport failures such as timeouts)
    and the message extracted from the response's error list.
    """

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"Cloudflare API error: {message}")
        else:
            super().__init__(f"Cloudflare API error ({status}): {message}")


class UpdateFailedError(ProviderApiError):
    """
    Raised when Cloudflare answers a record update with a 2xx status but
    reports success=false in the body.
    """


class ResolutionError(UpdaterError):
    """
    Raised when the zone or record identifier cannot be resolved.
    """


class ZoneNotFoundError(ResolutionError):
    """
    Raised when no Cloudflare zone matches the configured domain.
    """


class RecordNotFoundError(ResolutionError):
    """
    Raised when no DNS record matches the configured name and type.
    """


class StateIoError(UpdaterError):
    """
    Raised by StateRepository when the state directory cannot be created
    or the last-known IP cannot be written.
    """
