"""
repositories/state_repository.py

Responsibility: Persists and retrieves the last-known external IP as a single
line in a plain-text file.
Does NOT: fetch IPs, call the DNS provider, or decide when to save.
"""

from __future__ import annotations

import logging
import os
import tempfile

from exceptions import StateIoError
from validation import is_ipv4

logger = logging.getLogger(__name__)


class StateRepository:
    """
    File-backed store for the baseline IP (the address last written to DNS).

    NOTE: Runs are assumed not to overlap. If two runs do race, the later
    save wins; the worst outcome is a stale cached IP that the next run
    corrects.
    """

    def __init__(self, path: str) -> None:
        """
        Args:
            path: Location of the state file, e.g.
                  /var/lib/cloudflare-ip-updater/last_ip.txt.
        """
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def ensure_directory(self) -> None:
        """
        Creates the state file's parent directory if it does not exist.

        Raises:
            StateIoError: If the directory cannot be created.
        """
        directory = os.path.dirname(self._path)
        if not directory:
            return
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise StateIoError(f"Could not create state directory {directory}: {exc}") from exc

    def load_last_ip(self) -> str | None:
        """
        Returns the stored IP, or None when there is no usable prior state.

        A missing file, a read error and content that is not an IPv4 address
        all count as "no prior state".
        """
        if not os.path.exists(self._path):
            return None

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                ip = f.read().strip()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading last IP from %s: %s", self._path, exc)
            return None

        if not is_ipv4(ip):
            logger.warning("Ignoring invalid content in %s: %r", self._path, ip)
            return None
        return ip

    def save_ip(self, ip: str) -> None:
        """
        Replaces the stored IP.

        The value is written to a temp file in the same directory and moved
        into place with os.replace, so readers never see a partial write.

        Args:
            ip: The IPv4 address to store.

        Raises:
            StateIoError: If the file cannot be written.
        """
        directory = os.path.dirname(self._path) or "."
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".last_ip_", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(ip)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)
        except OSError as exc:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)
            raise StateIoError(f"Could not save IP to {self._path}: {exc}") from exc

        logger.debug("Saved IP %s to %s", ip, self._path)
