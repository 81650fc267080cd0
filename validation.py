"""
validation.py

Responsibility: Shared syntactic checks for values read from lookup services
and from the state file.
Does NOT: perform network calls, file I/O, or logging.
"""

from __future__ import annotations

import re
from typing import Any

# Syntactic check only: octets are not range-checked, so "999.999.999.999"
# passes. This matches what the lookup services are trusted to return.
IPV4_PATTERN = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}")


def is_ipv4(value: Any) -> bool:
    """
    Returns True if `value` is a string of four dot-separated 1-3 digit groups.
    """
    return isinstance(value, str) and IPV4_PATTERN.fullmatch(value) is not None
