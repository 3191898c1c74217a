"""Callback URL validation.

A heuristic filter that rejects obviously malformed strings before they are
persisted. It is not an RFC 3986 validator: some exotic but valid URLs are
rejected.
"""

from __future__ import annotations

import functools
import re
from urllib.parse import urlsplit

MAX_URL_LENGTH = 2083
MIN_URL_LENGTH = 3

URL_PATTERN = r"^(?:https?://)?[\w.-]+(?:\.[\w.-]+)+[\w\-._~:/?#\[\]@!$&'()*+,;=.]+$"


@functools.cache
def _url_regex() -> re.Pattern[str]:
    return re.compile(URL_PATTERN, re.ASCII)


def is_url(value: str) -> bool:
    """Return True if *value* looks like a usable callback URL.

    Args:
        value: Candidate URL string.

    Returns:
        Whether the string passes the length, structure and pattern checks.
    """
    if (
        not value
        or len(value) >= MAX_URL_LENGTH
        or len(value) <= MIN_URL_LENGTH
        or value.startswith(".")
    ):
        return False

    structural = value
    if ":" in value and "://" not in value:
        # host:port without a scheme; the prefix only helps the parser.
        structural = "http://" + value

    try:
        parts = urlsplit(structural)
        parts.port  # noqa: B018 - raises ValueError on a malformed port
    except ValueError:
        return False

    host = parts.netloc.rpartition("@")[2]
    if host.startswith("."):
        return False
    if not host and parts.path and "." not in parts.path:
        return False

    return _url_regex().match(value) is not None
