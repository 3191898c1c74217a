#!/usr/bin/env python3
"""addrhooks CLI — manage address callbacks on a running server.

    # Register a callback URL for an address
    addrhooks-cli add-address-callback <address> <callbackUrl>

    # Show all callback URLs registered for an address
    addrhooks-cli list-address-callbacks <address>

    # Remove a callback URL from an address
    addrhooks-cli remove-address-callback <address> <callbackUrl>

The server is reached at ``$ADDRHOOKS_API_URL`` (default
``http://localhost:3003``).
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any

import httpx

DEFAULT_API_URL = "http://localhost:3003"

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE = 2

# command -> (endpoint, argument names)
_COMMANDS: dict[str, tuple[str, tuple[str, ...]]] = {
    "add-address-callback": ("/api/v1/add-address-callback", ("address", "url")),
    "list-address-callbacks": ("/api/v1/list-address-callbacks", ("address",)),
    "remove-address-callback": ("/api/v1/remove-address-callback", ("address", "url")),
}


def _call(client: httpx.Client, path: str, body: dict[str, str]) -> tuple[Any, int]:
    """POST *body* to *path*; return (data or error body, exit code)."""
    try:
        response = client.post(path, json=body)
    except httpx.HTTPError as exc:
        return {"code": "connection-error", "message": str(exc)}, EXIT_ERROR
    try:
        content = response.json()
    except ValueError:
        content = {"code": "bad-response", "message": response.text}
    if response.status_code >= 400:
        return content, EXIT_ERROR
    if isinstance(content, dict):
        return content.get("data"), EXIT_SUCCESS
    return content, EXIT_SUCCESS


def _print_result(cmd: str, data: Any) -> None:
    if cmd == "list-address-callbacks" and isinstance(data, list):
        for url in data:
            print(url)
        return
    print(json.dumps(data, indent=2))


def main(argv: list[str] | None = None, *, client: httpx.Client | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(__doc__)
        return EXIT_USAGE

    cmd = args[0].lower()
    if cmd not in _COMMANDS:
        print(f"Unknown command: {cmd}")
        print(__doc__)
        return EXIT_USAGE

    path, names = _COMMANDS[cmd]
    if len(args) - 1 != len(names):
        placeholders = " ".join(f"<{n}>" for n in names)
        print(f"Usage: addrhooks-cli {cmd} {placeholders}")
        return EXIT_USAGE

    body = dict(zip(names, args[1:], strict=True))
    own_client = client is None
    if client is None:
        client = httpx.Client(
            base_url=os.getenv("ADDRHOOKS_API_URL", DEFAULT_API_URL),
            timeout=30.0,
        )
    try:
        data, code = _call(client, path, body)
    finally:
        if own_client:
            client.close()

    if code != EXIT_SUCCESS:
        print(json.dumps(data, indent=2), file=sys.stderr)
        return code
    _print_result(cmd, data)
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
