"""Fetch a page over HTTP/1.1 and copy the raw response to standard output."""

from __future__ import annotations

import socket
import sys
from pathlib import Path
from typing import BinaryIO

_CHUNK = 4096


def build_request(host: str, path: str) -> bytes:
    """The HTTP request sent for ``path`` on ``host``."""
    return (
        f"GET {path} HTTP/1.1\r\n"
        f"Host: {host}\r\n"
        "Connection: close\r\n"
        "\r\n"
    ).encode()


def get_url(host: str, path: str, out: BinaryIO) -> None:
    """Request ``path`` from ``host`` and write everything received to ``out``."""
    print(f"Function called: get_url({host}, {path})", file=sys.stderr)
    with socket.create_connection((host, "http")) as conn:
        conn.sendall(build_request(host, path))
        while chunk := conn.recv(_CHUNK):
            out.write(chunk)


def main(argv: list[str] | None = None) -> int:
    """Command entry point: ``webget HOST PATH``."""
    args = sys.argv[1:] if argv is None else argv
    prog = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "webget"
    if len(args) != 2:
        print(f"Usage: {prog} HOST PATH", file=sys.stderr)
        print(f"\tExample: {prog} stanford.edu /class/cs144", file=sys.stderr)
        return 1
    host, path = args
    out = sys.stdout.buffer
    try:
        get_url(host, path, out)
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1
    out.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())