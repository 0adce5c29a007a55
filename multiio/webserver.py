"""Reactor that answers every request with a fixed HTTP page."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from multiio.echo import DEFAULT_PORT
from multiio.reactor import Connection, Reactor, init_server

BUFFER_LENGTH = 1024

_BODY = (
    b"<html><head><title>multiio</title></head>"
    b"<body><h1>multiio</h1></body></html>\r\n\r\n"
)


def http_response() -> bytes:
    """Return the complete HTTP response sent to every client."""
    head = (
        "HTTP/1.1 200 OK\r\n"
        "Accept-Ranges: bytes\r\n"
        f"Content-Length: {len(_BODY)}\r\n"
        "Content-Type: text/html\r\n"
        "Date: Sat, 06 Aug 2023 13:16:46 GMT\r\n\r\n"
    )
    return head.encode("ascii") + _BODY


class HttpReactor(Reactor):
    """Reactor whose reply to any received data is the fixed HTTP page."""

    def __init__(self, buffer_length: int = BUFFER_LENGTH) -> None:
        super().__init__(buffer_length)

    def process(self, conn: Connection) -> None:
        conn.wbuffer = bytearray(http_response())
        conn.rbuffer.clear()


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the fixed page on one port; return the exit status."""
    parser = argparse.ArgumentParser(prog="multiio-web", description="Minimal HTTP server")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    try:
        listener = init_server(args.port, args.host)
    except OSError as exc:
        print(f"bind: {exc.strerror}", file=sys.stderr)
        return 1
    with HttpReactor() as reactor:
        reactor.add_listener(listener)
        try:
            reactor.run()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())