"""Callback-driven reactor that echoes data on many listening ports."""

from __future__ import annotations

import argparse
import selectors
import socket
import sys
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from multiio.echo import DEFAULT_BACKLOG, DEFAULT_PORT, create_listener

BUFFER_LENGTH = 512
PORT_COUNT = 20
_REPORT_EVERY = 1000
_POLL_INTERVAL = 0.1


@dataclass(eq=False)
class Connection:
    """A socket under the reactor's control, with its read and write buffers."""

    sock: socket.socket
    listening: bool = False
    rbuffer: bytearray = field(default_factory=bytearray)
    wbuffer: bytearray = field(default_factory=bytearray)

    @property
    def fd(self) -> int:
        return self.sock.fileno()


def init_server(
    port: int = DEFAULT_PORT, host: str = "", backlog: int = DEFAULT_BACKLOG
) -> socket.socket:
    """Return a listening socket on ``host:port``."""
    return create_listener(port, host, backlog)


class Reactor:
    """Event loop that accepts, reads and writes through readiness callbacks."""

    def __init__(self, buffer_length: int = BUFFER_LENGTH) -> None:
        self.buffer_length = buffer_length
        self.connections: dict[int, Connection] = {}
        self._selector = selectors.DefaultSelector()
        self._mark = time.monotonic()

    def __enter__(self) -> Reactor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_listener(self, sock: socket.socket) -> Connection:
        """Watch a listening socket for incoming connections."""
        sock.setblocking(False)
        conn = Connection(sock, listening=True)
        self._selector.register(sock, selectors.EVENT_READ, conn)
        return conn

    def accept(self, sock: socket.socket) -> Connection | None:
        """Accept one client from ``sock``; return None if none was waiting."""
        try:
            client, _ = sock.accept()
        except OSError:
            return None
        client.setblocking(False)
        conn = Connection(client)
        self._selector.register(client, selectors.EVENT_READ, conn)
        self.connections[conn.fd] = conn

        if conn.fd % _REPORT_EVERY == _REPORT_EVERY - 1:
            now = time.monotonic()
            time_used = int((now - self._mark) * 1000)
            self._mark = now
            print(f"clientfd : {conn.fd}, time_used: {time_used}")
        return conn

    def _drop(self, conn: Connection) -> None:
        self._selector.unregister(conn.sock)
        self.connections.pop(conn.fd, None)
        conn.sock.close()

    def on_readable(self, conn: Connection) -> int:
        """Read what the client sent; return the byte count, or -1 on disconnect."""
        try:
            data = conn.sock.recv(self.buffer_length - len(conn.rbuffer))
        except BlockingIOError:
            return 0
        except ConnectionError:
            data = b""
        if not data:
            print("disconnect")
            self._drop(conn)
            return -1
        conn.rbuffer += data
        self.process(conn)
        self._selector.modify(conn.sock, selectors.EVENT_WRITE, conn)
        return len(data)

    def on_writable(self, conn: Connection) -> int:
        """Send the write buffer and go back to waiting for input."""
        try:
            count = conn.sock.send(conn.wbuffer)
        except BlockingIOError:
            count = 0
        except ConnectionError:
            self._drop(conn)
            return -1
        self._selector.modify(conn.sock, selectors.EVENT_READ, conn)
        return count

    def process(self, conn: Connection) -> None:
        """Turn received data into a reply: echo it back."""
        conn.wbuffer = bytearray(conn.rbuffer)
        conn.rbuffer.clear()

    def run_once(self, timeout: float | None = None) -> int:
        """Wait for readiness once and dispatch; return the number of events."""
        events = self._selector.select(timeout)
        for key, mask in events:
            conn: Connection = key.data
            if mask & selectors.EVENT_READ:
                if conn.listening:
                    self.accept(conn.sock)
                else:
                    self.on_readable(conn)
            elif mask & selectors.EVENT_WRITE:
                self.on_writable(conn)
        return len(events)

    def run(self, stop: threading.Event | None = None) -> None:
        """Dispatch events until ``stop`` is set, or forever without one."""
        timeout = None if stop is None else _POLL_INTERVAL
        while stop is None or not stop.is_set():
            self.run_once(timeout)

    def close(self) -> None:
        """Close every watched socket and the selector."""
        for key in list(self._selector.get_map().values()):
            self._selector.unregister(key.fileobj)
            key.fileobj.close()
        self.connections.clear()
        self._selector.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the echo reactor on a range of ports; return the exit status."""
    parser = argparse.ArgumentParser(prog="multiio-reactor", description="Echo reactor")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--count", type=int, default=PORT_COUNT)
    args = parser.parse_args(argv)

    with Reactor() as reactor:
        for offset in range(args.count):
            try:
                reactor.add_listener(init_server(args.port + offset, args.host))
            except OSError as exc:
                print(f"bind: {exc.strerror}", file=sys.stderr)
                return 1
        try:
            reactor.run()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())