"""Echo servers built on select, poll and epoll."""

from __future__ import annotations

import argparse
import select
import socket
import sys
import threading
from collections.abc import Sequence

DEFAULT_PORT = 2048
DEFAULT_BACKLOG = 10
RECV_SIZE = 128
MAX_EVENTS = 1024
_POLL_INTERVAL = 0.1


def create_listener(
    port: int = DEFAULT_PORT, host: str = "", backlog: int = DEFAULT_BACKLOG
) -> socket.socket:
    """Return a TCP socket bound to ``host:port`` and listening."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock


def _stopped(stop: threading.Event | None) -> bool:
    return stop is not None and stop.is_set()


def _interval(stop: threading.Event | None) -> float | None:
    return None if stop is None else _POLL_INTERVAL


def _accept(listener: socket.socket) -> socket.socket:
    client, _ = listener.accept()
    print(f"clientfd: {client.fileno()}")
    return client


def _echo(sock: socket.socket) -> bool:
    """Echo one read back to the peer; return False once the peer is gone."""
    try:
        data = sock.recv(RECV_SIZE)
    except ConnectionError:
        data = b""
    if not data:
        print("disconnect")
        return False
    try:
        sock.sendall(data)
    except ConnectionError:
        print("disconnect")
        return False
    return True


def serve_select(listener: socket.socket, stop: threading.Event | None = None) -> None:
    """Serve echo clients with ``select`` until ``stop`` is set."""
    clients: list[socket.socket] = []
    try:
        while not _stopped(stop):
            readable, _, _ = select.select([listener, *clients], [], [], _interval(stop))
            for sock in readable:
                if sock is listener:
                    clients.append(_accept(listener))
                elif not _echo(sock):
                    clients.remove(sock)
                    sock.close()
    finally:
        for sock in clients:
            sock.close()


def serve_poll(listener: socket.socket, stop: threading.Event | None = None) -> None:
    """Serve echo clients with ``poll`` until ``stop`` is set."""
    poller = select.poll()
    poller.register(listener.fileno(), select.POLLIN)
    clients: dict[int, socket.socket] = {}
    interval = _interval(stop)
    timeout_ms = None if interval is None else int(interval * 1000)
    try:
        while not _stopped(stop):
            for fd, mask in poller.poll(timeout_ms):
                if fd == listener.fileno():
                    client = _accept(listener)
                    clients[client.fileno()] = client
                    poller.register(client.fileno(), select.POLLIN)
                elif mask & (select.POLLIN | select.POLLHUP | select.POLLERR):
                    sock = clients[fd]
                    if not _echo(sock):
                        poller.unregister(fd)
                        del clients[fd]
                        sock.close()
    finally:
        for sock in clients.values():
            sock.close()


def serve_epoll(listener: socket.socket, stop: threading.Event | None = None) -> None:
    """Serve echo clients with ``epoll`` until ``stop`` is set."""
    clients: dict[int, socket.socket] = {}
    interval = _interval(stop)
    try:
        with select.epoll() as ep:
            ep.register(listener.fileno(), select.EPOLLIN)
            while not _stopped(stop):
                for fd, mask in ep.poll(-1 if interval is None else interval, MAX_EVENTS):
                    if fd == listener.fileno():
                        client = _accept(listener)
                        clients[client.fileno()] = client
                        ep.register(client.fileno(), select.EPOLLIN)
                    elif mask & (select.EPOLLIN | select.EPOLLHUP | select.EPOLLERR):
                        sock = clients[fd]
                        if not _echo(sock):
                            ep.unregister(fd)
                            del clients[fd]
                            sock.close()
    finally:
        for sock in clients.values():
            sock.close()


_SERVERS = {"select": serve_select, "poll": serve_poll, "epoll": serve_epoll}


def main(argv: Sequence[str] | None = None) -> int:
    """Run an echo server; return the process exit status."""
    parser = argparse.ArgumentParser(prog="multiio-echo", description="TCP echo server")
    parser.add_argument("--mode", choices=sorted(_SERVERS), default="epoll")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    try:
        listener = create_listener(args.port, args.host)
    except OSError as exc:
        print(f"bind: {exc.strerror}", file=sys.stderr)
        return 1
    with listener:
        try:
            _SERVERS[args.mode](listener)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())