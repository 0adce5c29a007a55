# multiio

Small TCP servers that show different ways of serving many clients from a
single thread:

- an echo server driven by `select`, `poll` or `epoll` (`multiio.echo`);
- an event reactor that listens on a range of ports and echoes what it
  receives (`multiio.reactor`);
- a minimal HTTP server built on the reactor that answers every request with a
  fixed HTML page (`multiio.webserver`).

## Installation

```
pip install .
```

The `epoll` variant needs Linux; `select` and `poll` work on POSIX systems.
The reactor uses the `selectors` module's default selector.

## Command line

Echo server, by default on port 2048 using `epoll`:

```
multiio-echo
multiio-echo --mode poll --port 3000 --host 127.0.0.1
```

`--mode` is one of `select`, `poll` or `epoll`. The server reads up to 128
bytes at a time from each client and sends them straight back.

Reactor echo server, by default listening on ports 2048 to 2067:

```
multiio-reactor
multiio-reactor --port 4000 --count 5
```

It prints a timing line for every client whose descriptor number ends in 999,
which helps when measuring how fast many connections are accepted.

HTTP server on port 2048:

```
multiio-webserver
multiio-webserver --port 8080
```

Each command takes `--host` and `--port`, and `--help` to list its options.
If a port cannot be bound, the command prints `bind: <reason>` and exits
with status 1. Ctrl-C stops a server.

## Library use

```python
import threading
from multiio.echo import create_listener, serve_poll

stop = threading.Event()
listener = create_listener(2048, "127.0.0.1", 10)
threading.Thread(target=serve_poll, args=(listener, stop), daemon=True).start()
# ... later
stop.set()
```

`serve_select`, `serve_poll` and `serve_epoll` all take a listening socket and
an optional `threading.Event`; without an event they run until interrupted.

The reactor can be driven step by step:

```python
from multiio.reactor import Reactor, init_server

with Reactor() as reactor:
    reactor.add_listener(init_server(2048, "127.0.0.1", 10))
    reactor.run_once(1.0)
```

`Reactor.run(stop)` dispatches events until the event is set. Each accepted
client is a `Connection` with `rbuffer` and `wbuffer` byte buffers; the
reactor reads into `rbuffer` (at most `buffer_length` bytes, 512 by default),
calls `process(conn)`, then sends `wbuffer` once the socket is writable.

To change what a connection sends back, subclass `Reactor` and override
`process(conn)`. `multiio.webserver.HttpReactor` does this and replies with
the bytes from `http_response()`.

## Limits

The HTTP server does not parse requests and does not serve files: whatever a
client sends, it gets the same fixed `200 OK` page with a fixed `Date` header.
There is no routing, no keep-alive handling and no TLS.

## Tests

```
pip install ".[test]"
pytest
```