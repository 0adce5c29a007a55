import socket
import threading

from multiio.echo import create_listener
from multiio.reactor import Connection, init_server
from multiio.webserver import HttpReactor, http_response, main


def _recv_exact(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def test_response_status_line():
    assert http_response().startswith(b"HTTP/1.1 200 OK\r\n")


def test_response_headers_from_source():
    head, _, _ = http_response().partition(b"\r\n\r\n")
    lines = head.split(b"\r\n")
    assert b"Accept-Ranges: bytes" in lines
    assert b"Content-Type: text/html" in lines
    assert b"Date: Sat, 06 Aug 2023 13:16:46 GMT" in lines


def test_content_length_matches_body():
    head, _, body = http_response().partition(b"\r\n\r\n")
    headers = dict(line.split(b": ", 1) for line in head.split(b"\r\n")[1:])
    assert int(headers[b"Content-Length"]) == len(body)
    assert body.startswith(b"<html>")


def test_process_replaces_request_with_response():
    left, right = socket.socketpair()
    with left, right, HttpReactor() as reactor:
        conn = Connection(left)
        conn.rbuffer += b"GET /index.html HTTP/1.1\r\n\r\n"
        reactor.process(conn)
        assert bytes(conn.wbuffer) == http_response()
        assert conn.rbuffer == b""


def test_serves_response_over_tcp():
    expected = http_response()
    with HttpReactor() as reactor:
        listener = init_server(0, "127.0.0.1")
        reactor.add_listener(listener)
        stop = threading.Event()
        thread = threading.Thread(target=reactor.run, args=(stop,), daemon=True)
        thread.start()
        try:
            with socket.create_connection(listener.getsockname(), timeout=5) as client:
                client.sendall(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
                first = _recv_exact(client, len(expected))
                client.sendall(b"GET /abc.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
                second = _recv_exact(client, len(expected))
        finally:
            stop.set()
            thread.join(5)
    assert first == expected
    assert second == expected


def test_main_reports_bind_failure(capsys):
    with create_listener(0) as busy:
        status = main(["--port", str(busy.getsockname()[1])])
    assert status == 1
    assert "bind" in capsys.readouterr().err