"""Single-threaded TCP echo and HTTP servers using select, poll, epoll and a reactor."""

__version__ = "0.1.0"
__all__ = ["echo", "reactor", "webserver"]