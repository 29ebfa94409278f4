"""Listening socket, connected clients and the event loop that serves them."""

from __future__ import annotations

import os
import selectors
import socket
from typing import Any

from webservd.config import ServerConfig
from webservd.logger import Logger

__all__ = ["ServerSocket", "Client", "ServerManager"]

_BACKLOG = 10
_POLL_INTERVAL = 0.5


class ServerSocket:
    """A TCP socket bound to the host and port of one server configuration."""

    def __init__(self, config: ServerConfig, logger: Logger | None = None) -> None:
        self.host = config.host
        self.port = config.port
        self.request_size = config.client_max_body_size
        self.logger = logger if logger is not None else Logger()
        self.running = True
        self._sock: socket.socket | None = None

    @property
    def address(self) -> tuple[str, int]:
        """The (host, port) the socket is bound to."""
        if self._sock is None:
            raise RuntimeError("Server socket is not set up")
        host, port = self._sock.getsockname()[:2]
        return host, port

    def setup(self) -> bool:
        """Create, bind and listen; raise RuntimeError on any failure."""
        self.logger.info("Creating socket")
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            raise RuntimeError("Socket creation failed") from exc
        self._sock = sock

        self.logger.info("Setting setsockopt")
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as exc:
            raise RuntimeError("Setsockopt failed") from exc

        try:
            infos = socket.getaddrinfo(
                self.host or None,
                self.port,
                socket.AF_INET,
                socket.SOCK_STREAM,
                0,
                socket.AI_PASSIVE,
            )
        except socket.gaierror as exc:
            raise RuntimeError("Address resolution failed") from exc

        self.logger.info("Binding socket")
        try:
            sock.bind(infos[0][4])
        except OSError as exc:
            raise RuntimeError("Bind failed") from exc

        self.logger.info("Listening on socket")
        try:
            sock.listen(_BACKLOG)
        except OSError as exc:
            raise RuntimeError("Listen failed") from exc
        self.logger.debug(f"Server listening on port {self.address[1]}")
        return True

    def accept_client(self) -> socket.socket:
        """Accept one pending connection and return its socket."""
        if self._sock is None:
            raise OSError("Server socket is not set up")
        connection, _ = self._sock.accept()
        return connection

    def respond(self, client: Client, response: str | bytes) -> int:
        """Send ``response`` to ``client`` and return the number of bytes sent."""
        data = response.encode() if isinstance(response, str) else response
        fd = client.fileno()
        try:
            sent = client.send(data)
        except OSError as exc:
            self.logger.error(
                f"Failed to send response to client FD {fd}: {exc.strerror or exc}"
            )
            raise
        self.logger.info(f"Sent {sent} bytes to client FD {fd}")
        return sent

    def fileno(self) -> int:
        return self._sock.fileno() if self._sock is not None else -1

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            self.logger.info("Server socket closed safely.")

    def __enter__(self) -> ServerSocket:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class Client:
    """One accepted connection on a server socket."""

    def __init__(self, server_socket: ServerSocket) -> None:
        self.request_size = server_socket.request_size
        self.raw_request = ""
        self._logger = server_socket.logger
        try:
            self._sock: socket.socket | None = server_socket.accept_client()
        except OSError as exc:
            raise RuntimeError("Failed to accept client connection") from exc

    def fileno(self) -> int:
        return self._sock.fileno() if self._sock is not None else -1

    def read_request(self) -> str:
        """Read at most ``request_size - 1`` bytes and keep them as the raw request."""
        if self._sock is None:
            raise OSError("Client connection is closed")
        data = self._sock.recv(max(self.request_size - 1, 0))
        self.raw_request = data.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        self._logger.debug("Received a request and saved to buffer")
        return self.raw_request

    def send(self, data: bytes) -> int:
        if self._sock is None:
            raise OSError("Client connection is closed")
        return self._sock.send(data)

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class ServerManager:
    """Serves one configured server: accepts clients and reads their requests."""

    def __init__(self, config: ServerConfig, logger: Logger | None = None) -> None:
        self.config = config
        self.logger = logger if logger is not None else Logger()
        self.socket = ServerSocket(config, self.logger)
        self.clients: dict[int, Client] = {}
        self.running = False
        self._selector = selectors.DefaultSelector()
        try:
            self.socket.setup()
            fd = self.socket.fileno()
            self._set_non_blocking(fd)
            self._selector.register(fd, selectors.EVENT_READ, None)
        except Exception:
            self.close()
            raise
        self.running = True
        self.logger.debug(f"[Server socket][{fd}] initialized with selector")

    def _set_non_blocking(self, fd: int) -> None:
        try:
            os.set_blocking(fd, False)
        except OSError as exc:
            self.logger.error(f"Failed to set non-blocking mode for fd {fd}")
            raise RuntimeError("Failed to set non-blocking mode") from exc
        self.logger.info(f"Set fd {fd} to non-blocking mode")

    def create_client(self) -> Client | None:
        """Accept a pending connection; log and return None if that fails."""
        client: Client | None = None
        try:
            client = Client(self.socket)
            fd = client.fileno()
            self._set_non_blocking(fd)
            try:
                self._selector.register(fd, selectors.EVENT_READ, client)
            except (OSError, ValueError, KeyError) as exc:
                raise RuntimeError(f"Failed to add fd {fd} to selector") from exc
        except Exception as exc:
            if client is not None:
                client.close()
            self.logger.error(f"Failed to create client: {exc}")
            return None
        self.clients[fd] = client
        self.logger.info(f"[{fd}] New client connected")
        return client

    def _remove_client(self, client: Client) -> None:
        fd = client.fileno()
        try:
            self._selector.unregister(fd)
        except (KeyError, ValueError):
            pass
        client.close()
        self.clients.pop(fd, None)
        self.logger.info(f"Closed and removed client fd {fd}")

    def handle_client(self, client: Client) -> None:
        """Read the client's request and echo it to the log stream."""
        fd = client.fileno()
        try:
            raw = client.read_request()
        except BlockingIOError:
            return
        except OSError as exc:
            self.logger.error(f"Client [{fd}] handling failed: {exc}")
            self._remove_client(client)
            return
        if not raw:
            self._remove_client(client)
            return
        stream = self.logger.stream
        stream.write(raw)
        stream.flush()

    def server_loop(self, max_events: int | None = None) -> int:
        """Dispatch events until stopped, or until ``max_events`` were handled.

        Returns the number of events handled.
        """
        handled = 0
        while self.running:
            for key, _ in self._selector.select(timeout=_POLL_INTERVAL):
                if key.data is None:
                    self.create_client()
                elif key.fd in self.clients:
                    self.handle_client(key.data)
                handled += 1
                if max_events is not None and handled >= max_events:
                    return handled
        return handled

    def stop(self) -> None:
        self.running = False

    def close(self) -> None:
        self.running = False
        for client in list(self.clients.values()):
            self._remove_client(client)
        self._selector.close()
        self.socket.close()

    def __enter__(self) -> ServerManager:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()