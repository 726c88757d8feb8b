"""A plain TCP transport for talking to a broker."""

from __future__ import annotations

import socket
from datetime import timedelta

from rabbitwire.errors import (
    ConnectionClosedError,
    DeadlineExceededError,
    InvalidParameterError,
    NeedReadError,
    NeedWriteError,
    SocketClosedError,
    SocketError,
    SocketInUseError,
)

_MSG_NOSIGNAL = getattr(socket, "MSG_NOSIGNAL", 0)
_MSG_MORE = getattr(socket, "MSG_MORE", 0)
_TCP_NOPUSH = getattr(socket, "TCP_NOPUSH", None)


def _timeout_seconds(timeout: float | int | timedelta | None) -> float | None:
    if timeout is None:
        return None
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout < 0:
        raise InvalidParameterError(f"negative timeout {timeout}")
    return float(timeout)


class TcpSocket:
    """A TCP connection with non-blocking sends and receives.

    Would-block conditions surface as NeedReadError / NeedWriteError, a peer
    that hung up as ConnectionClosedError, and any other failure as
    SocketError with the OS error number kept in ``last_error``.
    """

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._corked = False
        self.last_error = 0

    def __enter__(self) -> TcpSocket:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._sock is not None:
            try:
                self.close()
            except SocketError:
                pass

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def _require_open(self) -> socket.socket:
        if self._sock is None:
            raise SocketClosedError()
        return self._sock

    def open(self, host: str, port: int, timeout: float | int | timedelta | None = None) -> None:
        """Connect to ``host:port`` within ``timeout`` seconds (None waits forever)."""
        if self._sock is not None:
            raise SocketInUseError()
        seconds = _timeout_seconds(timeout)
        try:
            sock = socket.create_connection((host, port), timeout=seconds)
        except socket.timeout as exc:
            raise DeadlineExceededError(f"connecting to {host}:{port} timed out") from exc
        except OSError as exc:
            self.last_error = exc.errno or 0
            raise SocketError(f"cannot connect to {host}:{port}: {exc}") from exc
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            pass
        sock.setblocking(False)
        self._sock = sock
        self._corked = False

    def _set_nopush(self, more: bool) -> None:
        sock = self._require_open()
        if more and not self._corked:
            try:
                sock.setsockopt(socket.IPPROTO_TCP, _TCP_NOPUSH, 1)
            except OSError as exc:
                self.last_error = exc.errno or 0
                raise SocketError(f"cannot set TCP_NOPUSH: {exc}") from exc
            self._corked = True
        elif not more and self._corked:
            try:
                sock.setsockopt(socket.IPPROTO_TCP, _TCP_NOPUSH, 0)
            except OSError as exc:
                self.last_error = exc.errno or 0
            else:
                self._corked = False

    def send(self, data: bytes | bytearray | memoryview, more: bool = False) -> int:
        """Send ``data``; ``more`` hints that further data follows at once.

        Returns the number of bytes the kernel accepted.
        """
        sock = self._require_open()
        flags = _MSG_NOSIGNAL
        if _MSG_MORE:
            if more:
                flags |= _MSG_MORE
        elif _TCP_NOPUSH is not None:
            self._set_nopush(more)
        try:
            sent = sock.send(data, flags)
        except BlockingIOError as exc:
            self.last_error = exc.errno or 0
            raise NeedWriteError() from exc
        except OSError as exc:
            self.last_error = exc.errno or 0
            raise SocketError(str(exc)) from exc
        self.last_error = 0
        return sent

    def recv(self, size: int) -> bytes:
        """Receive up to ``size`` bytes."""
        sock = self._require_open()
        try:
            data = sock.recv(size)
        except BlockingIOError as exc:
            self.last_error = exc.errno or 0
            raise NeedReadError() from exc
        except OSError as exc:
            self.last_error = exc.errno or 0
            raise SocketError(str(exc)) from exc
        if not data:
            raise ConnectionClosedError()
        return data

    def close(self) -> None:
        sock = self._require_open()
        try:
            sock.close()
        except OSError as exc:
            self.last_error = exc.errno or 0
            raise SocketError(str(exc)) from exc
        self._sock = None
        self._corked = False

    def fileno(self) -> int:
        """Descriptor of the open socket, or -1 when closed."""
        if self._sock is None:
            return -1
        return self._sock.fileno()

    def attach(self, sock: socket.socket | int) -> None:
        """Use an already connected socket (or descriptor) as this transport."""
        if isinstance(sock, int):
            sock = socket.socket(fileno=sock)
        self._sock = sock
        self._corked = False