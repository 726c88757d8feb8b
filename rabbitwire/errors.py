"""Status codes and the exception hierarchy used throughout the package."""

from __future__ import annotations

import enum


class Status(enum.Enum):
    """Failure conditions reported by the library, with their descriptions."""

    BAD_AMQP_DATA = "bad AMQP data"
    TABLE_TOO_BIG = "table too large for buffer"
    INVALID_PARAMETER = "invalid AMQP parameter value"
    BAD_URL = "bad AMQP URL"
    TIMEOUT = "operation timed out"
    TIMER_FAILURE = "timer failure"
    SOCKET_ERROR = "socket error"
    SOCKET_CLOSED = "socket is closed"
    SOCKET_INUSE = "socket already open"
    CONNECTION_CLOSED = "remote end closed the connection"
    NEED_READ = "socket needs to be read before continuing"
    NEED_WRITE = "socket needs to be written before continuing"

    @property
    def description(self) -> str:
        """Human-readable text for the status."""
        return self.value


class AmqpError(Exception):
    """Base class for every error raised by the package."""

    status: Status | None = None

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = self.status.description if self.status else "(unknown error)"
        super().__init__(message)
        self.message = message


class BadAmqpDataError(AmqpError):
    """Encoded data is truncated or malformed."""

    status = Status.BAD_AMQP_DATA


class TableTooBigError(AmqpError):
    """Encoded output does not fit in the space allowed for it."""

    status = Status.TABLE_TOO_BIG


class InvalidParameterError(AmqpError):
    """A parameter value is out of range or of an unknown kind."""

    status = Status.INVALID_PARAMETER


class BadUrlError(AmqpError):
    """A connection URL could not be parsed."""

    status = Status.BAD_URL


class DeadlineExceededError(AmqpError):
    """An operation did not complete before its deadline."""

    status = Status.TIMEOUT


class TimerFailureError(AmqpError):
    """The monotonic clock could not be read."""

    status = Status.TIMER_FAILURE


class SocketError(AmqpError):
    """The underlying socket reported an error."""

    status = Status.SOCKET_ERROR


class SocketClosedError(AmqpError):
    """The socket is not open."""

    status = Status.SOCKET_CLOSED


class SocketInUseError(AmqpError):
    """The socket is already open."""

    status = Status.SOCKET_INUSE


class ConnectionClosedError(AmqpError):
    """The peer closed the connection."""

    status = Status.CONNECTION_CLOSED


class NeedReadError(AmqpError):
    """A non-blocking socket has nothing to read yet."""

    status = Status.NEED_READ


class NeedWriteError(AmqpError):
    """A non-blocking socket cannot accept more data yet."""

    status = Status.NEED_WRITE