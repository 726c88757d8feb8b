"""Parsing of amqp:// and amqps:// connection URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass

from rabbitwire.errors import BadUrlError

GUEST = "guest"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5672
DEFAULT_SSL_PORT = 5671
DEFAULT_VHOST = "/"

_END = ""
_HEX = "0123456789abcdefABCDEF"
_PORT_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)", re.ASCII)


@dataclass
class ConnectionInfo:
    """Where and how to connect to a broker."""

    user: str = GUEST
    password: str = GUEST
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    vhost: str = DEFAULT_VHOST
    ssl: bool = False


class _Scanner:
    """Splits the URL into components at delimiters, decoding %XX escapes."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def next(self, colon_and_at_are_delims: bool) -> tuple[str, str]:
        """Return the next decoded component and the delimiter that ended it."""
        text = self._text
        out: list[str] = []
        while True:
            if self._pos >= len(text):
                return "".join(out), _END
            ch = text[self._pos]
            self._pos += 1
            if ch in ":@" and not colon_and_at_are_delims:
                out.append(ch)
            elif ch in ":@/?#[]":
                return "".join(out), ch
            elif ch == "%":
                digits = text[self._pos : self._pos + 2]
                if len(digits) != 2 or any(d not in _HEX for d in digits):
                    raise BadUrlError(f"bad percent-encoding in {text!r}")
                value = int(digits, 16)
                if value > 0x7F:
                    raise BadUrlError(f"percent-encoded byte out of range in {text!r}")
                out.append(chr(value))
                self._pos += 2
            else:
                out.append(ch)


def _parse_port(text: str) -> int:
    match = _PORT_RE.fullmatch(text)
    if match is None:
        raise BadUrlError(f"bad port {text!r}")
    port = int(match.group(1))
    if not 0 <= port <= 65535:
        raise BadUrlError(f"port {port} out of range")
    return port


def parse_url(url: str) -> ConnectionInfo:
    """Parse ``amqp[s]://[user[:password]@]host[:port][/vhost]``.

    Missing parts keep their defaults. Raises BadUrlError when the URL is
    malformed.
    """
    info = ConnectionInfo()
    if url.startswith("amqp://"):
        rest = url[len("amqp://") :]
    elif url.startswith("amqps://"):
        rest = url[len("amqps://") :]
        info.port = DEFAULT_SSL_PORT
        info.ssl = True
    else:
        raise BadUrlError(f"URL must start with amqp:// or amqps://: {url!r}")

    scanner = _Scanner(rest)
    host, delim = scanner.next(True)
    port: str | None = None

    if delim == ":":
        # Either a port or the password part of the user info; decided below.
        port, delim = scanner.next(True)

    if delim == "@":
        info.user = host
        if port is not None:
            info.password = port
        port = None
        host, delim = scanner.next(True)

    if delim == "[":
        if port is not None or host:
            raise BadUrlError(f"misplaced '[' in {url!r}")
        address, delim = scanner.next(False)
        if delim != "]":
            raise BadUrlError(f"unterminated IPv6 address in {url!r}")
        info.host = address
        trailing, delim = scanner.next(True)
        if trailing:
            raise BadUrlError(f"text after IPv6 address in {url!r}")
    elif host:
        info.host = host

    if delim == ":":
        port, delim = scanner.next(True)

    if port is not None:
        info.port = _parse_port(port)

    if delim == "/":
        vhost, delim = scanner.next(True)
        if delim != _END:
            raise BadUrlError(f"unexpected {delim!r} in vhost of {url!r}")
        info.vhost = vhost
    elif delim != _END:
        raise BadUrlError(f"unexpected {delim!r} in {url!r}")

    return info