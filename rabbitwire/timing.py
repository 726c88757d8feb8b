"""Deadlines measured against the monotonic clock."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta

from rabbitwire.errors import InvalidParameterError, TimerFailureError

MS_PER_S = 1000
US_PER_MS = 1000
NS_PER_S = 1_000_000_000
NS_PER_MS = 1_000_000
NS_PER_US = 1000

_UINT64_MAX = 2**64 - 1


def monotonic_ns() -> int:
    """Current monotonic clock reading in nanoseconds; 0 means the clock failed."""
    return time.monotonic_ns()


def _now() -> int:
    now = monotonic_ns()
    if now == 0:
        raise TimerFailureError()
    return now


def _timeout_ns(timeout: float | int | timedelta) -> int:
    if isinstance(timeout, timedelta):
        if timeout < timedelta(0):
            raise InvalidParameterError(f"negative timeout {timeout}")
        return (timeout // timedelta(microseconds=1)) * NS_PER_US
    if timeout < 0:
        raise InvalidParameterError(f"negative timeout {timeout}")
    if isinstance(timeout, int):
        return timeout * NS_PER_S
    return int(round(timeout * NS_PER_S))


@dataclass(frozen=True, order=True)
class Deadline:
    """A point on the monotonic clock.

    Two values are special: 0 means "now" (a non-blocking poll) and
    2**64 - 1 means "never" (block without a time limit).
    """

    time_point_ns: int

    @classmethod
    def infinite(cls) -> Deadline:
        return cls(_UINT64_MAX)

    @classmethod
    def immediate(cls) -> Deadline:
        return cls(0)

    @classmethod
    def _after(cls, delta_ns: int) -> Deadline:
        point = _now() + delta_ns
        if point > _UINT64_MAX:
            raise InvalidParameterError("deadline lies beyond the clock's range")
        return cls(point)

    @classmethod
    def from_timeout(cls, timeout: float | int | timedelta | None) -> Deadline:
        """Deadline ``timeout`` seconds from now; None means no deadline."""
        if timeout is None:
            return cls.infinite()
        return cls._after(_timeout_ns(timeout))

    @classmethod
    def from_seconds(cls, seconds: int) -> Deadline:
        """Deadline whole ``seconds`` from now; zero or less means no deadline."""
        if seconds <= 0:
            return cls.infinite()
        return cls._after(seconds * NS_PER_S)

    @property
    def is_infinite(self) -> bool:
        return self.time_point_ns == _UINT64_MAX

    def _remaining_ns(self) -> int:
        if self.time_point_ns == 0:
            return 0
        return max(0, self.time_point_ns - _now())

    def ms_until(self) -> int | None:
        """Milliseconds left, as poll() wants them; None when there is no deadline."""
        if self.is_infinite:
            return None
        return self._remaining_ns() // NS_PER_MS

    def time_until(self) -> float | None:
        """Seconds left at microsecond resolution, as select() wants them."""
        if self.is_infinite:
            return None
        delta = self._remaining_ns()
        seconds, rest = divmod(delta, NS_PER_S)
        return seconds + (rest // NS_PER_US) / (NS_PER_S // NS_PER_US)

    def has_passed(self) -> bool:
        if self.is_infinite:
            return False
        return _now() > self.time_point_ns

    def first(self, other: Deadline) -> Deadline:
        """Whichever of the two deadlines comes first."""
        if self.time_point_ns < other.time_point_ns:
            return self
        return other