"""Absolute timestamps and signed durations with nanosecond resolution."""

from __future__ import annotations

import math
import os
import time
from dataclasses import dataclass
from typing import Optional, Union

NSEC_PER_SEC = 1_000_000_000

_U64 = 1 << 64
_I64_HALF = 1 << 63

Number = Union[int, float]


def _to_uint64(value: int) -> int:
    return value % _U64


def _to_int64(value: int) -> int:
    value %= _U64
    return value - _U64 if value >= _I64_HALF else value


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    if b == 0:
        raise ZeroDivisionError("division of a Duration by a zero Duration")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


@dataclass(frozen=True, order=True)
class Duration:
    """A relative time interval, stored as a signed 64-bit count of nanoseconds."""

    nsec: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "nsec", _to_int64(int(self.nsec)))

    @classmethod
    def from_seconds(cls, seconds: float) -> Duration:
        """Build a duration from seconds, truncating toward zero."""
        return cls(math.trunc(seconds * float(NSEC_PER_SEC)))

    def to_seconds(self) -> float:
        """Return the duration in seconds."""
        return self.nsec / float(NSEC_PER_SEC)

    @classmethod
    def microsecond(cls) -> Duration:
        return cls(1000)

    @classmethod
    def millisecond(cls) -> Duration:
        return cls(1_000_000)

    @classmethod
    def second(cls) -> Duration:
        return cls(NSEC_PER_SEC)

    def __bool__(self) -> bool:
        return self.nsec != 0

    def __neg__(self) -> Duration:
        return Duration(-self.nsec)

    def __add__(self, other: object) -> Duration:
        if isinstance(other, Duration):
            return Duration(self.nsec + other.nsec)
        return NotImplemented

    def __sub__(self, other: object) -> Duration:
        if isinstance(other, Duration):
            return Duration(self.nsec - other.nsec)
        return NotImplemented

    def __mul__(self, factor: object) -> Duration:
        if isinstance(factor, bool):
            return NotImplemented
        if isinstance(factor, int):
            return Duration(self.nsec * factor)
        if isinstance(factor, float):
            return Duration.from_seconds(self.to_seconds() * factor)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, divisor: object) -> Duration:
        if isinstance(divisor, (int, float)) and not isinstance(divisor, bool):
            return Duration.from_seconds(self.to_seconds() / divisor)
        return NotImplemented

    def __floordiv__(self, other: object) -> int:
        """Number of whole ``other`` intervals in this one, rounded toward zero."""
        if isinstance(other, Duration):
            return _trunc_div(self.nsec, other.nsec)
        return NotImplemented

    def __mod__(self, other: object) -> Duration:
        if isinstance(other, Duration):
            q = _trunc_div(self.nsec, other.nsec)
            return Duration(self.nsec - q * other.nsec)
        return NotImplemented

    def __str__(self) -> str:
        return f"{self.to_seconds():g}s"


@dataclass(frozen=True, order=True)
class TimeStamp:
    """An absolute time, stored as unsigned 64-bit nanoseconds since the Unix epoch.

    The largest 64-bit value marks an invalid timestamp.
    """

    nsec: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "nsec", _to_uint64(int(self.nsec)))

    @classmethod
    def invalid(cls) -> TimeStamp:
        """Return the invalid timestamp."""
        return cls(_U64 - 1)

    def is_valid(self) -> bool:
        return self.nsec != _U64 - 1

    @classmethod
    def now(cls) -> TimeStamp:
        """Return the current time, at microsecond resolution."""
        return cls(time.time_ns() // 1000 * 1000)

    @classmethod
    def mtime(
        cls, path: Union[str, os.PathLike], bad: Optional[TimeStamp] = None
    ) -> TimeStamp:
        """Return the modification time of ``path`` in whole seconds.

        If the path cannot be examined, ``bad`` is returned, or the invalid
        timestamp when ``bad`` is not given.
        """
        try:
            info = os.stat(path)
        except OSError:
            return cls.invalid() if bad is None else bad
        return cls((info.st_mtime_ns // NSEC_PER_SEC) * NSEC_PER_SEC)

    @classmethod
    def from_seconds(cls, seconds: float) -> TimeStamp:
        """Build a timestamp from seconds since the epoch; negatives give zero."""
        if seconds < 0:
            return cls()
        return cls(math.floor(seconds * float(NSEC_PER_SEC)))

    def to_seconds(self) -> float:
        """Return seconds since the epoch; precision may be lost."""
        return self.nsec / float(NSEC_PER_SEC)

    def __add__(self, other: object) -> TimeStamp:
        if isinstance(other, Duration):
            return TimeStamp(self.nsec + other.nsec)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: object) -> Union[TimeStamp, Duration]:
        if isinstance(other, TimeStamp):
            return Duration(self.nsec - other.nsec)
        if isinstance(other, Duration):
            return TimeStamp(self.nsec - other.nsec)
        return NotImplemented

    def __str__(self) -> str:
        tm = time.localtime(int(self.to_seconds()))
        head = time.strftime("%a %b", tm)
        tail = time.strftime("%H:%M:%S %Z %Y", tm)
        return f"{head} {tm.tm_mday:2d} {tail}"