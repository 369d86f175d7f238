"""
    SIG timestamp handling

    Signature expiration/inception times are absolute UTC instants with
    one second precision. On the wire they are unsigned 32-bit seconds
    since the epoch, in presentation form 14 digit `YYYYMMDDHHMMSS`
    strings.

    >>> t = from_text("20040101000000")
    >>> t
    datetime.datetime(2004, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    >>> to_wire(t)
    1072915200
    >>> to_text(from_wire(1070236800))
    '20031201000000'

    Calendar fields are not range checked - out of range values roll over

    >>> to_text(from_text("20041301000000"))
    '20050101000000'
    >>> to_text(from_text("20040230120000"))
    '20040301120000'
    >>> to_text(from_text("20031231240000"))
    '20040101000000'

    >>> from_text("2004010100000")
    Traceback (most recent call last):
    ...
    dnssig.sigtime.TimeFormatError: Invalid date '2004010100000' (expected YYYYMMDDHHMMSS)
    >>> from_text("19691231235959")
    Traceback (most recent call last):
    ...
    dnssig.sigtime.TimeFormatError: Date '19691231235959' outside 32-bit wire range
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Union

from dnssig.ranges import check_range

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MAX_WIRE = 0xFFFFFFFF

Timestamp = Union[datetime, int]


class TimeFormatError(ValueError):
    pass


def to_wire(ts: datetime) -> int:
    """Seconds since the epoch (UTC, truncated to whole seconds)"""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    seconds = calendar.timegm(ts.utctimetuple())
    check_range("timestamp", seconds, 0, MAX_WIRE)
    return seconds


def from_wire(seconds: int) -> datetime:
    check_range("timestamp", seconds, 0, MAX_WIRE)
    return EPOCH + timedelta(seconds=seconds)


def normalize(ts: Timestamp) -> datetime:
    """Return `ts` as an aware UTC datetime truncated to whole seconds

    Args:
        ts: `datetime` (naive values are taken to be UTC) or integer
            seconds since the epoch
    """
    if isinstance(ts, datetime):
        return from_wire(to_wire(ts))
    return from_wire(ts)


def to_text(ts: Timestamp) -> str:
    t = normalize(ts)
    return f"{t.year:04d}{t.month:02d}{t.day:02d}{t.hour:02d}{t.minute:02d}{t.second:02d}"


def from_text(s: str) -> datetime:
    """Parse 14 digit `YYYYMMDDHHMMSS` UTC date

    Only the length and digits are validated. Calendar fields roll over
    (month 13 is January of the following year, day 32 spills into the
    next month, and so on).

    Raises:
        TimeFormatError: if the string is malformed or the instant cannot
            be represented on the wire
    """
    if len(s) != 14 or not (s.isascii() and s.isdigit()):
        raise TimeFormatError(f"Invalid date {s!r} (expected YYYYMMDDHHMMSS)")
    year, month, day, hour, minute, second = (
        int(s[0:4]),
        int(s[4:6]),
        int(s[6:8]),
        int(s[8:10]),
        int(s[10:12]),
        int(s[12:14]),
    )
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        seconds = calendar.timegm((year, month, day, hour, minute, second))
    except (ValueError, OverflowError) as e:
        raise TimeFormatError(f"Invalid date {s!r}: {e}")
    if not 0 <= seconds <= MAX_WIRE:
        raise TimeFormatError(f"Date {s!r} outside 32-bit wire range")
    return from_wire(seconds)


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.IGNORE_EXCEPTION_DETAIL).failed == 0 else 1)
