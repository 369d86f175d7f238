"""
    TTL parsing - decimal seconds or BIND style unit suffixes

    >>> parse_ttl("3600")
    3600
    >>> parse_ttl("1h")
    3600
    >>> parse_ttl("1W2d3H4m5S")
    788645
    >>> parse_ttl("4294967296")
    Traceback (most recent call last):
    ...
    ValueError: TTL out of range [4294967296]
    >>> parse_ttl("1x")
    Traceback (most recent call last):
    ...
    ValueError: Invalid TTL [1x]
"""

import re

MAX_TTL = 0xFFFFFFFF

secs = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}

TTL_UNIT = re.compile(r"([0-9]+)([smhdw])", re.IGNORECASE)
TTL_FORM = re.compile(r"(?:[0-9]+[smhdw])+", re.IGNORECASE)


def parse_time(s: str) -> int:
    """Parse time spec, either plain seconds or a sequence of
    number/unit pairs (s/m/h/d/w)

    Returns:
        number of seconds
    """
    if s.isascii() and s.isdigit():
        return int(s)
    if not TTL_FORM.fullmatch(s):
        raise ValueError(f"Invalid TTL [{s}]")
    return sum(int(n) * secs[unit.lower()] for n, unit in TTL_UNIT.findall(s))


def parse_ttl(s: str) -> int:
    """Parse TTL, checking that it fits an unsigned 32-bit field"""
    ttl = parse_time(s)
    if ttl > MAX_TTL:
        raise ValueError(f"TTL out of range [{s}]")
    return ttl


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod().failed == 0 else 1)
