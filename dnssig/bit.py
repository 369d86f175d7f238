"""
    Bit-field helpers used when decoding label length octets

    >>> get_bits(0xc0, 6, 2)
    3
    >>> get_bits(0x3f, 6, 2)
    0
    >>> hex(set_bits(12, 3, 14, 2))
    '0xc00c'
"""


def get_bits(data: int, offset: int, bits: int = 1) -> int:
    """Extract `bits` bits from `data` starting at bit `offset`"""
    mask = ((1 << bits) - 1) << offset
    return (data & mask) >> offset


def set_bits(data: int, value: int, offset: int, bits: int = 1) -> int:
    """Return `data` (16 bit) with `bits` bits at `offset` replaced by `value`"""
    mask = ((1 << bits) - 1) << offset
    clear = 0xFFFF ^ mask
    return (data & clear) | ((value << offset) & mask)


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod().failed == 0 else 1)
