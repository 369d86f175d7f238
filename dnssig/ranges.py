"""
    Set-once properties that restrict an attribute to a defined integer
    range or instance type (throws ValueError).

    Values are checked before being packed with struct, and may only be
    assigned once (throws AttributeError), which keeps record values
    immutable after construction.

    >>> class T:
    ...     a = range_property('a', -100, 100)
    ...     b = B('b')
    ...     c = H('c')
    ...     d = I('d')
    ...     e = instance_property('e', bytes)
    >>> t = T()
    >>> t.a = 100
    >>> t.a
    100
    >>> t.a = 99
    Traceback (most recent call last):
    ...
    AttributeError: Attribute 'a' is read-only
    >>> t.b = 256
    Traceback (most recent call last):
    ...
    ValueError: Attribute 'b' must be between 0-255 [256]
    >>> t.c = 'blah'
    Traceback (most recent call last):
    ...
    ValueError: Attribute 'c' must be between 0-65535 [blah]
    >>> t.d = 4294967295
    >>> t.e = "text"
    Traceback (most recent call last):
    ...
    ValueError: Attribute 'e' must be instance of ...

    >>> check_range("test", 123, 0, 255)
    >>> check_range("test", 999, 0, 255)
    Traceback (most recent call last):
    ...
    ValueError: Attribute 'test' must be between 0-255 [999]
    >>> check_range("test", True, 0, 255)
    Traceback (most recent call last):
    ...
    ValueError: Attribute 'test' must be between 0-255 [True]
"""


def _is_int(val):
    return isinstance(val, int) and not isinstance(val, bool)


def check_range(name, val, min, max):
    if not (_is_int(val) and min <= val <= max):
        raise ValueError(f"Attribute {name!r} must be between {min}-{max} [{val}]")


def frozen_property(attr, check=None):
    """Property which may be assigned once, after `check(attr, val)` passes"""
    slot = f"_{attr}"

    def getter(obj):
        return getattr(obj, slot)

    def setter(obj, val):
        if hasattr(obj, slot):
            raise AttributeError(f"Attribute {attr!r} is read-only")
        if check is not None:
            check(attr, val)
        setattr(obj, slot, val)

    return property(getter, setter)


def instance_property(attr, types):
    def check(name, val):
        if not isinstance(val, types):
            raise ValueError(f"Attribute {name!r} must be instance of {types} [{type(val)}]")

    return frozen_property(attr, check)


def range_property(attr, min, max):
    return frozen_property(attr, lambda name, val: check_range(name, val, min, max))


def B(attr):
    """
    Unsigned Byte
    """
    return range_property(attr, 0, 255)


def H(attr):
    """
    Unsigned Short
    """
    return range_property(attr, 0, 65535)


def I(attr):
    """
    Unsigned Long
    """
    return range_property(attr, 0, 4294967295)


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.ELLIPSIS).failed == 0 else 1)
