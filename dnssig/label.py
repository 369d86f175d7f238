"""
    DNSLabel/DNSBuffer - domain name handling & wire encoding/decoding

    `DNSBuffer` carries the compression context for a message: the table of
    names already written and the offsets they were written at.
"""

from __future__ import annotations

import re
import sys
from typing import Any

if sys.version_info < (3, 10):
    from typing_extensions import TypeAlias
else:
    from typing import TypeAlias

from dnssig.bit import get_bits, set_bits
from dnssig.buffer import Buffer, BufferError

# Printable characters other than the separator and escape are written as-is
LDH = set(range(33, 127)) - {ord("."), ord("\\")}
ESCAPE = re.compile(rb"\\([0-9][0-9][0-9])")

DNSLabelCreateTypes: TypeAlias = "list[bytes] | tuple[bytes, ...] | str | bytes | DNSLabel | None"
"""Type alias for types that can be used with `DNSLabel.__init__`"""


class DNSLabelError(Exception):
    """Exceptions relating to DNS Labels"""

    pass


class DNSLabel:
    """Container for DNS label (aka domain)

    Comparison and hashing are case-insensitive. Names are always absolute.

    ```pycon
    >>> l1 = DNSLabel("Example.COM.")
    >>> l1 == DNSLabel([b"example", b"com"])
    True
    >>> l1 == "example.com"
    True
    >>> l1
    <DNSLabel: 'Example.COM.'>
    >>> l1.add("www")
    <DNSLabel: 'www.Example.COM.'>
    >>> l1.label_count
    2
    >>> DNSLabel("*.example.com.").label_count
    2
    >>> DNSLabel(".").label_count
    0
    >>> str(DNSLabel("a\\\\009b.com"))
    'a\\\\009b.com.'
    >>> l2 = DNSLabel([b"a.b", b"c\\\\d"])
    >>> str(l2)
    'a\\\\046b.c\\\\092d.'
    >>> DNSLabel(str(l2)).label
    (b'a.b', b'c\\\\d')
    >>> DNSLabel("a\\\\.b").label
    (b'a.b',)
    >>> DNSLabel("a..b")
    Traceback (most recent call last):
    ...
    dnssig.label.DNSLabelError: Empty label component: 'a..b'

    ```
    """

    label: tuple[bytes, ...]

    def __init__(self, label: DNSLabelCreateTypes) -> None:
        """
        Args:
            label: Label can be specified as:
                - a list/tuple of byte strings
                - a byte string (split into components separated by b'.')
                - a string (`\\DDD` escapes are decoded, non-ascii names are
                  encoded according to RFC3490/IDNA)
        """
        if isinstance(label, DNSLabel):
            self.label = label.label
        elif isinstance(label, (list, tuple)):
            self.label = tuple(label)
        elif not label or label in (b".", "."):
            self.label = ()
        elif isinstance(label, str):
            try:
                if label.isascii():
                    raw = label.encode("ascii")
                else:
                    raw = label.encode("idna")
            except UnicodeError as e:
                raise DNSLabelError(f"Invalid name {label!r}: {e}")
            self.label = self._parse(raw, label)
        else:
            self.label = self._split(bytes(label), label)
        return

    @staticmethod
    def _parse(raw: bytes, source: Any) -> tuple[bytes, ...]:
        # Split on unescaped dots, decoding `\DDD` and `\X` escapes per label
        parts: list[bytes] = []
        current = bytearray()
        i = 0
        while i < len(raw):
            c = raw[i]
            if c == ord("\\"):
                m = ESCAPE.match(raw, i)
                if m:
                    value = int(m[1])
                    if value > 255:
                        raise DNSLabelError(f"Invalid escape \\{m[1].decode()}: {source!r}")
                    current.append(value)
                    i = m.end()
                    continue
                if i + 1 >= len(raw):
                    raise DNSLabelError(f"Dangling escape: {source!r}")
                current.append(raw[i + 1])
                i += 2
                continue
            if c == ord("."):
                if not current:
                    raise DNSLabelError(f"Empty label component: {source!r}")
                parts.append(bytes(current))
                current = bytearray()
            else:
                current.append(c)
            i += 1
        if current:
            parts.append(bytes(current))
        return tuple(parts)

    def check(self) -> DNSLabel:
        """Check the name fits the wire limits (253 characters, 63 per label)

        Raises:
            DNSLabelError: if the name is too long
        """
        if len(self) > 253:
            raise DNSLabelError(f"Domain label too long: {self!r}")
        for element in self.label:
            if len(element) > 63:
                raise DNSLabelError(f"Label component too long: {element!r}")
        return self

    @staticmethod
    def _split(raw: bytes, source: Any) -> tuple[bytes, ...]:
        if raw.endswith(b"."):
            raw = raw[:-1]
        parts = tuple(raw.split(b"."))
        if b"" in parts:
            raise DNSLabelError(f"Empty label component: {source!r}")
        return parts

    def add(self, name: DNSLabelCreateTypes) -> DNSLabel:
        """Prepend name to label

        Args:
            name: name to prepend

        Returns:
            new `DNSLabel`
        """
        new = DNSLabel(name)
        if self.label:
            new.label += self.label
        return new

    @property
    def label_count(self) -> int:
        """Number of labels, not counting the root or a leading wildcard"""
        if self.label and self.label[0] == b"*":
            return len(self.label) - 1
        return len(self.label)

    def lower(self) -> DNSLabel:
        return DNSLabel([l.lower() for l in self.label])

    def _decode(self, s: bytes) -> str:
        if set(s).issubset(LDH):
            return s.decode()
        return "".join([(chr(c) if (c in LDH) else "\\%03d" % c) for c in s])

    def __str__(self) -> str:
        return ".".join([self._decode(s) for s in self.label]) + "."

    def __repr__(self) -> str:
        return f"<DNSLabel: '{self}'>"

    def __hash__(self) -> int:
        return hash(tuple(l.lower() for l in self.label))

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __eq__(self, other: Any) -> bool:
        if type(other) != DNSLabel:
            return self.__eq__(DNSLabel(other))
        return [l.lower() for l in self.label] == [l.lower() for l in other.label]

    def __len__(self) -> int:
        return len(b".".join(self.label))


class DNSBuffer(Buffer):
    """Extends Buffer to provide DNS name encoding/decoding

    Attributes:
        data: buffer data
        names: compression context - offsets of names already written

    ```pycon
    >>> b = DNSBuffer()
    >>> b.encode_name("example.com.")
    >>> len(b)
    13
    >>> b.encode_name("www.example.com.")
    >>> len(b)
    19
    >>> b.encode_name_canonical("WWW.Example.COM.")
    >>> len(b)
    36
    >>> b.offset = 0
    >>> print(b.decode_name())
    example.com.
    >>> print(b.decode_name())
    www.example.com.
    >>> print(b.decode_name())
    www.example.com.

    >>> DNSBuffer(b"\\xc0\\x00").decode_name()
    Traceback (most recent call last):
    ...
    dnssig.buffer.BufferError: Invalid pointer in DNSLabel [offset=2,pointer=0,length=2]
    >>> DNSBuffer(b"\\x41abc").decode_name()
    Traceback (most recent call last):
    ...
    dnssig.buffer.BufferError: Invalid label length 0x41 [offset=1]

    ```
    """

    def __init__(self, data: bytes = b"") -> None:
        super().__init__(data)
        self.names: dict[tuple[bytes, ...], int] = {}
        return

    def decode_name(self) -> DNSLabel:
        """Decode name at current offset in buffer

        Follows compression pointers. Each pointer must point before itself
        and before the target of any pointer already followed for this name.
        On return the offset is just past the name (or its first pointer).
        """
        label: list[bytes] = []
        end = None
        lowest = len(self.data)
        while True:
            length = self.unpack_one("!B")
            flags = get_bits(length, 6, 2)
            if flags == 3:
                # Pointer
                self.offset -= 1
                position = self.offset
                pointer = get_bits(self.unpack_one("!H"), 0, 14)
                if pointer >= position or pointer >= lowest:
                    raise BufferError(
                        f"Invalid pointer in DNSLabel [offset={self.offset},pointer={pointer},length={len(self.data)}]"
                    )
                if end is None:
                    end = self.offset
                lowest = pointer
                self.offset = pointer
            elif flags != 0:
                raise BufferError(f"Invalid label length {length:#x} [offset={self.offset}]")
            elif length > 0:
                label.append(self.get(length))
            else:
                break
        if end is not None:
            self.offset = end
        return DNSLabel(label)

    @staticmethod
    def _check(name: DNSLabelCreateTypes) -> DNSLabel:
        if not isinstance(name, DNSLabel):
            name = DNSLabel(name)
        return name.check()

    def encode_name(self, name: DNSLabelCreateTypes) -> None:
        """Encode name at end of the buffer using compression where possible

        Args:
            name: name to encode
        """
        labels = list(self._check(name).label)
        while labels:
            key = tuple(l.lower() for l in labels)
            if key in self.names:
                pointer = set_bits(self.names[key], 3, 14, 2)
                self.pack("!H", pointer)
                return
            # Pointers can only address the first 16k of the message
            if self.offset < 0x4000:
                self.names[key] = self.offset
            self.append_with_length("!B", labels.pop(0))
        self.append(b"\x00")
        return

    def encode_name_canonical(self, name: DNSLabelCreateTypes) -> None:
        """Encode name in canonical form - lower case, no compression

        The name is not added to the compression context.

        Args:
            name: name to encode
        """
        for element in self._check(name).label:
            self.append_with_length("!B", element.lower())
        self.append(b"\x00")
        return


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.IGNORE_EXCEPTION_DETAIL).failed == 0 else 1)
