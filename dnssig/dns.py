"""
    DNS - main dnssig module

    Contains the SIG resource record codec: wire format (compressed and
    canonical) and presentation format.
"""

import binascii
import sys
from datetime import datetime
from typing import Any, List, Optional, Tuple, Type, Union

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from dnssig import b64, sigtime
from dnssig.bimap import Bimap, BimapError
from dnssig.buffer import BufferError
from dnssig.label import DNSBuffer, DNSLabel, DNSLabelCreateTypes, DNSLabelError
from dnssig.lex import LexError, Tokenizer
from dnssig.ranges import B, H, I, check_range, frozen_property, instance_property
from dnssig.sigtime import Timestamp
from dnssig.ttl import parse_ttl


class DNSError(Exception):
    pass


class DecodeError(DNSError):
    """Record data could not be decoded from wire format"""


class ParseError(DNSError):
    """Record data could not be parsed from presentation format"""


def make_decode_error(name: Union[str, Type], buffer, error: Exception) -> DecodeError:
    """Generate a standardised DecodeError for errors when unpacking from a buffer

    Args:
        name: name of the thing being unpacked (e.g. `SIG`)
        buffer: the buffer being unpacked
        error: the exception that was thrown

    Returns:
        Prepared `DecodeError`
    """
    if isinstance(name, type):
        name = name.__name__
    return DecodeError(f"Error unpacking {name} [offset={buffer.offset}]: {error!r}")


def make_parse_error(name: Union[str, Type], field: str, token: Optional[str], reason: Any) -> ParseError:
    """Generate a standardised ParseError naming the field and offending token

    Args:
        name: name of the thing being parsed (e.g. `SIG`)
        field: the field that was expected
        token: the token that failed (`None` if the token was missing)
        reason: description of the failure
    """
    if isinstance(name, type):
        name = name.__name__
    if token is None:
        return ParseError(f"Error parsing {name} {field}: {reason}")
    return ParseError(f"Error parsing {name} {field}: {reason} [{token}]")


# DNS codes


def unknown_qtype(name: str, key: Union[str, int]) -> Union[str, int]:
    if isinstance(key, int):
        return f"TYPE{key}"
    if key.startswith("TYPE") and key[4:].isascii() and key[4:].isdigit():
        code = int(key[4:])
        if code <= 65535:
            return code
    raise DNSError(f"{name!r}: Invalid lookup: [{key!r}]")


QTYPE = Bimap(
    "QTYPE",
    {
        1: "A",
        2: "NS",
        5: "CNAME",
        6: "SOA",
        10: "NULL",
        12: "PTR",
        13: "HINFO",
        15: "MX",
        16: "TXT",
        17: "RP",
        18: "AFSDB",
        24: "SIG",
        25: "KEY",
        28: "AAAA",
        29: "LOC",
        30: "NXT",
        33: "SRV",
        35: "NAPTR",
        36: "KX",
        37: "CERT",
        38: "A6",
        39: "DNAME",
        41: "OPT",
        42: "APL",
        43: "DS",
        44: "SSHFP",
        45: "IPSECKEY",
        46: "RRSIG",
        47: "NSEC",
        48: "DNSKEY",
        49: "DHCID",
        50: "NSEC3",
        51: "NSEC3PARAM",
        52: "TLSA",
        53: "SMIMEA",
        55: "HIP",
        59: "CDS",
        60: "CDNSKEY",
        61: "OPENPGPKEY",
        62: "CSYNC",
        63: "ZONEMD",
        64: "SVCB",
        65: "HTTPS",
        99: "SPF",
        108: "EUI48",
        109: "EUI64",
        249: "TKEY",
        250: "TSIG",
        251: "IXFR",
        252: "AXFR",
        255: "ANY",
        256: "URI",
        257: "CAA",
        32768: "TA",
        32769: "DLV",
    },
    unknown_qtype,
)


def create_label(label: str, origin: DNSLabelCreateTypes = None) -> DNSLabel:
    """Create a DNSLabel from a presentation format name

    Args:
        label: absolute name, `@`, or name relative to origin
        origin: base of label if label is not connected to root (`.`).
    """
    if label.endswith("."):
        return DNSLabel(label)
    if not isinstance(origin, DNSLabel):
        origin = DNSLabel(origin)
    if label == "@":
        return origin
    return origin.add(label)


def create_label_property(attr: str = "label"):
    """Set-once property holding a DNSLabel

    Args:
        attr: name of attribute
    """
    slot = f"_{attr}"

    def getter(self) -> DNSLabel:
        return getattr(self, slot)

    def setter(self, label: DNSLabelCreateTypes) -> None:
        if hasattr(self, slot):
            raise AttributeError(f"Attribute {attr!r} is read-only")
        if not isinstance(label, DNSLabel):
            label = DNSLabel(label)
        setattr(self, slot, label.check())
        return

    return property(getter, setter)


def _time_property(attr: str):
    def check(name, val):
        if not (isinstance(val, datetime) and val.tzinfo is not None and val.microsecond == 0):
            raise ValueError(f"Attribute {name!r} must be a normalised UTC datetime [{val!r}]")

    return frozen_property(attr, check)


class Signature:
    """Signature data of a SIG record - either `Present(data)` or `ABSENT`

    `ABSENT` marks a record which has not been signed yet. It is distinct
    from a present but empty signature:

    ```pycon
    >>> ABSENT.present, Present(b"").present
    (False, True)
    >>> Present(b"") == ABSENT
    False
    >>> Present(b"\\x01") == Present(b"\\x01")
    True
    >>> Absent() is ABSENT
    True

    ```
    """

    present = False


class Present(Signature):
    present = True
    data = instance_property("data", bytes)

    def __init__(self, data: Union[bytes, bytearray]) -> None:
        if isinstance(data, bytearray):
            data = bytes(data)
        self.data = data
        return

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Present) and self.data == other.data

    def __ne__(self, other: Any) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"Present({self.data!r})"


class Absent(Signature):
    _instance: "Optional[Absent]" = None

    def __new__(cls) -> "Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


class SIG:
    """Signature record (RFC 2535)

    A SIG holds the signature over an RRset (or, as SIG(0), over a whole
    message). The record is immutable once constructed.

    Attributes:
        covered: type of the RRset covered by this signature
        algorithm: algorithm of the key that generated the signature
        labels: number of labels in the signed owner name (this may be
            fewer than the owner's labels if the owner is a wildcard expansion)
        orig_ttl: original TTL of the RRset
        expiration: time the signature expires (aware UTC datetime)
        inception: time the signature was generated (aware UTC datetime)
        key_tag: footprint/key id of the signing key (unsigned)
        signer: owner of the signing key
        signature: `Present(bytes)` or `ABSENT` (not yet signed)

    ```pycon
    >>> s = SIG.from_text('''A 5 2 3600 (
    ...         20040101000000 20031201000000 12345 example.com.
    ...         AQID )''')
    >>> s
    <DNS SIG: 'A 5 2 3600 20040101000000 20031201000000 12345 example.com. AQID'>
    >>> s.signature
    Present(b'\\x01\\x02\\x03')
    >>> s.to_wire().hex()
    '0001050200000e103ff363003fca84803039076578616d706c6503636f6d00010203'
    >>> SIG.from_wire(s.to_wire()) == s
    True
    >>> s.toZone().split()
    ['A', '5', '2', '3600', '(', '20040101000000', '20031201000000', '12345', 'example.com.', 'AQID', ')']

    Unsigned placeholder - nothing on the wire, no signature block

    >>> u = SIG.from_text("A 5 2 3600 20040101000000 20031201000000 12345 example.com.")
    >>> u.signature
    ABSENT
    >>> u.to_wire()
    b''
    >>> u.toZone()
    'A 5 2 3600 20040101000000 20031201000000 12345 example.com.'

    Legacy (RFC 2065) presentation form has no label count

    >>> l = SIG.from_text("A 5 3600 20040101000000 20031201000000 12345 example.com.",
    ...                   legacy_labels=True, owner="*.www.example.com.")
    >>> l.labels
    3
    >>> l.toZone(legacy_labels=True)
    'A 5 3600 20040101000000 20031201000000 12345 example.com.'

    >>> SIG.from_text("A 5 2 3600 20041301000000")
    Traceback (most recent call last):
    ...
    dnssig.dns.ParseError: Error parsing SIG inception: missing token
    >>> SIG.from_text("XYZ 5 2 3600")
    Traceback (most recent call last):
    ...
    dnssig.dns.ParseError: Error parsing SIG covered: 'QTYPE': Invalid lookup: ['XYZ'] [XYZ]

    ```

    References:

    - https://datatracker.ietf.org/doc/html/rfc2535#section-4
    - https://datatracker.ietf.org/doc/html/rfc2931
    """

    attrs = (
        "covered",
        "algorithm",
        "labels",
        "orig_ttl",
        "expiration",
        "inception",
        "key_tag",
        "signer",
        "signature",
    )

    # covered, algorithm, labels, orig_ttl, expiration, inception, key_tag
    fixed = "!HBBIIIH"

    covered = H("covered")
    algorithm = B("algorithm")
    labels = B("labels")
    orig_ttl = I("orig_ttl")
    expiration = _time_property("expiration")
    inception = _time_property("inception")
    key_tag = H("key_tag")
    signer = create_label_property("signer")
    signature = instance_property("signature", Signature)

    @classmethod
    def parse(cls, buffer: DNSBuffer, length: int) -> Self:
        """Decode from buffer

        A zero length record is the unsigned placeholder.

        Args:
            buffer: buffer positioned at the start of the record data
            length: declared record data length

        Raises:
            DecodeError: truncated data, bad signer name or length overrun
        """
        try:
            if length == 0:
                return cls.placeholder()
            start = buffer.offset
            covered, algorithm, labels, orig_ttl, sig_exp, sig_inc, key_tag = buffer.unpack(cls.fixed)
            signer = buffer.decode_name()
            consumed = buffer.offset - start
            if consumed > length:
                raise BufferError(f"Record data overrun [length={length},consumed={consumed}]")
            sig = buffer.get(length - consumed)
            return cls(
                covered,
                algorithm,
                labels,
                orig_ttl,
                sigtime.from_wire(sig_exp),
                sigtime.from_wire(sig_inc),
                key_tag,
                signer,
                Present(sig),
            )
        except (BufferError, BimapError, DNSLabelError) as e:
            raise make_decode_error(cls, buffer, e)

    @classmethod
    def from_wire(cls, data: bytes, offset: int = 0, length: Optional[int] = None) -> Self:
        """Decode record data at `offset` within a complete message

        Args:
            data: message (or bare record data) bytes
            offset: start of record data
            length: record data length (default: rest of `data`)
        """
        buffer = DNSBuffer(data)
        buffer.offset = offset
        if length is None:
            length = len(data) - offset
        return cls.parse(buffer, length)

    @classmethod
    def fromZone(
        cls,
        rd: List[str],
        origin: DNSLabelCreateTypes = None,
        legacy_labels: bool = False,
        owner: DNSLabelCreateTypes = None,
    ) -> Self:
        """Parse from zone format words

        Args:
            rd: record data words (parentheses are ignored)
            origin: origin for relative signer names
            legacy_labels: RFC 2065 form - no label count token, the count
                is derived from `owner` (or the signer if no owner is given)
            owner: owner name of the record
        """
        return cls._parse_tokens(Tokenizer.from_words(rd), origin, legacy_labels, owner)

    @classmethod
    def from_text(
        cls,
        text: str,
        origin: DNSLabelCreateTypes = None,
        legacy_labels: bool = False,
        owner: DNSLabelCreateTypes = None,
    ) -> Self:
        """Parse from presentation format text (see `fromZone`)"""
        return cls._parse_tokens(Tokenizer(text), origin, legacy_labels, owner)

    @classmethod
    def _parse_tokens(
        cls,
        tokens: Tokenizer,
        origin: DNSLabelCreateTypes,
        legacy_labels: bool,
        owner: DNSLabelCreateTypes,
    ) -> Self:
        def field(name, convert):
            token = tokens.get(name)
            try:
                return convert(token)
            except (ValueError, DNSError, DNSLabelError) as e:
                raise make_parse_error(cls, name, token, e)

        try:
            covered = field("covered", QTYPE.lookup)
            algorithm = field("algorithm", lambda t: _uint(t, 255))
            labels = None if legacy_labels else field("labels", lambda t: _uint(t, 255))
            orig_ttl = field("orig_ttl", parse_ttl)
            expiration = field("expiration", sigtime.from_text)
            inception = field("inception", sigtime.from_text)
            key_tag = field("key_tag", lambda t: _uint(t, 65535))
            signer = field("signer", lambda t: create_label(t, origin).check())
        except LexError as e:
            raise make_parse_error(cls, e.field, None, "missing token")

        signature: Signature = ABSENT
        if tokens.has_more():
            words = tokens.remaining()
            text = "".join(words)
            try:
                signature = Present(b64.decode(text))
            except (binascii.Error, ValueError) as e:
                raise make_parse_error(cls, "signature", text, e)

        if labels is None:
            labels = _derive_labels(owner, signer)

        return cls(covered, algorithm, labels, orig_ttl, expiration, inception, key_tag, signer, signature)

    @classmethod
    def placeholder(cls) -> Self:
        """Unsigned record with all fields zero - decoded from empty record data"""
        return cls(0, 0, 0, 0, 0, 0, 0, ".", ABSENT)

    def __init__(
        self,
        covered: int,
        algorithm: int,
        labels: Optional[int],
        orig_ttl: int,
        expiration: Timestamp,
        inception: Timestamp,
        key_tag: int,
        signer: DNSLabelCreateTypes,
        signature: Union[Signature, bytes, bytearray] = ABSENT,
        owner: DNSLabelCreateTypes = None,
    ) -> None:
        """
        Args:
            covered: RR type code covered by the signature
            algorithm: algorithm code
            labels: label count, or `None` to derive it from `owner`
                (or from `signer` if no owner is given)
            orig_ttl: original TTL of the covered RRset
            expiration: datetime or seconds since epoch
            inception: datetime or seconds since epoch
            key_tag: key tag - values in the signed 16-bit range are
                taken as their unsigned equivalent (-1 is 65535)
            signer: name of the signing key
            signature: `Present`/`ABSENT`, or raw bytes (taken as present)
            owner: record owner name, only used to derive `labels`
        """
        if isinstance(signature, (bytes, bytearray)):
            signature = Present(signature)
        check_range("key_tag", key_tag, -32768, 65535)
        self.covered = covered
        self.algorithm = algorithm
        self.orig_ttl = orig_ttl
        self.expiration = sigtime.normalize(expiration)
        self.inception = sigtime.normalize(inception)
        self.key_tag = key_tag & 0xFFFF
        self.signer = signer
        self.labels = _derive_labels(owner, self.signer) if labels is None else labels
        self.signature = signature
        return

    def pack(self, buffer: DNSBuffer, canonical: bool = False) -> None:
        """Pack into buffer

        An unsigned (`ABSENT`) record writes nothing at all.

        Args:
            buffer: output buffer - its name table is the compression context
            canonical: write the signer name in canonical form (lower case,
                never compressed) as used for signature input
        """
        if not self.signature.present:
            return
        buffer.pack(
            self.fixed,
            self.covered,
            self.algorithm,
            self.labels,
            self.orig_ttl,
            sigtime.to_wire(self.expiration),
            sigtime.to_wire(self.inception),
            self.key_tag,
        )
        if canonical:
            buffer.encode_name_canonical(self.signer)
        else:
            buffer.encode_name(self.signer)
        buffer.append(self.signature.data)
        return

    def to_wire(self, buffer: Optional[DNSBuffer] = None) -> bytes:
        """Encode record data, returning the bytes written

        Args:
            buffer: message buffer to append to (default: new buffer)
        """
        if buffer is None:
            buffer = DNSBuffer()
        start = len(buffer)
        self.pack(buffer)
        return buffer.since(start)

    def to_canonical(self) -> bytes:
        """Canonical record data (signature input)"""
        buffer = DNSBuffer()
        self.pack(buffer, canonical=True)
        return bytes(buffer.data)

    def _fields(self, legacy_labels: bool) -> Tuple[List[str], List[str]]:
        head = [QTYPE[self.covered], str(self.algorithm)]
        if not legacy_labels:
            head.append(str(self.labels))
        head.append(str(self.orig_ttl))
        tail = [sigtime.to_text(self.expiration), sigtime.to_text(self.inception), str(self.key_tag), str(self.signer)]
        return head, tail

    def toZone(self, legacy_labels: bool = False) -> str:
        """Encode into zone format

        Signed records use the multi-line parenthesised layout with the
        signature in 64 character base64 lines. Unsigned records are a
        single line with no signature block.

        Args:
            legacy_labels: omit the label count (RFC 2065 form)
        """
        head, tail = self._fields(legacy_labels)
        if not self.signature.present:
            return " ".join(head + tail)
        return "%s (\n\t%s\n%s" % (
            " ".join(head),
            " ".join(tail),
            b64.format_lines(self.signature.data, 64, "\t", True),
        )

    def __repr__(self) -> str:
        head, tail = self._fields(False)
        if self.signature.present and self.signature.data:
            tail.append(b64.format_lines(self.signature.data, 1 << 16, "", False))
        return "<DNS SIG: '%s'>" % " ".join(head + tail)

    def __str__(self) -> str:
        return self.toZone()

    def __eq__(self, other: Any) -> bool:
        if type(other) != type(self):
            return False
        return all([getattr(self, x) == getattr(other, x) for x in self.attrs])

    def __ne__(self, other: Any) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, x) for x in self.attrs))


def _uint(token: str, max: int) -> int:
    if not (token.isascii() and token.isdigit()):
        raise ValueError("not an unsigned integer")
    value = int(token)
    if value > max:
        raise ValueError(f"must be between 0-{max}")
    return value


def _derive_labels(owner: DNSLabelCreateTypes, signer: DNSLabel) -> int:
    name = signer if owner is None else DNSLabel(owner)
    return name.label_count


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.ELLIPSIS | doctest.IGNORE_EXCEPTION_DETAIL).failed == 0 else 1)
