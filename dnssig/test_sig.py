import binascii
import struct
from datetime import datetime, timezone

import pytest

from dnssig.dns import ABSENT, QTYPE, SIG, DecodeError, ParseError, Present
from dnssig.label import DNSBuffer, DNSLabel
from dnssig.sigtime import from_text

EXAMPLE_HEX = "0001050200000e103ff363003fca84803039076578616d706c6503636f6d00010203"
EXAMPLE_TEXT = """A 5 2 3600 (
        20040101000000 20031201000000 12345 example.com.
        AQID )"""


def _example(**kw):
    fields = dict(
        covered=QTYPE.A,
        algorithm=5,
        labels=2,
        orig_ttl=3600,
        expiration=from_text("20040101000000"),
        inception=from_text("20031201000000"),
        key_tag=12345,
        signer="example.com.",
        signature=Present(b"\x01\x02\x03"),
    )
    fields.update(kw)
    return SIG(**fields)


def _pointer_free(name_region: bytes) -> bool:
    i = 0
    while i < len(name_region):
        length = name_region[i]
        if length & 0xC0:
            return False
        if length == 0:
            return True
        i += length + 1
    return False


def test_example_wire_roundtrip():
    s = _example()
    data = s.to_wire()
    assert data.hex() == EXAMPLE_HEX
    d = SIG.from_wire(data)
    assert d == s
    assert d.covered == 1
    assert d.algorithm == 5
    assert d.labels == 2
    assert d.orig_ttl == 3600
    assert d.expiration == datetime(2004, 1, 1, tzinfo=timezone.utc)
    assert d.inception == datetime(2003, 12, 1, tzinfo=timezone.utc)
    assert d.key_tag == 12345
    assert d.signer == DNSLabel("example.com.")
    assert d.signature == Present(b"\x01\x02\x03")


def test_example_text():
    s = _example()
    text = s.toZone()
    assert text.startswith("A 5 2 3600 (")
    assert "20040101000000 20031201000000" in text
    assert "12345" in text
    assert "example.com." in text
    assert "AQID" in text
    assert text.endswith("AQID )")
    assert SIG.from_text(EXAMPLE_TEXT) == s
    assert SIG.from_text(text) == s


def test_text_layout():
    s = _example(signature=Present(bytes(range(60))))
    lines = s.toZone().split("\n")
    assert lines[0] == "A 5 2 3600 ("
    assert lines[1] == "\t20040101000000 20031201000000 12345 example.com."
    assert lines[2] == "\tAAECAwQFBgcICQoLDA0ODxAREhMUFRYXGBkaGxwdHh8gISIjJCUmJygpKissLS4v"
    assert lines[3] == "\tMDEyMzQ1Njc4OTo7 )"
    assert SIG.from_text(s.toZone()) == s


def test_absent_signature_text():
    s = SIG.from_text("A 5 2 3600 ( 20040101000000 20031201000000 12345 example.com. )")
    assert s.signature is ABSENT
    assert s == _example(signature=ABSENT)
    text = s.toZone()
    assert "(" not in text
    assert ")" not in text
    assert text == "A 5 2 3600 20040101000000 20031201000000 12345 example.com."
    assert SIG.from_text(text) == s


def test_absent_signature_wire():
    s = _example(signature=ABSENT)
    assert s.to_wire() == b""
    assert s.to_canonical() == b""
    b = DNSBuffer()
    b.encode_name("example.com.")
    s.pack(b)
    assert len(b) == 13
    assert SIG.from_wire(b"").signature is ABSENT
    assert SIG.from_wire(b"") == SIG.placeholder()
    assert SIG.placeholder().to_wire() == b""


def test_empty_present_signature():
    s = _example(signature=Present(b""))
    data = s.to_wire()
    assert len(data) == 18 + 13
    d = SIG.from_wire(data)
    assert d.signature == Present(b"")
    assert d.signature != ABSENT
    assert d == s


def test_fromzone_words():
    words = ["a", "5", "2", "1h", "(", "20040101000000", "20031201000000", "12345", "example.com.", "AQ", "ID", ")"]
    assert SIG.fromZone(words) == _example()


def test_relative_signer():
    s = SIG.from_text("A 5 2 3600 20040101000000 20031201000000 12345 example AQID", origin="com.")
    assert s.signer == "example.com."
    s = SIG.from_text("A 5 2 3600 20040101000000 20031201000000 12345 @ AQID", origin="example.com.")
    assert s.signer == "example.com."


def test_legacy_labels():
    text = "A 5 3600 20040101000000 20031201000000 12345 example.com. AQID"
    s = SIG.from_text(text, legacy_labels=True, owner="www.example.com.")
    assert s.labels == 3
    assert s.toZone(legacy_labels=True).split() == text.replace("3600", "3600 (").split() + [")"]
    assert SIG.from_text(s.toZone(legacy_labels=True), legacy_labels=True, owner="www.example.com.") == s
    # No owner - derived from signer
    assert SIG.from_text(text, legacy_labels=True).labels == 2
    # Standard parse of legacy text misreads the fields
    with pytest.raises(ParseError):
        SIG.from_text(text)


def test_labels_not_reconciled():
    s = SIG.from_text("A 5 7 3600 20040101000000 20031201000000 12345 example.com.", owner="www.example.com.")
    assert s.labels == 7


def test_derived_labels_constructor():
    assert _example(labels=None).labels == 2
    assert _example(labels=None, owner="*.a.example.com.").labels == 3


@pytest.mark.parametrize("key_tag,text", [(0, "0"), (12345, "12345"), (32768, "32768"), (65535, "65535"), (-1, "65535"), (-32768, "32768")])
def test_key_tag_unsigned(key_tag, text):
    s = _example(key_tag=key_tag)
    assert s.toZone().split()[7] == text
    assert 0 <= s.key_tag <= 65535
    assert SIG.from_wire(s.to_wire()).key_tag == int(text)


def test_key_tag_range():
    with pytest.raises(ValueError):
        _example(key_tag=65536)
    with pytest.raises(ValueError):
        _example(key_tag=-32769)
    with pytest.raises(ParseError):
        SIG.from_text("A 5 2 3600 20040101000000 20031201000000 65536 example.com.")


def test_field_ranges():
    with pytest.raises(ValueError):
        _example(algorithm=256)
    with pytest.raises(ValueError):
        _example(orig_ttl=-1)
    with pytest.raises(ValueError):
        _example(expiration=2**32)


def test_immutable():
    s = _example()
    for attr in SIG.attrs:
        with pytest.raises(AttributeError):
            setattr(s, attr, getattr(s, attr))
    with pytest.raises(AttributeError):
        s.signature.data = b""


def test_hash_and_eq():
    s1 = _example()
    s2 = _example(signer="EXAMPLE.COM.")
    assert s1 == s2
    assert hash(s1) == hash(s2)
    assert s1 != _example(signature=Present(b"\x01"))
    assert s1 != _example(signature=ABSENT)
    assert s1 != "A 5 2 3600"


def test_timestamps_accept_int_and_naive():
    s = _example(expiration=1072915200, inception=datetime(2003, 12, 1, 0, 0, 0, 999999))
    assert s == _example()


def test_compressed_signer():
    b = DNSBuffer()
    b.encode_name("example.com.")
    start = b.offset
    data = _example().to_wire(b)
    assert data[18:20] == b"\xc0\x00"
    assert len(data) == 18 + 2 + 3
    d = SIG.from_wire(bytes(b.data), start, len(data))
    assert d == _example()


@pytest.mark.parametrize("context", ["example.com.", "com.", "www.example.com."])
def test_canonical_no_pointers(context):
    s = _example(signer="WWW.Example.COM.")
    b = DNSBuffer()
    b.encode_name(context)
    names = dict(b.names)
    start = b.offset
    s.pack(b, canonical=True)
    assert b.names == names
    assert _pointer_free(b.since(start + 18))
    assert b.since(start) == s.to_canonical()
    canonical = s.to_canonical()
    assert _pointer_free(canonical[18:])
    assert canonical[18:35] == b"\x03www\x07example\x03com\x00"


def test_canonical_layout_matches_wire():
    s = _example()
    assert s.to_canonical() == s.to_wire()
    upper = _example(signer="EXAMPLE.COM.")
    assert upper.to_canonical() == s.to_wire()
    assert upper.to_wire() != s.to_wire()


def test_decode_errors():
    data = binascii.unhexlify(EXAMPLE_HEX)
    # Truncated fixed fields
    with pytest.raises(DecodeError):
        SIG.from_wire(data[:10])
    # Truncated name
    with pytest.raises(DecodeError):
        SIG.from_wire(data[:25])
    # Declared length shorter than fixed fields + name
    with pytest.raises(DecodeError):
        SIG.from_wire(data, 0, 20)
    # Forward pointer
    with pytest.raises(DecodeError):
        SIG.from_wire(data[:18] + b"\xc0\x20" + data[31:])
    # Declared length longer than data
    with pytest.raises(DecodeError):
        SIG.from_wire(data, 0, len(data) + 1)


def test_decode_long_pointer_chain():
    fixed = binascii.unhexlify(EXAMPLE_HEX)[:18]
    data = bytearray(b"\x00")
    target = 0
    for _ in range(3000):
        offset = len(data)
        data += struct.pack("!H", 0xC000 | target)
        target = offset
    start = len(data)
    data += fixed + struct.pack("!H", 0xC000 | target) + b"\x01\x02\x03"
    d = SIG.from_wire(bytes(data), start)
    assert d == _example(signer=".")


def test_decode_pointer_loop():
    # Signer points back at a label that runs into the same pointer
    fixed = binascii.unhexlify(EXAMPLE_HEX)[:18]
    data = b"\x03abc\xc0\x00"
    with pytest.raises(DecodeError):
        SIG.from_wire(data + fixed + b"\xc0\x00", len(data))


def test_escaped_signer_roundtrip():
    data = binascii.unhexlify(EXAMPLE_HEX)[:18] + b"\x03a.b\x01\\\x03com\x00\x01\x02\x03"
    d = SIG.from_wire(data)
    assert d.signer.label == (b"a.b", b"\\", b"com")
    assert "a\\046b.\\092.com." in d.toZone()
    t = SIG.from_text(d.toZone())
    assert t == d
    assert t.signer.label == d.signer.label
    assert t.to_canonical() == d.to_canonical() == data


def test_to_wire_after_rewind():
    b = DNSBuffer()
    b.encode_name("example.com.")
    b.offset = 0
    data = _example().to_wire(b)
    assert data == binascii.unhexlify(EXAMPLE_HEX)[:18] + b"\xc0\x00\x01\x02\x03"


def test_decode_within_message():
    prefix = b"\xff" * 7
    data = prefix + binascii.unhexlify(EXAMPLE_HEX) + b"\xee\xee"
    d = SIG.from_wire(data, len(prefix), len(EXAMPLE_HEX) // 2)
    assert d == _example()


@pytest.mark.parametrize(
    "text,field",
    [
        ("", "covered"),
        ("BOGUS 5 2 3600 20040101000000 20031201000000 12345 example.com.", "covered"),
        ("A x 2 3600 20040101000000 20031201000000 12345 example.com.", "algorithm"),
        ("A 256 2 3600 20040101000000 20031201000000 12345 example.com.", "algorithm"),
        ("A 5 -1 3600 20040101000000 20031201000000 12345 example.com.", "labels"),
        ("A 5 2 1y 20040101000000 20031201000000 12345 example.com.", "orig_ttl"),
        ("A 5 2 3600 2004010100000 20031201000000 12345 example.com.", "expiration"),
        ("A 5 2 3600 20040101000000 2003120100000x 12345 example.com.", "inception"),
        ("A 5 2 3600 20040101000000 20031201000000 +1 example.com.", "key_tag"),
        ("A 5 2 3600 20040101000000 20031201000000 12345", "signer"),
        ("A 5 2 3600 20040101000000 20031201000000 12345 a..b.", "signer"),
        ("A 5 2 3600 20040101000000 20031201000000 12345 " + "a" * 64 + ".com. AQID", "signer"),
        ("A 5 2 3600 20040101000000 20031201000000 12345 " + ".".join(["abcdefghi"] * 26) + ". AQID", "signer"),
        ("A 5 2 3600 20040101000000 20031201000000 12345 example.com. AQI!", "signature"),
        ("A 5 2 3600 20040101000000 20031201000000 12345 example.com. AQI", "signature"),
    ],
)
def test_parse_errors(text, field):
    with pytest.raises(ParseError) as e:
        SIG.from_text(text)
    assert f"SIG {field}:" in str(e.value)


def test_unknown_type_mnemonic():
    s = SIG.from_text("TYPE999 5 2 3600 20040101000000 20031201000000 12345 example.com. AQID")
    assert s.covered == 999
    assert s.toZone().startswith("TYPE999 5 2 3600 (")
    assert SIG.from_text("sig 5 2 3600 20040101000000 20031201000000 12345 example.com.").covered == 24


def test_lenient_dates():
    s = SIG.from_text("A 5 2 3600 20031301000000 20031131000000 12345 example.com. AQID")
    assert s == _example()
    assert "20040101000000 20031201000000" in s.toZone()


def test_repr():
    assert repr(_example()) == "<DNS SIG: 'A 5 2 3600 20040101000000 20031201000000 12345 example.com. AQID'>"
    assert repr(_example(signature=ABSENT)) == "<DNS SIG: 'A 5 2 3600 20040101000000 20031201000000 12345 example.com.'>"
    assert str(_example()) == _example().toZone()
