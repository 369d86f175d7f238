"""
dnssig
------

A library to encode/decode DNS SIG (RFC 2535) resource record data.

The library converts a SIG record between three forms:

* wire format record data (`SIG.parse` / `SIG.pack`), with the signer
  name compressed against the names already written to the message
* canonical wire format (`SIG.to_canonical`) - the byte sequence used
  as signature input, with the signer name lower-cased and never
  compressed
* presentation (zone file) format (`SIG.fromZone` / `SIG.from_text` /
  `SIG.toZone`)

Signing and verification themselves are out of scope.

To decode record data:

```pycon
>>> import binascii
>>> from dnssig import *
>>> data = binascii.unhexlify(b'0001050200000e103ff363003fca84803039076578616d706c6503636f6d00010203')
>>> s = SIG.from_wire(data)
>>> s
<DNS SIG: 'A 5 2 3600 20040101000000 20031201000000 12345 example.com. AQID'>
>>> s.key_tag, str(s.signer), s.signature
(12345, 'example.com.', Present(b'\\x01\\x02\\x03'))
>>> s.expiration
datetime.datetime(2004, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)

```

Records are immutable:

```pycon
>>> s.key_tag = 1
Traceback (most recent call last):
...
AttributeError: Attribute 'key_tag' is read-only

```

To create a record and encode it into a message buffer (the buffer's
name table is the compression context):

```pycon
>>> b = DNSBuffer()
>>> b.encode_name("example.com.")
>>> s = SIG(QTYPE.A, 5, 2, 3600, s.expiration, s.inception, 65535, "example.com.", b"\\x01\\x02\\x03")
>>> s.to_wire(b)[-5:].hex()
'c000010203'
>>> s.to_canonical()[-16:].hex()
'076578616d706c6503636f6d00010203'

```

A record that has not been signed yet carries an `ABSENT` signature;
it encodes to empty record data and decodes back from it:

```pycon
>>> u = SIG.from_text("NS 5 2 3600 20040101000000 20031201000000 12345 example.com.")
>>> u.signature
ABSENT
>>> u.to_wire()
b''
>>> SIG.from_wire(b"") == SIG.placeholder()
True

```

The RFC 2065 presentation form without a label count is supported with
`legacy_labels=True` on both parsing and formatting. The label count is
then derived from the record owner name:

```pycon
>>> SIG.from_text("A 5 3600 20040101000000 20031201000000 12345 example.com. AQID",
...               legacy_labels=True, owner="www.example.com.").labels
3

```

Command line:

    $ python -m dnssig.tool 'A 5 2 3600 ( 20040101000000 20031201000000 12345 example.com. AQID )'
    $ python -m dnssig.tool --hex 0001050200000e10...

"""

from dnssig.dns import *

version = "1.0.0"
