"""
    Base64 handling for opaque key/signature blobs in presentation form

    >>> decode("AQID")
    b'\\x01\\x02\\x03'
    >>> print(format_lines(bytes(range(60)), 32, "  "))
      AAECAwQFBgcICQoLDA0ODxAREhMUFRYX
      GBkaGxwdHh8gISIjJCUmJygpKissLS4v
      MDEyMzQ1Njc4OTo7 )
    >>> format_lines(b"", close=False)
    ''
    >>> decode("AQ!D")
    Traceback (most recent call last):
    ...
    binascii.Error: Non-base64 digit found
"""

import base64
import binascii


def decode(text: str) -> bytes:
    """Decode base64 text (whitespace already removed by the tokenizer)

    Raises:
        binascii.Error: if the text is not valid base64
    """
    try:
        data = text.encode("ascii")
    except UnicodeEncodeError:
        raise binascii.Error("Only base64 data is allowed")
    return base64.b64decode(data, validate=True)


def format_lines(data: bytes, width: int = 64, indent: str = "\t", close: bool = True) -> str:
    """Render `data` as base64 split into lines of `width` characters

    Args:
        data: bytes to encode
        width: characters per line
        indent: prefix for each line
        close: append ` )` to the final line, closing a parenthesised
            presentation form
    """
    encoded = base64.b64encode(data).decode("ascii")
    lines = [indent + encoded[i : i + width] for i in range(0, len(encoded), width)]
    if close:
        if not lines:
            lines = [indent]
        lines[-1] += " )"
    return "\n".join(lines)


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.IGNORE_EXCEPTION_DETAIL).failed == 0 else 1)
