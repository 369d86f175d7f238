"""
    dnssig.tool - decode/encode SIG record data from the command line

    Reads record data in presentation form (or hex wire format with
    --hex) and prints the presentation form and wire encodings.
"""

import argparse
import binascii
import sys
import time

from dnssig.dns import DNSError, SIG
from dnssig.label import DNSLabelError


class SIGLogger:
    """
    Logger for the command line tool

    `log` is a comma separated list of log categories. Categories prefixed
    with `+`/`-` are added to/removed from the default set, otherwise the
    list replaces the default set.

        parse   - record parsed (source and size)
        wire    - encoded record data
        data    - full record repr
        error   - parse/decode errors

    `prefix` adds a timestamp to each line.

    ```pycon
    >>> sorted(SIGLogger("-parse").enabled)
    ['error', 'wire']
    >>> sorted(SIGLogger("+data").enabled)
    ['data', 'error', 'parse', 'wire']
    >>> sorted(SIGLogger("error").enabled)
    ['error']

    ```
    """

    categories = ("parse", "wire", "data", "error")
    default = ("parse", "wire", "error")

    def __init__(self, log: str = "", prefix: bool = False, out=None, err=None) -> None:
        enabled = set(self.default)
        explicit = set()
        for l in filter(None, [x.strip() for x in log.split(",")]):
            if l[0] == "+":
                enabled.add(l[1:])
            elif l[0] == "-":
                enabled.discard(l[1:])
            else:
                explicit.add(l)
        self.enabled = explicit or enabled
        unknown = self.enabled - set(self.categories)
        if unknown:
            raise ValueError(f"Unknown log categories: {','.join(sorted(unknown))}")
        self.prefix = prefix
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        return

    def log_prefix(self) -> str:
        if self.prefix:
            return "%s " % time.strftime("%Y-%m-%d %X")
        return ""

    def log_parse(self, source: str, size: int) -> None:
        if "parse" in self.enabled:
            print(";; %sParsed SIG (%s) <%d>" % (self.log_prefix(), source, size), file=self.out)

    def log_wire(self, label: str, data: bytes) -> None:
        if "wire" in self.enabled:
            print(";; %s%s: %s" % (self.log_prefix(), label, binascii.hexlify(data).decode()), file=self.out)

    def log_data(self, sig: SIG) -> None:
        if "data" in self.enabled:
            print(";; %s%r" % (self.log_prefix(), sig), file=self.out)

    def log_error(self, e: Exception) -> None:
        if "error" in self.enabled:
            print("--- %sInvalid SIG :: %s" % (self.log_prefix(), e), file=self.err)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="SIG record codec")
    p.add_argument("rdata", metavar="<rdata>", nargs="+",
                    help="Record data in presentation format (or hex with --hex, '-' for stdin)")
    p.add_argument("--hex", action="store_true", default=False,
                    help="Record data is hex wire format (default: presentation format)")
    p.add_argument("--origin", "-o", default=None, metavar="<origin>",
                    help="Origin for relative signer names (default: root)")
    p.add_argument("--owner", default=None, metavar="<owner>",
                    help="Record owner name (used to derive label count with --legacy-labels)")
    p.add_argument("--legacy-labels", action="store_true", default=False,
                    help="RFC 2065 format without label count (default: False)")
    p.add_argument("--canonical", action="store_true", default=False,
                    help="Print canonical wire format (default: False)")
    p.add_argument("--log", default="",
                    help="Log categories (parse,wire,data,error - use +/- to add/remove)")
    p.add_argument("--log-prefix", action="store_true", default=False,
                    help="Timestamp log output (default: False)")
    args = p.parse_args(argv)

    try:
        logger = SIGLogger(args.log, args.log_prefix)
    except ValueError as e:
        p.error(str(e))

    rdata = " ".join(args.rdata)
    if rdata == "-":
        rdata = sys.stdin.read()

    try:
        if args.hex:
            data = binascii.unhexlify("".join(rdata.split()))
            sig = SIG.from_wire(data)
            logger.log_parse("wire", len(data))
        else:
            sig = SIG.from_text(rdata, origin=args.origin, legacy_labels=args.legacy_labels, owner=args.owner)
            logger.log_parse("text", len(rdata))
    except (DNSError, DNSLabelError, binascii.Error) as e:
        logger.log_error(e)
        return 1

    logger.log_data(sig)
    print(sig.toZone(legacy_labels=args.legacy_labels))
    logger.log_wire("WIRE", sig.to_wire())
    if args.canonical:
        logger.log_wire("CANONICAL", sig.to_canonical())
    return 0


if __name__ == "__main__":
    sys.exit(main())
