from dataclasses import dataclass

from bitparsec.Binary import bytes_, uint
from bitparsec.Combinators import pipe
from bitparsec.Prim import pure, run_parser


@dataclass
class IPv4Header:
    version: int
    ihl: int
    dscp: int
    ecn: int
    total_length: int
    identification: int
    flags: int
    fragment_offset: int
    ttl: int
    protocol: int
    checksum: int
    source: str
    destination: str
    options: bytes


def dotted(raw: bytes) -> str:
    return ".".join(str(octet) for octet in raw)


address = bytes_(4).map(dotted)

# The fixed 20-byte part; field widths follow RFC 791
fixed_fields = [
    uint(4), uint(4),        # version, IHL
    uint(6), uint(2),        # DSCP, ECN
    uint(16),                # total length
    uint(16),                # identification
    uint(3), uint(13),       # flags, fragment offset
    uint(8), uint(8),        # TTL, protocol
    uint(16),                # header checksum
    address, address,
]


def with_options(fields):
    # IHL counts 32-bit words; anything past the first five is options
    ihl = fields[1]
    options = bytes_((ihl - 5) * 4) if ihl > 5 else pure(b"")
    return options.map(lambda opts: IPv4Header(*fields, opts))


header = pipe(fixed_fields, list).bind(with_options)


if __name__ == "__main__":
    packet = bytes.fromhex(
        "45000073000040004011b861c0a80001c0a800c7"
    ) + b"payload"

    result, err = run_parser(header, packet)

    if err:
        print("Parsing Failed:", err)
    else:
        print("Successfully Parsed:")
        print(result[0])
