from typing import List, Sequence

from .errors import InvalidLength, MalformedWitness

Nibbles = List[int]


def bytes_to_nibbles(key: bytes) -> Nibbles:
    """Expands every byte into two nibbles, high nibble first."""
    out = []
    for b in bytes(key):
        out.append(b >> 4)
        out.append(b & 0x0F)
    return out


def nibbles_to_bytes(nibbles: Sequence[int]) -> bytes:
    """Packs an even number of nibbles back into bytes."""
    if len(nibbles) % 2 != 0:
        raise InvalidLength("cannot pack odd number of nibbles: %d" % len(nibbles))
    return bytes((nibbles[i] << 4) | nibbles[i+1] for i in range(0, len(nibbles), 2))


def matching_nibble_length(a: Sequence[int], b: Sequence[int]) -> int:
    """Returns the number of in order matching nibbles of a and b."""
    i = 0
    max_common = min(len(a), len(b))
    while i < max_common and a[i] == b[i]:
        i += 1
    return i


def keys_match(a: Sequence[int], b: Sequence[int]) -> bool:
    return len(a) == len(b) and matching_nibble_length(a, b) == len(a)


# One nibble per hex digit, no byte packing: "0xab1" -> [0xa, 0xb, 0x1]
def nibbles_from_hex(v: str) -> Nibbles:
    if v.startswith('0x'):
        v = v[2:]
    try:
        return [int(c, 16) for c in v]
    except ValueError:
        raise MalformedWitness("invalid nibble path: %r" % v)


def nibbles_to_hex(nibbles: Sequence[int]) -> str:
    return '0x' + ''.join('%x' % n for n in nibbles)
