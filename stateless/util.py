from typing import Union
from Crypto.Hash import keccak
import rlp

from .errors import MalformedWitness


def keccak_256(x: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=bytes(x)).digest()


def rlp_encode_list(items: list) -> bytes:
    return rlp.encode(items)


def encode_hex(v: bytes) -> str:
    return '0x' + bytes(v).hex()


def decode_hex(v: str) -> bytes:
    if v.startswith('0x'):
        v = v[2:]
    return bytes.fromhex(v)


# Witness producers are not consistent about the 0x prefix (storage values and some hashes come without),
# so every hex field of a witness goes through here before it is decoded.
def normalize_hex(v: str) -> str:
    if not isinstance(v, str):
        raise MalformedWitness("expected hex string, got %r" % (v,))
    v = v.lower()
    if not v.startswith('0x'):
        v = '0x' + v
    digits = v[2:]
    if any(c not in '0123456789abcdef' for c in digits):
        raise MalformedWitness("invalid hex string: %r" % v)
    return v


def hex_to_bytes(v: str) -> bytes:
    v = normalize_hex(v)
    if len(v) % 2 == 1:
        raise MalformedWitness("odd number of hex digits in byte string: %s" % v)
    return bytes.fromhex(v[2:])


def hex_to_int(v: Union[int, str]) -> int:
    if isinstance(v, bool):
        raise MalformedWitness("expected number, got %r" % (v,))
    if isinstance(v, int):
        if v < 0:
            raise MalformedWitness("negative number in witness: %d" % v)
        return v
    v = normalize_hex(v)
    if len(v) == 2:  # "0x" is zero
        return 0
    return int(v, 16)
