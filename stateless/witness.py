from typing import Any, List, NamedTuple, TypedDict, Union
from enum import Enum
from remerkleable.byte_arrays import Bytes32

from .errors import MalformedWitness
from .nibbles import Nibbles, nibbles_from_hex
from .params import BRANCH_WIDTH, HASH_LENGTH
from .util import normalize_hex, hex_to_bytes, hex_to_int


class WitnessTag(Enum):
    BRANCH = "branch"
    HASH = "hash"
    EXTENSION = "extension"
    LEAF = "leaf"
    # A leaf that does not match the looked-up key, proving the key is absent.
    # Its key is the literal remaining path, and its fields are the final account state.
    EXCLUSION_LEAF = "leaf_for_exclusion_proof"


class EmptyWitness(object):
    def __repr__(self):
        return "EmptyWitness()"


EMPTY_WITNESS = EmptyWitness()


class HashWitness(NamedTuple):
    hash: Bytes32


# Children (and other nested witness values) stay undecoded,
# they are decoded when the builder gets to them.
class BranchWitness(NamedTuple):
    children: List[Any]


class ExtensionWitness(NamedTuple):
    path: Nibbles
    child: Any


class LeafWitness(NamedTuple):
    key: str  # 0x prefixed hex
    fields: List[Any]


class ExclusionLeafWitness(NamedTuple):
    key: str  # 0x prefixed hex, one nibble per digit
    fields: List[Any]


Witness = Union[EmptyWitness, HashWitness, BranchWitness, ExtensionWitness, LeafWitness, ExclusionLeafWitness]


# This is the JSON object that a witness producer outputs.
class WitnessFile(TypedDict, total=False):
    # expected state root, 0x prefixed + hex encoded
    root: str
    # one witness tree per trie, the first one is the world state trie
    trees: List[Any]


def _from_mapping(obj: dict) -> list:
    # Older producers send {"branch": [...]} instead of ["branch", ...]
    if len(obj) != 1:
        raise MalformedWitness("witness object must have exactly one tag, got %r" % sorted(obj.keys()))
    tag, content = next(iter(obj.items()))
    if tag == WitnessTag.HASH.value:
        return [tag, content]
    if not isinstance(content, list):
        raise MalformedWitness("%s witness content must be a list, got %r" % (tag, content))
    return [tag] + content


def decode_witness(obj: Any) -> Witness:
    """Decodes the top node of a witness value. Nested witness values are left for the caller."""
    # Empty children in branches are sent as an empty string
    if isinstance(obj, (str, bytes)):
        if len(obj) > 0:
            raise MalformedWitness("invalid item in witness: %r" % (obj,))
        return EMPTY_WITNESS

    if isinstance(obj, dict):
        obj = _from_mapping(obj)

    if not isinstance(obj, list) or len(obj) == 0:
        raise MalformedWitness("witness node must be a tagged list, got %r" % (obj,))

    try:
        tag = WitnessTag(obj[0])
    except ValueError:
        raise MalformedWitness("unknown witness tag: %r" % (obj[0],))
    items = obj[1:]

    if tag == WitnessTag.BRANCH:
        if len(items) != BRANCH_WIDTH:
            raise MalformedWitness("branch must have %d children, got %d" % (BRANCH_WIDTH, len(items)))
        return BranchWitness(children=list(items))

    if tag == WitnessTag.HASH:
        if len(items) != 1:
            raise MalformedWitness("hash witness takes a single hash, got %d items" % len(items))
        h = hex_to_bytes(items[0])
        if len(h) != HASH_LENGTH:
            raise MalformedWitness("hash must be %d bytes, got %d" % (HASH_LENGTH, len(h)))
        return HashWitness(hash=Bytes32(h))

    if tag == WitnessTag.EXTENSION:
        if len(items) != 2:
            raise MalformedWitness("extension takes a path and a child, got %d items" % len(items))
        enc_path, child = items
        if not isinstance(enc_path, list) or len(enc_path) != 2:
            raise MalformedWitness("extension path must be [nibble count, nibble hex], got %r" % (enc_path,))
        count = hex_to_int(enc_path[0])
        digits = nibbles_from_hex(normalize_hex(enc_path[1]))
        if count == 0:
            raise MalformedWitness("extension with empty path")
        if count > len(digits):
            raise MalformedWitness("extension path has %d nibbles, expected %d" % (len(digits), count))
        # an odd count in byte-packed hex has a padding nibble at the end, ignore it
        return ExtensionWitness(path=digits[:count], child=child)

    # leaf kinds
    if len(items) == 0:
        raise MalformedWitness("%s witness without key" % tag.value)
    key = normalize_hex(items[0])
    if len(key) == 2:
        raise MalformedWitness("%s witness with empty key" % tag.value)
    if tag == WitnessTag.LEAF:
        return LeafWitness(key=key, fields=list(items[1:]))
    return ExclusionLeafWitness(key=key, fields=list(items[1:]))
