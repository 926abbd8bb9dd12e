from typing import List, Sequence, Tuple, Union, Optional
from remerkleable.byte_arrays import Bytes32
from rlp.exceptions import DecodingError
import rlp

from .errors import InvalidChild, MalformedNode
from .nibbles import Nibbles, nibbles_to_bytes, bytes_to_nibbles
from .params import BLANK_NODE, BRANCH_WIDTH, EMBED_THRESHOLD, HASH_LENGTH
from .util import keccak_256, rlp_encode_list

# What a parent holds for a child: the empty string, a 32 byte hash,
# or the raw (not yet RLP encoded) item list of a small embedded node.
Ref = Union[bytes, list]


# 2-item nodes:
# - leaf A 2-item node [ encodedPath, value ]
# - extension A 2-item node [ encodedPath, key ]
#
# The first nibble of the encodedPath is defined as:
#
# hex char    bits    |    node type partial     path length
# ----------------------------------------------------------
# 0        0000    |       extension              even
# 1        0001    |       extension              odd
# 2        0010    |   terminating (leaf)         even
# 3        0011    |   terminating (leaf)         odd

def encode_path(path: Sequence[int], terminating: bool) -> bytes:
    flag = 0b0010 if terminating else 0
    if len(path) % 2 == 1:  # odd: the first path nibble shares the byte with the flag
        prefixed = [flag | 0b0001] + list(path)
    else:
        prefixed = [flag, 0] + list(path)
    return nibbles_to_bytes(prefixed)


def decode_path(encoded_path: bytes) -> Tuple[bool, Nibbles]:
    if len(encoded_path) == 0:
        raise MalformedNode("empty encoded path")
    flag_nibble = (encoded_path[0] & 0xF0) >> 4
    if flag_nibble & 0b1100 != 0:
        raise MalformedNode("invalid path flag nibble: %d" % flag_nibble)
    terminating = flag_nibble & 0b0010 != 0
    evenlen = flag_nibble & 0b0001 == 0
    path = bytes_to_nibbles(encoded_path[1:])
    if evenlen:
        if encoded_path[0] & 0x0F != 0:
            raise MalformedNode("non-zero padding in even length path: %s" % encoded_path.hex())
    else:
        path = [encoded_path[0] & 0x0F] + path
    return terminating, path


class TrieNode(object):
    def raw(self) -> list:
        raise NotImplementedError

    def serialize(self) -> bytes:
        return rlp_encode_list(self.raw())

    def hash(self) -> Bytes32:
        return Bytes32(keccak_256(self.serialize()))

    def is_embeddable(self) -> bool:
        return len(self.serialize()) < EMBED_THRESHOLD

    def __eq__(self, other):
        return type(self) is type(other) and self.raw() == other.raw()

    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__, self.serialize().hex())


class BranchNode(TrieNode):
    children: List[Ref]
    value: bytes

    def __init__(self, children: Sequence[Ref], value: bytes = BLANK_NODE):
        if len(children) != BRANCH_WIDTH:
            raise InvalidChild("branch needs %d child slots, got %d" % (BRANCH_WIDTH, len(children)))
        self.children = list(children)
        self.value = value

    def raw(self) -> list:
        # Branch's 17th element is the value
        return self.children + [self.value]


class ExtensionNode(TrieNode):
    path: Nibbles
    child: Ref

    def __init__(self, path: Sequence[int], child: Ref):
        self.path = list(path)
        self.child = child

    def raw(self) -> list:
        return [encode_path(self.path, terminating=False), self.child]


class LeafNode(TrieNode):
    path: Nibbles
    value: bytes

    def __init__(self, path: Sequence[int], value: bytes):
        self.path = list(path)
        self.value = value

    def raw(self) -> list:
        return [encode_path(self.path, terminating=True), self.value]


class HashNode(object):
    """Stands in for a node that is stored by hash, or pruned from the witness altogether."""

    _hash: Bytes32

    def __init__(self, h: bytes):
        if len(h) != HASH_LENGTH:
            raise InvalidChild("hash reference must be %d bytes, got %d" % (HASH_LENGTH, len(h)))
        self._hash = Bytes32(h)

    def hash(self) -> Bytes32:
        return self._hash

    def __eq__(self, other):
        return isinstance(other, HashNode) and self._hash == other._hash

    def __repr__(self):
        return "HashNode(%s)" % self._hash.hex()


AnyNode = Union[TrieNode, HashNode]


def node_ref(node: Optional[AnyNode]) -> Ref:
    """The reference a parent keeps for the given child."""
    if node is None:
        return BLANK_NODE
    if isinstance(node, HashNode):
        return bytes(node.hash())
    if isinstance(node, TrieNode):
        if not node.is_embeddable():
            raise InvalidChild("node of %d bytes must be referenced by hash" % len(node.serialize()))
        return node.raw()
    raise InvalidChild("cannot reference %r from a parent node" % (node,))


def node_from_raw(raw: list) -> TrieNode:
    if not isinstance(raw, list):
        raise MalformedNode("expected node item list, got %r" % (raw,))
    if len(raw) == BRANCH_WIDTH + 1:
        for child in raw[:BRANCH_WIDTH]:
            _check_ref(child)
        if not isinstance(raw[BRANCH_WIDTH], bytes):
            raise MalformedNode("branch value must be a byte string")
        return BranchNode(raw[:BRANCH_WIDTH], raw[BRANCH_WIDTH])
    if len(raw) == 2:
        if not isinstance(raw[0], bytes):
            raise MalformedNode("encoded path must be a byte string")
        terminating, path = decode_path(raw[0])
        if terminating:
            if not isinstance(raw[1], bytes):
                raise MalformedNode("leaf value must be a byte string")
            return LeafNode(path, raw[1])
        _check_ref(raw[1])
        return ExtensionNode(path, raw[1])
    raise MalformedNode("node with %d items" % len(raw))


def _check_ref(ref) -> None:
    if isinstance(ref, list):
        node_from_raw(ref)
        return
    if len(ref) not in (0, HASH_LENGTH):
        raise MalformedNode("child reference of %d bytes" % len(ref))


def decode_node(data: bytes) -> TrieNode:
    """Parses a serialized node. Children stay references, embedded children stay raw item lists."""
    try:
        raw = rlp.decode(data)
    except DecodingError as e:
        raise MalformedNode("invalid RLP node data: %s" % e) from e
    return node_from_raw(raw)
