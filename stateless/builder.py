import logging
from enum import Enum
from typing import Any, List, Optional, Protocol, Union
from remerkleable.byte_arrays import Bytes32, ByteVector
import rlp

from .account import encode_account
from .errors import (
    ExpectedHashRoot, InvalidLeafArity, MalformedWitness, RootMismatch, UnsupportedNesting,
)
from .nibbles import bytes_to_nibbles, nibbles_from_hex
from .node import AnyNode, BranchNode, ExtensionNode, HashNode, LeafNode, TrieNode, node_ref
from .params import ADDRESS_LENGTH, BLANK_ROOT, HASH_LENGTH
from .store import ContentStore
from .util import hex_to_bytes, hex_to_int, keccak_256
from .witness import (
    BranchWitness, EmptyWitness, ExclusionLeafWitness, ExtensionWitness, HashWitness, LeafWitness, decode_witness,
)

log = logging.getLogger(__name__)


class Address(ByteVector[ADDRESS_LENGTH]):
    pass


class Domain(Enum):
    # world state: keys are hashed addresses, values are account records
    ACCOUNT = 0
    # contract storage: keys are (already hashed) slot keys, values are RLP encoded integers
    STORAGE = 1


class BuildObserver(Protocol):
    """Optional diagnostics sink, passed in by the caller."""

    def on_leaf(self, domain: Domain, key: str, node: LeafNode) -> None: ...

    def on_stored(self, key: Bytes32, value: bytes) -> None: ...


# None is the empty node: an absent branch slot, or the empty trie.
BuildResult = Optional[AnyNode]


def commit(store: ContentStore, node: TrieNode, observer: Optional[BuildObserver] = None) -> AnyNode:
    """Returns the node itself if it can be embedded in its parent,
    otherwise writes it to the store and returns a reference to it."""
    if node.is_embeddable():
        return node
    data = node.serialize()
    key = node.hash()
    store.put(key, data)
    log.debug("stored %s node %s (%d bytes)", node.__class__.__name__, key.hex(), len(data))
    if observer is not None:
        observer.on_stored(key, data)
    return HashNode(key)


def build(store: ContentStore, witness: Any, depth: int = 0, domain: Domain = Domain.ACCOUNT,
          observer: Optional[BuildObserver] = None) -> BuildResult:
    """Rebuilds the trie described by the witness, children before parents.

    depth is the number of key nibbles consumed by the ancestors of this node.
    Nodes that are too large to embed are written to the store and replaced by a HashNode.
    """
    w = decode_witness(witness)

    if isinstance(w, EmptyWitness):
        return None

    if isinstance(w, HashWitness):
        # pruned subtree, not reconstructed and never read
        return HashNode(w.hash)

    if isinstance(w, BranchWitness):
        children: List[Union[bytes, list]] = []
        for child in w.children:
            node = build(store, child, depth + 1, domain, observer)
            # embedded children go in as their raw item list, anything else must be a hash by now
            children.append(node_ref(node))
        return commit(store, BranchNode(children), observer)

    if isinstance(w, ExtensionWitness):
        node = build(store, w.child, depth + len(w.path), domain, observer)
        if node is None:
            raise MalformedWitness("extension at depth %d without child" % depth)
        # Only a hash boundary is supported directly below an extension.
        if not isinstance(node, HashNode):
            raise UnsupportedNesting("extension at depth %d has embedded %s child"
                                     % (depth, node.__class__.__name__))
        return commit(store, ExtensionNode(w.path, node_ref(node)), observer)

    if isinstance(w, LeafWitness):
        if domain == Domain.ACCOUNT:
            leaf = account_leaf(store, w, depth, observer)
        else:
            leaf = storage_leaf(w, depth)
        log.debug("rebuilt %s leaf %s at depth %d", domain.name.lower(), w.key, depth)
        if observer is not None:
            observer.on_leaf(domain, w.key, leaf)
        return commit(store, leaf, observer)

    if isinstance(w, ExclusionLeafWitness):
        leaf = exclusion_leaf(w, domain)
        log.debug("rebuilt %s exclusion leaf %s at depth %d", domain.name.lower(), w.key, depth)
        if observer is not None:
            observer.on_leaf(domain, w.key, leaf)
        return commit(store, leaf, observer)

    raise MalformedWitness("unhandled witness node %r" % (w,))


def decode_address(v: str) -> Address:
    addr = hex_to_bytes(v)
    if len(addr) != ADDRESS_LENGTH:
        raise MalformedWitness("address must be %d bytes, got %d" % (ADDRESS_LENGTH, len(addr)))
    return Address(addr)


def decode_hash(v: str) -> Bytes32:
    h = hex_to_bytes(v)
    if len(h) != HASH_LENGTH:
        raise MalformedWitness("hash must be %d bytes, got %d" % (HASH_LENGTH, len(h)))
    return Bytes32(h)


def storage_value(v: Union[int, str]) -> bytes:
    # slot values are stored as RLP encoded integers, without leading zero bytes
    return rlp.encode(hex_to_int(v))


def account_leaf(store: ContentStore, w: LeafWitness, depth: int,
                 observer: Optional[BuildObserver] = None) -> LeafNode:
    # account addresses are hashed to get a trie key
    key = keccak_256(decode_address(w.key))
    arity = len(w.fields) + 1
    if arity == 3:
        nonce, balance = w.fields
        value = encode_account(hex_to_int(nonce), hex_to_int(balance))
    elif arity == 5:
        nonce, balance, code, storage_witness = w.fields
        code_hash = keccak_256(hex_to_bytes(code))
        storage = build(store, storage_witness, 0, Domain.STORAGE, observer)
        if storage is None:
            storage_root = BLANK_ROOT
        elif isinstance(storage, HashNode):
            storage_root = storage.hash()
        else:
            raise ExpectedHashRoot("storage of account %s did not resolve to a hash, got %r" % (w.key, storage))
        value = encode_account(hex_to_int(nonce), hex_to_int(balance), storage_root, code_hash)
    else:
        raise InvalidLeafArity("account leaf must have 3 or 5 fields, got %d" % arity)
    path = bytes_to_nibbles(key)
    if depth > len(path):
        raise MalformedWitness("account leaf %s below the maximum key depth: %d" % (w.key, depth))
    return LeafNode(path[depth:], value)


def storage_leaf(w: LeafWitness, depth: int) -> LeafNode:
    arity = len(w.fields) + 1
    if arity != 2:
        raise InvalidLeafArity("storage leaf must have 2 fields, got %d" % arity)
    # literal key digits, the slot key arrives already hashed
    path = nibbles_from_hex(w.key)
    if depth > len(path):
        raise MalformedWitness("storage key %s is too short for depth %d" % (w.key, depth))
    return LeafNode(path[depth:], storage_value(w.fields[0]))


def exclusion_leaf(w: ExclusionLeafWitness, domain: Domain) -> LeafNode:
    # The key is the remaining path of the leaf itself, one nibble per hex digit.
    # Odd lengths are valid: a leaf below an odd number of consumed nibbles has an odd path.
    path = nibbles_from_hex(w.key)
    if len(path) > 2 * HASH_LENGTH:
        raise MalformedWitness("exclusion leaf path of %d nibbles is longer than a key" % len(path))
    arity = len(w.fields) + 1
    if domain == Domain.STORAGE:
        if arity != 2:
            raise InvalidLeafArity("storage exclusion leaf must have 2 fields, got %d" % arity)
        return LeafNode(path, storage_value(w.fields[0]))
    if arity == 3:
        nonce, balance = w.fields
        value = encode_account(hex_to_int(nonce), hex_to_int(balance))
    elif arity == 5:
        nonce, balance, storage_root, code_hash = w.fields
        value = encode_account(hex_to_int(nonce), hex_to_int(balance),
                               decode_hash(storage_root), decode_hash(code_hash))
    else:
        raise InvalidLeafArity("account exclusion leaf must have 3 or 5 fields, got %d" % arity)
    return LeafNode(path, value)


def root_hash(root: BuildResult) -> Bytes32:
    """The state root of a rebuilt trie. The root is always hashed, even when it is small."""
    if root is None:
        return BLANK_ROOT
    return root.hash()


def reconstruct(store: ContentStore, witness: Any, expected_root: Optional[bytes] = None,
                observer: Optional[BuildObserver] = None) -> BuildResult:
    """Rebuilds a world state trie from its witness. When the whole trie is too small to be stored,
    the embedded root node is returned instead of a HashNode."""
    root = build(store, witness, 0, Domain.ACCOUNT, observer)
    got = root_hash(root)
    log.info("rebuilt state root %s", got.hex())
    if expected_root is not None and got != bytes(expected_root):
        raise RootMismatch("rebuilt root %s does not match expected root %s" % (got.hex(), bytes(expected_root).hex()))
    return root
