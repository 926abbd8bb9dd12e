from .builder import Domain, build, reconstruct, root_hash
from .errors import (
    WitnessError, MalformedWitness, InvalidLeafArity, UnsupportedNesting, ExpectedHashRoot,
    InvalidChild, RootMismatch, InvalidLength, MalformedNode, StoreError,
)
from .node import BranchNode, ExtensionNode, LeafNode, HashNode, decode_node
from .store import ContentStore, MemoryStore
