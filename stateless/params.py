# Merkle Patricia Trie constants, see the yellow paper appendix D and geth/trie

from remerkleable.byte_arrays import Bytes32

HASH_LENGTH = 32  # Byte length of a keccak-256 digest, and of every node reference that is not embedded.
ADDRESS_LENGTH = 20  # Byte length of an account address, hashed to get the world-trie key.
BRANCH_WIDTH = 16  # Number of child slots in a branch node, one per nibble. The 17th item is the value slot.
EMBED_THRESHOLD = 32  # Nodes with an RLP encoding strictly shorter than this are inlined in their parent.

BLANK_NODE = b""  # Empty slots and the empty trie are represented by an empty byte string.
# keccak256(rlp(b"")), the root of a trie without any keys
BLANK_ROOT = Bytes32(bytes.fromhex("56e81f171bcc55a6ff8345e692c0f86e5b48e01b996cadc001622fb5e363b421"))
# keccak256(b""), the code hash of accounts without code
EMPTY_CODE_HASH = Bytes32(bytes.fromhex("c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"))
