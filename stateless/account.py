import rlp
from rlp.sedes import big_endian_int, Binary

from .params import BLANK_ROOT, EMPTY_CODE_HASH, HASH_LENGTH

hash32 = Binary.fixed_length(HASH_LENGTH)


# Value of a world-trie leaf. Field order is fixed by the protocol.
class Account(rlp.Serializable):
    fields = [
        ('nonce', big_endian_int),
        ('balance', big_endian_int),
        ('storage_root', hash32),
        ('code_hash', hash32),
    ]


def encode_account(nonce: int, balance: int,
                   storage_root: bytes = BLANK_ROOT, code_hash: bytes = EMPTY_CODE_HASH) -> bytes:
    """RLP encoding of the account record. Externally owned accounts keep the default
    storage root and code hash."""
    acc = Account(nonce=nonce, balance=balance, storage_root=bytes(storage_root), code_hash=bytes(code_hash))
    return rlp.encode(acc)


def decode_account(data: bytes) -> Account:
    return rlp.decode(data, sedes=Account)
