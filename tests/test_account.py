import rlp

from stateless.account import Account, encode_account, decode_account
from stateless.params import BLANK_ROOT, EMPTY_CODE_HASH


def test_encode_eoa_defaults():
    data = encode_account(0, 0)
    # [0, 0, blank root, empty code hash]
    assert data == rlp.encode([b"", b"", bytes(BLANK_ROOT), bytes(EMPTY_CODE_HASH)])
    assert data[:4] == bytes.fromhex("f8448080")


def test_encode_field_order():
    storage_root = b"\x22" * 32
    code_hash = b"\x33" * 32
    data = encode_account(1, 1000, storage_root, code_hash)
    assert rlp.decode(data) == [b"\x01", b"\x03\xe8", storage_root, code_hash]
    acc = decode_account(data)
    assert acc == Account(nonce=1, balance=1000, storage_root=storage_root, code_hash=code_hash)
