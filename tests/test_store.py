import pytest

from stateless.errors import StoreError
from stateless.store import MemoryStore
from stateless.util import keccak_256


def test_put_idempotent():
    store = MemoryStore(verify=True)
    value = b"\xc2\x31\x05" * 20
    key = keccak_256(value)
    store.put(key, value)
    store.put(key, value)
    assert len(store) == 1
    assert key in store
    assert store.get(key) == value


def test_get_missing():
    with pytest.raises(KeyError):
        MemoryStore().get(b"\x00" * 32)


def test_verify_hash():
    store = MemoryStore(verify=True)
    with pytest.raises(StoreError):
        store.put(b"\x00" * 32, b"\x01\x02")
    # without verification the store trusts the caller
    store = MemoryStore()
    store.put(b"\x00" * 32, b"\x01\x02")
    assert store.get(b"\x00" * 32) == b"\x01\x02"


def test_store_error_is_io_error():
    assert issubclass(StoreError, IOError)
