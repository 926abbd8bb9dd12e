from typing import Dict, ItemsView, Protocol

from .errors import StoreError
from .util import keccak_256


class ContentStore(Protocol):
    # note: key is computed as hash of the value (an RLP encoded MPT node), writes are idempotent
    def put(self, key: bytes, value: bytes) -> None: ...


class MemoryStore(ContentStore):
    # node hash -> node contents
    local_db: Dict[bytes, bytes]
    verify: bool

    def __init__(self, verify: bool = False):
        self.local_db = dict()
        self.verify = verify

    def put(self, key: bytes, value: bytes) -> None:
        key, value = bytes(key), bytes(value)
        if self.verify:
            if keccak_256(value) != key:
                raise StoreError("key %s is not the hash of the value" % key.hex())
            existing = self.local_db.get(key)
            if existing is not None and existing != value:
                raise StoreError("conflicting write for key %s" % key.hex())
        self.local_db[key] = value

    def get(self, key: bytes) -> bytes:
        key = bytes(key)
        if key not in self.local_db:
            raise KeyError(f"could not find node {key.hex()} in store")
        return self.local_db[key]

    def __contains__(self, key) -> bool:
        return bytes(key) in self.local_db

    def __len__(self) -> int:
        return len(self.local_db)

    def items(self) -> ItemsView[bytes, bytes]:
        return self.local_db.items()
