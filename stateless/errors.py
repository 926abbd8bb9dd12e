class WitnessError(Exception):
    """Base of all errors that abort a reconstruction. There is no partial result:
    every ancestor hash depends on every node below it."""


class MalformedWitness(WitnessError):
    """Unknown tag, or a witness value of the wrong shape."""


class InvalidLeafArity(WitnessError):
    """A leaf carries a field count that does not fit its domain."""


class UnsupportedNesting(WitnessError):
    """An extension child resolved to an embedded node instead of a hash."""


class ExpectedHashRoot(WitnessError):
    """A sub-trie that has to collapse into a single hash (e.g. account storage) did not."""


class InvalidChild(WitnessError):
    """A node kind that cannot be referenced from a branch slot."""


class RootMismatch(WitnessError):
    """The rebuilt root is not the expected root."""


class InvalidLength(ValueError):
    """An odd number of nibbles cannot be packed into bytes."""


class MalformedNode(ValueError):
    """Bytes that are not a valid serialized trie node."""


class StoreError(IOError):
    """A content store write failed."""
