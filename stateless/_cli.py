import click
import json
import logging
from typing import BinaryIO, Optional, TextIO

from .builder import reconstruct, root_hash
from .errors import StoreError, WitnessError
from .nibbles import nibbles_to_hex
from .node import BranchNode, ExtensionNode, LeafNode, decode_node, node_from_raw
from .store import MemoryStore
from .util import encode_hex, decode_hex
from .witness import WitnessFile


@click.group()
def cli():
    """Stateless - rebuild Merkle Patricia Tries from block witnesses"""


@cli.command()
@click.argument('input', type=click.File('rb'))
@click.option('--root', type=click.STRING, default=None,
              help="expected state root, overrides the root in the witness file")
@click.option('--output', type=click.File('w'), default=None,
              help="write the rebuilt nodes as JSON (hash -> node)")
@click.option('--verbose', is_flag=True, help="log every stored node and leaf")
def build(input: BinaryIO, root: Optional[str], output: Optional[TextIO], verbose: bool):
    """Rebuild the state trie of a witness file

    INPUT json-encoded witness file: {"root": "0x..", "trees": [...]}
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    obj: WitnessFile = json.load(input)
    if not isinstance(obj, dict):
        raise click.ClickException("witness file must hold a JSON object, got %s" % type(obj).__name__)
    trees = obj.get('trees', [])
    if len(trees) == 0:
        raise click.ClickException("witness file has no trees")

    expected_hex = root if root is not None else obj.get('root')
    expected = None
    if expected_hex is not None:
        try:
            expected = decode_hex(expected_hex)
        except (ValueError, AttributeError) as e:
            raise click.ClickException("invalid expected root %r: %s" % (expected_hex, e))

    store = MemoryStore(verify=True)
    for i, tree in enumerate(trees):
        click.echo("rebuilding tree %d..." % i)
        try:
            # only the first tree is the state trie the expected root refers to
            out = reconstruct(store, tree, expected_root=expected if i == 0 else None)
        except (WitnessError, StoreError) as e:
            raise click.ClickException("tree %d: %s: %s" % (i, e.__class__.__name__, e))
        click.echo("root %d: %s" % (i, encode_hex(root_hash(out))))

    click.echo("stored %d nodes" % len(store))
    if expected is not None:
        click.echo("matches expected root!")

    if output is not None:
        mpt_node_by_hash = {encode_hex(k): encode_hex(v) for k, v in store.items()}
        json.dump(mpt_node_by_hash, output)
        click.echo("written nodes to %s" % output.name)


@cli.command()
@click.argument('data', type=click.STRING)
def node(data: str):
    """Decode a single RLP encoded trie node

    DATA the node, 0x prefixed + hex encoded
    """
    try:
        n = decode_node(decode_hex(data))
    except ValueError as e:  # bad hex, or MalformedNode
        raise click.ClickException(str(e))

    click.echo("hash: %s (%d bytes)" % (encode_hex(n.hash()), len(n.serialize())))

    def fmt_ref(ref) -> str:
        if isinstance(ref, list):
            return "embedded " + repr(node_from_raw(ref))
        if len(ref) == 0:
            return "-"
        return encode_hex(ref)

    if isinstance(n, BranchNode):
        click.echo("branch")
        for i, child in enumerate(n.children):
            click.echo("  %x: %s" % (i, fmt_ref(child)))
        click.echo("  value: %s" % encode_hex(n.value))
    elif isinstance(n, ExtensionNode):
        click.echo("extension %s" % nibbles_to_hex(n.path))
        click.echo("  child: %s" % fmt_ref(n.child))
    elif isinstance(n, LeafNode):
        click.echo("leaf %s" % nibbles_to_hex(n.path))
        click.echo("  value: %s" % encode_hex(n.value))
