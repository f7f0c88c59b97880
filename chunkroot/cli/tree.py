"""
CLI commands for Merkle tree operations on a single file.

Provides commands for:
- Computing the root hash of a file's chunk tree
- Printing the inclusion proof of one chunk
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from chunkroot.cli.context import CLIContext, pass_context
from chunkroot.exceptions import ChunkrootError
from chunkroot.fileserver.chunking import make_merkle_tree_for_file, read_file_chunk_by_offset
from chunkroot.logging_config import get_logger
from chunkroot.merkle.hasher import HASHERS
from chunkroot.merkle.tree import MerkleTree

logger = get_logger(__name__)

chunk_size_option = click.option(
    '--chunk-size',
    '-s',
    type=click.IntRange(min=1),
    default=None,
    help='Chunk size in bytes (default: from configuration)',
)

hasher_option = click.option(
    '--hasher',
    '-H',
    type=click.Choice(sorted(HASHERS), case_sensitive=False),
    default=None,
    help='Hash algorithm (default: from configuration)',
)


@click.group(name='tree')
def tree_group():
    """Merkle tree operations on a single file."""
    pass


@tree_group.command('root')
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@chunk_size_option
@hasher_option
@pass_context
def root(ctx: CLIContext, file: Path, chunk_size: Optional[int], hasher: Optional[str]):
    """
    Compute the Merkle root hash of a file.

    The file is split into fixed-size chunks; each chunk is one leaf.

    Examples:

        chunkroot tree root data/lorem.txt

        chunkroot tree root data/lorem.txt --chunk-size 4096 --hasher sdbm
    """
    try:
        hash_function = ctx.resolve_hasher(hasher)
        chunk_size = ctx.resolve_chunk_size(chunk_size)

        tree, file_size = make_merkle_tree_for_file(file, chunk_size, hash_function)
        root_hash = tree.get_root()
        if root_hash is None:
            click.echo(f"Error: empty file: {file}", err=True)
            sys.exit(1)

        click.echo(f"File: {file}")
        click.echo(f"Size: {file_size} bytes")
        click.echo(f"Chunk size: {chunk_size} bytes")
        click.echo(f"Chunks: {tree.item_count}")
        click.echo(f"Hash algorithm: {hash_function.name}")
        click.echo(f"Root hash: {root_hash.hex()}")
        logger.info(
            "file_root_computed",
            path=str(file),
            chunk_count=tree.item_count,
            hash_algorithm=hash_function.name,
            root_hash=root_hash.hex(),
        )

    except ChunkrootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@tree_group.command('proof')
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('chunk_index', type=click.IntRange(min=0))
@chunk_size_option
@hasher_option
@click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)
@pass_context
def proof(
    ctx: CLIContext,
    file: Path,
    chunk_index: int,
    chunk_size: Optional[int],
    hasher: Optional[str],
    format: str,
):
    """
    Print the inclusion proof of one chunk and check it against the root.

    Examples:

        chunkroot tree proof data/lorem.txt 3

        chunkroot tree proof data/lorem.txt 3 --format json
    """
    try:
        hash_function = ctx.resolve_hasher(hasher)
        chunk_size = ctx.resolve_chunk_size(chunk_size)

        tree, _ = make_merkle_tree_for_file(file, chunk_size, hash_function)
        chunk_proof = tree.get_proof(chunk_index)
        if chunk_proof is None:
            click.echo(
                f"Error: chunk with index {chunk_index} not found in file "
                f"({tree.item_count} chunks)",
                err=True,
            )
            sys.exit(1)

        root_hash = tree.get_root()
        chunk_data = read_file_chunk_by_offset(file, chunk_index * chunk_size, chunk_size)
        is_valid = MerkleTree.verify_proof(chunk_data, root_hash, chunk_proof, hasher=hash_function)
        logger.info(
            "chunk_proof_checked",
            path=str(file),
            chunk_index=chunk_index,
            proof_length=len(chunk_proof),
            valid=is_valid,
        )

        if format.lower() == 'json':
            output = {
                "file": str(file),
                "chunk_index": chunk_index,
                "chunk_size": chunk_size,
                "hash_algorithm": hash_function.name,
                "root_hash": root_hash.hex(),
                "proof": [
                    {
                        "sibling_hash": step.sibling_hash.hex(),
                        "is_right_sibling": step.is_right_sibling,
                    }
                    for step in chunk_proof
                ],
                "valid": is_valid,
            }
            click.echo(json.dumps(output, indent=2))
        else:
            click.echo(f"Root hash: {root_hash.hex()}")
            click.echo(f"Chunk #{chunk_index} ({len(chunk_data)} bytes), {len(chunk_proof)} proof steps")
            click.echo()
            if len(chunk_proof) > 0:
                click.echo(f"{'Level':<6}  {'Side':<5}  Sibling hash")
                click.echo("-" * 80)
                for level, step in enumerate(chunk_proof):
                    side = "right" if step.is_right_sibling else "left"
                    click.echo(f"{level:<6}  {side:<5}  {step.sibling_hash.hex()}")
                click.echo()
            click.echo(f"Chunk #{chunk_index} is {'VALID' if is_valid else 'INVALID'}")

    except ChunkrootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"Error: can not read file {file}: {e}", err=True)
        sys.exit(1)
