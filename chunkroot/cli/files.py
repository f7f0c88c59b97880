"""
CLI commands for serving file chunks from a directory.

Provides commands for listing hashed files and checking a served chunk
against its file's root hash.
"""

import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from chunkroot.cli.context import CLIContext, pass_context
from chunkroot.cli.tree import chunk_size_option, hasher_option
from chunkroot.exceptions import ChunkrootError
from chunkroot.fileserver.server import FileServer
from chunkroot.logging_config import get_logger, set_correlation_id

logger = get_logger(__name__)

dir_argument = click.argument(
    'directory',
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)

ext_option = click.option(
    '--ext',
    '-e',
    'extensions',
    multiple=True,
    help='File extension to include, repeatable (default: from configuration)',
)

all_files_option = click.option(
    '--all-files',
    is_flag=True,
    help='Include files with any extension',
)


def build_server(
    ctx: CLIContext,
    directory: Optional[Path],
    extensions: Tuple[str, ...],
    all_files: bool,
    chunk_size: Optional[int],
    hasher: Optional[str],
) -> FileServer:
    """
    Create a FileServer from command options and configuration.

    Args:
        ctx: CLI context
        directory: Directory to serve, or None for the configured data_dir
        extensions: Extensions given on the command line
        all_files: Ignore extension filtering
        chunk_size: Chunk size given on the command line
        hasher: Hash algorithm given on the command line

    Returns:
        FileServer with every matching file hashed
    """
    config = ctx.get_config()
    if directory is None:
        directory = Path(config.file_server.data_dir).expanduser()

    if all_files:
        allowed = []
    elif extensions:
        allowed = list(extensions)
    else:
        allowed = list(config.file_server.allowed_extensions)

    return FileServer.from_dir(
        directory,
        allowed,
        ctx.resolve_chunk_size(chunk_size),
        hasher=ctx.resolve_hasher(hasher),
    )


@click.group(name='files')
def files_group():
    """Serve file chunks with Merkle proofs."""
    pass


@files_group.command('list')
@dir_argument
@ext_option
@all_files_option
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
def list_files(
    ctx: CLIContext,
    directory: Optional[Path],
    extensions: Tuple[str, ...],
    all_files: bool,
    chunk_size: Optional[int],
    hasher: Optional[str],
    format: str,
):
    """
    List files available on the server with their root hashes.

    Examples:

        chunkroot files list ./data

        chunkroot files list ./data --ext txt --ext md --format json
    """
    try:
        server = build_server(ctx, directory, extensions, all_files, chunk_size, hasher)
        files = server.list_files()
        logger.debug("files_listed", directory=str(directory) if directory else None, file_count=len(files))

        if format.lower() == 'json':
            click.echo(json.dumps([info.to_dict() for info in files], indent=2))
            return

        if not files:
            click.echo("No files found.")
            return

        name_width = max(len("Name"), max(len(info.name) for info in files))
        click.echo("Files available on the server:")
        click.echo()
        click.echo(f"{'#':<4}  {'Name':<{name_width}}  {'Size':>10}  {'Chunks':>6}  Root hash")
        click.echo("-" * (4 + name_width + 32 + len(files[0].root_hash.hex())))
        for index, info in enumerate(files):
            click.echo(
                f"{index:<4}  {info.name:<{name_width}}  {info.size:>10}  "
                f"{info.chunk_count:>6}  {info.root_hash.hex()}"
            )

    except ChunkrootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@files_group.command('check')
@click.argument('file_index', type=click.IntRange(min=0))
@click.argument('chunk_index', type=click.IntRange(min=0))
@dir_argument
@ext_option
@all_files_option
@chunk_size_option
@hasher_option
@pass_context
def check(
    ctx: CLIContext,
    file_index: int,
    chunk_index: int,
    directory: Optional[Path],
    extensions: Tuple[str, ...],
    all_files: bool,
    chunk_size: Optional[int],
    hasher: Optional[str],
):
    """
    Fetch a chunk with its proof and verify it against the file's root.

    FILE_INDEX is the position of the file in `chunkroot files list`.

    Examples:

        chunkroot files check 1 5 ./data
    """
    set_correlation_id()
    try:
        server = build_server(ctx, directory, extensions, all_files, chunk_size, hasher)
        files = server.list_files()

        if file_index >= len(files):
            click.echo(f"Error: file with index {file_index} not found on server", err=True)
            sys.exit(1)

        file_info = files[file_index]
        served = server.get_file_chunk(file_info.root_hash, chunk_index)
        if served is None:
            click.echo(f"Error: chunk with index {chunk_index} not found in file", err=True)
            sys.exit(1)

        chunk_proof, chunk_data = served
        is_valid = server.verify_chunk(file_info.root_hash, chunk_data, chunk_proof)
        logger.info(
            "served_chunk_checked",
            file_name=file_info.name,
            file_index=file_index,
            chunk_index=chunk_index,
            valid=is_valid,
        )

        click.echo(f"File #{file_index}: {file_info.name} (root {file_info.root_hash.hex()})")
        click.echo(
            f"Chunk #{chunk_index} of file #{file_index} is "
            f"{'VALID' if is_valid else 'INVALID'}"
        )

    except ChunkrootError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
