"""
CLI entry point for Chunkroot.

Provides command-line interface for computing Merkle roots of files and
serving/verifying file chunks with inclusion proofs.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from chunkroot._version import __version__
from chunkroot.cli.context import CLIContext, pass_context
from chunkroot.cli.files import files_group
from chunkroot.cli.tree import tree_group
from chunkroot.config.settings import get_default_config_path, load_config
from chunkroot.exceptions import ConfigurationError, ConfigurationLoadError
from chunkroot.logging_config import get_logger, setup_logging


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Set logging level (default: from configuration)',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output',
)
@click.version_option(version=__version__, prog_name='chunkroot')
@pass_context
def cli(ctx: CLIContext, config: Optional[Path], log_level: Optional[str], verbose: bool):
    """
    Chunkroot - Merkle root commitments and chunk inclusion proofs.

    Splits files into fixed-size chunks, publishes one root hash per file and
    proves any chunk against that root.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None

    try:
        ctx.config = load_config(ctx.config_path)
    except ConfigurationLoadError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    try:
        effective_log_level = log_level.upper() if log_level else ctx.config.logging.level
        log_file = Path(ctx.config.logging.file) if ctx.config.logging.file else None
        setup_logging(
            level=effective_log_level,
            log_file=log_file,
            json_format=ctx.config.logging.format == "json",
        )
    except OSError as e:
        click.echo(f"Error: Failed to set up logging: {e}", err=True)
        sys.exit(1)

    if verbose:
        logger = get_logger("chunkroot.cli")
        logger.info("cli_started", config_path=ctx.config_path or "defaults", log_level=effective_log_level)


cli.add_command(tree_group)
cli.add_command(files_group)


def main() -> None:
    cli()


if __name__ == '__main__':
    main()
