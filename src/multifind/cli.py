"""
Command-line interface for multifind.

Usage: multifind [-R] [-i] SEARCHROOT FILENAME [FILENAME ...]

Each filename is searched for concurrently; every match (or a not-found
notice) is printed on its own line prefixed by the id of the task that
produced it. Diagnostics go to stderr.
"""

import logging
import sys
from typing import Optional, Tuple

import click

from .config.parser import ConfigurationError, load_config
from .exceptions import ChannelSetupError, UsageError
from .models.config import LOG_FORMAT, ExecutorKind
from .tools.coordinator import SearchCoordinator


logger = logging.getLogger(__name__)


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('-R', 'recursive', is_flag=True, help='Search subdirectories recursively.')
@click.option('-i', 'ignore_case', is_flag=True, help='Match filenames case-insensitively.')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Path to configuration file.')
@click.option('--executor', type=click.Choice([kind.value for kind in ExecutorKind]),
              help='Run searches in processes or threads.')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging.')
@click.argument('searchroot')
@click.argument('filenames', nargs=-1, required=True)
@click.version_option(package_name='multifind')
@click.pass_context
def main(ctx: click.Context, recursive: bool, ignore_case: bool, config_path: Optional[str],
         executor: Optional[str], verbose: bool, searchroot: str, filenames: Tuple[str, ...]) -> None:
    """Search SEARCHROOT for each FILENAME in parallel."""
    try:
        result = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    config = result.config
    if executor:
        config = config.model_copy(update={'executor': ExecutorKind(executor)})

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.get_log_level(),
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    for warning in result.warnings:
        logger.debug(warning)

    coordinator = SearchCoordinator(config)
    try:
        lines = coordinator.run(
            searchroot,
            filenames,
            recursive=recursive or config.defaults.recursive,
            ignore_case=ignore_case or config.defaults.ignore_case,
        )
        for line in lines:
            # Paths are written back as the raw bytes they were read as.
            click.echo(line.encode(sys.getfilesystemencoding(), 'surrogateescape'), nl=False)
    except UsageError as e:
        raise click.UsageError(str(e), ctx=ctx)
    except ChannelSetupError as e:
        raise click.ClickException(str(e))

    if coordinator.all_roots_failed():
        ctx.exit(1)


if __name__ == '__main__':  # pragma: no cover
    main()
