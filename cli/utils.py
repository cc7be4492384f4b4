"""Shared utilities for CLI commands."""

import logging
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click

DEBUG_TOKEN = 'debug'

# Where debug runs leave sample payloads and downloaded copies
DEBUG_ARTIFACT_DIR = Path('test')

NOISY_LOGGERS = ('botocore', 'boto3', 's3transfer', 'urllib3', 'httpx', 'httpcore')


@dataclass(frozen=True)
class RunOptions:
    """Per-invocation options threaded through a command.

    Attributes:
        debug: Verbose logging, upload verification and debug artifacts
        log_file: Optional log file path
    """
    debug: bool = False
    log_file: Optional[str] = None

    @property
    def verify_uploads(self) -> bool:
        return self.debug

    @property
    def artifact_dir(self) -> Optional[Path]:
        return DEBUG_ARTIFACT_DIR if self.debug else None


def parse_command_args(args: Sequence[str], max_positional: int) -> Tuple[bool, List[str]]:
    """Split raw command arguments into the debug flag and positional values.

    The literal ``debug`` may appear anywhere; the remaining values keep
    their order.

    Raises:
        click.UsageError: If more than ``max_positional`` values remain
    """
    debug = DEBUG_TOKEN in args
    positional = [arg for arg in args if arg != DEBUG_TOKEN]
    if len(positional) > max_positional:
        raise click.UsageError(
            f"Expected at most {max_positional} argument(s) besides '{DEBUG_TOKEN}', "
            f"got {len(positional)}: {' '.join(positional)}"
        )
    return debug, positional


def get_run_options(ctx: click.Context, debug: bool) -> RunOptions:
    """Build RunOptions from the parsed debug token and group options."""
    log_file = ctx.obj.get('log_file') if ctx.obj else None
    return RunOptions(debug=debug, log_file=log_file)


def setup_logging(options: RunOptions):
    """Set up logging - warnings on the console, everything in debug mode.

    Args:
        options: Run options carrying the debug flag and log file
    """
    root_logger = logging.getLogger()
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if options.debug else logging.WARNING)
    console_formatter = logging.Formatter('LOG: %(levelname)s - %(name)s - %(message)s')
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if options.log_file:
        log_file = Path(options.log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(logging.DEBUG)

    # Quiet all libraries
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def handle_error(error: Exception, options: RunOptions, context: str = None):
    """Log and display an error, then exit with status 1.

    Args:
        error: Exception to handle
        options: Run options; debug mode also shows the traceback
        context: Optional name of the failing step
    """
    message = f"{context}: {error}" if context else str(error)
    logging.getLogger(__name__).error(message)

    click.echo(f"Error: {message}", err=True)
    if options.debug:
        click.echo(traceback.format_exc(), err=True)
    sys.exit(1)
