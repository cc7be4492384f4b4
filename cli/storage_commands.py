"""Storage commands - upload data and Fluree snapshots to a Storj bucket."""

import logging
from datetime import datetime
from typing import Optional

import click

from cli.utils import (
    RunOptions,
    get_run_options,
    handle_error,
    parse_command_args,
    setup_logging,
)
from config import (
    DEFAULT_FLUREE_CONFIG,
    DEFAULT_STORJ_CONFIG,
    load_fluree_config,
    load_storj_config,
)
from errors import SnapshotNotFoundError
from fluree_snapshots import latest_snapshot, list_snapshots, read_snapshot
from storj_backup import UploadResult, upload_data
from storj_backup.uploader import format_size

logger = logging.getLogger(__name__)

SAMPLE_DATABASE = 'testdb'
SAMPLE_OBJECT = 'test.json'
SAMPLE_PAYLOAD = b"{'testKey': 'testValue'}"


def resolve_snapshot_name(snapshots, snapshot_name: Optional[str], database: str) -> str:
    """Pick the snapshot to upload.

    An explicit name must be in ``snapshots``; without one the latest
    numbered snapshot is used.

    Raises:
        SnapshotNotFoundError: If an explicit name is not in ``snapshots``
    """
    if snapshot_name:
        if snapshot_name not in snapshots:
            raise SnapshotNotFoundError(snapshot_name, database)
        return snapshot_name

    snapshot_name = latest_snapshot(snapshots)
    logger.debug(f"The latest snapshot is {snapshot_name}")
    return snapshot_name


def store_snapshot(fluree_config_path: str, storj_config_path: str,
                   snapshot_name: Optional[str], options: RunOptions) -> UploadResult:
    """Upload one Fluree snapshot to the configured Storj bucket."""
    fluree_config = load_fluree_config(fluree_config_path)
    snapshots = list_snapshots(fluree_config)
    snapshot_name = resolve_snapshot_name(snapshots, snapshot_name, fluree_config.database_name)

    logger.info(f"Attempting to upload snapshot {snapshot_name} for {fluree_config.database_name}")
    data = read_snapshot(fluree_config, snapshot_name)

    storj_config = load_storj_config(storj_config_path)
    return upload_data(
        storj_config,
        data,
        snapshot_name,
        fluree_config.database_name,
        verify=options.verify_uploads,
        show_progress=options.debug,
        download_dir=options.artifact_dir
    )


def save_sample_payload(options: RunOptions):
    """Keep a local copy of the sample payload in debug mode."""
    timestamp = datetime.now().strftime('%Y-%m-%d_%H:%M:%S')
    sample_path = options.artifact_dir / f"uploaddata_{timestamp}.json"
    try:
        sample_path.parent.mkdir(parents=True, exist_ok=True)
        sample_path.write_bytes(SAMPLE_PAYLOAD)
        logger.debug(f"Wrote sample payload to {sample_path}")
    except OSError as e:
        logger.warning(f"Could not write sample payload to {sample_path}: {e}")
        click.echo("Error while writing to file", err=True)


def _echo_result(result: UploadResult):
    click.echo(f"{format_size(result.size)} written to bucket: {result.bucket} File: {result.object_name}")
    if result.attempts > 1:
        click.echo(f"  (succeeded on attempt {result.attempts})")
    if result.verified:
        click.echo("  Downloaded copy matches upload")


def register_commands(cli):
    """Register storage commands with main CLI."""

    @cli.command('test')
    @click.argument('args', nargs=-1)
    @click.pass_context
    def test_upload(ctx, args):
        """Upload sample JSON data to check the Storj configuration.

        ARGS: optional "debug" and an optional path to the Storj
        configuration (default ./config/storj_config.json).

        Examples:
            python -m main test
            python -m main test debug ./config/storj_config.json
        """
        debug, positional = parse_command_args(args, max_positional=1)
        options = get_run_options(ctx, debug)
        setup_logging(options)

        config_path = positional[0] if positional else DEFAULT_STORJ_CONFIG

        if options.debug:
            save_sample_payload(options)

        try:
            storj_config = load_storj_config(config_path)
            result = upload_data(
                storj_config,
                SAMPLE_PAYLOAD,
                SAMPLE_OBJECT,
                SAMPLE_DATABASE,
                verify=options.verify_uploads,
                show_progress=options.debug,
                download_dir=options.artifact_dir
            )
        except Exception as e:
            handle_error(e, options, context="Error while uploading data to the Storj bucket")

        _echo_result(result)

    @cli.command('store')
    @click.argument('args', nargs=-1)
    @click.pass_context
    def store(ctx, args):
        """Upload a Fluree snapshot to the Storj bucket.

        ARGS, in order, all optional:

        \b
          debug           anywhere in the list, turns on debug mode
          FLUREE_CONFIG   Fluree database configuration (./config/db_property.json)
          STORJ_CONFIG    Storj configuration (./config/storj_config.json)
          SNAPSHOT        snapshot file name; the latest snapshot when omitted

        Examples:
            python -m main store
            python -m main store ./config/db_property.json ./config/storj_config.json 12.avro
        """
        debug, positional = parse_command_args(args, max_positional=3)
        options = get_run_options(ctx, debug)
        setup_logging(options)

        fluree_config_path = positional[0] if len(positional) > 0 else DEFAULT_FLUREE_CONFIG
        storj_config_path = positional[1] if len(positional) > 1 else DEFAULT_STORJ_CONFIG
        snapshot_name = positional[2] if len(positional) > 2 else None

        try:
            result = store_snapshot(fluree_config_path, storj_config_path, snapshot_name, options)
        except Exception as e:
            handle_error(e, options, context="Error while uploading snapshot to the Storj bucket")

        _echo_result(result)
