"""Snapshot commands for the configured Fluree database."""

import click

from cli.utils import (
    get_run_options,
    handle_error,
    parse_command_args,
    setup_logging,
)
from config import DEFAULT_FLUREE_CONFIG, load_fluree_config
from fluree_snapshots import FlureeClient, list_snapshots


def register_commands(cli):
    """Register snapshot commands with main CLI."""

    @cli.command('snapshot')
    @click.argument('args', nargs=-1)
    @click.pass_context
    def snapshot(ctx, args):
        """Create a snapshot of the Fluree database in the configuration.

        ARGS: optional "debug" and an optional path to the Fluree database
        configuration (default ./config/db_property.json).

        Examples:
            python -m main snapshot
            python -m main snapshot debug ./config/db_property.json
        """
        debug, positional = parse_command_args(args, max_positional=1)
        options = get_run_options(ctx, debug)
        setup_logging(options)

        config_path = positional[0] if positional else DEFAULT_FLUREE_CONFIG

        try:
            config = load_fluree_config(config_path)
            response = FlureeClient(config).create_snapshot()
        except Exception as e:
            handle_error(e, options, context="Snapshot creation failed")

        click.echo(
            f"Created a snapshot for {config.network}/{config.dbid} - "
            f"{response.decode('utf-8', errors='replace')}"
        )
        click.echo("...Complete!")

    @cli.command('list')
    @click.argument('args', nargs=-1)
    @click.pass_context
    def list_command(ctx, args):
        """List all available snapshots.

        ARGS: optional "debug" and an optional path to the Fluree database
        configuration (default ./config/db_property.json).

        Examples:
            python -m main list
            python -m main list debug ./config/db_property.json
        """
        debug, positional = parse_command_args(args, max_positional=1)
        options = get_run_options(ctx, debug)
        setup_logging(options)

        config_path = positional[0] if positional else DEFAULT_FLUREE_CONFIG

        try:
            config = load_fluree_config(config_path)
            snapshots = list_snapshots(config)
        except Exception as e:
            handle_error(e, options, context="Listing snapshots failed")

        click.echo("\nAvailable snapshots:")
        for snapshot_name in snapshots:
            click.echo(snapshot_name)
