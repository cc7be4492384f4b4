"""Main CLI entry point - Root command group with global options."""

import click

from version import __version__

APP_NAME = 'Storj-Fluree Connector'


class AliasedGroup(click.Group):
    """Command group that also accepts the short command aliases."""

    ALIASES = {
        'sn': 'snapshot',
        'ls': 'list',
        't': 'test',
        'st': 'store',
    }

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self.ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


@click.group(cls=AliasedGroup)
@click.option('--log-file', default=None, help='Also write log messages to this file')
@click.version_option(version=__version__, prog_name=APP_NAME)
@click.pass_context
def cli(ctx, log_file):
    """A Storj-Fluree connector. Upload Fluree snapshot files to Storj.

    Every command accepts the literal argument "debug" anywhere in its
    argument list to turn on verbose logging and upload verification.

    Examples:
        # Create a snapshot of the configured database
        python -m main snapshot

        # List local snapshots using a custom configuration
        python -m main list debug ./config/db_property.json

        # Upload a sample object to check Storj credentials
        python -m main test ./config/storj_config.json

        # Upload the latest snapshot, or a named one
        python -m main store
        python -m main store ./config/db_property.json ./config/storj_config.json 12.avro
    """
    ctx.ensure_object(dict)
    ctx.obj['log_file'] = log_file


def register_all_commands():
    """Register all command modules with the main CLI."""
    from cli import (
        config_commands,
        snapshot_commands,
        storage_commands,
    )

    snapshot_commands.register_commands(cli)
    storage_commands.register_commands(cli)
    config_commands.register_commands(cli)


# Register all commands when module is imported
register_all_commands()
