"""Configuration management commands."""

from pathlib import Path

import click

from cli.utils import (
    get_run_options,
    handle_error,
    parse_command_args,
    setup_logging,
)
from config import (
    DEFAULT_FLUREE_CONFIG,
    DEFAULT_STORJ_CONFIG,
    create_default_configs,
    load_fluree_config,
    load_storj_config,
)
from fluree_snapshots import FlureeClient, snapshot_directory
from storj_backup import build_object_name


def _mask(secret) -> str:
    return "********" if secret.get_secret_value() else "(not set)"


def register_commands(cli):
    """Register config commands with main CLI."""

    @cli.group('config')
    @click.pass_context
    def config_group(ctx):
        """Configuration management commands.

        Create and inspect the Fluree and Storj configuration files.
        """
        pass

    @config_group.command('init')
    @click.option('--dir', 'config_dir', default='./config', show_default=True,
                  help='Directory for the configuration files')
    @click.pass_context
    def init_config(ctx, config_dir):
        """Create default configuration files.

        Writes db_property.json (Fluree database) and storj_config.json
        (Storj bucket) templates.

        Examples:
            python -m main config init
            python -m main config init --dir ~/fluree-backup
        """
        existing = [
            path for path in (Path(config_dir) / 'db_property.json',
                              Path(config_dir) / 'storj_config.json')
            if path.exists()
        ]
        if existing:
            click.echo(f"Configuration file already exists: {', '.join(str(p) for p in existing)}")
            if not click.confirm("Overwrite existing configuration?"):
                return

        written = create_default_configs(config_dir)
        for path in written.values():
            click.echo(f"✓ Created configuration file: {path}")
        click.echo("\nNext steps:")
        click.echo("  1. Set the Fluree server address, network, dbid and storage directory")
        click.echo("  2. Set the Storj gateway, bucket and credentials")
        click.echo("  3. Test the Storj configuration with: python -m main test")

    @config_group.command('show')
    @click.argument('args', nargs=-1)
    @click.pass_context
    def show_config(ctx, args):
        """Display configuration settings, with secrets masked.

        ARGS: optional "debug", then optional paths to the Fluree and
        Storj configuration files.

        Examples:
            python -m main config show
            python -m main config show ./config/db_property.json ./config/storj_config.json
        """
        debug, positional = parse_command_args(args, max_positional=2)
        options = get_run_options(ctx, debug)
        setup_logging(options)

        fluree_config_path = positional[0] if len(positional) > 0 else DEFAULT_FLUREE_CONFIG
        storj_config_path = positional[1] if len(positional) > 1 else DEFAULT_STORJ_CONFIG

        try:
            fluree_config = load_fluree_config(fluree_config_path)
            storj_config = load_storj_config(storj_config_path)
        except Exception as e:
            handle_error(e, options, context="Could not read configuration")

        click.echo(f"Fluree configuration: {fluree_config_path}")
        click.echo(f"  IP:                {fluree_config.ip}")
        click.echo(f"  Network:           {fluree_config.network}")
        click.echo(f"  DBID:              {fluree_config.dbid}")
        click.echo(f"  Storage Directory: {fluree_config.storage_directory}")
        click.echo(f"  Snapshot URL:      {FlureeClient(fluree_config).snapshot_url}")
        click.echo(f"  Snapshot folder:   {snapshot_directory(fluree_config)}")

        click.echo(f"\nStorj configuration: {storj_config_path}")
        click.echo(f"  API Key:     {_mask(storj_config.api_key)}")
        click.echo(f"  Satellite:   {storj_config.satellite}")
        click.echo(f"  Bucket:      {storj_config.bucket}")
        click.echo(f"  Upload Path: {storj_config.upload_path}")
        click.echo(f"  Passphrase:  {_mask(storj_config.encryption_passphrase)}")
        click.echo(
            f"  Object name: "
            f"{build_object_name(storj_config.upload_path, fluree_config.database_name, '<snapshot>')}"
        )
