#!/usr/bin/env python3
"""Storj-Fluree Connector - upload Fluree snapshot files to Storj.

Examples:
    # Get help
    python -m main --help
    python -m main store --help

    # Basic workflow
    python -m main config init           # Write template configuration
    python -m main snapshot              # Ask Fluree for a new snapshot
    python -m main list                  # Show local snapshots
    python -m main test                  # Check Storj credentials
    python -m main store                 # Upload the latest snapshot
    python -m main store debug           # ...and verify it by downloading
"""

from cli.main import cli

if __name__ == '__main__':
    cli()
