"""Fluree side of the connector: snapshot creation and the local snapshot catalog."""

from .client import FlureeClient, create_snapshot
from .snapshots import (
    latest_snapshot,
    list_snapshots,
    read_snapshot,
    snapshot_directory,
    snapshot_number,
)

__all__ = [
    'FlureeClient',
    'create_snapshot',
    'latest_snapshot',
    'list_snapshots',
    'read_snapshot',
    'snapshot_directory',
    'snapshot_number',
]
