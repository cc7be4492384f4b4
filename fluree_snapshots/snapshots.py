"""Local Fluree snapshot catalog.

Snapshots live at ``{storageDirectory}/{network}/{dbid}/snapshot`` and are
named ``<integer>.avro`` by Fluree, one file per snapshot.
"""

import logging
import os
import re
from pathlib import Path
from typing import Iterable, List

from config import FlureeConfig
from errors import DirectoryNotFoundError, SnapshotNotFoundError

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".avro"

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_MAX_SNAPSHOT_NUMBER = 2 ** 63 - 1


def snapshot_directory(config: FlureeConfig) -> Path:
    """Directory holding the snapshots of the configured database."""
    return Path(f"{config.storage_directory}/{config.network}/{config.dbid}/snapshot")


def list_snapshots(config: FlureeConfig) -> List[str]:
    """List the entries of the snapshot directory.

    Entries are returned verbatim in directory order, without sorting or
    filtering. Subdirectories are listed like files.

    Raises:
        DirectoryNotFoundError: If the directory is missing or unreadable
    """
    directory = snapshot_directory(config)
    logger.debug(f"Listing snapshots in {directory}")

    try:
        entries = os.listdir(directory)
    except FileNotFoundError:
        raise DirectoryNotFoundError(str(directory))
    except NotADirectoryError:
        raise DirectoryNotFoundError(str(directory), "not a directory")
    except OSError as e:
        raise DirectoryNotFoundError(str(directory), e.strerror or str(e)) from e

    logger.debug(f"Found {len(entries)} snapshot(s) for {config.database_name}")
    return entries


def snapshot_number(snapshot_name: str) -> int:
    """Numeric value of a snapshot name, ``0`` when it is not numeric."""
    stem = snapshot_name.split(SNAPSHOT_SUFFIX, 1)[0]
    if not _DECIMAL.fullmatch(stem):
        return 0
    number = int(stem)
    if abs(number) > _MAX_SNAPSHOT_NUMBER:
        return 0
    return number


def latest_snapshot(snapshots: Iterable[str]) -> str:
    """Name of the highest-numbered snapshot.

    The name is rebuilt as ``"<max>.avro"`` and is not checked against
    ``snapshots``: an empty list, or one without numeric names, yields
    ``"0.avro"`` whether or not that file exists.
    """
    latest = 0
    for snapshot in snapshots:
        latest = max(latest, snapshot_number(snapshot))
    return f"{latest}{SNAPSHOT_SUFFIX}"


def read_snapshot(config: FlureeConfig, snapshot_name: str) -> bytes:
    """Read the raw bytes of one snapshot file."""
    snapshot_path = snapshot_directory(config) / snapshot_name
    logger.debug(f"Reading snapshot {snapshot_path}")

    try:
        with open(snapshot_path, 'rb') as f:
            data = f.read()
    except FileNotFoundError:
        raise SnapshotNotFoundError(snapshot_name, config.database_name)

    logger.debug(f"Read {len(data)} bytes from {snapshot_path}")
    return data
