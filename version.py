import subprocess
import logging

logger = logging.getLogger(__name__)

FALLBACK_VERSION = "v0.2.0"


def get_version():
    """Get version from the latest git tag."""
    try:
        return subprocess.check_output(
            ['git', 'describe', '--tags'],
            stderr=subprocess.DEVNULL,
            text=True
        ).strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        logger.debug("Could not determine version from git, using fallback")
        return FALLBACK_VERSION


__version__ = get_version()
