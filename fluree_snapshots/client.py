"""HTTP client for the Fluree snapshot endpoint."""

import logging
from typing import Optional

import httpx

from config import FlureeConfig
from errors import NetworkError

logger = logging.getLogger(__name__)

# Timeout for snapshot requests
SNAPSHOT_TIMEOUT = 30.0


class FlureeClient:
    """Talks to the Fluree ledger server named in a FlureeConfig."""

    def __init__(self, config: FlureeConfig, timeout: float = SNAPSHOT_TIMEOUT,
                 transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.timeout = timeout
        self.transport = transport

    @property
    def snapshot_url(self) -> str:
        # ip is expected to carry its own trailing slash
        return f"{self.config.ip}fdb/{self.config.network}/{self.config.dbid}/snapshot"

    def create_snapshot(self) -> bytes:
        """Ask Fluree to write a new snapshot.

        Returns:
            Response body, uninterpreted

        Raises:
            NetworkError: On connection failure, timeout or non-2xx status
        """
        url = self.snapshot_url
        logger.debug(f"Sending snapshot request to: {url}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, headers={"Content-Type": "application/json"})
        except httpx.TimeoutException as e:
            raise NetworkError(f"Snapshot request to {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Snapshot request to {url} failed: {e}") from e

        if not response.is_success:
            raise NetworkError(
                f"Snapshot request to {url} returned HTTP {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        logger.debug(f"Snapshot request returned HTTP {response.status_code}")
        return response.content


def create_snapshot(config: FlureeConfig) -> bytes:
    """Create a snapshot of the configured database."""
    return FlureeClient(config).create_snapshot()
