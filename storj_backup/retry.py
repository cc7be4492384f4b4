"""Bounded retry for storage writes."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

T = TypeVar('T')

TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (ClientError, BotoCoreError, S3UploadFailedError)


@dataclass(frozen=True)
class RetryPolicy:
    """How often a failed storage write is attempted.

    ``max_attempts`` counts the first try, so the default of 2 allows
    exactly one retry. There is no backoff unless ``backoff_seconds`` is set.
    """
    max_attempts: int = 2
    backoff_seconds: float = 0.0
    retry_on: Tuple[Type[Exception], ...] = TRANSIENT_ERRORS

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.backoff_seconds < 0:
            raise ValueError(f"backoff_seconds must not be negative, got {self.backoff_seconds}")

    def run(self, operation: Callable[[], T], description: str = "operation") -> Tuple[T, int]:
        """Call ``operation`` until it succeeds or attempts run out.

        Returns:
            Tuple of (operation result, attempts used)

        Raises:
            The last error from ``operation`` once every attempt has failed.
            Errors outside ``retry_on`` are raised immediately.
        """
        attempt = 1
        while True:
            try:
                return operation(), attempt
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    logger.error(f"{description} failed on attempt {attempt}/{self.max_attempts}: {e}")
                    raise
                logger.warning(
                    f"{description} failed on attempt {attempt}/{self.max_attempts}: {e}; retrying"
                )
                if self.backoff_seconds:
                    time.sleep(self.backoff_seconds)
                attempt += 1
