"""Shared handle on the currently installed room directory.

``DirectorySync`` owns the only long-lived reference to room data. Readers
take the current directory under a short lock and then work on it without
any locking, since directories are immutable. A resync downloads and parses
the feed entirely outside the lock and only takes it to publish the new
directory, so a slow feed never blocks readers.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .feed_client import IngestError, ingest
from .rooms import RoomDirectory

logger = logging.getLogger(__name__)

IngestFn = Callable[[str], RoomDirectory]


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


class DirectorySync:
    """Holds the installed ``RoomDirectory`` and refreshes it on demand."""

    def __init__(self, feed_url: str, directory: RoomDirectory, ingest_fn: IngestFn = ingest) -> None:
        self.feed_url = feed_url
        self._ingest = ingest_fn
        self._lock = threading.Lock()
        self._directory = directory
        self._last_synced_at: Optional[datetime] = _utcnow()
        self._last_error: Optional[str] = None

    @classmethod
    def initialize(cls, feed_url: str, ingest_fn: IngestFn = ingest) -> "DirectorySync":
        """Load the feed once and return a handle on the result.

        There is no usable empty state: an empty directory would report
        every room as free. Any ``IngestError`` therefore propagates.
        """
        logger.info("Loading room directory from %s", feed_url)
        directory = ingest_fn(feed_url)
        return cls(feed_url, directory, ingest_fn)

    def current(self) -> RoomDirectory:
        """Return the installed directory. Never performs I/O."""
        with self._lock:
            return self._directory

    @property
    def last_synced_at(self) -> Optional[datetime]:
        with self._lock:
            return self._last_synced_at

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def resync(self) -> RoomDirectory:
        """Reload the feed and install the result.

        On failure the previously installed directory stays in place, the
        error is logged and recorded in ``last_error``, and the
        ``IngestError`` is re-raised for the caller to report.
        """
        try:
            directory = self._ingest(self.feed_url)
        except IngestError as exc:
            logger.exception("Resync failed, keeping previous room directory: %s", exc)
            with self._lock:
                self._last_error = f"{type(exc).__name__}: {exc}"
            raise
        with self._lock:
            self._directory = directory
            self._last_synced_at = _utcnow()
            self._last_error = None
        logger.info("Room directory replaced: %r", directory)
        return directory
