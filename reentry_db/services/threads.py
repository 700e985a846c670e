# SPDX-License-Identifier: Apache-2.0

"""
Housing Talk discussion threads.
"""

import logging
from typing import Callable, List, Optional

from opentelemetry import trace
from pydantic import ValidationError

from ..domain.events import EventBus, ThreadStarted
from ..models.entities import ThreadEntry, epoch_millis, utc_now
from .errors import PersistenceCorrupt, StorageReadError, StorageWriteError, ValidationRejected
from .storage import THREADS_KEY, KeyValueStore, read_json, write_json

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ThreadStore:
    """Persisted list of discussion threads, newest first."""

    def __init__(
        self,
        storage: KeyValueStore,
        event_bus: Optional[EventBus] = None,
        key: str = THREADS_KEY,
        clock: Callable[[], int] = lambda: epoch_millis(utc_now())
    ):
        self.storage = storage
        self.event_bus = event_bus
        self.key = key
        self.clock = clock

    def _read(self) -> List[ThreadEntry]:
        payload = read_json(self.storage, self.key)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise PersistenceCorrupt(f"Threads under {self.key} are not a list")
        try:
            return [ThreadEntry.model_validate(item) for item in payload]
        except ValidationError as e:
            raise PersistenceCorrupt(f"Threads under {self.key} have invalid entries") from e

    def list(self) -> List[ThreadEntry]:
        """All threads ordered by timestamp, newest first."""
        try:
            threads = self._read()
        except (PersistenceCorrupt, StorageReadError) as e:
            logger.warning(
                f"Unable to load threads: {str(e)}",
                extra={"storage_key": self.key, "error_kind": e.kind}
            )
            return []

        return sorted(threads, key=lambda thread: thread.timestamp, reverse=True)

    def post(self, author: str, topic: str, body: str) -> Optional[ThreadEntry]:
        """
        Start a new thread.

        Returns:
            The stored ThreadEntry, or None if a field was blank or the
            stored threads could not be read or written
        """
        with tracer.start_as_current_span("threads.post") as span:
            author, topic, body = ((value or "").strip() for value in (author, topic, body))

            if not author or not topic or not body:
                rejected = ValidationRejected("Author, topic and body are required")
                span.set_attribute("thread.result", rejected.kind.value)
                logger.info(f"Thread rejected: {str(rejected)}")
                return None

            try:
                existing = self._read()
            except PersistenceCorrupt as e:
                logger.warning(
                    f"Stored threads unreadable, starting a fresh list: {str(e)}",
                    extra={"storage_key": self.key, "error_kind": e.kind}
                )
                existing = []
            except StorageReadError as e:
                span.set_attribute("thread.result", e.kind.value)
                logger.error(f"Thread not posted, threads unreadable: {str(e)}", extra={"error_kind": e.kind})
                return None

            thread = ThreadEntry(author=author, topic=topic, body=body, timestamp=self.clock())
            threads = [thread, *existing]

            try:
                write_json(self.storage, self.key, [entry.to_payload() for entry in threads])
            except StorageWriteError as e:
                span.set_attribute("thread.result", e.kind.value)
                logger.error(f"Thread not posted: {str(e)}", extra={"error_kind": e.kind})
                return None

            span.set_attribute("thread.result", "posted")
            logger.info("Thread posted", extra={"thread_count": len(threads)})

            if self.event_bus is not None:
                self.event_bus.publish(ThreadStarted(thread=thread))

            return thread
