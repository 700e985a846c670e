# SPDX-License-Identifier: Apache-2.0

"""
Activity feed persistence.

The feed is one JSON array under a single key, newest entry first. It is
seeded once from the program records and then grows by one entry per
posted comment or newly added program.
"""

import logging
from typing import Callable, Iterable, List, Optional

from opentelemetry import trace
from pydantic import ValidationError

from ..models.entities import ActivityEntry, ProgramRecord
from ..models.enums import ActivityType
from .errors import PersistenceCorrupt, StorageReadError, StorageWriteError
from .storage import ACTIVITY_KEY, KeyValueStore, read_json, write_json

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 25

RecordSource = Callable[[], Iterable[ProgramRecord]]


def program_entry(record: ProgramRecord) -> ActivityEntry:
    """Activity entry announcing a program in the inventory."""
    return ActivityEntry(
        type=ActivityType.PROGRAM,
        title=record.program_name,
        description=f"{record.city}, {record.county} County added to inventory",
        timestamp=record.created_at_millis
    )


def seed_entries(records: Iterable[ProgramRecord]) -> List[ActivityEntry]:
    """One program entry per record, newest first."""
    entries = [program_entry(record) for record in records]
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


def newest_first(entries: Iterable[ActivityEntry]) -> List[ActivityEntry]:
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


class ActivityFeedStore:
    """
    Persisted, globally ordered activity feed.

    Corrupt or unreadable payloads never reach the caller: reads fall back
    to a feed rebuilt from the current records.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        record_source: Optional[RecordSource] = None,
        key: str = ACTIVITY_KEY,
        max_persisted: Optional[int] = None
    ):
        """
        Initialize the activity feed store.

        Args:
            storage: Key-value medium
            record_source: Callable returning the records used for seeding
            key: Storage key for the feed
            max_persisted: Cap on stored entries; None keeps everything
        """
        self.storage = storage
        self.record_source = record_source or (lambda: [])
        self.key = key
        self.max_persisted = max_persisted

    def _decode(self, payload) -> List[ActivityEntry]:
        if not isinstance(payload, list):
            raise PersistenceCorrupt(f"Activity feed under {self.key} is not a list")
        try:
            return [ActivityEntry.model_validate(item) for item in payload]
        except ValidationError as e:
            raise PersistenceCorrupt(f"Activity feed under {self.key} has invalid entries") from e

    def _read(self) -> Optional[List[ActivityEntry]]:
        """Stored feed, or None if nothing has been persisted yet."""
        payload = read_json(self.storage, self.key)
        if payload is None:
            return None
        return self._decode(payload)

    def _write(self, entries: List[ActivityEntry]) -> None:
        if self.max_persisted is not None:
            entries = entries[:self.max_persisted]
        write_json(self.storage, self.key, [entry.to_payload() for entry in entries])

    def _reseeded(self, reason: Exception) -> List[ActivityEntry]:
        logger.warning(
            f"Activity feed unreadable, rebuilding from records: {str(reason)}",
            extra={"storage_key": self.key, "error_kind": getattr(reason, "kind", None)}
        )
        return seed_entries(self.record_source())

    def seed_from_records(self, records: Optional[Iterable[ProgramRecord]] = None) -> List[ActivityEntry]:
        """
        Seed the feed from program records if no feed is persisted.

        An existing key, even one holding an empty list, suppresses seeding.

        Args:
            records: Records to seed from; defaults to the record source

        Returns:
            The feed as now stored (or as recovered, if the stored one is corrupt)
        """
        with tracer.start_as_current_span("activity.seed") as span:
            try:
                existing = self._read()
            except PersistenceCorrupt as e:
                span.set_attribute("activity.seeded", False)
                return self._reseeded(e)
            except StorageReadError as e:
                span.set_attribute("activity.seeded", False)
                return self._reseeded(e)

            if existing is not None:
                span.set_attribute("activity.seeded", False)
                return existing

            seeded = seed_entries(records if records is not None else self.record_source())
            try:
                self._write(seeded)
            except StorageWriteError as e:
                span.set_attribute("activity.seeded", False)
                logger.error(
                    f"Activity feed seed not persisted: {str(e)}",
                    extra={"storage_key": self.key, "error_kind": e.kind}
                )
                return seeded

            span.set_attributes({
                "activity.seeded": True,
                "activity.entries": len(seeded)
            })
            logger.info(f"Seeded activity feed with {len(seeded)} program entries")
            return seeded

    def current(self) -> List[ActivityEntry]:
        """Full stored feed, seeding it first if necessary."""
        return self.seed_from_records()

    def append(self, entry: ActivityEntry) -> List[ActivityEntry]:
        """
        Prepend an entry and re-persist the whole feed.

        A missing feed is seeded in the same write and a corrupt one is
        replaced by a reseeded feed. An unreadable medium aborts the append
        so the stored feed is never overwritten with a rebuilt one.

        Raises:
            StorageReadError: If the current feed cannot be read
            StorageWriteError: If the medium rejects the write
        """
        with tracer.start_as_current_span("activity.append") as span:
            span.set_attributes({
                "activity.type": entry.type,
                "activity.timestamp": entry.timestamp
            })

            try:
                existing = self._read()
            except PersistenceCorrupt as e:
                existing = self._reseeded(e)

            if existing is None:
                existing = seed_entries(self.record_source())

            feed = [entry, *existing]
            self._write(feed)

            logger.debug(
                "Activity entry appended",
                extra={"activity_type": entry.type, "feed_length": len(feed)}
            )
            return feed

    def list(self, limit: int = DEFAULT_FEED_LIMIT) -> List[ActivityEntry]:
        """
        Newest-first feed entries for display.

        Args:
            limit: Maximum entries returned; truncation happens only here

        Returns:
            At most ``limit`` entries ordered by timestamp descending
        """
        return newest_first(self.current())[:limit]
