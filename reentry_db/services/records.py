# SPDX-License-Identifier: Apache-2.0

"""
In-memory program record store.

Records are loaded once at startup and are read-only except through
``upsert``, which replaces a record with the same id or prepends a new one.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from opentelemetry import trace
from pydantic import TypeAdapter

from ..domain.events import EventBus, ProgramSaved
from ..models.entities import ProgramRecord
from .activity import ActivityFeedStore, program_entry
from .errors import StorageError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(List[ProgramRecord])


def load_records_json(path: Union[str, Path]) -> List[ProgramRecord]:
    """
    Load program records from a JSON array file.

    Args:
        path: File containing a JSON array of camelCase record objects

    Returns:
        Validated program records in file order

    Raises:
        pydantic.ValidationError: If any record is malformed
        OSError: If the file cannot be read
    """
    with tracer.start_as_current_span("records.load_json") as span:
        path = Path(path)
        span.set_attribute("records.path", str(path))

        records = _records_adapter.validate_json(path.read_bytes())

        span.set_attribute("records.count", len(records))
        logger.info(f"Loaded {len(records)} program records from {path}")
        return records


class RecordStore:
    """Session-scoped collection of program records."""

    def __init__(
        self,
        records: Iterable[ProgramRecord] = (),
        activity_feed: Optional[ActivityFeedStore] = None,
        event_bus: Optional[EventBus] = None
    ):
        self._records: List[ProgramRecord] = []
        self.activity_feed = activity_feed
        self.event_bus = event_bus

        seen = set()
        for record in records:
            if record.id in seen:
                logger.warning(f"Duplicate program id {record.id} ignored at load")
                continue
            seen.add(record.id)
            self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> List[ProgramRecord]:
        """Snapshot of every record in directory order."""
        return list(self._records)

    def get(self, record_id: str) -> Optional[ProgramRecord]:
        """Record with ``record_id``, or None."""
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def upsert(self, record: ProgramRecord) -> Tuple[ProgramRecord, bool]:
        """
        Insert or replace a record by id.

        New records go to the front of the directory and are announced in
        the activity feed; edits replace the record in place.

        Returns:
            Tuple of (stored record, created)
        """
        with tracer.start_as_current_span("records.upsert") as span:
            span.set_attribute("record.id", record.id)

            # Seed before the insert so the new program is announced once
            if self.activity_feed is not None:
                self.activity_feed.seed_from_records()

            for index, existing in enumerate(self._records):
                if existing.id == record.id:
                    self._records[index] = record
                    created = False
                    break
            else:
                self._records.insert(0, record)
                created = True

            span.set_attribute("record.created", created)
            logger.info(
                "Program saved",
                extra={"record_id": record.id, "created": created}
            )

            if created and self.activity_feed is not None:
                try:
                    self.activity_feed.append(program_entry(record))
                except StorageError as e:
                    logger.error(
                        f"Program saved but activity entry not recorded: {str(e)}",
                        extra={"record_id": record.id, "error_kind": e.kind}
                    )

            if self.event_bus is not None:
                self.event_bus.publish(ProgramSaved(record=record, created=created))

            return record, created
