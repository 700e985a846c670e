# SPDX-License-Identifier: Apache-2.0

"""
Comment persistence for program team updates.

Comments live in one JSON object under a single key, mapping record id to
a newest-first list of entries. Posting a comment also prepends an entry
to the activity feed; if the feed cannot be updated the comment mapping is
restored so neither store shows a half-applied post.
"""

import logging
from typing import Callable, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from ..domain.events import CommentPosted, EventBus
from ..models.entities import ActivityEntry, CommentEntry, ProgramRecord, epoch_millis, utc_now
from ..models.enums import ActivityType
from .activity import ActivityFeedStore
from .errors import (
    NotFound,
    PersistenceCorrupt,
    StorageError,
    StorageReadError,
    StorageWriteError,
    ValidationRejected
)
from .storage import COMMENTS_KEY, KeyValueStore, decode_json, read_json, write_json

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

RecordLookup = Callable[[str], Optional[ProgramRecord]]
Clock = Callable[[], int]


def now_millis() -> int:
    return epoch_millis(utc_now())


def comment_activity(record: ProgramRecord, comment: CommentEntry) -> ActivityEntry:
    """Activity entry announcing a posted comment."""
    return ActivityEntry(
        type=ActivityType.COMMENT,
        title=record.program_name,
        description=f"{comment.author} posted an update",
        timestamp=comment.timestamp
    )


class CommentStore:
    """
    Persisted mapping from record id to team updates.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        record_lookup: RecordLookup,
        activity_feed: ActivityFeedStore,
        event_bus: Optional[EventBus] = None,
        key: str = COMMENTS_KEY,
        clock: Clock = now_millis
    ):
        self.storage = storage
        self.record_lookup = record_lookup
        self.activity_feed = activity_feed
        self.event_bus = event_bus
        self.key = key
        self.clock = clock

    def _read(self) -> Dict[str, List[CommentEntry]]:
        return self._decode(read_json(self.storage, self.key))

    def _decode(self, payload) -> Dict[str, List[CommentEntry]]:
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise PersistenceCorrupt(f"Comments under {self.key} are not an object")

        try:
            return {
                record_id: [CommentEntry.model_validate(item) for item in entries]
                for record_id, entries in payload.items()
            }
        except (ValidationError, TypeError) as e:
            raise PersistenceCorrupt(f"Comments under {self.key} have invalid entries") from e

    def load(self) -> Dict[str, List[CommentEntry]]:
        """
        Full comment mapping.

        Returns:
            Mapping of record id to comments; empty if nothing is stored or
            the stored payload cannot be read
        """
        try:
            return self._read()
        except PersistenceCorrupt as e:
            logger.warning(
                f"Unable to load comments: {str(e)}",
                extra={"storage_key": self.key, "error_kind": e.kind}
            )
            return {}
        except StorageReadError as e:
            logger.error(
                f"Unable to load comments: {str(e)}",
                extra={"storage_key": self.key, "error_kind": e.kind}
            )
            return {}

    def list_for(self, record_id: str) -> List[CommentEntry]:
        """Newest-first comments for a record; empty when it has none."""
        return self.load().get(record_id, [])

    def counts(self) -> Dict[str, int]:
        """Number of comments per record id."""
        return {record_id: len(entries) for record_id, entries in self.load().items()}

    def _validate(self, record_id: str, author: str, body: str):
        author = (author or "").strip()
        body = (body or "").strip()
        if not author or not body:
            raise ValidationRejected("Author and body are required")

        record = self.record_lookup(record_id)
        if record is None:
            raise NotFound(f"Program not found: {record_id}")

        return record, author, body

    def post(self, record_id: str, author: str, body: str) -> Optional[CommentEntry]:
        """
        Post a team update on a program.

        Args:
            record_id: Program identifier
            author: Display name of the poster
            body: Update text

        Returns:
            The stored CommentEntry, or None when the post was rejected or
            could not be persisted (nothing is changed in that case)
        """
        with tracer.start_as_current_span("comments.post") as span:
            span.set_attribute("comment.record_id", record_id)

            try:
                record, author, body = self._validate(record_id, author, body)
            except (ValidationRejected, NotFound) as e:
                span.set_attribute("comment.result", e.kind.value)
                logger.info(
                    f"Comment rejected: {str(e)}",
                    extra={"record_id": record_id, "error_kind": e.kind}
                )
                return None

            try:
                previous_raw = self.storage.get(self.key)
            except StorageReadError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    f"Comment not posted, comments unreadable: {str(e)}",
                    extra={"record_id": record_id, "error_kind": e.kind}
                )
                return None

            try:
                comments = self._decode(decode_json(previous_raw, self.key))
            except PersistenceCorrupt as e:
                logger.warning(
                    f"Stored comments unreadable, starting a fresh mapping: {str(e)}",
                    extra={"storage_key": self.key, "error_kind": e.kind}
                )
                comments = {}

            comment = CommentEntry(author=author, body=body, timestamp=self.clock())
            comments[record_id] = [comment, *comments.get(record_id, [])]

            try:
                write_json(self.storage, self.key, {
                    rid: [entry.to_payload() for entry in entries]
                    for rid, entries in comments.items()
                })
            except StorageWriteError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    f"Comment not posted: {str(e)}",
                    extra={"record_id": record_id, "error_kind": e.kind}
                )
                return None

            try:
                self.activity_feed.append(comment_activity(record, comment))
            except StorageError as e:
                self._restore(previous_raw)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    f"Comment rolled back, activity feed not updated: {str(e)}",
                    extra={"record_id": record_id, "error_kind": e.kind}
                )
                return None

            span.set_attribute("comment.result", "posted")
            logger.info(
                "Comment posted",
                extra={"record_id": record_id, "comment_count": len(comments[record_id])}
            )

            if self.event_bus is not None:
                self.event_bus.publish(CommentPosted(record_id=record_id, comment=comment))

            return comment

    def _restore(self, previous_raw: Optional[str]) -> None:
        """Put the comment payload back to what it was before a post."""
        try:
            self.storage.set(self.key, previous_raw if previous_raw is not None else "{}")
        except StorageWriteError as e:
            logger.critical(
                f"Comment rollback failed, comments and activity feed disagree: {str(e)}",
                extra={"storage_key": self.key, "error_kind": e.kind}
            )
