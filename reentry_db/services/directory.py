# SPDX-License-Identifier: Apache-2.0

"""
Directory service wiring.

Builds the record, activity, comment and thread stores over one
key-value medium and exposes the operations the API needs.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..domain.directory import run_query
from ..domain.events import EventBus
from ..domain.filters import FilterState, build_filter_options
from ..domain.pagination import DEFAULT_PAGE_SIZE, PageResult
from ..domain.sorting import SortState
from ..models.entities import ActivityEntry, CommentEntry, ProgramRecord, ThreadEntry
from .activity import DEFAULT_FEED_LIMIT, ActivityFeedStore
from .comments import CommentStore
from .identity import IdentityProvider
from .records import RecordStore
from .storage import ACTIVITY_KEY, COMMENTS_KEY, THREADS_KEY, KeyValueStore, storage_key
from .threads import ThreadStore

logger = logging.getLogger(__name__)


class DirectoryService:
    """Facade over the directory stores sharing one storage medium."""

    def __init__(
        self,
        storage: KeyValueStore,
        records: Iterable[ProgramRecord] = (),
        namespace: str = "",
        identity_provider: Optional[IdentityProvider] = None,
        event_bus: Optional[EventBus] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        feed_limit: int = DEFAULT_FEED_LIMIT,
        feed_max_persisted: Optional[int] = None
    ):
        self.storage = storage
        self.identity_provider = identity_provider
        self.event_bus = event_bus or EventBus()
        self.page_size = page_size
        self.feed_limit = feed_limit

        # The feed seeds from whatever the record store holds at the time
        self.records = RecordStore(records, event_bus=self.event_bus)
        self.activity = ActivityFeedStore(
            storage,
            record_source=self.records.all,
            key=storage_key(ACTIVITY_KEY, namespace),
            max_persisted=feed_max_persisted
        )
        self.records.activity_feed = self.activity
        self.comments = CommentStore(
            storage,
            record_lookup=self.records.get,
            activity_feed=self.activity,
            event_bus=self.event_bus,
            key=storage_key(COMMENTS_KEY, namespace)
        )
        self.threads = ThreadStore(
            storage,
            event_bus=self.event_bus,
            key=storage_key(THREADS_KEY, namespace)
        )

        self.activity.seed_from_records()
        logger.info(
            "Directory service ready",
            extra={"record_count": len(self.records), "namespace": namespace}
        )

    def query(
        self,
        filters: FilterState,
        sort: SortState,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> PageResult[ProgramRecord]:
        """Filter, sort and paginate the current records."""
        return run_query(self.records.all(), filters, sort, page, page_size or self.page_size)

    def filter_options(self):
        return build_filter_options(self.records.all())

    def program_detail(self, record_id: str) -> Optional[Tuple[ProgramRecord, List[CommentEntry]]]:
        """Record plus its comments, or None if the id does not resolve."""
        record = self.records.get(record_id)
        if record is None:
            return None
        return record, self.comments.list_for(record_id)

    def save_program(self, record: ProgramRecord) -> Tuple[ProgramRecord, bool]:
        return self.records.upsert(record)

    def post_comment(self, record_id: str, author: str, body: str) -> Optional[CommentEntry]:
        return self.comments.post(record_id, author, body)

    def activity_feed(self, limit: Optional[int] = None) -> List[ActivityEntry]:
        return self.activity.list(limit or self.feed_limit)

    def post_thread(self, author: str, topic: str, body: str) -> Optional[ThreadEntry]:
        return self.threads.post(author, topic, body)

    def list_threads(self) -> List[ThreadEntry]:
        return self.threads.list()
