# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the comment store.
"""

import json

from reentry_db.domain.events import CommentPosted, EventBus
from reentry_db.services.activity import ActivityFeedStore
from reentry_db.services.comments import CommentStore
from reentry_db.services.storage import ACTIVITY_KEY, COMMENTS_KEY, InMemoryKeyValueStore

from conftest import FIXED_NOW, FlakyKeyValueStore


class TestPostComment:
    """Posting team updates."""

    def test_post_stores_comment_and_activity(self, comment_store, activity_feed, storage):
        comment = comment_store.post("r1", "Sam", "Intake cleared")

        assert comment is not None
        assert comment.author == "Sam"
        assert comment.body == "Intake cleared"
        assert comment.timestamp == FIXED_NOW

        assert comment_store.list_for("r1") == [comment]

        latest = activity_feed.list(1)[0]
        assert latest.type == "comment"
        assert latest.title == "Hope House"
        assert latest.description == "Sam posted an update"

        stored = json.loads(storage.get(COMMENTS_KEY))
        assert stored["r1"][0] == {"author": "Sam", "body": "Intake cleared", "timestamp": FIXED_NOW}

    def test_post_increments_counts_by_one(self, comment_store, activity_feed):
        feed_before = len(activity_feed.current())

        comment_store.post("r1", "Sam", "Intake cleared")

        assert comment_store.counts() == {"r1": 1}
        assert len(activity_feed.current()) == feed_before + 1

    def test_newest_comment_first(self, storage, record_store, activity_feed):
        ticks = iter([1000, 2000])
        store = CommentStore(storage, record_store.get, activity_feed, clock=lambda: next(ticks))

        store.post("r2", "Sam", "first")
        store.post("r2", "Lee", "second")

        assert [comment.body for comment in store.list_for("r2")] == ["second", "first"]

    def test_input_is_trimmed(self, comment_store):
        comment = comment_store.post("r1", "  Sam ", "  Intake cleared  ")

        assert (comment.author, comment.body) == ("Sam", "Intake cleared")

    def test_blank_author_is_rejected_without_side_effects(self, comment_store, activity_feed, storage):
        feed_before = activity_feed.current()

        assert comment_store.post("r1", "   ", "Intake cleared") is None
        assert storage.get(COMMENTS_KEY) is None
        assert activity_feed.current() == feed_before

    def test_blank_body_is_rejected(self, comment_store):
        assert comment_store.post("r1", "Sam", "") is None
        assert comment_store.list_for("r1") == []

    def test_unknown_record_is_rejected(self, comment_store, storage):
        assert comment_store.post("missing", "Sam", "Hello") is None
        assert storage.get(COMMENTS_KEY) is None

    def test_event_published_after_post(self, storage, record_store, activity_feed, fixed_clock):
        bus = EventBus()
        received = []
        bus.subscribe(CommentPosted, received.append)
        store = CommentStore(storage, record_store.get, activity_feed, event_bus=bus, clock=fixed_clock)

        comment = store.post("r1", "Sam", "Intake cleared")

        assert received == [CommentPosted(record_id="r1", comment=comment)]


class TestCommentRollback:
    """Comment and activity writes succeed or fail together."""

    def _stores(self, storage, record_store, fixed_clock):
        feed = ActivityFeedStore(storage, record_source=record_store.all)
        feed.seed_from_records()
        return feed, CommentStore(storage, record_store.get, feed, clock=fixed_clock)

    def test_feed_failure_restores_previous_comments(self, record_store, fixed_clock):
        storage = FlakyKeyValueStore()
        feed, store = self._stores(storage, record_store, fixed_clock)
        store.post("r1", "Sam", "Intake cleared")
        before = storage.get(COMMENTS_KEY)

        storage.failing_keys.add(ACTIVITY_KEY)
        result = store.post("r1", "Lee", "Bed opened")

        assert result is None
        assert storage.get(COMMENTS_KEY) == before
        assert [comment.author for comment in store.list_for("r1")] == ["Sam"]

    def test_feed_failure_on_first_post_leaves_empty_mapping(self, record_store, fixed_clock):
        storage = FlakyKeyValueStore()
        feed, store = self._stores(storage, record_store, fixed_clock)
        storage.failing_keys.add(ACTIVITY_KEY)

        assert store.post("r1", "Sam", "Intake cleared") is None
        assert store.load() == {}
        assert store.counts() == {}

    def test_comment_write_failure_leaves_feed_untouched(self, record_store, fixed_clock):
        storage = FlakyKeyValueStore(failing_keys={COMMENTS_KEY})
        feed, store = self._stores(storage, record_store, fixed_clock)
        feed_before = feed.current()

        assert store.post("r1", "Sam", "Intake cleared") is None
        assert feed.current() == feed_before

    def test_feed_read_failure_keeps_history(self, record_store):
        storage = FlakyKeyValueStore()
        ticks = iter(range(1000, 6000, 1000))
        feed, store = self._stores(storage, record_store, lambda: next(ticks))
        for body in ("Intake cleared", "Bed opened", "Waitlist closed"):
            store.post("r1", "Sam", body)
        comments_before = storage.get(COMMENTS_KEY)
        feed_before = storage.get(ACTIVITY_KEY)

        storage.fail_next_read(ACTIVITY_KEY)

        assert store.post("r1", "Lee", "Van arrived") is None
        assert storage.get(COMMENTS_KEY) == comments_before
        assert storage.get(ACTIVITY_KEY) == feed_before

        assert store.post("r1", "Lee", "Van arrived") is not None
        assert len(store.list_for("r1")) == 4
        assert [entry.type for entry in feed.current()].count("comment") == 4

    def test_comment_read_failure_aborts_post(self, record_store, fixed_clock):
        storage = FlakyKeyValueStore()
        feed, store = self._stores(storage, record_store, fixed_clock)
        store.post("r1", "Sam", "Intake cleared")
        comments_before = storage.get(COMMENTS_KEY)
        feed_before = storage.get(ACTIVITY_KEY)

        storage.fail_next_read(COMMENTS_KEY)

        assert store.post("r1", "Lee", "Bed opened") is None
        assert storage.get(COMMENTS_KEY) == comments_before
        assert storage.get(ACTIVITY_KEY) == feed_before


class TestCommentLoading:
    """Reading persisted comments."""

    def test_nothing_stored(self, comment_store):
        assert comment_store.load() == {}
        assert comment_store.list_for("r1") == []

    def test_corrupt_payload_degrades_to_empty(self, record_store, activity_feed):
        storage = InMemoryKeyValueStore({COMMENTS_KEY: "{not json"})
        store = CommentStore(storage, record_store.get, activity_feed)

        assert store.load() == {}

    def test_wrong_shape_degrades_to_empty(self, record_store, activity_feed):
        storage = InMemoryKeyValueStore({COMMENTS_KEY: "[1, 2, 3]"})
        store = CommentStore(storage, record_store.get, activity_feed)

        assert store.load() == {}

    def test_post_over_corrupt_payload_starts_fresh(self, record_store, fixed_clock):
        storage = InMemoryKeyValueStore({COMMENTS_KEY: "garbage"})
        feed = ActivityFeedStore(storage, record_source=record_store.all)
        store = CommentStore(storage, record_store.get, feed, clock=fixed_clock)

        comment = store.post("r1", "Sam", "Intake cleared")

        assert store.load() == {"r1": [comment]}
