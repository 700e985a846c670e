# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Stores, storage adapters and side effects.
"""

from .storage import KeyValueStore, InMemoryKeyValueStore, storage_key
from .activity import ActivityFeedStore
from .comments import CommentStore
from .threads import ThreadStore
from .records import RecordStore, load_records_json
from .directory import DirectoryService

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "storage_key",
    "ActivityFeedStore",
    "CommentStore",
    "ThreadStore",
    "RecordStore",
    "load_records_json",
    "DirectoryService"
]
