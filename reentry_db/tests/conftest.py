# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
from datetime import datetime, timezone
from typing import List, Optional, Set

import pytest

from reentry_db.models.entities import ProgramRecord
from reentry_db.services.activity import ActivityFeedStore
from reentry_db.services.comments import CommentStore
from reentry_db.services.errors import StorageReadError, StorageWriteError
from reentry_db.services.records import RecordStore
from reentry_db.services.storage import InMemoryKeyValueStore

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

FIXED_NOW = 1_717_000_000_000


class FlakyKeyValueStore(InMemoryKeyValueStore):
    """
    In-memory store with injectable failures.

    Writes to ``failing_keys`` always fail; keys passed to ``fail_next_read``
    fail on their next ``get`` only.
    """

    def __init__(self, initial=None, failing_keys: Optional[Set[str]] = None):
        super().__init__(initial)
        self.failing_keys = set(failing_keys or ())
        self.failing_reads: List[str] = []
        self.writes = []

    def fail_next_read(self, key: str) -> None:
        self.failing_reads.append(key)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def get(self, key: str) -> Optional[str]:
        if key in self.failing_reads:
            self.failing_reads.remove(key)
            raise StorageReadError(f"Simulated read failure for {key}")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if key in self.failing_keys:
            raise StorageWriteError(f"Simulated write failure for {key}")
        self.writes.append(key)
        super().set(key, value)


def _program(**overrides) -> ProgramRecord:
    data = {
        "id": "r0",
        "programName": "Program",
        "city": "",
        "county": "",
        "programType": "",
        "specialization": "",
        "gender": "",
        "availableBeds": 0,
        "capacity": 0,
        "contact": {"person": "", "phone": "", "email": ""},
        "notes": "",
    }
    data.update(overrides)
    return ProgramRecord.model_validate(data)


@pytest.fixture
def make_program():
    """Factory for program records with camelCase overrides."""
    return _program


@pytest.fixture
def boston_program():
    return _program(
        id="r1",
        programName="Hope House",
        city="Boston",
        county="Suffolk",
        programType="Sober",
        specialization="Women",
        gender="Female",
        availableBeds=3,
        capacity=10,
        contact={"person": "Ana Lopez", "phone": "617-555-0101", "email": "ana@hopehouse.org"},
        createdAt=datetime(2024, 1, 10, tzinfo=timezone.utc)
    )


@pytest.fixture
def worcester_program():
    return _program(
        id="r2",
        programName="Bridge Home",
        city="Worcester",
        county="Worcester",
        programType="LTRP",
        specialization="General",
        gender="Male",
        availableBeds=0,
        capacity=8,
        contact={"person": "Ben Carter", "phone": "508-555-0102", "email": "ben@bridgehome.org"},
        createdAt=datetime(2024, 2, 1, tzinfo=timezone.utc)
    )


@pytest.fixture
def springfield_program():
    return _program(
        id="r3",
        programName="Crossroads Recovery",
        city="Springfield",
        county="Hampden",
        programType="Sober",
        specialization="Veterans",
        gender="Male",
        availableBeds=5,
        capacity=12,
        contact={"person": "Carl Diaz", "phone": "413-555-0103", "email": "carl@crossroads.org"},
        createdAt=datetime(2024, 3, 5, tzinfo=timezone.utc)
    )


@pytest.fixture
def sample_programs(boston_program, worcester_program, springfield_program):
    """Three programs in directory order."""
    return [boston_program, worcester_program, springfield_program]


@pytest.fixture
def storage():
    return InMemoryKeyValueStore()


@pytest.fixture
def flaky_storage():
    return FlakyKeyValueStore()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def record_store(sample_programs):
    return RecordStore(sample_programs)


@pytest.fixture
def activity_feed(storage, record_store):
    feed = ActivityFeedStore(storage, record_source=record_store.all)
    record_store.activity_feed = feed
    return feed


@pytest.fixture
def comment_store(storage, record_store, activity_feed, fixed_clock):
    return CommentStore(
        storage,
        record_lookup=record_store.get,
        activity_feed=activity_feed,
        clock=fixed_clock
    )


@pytest.fixture
def test_config():
    """Application settings for endpoint tests."""
    return {
        'ENVIRONMENT': 'test',
        'OTEL_ENABLED': False,
        'STORAGE_BACKEND': 'memory',
        'STORAGE_NAMESPACE': '',
        'RECORDS_PATH': '',
        'JWT_SECRET': '',
        'BASE_URL': 'http://localhost:5000',
        'PAGE_SIZE': 2,
        'FEED_LIMIT': 25,
        'FEED_MAX_PERSISTED': None
    }


@pytest.fixture
def app(test_config, storage, sample_programs):
    from reentry_db.app import create_app

    application = create_app(config=test_config, storage=storage, records=sample_programs)
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    """Create test client."""
    with app.test_client() as client:
        yield client
