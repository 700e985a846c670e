# SPDX-License-Identifier: Apache-2.0

"""
Key-value persistence port.

Stores receive a ``KeyValueStore`` in their constructor. Every write is a
full overwrite of one key; there are no transactions, so two writers on the
same medium are last-writer-wins.
"""

import json
import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .errors import PersistenceCorrupt

logger = logging.getLogger(__name__)

COMMENTS_KEY = "housing-app-comments-v1"
ACTIVITY_KEY = "housing-app-activity-v1"
THREADS_KEY = "housing-talk-threads-v1"


@runtime_checkable
class KeyValueStore(Protocol):
    """String key-value medium with no expiry."""
    
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None if the key is absent."""
        ...
    
    def set(self, key: str, value: str) -> None:
        """Overwrite ``key``; raise ``StorageWriteError`` on failure."""
        ...


class InMemoryKeyValueStore:
    """Process-local KeyValueStore backed by a dict."""
    
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
    
    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)
    
    def set(self, key: str, value: str) -> None:
        self._data[key] = value


def storage_key(name: str, namespace: str = "") -> str:
    """Build a namespaced key; an empty namespace leaves ``name`` unchanged."""
    return f"{namespace}:{name}" if namespace else name


def read_json(storage: KeyValueStore, key: str) -> Optional[Any]:
    """
    Read and decode a JSON payload.
    
    Returns:
        Decoded value, or None when the key is absent
        
    Raises:
        PersistenceCorrupt: If the stored string is not valid JSON
    """
    raw = storage.get(key)
    return decode_json(raw, key)


def decode_json(raw: Optional[str], key: str) -> Optional[Any]:
    """Decode a raw payload already read from ``key``; None stays None."""
    if raw is None:
        return None
    
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise PersistenceCorrupt(f"Stored payload for {key} is not valid JSON: {str(e)}") from e


def write_json(storage: KeyValueStore, key: str, value: Any) -> str:
    """Encode ``value`` and overwrite ``key``; returns the written string."""
    payload = json.dumps(value, separators=(",", ":"))
    storage.set(key, payload)
    logger.debug(f"Persisted {len(payload)} bytes to {key}")
    return payload
