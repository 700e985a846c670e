# SPDX-License-Identifier: Apache-2.0

"""
Exceptions raised inside the directory engine.

Each carries an ``ErrorKind``. Stores recover from all of them locally;
only the HTTP layer turns them into responses.
"""

from ..models.enums import ErrorKind


class DirectoryError(Exception):
    """Base class for directory engine errors."""
    kind: ErrorKind = ErrorKind.VALIDATION_REJECTED


class PersistenceCorrupt(DirectoryError):
    """Raised when a persisted payload cannot be parsed."""
    kind = ErrorKind.PERSISTENCE_CORRUPT


class ValidationRejected(DirectoryError):
    """Raised when required input is missing or blank."""
    kind = ErrorKind.VALIDATION_REJECTED


class NotFound(DirectoryError):
    """Raised when a record identifier does not resolve."""
    kind = ErrorKind.NOT_FOUND


class AuthUnavailable(DirectoryError):
    """Raised when the identity provider cannot answer."""
    kind = ErrorKind.AUTH_UNAVAILABLE


class StorageError(DirectoryError):
    """Raised when the key-value medium itself fails."""
    kind = ErrorKind.STORAGE_WRITE_FAILED


class StorageReadError(StorageError):
    """Raised when a key cannot be read."""


class StorageWriteError(StorageError):
    """Raised when a key cannot be written."""
