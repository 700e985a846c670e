# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the reentry housing directory.
"""

from enum import Enum


ALL = "all"


class SortDirection(str, Enum):
    """Sort direction for directory listings."""
    ASC = "asc"
    DESC = "desc"


class ActivityType(str, Enum):
    """Kinds of entries that appear in the activity feed."""
    PROGRAM = "program"
    COMMENT = "comment"


class FilterKey(str, Enum):
    """Exact-match filter keys, by record attribute name."""
    CITY = "city"
    COUNTY = "county"
    PROGRAM_TYPE = "program_type"
    SPECIALIZATION = "specialization"
    GENDER = "gender"


class ErrorKind(str, Enum):
    """Failure categories recovered inside the engine."""
    PERSISTENCE_CORRUPT = "persistence_corrupt"
    VALIDATION_REJECTED = "validation_rejected"
    NOT_FOUND = "not_found"
    AUTH_UNAVAILABLE = "auth_unavailable"
    STORAGE_WRITE_FAILED = "storage_write_failed"
