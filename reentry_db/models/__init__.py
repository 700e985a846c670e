# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the reentry housing directory.
"""

# Enumerations
from .enums import (
    ALL,
    SortDirection,
    ActivityType,
    FilterKey,
    ErrorKind
)

# Core entities
from .entities import (
    DirectoryModel,
    Contact,
    ProgramRecord,
    CommentEntry,
    ActivityEntry,
    ThreadEntry,
    Identity,
    epoch_millis,
    utc_now
)

# Response models
from .responses import HalLink

# Request models
from .requests import (
    ProgramPath,
    ProgramListQuery,
    ActivityQuery,
    CommentRequest,
    ThreadRequest,
    ProgramUpsertRequest
)

__all__ = [
    # Enumerations
    "ALL",
    "SortDirection",
    "ActivityType",
    "FilterKey",
    "ErrorKind",

    # Entities
    "DirectoryModel",
    "Contact",
    "ProgramRecord",
    "CommentEntry",
    "ActivityEntry",
    "ThreadEntry",
    "Identity",
    "epoch_millis",
    "utc_now",

    # Responses
    "HalLink",

    # Requests
    "ProgramPath",
    "ProgramListQuery",
    "ActivityQuery",
    "CommentRequest",
    "ThreadRequest",
    "ProgramUpsertRequest",
]
