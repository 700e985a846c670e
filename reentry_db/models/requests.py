# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .entities import Contact
from .enums import ALL, SortDirection


class ProgramPath(BaseModel):
    """Path parameters addressing a single program."""

    program_id: str = Field(..., description="Program identifier")


class ProgramListQuery(BaseModel):
    """Query parameters for the directory listing."""

    search: str = Field(default="", description="Free-text search over name, city and county")
    city: str = Field(default=ALL, description="Exact city or 'all'")
    county: str = Field(default=ALL, description="Exact county or 'all'")
    program_type: str = Field(default=ALL, description="Exact program type or 'all'")
    specialization: str = Field(default=ALL, description="Exact specialization or 'all'")
    gender: str = Field(default=ALL, description="Exact gender or 'all'")
    sort_by: str = Field(default="programName", description="Field to sort by")
    sort_direction: SortDirection = Field(default=SortDirection.ASC, description="asc or desc")
    page: int = Field(default=1, description="Page number (clamped to available pages)")
    page_size: Optional[int] = Field(default=None, gt=0, le=100, description="Items per page")


class ActivityQuery(BaseModel):
    """Query parameters for the activity feed."""

    limit: Optional[int] = Field(default=None, gt=0, le=500, description="Maximum entries to return")


class CommentRequest(BaseModel):
    """Request body for posting a team update on a program."""

    author: Optional[str] = Field(None, max_length=200, description="Author name; defaults to the signed-in user")
    body: str = Field(default="", max_length=2000, description="Update text")


class ThreadRequest(BaseModel):
    """Request body for starting a Housing Talk thread."""

    author: Optional[str] = Field(None, max_length=200, description="Author name; defaults to the signed-in user")
    topic: str = Field(default="", max_length=200, description="Thread topic")
    body: str = Field(default="", max_length=2000, description="Opening message")


class ProgramUpsertRequest(BaseModel):
    """Request body for adding or editing a program."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    program_name: str = Field(..., min_length=1, max_length=200, description="Program display name")
    city: str = Field(default="", description="City or town")
    county: str = Field(default="", description="County")
    program_type: str = Field(default="", description="Program type")
    specialization: str = Field(default="", description="Program specialization")
    gender: str = Field(default="", description="Gender served")
    available_beds: int = Field(default=0, ge=0, description="Beds currently open")
    capacity: int = Field(default=0, ge=0, description="Total beds")
    contact: Contact = Field(default_factory=Contact, description="Point of contact")
    notes: str = Field(default="", description="Free-form notes")
    created_at: Optional[datetime] = Field(None, description="Defaults to now for new programs")
