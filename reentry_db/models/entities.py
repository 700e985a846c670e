# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the reentry housing directory.

Entities serialise with camelCase aliases so persisted payloads keep the
shape the directory has always written (``programName``, ``availableBeds``...).
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .enums import ActivityType

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def epoch_millis(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


class DirectoryModel(BaseModel):
    """Base model shared by every persisted or exchanged entity."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        frozen=True
    )

    def to_payload(self) -> dict:
        """JSON-compatible dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)


class Contact(DirectoryModel):
    """Point of contact for a program."""

    person: str = Field(default="", description="Contact person name")
    phone: str = Field(default="", description="Phone number")
    email: str = Field(default="", description="Email address")


class ProgramRecord(DirectoryModel):
    """A single housing/reentry program entry."""

    id: str = Field(..., min_length=1, description="Stable record identifier")
    program_name: str = Field(..., description="Program display name")
    city: str = Field(default="", description="City or town")
    county: str = Field(default="", description="County")
    program_type: str = Field(default="", description="Program type, e.g. Sober, LTRP")
    specialization: str = Field(default="", description="Program specialization")
    gender: str = Field(default="", description="Gender served")
    available_beds: int = Field(default=0, ge=0, description="Beds currently open")
    capacity: int = Field(default=0, ge=0, description="Total beds")
    contact: Contact = Field(default_factory=Contact, description="Point of contact")
    notes: str = Field(default="", description="Free-form notes")
    created_at: datetime = Field(default_factory=utc_now, description="When the program was added")

    @field_validator('program_name')
    @classmethod
    def validate_program_name(cls, v):
        """Program name cannot be blank."""
        if not v.strip():
            raise ValueError('Program name cannot be empty')
        return v.strip()

    @model_validator(mode='after')
    def check_bed_counts(self):
        """Availability above capacity is accepted at ingestion but reported."""
        if self.available_beds > self.capacity:
            logger.warning(
                "Program reports more available beds than capacity",
                extra={
                    "record_id": self.id,
                    "available_beds": self.available_beds,
                    "capacity": self.capacity
                }
            )
        return self

    @property
    def display_name(self) -> str:
        return self.program_name

    @property
    def created_at_millis(self) -> int:
        return epoch_millis(self.created_at)


class CommentEntry(DirectoryModel):
    """A team update posted against a program."""

    author: str = Field(..., min_length=1, description="Who posted the update")
    body: str = Field(..., min_length=1, description="Update text")
    timestamp: int = Field(..., description="Epoch milliseconds")


class ActivityEntry(DirectoryModel):
    """One line of the activity feed."""

    type: ActivityType = Field(..., description="program or comment")
    title: str = Field(..., description="Headline, usually a program name")
    description: str = Field(default="", description="Secondary text")
    timestamp: int = Field(..., description="Epoch milliseconds")


class ThreadEntry(DirectoryModel):
    """A Housing Talk discussion thread."""

    author: str = Field(..., min_length=1, description="Who started the thread")
    topic: str = Field(..., min_length=1, description="Thread topic")
    body: str = Field(..., min_length=1, description="Opening message")
    timestamp: int = Field(..., description="Epoch milliseconds")


class Identity(BaseModel):
    """Signed-in user as reported by the identity provider."""

    display_name: Optional[str] = Field(None, description="Name used to attribute posts")
