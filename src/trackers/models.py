"""
Issue Tracker Data Models.

Pydantic models for the objects returned by the Sentry web API. Only the
fields consumed by the exporter are declared; everything else is ignored.
Nullable JSON fields map to None.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TrackerModel(BaseModel):
    """Common configuration for payload models."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class Organization(TrackerModel):
    """Organization handle."""

    id: Optional[str] = None
    slug: str
    name: Optional[str] = None


class Project(TrackerModel):
    """Project handle within an organization."""

    id: Optional[str] = None
    slug: Optional[str] = None
    name: str = ""


class InternalUser(TrackerModel):
    """User an issue is assigned to."""

    id: Optional[str] = None
    username: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class Release(TrackerModel):
    """Release an event was reported from."""

    version: str = ""


class Issue(TrackerModel):
    """A deduplicated group of events."""

    id: Optional[str] = None
    assigned_to: Optional[InternalUser] = Field(default=None, alias="assignedTo")
    count: Optional[str] = None
    culprit: Optional[str] = None
    first_seen: Optional[datetime] = Field(default=None, alias="firstSeen")
    last_seen: Optional[datetime] = Field(default=None, alias="lastSeen")
    level: Optional[str] = None
    logger: Optional[str] = None
    permalink: Optional[str] = None
    project: Optional[Project] = None
    share_id: Optional[str] = Field(default=None, alias="shareId")
    short_id: Optional[str] = Field(default=None, alias="shortId")
    status: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    user_count: Optional[int] = Field(default=None, alias="userCount")
    user_report_count: Optional[int] = Field(default=None, alias="userReportCount")


class Event(TrackerModel):
    """A single occurrence of an issue."""

    event_id: str = Field(default="", alias="eventID")
    type: Optional[str] = None
    message: Optional[str] = None
    release: Optional[Release] = None
    date_created: Optional[datetime] = Field(default=None, alias="dateCreated")
    date_received: Optional[datetime] = Field(default=None, alias="dateReceived")
    platform: Optional[str] = None
    group_id: Optional[str] = Field(default=None, alias="groupID")


class PageCursor(BaseModel):
    """
    Opaque continuation token for a paged listing.

    A cursor only exists while more results are available; listings return
    None in its place on the last page.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    cursor: Optional[str] = None
