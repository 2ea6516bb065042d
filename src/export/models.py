"""
Export Data Models.

Defines the export configuration and the flat record written for every issue
(or issue/event pair), together with the ordered field schema renderers use
to serialize records.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from export.errors import ConfigurationError


class ExporterConfig(BaseModel):
    """
    Immutable settings for one export run.

    Attributes:
        auth_token (SecretStr): Sentry API auth token
        endpoint (Optional[str]): Custom API endpoint, None for the default
        organization (str): Organization slug
        project (str): Project slug
        stats_period (Optional[str]): Time window filter, e.g. "24h" or "14d"
        query (Optional[str]): Search query passed to the issue listing
        include_events (bool): Expand each issue into one row per event
    """

    model_config = ConfigDict(frozen=True)

    auth_token: SecretStr
    endpoint: Optional[str] = None
    organization: str = Field(..., min_length=1)
    project: str = Field(..., min_length=1)
    stats_period: Optional[str] = None
    query: Optional[str] = None
    include_events: bool = False

    @field_validator("endpoint", "stats_period")
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def from_options(
        cls,
        auth_token: Optional[str],
        organization: Optional[str],
        project: Optional[str],
        endpoint: Optional[str] = None,
        stats_period: Optional[str] = None,
        query: Optional[str] = None,
        include_events: bool = False,
    ) -> "ExporterConfig":
        """Build a configuration, reporting the first missing required option.

        Raises:
            ConfigurationError: If the token, organization or project is blank.
        """
        if not auth_token:
            raise ConfigurationError("authtoken is not specified")
        if not organization:
            raise ConfigurationError("organization is not specified")
        if not project:
            raise ConfigurationError("project is not specified")
        return cls(
            auth_token=SecretStr(auth_token),
            endpoint=endpoint,
            organization=organization,
            project=project,
            stats_period=stats_period,
            query=query,
            include_events=include_events,
        )


class ExporterResult(BaseModel):
    """One output row: issue fields, plus event fields when events are expanded."""

    model_config = ConfigDict(frozen=True)

    issue_id: str = ""
    assigned_to: str = ""
    count: str = ""
    culprit: str = ""
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    level: str = ""
    logger: str = ""
    permalink: str = ""
    project: str = ""
    share_id: str = ""
    short_id: str = ""
    status: str = ""
    title: str = ""
    issue_type: str = ""
    user_count: int = 0
    user_report_count: int = 0
    event_id: str = ""
    event_type: str = ""
    release: str = ""
    message: str = ""
    event_created: Optional[datetime] = None
    event_received: Optional[datetime] = None
    platform: str = ""
    group_id: str = ""


class FieldKind(Enum):
    """Semantic type of a record field, deciding how it is stringified."""

    STRING = "string"
    TIMESTAMP = "timestamp"
    INTEGER = "integer"


NOT_AVAILABLE = "N/A"


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as RFC 3339 with second precision.

    Naive values are taken as UTC; a UTC offset renders as "Z".
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def stringify(kind: FieldKind, value: Any) -> str:
    """Render a field value as text according to its kind.

    An unset timestamp renders as an empty string. A value that does not
    match its declared kind renders as "N/A".
    """
    if kind is FieldKind.STRING and isinstance(value, str):
        return value
    if kind is FieldKind.TIMESTAMP:
        if value is None:
            return ""
        if isinstance(value, datetime):
            return format_timestamp(value)
    if kind is FieldKind.INTEGER and isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return NOT_AVAILABLE


@dataclass(frozen=True)
class ResultField:
    """Column declaration: output name, ExporterResult attribute and kind."""

    name: str
    attribute: str
    kind: FieldKind

    def value(self, result: ExporterResult) -> Any:
        return getattr(result, self.attribute)

    def render(self, result: ExporterResult) -> str:
        return stringify(self.kind, self.value(result))


RESULT_FIELDS: Tuple[ResultField, ...] = (
    ResultField("IssueID", "issue_id", FieldKind.STRING),
    ResultField("AssignedTo", "assigned_to", FieldKind.STRING),
    ResultField("Count", "count", FieldKind.STRING),
    ResultField("Culprit", "culprit", FieldKind.STRING),
    ResultField("FirstSeen", "first_seen", FieldKind.TIMESTAMP),
    ResultField("LastSeen", "last_seen", FieldKind.TIMESTAMP),
    ResultField("Level", "level", FieldKind.STRING),
    ResultField("Logger", "logger", FieldKind.STRING),
    ResultField("Permalink", "permalink", FieldKind.STRING),
    ResultField("Project", "project", FieldKind.STRING),
    ResultField("ShareID", "share_id", FieldKind.STRING),
    ResultField("ShortID", "short_id", FieldKind.STRING),
    ResultField("Status", "status", FieldKind.STRING),
    ResultField("Title", "title", FieldKind.STRING),
    ResultField("IssueType", "issue_type", FieldKind.STRING),
    ResultField("UserCount", "user_count", FieldKind.INTEGER),
    ResultField("UserReportCount", "user_report_count", FieldKind.INTEGER),
    ResultField("EventID", "event_id", FieldKind.STRING),
    ResultField("EventType", "event_type", FieldKind.STRING),
    ResultField("Release", "release", FieldKind.STRING),
    ResultField("Message", "message", FieldKind.STRING),
    ResultField("EventCreated", "event_created", FieldKind.TIMESTAMP),
    ResultField("EventReceived", "event_received", FieldKind.TIMESTAMP),
    ResultField("Platform", "platform", FieldKind.STRING),
    ResultField("GroupID", "group_id", FieldKind.STRING),
)

HEADER: Tuple[str, ...] = tuple(f.name for f in RESULT_FIELDS)
