"""
Row Building Module.

Pure transformation of tracker objects into flat ExporterResult rows.
Missing optional values become empty strings, zeros or unset timestamps.
"""

from typing import List, Optional, Sequence

from export.models import ExporterResult
from trackers.models import Event, InternalUser, Issue, Project, Release


UNKNOWN_USER = "(unknown)"


def stringize_user(user: Optional[InternalUser]) -> str:
    if user is None:
        return ""
    return user.username if user.username is not None else UNKNOWN_USER


def stringize_project(project: Optional[Project]) -> str:
    return "" if project is None else project.name


def stringize_release(release: Optional[Release]) -> str:
    return "" if release is None else release.version


def _str(value: Optional[str]) -> str:
    return "" if value is None else value


def _int(value: Optional[int]) -> int:
    return 0 if value is None else value


def build_issue_row(issue: Issue) -> ExporterResult:
    """Build the summary row of an issue with all event fields empty."""
    return ExporterResult(
        issue_id=_str(issue.id),
        assigned_to=stringize_user(issue.assigned_to),
        count=_str(issue.count),
        culprit=_str(issue.culprit),
        first_seen=issue.first_seen,
        last_seen=issue.last_seen,
        level=_str(issue.level),
        logger=_str(issue.logger),
        permalink=_str(issue.permalink),
        project=stringize_project(issue.project),
        share_id=_str(issue.share_id),
        short_id=_str(issue.short_id),
        status=_str(issue.status),
        title=_str(issue.title),
        issue_type=_str(issue.type),
        user_count=_int(issue.user_count),
        user_report_count=_int(issue.user_report_count),
    )


def with_event(row: ExporterResult, event: Event) -> ExporterResult:
    """Return a copy of an issue row carrying the fields of one of its events."""
    return row.model_copy(
        update={
            "event_id": event.event_id,
            "event_type": _str(event.type),
            "release": stringize_release(event.release),
            "message": _str(event.message),
            "event_created": event.date_created,
            "event_received": event.date_received,
            "platform": _str(event.platform),
            "group_id": _str(event.group_id),
        }
    )


def build_rows_for_issue(
    issue: Issue, events: Optional[Sequence[Event]] = None
) -> List[ExporterResult]:
    """
    Build the rows for one issue.

    Args:
        issue (Issue): The issue.
        events (Optional[Sequence[Event]]): Events of the issue, or None when
            events are not expanded.

    Returns:
        List[ExporterResult]: One row per event, or a single summary row when
            events is None or empty.
    """
    row = build_issue_row(issue)
    if not events:
        return [row]
    return [with_event(row, event) for event in events]
