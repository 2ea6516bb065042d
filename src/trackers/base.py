"""
Abstract Base Class for Issue Tracker Clients.

Defines the interface the export pipeline consumes. Every listing operation
returns a batch of items together with the cursor for the next page, or None
when the batch is the last one.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from trackers.models import Event, Issue, Organization, PageCursor, Project


IssuePage = Tuple[List[Issue], Optional[PageCursor]]
EventPage = Tuple[List[Event], Optional[PageCursor]]


class IssueTrackerClient(ABC):
    """
    Abstract base class for issue tracker clients.

    Implementations should handle:
    - Authentication with the tracking service
    - Resolution of organizations and projects
    - Paged listing of issues and their events
    - Mapping failures onto trackers.errors
    """

    @abstractmethod
    def get_organization(self, slug: str) -> Organization:
        """
        Resolve an organization by its slug.

        Raises:
            TrackerNotFoundError: If the organization does not exist
            TrackerError: On any other failure
        """

    @abstractmethod
    def get_project(self, organization: Organization, slug: str) -> Project:
        """Resolve a project by its slug within an organization."""

    @abstractmethod
    def get_issues(
        self,
        organization: Organization,
        project: Project,
        stats_period: Optional[str] = None,
        query: Optional[str] = None,
    ) -> IssuePage:
        """List the first page of issues matching the filters."""

    @abstractmethod
    def get_issues_page(self, cursor: PageCursor) -> IssuePage:
        """Fetch the page of issues a cursor points to."""

    @abstractmethod
    def get_issue_events(self, issue: Issue) -> EventPage:
        """List the first page of events of an issue."""

    @abstractmethod
    def get_events_page(self, cursor: PageCursor) -> EventPage:
        """Fetch the page of events a cursor points to."""

    def close(self) -> None:
        """Release connections held by the client."""
