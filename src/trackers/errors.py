"""
Issue Tracker Client Errors.

Distinguishes the failure modes of remote calls so callers can tell a missing
resource apart from a broken transport.
"""

from typing import Optional


class TrackerError(Exception):
    """Base class for all issue tracker client failures."""


class TrackerTransportError(TrackerError):
    """The request never produced an HTTP response (DNS, connection, timeout)."""


class TrackerAPIError(TrackerError):
    """The service answered with an unexpected status or an unreadable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TrackerAuthError(TrackerAPIError):
    """The token was rejected (401) or lacks permission (403)."""


class TrackerNotFoundError(TrackerAPIError):
    """The requested organization, project or issue does not exist (404)."""
