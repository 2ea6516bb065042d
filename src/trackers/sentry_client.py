"""
Sentry Web API Client Module.

Talks to the Sentry REST API (``/api/0/``) with a bearer token and maps its
JSON payloads onto the models in trackers.models. Paged listings follow the
``Link`` response header, where the ``next`` link carries a ``results`` flag
telling whether another page exists and the ``cursor`` to request it.
"""

from typing import Any, List, Optional, Tuple, Type, TypeVar
from urllib.parse import quote

import requests
from pydantic import ValidationError

from config import logger
from trackers.base import EventPage, IssuePage, IssueTrackerClient
from trackers.errors import (
    TrackerAPIError,
    TrackerAuthError,
    TrackerError,
    TrackerNotFoundError,
    TrackerTransportError,
)
from trackers.models import (
    Event,
    Issue,
    Organization,
    PageCursor,
    Project,
    TrackerModel,
)


DEFAULT_ENDPOINT = "https://sentry.io/api/0/"

ModelT = TypeVar("ModelT", bound=TrackerModel)


def next_page_cursor(response: requests.Response) -> Optional[PageCursor]:
    """Extract the next-page cursor from a response's Link header.

    Args:
        response (requests.Response): A listing response.

    Returns:
        Optional[PageCursor]: The cursor, or None when the service reports no
            further results.
    """
    link = response.links.get("next")
    if not link or link.get("results") != "true":
        return None
    return PageCursor(url=link["url"], cursor=link.get("cursor"))


class SentryClient(IssueTrackerClient):
    """
    Issue tracker client backed by the Sentry web API.

    Attributes:
        endpoint (str): Base URL of the API, always ending in a slash.
        session (requests.Session): Authenticated HTTP session.
        timeout (float): Per-request timeout in seconds.
    """

    def __init__(
        self,
        auth_token: str,
        endpoint: Optional[str] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client with authentication and endpoint.

        Args:
            auth_token (str): Sentry API auth token.
            endpoint (Optional[str]): Custom API endpoint; defaults to sentry.io.
            timeout (float): Per-request timeout in seconds.
            session (Optional[requests.Session]): Session to use instead of a new one.

        Raises:
            TrackerError: If no token is given.
        """
        if not auth_token:
            raise TrackerError("auth token is empty")
        self.endpoint = (endpoint or DEFAULT_ENDPOINT).rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {auth_token}",
                "Accept": "application/json",
            }
        )

    def _url(self, *segments: str) -> str:
        return self.endpoint + "".join(quote(s, safe="") + "/" for s in segments)

    def _request(self, url: str, params: Optional[dict] = None) -> requests.Response:
        """Perform a GET and translate failures into tracker errors."""
        logger.debug("Sentry API request", url=url, params=params)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TrackerTransportError(f"request to {url} failed: {e}") from e

        status = response.status_code
        if status == 404:
            raise TrackerNotFoundError(f"{url} not found", status)
        if status in (401, 403):
            raise TrackerAuthError(f"access to {url} denied (HTTP {status})", status)
        if not 200 <= status < 300:
            raise TrackerAPIError(f"{url} returned HTTP {status}", status)
        return response

    def _decode(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TrackerAPIError(
                f"{response.url} returned a malformed payload", response.status_code
            ) from e

    def _get_one(
        self, model: Type[ModelT], url: str, params: Optional[dict] = None
    ) -> ModelT:
        response = self._request(url, params)
        try:
            return model.model_validate(self._decode(response))
        except ValidationError as e:
            raise TrackerAPIError(
                f"unexpected {model.__name__} payload from {url}: {e}",
                response.status_code,
            ) from e

    def _get_list(
        self, model: Type[ModelT], url: str, params: Optional[dict] = None
    ) -> Tuple[List[ModelT], Optional[PageCursor]]:
        response = self._request(url, params)
        payload = self._decode(response)
        if not isinstance(payload, list):
            raise TrackerAPIError(
                f"expected a list from {url}, got {type(payload).__name__}",
                response.status_code,
            )
        try:
            items = [model.model_validate(item) for item in payload]
        except ValidationError as e:
            raise TrackerAPIError(
                f"unexpected {model.__name__} payload from {url}: {e}",
                response.status_code,
            ) from e
        return items, next_page_cursor(response)

    def get_organization(self, slug: str) -> Organization:
        return self._get_one(Organization, self._url("organizations", slug))

    def get_project(self, organization: Organization, slug: str) -> Project:
        return self._get_one(Project, self._url("projects", organization.slug, slug))

    def get_issues(
        self,
        organization: Organization,
        project: Project,
        stats_period: Optional[str] = None,
        query: Optional[str] = None,
    ) -> IssuePage:
        params = {}
        if stats_period is not None:
            params["statsPeriod"] = stats_period
        if query is not None:
            params["query"] = query
        url = self._url("projects", organization.slug, project.slug or project.name, "issues")
        return self._get_list(Issue, url, params or None)

    def get_issues_page(self, cursor: PageCursor) -> IssuePage:
        return self._get_list(Issue, cursor.url)

    def get_issue_events(self, issue: Issue) -> EventPage:
        if not issue.id:
            raise TrackerError("issue has no id")
        return self._get_list(Event, self._url("issues", issue.id, "events"))

    def get_events_page(self, cursor: PageCursor) -> EventPage:
        return self._get_list(Event, cursor.url)

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self.session.close()
