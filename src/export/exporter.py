"""
Export Pipeline Module.

Drives a complete export: renders the header, resolves the organization and
project, walks the pages of issues (and, when requested, the pages of events
of every issue), renders each page as soon as it arrives, and finally renders
the footer. At most one page of issues and one page of events are held in
memory at a time.

Any failure aborts the export without retrying; rows rendered before the
failure stay in the output. The renderer's fini step always runs.
"""

from typing import Callable, Iterable, Sequence

from config import logger
from export.errors import ClientError, RenderError, RetrievalError
from export.models import ExporterConfig, ExporterResult
from export.rows import build_rows_for_issue
from renderers.base import ResultRenderer
from trackers.base import IssueTrackerClient
from trackers.errors import TrackerError
from trackers.models import Issue, Organization, Project
from trackers.sentry_client import SentryClient


class Exporter:
    """
    Exports the issues of one project through a renderer.

    Attributes:
        config (ExporterConfig): Export settings.
        renderer (ResultRenderer): Output format.
        client (IssueTrackerClient): Remote service client.
    """

    def __init__(
        self,
        config: ExporterConfig,
        renderer: ResultRenderer,
        client: IssueTrackerClient,
    ):
        self.config = config
        self.renderer = renderer
        self.client = client
        self.rows_rendered = 0

    @classmethod
    def create(
        cls,
        config: ExporterConfig,
        renderer: ResultRenderer,
        timeout: float = 60.0,
    ) -> "Exporter":
        """Build an exporter talking to Sentry with the configured credentials.

        Raises:
            ClientError: If the client cannot be constructed.
        """
        try:
            client = SentryClient(
                config.auth_token.get_secret_value(), config.endpoint, timeout=timeout
            )
        except TrackerError as e:
            raise ClientError("failed to create client", e) from e
        return cls(config, renderer, client)

    def _render(self, results: Sequence[ExporterResult]) -> None:
        try:
            self.renderer.render_partial_results(results)
        except (OSError, ValueError) as e:
            raise RenderError("failed to render results", e) from e
        self.rows_rendered += len(results)

    def _render_step(self, step: Callable[[], None], what: str) -> None:
        try:
            step()
        except (OSError, ValueError) as e:
            raise RenderError(f"failed to render a {what}", e) from e

    def _resolve(self) -> tuple:
        org_slug = self.config.organization
        try:
            organization: Organization = self.client.get_organization(org_slug)
        except TrackerError as e:
            raise RetrievalError(f"failed to retrieve organization {org_slug}", e) from e
        try:
            project: Project = self.client.get_project(organization, self.config.project)
        except TrackerError as e:
            raise RetrievalError(
                f"failed to retrieve project {self.config.project} "
                f"in organization {org_slug}",
                e,
            ) from e
        return organization, project

    def render_issue_events(self, issue: Issue) -> None:
        """Render one row per event of an issue, a page at a time."""
        issue_id = issue.id or ""
        context = f"failed to retrieve events for issue {issue_id}"
        try:
            events, cursor = self.client.get_issue_events(issue)
        except TrackerError as e:
            raise RetrievalError(context, e, issue_id=issue_id) from e
        self._render(build_rows_for_issue(issue, events))

        while cursor is not None:
            try:
                events, cursor = self.client.get_events_page(cursor)
            except TrackerError as e:
                raise RetrievalError(context, e, issue_id=issue_id) from e
            logger.debug("Fetched event page", issue=issue_id, events=len(events))
            # an empty trailing page would otherwise emit a summary row
            if events:
                self._render(build_rows_for_issue(issue, events))

    def render_issues(self, issues: Iterable[Issue]) -> None:
        """Render a page of issues, expanding events when configured."""
        for issue in issues:
            if self.config.include_events:
                self.render_issue_events(issue)
            else:
                self._render(build_rows_for_issue(issue, None))

    def export(self) -> int:
        """
        Run the export.

        Returns:
            int: Number of rows rendered.

        Raises:
            ExportError: If a lookup, a page fetch or the renderer fails.
        """
        org_slug = self.config.organization
        logger.info(
            "Starting export",
            organization=org_slug,
            project=self.config.project,
            include_events=self.config.include_events,
        )
        try:
            self._render_step(self.renderer.render_header, "header")
            organization, project = self._resolve()

            try:
                issues, cursor = self.client.get_issues(
                    organization, project, self.config.stats_period, self.config.query
                )
            except TrackerError as e:
                raise RetrievalError("failed to retrieve issues", e) from e
            pages = 1
            self.render_issues(issues)

            while cursor is not None:
                try:
                    issues, cursor = self.client.get_issues_page(cursor)
                except TrackerError as e:
                    raise RetrievalError("failed to retrieve issues", e) from e
                pages += 1
                logger.debug("Fetched issue page", page=pages, issues=len(issues))
                self.render_issues(issues)

            self._render_step(self.renderer.render_footer, "footer")
        except Exception as e:
            logger.error(
                "Export failed",
                organization=org_slug,
                project=self.config.project,
                rows_rendered=self.rows_rendered,
                error=str(e),
            )
            raise
        finally:
            self.renderer.fini()

        logger.info("Export finished", pages=pages, rows=self.rows_rendered)
        return self.rows_rendered

