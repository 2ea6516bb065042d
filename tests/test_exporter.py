"""
Export Pipeline Test Suite.

This module exercises the Exporter against a mocked tracker client, covering:
- Page traversal for issues and events
- Renderer lifecycle ordering
- Error wrapping and cleanup on failure
"""

import io
import json
import pytest
from unittest.mock import Mock, call, patch

from export.errors import ClientError, RenderError, RetrievalError
from export.exporter import Exporter
from export.models import ExporterConfig
from renderers.base import ResultRenderer
from renderers.csv_renderer import excel_csv_renderer
from trackers.base import IssueTrackerClient
from trackers.errors import TrackerError, TrackerNotFoundError, TrackerTransportError
from trackers.models import Event, Issue, Organization, PageCursor, Project


def make_config(include_events=False):
    return ExporterConfig.from_options(
        auth_token="token",
        organization="acme",
        project="web",
        include_events=include_events,
    )


def cursor(n):
    return PageCursor(url=f"https://sentry.io/api/0/next/{n}/", cursor=f"c{n}")


@pytest.fixture
def mock_client():
    """Mock tracker client resolving acme/web with one empty issue page."""
    client = Mock(spec=IssueTrackerClient)
    client.get_organization.return_value = Organization(slug="acme", name="Acme")
    client.get_project.return_value = Project(slug="web", name="web")
    client.get_issues.return_value = ([], None)
    return client


@pytest.fixture
def out():
    return io.BytesIO()


def data_lines(out):
    """Output lines after the header."""
    return out.getvalue().decode().split("\r\n")[1:-1]


def test_two_issues_single_page(mock_client, out):
    """Test header plus one row per issue without event expansion."""
    mock_client.get_issues.return_value = (
        [Issue(id="1", title="Crash"), Issue(id="2", title="Crash, null pointer")],
        None,
    )

    rows = Exporter(make_config(), excel_csv_renderer(out), mock_client).export()

    lines = data_lines(out)
    assert rows == 2
    assert out.getvalue().decode().startswith("IssueID,AssignedTo,")
    assert lines[0].startswith("1,")
    assert lines[0].endswith("0,0" + "," * 8)
    assert ',"Crash, null pointer",' in lines[1]
    mock_client.get_organization.assert_called_once_with("acme")
    mock_client.get_project.assert_called_once_with(
        mock_client.get_organization.return_value, "web"
    )
    mock_client.get_issues.assert_called_once_with(
        mock_client.get_organization.return_value,
        mock_client.get_project.return_value,
        None,
        None,
    )
    mock_client.get_issue_events.assert_not_called()


def test_issue_pages_are_followed(mock_client, out):
    """Test that every page is fetched exactly once and rendered in order."""
    mock_client.get_issues.return_value = ([Issue(id="1"), Issue(id="2")], cursor(1))
    mock_client.get_issues_page.side_effect = [
        ([Issue(id="3")], cursor(2)),
        ([Issue(id="4"), Issue(id="5")], None),
    ]

    rows = Exporter(make_config(), excel_csv_renderer(out), mock_client).export()

    assert rows == 5
    assert [line.split(",")[0] for line in data_lines(out)] == ["1", "2", "3", "4", "5"]
    assert mock_client.get_issues.call_count == 1
    assert mock_client.get_issues_page.call_args_list == [call(cursor(1)), call(cursor(2))]


def test_event_pages_are_followed(mock_client, out):
    """Test event expansion across pages, one row per event."""
    issue_a, issue_b = Issue(id="a"), Issue(id="b")
    mock_client.get_issues.return_value = ([issue_a, issue_b], None)
    mock_client.get_issue_events.side_effect = [
        ([Event(event_id="a1"), Event(event_id="a2")], cursor(1)),
        ([], None),
    ]
    mock_client.get_events_page.side_effect = [([Event(event_id="a3")], None)]

    rows = Exporter(make_config(True), excel_csv_renderer(out), mock_client).export()

    lines = data_lines(out)
    assert rows == 4
    assert [(line.split(",")[0], line.split(",")[17]) for line in lines] == [
        ("a", "a1"),
        ("a", "a2"),
        ("a", "a3"),
        ("b", ""),
    ]
    assert mock_client.get_issue_events.call_args_list == [call(issue_a), call(issue_b)]
    mock_client.get_events_page.assert_called_once_with(cursor(1))


def test_renderer_lifecycle_order(mock_client):
    """Test header, results, footer and fini are called in order."""
    renderer = Mock(spec=ResultRenderer)
    mock_client.get_issues.return_value = ([Issue(id="1")], None)

    Exporter(make_config(), renderer, mock_client).export()

    assert [c[0] for c in renderer.method_calls] == [
        "render_header",
        "render_partial_results",
        "render_footer",
        "fini",
    ]


def test_organization_lookup_failure(mock_client):
    """Test that a failed organization lookup aborts and still finalizes."""
    renderer = Mock(spec=ResultRenderer)
    mock_client.get_organization.side_effect = TrackerNotFoundError("not found", 404)

    with pytest.raises(RetrievalError) as excinfo:
        Exporter(make_config(), renderer, mock_client).export()

    assert str(excinfo.value) == "failed to retrieve organization acme: not found"
    assert isinstance(excinfo.value.__cause__, TrackerNotFoundError)
    renderer.render_footer.assert_not_called()
    renderer.fini.assert_called_once()
    mock_client.get_project.assert_not_called()


def test_project_lookup_failure(mock_client):
    renderer = Mock(spec=ResultRenderer)
    mock_client.get_project.side_effect = TrackerTransportError("timed out")

    with pytest.raises(RetrievalError, match="failed to retrieve project web in organization acme"):
        Exporter(make_config(), renderer, mock_client).export()

    renderer.fini.assert_called_once()


def test_event_page_failure_keeps_rendered_rows(mock_client, out):
    """Test that rows rendered before a failure remain and the issue is named."""
    mock_client.get_issues.return_value = ([Issue(id="9")], None)
    mock_client.get_issue_events.return_value = ([Event(event_id="e1")], cursor(1))
    mock_client.get_events_page.side_effect = TrackerError("boom")

    with pytest.raises(RetrievalError) as excinfo:
        Exporter(make_config(True), excel_csv_renderer(out), mock_client).export()

    assert excinfo.value.issue_id == "9"
    assert "failed to retrieve events for issue 9" in str(excinfo.value)
    assert len(data_lines(out)) == 1


def test_issue_page_failure(mock_client):
    renderer = Mock(spec=ResultRenderer)
    mock_client.get_issues.return_value = ([Issue(id="1")], cursor(1))
    mock_client.get_issues_page.side_effect = TrackerTransportError("reset")

    with pytest.raises(RetrievalError, match="failed to retrieve issues: reset"):
        Exporter(make_config(), renderer, mock_client).export()

    renderer.render_partial_results.assert_called_once()
    renderer.fini.assert_called_once()


def test_render_failure_is_wrapped(mock_client):
    """Test that sink errors become RenderError and fini still runs."""
    renderer = Mock(spec=ResultRenderer)
    renderer.render_header.side_effect = BrokenPipeError("closed")

    with pytest.raises(RenderError, match="failed to render a header"):
        Exporter(make_config(), renderer, mock_client).export()

    mock_client.get_organization.assert_not_called()
    renderer.fini.assert_called_once()


def test_client_construction_failure():
    with patch("export.exporter.SentryClient", side_effect=TrackerError("bad endpoint")):
        with pytest.raises(ClientError, match="failed to create client: bad endpoint"):
            Exporter.create(make_config(), Mock(spec=ResultRenderer))


def test_empty_trailing_event_page_adds_no_row(mock_client, out):
    """Test that an empty later event page renders nothing."""
    mock_client.get_issues.return_value = ([Issue(id="a")], None)
    mock_client.get_issue_events.return_value = (
        [Event(event_id="a1"), Event(event_id="a2")],
        cursor(1),
    )
    mock_client.get_events_page.return_value = ([], None)

    rows = Exporter(make_config(True), excel_csv_renderer(out), mock_client).export()

    lines = data_lines(out)
    assert rows == 2
    assert [line.split(",")[17] for line in lines] == ["a1", "a2"]
    mock_client.get_events_page.assert_called_once_with(cursor(1))


def test_lone_surrogate_is_exported(mock_client, out):
    """Test that unencodable text in a payload does not abort the export."""
    issue = Issue.model_validate(json.loads('{"id": "1", "title": "bad \\ud83d char"}'))
    mock_client.get_issues.return_value = ([issue], None)

    rows = Exporter(make_config(), excel_csv_renderer(out), mock_client).export()

    assert rows == 1
    assert ",bad ? char," in data_lines(out)[0]


def test_encoding_failure_is_wrapped(mock_client):
    """Test that value errors from the renderer become RenderError."""
    renderer = Mock(spec=ResultRenderer)
    renderer.render_partial_results.side_effect = UnicodeEncodeError(
        "utf-8", "\ud83d", 0, 1, "surrogates not allowed"
    )
    mock_client.get_issues.return_value = ([Issue(id="1")], None)

    with pytest.raises(RenderError, match="failed to render results"):
        Exporter(make_config(), renderer, mock_client).export()

    renderer.fini.assert_called_once()
