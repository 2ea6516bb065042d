"""
Export Errors.

Every failure surfacing from an export is an ExportError whose message reads
"<what was being done>: <underlying cause>", with the cause chained.
"""

from typing import Optional


class ExportError(Exception):
    """Base class for export failures."""

    def __init__(self, context: str, cause: Optional[BaseException] = None):
        self.context = context
        self.cause = cause
        message = f"{context}: {cause}" if cause is not None else context
        super().__init__(message)


class ConfigurationError(ExportError):
    """Required options are missing or invalid; raised before any network activity."""


class ClientError(ExportError):
    """The remote service client could not be constructed."""


class RetrievalError(ExportError):
    """A remote lookup or page fetch failed."""

    def __init__(
        self,
        context: str,
        cause: Optional[BaseException] = None,
        issue_id: Optional[str] = None,
    ):
        super().__init__(context, cause)
        self.issue_id = issue_id


class RenderError(ExportError):
    """The renderer or its output sink failed."""
