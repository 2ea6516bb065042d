"""
Abstract Base Class for Result Renderers.

A renderer serializes ExporterResult rows to an output sink. The exporter
drives it through four ordered lifecycle calls: render_header once, then
render_partial_results any number of times, then render_footer once, and
finally fini, which runs even when an earlier step failed.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from export.models import ExporterResult


class ResultRenderer(ABC):
    """Base class for output formats."""

    @abstractmethod
    def render_header(self) -> None:
        """Write whatever precedes the first record."""

    @abstractmethod
    def render_partial_results(self, results: Iterable[ExporterResult]) -> None:
        """
        Write a batch of records.

        Each call appends its records and keeps no state between calls, so
        rendering pages one at a time produces the same output as rendering
        all of them at once.
        """

    @abstractmethod
    def render_footer(self) -> None:
        """Write whatever follows the last record."""

    def fini(self) -> None:
        """Release renderer-held resources. The sink itself stays open."""
