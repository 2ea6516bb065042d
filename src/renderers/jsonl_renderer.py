"""
JSON Lines Renderer Module.

Writes one JSON object per record, keyed by the column names in schema order.
Timestamps are RFC 3339 strings (null when unset), counts are numbers.
"""

import json
from typing import Any, BinaryIO, Dict, Iterable

from export.models import RESULT_FIELDS, ExporterResult, FieldKind
from renderers.base import ResultRenderer


def result_to_dict(result: ExporterResult) -> Dict[str, Any]:
    record: Dict[str, Any] = {}
    for field in RESULT_FIELDS:
        value = field.value(result)
        if field.kind is FieldKind.INTEGER and isinstance(value, int):
            record[field.name] = value
        elif field.kind is FieldKind.TIMESTAMP and value is None:
            record[field.name] = None
        else:
            record[field.name] = field.render(result)
    return record


class JSONLinesRenderer(ResultRenderer):
    """Renders records as newline-delimited JSON."""

    def __init__(self, out: BinaryIO, encoding: str = "utf-8", errors: str = "replace"):
        self.out = out
        self.encoding = encoding
        self.errors = errors

    def render_header(self) -> None:
        pass

    def render_partial_results(self, results: Iterable[ExporterResult]) -> None:
        for result in results:
            line = json.dumps(result_to_dict(result), ensure_ascii=False)
            self.out.write((line + "\n").encode(self.encoding, self.errors))

    def render_footer(self) -> None:
        pass
