"""
Delimited Text Renderer Module.

Writes records as delimited text (CSV, TSV) straight to a binary sink,
quoting a field only when it contains a separator or the quote character.
"""

from dataclasses import dataclass
from typing import BinaryIO, Iterable

from export.models import HEADER, RESULT_FIELDS, ExporterResult
from renderers.base import ResultRenderer


@dataclass(frozen=True)
class RenderFormat:
    """
    Delimiter and quoting choices of a delimited text format.

    Attributes:
        field_separator (str): Text placed between fields.
        record_separator (str): Text terminating every record.
        quote_character (str): Text wrapping fields that need quoting.
        encoding (str): Encoding of the bytes written to the sink.
        errors (str): Codec error handler; unencodable text such as lone
            surrogates is replaced instead of aborting the export.
    """

    field_separator: str
    record_separator: str
    quote_character: str
    encoding: str = "utf-8"
    errors: str = "replace"

    @property
    def chars_need_to_be_quoted(self) -> frozenset:
        return frozenset(
            self.field_separator + self.record_separator + self.quote_character
        )

    def needs_quoting(self, value: str) -> bool:
        return any(c in self.chars_need_to_be_quoted for c in value)

    def quote(self, value: str) -> str:
        """Quote a value if needed, doubling embedded quote characters."""
        if not self.needs_quoting(value):
            return value
        q = self.quote_character
        parts = [q]
        j = 0
        while True:
            i = value.find(q, j)
            if i < 0:
                break
            parts.append(value[j:i])
            parts.append(q + q)
            j = i + len(q)
        parts.append(value[j:])
        parts.append(q)
        return "".join(parts)


EXCEL_CSV = RenderFormat(field_separator=",", record_separator="\r\n", quote_character='"')
TSV = RenderFormat(field_separator="\t", record_separator="\n", quote_character='"')


class CSVRenderer(ResultRenderer):
    """
    Renders records as delimited text.

    Attributes:
        out (BinaryIO): Sink receiving encoded bytes.
        format (RenderFormat): Separators and quote character in use.
    """

    def __init__(self, out: BinaryIO, render_format: RenderFormat = EXCEL_CSV):
        self.out = out
        self.format = render_format

    def _write_record(self, values: Iterable[str]) -> None:
        fmt = self.format
        line = fmt.field_separator.join(fmt.quote(v) for v in values)
        self.out.write((line + fmt.record_separator).encode(fmt.encoding, fmt.errors))

    def render_header(self) -> None:
        self._write_record(HEADER)

    def render_one(self, result: ExporterResult) -> None:
        self._write_record(f.render(result) for f in RESULT_FIELDS)

    def render_partial_results(self, results: Iterable[ExporterResult]) -> None:
        for result in results:
            self.render_one(result)

    def render_footer(self) -> None:
        pass


def excel_csv_renderer(out: BinaryIO) -> CSVRenderer:
    """Renderer for the comma separated, CRLF terminated dialect Excel reads."""
    return CSVRenderer(out, EXCEL_CSV)
