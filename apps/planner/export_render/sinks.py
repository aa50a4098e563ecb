"""
Narrow document-sink interfaces.

The treatment-plan and full-report renderers only talk to these protocols,
so the workbook and PDF libraries stay behind the concrete sinks in
xlsx_render and pdf_render.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

Row = Sequence[object]


@dataclass
class StyleHints:
    column_widths: Optional[Sequence[float]] = None
    header_rows: int = 1
    # Cells whose text equals the marker get the highlighted dose style.
    marker: Optional[str] = None
    # Row indexes (0-based, body rows only) whose first cell spans the full width.
    merged_rows: Sequence[int] = field(default_factory=tuple)
    zebra: bool = False
    title: Optional[str] = None


class SpreadsheetSink(Protocol):
    def write_sheet(
        self,
        name: str,
        rows: Sequence[Row],
        columns: Sequence[str],
        style_hints: Optional[StyleHints] = None,
    ) -> None: ...

    def finish(self) -> bytes: ...


class PdfSink(Protocol):
    def write_heading(self, text: str, level: int = 1) -> None: ...

    def write_key_values(self, pairs: Sequence[tuple[str, str]]) -> None: ...

    def write_pdf_table(
        self,
        rows: Sequence[Row],
        columns: Sequence[str],
        style_hints: Optional[StyleHints] = None,
    ) -> None: ...

    def write_bullets(self, items: Sequence[str]) -> None: ...

    def write_text(self, text: str) -> None: ...

    def finish(self) -> bytes: ...
