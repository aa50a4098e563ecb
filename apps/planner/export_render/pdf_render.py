"""
PDF rendering for the treatment plan (A4, reportlab platypus).
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from apps.planner.export_render.common import format_generated_at
from apps.planner.export_render.constants import (
    CLINICAL_BLUE,
    DARK_TEXT,
    DOSE_MARKER,
    EMPTY_CELL_GREY,
    INSTRUCTIONS_PREFIX,
    LIGHT_BLUE,
    NAME_COLUMN_BLUE,
    SCHEDULE_TABLE_COLUMNS,
    SERVICE_NAME,
)
from apps.planner.export_render.sinks import PdfSink, StyleHints
from apps.planner.project.models import TreatmentReport

logger = logging.getLogger(__name__)

MARGIN = 15 * mm
FOOTER_SPACE = 22 * mm

# Helvetica has no check mark glyph; ZapfDingbats "4" is the heavy check.
_MARKER_MARKUP = '<font name="ZapfDingbats">4</font>'


def _hex(value: str) -> colors.Color:
    return colors.HexColor(f"#{value}")


class ReportlabPdfSink:
    """PdfSink collecting platypus flowables; the document is built on finish()."""

    def __init__(self, footer_text: str = "", signature_line: bool = False):
        self.footer_text = footer_text
        self.signature_line = signature_line
        self.flowables: list = []
        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            "CenterTitle", parent=styles["Title"], fontSize=18, alignment=0, spaceAfter=2, textColor=_hex(CLINICAL_BLUE)
        )
        self.heading_style = ParagraphStyle(
            "SectionHeading", parent=styles["Heading2"], fontSize=12, spaceBefore=10, spaceAfter=6, textColor=_hex(CLINICAL_BLUE)
        )
        self.normal_style = ParagraphStyle("Body", parent=styles["Normal"], fontSize=9, textColor=_hex(DARK_TEXT))
        self.muted_style = ParagraphStyle("Muted", parent=self.normal_style, fontSize=10, textColor=colors.grey)
        self.cell_style = ParagraphStyle("Cell", parent=self.normal_style, fontSize=8, leading=10)
        self.header_cell_style = ParagraphStyle(
            "HeaderCell", parent=self.cell_style, fontName="Helvetica-Bold", fontSize=6, leading=7.5,
            alignment=1, textColor=colors.white,
        )
        self.marker_style = ParagraphStyle("Marker", parent=self.cell_style, alignment=1, textColor=_hex(CLINICAL_BLUE))

    @property
    def content_width(self) -> float:
        return A4[0] - 2 * MARGIN

    def write_heading(self, text: str, level: int = 1) -> None:
        style = self.title_style if level <= 0 else self.heading_style
        self.flowables.append(Paragraph(escape(text), style))

    def write_text(self, text: str) -> None:
        self.flowables.append(Paragraph(escape(text).replace("\n", "<br/>"), self.muted_style))
        self.flowables.append(Spacer(1, 2 * mm))

    def write_key_values(self, pairs: Sequence[tuple[str, str]]) -> None:
        data = [
            [Paragraph(f"<b>{escape(label)}</b>", self.normal_style), Paragraph(escape(value or "N/A"), self.normal_style)]
            for label, value in pairs
        ]
        table = Table(data, colWidths=[50 * mm, self.content_width - 50 * mm], hAlign="LEFT")
        table.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 2),
            ("TOPPADDING", (0, 0), (-1, -1), 1),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
        ]))
        self.flowables.append(table)
        self.flowables.append(Spacer(1, 3 * mm))

    def write_bullets(self, items: Sequence[str]) -> None:
        for item in items:
            self.flowables.append(Paragraph(f"• {escape(item)}", self.normal_style))
            self.flowables.append(Spacer(1, 1.5 * mm))

    def _column_widths(self, count: int, hints: StyleHints) -> list[float]:
        weights = list(hints.column_widths or [1] * count)
        weights += [1] * (count - len(weights))
        total = float(sum(weights[:count]))
        return [self.content_width * w / total for w in weights[:count]]

    def _cell(self, value: object, hints: StyleHints) -> object:
        text = "" if value is None else str(value)
        if hints.marker is not None and text == hints.marker:
            return Paragraph(_MARKER_MARKUP, self.marker_style)
        return Paragraph(escape(text).replace("\n", "<br/>"), self.cell_style)

    def write_pdf_table(
        self,
        rows: Sequence[Sequence[object]],
        columns: Sequence[str],
        style_hints: Optional[StyleHints] = None,
    ) -> None:
        hints = style_hints or StyleHints()
        header = [Paragraph(escape(c).replace("\n", "<br/>"), self.header_cell_style) for c in columns]
        data = [header] + [[self._cell(v, hints) for v in row] for row in rows]

        commands = [
            ("BACKGROUND", (0, 0), (-1, 0), _hex(CLINICAL_BLUE)),
            ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, -1), 2),
            ("RIGHTPADDING", (0, 0), (-1, -1), 2),
            ("TOPPADDING", (0, 0), (-1, -1), 2),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ]
        merged = set(hints.merged_rows)
        for index, row in enumerate(rows):
            table_row = index + 1
            if index in merged:
                commands.append(("SPAN", (0, table_row), (-1, table_row)))
                commands.append(("BACKGROUND", (0, table_row), (-1, table_row), _hex(LIGHT_BLUE)))
                continue
            if hints.marker is not None:
                commands.append(("BACKGROUND", (0, table_row), (0, table_row), _hex(NAME_COLUMN_BLUE)))
                for col, value in enumerate(row[1:], start=1):
                    if value != hints.marker:
                        commands.append(("BACKGROUND", (col, table_row), (col, table_row), _hex(EMPTY_CELL_GREY)))
            elif hints.zebra and index % 2 == 1:
                commands.append(("BACKGROUND", (0, table_row), (-1, table_row), _hex(LIGHT_BLUE)))

        table = Table(data, colWidths=self._column_widths(len(columns), hints), repeatRows=hints.header_rows)
        table.setStyle(TableStyle(commands))
        self.flowables.append(table)
        self.flowables.append(Spacer(1, 4 * mm))

    def _footer(self, canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        if self.signature_line:
            canvas.drawString(MARGIN, 16 * mm, "_________________________")
            canvas.drawString(MARGIN, 12 * mm, "Firma del Farmacéutico")
        if self.footer_text:
            canvas.drawString(MARGIN, 7 * mm, self.footer_text)
        canvas.drawRightString(A4[0] - MARGIN, 7 * mm, f"Página {doc.page}")
        canvas.restoreState()

    def finish(self) -> bytes:
        buffer = BytesIO()
        doc = BaseDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=FOOTER_SPACE,
        )
        frame = Frame(doc.leftMargin, doc.bottomMargin, doc.width, doc.height, id="normal")
        doc.addPageTemplates([PageTemplate(id="plan", frames=[frame], onPage=self._footer)])
        doc.build(self.flowables or [Spacer(1, 1)])
        return buffer.getvalue()


def _matrix_table(report: TreatmentReport) -> tuple[list[list[str]], list[int]]:
    """Matrix body for print; instruction rows without text are dropped."""
    rows: list[list[str]] = []
    merged: list[int] = []
    for row, cells in zip(report.matrix.rows, report.matrix.body()):
        if row.kind == "instructions":
            if not cells[0][len(INSTRUCTIONS_PREFIX):].strip():
                continue
            merged.append(len(rows))
        rows.append(cells)
    return rows, merged


def generate_treatment_pdf(report: TreatmentReport, sink: Optional[PdfSink] = None) -> bytes:
    sink = sink or ReportlabPdfSink(
        footer_text=f"Generado el: {format_generated_at(report.generated_at)}",
        signature_line=report.pharmacist_signature,
    )
    patient = report.patient

    sink.write_heading(report.center_name, level=0)
    sink.write_text(SERVICE_NAME)

    sink.write_heading("INFORMACIÓN DEL PACIENTE")
    sink.write_key_values([
        ("Nombre:", patient.full_name),
        ("Cédula:", patient.cedula),
        ("Edad:", patient.age),
        ("Alergias/Contraindicaciones:", patient.medical_conditions),
    ])

    sink.write_heading("PLANNING VISUAL - MATRIZ HORARIA")
    if report.lines:
        rows, merged = _matrix_table(report)
        sink.write_pdf_table(
            rows,
            report.matrix.header,
            StyleHints(column_widths=[35] + [7.6] * len(report.matrix.hours), marker=DOSE_MARKER, merged_rows=merged),
        )
    else:
        sink.write_text("No hay medicamentos asignados en el calendario.")

    sink.write_heading("PAUTA DE ADMINISTRACIÓN DE MEDICAMENTOS")
    if report.schedule_rows:
        sink.write_pdf_table(
            report.schedule_rows,
            SCHEDULE_TABLE_COLUMNS,
            StyleHints(column_widths=[35, 35, 35, 75], zebra=True),
        )
    else:
        sink.write_text("No hay medicamentos asignados en el tratamiento.")

    sink.write_heading("ADVERTENCIAS IMPORTANTES")
    sink.write_bullets(report.warnings)

    data = sink.finish()
    logger.info("Treatment PDF rendered for %s (%d bytes)", report.filename_stem, len(data))
    return data
