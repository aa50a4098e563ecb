"""
Unit tests for the workbook, PDF and print renderers.
"""
from __future__ import annotations

from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import load_workbook
from pypdf import PdfReader

from apps.planner.export_render.pdf_render import ReportlabPdfSink, generate_treatment_pdf
from apps.planner.export_render.print_render import build_print_html
from apps.planner.export_render.sinks import StyleHints
from apps.planner.export_render.xlsx_render import (
    OpenpyxlSpreadsheetSink,
    generate_full_workbook,
    generate_treatment_workbook,
)
from apps.planner.project.models import ReportLine
from apps.planner.project.treatment_plan import build_treatment_report
from packages.shared.models import AppData, Severity, TimelineScheduleEntry
from tests.fixtures.sample_records import (
    make_medicine,
    make_patient,
    make_reaction,
    make_treatment,
)

GENERATED_AT = datetime(2024, 3, 1, 10, 30)


@pytest.fixture
def report():
    lines = [
        ReportLine(
            medicine=make_medicine("m1", name="Amoxil", principles="Amoxicilina", group="Antibióticos"),
            entry=TimelineScheduleEntry(medicine_id="m1", hours=[8, 20], instructions="Con comida"),
        ),
        ReportLine(
            medicine=make_medicine("m2", name="Buscapina", principles="Butilescopolamina"),
            entry=TimelineScheduleEntry(medicine_id="m2", hours=[13]),
        ),
    ]
    return build_treatment_report(make_patient(medical_conditions="Penicilina"), lines, generated_at=GENERATED_AT)


def _pdf_text(data: bytes) -> str:
    return "\n".join(page.extract_text() or "" for page in PdfReader(BytesIO(data)).pages)


# ── Workbook ──────────────────────────────────────────────────────────────

def test_treatment_workbook_matrix_sheet(report):
    wb = load_workbook(BytesIO(generate_treatment_workbook(report)))
    assert wb.sheetnames == ["Planning Visual", "Pauta"]
    ws = wb["Planning Visual"]
    header = [c.value for c in ws[1]]
    assert header[0] == "Medicamento"
    assert len(header) == 20
    assert ws.cell(row=2, column=1).value == "Amoxil"
    # column for 08:00 is index 4 (Medicamento, 00, 06, 07, 08)
    assert ws.cell(row=2, column=5).value == "✓"
    assert ws.cell(row=3, column=1).value == "Instrucciones: Con comida"
    assert "A3:T3" in {str(r) for r in ws.merged_cells.ranges}


def test_treatment_workbook_schedule_sheet(report):
    wb = load_workbook(BytesIO(generate_treatment_workbook(report)))
    rows = list(wb["Pauta"].iter_rows(values_only=True))
    assert rows[0] == ("Medicamento", "Principio Activo", "Horarios", "Instrucciones")
    assert rows[1][:3] == ("Amoxil", "Amoxicilina", "08:00, 20:00")


def test_full_workbook_sheets_and_severity_order(report):
    snapshot = AppData(
        medicines=[make_medicine()],
        patients=[make_patient()],
        treatments=[make_treatment(), make_treatment("trt-orphan", patient_id="gone", medicine_id="gone")],
        adverse_reactions=[
            make_reaction("r-leve", Severity.LEVE, created_at=3),
            make_reaction("r-grave", Severity.GRAVE, created_at=1),
            make_reaction("r-mod", Severity.MODERADA, created_at=2),
        ],
    )
    wb = load_workbook(BytesIO(generate_full_workbook(snapshot, report=report, generated_at=GENERATED_AT)))
    assert wb.sheetnames == ["Resumen", "Inventario", "Pacientes", "Tratamientos", "Farmacovigilancia", "Planning Visual"]

    summary = dict(wb["Resumen"].iter_rows(min_row=2, values_only=True))
    assert summary["Total Medicamentos"] == 1
    assert summary["Total Tratamientos"] == 2
    assert summary["Fecha del Reporte"] == "01/03/2024"

    severities = [row[4] for row in wb["Farmacovigilancia"].iter_rows(min_row=2, values_only=True)]
    assert severities == ["grave", "moderada", "leve"]

    orphan = [row for row in wb["Tratamientos"].iter_rows(min_row=2, values_only=True) if row[0] == "trt-orphan"][0]
    assert orphan[1:3] == ("Desconocido", "Desconocido")


def test_full_workbook_without_plan_has_empty_planning_sheet():
    wb = load_workbook(BytesIO(generate_full_workbook(AppData())))
    ws = wb["Planning Visual"]
    assert ws.max_row == 1
    assert ws.cell(row=1, column=1).value == "Medicamento"


def test_spreadsheet_sink_truncates_long_sheet_names():
    sink = OpenpyxlSpreadsheetSink()
    sink.write_sheet("x" * 40, [[1]], ["A"], StyleHints())
    wb = load_workbook(BytesIO(sink.finish()))
    assert wb.sheetnames == ["x" * 31]


# ── PDF ───────────────────────────────────────────────────────────────────

def test_treatment_pdf_sections(report):
    data = generate_treatment_pdf(report)
    assert data.startswith(b"%PDF")
    text = _pdf_text(data)
    for expected in (
        "Centro de Salud / Hospital General",
        "INFORMACIÓN DEL PACIENTE",
        "Ana Gómez",
        "001-1234567-8",
        "Penicilina",
        "PLANNING VISUAL - MATRIZ HORARIA",
        "PAUTA DE ADMINISTRACIÓN DE MEDICAMENTOS",
        "ADVERTENCIAS IMPORTANTES",
        "Amoxil",
        "Firma del Farmacéutico",
        "Generado el: 1 de marzo de 2024 a las 10:30",
    ):
        assert expected in text, expected


def test_treatment_pdf_without_signature_or_medicines():
    report = build_treatment_report(None, [], generated_at=GENERATED_AT, pharmacist_signature=False)
    text = _pdf_text(generate_treatment_pdf(report))
    assert "No hay medicamentos asignados en el calendario." in text
    assert "Firma del Farmacéutico" not in text
    assert "No especificado" in text


class _RecordingPdfSink:
    def __init__(self):
        self.calls = []

    def write_heading(self, text, level=1):
        self.calls.append(("heading", text))

    def write_key_values(self, pairs):
        self.calls.append(("kv", list(pairs)))

    def write_pdf_table(self, rows, columns, style_hints=None):
        self.calls.append(("table", [list(r) for r in rows], list(columns)))

    def write_bullets(self, items):
        self.calls.append(("bullets", list(items)))

    def write_text(self, text):
        self.calls.append(("text", text))

    def finish(self):
        return b"done"


def test_pdf_goes_through_sink_interface(report):
    sink = _RecordingPdfSink()
    assert generate_treatment_pdf(report, sink=sink) == b"done"
    tables = [c for c in sink.calls if c[0] == "table"]
    matrix_rows = tables[0][1]
    # Buscapina has no instructions, so its instructions row is dropped
    assert [r[0] for r in matrix_rows] == ["Amoxil", "Instrucciones: Con comida", "Buscapina"]
    assert tables[1][2] == ["Medicamento", "Principio Activo", "Horarios", "Instrucciones"]
    assert sink.calls[-1] == ("bullets", list(report.warnings))


def test_pdf_sink_builds_empty_document():
    assert ReportlabPdfSink().finish().startswith(b"%PDF")


# ── Print surface ─────────────────────────────────────────────────────────

def test_print_html(report):
    html = build_print_html(report)
    assert html.startswith("<!DOCTYPE html>")
    assert '<section id="print-area">' in html
    assert "@media print" in html
    assert "Ana Gómez" in html
    assert 'colspan="20"' in html
    assert "Firma del Farmacéutico" in html


def test_print_html_escapes_text():
    line = ReportLine(
        medicine=make_medicine("m1", name="<b>Amoxil</b>"),
        entry=TimelineScheduleEntry(medicine_id="m1", hours=[8], instructions="a & b"),
    )
    html = build_print_html(build_treatment_report(make_patient(), [line], generated_at=GENERATED_AT))
    assert "<b>Amoxil</b>" not in html
    assert "&lt;b&gt;Amoxil&lt;/b&gt;" in html
    assert "a &amp; b" in html
