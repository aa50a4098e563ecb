"""
Spreadsheet rendering: the per-patient treatment-plan workbook and the full
store report, both through the SpreadsheetSink interface.
"""
from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from apps.planner.export_render.common import (
    format_epoch_ms,
    medicine_display_name,
    patient_display_name,
    pharmacological_group_key,
)
from apps.planner.export_render.constants import (
    APP_CENTER_LABEL,
    CLINICAL_BLUE,
    DOSE_MARKER,
    EMPTY_CELL_GREY,
    LIGHT_BLUE,
    NAME_COLUMN_BLUE,
    SCHEDULE_TABLE_COLUMNS,
)
from apps.planner.export_render.sinks import SpreadsheetSink, StyleHints
from apps.planner.project.hour_matrix import matrix_header
from apps.planner.project.models import TreatmentReport
from apps.planner.queries import newest_first, sort_by_severity
from packages.shared.models import AppData

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH = 20
MATRIX_NAME_WIDTH = 28
MATRIX_HOUR_WIDTH = 9

_THIN = Side(style="thin", color="999999")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


class OpenpyxlSpreadsheetSink:
    """SpreadsheetSink backed by an in-memory openpyxl workbook."""

    def __init__(self) -> None:
        self.workbook = Workbook()
        self._fresh = True

    def _new_sheet(self, name: str):
        # openpyxl sheet titles are capped at 31 characters
        title = name[:31]
        if self._fresh:
            ws = self.workbook.active
            ws.title = title
            self._fresh = False
            return ws
        return self.workbook.create_sheet(title=title)

    def write_sheet(
        self,
        name: str,
        rows: Sequence[Sequence[object]],
        columns: Sequence[str],
        style_hints: Optional[StyleHints] = None,
    ) -> None:
        hints = style_hints or StyleHints()
        ws = self._new_sheet(name)
        width = len(columns)

        ws.append(list(columns))
        header_fill = PatternFill("solid", fgColor=CLINICAL_BLUE)
        for cell in ws[1]:
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
            cell.border = _BORDER

        merged = set(hints.merged_rows)
        for index, row in enumerate(rows):
            values = list(row)
            ws.append(values)
            excel_row = index + 2
            if index in merged and width > 1:
                ws.merge_cells(start_row=excel_row, start_column=1, end_row=excel_row, end_column=width)
                cell = ws.cell(row=excel_row, column=1)
                cell.fill = PatternFill("solid", fgColor=LIGHT_BLUE)
                cell.font = Font(italic=True, size=9)
                cell.alignment = Alignment(horizontal="left", vertical="center", wrap_text=True)
                continue
            for col in range(1, width + 1):
                cell = ws.cell(row=excel_row, column=col)
                cell.border = _BORDER
                if hints.marker is not None and col > 1:
                    cell.alignment = Alignment(horizontal="center", vertical="center")
                    if cell.value == hints.marker:
                        cell.font = Font(bold=True, color=CLINICAL_BLUE)
                    else:
                        cell.fill = PatternFill("solid", fgColor=EMPTY_CELL_GREY)
                elif hints.marker is not None and col == 1:
                    cell.font = Font(bold=True)
                    cell.fill = PatternFill("solid", fgColor=NAME_COLUMN_BLUE)
                elif hints.zebra and index % 2 == 1:
                    cell.fill = PatternFill("solid", fgColor=LIGHT_BLUE)

        widths = list(hints.column_widths or [])
        for col in range(1, width + 1):
            w = widths[col - 1] if col - 1 < len(widths) else DEFAULT_COLUMN_WIDTH
            ws.column_dimensions[get_column_letter(col)].width = w
        ws.freeze_panes = f"A{hints.header_rows + 1}"

    def finish(self) -> bytes:
        buffer = BytesIO()
        self.workbook.save(buffer)
        return buffer.getvalue()


def _matrix_hints(report: TreatmentReport) -> StyleHints:
    return StyleHints(
        column_widths=[MATRIX_NAME_WIDTH] + [MATRIX_HOUR_WIDTH] * len(report.matrix.hours),
        marker=DOSE_MARKER,
        merged_rows=[i for i, row in enumerate(report.matrix.rows) if row.kind == "instructions"],
    )


def write_planning_sheet(sink: SpreadsheetSink, report: TreatmentReport) -> None:
    matrix = report.matrix
    sink.write_sheet("Planning Visual", matrix.body(), matrix.header, _matrix_hints(report))


def generate_treatment_workbook(report: TreatmentReport, sink: Optional[SpreadsheetSink] = None) -> bytes:
    """Hour matrix plus the administration schedule for one patient."""
    sink = sink or OpenpyxlSpreadsheetSink()
    write_planning_sheet(sink, report)
    sink.write_sheet(
        "Pauta",
        report.schedule_rows,
        SCHEDULE_TABLE_COLUMNS,
        StyleHints(column_widths=[28, 28, 24, 50], zebra=True),
    )
    data = sink.finish()
    logger.info("Treatment workbook rendered for %s (%d bytes)", report.filename_stem, len(data))
    return data


def _summary_rows(snapshot: AppData, generated_at: datetime) -> list[list[object]]:
    groups = {g for g in (pharmacological_group_key(m) for m in snapshot.medicines) if g}
    return [
        ["Total Medicamentos", len(snapshot.medicines)],
        ["Total Pacientes", len(snapshot.patients)],
        ["Total Tratamientos", len(snapshot.treatments)],
        ["Tratamientos Activos", sum(1 for t in snapshot.treatments if t.is_active)],
        ["Reacciones Adversas", len(snapshot.adverse_reactions)],
        ["Grupos Farmacológicos", len(groups)],
        ["Fecha del Reporte", generated_at.strftime("%d/%m/%Y")],
        ["Centro", APP_CENTER_LABEL],
    ]


def _inventory_rows(snapshot: AppData) -> list[list[object]]:
    return [
        [
            m.id,
            m.comercial_name,
            m.pharmacological_group,
            m.active_principles,
            m.pharmacological_action,
            m.administration_instructions,
            m.conservation_instructions,
            m.additional_info,
            format_epoch_ms(m.created_at),
        ]
        for m in snapshot.medicines
    ]


def _patient_rows(snapshot: AppData) -> list[list[object]]:
    return [
        [
            p.id,
            p.full_name,
            p.cedula,
            p.date_of_birth,
            p.phone or "",
            p.email or "",
            p.address or "",
            p.medical_conditions or "",
            format_epoch_ms(p.created_at),
        ]
        for p in snapshot.patients
    ]


def _treatment_rows(snapshot: AppData) -> list[list[object]]:
    patients = {p.id: p for p in snapshot.patients}
    medicines = {m.id: m for m in snapshot.medicines}
    return [
        [
            t.id,
            patient_display_name(patients.get(t.patient_id)),
            medicine_display_name(medicines.get(t.medicine_id)),
            t.start_date,
            t.end_date or "",
            "Activo" if t.is_active else "Inactivo",
            len(t.doses),
            t.general_instructions or "",
            t.notes or "",
            format_epoch_ms(t.created_at),
        ]
        for t in snapshot.treatments
    ]


def _pharmacovigilance_rows(snapshot: AppData) -> list[list[object]]:
    patients = {p.id: p for p in snapshot.patients}
    medicines = {m.id: m for m in snapshot.medicines}
    reactions = sort_by_severity(newest_first(snapshot.adverse_reactions))
    return [
        [
            r.id,
            patient_display_name(patients.get(r.patient_id)),
            medicine_display_name(medicines.get(r.medicine_id)),
            r.symptom,
            r.severity.value,
            r.status.value,
            r.date_reported,
            r.notes or "",
        ]
        for r in reactions
    ]


def generate_full_workbook(
    snapshot: AppData,
    report: Optional[TreatmentReport] = None,
    generated_at: Optional[datetime] = None,
    sink: Optional[SpreadsheetSink] = None,
) -> bytes:
    """
    Whole-store workbook: Resumen, Inventario, Pacientes, Tratamientos,
    Farmacovigilancia and Planning Visual. The planning sheet is empty
    (header only) when no treatment report is given.
    """
    sink = sink or OpenpyxlSpreadsheetSink()
    generated_at = generated_at or datetime.now()

    sink.write_sheet("Resumen", _summary_rows(snapshot, generated_at), ["Concepto", "Valor"], StyleHints(column_widths=[25, 45]))
    sink.write_sheet(
        "Inventario",
        _inventory_rows(snapshot),
        [
            "ID", "Nombre Comercial", "Grupo Farmacológico", "Principio Activo", "Acción Farmacológica",
            "Instrucciones de Administración", "Instrucciones de Conservación", "Información Adicional",
            "Fecha de Creación",
        ],
        StyleHints(column_widths=[15, 25, 25, 25, 30, 30, 25, 30, 15], zebra=True),
    )
    sink.write_sheet(
        "Pacientes",
        _patient_rows(snapshot),
        [
            "ID", "Nombre Completo", "Cédula/DNI", "Fecha de Nacimiento", "Teléfono", "Email",
            "Dirección", "Condiciones Médicas", "Fecha de Creación",
        ],
        StyleHints(column_widths=[15, 30, 20, 15, 15, 25, 30, 30, 15], zebra=True),
    )
    sink.write_sheet(
        "Tratamientos",
        _treatment_rows(snapshot),
        [
            "ID", "Paciente", "Medicamento", "Fecha de Inicio", "Fecha de Fin", "Estado",
            "Número de Dosis", "Instrucciones Generales", "Notas", "Fecha de Creación",
        ],
        StyleHints(column_widths=[15, 25, 25, 15, 15, 10, 15, 30, 30, 15], zebra=True),
    )
    sink.write_sheet(
        "Farmacovigilancia",
        _pharmacovigilance_rows(snapshot),
        ["ID", "Paciente", "Medicamento", "Síntoma", "Severidad", "Estado", "Fecha de Reporte", "Notas"],
        StyleHints(column_widths=[15, 25, 25, 30, 12, 12, 15, 30], zebra=True),
    )
    if report is not None:
        write_planning_sheet(sink, report)
    else:
        sink.write_sheet("Planning Visual", [], matrix_header())

    data = sink.finish()
    logger.info(
        "Full workbook rendered: %d medicines, %d patients, %d treatments, %d reactions",
        len(snapshot.medicines), len(snapshot.patients), len(snapshot.treatments), len(snapshot.adverse_reactions),
    )
    return data
