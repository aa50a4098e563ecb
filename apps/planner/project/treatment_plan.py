"""
Treatment plan projection: turns a patient, the planning session and the
stored medicines into a render-ready TreatmentReport.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional, Sequence

from apps.planner.export_render.common import (
    calculate_age,
    format_date_long,
    hour_label,
    placeholder_medicine,
    report_filename_stem,
)
from apps.planner.export_render.constants import DEFAULT_CENTER_NAME, DEFAULT_WARNINGS
from apps.planner.project.hour_matrix import build_hour_matrix
from apps.planner.project.models import PatientBlock, ReportLine, TreatmentReport
from apps.planner.project.preview import build_preview_groups
from apps.planner.schedule_builder import ScheduleBuilder
from packages.shared.models import Patient

if TYPE_CHECKING:
    from packages.db.store import EntityStore

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "No especificado"
NOT_AVAILABLE = "N/A"
NO_ALLERGIES = "No reportadas"


def collect_report_lines(
    store: "EntityStore",
    builder: ScheduleBuilder,
    order: Optional[Sequence[str]] = None,
) -> list[ReportLine]:
    """
    Pair every schedule entry with its medicine.

    Without *order* the lines are sorted by commercial name (stable, case
    insensitive). With *order* (a list of medicine ids, usually the session
    order) the listed ids come first in that order and any others follow in
    session order.
    """
    lines: list[ReportLine] = []
    for entry in builder.entries():
        medicine = store.medicines.get_by_id(entry.medicine_id)
        if medicine is None:
            logger.warning("Schedule references missing medicine %s", entry.medicine_id)
            medicine = placeholder_medicine(entry.medicine_id)
        lines.append(ReportLine(medicine=medicine, entry=entry))

    if order is None:
        return sorted(lines, key=lambda line: line.medicine.comercial_name.casefold())

    rank = {medicine_id: i for i, medicine_id in enumerate(order)}
    return sorted(lines, key=lambda line: rank.get(line.medicine.id, len(rank)))


def build_patient_block(patient: Optional[Patient], today: Optional[date] = None) -> PatientBlock:
    if patient is None:
        return PatientBlock(
            full_name=NOT_SPECIFIED,
            cedula=NOT_AVAILABLE,
            age=NOT_AVAILABLE,
            date_of_birth="",
            medical_conditions=NO_ALLERGIES,
        )
    age = calculate_age(patient.date_of_birth, today=today)
    return PatientBlock(
        full_name=patient.full_name or NOT_SPECIFIED,
        cedula=patient.cedula or NOT_AVAILABLE,
        age=str(age) if age is not None else NOT_AVAILABLE,
        date_of_birth=format_date_long(patient.date_of_birth),
        medical_conditions=(patient.medical_conditions or "").strip() or NO_ALLERGIES,
    )


def build_schedule_rows(lines: Sequence[ReportLine]) -> list[list[str]]:
    return [
        [
            line.medicine.comercial_name,
            line.medicine.active_principles,
            ", ".join(hour_label(h) for h in line.entry.hours),
            line.entry.instructions,
        ]
        for line in lines
    ]


def build_treatment_report(
    patient: Optional[Patient],
    lines: Sequence[ReportLine],
    warnings: Sequence[str] = DEFAULT_WARNINGS,
    center_name: str = DEFAULT_CENTER_NAME,
    generated_at: Optional[datetime] = None,
    pharmacist_signature: bool = True,
) -> TreatmentReport:
    generated_at = generated_at or datetime.now()
    report = TreatmentReport(
        generated_at=generated_at,
        center_name=center_name,
        pharmacist_signature=pharmacist_signature,
        patient=build_patient_block(patient, today=generated_at.date()),
        lines=list(lines),
        preview=build_preview_groups(lines),
        matrix=build_hour_matrix(lines),
        schedule_rows=build_schedule_rows(lines),
        warnings=list(warnings),
        filename_stem=report_filename_stem(patient, on=generated_at.date()),
    )
    logger.info(
        "Built treatment report %s: %d medicines, %d preview groups",
        report.filename_stem, len(report.lines), len(report.preview),
    )
    return report
