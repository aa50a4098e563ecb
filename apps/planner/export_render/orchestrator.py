"""
Orchestrator for treatment-plan and full-report exports.

Builds the report projection from the store, renders each format and saves
the artifacts under DATA_DIR/exports.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from apps.planner.export_render.constants import (
    BACKUP_FILENAME_PREFIX,
    DEFAULT_CENTER_NAME,
    DEFAULT_WARNINGS,
    FULL_REPORT_FILENAME,
)
from apps.planner.export_render.pdf_render import generate_treatment_pdf
from apps.planner.export_render.print_render import build_print_html
from apps.planner.export_render.xlsx_render import generate_full_workbook, generate_treatment_workbook
from apps.planner.project.models import TreatmentReport, TreatmentReportBundle
from apps.planner.project.treatment_plan import build_treatment_report, collect_report_lines
from apps.planner.schedule_builder import ScheduleBuilder
from packages.db.backup import BackupCodec
from packages.shared.artifacts import (
    ARTIFACT_BACKUP_JSON,
    ARTIFACT_FULL_REPORT_XLSX,
    ARTIFACT_TREATMENT_HTML,
    ARTIFACT_TREATMENT_PDF,
    ARTIFACT_TREATMENT_XLSX,
    artifact_filename,
)
from packages.shared.models import ArtifactRef
from packages.shared.storage import save_artifact, sha256_bytes

if TYPE_CHECKING:
    from packages.db.store import EntityStore

logger = logging.getLogger(__name__)


def _save(data_dir: Path, filename: str, data: bytes) -> ArtifactRef:
    path = save_artifact(data_dir, filename, data)
    return ArtifactRef(uri=str(path), sha256=sha256_bytes(data), bytes=len(data))


def prepare_treatment_report(
    store: "EntityStore",
    patient_id: str,
    builder: Optional[ScheduleBuilder] = None,
    order: Optional[Sequence[str]] = None,
    include_inactive: bool = False,
    warnings: Sequence[str] = DEFAULT_WARNINGS,
    center_name: str = DEFAULT_CENTER_NAME,
    generated_at: Optional[datetime] = None,
    pharmacist_signature: bool = True,
) -> TreatmentReport:
    """
    Report for one patient. Without a planning session the schedule is
    derived from the patient's stored treatments.
    """
    patient = store.patients.get_by_id(patient_id)
    if patient is None:
        logger.warning("Treatment report requested for missing patient %s", patient_id)
    if builder is None:
        builder = ScheduleBuilder.from_treatments(
            store.get_treatments_by_patient(patient_id), include_inactive=include_inactive
        )
    lines = collect_report_lines(store, builder, order=order)
    return build_treatment_report(
        patient,
        lines,
        warnings=warnings,
        center_name=center_name,
        generated_at=generated_at,
        pharmacist_signature=pharmacist_signature,
    )


def render_treatment_report(report: TreatmentReport, data_dir: Path) -> TreatmentReportBundle:
    """Render workbook, PDF and print page for *report* and save them."""
    stem = report.filename_stem
    bundle = TreatmentReportBundle(
        filename_stem=stem,
        xlsx=_save(data_dir, artifact_filename(stem, ARTIFACT_TREATMENT_XLSX), generate_treatment_workbook(report)),
        pdf=_save(data_dir, artifact_filename(stem, ARTIFACT_TREATMENT_PDF), generate_treatment_pdf(report)),
        html=_save(
            data_dir,
            artifact_filename(stem, ARTIFACT_TREATMENT_HTML),
            build_print_html(report).encode("utf-8"),
        ),
    )
    logger.info("Treatment plan exported: %s", stem)
    return bundle


def render_full_report(
    store: "EntityStore",
    data_dir: Path,
    report: Optional[TreatmentReport] = None,
    generated_at: Optional[datetime] = None,
) -> ArtifactRef:
    data = generate_full_workbook(store.snapshot(), report=report, generated_at=generated_at)
    return _save(data_dir, artifact_filename(FULL_REPORT_FILENAME, ARTIFACT_FULL_REPORT_XLSX), data)


def save_backup(store: "EntityStore", data_dir: Path, on: Optional[date] = None) -> ArtifactRef:
    """Write the backup document as pharmalocal_backup_<YYYY-MM-DD>.json."""
    on = on or date.today()
    document = BackupCodec(store).export().encode("utf-8")
    stem = f"{BACKUP_FILENAME_PREFIX}_{on.isoformat()}"
    return _save(data_dir, artifact_filename(stem, ARTIFACT_BACKUP_JSON), document)
