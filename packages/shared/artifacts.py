"""
Central artifact registry for the report renderer, CLI, and tests.
"""
from __future__ import annotations

ARTIFACT_BACKUP_JSON = "backup_json"
ARTIFACT_TREATMENT_XLSX = "treatment_xlsx"
ARTIFACT_TREATMENT_PDF = "treatment_pdf"
ARTIFACT_TREATMENT_HTML = "treatment_html"
ARTIFACT_FULL_REPORT_XLSX = "full_report_xlsx"


ARTIFACT_EXTENSION_MAP: dict[str, str] = {
    ARTIFACT_BACKUP_JSON: "json",
    ARTIFACT_TREATMENT_XLSX: "xlsx",
    ARTIFACT_TREATMENT_PDF: "pdf",
    ARTIFACT_TREATMENT_HTML: "html",
    ARTIFACT_FULL_REPORT_XLSX: "xlsx",
}


# Artifact types produced for a single patient treatment plan.
TREATMENT_PLAN_ARTIFACT_TYPES: tuple[str, ...] = (
    ARTIFACT_TREATMENT_XLSX,
    ARTIFACT_TREATMENT_PDF,
    ARTIFACT_TREATMENT_HTML,
)


def artifact_filename(stem: str, artifact_type: str) -> str:
    """Return *stem* with the extension registered for *artifact_type*."""
    try:
        ext = ARTIFACT_EXTENSION_MAP[artifact_type]
    except KeyError:
        raise ValueError(f"unknown artifact type: {artifact_type}") from None
    return f"{stem}.{ext}"
