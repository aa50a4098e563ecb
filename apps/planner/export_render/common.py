"""
Display helpers shared by the preview, workbook, PDF and print renderers.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from apps.planner.export_render.constants import (
    DEFAULT_PATIENT_SLUG,
    FILENAME_PREFIX,
    SPANISH_MONTHS,
    UNCLASSIFIED_GROUP,
    UNKNOWN_LABEL,
)
from packages.shared.models import Medicine, Patient


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def hour_period(hour: int) -> str:
    if 6 <= hour <= 12:
        return "Mañana"
    if 13 <= hour <= 18:
        return "Tarde"
    if 19 <= hour <= 23:
        return "Noche"
    return "Medianoche"


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", value.lower()).strip("_")
    return slug or DEFAULT_PATIENT_SLUG


def report_filename_stem(patient: Optional[Patient], on: Optional[date] = None) -> str:
    """plan_tratamiento_<patient slug>_<YYYY-MM-DD>"""
    on = on or date.today()
    name = patient.full_name if patient else ""
    return f"{FILENAME_PREFIX}_{_slugify(name)}_{on.isoformat()}"


def parse_iso_date(value: str | None) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def calculate_age(date_of_birth: str | None, today: Optional[date] = None) -> Optional[int]:
    birth = parse_iso_date(date_of_birth)
    if birth is None:
        return None
    today = today or date.today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def format_date_long(value: str | None) -> str:
    """Long Spanish date, e.g. 1 de mayo de 1990. Unparseable input is returned as given."""
    d = parse_iso_date(value)
    if d is None:
        return value or ""
    return f"{d.day} de {SPANISH_MONTHS[d.month - 1]} de {d.year}"


def format_epoch_ms(value: int | None) -> str:
    if value is None:
        return ""
    return datetime.fromtimestamp(value / 1000).strftime("%d/%m/%Y")


def format_generated_at(value: datetime) -> str:
    return f"{value.day} de {SPANISH_MONTHS[value.month - 1]} de {value.year} a las {value:%H:%M}"


def pharmacological_group_key(medicine: Medicine) -> Optional[str]:
    """pharmacologicalGroup, else the first comma token of pharmacologicalAction."""
    group = (medicine.pharmacological_group or "").strip()
    if group:
        return group
    first = (medicine.pharmacological_action or "").split(",")[0].strip()
    return first or None


def preview_group_name(medicine: Medicine) -> str:
    return pharmacological_group_key(medicine) or UNCLASSIFIED_GROUP


def patient_display_name(patient: Optional[Patient]) -> str:
    return patient.full_name if patient and patient.full_name else UNKNOWN_LABEL


def medicine_display_name(medicine: Optional[Medicine]) -> str:
    return medicine.comercial_name if medicine and medicine.comercial_name else UNKNOWN_LABEL


def placeholder_medicine(medicine_id: str) -> Medicine:
    """Stand-in for a schedule entry whose medicine has been deleted."""
    return Medicine(id=medicine_id, comercial_name=UNKNOWN_LABEL, created_at=0)
