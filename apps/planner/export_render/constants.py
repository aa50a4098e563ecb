"""
Shared constants for treatment-plan rendering.
"""
from __future__ import annotations

# Canonical column order of the hour matrix. The early-morning hours 1-5 are not
# shown as columns; they still appear in the schedule table.
TIMELINE_HOURS: tuple[int, ...] = (0, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22, 23)

DOSE_MARKER = "✓"
UNKNOWN_LABEL = "Desconocido"
UNCLASSIFIED_GROUP = "Sin clasificar"
DEFAULT_PATIENT_SLUG = "paciente"
FILENAME_PREFIX = "plan_tratamiento"
FULL_REPORT_FILENAME = "reporte_completo_pharmalocal"
BACKUP_FILENAME_PREFIX = "pharmalocal_backup"

DEFAULT_CENTER_NAME = "Centro de Salud / Hospital General"
SERVICE_NAME = "Servicio de Farmacia"
APP_CENTER_LABEL = "PharmaLocal - Sistema de Gestión Farmacéutica"

DEFAULT_WARNINGS: tuple[str, ...] = (
    "Siga estrictamente las dosis y horarios indicados",
    "No suspenda el tratamiento sin consulta médica",
    "Consulte al profesional de salud ante cualquier reacción adversa",
    "Mantenga los medicamentos fuera del alcance de niños",
)

MATRIX_FIRST_COLUMN = "Medicamento"
INSTRUCTIONS_PREFIX = "Instrucciones: "
SCHEDULE_TABLE_COLUMNS: tuple[str, ...] = ("Medicamento", "Principio Activo", "Horarios", "Instrucciones")

SPANISH_MONTHS: tuple[str, ...] = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)

# RGB hex colors
CLINICAL_BLUE = "0C3A6F"
DARK_TEXT = "1A1A1A"
LIGHT_BLUE = "E8F4FD"
NAME_COLUMN_BLUE = "E3F2FD"
EMPTY_CELL_GREY = "F5F5F5"
