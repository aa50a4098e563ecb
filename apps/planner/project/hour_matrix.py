"""
Hour-matrix construction: one column per canonical hour, one marker row plus
one instructions row per medicine.
"""
from __future__ import annotations

from typing import Sequence

from apps.planner.export_render.common import hour_label, hour_period
from apps.planner.export_render.constants import (
    DOSE_MARKER,
    INSTRUCTIONS_PREFIX,
    MATRIX_FIRST_COLUMN,
    TIMELINE_HOURS,
)
from apps.planner.project.models import HourMatrix, MatrixRow, ReportLine


def matrix_header(hours: Sequence[int] = TIMELINE_HOURS, with_period: bool = True) -> list[str]:
    labels = [f"{hour_label(h)}\n{hour_period(h)}" if with_period else hour_label(h) for h in hours]
    return [MATRIX_FIRST_COLUMN, *labels]


def build_hour_matrix(
    lines: Sequence[ReportLine],
    hours: Sequence[int] = TIMELINE_HOURS,
    marker: str = DOSE_MARKER,
) -> HourMatrix:
    rows: list[MatrixRow] = []
    for line in lines:
        scheduled = set(line.entry.hours)
        rows.append(
            MatrixRow(
                kind="doses",
                medicine_id=line.medicine.id,
                cells=[line.medicine.comercial_name, *(marker if h in scheduled else "" for h in hours)],
            )
        )
        rows.append(
            MatrixRow(
                kind="instructions",
                medicine_id=line.medicine.id,
                cells=[f"{INSTRUCTIONS_PREFIX}{line.entry.instructions.strip()}"],
            )
        )
    return HourMatrix(hours=list(hours), header=matrix_header(hours), rows=rows)
