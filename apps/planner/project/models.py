from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from packages.shared.models import ArtifactRef, Medicine, TimelineScheduleEntry


class ReportLine(BaseModel):
    medicine: Medicine
    entry: TimelineScheduleEntry


class PreviewItem(BaseModel):
    medicine_id: str
    comercial_name: str
    active_principles: str = ""
    pharmacological_action: str = ""
    icon: str = ""
    hours_display: list[str] = Field(default_factory=list)
    instructions: str = ""


class PreviewGroup(BaseModel):
    name: str
    items: list[PreviewItem] = Field(default_factory=list)


class MatrixRow(BaseModel):
    kind: Literal["doses", "instructions"]
    medicine_id: str
    cells: list[str]


class HourMatrix(BaseModel):
    hours: list[int]
    header: list[str]
    rows: list[MatrixRow] = Field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.header)

    def body(self) -> list[list[str]]:
        """Rows padded to the header width (instruction rows carry their text in the first cell)."""
        return [row.cells + [""] * (self.width - len(row.cells)) for row in self.rows]


class PatientBlock(BaseModel):
    full_name: str
    cedula: str
    age: str
    date_of_birth: str
    medical_conditions: str


class TreatmentReport(BaseModel):
    generated_at: datetime
    center_name: str
    pharmacist_signature: bool = True
    patient: PatientBlock
    lines: list[ReportLine] = Field(default_factory=list)
    preview: list[PreviewGroup] = Field(default_factory=list)
    matrix: HourMatrix
    schedule_rows: list[list[str]] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    filename_stem: str


class TreatmentReportBundle(BaseModel):
    filename_stem: str
    xlsx: ArtifactRef
    pdf: ArtifactRef
    html: ArtifactRef
