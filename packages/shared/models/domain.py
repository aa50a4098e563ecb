from typing import Optional

from pydantic import Field, field_validator

from .common import CamelModel, new_id, now_ms
from .enums import IconType, ReactionStatus, Severity


class Medicine(CamelModel):
    id: str = Field(default_factory=new_id)
    comercial_name: str = ""
    active_principles: str = ""
    pharmacological_group: str = ""
    pharmacological_action: str = ""
    administration_instructions: str = ""
    conservation_instructions: str = ""
    dispensation_place: str = ""
    additional_info: str = ""
    icon_type: IconType = IconType.PILL
    image_url: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)


class Patient(CamelModel):
    id: str = Field(default_factory=new_id)
    full_name: str = ""
    cedula: str = ""
    date_of_birth: str = ""  # YYYY-MM-DD
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    medical_conditions: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)


class TreatmentDose(CamelModel):
    medicine_id: Optional[str] = None
    time: str = ""
    dosage: str = ""
    specific_instructions: Optional[str] = None


class Treatment(CamelModel):
    id: str = Field(default_factory=new_id)
    patient_id: str
    medicine_id: str
    start_date: str = ""
    end_date: Optional[str] = None
    is_active: bool = True
    doses: list[TreatmentDose] = Field(default_factory=list)
    general_instructions: Optional[str] = None
    notes: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)


class AdverseReaction(CamelModel):
    id: str = Field(default_factory=new_id)
    patient_id: str
    medicine_id: str
    symptom: str = ""
    severity: Severity = Severity.LEVE
    date_reported: str = ""
    notes: Optional[str] = None
    status: ReactionStatus = ReactionStatus.PENDIENTE
    created_at: int = Field(default_factory=now_ms)


class TimelineScheduleEntry(CamelModel):
    """Working state for one medicine in a planning session."""
    medicine_id: str
    hours: list[int] = Field(min_length=1)
    instructions: str = ""

    @field_validator("hours")
    @classmethod
    def _normalize_hours(cls, value: list[int]) -> list[int]:
        for hour in value:
            if not 0 <= hour <= 23:
                raise ValueError(f"hour out of range: {hour}")
        return sorted(set(value))


class AppData(CamelModel):
    """Backup envelope for the whole store."""
    medicines: list[Medicine] = Field(default_factory=list)
    patients: list[Patient] = Field(default_factory=list)
    treatments: list[Treatment] = Field(default_factory=list)
    adverse_reactions: list[AdverseReaction] = Field(default_factory=list)
    version: int = 2
