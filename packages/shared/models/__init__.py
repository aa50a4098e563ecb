from .common import ArtifactRef, CamelModel, new_id, now_ms
from .domain import (
    AdverseReaction,
    AppData,
    Medicine,
    Patient,
    TimelineScheduleEntry,
    Treatment,
    TreatmentDose,
)
from .enums import ICON_GLYPHS, SEVERITY_PRIORITY, IconType, ReactionStatus, Severity

__all__ = [
    "AdverseReaction",
    "AppData",
    "ArtifactRef",
    "CamelModel",
    "ICON_GLYPHS",
    "IconType",
    "Medicine",
    "Patient",
    "ReactionStatus",
    "SEVERITY_PRIORITY",
    "Severity",
    "TimelineScheduleEntry",
    "Treatment",
    "TreatmentDose",
    "new_id",
    "now_ms",
]
