"""
Read-side helpers for the dashboard and list screens: counts, searches and
the canonical orderings.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence, TypeVar

from apps.planner.export_render.common import (
    medicine_display_name,
    patient_display_name,
    pharmacological_group_key,
)
from packages.shared.models import AdverseReaction, Medicine, Patient

if TYPE_CHECKING:
    from packages.db.store import EntityStore

T = TypeVar("T")


@dataclass(frozen=True)
class DashboardStats:
    patients: int
    medicines: int
    treatments: int
    active_treatments: int
    adverse_reactions: int
    pharmacological_groups: int


def count_pharmacological_groups(medicines: Iterable[Medicine]) -> int:
    return len({g for g in (pharmacological_group_key(m) for m in medicines) if g})


def dashboard_stats(store: "EntityStore") -> DashboardStats:
    treatments = store.treatments.get_all()
    return DashboardStats(
        patients=store.patients.count(),
        medicines=store.medicines.count(),
        treatments=len(treatments),
        active_treatments=sum(1 for t in treatments if t.is_active),
        adverse_reactions=store.adverse_reactions.count(),
        pharmacological_groups=count_pharmacological_groups(store.medicines.get_all()),
    )


def search_medicines(medicines: Iterable[Medicine], term: str) -> list[Medicine]:
    """Case-insensitive match on commercial name or active principles."""
    needle = term.strip().casefold()
    if not needle:
        return list(medicines)
    return [
        m for m in medicines
        if needle in m.comercial_name.casefold() or needle in m.active_principles.casefold()
    ]


def search_patients(patients: Iterable[Patient], term: str) -> list[Patient]:
    """Case-insensitive name match, or cedula substring."""
    raw = term.strip()
    needle = raw.casefold()
    if not needle:
        return list(patients)
    return [p for p in patients if needle in p.full_name.casefold() or raw in p.cedula]


def newest_first(records: Iterable[T]) -> list[T]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)  # type: ignore[attr-defined]


def sort_by_severity(reactions: Iterable[AdverseReaction]) -> list[AdverseReaction]:
    """grave, then moderada, then leve. Stable within a severity."""
    return sorted(reactions, key=lambda r: r.severity.priority)


def resolve_patient_name(store: "EntityStore", patient_id: str) -> str:
    return patient_display_name(store.patients.get_by_id(patient_id))


def resolve_medicine_name(store: "EntityStore", medicine_id: str) -> str:
    return medicine_display_name(store.medicines.get_by_id(medicine_id))


def reactions_for_patient(store: "EntityStore", patient_id: str) -> Sequence[AdverseReaction]:
    """A patient's adverse reactions, newest first within each severity."""
    return sort_by_severity(newest_first(store.get_adverse_reactions_by_patient(patient_id)))
