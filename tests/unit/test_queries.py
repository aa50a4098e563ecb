"""
Unit tests for dashboard queries and canonical orderings.
"""
from __future__ import annotations

from apps.planner.queries import (
    count_pharmacological_groups,
    newest_first,
    search_medicines,
    search_patients,
    sort_by_severity,
)
from packages.shared.models import Severity
from tests.fixtures.sample_records import make_medicine, make_patient, make_reaction


def test_severity_priority_grave_first_regardless_of_insertion():
    reactions = [
        make_reaction("r1", Severity.LEVE),
        make_reaction("r2", Severity.GRAVE),
        make_reaction("r3", Severity.MODERADA),
        make_reaction("r4", Severity.LEVE),
        make_reaction("r5", Severity.GRAVE),
    ]
    ordered = sort_by_severity(reactions)
    assert [r.severity for r in ordered] == [
        Severity.GRAVE, Severity.GRAVE, Severity.MODERADA, Severity.LEVE, Severity.LEVE,
    ]
    # stable inside a severity
    assert [r.id for r in ordered] == ["r2", "r5", "r3", "r1", "r4"]


def test_severity_priority_values():
    assert Severity.GRAVE.priority < Severity.MODERADA.priority < Severity.LEVE.priority


def test_newest_first():
    older = make_reaction("old", Severity.LEVE, created_at=1)
    newer = make_reaction("new", Severity.LEVE, created_at=2)
    assert [r.id for r in newest_first([older, newer])] == ["new", "old"]


def test_search_medicines_by_name_or_principle():
    meds = [
        make_medicine("m1", name="Ibupirac 600mg", principles="Ibuprofeno"),
        make_medicine("m2", name="Amoxil", principles="Amoxicilina"),
    ]
    assert [m.id for m in search_medicines(meds, "IBUPROFENO")] == ["m1"]
    assert [m.id for m in search_medicines(meds, "amox")] == ["m2"]
    assert len(search_medicines(meds, "  ")) == 2


def test_search_patients_by_name_or_cedula():
    patients = [
        make_patient("p1", full_name="Ana Gómez", cedula="001-1234567-8"),
        make_patient("p2", full_name="Luis Pérez", cedula="002-7654321-0"),
    ]
    assert [p.id for p in search_patients(patients, "ana")] == ["p1"]
    assert [p.id for p in search_patients(patients, "7654321")] == ["p2"]


def test_count_pharmacological_groups_ignores_blanks():
    meds = [
        make_medicine("m1", group="AINE"),
        make_medicine("m2", group="", action="AINE, analgésico"),
        make_medicine("m3", group="Antibióticos"),
        make_medicine("m4", group="", action=""),
    ]
    assert count_pharmacological_groups(meds) == 2
