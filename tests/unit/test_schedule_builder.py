"""
Unit tests for the Schedule Builder.
"""
from __future__ import annotations

import pytest

from apps.planner.schedule_builder import ScheduleBuilder
from packages.shared.models import TreatmentDose
from tests.fixtures.sample_records import make_treatment


def test_toggle_creates_entry():
    b = ScheduleBuilder()
    entry = b.toggle_hour("m1", 8)
    assert entry is not None
    assert entry.hours == [8]
    assert entry.instructions == ""
    assert "m1" in b


def test_toggle_keeps_hours_sorted():
    b = ScheduleBuilder()
    for h in (20, 8, 14):
        b.toggle_hour("m1", h)
    assert b.entry_for("m1").hours == [8, 14, 20]


def test_toggle_twice_restores_previous_state():
    b = ScheduleBuilder()
    b.toggle_hour("m1", 8)
    b.toggle_hour("m1", 20)
    before = b.entry_for("m1")
    b.toggle_hour("m1", 14)
    b.toggle_hour("m1", 14)
    assert b.entry_for("m1") == before


def test_toggling_last_hour_removes_entry():
    b = ScheduleBuilder()
    b.toggle_hour("m1", 8)
    assert b.toggle_hour("m1", 8) is None
    assert "m1" not in b
    assert len(b) == 0
    assert b.entry_for("m1") is None


def test_instructions_survive_hour_changes():
    b = ScheduleBuilder()
    b.toggle_hour("m1", 8)
    assert b.set_instructions("m1", "con comida")
    b.toggle_hour("m1", 20)
    assert b.entry_for("m1").instructions == "con comida"


def test_set_instructions_without_entry_is_noop():
    b = ScheduleBuilder()
    assert b.set_instructions("missing", "x") is False
    assert len(b) == 0


@pytest.mark.parametrize("hour", [-1, 24, 100])
def test_out_of_range_hour_rejected(hour):
    b = ScheduleBuilder()
    with pytest.raises(ValueError):
        b.toggle_hour("m1", hour)
    assert len(b) == 0


def test_bool_is_not_an_hour():
    with pytest.raises(ValueError):
        ScheduleBuilder().toggle_hour("m1", True)


def test_entries_in_session_order():
    b = ScheduleBuilder()
    b.toggle_hour("zeta", 8)
    b.toggle_hour("alpha", 9)
    b.toggle_hour("zeta", 10)
    assert b.medicine_ids() == ["zeta", "alpha"]
    assert [e.medicine_id for e in b.entries()] == ["zeta", "alpha"]


def test_entries_are_copies():
    b = ScheduleBuilder()
    b.toggle_hour("m1", 8)
    b.entries()[0].hours.append(9)
    assert b.entry_for("m1").hours == [8]


def test_add_hour_never_removes():
    b = ScheduleBuilder()
    b.add_hour("m1", 8)
    b.add_hour("m1", 8)
    assert b.entry_for("m1").hours == [8]


def test_medicines_at_and_has_dose():
    b = ScheduleBuilder()
    b.toggle_hour("m1", 8)
    b.toggle_hour("m2", 8)
    b.toggle_hour("m2", 20)
    assert b.medicines_at(8) == ["m1", "m2"]
    assert b.medicines_at(20) == ["m2"]
    assert b.has_dose("m2", 20)
    assert not b.has_dose("m1", 20)


def test_remove_medicine_and_clear():
    b = ScheduleBuilder()
    b.toggle_hour("m1", 8)
    b.toggle_hour("m2", 9)
    assert b.remove_medicine("m1")
    assert not b.remove_medicine("m1")
    b.clear()
    assert len(b) == 0


# ── Building from stored treatments ───────────────────────────────────────

def test_from_treatments_derives_hours_from_dose_labels():
    treatment = make_treatment(
        doses=[
            TreatmentDose(time="08:00", dosage="1 tableta"),
            TreatmentDose(time="Cena", dosage="1 tableta", specific_instructions="Con agua"),
            TreatmentDose(time="Noche (23:00-01:00)", dosage="1 tableta"),
        ],
        general_instructions="Tomar con alimentos",
    )
    b = ScheduleBuilder.from_treatments([treatment])
    entry = b.entry_for("med-ibupirac")
    assert entry.hours == [0, 8, 19]
    assert entry.instructions == "Tomar con alimentos; Con agua"


def test_from_treatments_skips_inactive_by_default():
    inactive = make_treatment(is_active=False)
    assert len(ScheduleBuilder.from_treatments([inactive])) == 0
    assert len(ScheduleBuilder.from_treatments([inactive], include_inactive=True)) == 1


def test_from_treatments_uses_dose_medicine_when_given():
    treatment = make_treatment(doses=[TreatmentDose(medicine_id="other", time="13:00", dosage="5 ml")])
    b = ScheduleBuilder.from_treatments([treatment])
    assert b.medicine_ids() == ["other"]
    assert b.entry_for("other").hours == [13]
