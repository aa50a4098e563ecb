"""
Unit tests for legacy slot-label hour derivation.
"""
from __future__ import annotations

import pytest

from apps.planner.legacy_slots import (
    DEFAULT_LEGACY_HOUR,
    derive_hour_for_legacy_entry,
    explicit_hour,
    range_midpoint_hour,
)


@pytest.mark.parametrize(
    "slot, dosage, instructions, expected",
    [
        ("Desayuno", "1 tableta", "Tomar a las 14:30", 14),
        ("Comida (12:00-14:00)", "1 tableta", "", 13),
        ("Noche (23:00-01:00)", "", None, 0),
        ("Desayuno (07:00-09:00)", "", None, 8),
        ("Cena", "", None, 19),
        ("Noche", "", None, 22),
        ("", "", "", DEFAULT_LEGACY_HOUR),
        (None, None, None, DEFAULT_LEGACY_HOUR),
    ],
)
def test_derive_hour_cases(slot, dosage, instructions, expected):
    assert derive_hour_for_legacy_entry(slot, dosage, instructions) == expected


def test_instructions_win_over_dosage():
    assert derive_hour_for_legacy_entry("Comida (12:00-14:00)", "a las 09:00", "a las 21:15") == 21


def test_dosage_wins_over_slot_range():
    assert derive_hour_for_legacy_entry("Comida (12:00-14:00)", "2 ml 16:00", "") == 16


def test_range_wins_over_slot_name():
    assert derive_hour_for_legacy_entry("Cena (20:00-22:00)", "", "") == 21


def test_single_time_in_label():
    assert derive_hour_for_legacy_entry("06:45", "", "") == 6


def test_accented_slot_name():
    assert derive_hour_for_legacy_entry("COMIDA principal", "", "") == 13


def test_decimal_dosage_is_not_a_time():
    assert explicit_hour("2.50 ml") is None
    assert derive_hour_for_legacy_entry("Cena", "2.50 ml", "") == 19


def test_custom_default_hour():
    assert derive_hour_for_legacy_entry("Merienda", "", "", default_hour=17) == 17


def test_range_midpoint_rounds_down():
    assert range_midpoint_hour("07:00-08:00") == 7
    assert range_midpoint_hour("07:00 a 10:00") == 8
