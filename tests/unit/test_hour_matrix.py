"""
Unit tests for the hour matrix and preview grouping.
"""
from __future__ import annotations

from apps.planner.export_render.constants import DOSE_MARKER, TIMELINE_HOURS, UNCLASSIFIED_GROUP
from apps.planner.project.hour_matrix import build_hour_matrix
from apps.planner.project.models import ReportLine
from apps.planner.project.preview import build_preview_groups
from packages.shared.models import IconType, TimelineScheduleEntry
from tests.fixtures.sample_records import make_medicine


def _line(medicine_id, name, hours, instructions="", group="AINE", action=""):
    return ReportLine(
        medicine=make_medicine(medicine_id=medicine_id, name=name, group=group, action=action),
        entry=TimelineScheduleEntry(medicine_id=medicine_id, hours=hours, instructions=instructions),
    )


def test_header_has_fixed_hour_columns():
    matrix = build_hour_matrix([])
    assert matrix.hours == list(TIMELINE_HOURS)
    assert matrix.header[0] == "Medicamento"
    assert len(matrix.header) == 20
    assert matrix.header[1].startswith("00:00")
    assert matrix.header[2] == "06:00\nMañana"
    assert matrix.header[-1] == "23:00\nNoche"
    assert 1 not in matrix.hours and 5 not in matrix.hours


def test_marker_row_then_instructions_row_per_medicine():
    matrix = build_hour_matrix([
        _line("a", "Amoxil", [8, 20], "Con comida"),
        _line("b", "Buscapina", [13]),
    ])
    kinds = [(r.kind, r.medicine_id) for r in matrix.rows]
    assert kinds == [("doses", "a"), ("instructions", "a"), ("doses", "b"), ("instructions", "b")]

    doses = matrix.rows[0].cells
    assert doses[0] == "Amoxil"
    marked = [TIMELINE_HOURS[i - 1] for i, cell in enumerate(doses) if i and cell == DOSE_MARKER]
    assert marked == [8, 20]
    assert matrix.rows[1].cells == ["Instrucciones: Con comida"]


def test_early_morning_hours_have_no_column():
    matrix = build_hour_matrix([_line("a", "Amoxil", [3])])
    assert DOSE_MARKER not in matrix.rows[0].cells


def test_body_pads_to_header_width():
    matrix = build_hour_matrix([_line("a", "Amoxil", [8])])
    assert all(len(row) == matrix.width for row in matrix.body())


# ── Preview groups ────────────────────────────────────────────────────────

def test_preview_groups_by_group_then_action_then_fallback():
    lines = [
        _line("a", "Amoxil", [8], group="Antibióticos"),
        _line("b", "Buscapina", [9], group="", action="Antiespasmódico, analgésico"),
        _line("c", "Crema X", [10], group="", action=""),
        _line("d", "Augmentin", [11], group="Antibióticos"),
    ]
    groups = build_preview_groups(lines)
    assert [g.name for g in groups] == ["Antibióticos", "Antiespasmódico", UNCLASSIFIED_GROUP]
    assert [i.comercial_name for i in groups[0].items] == ["Amoxil", "Augmentin"]


def test_preview_item_display_fields():
    line = _line("a", "Amoxil", [8, 20], "Con comida")
    line.medicine.icon_type = IconType.SYRUP
    item = build_preview_groups([line])[0].items[0]
    assert item.hours_display == ["08:00", "20:00"]
    assert item.instructions == "Con comida"
    assert item.icon == "🥤"
