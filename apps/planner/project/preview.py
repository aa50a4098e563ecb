"""
On-screen preview of a treatment plan, grouped by pharmacological group.
"""
from __future__ import annotations

from typing import Sequence

from apps.planner.export_render.common import hour_label, preview_group_name
from apps.planner.project.models import PreviewGroup, PreviewItem, ReportLine
from packages.shared.models import ICON_GLYPHS


def build_preview_groups(lines: Sequence[ReportLine]) -> list[PreviewGroup]:
    """Groups appear in order of first occurrence; items keep the line order."""
    groups: dict[str, PreviewGroup] = {}
    for line in lines:
        med = line.medicine
        name = preview_group_name(med)
        group = groups.setdefault(name, PreviewGroup(name=name))
        group.items.append(
            PreviewItem(
                medicine_id=med.id,
                comercial_name=med.comercial_name,
                active_principles=med.active_principles,
                pharmacological_action=med.pharmacological_action,
                icon=ICON_GLYPHS.get(med.icon_type, ""),
                hours_display=[hour_label(h) for h in line.entry.hours],
                instructions=line.entry.instructions,
            )
        )
    return list(groups.values())
