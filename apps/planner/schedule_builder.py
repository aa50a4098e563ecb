"""
Schedule Builder: per-medicine administration hours for one planning session.

Entries are kept in session order (the order medicines were first scheduled).
An entry always has at least one hour; removing its last hour removes it.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from apps.planner.legacy_slots import derive_hour_for_legacy_entry
from packages.shared.models import TimelineScheduleEntry, Treatment

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def _check_hour(hour: int) -> int:
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour < HOURS_PER_DAY:
        raise ValueError(f"hour must be an integer in [0, 23], got {hour!r}")
    return hour


class ScheduleBuilder:
    def __init__(self, entries: Iterable[TimelineScheduleEntry] = ()):
        self._entries: dict[str, TimelineScheduleEntry] = {}
        for entry in entries:
            self._entries[entry.medicine_id] = entry.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, medicine_id: object) -> bool:
        return medicine_id in self._entries

    def _put(self, medicine_id: str, hours: Iterable[int], instructions: str) -> TimelineScheduleEntry:
        entry = TimelineScheduleEntry(medicine_id=medicine_id, hours=list(hours), instructions=instructions)
        self._entries[medicine_id] = entry
        return entry

    def toggle_hour(self, medicine_id: str, hour: int) -> Optional[TimelineScheduleEntry]:
        """
        Add *hour* to the medicine's entry, or remove it if already present.
        Returns the resulting entry, or None when the entry was removed.
        """
        _check_hour(hour)
        entry = self._entries.get(medicine_id)
        if entry is None:
            return self._put(medicine_id, [hour], "")
        if hour in entry.hours:
            remaining = [h for h in entry.hours if h != hour]
            if not remaining:
                del self._entries[medicine_id]
                logger.debug("Schedule entry for %s removed with its last hour", medicine_id)
                return None
            return self._put(medicine_id, remaining, entry.instructions)
        return self._put(medicine_id, [*entry.hours, hour], entry.instructions)

    def add_hour(self, medicine_id: str, hour: int) -> TimelineScheduleEntry:
        """Like toggle_hour, but never removes."""
        _check_hour(hour)
        entry = self._entries.get(medicine_id)
        if entry is None:
            return self._put(medicine_id, [hour], "")
        if hour in entry.hours:
            return entry
        return self._put(medicine_id, [*entry.hours, hour], entry.instructions)

    def set_instructions(self, medicine_id: str, text: str) -> bool:
        """Set free-text instructions. No-op (False) when the medicine has no entry."""
        entry = self._entries.get(medicine_id)
        if entry is None:
            return False
        self._put(medicine_id, entry.hours, text)
        return True

    def remove_medicine(self, medicine_id: str) -> bool:
        return self._entries.pop(medicine_id, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def entry_for(self, medicine_id: str) -> Optional[TimelineScheduleEntry]:
        entry = self._entries.get(medicine_id)
        return entry.model_copy(deep=True) if entry else None

    def entries(self) -> list[TimelineScheduleEntry]:
        return [e.model_copy(deep=True) for e in self._entries.values()]

    def medicine_ids(self) -> list[str]:
        return list(self._entries)

    def has_dose(self, medicine_id: str, hour: int) -> bool:
        entry = self._entries.get(medicine_id)
        return bool(entry and hour in entry.hours)

    def medicines_at(self, hour: int) -> list[str]:
        _check_hour(hour)
        return [mid for mid, e in self._entries.items() if hour in e.hours]

    @classmethod
    def from_treatments(cls, treatments: Iterable[Treatment], include_inactive: bool = False) -> "ScheduleBuilder":
        """
        Build a session from stored treatments.
        Dose times are slot labels or "HH:MM" strings and go through the legacy hour derivation.
        """
        builder = cls()
        notes: dict[str, list[str]] = {}
        for treatment in treatments:
            if not treatment.is_active and not include_inactive:
                continue
            for dose in treatment.doses:
                medicine_id = dose.medicine_id or treatment.medicine_id
                hour = derive_hour_for_legacy_entry(dose.time, dose.dosage, dose.specific_instructions)
                builder.add_hour(medicine_id, hour)
                bucket = notes.setdefault(medicine_id, [])
                for text in (treatment.general_instructions, dose.specific_instructions):
                    text = (text or "").strip()
                    if text and text not in bucket:
                        bucket.append(text)
        for medicine_id, texts in notes.items():
            if texts:
                builder.set_instructions(medicine_id, "; ".join(texts))
        return builder
