"""
Hour derivation for doses recorded with legacy free-text slot labels.

Earlier data stored a slot label such as "Comida (12:00-14:00)" instead of an
explicit hour. Precedence: an explicit time in the instructions, then in the
dosage text, then the midpoint of the label's range, then any single time in
the label, then the known slot names, then DEFAULT_LEGACY_HOUR.
"""
from __future__ import annotations

import re
import unicodedata

DEFAULT_LEGACY_HOUR = 8

EXPLICIT_TIME_RE = re.compile(r"(?<!\d)([01]?\d|2[0-3]):([0-5]\d)(?!\d)")
TIME_RANGE_RE = re.compile(
    r"(?<!\d)([01]?\d|2[0-3]):([0-5]\d)\s*(?:-|–|a|to)\s*([01]?\d|2[0-3]):([0-5]\d)(?!\d)",
    re.IGNORECASE,
)

# Default slots of the old planner, keyed by their range midpoints.
LEGACY_SLOT_HOURS: dict[str, int] = {
    "desayuno": 8,
    "comida": 13,
    "cena": 19,
    "noche": 22,
}


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def explicit_hour(text: str | None) -> int | None:
    """First HH:MM in *text*, as an hour."""
    if not text:
        return None
    m = EXPLICIT_TIME_RE.search(text)
    return int(m.group(1)) if m else None


def range_midpoint_hour(label: str | None) -> int | None:
    """Midpoint hour of an "HH:MM-HH:MM" range, wrapping past midnight."""
    if not label:
        return None
    m = TIME_RANGE_RE.search(label)
    if not m:
        return None
    start = int(m.group(1)) * 60 + int(m.group(2))
    end = int(m.group(3)) * 60 + int(m.group(4))
    if end <= start:
        end += 24 * 60
    midpoint = (start + end) // 2
    return (midpoint // 60) % 24


def slot_name_hour(label: str | None) -> int | None:
    if not label:
        return None
    folded = _fold(label)
    for name, hour in LEGACY_SLOT_HOURS.items():
        if re.search(rf"\b{name}\b", folded):
            return hour
    return None


def derive_hour_for_legacy_entry(
    slot_label: str | None,
    dosage_text: str | None,
    instructions_text: str | None,
    default_hour: int = DEFAULT_LEGACY_HOUR,
) -> int:
    for candidate in (
        explicit_hour(instructions_text),
        explicit_hour(dosage_text),
        range_midpoint_hour(slot_label),
        explicit_hour(slot_label),
        slot_name_hour(slot_label),
    ):
        if candidate is not None:
            return candidate
    return default_hour
