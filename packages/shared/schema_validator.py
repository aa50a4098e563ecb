"""
Validate backup documents against the PharmaLocal backup schema.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

_SCHEMA_PATH = Path(__file__).resolve().parent.parent.parent / "schemas" / "pharmalocal-backup.schema.json"
_schema_cache: dict | None = None

COLLECTION_KEYS: tuple[str, ...] = ("medicines", "patients", "treatments", "adverseReactions")


def _load_schema() -> dict:
    global _schema_cache
    if _schema_cache is None:
        with open(_SCHEMA_PATH, "r", encoding="utf-8") as f:
            _schema_cache = json.load(f)
    return _schema_cache


def validate_backup(data: Any) -> tuple[bool, list[str]]:
    """
    Validate *data* against the backup schema.
    Only structure is checked: the four collection arrays, and an id on each record.
    Returns (is_valid, list_of_error_messages).
    """
    schema = _load_schema()
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    messages = [f"{'→'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}" for e in errors]
    return (len(messages) == 0, messages)


def validate_legacy_payload(data: Any) -> tuple[bool, list[str]]:
    """
    Shape check for the flat legacy blob.
    Version 1 payloads have no adverseReactions array; any array that is present must hold objects.
    """
    if not isinstance(data, dict):
        return (False, [f"<root>: expected an object, got {type(data).__name__}"])
    messages: list[str] = []
    for key in COLLECTION_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, list):
            messages.append(f"{key}: expected an array, got {type(value).__name__}")
            continue
        for idx, item in enumerate(value):
            if not isinstance(item, dict) or not isinstance(item.get("id"), str) or not item["id"]:
                messages.append(f"{key}→{idx}: record without a string id")
    return (len(messages) == 0, messages)
