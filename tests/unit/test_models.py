"""
Unit tests for record models and their camelCase wire format.
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from packages.shared.models import IconType, Medicine, TimelineScheduleEntry, Treatment
from packages.shared.config import StoreConfig


def test_payload_uses_camel_case():
    payload = Medicine(id="m1", comercial_name="Amoxil", created_at=5).to_payload()
    assert payload["comercialName"] == "Amoxil"
    assert payload["iconType"] == "pill"
    assert payload["imageUrl"] is None
    assert "comercial_name" not in payload


def test_parse_from_wire_names():
    med = Medicine.model_validate({"id": "m1", "comercialName": "Amoxil", "iconType": "syrup"})
    assert med.comercial_name == "Amoxil"
    assert med.icon_type is IconType.SYRUP


def test_generated_ids_are_unique():
    assert Medicine().id != Medicine().id


def test_alias_map_accepts_both_names():
    aliases = Treatment.alias_map()
    assert aliases["is_active"] == "isActive"
    assert aliases["isActive"] == "isActive"


def test_schedule_entry_normalizes_hours():
    entry = TimelineScheduleEntry(medicine_id="m1", hours=[20, 8, 8])
    assert entry.hours == [8, 20]


@pytest.mark.parametrize("hours", [[], [24], [-1]])
def test_schedule_entry_rejects_bad_hours(hours):
    with pytest.raises(ValidationError):
        TimelineScheduleEntry(medicine_id="m1", hours=hours)


def test_store_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("PHARMALOCAL_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("PHARMALOCAL_DATABASE_URL", raising=False)
    config = StoreConfig.from_env()
    assert config.data_dir == tmp_path
    assert config.database_url.endswith("pharmalocal.db")
    assert config.migration_flag_key == "pharmalocal_migrated_to_indexeddb"

    monkeypatch.setenv("PHARMALOCAL_DATABASE_URL", "sqlite://")
    assert StoreConfig.from_env().database_url == "sqlite://"
