"""
One-time migration of the legacy flat-document blob into the entity tables.

The blob lives in the key-value store under ``StoreConfig.legacy_storage_key``
and has the backup-document shape (schema version 1 has no adverseReactions
array). A persisted flag makes the migration run at most once; the flag is only
written in the same transaction as the migrated rows.
"""
from __future__ import annotations

import json
import logging

from pydantic import BaseModel, Field

from packages.db.store import EntityStore
from packages.shared.errors import MigrationError
from packages.shared.schema_validator import validate_legacy_payload

logger = logging.getLogger(__name__)

MIGRATED_FLAG_VALUE = "true"


class MigrationReport(BaseModel):
    skipped: bool = False
    legacy_found: bool = False
    counts: dict[str, int] = Field(default_factory=dict)


class LegacyMigrator:
    def __init__(self, store: EntityStore):
        self.store = store
        self.config = store.config

    def is_migrated(self) -> bool:
        return self.store.kv.get_item(self.config.migration_flag_key) == MIGRATED_FLAG_VALUE

    def migrate(self) -> MigrationReport:
        """
        Move legacy records into the entity tables, preserving ids and createdAt.

        Raises MigrationError when the blob cannot be parsed; the flag then stays
        unset so the next start retries.
        """
        if self.is_migrated():
            logger.info("Data already migrated; skipping legacy import")
            return MigrationReport(skipped=True)

        raw = self.store.kv.get_item(self.config.legacy_storage_key)
        if not raw:
            logger.info("No legacy data to migrate")
            self.store.kv.set_item(self.config.migration_flag_key, MIGRATED_FLAG_VALUE)
            return MigrationReport()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Legacy blob under %r is not valid JSON: %s", self.config.legacy_storage_key, exc)
            raise MigrationError(f"legacy data is not valid JSON: {exc}") from exc

        ok, messages = validate_legacy_payload(data)
        if not ok:
            logger.error("Legacy blob failed shape check: %s", "; ".join(messages))
            raise MigrationError("legacy data has an unexpected shape: " + "; ".join(messages))

        report = MigrationReport(legacy_found=True)
        with self.store.db.session() as session:
            for collection in self.store.collections:
                records = data.get(collection.name) or []
                report.counts[collection.name] = collection.put_payloads(session, records) if records else 0
            self.store.kv.set_item(self.config.migration_flag_key, MIGRATED_FLAG_VALUE, session=session)

        logger.info(
            "Legacy migration complete (version=%s): %s",
            data.get("version", 1),
            ", ".join(f"{k}={v}" for k, v in report.counts.items()),
        )
        return report
