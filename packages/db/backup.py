"""
Backup codec: the whole store as one portable JSON document.
"""
from __future__ import annotations

import json
import logging

from packages.db.store import EntityStore
from packages.shared.errors import BackupFormatError
from packages.shared.schema_validator import COLLECTION_KEYS, validate_backup

logger = logging.getLogger(__name__)


def parse_backup(document: str | bytes) -> dict:
    """Parse and shape-check a backup document. Raises BackupFormatError."""
    try:
        data = json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise BackupFormatError([f"not valid JSON: {exc}"]) from exc
    ok, messages = validate_backup(data)
    if not ok:
        raise BackupFormatError(messages)
    return data


class BackupCodec:
    def __init__(self, store: EntityStore):
        self.store = store

    def export(self) -> str:
        """Serialize all four collections with the current schema version."""
        with self.store.db.session() as session:
            data: dict = {c.name: c.raw_payloads(session) for c in self.store.collections}
        data["version"] = self.store.config.schema_version
        return json.dumps(data, indent=2, ensure_ascii=False)

    def import_data(self, document: str | bytes) -> bool:
        """
        Replace the store contents with *document*.
        Returns False, leaving the store untouched, when the document does not parse or lacks a collection.
        """
        try:
            data = parse_backup(document)
        except BackupFormatError as exc:
            logger.warning("Backup rejected: %s", "; ".join(exc.messages))
            return False

        with self.store.db.session() as session:
            for collection in self.store.collections:
                collection.clear(session)
            session.flush()
            counts = {c.name: c.put_payloads(session, data[c.name]) for c in self.store.collections}
        logger.info(
            "Backup imported (version=%s): %s",
            data.get("version"),
            ", ".join(f"{k}={counts[k]}" for k in COLLECTION_KEYS),
        )
        return True

    def clear_all(self) -> None:
        """Empty all four collections in one transaction. Confirmation is the caller's job."""
        with self.store.db.session() as session:
            counts = {c.name: c.clear(session) for c in self.store.collections}
        logger.info("Store cleared: %s", ", ".join(f"{k}={v}" for k, v in counts.items()))
