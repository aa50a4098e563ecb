"""
Flat key-value store backed by the kv_store table.

Plays the part of the browser's localStorage: the legacy flat-document blob and
the migration flag both live here.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from packages.db.database import Database
from packages.db.models import KeyValue


class KeyValueStore:
    def __init__(self, db: Database):
        self.db = db

    def get_item(self, key: str, session: Session | None = None) -> Optional[str]:
        if session is not None:
            row = session.get(KeyValue, key)
            return row.value if row else None
        with self.db.session() as s:
            row = s.get(KeyValue, key)
            return row.value if row else None

    def set_item(self, key: str, value: str, session: Session | None = None) -> None:
        if session is not None:
            session.merge(KeyValue(key=key, value=value))
            return
        with self.db.session() as s:
            s.merge(KeyValue(key=key, value=value))

    def remove_item(self, key: str) -> bool:
        with self.db.session() as s:
            row = s.get(KeyValue, key)
            if row is None:
                return False
            s.delete(row)
            return True
