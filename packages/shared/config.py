"""
Explicit configuration for the store, migrator and artifact writers.
"""
from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel

DEFAULT_DATA_DIR = Path.home() / ".pharmalocal"

LEGACY_STORAGE_KEY = "pharmalocal_data"
MIGRATION_FLAG_KEY = "pharmalocal_migrated_to_indexeddb"
CURRENT_SCHEMA_VERSION = 2


class StoreConfig(BaseModel):
    """Configuration passed into the store and migrator constructors."""
    database_url: str = f"sqlite:///{(DEFAULT_DATA_DIR / 'pharmalocal.db').as_posix()}"
    data_dir: Path = DEFAULT_DATA_DIR
    legacy_storage_key: str = LEGACY_STORAGE_KEY
    migration_flag_key: str = MIGRATION_FLAG_KEY
    schema_version: int = CURRENT_SCHEMA_VERSION
    echo: bool = False

    @classmethod
    def from_env(cls) -> "StoreConfig":
        data_dir = Path(os.environ.get("PHARMALOCAL_DATA_DIR", str(DEFAULT_DATA_DIR)))
        database_url = os.environ.get(
            "PHARMALOCAL_DATABASE_URL",
            f"sqlite:///{(data_dir / 'pharmalocal.db').as_posix()}",
        )
        return cls(database_url=database_url, data_dir=data_dir)

    @classmethod
    def for_directory(cls, data_dir: Path | str) -> "StoreConfig":
        """Config with the database file and exports living under *data_dir*."""
        data_dir = Path(data_dir)
        return cls(
            database_url=f"sqlite:///{(data_dir / 'pharmalocal.db').as_posix()}",
            data_dir=data_dir,
        )
