"""
Local disk helpers for exported artifacts (backups, workbooks, PDFs, print pages).
"""
from __future__ import annotations

import hashlib
from pathlib import Path

EXPORTS_SUBDIR = "exports"


def sha256_bytes(data: bytes) -> str:
    """Compute sha256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def get_exports_dir(data_dir: Path) -> Path:
    """Return the export directory under *data_dir*."""
    return Path(data_dir) / EXPORTS_SUBDIR


def ensure_dirs(data_dir: Path) -> None:
    """Create data directories if they don't exist."""
    get_exports_dir(data_dir).mkdir(parents=True, exist_ok=True)


def save_artifact(data_dir: Path, filename: str, data: bytes) -> Path:
    """Save a generated artifact to the export dir. Returns the file path."""
    ensure_dirs(data_dir)
    path = get_artifact_path(data_dir, filename)
    path.write_bytes(data)
    return path


def get_artifact_path(data_dir: Path, filename: str) -> Path:
    """Return the full path to a specific artifact."""
    return get_exports_dir(data_dir) / filename
