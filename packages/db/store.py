"""
Entity Store: typed CRUD over the four PharmaLocal collections.

Each public operation opens its own session, so a read issued after a write
always observes it. Multi-collection work (backup import, clear, migration)
goes through the session-scoped helpers instead so it can share one
transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

from pydantic import ValidationError
from sqlalchemy.orm import Session

from packages.db import models as orm
from packages.db.database import Database
from packages.db.kv_store import KeyValueStore
from packages.shared.config import StoreConfig
from packages.shared.errors import DuplicateIdError, RecordValidationError
from packages.shared.models import (
    AdverseReaction,
    AppData,
    CamelModel,
    Medicine,
    Patient,
    Treatment,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=CamelModel)


def _require_text(payload: Mapping[str, Any], *keys: str) -> list[str]:
    problems = []
    for key in keys:
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            problems.append(f"{key} is required")
    return problems


def _validate_medicine(payload: Mapping[str, Any]) -> list[str]:
    return _require_text(payload, "comercialName")


def _validate_patient(payload: Mapping[str, Any]) -> list[str]:
    return _require_text(payload, "fullName", "cedula", "dateOfBirth")


def _validate_treatment(payload: Mapping[str, Any]) -> list[str]:
    problems = _require_text(payload, "patientId", "medicineId")
    if not payload.get("doses"):
        problems.append("at least one dose is required")
    return problems


def _validate_adverse_reaction(payload: Mapping[str, Any]) -> list[str]:
    return _require_text(payload, "patientId", "medicineId", "symptom")


def _coerce(value: Any, kind: str) -> Any:
    if kind == "int":
        return value if isinstance(value, int) and not isinstance(value, bool) else None
    if kind == "bool":
        return value if isinstance(value, bool) else None
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class CollectionSpec:
    name: str  # key in backup documents
    orm_cls: type
    model_cls: type[CamelModel]
    validate: Callable[[Mapping[str, Any]], list[str]]
    # column attribute -> (payload key, kind)
    index_columns: dict[str, tuple[str, str]] = field(default_factory=dict)

    def row_from_payload(self, payload: dict) -> Any:
        values = {col: _coerce(payload.get(key), kind) for col, (key, kind) in self.index_columns.items()}
        return self.orm_cls(id=payload["id"], payload=payload, **values)

    def apply_payload(self, row: Any, payload: dict) -> None:
        row.payload = payload
        for col, (key, kind) in self.index_columns.items():
            setattr(row, col, _coerce(payload.get(key), kind))


MEDICINES = CollectionSpec(
    name="medicines",
    orm_cls=orm.Medicine,
    model_cls=Medicine,
    validate=_validate_medicine,
    index_columns={
        "comercial_name": ("comercialName", "str"),
        "pharmacological_group": ("pharmacologicalGroup", "str"),
        "created_at": ("createdAt", "int"),
    },
)
PATIENTS = CollectionSpec(
    name="patients",
    orm_cls=orm.Patient,
    model_cls=Patient,
    validate=_validate_patient,
    index_columns={
        "full_name": ("fullName", "str"),
        "cedula": ("cedula", "str"),
        "created_at": ("createdAt", "int"),
    },
)
TREATMENTS = CollectionSpec(
    name="treatments",
    orm_cls=orm.Treatment,
    model_cls=Treatment,
    validate=_validate_treatment,
    index_columns={
        "patient_id": ("patientId", "str"),
        "medicine_id": ("medicineId", "str"),
        "is_active": ("isActive", "bool"),
        "start_date": ("startDate", "str"),
        "created_at": ("createdAt", "int"),
    },
)
ADVERSE_REACTIONS = CollectionSpec(
    name="adverseReactions",
    orm_cls=orm.AdverseReaction,
    model_cls=AdverseReaction,
    validate=_validate_adverse_reaction,
    index_columns={
        "patient_id": ("patientId", "str"),
        "medicine_id": ("medicineId", "str"),
        "severity": ("severity", "str"),
        "status": ("status", "str"),
        "created_at": ("createdAt", "int"),
    },
)

COLLECTION_SPECS: tuple[CollectionSpec, ...] = (MEDICINES, PATIENTS, TREATMENTS, ADVERSE_REACTIONS)


class Collection(Generic[RecordT]):
    """CRUD over one collection."""

    def __init__(self, db: Database, spec: CollectionSpec):
        self.db = db
        self.spec = spec

    @property
    def name(self) -> str:
        return self.spec.name

    def _to_record(self, payload: Mapping[str, Any]) -> RecordT:
        return self.spec.model_cls.model_validate(payload)  # type: ignore[return-value]

    def _load(self, payloads: Iterable[Mapping[str, Any]]) -> list[RecordT]:
        """Typed records for stored payloads. Rows that no longer validate are logged and skipped."""
        records = []
        for payload in payloads:
            try:
                records.append(self._to_record(payload))
            except ValidationError as exc:
                logger.warning(
                    "%s: skipping unreadable row %r (%d errors)", self.name, payload.get("id"), exc.error_count()
                )
        return records

    def _parse(self, payload: Mapping[str, Any]) -> RecordT:
        try:
            return self._to_record(payload)
        except ValidationError as exc:
            problems = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
            raise RecordValidationError(self.name, problems) from exc

    def _check(self, payload: Mapping[str, Any]) -> None:
        problems = self.spec.validate(payload)
        if problems:
            raise RecordValidationError(self.name, problems)

    def add(self, record: RecordT | Mapping[str, Any]) -> RecordT:
        if isinstance(record, CamelModel) and not isinstance(record, self.spec.model_cls):
            record = record.to_payload()
        if not isinstance(record, CamelModel):
            record = self._parse(record)
        payload = record.to_payload()
        self._check(payload)
        with self.db.session() as session:
            if session.get(self.spec.orm_cls, payload["id"]) is not None:
                raise DuplicateIdError(self.name, payload["id"])
            session.add(self.spec.row_from_payload(payload))
        logger.debug("%s: added %s", self.name, payload["id"])
        return record  # type: ignore[return-value]

    def update(self, record_id: str, fields: Mapping[str, Any]) -> bool:
        """Merge *fields* into the stored record. Returns False when the id is absent."""
        aliases = self.spec.model_cls.alias_map()
        unknown = sorted(k for k in fields if k not in aliases)
        if unknown:
            raise RecordValidationError(self.name, [f"unknown field: {k}" for k in unknown])
        if any(aliases[k] == "id" for k in fields):
            raise RecordValidationError(self.name, ["id cannot be changed"])

        with self.db.session() as session:
            row = session.get(self.spec.orm_cls, record_id)
            if row is None:
                logger.debug("%s: update skipped, %s not found", self.name, record_id)
                return False
            merged = dict(row.payload)
            merged.update({aliases[k]: v for k, v in fields.items()})
            normalized = self._parse(merged).to_payload()
            # Only the touched keys are rewritten; everything else stays as stored.
            payload = dict(row.payload)
            for key in fields:
                payload[aliases[key]] = normalized[aliases[key]]
            self._check(payload)
            self.spec.apply_payload(row, payload)
        logger.debug("%s: updated %s (%s)", self.name, record_id, ", ".join(sorted(fields)))
        return True

    def delete(self, record_id: str) -> bool:
        with self.db.session() as session:
            row = session.get(self.spec.orm_cls, record_id)
            if row is None:
                logger.debug("%s: delete skipped, %s not found", self.name, record_id)
                return False
            session.delete(row)
        return True

    def get_all(self) -> list[RecordT]:
        with self.db.session() as session:
            payloads = self.raw_payloads(session)
        return self._load(payloads)

    def get_by_id(self, record_id: str) -> Optional[RecordT]:
        with self.db.session() as session:
            row = session.get(self.spec.orm_cls, record_id)
            payload = dict(row.payload) if row else None
        if payload is None:
            return None
        loaded = self._load([payload])
        return loaded[0] if loaded else None

    def get_by(self, field_name: str, value: Any) -> list[RecordT]:
        """Filter on an indexed field, given by attribute or wire name."""
        column = None
        for col, (key, _kind) in self.spec.index_columns.items():
            if field_name in (col, key):
                column = col
                break
        if column is None:
            raise ValueError(f"{self.name}: {field_name!r} is not an indexed field")
        with self.db.session() as session:
            rows = session.query(self.spec.orm_cls).filter(getattr(self.spec.orm_cls, column) == value).all()
            payloads = [dict(r.payload) for r in rows]
        return self._load(payloads)

    def count(self) -> int:
        with self.db.session() as session:
            return session.query(self.spec.orm_cls).count()

    # Session-scoped helpers for multi-collection transactions.

    def raw_payloads(self, session: Session) -> list[dict]:
        return [dict(r.payload) for r in session.query(self.spec.orm_cls).all()]

    def put_payloads(self, session: Session, payloads: Iterable[dict]) -> int:
        """Insert or replace rows by id (last one wins)."""
        by_id: dict[str, dict] = {}
        for payload in payloads:
            by_id[payload["id"]] = payload
        for payload in by_id.values():
            row = session.get(self.spec.orm_cls, payload["id"])
            if row is None:
                session.add(self.spec.row_from_payload(payload))
            else:
                self.spec.apply_payload(row, payload)
        session.flush()
        return len(by_id)

    def clear(self, session: Session) -> int:
        return session.query(self.spec.orm_cls).delete()


class EntityStore:
    """The four PharmaLocal collections plus the flat key-value store."""

    def __init__(self, config: StoreConfig | None = None, database: Database | None = None):
        self.config = config or StoreConfig.from_env()
        self.db = database or Database(self.config)
        self.db.init_db()
        self.medicines: Collection[Medicine] = Collection(self.db, MEDICINES)
        self.patients: Collection[Patient] = Collection(self.db, PATIENTS)
        self.treatments: Collection[Treatment] = Collection(self.db, TREATMENTS)
        self.adverse_reactions: Collection[AdverseReaction] = Collection(self.db, ADVERSE_REACTIONS)
        self.kv = KeyValueStore(self.db)

    @property
    def collections(self) -> tuple[Collection, ...]:
        """Collections in backup-document order."""
        return (self.medicines, self.patients, self.treatments, self.adverse_reactions)

    def get_treatments_by_patient(self, patient_id: str) -> list[Treatment]:
        return self.treatments.get_by("patientId", patient_id)

    def get_adverse_reactions_by_patient(self, patient_id: str) -> list[AdverseReaction]:
        return self.adverse_reactions.get_by("patientId", patient_id)

    def snapshot(self) -> AppData:
        """Typed copy of the whole store."""
        return AppData(
            medicines=self.medicines.get_all(),
            patients=self.patients.get_all(),
            treatments=self.treatments.get_all(),
            adverse_reactions=self.adverse_reactions.get_all(),
            version=self.config.schema_version,
        )

    def close(self) -> None:
        self.db.dispose()
