"""
SQLAlchemy ORM models for PharmaLocal persistence.

Every entity row keeps the full record as a JSON payload (camelCase wire names),
with the fields used for lookups copied into indexed columns. There are no
foreign-key constraints: deleting a patient or medicine never touches the
treatments or reactions that reference it.
"""
from __future__ import annotations

from sqlalchemy import JSON, BigInteger, Boolean, Column, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(String(120), primary_key=True)
    comercial_name = Column(String(200), nullable=True, index=True)
    pharmacological_group = Column(String(200), nullable=True, index=True)
    created_at = Column(BigInteger, nullable=True, index=True)
    payload = Column(JSON, nullable=False)


class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(120), primary_key=True)
    full_name = Column(String(200), nullable=True, index=True)
    cedula = Column(String(60), nullable=True, index=True)
    created_at = Column(BigInteger, nullable=True, index=True)
    payload = Column(JSON, nullable=False)


class Treatment(Base):
    __tablename__ = "treatments"

    id = Column(String(120), primary_key=True)
    patient_id = Column(String(120), nullable=True, index=True)
    medicine_id = Column(String(120), nullable=True, index=True)
    is_active = Column(Boolean, nullable=True, index=True)
    start_date = Column(String(20), nullable=True, index=True)
    created_at = Column(BigInteger, nullable=True, index=True)
    payload = Column(JSON, nullable=False)


class AdverseReaction(Base):
    __tablename__ = "adverse_reactions"

    id = Column(String(120), primary_key=True)
    patient_id = Column(String(120), nullable=True, index=True)
    medicine_id = Column(String(120), nullable=True, index=True)
    severity = Column(String(20), nullable=True, index=True)  # leve | moderada | grave
    status = Column(String(20), nullable=True, index=True)  # pendiente | revisado | reportado
    created_at = Column(BigInteger, nullable=True, index=True)
    payload = Column(JSON, nullable=False)


class KeyValue(Base):
    """Flat string store standing in for the browser's localStorage."""
    __tablename__ = "kv_store"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)
