"""
Data models for the patient record store.

Records are schema-agnostic documents: one row per patient holding an opaque
JSON payload, addressed only by its store-assigned id. Reads and deletes are
paired with an audit trail entry.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from patient_details.models.database import Base

DocumentJSON = JSON().with_variant(JSONB(), "postgresql")


def _new_document_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Patient document – created by the intake workflow, read/deleted here
# ---------------------------------------------------------------------------
class PatientDocument(Base):
    __tablename__ = "patients"

    id = Column(String(64), primary_key=True, default=_new_document_id)
    fields = Column(DocumentJSON, nullable=False, default=dict, comment="Opaque patient payload")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)


# ---------------------------------------------------------------------------
# Audit Log – immutable compliance trail
# ---------------------------------------------------------------------------
class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    actor = Column(String(128), nullable=False, comment="User or service identity")
    action = Column(String(64), nullable=False, comment="read | delete")
    resource_type = Column(String(64), nullable=False)
    resource_id = Column(String(64), nullable=False)
    detail = Column(DocumentJSON, comment="Context for the action")
    timestamp = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (Index("ix_audit_timestamp", "timestamp"),)


# ---------------------------------------------------------------------------
# User preference – small per-user key/value flags (e.g. onboarding seen)
# ---------------------------------------------------------------------------
class UserPreference(Base):
    __tablename__ = "user_preferences"

    owner = Column(String(255), primary_key=True, comment="User identity, '' for anonymous")
    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
