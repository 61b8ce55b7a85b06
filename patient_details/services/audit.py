"""Audit logging service for compliance tracking."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from patient_details.models.patient import AuditLog

logger = logging.getLogger(__name__)


def log_action(
    db: Session,
    *,
    actor: str,
    action: str,
    resource_id: str,
    resource_type: str = "Patient",
    detail: dict[str, Any] | None = None,
) -> None:
    """Add an audit entry to the caller's transaction."""
    db.add(
        AuditLog(
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            detail=detail,
        )
    )
    logger.info("AUDIT: %s %s %s/%s", actor, action, resource_type, resource_id)
