"""
app/services/audit_service.py

Audit sink for scan and deal mutations.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.scanning.logging_utils import log_event
from db.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


def _json_safe(details: dict[str, Any] | None) -> dict[str, Any] | None:
    if details is None:
        return None
    return {
        key: str(value) if isinstance(value, uuid.UUID) else value
        for key, value in details.items()
    }


class AuditRecorder:
    """
    Writes audit entries inside the caller's transaction.

    Each entry is written in its own SAVEPOINT. A failed audit write is
    rolled back to that savepoint and logged, leaving the primary mutation
    intact.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._repository = AuditLogRepository(session)

    def record(
        self,
        *,
        user_id: str,
        entity: str,
        entity_id: uuid.UUID | str,
        action: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        try:
            with self._session.begin_nested():
                self._repository.add(
                    user_id=user_id,
                    entity=entity,
                    entity_id=str(entity_id),
                    action=action,
                    details=_json_safe(details),
                )
        except SQLAlchemyError as exc:
            log_event(
                logger,
                logging.WARNING,
                "audit_record_failed",
                entity=entity,
                entity_id=entity_id,
                action=action,
                error=str(exc),
            )
