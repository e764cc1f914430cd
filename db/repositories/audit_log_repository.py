"""
Append-only persistence for audit log entries.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.audit_log import AuditLog


class AuditLogRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(
        self,
        *,
        user_id: str,
        entity: str,
        entity_id: str,
        action: str,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            entity=entity,
            entity_id=entity_id,
            action=action,
            details=details,
        )
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_for_entity(self, *, entity: str, entity_id: str) -> list[AuditLog]:
        stmt = (
            select(AuditLog)
            .where(AuditLog.entity == entity)
            .where(AuditLog.entity_id == entity_id)
            .order_by(AuditLog.created_at)
        )
        return list(self._session.scalars(stmt).all())
