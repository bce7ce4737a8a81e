"""
============================================================
TARJETA CRC — infrastructure/repositories/logging_audit.py
============================================================
Class: LoggingAuditEventRepository

Responsibilities:
  - Registrar eventos de auditoría en el canal de logs "user actions"
    (un registro JSON por evento; rotación diaria si LOG_DIR está seteado).
  - Rechazos con nivel WARNING, permitidos con nivel INFO.

Collaborators:
  - crosscutting.logger.user_action_logger
  - domain.audit.AuditEvent
============================================================
"""

from __future__ import annotations

import logging

from ...crosscutting.logger import user_action_logger
from ...domain.audit import AuditDecision, AuditEvent


class LoggingAuditEventRepository:
    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or user_action_logger

    def record_event(self, event: AuditEvent) -> None:
        level = (
            logging.WARNING
            if event.decision == AuditDecision.REJECTED
            else logging.INFO
        )
        self._log.log(
            level,
            event.action,
            extra={
                "audit_id": str(event.id),
                "actor": event.actor,
                "action": event.action,
                "decision": event.decision.value,
                "route": event.route,
                "reason": event.reason,
                "audit_metadata": event.metadata,
                "audit_at": event.created_at,
            },
        )
