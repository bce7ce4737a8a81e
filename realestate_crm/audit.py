"""
===============================================================================
TARJETA CRC — realestate_crm/audit.py (Emisión de auditoría)
===============================================================================

Responsabilidades:
  - Construir eventos de auditoría con formato consistente
    (actor/action/route/decision/reason/metadata).
  - Normalizar actor a partir del UserContext (o "anonymous").
  - Registrar vía AuditEventRepository (puerto del dominio).
  - “Best-effort”: si falla el registro, NO rompe el flujo del request.

Colaboradores:
  - domain.audit.AuditEvent / AuditDecision
  - domain.repositories.AuditEventRepository
  - identity.tokens.UserContext
  - crosscutting.logger.logger

Decisiones de seguridad:
  - No se guarda el email por defecto (PII innecesaria).
  - Metadata se sanitiza a valores serializables.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from .crosscutting.logger import logger
from .domain.audit import AuditDecision, AuditEvent
from .domain.repositories import AuditEventRepository
from .identity.tokens import UserContext


def actor_from_context(context: UserContext | None) -> str:
    """
    Formato:
      - user:{uuid}
      - anonymous
    """
    if context is None:
        return "anonymous"
    return f"user:{context.user_id}"


def _sanitize(value: Any) -> Any:
    """
    Convierte valores a tipos serializables para JSON.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, dict):
        return {str(k): _sanitize(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_sanitize(v) for v in value]

    return str(value)


def emit_audit_event(
    repository: AuditEventRepository | None,
    *,
    action: str,
    decision: AuditDecision,
    context: UserContext | None = None,
    actor: str | None = None,
    route: str | None = None,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """
    Emite un evento de auditoría.

    Regla clave:
      - Si repository es None o falla al escribir, NO se lanza excepción.
    """
    if repository is None:
        return

    try:
        payload: dict[str, Any] = dict(metadata or {})
        if context is not None:
            payload.setdefault("role", context.role.value)
            if context.real_estate_id:
                payload.setdefault("real_estate_id", context.real_estate_id)

        event = AuditEvent(
            id=uuid4(),
            actor=actor or actor_from_context(context),
            action=action,
            decision=decision,
            route=route,
            reason=reason,
            metadata=_sanitize(payload),
            created_at=datetime.now(timezone.utc),
        )
        repository.record_event(event)
    except Exception as exc:
        # Best-effort: logueamos y seguimos.
        logger.warning(
            "Falló la escritura del evento de auditoría",
            extra={"action": action, "error": str(exc)},
        )
