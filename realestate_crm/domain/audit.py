"""
===============================================================================
TARJETA CRC — domain/audit.py
===============================================================================

Módulo:
    Modelos de Auditoría (Dominio)

Responsabilidades:
    - Definir la estructura de un evento de auditoría (AuditEvent).
    - Mantener el contrato de auditoría independiente de infraestructura.

Colaboradores:
    - domain.repositories.AuditEventRepository: registra eventos.
    - realestate_crm/audit.py: emite eventos (orquestación).

Notas:
    - Append-only: no se edita ni se borra.
    - reason es server-side (nunca se devuelve al cliente).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class AuditDecision(str, Enum):
    ALLOWED = "allowed"
    REJECTED = "rejected"


@dataclass(slots=True)
class AuditEvent:
    """Evento de auditoría del sistema."""

    id: UUID
    actor: str
    action: str
    decision: AuditDecision
    route: str | None = None
    reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
