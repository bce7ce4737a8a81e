"""
In-memory AuditEventRepository.

Guarda los eventos en una lista (tests). Thread-safe.
"""

from __future__ import annotations

from threading import Lock

from ....domain.audit import AuditEvent


class InMemoryAuditEventRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._events: list[AuditEvent] = []

    def record_event(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.append(event)

    def list_events(self, *, action_prefix: str | None = None) -> list[AuditEvent]:
        with self._lock:
            events = list(self._events)
        if action_prefix:
            events = [e for e in events if e.action.startswith(action_prefix)]
        return events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
