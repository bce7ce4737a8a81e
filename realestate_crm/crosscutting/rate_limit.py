"""
===============================================================================
MÓDULO: Rate limiting (ventana fija) - in-memory
===============================================================================

Objetivo
--------
Limitar intentos de login por cliente (IP) con una ventana fija:
- Primer hit (o primer hit después de vencida la ventana): count=1, allow
- Mientras count >= limit: deny (con retry-after)
- Caso contrario: count += 1, allow

Mejoras incluidas
-----------------
- Lock por instancia: el read-modify-write es atómico entre threads
- Instancia inyectada desde el container (no hay singleton de módulo)
- Reloj inyectable (tests deterministas)
- Limpieza periódica de ventanas vencidas + límite de claves con eviction

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  - FixedWindowRateLimiter
  - get_client_identifier

Responsabilidades:
  - Decidir allow/deny por clave
  - Calcular retry-after
  - Mantener estado thread-safe

Colaboradores:
  - container.get_login_rate_limiter (construcción desde Settings)
  - api/auth_routes.py (aplica el límite a POST /auth/login)
===============================================================================
"""

from __future__ import annotations

import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable


@dataclass
class Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      FixedWindowRateLimiter

    Responsabilidades:
      - Contar hits por key dentro de una ventana fija
      - Reiniciar la ventana al vencer
      - TTL cleanup y eviction por máximo de claves

    Colaboradores:
      - api/auth_routes.py
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        limit: int,
        window_ms: int,
        *,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit <= 0:
            raise ValueError("limit debe ser > 0")
        if window_ms <= 0:
            raise ValueError("window_ms debe ser > 0")
        self.limit = int(limit)
        self.window_seconds = window_ms / 1000.0
        self.max_keys = int(max_keys)

        self._clock = clock
        self._windows: "OrderedDict[str, Window]" = OrderedDict()
        self._lock = threading.Lock()
        self._ops = 0

    def check(self, key: str) -> bool:
        """Registra un hit y devuelve True si está permitido."""
        allowed, _ = self.consume(key)
        return allowed

    def consume(self, key: str) -> tuple[bool, float]:
        """Registra un hit. Devuelve (allowed, retry_after_seconds)."""
        with self._lock:
            now = self._clock()
            self._ops += 1
            self._cleanup_if_needed(now)

            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._start_window(key, now)
                return True, 0.0

            if window.count >= self.limit:
                return False, max(0.0, window.reset_at - now)

            window.count += 1
            return True, 0.0

    def get_remaining(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._clock() > window.reset_at:
                return self.limit
            return max(0, self.limit - window.count)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()

    # --------------------------- internos ---------------------------

    def _start_window(self, key: str, now: float) -> None:
        self._windows.pop(key, None)
        if len(self._windows) >= self.max_keys:
            # Eviction: la ventana más vieja (orden de inserción)
            self._windows.popitem(last=False)
        self._windows[key] = Window(count=1, reset_at=now + self.window_seconds)

    def _cleanup_if_needed(self, now: float) -> None:
        # Cada ~256 operaciones hacemos cleanup para amortizar costo
        if (self._ops & 0xFF) != 0:
            return

        # R: las ventanas se insertan en orden de reset_at; cortamos en la primera vigente.
        expired = []
        for k, w in self._windows.items():
            if now > w.reset_at:
                expired.append(k)
            else:
                break

        for k in expired:
            self._windows.pop(k, None)


def retry_after_header(seconds: float) -> int:
    """Segundos enteros (>= 1) para el header Retry-After."""
    return max(1, math.ceil(seconds))


def get_client_identifier(request) -> str:
    # 1) Proxy header (primer hop)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
        if ip:
            return f"ip:{ip}"

    # 2) IP directa
    client = request.client
    if client:
        return f"ip:{client.host}"

    return "ip:unknown"
