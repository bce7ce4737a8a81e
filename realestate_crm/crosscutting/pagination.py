# realestate_crm/crosscutting/pagination.py
"""
===============================================================================
MÓDULO: Utilidades de paginación (page / limit)
===============================================================================

Objetivo
--------
Paginación simple y consistente para endpoints listados:
- page (1-based) + limit
- metadata {page, limit, total, pages}

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  PageRequest + PaginationMeta

Responsabilidades:
  - Normalizar page/limit (clamp)
  - Calcular offset y cantidad de páginas
===============================================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    page: int = Field(description="Página actual (1-based)")
    limit: int = Field(description="Items por página")
    total: int = Field(description="Total de items que matchean el filtro")
    pages: int = Field(description="Cantidad total de páginas")


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @classmethod
    def build(cls, page: int, limit: int, *, max_limit: int = 100) -> "PageRequest":
        return cls(page=max(1, int(page)), limit=min(max(1, int(limit)), max_limit))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PaginationMeta:
        return PaginationMeta(
            page=self.page,
            limit=self.limit,
            total=total,
            pages=math.ceil(total / self.limit) if total else 0,
        )
