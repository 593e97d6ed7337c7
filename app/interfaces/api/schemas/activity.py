"""Pydantic schemas for activity feed endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityFeedItemRead(BaseModel):
    ulid: str = Field(..., description="Identificador público de la actividad")
    activity_type: str = Field(..., description="Tipo de actividad registrada")
    feed_scope: str = Field(..., description="Feed en el que se publicó la actividad")
    group_id: int | None = Field(default=None, description="Grupo asociado")
    event_id: int | None = Field(default=None, description="Evento asociado")
    actor_id: int | None = Field(default=None, description="Primer actor registrado")
    actor_ids: list[int] = Field(
        default_factory=list,
        description="Actores agregados en orden de aparición",
    )
    visibility: str = Field(..., description="Nivel mínimo de acceso requerido")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Información adicional para mostrar la actividad",
    )
    aggregation_strategy: str = Field(..., description="Estrategia de agregación")
    aggregated_count: int = Field(..., description="Número de actores agregados")
    created_at: datetime = Field(..., description="Momento en que se abrió el registro")
    updated_at: datetime = Field(..., description="Última vez que se agregó un actor")
    display_name: str | None = Field(
        default=None, description="Nombre a mostrar para el actor"
    )

    model_config = ConfigDict(from_attributes=True)


__all__ = ["ActivityFeedItemRead"]
