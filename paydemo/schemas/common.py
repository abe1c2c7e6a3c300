"""
Schemas comunes y base para reutilización.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# TypeVar para respuestas genéricas
T = TypeVar("T")


class BaseSchema(BaseModel):
    """Schema base con configuración común."""
    
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class WidgetSchema(BaseSchema):
    """Schema para payloads del widget de Klarna (camelCase en el cable)."""
    
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class APIResponse(BaseModel, Generic[T]):
    """Respuesta estándar de la API."""
    
    success: bool = True
    message: str | None = None
    data: T | None = None
    errors: list[str] | None = None

