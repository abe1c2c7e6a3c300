"""
Schemas para el recálculo de envío del checkout exprés de Klarna.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from paydemo.schemas.common import WidgetSchema


def coerce_amount(value: Any) -> int:
    """
    Normaliza un importe en unidades menores de moneda.
    
    Valores no numéricos, no finitos o negativos se convierten en 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return 0
    if not amount.is_finite() or amount < 0:
        return 0
    return int(amount)


class ShippingAddress(WidgetSchema):
    """
    Dirección de envío enviada por el widget.
    
    Solo se usa el país; el resto de campos se acepta sin validar.
    """
    
    model_config = ConfigDict(extra="allow")
    
    country: str | None = None
    
    @field_validator("country", mode="before")
    @classmethod
    def normalize_country(cls, v):
        """Descarta países que no sean texto."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()


class ShippingOption(WidgetSchema):
    """Método de envío seleccionable con su precio."""
    
    amount: int = 0
    description: str = ""
    display_name: str | None = None
    shipping_option_reference: str
    name: str | None = Field(None, description="Nombre interno (opcional)")
    
    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount(cls, v):
        """Nunca propaga importes negativos o no finitos."""
        return coerce_amount(v)


class LineItem(WidgetSchema):
    """Línea de pedido (producto o envío)."""
    
    name: str
    quantity: int = Field(1, ge=1)
    total_amount: int = 0
    
    @field_validator("total_amount", mode="before")
    @classmethod
    def convert_total_amount(cls, v):
        return coerce_amount(v)


# ============================================
# Request Schemas (entrada)
# ============================================

class CheckoutSessionCreateRequest(WidgetSchema):
    """Inicio de una sesión de checkout (montaje del botón)."""
    
    base_amount: int = 0
    product_name: str = "Omega Aqua Terra"
    quantity: int = Field(1, ge=1)
    
    @field_validator("base_amount", mode="before")
    @classmethod
    def convert_base_amount(cls, v):
        return coerce_amount(v)


class ShippingAddressChangeRequest(WidgetSchema):
    """Evento shippingaddresschange del widget."""
    
    shipping_address: ShippingAddress | None = None


class ShippingOptionSelectRequest(WidgetSchema):
    """Evento shippingoptionselect del widget."""
    
    shipping_option_reference: str | None = None


# ============================================
# Response Schemas (salida)
# ============================================

class CheckoutSessionResponse(WidgetSchema):
    """Sesión de checkout creada."""
    
    session_id: str
    amount: int
    line_items: list[LineItem]


class ShippingOptionsResponse(WidgetSchema):
    """Opciones de envío para la dirección recibida."""
    
    shipping_options: list[ShippingOption]


class ShippingSelectionResponse(WidgetSchema):
    """Importe total y líneas recalculadas tras elegir envío."""
    
    amount: int
    line_items: list[LineItem]
