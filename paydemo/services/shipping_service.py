"""
Servicio de recálculo de envío para el checkout exprés de Klarna.

El widget de Klarna invoca dos callbacks durante el checkout:
shippingaddresschange (hay que devolver las opciones de envío para la
dirección) y shippingoptionselect (hay que devolver el total y las líneas
del pedido con el envío elegido). Este módulo implementa ambos sobre un
CheckoutState explícito por sesión.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog

from paydemo.schemas.shipping import (
    LineItem,
    ShippingAddress,
    ShippingOption,
    coerce_amount,
)


logger = structlog.get_logger(__name__)

# País sin recargo de envío
DOMESTIC_COUNTRY = "DE"

# Recargo fijo para envíos fuera de DOMESTIC_COUNTRY (céntimos)
INTERNATIONAL_SURCHARGE = 300

DEFAULT_SHIPPING_LINE_NAME = "Shipping"

# Catálogo base; nunca se devuelve ni se modifica directamente
BASE_SHIPPING_OPTIONS: tuple[ShippingOption, ...] = (
    ShippingOption(
        amount=499,
        description="Delivery within 3-5 business days.",
        display_name="Standard shipping",
        shipping_option_reference="standard-shipping",
    ),
    ShippingOption(
        amount=1299,
        description="Delivery within 1-2 business days.",
        display_name="Express shipping",
        shipping_option_reference="express-shipping",
    ),
)


@dataclass
class CheckoutState:
    """
    Estado de una sesión de checkout.
    
    Se crea al montar el botón de pago, lo modifican los eventos del widget
    y se descarta al terminar la sesión. selected_shipping_option, si no es
    None, siempre es una de las entradas de shipping_options.
    """
    
    base_amount: int = 0
    product_line_item: LineItem | None = None
    shipping_options: list[ShippingOption] = field(default_factory=list)
    selected_shipping_option: ShippingOption | None = None


@dataclass
class ShippingSelection:
    """Total recalculado y líneas del pedido para el widget."""
    
    amount: int
    line_items: list[LineItem]


def start_checkout(
    base_amount: Any,
    product_name: str,
    quantity: int = 1,
) -> CheckoutState:
    """Crea el estado inicial de una sesión (montaje del botón)."""
    amount = coerce_amount(base_amount)
    return CheckoutState(
        base_amount=amount,
        product_line_item=LineItem(
            name=product_name,
            quantity=max(quantity, 1),
            total_amount=amount,
        ),
    )


def shipping_amount(option: ShippingOption | Mapping[str, Any] | None) -> int:
    """Importe de envío de una opción; 0 si falta o no es válido."""
    if option is None:
        return 0
    if isinstance(option, ShippingOption):
        return coerce_amount(option.amount)
    return coerce_amount(option.get("amount"))


def _country_of(shipping_address: ShippingAddress | Mapping[str, Any] | None) -> str | None:
    if shipping_address is None:
        return None
    if isinstance(shipping_address, ShippingAddress):
        return shipping_address.country.upper() if shipping_address.country else None
    
    country = shipping_address.get("country") if isinstance(shipping_address, Mapping) else None
    if isinstance(country, str) and country.strip():
        return country.strip().upper()
    return None


def resolve_shipping_options(
    shipping_address: ShippingAddress | Mapping[str, Any] | None,
) -> list[ShippingOption]:
    """
    Resuelve las opciones de envío para una dirección.
    
    Fuera de Alemania se suma un recargo fijo a cada opción y se añade el
    país a la descripción. Sin país (o con país DE) se devuelve el catálogo
    base. Siempre se devuelven copias nuevas.
    """
    options = [option.model_copy() for option in BASE_SHIPPING_OPTIONS]
    country = _country_of(shipping_address)
    
    if country and country != DOMESTIC_COUNTRY:
        return [
            option.model_copy(
                update={
                    "amount": option.amount + INTERNATIONAL_SURCHARGE,
                    "description": f"{option.description} ({country})",
                }
            )
            for option in options
        ]
    
    return options


def find_shipping_option(
    options: list[ShippingOption],
    reference: str | None,
) -> ShippingOption | None:
    """Busca una opción por shippingOptionReference."""
    if not reference:
        return None
    
    for option in options:
        if option.shipping_option_reference == reference:
            return option
    return None


class ShippingService:
    """
    Callbacks de envío del widget de Klarna.
    
    Las llamadas son síncronas: el widget no invoca callbacks concurrentes
    para una misma sesión.
    """
    
    def on_shipping_address_change(
        self,
        state: CheckoutState,
        shipping_address: ShippingAddress | Mapping[str, Any] | None,
    ) -> list[ShippingOption]:
        """
        Sustituye las opciones de envío de la sesión.
        
        Si había una opción seleccionada y su referencia sigue existiendo,
        queda seleccionada la versión recalculada; si no, se limpia.
        """
        options = resolve_shipping_options(shipping_address)
        previous = state.selected_shipping_option
        
        state.shipping_options = options
        state.selected_shipping_option = None
        
        if previous is not None:
            state.selected_shipping_option = find_shipping_option(
                options, previous.shipping_option_reference
            )
        
        logger.info(
            "Shipping options resolved",
            country=_country_of(shipping_address),
            options=len(options),
            kept_selection=state.selected_shipping_option is not None,
        )
        
        return [option.model_copy() for option in options]
    
    def on_shipping_option_selected(
        self,
        state: CheckoutState,
        reference: str | None,
    ) -> ShippingSelection:
        """
        Recalcula total y líneas para la opción elegida.
        
        Una referencia desconocida no es un error: limpia la selección y
        devuelve solo el importe base y la línea del producto.
        """
        selected = find_shipping_option(state.shipping_options, reference)
        state.selected_shipping_option = selected
        
        if selected is None:
            logger.info("Shipping option not found, selection cleared", reference=reference)
        
        return ShippingSelection(
            amount=self.calculate_total_amount(state, selected),
            line_items=self.build_line_items(state, selected),
        )
    
    def calculate_total_amount(
        self,
        state: CheckoutState,
        option: ShippingOption | None,
    ) -> int:
        return state.base_amount + shipping_amount(option)
    
    def build_line_items(
        self,
        state: CheckoutState,
        option: ShippingOption | None,
    ) -> list[LineItem]:
        """Línea del producto seguida, si hay envío, de la línea de envío."""
        line_items: list[LineItem] = []
        
        if state.product_line_item is not None:
            line_items.append(state.product_line_item.model_copy())
        
        if option is not None:
            line_items.append(
                LineItem(
                    name=option.display_name or option.name or DEFAULT_SHIPPING_LINE_NAME,
                    quantity=1,
                    total_amount=shipping_amount(option),
                )
            )
        
        return line_items
