"""
Tests para el recálculo de envío del checkout exprés.
"""

import pytest

from paydemo.schemas.shipping import LineItem, ShippingAddress, ShippingOption
from paydemo.services.shipping_service import (
    BASE_SHIPPING_OPTIONS,
    CheckoutState,
    ShippingService,
    find_shipping_option,
    resolve_shipping_options,
    shipping_amount,
    start_checkout,
)
from paydemo.services.checkout_sessions import CheckoutSessionStore
from paydemo.utils.exceptions import CheckoutSessionNotFoundError


BASE_AMOUNT = 15900


class TestResolveShippingOptions:
    """Tests para resolve_shipping_options."""
    
    def test_domestic_country_has_base_prices(self):
        """Test DE devuelve el catálogo base."""
        options = resolve_shipping_options({"country": "DE"})
        
        assert [o.amount for o in options] == [499, 1299]
        assert [o.shipping_option_reference for o in options] == [
            "standard-shipping",
            "express-shipping",
        ]
        assert options[0].description == "Delivery within 3-5 business days."
    
    def test_foreign_country_is_surcharged(self):
        """Test país extranjero (sin distinguir mayúsculas) lleva recargo."""
        options = resolve_shipping_options({"country": "fr"})
        
        assert [o.amount for o in options] == [799, 1599]
        assert all(o.description.endswith(" (FR)") for o in options)
        assert [o.display_name for o in options] == ["Standard shipping", "Express shipping"]
    
    def test_lowercase_domestic_country(self):
        options = resolve_shipping_options({"country": "de"})
        
        assert [o.amount for o in options] == [499, 1299]
    
    def test_country_whitespace_is_trimmed(self):
        """Test el país se recorta antes de compararlo con DE."""
        assert [o.amount for o in resolve_shipping_options({"country": " de "})] == [499, 1299]
        
        options = resolve_shipping_options({"country": " fr"})
        
        assert [o.amount for o in options] == [799, 1599]
        assert options[0].description.endswith(" (FR)")
    
    def test_no_address_behaves_like_domestic(self):
        """Test sin dirección no hay recargo."""
        assert resolve_shipping_options(None) == resolve_shipping_options({"country": "DE"})
    
    @pytest.mark.parametrize("address", [{}, {"country": None}, {"country": 49}, {"country": "  "}])
    def test_malformed_country_is_ignored(self, address):
        """Test país ausente o no textual se trata como sin recargo."""
        options = resolve_shipping_options(address)
        
        assert [o.amount for o in options] == [499, 1299]
    
    def test_accepts_shipping_address_schema(self):
        address = ShippingAddress.model_validate({"country": "se", "postalCode": "11122"})
        
        options = resolve_shipping_options(address)
        
        assert [o.amount for o in options] == [799, 1599]
        assert options[1].description.endswith(" (SE)")
    
    def test_returns_fresh_copies(self):
        """Test modificar el resultado no altera el catálogo base."""
        options = resolve_shipping_options({"country": "DE"})
        options[0].amount = 1
        options.append(options[0])
        
        assert BASE_SHIPPING_OPTIONS[0].amount == 499
        assert len(resolve_shipping_options(None)) == 2
        assert resolve_shipping_options(None)[0].amount == 499


class TestShippingAmount:
    """Tests para importes de envío inválidos."""
    
    def test_none_option(self):
        assert shipping_amount(None) == 0
    
    def test_negative_amount_is_coerced(self):
        option = ShippingOption(amount=-100, shipping_option_reference="x")
        
        assert option.amount == 0
        assert shipping_amount(option) == 0
    
    def test_non_finite_amount_in_mapping(self):
        assert shipping_amount({"amount": float("nan")}) == 0
        assert shipping_amount({"amount": "not-a-number"}) == 0


class TestShippingService:
    """Tests para los callbacks del widget."""
    
    @pytest.fixture
    def service(self):
        return ShippingService()
    
    @pytest.fixture
    def state(self):
        return start_checkout(BASE_AMOUNT, "Omega Aqua Terra")
    
    def test_start_checkout(self, state):
        """Test estado inicial de la sesión."""
        assert state.base_amount == BASE_AMOUNT
        assert state.product_line_item == LineItem(
            name="Omega Aqua Terra", quantity=1, total_amount=BASE_AMOUNT
        )
        assert state.shipping_options == []
        assert state.selected_shipping_option is None
    
    def test_start_checkout_invalid_price(self):
        assert start_checkout("not-a-price", "Watch").base_amount == 0
    
    def test_select_standard_shipping(self, service, state):
        """Test selección de envío estándar en DE."""
        service.on_shipping_address_change(state, {"country": "DE"})
        
        result = service.on_shipping_option_selected(state, "standard-shipping")
        
        assert result.amount == 16399
        assert len(result.line_items) == 2
        assert result.line_items[0].name == "Omega Aqua Terra"
        assert result.line_items[1] == LineItem(
            name="Standard shipping", quantity=1, total_amount=499
        )
        assert state.selected_shipping_option.shipping_option_reference == "standard-shipping"
    
    def test_select_unknown_reference(self, service, state):
        """Test referencia desconocida devuelve solo el producto."""
        service.on_shipping_address_change(state, {"country": "DE"})
        service.on_shipping_option_selected(state, "standard-shipping")
        
        result = service.on_shipping_option_selected(state, "nonexistent")
        
        assert result.amount == BASE_AMOUNT
        assert len(result.line_items) == 1
        assert state.selected_shipping_option is None
    
    def test_select_before_any_address(self, service, state):
        result = service.on_shipping_option_selected(state, "express-shipping")
        
        assert result.amount == BASE_AMOUNT
        assert [item.name for item in result.line_items] == ["Omega Aqua Terra"]
    
    def test_selection_is_idempotent(self, service, state):
        """Test misma referencia y mismo estado, mismo resultado."""
        service.on_shipping_address_change(state, {"country": "FI"})
        
        first = service.on_shipping_option_selected(state, "express-shipping")
        second = service.on_shipping_option_selected(state, "express-shipping")
        
        assert first == second
        assert first.amount == BASE_AMOUNT + 1599
    
    def test_reselect_after_country_change_uses_new_price(self, service, state):
        """Test tras cambiar de país se usa el importe recalculado."""
        service.on_shipping_address_change(state, {"country": "DE"})
        assert service.on_shipping_option_selected(state, "standard-shipping").amount == 16399
        
        service.on_shipping_address_change(state, {"country": "NL"})
        result = service.on_shipping_option_selected(state, "standard-shipping")
        
        assert result.amount == BASE_AMOUNT + 799
        assert result.line_items[1].total_amount == 799
    
    def test_address_change_keeps_selection_by_new_value(self, service, state):
        """Test la selección previa se reemplaza por la opción nueva."""
        service.on_shipping_address_change(state, {"country": "DE"})
        service.on_shipping_option_selected(state, "express-shipping")
        
        service.on_shipping_address_change(state, {"country": "AT"})
        
        selected = state.selected_shipping_option
        assert selected is not None
        assert selected.amount == 1599
        assert any(selected is option for option in state.shipping_options)
    
    def test_address_change_clears_unknown_selection(self, service, state):
        """Test una selección que ya no existe se limpia."""
        state.shipping_options = [
            ShippingOption(amount=0, shipping_option_reference="pickup", display_name="Pickup")
        ]
        state.selected_shipping_option = state.shipping_options[0]
        
        service.on_shipping_address_change(state, None)
        
        assert state.selected_shipping_option is None
        assert len(state.shipping_options) == 2
    
    def test_address_change_returns_copies(self, service, state):
        options = service.on_shipping_address_change(state, {"country": "DE"})
        options[0].amount = 1
        
        assert state.shipping_options[0].amount == 499
    
    def test_shipping_line_name_fallbacks(self, service):
        """Test nombre de la línea de envío: displayName, name, 'Shipping'."""
        state = CheckoutState(base_amount=100)
        named = ShippingOption(amount=10, shipping_option_reference="a", name="Internal")
        anonymous = ShippingOption(amount=10, shipping_option_reference="b", display_name="")
        
        assert service.build_line_items(state, named)[0].name == "Internal"
        assert service.build_line_items(state, anonymous)[0].name == "Shipping"
    
    def test_find_shipping_option_empty_reference(self):
        options = resolve_shipping_options(None)
        
        assert find_shipping_option(options, None) is None
        assert find_shipping_option(options, "") is None


class TestCheckoutSessionStore:
    """Tests para la caducidad y el límite del almacén de sesiones."""
    
    @pytest.fixture
    def clock(self):
        class FakeClock:
            now = 0.0
        
            def __call__(self) -> float:
                return self.now
        
        return FakeClock()
    
    def test_session_expires_after_ttl(self, clock):
        store = CheckoutSessionStore(ttl_seconds=60, clock=clock)
        session_id = store.create(start_checkout(BASE_AMOUNT, "Omega Aqua Terra"))
        
        clock.now = 60.0
        
        with pytest.raises(CheckoutSessionNotFoundError):
            store.get(session_id)
        assert len(store) == 0
    
    def test_get_renews_expiry(self, clock):
        """Test cada uso de la sesión renueva su caducidad."""
        store = CheckoutSessionStore(ttl_seconds=60, clock=clock)
        session_id = store.create(start_checkout(BASE_AMOUNT, "Omega Aqua Terra"))
        
        clock.now = 50.0
        store.get(session_id)
        clock.now = 100.0
        
        assert store.get(session_id).base_amount == BASE_AMOUNT
    
    def test_oldest_session_is_evicted(self, clock):
        """Test al llegar al máximo se expulsa la sesión usada hace más tiempo."""
        store = CheckoutSessionStore(max_sessions=2, clock=clock)
        first = store.create(start_checkout(100, "A"))
        second = store.create(start_checkout(200, "B"))
        
        store.get(first)
        third = store.create(start_checkout(300, "C"))
        
        assert len(store) == 2
        assert store.get(first).base_amount == 100
        assert store.get(third).base_amount == 300
        with pytest.raises(CheckoutSessionNotFoundError):
            store.get(second)
