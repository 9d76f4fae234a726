import json
import pytest
from decimal import Decimal
from pydantic import ValidationError

from backend.basket import (
    Address,
    Basket,
    BasketElement,
    BasketSnapshot,
    Customer,
    FlatRateDelivery,
    OfflinePayment,
    SCHEMA_VERSION,
    default_pool,
)


@pytest.fixture
def full_basket(basket, product_a, product_b):
    basket.add_element(BasketElement(product_a, quantity=1))
    b = BasketElement(product_b, quantity=2, options={"seat": "12F"})
    basket.add_element(b)
    basket.add_element(BasketElement(product_a))
    basket.remove_element(basket.get_element_by_slot(2))
    basket.delivery_address = Address(id="addr-liv")
    basket.delivery_method = FlatRateDelivery("colissimo", "4.90")
    basket.payment_address = Address(id="addr-fac")
    basket.payment_method = OfflinePayment("virement")
    basket.customer = Customer(id="cust-1", email="client@example.com")
    basket.set_option("coupon", "JO2024")
    return basket


def test_setters_cache_codes_and_ids(full_basket):
    assert full_basket.delivery_address_id == "addr-liv"
    assert full_basket.delivery_method_code == "colissimo"
    assert full_basket.payment_address_id == "addr-fac"
    assert full_basket.payment_method_code == "virement"
    assert full_basket.customer_id == "cust-1"

    full_basket.delivery_method = None
    full_basket.customer = None
    assert full_basket.delivery_method_code is None
    assert full_basket.customer_id is None


def test_serialize_shape(full_basket):
    data = full_basket.serialize()

    assert set(data) == {
        "schemaVersion", "basketElements", "positions", "deliveryAddressId",
        "paymentAddressId", "paymentMethodCode", "cptElement",
        "deliveryMethodCode", "customerId", "options",
    }
    assert data["schemaVersion"] == SCHEMA_VERSION
    assert data["cptElement"] == 3
    assert data["positions"] == {"A": 0, "B": 1}
    assert data["basketElements"]["1"]["productId"] == "B"
    assert data["basketElements"]["1"]["price"] == "5.00"
    # JSON natif (pas de Decimal)
    json.dumps(data)


def test_round_trip_into_fresh_basket(full_basket):
    data = full_basket.serialize()

    restored = Basket(product_pool=default_pool())
    restored.reset(full=True)
    restored.unserialize(data)

    assert restored.serialize() == data
    assert [e.position for e in restored.elements] == [0, 1]
    assert restored.get_element_by_slot(1).options == {"seat": "12F"}
    assert restored.get_element_by_slot(1).price == Decimal("5.00")
    assert restored.next_slot == 3
    assert restored.customer_id == "cust-1"
    assert restored.get_option("coupon") == "JO2024"


def test_restore_does_not_rehydrate_references(full_basket, product_a, product_b):
    restored = Basket(product_pool=default_pool())
    restored.unserialize(json.dumps(full_basket.serialize()))

    assert restored.delivery_method is None
    assert restored.delivery_method_code == "colissimo"
    assert restored.payment_address is None
    assert restored.payment_address_id == "addr-fac"
    assert restored.customer is None
    assert all(e.product is None for e in restored.elements)
    assert not restored.is_valid(elements_only=True)

    assert restored.rehydrate_products({"A": product_a, "B": product_b}) == 2
    restored.build_prices()
    assert restored.is_valid(elements_only=True)
    assert restored.get_total() == Decimal("20.00")


def test_build_prices_drops_unrehydrated_elements(full_basket, product_b):
    restored = Basket(product_pool=default_pool())
    restored.unserialize(full_basket.serialize())
    restored.rehydrate_products({"B": product_b})
    restored.build_prices()

    assert [e.product_id for e in restored.elements] == ["B"]
    assert restored.positions == {"B": 1}


def test_absent_fields_keep_current_values(full_basket):
    full_basket.unserialize({"options": {"gift": True}})

    assert full_basket.options == {"gift": True}
    assert full_basket.count_elements() == 2
    assert full_basket.customer_id == "cust-1"
    assert full_basket.delivery_method_code == "colissimo"
    # la référence vivante est conservée quand le code ne change pas
    assert full_basket.delivery_method is not None


def test_restored_code_replaces_stale_reference(full_basket):
    full_basket.unserialize({"deliveryMethodCode": "chronopost", "customerId": "cust-2"})

    assert full_basket.delivery_method is None
    assert full_basket.delivery_method_code == "chronopost"
    assert full_basket.customer is None
    assert full_basket.customer_id == "cust-2"


def test_restore_keeps_counter_above_used_slots(basket):
    basket.unserialize({
        "basketElements": {"4": {"productId": "A", "quantity": 1}},
        "cptElement": 1,
    })
    assert basket.next_slot == 5
    assert basket.get_element_by_slot(4).position == 4


def test_unknown_schema_version_rejected(basket):
    with pytest.raises(ValidationError):
        basket.unserialize({"schemaVersion": SCHEMA_VERSION + 1})


def test_snapshot_model_accepts_field_names():
    snap = BasketSnapshot(customer_id="c", cpt_element=2)
    assert snap.to_dict()["customerId"] == "c"
    assert snap.to_dict()["basketElements"] is None


def test_partial_reset_keeps_elements_and_options(full_basket):
    full_basket.reset(full=False)

    assert full_basket.count_elements() == 2
    assert full_basket.get_option("coupon") == "JO2024"
    assert full_basket.customer_id == "cust-1"
    assert full_basket.delivery_method is None
    assert full_basket.delivery_method_code is None
    assert full_basket.delivery_address_id is None
    assert full_basket.payment_method_code is None
    assert full_basket.payment_address_id is None


def test_full_reset_clears_everything(full_basket):
    full_basket.reset()

    assert full_basket.is_empty()
    assert full_basket.positions == {}
    assert full_basket.next_slot == 0
    assert full_basket.customer is None
    assert full_basket.customer_id is None
    assert full_basket.options == {}
    assert full_basket.payment_method is None


def test_set_options_replaces_mapping_with_copy(full_basket):
    source = {"gift": True, "note": "merci"}
    full_basket.set_options(source)
    source["gift"] = False

    assert full_basket.options == {"gift": True, "note": "merci"}
    assert full_basket.get_option("coupon") is None
