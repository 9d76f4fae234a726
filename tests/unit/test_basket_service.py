import pytest
from decimal import Decimal
from fastapi import HTTPException

from backend.basket import Product, ProductPool, BaseProductProvider, default_pool
from backend.basket import service
from backend.config import BASKET_SESSION_KEY


def test_load_basket_from_empty_session():
    basket = service.load_basket({}, default_pool())
    assert basket.is_empty()


def test_add_product_then_reload_from_session():
    session = {}
    basket = service.load_basket(session)
    service.add_product(basket, "A", 2)
    service.save_basket(session, basket)

    assert BASKET_SESSION_KEY in session
    reloaded = service.load_basket(session)
    assert reloaded.count_elements() == 1
    element = reloaded.get_element("A")
    assert element.product is not None
    assert element.quantity == 2
    assert reloaded.get_total() == Decimal("20.00")


def test_add_existing_product_increases_quantity():
    basket = service.load_basket({})
    service.add_product(basket, "B", 1)
    element = service.add_product(basket, "B", 3)

    assert basket.count_elements() == 1
    assert element.quantity == 4
    assert basket.get_total() == Decimal("20.00")


def test_add_unknown_product_404():
    basket = service.load_basket({})
    with pytest.raises(HTTPException) as exc:
        service.add_product(basket, "inconnu", 1)
    assert exc.value.status_code == 404


def test_add_refused_by_provider_400(catalog):
    catalog.register_product(Product(id="X", name="Épuisé", enabled=False))
    basket = service.load_basket({})
    with pytest.raises(HTTPException) as exc:
        service.add_product(basket, "X", 1)
    assert exc.value.status_code == 400
    assert basket.is_empty()


def test_add_invalid_quantity_400():
    basket = service.load_basket({})
    with pytest.raises(HTTPException) as exc:
        service.add_product(basket, "A", 0)
    assert exc.value.status_code == 400


def test_load_drops_products_removed_from_catalog(monkeypatch):
    session = {}
    basket = service.load_basket(session)
    service.add_product(basket, "A", 1)
    service.add_product(basket, "B", 1)
    service.save_basket(session, basket)

    monkeypatch.setattr(
        "backend.basket.service.repository.get_products_map",
        lambda ids: {"B": Product(id="B", price=Decimal("6.00"))},
    )
    reloaded = service.load_basket(session)

    assert [e.product_id for e in reloaded.elements] == ["B"]
    # prix recalculé depuis le produit courant
    assert reloaded.get_total() == Decimal("6.00")


def test_load_invalid_snapshot_starts_fresh():
    session = {BASKET_SESSION_KEY: {"schemaVersion": 999}}
    basket = service.load_basket(session)
    assert basket.is_empty()
    assert BASKET_SESSION_KEY not in session


def test_update_quantity_and_zero_removes():
    basket = service.load_basket({})
    element = service.add_product(basket, "A", 1)

    service.update_quantity(basket, element.position, 5)
    assert basket.get_total() == Decimal("50.00")

    assert service.update_quantity(basket, element.position, 0) is None
    assert basket.is_empty()


def test_remove_unknown_slot_404():
    basket = service.load_basket({})
    with pytest.raises(HTTPException) as exc:
        service.remove_slot(basket, 3)
    assert exc.value.status_code == 404


def test_summarize_amounts_are_strings():
    basket = service.load_basket({}, ProductPool({"default": BaseProductProvider()}))
    service.add_product(basket, "A", 1)
    service.add_product(basket, "B", 2)

    summary = service.summarize(basket)
    assert summary["total"] == "20.00"
    assert summary["total_vat"] == "23.00"
    assert summary["vat_amount"] == "3.00"
    assert summary["delivery_price"] == "0.00"
    assert summary["count"] == 2
    assert summary["valid_elements"] is True
    assert summary["valid"] is False
    assert [i["slot"] for i in summary["items"]] == [0, 1]
    assert summary["items"][1]["unit_price"] == "5.00"
