"""Couche service de l'user story Panier.
Rôles:
- Charger le panier depuis la session (snapshot) et réhydrater les produits du catalogue.
- Ajouter / modifier / retirer des lignes en respectant la décision du provider (is_addable).
- Sauvegarder le snapshot en session et produire un résumé JSON (montants en chaînes, 2 décimales).
"""
from typing import Any, Dict, MutableMapping, Optional
import logging

from fastapi import HTTPException
from pydantic import ValidationError

from backend.basket import repository
from backend.basket.models import Basket, BasketElement
from backend.basket.pool import ProductPool, default_pool
from backend.utils.money import round_price

logger = logging.getLogger(__name__)

_pool = default_pool()


def get_product_pool() -> ProductPool:
    """Dépendance FastAPI: pool des providers (surchargeable via dependency_overrides)."""
    return _pool


def load_basket(session: MutableMapping[str, Any], pool: Optional[ProductPool] = None) -> Basket:
    basket = Basket(product_pool=pool if pool is not None else get_product_pool())
    data = repository.load_snapshot(session)
    if not data:
        return basket
    try:
        basket.unserialize(data)
    except ValidationError as e:
        logger.warning("basket.session invalid snapshot dropped: %s", e.error_count())
        repository.clear_snapshot(session)
        return basket
    ids = [element.product_id for element in basket.elements if element.product_id]
    basket.rehydrate_products(repository.get_products_map(ids))
    # Écarte les lignes dont le produit a disparu du catalogue
    basket.build_prices()
    return basket


def save_basket(session: MutableMapping[str, Any], basket: Basket) -> None:
    repository.save_snapshot(session, basket.serialize())


def add_product(basket: Basket, product_id: str, quantity: int = 1) -> BasketElement:
    """
    Ajoute un produit du catalogue.
    - 404 si le produit est inconnu, 400 si quantité <= 0 ou refus du provider.
    - Un produit déjà présent voit sa quantité augmentée (pas de doublon de ligne).
    """
    if quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantité invalide")
    product = repository.get_products_map([product_id]).get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    if not basket.is_addable(product, quantity=quantity):
        raise HTTPException(status_code=400, detail="Produit non disponible")

    if basket.has_product(product):
        element = basket.get_element(product)
        element.quantity += quantity
        basket.build_prices()
        return element

    element = BasketElement(product, quantity=quantity)
    basket.add_element(element)
    return element


def _element_at(basket: Basket, slot: int) -> BasketElement:
    element = basket.get_element_by_slot(slot)
    if element is None:
        raise HTTPException(status_code=404, detail="Ligne de panier introuvable")
    return element


def update_quantity(basket: Basket, slot: int, quantity: int) -> Optional[BasketElement]:
    """Quantité 0: la ligne est marquée à supprimer puis le panier est nettoyé (retourne None)."""
    element = _element_at(basket, slot)
    if quantity <= 0:
        element.delete = True
        basket.clean()
        return None
    element.quantity = quantity
    basket.build_prices()
    return element


def remove_slot(basket: Basket, slot: int) -> BasketElement:
    return basket.remove_element(_element_at(basket, slot))


def summarize(basket: Basket) -> Dict[str, Any]:
    return {
        "currency": basket.currency,
        "locale": basket.locale,
        "empty": basket.is_empty(),
        "valid": basket.is_valid(),
        "valid_elements": basket.is_valid(elements_only=True),
        "count": basket.count_elements(),
        "items": [
            {
                "slot": element.position,
                "product_id": element.product_id,
                "name": element.name,
                "quantity": element.quantity,
                "unit_price": str(round_price(element.get_unit_price())),
                "total": str(round_price(element.get_total())),
                "total_vat": str(round_price(element.get_total(vat=True))),
            }
            for element in basket.elements
        ],
        "delivery_price": str(round_price(basket.get_delivery_price())),
        "vat_amount": str(round_price(basket.get_vat_amount())),
        "total": str(basket.get_total()),
        "total_vat": str(basket.get_total(vat=True)),
        "recurrent_payment": basket.has_recurrent_payment(),
    }
