"""
Accès données du panier.
- Catalogue produits en mémoire (register_product / get_products_map), patchable par les tests.
- Stockage du snapshot du panier dans la session cookie (clé BASKET_SESSION_KEY).
"""
from typing import Any, Dict, Iterable, List, MutableMapping, Optional
import logging

from backend.config import BASKET_SESSION_KEY
from backend.basket.interfaces import Product

logger = logging.getLogger(__name__)

_CATALOG: Dict[str, Product] = {}


def register_product(product: Product) -> None:
    _CATALOG[product.id] = product


def clear_products() -> None:
    _CATALOG.clear()


def fetch_products_by_ids(ids: Iterable[str]) -> List[Product]:
    return [_CATALOG[i] for i in ids if i in _CATALOG]


def get_products_map(ids: Iterable[str]) -> Dict[str, Product]:
    return {p.id: p for p in fetch_products_by_ids(list(ids))}


def load_snapshot(session: MutableMapping[str, Any]) -> Optional[Dict[str, Any]]:
    data = session.get(BASKET_SESSION_KEY)
    return data if isinstance(data, dict) else None


def save_snapshot(session: MutableMapping[str, Any], data: Dict[str, Any]) -> None:
    session[BASKET_SESSION_KEY] = data


def clear_snapshot(session: MutableMapping[str, Any]) -> None:
    session.pop(BASKET_SESSION_KEY, None)
