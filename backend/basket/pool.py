"""
Registre des providers produit, indexé par type de produit.
Injecté dans le Basket au constructeur (pas de résolution dynamique par réflexion).
"""
from typing import Dict, Optional
import logging

from backend.basket.exceptions import ProviderNotFoundError
from backend.basket.interfaces import Product, ProductProvider

logger = logging.getLogger(__name__)


class ProductPool:
    def __init__(self, providers: Optional[Dict[str, ProductProvider]] = None):
        self._providers: Dict[str, ProductProvider] = dict(providers or {})

    def add_provider(self, product_type: str, provider: ProductProvider) -> None:
        if product_type in self._providers:
            logger.info("basket.pool provider replaced type=%s", product_type)
        self._providers[product_type] = provider

    def has_provider(self, product_type: str) -> bool:
        return product_type in self._providers

    def get_provider(self, product: Product) -> ProductProvider:
        try:
            return self._providers[product.type]
        except KeyError:
            raise ProviderNotFoundError(product.type) from None


def default_pool() -> ProductPool:
    """Pool minimal: un BaseProductProvider pour le type 'default'."""
    from backend.basket.strategies import BaseProductProvider
    return ProductPool({"default": BaseProductProvider()})
