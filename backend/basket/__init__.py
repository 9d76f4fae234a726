"""
Module 'basket' (feature-first): point d'entrée public.
Réunit l'agrégat panier, ses contrats de collaborateurs, le pool de providers et le snapshot.
"""
from backend.basket.exceptions import (
    BasketError,
    ElementNotFoundError,
    InvalidBasketStateError,
    ProviderNotFoundError,
)
from backend.basket.interfaces import (
    Address,
    Customer,
    DeliveryMethod,
    PaymentMethod,
    Product,
    ProductProvider,
)
from backend.basket.models import Basket, BasketElement, CachedRef
from backend.basket.pool import ProductPool, default_pool
from backend.basket.snapshot import SCHEMA_VERSION, BasketElementSnapshot, BasketSnapshot
from backend.basket.strategies import (
    BaseProductProvider,
    FlatRateDelivery,
    FreeDelivery,
    OfflinePayment,
)

__all__ = [
    # Agrégat
    "Basket", "BasketElement", "CachedRef",
    # Contrats
    "Product", "Address", "Customer", "ProductProvider", "DeliveryMethod", "PaymentMethod",
    # Stratégies de référence
    "BaseProductProvider", "FlatRateDelivery", "FreeDelivery", "OfflinePayment",
    # Pool
    "ProductPool", "default_pool",
    # Snapshot
    "BasketSnapshot", "BasketElementSnapshot", "SCHEMA_VERSION",
    # Erreurs
    "BasketError", "ElementNotFoundError", "InvalidBasketStateError", "ProviderNotFoundError",
]
