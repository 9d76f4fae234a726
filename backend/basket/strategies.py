"""
Implémentations de référence des stratégies du panier.
Suffisantes pour un catalogue simple; les règles métier spécifiques
(stock, éligibilité, lots) passent par des providers dédiés enregistrés dans le ProductPool.
"""
from decimal import Decimal
from typing import Any

from backend.basket.interfaces import DeliveryMethod, PaymentMethod, Product, ProductProvider
from backend.utils.money import ZERO, to_decimal, vat_of


class BaseProductProvider(ProductProvider):
    """Prix = prix unitaire du produit; ajout autorisé si le produit est actif."""

    def is_addable_to_basket(self, basket, product: Product, *args: Any, **kwargs: Any) -> bool:
        return bool(product.enabled)

    def calculate_price(self, basket, element) -> Decimal:
        return to_decimal(element.product.price)


class FlatRateDelivery(DeliveryMethod):
    def __init__(self, code: str, price: Any, vat_rate: Any = 0, name: str = "", address_required: bool = True):
        self.code = code
        self.name = name or code
        self.price = to_decimal(price)
        self.vat_rate = to_decimal(vat_rate)
        self.address_required = address_required

    def get_total(self, basket, vat: bool = False) -> Decimal:
        if vat:
            return self.price + self.get_vat_amount(basket)
        return self.price

    def get_vat_amount(self, basket) -> Decimal:
        return vat_of(self.price, self.vat_rate)

    def is_address_required(self) -> bool:
        return self.address_required


class FreeDelivery(FlatRateDelivery):
    """Retrait sur place / billets dématérialisés: ni coût ni adresse."""

    def __init__(self, code: str = "free", name: str = "Livraison gratuite"):
        super().__init__(code, ZERO, name=name, address_required=False)


class OfflinePayment(PaymentMethod):
    def __init__(self, code: str = "offline", name: str = "Paiement hors ligne"):
        self.code = code
        self.name = name
