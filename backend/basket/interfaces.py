"""
Contrats des collaborateurs consommés par le panier.
- Entités (Product, Address, Customer): exposent un identifiant stable `id`,
  que le panier conserve indépendamment de la référence vivante.
- Stratégies (ProductProvider, DeliveryMethod, PaymentMethod): interfaces
  explicites; les implémentations de référence sont dans backend.basket.strategies.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from backend.basket.models import Basket, BasketElement


class Product(BaseModel):
    id: str
    type: str = "default"
    name: str = ""
    price: Decimal = Decimal("0")
    vat_rate: Decimal = Field(default=Decimal("0"), ge=0)
    enabled: bool = True
    recurrent_payment: bool = False


class Address(BaseModel):
    id: str
    name: str = ""
    address1: str = ""
    postcode: str = ""
    city: str = ""
    country_code: str = "FR"


class Customer(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class ProductProvider(ABC):
    """Stratégie de tarification/éligibilité pour un type de produit."""

    @abstractmethod
    def is_addable_to_basket(self, basket: "Basket", product: Product, *args: Any, **kwargs: Any) -> bool:
        ...

    @abstractmethod
    def calculate_price(self, basket: "Basket", element: "BasketElement") -> Decimal:
        """Retourne le prix unitaire HT de l'élément dans le contexte du panier."""


class DeliveryMethod(ABC):
    code: str = ""
    name: str = ""

    @abstractmethod
    def get_total(self, basket: "Basket", vat: bool = False) -> Decimal:
        ...

    @abstractmethod
    def get_vat_amount(self, basket: "Basket") -> Decimal:
        ...

    def is_address_required(self) -> bool:
        return True


class PaymentMethod(ABC):
    code: str = ""
    name: str = ""

    def is_available(self, basket: "Basket") -> bool:
        return True
