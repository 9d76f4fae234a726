# module backend.basket.models
"""
Agrégat Panier (Basket) et ligne de panier (BasketElement).

- Les éléments sont rangés par « slot » entier, attribué de façon croissante
  et jamais réutilisé pendant la vie du panier (des trous apparaissent après retrait).
- positions: index product_id -> slot pour tester/retrouver un produit sans parcours.
- Les prix des éléments ne sont recalculés que par build_prices(), via le
  provider du type de produit (ProductPool injecté au constructeur).
- Les sélections de checkout (adresses, méthodes, client) sont des CachedRef:
  la référence vivante n'est pas restaurée depuis un snapshot, seul l'identifiant l'est.

Non thread-safe: un panier appartient à une session/requête.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import logging

from backend.config import BASKET_CURRENCY, BASKET_LOCALE
from backend.basket.exceptions import ElementNotFoundError, InvalidBasketStateError
from backend.basket.interfaces import Address, Customer, DeliveryMethod, PaymentMethod, Product
from backend.basket.pool import ProductPool
from backend.basket.snapshot import RESTORABLE_FIELDS, BasketElementSnapshot, BasketSnapshot
from backend.utils.money import ZERO, round_price, to_decimal, vat_of

logger = logging.getLogger(__name__)


class CachedRef:
    """Référence vivante (nullable) + identifiant durable (id ou code)."""

    __slots__ = ("ref", "key")

    def __init__(self, ref: Any = None, key: Optional[str] = None):
        self.ref = ref
        self.key = key

    @classmethod
    def of(cls, ref: Any, key_attr: str = "id") -> "CachedRef":
        if ref is None:
            return cls()
        return cls(ref, getattr(ref, key_attr))

    @property
    def is_resolved(self) -> bool:
        return self.ref is not None

    def with_key(self, key: Optional[str], key_attr: str = "id") -> "CachedRef":
        # Garde la référence seulement si elle correspond encore à l'identifiant
        if self.ref is not None and getattr(self.ref, key_attr, None) == key:
            return CachedRef(self.ref, key)
        return CachedRef(None, key)

    def __repr__(self) -> str:
        return f"CachedRef(key={self.key!r}, resolved={self.is_resolved})"


class BasketElement:
    def __init__(
        self,
        product: Optional[Product] = None,
        quantity: int = 1,
        name: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        self._product: Optional[Product] = None
        self.product_id: Optional[str] = None
        self.product_type = "default"
        self.name = name or ""
        self.quantity = int(quantity)
        self.price: Decimal = ZERO  # prix unitaire HT, fixé par build_prices
        self.vat_rate: Decimal = ZERO
        self.position: Optional[int] = None
        self.delete = False
        self.options: Dict[str, Any] = dict(options or {})
        if product is not None:
            self.set_product(product)

    @property
    def product(self) -> Optional[Product]:
        return self._product

    def set_product(self, product: Product) -> None:
        self._product = product
        self.product_id = product.id
        self.product_type = product.type
        self.vat_rate = to_decimal(product.vat_rate)
        if not self.name:
            self.name = product.name

    def is_valid(self) -> bool:
        return self._product is not None and bool(self._product.enabled) and self.quantity > 0

    def is_recurrent_payment(self) -> bool:
        return self._product is not None and self._product.recurrent_payment is True

    def get_unit_price(self, vat: bool = False) -> Decimal:
        if vat:
            return self.price + vat_of(self.price, self.vat_rate)
        return self.price

    def get_total(self, vat: bool = False) -> Decimal:
        return self.get_unit_price(vat) * self.quantity

    def get_vat_amount(self) -> Decimal:
        return vat_of(self.price, self.vat_rate) * self.quantity

    def to_snapshot(self) -> BasketElementSnapshot:
        return BasketElementSnapshot(
            product_id=self.product_id,
            product_type=self.product_type,
            name=self.name,
            quantity=self.quantity,
            price=self.price,
            vat_rate=self.vat_rate,
            position=self.position,
            delete=self.delete,
            options=dict(self.options),
        )

    @classmethod
    def from_snapshot(cls, data: BasketElementSnapshot) -> "BasketElement":
        element = cls(name=data.name, quantity=data.quantity, options=data.options)
        element.product_id = data.product_id
        element.product_type = data.product_type
        element.price = data.price
        element.vat_rate = data.vat_rate
        element.position = data.position
        element.delete = data.delete
        return element

    def __repr__(self) -> str:
        return f"BasketElement(slot={self.position}, product_id={self.product_id!r}, quantity={self.quantity})"


def _product_key(product: Union[Product, str]) -> str:
    return product if isinstance(product, str) else product.id


class Basket:
    def __init__(
        self,
        product_pool: Optional[ProductPool] = None,
        locale: str = BASKET_LOCALE,
        currency: str = BASKET_CURRENCY,
    ):
        self._product_pool = product_pool
        self._elements: Dict[int, BasketElement] = {}
        self._positions: Dict[str, int] = {}
        self._cpt_element = 0
        self._in_build = False
        self._delivery_address = CachedRef()
        self._delivery_method = CachedRef()
        self._payment_address = CachedRef()
        self._payment_method = CachedRef()
        self._customer = CachedRef()
        self._options: Dict[str, Any] = {}
        self.locale = locale
        self.currency = currency

    # --- Pool ---
    @property
    def product_pool(self) -> Optional[ProductPool]:
        return self._product_pool

    def set_product_pool(self, pool: ProductPool) -> None:
        self._product_pool = pool

    def _require_pool(self) -> ProductPool:
        if self._product_pool is None:
            raise InvalidBasketStateError("Aucun ProductPool configuré sur le panier")
        return self._product_pool

    # --- Éléments ---
    @property
    def elements(self) -> List[BasketElement]:
        return [self._elements[slot] for slot in sorted(self._elements)]

    @property
    def positions(self) -> Dict[str, int]:
        return dict(self._positions)

    @property
    def next_slot(self) -> int:
        return self._cpt_element

    def count_elements(self) -> int:
        return len(self._elements)

    def has_elements(self) -> bool:
        return self.count_elements() > 0

    def is_empty(self) -> bool:
        return self.count_elements() == 0

    def set_elements(self, elements: Iterable[BasketElement]) -> None:
        """Remplace tous les éléments (nouveaux slots à partir de 0) puis recalcule les prix."""
        self._elements = {}
        self._positions = {}
        self._cpt_element = 0
        for element in elements:
            self._attach(element)
        self.build_prices()

    def add_element(self, element: BasketElement) -> None:
        slot = self._attach(element)
        logger.debug("basket.add slot=%s product_id=%s quantity=%s", slot, element.product_id, element.quantity)
        self.build_prices()

    def remove_element(self, element: BasketElement) -> BasketElement:
        self._detach(element)
        logger.debug("basket.remove slot=%s product_id=%s", element.position, element.product_id)
        if not self._in_build:
            self.build_prices()
        return element

    remove_basket_element = remove_element

    def _attach(self, element: BasketElement) -> int:
        slot = self._cpt_element
        element.position = slot
        self._elements[slot] = element
        if element.product_id is not None:
            self._positions[element.product_id] = slot
        self._cpt_element += 1
        return slot

    def _detach(self, element: BasketElement) -> None:
        # Le slot vient uniquement de l'élément passé en paramètre
        slot = element.position
        if slot is None or self._elements.get(slot) is not element:
            raise InvalidBasketStateError(
                f"L'élément {element!r} n'appartient pas (ou plus) à ce panier"
            )
        del self._elements[slot]
        product_id = element.product_id
        if product_id is not None and self._positions.get(product_id) == slot:
            del self._positions[product_id]
            # Un doublon du même produit reprend l'entrée d'index
            for other_slot in sorted(self._elements, reverse=True):
                if self._elements[other_slot].product_id == product_id:
                    self._positions[product_id] = other_slot
                    break

    def get_element(self, product: Union[Product, str]) -> BasketElement:
        if not self.has_product(product):
            raise ElementNotFoundError(_product_key(product))
        return self._elements[self._positions[_product_key(product)]]

    def get_element_by_slot(self, slot: int) -> Optional[BasketElement]:
        return self._elements.get(slot)

    def has_product(self, product: Union[Product, str]) -> bool:
        key = _product_key(product)
        if key not in self._positions:
            return False
        slot = self._positions[key]
        return any(element.position == slot for element in self._elements.values())

    def clean(self) -> None:
        """Retire tous les éléments marqués delete=True."""
        flagged = [element for element in self.elements if element.delete]
        for element in flagged:
            self._detach(element)
        if flagged:
            logger.debug("basket.clean removed=%s", len(flagged))
            self.build_prices()

    def rehydrate_products(self, products_by_id: Mapping[str, Product]) -> int:
        """
        Rattache les produits vivants aux éléments (après restauration d'un snapshot).
        Les éléments sans produit trouvé seront écartés au prochain build_prices().
        Retourne le nombre d'éléments rattachés.
        """
        attached = 0
        for element in self._elements.values():
            product = products_by_id.get(element.product_id) if element.product_id else None
            if product is not None:
                element.set_product(product)
                attached += 1
        return attached

    # --- Prix ---
    def build_prices(self) -> None:
        """
        Recalcule le prix unitaire de chaque élément via le provider de son produit.
        Les éléments orphelins (produit non résolu) sont retirés après le parcours,
        sans déclencher de second recalcul.
        """
        orphans: List[BasketElement] = []
        was_building = self._in_build
        self._in_build = True
        try:
            for element in self.elements:
                if element.position not in self._elements:
                    continue
                if element.product is None:
                    orphans.append(element)
                    continue
                provider = self._require_pool().get_provider(element.product)
                element.price = to_decimal(provider.calculate_price(self, element))
            for element in orphans:
                if self._elements.get(element.position) is element:
                    logger.warning("basket.orphan dropped slot=%s product_id=%s", element.position, element.product_id)
                    self._detach(element)
        finally:
            self._in_build = was_building

    def is_addable(self, product: Product, *args: Any, **kwargs: Any) -> bool:
        provider = self._require_pool().get_provider(product)
        return bool(provider.is_addable_to_basket(self, product, *args, **kwargs))

    def has_recurrent_payment(self) -> bool:
        return any(element.is_recurrent_payment() for element in self._elements.values())

    def get_total(self, vat: bool = False, recurrent_only: Optional[bool] = None) -> Decimal:
        total = ZERO
        for element in self.elements:
            if recurrent_only is not None and element.is_recurrent_payment() is not recurrent_only:
                continue
            total += element.get_total(vat)
        total += self.get_delivery_price(vat)
        return round_price(total)

    def get_vat_amount(self) -> Decimal:
        vat = sum((element.get_vat_amount() for element in self._elements.values()), ZERO)
        method = self.delivery_method
        if method is not None:
            vat += to_decimal(method.get_vat_amount(self))
        return vat

    def get_delivery_price(self, vat: bool = False) -> Decimal:
        method = self.delivery_method
        if method is None:
            return ZERO
        return to_decimal(method.get_total(self, vat))

    # --- Validité ---
    def is_valid(self, elements_only: bool = False) -> bool:
        if self.is_empty():
            return False
        if not all(element.is_valid() for element in self._elements.values()):
            return False
        if elements_only:
            return True
        if self.payment_address is None or self.payment_method is None:
            return False
        if not self.payment_method.is_available(self):
            return False
        if self.delivery_method is None:
            return False
        if self.delivery_address is None and self.delivery_method.is_address_required():
            return False
        return True

    # --- Sélections de checkout ---
    @property
    def delivery_method(self) -> Optional[DeliveryMethod]:
        return self._delivery_method.ref

    @delivery_method.setter
    def delivery_method(self, method: Optional[DeliveryMethod]) -> None:
        self._delivery_method = CachedRef.of(method, "code")

    @property
    def delivery_method_code(self) -> Optional[str]:
        return self._delivery_method.key

    @property
    def delivery_address(self) -> Optional[Address]:
        return self._delivery_address.ref

    @delivery_address.setter
    def delivery_address(self, address: Optional[Address]) -> None:
        self._delivery_address = CachedRef.of(address)

    @property
    def delivery_address_id(self) -> Optional[str]:
        return self._delivery_address.key

    @delivery_address_id.setter
    def delivery_address_id(self, address_id: Optional[str]) -> None:
        self._delivery_address = self._delivery_address.with_key(address_id)

    @property
    def payment_method(self) -> Optional[PaymentMethod]:
        return self._payment_method.ref

    @payment_method.setter
    def payment_method(self, method: Optional[PaymentMethod]) -> None:
        self._payment_method = CachedRef.of(method, "code")

    @property
    def payment_method_code(self) -> Optional[str]:
        return self._payment_method.key

    @property
    def payment_address(self) -> Optional[Address]:
        return self._payment_address.ref

    @payment_address.setter
    def payment_address(self, address: Optional[Address]) -> None:
        self._payment_address = CachedRef.of(address)

    @property
    def payment_address_id(self) -> Optional[str]:
        return self._payment_address.key

    @payment_address_id.setter
    def payment_address_id(self, address_id: Optional[str]) -> None:
        self._payment_address = self._payment_address.with_key(address_id)

    @property
    def customer(self) -> Optional[Customer]:
        return self._customer.ref

    @customer.setter
    def customer(self, customer: Optional[Customer]) -> None:
        self._customer = CachedRef.of(customer)

    @property
    def customer_id(self) -> Optional[str]:
        return self._customer.key

    @customer_id.setter
    def customer_id(self, customer_id: Optional[str]) -> None:
        self._customer = self._customer.with_key(customer_id)

    # Alias explicites (API « setter » du composant d'origine)
    def set_delivery_method(self, method: Optional[DeliveryMethod] = None) -> None:
        self.delivery_method = method

    def set_delivery_address(self, address: Optional[Address] = None) -> None:
        self.delivery_address = address

    def set_payment_method(self, method: Optional[PaymentMethod] = None) -> None:
        self.payment_method = method

    def set_payment_address(self, address: Optional[Address] = None) -> None:
        self.payment_address = address

    def set_customer(self, customer: Optional[Customer] = None) -> None:
        self.customer = customer

    # --- Options ---
    @property
    def options(self) -> Dict[str, Any]:
        return self._options

    @options.setter
    def options(self, options: Mapping[str, Any]) -> None:
        self._options = dict(options)

    def set_options(self, options: Mapping[str, Any]) -> None:
        self.options = options

    def get_option(self, name: str, default: Any = None) -> Any:
        return self._options.get(name, default)

    def set_option(self, name: str, value: Any) -> None:
        self._options[name] = value

    # --- Reset ---
    def reset(self, full: bool = True) -> None:
        """
        Vide toujours les adresses et méthodes de livraison/paiement.
        full=True: vide aussi éléments, index, compteur de slots, client et options.
        """
        self._delivery_address = CachedRef()
        self._delivery_method = CachedRef()
        self._payment_address = CachedRef()
        self._payment_method = CachedRef()
        if full:
            self._elements = {}
            self._positions = {}
            self._cpt_element = 0
            self._customer = CachedRef()
            self._options = {}

    # --- Snapshot ---
    def to_snapshot(self) -> BasketSnapshot:
        return BasketSnapshot(
            basket_elements={slot: element.to_snapshot() for slot, element in sorted(self._elements.items())},
            positions=dict(self._positions),
            delivery_address_id=self.delivery_address_id,
            payment_address_id=self.payment_address_id,
            payment_method_code=self.payment_method_code,
            cpt_element=self._cpt_element,
            delivery_method_code=self.delivery_method_code,
            customer_id=self.customer_id,
            options=dict(self._options),
        )

    def restore(self, snapshot: BasketSnapshot) -> None:
        """
        Applique un snapshot. Un champ absent (None) conserve la valeur courante:
        appeler reset(full=True) avant pour repartir d'un panier vierge.
        Les références (adresses, méthodes, client, produits) ne sont pas restaurées.
        """
        for field in RESTORABLE_FIELDS:
            value = getattr(snapshot, field)
            if value is None:
                continue
            if field == "basket_elements":
                elements = {}
                for slot, data in value.items():
                    element = BasketElement.from_snapshot(data)
                    element.position = slot
                    elements[slot] = element
                self._elements = elements
            elif field == "positions":
                self._positions = dict(value)
            elif field == "cpt_element":
                self._cpt_element = value
            elif field == "options":
                self._options = dict(value)
            elif field == "delivery_method_code":
                self._delivery_method = self._delivery_method.with_key(value, "code")
            elif field == "payment_method_code":
                self._payment_method = self._payment_method.with_key(value, "code")
            else:
                setattr(self, field, value)
        if self._elements:
            # Le compteur doit rester au-delà du plus grand slot occupé
            self._cpt_element = max(self._cpt_element, max(self._elements) + 1)

    def serialize(self) -> Dict[str, Any]:
        return self.to_snapshot().to_dict()

    def unserialize(self, data: Union[str, bytes, Mapping[str, Any]]) -> None:
        if isinstance(data, (str, bytes)):
            snapshot = BasketSnapshot.model_validate_json(data)
        else:
            snapshot = BasketSnapshot.model_validate(data)
        self.restore(snapshot)

    def __repr__(self) -> str:
        return f"Basket(elements={self.count_elements()}, next_slot={self._cpt_element}, customer_id={self.customer_id!r})"
