"""
Forme persistée du panier (sérialisation structurelle, agnostique du transport).
Noms de champs historiques conservés en alias: basketElements, positions, cptElement, ...
schemaVersion permet de faire évoluer le format sans casser les sessions existantes.
"""
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_VERSION = 1


class BasketElementSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(default=None, alias="productId")
    product_type: str = Field(default="default", alias="productType")
    name: str = ""
    quantity: int = 1
    price: Decimal = Decimal("0")
    vat_rate: Decimal = Field(default=Decimal("0"), alias="vatRate")
    position: Optional[int] = None
    delete: bool = False
    options: Dict[str, Any] = Field(default_factory=dict)


class BasketSnapshot(BaseModel):
    """
    Un champ à None (ou absent) signifie « conserver la valeur courante » à la restauration.
    """
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    basket_elements: Optional[Dict[int, BasketElementSnapshot]] = Field(default=None, alias="basketElements")
    positions: Optional[Dict[str, int]] = None
    delivery_address_id: Optional[str] = Field(default=None, alias="deliveryAddressId")
    payment_address_id: Optional[str] = Field(default=None, alias="paymentAddressId")
    payment_method_code: Optional[str] = Field(default=None, alias="paymentMethodCode")
    cpt_element: Optional[int] = Field(default=None, alias="cptElement", ge=0)
    delivery_method_code: Optional[str] = Field(default=None, alias="deliveryMethodCode")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    options: Optional[Dict[str, Any]] = None

    @field_validator("schema_version")
    @classmethod
    def known_version(cls, v: int) -> int:
        if v < 1 or v > SCHEMA_VERSION:
            raise ValueError(f"Version de snapshot non supportée: {v}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# Ordre de restauration des champs
RESTORABLE_FIELDS = (
    "basket_elements",
    "positions",
    "delivery_address_id",
    "delivery_method_code",
    "payment_address_id",
    "payment_method_code",
    "cpt_element",
    "customer_id",
    "options",
)
