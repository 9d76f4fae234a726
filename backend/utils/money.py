"""
Helpers monétaires (Decimal uniquement, jamais de float binaire).
- to_decimal: convertit str|int|float|Decimal|None en Decimal.
- round_price: arrondi commercial à 2 décimales.
- vat_of: montant de TVA pour un prix HT et un taux en pourcentage.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        # str() pour les float: évite 0.1 -> 0.1000000000000000055511151231257827
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Montant invalide: {value!r}") from e


def round_price(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def vat_of(price: Any, vat_rate: Any) -> Decimal:
    return to_decimal(price) * to_decimal(vat_rate) / Decimal(100)
