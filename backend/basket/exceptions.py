"""
Exceptions métier du panier.
- ElementNotFoundError: produit absent du panier (NotFound).
- InvalidBasketStateError: opération incohérente avec l'état courant (ex: retrait d'un élément périmé).
- ProviderNotFoundError: aucun provider enregistré pour le type de produit.
Traduites en réponses HTTP par backend.app_setup.exception_handlers.
"""


class BasketError(Exception):
    """Base des erreurs du panier."""


class ElementNotFoundError(BasketError, LookupError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Le produit {product_id!r} n'est pas dans le panier")


class InvalidBasketStateError(BasketError, RuntimeError):
    pass


class ProviderNotFoundError(BasketError, LookupError):
    def __init__(self, product_type: str):
        self.product_type = product_type
        super().__init__(f"Aucun provider pour le type de produit {product_type!r}")
