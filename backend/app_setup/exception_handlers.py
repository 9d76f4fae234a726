"""
Gestionnaires d’exceptions.
- Traduit les erreurs métier du panier en réponses JSON {"detail": ...}:
  ElementNotFoundError -> 404, InvalidBasketStateError / ProviderNotFoundError -> 409.
- Les HTTPException levées par la couche service gardent le comportement FastAPI standard.
- Toute autre exception est journalisée (logger.exception) et renvoyée en 500.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.basket.exceptions import (
    BasketError,
    ElementNotFoundError,
    InvalidBasketStateError,
    ProviderNotFoundError,
)

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers des erreurs panier.
    - 404 pour un produit absent du panier.
    - 409 pour un état incohérent (élément périmé, provider manquant).
    """
    @app.exception_handler(ElementNotFoundError)
    async def basket_element_not_found(request: Request, exc: ElementNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidBasketStateError)
    @app.exception_handler(ProviderNotFoundError)
    async def basket_conflict(request: Request, exc: BasketError):
        logger.warning("basket.conflict path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("app.unhandled path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Erreur interne"})
