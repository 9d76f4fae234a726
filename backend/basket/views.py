from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
import logging

from backend.basket import service
from backend.basket.pool import ProductPool

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/basket", tags=["Basket"])


class AddItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


class UpdateItemRequest(BaseModel):
    quantity: int = Field(ge=0)


@router.get("")
def get_basket(request: Request, pool: ProductPool = Depends(service.get_product_pool)):
    basket = service.load_basket(request.session, pool)
    service.save_basket(request.session, basket)
    return service.summarize(basket)


@router.post("/items", status_code=201)
def add_item(req: AddItemRequest, request: Request, pool: ProductPool = Depends(service.get_product_pool)):
    """
    Body:
    { "product_id": "<id>", "quantity": 2 }
    """
    basket = service.load_basket(request.session, pool)
    element = service.add_product(basket, req.product_id, req.quantity)
    service.save_basket(request.session, basket)
    logger.info("basket.api add slot=%s product_id=%s quantity=%s", element.position, element.product_id, element.quantity)
    return service.summarize(basket)


@router.patch("/items/{slot}")
def update_item(slot: int, req: UpdateItemRequest, request: Request, pool: ProductPool = Depends(service.get_product_pool)):
    basket = service.load_basket(request.session, pool)
    service.update_quantity(basket, slot, req.quantity)
    service.save_basket(request.session, basket)
    return service.summarize(basket)


@router.delete("/items/{slot}")
def delete_item(slot: int, request: Request, pool: ProductPool = Depends(service.get_product_pool)):
    basket = service.load_basket(request.session, pool)
    removed = service.remove_slot(basket, slot)
    service.save_basket(request.session, basket)
    logger.info("basket.api remove slot=%s product_id=%s", slot, removed.product_id)
    return service.summarize(basket)


@router.post("/reset")
def reset_basket(request: Request, full: bool = True, pool: ProductPool = Depends(service.get_product_pool)):
    """full=false: ne vide que les sélections livraison/paiement."""
    basket = service.load_basket(request.session, pool)
    basket.reset(full=full)
    service.save_basket(request.session, basket)
    return service.summarize(basket)
