from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.api.deps import current_user_id
from marketplace.db import get_db
from marketplace.schemas.cart_schema import (
    AddItemIn,
    CartItemOut,
    CartOut,
    UpdateQuantityIn,
)
from marketplace.services.cart_service import CartService
from marketplace.services.exceptions import (
    InvalidQuantityError,
    NotFoundError,
    ProductUnavailableError,
    StorageError,
)

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", summary="Get cart")
def get_cart(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    svc = CartService(db)
    cart = svc.get_cart(user_id)
    return CartOut.model_validate(
        {
            "items": [CartItemOut.model_validate(it) for it in cart["items"]],
            "total_cents": cart["total_cents"],
        }
    ).model_dump()


@router.post("/items", summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        item = svc.add_item(user_id, payload.product_id, payload.quantity)
    except (InvalidQuantityError, ProductUnavailableError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"item_id": item.id, "quantity": item.quantity}


@router.put("/items/{item_id}", summary="Update item quantity")
def update_item(
    item_id: int,
    payload: UpdateQuantityIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        item = svc.update_quantity(item_id, user_id, payload.quantity)
    except InvalidQuantityError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"item_id": item.id, "quantity": item.quantity}


@router.delete("/items/{item_id}", summary="Remove item")
def remove_item(
    item_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        svc.remove_item(item_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"ok": True}


@router.delete("", summary="Clear cart")
def clear_cart(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    removed = CartService(db).clear(user_id)
    return {"ok": True, "removed": removed}
