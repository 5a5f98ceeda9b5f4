from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import current_user_id
from marketplace.db import get_db
from marketplace.schemas.order_schema import (
    CreateOrderIn,
    OrderOut,
    OrderStatusUpdate,
    PaymentStatusUpdate,
)
from marketplace.services.exceptions import (
    EmptyCartError,
    InvalidStatusError,
    NotFoundError,
    ProductUnavailableError,
    StorageError,
)
from marketplace.services.order_service import OrderService
from marketplace.utils.logging import get_logger

log = get_logger("api.orders")

router = APIRouter(tags=["orders"])


def _out(order):
    return OrderOut.model_validate(order).model_dump()


@router.post("", summary="Create order (checkout)")
def create_order(
    payload: CreateOrderIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        order = svc.create_order(
            user_id, payload.payment_method, payload.shipping_address, payload.notes
        )
    except (EmptyCartError, ProductUnavailableError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        log.error("checkout failed for user=%s: %s", user_id, e)
        raise HTTPException(status_code=503, detail=str(e))
    return _out(order)


@router.get("", summary="List my orders")
def list_orders(
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        orders, total = svc.list_orders(user_id, status=status, limit=limit, offset=offset)
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"items": [_out(o) for o in orders], "total": total}


@router.get("/{order_id}", summary="Order detail")
def get_order(
    order_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return _out(OrderService(db).get_order(order_id, user_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{order_id}/status", summary="Update order status")
def update_status(
    order_id: int,
    payload: OrderStatusUpdate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        svc.update_order_status(order_id, user_id, payload.status)
        return _out(svc.get_order(order_id, user_id))
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{order_id}/payment", summary="Apply a payment status update")
def update_payment(
    order_id: int,
    payload: PaymentStatusUpdate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return _out(svc.update_payment_status(order_id, user_id, payload.payment_status))
    except (InvalidStatusError, ProductUnavailableError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        log.error("payment update failed for order=%s: %s", order_id, e)
        raise HTTPException(status_code=503, detail=str(e))
