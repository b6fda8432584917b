# directsource/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from directsource.api.deps import get_cart_service, get_order_service, new_session
from directsource.domain.cart import CartSession
from directsource.domain.errors import (
    CartReadFailed,
    CheckoutFailed,
    EmptyCart,
    InvalidStatusTransition,
    NotAuthenticated,
    OrderCreationFailed,
    OrderNotFound,
)
from directsource.domain.schemas import CheckoutIn, OrderOut, OrderStatusIn, PlaceOrderResult
from directsource.services.cart_service import CartService
from directsource.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/checkout", response_model=PlaceOrderResult, status_code=201)
def checkout(
    payload: CheckoutIn,
    session: CartSession = Depends(new_session),
    cart_svc: CartService = Depends(get_cart_service),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy po jednym zamowieniu na producenta z koszyka uzytkownika.
    """
    if not session.identity.is_authenticated:
        raise HTTPException(status_code=401, detail=str(NotAuthenticated()))

    try:
        cart_svc.load(session)
        return svc.place_order(session, payload.payment_method, payload.account_name)
    except CartReadFailed as e:
        raise HTTPException(status_code=503, detail=str(e))
    except EmptyCart as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotAuthenticated as e:
        raise HTTPException(status_code=401, detail=str(e))
    except OrderCreationFailed as e:
        raise HTTPException(
            status_code=502,
            detail={
                "message": str(e),
                "manufacturer_id": e.manufacturer_id,
                "created_order_ids": [o.id for o in e.created_orders],
            },
        )
    except CheckoutFailed as e:
        raise HTTPException(
            status_code=500,
            detail={"message": str(e), "created_order_ids": [o.id for o in e.created_orders]},
        )


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: str = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    user_id: str = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    """
    Pobiera szczegoly zamowienia.
    """
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusIn,
    svc: OrderService = Depends(get_order_service),
):
    try:
        return svc.update_status(order_id, payload.status)
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
