# directsource/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException

from directsource.api.deps import get_cart_service, new_session
from directsource.domain.cart import CartSession
from directsource.domain.errors import (
    CartReadFailed,
    CartWriteFailed,
    OutOfStock,
    ProductNotFound,
    StockExceeded,
)
from directsource.domain.schemas import CartOut, ItemIn, MigrateIn, MigrationOut, QuantityIn
from directsource.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


@router.get("/", response_model=CartOut)
def get_cart(
    session: CartSession = Depends(new_session),
    svc: CartService = Depends(get_cart_service),
):
    try:
        svc.load(session)
    except CartReadFailed as e:
        raise HTTPException(status_code=503, detail=str(e))
    return session.to_out()


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    session: CartSession = Depends(new_session),
    svc: CartService = Depends(get_cart_service),
):
    try:
        svc.load(session)
        product = svc.get_product(payload.product_id)
        svc.add_product(session, product, payload.quantity)
    except OutOfStock as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StockExceeded as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "max_allowed": e.max_allowed})
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartReadFailed, CartWriteFailed) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return session.to_out()


@router.patch("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: str,
    payload: QuantityIn,
    session: CartSession = Depends(new_session),
    svc: CartService = Depends(get_cart_service),
):
    try:
        svc.load(session)
        svc.update_quantity(session, product_id, payload.quantity)
    except StockExceeded as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "max_allowed": e.max_allowed})
    except ProductNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartReadFailed, CartWriteFailed) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return session.to_out()


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: str,
    session: CartSession = Depends(new_session),
    svc: CartService = Depends(get_cart_service),
):
    try:
        svc.load(session)
        svc.remove_product(session, product_id)
    except (CartReadFailed, CartWriteFailed) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return session.to_out()


@router.post("/migrate", response_model=MigrationOut)
def migrate_cart(
    payload: MigrateIn,
    session: CartSession = Depends(new_session),
    svc: CartService = Depends(get_cart_service),
):
    """
    Wywolywane po zalogowaniu: koszyk goscia (X-Guest-Id) trafia do koszyka uzytkownika.
    """
    try:
        result = svc.migrate_on_sign_in(session, payload.user_id)
    except (CartReadFailed, CartWriteFailed) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return MigrationOut(result=result, cart=session.to_out())
