# directsource/api/deps.py
from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from directsource.data.database import get_db
from directsource.domain.cart import CartSession, Identity
from directsource.services.cart_service import CartService
from directsource.services.local_cart_store import LocalCartStore
from directsource.services.notification_service import NotificationService
from directsource.services.order_service import OrderService
from directsource.services.product_client import ProductClient


def get_product_client() -> ProductClient:
    return ProductClient()


def get_local_store() -> LocalCartStore:
    return LocalCartStore()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_identity(
    user_id: str | None = Query(None),
    x_guest_id: str | None = Header(None),
) -> Identity:
    if user_id:
        return Identity.authenticated(user_id, guest_id=x_guest_id)
    if x_guest_id:
        return Identity.anonymous(x_guest_id)
    raise HTTPException(status_code=400, detail="Podaj user_id albo naglowek X-Guest-Id")


def get_cart_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    local_store: LocalCartStore = Depends(get_local_store),
) -> CartService:
    return CartService(db=db, product_client=product_client, local_store=local_store)


def get_order_service(
    db: Session = Depends(get_db),
    local_store: LocalCartStore = Depends(get_local_store),
    notification_service: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(db=db, local_store=local_store, notification_service=notification_service)


def new_session(identity: Identity = Depends(get_identity)) -> CartSession:
    return CartSession(identity)
