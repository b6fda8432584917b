# directsource/services/order_service.py
from decimal import Decimal
from typing import List

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from directsource.data.models.order import OrderModel
from directsource.domain.cart import CartSession
from directsource.domain.errors import (
    CheckoutFailed,
    EmptyCart,
    InvalidStatusTransition,
    NotAuthenticated,
    OrderCreationFailed,
    OrderNotFound,
)
from directsource.domain.ordering import (
    ManufacturerGroup,
    allocate_shipping,
    can_transition,
    group_by_manufacturer,
    initial_status,
    new_transaction_id,
)
from directsource.domain.schemas import (
    OrderItem,
    OrderOut,
    OrderStatus,
    PaymentMethod,
    PlaceOrderResult,
)
from directsource.repos.cart_repo import CartRepo
from directsource.repos.manufacturer_repo import ManufacturerRepo
from directsource.repos.order_repo import OrderRepo
from directsource.services.local_cart_store import LocalCartStore
from directsource.services.notification_service import NotificationService
from directsource.utils.settings import FLAT_SHIPPING_FEE
from directsource.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Checkout dzieli koszyk na jedno zamowienie per producent.
    """

    def __init__(
        self,
        db: Session,
        local_store: LocalCartStore,
        notification_service: NotificationService | None = None,
        shipping_fee: Decimal = FLAT_SHIPPING_FEE,
    ):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.manufacturer_repo = ManufacturerRepo(db)
        self.local_store = local_store
        self.notification_service = notification_service or NotificationService()
        self.shipping_fee = Decimal(shipping_fee)

    def place_order(
        self,
        session: CartSession,
        payment_method: PaymentMethod,
        account_name: str | None = None,
    ) -> PlaceOrderResult:
        """
        Use Case: zlozenie zamowienia z koszyka.

        1. Sprawdza, czy uzytkownik jest zalogowany i koszyk nie jest pusty
        2. Dzieli koszyk na grupy per producent
        3. Dzieli stala oplate za wysylke po rowno miedzy grupy
        4. Dla kazdej grupy po kolei: zapis zamowienia, statystyki producenta,
           powiadomienie
        5. Czysci koszyk w bazie, koszyk goscia i widok w sesji

        Grupy nie sa objete wspolna transakcja: jesli zapis N-tej grupy sie nie
        uda, wczesniejsze zamowienia zostaja, a OrderCreationFailed je wymienia.
        """
        customer_id = session.identity.user_id
        if not customer_id:
            raise NotAuthenticated()
        if session.is_empty:
            raise EmptyCart()

        payment_method = PaymentMethod(payment_method)
        created: List[OrderOut] = []

        try:
            groups = group_by_manufacturer(session.lines)
            shares = allocate_shipping(self.shipping_fee, len(groups))

            for group, shipping_share in zip(groups, shares):
                order = self._create_order(
                    customer_id, group, shipping_share, payment_method, account_name, created
                )
                created.append(order)
                self._record_sale(group)
                self._notify_placed(order)
        except OrderCreationFailed:
            raise
        except Exception as e:
            logger.error(f"Checkout failed for user {customer_id}: {e}")
            raise CheckoutFailed(f"Nie udalo sie zlozyc zamowienia: {e}", created_orders=created) from e

        cart_cleared = self._clear_carts(session)

        logger.info(
            f"Checkout for user {customer_id} created {len(created)} orders: "
            f"{[o.id for o in created]}"
        )
        return PlaceOrderResult(order_id=created[0].id, orders=created, cart_cleared=cart_cleared)

    def get_order(self, order_id: str, user_id: str) -> OrderOut:
        """
        Use Case: Pobranie zamowienia (Query).
        Widzi je klient albo uzytkownik producenta.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFound(order_id)

        if order.customer_id != user_id:
            manufacturer = self.manufacturer_repo.get_manufacturer(order.manufacturer_id)
            if manufacturer is None or manufacturer.user_id != user_id:
                raise PermissionError("Brak dostepu do zamowienia")

        return OrderOut.model_validate(order)

    def list_orders(self, customer_id: str) -> List[OrderOut]:
        return [OrderOut.model_validate(o) for o in self.repo.list_by_customer(customer_id)]

    def list_manufacturer_orders(
        self, manufacturer_id: str, status: OrderStatus | None = None
    ) -> List[OrderOut]:
        orders = self.repo.list_by_manufacturer(
            manufacturer_id, OrderStatus(status).value if status else None
        )
        return [OrderOut.model_validate(o) for o in orders]

    def update_status(self, order_id: str, new_status: OrderStatus) -> OrderOut:
        """Zmiana statusu przez producenta/admina, tylko do przodu."""
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound(order_id)

        new_status = OrderStatus(new_status)
        if not can_transition(OrderStatus(order.status), new_status):
            raise InvalidStatusTransition(order.status, new_status.value)

        updated = self.repo.update_order_status(order_id, new_status.value)
        logger.info(f"Order {order_id} status changed to {new_status.value}")

        try:
            self.notification_service.send_status_changed(updated.customer_id, updated.id, new_status.value)
        except Exception as e:
            logger.warning(f"Failed to enqueue status notification for order {order_id}: {e}")

        return OrderOut.model_validate(updated)

    #pomocnicze
    def _create_order(
        self,
        customer_id: str,
        group: ManufacturerGroup,
        shipping_share: Decimal,
        payment_method: PaymentMethod,
        account_name: str | None,
        created: List[OrderOut],
    ) -> OrderOut:
        is_transfer = payment_method == PaymentMethod.BANK_TRANSFER
        items = [OrderItem.from_line(line).model_dump(mode="json") for line in group.lines]

        order = OrderModel(
            customer_id=customer_id,
            manufacturer_id=group.manufacturer_id,
            items=items,
            total_amount=group.subtotal + shipping_share,
            status=initial_status(payment_method).value,
            payment_method=payment_method.value,
            account_name=account_name if is_transfer else None,
            transaction_id=new_transaction_id() if is_transfer else None,
        )

        try:
            saved = self.repo.create_order(order)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to create order for manufacturer {group.manufacturer_id}: {e}")
            raise OrderCreationFailed(group.manufacturer_id, created, reason=str(e)) from e

        logger.info(
            f"Order {saved.id} created for manufacturer {group.manufacturer_id}, "
            f"total {saved.total_amount}"
        )
        return OrderOut.model_validate(saved)

    def _record_sale(self, group: ManufacturerGroup) -> None:
        # read-modify-write bez blokady: rownolegle checkouty moga zgubic aktualizacje
        try:
            manufacturer = self.manufacturer_repo.get_manufacturer(group.manufacturer_id)
            if manufacturer is None:
                logger.warning(f"Manufacturer {group.manufacturer_id} not found, skipping stats update")
                return

            total_sales = (manufacturer.total_sales or 0) + group.items_sold
            revenue = Decimal(manufacturer.revenue or 0) + group.subtotal
            self.manufacturer_repo.update_stats(manufacturer, total_sales, revenue)
        except SQLAlchemyError as e:
            self.manufacturer_repo.rollback()
            logger.warning(f"Failed to update stats of manufacturer {group.manufacturer_id}: {e}")

    def _notify_placed(self, order: OrderOut) -> None:
        try:
            self.notification_service.send_order_placed(order.customer_id, order.id, order.manufacturer_id)
        except Exception as e:
            logger.warning(f"Failed to enqueue notification for order {order.id}: {e}")

    def _clear_carts(self, session: CartSession) -> bool:
        identity = session.identity
        cleared = True

        try:
            self.cart_repo.clear_cart(identity.user_id)
            self.cart_repo.commit()
        except SQLAlchemyError as e:
            self.cart_repo.rollback()
            logger.error(f"Orders placed but cart of user {identity.user_id} was not cleared: {e}")
            cleared = False

        if identity.guest_id:
            try:
                self.local_store.clear(identity.guest_id)
            except RedisError as e:
                logger.warning(f"Failed to clear guest cart {identity.guest_id}: {e}")
                cleared = False

        session.clear()
        return cleared
