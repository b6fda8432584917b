# directsource/services/cart_service.py
from datetime import datetime, timezone
from typing import List

from redis.exceptions import RedisError
from requests import RequestException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from directsource.data.models.cart_item import CartItemModel
from directsource.domain.cart import CartSession, Identity
from directsource.domain.errors import (
    CartError,
    CartReadFailed,
    CartWriteFailed,
    OutOfStock,
    ProductNotFound,
    StockExceeded,
)
from directsource.domain.schemas import CartLine, MigrationFailure, MigrationResult, Product
from directsource.repos.cart_repo import CartRepo
from directsource.services.local_cart_store import LocalCartStore
from directsource.services.product_client import ProductClient
from directsource.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka dla goscia (local store) i zalogowanego (baza).
    query (load) odswieza widok w CartSession
    commands (add, update, remove, migrate) zapisuja do aktywnego store'a
    i dopiero po udanym zapisie aktualizuja widok
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        local_store: LocalCartStore,
    ):
        self.repo = CartRepo(db)
        self.product_client = product_client
        self.local_store = local_store

    #query - odczyt
    def load(self, session: CartSession) -> List[CartLine]:
        identity = session.identity

        if not identity.is_authenticated:
            lines = self._read_local(identity.guest_id)
            session.replace(lines)
            return session.lines

        try:
            rows = self.repo.get_cart_items(identity.user_id)
        except SQLAlchemyError as e:
            raise CartReadFailed(f"Nie udalo sie wczytac koszyka uzytkownika {identity.user_id}") from e

        try:
            products = self.product_client.fetch_products(r.product_id for r in rows)
        except RequestException as e:
            raise CartReadFailed("Katalog produktow niedostepny podczas ladowania koszyka") from e

        lines = []
        for row in rows:
            product = products.get(row.product_id)
            if product is None:
                #produkt zniknal z katalogu, pomijamy wiersz
                logger.info(f"Dropping stale cart row {row.id}: product {row.product_id} no longer in catalog")
                continue
            lines.append(CartLine.from_product(product, row.quantity))

        session.replace(lines)
        return session.lines

    #commands
    def add_product(self, session: CartSession, product: Product, quantity: int = 1) -> CartLine:
        if quantity <= 0:
            raise ValueError("Ilosc musi byc wieksza niz 0")

        if product.stock <= 0:
            raise OutOfStock(product.id)

        identity = session.identity

        if identity.is_authenticated:
            line = self._add_remote(identity.user_id, product, quantity)
        else:
            line = self._add_local(identity.guest_id, product, quantity)

        session.upsert(line)
        return line

    def update_quantity(self, session: CartSession, product_id: str, quantity: int) -> CartLine | None:
        if quantity < 1:
            self.remove_product(session, product_id)
            return None

        product = self.get_product(product_id)
        if quantity > product.stock:
            raise StockExceeded(product_id, product.stock)

        identity = session.identity
        line = CartLine.from_product(product, quantity)

        if identity.is_authenticated:
            try:
                item = self.repo.get_cart_item(identity.user_id, product_id)
                if item is None:
                    logger.info(f"Product {product_id} not in cart of user {identity.user_id}, nothing to update")
                    return None
                item.quantity = quantity
                item.updated_at = datetime.now(timezone.utc)
                self.repo.commit()
            except SQLAlchemyError as e:
                self.repo.rollback()
                raise CartWriteFailed(f"Nie udalo sie zmienic ilosci produktu {product_id}") from e
        else:
            lines = self._read_local(identity.guest_id)
            index = _find(lines, product_id)
            if index is None:
                logger.info(f"Product {product_id} not in guest cart {identity.guest_id}, nothing to update")
                return None
            lines[index] = line
            self._write_local(identity.guest_id, lines)

        logger.info(f"Quantity of product {product_id} set to {quantity}")
        session.upsert(line)
        return line

    def remove_product(self, session: CartSession, product_id: str) -> None:
        identity = session.identity

        if identity.is_authenticated:
            try:
                deleted = self.repo.delete_cart_item(identity.user_id, product_id)
                self.repo.commit()
            except SQLAlchemyError as e:
                self.repo.rollback()
                raise CartWriteFailed(f"Nie udalo sie usunac produktu {product_id}") from e
            logger.info(f"Removed product {product_id} from cart of user {identity.user_id} ({deleted} rows)")
        else:
            lines = self._read_local(identity.guest_id)
            remaining = [line for line in lines if line.product_id != product_id]
            if len(remaining) != len(lines):
                self._write_local(identity.guest_id, remaining)

        session.remove(product_id)

    def migrate_on_sign_in(self, session: CartSession, user_id: str) -> MigrationResult:
        """
        Przenosi koszyk goscia do koszyka uzytkownika po zalogowaniu.

        Wpis goscia jest najpierw odczytany i skasowany, dopiero potem
        scalany. Jak kasowanie sie nie uda, rzucamy CartWriteFailed zanim
        cokolwiek trafi do bazy, wiec ponowienie nie doda pozycji drugi raz.
        Pozycje sa dodawane po kolei (nie rownolegle), kazda przez add_product,
        wiec ilosci sie sumuja i obowiazuje limit stanu. Blad pojedynczej
        pozycji jest logowany i nie przerywa migracji. Na koniec ladujemy
        koszyk z bazy.
        """
        guest_id = session.identity.guest_id
        local_lines = self._read_local(guest_id) if guest_id else []

        if local_lines:
            try:
                self.local_store.clear(guest_id)
            except RedisError as e:
                raise CartWriteFailed(f"Nie udalo sie wyczyscic koszyka goscia {guest_id}") from e

        target = CartSession(Identity.authenticated(user_id, guest_id))
        result = MigrationResult()

        for line in local_lines:
            try:
                product = self.get_product(line.product_id)
                self.add_product(target, product, line.quantity)
                result.migrated.append(line.product_id)
            except CartError as e:
                logger.warning(f"Could not migrate product {line.product_id} for user {user_id}: {e}")
                result.failed.append(MigrationFailure(product_id=line.product_id, reason=str(e)))

        session.identity = target.identity
        self.load(session)

        logger.info(
            f"Migrated guest cart to user {user_id}: "
            f"{len(result.migrated)} ok, {len(result.failed)} failed"
        )
        return result

    #pomocnicze
    def _add_remote(self, user_id: str, product: Product, quantity: int) -> CartLine:
        try:
            #najpierw SELECT, potem UPDATE albo INSERT
            item = self.repo.get_cart_item(user_id, product.id)
        except SQLAlchemyError as e:
            raise CartReadFailed(f"Nie udalo sie odczytac koszyka uzytkownika {user_id}") from e

        new_quantity = (item.quantity if item else 0) + quantity
        if new_quantity > product.stock:
            raise StockExceeded(product.id, product.stock)

        try:
            if item:
                logger.info(
                    f"Product {product.id} already in cart, increasing quantity "
                    f"from {item.quantity} to {new_quantity}"
                )
                item.quantity = new_quantity
                item.updated_at = datetime.now(timezone.utc)
            else:
                logger.info(f"Adding product {product.id} to cart of user {user_id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        user_id=user_id,
                        product_id=product.id,
                        quantity=new_quantity,
                    )
                )
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Error while adding product {product.id}: {e}")
            raise CartWriteFailed(f"Nie udalo sie dodac produktu {product.id} do koszyka") from e

        return CartLine.from_product(product, new_quantity)

    def _add_local(self, guest_id: str, product: Product, quantity: int) -> CartLine:
        lines = self._read_local(guest_id)
        index = _find(lines, product.id)

        new_quantity = (lines[index].quantity if index is not None else 0) + quantity
        if new_quantity > product.stock:
            raise StockExceeded(product.id, product.stock)

        line = CartLine.from_product(product, new_quantity)
        if index is not None:
            lines[index] = line
        else:
            lines.append(line)

        self._write_local(guest_id, lines)
        logger.info(f"Product {product.id} in guest cart {guest_id}, quantity {new_quantity}")
        return line

    def get_product(self, product_id: str) -> Product:
        try:
            product = self.product_client.fetch_product(product_id)
        except RequestException as e:
            raise CartReadFailed(f"Katalog produktow niedostepny dla produktu {product_id}") from e
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def _read_local(self, guest_id: str | None) -> List[CartLine]:
        if not guest_id:
            return []
        try:
            return self.local_store.read(guest_id)
        except RedisError as e:
            raise CartReadFailed(f"Nie udalo sie odczytac koszyka goscia {guest_id}") from e

    def _write_local(self, guest_id: str | None, lines: List[CartLine]) -> None:
        if not guest_id:
            raise CartWriteFailed("Koszyk goscia wymaga guest_id")
        try:
            self.local_store.write(guest_id, lines)
        except RedisError as e:
            raise CartWriteFailed(f"Nie udalo sie zapisac koszyka goscia {guest_id}") from e


def _find(lines: List[CartLine], product_id: str) -> int | None:
    for i, line in enumerate(lines):
        if line.product_id == product_id:
            return i
    return None
