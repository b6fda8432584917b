# directsource/domain/errors.py
"""
Wyjatki domenowe koszyka i checkoutu.
Serwisy je rzucaja, routery tlumacza na HTTPException.
"""


class CartError(Exception):
    """Bazowy blad operacji na koszyku."""


class OutOfStock(CartError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Tego produktu nie ma na stanie")


class StockExceeded(CartError):
    def __init__(self, product_id: str, max_allowed: int):
        self.product_id = product_id
        self.max_allowed = max_allowed
        super().__init__(f"Dostepnych sztuk: tylko {max_allowed}")


class ProductNotFound(CartError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Produkt {product_id} nie istnieje")


class CartReadFailed(CartError):
    pass


class CartWriteFailed(CartError):
    pass


class CheckoutError(Exception):
    """Bazowy blad checkoutu."""


class EmptyCart(CheckoutError):
    def __init__(self):
        super().__init__("Koszyk jest pusty")


class NotAuthenticated(CheckoutError):
    def __init__(self):
        super().__init__("Zaloguj sie, aby zlozyc zamowienie")


class OrderCreationFailed(CheckoutError):
    """
    Zapis zamowienia dla jednej z grup sie nie udal.
    Zamowienia z wczesniejszych grup zostaja w bazie (brak rollbacku miedzy grupami),
    dlatego niesiemy je dalej.
    """

    def __init__(self, manufacturer_id: str, created_orders: list, reason: str = ""):
        self.manufacturer_id = manufacturer_id
        self.created_orders = list(created_orders)
        super().__init__(
            f"Nie udalo sie utworzyc zamowienia dla producenta {manufacturer_id}"
            + (f": {reason}" if reason else "")
        )


class CheckoutFailed(CheckoutError):
    def __init__(self, message: str, created_orders: list | None = None):
        self.created_orders = list(created_orders or [])
        super().__init__(message)


class OrderNotFound(Exception):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Zamowienie {order_id} nie istnieje")


class InvalidStatusTransition(Exception):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Nie mozna zmienic statusu zamowienia z {current} na {requested}")
