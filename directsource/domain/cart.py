# directsource/domain/cart.py
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from directsource.domain.schemas import CartLine, CartOut


class Identity(BaseModel):
    """
    Kto jest wlascicielem koszyka.
    user_id ustawione -> zalogowany (koszyk w bazie),
    inaczej gosc (koszyk w local store pod guest_id).
    """

    user_id: Optional[str] = None
    guest_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls, guest_id: str) -> "Identity":
        return cls(guest_id=guest_id)

    @classmethod
    def authenticated(cls, user_id: str, guest_id: Optional[str] = None) -> "Identity":
        return cls(user_id=user_id, guest_id=guest_id)


class CartSession:
    """
    Widok koszyka w pamieci, powiazany z aktualna tozsamoscia.
    Serwisy dostaja go jawnie, nie ma globalnego stanu.
    """

    def __init__(self, identity: Identity, lines: Iterable[CartLine] = ()):
        self.identity = identity
        self._lines: Dict[str, CartLine] = {}
        self.replace(lines)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0.00"))

    def get(self, product_id: str) -> Optional[CartLine]:
        return self._lines.get(product_id)

    def quantity_of(self, product_id: str) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line else 0

    def upsert(self, line: CartLine) -> None:
        self._lines[line.product_id] = line

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def replace(self, lines: Iterable[CartLine]) -> None:
        self._lines = {line.product_id: line for line in lines}

    def clear(self) -> None:
        self._lines = {}

    def __len__(self) -> int:
        return len(self._lines)

    def to_out(self) -> CartOut:
        return CartOut(
            user_id=self.identity.user_id,
            guest_id=self.identity.guest_id,
            items=self.lines,
            subtotal=self.subtotal,
            item_count=sum(line.quantity for line in self._lines.values()),
        )
