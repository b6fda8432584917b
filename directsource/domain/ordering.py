# directsource/domain/ordering.py
import secrets
import string
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from directsource.domain.schemas import CartLine, OrderStatus, PaymentMethod

CENT = Decimal("0.01")


#tylko do przodu, stany koncowe nie maja wyjscia
TRANSITIONS: Dict[OrderStatus, frozenset] = {
    OrderStatus.AWAITING_VERIFICATION: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.DECLINED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.DECLINED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def initial_status(payment_method: PaymentMethod) -> OrderStatus:
    if PaymentMethod(payment_method) == PaymentMethod.CARD:
        return OrderStatus.PROCESSING
    return OrderStatus.AWAITING_VERIFICATION


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return OrderStatus(requested) in TRANSITIONS[OrderStatus(current)]


def new_transaction_id() -> str:
    """Referencja przelewu pokazywana klientowi, np. DS-4K9QZT."""
    alphabet = string.ascii_uppercase + string.digits
    return "DS-" + "".join(secrets.choice(alphabet) for _ in range(6))


@dataclass
class ManufacturerGroup:
    manufacturer_id: str
    lines: List[CartLine] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        total = sum((line.price * line.quantity for line in self.lines), Decimal("0.00"))
        return total.quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def items_sold(self) -> int:
        return len(self.lines)


def group_by_manufacturer(lines: List[CartLine]) -> List[ManufacturerGroup]:
    """Grupy w kolejnosci pierwszego wystapienia producenta w koszyku."""
    groups: Dict[str, ManufacturerGroup] = {}
    for line in lines:
        group = groups.get(line.manufacturer_id)
        if group is None:
            group = groups[line.manufacturer_id] = ManufacturerGroup(line.manufacturer_id)
        group.lines.append(line)
    return list(groups.values())


def allocate_shipping(fee: Decimal, group_count: int) -> List[Decimal]:
    """
    Dzieli stala oplate za wysylke po rowno miedzy grupy.
    Grosze, ktore sie nie dziela, dostaja pierwsze grupy, wiec suma == fee.
    """
    if group_count <= 0:
        return []
    cents = int((Decimal(fee) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    base, remainder = divmod(cents, group_count)
    return [
        (Decimal(base + (1 if i < remainder else 0)) / 100).quantize(CENT)
        for i in range(group_count)
    ]
