# directsource/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentMethod(str, Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


class OrderStatus(str, Enum):
    AWAITING_VERIFICATION = "awaiting_verification"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    DECLINED = "declined"
    CANCELLED = "cancelled"


class Product(BaseModel):
    """Produkt z katalogu (tylko odczyt)."""

    id: str
    manufacturer_id: str
    name: str
    description: str = ""
    price: Decimal
    retail_price_estimation: Optional[Decimal] = None
    category: str = ""
    stock: int = 0
    image_url: str = ""


class CartLine(BaseModel):
    """
    Pozycja koszyka ze snapshotem produktu.
    Brakujace pola dostaja domyslne wartosci tutaj, nie w logice serwisu.
    """

    product_id: str
    quantity: int = Field(..., ge=1)
    manufacturer_id: str
    name: str = ""
    price: Decimal = Decimal("0.00")
    image_url: str = ""
    category: str = ""
    stock: int = 0
    retail_price_estimation: Optional[Decimal] = None

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "CartLine":
        return cls(
            product_id=product.id,
            quantity=quantity,
            manufacturer_id=product.manufacturer_id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
            category=product.category,
            stock=product.stock,
            retail_price_estimation=product.retail_price_estimation,
        )

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0, description="Ilosc produktu (musi byc > 0)")


class QuantityIn(BaseModel):
    """Nowa ilosc; wartosc < 1 usuwa pozycje."""

    quantity: int


class CartOut(BaseModel):
    user_id: Optional[str] = None
    guest_id: Optional[str] = None
    items: List[CartLine]
    subtotal: Decimal
    item_count: int


class MigrateIn(BaseModel):
    user_id: str = Field(..., min_length=1)


class MigrationFailure(BaseModel):
    product_id: str
    reason: str


class MigrationResult(BaseModel):
    migrated: List[str] = Field(default_factory=list)
    failed: List[MigrationFailure] = Field(default_factory=list)


class MigrationOut(BaseModel):
    result: MigrationResult
    cart: CartOut


class OrderItem(BaseModel):
    """Niezmienny snapshot pozycji zamowienia."""

    id: str
    name: str
    price: Decimal
    quantity: int
    image_url: str = ""
    category: str = ""
    manufacturer_id: str

    @classmethod
    def from_line(cls, line: CartLine) -> "OrderItem":
        return cls(
            id=line.product_id,
            name=line.name,
            price=line.price,
            quantity=line.quantity,
            image_url=line.image_url,
            category=line.category,
            manufacturer_id=line.manufacturer_id,
        )


class CheckoutIn(BaseModel):
    payment_method: PaymentMethod
    account_name: Optional[str] = Field(None, max_length=200)


class OrderOut(BaseModel):
    id: str
    customer_id: str
    manufacturer_id: str
    items: List[OrderItem]
    total_amount: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    account_name: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlaceOrderResult(BaseModel):
    order_id: str
    orders: List[OrderOut]
    cart_cleared: bool = True


class OrderStatusIn(BaseModel):
    status: OrderStatus


class UserCreate(BaseModel):
    """Schema dla tworzenia uzytkownika."""

    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=254)
    role: str = Field("customer", pattern="^(customer|manufacturer|admin)$")


class UserRead(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: str
    manufacturer_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ManufacturerOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    company_name: str
    location: Optional[str] = None
    verification_status: str
    bio: Optional[str] = None
    logo_url: Optional[str] = None
    established_year: Optional[int] = None
    total_sales: int
    revenue: Decimal

    model_config = ConfigDict(from_attributes=True)
