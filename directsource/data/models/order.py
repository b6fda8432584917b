import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, DateTime, Numeric, JSON

from directsource.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    manufacturer_id = Column(String(64), ForeignKey("manufacturers.id"), nullable=False, index=True)

    # snapshot pozycji z momentu checkoutu, niezalezny od pozniejszych zmian produktu
    items = Column(JSON, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(String(32), nullable=False)
    payment_method = Column(String(20), nullable=False)
    account_name = Column(String, nullable=True)
    transaction_id = Column(String(16), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
