from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, DateTime, Text

from directsource.data.database import Base


class ManufacturerModel(Base):
    __tablename__ = "manufacturers"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=True)

    company_name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    verification_status = Column(String(20), nullable=False, default="unverified")
    bio = Column(Text, nullable=True)
    logo_url = Column(String, nullable=True)
    established_year = Column(Integer, nullable=True)

    # agregaty aktualizowane przy checkout (read-modify-write)
    total_sales = Column(Integer, nullable=False, default=0)
    revenue = Column(Numeric(12, 2), nullable=False, default=0)

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
