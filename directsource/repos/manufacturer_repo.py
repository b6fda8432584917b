# directsource/repos/manufacturer_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from directsource.data.models.manufacturer import ManufacturerModel


class ManufacturerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_manufacturer(self, manufacturer_id: str) -> ManufacturerModel | None:
        return self.db.get(ManufacturerModel, manufacturer_id)

    def list_manufacturers(self, verified_only: bool = False) -> List[ManufacturerModel]:
        stmt = select(ManufacturerModel)
        if verified_only:
            stmt = stmt.where(ManufacturerModel.verification_status == "verified")
        stmt = stmt.order_by(ManufacturerModel.company_name)
        return list(self.db.execute(stmt).scalars().all())

    def get_by_owner(self, user_id: str) -> ManufacturerModel | None:
        stmt = select(ManufacturerModel).where(ManufacturerModel.user_id == user_id)
        return self.db.execute(stmt).scalars().first()

    def update_stats(self, manufacturer: ManufacturerModel, total_sales: int, revenue) -> ManufacturerModel:
        # zapis wartosci policzonych po stronie klienta, bez CAS
        manufacturer.total_sales = total_sales
        manufacturer.revenue = revenue
        self.db.commit()
        self.db.refresh(manufacturer)
        return manufacturer

    def rollback(self):
        self.db.rollback()
