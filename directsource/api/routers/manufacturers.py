# directsource/api/routers/manufacturers.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from directsource.data.database import get_db
from directsource.domain.schemas import ManufacturerOut, OrderOut, OrderStatus
from directsource.repos.manufacturer_repo import ManufacturerRepo
from directsource.services.order_service import OrderService
from directsource.api.deps import get_order_service

router = APIRouter(prefix="/manufacturers", tags=["manufacturers"])


@router.get("/", response_model=List[ManufacturerOut])
def list_manufacturers(
    verified_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    return ManufacturerRepo(db).list_manufacturers(verified_only=verified_only)


@router.get("/{manufacturer_id}", response_model=ManufacturerOut)
def get_manufacturer(manufacturer_id: str, db: Session = Depends(get_db)):
    manufacturer = ManufacturerRepo(db).get_manufacturer(manufacturer_id)
    if not manufacturer:
        raise HTTPException(status_code=404, detail="Producent nie istnieje")
    return manufacturer


@router.get("/{manufacturer_id}/orders", response_model=List[OrderOut])
def list_manufacturer_orders(
    manufacturer_id: str,
    status: OrderStatus | None = Query(None),
    svc: OrderService = Depends(get_order_service),
):
    """Zamowienia do panelu producenta, opcjonalnie filtrowane po statusie."""
    return svc.list_manufacturer_orders(manufacturer_id, status)
