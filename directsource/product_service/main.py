# directsource/product_service/main.py
from decimal import Decimal
from typing import List

from fastapi import FastAPI, HTTPException, Query

from directsource.domain.schemas import Product

app = FastAPI(title="Product Service (dev mock)")


PRODUCTS = {
    p.id: p
    for p in [
        Product(
            id="prod-oak-desk",
            manufacturer_id="mfr-nordwood",
            name="Solid Oak Desk",
            description="Hand-finished oak desk, 140 x 70 cm.",
            price=Decimal("420.00"),
            retail_price_estimation=Decimal("780.00"),
            category="Furniture",
            stock=12,
            image_url="https://images.example.com/oak-desk.jpg",
        ),
        Product(
            id="prod-linen-set",
            manufacturer_id="mfr-flaxhouse",
            name="Linen Bedding Set",
            price=Decimal("89.00"),
            retail_price_estimation=Decimal("160.00"),
            category="Home Textiles",
            stock=40,
            image_url="https://images.example.com/linen-set.jpg",
        ),
        Product(
            id="prod-steel-pan",
            manufacturer_id="mfr-forgeline",
            name="Carbon Steel Pan",
            price=Decimal("35.50"),
            retail_price_estimation=Decimal("65.00"),
            category="Kitchen",
            stock=0,
            image_url="https://images.example.com/steel-pan.jpg",
        ),
    ]
}


@app.get("/products", response_model=List[Product])
def list_products(ids: str | None = Query(None)):
    if not ids:
        return list(PRODUCTS.values())
    wanted = [i for i in ids.split(",") if i]
    return [PRODUCTS[i] for i in wanted if i in PRODUCTS]


@app.get("/products/{product_id}", response_model=Product)
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Produkt nie istnieje")
    return product
