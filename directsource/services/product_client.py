# directsource/services/product_client.py
from typing import Dict, Iterable

import requests

from directsource.domain.schemas import Product
from directsource.utils.retry import http_retry
from directsource.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_SERVICE_TIMEOUT
from directsource.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """Klient katalogu produktow (tylko odczyt: cena, stan, producent)."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or PRODUCT_SERVICE_TIMEOUT

    @http_retry()
    def _get(self, path: str, params: dict | None = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, params=params, timeout=self.timeout)
        #404 to odpowiedz, nie blad do ponawiania
        if resp.status_code != 404:
            resp.raise_for_status()
        return resp

    def fetch_product(self, product_id: str) -> Product | None:
        resp = self._get(f"/products/{product_id}")
        if resp.status_code == 404:
            return None
        return Product.model_validate(resp.json())

    def fetch_products(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """Zwraca tylko produkty, ktore katalog jeszcze zna."""
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return {}

        resp = self._get("/products", params={"ids": ",".join(ids)})
        if resp.status_code == 404:
            return {}
        products = [Product.model_validate(p) for p in resp.json()]
        return {p.id: p for p in products}
