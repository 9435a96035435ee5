"""
Product lookups for product and barcode scans.
Resolves a catalog id or barcode into the ingredient text the scanner analyses;
OpenBeautyFacts backs barcode lookups when no catalog entry exists.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

import requests

from .models import ProductInfo


class ProductSource:
    """
    Base interface for any product data source (DB, API, cache).
    """

    def get_product(self, product_id: str) -> Optional[ProductInfo]:
        raise NotImplementedError

    def get_product_by_barcode(self, barcode: str) -> Optional[ProductInfo]:
        raise NotImplementedError


class InMemoryProductSource(ProductSource):
    def __init__(self, products: Iterable[ProductInfo] = ()):
        self.products: Dict[str, ProductInfo] = {p.id: p for p in products}

    def get_product(self, product_id: str) -> Optional[ProductInfo]:
        return self.products.get(product_id)

    def get_product_by_barcode(self, barcode: str) -> Optional[ProductInfo]:
        for product in self.products.values():
            if product.barcode and product.barcode == barcode:
                return product
        return None


class FallbackProductSource(ProductSource):
    """
    Tries each source in order and returns the first product found.
    """

    def __init__(self, *sources: ProductSource):
        self.sources = [source for source in sources if source is not None]

    def get_product(self, product_id: str) -> Optional[ProductInfo]:
        for source in self.sources:
            product = source.get_product(product_id)
            if product:
                return product
        return None

    def get_product_by_barcode(self, barcode: str) -> Optional[ProductInfo]:
        for source in self.sources:
            product = source.get_product_by_barcode(barcode)
            if product:
                return product
        return None


class OpenBeautyFactsClient(ProductSource):
    """
    Thin wrapper around the OpenBeautyFacts public API to resolve cosmetic barcodes.
    """

    BASE_URL = "https://world.openbeautyfacts.org/api/v0/product/{barcode}.json"

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 5.0):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.log = logging.getLogger(self.__class__.__name__)

    def get_product(self, product_id: str) -> Optional[ProductInfo]:
        # OpenBeautyFacts is keyed by barcode only.
        return None

    def get_product_by_barcode(self, barcode: str) -> Optional[ProductInfo]:
        try:
            response = self.session.get(
                self.BASE_URL.format(barcode=barcode), timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            self.log.warning("OpenBeautyFacts fetch failed for %s: %s", barcode, exc)
            return None

        if not data or data.get("status") != 1:
            self.log.info("Product %s not found on OpenBeautyFacts", barcode)
            return None

        product_data = data.get("product", {}) or {}
        return ProductInfo(
            id=f"obf:{barcode}",
            name=product_data.get("product_name") or "Unknown product",
            barcode=barcode,
            ingredients_text=self._ingredients_text(product_data),
            source="openbeautyfacts",
        )

    @staticmethod
    def _ingredients_text(product_data: Dict) -> Optional[str]:
        lang = product_data.get("lang") or "en"
        for key in (
            f"ingredients_text_{lang}",
            "ingredients_text_en",
            "ingredients_text",
        ):
            text = product_data.get(key)
            if text:
                return str(text)
        return None
