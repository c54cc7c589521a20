"""
OpenFoodFacts API client: product lookup by barcode and name search.
"""
import logging
from typing import List, Optional

import httpx

from fittrack.core.config import settings

logger = logging.getLogger(__name__)


def _has_calories(product: dict) -> bool:
    nutriments = product.get("nutriments") or {}
    return (
        nutriments.get("energy-kcal_100g") is not None
        or nutriments.get("energy_100g") is not None
    )


async def fetch_product_by_barcode(
    barcode: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[dict]:
    """
    Product dict for a barcode, or None when it is unknown, has no calorie
    data, or the request fails.
    """
    if not barcode or not barcode.strip():
        return None

    url = f"{settings.openfoodfacts_api_base}/product/{barcode.strip()}"

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            resp = await client.get(url)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            data = resp.json()
    except Exception as e:
        logger.warning(f"[OFF] Error fetching product by barcode {barcode}: {e}")
        return None

    product = data.get("product")
    if not product:
        return None
    if not _has_calories(product):
        logger.debug(f"[OFF] Product {barcode} found but no calories data")
        return None
    return product


async def search_products_by_name(
    name: str,
    limit: int = 10,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[dict]:
    """Products matching a name that carry calorie data; [] on any failure."""
    if not name or not name.strip():
        return []

    url = f"{settings.openfoodfacts_api_base}/search"
    params = {
        "search_terms": name.strip(),
        "fields": "code,product_name,product_name_en,brands,nutriments",
        "page_size": limit,
    }

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            data = resp.json()
    except Exception as e:
        logger.warning(f"[OFF] Error searching products by name '{name}': {e}")
        return []

    products = data.get("products") or []
    return [product for product in products if _has_calories(product)][:limit]
