"""
Food catalog search and barcode lookup.

The local catalog is searched first. Barcodes missing from it are looked up
on OpenFoodFacts and cached into the catalog (per 100 g values).
A miss is reported as found=False, never raised.
"""
import logging
from typing import List, Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fittrack.external.openfoodfacts_client import (
    fetch_product_by_barcode,
    search_products_by_name,
)
from fittrack.models.catalog_food import CatalogFood
from fittrack.schemas.food import BarcodeLookupResponse, CatalogFoodRead

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Product not found. Try searching by name or add it manually."


def _to_float(value) -> Optional[float]:
    """int/float/"12,5" -> float; anything else -> None."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", ".").strip())
        except ValueError:
            return None
    return None


def food_from_openfoodfacts(product: dict) -> Optional[CatalogFoodRead]:
    """Per-100 g catalog entry from an OpenFoodFacts product, or None without calories."""
    nutriments = product.get("nutriments") or {}

    # energy-kcal_100g, иначе energy_100g в кДж
    calories = _to_float(nutriments.get("energy-kcal_100g"))
    if calories is None:
        kj = _to_float(nutriments.get("energy_100g"))
        if kj is not None:
            calories = kj / 4.184
    if calories is None:
        return None

    name = product.get("product_name") or product.get("product_name_en") or "Unknown product"
    brands = product.get("brands") or ""
    brand = brands.split(",")[0].strip()
    if brand and brand.lower() not in name.lower():
        name = f"{name} ({brand})"

    return CatalogFoodRead(
        name=name,
        calories=round(calories, 1),
        protein=round(_to_float(nutriments.get("proteins_100g")) or 0.0, 1),
        carbs=round(_to_float(nutriments.get("carbohydrates_100g")) or 0.0, 1),
        fat=round(_to_float(nutriments.get("fat_100g")) or 0.0, 1),
        serving_size=100.0,
        serving_unit="g",
        barcode=product.get("code"),
    )


def search_catalog(db: Session, query: str, limit: int = 20) -> List[CatalogFood]:
    term = query.strip()
    if not term:
        return []
    return (
        db.query(CatalogFood)
        .filter(CatalogFood.name.ilike(f"%{term}%"))
        .order_by(CatalogFood.name.asc())
        .limit(limit)
        .all()
    )


async def search_foods(
    db: Session,
    query: str,
    limit: int = 20,
    include_external: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[CatalogFoodRead]:
    items = [CatalogFoodRead.model_validate(row) for row in search_catalog(db, query, limit)]
    if items or not include_external:
        return items

    products = await search_products_by_name(query, limit=limit, transport=transport)
    for product in products:
        food = food_from_openfoodfacts(product)
        if food is not None:
            items.append(food)
    return items[:limit]


async def lookup_barcode(
    db: Session,
    barcode: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BarcodeLookupResponse:
    code = barcode.strip()

    row = db.query(CatalogFood).filter(CatalogFood.barcode == code).first()
    if row:
        return BarcodeLookupResponse(
            barcode=code,
            found=True,
            source="CATALOG",
            food=CatalogFoodRead.model_validate(row),
        )

    product = await fetch_product_by_barcode(code, transport=transport)
    food = food_from_openfoodfacts(product) if product else None
    if food is None:
        logger.info(f"[FOOD] Barcode {code} not found")
        return BarcodeLookupResponse(barcode=code, found=False, message=NOT_FOUND_MESSAGE)

    cached = CatalogFood(
        name=food.name,
        calories=food.calories,
        protein=food.protein,
        carbs=food.carbs,
        fat=food.fat,
        serving_size=food.serving_size,
        serving_unit=food.serving_unit,
        barcode=code,
    )
    db.add(cached)
    try:
        db.commit()
    except IntegrityError:
        # another request cached the same barcode first
        db.rollback()
        row = db.query(CatalogFood).filter(CatalogFood.barcode == code).one()
        logger.info(f"[FOOD] Barcode {code} already cached as food_id={row.id}")
        return BarcodeLookupResponse(
            barcode=code,
            found=True,
            source="CATALOG",
            food=CatalogFoodRead.model_validate(row),
        )
    db.refresh(cached)
    logger.info(f"[FOOD] Cached OpenFoodFacts product for barcode {code} as food_id={cached.id}")

    return BarcodeLookupResponse(
        barcode=code,
        found=True,
        source="OPENFOODFACTS",
        food=CatalogFoodRead.model_validate(cached),
    )
