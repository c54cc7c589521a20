from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CatalogFoodRead(BaseModel):
    id: Optional[int] = None
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    serving_size: float
    serving_unit: str
    barcode: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class FoodSearchResponse(BaseModel):
    query: str
    items: List[CatalogFoodRead]


class BarcodeLookupResponse(BaseModel):
    """found=False is an informational result, not an error."""
    barcode: str
    found: bool
    source: Optional[str] = None  # CATALOG / OPENFOODFACTS
    food: Optional[CatalogFoodRead] = None
    message: Optional[str] = None
