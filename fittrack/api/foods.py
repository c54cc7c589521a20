from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fittrack.deps import get_current_user, get_db, get_http_transport
from fittrack.models.user import User
from fittrack.schemas.food import BarcodeLookupResponse, FoodSearchResponse
from fittrack.services import food_lookup

router = APIRouter(prefix="/api/foods", tags=["foods"])


@router.get("/search", response_model=FoodSearchResponse)
async def search_foods(
    q: str = Query(..., min_length=1, description="Food name or part of it"),
    limit: int = Query(20, ge=1, le=50),
    external: bool = Query(False, description="Fall back to OpenFoodFacts when the catalog has nothing"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    items = await food_lookup.search_foods(
        db, q, limit=limit, include_external=external, transport=transport
    )
    return FoodSearchResponse(query=q, items=items)


@router.get("/barcode/{barcode}", response_model=BarcodeLookupResponse)
async def lookup_barcode(
    barcode: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
):
    """
    Look up a decoded barcode. An unknown product is answered with
    found=false and a message, not with an error status.
    """
    return await food_lookup.lookup_barcode(db, barcode, transport=transport)
