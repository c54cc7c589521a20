from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MealSource = Literal["search", "barcode", "quick_add", "manual", "chat"]


class FoodItemCreate(BaseModel):
    """Per-serving values; the meal total multiplies them by quantity."""
    name: str = Field(..., min_length=1)
    calories: float = Field(..., ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    quantity: float = Field(1, ge=0.1)
    unit: str = Field("serving", min_length=1)
    barcode: Optional[str] = None


class MealLogCreate(BaseModel):
    meal_type: str = Field(..., min_length=1)
    meal_date: date
    meal_time: str = Field(..., min_length=1)
    food_items: List[FoodItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None
    source: MealSource = "manual"


class QuickAddRequest(BaseModel):
    name: str = Field(..., min_length=1)
    calories: float = Field(..., ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    meal_type: str = "snack"
    meal_date: Optional[date] = None
    meal_time: Optional[str] = None


class FoodItemRead(BaseModel):
    id: int
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    quantity: float
    unit: str
    barcode: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MealLogRead(BaseModel):
    id: int
    user_id: int
    meal_type: str
    meal_date: Optional[date] = None
    meal_time: Optional[str] = None
    notes: Optional[str] = None
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    source: str
    created_at: datetime
    food_items: List[FoodItemRead] = []

    model_config = ConfigDict(from_attributes=True)


class DaySummary(BaseModel):
    date: date
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    meals: List[MealLogRead]
