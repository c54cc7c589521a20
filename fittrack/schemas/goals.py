from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fittrack.services.nutrition import MacroRatioCheck, normalize_ratios


class GoalsUpdate(BaseModel):
    """
    Goal form. Ratios are percents 0-100; fraction input (0.3/0.4/0.3)
    is converted to percents before range checks.
    """
    target_calories: Optional[float] = Field(None, ge=500, le=5000)
    target_protein_ratio: Optional[float] = Field(None, ge=0, le=100)
    target_carbs_ratio: Optional[float] = Field(None, ge=0, le=100)
    target_fat_ratio: Optional[float] = Field(None, ge=0, le=100)
    target_weight_kg: Optional[float] = Field(None, ge=20, le=300)
    target_date: Optional[date] = None
    weekly_workout_goal: Optional[int] = Field(None, ge=0, le=7)
    water_intake_goal: Optional[float] = Field(None, ge=0, le=10)
    sleep_goal: Optional[float] = Field(None, ge=4, le=12)

    @model_validator(mode="before")
    @classmethod
    def ratios_as_percent(cls, data):
        if not isinstance(data, dict):
            return data
        converted = normalize_ratios(
            data.get("target_protein_ratio"),
            data.get("target_carbs_ratio"),
            data.get("target_fat_ratio"),
        )
        data = dict(data)
        for macro, value in converted.items():
            if value is not None:
                data[f"target_{macro}_ratio"] = value
        return data


class GoalsRead(BaseModel):
    user_id: int
    target_calories: Optional[float] = None
    target_protein_ratio: Optional[float] = None
    target_carbs_ratio: Optional[float] = None
    target_fat_ratio: Optional[float] = None
    target_weight_kg: Optional[float] = None
    target_date: Optional[date] = None
    weekly_workout_goal: Optional[int] = None
    water_intake_goal: Optional[float] = None
    sleep_goal: Optional[float] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GoalsSaved(BaseModel):
    goals: GoalsRead
    ratio_check: MacroRatioCheck
