import re
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Gender = Literal["male", "female", "other"]
ActivityLevel = Literal[
    "sedentary",
    "lightly_active",
    "moderately_active",
    "very_active",
    "extra_active",
]
GoalType = Literal["lose_weight", "maintain_weight", "gain_weight", "build_muscle"]
FitnessLevel = Literal["beginner", "intermediate", "advanced"]
MealPrepPreference = Literal["daily", "weekly", "none"]

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")
PROFANITY = ("fuck", "bitch", "asshole")

# Поля, без которых дашборд не может посчитать прогресс
REQUIRED_PROFILE_FIELDS = (
    "full_name",
    "age",
    "gender",
    "height_cm",
    "weight_kg",
    "activity_level",
    "goal_type",
)


def _check_full_name(value: str) -> str:
    value = value.strip()
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
    lowered = value.lower()
    if any(word in lowered for word in PROFANITY):
        raise ValueError("Please use appropriate language")
    return value


class ProfileBase(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=50)
    age: int = Field(..., ge=10, le=120)
    gender: Gender
    height_cm: float = Field(..., ge=50, le=250)
    weight_kg: float = Field(..., ge=20, le=300)
    activity_level: ActivityLevel

    @field_validator("full_name")
    @classmethod
    def full_name_format(cls, value: str) -> str:
        return _check_full_name(value)


class ProfileUpdate(ProfileBase):
    @model_validator(mode="after")
    def realistic_bmi(self):
        bmi = self.weight_kg / (self.height_cm / 100) ** 2
        if bmi < 10 or bmi > 50:
            raise ValueError("The combination of height and weight seems unrealistic")
        return self


class OnboardingRequest(ProfileBase):
    goal_type: GoalType
    dietary_restrictions: List[str] = []
    allergies: List[str] = []
    medical_conditions: List[str] = []
    preferred_meal_times: Dict[str, str] = {}
    fitness_level: Optional[FitnessLevel] = None
    preferred_workout_days: List[str] = []
    target_weight: Optional[float] = Field(None, ge=20, le=300)
    target_date: Optional[date] = None
    weekly_workout_goal: Optional[int] = Field(None, ge=0, le=7)
    water_intake_goal: Optional[float] = Field(None, ge=0, le=10)
    sleep_goal: Optional[float] = Field(None, ge=4, le=12)
    meal_prep_preference: Optional[MealPrepPreference] = None

    @model_validator(mode="after")
    def target_below_current_for_loss(self):
        if self.goal_type == "lose_weight" and self.target_weight and self.target_weight >= self.weight_kg:
            raise ValueError("Target weight must be less than current weight for weight loss goals")
        return self


class ProfileRead(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    activity_level: Optional[str] = None
    goal_type: Optional[str] = None
    target_weight: Optional[float] = None
    target_date: Optional[date] = None
    dietary_restrictions: List[str] = []
    allergies: List[str] = []
    medical_conditions: List[str] = []
    fitness_level: Optional[str] = None
    preferred_workout_days: List[str] = []
    weekly_workout_goal: Optional[int] = None
    water_intake_goal: Optional[float] = None
    sleep_goal: Optional[float] = None
    meal_prep_preference: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("dietary_restrictions", "allergies", "medical_conditions", "preferred_workout_days", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class ProfileCompletion(BaseModel):
    complete: bool
    missing_fields: List[str]
