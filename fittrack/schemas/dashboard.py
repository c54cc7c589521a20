from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel

from fittrack.schemas.goals import GoalsRead
from fittrack.services.nutrition import MacroTotals, Progress


class MacroSlice(BaseModel):
    calories: float
    percent: float


class ChartPoint(BaseModel):
    date: date
    calories: float
    protein: float
    carbs: float
    fat: float


class WeightProgress(BaseModel):
    current_weight: Optional[float] = None
    target_weight: Optional[float] = None
    start_weight: Optional[float] = None
    goal_type: Optional[str] = None
    percent: float


class DashboardRead(BaseModel):
    date: date
    totals: MacroTotals
    calories: Progress
    macros: Dict[str, Progress]
    macro_split: Dict[str, MacroSlice]
    weight: WeightProgress
    goals: Optional[GoalsRead] = None
    recommendations: List[str]
    chart: List[ChartPoint]
    profile_complete: bool
