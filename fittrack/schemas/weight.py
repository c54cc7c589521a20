from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WeightLogCreate(BaseModel):
    weight: float = Field(..., ge=20, le=300)


class WeightLogRead(BaseModel):
    id: int
    weight: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
