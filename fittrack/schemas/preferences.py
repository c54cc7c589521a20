from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class PreferencesData(BaseModel):
    receive_notifications: bool = True
    notification_frequency: Literal["daily", "weekly", "monthly"] = "daily"
    theme_preference: Literal["light", "dark", "system"] = "system"


class PreferencesRead(BaseModel):
    user_id: int
    preferences: PreferencesData
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
