from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class WebhookContext(BaseModel):
    platform: str = "web"
    source: str = "web-app"


class WebhookPayload(BaseModel):
    """
    Envelope sent to the workflow engine. Extra keys (meal data, message)
    are forwarded untouched.
    """
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    context: WebhookContext = WebhookContext()

    model_config = ConfigDict(extra="allow")


class WebhookErrorEnvelope(BaseModel):
    error: str
    details: Optional[Any] = None


class RecommendationsResponse(BaseModel):
    system: list
    ai: list
    errors: Dict[str, str] = {}
