from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatContext(BaseModel):
    platform: str = "web"
    source: str = "chat-widget"


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    context: ChatContext = ChatContext()


class ChatMessageRead(BaseModel):
    id: int
    message: str
    is_bot: bool
    response: Optional[Any] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ChatReply(BaseModel):
    user_message: ChatMessageRead
    bot_message: ChatMessageRead


class ChatHistory(BaseModel):
    items: List[ChatMessageRead]
