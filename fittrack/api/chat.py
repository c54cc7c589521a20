import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fittrack.deps import get_current_user, get_db, get_webhook_client
from fittrack.models.user import User
from fittrack.schemas.chat import ChatHistory, ChatMessageRead, ChatReply, ChatRequest
from fittrack.services import chat as chat_service
from fittrack.services.webhooks import WebhookClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/history", response_model=ChatHistory)
def read_history(
    limit: int = Query(chat_service.HISTORY_LIMIT, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = chat_service.chat_history(db, user.id, limit=limit)
    return ChatHistory(items=[ChatMessageRead.model_validate(row) for row in rows])


@router.post("/messages", response_model=ChatReply)
async def send_message(
    payload: ChatRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: WebhookClient = Depends(get_webhook_client),
):
    user_row, bot_row = await chat_service.process_message(
        db, user, payload.message.strip(), payload.context, client
    )
    return ChatReply(
        user_message=ChatMessageRead.model_validate(user_row),
        bot_message=ChatMessageRead.model_validate(bot_row),
    )
