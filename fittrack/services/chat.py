"""
Chat with the assistant workflow.

The user message is stored first, then relayed to the chat webhook together
with the user's profile; the bot answer is stored as a second row.
"""
import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from fittrack.models.chat_interaction import ChatInteraction
from fittrack.models.user import User
from fittrack.schemas.chat import ChatContext
from fittrack.schemas.profile import ProfileRead
from fittrack.services import webhooks
from fittrack.services.profiles import get_profile
from fittrack.services.webhooks import WebhookClient, build_payload

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
EMPTY_REPLY = "Sorry, I couldn't come up with an answer. Please try again."


def bot_text(response: Any) -> str:
    """Text of a workflow answer: message, response or output key, or a plain string."""
    if isinstance(response, str):
        return response.strip() or EMPTY_REPLY
    if isinstance(response, list) and response:
        return bot_text(response[0])
    if isinstance(response, dict):
        for key in ("message", "response", "output", "text"):
            value = response.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return EMPTY_REPLY


def chat_history(db: Session, user_id: int, limit: int = HISTORY_LIMIT) -> List[ChatInteraction]:
    rows = (
        db.query(ChatInteraction)
        .filter(ChatInteraction.user_id == user_id)
        .order_by(ChatInteraction.created_at.desc(), ChatInteraction.id.desc())
        .limit(limit)
        .all()
    )
    rows.reverse()
    return rows


def save_message(
    db: Session,
    user_id: int,
    message: str,
    is_bot: bool,
    response: Any = None,
    metadata: Dict[str, Any] = None,
) -> ChatInteraction:
    row = ChatInteraction(
        user_id=user_id,
        message=message,
        is_bot=is_bot,
        response=response,
        confirmed=True,
        metadata_=metadata or {},
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


async def process_message(
    db: Session,
    user: User,
    message: str,
    context: ChatContext,
    client: WebhookClient,
) -> Tuple[ChatInteraction, ChatInteraction]:
    """
    Store the user message, ask the chat workflow, store the answer.
    WebhookError propagates after the user message is already saved.
    """
    user_row = save_message(db, user.id, message, is_bot=False, metadata=context.model_dump())

    profile = get_profile(db, user.id)
    payload = build_payload(
        user.id,
        source=context.source,
        platform=context.platform,
        message=message,
        userProfile=ProfileRead.model_validate(profile).model_dump(mode="json") if profile else None,
    )
    response = await client.forward(webhooks.CHAT, payload)

    metadata = response.get("metadata") if isinstance(response, dict) else None
    bot_row = save_message(
        db,
        user.id,
        bot_text(response),
        is_bot=True,
        response=response,
        metadata=metadata if isinstance(metadata, dict) else {},
    )
    logger.info(f"[CHAT] user_id={user.id} message_id={user_row.id} reply_id={bot_row.id}")
    return user_row, bot_row
