"""
Same-origin proxy routes for the n8n workflows.

The JSON body is forwarded as-is, except that user_id is always the
signed-in user's id. The workflow's JSON answer is relayed unchanged;
failures come back as {"error", "details"} via the app error handler.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends

from fittrack.deps import get_current_user, get_webhook_client
from fittrack.models.user import User
from fittrack.schemas.webhook import WebhookErrorEnvelope, WebhookPayload
from fittrack.services import webhooks
from fittrack.services.webhooks import WebhookClient, build_payload

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/n8n",
    tags=["webhooks"],
    responses={
        500: {"model": WebhookErrorEnvelope, "description": "Webhook not configured"},
        502: {"model": WebhookErrorEnvelope, "description": "Workflow request failed"},
    },
)


async def _proxy(
    name: str,
    source: str,
    body: Optional[WebhookPayload],
    user: User,
    client: WebhookClient,
) -> Any:
    payload = build_payload(user.id, source=source)
    if body is not None:
        payload.update(body.model_dump(mode="json", exclude_unset=True))
    payload["user_id"] = user.id
    return await client.forward(name, payload)


@router.post("/onboarding")
async def proxy_onboarding(
    body: Optional[WebhookPayload] = None,
    user: User = Depends(get_current_user),
    client: WebhookClient = Depends(get_webhook_client),
):
    return await _proxy(webhooks.ONBOARDING, "onboarding", body, user, client)


@router.post("/meal-log")
async def proxy_meal_log(
    body: Optional[WebhookPayload] = None,
    user: User = Depends(get_current_user),
    client: WebhookClient = Depends(get_webhook_client),
):
    return await _proxy(webhooks.MEAL_LOG, "meal-logger", body, user, client)


@router.post("/recommendations")
async def proxy_recommendations(
    body: Optional[WebhookPayload] = None,
    user: User = Depends(get_current_user),
    client: WebhookClient = Depends(get_webhook_client),
):
    return await _proxy(webhooks.RECOMMENDATIONS, "recommendations-widget", body, user, client)


@router.post("/ai-recommendations")
async def proxy_ai_recommendations(
    body: Optional[WebhookPayload] = None,
    user: User = Depends(get_current_user),
    client: WebhookClient = Depends(get_webhook_client),
):
    return await _proxy(webhooks.AI_RECOMMENDATIONS, "recommendations", body, user, client)


@router.post("/chat")
async def proxy_chat(
    body: Optional[WebhookPayload] = None,
    user: User = Depends(get_current_user),
    client: WebhookClient = Depends(get_webhook_client),
):
    return await _proxy(webhooks.CHAT, "chat-widget", body, user, client)
