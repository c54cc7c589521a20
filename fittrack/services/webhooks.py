"""
Client for the n8n workflow webhooks.

Every workflow is a POST of a JSON envelope to a configured URL; the JSON
answer is relayed as-is. Failures raise WebhookError, nothing is retried.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from fittrack.core.config import Settings, settings as default_settings
from fittrack.core.errors import WebhookError, WebhookNotConfiguredError

logger = logging.getLogger(__name__)

ONBOARDING = "onboarding"
MEAL_LOG = "meal_log"
RECOMMENDATIONS = "recommendations"
AI_RECOMMENDATIONS = "ai_recommendations"
CHAT = "chat"

_URL_SETTINGS = {
    ONBOARDING: "n8n_onboarding_webhook_url",
    MEAL_LOG: "n8n_meal_log_webhook_url",
    RECOMMENDATIONS: "n8n_recommendations_webhook_url",
    AI_RECOMMENDATIONS: "n8n_ai_recommendations_webhook_url",
    CHAT: "n8n_chat_webhook_url",
}


def build_payload(
    user_id: Optional[int],
    source: str,
    platform: str = "web",
    **fields: Any,
) -> Dict[str, Any]:
    """Standard envelope: user_id, created_at, context{platform, source} plus fields."""
    payload = {
        "user_id": user_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "context": {"platform": platform, "source": source},
    }
    payload.update(fields)
    return payload


def _parse_body(resp: httpx.Response) -> Any:
    if not resp.content or not resp.content.strip():
        return {}
    try:
        return resp.json()
    except ValueError:
        return {"message": resp.text}


class WebhookClient:
    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or default_settings
        self.transport = transport

    def url_for(self, name: str) -> Optional[str]:
        setting = _URL_SETTINGS.get(name)
        if setting is None:
            raise ValueError(f"Unknown webhook: {name}")
        return getattr(self.config, setting)

    def is_configured(self, name: str) -> bool:
        return bool(self.url_for(name))

    async def forward(self, name: str, payload: Dict[str, Any]) -> Any:
        url = self.url_for(name)
        if not url:
            logger.error(f"[WEBHOOK] {name} webhook URL is not configured")
            raise WebhookNotConfiguredError(details=f"{name} webhook is not configured")

        logger.info(f"[WEBHOOK] POST {name} user_id={payload.get('user_id')}")
        try:
            async with httpx.AsyncClient(
                timeout=self.config.webhook_timeout_seconds,
                transport=self.transport,
            ) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[WEBHOOK] {name} request failed: {e}")
            raise WebhookError(details=str(e) or e.__class__.__name__)

        data = _parse_body(resp)
        if resp.status_code >= 400:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or data.get("details")
            logger.error(
                f"[WEBHOOK] {name} answered {resp.status_code}: {message or resp.reason_phrase}"
            )
            raise WebhookError(details=message or f"Workflow answered {resp.status_code}")

        return data

    async def notify(self, name: str, payload: Dict[str, Any]) -> Optional[Any]:
        """
        Fire a webhook whose answer the caller can live without.
        Unconfigured or failed calls are logged and return None.
        """
        if not self.is_configured(name):
            logger.debug(f"[WEBHOOK] {name} not configured, skipping")
            return None
        try:
            return await self.forward(name, payload)
        except WebhookError as e:
            logger.warning(f"[WEBHOOK] {name} notification failed: {e.details}")
            return None


webhook_client = WebhookClient()
