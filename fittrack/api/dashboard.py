import logging
from datetime import date as date_type
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fittrack.core.errors import WebhookError, log_error
from fittrack.deps import get_current_user, get_db, get_webhook_client
from fittrack.models.user import User
from fittrack.schemas.dashboard import DashboardRead
from fittrack.schemas.webhook import RecommendationsResponse
from fittrack.services import webhooks
from fittrack.services.dashboard import build_dashboard
from fittrack.services.webhooks import WebhookClient, build_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])


def _as_list(response: Any) -> List[Any]:
    """AI workflow answers are opaque: a list, or {"data": [...]}, or a single item."""
    if response is None:
        return []
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        data = response.get("data", response.get("recommendations"))
        if isinstance(data, list):
            return data
        return [response] if response else []
    return [response]


@router.get("/dashboard", response_model=DashboardRead)
def read_dashboard(
    day: Optional[date_type] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Dashboard for a day (default: today in the user's time zone)."""
    return build_dashboard(db, user, reference_date=day)


@router.get("/recommendations", response_model=RecommendationsResponse)
async def read_recommendations(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: WebhookClient = Depends(get_webhook_client),
):
    """
    Rule-based tips for today plus whatever the AI recommendations workflow
    returns. An AI failure is reported in errors and does not hide the tips.
    """
    dashboard = build_dashboard(db, user)
    errors = {}
    ai = []
    if client.is_configured(webhooks.AI_RECOMMENDATIONS):
        try:
            ai = _as_list(
                await client.forward(
                    webhooks.AI_RECOMMENDATIONS,
                    build_payload(user.id, source="recommendations"),
                )
            )
        except WebhookError as e:
            log_error(e, "Fetching AI recommendations")
            errors["ai"] = "Failed to fetch recommendations"
    return RecommendationsResponse(system=dashboard.recommendations, ai=ai, errors=errors)
